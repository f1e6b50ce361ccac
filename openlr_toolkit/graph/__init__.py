"""Road graph capability and algorithms over it.

- DirectedGraph: Protocol a host map implements
- GraphQueries: Error-wrapping facade with derived queries (degree, bearing)
- is_node_valid, is_opposite_direction, is_path_connected, path_length: Path helpers
- shortest_path, shortest_path_tree: Dijkstra with FRC and length limits
- RoadNetwork: In-memory DirectedGraph backed by shapely, pyproj and scipy
"""

from openlr_toolkit.graph.dijkstra import ShortestPathTree, shortest_path, shortest_path_tree
from openlr_toolkit.graph.paths import is_node_valid, is_opposite_direction, is_path_connected, path_length
from openlr_toolkit.graph.protocol import DirectedGraph, EdgeId, VertexId
from openlr_toolkit.graph.queries import GraphQueries, bearing_as_int
from openlr_toolkit.graph.road_network import RoadEdge, RoadNetwork

__all__ = [
    "DirectedGraph",
    "VertexId",
    "EdgeId",
    "GraphQueries",
    "bearing_as_int",
    "is_node_valid",
    "is_opposite_direction",
    "is_path_connected",
    "path_length",
    "ShortestPathTree",
    "shortest_path",
    "shortest_path_tree",
    "RoadEdge",
    "RoadNetwork",
]
