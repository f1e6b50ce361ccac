"""DirectedGraph - The road network capability the codec needs from a map.

Any object with these methods is a graph; there is no base class to
extend. Vertex and edge ids are opaque hashable values owned by the host.
Distances are meters, coordinates WGS84.
"""

from collections.abc import Hashable, Iterable
from typing import Protocol, TypeVar

from openlr_toolkit.model.attributes import Fow, Frc
from openlr_toolkit.model.coordinate import Coordinate

VertexId = TypeVar("VertexId", bound=Hashable)
EdgeId = TypeVar("EdgeId", bound=Hashable)


class DirectedGraph(Protocol[VertexId, EdgeId]):
    """Read-only directed road graph.

    Iterables may be lazy; the toolkit materializes them once per query.
    """

    def get_vertex_coordinate(self, vertex: VertexId) -> Coordinate: ...

    def get_edge_start_vertex(self, edge: EdgeId) -> VertexId: ...

    def get_edge_end_vertex(self, edge: EdgeId) -> VertexId: ...

    def get_edge_length(self, edge: EdgeId) -> float: ...

    def get_edge_frc(self, edge: EdgeId) -> Frc | None: ...

    def get_edge_fow(self, edge: EdgeId) -> Fow | None: ...

    def vertex_exiting_edges(self, vertex: VertexId) -> Iterable[tuple[EdgeId, VertexId]]:
        """Edges leaving the vertex, each paired with its end vertex."""
        ...

    def vertex_entering_edges(self, vertex: VertexId) -> Iterable[tuple[EdgeId, VertexId]]:
        """Edges arriving at the vertex, each paired with its start vertex."""
        ...

    def nearest_vertices_within_distance(
        self, coordinate: Coordinate, max_distance: float
    ) -> Iterable[tuple[VertexId, float]]:
        """Vertices within max_distance, sorted by ascending distance."""
        ...

    def nearest_edges_within_distance(
        self, coordinate: Coordinate, max_distance: float
    ) -> Iterable[tuple[EdgeId, float]]:
        """Edges whose geometry passes within max_distance, sorted by ascending distance."""
        ...

    def get_distance_along_edge(self, edge: EdgeId, coordinate: Coordinate) -> float:
        """Distance from the edge start to the projection of the coordinate."""
        ...

    def get_coordinate_along_edge(self, edge: EdgeId, distance: float) -> Coordinate:
        """Point at `distance` meters from the edge start, clamped to the edge."""
        ...

    def is_turn_restricted(self, from_edge: EdgeId, to_edge: EdgeId) -> bool: ...
