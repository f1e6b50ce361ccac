"""GraphQueries - Error-wrapping facade over a host DirectedGraph.

Every call into the host graph goes through here. Lazy iterables are
materialized inside the guarded call, so a host failure surfaces as a
GraphError at the query site and never later during iteration.
"""

import logging
from collections.abc import Callable, Hashable
from typing import Any

from openlr_toolkit.core.quantization import round_half_away
from openlr_toolkit.errors import GraphError, OpenLRError
from openlr_toolkit.graph.protocol import DirectedGraph
from openlr_toolkit.model.attributes import Fow, Frc
from openlr_toolkit.model.coordinate import Coordinate

logger = logging.getLogger(__name__)

# Below this many meters a measured segment has no usable direction
_MIN_BEARING_SEGMENT_M = 1e-6


class GraphQueries:
    """Guarded access to a host graph plus the queries derived from it.

    Attributes:
        graph: The wrapped host graph
    """

    def __init__(self, graph: DirectedGraph) -> None:
        self.graph = graph

    def _call(self, method: Callable[..., Any], *args: Any, materialize: bool = False) -> Any:
        try:
            result = method(*args)
            return list(result) if materialize else result
        except OpenLRError:
            raise
        except Exception as e:
            name = getattr(method, "__name__", repr(method))
            raise GraphError(f"Graph query {name}{args!r} failed: {e}") from e

    # =========================================================================
    # Host graph capability
    # =========================================================================

    def vertex_coordinate(self, vertex: Hashable) -> Coordinate:
        return self._call(self.graph.get_vertex_coordinate, vertex)

    def edge_start(self, edge: Hashable) -> Hashable:
        return self._call(self.graph.get_edge_start_vertex, edge)

    def edge_end(self, edge: Hashable) -> Hashable:
        return self._call(self.graph.get_edge_end_vertex, edge)

    def edge_length(self, edge: Hashable) -> float:
        return float(self._call(self.graph.get_edge_length, edge))

    def edge_frc(self, edge: Hashable) -> Frc | None:
        return self._call(self.graph.get_edge_frc, edge)

    def edge_fow(self, edge: Hashable) -> Fow | None:
        return self._call(self.graph.get_edge_fow, edge)

    def exiting_edges(self, vertex: Hashable) -> list[tuple[Hashable, Hashable]]:
        return self._call(self.graph.vertex_exiting_edges, vertex, materialize=True)

    def entering_edges(self, vertex: Hashable) -> list[tuple[Hashable, Hashable]]:
        return self._call(self.graph.vertex_entering_edges, vertex, materialize=True)

    def nearest_vertices(self, coordinate: Coordinate, max_distance: float) -> list[tuple[Hashable, float]]:
        return self._call(self.graph.nearest_vertices_within_distance, coordinate, max_distance, materialize=True)

    def nearest_edges(self, coordinate: Coordinate, max_distance: float) -> list[tuple[Hashable, float]]:
        return self._call(self.graph.nearest_edges_within_distance, coordinate, max_distance, materialize=True)

    def distance_along_edge(self, edge: Hashable, coordinate: Coordinate) -> float:
        return float(self._call(self.graph.get_distance_along_edge, edge, coordinate))

    def coordinate_along_edge(self, edge: Hashable, distance: float) -> Coordinate:
        return self._call(self.graph.get_coordinate_along_edge, edge, distance)

    def is_turn_restricted(self, from_edge: Hashable, to_edge: Hashable) -> bool:
        return bool(self._call(self.graph.is_turn_restricted, from_edge, to_edge))

    # =========================================================================
    # Derived queries
    # =========================================================================

    def vertex_edges(self, vertex: Hashable) -> list[tuple[Hashable, Hashable]]:
        """Entering then exiting edges of a vertex, each with its opposite vertex."""
        return self.entering_edges(vertex) + self.exiting_edges(vertex)

    def vertex_degree(self, vertex: Hashable) -> int:
        """Number of entering plus exiting edges."""
        return len(self.vertex_edges(vertex))

    def edge_bearing(self, edge: Hashable, distance_from_start: float, segment_length: float) -> float:
        """Bearing of the part of an edge between two distances from its start.

        Measures from the point at `distance_from_start` to the point
        `segment_length` further along the edge; a negative length measures
        backwards, towards the edge start. Both points are clamped to the edge.
        When the clamped segment is degenerate the bearing of the whole edge
        in the measuring direction is used.

        Returns:
            Bearing in degrees [0, 360).
        """
        length = self.edge_length(edge)
        start = min(max(distance_from_start, 0.0), length)
        end = min(max(distance_from_start + segment_length, 0.0), length)

        if abs(end - start) < _MIN_BEARING_SEGMENT_M:
            start, end = (0.0, length) if segment_length >= 0 else (length, 0.0)
            logger.debug(f"Degenerate bearing segment on edge {edge!r}, using the whole edge")

        origin = self.coordinate_along_edge(edge, start)
        target = self.coordinate_along_edge(edge, end)
        return origin.bearing_to(target)


def bearing_as_int(bearing: float) -> int:
    """Round a bearing to integer degrees in [0, 360)."""
    return round_half_away(bearing) % 360
