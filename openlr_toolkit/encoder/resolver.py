"""LRP placement - Reduce a path to as few LRPs as the decoder can follow.

The decoder reconnects consecutive LRPs with a shortest path, so a new LRP
is only needed where the location leaves the shortest path from the
previous LRP, where the span would get too long, or where the coordinate
delta would not fit a relative coordinate.

A placement is a list of edge indices: LRP k sits on the start vertex of
path[starts[k]], and one more LRP sits on the end vertex of the last edge.
"""

import logging
from collections.abc import Hashable, Sequence

from openlr_toolkit.constants import QuantizationConfig
from openlr_toolkit.core.quantization import Quantizer, round_half_away
from openlr_toolkit.errors import UnrepresentableError
from openlr_toolkit.graph.dijkstra import shortest_path_tree
from openlr_toolkit.graph.queries import GraphQueries, bearing_as_int
from openlr_toolkit.model.attributes import Frc, LineAttributes, PathAttributes
from openlr_toolkit.model.config import EncoderConfig
from openlr_toolkit.model.coordinate import Coordinate
from openlr_toolkit.model.lrp import LocationReferencePoint

logger = logging.getLogger(__name__)


def _delta_fits(first: Coordinate, second: Coordinate) -> bool:
    return Quantizer.relative_fits(second.lon, first.lon) and Quantizer.relative_fits(second.lat, first.lat)


class LrpPlacer:
    """Greedy left to right LRP placement along a path.

    Attributes:
        config: Encoder parameters
        queries: Guarded graph access
        path: The (expanded) location path
        lengths: Edge lengths along the path
    """

    def __init__(self, config: EncoderConfig, queries: GraphQueries, path: Sequence[Hashable]) -> None:
        self.config = config
        self.queries = queries
        self.path = list(path)
        self.lengths = [queries.edge_length(edge) for edge in self.path]
        self._coordinates: dict[int, Coordinate] = {}

    def vertex_coordinate(self, index: int) -> Coordinate:
        """Coordinate of the start vertex of path[index]; index == len(path) is the end vertex."""
        if index not in self._coordinates:
            if index < len(self.path):
                vertex = self.queries.edge_start(self.path[index])
            else:
                vertex = self.queries.edge_end(self.path[-1])
            self._coordinates[index] = self.queries.vertex_coordinate(vertex)
        return self._coordinates[index]

    def span_length(self, start: int, end: int) -> float:
        """Length of the edges path[start:end]."""
        return sum(self.lengths[start:end])

    def _fits(self, start: int, end: int, limit: float) -> bool:
        return self.span_length(start, end) <= limit and _delta_fits(
            self.vertex_coordinate(start), self.vertex_coordinate(end)
        )

    def _covered_until(self, start: int) -> int:
        """Last index t such that path[start + 1..t] all follow the shortest path tree."""
        edge = self.path[start]
        tree = shortest_path_tree(
            self.queries,
            self.queries.edge_end(edge),
            entry_edge=edge,
            max_length=QuantizationConfig.MAX_LRP_DISTANCE_M,
        )
        covered = start
        while covered + 1 < len(self.path):
            following = self.path[covered + 1]
            if tree.tree_edge(self.queries.edge_end(following)) != following:
                break
            covered += 1
        return covered

    def place(self) -> list[int]:
        """Edge indices on whose start vertices LRPs are placed, the end LRP excluded.

        Raises:
            UnrepresentableError: If a single edge is too long for one span or
                its end lies beyond the relative coordinate range.
        """
        count = len(self.path)
        starts = [0]
        current = 0

        while True:
            if self.config.lrp_at_every_vertex:
                covered = current
                final = current == count - 1
            else:
                covered = self._covered_until(current)
                final = covered >= count - 2 and self._fits(current, count, self.config.max_lrp_distance)
            if final or current == count - 1:
                if not self._fits(current, count, QuantizationConfig.MAX_LRP_DISTANCE_M):
                    raise UnrepresentableError(
                        f"Edge {self.path[current]!r} cannot be spanned by a single LRP pair "
                        f"({self.span_length(current, count):.0f} m)"
                    )
                break

            following = current + 1
            for candidate in range(min(covered + 1, count - 1), current + 1, -1):
                if self._fits(current, candidate, self.config.max_lrp_distance):
                    following = candidate
                    break
            if not self._fits(current, following, QuantizationConfig.MAX_LRP_DISTANCE_M):
                raise UnrepresentableError(
                    f"Edge {self.path[current]!r} cannot be spanned by a single LRP pair "
                    f"({self.span_length(current, following):.0f} m)"
                )
            starts.append(following)
            current = following

        logger.debug(f"Placed {len(starts) + 1} LRPs on a path of {count} edges")
        return starts


def build_lrps(
    config: EncoderConfig,
    queries: GraphQueries,
    placer: LrpPlacer,
    starts: Sequence[int],
    end: int,
) -> list[LocationReferencePoint]:
    """Create the LRPs for a placement covering path[starts[0]:end].

    The last LRP sits on the end vertex of path[end - 1].
    """
    path = placer.path
    bounds = [*starts, end]
    lrps = []

    for span_start, span_end in zip(bounds, bounds[1:]):
        edge = path[span_start]
        bearing = queries.edge_bearing(edge, 0.0, config.bearing_distance)
        lowest = max(_frc(config, queries, e) for e in path[span_start:span_end])
        lrps.append(
            LocationReferencePoint(
                coordinate=placer.vertex_coordinate(span_start),
                line=_line_attributes(config, queries, edge, bearing),
                path=PathAttributes(lfrcnp=lowest, dnp=round_half_away(placer.span_length(span_start, span_end))),
            )
        )

    edge = path[end - 1]
    bearing = queries.edge_bearing(edge, queries.edge_length(edge), -config.bearing_distance)
    lrps.append(
        LocationReferencePoint(
            coordinate=placer.vertex_coordinate(end),
            line=_line_attributes(config, queries, edge, bearing),
        )
    )
    return lrps


def _frc(config: EncoderConfig, queries: GraphQueries, edge: Hashable) -> Frc:
    frc = queries.edge_frc(edge)
    return config.fallback_frc if frc is None else Frc(frc)


def _line_attributes(config: EncoderConfig, queries: GraphQueries, edge: Hashable, bearing: float) -> LineAttributes:
    fow = queries.edge_fow(edge)
    return LineAttributes(
        frc=_frc(config, queries, edge),
        fow=config.fallback_fow if fow is None else fow,
        bearing=bearing_as_int(bearing),
    )
