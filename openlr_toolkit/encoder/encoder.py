"""Encoder - Turn a location on a road network into a location reference.

    location -> validation -> expansion -> LRP placement -> offsets -> reference

Line, PointAlongLine, Poi and ClosedLine locations are encoded against the
graph. A GeoCoordinate needs no graph and is returned unchanged.
"""

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass

from openlr_toolkit.binary.writer import serialize, serialize_base64
from openlr_toolkit.core.quantization import Quantizer
from openlr_toolkit.encoder.expansion import expand_line
from openlr_toolkit.encoder.resolver import LrpPlacer, build_lrps
from openlr_toolkit.errors import InvalidOffsetError, UnrepresentableError
from openlr_toolkit.graph.paths import is_path_connected, path_length
from openlr_toolkit.graph.protocol import DirectedGraph
from openlr_toolkit.graph.queries import GraphQueries
from openlr_toolkit.model.config import EncoderConfig
from openlr_toolkit.model.location import (
    ClosedLineLocation,
    LineLocation,
    Location,
    PoiLocation,
    PointAlongLineLocation,
)
from openlr_toolkit.model.location_reference import (
    ClosedLine,
    GeoCoordinate,
    Line,
    LocationReference,
    Offsets,
    Poi,
    PointAlongLine,
)

logger = logging.getLogger(__name__)


@dataclass
class _Placement:
    """LRP placement on an expanded path with offsets in meters."""

    placer: LrpPlacer
    starts: list[int]
    end: int
    pos_offset: float
    neg_offset: float

    def first_span(self) -> float:
        following = self.starts[1] if len(self.starts) > 1 else self.end
        return self.placer.span_length(self.starts[0], following)

    def last_span(self) -> float:
        return self.placer.span_length(self.starts[-1], self.end)

    def absorb_offsets(self) -> None:
        """Drop LRPs whose whole span is covered by an offset, keeping at least two."""
        while len(self.starts) > 1 and self.pos_offset >= self.first_span():
            self.pos_offset -= self.first_span()
            self.starts.pop(0)
        while len(self.starts) > 1 and self.neg_offset >= self.last_span():
            self.neg_offset -= self.last_span()
            self.end = self.starts.pop()

    def relative_offsets(self) -> Offsets:
        first, last = self.first_span(), self.last_span()
        return Offsets(
            pos=self.pos_offset / first if first > 0 else 0.0,
            neg=self.neg_offset / last if last > 0 else 0.0,
        )


# =============================================================================
# Validation
# =============================================================================


def _validate_path(queries: GraphQueries, path: Sequence[Hashable]) -> None:
    if not path:
        raise UnrepresentableError("Cannot encode an empty path")
    if not is_path_connected(queries, path):
        raise UnrepresentableError("Path is not connected or crosses a turn restriction")


def _validate_offsets(queries: GraphQueries, location: LineLocation) -> None:
    pos, neg = location.pos_offset, location.neg_offset
    if pos < 0 or neg < 0:
        raise InvalidOffsetError(f"Offsets must not be negative, got +{pos} / -{neg}")
    if pos >= queries.edge_length(location.path[0]):
        raise InvalidOffsetError(f"Positive offset {pos:.1f}m reaches beyond the first edge")
    if neg >= queries.edge_length(location.path[-1]):
        raise InvalidOffsetError(f"Negative offset {neg:.1f}m reaches beyond the last edge")
    if pos + neg >= path_length(queries, location.path):
        raise InvalidOffsetError(f"Offsets {pos:.1f}m + {neg:.1f}m cover the whole path")


# =============================================================================
# Location variants
# =============================================================================


def _place(config: EncoderConfig, queries: GraphQueries, location: LineLocation) -> _Placement:
    _validate_path(queries, location.path)
    _validate_offsets(queries, location)
    expanded = expand_line(config, queries, location)

    placer = LrpPlacer(config, queries, expanded.path)
    placement = _Placement(
        placer=placer,
        starts=placer.place(),
        end=len(placer.path),
        pos_offset=expanded.pos_offset,
        neg_offset=expanded.neg_offset,
    )
    placement.absorb_offsets()
    return placement


def _encode_line(config: EncoderConfig, queries: GraphQueries, location: LineLocation) -> Line:
    placement = _place(config, queries, location)
    points = build_lrps(config, queries, placement.placer, placement.starts, placement.end)
    reference = Line(points=tuple(points), offsets=placement.relative_offsets())
    logger.info(f"Encoded path of {len(location.path)} edges into a line of {len(points)} LRPs")
    return reference


def _encode_point_along_line(
    config: EncoderConfig,
    queries: GraphQueries,
    location: PointAlongLineLocation,
) -> PointAlongLine:
    _validate_path(queries, location.path)
    if location.offset < 0:
        raise InvalidOffsetError(f"Point offset must not be negative, got {location.offset}")

    # Only the edge holding the point matters
    remaining = location.offset
    for edge in location.path:
        length = queries.edge_length(edge)
        if remaining < length:
            break
        remaining -= length
    else:
        raise InvalidOffsetError(f"Point offset {location.offset:.1f}m lies beyond the path")

    placement = _place(config, queries, LineLocation(path=(edge,), pos_offset=remaining))
    if len(placement.starts) > 1:
        placement.end = placement.starts[1]
        placement.starts = placement.starts[:1]

    points = build_lrps(config, queries, placement.placer, placement.starts, placement.end)
    reference = PointAlongLine(
        points=(points[0], points[1]),
        offset=placement.relative_offsets().pos,
        orientation=location.orientation,
        side=location.side,
    )
    logger.info(f"Encoded point {location.offset:.1f}m along {edge!r}")
    return reference


def _encode_closed_line(config: EncoderConfig, queries: GraphQueries, location: ClosedLineLocation) -> ClosedLine:
    _validate_path(queries, location.path)
    if queries.edge_end(location.path[-1]) != queries.edge_start(location.path[0]):
        raise UnrepresentableError("Closed line path must end where it starts")

    placer = LrpPlacer(config, queries, location.path)
    points = build_lrps(config, queries, placer, placer.place(), len(placer.path))
    closing = points.pop()
    logger.info(f"Encoded closed line of {len(location.path)} edges into {len(points)} LRPs")
    return ClosedLine(points=tuple(points), last_line=closing.line)


# =============================================================================
# Public API
# =============================================================================


def encode(config: EncoderConfig, graph: DirectedGraph, location: Location) -> LocationReference:
    """Encode a location on a road network into a location reference.

    Args:
        config: Encoder parameters
        graph: The host road network
        location: Line, point along line, POI, closed line or geo coordinate

    Returns:
        The matching location reference variant.

    Raises:
        UnrepresentableError: If the path is empty or not connected, or cannot
            be expressed within the format limits.
        InvalidOffsetError: If an offset is negative or reaches past its edge.
        GraphError: If the host graph fails.
    """
    queries = GraphQueries(graph)

    if isinstance(location, LineLocation):
        return _encode_line(config, queries, location)
    if isinstance(location, PointAlongLineLocation):
        return _encode_point_along_line(config, queries, location)
    if isinstance(location, PoiLocation):
        point = _encode_point_along_line(config, queries, location.point)
        first = point.points[0].coordinate
        if not (
            Quantizer.relative_fits(location.coordinate.lon, first.lon)
            and Quantizer.relative_fits(location.coordinate.lat, first.lat)
        ):
            raise UnrepresentableError("POI is too far from its access point to be referenced")
        return Poi(point=point, coordinate=location.coordinate)
    if isinstance(location, ClosedLineLocation):
        return _encode_closed_line(config, queries, location)
    if isinstance(location, GeoCoordinate):
        return location
    raise UnrepresentableError(f"Cannot encode {type(location).__name__}")


def encode_binary(config: EncoderConfig, graph: DirectedGraph, location: Location) -> bytes:
    """Encode a location and serialize the reference to bytes."""
    return serialize(encode(config, graph, location))


def encode_base64(config: EncoderConfig, graph: DirectedGraph, location: Location) -> str:
    """Encode a location and serialize the reference to Base64 text."""
    return serialize_base64(encode(config, graph, location))
