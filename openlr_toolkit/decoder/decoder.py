"""Decoder - Map a location reference onto a road network.

    reference -> candidate lines per LRP -> best route chain -> offsets -> location

Line, PointAlongLine and Poi references are map matched. A GeoCoordinate
is returned unchanged. Area references have no path representation and
are rejected.
"""

import logging
from collections.abc import Sequence

from openlr_toolkit.binary.reader import deserialize, deserialize_base64
from openlr_toolkit.decoder.candidates import find_candidate_lines
from openlr_toolkit.decoder.routes import resolve_routes, trim_path
from openlr_toolkit.errors import UnrepresentableError
from openlr_toolkit.graph.protocol import DirectedGraph
from openlr_toolkit.graph.queries import GraphQueries
from openlr_toolkit.model.config import DecoderConfig
from openlr_toolkit.model.location import Location, LineLocation, PoiLocation, PointAlongLineLocation
from openlr_toolkit.model.location_reference import GeoCoordinate, Line, LocationReference, Offsets, Poi, PointAlongLine
from openlr_toolkit.model.lrp import LocationReferencePoint

logger = logging.getLogger(__name__)


def _match_line(
    config: DecoderConfig,
    queries: GraphQueries,
    points: Sequence[LocationReferencePoint],
    offsets: Offsets,
) -> LineLocation:
    candidates = [
        find_candidate_lines(config, queries, lrp, index, is_last=index == len(points) - 1)
        for index, lrp in enumerate(points)
    ]
    routes = resolve_routes(config, queries, points, candidates)

    path = [edge for route in routes for edge in route.edges]
    first, last = routes[0], routes[-1]
    pos_offset = offsets.distance_from_start(first.length) + first.start.offset
    neg_offset = offsets.distance_to_end(last.length) + (queries.edge_length(last.end.edge) - last.end.offset)

    trimmed, pos_offset, neg_offset = trim_path(queries, path, pos_offset, neg_offset)
    return LineLocation(path=tuple(trimmed), pos_offset=pos_offset, neg_offset=neg_offset)


def decode(config: DecoderConfig, graph: DirectedGraph, reference: LocationReference) -> Location:
    """Decode a location reference against a road network.

    Args:
        config: Decoder parameters
        graph: The host road network
        reference: A deserialized location reference

    Returns:
        LineLocation, PointAlongLineLocation, PoiLocation or the GeoCoordinate itself.

    Raises:
        MapMatchFailedError: If an LRP has no candidate or an LRP pair no route.
        InvalidOffsetError: If the offsets cover the whole matched path.
        UnrepresentableError: For area references.
        GraphError: If the host graph fails.
    """
    queries = GraphQueries(graph)

    if isinstance(reference, GeoCoordinate):
        return reference

    if isinstance(reference, Line):
        location = _match_line(config, queries, reference.points, reference.offsets)
        logger.info(f"Decoded line of {len(reference.points)} LRPs into {location}")
        return location

    if isinstance(reference, (PointAlongLine, Poi)):
        point = reference.point if isinstance(reference, Poi) else reference
        line = _match_line(config, queries, point.points, Offsets(pos=point.offset))
        location = PointAlongLineLocation(
            path=line.path,
            offset=line.pos_offset,
            orientation=point.orientation,
            side=point.side,
        )
        logger.info(f"Decoded point along line at {location.offset:.1f}m on {location.path[0]!r}")
        if isinstance(reference, Poi):
            return PoiLocation(point=location, coordinate=reference.coordinate)
        return location

    raise UnrepresentableError(f"{reference.location_type.value} references have no path on a road network")


def decode_binary(config: DecoderConfig, graph: DirectedGraph, data: bytes) -> Location:
    """Deserialize then decode a binary location reference."""
    return decode(config, graph, deserialize(data))


def decode_base64(config: DecoderConfig, graph: DirectedGraph, text: str) -> Location:
    """Deserialize then decode a Base64 location reference."""
    return decode(config, graph, deserialize_base64(text))
