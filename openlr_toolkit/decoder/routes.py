"""Routes between candidate lines and the choice of the best chain.

For each consecutive LRP pair every combination of candidate lines is
connected by a shortest path restricted to the pair's lowest FRC (plus the
configured variance) and bounded by the encoded distance plus tolerance.
A route is accepted when its LRP to LRP length is within tolerance of the
encoded distance.

The chain of candidates is chosen by dynamic programming over the pairs,
maximizing the sum of candidate ratings minus the weighted sum of length
deviations. This finds the globally best chain instead of committing to the
best candidate of each LRP greedily.
"""

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass

from openlr_toolkit.decoder.candidates import CandidateLine
from openlr_toolkit.errors import InvalidOffsetError, MapMatchFailedError
from openlr_toolkit.graph.dijkstra import shortest_path
from openlr_toolkit.graph.queries import GraphQueries
from openlr_toolkit.model.attributes import Frc
from openlr_toolkit.model.config import DecoderConfig
from openlr_toolkit.model.lrp import LocationReferencePoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    """A route between the candidate lines of two consecutive LRPs.

    Attributes:
        start: Candidate of the first LRP of the pair
        end: Candidate of the second LRP of the pair
        edges: Edges contributed to the location path; the end candidate's
            edge is only included for the last pair
        length: Length (m) from the first LRP position to the second
    """

    start: CandidateLine
    end: CandidateLine
    edges: tuple[Hashable, ...]
    length: float


def _route_between(
    config: DecoderConfig,
    queries: GraphQueries,
    lrp: LocationReferencePoint,
    start: CandidateLine,
    end: CandidateLine,
    is_last_pair: bool,
) -> Route | None:
    dnp = lrp.dnp
    tolerance = config.route_tolerance(dnp)

    if start.edge == end.edge and end.offset >= start.offset:
        length = end.offset - start.offset
        if abs(length - dnp) <= tolerance:
            edges = (start.edge,) if is_last_pair else ()
            return Route(start=start, end=end, edges=edges, length=length)
        # Too short along the edge, the route may leave it and loop back

    remaining_start = queries.edge_length(start.edge) - start.offset
    max_length = dnp + tolerance - remaining_start - end.offset
    if max_length < 0:
        return None
    max_frc = Frc(min(int(Frc.FRC7), int(lrp.path.lfrcnp) + config.frc_variance))
    found = shortest_path(
        queries,
        queries.edge_end(start.edge),
        queries.edge_start(end.edge),
        entry_edge=start.edge,
        max_frc=max_frc,
        max_length=max_length,
    )
    if found is None:
        return None
    between, between_length = found
    previous = between[-1] if between else start.edge
    if queries.is_turn_restricted(previous, end.edge):
        return None
    length = remaining_start + between_length + end.offset
    if abs(length - dnp) > tolerance:
        return None
    edges = (start.edge, *between, end.edge) if is_last_pair else (start.edge, *between)
    return Route(start=start, end=end, edges=edges, length=length)


def resolve_routes(
    config: DecoderConfig,
    queries: GraphQueries,
    lrps: Sequence[LocationReferencePoint],
    candidates: Sequence[Sequence[CandidateLine]],
) -> list[Route]:
    """Choose one route per LRP pair, forming the best connected chain.

    Args:
        config: Decoder parameters
        queries: Guarded graph access
        lrps: The LRPs of the reference, at least two
        candidates: Candidate lines per LRP, best first

    Returns:
        One route per consecutive LRP pair.

    Raises:
        MapMatchFailedError: If a pair has no acceptable route, naming its first LRP.
    """
    # best[i][j]: (score, route into candidate j of LRP i, index of predecessor)
    best: list[dict[int, tuple[float, Route | None, int]]] = [
        {j: (candidate.rating, None, -1) for j, candidate in enumerate(candidates[0])}
    ]

    for index in range(len(lrps) - 1):
        is_last_pair = index == len(lrps) - 2
        lrp = lrps[index]
        layer: dict[int, tuple[float, Route | None, int]] = {}

        for j, end in enumerate(candidates[index + 1]):
            for i, start in enumerate(candidates[index]):
                if i not in best[index]:
                    continue
                route = _route_between(config, queries, lrp, start, end, is_last_pair)
                if route is None:
                    continue
                deviation = abs(route.length - lrp.dnp)
                score = best[index][i][0] + end.rating - config.distance_deviation_factor * deviation
                if j not in layer or score > layer[j][0]:
                    layer[j] = (score, route, i)
                    logger.debug(f"LRP {index}->{index + 1}: route {route.length:.1f}m (dnp {lrp.dnp}m)")

        if not layer:
            logger.warning(f"No route found between LRP {index} and LRP {index + 1}")
            raise MapMatchFailedError(
                f"No route within tolerance between LRP {index} and LRP {index + 1}",
                lrp_index=index,
            )
        best.append(layer)

    last = max(best[-1], key=lambda j: best[-1][j][0])
    routes = []
    for index in range(len(lrps) - 1, 0, -1):
        _, route, previous = best[index][last]
        routes.append(route)
        last = previous
    routes.reverse()
    return routes


def trim_path(
    queries: GraphQueries,
    path: Sequence[Hashable],
    pos_offset: float,
    neg_offset: float,
) -> tuple[list[Hashable], float, float]:
    """Drop the edges fully covered by the offsets.

    An edge is dropped when the offset reaches at least to its end, so the
    remaining offsets always lie strictly inside the first and last edge or
    at their start and end.

    Returns:
        (trimmed path, remaining positive offset, remaining negative offset)

    Raises:
        InvalidOffsetError: If the offsets cover the whole path.
    """
    lengths = [queries.edge_length(edge) for edge in path]
    total = sum(lengths)
    if pos_offset + neg_offset >= total:
        raise InvalidOffsetError(
            f"Offsets {pos_offset:.1f}m + {neg_offset:.1f}m cover the whole path of {total:.1f}m"
        )

    start = 0
    while lengths[start] <= pos_offset:
        pos_offset -= lengths[start]
        start += 1

    end = len(path)
    while lengths[end - 1] <= neg_offset:
        neg_offset -= lengths[end - 1]
        end -= 1

    return list(path[start:end]), pos_offset, neg_offset
