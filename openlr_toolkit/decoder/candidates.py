"""Candidate lines - Where on the map an LRP may lie.

For every LRP the decoder looks for:
- Candidate nodes: vertices within the search radius
- Node lines: lines leaving those nodes (entering them for the last LRP)
- Projected lines: lines passing within the search radius, entered at the
  projection of the LRP onto them

Each line is rated by how close it is to the LRP and how well its FRC, FOW
and bearing match the LRP attributes. Only the best rated lines are kept.
"""

import logging
from collections.abc import Hashable
from dataclasses import dataclass

from openlr_toolkit.constants import RatingConfig
from openlr_toolkit.core.geo_calculator import GeoCalculator
from openlr_toolkit.errors import MapMatchFailedError
from openlr_toolkit.graph.queries import GraphQueries
from openlr_toolkit.model.attributes import Fow, Frc
from openlr_toolkit.model.config import DecoderConfig
from openlr_toolkit.model.lrp import LocationReferencePoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateLine:
    """A rated edge an LRP may lie on.

    Attributes:
        lrp_index: Index of the LRP in the reference
        edge: Candidate edge id
        rating: Higher is better
        offset: Distance (m) from the edge start to the LRP position on it
        projected: True if found by projection rather than via a node
    """

    lrp_index: int
    edge: Hashable
    rating: float
    offset: float
    projected: bool = False

    def __repr__(self) -> str:
        kind = "projected" if self.projected else "node"
        return f"CandidateLine(LRP {self.lrp_index}, {self.edge!r}, {kind}, rating={self.rating:.1f}, at {self.offset:.1f}m)"


# =============================================================================
# Scores
# =============================================================================


def bearing_score(difference: float) -> float:
    """Score of a bearing difference in degrees."""
    for limit, score in RatingConfig.BEARING_SCORES:
        if difference <= limit:
            return score
    return RatingConfig.BEARING_POOR_SCORE


def frc_score(candidate: Frc | None, expected: Frc) -> float:
    """Score of a candidate FRC against the LRP's FRC; unknown FRC scores poorly."""
    if candidate is None:
        return RatingConfig.FRC_POOR_SCORE
    return RatingConfig.FRC_SCORES.get(abs(int(candidate) - int(expected)), RatingConfig.FRC_POOR_SCORE)


def fow_score(candidate: Fow | None, expected: Fow) -> float:
    """Score of a candidate FOW against the LRP's FOW; unknown FOW counts as undefined."""
    candidate = Fow.UNDEFINED if candidate is None else candidate
    if candidate == expected:
        return RatingConfig.FOW_EXACT_SCORE
    if Fow.UNDEFINED in (candidate, expected):
        return RatingConfig.FOW_UNDEFINED_SCORE
    return RatingConfig.FOW_POOR_SCORE


def rate_line(
    config: DecoderConfig,
    lrp: LocationReferencePoint,
    distance: float,
    frc: Frc | None,
    fow: Fow | None,
    bearing: float,
) -> float | None:
    """Rate a candidate line for an LRP.

    Args:
        config: Decoder parameters
        lrp: The LRP being matched
        distance: Distance (m) from the LRP to the node or projection point
        frc: FRC of the candidate edge
        fow: FOW of the candidate edge
        bearing: Measured bearing of the candidate edge

    Returns:
        The rating, or None if the line is rejected.
    """
    if lrp.path is not None and frc is not None:
        if int(frc) > int(lrp.path.lfrcnp) + config.frc_variance:
            return None

    bearing_difference = GeoCalculator.bearing_difference(bearing, lrp.line.bearing)
    if bearing_difference > config.bearing_tolerance:
        return None

    distance_score = max(0.0, config.search_radius - distance) * RatingConfig.MAX_SCORE / config.search_radius
    line_score = bearing_score(bearing_difference) + frc_score(frc, lrp.line.frc) + fow_score(fow, lrp.line.fow)
    rating = config.node_factor * distance_score + config.line_factor * line_score

    if rating < config.min_line_rating:
        return None
    return rating


# =============================================================================
# Search
# =============================================================================


def _measure_bearing(queries: GraphQueries, config: DecoderConfig, edge: Hashable, at: float, is_last: bool) -> float:
    if is_last:
        return queries.edge_bearing(edge, at, -config.bearing_distance)
    return queries.edge_bearing(edge, at, config.bearing_distance)


def _node_lines(
    config: DecoderConfig,
    queries: GraphQueries,
    lrp: LocationReferencePoint,
    index: int,
    is_last: bool,
) -> list[CandidateLine]:
    lines = []
    for vertex, distance in queries.nearest_vertices(lrp.coordinate, config.search_radius):
        edges = queries.entering_edges(vertex) if is_last else queries.exiting_edges(vertex)
        for edge, _ in edges:
            length = queries.edge_length(edge)
            offset = length if is_last else 0.0
            bearing = _measure_bearing(queries, config, edge, offset, is_last)
            rating = rate_line(config, lrp, distance, queries.edge_frc(edge), queries.edge_fow(edge), bearing)
            if rating is None:
                continue
            lines.append(CandidateLine(lrp_index=index, edge=edge, rating=rating, offset=offset))
    return lines


def _projected_lines(
    config: DecoderConfig,
    queries: GraphQueries,
    lrp: LocationReferencePoint,
    index: int,
    is_last: bool,
    has_node_lines: bool,
) -> list[CandidateLine]:
    lines = []
    for edge, distance in queries.nearest_edges(lrp.coordinate, config.search_radius):
        projection = queries.distance_along_edge(edge, lrp.coordinate)
        if not 0.0 < projection < queries.edge_length(edge):
            continue
        bearing = _measure_bearing(queries, config, edge, projection, is_last)
        rating = rate_line(config, lrp, distance, queries.edge_frc(edge), queries.edge_fow(edge), bearing)
        if rating is None:
            continue
        if has_node_lines:
            rating *= config.projected_line_factor
            if rating < config.min_line_rating:
                continue
        lines.append(CandidateLine(lrp_index=index, edge=edge, rating=rating, offset=projection, projected=True))
    return lines


def find_candidate_lines(
    config: DecoderConfig,
    queries: GraphQueries,
    lrp: LocationReferencePoint,
    index: int,
    is_last: bool,
) -> list[CandidateLine]:
    """Best rated candidate lines for one LRP, best first.

    Raises:
        MapMatchFailedError: If no line passes the rating.
    """
    node_lines = _node_lines(config, queries, lrp, index, is_last)
    best: dict[Hashable, CandidateLine] = {}
    for line in node_lines:
        if line.edge not in best or best[line.edge].rating < line.rating:
            best[line.edge] = line

    for line in _projected_lines(config, queries, lrp, index, is_last, has_node_lines=bool(node_lines)):
        if line.edge not in best or best[line.edge].rating < line.rating:
            best[line.edge] = line

    candidates = sorted(best.values(), key=lambda line: line.rating, reverse=True)
    candidates = candidates[: config.max_candidates_per_lrp]

    if not candidates:
        logger.warning(f"No candidate lines found for LRP {index} {lrp}")
        raise MapMatchFailedError(f"No candidate lines found for LRP {index}", lrp_index=index)

    logger.debug(f"LRP {index}: {len(candidates)} candidates, best {candidates[0]}")
    return candidates
