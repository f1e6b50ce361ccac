"""Path expansion - Move location ends onto valid nodes.

An LRP on a node where the route cannot deviate (see is_node_valid) is
ambiguous for the decoder, so the path is extended over such nodes while
the way on is unambiguous. The extension is absorbed by the offsets,
which keeps the referenced location itself unchanged.
"""

import logging
from collections.abc import Hashable, Sequence

from openlr_toolkit.constants import EncoderDefaults
from openlr_toolkit.graph.paths import is_node_valid, is_opposite_direction
from openlr_toolkit.graph.queries import GraphQueries
from openlr_toolkit.model.config import EncoderConfig
from openlr_toolkit.model.location import LineLocation

logger = logging.getLogger(__name__)


def select_expansion_candidate(
    queries: GraphQueries,
    edge: Hashable,
    candidates: Sequence[Hashable],
) -> Hashable | None:
    """Pick the edge that continues the road beyond a node, if unambiguous.

    With two candidates one is usually the opposite direction of `edge`,
    i.e. a U-turn, and the other one continues the road. When both are
    opposite (parallel edges between the same nodes) the one whose length
    differs from `edge` is taken.
    """
    candidates = list(candidates[:3])
    if len(candidates) == 1:
        return candidates[0]
    if len(candidates) != 2:
        return None

    first, second = candidates
    first_opposite = is_opposite_direction(queries, edge, first)
    second_opposite = is_opposite_direction(queries, edge, second)
    if first_opposite and not second_opposite:
        return second
    if second_opposite and not first_opposite:
        return first
    if first_opposite and second_opposite:
        length = queries.edge_length(edge)
        first_similar = abs(length - queries.edge_length(first)) <= EncoderDefaults.LENGTH_SIMILARITY_M
        second_similar = abs(length - queries.edge_length(second)) <= EncoderDefaults.LENGTH_SIMILARITY_M
        if second_similar and not first_similar:
            return first
        if first_similar and not second_similar:
            return second
    return None


def _expand(
    config: EncoderConfig,
    queries: GraphQueries,
    path: Sequence[Hashable],
    offset: float,
    backward: bool,
) -> tuple[list[Hashable], float]:
    """Edges added beyond one end of the path, ordered outwards, and their length."""
    edge = path[0] if backward else path[-1]
    expansion: list[Hashable] = []
    added = 0.0

    while True:
        vertex = queries.edge_start(edge) if backward else queries.edge_end(edge)
        if is_node_valid(queries, vertex):
            break
        edges = queries.entering_edges(vertex) if backward else queries.exiting_edges(vertex)
        candidate = select_expansion_candidate(queries, edge, [e for e, _ in edges])
        if candidate is None:
            break

        length = queries.edge_length(candidate)
        if offset + added + length > config.max_lrp_distance or candidate in path or candidate in expansion:
            break

        restricted = (
            queries.is_turn_restricted(candidate, edge) if backward else queries.is_turn_restricted(edge, candidate)
        )
        if restricted:
            logger.debug(f"Expansion beyond {edge!r} hit a turn restriction, dropping it")
            return [], 0.0

        expansion.append(candidate)
        added += length
        edge = candidate

    return expansion, added


def expand_line(config: EncoderConfig, queries: GraphQueries, location: LineLocation) -> LineLocation:
    """Extend both ends of a path to valid nodes, moving the added length into the offsets."""
    prefix, prefix_length = _expand(config, queries, location.path, location.pos_offset, backward=True)
    postfix, postfix_length = _expand(config, queries, location.path, location.neg_offset, backward=False)

    if prefix or postfix:
        logger.debug(f"Expanded path by {len(prefix)} edges before and {len(postfix)} edges after")

    return LineLocation(
        path=(*reversed(prefix), *location.path, *postfix),
        pos_offset=location.pos_offset + prefix_length,
        neg_offset=location.neg_offset + postfix_length,
    )
