"""Path and node helpers shared by the encoder and the decoder.

A path is a sequence of edge ids where each edge starts at the end vertex
of the previous one and no turn between them is restricted.
"""

from collections.abc import Hashable, Sequence

from openlr_toolkit.graph.queries import GraphQueries


def is_opposite_direction(queries: GraphQueries, first: Hashable, second: Hashable) -> bool:
    """True if two edges connect the same vertices in opposite directions.

        A <==== first ==== B
        A ==== second ===> B
    """
    return queries.edge_start(first) == queries.edge_end(second) and queries.edge_end(
        first
    ) == queries.edge_start(second)


def is_node_valid(queries: GraphQueries, vertex: Hashable) -> bool:
    """True if a location may start or end at this vertex without expansion.

    A node is invalid when a route cannot deviate there:
    - Degree 2 (one line in, one out) unless both are the same road, i.e.
      the node is a dead end where the only way on is back.
    - Degree 4 where the lines form two pairs of opposite directions, i.e.
      the node only joins two neighbours along one two-way road.
    """
    edges = [edge for edge, _ in queries.vertex_edges(vertex)]

    if len(edges) == 2:
        return is_opposite_direction(queries, edges[0], edges[1])

    if len(edges) == 4:
        first, rest = edges[0], edges[1:]
        partner = next((edge for edge in rest if is_opposite_direction(queries, first, edge)), None)
        if partner is None:
            return True
        remaining = [edge for edge in rest if edge != partner]
        return not is_opposite_direction(queries, remaining[0], remaining[1])

    return True


def is_path_connected(queries: GraphQueries, path: Sequence[Hashable]) -> bool:
    """True if every edge exits the end vertex of the previous one without a turn restriction."""
    for first, second in zip(path, path[1:]):
        if queries.is_turn_restricted(first, second):
            return False
        exiting = queries.exiting_edges(queries.edge_end(first))
        if not any(edge == second for edge, _ in exiting):
            return False
    return True


def path_length(queries: GraphQueries, path: Sequence[Hashable]) -> float:
    """Sum of the edge lengths of a path in meters."""
    return sum(queries.edge_length(edge) for edge in path)
