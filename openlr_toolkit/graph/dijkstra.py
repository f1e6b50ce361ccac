"""Dijkstra shortest paths over a DirectedGraph.

Vertex based with a binary min-heap keyed by (distance, insertion order), so
ties are broken deterministically by the order vertices were reached and
vertex ids only need to be hashable.
The search can be limited to a maximum FRC and a maximum length, and it
honours turn restrictions between consecutive edges, starting from an
optional edge that enters the origin.
"""

import heapq
import itertools
import logging
import math
from collections.abc import Hashable
from dataclasses import dataclass, field

from openlr_toolkit.graph.queries import GraphQueries
from openlr_toolkit.model.attributes import Frc

logger = logging.getLogger(__name__)


@dataclass
class ShortestPathTree:
    """Result of a one-to-many Dijkstra search.

    Attributes:
        origin: Vertex the search started at
        distances: Final shortest distance (m) of every settled vertex
        previous: Tree edge entering every settled vertex except the origin
    """

    origin: Hashable
    distances: dict[Hashable, float] = field(default_factory=dict)
    previous: dict[Hashable, Hashable] = field(default_factory=dict)

    def reaches(self, vertex: Hashable) -> bool:
        return vertex in self.distances

    def tree_edge(self, vertex: Hashable) -> Hashable | None:
        """Edge through which the shortest path enters the vertex."""
        return self.previous.get(vertex)

    def path_to(self, vertex: Hashable, queries: GraphQueries) -> list[Hashable]:
        """Unpack the edges from the origin to a settled vertex."""
        edges = []
        while vertex != self.origin:
            edge = self.previous[vertex]
            edges.append(edge)
            vertex = queries.edge_start(edge)
        edges.reverse()
        return edges


def shortest_path_tree(
    queries: GraphQueries,
    origin: Hashable,
    entry_edge: Hashable | None = None,
    max_frc: Frc | None = None,
    max_length: float = math.inf,
    destination: Hashable | None = None,
) -> ShortestPathTree:
    """Run Dijkstra from a vertex.

    Args:
        queries: Guarded graph access
        origin: Start vertex
        entry_edge: Edge arriving at the origin, checked for turn restrictions
        max_frc: Skip edges with a less important FRC than this
        max_length: Skip vertices farther than this many meters
        destination: Stop as soon as this vertex is settled

    Returns:
        The tree of all settled vertices.
    """
    tree = ShortestPathTree(origin=origin)
    tentative: dict[Hashable, float] = {origin: 0.0}
    tentative_previous: dict[Hashable, Hashable] = {}
    sequence = itertools.count()
    frontier: list[tuple[float, int, Hashable]] = [(0.0, next(sequence), origin)]

    while frontier:
        distance, _, vertex = heapq.heappop(frontier)
        if vertex in tree.distances:
            continue
        tree.distances[vertex] = distance
        if vertex in tentative_previous:
            tree.previous[vertex] = tentative_previous[vertex]
        if vertex == destination:
            break

        incoming = tree.previous.get(vertex, entry_edge)
        for edge, next_vertex in queries.exiting_edges(vertex):
            if next_vertex in tree.distances:
                continue
            if max_frc is not None:
                frc = queries.edge_frc(edge)
                if frc is not None and frc > max_frc:
                    continue
            if incoming is not None and queries.is_turn_restricted(incoming, edge):
                continue
            candidate = distance + queries.edge_length(edge)
            if candidate > max_length:
                continue
            if candidate < tentative.get(next_vertex, math.inf):
                tentative[next_vertex] = candidate
                tentative_previous[next_vertex] = edge
                heapq.heappush(frontier, (candidate, next(sequence), next_vertex))

    return tree


def shortest_path(
    queries: GraphQueries,
    origin: Hashable,
    destination: Hashable,
    entry_edge: Hashable | None = None,
    max_frc: Frc | None = None,
    max_length: float = math.inf,
) -> tuple[list[Hashable], float] | None:
    """Shortest path between two vertices.

    Returns:
        (edges, length in meters), an empty path of length 0 when origin and
        destination are the same vertex, or None when the destination is not
        reachable within the limits.
    """
    if origin == destination:
        return [], 0.0

    tree = shortest_path_tree(
        queries,
        origin,
        entry_edge=entry_edge,
        max_frc=max_frc,
        max_length=max_length,
        destination=destination,
    )
    if not tree.reaches(destination):
        logger.debug(f"No path from {origin!r} to {destination!r} within {max_length:.0f} m")
        return None
    return tree.path_to(destination, queries), tree.distances[destination]
