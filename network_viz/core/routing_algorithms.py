"""Shortest-path route computation.

Routes are computed for every ordered pair of nodes over a directed edge list
derived from link geometry. Each node then keeps the first hop of every
shortest path as its known route.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from network_viz.core.link import Link, Position, distance_between

logger = logging.getLogger(__name__)

Edge = Tuple[int, int, int]


def build_edge_list(links: Iterable[Link], positions: Dict[int, Position]) -> List[Edge]:
    """Collect the weighted directed edges contributed by every link.

    Args:
        links: Links in creation order.
        positions: Current position of every node.

    Returns:
        (from, to, weight) triples; weights are distances truncated to integers.
    """
    edges: List[Edge] = []
    for link in links:
        for source, target, multiplier in link.routing_edges():
            distance = distance_between(positions[target], positions[source])
            edges.append((source, target, int(distance * multiplier)))
    return edges


def calculate_preferred_path(
    source: int, destination: int, edges: List[Edge]
) -> Optional[List[int]]:
    """Find a shortest path with Dijkstra's algorithm.

    The frontier is kept ordered by distance with a stable sort, so between
    equally distant candidates the earlier-ordered one is settled first, and a
    relaxation must be strictly shorter to replace a known predecessor.

    Args:
        source: Start node ID.
        destination: Target node ID.
        edges: (from, to, weight) triples.

    Returns:
        Node IDs from source to destination, or None if unreachable.
    """
    if source == destination:
        return [source]

    visited: Dict[int, int] = {}
    # node -> (predecessor, distance), ordered by distance
    frontier: Dict[int, Tuple[int, int]] = {source: (source, 0)}

    while frontier:
        current = next(iter(frontier))
        previous, current_distance = frontier.pop(current)
        visited[current] = previous
        if current == destination:
            break

        for start, end, weight in edges:
            if start != current or end in visited:
                continue
            distance_to_next = current_distance + weight
            known = frontier.get(end)
            if known is None or distance_to_next < known[1]:
                frontier[end] = (current, distance_to_next)

        frontier = dict(sorted(frontier.items(), key=lambda item: item[1][1]))

    if destination not in visited:
        return None

    path = [destination]
    while path[-1] != source:
        path.append(visited[path[-1]])
    path.reverse()
    return path


def compute_known_routes(
    node_ids: List[int], edges: List[Edge]
) -> Tuple[Dict[int, Dict[int, int]], List[Tuple[int, int]]]:
    """Compute the next hop for every ordered pair of distinct nodes.

    Args:
        node_ids: All node IDs in iteration order.
        edges: (from, to, weight) triples.

    Returns:
        The next hop per source and destination, and the unreachable pairs.
    """
    routes: Dict[int, Dict[int, int]] = {node_id: {} for node_id in node_ids}
    unreachable: List[Tuple[int, int]] = []

    for source in node_ids:
        for destination in node_ids:
            if source == destination:
                continue
            path = calculate_preferred_path(source, destination, edges)
            if path is None:
                unreachable.append((source, destination))
                continue
            routes[source][destination] = path[1]

    logger.debug(
        "Computed %d routes over %d edges, %d unreachable",
        sum(len(r) for r in routes.values()),
        len(edges),
        len(unreachable),
    )
    return routes, unreachable
