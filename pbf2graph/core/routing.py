"""
Shortest paths over a RoadGraph.

Dijkstra's algorithm with a binary heap. Edge weights are the flat Euclidean
distance between node coordinates, so coordinates must be finite: a NaN weight
aborts the query with ``InvalidCoordinate`` instead of being misordered in the
heap.
"""

import heapq
import logging
import math
import time

from ..pipeline_config import QueryTimeout

logger = logging.getLogger(__name__)


def shortest_path(graph, start, end, deadline=None):
    """
    Find the minimum-weight path between two nodes.

    Parameters
    ----------
    graph : RoadGraph
        Graph to search. It must not be modified while the query runs.
    start : int
        Identifier of the first node
    end : int
        Identifier of the last node
    deadline : float, optional
        Maximum number of seconds the search may run

    Returns
    -------
    list of int or None
        Node identifiers from ``start`` to ``end`` inclusive, or None when
        ``end`` cannot be reached

    Raises
    ------
    DanglingEdgeReference
        If an explored edge references a node without coordinates
    InvalidCoordinate
        If an explored edge has a NaN weight
    QueryTimeout
        If the deadline is exceeded
    """
    expires_at = None if deadline is None else time.monotonic() + deadline

    distances = {start: 0.0}
    predecessors = {}
    visited = set()
    queue = [(0.0, start)]

    while queue:
        if expires_at is not None and time.monotonic() > expires_at:
            raise QueryTimeout(f"Shortest path {start} -> {end} exceeded {deadline}s")

        distance, node = heapq.heappop(queue)
        if node in visited:
            continue
        visited.add(node)

        if node == end:
            path = [end]
            while path[-1] != start:
                path.append(predecessors[path[-1]])
            path.reverse()
            logger.debug(f"Path {start} -> {end}: {len(path)} nodes, {len(visited)} settled")
            return path

        for neighbor in graph.successors(node):
            candidate = distance + graph.edge_weight(node, neighbor)
            if candidate < distances.get(neighbor, math.inf):
                distances[neighbor] = candidate
                predecessors[neighbor] = node
                heapq.heappush(queue, (candidate, neighbor))

    logger.debug(f"No path {start} -> {end} after settling {len(visited)} nodes")
    return None


def path_length(graph, path):
    """
    Sum of the edge weights along a path.

    Parameters
    ----------
    graph : RoadGraph
    path : list of int

    Returns
    -------
    float
        Total length in degrees; 0.0 for a single-node path
    """
    return sum(graph.edge_weight(u, v) for u, v in zip(path, path[1:]))
