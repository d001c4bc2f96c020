"""
Dijkstra shortest paths over the city graph.

Two entry points:
- ``shortest_path_tree``: distances and predecessors to every reachable node
- ``dijkstra_path``: single pair, stopping as soon as the target is popped

Edge costs are read live as ``base_weight * multiplier(source node)`` at the
moment of relaxation, so results always reflect current traffic. Weights
must be non-negative.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from ..graph.model import CityGraph
from .heap import IndexedMinHeap
from .results import SearchResult, no_path, reconstruct_path


logger = logging.getLogger(__name__)

ALGORITHM_NAME = "dijkstra"

EdgePenalties = Mapping[Tuple[int, int], float]


@dataclass
class ShortestPathTree:
    """Single-source result: distances and predecessors for reachable nodes."""

    source: int
    distances: Dict[int, float] = field(default_factory=dict)
    predecessors: Dict[int, int] = field(default_factory=dict)
    nodes_explored: int = 0

    def distance_to(self, node_id: int) -> float:
        return self.distances.get(node_id, math.inf)

    def path_to(self, node_id: int) -> Tuple[int, ...]:
        if node_id not in self.distances:
            return ()
        return reconstruct_path(self.predecessors, self.source, node_id)

    def reachable(self) -> list:
        return list(self.distances)


def _run(
    graph: CityGraph,
    source: int,
    target: Optional[int],
    edge_penalties: Optional[EdgePenalties],
) -> ShortestPathTree:
    tree = ShortestPathTree(source=source)
    if source not in graph:
        return tree

    distances = tree.distances
    predecessors = tree.predecessors
    distances[source] = 0.0

    heap = IndexedMinHeap()
    heap.insert(source, 0.0)
    settled = set()

    while heap:
        current, current_dist = heap.extract_min()
        settled.add(current)
        tree.nodes_explored += 1

        if current == target:
            break

        node = graph.node(current)
        multiplier = node.traffic_multiplier
        for edge in node.edges:
            neighbor = edge.destination
            if neighbor in settled:
                continue

            weight = edge.dynamic_weight(multiplier)
            if edge_penalties:
                weight += edge_penalties.get((current, neighbor), 0.0)
            candidate = current_dist + weight

            if candidate < distances.get(neighbor, math.inf):
                distances[neighbor] = candidate
                predecessors[neighbor] = current
                if neighbor in heap:
                    heap.decrease_key(neighbor, candidate)
                else:
                    heap.insert(neighbor, candidate)

    return tree


def shortest_path_tree(graph: CityGraph, source: int) -> ShortestPathTree:
    """
    Compute shortest distances from ``source`` to every reachable node.

    An unknown source yields an empty tree (every distance is inf).
    """
    return _run(graph, source, None, None)


def dijkstra_path(
    graph: CityGraph,
    source: int,
    target: int,
    edge_penalties: Optional[EdgePenalties] = None,
) -> SearchResult:
    """
    Shortest path between two nodes with early termination.

    Args:
        graph: City graph
        source: Origin node id
        target: Destination node id
        edge_penalties: Optional additive cost per directed edge ``(u, v)``;
            the reported distance excludes penalties

    Returns:
        SearchResult; empty path and inf distance when unreachable or when
        either id is unknown
    """
    started = time.perf_counter_ns()

    if source not in graph or target not in graph:
        return no_path(ALGORITHM_NAME, compute_time_ns=time.perf_counter_ns() - started)

    tree = _run(graph, source, target, edge_penalties)
    path = tree.path_to(target)
    elapsed = time.perf_counter_ns() - started

    if not path:
        logger.debug("Dijkstra: no path %s -> %s (%d nodes explored)", source, target, tree.nodes_explored)
        return no_path(ALGORITHM_NAME, tree.nodes_explored, elapsed)

    distance = tree.distances[target] if not edge_penalties else path_distance(graph, path)
    return SearchResult(
        path=path,
        distance=distance,
        algorithm=ALGORITHM_NAME,
        nodes_explored=tree.nodes_explored,
        compute_time_ns=elapsed,
    )


def path_distance(graph: CityGraph, path) -> float:
    """
    Sum of current dynamic weights along ``path``.

    Between consecutive nodes the cheapest parallel edge is used. Returns
    inf if the path uses a missing edge or unknown node.
    """
    total = 0.0
    for u, v in zip(path, path[1:]):
        node = graph.get_node(u)
        if node is None:
            return math.inf
        weights = [e.dynamic_weight(node.traffic_multiplier) for e in node.edges if e.destination == v]
        if not weights:
            return math.inf
        total += min(weights)
    return total
