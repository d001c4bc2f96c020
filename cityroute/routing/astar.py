"""
A* search with pluggable heuristics.

Built-in heuristics:
- Euclidean straight-line distance
- Manhattan (L1) distance, for grid-like maps
- Zero, which turns A* into Dijkstra (used as a correctness cross-check)

A heuristic must not overestimate the remaining cost, otherwise the
returned path is not guaranteed optimal. Geometric heuristics are only
admissible when edge weights (after traffic) are at least the geometric
length of the road.

``AdaptiveAStar`` remembers the exact remaining distance observed along
previously found optimal paths and uses ``max(base, learned)`` as its
estimate. Learned values are per goal and are dropped whenever the
graph's traffic changes, so they never exceed the true remaining cost.
"""

from __future__ import annotations

import logging
import math
import time
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from ..graph.model import CityGraph, Node
from .heap import IndexedMinHeap
from .results import SearchResult, no_path, reconstruct_path


logger = logging.getLogger(__name__)


Heuristic = Callable[[Node, Node], float]


def euclidean_heuristic(current: Node, goal: Node) -> float:
    return current.euclidean_distance(goal)


def manhattan_heuristic(current: Node, goal: Node) -> float:
    return current.manhattan_distance(goal)


def zero_heuristic(current: Node, goal: Node) -> float:
    return 0.0


class HeuristicKind(Enum):
    """Named built-in heuristics."""
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"
    ZERO = "zero"


HEURISTICS: Dict[HeuristicKind, Heuristic] = {
    HeuristicKind.EUCLIDEAN: euclidean_heuristic,
    HeuristicKind.MANHATTAN: manhattan_heuristic,
    HeuristicKind.ZERO: zero_heuristic,
}


def get_heuristic(kind: HeuristicKind | str) -> Heuristic:
    """Resolve a heuristic by enum member or name."""
    if isinstance(kind, str):
        try:
            kind = HeuristicKind(kind.lower())
        except ValueError:
            available = ", ".join(k.value for k in HeuristicKind)
            raise ValueError(f"Unknown heuristic '{kind}'. Available: {available}") from None
    return HEURISTICS[kind]


def _algorithm_name(heuristic: Heuristic) -> str:
    for kind, func in HEURISTICS.items():
        if func is heuristic:
            return f"astar-{kind.value}"
    return "astar"


def astar_search(
    graph: CityGraph,
    source: int,
    goal: int,
    heuristic: Heuristic = euclidean_heuristic,
    algorithm: Optional[str] = None,
) -> SearchResult:
    """
    Find a path from ``source`` to ``goal`` ordered by f = g + h.

    Any node whose g-score improves goes back on the open set, including
    nodes already expanded, which keeps the result optimal for admissible
    heuristics that are not consistent.

    Args:
        graph: City graph
        source: Origin node id
        goal: Destination node id
        heuristic: Callable ``(node, goal_node) -> estimate``
        algorithm: Name to report in the result (derived from heuristic if None)

    Returns:
        SearchResult with ``nodes_explored`` = number of heap pops
    """
    started = time.perf_counter_ns()
    name = algorithm or _algorithm_name(heuristic)

    goal_node = graph.get_node(goal)
    if source not in graph or goal_node is None:
        return no_path(name, compute_time_ns=time.perf_counter_ns() - started)

    g_score: Dict[int, float] = {source: 0.0}
    predecessors: Dict[int, int] = {}

    open_set = IndexedMinHeap()
    open_set.insert(source, heuristic(graph.node(source), goal_node))
    explored = 0

    while open_set:
        current, _ = open_set.extract_min()
        explored += 1

        if current == goal:
            path = reconstruct_path(predecessors, source, goal)
            elapsed = time.perf_counter_ns() - started
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "%s %s -> %s: distance=%.3f explored=%d", name, source, goal, g_score[goal], explored
                )
            return SearchResult(
                path=path,
                distance=g_score[goal],
                algorithm=name,
                nodes_explored=explored,
                compute_time_ns=elapsed,
            )

        node = graph.node(current)
        multiplier = node.traffic_multiplier
        current_g = g_score[current]

        for edge in node.edges:
            neighbor = edge.destination
            tentative = current_g + edge.dynamic_weight(multiplier)
            if tentative >= g_score.get(neighbor, math.inf):
                continue

            g_score[neighbor] = tentative
            predecessors[neighbor] = current
            f_score = tentative + heuristic(graph.node(neighbor), goal_node)

            if neighbor in open_set:
                open_set.decrease_key(neighbor, f_score)
            else:
                open_set.insert(neighbor, f_score)

    return no_path(name, explored, time.perf_counter_ns() - started)


class AdaptiveAStar:
    """
    A* that tightens its heuristic across repeated queries.

    After each successful search, every node on the returned path records
    its exact remaining distance to the goal. Later searches toward the same
    goal use ``max(base_heuristic, learned)``.
    """

    def __init__(self, graph: CityGraph, base_heuristic: Heuristic = euclidean_heuristic):
        self.graph = graph
        self.base_heuristic = base_heuristic
        self._learned: Dict[Tuple[int, int], float] = {}
        self._traffic_version = graph.traffic_version

    @property
    def learned_count(self) -> int:
        return len(self._learned)

    def learned_estimate(self, node_id: int, goal: int) -> float:
        return self._learned.get((goal, node_id), 0.0)

    def reset(self) -> None:
        self._learned.clear()
        self._traffic_version = self.graph.traffic_version

    def find_path(self, source: int, goal: int) -> SearchResult:
        if self.graph.traffic_version != self._traffic_version:
            logger.debug("Traffic changed; discarding %d learned estimates", len(self._learned))
            self.reset()

        learned = self._learned
        base = self.base_heuristic

        def adaptive(current: Node, goal_node: Node) -> float:
            return max(base(current, goal_node), learned.get((goal_node.node_id, current.node_id), 0.0))

        result = astar_search(self.graph, source, goal, adaptive, algorithm="astar-adaptive")
        if result.found:
            self._learn(result, goal)
        return result

    def _learn(self, result: SearchResult, goal: int) -> None:
        # Walk backwards from the goal accumulating the real edge costs.
        remaining = 0.0
        path = result.path
        for i in range(len(path) - 1, 0, -1):
            prev_node = self.graph.node(path[i - 1])
            step = min(
                e.dynamic_weight(prev_node.traffic_multiplier)
                for e in prev_node.edges
                if e.destination == path[i]
            )
            remaining += step
            key = (goal, path[i - 1])
            if remaining > self._learned.get(key, 0.0):
                self._learned[key] = remaining
