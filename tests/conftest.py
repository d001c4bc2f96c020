"""
Pytest configuration and shared fixtures for cityroute tests.

This file provides:
- Small hand-built graphs (diamond, weighted grid, disconnected)
- The reference 3x3 assignment matrix
- A brute-force shortest path helper
"""

import itertools
import math

import numpy as np
import pytest

from cityroute.graph import CityGraph


# ==============================================================================
# Graphs
# ==============================================================================

@pytest.fixture
def diamond_graph() -> CityGraph:
    """0-1-3 and 0-2-3, every road weight 1."""
    graph = CityGraph()
    graph.add_node(0, 0.0, 0.0)
    graph.add_node(1, 0.5, 0.5)
    graph.add_node(2, 0.5, -0.5)
    graph.add_node(3, 1.0, 0.0)
    graph.add_edge(0, 1, 1.0)
    graph.add_edge(1, 3, 1.0)
    graph.add_edge(0, 2, 1.0)
    graph.add_edge(2, 3, 1.0)
    return graph


def make_grid(size: int = 6, spacing: float = 5.0) -> CityGraph:
    """
    Square street grid; node id = row * size + col at (col * spacing, row * spacing).

    Road weights are never below the geometric length, so Euclidean and
    Manhattan heuristics are admissible.
    """
    graph = CityGraph()
    for row in range(size):
        for col in range(size):
            graph.add_node(row * size + col, col * spacing, row * spacing)

    for row in range(size):
        for col in range(size):
            node = row * size + col
            extra = ((row * 7 + col * 3) % 4) * 0.5 * spacing
            if col + 1 < size:
                graph.add_edge(node, node + 1, spacing + extra)
            if row + 1 < size:
                graph.add_edge(node, node + size, spacing + extra / 2)
    return graph


@pytest.fixture
def grid_graph() -> CityGraph:
    """6x6 grid, 5 units between neighbours."""
    return make_grid()


@pytest.fixture
def disconnected_graph() -> CityGraph:
    """Two components: 0-1-2 and 10-11."""
    graph = CityGraph()
    for node_id, x in [(0, 0.0), (1, 1.0), (2, 2.0), (10, 50.0), (11, 51.0)]:
        graph.add_node(node_id, x, 0.0)
    graph.add_edge(0, 1, 1.0)
    graph.add_edge(1, 2, 1.5)
    graph.add_edge(10, 11, 2.0)
    return graph


# ==============================================================================
# Assignment Data
# ==============================================================================

@pytest.fixture
def reference_matrix() -> np.ndarray:
    """3x3 matrix whose minimum assignment is the diagonal (total 6.0)."""
    return np.array([
        [2.5, 4.0, 6.5],
        [3.0, 1.5, 5.0],
        [5.5, 3.5, 2.0],
    ])


# ==============================================================================
# Helpers
# ==============================================================================

def brute_force_distance(graph: CityGraph, source: int, target: int) -> float:
    """Shortest distance by Bellman-Ford style relaxation over every edge."""
    dist = {node_id: math.inf for node_id in graph.node_ids()}
    dist[source] = 0.0
    for _ in range(len(dist)):
        changed = False
        for u, edge in graph.edges():
            candidate = dist[u] + edge.dynamic_weight(graph.traffic_multiplier(u))
            if candidate < dist[edge.destination]:
                dist[edge.destination] = candidate
                changed = True
        if not changed:
            break
    return dist[target]


def brute_force_assignment(matrix: np.ndarray) -> float:
    """Minimum total over every permutation (square matrices only)."""
    n = matrix.shape[0]
    return min(
        sum(matrix[i, perm[i]] for i in range(n))
        for perm in itertools.permutations(range(n))
    )
