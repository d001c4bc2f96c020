"""
All-pairs shortest paths (Floyd-Warshall) and facility-location queries.

The distance matrix is a point-in-time snapshot of the graph: it does not
follow later traffic updates and must be rebuilt to reflect them. Build
cost is O(V^3) time and O(V^2) memory, so it is meant for bulk queries
(station placement, coverage statistics) rather than per-request routing.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..graph.model import CityGraph


logger = logging.getLogger(__name__)

NO_HOP = -1


@dataclass
class CoverageStats:
    """
    How well a set of stations covers the city.

    Attributes:
        stations: Station node ids
        radius: Coverage radius used
        covered_nodes: Nodes within ``radius`` of some station
        total_nodes: Nodes in the snapshot
        coverage_ratio: covered_nodes / total_nodes
        mean_distance: Mean distance to the nearest station (reachable nodes only)
        max_distance: Worst nearest-station distance (inf if a node is unreachable)
        unreachable_nodes: Nodes with no path to any station
    """
    stations: List[int]
    radius: float
    covered_nodes: int
    total_nodes: int
    coverage_ratio: float
    mean_distance: float
    max_distance: float
    unreachable_nodes: int

    def to_dict(self) -> Dict:
        return asdict(self)


class FloydWarshall:
    """
    Dense all-pairs distance and next-hop matrices.

    Args:
        graph: Graph to snapshot
        use_traffic: If True, direct edges use their dynamic weight at build
            time; by default base weights are used
    """

    def __init__(self, graph: CityGraph, use_traffic: bool = False):
        started = time.perf_counter()

        self._node_ids: List[int] = graph.node_ids()
        self._index: Dict[int, int] = {node_id: i for i, node_id in enumerate(self._node_ids)}
        self.use_traffic = use_traffic

        n = len(self._node_ids)
        dist = np.full((n, n), np.inf, dtype=np.float64)
        nxt = np.full((n, n), NO_HOP, dtype=np.int64)
        np.fill_diagonal(dist, 0.0)
        nxt[np.arange(n), np.arange(n)] = np.arange(n)

        for source, edge in graph.edges():
            i = self._index[source]
            j = self._index[edge.destination]
            if i == j:
                continue
            multiplier = graph.traffic_multiplier(source) if use_traffic else 1.0
            weight = edge.dynamic_weight(multiplier)
            # Parallel roads: keep the cheapest
            if weight < dist[i, j]:
                dist[i, j] = weight
                nxt[i, j] = j

        for k in range(n):
            through_k = dist[:, k:k + 1] + dist[k:k + 1, :]
            improved = through_k < dist
            if improved.any():
                dist[improved] = through_k[improved]
                nxt[improved] = np.broadcast_to(nxt[:, k:k + 1], (n, n))[improved]

        self._dist = dist
        self._next = nxt
        self.build_time_sec = time.perf_counter() - started
        logger.info("All-pairs matrix built for %d nodes in %.3fs", n, self.build_time_sec)

    # -----------------------------
    # Queries
    # -----------------------------

    @property
    def node_ids(self) -> List[int]:
        return list(self._node_ids)

    def node_index(self) -> Dict[int, int]:
        """Copy of the node id -> matrix index mapping."""
        return dict(self._index)

    def distance(self, a: int, b: int) -> float:
        """Shortest distance, inf when unknown or unreachable."""
        i, j = self._index.get(a), self._index.get(b)
        if i is None or j is None:
            return math.inf
        return float(self._dist[i, j])

    def has_path(self, a: int, b: int) -> bool:
        return math.isfinite(self.distance(a, b))

    def path(self, a: int, b: int) -> List[int]:
        """Node ids from ``a`` to ``b`` following next hops; empty if none."""
        i, j = self._index.get(a), self._index.get(b)
        if i is None or j is None or self._next[i, j] == NO_HOP:
            return []

        path = [self._node_ids[i]]
        while i != j:
            i = int(self._next[i, j])
            if i == NO_HOP:
                return []
            path.append(self._node_ids[i])
        return path

    def distance_matrix(self) -> np.ndarray:
        return self._dist.copy()

    def distance_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self._dist, index=self._node_ids, columns=self._node_ids)

    # -----------------------------
    # Facility location
    # -----------------------------

    def optimal_station_locations(self, k: int, candidates: Optional[Iterable[int]] = None) -> List[int]:
        """
        Choose ``k`` station nodes greedily minimising total travel distance.

        Each step adds the candidate that most reduces the sum over all nodes
        of the distance to their nearest station. Unreachable nodes count
        with a penalty larger than any finite distance so that placements
        reaching more of the city always win.

        Args:
            k: Number of stations
            candidates: Node ids allowed as stations (default: every node)

        Returns:
            Station node ids in the order they were chosen
        """
        n = len(self._node_ids)
        if k <= 0 or n == 0:
            return []

        if candidates is None:
            cand_idx = np.arange(n)
        else:
            cand_idx = np.array([self._index[c] for c in candidates if c in self._index], dtype=np.int64)
        if cand_idx.size == 0:
            return []

        finite = self._dist[np.isfinite(self._dist)]
        unreachable_penalty = (finite.max() if finite.size else 0.0) * n + 1.0
        # Undirected graph: distance from station to node equals node to station
        costs = np.where(np.isfinite(self._dist), self._dist, unreachable_penalty)

        chosen: List[int] = []
        nearest = np.full(n, unreachable_penalty * 2, dtype=np.float64)
        available = np.ones(cand_idx.size, dtype=bool)

        for _ in range(min(k, cand_idx.size)):
            # totals[c] = sum_v min(nearest[v], costs[c, v])
            totals = np.minimum(costs[cand_idx], nearest[np.newaxis, :]).sum(axis=1)
            totals[~available] = np.inf
            best = int(np.argmin(totals))
            available[best] = False
            station = int(cand_idx[best])
            nearest = np.minimum(nearest, costs[station])
            chosen.append(self._node_ids[station])

        logger.debug("Selected %d station locations: %s", len(chosen), chosen)
        return chosen

    def coverage_frame(self, stations: Sequence[int]) -> pd.DataFrame:
        """
        Nearest station and distance for every node.

        Returns:
            DataFrame with columns node_id, nearest_station, distance
            (nearest_station is None and distance inf when unreachable)
        """
        station_idx = [self._index[s] for s in stations if s in self._index]
        if not station_idx:
            return pd.DataFrame({
                "node_id": self._node_ids,
                "nearest_station": [None] * len(self._node_ids),
                "distance": [math.inf] * len(self._node_ids),
            })

        sub = self._dist[station_idx]
        best = sub.argmin(axis=0)
        best_dist = sub.min(axis=0)
        nearest = [
            self._node_ids[station_idx[b]] if math.isfinite(d) else None
            for b, d in zip(best, best_dist)
        ]
        return pd.DataFrame({
            "node_id": self._node_ids,
            "nearest_station": nearest,
            "distance": best_dist,
        })

    def coverage_stats(self, stations: Sequence[int], radius: float) -> CoverageStats:
        """Summarise coverage of ``stations`` within ``radius``."""
        frame = self.coverage_frame(stations)
        distances = frame["distance"].to_numpy(dtype=float)
        reachable = np.isfinite(distances)
        total = len(distances)
        covered = int((distances <= radius).sum())

        return CoverageStats(
            stations=list(stations),
            radius=radius,
            covered_nodes=covered,
            total_nodes=total,
            coverage_ratio=covered / total if total else 0.0,
            mean_distance=float(distances[reachable].mean()) if reachable.any() else math.inf,
            max_distance=float(distances.max()) if total else 0.0,
            unreachable_nodes=int((~reachable).sum()),
        )


def all_pairs_distance(graph: CityGraph, use_traffic: bool = False) -> FloydWarshall:
    """Build an all-pairs handle exposing ``distance(a, b)`` and ``path(a, b)``."""
    return FloydWarshall(graph, use_traffic=use_traffic)
