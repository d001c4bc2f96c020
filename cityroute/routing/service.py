"""
Routing facade with strategy selection and a bounded LRU cache.

This module wraps the search engines, providing:
- Dijkstra vs A* selection from straight-line distance and strategy
- LRU memoisation keyed by (origin, destination, strategy)
- Full cache invalidation on every traffic update
- Request/cache statistics for external reporting
- Edge-penalised alternative routes
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from cachetools import LRUCache

from ..graph.model import CityGraph
from ..tools.config_loader import RoutingConfig
from .astar import HeuristicKind, astar_search, get_heuristic
from .dijkstra import dijkstra_path
from .floyd import FloydWarshall
from .results import SearchResult, no_path


logger = logging.getLogger(__name__)


# -----------------------------
# Constants
# -----------------------------

class RouteStrategy(Enum):
    """Optimisation goal requested by the caller."""
    FASTEST = "fastest"      # travel-time optimised
    SHORTEST = "shortest"    # distance optimised
    BALANCED = "balanced"


DEFAULT_CACHE_CAPACITY = 1000
DEFAULT_ASTAR_THRESHOLD = 10.0
DEFAULT_ALTERNATIVE_PENALTY = 1000.0

CacheKey = Tuple[int, int, RouteStrategy]


# -----------------------------
# Data Models
# -----------------------------

@dataclass
class RoutingStats:
    """Snapshot of request and cache counters."""
    total_requests: int
    cache_hits: int
    cache_hit_rate: float
    avg_compute_time_ns: float
    cache_size: int
    cache_capacity: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -----------------------------
# Cache Management
# -----------------------------

class RouteCache:
    """Fixed-capacity LRU cache of route results; reads and writes both refresh recency."""

    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}")
        self._cache: LRUCache = LRUCache(maxsize=capacity)

    def get(self, key: CacheKey) -> Optional[SearchResult]:
        return self._cache.get(key)

    def set(self, key: CacheKey, result: SearchResult) -> None:
        self._cache[key] = result

    def clear(self) -> None:
        self._cache.clear()

    def keys(self) -> List[CacheKey]:
        """Keys from least to most recently used."""
        return list(self._cache.keys())

    @property
    def capacity(self) -> int:
        return int(self._cache.maxsize)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache


# -----------------------------
# Routing Service
# -----------------------------

class RoutingService:
    """
    Cached route queries over a live city graph.

    Args:
        graph: City graph (shared; traffic is mutated through this service)
        cache_capacity: Maximum cached results
        astar_threshold: Straight-line distance above which A* is used
        alternative_penalty: Additive cost put on used edges when searching
            for alternative routes
    """

    def __init__(
        self,
        graph: CityGraph,
        cache_capacity: int = DEFAULT_CACHE_CAPACITY,
        astar_threshold: float = DEFAULT_ASTAR_THRESHOLD,
        alternative_penalty: float = DEFAULT_ALTERNATIVE_PENALTY,
        default_strategy: RouteStrategy = RouteStrategy.BALANCED,
    ):
        self.graph = graph
        self.astar_threshold = astar_threshold
        self.alternative_penalty = alternative_penalty
        self.default_strategy = default_strategy

        self._cache = RouteCache(cache_capacity)
        self._cache_version = graph.traffic_version
        self._lock = threading.RLock()
        self._total_requests = 0
        self._cache_hits = 0
        self._computed = 0
        self._total_compute_ns = 0

    @classmethod
    def from_config(cls, graph: CityGraph, config: Optional[RoutingConfig] = None) -> "RoutingService":
        config = config or RoutingConfig()
        return cls(
            graph,
            cache_capacity=config.cache_capacity,
            astar_threshold=config.astar_distance_threshold,
            alternative_penalty=config.alternative_penalty,
            default_strategy=RouteStrategy(config.default_strategy),
        )

    # -----------------------------
    # Strategy selection
    # -----------------------------

    def select_algorithm(
        self, origin: int, destination: int, strategy: RouteStrategy
    ) -> Optional[HeuristicKind]:
        """
        Pick the engine for a query.

        Returns:
            Heuristic for A*, or None when Dijkstra should be used
        """
        if strategy == RouteStrategy.FASTEST:
            return HeuristicKind.EUCLIDEAN

        straight_line = self.graph.euclidean_distance(origin, destination)
        if straight_line > self.astar_threshold:
            if strategy == RouteStrategy.SHORTEST:
                return HeuristicKind.MANHATTAN
            return HeuristicKind.EUCLIDEAN
        return None

    # -----------------------------
    # Queries
    # -----------------------------

    def route(
        self,
        origin: int,
        destination: int,
        strategy: RouteStrategy | str | None = None,
    ) -> SearchResult:
        """
        Route between two nodes, served from cache when possible.

        Unknown ids yield an empty path with inf distance; such results are
        not cached.
        """
        strategy = self._coerce_strategy(strategy)
        key = (origin, destination, strategy)

        with self._lock:
            self._total_requests += 1
            self._sync_cache_version()
            cached = self._cache.get(key)
            if cached is not None:
                self._cache_hits += 1
                logger.debug("Route cache hit %s -> %s (%s)", origin, destination, strategy.value)
                return cached
            version = self.graph.traffic_version

        if not self.graph.has_node(origin) or not self.graph.has_node(destination):
            return no_path("none")

        heuristic_kind = self.select_algorithm(origin, destination, strategy)
        if heuristic_kind is None:
            result = dijkstra_path(self.graph, origin, destination)
        else:
            result = astar_search(self.graph, origin, destination, get_heuristic(heuristic_kind))

        with self._lock:
            self._computed += 1
            self._total_compute_ns += result.compute_time_ns
            # A traffic update may have landed while computing; don't cache stale distances
            if version == self.graph.traffic_version == self._cache_version:
                self._cache.set(key, result)

        logger.debug(
            "Route %s -> %s via %s: distance=%s explored=%d",
            origin, destination, result.algorithm, result.distance, result.nodes_explored,
        )
        return result

    def distance(self, origin: int, destination: int, strategy: RouteStrategy | str | None = None) -> float:
        return self.route(origin, destination, strategy).distance

    def alternative_paths(
        self,
        origin: int,
        destination: int,
        count: int = 3,
        strategy: RouteStrategy | str | None = None,
    ) -> List[SearchResult]:
        """
        Primary route plus up to ``count - 1`` distinct alternates.

        After each route is found, every edge on it is penalised in both
        directions and the search is repeated. Reported distances are the
        real dynamic distances. Stops early when no new distinct route is
        found.
        """
        if count <= 0:
            return []

        primary = self.route(origin, destination, strategy)
        if not primary.found:
            return []

        results = [primary]
        seen = {primary.path}
        penalties: Dict[Tuple[int, int], float] = {}
        last = primary

        attempts = 0
        while len(results) < count and attempts < count * 2:
            attempts += 1
            for u, v in zip(last.path, last.path[1:]):
                penalties[(u, v)] = penalties.get((u, v), 0.0) + self.alternative_penalty
                penalties[(v, u)] = penalties.get((v, u), 0.0) + self.alternative_penalty

            candidate = dijkstra_path(self.graph, origin, destination, edge_penalties=penalties)
            if not candidate.found:
                break
            last = candidate
            if candidate.path in seen:
                continue
            seen.add(candidate.path)
            results.append(candidate)

        return results

    def all_pairs(self, use_traffic: bool = False) -> FloydWarshall:
        """Build an all-pairs snapshot of the current graph (O(V^3))."""
        return FloydWarshall(self.graph, use_traffic=use_traffic)

    # -----------------------------
    # Traffic
    # -----------------------------

    def update_traffic_conditions(self, multiplier_updates: Mapping[int, float]) -> Dict[int, float]:
        """
        Apply traffic multipliers and clear the whole cache in one step.

        Raises:
            ValueError: If any multiplier is negative; nothing is changed
        """
        with self._lock:
            applied = self.graph.update_traffic(multiplier_updates)
            dropped = len(self._cache)
            self._cache.clear()
            self._cache_version = self.graph.traffic_version

        logger.info(
            "Traffic updated on %d node(s); cleared %d cached route(s)", len(applied), dropped
        )
        return applied

    # -----------------------------
    # Cache Utilities
    # -----------------------------

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._cache_version = self.graph.traffic_version

    def _sync_cache_version(self) -> None:
        # Traffic may also change through graph.update_traffic directly
        if self._cache_version != self.graph.traffic_version:
            logger.debug("Traffic version moved to %d; clearing route cache", self.graph.traffic_version)
            self._cache.clear()
            self._cache_version = self.graph.traffic_version

    @property
    def cache(self) -> RouteCache:
        return self._cache

    def get_stats(self) -> RoutingStats:
        with self._lock:
            self._sync_cache_version()
            total = self._total_requests
            return RoutingStats(
                total_requests=total,
                cache_hits=self._cache_hits,
                cache_hit_rate=self._cache_hits / total if total else 0.0,
                avg_compute_time_ns=self._total_compute_ns / self._computed if self._computed else 0.0,
                cache_size=len(self._cache),
                cache_capacity=self._cache.capacity,
            )

    def _coerce_strategy(self, strategy: RouteStrategy | str | None) -> RouteStrategy:
        if strategy is None:
            return self.default_strategy
        if isinstance(strategy, RouteStrategy):
            return strategy
        try:
            return RouteStrategy(strategy.lower())
        except ValueError:
            available = ", ".join(s.value for s in RouteStrategy)
            raise ValueError(f"Unknown strategy '{strategy}'. Available: {available}") from None
