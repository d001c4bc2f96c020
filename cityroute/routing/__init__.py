"""Shortest-path engines and the cached routing service."""

from .heap import IndexedMinHeap

from .results import (
    SearchResult,
    no_path,
    reconstruct_path,
)

from .dijkstra import (
    ShortestPathTree,
    shortest_path_tree,
    dijkstra_path,
    path_distance,
)

from .astar import (
    # Search
    astar_search,
    AdaptiveAStar,

    # Heuristics
    Heuristic,
    HeuristicKind,
    HEURISTICS,
    get_heuristic,
    euclidean_heuristic,
    manhattan_heuristic,
    zero_heuristic,
)

from .floyd import (
    FloydWarshall,
    CoverageStats,
    all_pairs_distance,
)

from .service import (
    RoutingService,
    RouteStrategy,
    RouteCache,
    RoutingStats,
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_ASTAR_THRESHOLD,
)

__all__ = [
    "IndexedMinHeap",

    # Results
    "SearchResult",
    "no_path",
    "reconstruct_path",

    # Dijkstra
    "ShortestPathTree",
    "shortest_path_tree",
    "dijkstra_path",
    "path_distance",

    # A*
    "astar_search",
    "AdaptiveAStar",
    "Heuristic",
    "HeuristicKind",
    "HEURISTICS",
    "get_heuristic",
    "euclidean_heuristic",
    "manhattan_heuristic",
    "zero_heuristic",

    # All pairs
    "FloydWarshall",
    "CoverageStats",
    "all_pairs_distance",

    # Service
    "RoutingService",
    "RouteStrategy",
    "RouteCache",
    "RoutingStats",
    "DEFAULT_CACHE_CAPACITY",
    "DEFAULT_ASTAR_THRESHOLD",
]
