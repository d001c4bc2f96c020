"""
cityroute: traffic-aware routing and optimal unit dispatch over a city graph.

Usage:
    from cityroute import build_graph, RoutingService, solve_assignment

    graph = build_graph(nodes, edges)
    router = RoutingService(graph)
    result = router.route(0, 42, "fastest")
    router.update_traffic_conditions({7: 2.5})
"""

from .graph import CityGraph, build_graph, graph_from_frames
from .routing import (
    RoutingService,
    RouteStrategy,
    SearchResult,
    FloydWarshall,
    all_pairs_distance,
)
from .assignment import (
    Assignment,
    solve_assignment,
    assign_units_to_tasks,
)

__version__ = "0.1.0"

__all__ = [
    "CityGraph",
    "build_graph",
    "graph_from_frames",
    "RoutingService",
    "RouteStrategy",
    "SearchResult",
    "FloydWarshall",
    "all_pairs_distance",
    "Assignment",
    "solve_assignment",
    "assign_units_to_tasks",
]
