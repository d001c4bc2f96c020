"""City graph model and ingestion."""

from .model import (
    CityGraph,
    Node,
    Edge,
    DEFAULT_ROAD_TYPE,
)

from .loader import (
    NodeRecord,
    EdgeRecord,
    build_graph,
    graph_from_frames,
)

__all__ = [
    # Model
    "CityGraph",
    "Node",
    "Edge",
    "DEFAULT_ROAD_TYPE",

    # Ingestion
    "NodeRecord",
    "EdgeRecord",
    "build_graph",
    "graph_from_frames",
]
