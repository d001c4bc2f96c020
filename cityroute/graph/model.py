"""
City graph model with per-node traffic multipliers.

The graph is logically undirected but each road is stored as two directed
edge records, one per direction. Edge costs are read from node state at
query time:

    dynamic_weight = edge.base_weight * source_node.traffic_multiplier

Nodes are created once when the map is loaded and never removed; only the
traffic multiplier mutates, and only through ``update_traffic``.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Tuple


logger = logging.getLogger(__name__)


DEFAULT_ROAD_TYPE = "street"


@dataclass(frozen=True)
class Edge:
    """Directed half of a road."""

    destination: int
    base_weight: float
    road_type: str = DEFAULT_ROAD_TYPE

    def dynamic_weight(self, traffic_multiplier: float) -> float:
        return self.base_weight * traffic_multiplier


@dataclass
class Node:
    """
    Intersection or location in the city.

    Attributes:
        node_id: Stable integer identifier
        x: Horizontal coordinate (heuristics only)
        y: Vertical coordinate (heuristics only)
        traffic_multiplier: Scales the cost of every edge leaving this node
        edges: Outgoing edge records in insertion order
    """
    node_id: int
    x: float
    y: float
    traffic_multiplier: float = 1.0
    edges: List[Edge] = field(default_factory=list)

    def euclidean_distance(self, other: "Node") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def manhattan_distance(self, other: "Node") -> float:
        return abs(self.x - other.x) + abs(self.y - other.y)


class CityGraph:
    """
    Weighted undirected multigraph over city nodes.

    Traffic updates are applied under a lock and bump ``traffic_version`` so
    consumers holding derived data (route caches, learned heuristics) can
    detect that their data is stale.
    """

    def __init__(self):
        self._nodes: Dict[int, Node] = {}
        self._lock = threading.Lock()
        self._traffic_version = 0
        self._edge_count = 0

    # -----------------------------
    # Construction
    # -----------------------------

    def add_node(self, node_id: int, x: float, y: float, traffic_multiplier: float = 1.0) -> Node:
        """
        Add a node to the graph.

        Raises:
            ValueError: If the id is already present or the multiplier is negative
        """
        if node_id in self._nodes:
            raise ValueError(f"Node {node_id} already exists")
        _check_multiplier(node_id, traffic_multiplier)

        node = Node(node_id=node_id, x=float(x), y=float(y), traffic_multiplier=float(traffic_multiplier))
        self._nodes[node_id] = node
        return node

    def add_edge(self, a: int, b: int, weight: float, road_type: str = DEFAULT_ROAD_TYPE) -> None:
        """
        Add a road between ``a`` and ``b``, stored once per direction.

        Raises:
            KeyError: If either endpoint is not in the graph
            ValueError: If the weight is negative or not finite
        """
        for endpoint in (a, b):
            if endpoint not in self._nodes:
                raise KeyError(f"Edge endpoint {endpoint} is not a node in the graph")
        if not math.isfinite(weight) or weight < 0:
            raise ValueError(f"Edge {a}-{b} has invalid weight {weight!r}; weights must be finite and >= 0")

        self._nodes[a].edges.append(Edge(b, float(weight), road_type))
        self._nodes[b].edges.append(Edge(a, float(weight), road_type))
        self._edge_count += 1

    # -----------------------------
    # Lookup
    # -----------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def has_node(self, node_id: int) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: int) -> Node | None:
        return self._nodes.get(node_id)

    def node(self, node_id: int) -> Node:
        """Return the node, raising KeyError when absent."""
        return self._nodes[node_id]

    def node_ids(self) -> List[int]:
        return list(self._nodes)

    def neighbors(self, node_id: int) -> List[Edge]:
        node = self._nodes.get(node_id)
        return list(node.edges) if node is not None else []

    def edge_count(self) -> int:
        """Number of undirected roads (each stored as two records)."""
        return self._edge_count

    def edges(self) -> Iterator[Tuple[int, Edge]]:
        """Yield every directed edge record as ``(source_id, edge)``."""
        for node in self._nodes.values():
            for edge in node.edges:
                yield node.node_id, edge

    def euclidean_distance(self, a: int, b: int) -> float:
        """Straight-line distance, ``inf`` if either id is unknown."""
        na, nb = self._nodes.get(a), self._nodes.get(b)
        if na is None or nb is None:
            return math.inf
        return na.euclidean_distance(nb)

    def manhattan_distance(self, a: int, b: int) -> float:
        na, nb = self._nodes.get(a), self._nodes.get(b)
        if na is None or nb is None:
            return math.inf
        return na.manhattan_distance(nb)

    def is_connected(self) -> bool:
        """True when every node is reachable from every other node."""
        if not self._nodes:
            return True

        start = next(iter(self._nodes))
        seen = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for edge in self._nodes[current].edges:
                if edge.destination not in seen:
                    seen.add(edge.destination)
                    queue.append(edge.destination)
        return len(seen) == len(self._nodes)

    # -----------------------------
    # Traffic
    # -----------------------------

    @property
    def traffic_version(self) -> int:
        return self._traffic_version

    def traffic_multiplier(self, node_id: int) -> float:
        return self._nodes[node_id].traffic_multiplier

    def update_traffic(self, multipliers: Mapping[int, float]) -> Dict[int, float]:
        """
        Apply new traffic multipliers.

        The whole update is validated before anything is written. Unknown
        node ids are skipped with a warning.

        Args:
            multipliers: Mapping of node id to new multiplier (>= 0)

        Returns:
            Mapping of the multipliers actually applied

        Raises:
            ValueError: If any multiplier is negative or not finite
        """
        for node_id, value in multipliers.items():
            _check_multiplier(node_id, value)

        applied: Dict[int, float] = {}
        with self._lock:
            for node_id, value in multipliers.items():
                node = self._nodes.get(node_id)
                if node is None:
                    logger.warning("Skipping traffic update for unknown node %s", node_id)
                    continue
                node.traffic_multiplier = float(value)
                applied[node_id] = float(value)
            if applied:
                self._traffic_version += 1
        return applied

    def __repr__(self) -> str:
        return f"CityGraph(nodes={len(self._nodes)}, roads={self._edge_count})"


def _check_multiplier(node_id: int, value: float) -> None:
    if not math.isfinite(value) or value < 0:
        raise ValueError(
            f"Traffic multiplier for node {node_id} must be finite and >= 0, got {value!r}"
        )
