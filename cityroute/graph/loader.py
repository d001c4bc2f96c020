"""
Graph ingestion from loader-supplied records.

The core does not parse map files. A map loader hands over node and edge
records (plain dicts or pandas DataFrames); they are validated here and
turned into a ``CityGraph``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import pandas as pd
from pydantic import BaseModel, Field

from .model import CityGraph, DEFAULT_ROAD_TYPE


class NodeRecord(BaseModel):
    """One node row as supplied by a map loader."""

    node_id: int
    x: float
    y: float
    traffic_multiplier: float = Field(1.0, ge=0.0)


class EdgeRecord(BaseModel):
    """One undirected road as supplied by a map loader."""

    source: int
    target: int
    weight: float = Field(..., ge=0.0, allow_inf_nan=False)
    road_type: str = DEFAULT_ROAD_TYPE


def build_graph(
    nodes: Iterable[Mapping[str, Any]],
    edges: Iterable[Mapping[str, Any]],
) -> CityGraph:
    """
    Build a graph from node and edge records.

    Args:
        nodes: Records with node_id, x, y and optional traffic_multiplier
        edges: Records with source, target, weight and optional road_type

    Returns:
        Populated CityGraph

    Raises:
        pydantic.ValidationError: If a record is malformed
        KeyError: If an edge references a node that was not supplied
    """
    graph = CityGraph()
    for raw in nodes:
        record = NodeRecord.model_validate(dict(raw))
        graph.add_node(record.node_id, record.x, record.y, record.traffic_multiplier)
    for raw in edges:
        record = EdgeRecord.model_validate(dict(raw))
        graph.add_edge(record.source, record.target, record.weight, record.road_type)
    return graph


def graph_from_frames(nodes_df: pd.DataFrame, edges_df: pd.DataFrame) -> CityGraph:
    """
    Build a graph from DataFrames.

    ``nodes_df`` needs columns node_id, x, y; ``edges_df`` needs source,
    target, weight. Optional columns are traffic_multiplier and road_type.
    """
    node_rows = nodes_df.to_dict(orient="records")
    edge_rows = edges_df.to_dict(orient="records")

    # NaN in an optional column means "not supplied"
    node_rows = [{k: v for k, v in row.items() if not _is_missing(v)} for row in node_rows]
    edge_rows = [{k: v for k, v in row.items() if not _is_missing(v)} for row in edge_rows]
    return build_graph(node_rows, edge_rows)


def _is_missing(value: Any) -> bool:
    return not isinstance(value, str) and bool(pd.isna(value))
