"""
Unit Tests for the Graph Module (cityroute/graph)

Tests node/edge construction, traffic updates, connectivity, and record ingestion.
"""

import math

import pandas as pd
import pytest
from pydantic import ValidationError

from cityroute.graph import CityGraph, Edge, build_graph, graph_from_frames


# ==============================================================================
# Construction
# ==============================================================================

class TestGraphConstruction:
    """Test adding nodes and roads."""

    def test_edge_stored_in_both_directions(self, diamond_graph):
        """Each road appears as one record per direction."""
        assert [e.destination for e in diamond_graph.neighbors(0)] == [1, 2]
        assert 0 in [e.destination for e in diamond_graph.neighbors(1)]
        assert diamond_graph.edge_count() == 4
        assert sum(1 for _ in diamond_graph.edges()) == 8

    def test_duplicate_node_rejected(self):
        """Node ids are unique."""
        graph = CityGraph()
        graph.add_node(1, 0, 0)
        with pytest.raises(ValueError):
            graph.add_node(1, 5, 5)

    def test_edge_to_unknown_node_rejected(self):
        """Both endpoints must exist."""
        graph = CityGraph()
        graph.add_node(1, 0, 0)
        with pytest.raises(KeyError):
            graph.add_edge(1, 2, 1.0)

    @pytest.mark.parametrize("weight", [-1.0, math.inf, math.nan])
    def test_invalid_weight_rejected(self, weight):
        """Weights must be finite and non-negative."""
        graph = CityGraph()
        graph.add_node(1, 0, 0)
        graph.add_node(2, 1, 0)
        with pytest.raises(ValueError):
            graph.add_edge(1, 2, weight)

    def test_parallel_roads_allowed(self):
        """Two roads between the same pair are kept as separate records."""
        graph = CityGraph()
        graph.add_node(1, 0, 0)
        graph.add_node(2, 1, 0)
        graph.add_edge(1, 2, 3.0, road_type="street")
        graph.add_edge(1, 2, 2.0, road_type="highway")
        assert len(graph.neighbors(1)) == 2
        assert {e.road_type for e in graph.neighbors(1)} == {"street", "highway"}

    def test_lookup(self, diamond_graph):
        """Membership and lookup helpers."""
        assert 3 in diamond_graph
        assert 99 not in diamond_graph
        assert diamond_graph.get_node(99) is None
        assert diamond_graph.neighbors(99) == []
        with pytest.raises(KeyError):
            diamond_graph.node(99)
        assert len(diamond_graph) == 4

    def test_straight_line_distances(self, diamond_graph):
        """Euclidean and Manhattan distance between nodes."""
        assert diamond_graph.euclidean_distance(0, 3) == pytest.approx(1.0)
        assert diamond_graph.manhattan_distance(1, 2) == pytest.approx(1.0)
        assert diamond_graph.euclidean_distance(0, 99) == math.inf

    def test_has_node(self, diamond_graph):
        """has_node agrees with membership."""
        assert diamond_graph.has_node(0)
        assert not diamond_graph.has_node(99)

    def test_connectivity(self, diamond_graph, disconnected_graph):
        """BFS connectivity check."""
        assert diamond_graph.is_connected()
        assert not disconnected_graph.is_connected()
        assert CityGraph().is_connected()


# ==============================================================================
# Traffic
# ==============================================================================

class TestTraffic:
    """Test traffic multiplier updates."""

    def test_dynamic_weight_uses_source_multiplier(self):
        """Edge cost scales with the multiplier of the node it leaves."""
        edge = Edge(destination=2, base_weight=4.0)
        assert edge.dynamic_weight(1.0) == 4.0
        assert edge.dynamic_weight(2.5) == 10.0

    def test_update_applies_and_bumps_version(self, diamond_graph):
        """Applied updates are returned and the version advances."""
        version = diamond_graph.traffic_version
        applied = diamond_graph.update_traffic({1: 3.0})
        assert applied == {1: 3.0}
        assert diamond_graph.traffic_multiplier(1) == 3.0
        assert diamond_graph.traffic_version == version + 1

    def test_unknown_nodes_skipped(self, diamond_graph):
        """Unknown ids are ignored; nothing applied means no version change."""
        version = diamond_graph.traffic_version
        assert diamond_graph.update_traffic({42: 2.0}) == {}
        assert diamond_graph.traffic_version == version

    def test_negative_multiplier_rejects_whole_update(self, diamond_graph):
        """Validation happens before any write."""
        with pytest.raises(ValueError):
            diamond_graph.update_traffic({1: 2.0, 2: -1.0})
        assert diamond_graph.traffic_multiplier(1) == 1.0

    def test_zero_multiplier_allowed(self, diamond_graph):
        """A free-flowing node may cost nothing to leave."""
        diamond_graph.update_traffic({0: 0.0})
        assert diamond_graph.traffic_multiplier(0) == 0.0


# ==============================================================================
# Ingestion
# ==============================================================================

class TestBuildGraph:
    """Test building graphs from loader records."""

    def test_build_from_dicts(self):
        """Plain dict records produce a graph."""
        graph = build_graph(
            nodes=[
                {"node_id": 1, "x": 0, "y": 0},
                {"node_id": 2, "x": 3, "y": 4, "traffic_multiplier": 1.5},
            ],
            edges=[{"source": 1, "target": 2, "weight": 5.0, "road_type": "avenue"}],
        )
        assert len(graph) == 2
        assert graph.traffic_multiplier(2) == 1.5
        assert graph.neighbors(1)[0].road_type == "avenue"

    def test_negative_weight_record_rejected(self):
        """Malformed records raise a pydantic ValidationError."""
        with pytest.raises(ValidationError):
            build_graph(
                nodes=[{"node_id": 1, "x": 0, "y": 0}, {"node_id": 2, "x": 1, "y": 0}],
                edges=[{"source": 1, "target": 2, "weight": -2.0}],
            )

    def test_missing_field_rejected(self):
        """Node records need coordinates."""
        with pytest.raises(ValidationError):
            build_graph(nodes=[{"node_id": 1, "x": 0}], edges=[])

    def test_edge_to_unknown_node(self):
        """Edges must reference supplied nodes."""
        with pytest.raises(KeyError):
            build_graph(
                nodes=[{"node_id": 1, "x": 0, "y": 0}],
                edges=[{"source": 1, "target": 9, "weight": 1.0}],
            )

    def test_graph_from_frames(self):
        """DataFrames with missing optional values fall back to defaults."""
        nodes_df = pd.DataFrame({
            "node_id": [1, 2, 3],
            "x": [0.0, 1.0, 2.0],
            "y": [0.0, 0.0, 0.0],
            "traffic_multiplier": [1.0, None, 2.0],
        })
        edges_df = pd.DataFrame({
            "source": [1, 2],
            "target": [2, 3],
            "weight": [1.0, 1.0],
        })
        graph = graph_from_frames(nodes_df, edges_df)
        assert len(graph) == 3
        assert graph.edge_count() == 2
        assert graph.traffic_multiplier(2) == 1.0
        assert graph.traffic_multiplier(3) == 2.0
