"""
Unit tests for Node, Connection and SimulationState bookkeeping.

Covers the one-connection-per-pair rule, canonical endpoint ordering,
pruning of dangling connections, invariant validation, and NetworkX/GraphML
export.
"""

import os
import tempfile

import pytest

from nodenet_core.enums import ConnectionState
from nodenet_core.state import Connection, Node, SimulationState, ease_out_quart


def _state(*positions, width=400.0, height=300.0):
    return SimulationState(width, height, [Node(x, y) for x, y in positions])


class TestEaseOutQuart:
    def test_endpoints(self):
        assert ease_out_quart(0.0) == 0.0
        assert ease_out_quart(1.0) == 1.0

    def test_midpoint(self):
        assert ease_out_quart(0.5) == pytest.approx(0.9375)

    def test_input_is_clamped(self):
        assert ease_out_quart(-1.0) == 0.0
        assert ease_out_quart(2.0) == 1.0


class TestConnection:
    def test_between_orders_endpoints(self):
        conn = Connection.between(5, 2, start_time=0.0, duration=100.0)
        assert conn.pair == (2, 5)
        assert conn.state == ConnectionState.GROWING
        assert conn.progress == 0.0

    def test_self_connection_rejected(self):
        with pytest.raises(ValueError):
            Connection.between(3, 3, start_time=0.0, duration=100.0)

    def test_non_canonical_rejected(self):
        with pytest.raises(ValueError):
            Connection(4, 1, start_time=0.0, duration=100.0)

    def test_other_endpoint(self):
        conn = Connection(1, 4, start_time=0.0, duration=100.0)
        assert conn.other(1) == 4
        assert conn.other(4) == 1

    def test_eased_progress(self):
        conn = Connection(0, 1, start_time=0.0, duration=100.0, progress=0.5)
        assert conn.eased_progress == pytest.approx(0.9375)
        conn.state = ConnectionState.COMPLETED
        assert conn.eased_progress == 1.0


class TestConnectionBookkeeping:
    def test_add_and_lookup_is_order_independent(self):
        state = _state((0, 0), (10, 0), (20, 0))
        state.add_connection(Connection.between(2, 0, start_time=0.0, duration=10.0))
        assert state.has_connection(0, 2)
        assert state.has_connection(2, 0)
        assert not state.has_connection(0, 1)

    def test_duplicate_pair_rejected(self):
        state = _state((0, 0), (10, 0))
        state.add_connection(Connection.between(0, 1, start_time=0.0, duration=10.0))
        with pytest.raises(ValueError):
            state.add_connection(Connection.between(1, 0, start_time=5.0, duration=10.0))
        assert len(state.connections) == 1

    def test_missing_node_rejected(self):
        state = _state((0, 0), (10, 0))
        with pytest.raises(ValueError):
            state.add_connection(Connection(0, 7, start_time=0.0, duration=10.0))

    def test_remove_connection_frees_pair(self):
        state = _state((0, 0), (10, 0))
        conn = state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        state.remove_connection(conn)
        assert not state.has_connection(0, 1)
        state.add_connection(Connection(0, 1, start_time=1.0, duration=10.0))
        assert len(state.connections) == 1

    def test_remove_connections_returns_count(self):
        state = _state((0, 0), (10, 0), (20, 0))
        a = state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        b = state.add_connection(Connection(1, 2, start_time=0.0, duration=10.0))
        assert state.remove_connections([a, b]) == 2
        assert state.connections == []
        assert state.remove_connections([]) == 0

    def test_growing_and_completed_partitions(self):
        state = _state((0, 0), (10, 0), (20, 0))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        state.add_connection(
            Connection(1, 2, start_time=0.0, duration=10.0, state=ConnectionState.COMPLETED, progress=1.0)
        )
        assert [c.pair for c in state.growing()] == [(0, 1)]
        assert [c.pair for c in state.completed()] == [(1, 2)]
        assert {c.pair for c in state.connections_for(1)} == {(0, 1), (1, 2)}

    def test_prune_invalid_drops_dangling(self):
        state = _state((0, 0), (10, 0), (20, 0), (30, 0))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        state.add_connection(Connection(1, 3, start_time=0.0, duration=10.0))
        state.nodes = state.nodes[:2]
        assert state.prune_invalid() == 1
        assert [c.pair for c in state.connections] == [(0, 1)]
        assert not state.has_connection(1, 3)

    def test_recount_connections(self):
        state = _state((0, 0), (10, 0), (20, 0))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        state.add_connection(Connection(0, 2, start_time=0.0, duration=10.0))
        state.recount_connections()
        assert [n.connections for n in state.nodes] == [2, 1, 1]

    def test_replace_nodes_clears_connections(self):
        state = _state((0, 0), (10, 0))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        state.replace_nodes([Node(1, 1)], width=50, height=60)
        assert state.connections == []
        assert not state.has_connection(0, 1)
        assert (state.width, state.height) == (50.0, 60.0)

    def test_clone_is_independent(self):
        state = _state((0, 0), (10, 0))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        copy = state.clone()
        copy.nodes[0].x = 99.0
        copy.connections[0].progress = 0.7
        assert state.nodes[0].x == 0.0
        assert state.connections[0].progress == 0.0


class TestValidateInvariants:
    def test_clean_state(self):
        state = _state((0, 0), (400, 300))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        assert state.is_valid(capacity=1)

    def test_detects_out_of_bounds(self):
        state = _state((-1, 0), (10, 500))
        issues = state.validate_invariants()
        assert len(issues["bounds"]) == 2

    def test_detects_capacity_overflow(self):
        state = _state((0, 0), (10, 0), (20, 0))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        state.add_connection(Connection(1, 2, start_time=0.0, duration=10.0))
        issues = state.validate_invariants(capacity=1)
        assert issues["capacity"]
        assert not state.is_valid(capacity=1)

    def test_detects_completed_without_full_progress(self):
        state = _state((0, 0), (10, 0))
        conn = state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        conn.state = ConnectionState.COMPLETED
        assert state.validate_invariants()["progress"]


class TestGraphExport:
    def test_to_networkx(self):
        state = _state((0, 0), (10, 0), (20, 5))
        state.nodes[2].cluster = 1
        state.add_connection(Connection(0, 2, start_time=3.0, duration=10.0, strength=0.7))
        G = state.to_networkx()
        assert G.number_of_nodes() == 3
        assert G.number_of_edges() == 1
        assert G.nodes[2]["cluster"] == 1
        assert G.nodes[2]["y"] == 5.0
        assert G.edges[0, 2]["state"] == "GROWING"
        assert G.edges[0, 2]["strength"] == pytest.approx(0.7)

    def test_export_graphml(self):
        state = _state((0, 0), (10, 0))
        state.add_connection(Connection(0, 1, start_time=0.0, duration=10.0))
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "net.graphml")
            state.export_graphml(path)
            assert os.path.getsize(path) > 0
