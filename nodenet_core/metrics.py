"""
Metrics utilities for node network simulations.

This module provides read-only summaries of a `SimulationState` and
convenience readers for the counters an `Engine` records:

- kinetic energy and speed statistics of the node batch
- live connection counts by lifecycle state
- cluster sizes
- connection churn (created / evicted / completed / dropped)
"""

from __future__ import annotations

from collections import Counter
from typing import Dict

from .state import SimulationState


def kinetic_energy(state: SimulationState) -> float:
    """Sum of ``0.5 * m * |v|^2`` over all nodes."""
    return float(sum(0.5 * n.mass * (n.vx * n.vx + n.vy * n.vy) for n in state.nodes))


def mean_speed(state: SimulationState) -> float:
    if not state.nodes:
        return 0.0
    return float(sum(n.speed for n in state.nodes) / len(state.nodes))


def max_speed(state: SimulationState) -> float:
    return float(max((n.speed for n in state.nodes), default=0.0))


def connection_counts(state: SimulationState) -> Dict[str, int]:
    growing = len(state.growing())
    return {
        "growing": growing,
        "completed": len(state.connections) - growing,
        "total": len(state.connections),
    }


def cluster_sizes(state: SimulationState) -> Dict[int, int]:
    return dict(sorted(Counter(n.cluster for n in state.nodes).items()))


def connection_churn(engine) -> Dict[str, int]:
    """Return the lifecycle counters recorded by the engine's connection manager."""
    return dict(engine.manager.stats)


def summarize(engine) -> Dict[str, object]:
    """Compact summary used by the CLI."""
    state = engine.state
    return {
        "tick": engine.tick,
        "nodes": len(state.nodes),
        "connections": connection_counts(state),
        "churn": connection_churn(engine),
        "kinetic_energy": kinetic_energy(state),
        "mean_speed": mean_speed(state),
        "max_speed": max_speed(state),
        "clusters": cluster_sizes(state),
    }
