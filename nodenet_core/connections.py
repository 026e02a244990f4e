"""
Connection lifecycle management.

Connections move through ``GROWING -> COMPLETED -> removed``:

- Progress advances every tick from elapsed time over duration; the renderer
  applies an ease-out curve to it.
- Once per ``connection_interval`` the manager evicts COMPLETED connections
  when the live count is at or above capacity (oldest first), then creates
  new GROWING connections among nearby node pairs up to the remaining budget.

GROWING connections are never evicted, and nothing returns to GROWING.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Tuple

import numpy as np

from .config import SimulationConfig
from .enums import ConnectionState
from .state import Connection, SimulationState, ease_out_quart

logger = logging.getLogger(__name__)

__all__ = [
    "ease_out_quart",
    "advance_connections",
    "evict_completed",
    "find_candidates",
    "create_connections",
    "ConnectionManager",
]


def advance_connections(state: SimulationState, now: float) -> int:
    """
    Advance the growth of every GROWING connection to time `now`.

    Progress never decreases, even if `now` moves backwards. A connection
    whose raw progress reaches 1 is marked COMPLETED with progress exactly 1.

    Returns:
        Number of connections that completed during this call.
    """
    completed = 0
    for conn in state.connections:
        if conn.state != ConnectionState.GROWING:
            continue
        if conn.duration <= 0:
            raw = 1.0
        else:
            raw = min(1.0, max(0.0, (now - conn.start_time) / conn.duration))
        conn.progress = max(conn.progress, raw)
        if raw >= 1.0:
            conn.progress = 1.0
            conn.state = ConnectionState.COMPLETED
            completed += 1
    return completed


def evict_completed(state: SimulationState, capacity: int, rng: random.Random) -> int:
    """
    Remove COMPLETED connections while the live count is at or above capacity.

    Oldest-by-start-time goes first; equal start times are ordered randomly.
    GROWING connections are left untouched even if that leaves the state at
    capacity.

    Returns:
        Number of evicted connections.
    """
    excess = len(state.connections) - capacity + 1
    if excess <= 0:
        return 0
    candidates = state.completed()
    rng.shuffle(candidates)
    candidates.sort(key=lambda c: c.start_time)
    return state.remove_connections(candidates[:excess])


def find_candidates(state: SimulationState, config: SimulationConfig) -> List[Tuple[int, int, float]]:
    """
    Find unconnected node pairs close enough to connect.

    A pair qualifies when its distance is below
    ``connection_distance * candidate_distance_factor``.

    Returns:
        List of ``(i, j, distance)`` with ``i < j``, ordered by index.
    """
    n = len(state.nodes)
    if n < 2:
        return []
    positions = np.array([(node.x, node.y) for node in state.nodes], dtype=float)
    ii, jj = np.triu_indices(n, k=1)
    distances = np.hypot(positions[jj, 0] - positions[ii, 0], positions[jj, 1] - positions[ii, 1])
    limit = config.connection_distance * config.candidate_distance_factor
    mask = distances < limit
    return [
        (int(i), int(j), float(d))
        for i, j, d in zip(ii[mask], jj[mask], distances[mask])
        if not state.has_connection(int(i), int(j))
    ]


def create_connections(
    state: SimulationState,
    now: float,
    config: SimulationConfig,
    rng: random.Random,
) -> List[Connection]:
    """
    Instantiate new GROWING connections among shuffled candidate pairs.

    At most ``min(max_new_per_tick, capacity - live)`` are created. Duration,
    strength and opacity are randomized within their configured bands.
    """
    budget = min(config.max_new_per_tick, config.connection_capacity - len(state.connections))
    if budget <= 0:
        return []

    candidates = find_candidates(state, config)
    rng.shuffle(candidates)

    created: List[Connection] = []
    for i, j, _distance in candidates[:budget]:
        duration = config.connection_duration * (1.0 - config.duration_jitter * rng.random())
        conn = Connection.between(
            i,
            j,
            start_time=now,
            duration=max(1.0, duration),
            strength=rng.uniform(*config.strength_range),
            opacity=rng.uniform(*config.opacity_range),
        )
        created.append(state.add_connection(conn))
    return created


class ConnectionManager:
    """
    Drives the connection lifecycle for one engine.

    Attributes:
        config: Current configuration snapshot
        rng: Random source shared with the engine
        last_run: Time of the last eviction/creation pass (None before the first)
        stats: Cumulative counters (created, evicted, completed, dropped)
    """

    def __init__(self, config: SimulationConfig, rng: random.Random | None = None):
        self.config = config
        self.rng = rng or random.Random()
        self.last_run: float | None = None
        self.stats: Dict[str, int] = {"created": 0, "evicted": 0, "completed": 0, "dropped": 0}

    def reset(self) -> None:
        self.last_run = None

    def due(self, now: float) -> bool:
        return self.last_run is None or now - self.last_run >= self.config.connection_interval

    def update(self, state: SimulationState, now: float) -> None:
        """
        Run one tick of the lifecycle.

        Progress advances every tick; eviction followed by creation runs at
        most once per ``connection_interval``.
        """
        self.stats["completed"] += advance_connections(state, now)
        if not self.due(now):
            return
        self.stats["evicted"] += evict_completed(state, self.config.connection_capacity, self.rng)
        created = create_connections(state, now, self.config, self.rng)
        self.stats["created"] += len(created)
        self.last_run = now

    def enforce_capacity(self, state: SimulationState, capacity: int) -> int:
        """
        Bring the live count down to `capacity` after a configuration change.

        COMPLETED connections go first (oldest first); if that is not enough,
        the most recently created GROWING connections are dropped.
        """
        excess = len(state.connections) - capacity
        if excess <= 0:
            return 0
        completed = sorted(state.completed(), key=lambda c: c.start_time)
        removed = state.remove_connections(completed[:excess])
        self.stats["evicted"] += removed
        excess -= removed
        if excess > 0:
            growing = sorted(state.growing(), key=lambda c: c.start_time, reverse=True)
            dropped = state.remove_connections(growing[:excess])
            self.stats["dropped"] += dropped
            removed += dropped
        logger.info("Capacity lowered to %d; removed %d connections", capacity, removed)
        return removed
