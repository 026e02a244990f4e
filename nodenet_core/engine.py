"""
Node Network Engine Implementation.

This module implements the per-tick simulation of the animated node network.
The engine owns a single `SimulationState` and manages:

- Batch creation of nodes across the surface (on start, resize, or node
  configuration changes)
- The connection lifecycle via `ConnectionManager`
- The force model and integration via `nodenet_core.forces`
- Configuration snapshots applied deterministically at tick boundaries

Configuration: all tunables live in `SimulationConfig` (`nodenet_core.config`).

Each tick runs these phases in order:
1. Configuration: apply a staged configuration snapshot, if any
2. Initialization: retry a deferred node batch once the surface has area
3. Lifecycle: drop dangling connections, advance growth, then (once per
   interval) evict completed connections before creating new ones
4. Forces: compute forces for every node, then integrate positions

Lifecycle runs before forces so a connection created this tick already
pulls on its endpoints; progress still advances before the frame is drawn.

Rendering happens outside the engine, after `step` returns, so each frame
always draws a self-consistent post-update state.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any, Dict, List, Optional, Tuple

from .config import SimulationConfig
from .connections import ConnectionManager
from .forces import apply_forces
from .state import Node, SimulationState

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# Fields whose change requires a fresh node batch
_NODE_FIELDS = ("node_count", "node_size", "node_speed", "cluster_size", "touch_mode", "touch_node_factor")


class Engine:
    """
    Main engine for simulating the node network.

    Attributes:
        config: Configuration snapshot in effect for the current tick
        state: Nodes and connections owned by this engine
        tick: Number of completed ticks
        now: Timestamp (ms) of the most recent tick
        initialized: Whether a node batch exists for the current surface
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        width: float = 0.0,
        height: float = 0.0,
        seed: int | None = None,
    ):
        """
        Initialize the engine and, if the surface has area, its first node batch.

        Args:
            config: Simulation configuration (defaults are used when omitted)
            width, height: Logical surface dimensions
            seed: Optional seed for reproducible runs
        """
        self.config = (config or SimulationConfig()).normalized()
        self.rng = random.Random(seed)
        self.state = SimulationState(width, height)
        self.manager = ConnectionManager(self.config, self.rng)
        self.tick = 0
        self.now = 0.0
        self.initialized = False
        self._pending_config: SimulationConfig | None = None
        self._retry_at: float | None = None
        self.stats: Dict[str, Any] = {
            "initializations": 0,
            "deferred_initializations": 0,
            "pruned_connections": 0,
            "peak_connections": 0,
        }
        self.initialize(0.0)

    # ----- node batch -----
    def _spawn_nodes(self) -> List[Node]:
        """Create a node batch spread over a 3x3 grid of surface regions."""
        cfg = self.config
        width, height = self.state.width, self.state.height
        count = cfg.effective_node_count
        clusters = cfg.cluster_count
        per_cluster = count / clusters
        region_w, region_h = width / 3.0, height / 3.0

        nodes = []
        for i in range(count):
            region = i % 9
            rx, ry = region % 3, region // 3
            nodes.append(
                Node(
                    x=min(width, rx * region_w + self.rng.random() * region_w),
                    y=min(height, ry * region_h + self.rng.random() * region_h),
                    vx=(self.rng.random() - 0.5) * cfg.node_speed * 0.5,
                    vy=(self.rng.random() - 0.5) * cfg.node_speed * 0.5,
                    radius=cfg.node_size,
                    phase=self.rng.random() * 2.0 * math.pi,
                    brightness=0.8 + self.rng.random() * 0.2,
                    mass=1.0 + self.rng.random() * 0.5,
                    cluster=min(clusters - 1, int(i // per_cluster)),
                )
            )
        return nodes

    def initialize(self, now: float | None = None) -> bool:
        """
        Replace the node batch for the current surface dimensions.

        A zero-area surface drops the current batch and defers creation by
        ``init_retry_ms`` instead of producing degenerate nodes.

        Returns:
            True if a new batch was created, False if deferred.
        """
        now = self.now if now is None else now
        if self.state.width <= 0 or self.state.height <= 0:
            self.initialized = False
            self.state.replace_nodes([])
            self._retry_at = now + self.config.init_retry_ms
            self.stats["deferred_initializations"] += 1
            logger.debug(
                "Surface %sx%s has no area; retrying at t=%.1f",
                self.state.width,
                self.state.height,
                self._retry_at,
            )
            return False

        self.state.replace_nodes(self._spawn_nodes())
        self.manager.reset()
        self.initialized = True
        self._retry_at = None
        self.stats["initializations"] += 1
        logger.info(
            "Initialized %d nodes in %d clusters on %.0fx%.0f surface",
            len(self.state.nodes),
            self.config.cluster_count,
            self.state.width,
            self.state.height,
        )
        return True

    def resize(self, width: float, height: float) -> bool:
        """Adopt new surface dimensions and redistribute a fresh node batch."""
        self.state.width = max(0.0, float(width))
        self.state.height = max(0.0, float(height))
        return self.initialize(self.now)

    # ----- configuration -----
    def update_config(self, config: SimulationConfig) -> None:
        """Stage a configuration snapshot; it takes effect at the next tick."""
        self._pending_config = config.normalized()

    def _apply_pending_config(self) -> None:
        if self._pending_config is None:
            return
        old, new = self.config, self._pending_config
        self._pending_config = None
        self.config = new
        self.manager.config = new

        if any(getattr(old, f) != getattr(new, f) for f in _NODE_FIELDS):
            logger.info("Node configuration changed; re-initializing")
            self.initialize(self.now)
        elif len(self.state.connections) > new.connection_capacity:
            self.manager.enforce_capacity(self.state, new.connection_capacity)

    # ----- simulation -----
    def step(self, now: float, pointer: Optional[Point] = None) -> Dict[str, Any]:
        """
        Advance the simulation by one tick at time `now` (ms).

        Args:
            now: Frame timestamp in milliseconds
            pointer: Pointer position in simulation space, or None when absent

        Returns:
            dict: Snapshot of the state after the tick
        """
        self.now = float(now)
        self._apply_pending_config()

        if not self.initialized and self._retry_at is not None and self.now >= self._retry_at:
            self.initialize(self.now)

        if self.initialized:
            self.stats["pruned_connections"] += self.state.prune_invalid()
            self.manager.update(self.state, self.now)
            self.state.recount_connections()
            apply_forces(self.state, pointer, self.config, self.rng)
            self.stats["peak_connections"] = max(self.stats["peak_connections"], len(self.state.connections))

        self.tick += 1
        return self.snapshot()

    def run(
        self,
        ticks: int,
        frame_ms: float = 1000.0 / 60.0,
        pointer: Optional[Point] = None,
    ) -> Dict[str, Any]:
        """Run `ticks` headless ticks spaced `frame_ms` apart."""
        snap = self.snapshot()
        for _ in range(max(0, int(ticks))):
            snap = self.step(self.now + frame_ms, pointer)
        return snap

    def snapshot(self) -> Dict[str, Any]:
        """
        Create a snapshot of the current simulation state.

        Returns:
            dict: Dictionary containing:
                - 'tick': Number of completed ticks
                - 'now': Timestamp of the last tick (ms)
                - 'width', 'height': Surface dimensions
                - 'nodes': Per-node position, velocity, cluster and degree
                - 'connections': Per-connection pair, state and progress
                - 'stats': Engine and lifecycle counters
        """
        return {
            "tick": self.tick,
            "now": self.now,
            "width": self.state.width,
            "height": self.state.height,
            "nodes": [
                {
                    "x": n.x,
                    "y": n.y,
                    "vx": n.vx,
                    "vy": n.vy,
                    "cluster": n.cluster,
                    "connections": n.connections,
                }
                for n in self.state.nodes
            ],
            "connections": [
                {
                    "from": c.from_node,
                    "to": c.to_node,
                    "state": c.state.name,
                    "progress": c.progress,
                    "strength": c.strength,
                }
                for c in self.state.connections
            ],
            "stats": {**self.stats, **{f"connections_{k}": v for k, v in self.manager.stats.items()}},
        }
