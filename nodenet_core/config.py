"""
Configuration objects for the node network engine.

Exposes every tunable constant of the simulation (node batch, force model,
connection lifecycle, rendering, theme) so variants are expressed as data
rather than edits to the core logic.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields, replace
from typing import Tuple

from .themes import DEFAULT_THEME, Theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Snapshot of all tunables for one simulation run.

    Instances are immutable; the engine applies a new snapshot at the next tick
    boundary (see `Engine.update_config`). Out-of-range values are repaired by
    `normalized()` rather than rejected.
    """

    # Node batch
    node_count: int = 30
    node_size: float = 4.0
    node_speed: float = 0.5
    cluster_size: int = 5
    touch_mode: bool = False
    touch_node_factor: float = 0.6

    # Connections
    connection_capacity: int = 300
    connection_distance: float = 200.0
    connection_duration: float = 800.0  # ms
    connection_interval: float = 100.0  # ms
    connection_opacity: float = 50.0  # percent, 0..100
    line_thickness: float = 2.0

    # Pointer
    mouse_radius: float = 200.0
    mouse_force: float = 0.05

    # Force coefficients
    cluster_force: float = 0.01
    repulsion_force: float = 0.03
    connection_strength: float = 0.02

    # Physics
    damping: float = 0.95
    restitution: float = 0.8
    max_velocity: float = 3.0
    jitter: float = 0.02
    cluster_min_distance: float = 100.0
    cluster_max_distance: float = 300.0
    repulsion_distance: float = 100.0
    phase_step: float = 0.02

    # Lifecycle
    candidate_distance_factor: float = 3.0
    max_new_per_tick: int = 20
    duration_jitter: float = 0.5
    strength_range: Tuple[float, float] = (0.5, 1.0)
    opacity_range: Tuple[float, float] = (0.5, 1.0)

    # Rendering
    pulse_speed: float = 0.002
    pulse_amplitude: float = 0.2
    pulse_base: float = 0.8
    connection_size_factor: float = 0.1
    gradient_segments: int = 8
    overlay_enabled: bool = False
    overlay_radius: float = 300.0
    overlay_intensity: float = 0.35

    # Initialization
    init_retry_ms: float = 50.0

    theme: Theme = field(default=DEFAULT_THEME)

    @property
    def effective_node_count(self) -> int:
        """Node count after the touch-device reduction."""
        if self.touch_mode:
            return max(1, int(math.floor(self.node_count * self.touch_node_factor)))
        return max(1, int(self.node_count))

    @property
    def cluster_count(self) -> int:
        return max(1, math.ceil(self.effective_node_count / max(1, self.cluster_size)))

    def with_overrides(self, **overrides) -> "SimulationConfig":
        """Return a normalized copy with the given fields replaced."""
        return replace(self, **overrides).normalized()

    def normalized(self) -> "SimulationConfig":
        """
        Return a copy with invalid values clamped to the nearest viable value.

        Every adjustment is logged at WARNING level. Never raises for
        out-of-range numbers.
        """
        fixes = {}

        def at_least(name: str, minimum, cast=float):
            value = getattr(self, name)
            if value is None or value != value or value < minimum:  # NaN fails value == value
                fixes[name] = cast(minimum)

        def positive(name: str, fallback: float):
            value = getattr(self, name)
            if value is None or value != value or value <= 0:
                fixes[name] = fallback

        def within(name: str, lo: float, hi: float):
            value = getattr(self, name)
            if value is None or value != value or not lo <= value <= hi:
                fixes[name] = lo if value is None or value != value else max(lo, min(hi, value))

        at_least("node_count", 1, int)
        at_least("cluster_size", 1, int)
        at_least("connection_capacity", 0, int)
        at_least("max_new_per_tick", 0, int)
        at_least("gradient_segments", 1, int)
        positive("node_size", 1.0)
        positive("connection_distance", 1.0)
        positive("connection_duration", 1.0)
        positive("connection_interval", 1.0)
        positive("line_thickness", 1.0)
        positive("max_velocity", 1.0)
        positive("candidate_distance_factor", 1.0)
        at_least("node_speed", 0.0)
        at_least("mouse_radius", 0.0)
        at_least("mouse_force", 0.0)
        at_least("cluster_force", 0.0)
        at_least("repulsion_force", 0.0)
        at_least("connection_strength", 0.0)
        at_least("jitter", 0.0)
        at_least("overlay_radius", 0.0)
        at_least("init_retry_ms", 0.0)
        within("connection_opacity", 0.0, 100.0)
        within("damping", 0.0, 1.0)
        within("restitution", 0.0, 1.0)
        within("duration_jitter", 0.0, 1.0)
        within("touch_node_factor", 0.0, 1.0)
        within("overlay_intensity", 0.0, 1.0)

        if self.cluster_max_distance <= self.cluster_min_distance:
            fixes["cluster_max_distance"] = self.cluster_min_distance + 1.0

        for name in ("strength_range", "opacity_range"):
            lo, hi = getattr(self, name)
            if lo > hi or lo < 0:
                fixes[name] = (max(0.0, min(lo, hi)), max(0.0, lo, hi))

        for name, value in fixes.items():
            logger.warning("Config %s=%r out of range; clamped to %r", name, getattr(self, name), value)

        return replace(self, **fixes) if fixes else self


CONFIG_FIELDS = tuple(f.name for f in fields(SimulationConfig))
