"""
Frame renderer for the node network.

Draws one frame of a `SimulationState` onto a pygame surface:

1. Clear with the theme background
2. Completed connections (full segments, steady opacity)
3. Growing connections (partial segments up to the eased point)
4. Nodes (pulsing filled circles sized by live connection count)
5. Optional radial overlay, blended additively

Logical coordinates are scaled by the device pixel ratio. The renderer only
reads simulation data; its sole internal state is a cache of scratch layers.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Tuple

import numpy as np
import pygame

from nodenet_core.colors import clamp, interpolate_rgb, parse_alpha, parse_color
from nodenet_core.config import SimulationConfig
from nodenet_core.enums import ColorKind
from nodenet_core.state import Connection, Node, SimulationState
from nodenet_core.themes import ColorSpec, Theme

Point = Tuple[float, float]


def pulse_factor(now: float, phase: float, config: SimulationConfig) -> float:
    return math.sin(now * config.pulse_speed + phase) * config.pulse_amplitude + config.pulse_base


def node_radius(node: Node, now: float, config: SimulationConfig) -> float:
    """Draw radius: base size grown by degree and modulated by the pulse."""
    size = node.radius * (1.0 + node.connections * config.connection_size_factor)
    return max(0.0, size * pulse_factor(now, node.phase, config))


def growth_endpoint(a: Node, b: Node, conn: Connection) -> Point:
    t = conn.eased_progress
    return (a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def node_shading(level: float) -> Tuple[float, float]:
    """
    Split a 0..2 brightness level into (alpha, lift).

    Up to 1 the level fades the node in; above 1 the extra amount lifts its
    color toward white.
    """
    return clamp(level, 0.0, 1.0), clamp(level - 1.0, 0.0, 1.0)


def lift(rgb, amount: float):
    return interpolate_rgb(rgb, (255, 255, 255), amount) if amount > 0 else rgb


class Renderer:
    """
    Draws simulation state onto pygame surfaces.

    Attributes:
        config: Default configuration snapshot (theme, opacity, pulse settings)
    """

    def __init__(self, config: SimulationConfig | None = None):
        self.config = config or SimulationConfig()
        self._layers: Dict[Tuple[int, int], pygame.Surface] = {}

    def _layer(self, size: Tuple[int, int]) -> pygame.Surface:
        layer = self._layers.get(size)
        if layer is None:
            self._layers.clear()
            layer = pygame.Surface(size, pygame.SRCALPHA, 32)
            self._layers[size] = layer
        layer.fill((0, 0, 0, 0))
        return layer

    # ----- frame -----
    def draw(
        self,
        surface: pygame.Surface,
        state: SimulationState,
        now: float,
        pointer: Optional[Point] = None,
        dpr: float = 1.0,
        config: SimulationConfig | None = None,
    ) -> None:
        """
        Render one frame of `state` at time `now` onto `surface`.

        Args:
            surface: Target surface sized in physical pixels
            state: Simulation state to draw (read only)
            now: Frame timestamp in ms, drives the node pulse
            pointer: Pointer position in logical units, centers the overlay
            dpr: Device pixel ratio applied to all logical coordinates
            config: Configuration snapshot for this frame (defaults to
                `self.config`)
        """
        cfg = config or self.config
        theme = cfg.theme
        surface.fill(parse_color(theme.background))

        layer = self._layer(surface.get_size())
        self.draw_connections(layer, state, cfg, dpr)
        surface.blit(layer, (0, 0))

        layer = self._layer(surface.get_size())
        self.draw_nodes(layer, state, now, cfg, dpr)
        surface.blit(layer, (0, 0))

        if cfg.overlay_enabled:
            self.draw_overlay(surface, theme, pointer, cfg, dpr)

    # ----- connections -----
    def draw_connections(
        self,
        target: pygame.Surface,
        state: SimulationState,
        cfg: SimulationConfig,
        dpr: float,
    ) -> None:
        spec = cfg.theme.connection_color
        width = max(1, int(round(cfg.line_thickness * dpr)))
        base_opacity = cfg.connection_opacity / 100.0
        nodes = state.nodes

        # Completed first so growing lines draw on top
        for conn in state.completed():
            a, b = nodes[conn.from_node], nodes[conn.to_node]
            alpha = clamp(base_opacity * conn.opacity, 0.0, 1.0)
            self._stroke(target, spec, (a.x, a.y), (b.x, b.y), alpha, width, dpr, cfg.gradient_segments)

        for conn in state.growing():
            a, b = nodes[conn.from_node], nodes[conn.to_node]
            eased = conn.eased_progress
            if eased <= 0.0:
                continue
            alpha = clamp(base_opacity * conn.opacity * eased, 0.0, 1.0)
            self._stroke(target, spec, (a.x, a.y), growth_endpoint(a, b, conn), alpha, width, dpr, cfg.gradient_segments)

    def _stroke(
        self,
        target: pygame.Surface,
        spec: ColorSpec,
        start: Point,
        end: Point,
        alpha: float,
        width: int,
        dpr: float,
        segments: int,
    ) -> None:
        a255 = int(round(alpha * 255))
        if a255 <= 0:
            return
        p0 = (start[0] * dpr, start[1] * dpr)
        p1 = (end[0] * dpr, end[1] * dpr)

        if spec.kind == ColorKind.GRADIENT:
            c0, c1 = parse_color(spec.start), parse_color(spec.end)
            n = max(1, segments)
            for k in range(n):
                t0, t1 = k / n, (k + 1) / n
                q0 = (p0[0] + (p1[0] - p0[0]) * t0, p0[1] + (p1[1] - p0[1]) * t0)
                q1 = (p0[0] + (p1[0] - p0[0]) * t1, p0[1] + (p1[1] - p0[1]) * t1)
                rgb = interpolate_rgb(c0, c1, (t0 + t1) / 2.0)
                pygame.draw.line(target, (*rgb, a255), q0, q1, width)
        else:
            pygame.draw.line(target, (*parse_color(spec.color), a255), p0, p1, width)

    # ----- nodes -----
    def draw_nodes(
        self,
        target: pygame.Surface,
        state: SimulationState,
        now: float,
        cfg: SimulationConfig,
        dpr: float,
    ) -> None:
        spec = cfg.theme.node_color
        for node in state.nodes:
            radius = node_radius(node, now, cfg) * dpr
            if radius <= 0.0:
                continue
            alpha, boost = node_shading(node.brightness * cfg.theme.node_brightness)
            self._fill_circle(
                target, spec, (node.x * dpr, node.y * dpr), radius, alpha, cfg.gradient_segments, boost
            )

    def _fill_circle(
        self,
        target: pygame.Surface,
        spec: ColorSpec,
        center: Point,
        radius: float,
        alpha: float,
        segments: int,
        boost: float = 0.0,
    ) -> None:
        a255 = int(round(alpha * 255))
        if spec.kind == ColorKind.GRADIENT:
            inner, outer = lift(parse_color(spec.start), boost), lift(parse_color(spec.end), boost)
            n = max(1, segments)
            # Outermost ring first; each smaller disc overwrites the center
            for k in range(n):
                frac = 1.0 - k / n
                rgb = interpolate_rgb(inner, outer, frac)
                pygame.draw.circle(target, (*rgb, a255), center, max(1.0, radius * frac))
        else:
            pygame.draw.circle(target, (*lift(parse_color(spec.color), boost), a255), center, max(1.0, radius))

    # ----- overlay -----
    def draw_overlay(
        self,
        surface: pygame.Surface,
        theme: Theme,
        pointer: Optional[Point],
        cfg: SimulationConfig,
        dpr: float,
    ) -> None:
        """
        Add a radial glow in the theme pulse color.

        Centered on the pointer when present, otherwise on the surface center.
        Purely additive: it never darkens what is already drawn.
        """
        w, h = surface.get_size()
        radius = cfg.overlay_radius * dpr
        if w == 0 or h == 0 or radius <= 0:
            return
        if pointer is not None:
            cx, cy = pointer[0] * dpr, pointer[1] * dpr
        else:
            cx, cy = w / 2.0, h / 2.0

        xs = np.arange(w, dtype=float)[:, None]
        ys = np.arange(h, dtype=float)[None, :]
        falloff = np.clip(1.0 - np.hypot(xs - cx, ys - cy) / radius, 0.0, 1.0) ** 2
        strength = cfg.overlay_intensity * parse_alpha(theme.pulse_color, 0.5)
        rgb = np.array(parse_color(theme.pulse_color), dtype=float)
        glow = np.clip(falloff[..., None] * rgb * strength, 0, 255).astype(np.uint8)

        overlay = pygame.surfarray.make_surface(glow)
        surface.blit(overlay, (0, 0), special_flags=pygame.BLEND_RGB_ADD)
