"""
Rendering tests on offscreen pygame surfaces.

No window is opened: frames are drawn onto plain `pygame.Surface` objects and
inspected pixel by pixel.
"""

import math

import numpy as np
import pygame
import pytest

from nodenet_core.config import SimulationConfig
from nodenet_core.engine import Engine
from nodenet_core.enums import ConnectionState
from nodenet_core.state import Connection, Node, SimulationState
from nodenet_core.themes import Gradient, Theme, get_theme
from nodenet_render.renderer import Renderer, growth_endpoint, node_radius, node_shading, pulse_factor

BLACK = (0, 0, 0)


def _mono_config(**overrides):
    base = dict(theme=get_theme("highContrast"), connection_opacity=100.0, line_thickness=1.0)
    base.update(overrides)
    return SimulationConfig(**base)


def _rgb(surface, x, y):
    return tuple(surface.get_at((x, y)))[:3]


class TestHelpers:
    def test_pulse_factor_range(self):
        cfg = SimulationConfig()
        assert pulse_factor(0.0, 0.0, cfg) == pytest.approx(0.8)
        assert pulse_factor(0.0, math.pi / 2, cfg) == pytest.approx(1.0)
        assert pulse_factor(0.0, -math.pi / 2, cfg) == pytest.approx(0.6)

    def test_node_radius_grows_with_degree(self):
        cfg = SimulationConfig()
        assert node_radius(Node(0, 0, radius=4.0), 0.0, cfg) == pytest.approx(3.2)
        assert node_radius(Node(0, 0, radius=4.0, connections=5), 0.0, cfg) == pytest.approx(4.8)

    def test_node_shading_splits_alpha_and_lift(self):
        assert node_shading(0.5) == (0.5, 0.0)
        assert node_shading(1.0) == (1.0, 0.0)
        assert node_shading(1.5) == (1.0, 0.5)
        assert node_shading(3.0) == (1.0, 1.0)

    def test_growth_endpoint_uses_eased_progress(self):
        a, b = Node(0, 0), Node(100, 0)
        conn = Connection(0, 1, start_time=0.0, duration=10.0, progress=0.5)
        assert growth_endpoint(a, b, conn) == pytest.approx((93.75, 0.0))


class TestDraw:
    def test_background_fill(self):
        surface = pygame.Surface((40, 30))
        Renderer(SimulationConfig()).draw(surface, SimulationState(40, 30), 0.0)
        assert _rgb(surface, 5, 5) == (10, 25, 41)

    def test_node_drawn_at_position(self):
        surface = pygame.Surface((100, 100))
        state = SimulationState(100, 100, [Node(50, 50, radius=4.0)])
        Renderer(_mono_config()).draw(surface, state, 0.0)
        assert _rgb(surface, 50, 50) == (255, 255, 255)
        assert _rgb(surface, 10, 10) == BLACK

    def test_device_pixel_ratio_scales_coordinates(self):
        surface = pygame.Surface((200, 200))
        state = SimulationState(100, 100, [Node(50, 50, radius=4.0)])
        Renderer(_mono_config()).draw(surface, state, 0.0, dpr=2.0)
        assert _rgb(surface, 100, 100) == (255, 255, 255)
        assert _rgb(surface, 50, 50) == BLACK

    def test_zero_brightness_node_is_invisible(self):
        surface = pygame.Surface((100, 100))
        state = SimulationState(100, 100, [Node(50, 50, radius=4.0, brightness=0.0)])
        Renderer(_mono_config()).draw(surface, state, 0.0)
        assert _rgb(surface, 50, 50) == BLACK

    def test_growing_connection_is_partial(self):
        surface = pygame.Surface((200, 100))
        state = SimulationState(200, 100, [Node(10, 50), Node(190, 50)])
        state.add_connection(Connection(0, 1, start_time=0.0, duration=100.0, progress=0.5))
        Renderer(_mono_config()).draw(surface, state, 0.0)
        assert _rgb(surface, 100, 50) != BLACK
        assert _rgb(surface, 183, 50) == BLACK

    def test_completed_connection_spans_both_nodes(self):
        surface = pygame.Surface((200, 100))
        state = SimulationState(200, 100, [Node(10, 50), Node(190, 50)])
        state.add_connection(
            Connection(0, 1, start_time=0.0, duration=100.0, state=ConnectionState.COMPLETED, progress=1.0)
        )
        Renderer(_mono_config()).draw(surface, state, 0.0)
        assert _rgb(surface, 183, 50) == (255, 255, 255)

    def test_gradient_connection_runs_start_to_end(self):
        theme = Theme("#000000", "#ffffff", Gradient("#ff0000", "#0000ff"), "rgba(255, 255, 255, 0.5)")
        surface = pygame.Surface((200, 100))
        state = SimulationState(200, 100, [Node(10, 50), Node(190, 50)])
        state.add_connection(
            Connection(0, 1, start_time=0.0, duration=100.0, state=ConnectionState.COMPLETED, progress=1.0)
        )
        Renderer(_mono_config(theme=theme)).draw(surface, state, 0.0)
        r0, _, b0 = _rgb(surface, 20, 50)
        r1, _, b1 = _rgb(surface, 180, 50)
        assert r0 > b0
        assert b1 > r1

    def test_gradient_node_fill(self):
        theme = Theme("#000000", {"from": "#ffffff", "to": "#ff0000"}, "#ffffff", "#ffffff")
        surface = pygame.Surface((100, 100))
        state = SimulationState(100, 100, [Node(50, 50, radius=8.0)])
        Renderer(_mono_config(theme=theme)).draw(surface, state, 0.0)
        assert _rgb(surface, 50, 50) != BLACK

    def test_overlay_only_brightens(self):
        state = SimulationState(100, 100)
        plain, glowing = pygame.Surface((100, 100)), pygame.Surface((100, 100))
        Renderer(SimulationConfig()).draw(plain, state, 0.0)
        Renderer(SimulationConfig(overlay_enabled=True)).draw(glowing, state, 0.0)
        a = pygame.surfarray.array3d(plain).astype(int)
        b = pygame.surfarray.array3d(glowing).astype(int)
        assert np.all(b >= a)
        assert b[50, 50].sum() > a[50, 50].sum()

    def test_overlay_follows_pointer(self):
        state = SimulationState(200, 100)
        surface = pygame.Surface((200, 100))
        cfg = SimulationConfig(overlay_enabled=True, overlay_radius=50.0)
        Renderer(cfg).draw(surface, state, 0.0, pointer=(20.0, 50.0))
        pixels = pygame.surfarray.array3d(surface).astype(int)
        assert pixels[20, 50].sum() > pixels[180, 50].sum()

    def test_config_argument_overrides_default(self):
        surface = pygame.Surface((20, 20))
        renderer = Renderer(SimulationConfig())
        renderer.draw(surface, SimulationState(20, 20), 0.0, config=_mono_config())
        assert _rgb(surface, 1, 1) == BLACK


class TestIdempotence:
    def test_same_state_same_pixels(self):
        engine = Engine(SimulationConfig(overlay_enabled=True), 240, 160, seed=3)
        engine.run(45)
        before = engine.snapshot()

        renderer = Renderer(engine.config)
        first, second = pygame.Surface((240, 160)), pygame.Surface((240, 160))
        renderer.draw(first, engine.state, engine.now, pointer=(120.0, 80.0))
        renderer.draw(second, engine.state, engine.now, pointer=(120.0, 80.0))

        assert np.array_equal(pygame.surfarray.array3d(first), pygame.surfarray.array3d(second))
        assert engine.snapshot() == before


class TestNodeBrightness:
    @pytest.mark.parametrize(
        "brightness,expected",
        [(1.0, (255, 0, 0)), (1.5, (255, 128, 128)), (2.0, (255, 255, 255))],
    )
    def test_brightness_above_one_lifts_toward_white(self, brightness, expected):
        theme = Theme("#000000", "#ff0000", "#ffffff", "#ffffff", node_brightness=brightness)
        surface = pygame.Surface((100, 100))
        state = SimulationState(100, 100, [Node(50, 50, radius=4.0)])
        Renderer(_mono_config(theme=theme)).draw(surface, state, 0.0)
        assert _rgb(surface, 50, 50) == expected

    def test_brightness_below_one_fades(self):
        theme = Theme("#000000", "#ff0000", "#ffffff", "#ffffff", node_brightness=0.5)
        surface = pygame.Surface((100, 100))
        state = SimulationState(100, 100, [Node(50, 50, radius=4.0)])
        Renderer(_mono_config(theme=theme)).draw(surface, state, 0.0)
        r, g, b = _rgb(surface, 50, 50)
        assert 100 < r < 160
        assert (g, b) == (0, 0)
