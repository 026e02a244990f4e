from __future__ import annotations

import logging

import pygame

from nodenet_core.config import SimulationConfig
from nodenet_core.engine import Engine

from nodenet_render.input_adapter import InputAdapter
from nodenet_render.renderer import Renderer
from nodenet_render.runner.events import EventDispatcher
from nodenet_render.runner.loop import EngineLoop
from nodenet_render.runner.scheduler import FrameScheduler

logger = logging.getLogger(__name__)


def run_window(
    config: SimulationConfig | None = None,
    width: int = 960,
    height: int = 600,
    dpr: float = 1.0,
    fps: int = 60,
    seed: int | None = None,
    max_frames: int | None = None,
    title: str = "nodenet",
) -> Engine:
    """
    Open a resizable pygame window and animate the network until closed.

    Args:
        config: Simulation configuration
        width, height: Initial logical window size
        dpr: Device pixel ratio; the window is created at ``size * dpr`` pixels
        fps: Target frame rate
        seed: Optional seed for reproducible runs
        max_frames: Stop automatically after this many frames
        title: Window caption

    Returns:
        The engine, for inspection after the window closes.
    """
    config = (config or SimulationConfig()).normalized()
    pygame.init()
    try:
        pygame.display.set_caption(title)
        surface = pygame.display.set_mode((int(width * dpr), int(height * dpr)), pygame.RESIZABLE)

        engine = Engine(config, seed=seed)
        adapter = InputAdapter(dpr=dpr, on_resize=engine.resize)
        adapter.resize(*surface.get_size())

        scheduler = FrameScheduler(fps)
        dispatcher = EventDispatcher()
        loop = EngineLoop(engine, Renderer(config), adapter, surface, scheduler, dispatcher)

        def refresh_surface(_event):
            loop.surface = pygame.display.get_surface()

        dispatcher.add_listener(pygame.VIDEORESIZE, refresh_surface)
        loop.start()
        logger.info("Window opened at %dx%d (dpr=%s)", width, height, dpr)

        try:
            while loop.running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE):
                        loop.stop()
                        break
                    dispatcher.dispatch(event)
                if not loop.running:
                    break
                scheduler.run_pending(float(pygame.time.get_ticks()))
                pygame.display.flip()
                scheduler.wait_frame()
                if max_frames is not None and loop.frames >= max_frames:
                    loop.stop()
        finally:
            loop.stop()
            dispatcher.remove_listener(pygame.VIDEORESIZE, refresh_surface)
        return engine
    finally:
        pygame.quit()
