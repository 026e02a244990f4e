"""
Per-frame orchestration of input, simulation and rendering.

`EngineLoop` runs one Input -> Engine -> Renderer pass per scheduled frame.
Stopping the loop cancels the pending frame request and detaches its input
listeners; a loop that is not stopped keeps rescheduling itself forever.
"""

from __future__ import annotations

import logging
from typing import Optional

import pygame

from nodenet_core.engine import Engine

from nodenet_render.input_adapter import InputAdapter
from nodenet_render.renderer import Renderer
from nodenet_render.runner.events import EventDispatcher
from nodenet_render.runner.scheduler import FrameScheduler

logger = logging.getLogger(__name__)

INPUT_EVENTS = (
    pygame.MOUSEMOTION,
    pygame.WINDOWLEAVE,
    pygame.FINGERDOWN,
    pygame.FINGERMOTION,
    pygame.FINGERUP,
    pygame.VIDEORESIZE,
)


class EngineLoop:
    """
    Drives an `Engine` and a `Renderer` from a `FrameScheduler`.

    Exceptions raised inside a frame are not caught here; they propagate to
    whatever runs the scheduler.

    Attributes:
        surface: Physical-pixel render target
        frames: Number of frames rendered since `start`
    """

    def __init__(
        self,
        engine: Engine,
        renderer: Renderer,
        adapter: InputAdapter,
        surface: pygame.Surface,
        scheduler: FrameScheduler,
        dispatcher: EventDispatcher,
    ):
        self.engine = engine
        self.renderer = renderer
        self.adapter = adapter
        self.surface = surface
        self.scheduler = scheduler
        self.dispatcher = dispatcher
        self.frames = 0
        self._handle: Optional[int] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        for event_type in INPUT_EVENTS:
            self.dispatcher.add_listener(event_type, self._on_input)
        self._running = True
        self._handle = self.scheduler.request_frame(self._frame)
        logger.debug("Engine loop started")

    def stop(self) -> None:
        """Cancel the pending frame and detach input listeners."""
        if not self._running:
            return
        self._running = False
        self.scheduler.cancel_frame(self._handle)
        self._handle = None
        for event_type in INPUT_EVENTS:
            self.dispatcher.remove_listener(event_type, self._on_input)
        logger.debug("Engine loop stopped after %d frames", self.frames)

    def _on_input(self, event: pygame.event.Event) -> None:
        self.adapter.handle_event(event)

    def _frame(self, now: float) -> None:
        self._handle = None
        pointer = self.adapter.pointer
        self.engine.step(now, pointer)
        self.renderer.draw(
            self.surface,
            self.engine.state,
            now,
            pointer=pointer,
            dpr=self.adapter.dpr,
            config=self.engine.config,
        )
        self.frames += 1
        if self._running:
            self._handle = self.scheduler.request_frame(self._frame)
