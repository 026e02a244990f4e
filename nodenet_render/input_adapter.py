"""
Pointer, touch and resize input for the node network.

Maps raw window coordinates into simulation space (surface-local, corrected
for the device pixel ratio) and tracks whether a pointer is present.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

import pygame

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
ResizeCallback = Callable[[float, float], object]


class InputAdapter:
    """
    Translate host input into simulation-space pointer positions.

    Window coordinates are physical pixels; simulation coordinates are
    logical units (physical / dpr) relative to the surface origin.

    Attributes:
        dpr: Device pixel ratio of the render surface
        origin: Top-left of the surface in window coordinates
        width, height: Logical surface dimensions
        pointer: Current pointer position, or None when absent
    """

    def __init__(
        self,
        dpr: float = 1.0,
        origin: Point = (0.0, 0.0),
        on_resize: Optional[ResizeCallback] = None,
    ):
        self.dpr = dpr if dpr and dpr > 0 else 1.0
        self.origin = origin
        self.on_resize = on_resize
        self.width = 0.0
        self.height = 0.0
        self.pointer: Optional[Point] = None

    # ----- coordinate mapping -----
    def map_client(self, client_x: float, client_y: float) -> Point:
        return ((client_x - self.origin[0]) / self.dpr, (client_y - self.origin[1]) / self.dpr)

    def map_touch(self, fx: float, fy: float) -> Point:
        """Map normalized (0..1) finger coordinates onto the logical surface."""
        return (fx * self.width, fy * self.height)

    # ----- pointer lifecycle -----
    def pointer_moved(self, client_x: float, client_y: float) -> Point:
        self.pointer = self.map_client(client_x, client_y)
        return self.pointer

    def touch_moved(self, fx: float, fy: float) -> Point:
        self.pointer = self.map_touch(fx, fy)
        return self.pointer

    def pointer_left(self) -> None:
        self.pointer = None

    touch_ended = pointer_left

    # ----- surface -----
    def resize(self, physical_width: float, physical_height: float, dpr: float | None = None) -> Point:
        """
        Recompute logical dimensions after a container resize.

        Invokes `on_resize(width, height)` so the owner can redistribute nodes.
        """
        if dpr is not None and dpr > 0:
            self.dpr = dpr
        self.width = max(0.0, physical_width / self.dpr)
        self.height = max(0.0, physical_height / self.dpr)
        logger.debug("Surface resized to %.0fx%.0f (dpr=%s)", self.width, self.height, self.dpr)
        if self.on_resize is not None:
            self.on_resize(self.width, self.height)
        return (self.width, self.height)

    # ----- pygame events -----
    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Apply a pygame event; returns True if the event was consumed.
        """
        if event.type == pygame.MOUSEMOTION:
            self.pointer_moved(*event.pos)
        elif event.type == pygame.WINDOWLEAVE:
            self.pointer_left()
        elif event.type == pygame.FINGERMOTION or event.type == pygame.FINGERDOWN:
            self.touch_moved(event.x, event.y)
        elif event.type == pygame.FINGERUP:
            self.touch_ended()
        elif event.type == pygame.VIDEORESIZE:
            self.resize(event.w, event.h)
        else:
            return False
        return True
