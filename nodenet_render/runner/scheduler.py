from __future__ import annotations

from typing import Callable, Dict

import pygame

FrameCallback = Callable[[float], None]


class FrameScheduler:
    """
    One-shot per-frame callbacks driven by the host loop.

    Callbacks requested during a frame run on the following frame, mirroring
    an animation-frame API. The host calls `run_pending(now)` once per frame
    and `wait_frame()` to hold the target frame rate.
    """

    def __init__(self, fps: int = 60):
        self.fps = fps
        self.clock = pygame.time.Clock()
        self._pending: Dict[int, FrameCallback] = {}
        self._next_handle = 1

    def request_frame(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int | None) -> None:
        if handle is not None:
            self._pending.pop(handle, None)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def run_pending(self, now: float) -> int:
        """Invoke every callback queued before this call; returns how many ran."""
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback(now)
        return len(due)

    def wait_frame(self) -> float:
        return self.clock.tick(self.fps)
