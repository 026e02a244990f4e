from __future__ import annotations

from typing import Callable, Dict, List

import pygame

Listener = Callable[[pygame.event.Event], object]


class EventDispatcher:
    """Routes pygame events to listeners registered per event type."""

    def __init__(self):
        self._listeners: Dict[int, List[Listener]] = {}

    def add_listener(self, event_type: int, listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def remove_listener(self, event_type: int, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            self._listeners.pop(event_type, None)

    def listener_count(self, event_type: int | None = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(v) for v in self._listeners.values())

    def dispatch(self, event: pygame.event.Event) -> int:
        listeners = list(self._listeners.get(event.type, []))
        for listener in listeners:
            listener(event)
        return len(listeners)
