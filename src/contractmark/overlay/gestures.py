"""Window-level pointer events used while a drag or resize is in progress.

A fast drag can release the pointer outside the overlay, so gestures listen
on the whole window rather than on the element. ``PointerEvents`` is the
in-process dispatcher; the page feeds it from browser events.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

from contractmark.events import ListenerSet

if TYPE_CHECKING:
    from collections.abc import Callable


class PointerEvent(StrEnum):
    MOVE = "move"  # callback(pointer: Point, container_origin: Point)
    RELEASE = "release"  # callback()
    BLUR = "blur"  # callback()


class PointerEventSource(Protocol):
    """Something that can deliver window-level pointer events."""

    def add_listener(
        self, event: PointerEvent, callback: Callable[..., Any]
    ) -> Callable[[], None]:
        """Attach ``callback`` to ``event``; return a detach callable."""
        ...


class PointerEvents:
    """In-process pointer event dispatcher."""

    def __init__(self) -> None:
        self._listeners = {event: ListenerSet(str(event)) for event in PointerEvent}

    def add_listener(
        self, event: PointerEvent, callback: Callable[..., Any]
    ) -> Callable[[], None]:
        return self._listeners[event].add(callback)

    def dispatch(self, event: PointerEvent, *args: Any) -> None:
        self._listeners[event].emit(*args)

    def listener_count(self, event: PointerEvent | None = None) -> int:
        """Attached listeners for one event, or for all events."""
        if event is not None:
            return len(self._listeners[event])
        return sum(len(listeners) for listeners in self._listeners.values())
