"""Detachable listener lists.

Every ``add()`` hands back its own detach callable, so whoever attached a
listener can remove exactly that listener on any exit path. Detaching twice
is harmless.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ListenerSet:
    """Ordered callbacks with per-listener detach handles."""

    __slots__ = ("_listeners", "_name")

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._listeners: list[Callable[..., Any]] = []

    def add(self, callback: Callable[..., Any]) -> Callable[[], None]:
        """Attach ``callback``; return a callable that detaches it."""
        self._listeners.append(callback)

        def detach() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                return

        return detach

    def emit(self, *args: Any) -> None:
        """Call every attached listener in attach order."""
        # Iterate over a snapshot -- listeners may detach themselves.
        for callback in list(self._listeners):
            callback(*args)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"ListenerSet({self._name!r}, {len(self._listeners)} attached)"
