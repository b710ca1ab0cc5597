"""Hover listener reconciliation for rendered highlight elements.

Every document change re-renders the highlight spans, destroying the old
elements and their listeners' reason to exist. ``HoverBinder.reconcile()``
is run after each render: it detaches every listener from the previous
element set and attaches one to each element of the current set, so the
number of live hover listeners always equals the number of rendered spans.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from contractmark.events import ListenerSet

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from contractmark.models import Rect

logger = logging.getLogger(__name__)


class HighlightElement(Protocol):
    """A rendered highlight span, valid only until the next render."""

    comment: str

    def listen(self, callback: Callable[[Rect], None]) -> Callable[[], None]:
        """Call ``callback`` with the element's bounding box on pointer enter.

        Returns:
            A callable that detaches the listener.
        """
        ...


class RenderedHighlight:
    """Plain highlight element: a comment plus an enter-listener list.

    The page wraps its NiceGUI spans in this; tests drive it directly with
    ``enter()``.
    """

    def __init__(self, comment: str, text: str = "") -> None:
        self.comment = comment
        self.text = text
        self.listeners = ListenerSet("mouseenter")

    def listen(self, callback: Callable[[Rect], None]) -> Callable[[], None]:
        return self.listeners.add(callback)

    def enter(self, rect: Rect) -> None:
        """Dispatch a pointer-enter with the element's bounding box."""
        self.listeners.emit(rect)


class HoverBinder:
    """Keep exactly one hover listener on each currently rendered highlight."""

    def __init__(
        self, on_enter: Callable[[HighlightElement, Rect], None]
    ) -> None:
        self._on_enter = on_enter
        self._detachers: list[Callable[[], None]] = []

    @property
    def bound_count(self) -> int:
        return len(self._detachers)

    def reconcile(self, elements: Iterable[HighlightElement]) -> int:
        """Rebind to ``elements``, tearing down the previous set first.

        Returns:
            Number of elements now bound.
        """
        self.clear()
        for element in elements:
            self._detachers.append(element.listen(self._make_handler(element)))
        logger.debug("Hover listeners rebound to %d element(s)", len(self._detachers))
        return len(self._detachers)

    def clear(self) -> None:
        """Detach every listener this binder attached."""
        detachers, self._detachers = self._detachers, []
        for detach in detachers:
            detach()

    def _make_handler(self, element: HighlightElement) -> Callable[[Rect], None]:
        def _handler(rect: Rect) -> None:
            self._on_enter(element, rect)

        return _handler
