"""Protocol defining the rich-text engine capability.

The annotation core never talks to a concrete editor. Anything that can
report a selection, project its content to plain text, and apply/query
formatting attributes over ranges can back it. ``ContractDocument`` is the
pycrdt-backed implementation shipped with the application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractContextManager

    from contractmark.richtext.ranges import AttributeRun, TextRange


class RichTextEngine(Protocol):
    """Narrow capability surface consumed by the annotation core."""

    def selection(self) -> TextRange | None:
        """Return the current selection, or None when nothing is selected."""
        ...

    def set_selection(self, start: int | None, end: int | None) -> None:
        """Record the user's selection (None clears it)."""
        ...

    def plain_text(self) -> str:
        """Return the flattened, markup-free projection of the document."""
        ...

    def to_markup(self) -> str:
        """Return the document as HTML, highlight runs rendered as spans."""
        ...

    def runs(self) -> list[AttributeRun]:
        """Return every attribute run in document order."""
        ...

    def format(self, start: int, end: int, attrs: dict[str, Any]) -> None:
        """Set formatting attributes on ``[start, end)``; None removes one."""
        ...

    def transaction(self) -> AbstractContextManager[Any]:
        """Group mutations so observers see a single change."""
        ...

    def observe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call ``callback`` after every committed change.

        Returns:
            A callable that removes the subscription.
        """
        ...

    def insert(self, index: int, text: str) -> None:
        """Insert unformatted text at ``index``."""
        ...

    def delete(self, start: int, end: int) -> None:
        """Delete ``[start, end)``."""
        ...
