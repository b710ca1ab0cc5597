"""pycrdt-backed contract document implementing the rich-text capability.

The document body is a single pycrdt ``Text``. Highlights are formatting
attributes on that text (``highlight`` marker plus ``comment`` payload), so
the CRDT's attribute runs are the attributed ranges the annotation core
works with. Every transaction fires the registered change observers once.

Offsets in this API are Python code points, matching ``plain_text()``.
pycrdt addresses ``Text`` by UTF-8 byte, so every index is converted at the
pycrdt boundary.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from pycrdt import Doc, Text, TextEvent
from selectolax.lexbor import LexborHTMLParser

from contractmark.richtext.ranges import (
    COMMENT_ATTR,
    HIGHLIGHT_ATTR,
    AttributeRun,
    TextRange,
)
from contractmark.richtext.render import HIGHLIGHT_CLASS, runs_to_markup

if TYPE_CHECKING:
    from collections.abc import Callable

    from pycrdt import Subscription, Transaction

logger = logging.getLogger(__name__)


_BLOCK_TAGS = frozenset(
    {"p", "div", "li", "ul", "ol", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote"}
)
_STRIP_TAGS = frozenset({"script", "style", "noscript", "template"})
_WHITESPACE_ONLY = re.compile(r"^\s*$")


class ContractDocument:
    """A contract's rich text with selection state and change notification.

    Attributes:
        doc_id: Unique identifier for this document.
        doc: The pycrdt Doc instance.
    """

    def __init__(self, doc_id: str, content: str = "") -> None:
        """Initialize a document holding ``content`` as unformatted text.

        Args:
            doc_id: Unique identifier for this document.
            content: Initial plain text.
        """
        self.doc_id = doc_id
        self.doc = Doc()
        self.doc["body"] = Text()
        self._selection: TextRange | None = None
        # pycrdt drops a callback once its Subscription is garbage collected
        self._subscriptions: list[Subscription] = []
        if content:
            self.body.insert(0, content)

    @classmethod
    def from_markup(cls, doc_id: str, markup: str) -> ContractDocument:
        """Build a document from HTML, restoring ``span.highlight`` runs.

        Block elements are separated by newlines, ``<br>`` becomes a newline,
        and ``data-comment`` on a highlight span becomes its payload.
        """
        document = cls(doc_id)
        pieces = _parse_markup(markup)
        with document.transaction():
            # Insert unformatted, then format: an insert inherits the
            # attributes to its left.
            if pieces:
                document.body.insert(0, "".join(text for text, _ in pieces))
            index = 0
            for text, attrs in pieces:
                size = _utf8_len(text)
                if attrs:
                    document.body.format(index, index + size, attrs)
                index += size
        logger.debug(
            "Loaded document %s from markup (%d pieces)", doc_id, len(pieces)
        )
        return document

    @property
    def body(self) -> Text:
        """Get the body Text."""
        return self.doc["body"]

    # --- Selection ---

    def selection(self) -> TextRange | None:
        return self._selection

    def set_selection(self, start: int | None, end: int | None) -> None:
        """Record the user's selection, clamped to the document bounds."""
        if start is None or end is None:
            self._selection = None
            return
        length = len(self.plain_text())
        lo, hi = sorted((start, end))
        self._selection = TextRange(max(0, min(lo, length)), max(0, min(hi, length)))

    def selected_text(self) -> str:
        """Return the characters under the current selection."""
        sel = self._selection
        if sel is None or sel.is_collapsed:
            return ""
        return self.plain_text()[sel.start : sel.end]

    # --- Projections ---

    def plain_text(self) -> str:
        return str(self.body)

    def runs(self) -> list[AttributeRun]:
        runs: list[AttributeRun] = []
        offset = 0
        for content, attrs in self.body.diff():
            if not isinstance(content, str) or not content:
                continue
            clean = {k: v for k, v in (attrs or {}).items() if v is not None}
            runs.append(AttributeRun(offset, offset + len(content), content, clean))
            offset += len(content)
        return runs

    def to_markup(self) -> str:
        return runs_to_markup(self.runs())

    # --- Mutation ---

    def transaction(self, origin: str | None = None) -> Transaction:
        """Open a transaction; nested calls join the outer one."""
        return self.doc.transaction(origin=origin)

    def format(self, start: int, end: int, attrs: dict[str, Any]) -> None:
        text = self._check_range(start, end)
        self.body.format(_utf8_len(text[:start]), _utf8_len(text[:end]), attrs)

    def insert(self, index: int, text: str) -> None:
        current = self.plain_text()
        if not 0 <= index <= len(current):
            msg = f"insert index {index} outside document of length {len(current)}"
            raise ValueError(msg)
        self._selection = None
        self.body.insert(_utf8_len(current[:index]), text)

    def delete(self, start: int, end: int) -> None:
        text = self._check_range(start, end)
        self._selection = None
        del self.body[_utf8_len(text[:start]) : _utf8_len(text[:end])]

    def replace_text(self, new_text: str) -> bool:
        """Turn the plain text into ``new_text`` with one delete/insert splice.

        Only the span between the common prefix and common suffix is
        touched, so formatting outside it stays where it was. The splice
        runs in a single transaction.

        Returns:
            False if the text was already ``new_text``.
        """
        old_text = self.plain_text()
        if new_text == old_text:
            return False
        start, old_end, new_end = _splice(old_text, new_text)
        with self.transaction(origin="edit"):
            if old_end > start:
                self.delete(start, old_end)
            if new_end > start:
                self.insert(start, new_text[start:new_end])
        logger.debug(
            "Document %s edited: [%d, %d) -> %d chars",
            self.doc_id,
            start,
            old_end,
            new_end - start,
        )
        return True

    def observe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change observer.

        The document keeps the subscription alive until the returned callable
        is invoked, so callers may discard it.

        Returns:
            A callable that removes the subscription. Calling it twice is
            harmless.
        """

        def _on_change(_event: TextEvent) -> None:
            callback()

        subscription = self.body.observe(_on_change)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
                self.body.unobserve(subscription)

        return unsubscribe

    def _check_range(self, start: int, end: int) -> str:
        text = self.plain_text()
        if not 0 <= start < end <= len(text):
            msg = f"range [{start}, {end}) invalid for document of length {len(text)}"
            raise ValueError(msg)
        return text


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _splice(old: str, new: str) -> tuple[int, int, int]:
    """Return ``(start, old_end, new_end)`` of the region that differs."""
    limit = min(len(old), len(new))
    start = 0
    while start < limit and old[start] == new[start]:
        start += 1
    old_end, new_end = len(old), len(new)
    while old_end > start and new_end > start and old[old_end - 1] == new[new_end - 1]:
        old_end -= 1
        new_end -= 1
    return start, old_end, new_end


def _parse_markup(markup: str) -> list[tuple[str, dict[str, Any]]]:
    """Flatten HTML into (text, attrs) pieces in document order."""
    if not markup:
        return []

    tree = LexborHTMLParser(markup)
    root = tree.body if tree.body is not None else tree.root
    if root is None:
        return []

    pieces: list[tuple[str, dict[str, Any]]] = []

    def _emit(text: str, attrs: dict[str, Any]) -> None:
        if text:
            pieces.append((text, attrs))

    def _ends_with_newline() -> bool:
        return not pieces or pieces[-1][0].endswith("\n")

    def _walk(node: Any, attrs: dict[str, Any]) -> None:
        tag = node.tag

        # selectolax reports text nodes with the tag "-text"
        if tag == "-text":
            text = node.text_content or ""
            parent = node.parent
            in_block = parent is None or parent.tag in _BLOCK_TAGS | {"body", "html"}
            if in_block and _WHITESPACE_ONLY.match(text):
                return
            _emit(text, attrs)
            return

        if tag in _STRIP_TAGS:
            return

        if tag == "br":
            _emit("\n", attrs)
            return

        child_attrs = attrs
        if tag == "span":
            classes = (node.attributes.get("class") or "").split()
            if HIGHLIGHT_CLASS in classes:
                child_attrs = {
                    HIGHLIGHT_ATTR: True,
                    COMMENT_ATTR: node.attributes.get("data-comment") or "",
                }

        if tag in _BLOCK_TAGS and not _ends_with_newline():
            _emit("\n", {})

        child = node.child
        while child is not None:
            _walk(child, child_attrs)
            child = child.next

    child = root.child
    while child is not None:
        _walk(child, {})
        child = child.next

    return pieces
