"""Range and run values reported by the rich-text engine.

Offsets index the document's plain-text projection: ``start`` inclusive,
``end`` exclusive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

HIGHLIGHT_ATTR = "highlight"
COMMENT_ATTR = "comment"


@dataclass(frozen=True)
class TextRange:
    """A span of the plain-text projection."""

    start: int
    end: int

    @property
    def is_collapsed(self) -> bool:
        return self.end <= self.start

    def __len__(self) -> int:
        return max(0, self.end - self.start)


@dataclass(frozen=True)
class AttributeRun:
    """A maximal run of characters sharing the same formatting attributes.

    Attributes:
        start: Offset of the first character of the run.
        end: Offset one past the last character of the run.
        text: The run's characters.
        attrs: Formatting attributes; empty for unformatted text.
    """

    start: int
    end: int
    text: str
    attrs: dict[str, Any] = field(default_factory=dict)

    @property
    def is_highlight(self) -> bool:
        return bool(self.attrs.get(HIGHLIGHT_ATTR))

    @property
    def comment(self) -> str:
        value = self.attrs.get(COMMENT_ATTR)
        return value if isinstance(value, str) else ""

    @property
    def range(self) -> TextRange:
        return TextRange(self.start, self.end)
