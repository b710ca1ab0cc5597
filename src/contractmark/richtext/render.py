"""Render attribute runs as paragraphs of text and highlight segments.

Every highlight run becomes a ``span.highlight`` element carrying its comment
in ``data-comment``. The page and the markup projection share this
segmentation so both agree on which span shows which comment.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from contractmark.richtext.ranges import AttributeRun

HIGHLIGHT_CLASS = "highlight"

HIGHLIGHT_CSS = """
.highlight {
  background-color: #fff3cd;
  padding: 2px 0;
  cursor: pointer;
}
.highlight:hover {
  background-color: #ffeeba;
}
"""


@dataclass(frozen=True)
class Segment:
    """A piece of one paragraph: plain text or a highlight span.

    Attributes:
        start: Offset of the segment's first character in the projection.
        text: The characters shown.
        comment: Comment payload for highlight segments, None for plain text.
    """

    start: int
    text: str
    comment: str | None = None

    @property
    def is_highlight(self) -> bool:
        return self.comment is not None


def segment_runs(runs: Iterable[AttributeRun]) -> list[list[Segment]]:
    """Split runs into paragraphs on newline characters.

    Returns:
        One list of segments per paragraph. A document without newlines has
        exactly one paragraph; an empty document has one empty paragraph.
    """
    paragraphs: list[list[Segment]] = [[]]
    for run in runs:
        comment = run.comment if run.is_highlight else None
        offset = run.start
        for i, piece in enumerate(run.text.split("\n")):
            if i > 0:
                paragraphs.append([])
                offset += 1
            if piece:
                paragraphs[-1].append(Segment(offset, piece, comment))
            offset += len(piece)
    return paragraphs


def runs_to_markup(runs: Iterable[AttributeRun]) -> str:
    """Render runs as HTML paragraphs with highlight spans."""
    parts: list[str] = []
    for paragraph in segment_runs(runs):
        parts.append("<p>")
        for seg in paragraph:
            if seg.comment is None:
                parts.append(escape(seg.text, quote=False))
            else:
                parts.append(
                    f'<span class="{HIGHLIGHT_CLASS}" '
                    f'data-comment="{escape(seg.comment, quote=True)}">'
                    f"{escape(seg.text, quote=False)}</span>"
                )
        parts.append("</p>")
    return "".join(parts)
