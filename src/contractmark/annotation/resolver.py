"""Turn the user's selection into a committed, commented highlight.

Flow: ``capture_selection()`` opens a draft when the highlight button is
pressed, the comment dialog edits ``draft.pending_comment``, and
``submit_comment()`` tags the model range, emits the ``HighlightData`` to
the host and discards the draft. ``cancel()`` discards it without effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from contractmark.config import OffsetStrategy
from contractmark.errors import EmptySelection, MissingComment
from contractmark.models import HighlightData

if TYPE_CHECKING:
    from contractmark.annotation.adapter import AttributedRangeAdapter
    from contractmark.richtext.protocol import RichTextEngine
    from contractmark.richtext.ranges import TextRange
    from contractmark.sync.bridge import SyncBridge

logger = logging.getLogger(__name__)


@dataclass
class CommentDraft:
    """Selection awaiting a comment. Lives until submit or cancel."""

    selected_text: str
    pending_range: TextRange
    pending_comment: str = ""


class HighlightResolver:
    """Selection capture, offset resolution and highlight submission."""

    def __init__(
        self,
        engine: RichTextEngine,
        adapter: AttributedRangeAdapter,
        bridge: SyncBridge,
        strategy: OffsetStrategy = OffsetStrategy.SELECTION,
    ) -> None:
        self._engine = engine
        self._adapter = adapter
        self._bridge = bridge
        self._strategy = strategy
        self._draft: CommentDraft | None = None

    @property
    def draft(self) -> CommentDraft | None:
        """The open draft, or None when the comment dialog is closed."""
        return self._draft

    def capture_selection(self) -> CommentDraft:
        """Open a draft for the engine's current selection.

        Raises:
            EmptySelection: Nothing selected, or the selection holds only
                whitespace. No state changes.
        """
        selection = self._engine.selection()
        if selection is None or selection.is_collapsed:
            raise EmptySelection
        text = self._engine.plain_text()[selection.start : selection.end]
        if not text.strip():
            raise EmptySelection
        self._draft = CommentDraft(selected_text=text, pending_range=selection)
        logger.debug(
            "Captured selection [%d, %d) %r", selection.start, selection.end, text
        )
        return self._draft

    @staticmethod
    def build_highlight(
        selected_text: str, plain_text: str, comment: str
    ) -> HighlightData:
        """Build a record from the first occurrence of ``selected_text``.

        If the text also appears earlier than the actual selection, the
        offsets point at that earlier occurrence.

        Raises:
            ValueError: ``selected_text`` does not occur in ``plain_text``.
        """
        start = plain_text.find(selected_text)
        if start < 0:
            msg = "selected text does not occur in the document"
            raise ValueError(msg)
        if plain_text.count(selected_text) > 1:
            logger.debug(
                "Ambiguous offset: %r occurs more than once, using first at %d",
                selected_text,
                start,
            )
        return HighlightData(
            start=start,
            end=start + len(selected_text),
            text=selected_text,
            comment=comment,
        )

    @staticmethod
    def build_highlight_at(
        selected_text: str, start: int, comment: str
    ) -> HighlightData:
        """Build a record from the selection's own position."""
        return HighlightData(
            start=start,
            end=start + len(selected_text),
            text=selected_text,
            comment=comment,
        )

    def submit_comment(self, comment: str | None = None) -> HighlightData:
        """Commit the open draft as a highlight.

        Args:
            comment: Comment text; defaults to ``draft.pending_comment``.

        Returns:
            The record emitted to the host.

        Raises:
            EmptySelection: No draft is open.
            MissingComment: Comment is blank. The draft stays open.
        """
        draft = self._draft
        if draft is None or not draft.selected_text:
            raise EmptySelection
        if comment is not None:
            draft.pending_comment = comment
        text = draft.pending_comment.strip()
        if not text:
            raise MissingComment

        if self._strategy is OffsetStrategy.FIRST_OCCURRENCE:
            highlight = self.build_highlight(
                draft.selected_text, self._engine.plain_text(), text
            )
        else:
            highlight = self.build_highlight_at(
                draft.selected_text, draft.pending_range.start, text
            )

        self._adapter.tag_range(draft.pending_range, text)
        self._draft = None
        logger.info(
            "HIGHLIGHT_ADD id=%s [%d, %d)", highlight.id, highlight.start, highlight.end
        )
        self._bridge.highlight_added(highlight)
        return highlight

    def cancel(self) -> None:
        """Discard the draft without touching the document."""
        self._draft = None
