"""Propagation of committed annotations and signatures to the host application.

The bridge forwards records unchanged through three optional callbacks. It
does not retry and does not persist; a callback that raises is logged and
the editor carries on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from contractmark.annotation.adapter import payload_equals
from contractmark.richtext.ranges import TextRange

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from contractmark.annotation.adapter import AttributedRangeAdapter
    from contractmark.models import HighlightData, SignatureOverlay

logger = logging.getLogger(__name__)


@dataclass
class SyncBridge:
    """Fire-and-forget host callbacks.

    Attributes:
        on_highlight_add: Called once per created highlight.
        on_highlight_update: Called once per rename with (old, new) comment.
        on_signature_add: Called once per committed signature.
    """

    on_highlight_add: Callable[[HighlightData], Any] | None = None
    on_highlight_update: Callable[[str, str], Any] | None = None
    on_signature_add: Callable[[SignatureOverlay], Any] | None = None

    def highlight_added(self, highlight: HighlightData) -> None:
        self._fire("on_highlight_add", self.on_highlight_add, highlight)

    def highlight_updated(self, old_comment: str, new_comment: str) -> None:
        self._fire(
            "on_highlight_update", self.on_highlight_update, old_comment, new_comment
        )

    def signature_added(self, signature: SignatureOverlay) -> None:
        self._fire("on_signature_add", self.on_signature_add, signature)

    def _fire(self, name: str, callback: Callable[..., Any] | None, *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Host callback %s failed", name)

    def reconcile(
        self,
        host_highlights: Iterable[HighlightData],
        adapter: AttributedRangeAdapter,
        plain_text: str,
    ) -> list[HighlightData]:
        """Re-tag host highlights that the live document has lost.

        A host record whose comment is not carried by any run is re-applied
        at its recorded offsets, provided the text there is still the
        recorded text.

        Returns:
            Records whose offsets no longer point at their text (drifted).
        """
        drifted: list[HighlightData] = []
        for highlight in host_highlights:
            if adapter.tagged_runs(payload_equals(highlight.comment)):
                continue
            if plain_text[highlight.start : highlight.end] != highlight.text:
                logger.warning(
                    "Highlight %s drifted: [%d, %d) no longer holds %r",
                    highlight.id,
                    highlight.start,
                    highlight.end,
                    highlight.text,
                )
                drifted.append(highlight)
                continue
            adapter.tag_range(
                TextRange(highlight.start, highlight.end), highlight.comment
            )
            logger.info("Re-tagged highlight %s from host list", highlight.id)
        return drifted
