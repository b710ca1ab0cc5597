"""In-process host application state fed by the sync bridge.

Holds the authoritative highlight and signature lists the way an embedding
application would, and hands out a ``SyncBridge`` wired to them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contractmark.sync.bridge import SyncBridge

if TYPE_CHECKING:
    from collections.abc import Callable

    from contractmark.models import HighlightData, SignatureOverlay

logger = logging.getLogger(__name__)


@dataclass
class HostModel:
    """Authoritative highlight and signature lists."""

    highlights: list[HighlightData] = field(default_factory=list)
    signatures: list[SignatureOverlay] = field(default_factory=list)
    on_change: Callable[[], None] | None = None

    def add_highlight(self, highlight: HighlightData) -> None:
        self.highlights.append(highlight)
        self._changed()

    def update_highlight(self, old_comment: str, new_comment: str) -> int:
        """Rename every highlight whose comment equals ``old_comment``.

        Matching is by comment text, so unrelated highlights that happen to
        share the comment are renamed too.

        Returns:
            Number of records renamed.
        """
        renamed = 0
        for i, highlight in enumerate(self.highlights):
            if highlight.comment == old_comment:
                self.highlights[i] = highlight.model_copy(
                    update={"comment": new_comment}
                )
                renamed += 1
        self._changed()
        return renamed

    def rename_by_id(self, highlight_id: str, new_comment: str) -> bool:
        """Rename exactly one highlight by its identifier."""
        for i, highlight in enumerate(self.highlights):
            if highlight.id == highlight_id:
                self.highlights[i] = highlight.model_copy(
                    update={"comment": new_comment}
                )
                self._changed()
                return True
        return False

    def add_signature(self, signature: SignatureOverlay) -> None:
        self.signatures.append(signature.model_copy(deep=True))
        self._changed()

    def bridge(self) -> SyncBridge:
        """Return a bridge whose callbacks update this model."""
        return SyncBridge(
            on_highlight_add=self.add_highlight,
            on_highlight_update=self.update_highlight,
            on_signature_add=self.add_signature,
        )

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
