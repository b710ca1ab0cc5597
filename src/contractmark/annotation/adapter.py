"""Attributed-range adapter over the rich-text engine's formatting attributes.

A highlight is a pair of attributes on a text range: the boolean
``highlight`` marker and the ``comment`` payload. This adapter is the only
code that writes those attributes. It never holds on to ranges or runs past
the call that produced them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from contractmark.richtext.ranges import COMMENT_ATTR, HIGHLIGHT_ATTR

if TYPE_CHECKING:
    from collections.abc import Callable

    from contractmark.richtext.protocol import RichTextEngine
    from contractmark.richtext.ranges import AttributeRun, TextRange

logger = logging.getLogger(__name__)


def payload_equals(value: str) -> Callable[[str], bool]:
    """Predicate matching runs whose comment payload equals ``value``."""

    def _matches(payload: str) -> bool:
        return payload == value

    return _matches


class AttributedRangeAdapter:
    """Mark, enumerate and rewrite highlight ranges in a rich-text engine."""

    def __init__(self, engine: RichTextEngine) -> None:
        self._engine = engine

    def tag_range(self, text_range: TextRange, payload: str) -> None:
        """Mark every position in ``text_range`` as a highlight with ``payload``.

        Applied in a single transaction so observers never see the marker
        without its payload. Reapplying the same payload is a no-op in effect.

        Raises:
            ValueError: If the range is collapsed or outside the document.
        """
        if text_range.is_collapsed:
            msg = "cannot tag a collapsed range"
            raise ValueError(msg)
        with self._engine.transaction():
            self._engine.format(
                text_range.start,
                text_range.end,
                {HIGHLIGHT_ATTR: True, COMMENT_ATTR: payload},
            )
        logger.debug(
            "Tagged [%d, %d) with comment %r",
            text_range.start,
            text_range.end,
            payload,
        )

    def untag_range(self, text_range: TextRange) -> None:
        """Remove the highlight marker and payload from ``text_range``."""
        if text_range.is_collapsed:
            msg = "cannot untag a collapsed range"
            raise ValueError(msg)
        with self._engine.transaction():
            self._engine.format(
                text_range.start,
                text_range.end,
                {HIGHLIGHT_ATTR: None, COMMENT_ATTR: None},
            )

    def tagged_runs(
        self, predicate: Callable[[str], bool] | None = None
    ) -> list[AttributeRun]:
        """Return highlight runs in document order, optionally filtered by payload."""
        return [
            run
            for run in self._engine.runs()
            if run.is_highlight and (predicate is None or predicate(run.comment))
        ]

    def for_each_tagged(
        self,
        predicate: Callable[[str], bool],
        mutate: Callable[[str], str],
    ) -> int:
        """Rewrite the payload of every highlight run whose payload matches.

        Runs are scanned once, in document order, and every rewrite happens
        inside one transaction. Runs are collected before the first write,
        so a rewritten payload is not matched again in the same pass.

        Returns:
            Number of runs rewritten.
        """
        targets = self.tagged_runs(predicate)
        if not targets:
            return 0
        with self._engine.transaction():
            for run in targets:
                self._engine.format(
                    run.start, run.end, {COMMENT_ATTR: mutate(run.comment)}
                )
        logger.debug("Rewrote comment payload on %d run(s)", len(targets))
        return len(targets)

    def rename(self, old_comment: str, new_comment: str) -> int:
        """Rename a comment everywhere it appears."""
        return self.for_each_tagged(
            payload_equals(old_comment), lambda _payload: new_comment
        )
