"""Tooltip and comment-editing state machine for rendered highlights.

Phases::

    IDLE --hover--> HOVERING --edit--> EDITING
      ^                |                  |
      +-----close------+--cancel/save/close

There is a single tooltip slot per editor. Hovering another highlight while
hovering re-targets the tooltip; hovering while editing is ignored so an
in-progress edit is never lost to a stray pointer movement.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from contractmark.errors import MissingComment

if TYPE_CHECKING:
    from collections.abc import Callable

    from contractmark.annotation.adapter import AttributedRangeAdapter
    from contractmark.annotation.hover import HighlightElement
    from contractmark.models import Rect
    from contractmark.sync.bridge import SyncBridge

logger = logging.getLogger(__name__)


class InteractionPhase(StrEnum):
    IDLE = "idle"
    HOVERING = "hovering"
    EDITING = "editing"


@dataclass
class TooltipState:
    """The single tooltip slot.

    ``target`` is a weak back-reference to the hovered element, used only to
    write its comment after a rename. It does not keep the element alive.
    """

    visible: bool = False
    x: float = 0.0
    y: float = 0.0
    text: str = ""
    editing: bool = False
    _target: weakref.ReferenceType[Any] | None = field(default=None, repr=False)

    @property
    def target(self) -> HighlightElement | None:
        return self._target() if self._target is not None else None

    def show(self, x: float, y: float, text: str, target: HighlightElement) -> None:
        self.visible = True
        self.x = x
        self.y = y
        self.text = text
        self.editing = False
        self._target = weakref.ref(target)

    def hide(self) -> None:
        self.visible = False
        self.editing = False
        self._target = None


class AnnotationInteraction:
    """Hover tooltips and in-place comment renaming."""

    def __init__(
        self,
        adapter: AttributedRangeAdapter,
        bridge: SyncBridge,
        *,
        tooltip_offset: float = 10.0,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._adapter = adapter
        self._bridge = bridge
        self._offset = tooltip_offset
        self._on_change = on_change
        self.tooltip = TooltipState()
        self.draft = ""

    @property
    def phase(self) -> InteractionPhase:
        if not self.tooltip.visible:
            return InteractionPhase.IDLE
        if self.tooltip.editing:
            return InteractionPhase.EDITING
        return InteractionPhase.HOVERING

    def hover_enter(self, element: HighlightElement, rect: Rect) -> None:
        """Show the tooltip centred above ``element``'s bounding box."""
        if self.phase is InteractionPhase.EDITING:
            return
        if not element.comment:
            return
        self.tooltip.show(
            rect.center_x, rect.top - self._offset, element.comment, element
        )
        self._changed()

    def begin_edit(self) -> None:
        """Copy the tooltip text into the draft and switch to editing."""
        if self.phase is not InteractionPhase.HOVERING:
            return
        self.draft = self.tooltip.text
        self.tooltip.editing = True
        self._changed()

    def update_draft(self, text: str) -> None:
        self.draft = text

    def cancel_edit(self) -> None:
        """Discard the draft and hide the tooltip. Nothing is rewritten."""
        self.draft = self.tooltip.text
        self.tooltip.hide()
        self._changed()

    def save_edit(self) -> bool:
        """Rename the hovered comment everywhere it appears.

        An unchanged draft closes the tooltip without rewriting anything.

        Returns:
            True if a rename was applied and sent to the host.

        Raises:
            MissingComment: The draft is blank; the editor stays open.
        """
        if self.phase is not InteractionPhase.EDITING:
            return False
        old = self.tooltip.text
        new = self.draft.strip()
        if not new:
            raise MissingComment
        if new == old:
            self.tooltip.hide()
            self._changed()
            return False

        target = self.tooltip.target
        renamed = self._adapter.rename(old, new)
        # The span survives only until the next render, but keep it in step.
        if target is not None:
            target.comment = new
        self.tooltip.text = new
        self.tooltip.hide()
        logger.info("HIGHLIGHT_RENAME %r -> %r (%d run(s))", old, new, renamed)
        self._bridge.highlight_updated(old, new)
        self._changed()
        return True

    def close(self) -> None:
        """Hide the tooltip from any phase, dropping an unsaved edit."""
        self.draft = ""
        self.tooltip.hide()
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
