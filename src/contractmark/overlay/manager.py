"""Signature overlays: creation, commit, drag-to-move and handle resize.

Positions and sizes are in pixels relative to the scrollable editor
container. Only one gesture runs at a time: while a drag or resize is
active, window-level move/release/blur listeners are attached, and they are
detached on every way a gesture can end.

Design decisions:
- Drag positions are not clamped; the container scrolls, so an overlay may
  sit partly or wholly outside the visible area.
- Resize clamps to the configured minimum size.
- ``create()`` while a signature is still pending returns that pending
  overlay, so a commit can never land on the wrong placeholder.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from contractmark.config import OverlayConfig
from contractmark.models import Point, SignatureOverlay, Size
from contractmark.overlay.gestures import PointerEvent

if TYPE_CHECKING:
    from collections.abc import Callable

    from contractmark.models import Rect, SignerInfo
    from contractmark.overlay.gestures import PointerEventSource
    from contractmark.sync.bridge import SyncBridge

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d.%m.%Y %H:%M:%S"


class GestureKind(StrEnum):
    DRAG = "drag"
    RESIZE = "resize"


class OverlayManager:
    """Owns the overlay list and the single active gesture."""

    def __init__(
        self,
        bridge: SyncBridge,
        pointer_events: PointerEventSource,
        config: OverlayConfig | None = None,
        *,
        open_capture: Callable[[], None] | None = None,
        on_change: Callable[[], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._bridge = bridge
        self._pointer_events = pointer_events
        self._config = config or OverlayConfig()
        self._open_capture = open_capture
        self._on_change = on_change
        self._clock = clock
        self.overlays: list[SignatureOverlay] = []
        self.dragging_id: str | None = None
        self.resizing_id: str | None = None
        self.drag_offset = Point()
        self._detachers: list[Callable[[], None]] = []

    # --- Lookup ---

    def get(self, overlay_id: str) -> SignatureOverlay | None:
        return next((o for o in self.overlays if o.id == overlay_id), None)

    @property
    def pending(self) -> SignatureOverlay | None:
        """The overlay waiting for its image, if any."""
        return next((o for o in self.overlays if o.is_pending), None)

    @property
    def active_gesture(self) -> GestureKind | None:
        if self.dragging_id is not None:
            return GestureKind.DRAG
        if self.resizing_id is not None:
            return GestureKind.RESIZE
        return None

    # --- Lifecycle ---

    def create(self) -> SignatureOverlay:
        """Append a pending overlay at the default position and open capture."""
        overlay = self.pending
        if overlay is not None:
            logger.debug("Signature %s already pending; reusing it", overlay.id)
        else:
            cfg = self._config
            overlay = SignatureOverlay(
                position=Point(x=cfg.default_x, y=cfg.default_y),
                size=Size(width=cfg.default_width, height=cfg.default_height),
                date=self._now(),
            )
            self.overlays.append(overlay)
            logger.debug("Signature %s created (pending)", overlay.id)
            self._changed()
        if self._open_capture is not None:
            self._open_capture()
        return overlay

    def commit(
        self, image: str, signer: SignerInfo, overlay_id: str | None = None
    ) -> SignatureOverlay | None:
        """Fill the pending overlay with captured image data.

        Position and size are left as they are. With no matching pending
        overlay this is a no-op.

        Args:
            image: Encoded signature image.
            signer: Identity printed under the signature.
            overlay_id: Commit only this overlay; defaults to the pending one.

        Returns:
            The committed overlay, or None if nothing was pending.
        """
        overlay = self.pending if overlay_id is None else self.get(overlay_id)
        if overlay is None or not overlay.is_pending:
            logger.warning("Signature commit with no pending overlay -- dropped")
            return None
        overlay.image = image
        overlay.signer = signer.model_copy()
        overlay.date = self._now()
        logger.info("SIGNATURE_COMMIT id=%s signer=%s", overlay.id, signer.name)
        self._changed()
        self._bridge.signature_added(overlay.model_copy(deep=True))
        return overlay

    def cancel_pending(self) -> None:
        """Drop an overlay whose capture was closed without saving."""
        overlay = self.pending
        if overlay is not None:
            self.remove(overlay.id)

    def remove(self, overlay_id: str) -> bool:
        overlay = self.get(overlay_id)
        if overlay is None:
            return False
        if overlay_id in (self.dragging_id, self.resizing_id):
            self.end_gesture()
        self.overlays.remove(overlay)
        self._changed()
        return True

    # --- Gestures ---

    def begin_drag(self, overlay_id: str, pointer: Point, box: Rect) -> bool:
        """Start moving ``overlay_id``.

        Args:
            overlay_id: Overlay under the pointer.
            pointer: Pointer position in viewport coordinates.
            box: The overlay's rendered bounding box in viewport coordinates.

        Returns:
            False if the overlay is unknown or another gesture is running.
        """
        if self.active_gesture is not None or self.get(overlay_id) is None:
            return False
        self.drag_offset = Point(x=pointer.x - box.left, y=pointer.y - box.top)
        self.dragging_id = overlay_id
        self._attach_listeners()
        logger.debug(
            "DRAG_START id=%s offset=(%.1f, %.1f)",
            overlay_id,
            self.drag_offset.x,
            self.drag_offset.y,
        )
        return True

    def begin_resize(self, overlay_id: str) -> bool:
        """Start resizing ``overlay_id`` from its corner handle.

        Returns:
            False if the overlay is unknown or another gesture is running.
        """
        if self.active_gesture is not None or self.get(overlay_id) is None:
            return False
        self.resizing_id = overlay_id
        self._attach_listeners()
        logger.debug("RESIZE_START id=%s", overlay_id)
        return True

    def on_pointer_move(self, pointer: Point, container_origin: Point) -> None:
        """Apply a pointer move to the overlay under the active gesture."""
        if self.dragging_id is not None:
            overlay = self.get(self.dragging_id)
            if overlay is not None:
                overlay.position = Point(
                    x=pointer.x - container_origin.x - self.drag_offset.x,
                    y=pointer.y - container_origin.y - self.drag_offset.y,
                )
                self._changed()
        if self.resizing_id is not None:
            overlay = self.get(self.resizing_id)
            if overlay is not None:
                width = pointer.x - container_origin.x - overlay.position.x
                height = pointer.y - container_origin.y - overlay.position.y
                overlay.size = Size(
                    width=max(self._config.min_width, width),
                    height=max(self._config.min_height, height),
                )
                self._changed()

    def end_gesture(self) -> None:
        """Clear both gesture markers and detach the window listeners."""
        if self.active_gesture is not None:
            logger.debug(
                "GESTURE_END drag=%s resize=%s", self.dragging_id, self.resizing_id
            )
        self.dragging_id = None
        self.resizing_id = None
        self._detach_listeners()
        self._changed()

    def _attach_listeners(self) -> None:
        self._detach_listeners()
        events = self._pointer_events
        self._detachers = [
            events.add_listener(PointerEvent.MOVE, self.on_pointer_move),
            events.add_listener(PointerEvent.RELEASE, self.end_gesture),
            events.add_listener(PointerEvent.BLUR, self.end_gesture),
        ]

    def _detach_listeners(self) -> None:
        detachers, self._detachers = self._detachers, []
        for detach in detachers:
            detach()

    def _now(self) -> str:
        return self._clock().strftime(DATE_FORMAT)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
