"""Free-floating signature overlays and their pointer gestures."""

from contractmark.overlay.gestures import PointerEvent, PointerEvents
from contractmark.overlay.manager import GestureKind, OverlayManager

__all__ = ["GestureKind", "OverlayManager", "PointerEvent", "PointerEvents"]
