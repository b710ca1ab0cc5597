"""Protocol defining the signature capture surface.

The overlay manager only needs an opaque image string from whatever draws
the signature. ``SignaturePad`` is the stroke-recording implementation used
by the page.
"""

from __future__ import annotations

from typing import Protocol


class SignatureCaptureSurface(Protocol):
    """Drawing surface with configurable pen and image export."""

    pen_color: str
    pen_width: int

    @property
    def has_content(self) -> bool:
        """True once at least one stroke has been started since the last clear."""
        ...

    def begin_stroke(self, x: float, y: float) -> None: ...

    def extend_stroke(self, x: float, y: float) -> None: ...

    def end_stroke(self) -> None: ...

    def to_image(self) -> str:
        """Return the drawing as an opaque image payload (a data URL)."""
        ...

    def clear(self) -> None: ...
