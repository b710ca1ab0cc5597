"""Signature capture form: signer details, pen settings, preview and save."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contractmark.errors import EmptyCanvas, MissingSignerName
from contractmark.models import SignerInfo

if TYPE_CHECKING:
    from collections.abc import Callable

    from contractmark.signature.protocol import SignatureCaptureSurface


class SignatureCapture:
    """State behind the capture dialog.

    ``save()`` hands the image and signer to ``on_save`` (normally
    ``OverlayManager.commit``); ``close()`` calls ``on_close``.
    """

    def __init__(
        self,
        surface: SignatureCaptureSurface,
        on_save: Callable[[str, SignerInfo], Any],
        on_close: Callable[[], Any] | None = None,
    ) -> None:
        self.surface = surface
        self.signer = SignerInfo()
        self.show_preview = False
        self._on_save = on_save
        self._on_close = on_close

    @property
    def can_submit(self) -> bool:
        """Whether preview and save buttons should be enabled."""
        return self.surface.has_content and bool(self.signer.name.strip())

    def update_signer(self, field: str, value: str) -> None:
        if field not in SignerInfo.model_fields:
            msg = f"unknown signer field {field!r}"
            raise ValueError(msg)
        setattr(self.signer, field, value)

    def set_pen_color(self, color: str) -> None:
        self.surface.pen_color = color

    def set_pen_width(self, width: int) -> None:
        self.surface.pen_width = width

    def validate(self) -> None:
        """Raise unless a name is given and something has been drawn.

        Raises:
            MissingSignerName: Name is blank.
            EmptyCanvas: No strokes drawn.
        """
        if not self.signer.name.strip():
            raise MissingSignerName
        if not self.surface.has_content:
            raise EmptyCanvas

    def preview(self) -> str:
        """Validate and return the image to show in the preview box."""
        self.validate()
        self.show_preview = True
        return self.surface.to_image()

    def save(self) -> str:
        """Validate, export the drawing and hand it to ``on_save``."""
        self.validate()
        image = self.surface.to_image()
        self._on_save(image, self.signer.model_copy())
        return image

    def clear(self) -> None:
        self.surface.clear()
        self.show_preview = False

    def close(self) -> None:
        if self._on_close is not None:
            self._on_close()
