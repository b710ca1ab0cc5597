"""Awaitable dialogs for the contract editor page."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nicegui import events, ui

from contractmark.errors import ContractMarkError, MissingComment
from contractmark.signature import SignatureCapture, SignaturePad

if TYPE_CHECKING:
    from contractmark.annotation.resolver import HighlightResolver
    from contractmark.config import SignatureConfig
    from contractmark.models import HighlightData
    from contractmark.overlay.manager import OverlayManager

logger = logging.getLogger(__name__)

_SIGNER_FIELDS = (
    ("name", "Ad Soyad"),
    ("title", "Unvan"),
    ("tc_no", "T.C. Kimlik No"),
    ("company", "Şirket"),
)


async def show_comment_dialog(resolver: HighlightResolver) -> HighlightData | None:
    """Show awaitable modal asking for the comment on the captured selection.

    Saving with a blank comment keeps the dialog open with a warning.
    Cancelling or dismissing discards the draft.

    Returns:
        The committed highlight, or None if cancelled.
    """
    draft = resolver.draft
    if draft is None:
        return None

    def on_comment_change(e: events.ValueChangeEventArguments) -> None:
        draft.pending_comment = e.value or ""

    def save() -> None:
        try:
            highlight = resolver.submit_comment()
        except MissingComment as exc:
            ui.notify(exc.notice, type="warning")
            return
        dialog.submit(highlight)

    with ui.dialog() as dialog, ui.card().classes("w-96"):
        ui.label("Yorum Ekle").classes("text-lg font-bold mb-2")
        ui.label(f"“{draft.selected_text}”").classes(
            "text-sm italic text-gray-600 mb-2"
        )
        ui.textarea(label="Yorum", on_change=on_comment_change).props(
            'outlined autofocus data-testid="comment-input"'
        ).classes("w-full")

        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("İptal", on_click=lambda: dialog.submit(None)).props("flat")
            ui.button("Kaydet", on_click=save).props(
                'color=primary data-testid="save-comment-btn"'
            )

    dialog.open()
    result = await dialog
    if result is None:
        resolver.cancel()
    return result


async def show_signature_dialog(
    manager: OverlayManager, config: SignatureConfig
) -> bool:
    """Show awaitable signature capture modal for the pending overlay.

    Saving commits the drawing and signer details to the pending overlay.
    Cancelling leaves the overlay pending; the caller decides what to do.

    Returns:
        True if a signature was committed.
    """
    pad = SignaturePad(
        config.canvas_width,
        config.canvas_height,
        pen_color=config.pen_color,
        pen_width=config.pen_width,
    )
    capture = SignatureCapture(
        pad, on_save=manager.commit, on_close=lambda: dialog.submit(False)
    )

    def sync_controls() -> None:
        enabled = capture.can_submit
        preview_btn.set_enabled(enabled)
        save_btn.set_enabled(enabled)

    def on_signer_change(field: str, value: str | None) -> None:
        capture.update_signer(field, value or "")
        sync_controls()

    def on_mouse(e: events.MouseEventArguments) -> None:
        if e.type == "mousedown":
            pad.begin_stroke(e.image_x, e.image_y)
        elif e.type == "mousemove":
            pad.extend_stroke(e.image_x, e.image_y)
        else:
            pad.end_stroke()
        surface.content = pad.to_svg()
        sync_controls()

    def on_color(e: events.ValueChangeEventArguments) -> None:
        try:
            capture.set_pen_color(e.value)
        except ValueError:
            ui.notify(f"Geçersiz renk: {e.value}", type="warning")

    def clear() -> None:
        capture.clear()
        surface.content = ""
        preview.set_visibility(False)
        sync_controls()

    def show_preview() -> None:
        try:
            preview.set_source(capture.preview())
        except ContractMarkError as exc:
            ui.notify(exc.notice, type="warning")
            return
        preview.set_visibility(True)

    def save() -> None:
        try:
            capture.save()
        except ContractMarkError as exc:
            ui.notify(exc.notice, type="warning")
            return
        dialog.submit(True)

    with ui.dialog().props("persistent") as dialog, ui.card().classes(
        "max-w-none"
    ).style(f"width: {config.canvas_width + 48}px"):
        ui.label("İmza Ekle").classes("text-lg font-bold mb-2")

        with ui.grid(columns=2).classes("w-full gap-2"):
            for field, label in _SIGNER_FIELDS:
                ui.input(
                    label=label,
                    on_change=lambda e, f=field: on_signer_change(f, e.value),
                ).props(f'outlined dense data-testid="signer-{field}"')

        with ui.row().classes("w-full items-center gap-4 mt-2"):
            ui.color_input(
                label="Kalem rengi", value=pad.pen_color, on_change=on_color
            ).classes("w-40")
            ui.label("Kalınlık")
            ui.slider(
                min=1,
                max=10,
                value=pad.pen_width,
                on_change=lambda e: capture.set_pen_width(e.value),
            ).props("label").classes("w-48")

        surface = ui.interactive_image(
            size=(config.canvas_width, config.canvas_height),
            on_mouse=on_mouse,
            events=["mousedown", "mousemove", "mouseup", "mouseleave"],
            cross=False,
        ).style(
            "border: 1px solid #ccc; background: white; cursor: crosshair"
        ).props('data-testid="signature-surface"')

        preview = ui.image().classes("border mt-2").style(
            f"width: {config.canvas_width}px"
        )
        preview.set_visibility(False)

        with ui.row().classes("w-full justify-end gap-2 mt-2"):
            ui.button("Temizle", on_click=clear).props("flat")
            preview_btn = ui.button("Önizle", on_click=show_preview).props("outline")
            ui.button("İptal", on_click=capture.close).props("flat")
            save_btn = ui.button("Kaydet", on_click=save).props(
                'color=primary data-testid="save-signature-btn"'
            )
        sync_controls()

    dialog.open()
    result = await dialog
    logger.debug("Signature dialog closed (committed=%s)", bool(result))
    return bool(result)
