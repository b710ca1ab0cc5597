"""Contract editor page: comment highlights and signature overlays.

Route: /

The document is rendered from its attribute runs. Each render builds fresh
highlight spans, so hover listeners are rebound through ``HoverBinder`` and
the tooltip only keeps a weak reference to the hovered span.

Browser text selection and window-level pointer tracking need JavaScript;
both report back through ``emitEvent`` and are handled in Python.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from nicegui import app, ui
from nicegui.elements.mixins.text_element import TextElement

from contractmark.annotation.adapter import AttributedRangeAdapter
from contractmark.annotation.hover import HoverBinder, RenderedHighlight
from contractmark.annotation.resolver import HighlightResolver
from contractmark.annotation.tooltip import AnnotationInteraction
from contractmark.config import get_settings
from contractmark.errors import ContractMarkError, MissingComment
from contractmark.models import HighlightData, Point, Rect, SignatureOverlay
from contractmark.overlay import OverlayManager, PointerEvent, PointerEvents
from contractmark.pages.dialogs import show_comment_dialog, show_signature_dialog
from contractmark.pages.registry import page_route
from contractmark.richtext import ContractDocument
from contractmark.richtext.render import HIGHLIGHT_CLASS, HIGHLIGHT_CSS, segment_runs
from contractmark.sync import HostModel

if TYPE_CHECKING:
    from collections.abc import Callable

    from nicegui import Client
    from nicegui.events import GenericEventArguments

    from contractmark.config import Settings
    from contractmark.sync import SyncBridge

logger = logging.getLogger(__name__)

SELECTION_DEBOUNCE_MS = 10
POINTER_THROTTLE_S = 0.02

_STORAGE_HIGHLIGHTS = "highlights"
_STORAGE_SIGNATURES = "signatures"
_STORAGE_DOCUMENT = "document"

_PAGE_CSS = """
.contract-container {
  position: relative;
  overflow: auto;
  min-height: 480px;
  max-height: 75vh;
  padding: 24px;
  border: 1px solid #e0e0e0;
  border-radius: 4px;
  background: white;
}
.contract-paragraph { margin: 0 0 12px 0; line-height: 1.7; }
.comment-tooltip {
  position: fixed;
  transform: translate(-50%, -100%);
  z-index: 3000;
  max-width: 320px;
}
.signature-overlay {
  position: absolute;
  border: 1px dashed #1976d2;
  background: rgba(255, 255, 255, 0.85);
  cursor: move;
  user-select: none;
  display: flex;
  flex-direction: column;
}
.signature-overlay img { flex: 1; min-height: 0; object-fit: contain; }
.signature-overlay .signature-meta { font-size: 11px; line-height: 1.3; }
.signature-overlay .resize-handle {
  position: absolute;
  right: 0;
  bottom: 0;
  width: 12px;
  height: 12px;
  background: #1976d2;
  cursor: nwse-resize;
}
"""

# Bounding box of the entered span, in viewport coordinates.
_RECT_JS = (
    "(e) => { const r = e.target.getBoundingClientRect();"
    " emit({left: r.left, top: r.top, width: r.width, height: r.height}); }"
)

# Pointer position plus the overlay's box; ignored when the handle was hit.
_DRAG_START_JS = (
    "(e) => { if (e.target.closest('.resize-handle')) return;"
    " e.preventDefault();"
    " const r = e.currentTarget.getBoundingClientRect();"
    " emit({x: e.clientX, y: e.clientY, left: r.left, top: r.top}); }"
)

_RESIZE_START_JS = "(e) => { e.stopPropagation(); e.preventDefault(); emit({}); }"


class BrowserPointerEvents:
    """Pointer events fed from document/window listeners in the browser.

    The browser listeners exist only while at least one Python listener is
    attached, i.e. for the duration of a drag or resize.
    """

    def __init__(self, client: Client) -> None:
        self._client = client
        self._events = PointerEvents()
        self._container_id: int | None = None
        self._attached = False

    def bind_container(self, container_id: int) -> None:
        """Set the element whose box is the origin for overlay positions."""
        self._container_id = container_id

    @property
    def attached(self) -> bool:
        return self._attached

    def add_listener(
        self, event: PointerEvent, callback: Callable[..., Any]
    ) -> Callable[[], None]:
        detach = self._events.add_listener(event, callback)
        self._sync()

        def _detach() -> None:
            detach()
            self._sync()

        return _detach

    def dispatch(self, event: PointerEvent, *args: Any) -> None:
        self._events.dispatch(event, *args)

    def _sync(self) -> None:
        wanted = self._events.listener_count() > 0
        if wanted and not self._attached:
            self._attached = True
            self._client.run_javascript(self._attach_js())
        elif not wanted and self._attached:
            self._attached = False
            self._client.run_javascript(
                "if (window._cmGesture) {"
                "  document.removeEventListener('mousemove', window._cmGesture.move);"
                "  document.removeEventListener('mouseup', window._cmGesture.up);"
                "  window.removeEventListener('blur', window._cmGesture.blur);"
                "  window._cmGesture = null;"
                "}"
            )

    def _attach_js(self) -> str:
        # fmt: off
        return (
            f"(function() {{"
            f"  const cid = {json.dumps(self._container_id)};"
            f"  const g = {{"
            f"    move: (e) => {{"
            f"      const c = cid === null ? null : getHtmlElement(cid);"
            f"      const r = c ? c.getBoundingClientRect() : {{left: 0, top: 0}};"
            f"      const sx = c ? c.scrollLeft : 0, sy = c ? c.scrollTop : 0;"
            f"      emitEvent('cm_pointer_move', {{x: e.clientX, y: e.clientY,"
            f"        ox: r.left - sx, oy: r.top - sy}});"
            f"    }},"
            f"    up: () => emitEvent('cm_pointer_release', {{}}),"
            f"    blur: () => emitEvent('cm_pointer_blur', {{}}),"
            f"  }};"
            f"  window._cmGesture = g;"
            f"  document.addEventListener('mousemove', g.move);"
            f"  document.addEventListener('mouseup', g.up);"
            f"  window.addEventListener('blur', g.blur);"
            f"}})();"
        )
        # fmt: on


@dataclass
class EditorState:
    """Per-client editor state."""

    settings: Settings
    document: ContractDocument
    host: HostModel
    bridge: SyncBridge
    adapter: AttributedRangeAdapter
    resolver: HighlightResolver
    pointer: BrowserPointerEvents
    interaction: AnnotationInteraction | None = None
    binder: HoverBinder | None = None
    manager: OverlayManager | None = None
    container: ui.element | None = None
    text_layer: ui.element | None = None
    rendered: list[RenderedHighlight] = field(default_factory=list)
    processing: bool = False
    text_draft: str | None = None
    unobserve: Callable[[], None] | None = None
    refresh_tooltip: Callable[[], None] | None = None
    refresh_overlays: Callable[[], None] | None = None
    refresh_panel: Callable[[], None] | None = None
    refresh_text_editor: Callable[[], None] | None = None


# --- Host persistence ---


def _load_host() -> HostModel:
    """Rebuild the host lists from the user's browser-bound storage."""
    storage = app.storage.user
    return HostModel(
        highlights=[
            HighlightData.model_validate(h)
            for h in storage.get(_STORAGE_HIGHLIGHTS, [])
        ],
        signatures=[
            SignatureOverlay.model_validate(s)
            for s in storage.get(_STORAGE_SIGNATURES, [])
        ],
    )


def _save_host(host: HostModel) -> None:
    storage = app.storage.user
    storage[_STORAGE_HIGHLIGHTS] = [h.model_dump() for h in host.highlights]
    storage[_STORAGE_SIGNATURES] = [
        s.model_dump(by_alias=True) for s in host.signatures
    ]


def _load_document(settings: Settings, doc_id: str) -> tuple[ContractDocument, bool]:
    """Load the user's edited contract, or the configured initial content.

    Returns:
        The document, and whether it came from the user's storage.
    """
    stored = app.storage.user.get(_STORAGE_DOCUMENT)
    if stored:
        return ContractDocument.from_markup(doc_id, stored), True
    return ContractDocument.from_markup(doc_id, settings.editor.initial_content), False


def _on_document_change(state: EditorState) -> None:
    app.storage.user[_STORAGE_DOCUMENT] = state.document.to_markup()
    _render_document(state)


# --- Document rendering ---


def _render_document(state: EditorState) -> None:
    """Rebuild the text layer from the document runs and rebind hovers."""
    layer = state.text_layer
    if layer is None or state.binder is None:
        return
    layer.clear()
    rendered: list[RenderedHighlight] = []
    with layer:
        for paragraph in segment_runs(state.document.runs()):
            with ui.element("p").classes("contract-paragraph"):
                if not paragraph:
                    ui.element("br")
                for segment in paragraph:
                    span = TextElement(tag="span", text=segment.text).props(
                        f"data-start={segment.start}"
                    )
                    if segment.comment is None:
                        continue
                    element = RenderedHighlight(segment.comment, segment.text)
                    span.classes(HIGHLIGHT_CLASS).props(
                        'data-testid="highlight-span"'
                    )
                    span.on(
                        "mouseenter",
                        lambda e, el=element: el.enter(Rect(**e.args)),
                        js_handler=_RECT_JS,
                    )
                    rendered.append(element)
    state.rendered = rendered
    state.binder.reconcile(rendered)


def _setup_selection_handlers(state: EditorState, container_id: int) -> None:
    """Report browser selections inside the text layer as document offsets.

    Each rendered span carries ``data-start``, its offset in the plain text,
    so offsets survive paragraph breaks that the DOM does not spell out.
    """

    def on_selection(e: GenericEventArguments) -> None:
        start = e.args.get("start")
        end = e.args.get("end")
        if not isinstance(start, int) or not isinstance(end, int):
            return
        state.document.set_selection(start, end)

    def on_selection_cleared(_e: GenericEventArguments) -> None:
        state.document.set_selection(None, None)

    ui.on("cm_selection", on_selection)
    ui.on("cm_selection_cleared", on_selection_cleared)

    ui.run_javascript(_selection_js(container_id))


def _selection_js(container_id: int) -> str:
    """Listener script reporting selections as code-point offsets.

    DOM text offsets count UTF-16 units; ``Array.from`` counts code points,
    which is what ``data-start`` holds.
    """
    # fmt: off
    return (
        f"(function() {{"
        f"  const container = getHtmlElement({container_id});"
        f"  function offsetOf(node, off) {{"
        f"    const el = node.nodeType === 3 ? node.parentElement : node;"
        f"    const seg = el && el.closest('[data-start]');"
        f"    if (!seg || !container.contains(seg)) return null;"
        f"    const inner = node.nodeType === 3"
        f"      ? Array.from(node.data.slice(0, off)).length : 0;"
        f"    return parseInt(seg.dataset.start, 10) + inner;"
        f"  }}"
        f"  function check() {{"
        f"    const s = window.getSelection();"
        f"    if (!s || s.isCollapsed || s.rangeCount === 0) {{"
        f"      emitEvent('cm_selection_cleared', {{}}); return;"
        f"    }}"
        f"    const r = s.getRangeAt(0);"
        f"    if (!container.contains(r.commonAncestorContainer)) return;"
        f"    const start = offsetOf(r.startContainer, r.startOffset);"
        f"    const end = offsetOf(r.endContainer, r.endOffset);"
        f"    if (start === null || end === null) return;"
        f"    emitEvent('cm_selection', {{start: start, end: end}});"
        f"  }}"
        f"  container.addEventListener('mouseup', () =>"
        f"    setTimeout(check, {SELECTION_DEBOUNCE_MS}));"
        f"  container.addEventListener('keyup', () =>"
        f"    setTimeout(check, {SELECTION_DEBOUNCE_MS}));"
        f"  container.setAttribute('data-handlers-ready', 'true');"
        f"}})();"
    )
    # fmt: on


def _setup_pointer_handlers(state: EditorState) -> None:
    def on_move(e: GenericEventArguments) -> None:
        state.pointer.dispatch(
            PointerEvent.MOVE,
            Point(x=e.args.get("x", 0), y=e.args.get("y", 0)),
            Point(x=e.args.get("ox", 0), y=e.args.get("oy", 0)),
        )

    ui.on("cm_pointer_move", on_move, throttle=POINTER_THROTTLE_S)
    ui.on(
        "cm_pointer_release",
        lambda _e: state.pointer.dispatch(PointerEvent.RELEASE),
    )
    ui.on("cm_pointer_blur", lambda _e: state.pointer.dispatch(PointerEvent.BLUR))


# --- Actions ---


async def _add_highlight(state: EditorState) -> None:
    """Capture the selection and ask for its comment."""
    if state.processing:
        return
    state.processing = True
    try:
        try:
            state.resolver.capture_selection()
        except ContractMarkError as exc:
            ui.notify(exc.notice, type="warning")
            return
        highlight = await show_comment_dialog(state.resolver)
        if highlight is not None:
            ui.notify("Yorum eklendi", type="positive")
            await ui.run_javascript("window.getSelection().removeAllRanges();")
    finally:
        state.processing = False


async def _add_signature(state: EditorState) -> None:
    manager = state.manager
    if manager is None:
        return
    manager.create()
    committed = await show_signature_dialog(manager, state.settings.signature)
    if not committed:
        manager.cancel_pending()


def _begin_text_edit(state: EditorState) -> None:
    if state.interaction is not None:
        state.interaction.close()
    state.text_draft = state.document.plain_text()
    if state.refresh_text_editor is not None:
        state.refresh_text_editor()


def _finish_text_edit(state: EditorState, *, apply: bool) -> None:
    """Close the text editor, splicing the draft into the document on apply.

    Stored highlight records keep their creation-time offsets; the in-document
    highlights move with the text.
    """
    draft, state.text_draft = state.text_draft, None
    if apply and draft is not None and state.document.replace_text(draft):
        ui.notify("Metin güncellendi", type="positive")
    if state.refresh_text_editor is not None:
        state.refresh_text_editor()


def _save_tooltip_edit(state: EditorState) -> None:
    if state.interaction is None:
        return
    try:
        state.interaction.save_edit()
    except MissingComment as exc:
        ui.notify(exc.notice, type="warning")


# --- Page ---


def _build_state(
    settings: Settings, client: Client, document: ContractDocument
) -> EditorState:
    host = _load_host()
    bridge = host.bridge()
    adapter = AttributedRangeAdapter(document)
    resolver = HighlightResolver(
        document, adapter, bridge, strategy=settings.annotation.offset_strategy
    )
    return EditorState(
        settings=settings,
        document=document,
        host=host,
        bridge=bridge,
        adapter=adapter,
        resolver=resolver,
        pointer=BrowserPointerEvents(client),
    )


def _restore_overlays(state: EditorState) -> None:
    """Place previously committed signatures back on the document."""
    if state.manager is None:
        return
    state.manager.overlays.extend(
        s.model_copy(deep=True) for s in state.host.signatures
    )


@page_route("/", title="Sözleşme Düzenleyici", icon="description", order=10)
async def contract_editor_page(client: Client) -> None:
    """Contract editor with comment highlights and signature overlays."""
    settings = get_settings()
    document, restored = _load_document(settings, f"contract-{client.id}")
    state = _build_state(settings, client, document)

    ui.add_css(HIGHLIGHT_CSS + _PAGE_CSS)

    def on_host_change() -> None:
        _save_host(state.host)
        if state.refresh_panel is not None:
            state.refresh_panel()

    state.host.on_change = on_host_change

    state.interaction = AnnotationInteraction(
        state.adapter,
        state.bridge,
        tooltip_offset=settings.annotation.tooltip_offset,
        on_change=lambda: state.refresh_tooltip and state.refresh_tooltip(),
    )
    state.binder = HoverBinder(state.interaction.hover_enter)
    state.manager = OverlayManager(
        state.bridge,
        state.pointer,
        settings.overlay,
        on_change=lambda: state.refresh_overlays and state.refresh_overlays(),
    )

    with ui.header().classes("items-center"):
        ui.label(settings.app.title).classes("text-h6")
        ui.space()
        ui.button(
            "Vurgula", icon="border_color", on_click=lambda: _add_highlight(state)
        ).props('color=amber-8 text-color=black data-testid="highlight-btn"')
        ui.button(
            "İmza Ekle", icon="draw", on_click=lambda: _add_signature(state)
        ).props('color=white text-color=primary data-testid="signature-btn"')
        ui.button(
            "Metni Düzenle", icon="edit_note", on_click=lambda: _begin_text_edit(state)
        ).props('flat color=white data-testid="edit-text-btn"')

    @ui.refreshable
    def text_editor() -> None:
        _render_text_editor(state)

    text_editor()
    state.refresh_text_editor = text_editor.refresh

    with ui.row().classes("w-full no-wrap gap-4 items-start"):
        state.container = (
            ui.element("div")
            .classes("contract-container grow")
            .props('data-testid="contract-container"')
        )
        with state.container:
            state.text_layer = ui.element("div").props(
                'data-testid="contract-text"'
            )

            @ui.refreshable
            def overlay_layer() -> None:
                manager = state.manager
                if manager is None:
                    return
                for overlay in manager.overlays:
                    _render_overlay(state, overlay)

            overlay_layer()
            state.refresh_overlays = overlay_layer.refresh

        with ui.card().classes("w-80 shrink-0"):

            @ui.refreshable
            def host_panel() -> None:
                _render_host_panel(state)

            host_panel()
            state.refresh_panel = host_panel.refresh

    @ui.refreshable
    def tooltip_view() -> None:
        _render_tooltip(state)

    tooltip_view()
    state.refresh_tooltip = tooltip_view.refresh

    state.pointer.bind_container(state.container.id)
    state.unobserve = state.document.observe(lambda: _on_document_change(state))
    _render_document(state)
    _restore_overlays(state)
    overlay_layer.refresh()

    # An edited document already carries its highlights in its markup.
    if not restored:
        drifted = state.bridge.reconcile(
            state.host.highlights, state.adapter, state.document.plain_text()
        )
        if drifted:
            logger.warning(
                "%d stored highlight(s) could not be re-applied", len(drifted)
            )

    _setup_pointer_handlers(state)

    await client.connected()
    _setup_selection_handlers(state, state.text_layer.id)
    client.on_disconnect(lambda: _teardown(state))


def _teardown(state: EditorState) -> None:
    """Release the document observer and any running gesture."""
    if state.unobserve is not None:
        state.unobserve()
        state.unobserve = None
    if state.manager is not None:
        state.manager.end_gesture()


def _render_text_editor(state: EditorState) -> None:
    if state.text_draft is None:
        return
    with ui.card().classes("w-full").props('data-testid="text-editor"'):
        ui.textarea(
            value=state.text_draft,
            on_change=lambda e: setattr(state, "text_draft", e.value or ""),
        ).props("outlined autogrow").classes("w-full")
        with ui.row().classes("justify-end gap-1"):
            ui.button(
                "Vazgeç", on_click=lambda: _finish_text_edit(state, apply=False)
            ).props("flat dense")
            ui.button(
                "Uygula", on_click=lambda: _finish_text_edit(state, apply=True)
            ).props('dense color=primary data-testid="apply-text-btn"')


def _render_overlay(state: EditorState, overlay: SignatureOverlay) -> None:
    manager = state.manager
    assert manager is not None
    box = (
        ui.element("div")
        .classes("signature-overlay")
        .style(
            f"left: {overlay.position.x}px; top: {overlay.position.y}px;"
            f" width: {overlay.size.width}px; height: {overlay.size.height}px"
        )
        .props('data-testid="signature-overlay"')
    )

    def on_drag_start(e: GenericEventArguments) -> None:
        manager.begin_drag(
            overlay.id,
            Point(x=e.args["x"], y=e.args["y"]),
            Rect(left=e.args["left"], top=e.args["top"]),
        )

    box.on("mousedown", on_drag_start, js_handler=_DRAG_START_JS)
    with box:
        if overlay.is_pending:
            ui.label("İmza bekleniyor…").classes("text-caption text-grey m-auto")
        else:
            ui.image(overlay.image).props("no-spinner fit=contain").classes("grow")
            with ui.element("div").classes("signature-meta px-1"):
                signer = overlay.signer
                for line in (signer.name, signer.title, signer.company, overlay.date):
                    if line:
                        ui.label(line)
        ui.element("div").classes("resize-handle").on(
            "mousedown",
            lambda _e: manager.begin_resize(overlay.id),
            js_handler=_RESIZE_START_JS,
        )


def _render_tooltip(state: EditorState) -> None:
    interaction = state.interaction
    if interaction is None:
        return
    tip = interaction.tooltip
    if not tip.visible:
        return
    with (
        ui.card()
        .classes("comment-tooltip p-2")
        .style(f"left: {tip.x}px; top: {tip.y}px")
        .props('data-testid="comment-tooltip"')
    ):
        if tip.editing:
            ui.textarea(
                value=interaction.draft,
                on_change=lambda e: interaction.update_draft(e.value or ""),
            ).props("outlined dense autofocus").classes("w-72")
            with ui.row().classes("justify-end gap-1"):
                ui.button("İptal", on_click=interaction.cancel_edit).props(
                    "flat dense"
                )
                ui.button(
                    "Kaydet", on_click=lambda: _save_tooltip_edit(state)
                ).props("dense color=primary")
        else:
            with ui.row().classes("items-start no-wrap gap-1"):
                ui.label(tip.text).classes("text-body2").style("white-space: pre-wrap")
                ui.button(icon="edit", on_click=interaction.begin_edit).props(
                    "flat dense round size=sm"
                )
                ui.button(icon="close", on_click=interaction.close).props(
                    "flat dense round size=sm"
                )


def _render_host_panel(state: EditorState) -> None:
    ui.label("Yorumlar").classes("text-subtitle1 font-bold")
    if not state.host.highlights:
        ui.label("Henüz yorum yok").classes("text-caption text-grey")
    for highlight in state.host.highlights:
        with ui.column().classes("gap-0 mb-2"):
            ui.label(f"“{highlight.text}”").classes("text-caption italic")
            ui.label(highlight.comment).classes("text-body2")

    ui.separator()
    ui.label("İmzalar").classes("text-subtitle1 font-bold")
    if not state.host.signatures:
        ui.label("Henüz imza yok").classes("text-caption text-grey")
    for signature in state.host.signatures:
        ui.label(f"{signature.signer.name} - {signature.date}").classes("text-body2")
