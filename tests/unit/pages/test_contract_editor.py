"""Tests for the contract editor page helpers that run without a browser."""

from __future__ import annotations

import inspect
from typing import Any

import pytest

from contractmark.annotation.adapter import AttributedRangeAdapter
from contractmark.annotation.resolver import HighlightResolver
from contractmark.config import DEFAULT_CONTENT, OverlayConfig, Settings
from contractmark.models import Point, Rect, SignerInfo
from contractmark.overlay import OverlayManager, PointerEvent
from contractmark.pages.contract_editor import (
    BrowserPointerEvents,
    EditorState,
    _selection_js,
    _teardown,
    contract_editor_page,
)
from contractmark.richtext import ContractDocument
from contractmark.sync import HostModel


class _FakeClient:
    """Records JavaScript sent to the browser."""

    def __init__(self) -> None:
        self.scripts: list[str] = []

    def run_javascript(self, code: str, **_kwargs: Any) -> None:
        self.scripts.append(code)


@pytest.fixture
def client() -> _FakeClient:
    return _FakeClient()


@pytest.fixture
def browser_events(client: _FakeClient) -> BrowserPointerEvents:
    events = BrowserPointerEvents(client)  # type: ignore[arg-type]
    events.bind_container(7)
    return events


class TestBrowserPointerEvents:
    """Browser listeners follow the lifetime of a gesture."""

    def test_idle_sends_nothing(
        self, browser_events: BrowserPointerEvents, client: _FakeClient
    ) -> None:
        assert not browser_events.attached
        assert client.scripts == []

    def test_gesture_attaches_and_release_detaches(
        self, browser_events: BrowserPointerEvents, client: _FakeClient
    ) -> None:
        manager = OverlayManager(HostModel().bridge(), browser_events, OverlayConfig())
        overlay = manager.create()
        manager.commit("img", SignerInfo(name="Ali"))

        manager.begin_drag(overlay.id, Point(), Rect(left=0, top=0))
        assert browser_events.attached
        assert len(client.scripts) == 1
        assert "addEventListener('mousemove'" in client.scripts[0]
        assert "const cid = 7;" in client.scripts[0]
        assert "getHtmlElement(cid)" in client.scripts[0]

        browser_events.dispatch(PointerEvent.RELEASE)
        assert not browser_events.attached
        assert len(client.scripts) == 2
        assert "removeEventListener('mousemove'" in client.scripts[1]

    def test_blur_detaches(
        self, browser_events: BrowserPointerEvents, client: _FakeClient
    ) -> None:
        manager = OverlayManager(HostModel().bridge(), browser_events, OverlayConfig())
        overlay = manager.create()
        manager.begin_resize(overlay.id)
        browser_events.dispatch(PointerEvent.BLUR)
        assert not browser_events.attached
        assert manager.active_gesture is None

    def test_moves_reach_manager(self, browser_events: BrowserPointerEvents) -> None:
        manager = OverlayManager(HostModel().bridge(), browser_events, OverlayConfig())
        overlay = manager.create()
        manager.begin_drag(overlay.id, Point(x=205, y=205), Rect(left=200, top=200))
        browser_events.dispatch(
            PointerEvent.MOVE, Point(x=105, y=55), Point(x=0, y=0)
        )
        assert (overlay.position.x, overlay.position.y) == (100, 50)


class TestPageStructure:
    def test_page_is_async(self) -> None:
        assert inspect.iscoroutinefunction(contract_editor_page)


class TestSelectionScript:
    """Browser selection offsets are reported in code points."""

    def test_text_offsets_are_counted_as_code_points(self) -> None:
        script = _selection_js(3)
        assert "getHtmlElement(3)" in script
        assert "Array.from(node.data.slice(0, off)).length" in script
        assert "emitEvent('cm_selection'" in script


class TestDocumentLifecycle:
    """The page's document observer lives until the client disconnects."""

    @pytest.fixture
    def state(self, client: _FakeClient) -> EditorState:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        document = ContractDocument.from_markup("page", DEFAULT_CONTENT)
        host = HostModel()
        bridge = host.bridge()
        adapter = AttributedRangeAdapter(document)
        return EditorState(
            settings=settings,
            document=document,
            host=host,
            bridge=bridge,
            adapter=adapter,
            resolver=HighlightResolver(document, adapter, bridge),
            pointer=BrowserPointerEvents(client),  # type: ignore[arg-type]
        )

    def test_initial_content_is_loaded_as_paragraphs(
        self, state: EditorState
    ) -> None:
        assert state.document.plain_text() == (
            "Bu bir örnek sözleşme metnidir.\n"
            "İmzalamak için aşağıdaki alana tıklayınız."
        )

    def test_teardown_releases_observer(self, state: EditorState) -> None:
        calls: list[int] = []
        state.unobserve = state.document.observe(lambda: calls.append(1))
        state.document.replace_text("Yeni metin")
        assert calls == [1]

        _teardown(state)
        state.document.replace_text("Son metin")

        assert calls == [1]
        assert state.unobserve is None
