"""Tests for HoverBinder listener reconciliation across re-renders."""

from __future__ import annotations

from contractmark.annotation.hover import HoverBinder, RenderedHighlight
from contractmark.models import Rect


def _render(*comments: str) -> list[RenderedHighlight]:
    return [RenderedHighlight(c) for c in comments]


class TestHoverBinder:
    def test_enter_reaches_callback(self) -> None:
        seen: list[tuple[str, float]] = []
        binder = HoverBinder(lambda el, rect: seen.append((el.comment, rect.left)))
        elements = _render("A", "B")
        binder.reconcile(elements)

        elements[1].enter(Rect(left=12, top=3))

        assert seen == [("B", 12)]

    def test_one_listener_per_rendered_element(self) -> None:
        binder = HoverBinder(lambda el, rect: None)
        elements = _render("A", "B", "C")
        assert binder.reconcile(elements) == 3
        assert [len(el.listeners) for el in elements] == [1, 1, 1]

    def test_rerender_detaches_previous_elements(self) -> None:
        seen: list[str] = []
        binder = HoverBinder(lambda el, rect: seen.append(el.comment))
        old = _render("A", "B")
        binder.reconcile(old)
        new = _render("A")
        binder.reconcile(new)

        assert [len(el.listeners) for el in old] == [0, 0]
        assert binder.bound_count == 1
        old[0].enter(Rect(left=0, top=0))
        assert seen == []

    def test_repeated_renders_do_not_accumulate(self) -> None:
        binder = HoverBinder(lambda el, rect: None)
        elements = _render("A", "B")
        for _ in range(5):
            binder.reconcile(elements)
        assert binder.bound_count == 2
        assert [len(el.listeners) for el in elements] == [1, 1]

    def test_clear_detaches_everything(self) -> None:
        binder = HoverBinder(lambda el, rect: None)
        elements = _render("A")
        binder.reconcile(elements)
        binder.clear()
        assert binder.bound_count == 0
        assert len(elements[0].listeners) == 0
