"""Tests for page registration."""

from __future__ import annotations


class TestPageRegistry:
    def test_editor_is_registered_at_root(self) -> None:
        import contractmark.pages  # noqa: F401
        from contractmark.pages.registry import get_pages

        routes = {meta.route: meta for meta in get_pages()}
        assert "/" in routes
        assert routes["/"].icon == "description"

    def test_pages_sorted_by_order(self) -> None:
        from contractmark.pages.registry import get_pages

        orders = [meta.order for meta in get_pages()]
        assert orders == sorted(orders)
