"""Page registration with navigation metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nicegui import ui

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class PageMeta:
    """Metadata for a registered page."""

    route: str
    title: str
    icon: str
    order: int = field(default=100)


_page_registry: dict[str, PageMeta] = {}


def page_route(
    route: str,
    *,
    title: str,
    icon: str,
    order: int = 100,
) -> Callable:
    """Decorator to register a page with NiceGUI and the page registry.

    Usage:
        @page_route("/", title="Sözleşme", icon="description")
        async def editor_page():
            ...
    """

    def decorator(func: Callable) -> Callable:
        _page_registry[route] = PageMeta(route=route, title=title, icon=icon, order=order)
        return ui.page(route, title=title)(func)

    return decorator


def get_pages() -> list[PageMeta]:
    """Registered pages sorted by order."""
    return sorted(_page_registry.values(), key=lambda m: (m.order, m.route))
