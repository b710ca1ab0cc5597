"""Freehand signature pad: stroke recording and PNG export.

Strokes are recorded as point lists in canvas pixels. Each stroke keeps the
pen colour and width that were active when it started, so changing the pen
only affects later strokes.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from PIL import Image, ImageColor, ImageDraw

from contractmark.errors import EmptyCanvas

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

MIN_PEN_WIDTH = 1
MAX_PEN_WIDTH = 10


@dataclass
class Stroke:
    color: str
    width: int
    points: list[tuple[float, float]] = field(default_factory=list)


class SignaturePad:
    """Records pen strokes and renders them to a transparent PNG."""

    def __init__(
        self,
        width: int = 600,
        height: int = 200,
        *,
        pen_color: str = "#000000",
        pen_width: int = 2,
        on_begin: Callable[[], None] | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self._pen_color = ""
        self._pen_width = MIN_PEN_WIDTH
        self.pen_color = pen_color
        self.pen_width = pen_width
        self.strokes: list[Stroke] = []
        self._drawing = False
        self._on_begin = on_begin

    @property
    def pen_color(self) -> str:
        return self._pen_color

    @pen_color.setter
    def pen_color(self, value: str) -> None:
        ImageColor.getrgb(value)  # raises ValueError for unknown colours
        self._pen_color = value

    @property
    def pen_width(self) -> int:
        return self._pen_width

    @pen_width.setter
    def pen_width(self, value: int) -> None:
        self._pen_width = max(MIN_PEN_WIDTH, min(MAX_PEN_WIDTH, int(value)))

    @property
    def has_content(self) -> bool:
        return bool(self.strokes)

    def begin_stroke(self, x: float, y: float) -> None:
        first = not self.strokes
        self.strokes.append(Stroke(self._pen_color, self._pen_width, [(x, y)]))
        self._drawing = True
        if first and self._on_begin is not None:
            self._on_begin()

    def extend_stroke(self, x: float, y: float) -> None:
        if self._drawing and self.strokes:
            self.strokes[-1].points.append((x, y))

    def end_stroke(self) -> None:
        self._drawing = False

    def clear(self) -> None:
        self.strokes.clear()
        self._drawing = False

    def to_svg(self) -> str:
        """Strokes as SVG shapes for live display on the drawing surface."""
        shapes = []
        for stroke in self.strokes:
            if len(stroke.points) >= 2:
                points = " ".join(f"{x:.1f},{y:.1f}" for x, y in stroke.points)
                shapes.append(
                    f'<polyline points="{points}" fill="none" '
                    f'stroke="{stroke.color}" stroke-width="{stroke.width}" '
                    'stroke-linecap="round" stroke-linejoin="round" />'
                )
            else:
                x, y = stroke.points[0]
                shapes.append(
                    f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{stroke.width / 2}" '
                    f'fill="{stroke.color}" />'
                )
        return "".join(shapes)

    def render_png(self) -> bytes:
        """Rasterise the strokes onto a transparent canvas."""
        img = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(img)
        for stroke in self.strokes:
            fill = ImageColor.getrgb(stroke.color)
            if len(stroke.points) >= 2:
                draw.line(stroke.points, fill=fill, width=stroke.width, joint="curve")
            else:
                x, y = stroke.points[0]
                r = stroke.width / 2
                draw.ellipse((x - r, y - r, x + r, y + r), fill=fill)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def to_image(self) -> str:
        """Return the drawing as a ``data:image/png;base64,...`` URL.

        Raises:
            EmptyCanvas: Nothing has been drawn.
        """
        if not self.has_content:
            raise EmptyCanvas
        encoded = base64.b64encode(self.render_png()).decode("ascii")
        logger.debug("Rendered signature: %d stroke(s)", len(self.strokes))
        return f"data:image/png;base64,{encoded}"
