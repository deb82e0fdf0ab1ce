from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from statplot.geometry import Point, Rectangle
from statplot.styles import RGBA, FillStyle, Glyph, LineStyle, TextStyle


class TextMetrics(Protocol):
    def measure_text(self, text: str, style: TextStyle) -> tuple[float, float]: ...

    def line_height(self, style: TextStyle) -> float: ...


class DrawingContext(TextMetrics, Protocol):
    """Primitive drawing calls the plot pipeline needs from a backend. Device units are pixels."""

    @property
    def size(self) -> tuple[int, int]: ...

    def draw_line(self, points: Sequence[Point], style: LineStyle, *, clip: Rectangle | None = None) -> None: ...

    def draw_polyline(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        style: LineStyle,
        *,
        clip: Rectangle | None = None,
    ) -> None: ...

    def draw_rectangle(self, rect: Rectangle, style: LineStyle) -> None: ...

    def fill_rectangle(self, rect: Rectangle, fill: FillStyle) -> None: ...

    def draw_glyph(self, x: float, y: float, glyph: Glyph, radius: float, color: RGBA) -> None: ...

    def draw_glyphs(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        glyph: Glyph,
        radius: float | np.ndarray,
        color: RGBA,
    ) -> None: ...

    def draw_text(self, x: float, y: float, text: str, style: TextStyle, *, angle: int = 0) -> None: ...


class MemoizedMetrics:
    """Per-pass cache in front of a backend's text metrics.

    Build one for a single layout or draw pass and drop it afterwards; results are
    identical to calling the backend directly.
    """

    def __init__(self, backend: TextMetrics) -> None:
        self._backend = backend
        self._sizes: dict[tuple[str, TextStyle], tuple[float, float]] = {}
        self._line_heights: dict[TextStyle, float] = {}

    def measure_text(self, text: str, style: TextStyle) -> tuple[float, float]:
        key = (text, style)
        size = self._sizes.get(key)
        if size is None:
            size = self._backend.measure_text(text, style)
            self._sizes[key] = size
        return size

    def line_height(self, style: TextStyle) -> float:
        height = self._line_heights.get(style)
        if height is None:
            height = self._backend.line_height(style)
            self._line_heights[style] = height
        return height


def widest(metrics: TextMetrics, texts: list[str], style: TextStyle) -> float:
    return max((metrics.measure_text(t, style)[0] for t in texts), default=0.0)


def tallest(metrics: TextMetrics, texts: list[str], style: TextStyle) -> float:
    return max((metrics.measure_text(t, style)[1] for t in texts), default=0.0)
