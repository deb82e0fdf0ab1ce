from __future__ import annotations

from typing import Sequence

import numpy as np

from statplot.geometry import Point, Rectangle
from statplot.raster.canvas import blend_mask, fill_rect, new_canvas
from statplot.raster.draw_lines import draw_polyline
from statplot.raster.draw_markers import draw_markers
from statplot.raster.draw_text import line_height, text_mask, text_size
from statplot.styles import RGBA, WHITE, FillStyle, Glyph, LineStyle, TextStyle


class RasterContext:
    """Drawing backend over an (H, W, 4) uint8 RGBA numpy canvas with Pillow text."""

    def __init__(self, width: int, height: int, background: RGBA = WHITE) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("canvas width and height must be > 0")
        self.canvas = new_canvas(width, height, color=background)

    @property
    def size(self) -> tuple[int, int]:
        return (self.canvas.shape[1], self.canvas.shape[0])

    def measure_text(self, text: str, style: TextStyle) -> tuple[float, float]:
        w, h = text_size(text, style)
        return (float(w), float(h))

    def line_height(self, style: TextStyle) -> float:
        return float(line_height(style))

    def draw_line(self, points: Sequence[Point], style: LineStyle, *, clip: Rectangle | None = None) -> None:
        xs = np.asarray([p.x for p in points], dtype=np.float64)
        ys = np.asarray([p.y for p in points], dtype=np.float64)
        self.draw_polyline(xs, ys, style, clip=clip)

    def draw_polyline(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        style: LineStyle,
        *,
        clip: Rectangle | None = None,
    ) -> None:
        if style.width <= 0:
            return
        draw_polyline(
            self.canvas,
            np.asarray(xs, dtype=np.float64),
            np.asarray(ys, dtype=np.float64),
            style.color,
            width=max(1, int(round(style.width))),
            dashes=style.dashes,
            clip=clip,
        )

    def draw_rectangle(self, rect: Rectangle, style: LineStyle) -> None:
        self.draw_line(
            [
                Point(rect.x_min, rect.y_min),
                Point(rect.x_max, rect.y_min),
                Point(rect.x_max, rect.y_max),
                Point(rect.x_min, rect.y_max),
                Point(rect.x_min, rect.y_min),
            ],
            style,
        )

    def fill_rectangle(self, rect: Rectangle, fill: FillStyle) -> None:
        x0, x1 = sorted((rect.x_min, rect.x_max))
        y0, y1 = sorted((rect.y_min, rect.y_max))
        fill_rect(
            self.canvas,
            int(round(x0)),
            int(round(y0)),
            int(round(x1)),
            int(round(y1)),
            fill.color,
        )

    def draw_glyph(self, x: float, y: float, glyph: Glyph, radius: float, color: RGBA) -> None:
        self.draw_glyphs(np.asarray([x]), np.asarray([y]), glyph, radius, color)

    def draw_glyphs(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        glyph: Glyph,
        radius: float | np.ndarray,
        color: RGBA,
    ) -> None:
        draw_markers(self.canvas, xs, ys, color=color, radius=radius, glyph=glyph)

    def draw_text(self, x: float, y: float, text: str, style: TextStyle, *, angle: int = 0) -> None:
        """Draw `text` centred on (x, y); `angle` is a counter-clockwise multiple of 90 degrees."""
        if not text:
            return
        mask = text_mask(text, style, rotate_deg=angle)
        h, w = mask.shape
        blend_mask(self.canvas, int(round(x - w / 2.0)), int(round(y - h / 2.0)), mask, style.color)
