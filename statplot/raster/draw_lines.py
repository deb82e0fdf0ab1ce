from __future__ import annotations

import math

import numpy as np

from statplot.geometry import Rectangle
from statplot.raster.canvas import draw_pixel
from statplot.styles import RGBA


class _DashState:
    """Walks a dash pattern along the pixels of a polyline."""

    def __init__(self, dashes: tuple[float, ...]) -> None:
        self._dashes = dashes
        self._index = 0
        self._left = dashes[0] if dashes else math.inf

    def advance(self, distance: float) -> bool:
        if not self._dashes:
            return True
        on = self._index % 2 == 0
        self._left -= distance
        while self._left <= 0:
            self._index = (self._index + 1) % len(self._dashes)
            self._left += self._dashes[self._index]
        return on


def draw_polyline(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: int = 1,
    dashes: tuple[float, ...] = (),
    clip: Rectangle | None = None,
) -> None:
    if xs.size < 2:
        return
    state = _DashState(dashes)
    for i in range(xs.size - 1):
        p0 = (float(xs[i]), float(ys[i]))
        p1 = (float(xs[i + 1]), float(ys[i + 1]))
        if not all(np.isfinite(p0 + p1)):
            continue
        if clip is not None:
            clipped = clip_segment(p0, p1, clip)
            if clipped is None:
                continue
            p0, p1 = clipped
        _draw_line_segment(
            dst,
            int(round(p0[0])),
            int(round(p0[1])),
            int(round(p1[0])),
            int(round(p1[1])),
            color=color,
            width=width,
            state=state,
        )


def clip_segment(
    p0: tuple[float, float],
    p1: tuple[float, float],
    box: Rectangle,
) -> tuple[tuple[float, float], tuple[float, float]] | None:
    """Liang-Barsky clip of the segment p0-p1 to `box`; None when it lies fully outside."""
    x0, y0 = p0
    x1, y1 = p1
    dx = x1 - x0
    dy = y1 - y0
    t0, t1 = 0.0, 1.0
    for p, q in (
        (-dx, x0 - box.x_min),
        (dx, box.x_max - x0),
        (-dy, y0 - box.y_min),
        (dy, box.y_max - y0),
    ):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)
    return (x0 + t0 * dx, y0 + t0 * dy), (x0 + t1 * dx, y0 + t1 * dy)


def _draw_line_segment(
    dst: np.ndarray,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    color: RGBA,
    width: int,
    state: _DashState,
) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    step = 0.0

    while True:
        if state.advance(step):
            _draw_square_brush(dst, x0, y0, color=color, width=width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        moved_x = moved_y = False
        if e2 >= dy:
            err += dy
            x0 += sx
            moved_x = True
        if e2 <= dx:
            err += dx
            y0 += sy
            moved_y = True
        step = math.sqrt(2.0) if moved_x and moved_y else 1.0


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color)
