from __future__ import annotations

from functools import lru_cache

import numpy as np

from statplot.raster.canvas import blend_mask
from statplot.styles import RGBA, Glyph


def draw_markers(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    radius: float = 1.0,
    glyph: Glyph = "square",
) -> None:
    radii = np.broadcast_to(np.asarray(radius, dtype=np.float64), np.shape(xs))
    for x, y, r in zip(np.asarray(xs).tolist(), np.asarray(ys).tolist(), radii.tolist(), strict=False):
        draw_glyph(dst, float(x), float(y), glyph=glyph, radius=float(r), color=color)


def draw_glyph(dst: np.ndarray, x: float, y: float, *, glyph: Glyph, radius: float, color: RGBA) -> None:
    r = max(0, int(round(radius)))
    mask = _glyph_mask(glyph, r)
    blend_mask(dst, int(round(x)) - r, int(round(y)) - r, mask, color)


@lru_cache(maxsize=256)
def _glyph_mask(glyph: Glyph, r: int) -> np.ndarray:
    size = 2 * r + 1
    yy, xx = np.mgrid[0:size, 0:size].astype(np.float64) - r
    dist = np.hypot(xx, yy)
    thickness = max(1.0, r / 4.0)
    if glyph == "circle":
        mask = dist <= r + 0.5
    elif glyph == "ring":
        mask = (dist <= r + 0.5) & (dist >= r + 0.5 - thickness)
    elif glyph == "square":
        mask = np.ones((size, size), dtype=bool)
    elif glyph == "box":
        mask = (np.abs(xx) > r - thickness) | (np.abs(yy) > r - thickness)
    elif glyph == "plus":
        mask = (np.abs(xx) < thickness / 2 + 0.5) | (np.abs(yy) < thickness / 2 + 0.5)
    elif glyph == "cross":
        mask = (np.abs(xx - yy) < thickness) | (np.abs(xx + yy) < thickness)
    elif glyph == "triangle":
        # Apex at the top, base on the bottom row.
        mask = (yy >= -r) & (np.abs(xx) <= (yy + r) / 2.0 + 0.5)
    else:
        raise ValueError(f"unknown glyph: {glyph}")
    out = mask.astype(np.uint8) * 255
    out.setflags(write=False)
    return out
