from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Range:
    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    @property
    def is_empty(self) -> bool:
        return not (self.min <= self.max)

    def union(self, other: "Range") -> "Range":
        return Range(min=min(self.min, other.min), max=max(self.max, other.max))


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned box in data space or device space.

    Device rectangles keep `y_min` at the top edge of the canvas.
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def x_range(self) -> Range:
        return Range(min=self.x_min, max=self.x_max)

    @property
    def y_range(self) -> Range:
        return Range(min=self.y_min, max=self.y_max)

    @property
    def is_empty(self) -> bool:
        return self.x_range.is_empty or self.y_range.is_empty

    def union(self, other: "Rectangle") -> "Rectangle":
        return Rectangle(
            x_min=min(self.x_min, other.x_min),
            x_max=max(self.x_max, other.x_max),
            y_min=min(self.y_min, other.y_min),
            y_max=max(self.y_max, other.y_max),
        )

    @classmethod
    def from_ranges(cls, x: Range, y: Range) -> "Rectangle":
        return cls(x_min=x.min, x_max=x.max, y_min=y.min, y_max=y.max)


EMPTY_RECTANGLE = Rectangle(x_min=math.inf, x_max=-math.inf, y_min=math.inf, y_max=-math.inf)


@dataclass(frozen=True)
class Residual:
    """Device-space overflow past each edge of a destination rectangle."""

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0

    def max(self, other: "Residual") -> "Residual":
        return Residual(
            left=max(self.left, other.left),
            right=max(self.right, other.right),
            top=max(self.top, other.top),
            bottom=max(self.bottom, other.bottom),
        )


ZERO_RESIDUAL = Residual()


def union_all(rects: list[Rectangle]) -> Rectangle:
    out = EMPTY_RECTANGLE
    for rect in rects:
        out = out.union(rect)
    return out


def bounds_of(xs: np.ndarray, ys: np.ndarray) -> Rectangle:
    mask = np.isfinite(xs) & np.isfinite(ys)
    if not np.any(mask):
        return EMPTY_RECTANGLE
    vx = xs[mask]
    vy = ys[mask]
    return Rectangle(
        x_min=float(np.min(vx)),
        x_max=float(np.max(vx)),
        y_min=float(np.min(vy)),
        y_max=float(np.max(vy)),
    )


def range_padding(r: Range, ratio: float) -> float:
    if r.is_empty or not math.isfinite(r.span):
        return 0.0
    return r.span * ratio


def shrink(rect: Rectangle, residual: Residual) -> Rectangle:
    return Rectangle(
        x_min=rect.x_min + residual.left,
        x_max=rect.x_max - residual.right,
        y_min=rect.y_min + residual.top,
        y_max=rect.y_max - residual.bottom,
    )


def clip_rectangle(rect: Rectangle, box: Rectangle) -> Rectangle | None:
    """Part of `rect` inside `box`, or None when they do not overlap."""
    out = Rectangle(
        x_min=max(rect.x_min, box.x_min),
        x_max=min(rect.x_max, box.x_max),
        y_min=max(rect.y_min, box.y_min),
        y_max=min(rect.y_max, box.y_max),
    )
    if out.x_min > out.x_max or out.y_min > out.y_max:
        return None
    return out


def overflow(
    px: np.ndarray,
    py: np.ndarray,
    extent: np.ndarray | float,
    dst: Rectangle,
    extent_y: np.ndarray | float | None = None,
) -> Residual:
    """Largest distance that shapes centred at (px, py) spill past `dst`.

    `extent` is the half-size of each shape; pass `extent_y` when the half-height differs.
    """
    if px.size == 0:
        return ZERO_RESIDUAL
    ext_x = np.broadcast_to(np.asarray(extent, dtype=np.float64), px.shape)
    ext_y = ext_x if extent_y is None else np.broadcast_to(np.asarray(extent_y, dtype=np.float64), py.shape)
    return Residual(
        left=max(0.0, float(np.max(ext_x - (px - dst.x_min)))),
        right=max(0.0, float(np.max(ext_x - (dst.x_max - px)))),
        top=max(0.0, float(np.max(ext_y - (py - dst.y_min)))),
        bottom=max(0.0, float(np.max(ext_y - (dst.y_max - py)))),
    )
