from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from statplot.adapters.normalize import normalize_points
from statplot.datasets.base import Dataset, average_slope, inside_mask, mean_y_within
from statplot.errors import PlotDataError
from statplot.geometry import Rectangle, Residual, ZERO_RESIDUAL, bounds_of, overflow
from statplot.metrics import DrawingContext, TextMetrics
from statplot.styles import BLACK, RGBA, Glyph, cycle_color, cycle_glyph
from statplot.transform import build_transform


DEFAULT_POINT_RADIUS_PX = 3.0


class ScatterDataset(Dataset):
    def __init__(
        self,
        points: Any,
        *,
        glyph: Glyph = "circle",
        color: RGBA = BLACK,
        radius: float = DEFAULT_POINT_RADIUS_PX,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if radius < 0:
            raise PlotDataError("point radius must be >= 0")
        self.xs, self.ys = normalize_points(points)
        self.glyph = glyph
        self.color = color
        self.radius = float(radius)

    def bounds(self) -> Rectangle:
        return bounds_of(self.xs, self.ys)

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        mask = inside_mask(self.xs, self.ys, src)
        if not np.any(mask):
            return ZERO_RESIDUAL
        px, py = build_transform(src, dst).map_xy(self.xs[mask], self.ys[mask])
        return overflow(px, py, self.radius, dst)

    def representative_value(self, src: Rectangle) -> float | None:
        return mean_y_within(self.xs, self.ys, src)

    def avg_slope(self, src: Rectangle) -> float | None:
        return average_slope(self.xs, self.ys, src)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        mask = inside_mask(self.xs, self.ys, src)
        if not np.any(mask):
            return
        px, py = build_transform(src, dst).map_xy(self.xs[mask], self.ys[mask])
        ctx.draw_glyphs(px, py, self.glyph, self.radius, self.color)

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        side = 2.0 * self.radius + 1.0
        return (side, side)

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        ctx.draw_glyph(x, y, self.glyph, self.radius, self.color)


class BubbleDataset(Dataset):
    """Scatter plot whose glyph radius grows linearly with a third value per point."""

    def __init__(
        self,
        triples: Any,
        *,
        glyph: Glyph = "ring",
        color: RGBA = BLACK,
        min_radius: float = 2.0,
        max_radius: float = 12.0,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if min_radius < 0 or max_radius < min_radius:
            raise PlotDataError("bubble radii must satisfy 0 <= min_radius <= max_radius")
        self.xs, self.ys, self.zs = normalize_points(triples, columns=3, label="triples")
        self.glyph = glyph
        self.color = color
        self.min_radius = float(min_radius)
        self.max_radius = float(max_radius)

    def radii(self) -> np.ndarray:
        finite = self.zs[np.isfinite(self.zs)]
        if finite.size == 0:
            return np.full(self.zs.shape, self.min_radius)
        lo = float(np.min(finite))
        hi = float(np.max(finite))
        if hi == lo:
            return np.full(self.zs.shape, (self.min_radius + self.max_radius) / 2.0)
        frac = (self.zs - lo) / (hi - lo)
        return self.min_radius + frac * (self.max_radius - self.min_radius)

    def bounds(self) -> Rectangle:
        return bounds_of(self.xs, self.ys)

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        mask = inside_mask(self.xs, self.ys, src) & np.isfinite(self.zs)
        if not np.any(mask):
            return ZERO_RESIDUAL
        px, py = build_transform(src, dst).map_xy(self.xs[mask], self.ys[mask])
        return overflow(px, py, self.radii()[mask], dst)

    def representative_value(self, src: Rectangle) -> float | None:
        return mean_y_within(self.xs, self.ys, src)

    def avg_slope(self, src: Rectangle) -> float | None:
        return average_slope(self.xs, self.ys, src)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        mask = inside_mask(self.xs, self.ys, src) & np.isfinite(self.zs)
        if not np.any(mask):
            return
        px, py = build_transform(src, dst).map_xy(self.xs[mask], self.ys[mask])
        ctx.draw_glyphs(px, py, self.glyph, self.radii()[mask], self.color)

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        side = 2.0 * self.min_radius + 1.0
        return (side, side)

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        ctx.draw_glyph(x, y, self.glyph, self.min_radius, self.color)


def scatter_datasets(
    named_points: Sequence[tuple[str, Any]],
    *,
    uses_color: bool = False,
    radius: float = DEFAULT_POINT_RADIUS_PX,
) -> list[ScatterDataset]:
    return [
        ScatterDataset(points, glyph=cycle_glyph(i), color=cycle_color(i, uses_color), radius=radius, name=name)
        for i, (name, points) in enumerate(named_points)
    ]


def bubble_datasets(
    named_triples: Sequence[tuple[str | None, Any]],
    *,
    uses_color: bool = False,
    min_radius: float = 2.0,
    max_radius: float = 12.0,
) -> list[BubbleDataset]:
    return [
        BubbleDataset(
            triples,
            glyph=cycle_glyph(i),
            color=cycle_color(i, uses_color),
            min_radius=min_radius,
            max_radius=max_radius,
            name=name,
        )
        for i, (name, triples) in enumerate(named_triples)
    ]
