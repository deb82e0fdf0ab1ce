from __future__ import annotations

import logging
from typing import Any, Sequence

import numpy as np

from statplot.adapters.normalize import normalize_points
from statplot.datasets.bars import LEGEND_BOX_PX
from statplot.datasets.base import Dataset
from statplot.errors import PlotDataError
from statplot.geometry import EMPTY_RECTANGLE, Rectangle
from statplot.metrics import DrawingContext, TextMetrics
from statplot.styles import BLACK, RGBA, WHITE, FillStyle
from statplot.transform import build_transform


LOGGER = logging.getLogger(__name__)

Gradient = Sequence[RGBA]
DEFAULT_GRADIENT: tuple[RGBA, ...] = (WHITE, BLACK)


def gradient_color(gradient: Gradient, fraction: float) -> RGBA:
    """Linear interpolation between evenly spaced gradient stops; `fraction` is clamped to [0, 1]."""
    if len(gradient) == 0:
        raise PlotDataError("gradient needs at least one color")
    if len(gradient) == 1:
        return gradient[0]
    f = min(1.0, max(0.0, float(fraction))) * (len(gradient) - 1)
    i = min(int(f), len(gradient) - 2)
    t = f - i
    a = gradient[i]
    b = gradient[i + 1]
    return tuple(int(round(ca + (cb - ca) * t)) for ca, cb in zip(a, b, strict=True))  # type: ignore[return-value]


class HeatmapDataset(Dataset):
    """Grid of square bins, each filled by mapping its value through `gradient`.

    `values` holds one row per y bin, starting at `origin.y`; NaN bins are left empty.
    """

    def __init__(
        self,
        values: np.ndarray,
        *,
        origin: tuple[float, float],
        bin_size: float,
        gradient: Gradient = DEFAULT_GRADIENT,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if bin_size <= 0:
            raise PlotDataError("bin_size must be > 0")
        grid = np.array(values, dtype=np.float64, copy=True)
        if grid.ndim != 2:
            raise PlotDataError(f"heatmap values must be 2D, got shape {grid.shape}")
        if len(gradient) == 0:
            raise PlotDataError("gradient needs at least one color")
        grid.setflags(write=False)
        self.values = grid
        self.origin = (float(origin[0]), float(origin[1]))
        self.bin_size = float(bin_size)
        self.gradient = tuple(gradient)

    def bounds(self) -> Rectangle:
        rows, cols = self.values.shape
        if rows == 0 or cols == 0:
            return EMPTY_RECTANGLE
        x0, y0 = self.origin
        return Rectangle(
            x_min=x0,
            x_max=x0 + cols * self.bin_size,
            y_min=y0,
            y_max=y0 + rows * self.bin_size,
        )

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        finite = self.values[np.isfinite(self.values)]
        if finite.size == 0:
            return
        lo = float(np.min(finite))
        hi = float(np.max(finite))
        span = hi - lo
        tr = build_transform(src, dst)
        x0, y0 = self.origin
        rows, cols = self.values.shape
        for r in range(rows):
            for c in range(cols):
                v = float(self.values[r, c])
                if not np.isfinite(v):
                    continue
                bx0 = max(x0 + c * self.bin_size, src.x_min)
                bx1 = min(x0 + (c + 1) * self.bin_size, src.x_max)
                by0 = max(y0 + r * self.bin_size, src.y_min)
                by1 = min(y0 + (r + 1) * self.bin_size, src.y_max)
                if bx0 >= bx1 or by0 >= by1:
                    continue
                color = gradient_color(self.gradient, (v - lo) / span if span > 0 else 1.0)
                rect = Rectangle(
                    x_min=tr.map_x(bx0),
                    x_max=tr.map_x(bx1),
                    y_min=tr.map_y(by1),
                    y_max=tr.map_y(by0),
                )
                ctx.fill_rectangle(rect, FillStyle(color=color))

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        return (LEGEND_BOX_PX, LEGEND_BOX_PX)

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        half = LEGEND_BOX_PX / 2.0
        rect = Rectangle(x_min=x - half, x_max=x + half, y_min=y - half, y_max=y + half)
        ctx.fill_rectangle(rect, FillStyle(color=self.gradient[-1]))


def _bin_indices(xs: np.ndarray, ys: np.ndarray, bin_size: float) -> tuple[np.ndarray, np.ndarray, tuple[float, float], tuple[int, int]]:
    origin = (float(np.floor(np.min(xs) / bin_size) * bin_size), float(np.floor(np.min(ys) / bin_size) * bin_size))
    cols = np.floor((xs - origin[0]) / bin_size).astype(np.int64)
    rows = np.floor((ys - origin[1]) / bin_size).astype(np.int64)
    return rows, cols, origin, (int(np.max(rows)) + 1, int(np.max(cols)) + 1)


def countmap_dataset(
    points: Any,
    bin_size: float,
    gradient: Gradient = DEFAULT_GRADIENT,
    *,
    name: str | None = None,
) -> HeatmapDataset:
    """Heatmap of how many points fall in each bin."""
    if bin_size <= 0:
        raise PlotDataError("bin_size must be > 0")
    xs, ys = normalize_points(points)
    mask = np.isfinite(xs) & np.isfinite(ys)
    if not np.any(mask):
        raise PlotDataError("countmap points contain no finite coordinates")
    rows, cols, origin, shape = _bin_indices(xs[mask], ys[mask], bin_size)
    grid = np.zeros(shape, dtype=np.float64)
    np.add.at(grid, (rows, cols), 1.0)
    LOGGER.debug("countmap: %d points in %dx%d bins", int(mask.sum()), shape[1], shape[0])
    return HeatmapDataset(grid, origin=origin, bin_size=bin_size, gradient=gradient, name=name)


def valuemap_dataset(
    triples: Any,
    bin_size: float,
    gradient: Gradient = DEFAULT_GRADIENT,
    *,
    name: str | None = None,
) -> HeatmapDataset:
    """Heatmap of the mean third value of the triples in each bin; empty bins stay blank."""
    if bin_size <= 0:
        raise PlotDataError("bin_size must be > 0")
    xs, ys, zs = normalize_points(triples, columns=3, label="triples")
    mask = np.isfinite(xs) & np.isfinite(ys) & np.isfinite(zs)
    if not np.any(mask):
        raise PlotDataError("valuemap triples contain no finite values")
    rows, cols, origin, shape = _bin_indices(xs[mask], ys[mask], bin_size)
    sums = np.zeros(shape, dtype=np.float64)
    counts = np.zeros(shape, dtype=np.float64)
    np.add.at(sums, (rows, cols), zs[mask])
    np.add.at(counts, (rows, cols), 1.0)
    with np.errstate(invalid="ignore", divide="ignore"):
        grid = np.where(counts > 0, sums / counts, np.nan)
    return HeatmapDataset(grid, origin=origin, bin_size=bin_size, gradient=gradient, name=name)
