from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from statplot.adapters.normalize import normalize_values
from statplot.datasets.base import Dataset
from statplot.errors import PlotDataError
from statplot.geometry import EMPTY_RECTANGLE, Rectangle, clip_rectangle
from statplot.metrics import DrawingContext, TextMetrics
from statplot.styles import BLACK, GRAY, FillStyle, LineStyle, cycle_color, with_alpha
from statplot.transform import Transform, build_transform


LEGEND_BOX_PX = 12.0
DEFAULT_BAR_FILL = FillStyle(color=GRAY)
DEFAULT_BAR_OUTLINE = LineStyle(color=BLACK, width=1.0)


class _BarsBase(Dataset):
    """Shared drawing for datasets made of rectangles rising from (or hanging below) zero."""

    fill: FillStyle
    outline: LineStyle

    def _edges(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        raise NotImplementedError

    def bounds(self) -> Rectangle:
        lefts, rights, heights = self._edges()
        if lefts.size == 0:
            return EMPTY_RECTANGLE
        return Rectangle(
            x_min=float(np.min(lefts)),
            x_max=float(np.max(rights)),
            y_min=min(0.0, float(np.min(heights))),
            y_max=max(0.0, float(np.max(heights))),
        )

    def representative_value(self, src: Rectangle) -> float | None:
        lefts, rights, heights = self._edges()
        centers = (lefts + rights) / 2.0
        mask = (centers >= src.x_min) & (centers <= src.x_max)
        if not np.any(mask):
            return None
        return float(np.mean(heights[mask]))

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        tr = build_transform(src, dst)
        for left, right, height in zip(*self._edges(), strict=True):
            rect = clip_rectangle(self._device_rect(tr, float(left), float(right), float(height)), dst)
            if rect is None:
                continue
            ctx.fill_rectangle(rect, self.fill)
            ctx.draw_rectangle(rect, self.outline)

    @staticmethod
    def _device_rect(tr: Transform, left: float, right: float, height: float) -> Rectangle:
        y0 = tr.map_y(0.0)
        y1 = tr.map_y(height)
        return Rectangle(x_min=tr.map_x(left), x_max=tr.map_x(right), y_min=min(y0, y1), y_max=max(y0, y1))

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        return (LEGEND_BOX_PX, LEGEND_BOX_PX)

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        half = LEGEND_BOX_PX / 2.0
        rect = Rectangle(x_min=x - half, x_max=x + half, y_min=y - half, y_max=y + half)
        ctx.fill_rectangle(rect, self.fill)
        ctx.draw_rectangle(rect, self.outline)


class BarDataset(_BarsBase):
    """Bars of `width` data units centred on each x position. Bars never overflow the plot area."""

    def __init__(
        self,
        x: Any,
        heights: Any,
        *,
        width: float = 0.8,
        fill: FillStyle = DEFAULT_BAR_FILL,
        outline: LineStyle = DEFAULT_BAR_OUTLINE,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if width <= 0:
            raise PlotDataError("bar width must be > 0")
        self.x = normalize_values(x, label="x")
        self.heights = normalize_values(heights, label="heights")
        if self.x.shape != self.heights.shape:
            raise PlotDataError(f"x and heights length mismatch: {self.x.size} != {self.heights.size}")
        self.width = float(width)
        self.fill = fill
        self.outline = outline

    def _edges(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        mask = np.isfinite(self.x) & np.isfinite(self.heights)
        half = self.width / 2.0
        x = self.x[mask]
        return x - half, x + half, self.heights[mask]


class HistogramDataset(_BarsBase):
    """Counts (or densities when `normalize`) of `values` in equal-width bins."""

    def __init__(
        self,
        values: Any,
        *,
        bin_width: float | None = None,
        normalize: bool = False,
        fill: FillStyle = DEFAULT_BAR_FILL,
        outline: LineStyle = DEFAULT_BAR_OUTLINE,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        arr = normalize_values(values)
        arr = arr[np.isfinite(arr)]
        if arr.size == 0:
            raise PlotDataError("histogram values contain no finite numbers")
        if bin_width is not None and bin_width <= 0:
            raise PlotDataError("bin_width must be > 0")
        lo = float(np.min(arr))
        hi = float(np.max(arr))
        if bin_width is None:
            edges = np.histogram_bin_edges(arr, bins="auto")
        else:
            n_bins = max(1, int(np.ceil((hi - lo) / bin_width)))
            edges = lo + bin_width * np.arange(n_bins + 1, dtype=np.float64)
            if edges[-1] < hi:
                edges = np.append(edges, edges[-1] + bin_width)
        counts, edges = np.histogram(arr, bins=edges, density=normalize)
        self.edges = edges.astype(np.float64)
        self.counts = counts.astype(np.float64)
        self.edges.setflags(write=False)
        self.counts.setflags(write=False)
        self.normalize = normalize
        self.fill = fill
        self.outline = outline

    def _edges(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.edges[:-1], self.edges[1:], self.counts


def histogram_datasets(
    named_values: Sequence[tuple[str, Any]],
    *,
    uses_color: bool = False,
    normalize: bool = False,
) -> list[HistogramDataset]:
    out: list[HistogramDataset] = []
    for i, (name, values) in enumerate(named_values):
        color = with_alpha(cycle_color(i, uses_color) if uses_color else GRAY, 0.5)
        out.append(HistogramDataset(values, normalize=normalize, fill=FillStyle(color=color), name=name))
    return out
