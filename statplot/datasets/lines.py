from __future__ import annotations

from typing import Any, Callable, Sequence

import numpy as np

from statplot.adapters.normalize import normalize_points, normalize_values
from statplot.datasets.base import LEGEND_LINE_LENGTH_PX, Dataset, average_slope, inside_mask, mean_y_within
from statplot.errors import PlotDataError
from statplot.geometry import EMPTY_RECTANGLE, Rectangle, Residual, ZERO_RESIDUAL, bounds_of, overflow
from statplot.metrics import DrawingContext, TextMetrics
from statplot.statistics import gaussian_kernel, kernel_density_estimator, mean_and_stdev
from statplot.styles import LineStyle, cycle_color, cycle_dashes
from statplot.transform import build_transform


DEFAULT_LINE_STYLE = LineStyle(width=1.0)


class LineDataset(Dataset):
    """Polyline through the points in the order given, clipped to the plot area."""

    def __init__(self, points: Any, *, style: LineStyle = DEFAULT_LINE_STYLE, name: str | None = None) -> None:
        super().__init__(name)
        self.xs, self.ys = normalize_points(points)
        self.style = style

    def bounds(self) -> Rectangle:
        return bounds_of(self.xs, self.ys)

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        # Only vertices can poke past dst; segments are clipped to it.
        mask = inside_mask(self.xs, self.ys, src)
        if not np.any(mask):
            return ZERO_RESIDUAL
        px, py = build_transform(src, dst).map_xy(self.xs[mask], self.ys[mask])
        return overflow(px, py, self.style.width / 2.0, dst)

    def representative_value(self, src: Rectangle) -> float | None:
        return mean_y_within(self.xs, self.ys, src)

    def avg_slope(self, src: Rectangle) -> float | None:
        return average_slope(self.xs, self.ys, src)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        px, py = build_transform(src, dst).map_xy(self.xs, self.ys)
        ctx.draw_polyline(px, py, self.style, clip=dst)

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        return (LEGEND_LINE_LENGTH_PX, max(1.0, self.style.width))

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        half = LEGEND_LINE_LENGTH_PX / 2.0
        ctx.draw_polyline(np.asarray([x - half, x + half]), np.asarray([y, y]), self.style)


class CdfDataset(LineDataset):
    """Empirical cumulative distribution of a sample, drawn as a line."""

    def __init__(self, values: Any, *, style: LineStyle = DEFAULT_LINE_STYLE, name: str | None = None) -> None:
        arr = normalize_values(values)
        ranked = np.sort(arr[np.isfinite(arr)])
        if ranked.size == 0:
            raise PlotDataError("cdf values contain no finite numbers")
        fractions = np.arange(1, ranked.size + 1, dtype=np.float64) / ranked.size
        super().__init__(np.column_stack([ranked, fractions]), style=style, name=name)


class DensityDataset(LineDataset):
    """Gaussian kernel density estimate of a sample, drawn as a line.

    Without an explicit `bandwidth`, Silverman's rule of thumb is used. The curve is
    sampled across the data widened by three bandwidths on each side.
    """

    def __init__(
        self,
        values: Any,
        *,
        bandwidth: float | None = None,
        samples: int = 200,
        style: LineStyle = DEFAULT_LINE_STYLE,
        name: str | None = None,
    ) -> None:
        arr = normalize_values(values)
        arr = arr[np.isfinite(arr)]
        if arr.size == 0:
            raise PlotDataError("density values contain no finite numbers")
        if samples < 2:
            raise PlotDataError("density samples must be >= 2")
        if bandwidth is None:
            bandwidth = silverman_bandwidth(arr)
        density = kernel_density_estimator(gaussian_kernel, bandwidth, arr)
        reach = 3.0 * bandwidth
        xs = np.linspace(float(np.min(arr)) - reach, float(np.max(arr)) + reach, samples)
        ys = np.asarray([density(float(x)) for x in xs], dtype=np.float64)
        self.bandwidth = float(bandwidth)
        super().__init__(np.column_stack([xs, ys]), style=style, name=name)


def silverman_bandwidth(values: np.ndarray) -> float:
    """1.06 * sigma * n^(-1/5); a constant sample gets a bandwidth of 1."""
    _, sigma = mean_and_stdev(values)
    if sigma == 0:
        return 1.0
    return 1.06 * sigma * values.size ** -0.2


class FunctionDataset(Dataset):
    """Samples `func` across whatever x range the plot ends up showing.

    It has no extent of its own, so it never widens the axes.
    """

    def __init__(
        self,
        func: Callable[[float], float],
        *,
        samples: int = 200,
        style: LineStyle = DEFAULT_LINE_STYLE,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if samples < 2:
            raise PlotDataError("function samples must be >= 2")
        self.func = func
        self.samples = int(samples)
        self.style = style

    def bounds(self) -> Rectangle:
        return EMPTY_RECTANGLE

    def sample(self, src: Rectangle) -> tuple[np.ndarray, np.ndarray]:
        xs = np.linspace(src.x_min, src.x_max, self.samples)
        ys = np.asarray([float(self.func(float(x))) for x in xs], dtype=np.float64)
        return xs, ys

    def representative_value(self, src: Rectangle) -> float | None:
        xs, ys = self.sample(src)
        return mean_y_within(xs, ys, src)

    def avg_slope(self, src: Rectangle) -> float | None:
        xs, ys = self.sample(src)
        return average_slope(xs, ys, src)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        xs, ys = self.sample(src)
        px, py = build_transform(src, dst).map_xy(xs, ys)
        ctx.draw_polyline(px, py, self.style, clip=dst)

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        return (LEGEND_LINE_LENGTH_PX, max(1.0, self.style.width))

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        half = LEGEND_LINE_LENGTH_PX / 2.0
        ctx.draw_polyline(np.asarray([x - half, x + half]), np.asarray([y, y]), self.style)


def line_datasets(
    lines: Sequence[tuple[str | None, Any]],
    *,
    uses_color: bool = False,
    width: float = 1.0,
) -> list[LineDataset]:
    return [
        LineDataset(points, style=LineStyle(color=cycle_color(i, uses_color), width=width, dashes=cycle_dashes(i)), name=name)
        for i, (name, points) in enumerate(lines)
    ]


def cdf_datasets(
    named_values: Sequence[tuple[str, Any]],
    *,
    uses_color: bool = False,
) -> list[CdfDataset]:
    return [
        CdfDataset(values, style=LineStyle(color=cycle_color(i, uses_color), dashes=cycle_dashes(i)), name=name)
        for i, (name, values) in enumerate(named_values)
    ]


def density_datasets(
    named_values: Sequence[tuple[str, Any]],
    *,
    uses_color: bool = False,
    bandwidth: float | None = None,
) -> list[DensityDataset]:
    return [
        DensityDataset(
            values,
            bandwidth=bandwidth,
            style=LineStyle(color=cycle_color(i, uses_color), dashes=cycle_dashes(i)),
            name=name,
        )
        for i, (name, values) in enumerate(named_values)
    ]
