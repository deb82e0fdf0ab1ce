from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np

from statplot.adapters.normalize import normalize_values
from statplot.datasets.bars import LEGEND_BOX_PX
from statplot.datasets.base import Dataset
from statplot.errors import PlotDataError
from statplot.geometry import ZERO_RESIDUAL, Point, Rectangle, Residual, overflow
from statplot.metrics import DrawingContext, TextMetrics
from statplot.statistics import mean_and_interval, percentile, separate_outliers
from statplot.styles import BLACK, LIGHT_GRAY, FillStyle, LineStyle
from statplot.transform import build_transform


BOX_LINE_STYLE = LineStyle(color=BLACK, width=1.0)
MEDIAN_LINE_STYLE = LineStyle(color=BLACK, width=1.0, dashes=(4.0, 2.0))
CONFIDENCE_FILL = FillStyle(color=LIGHT_GRAY)
DEFAULT_OUTLIER_RADIUS_PX = 2.0


@dataclass(frozen=True, eq=False)
class BoxStats:
    """Summary of one sample as drawn by a box plot."""

    values: np.ndarray
    outliers: np.ndarray
    mean: float
    conf_lower: float
    conf_upper: float
    q1: float
    median: float
    q3: float
    whisker_low: float
    whisker_high: float

    @property
    def y_min(self) -> float:
        return min(float(np.min(self.values)), self.conf_lower)

    @property
    def y_max(self) -> float:
        return max(float(np.max(self.values)), self.conf_upper)


def box_statistics(values: Any) -> BoxStats:
    arr = normalize_values(values)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        raise PlotDataError("box plot values contain no finite numbers")
    outliers, inliers = separate_outliers(arr)
    mean, interval = mean_and_interval(inliers)
    return BoxStats(
        values=arr,
        outliers=outliers,
        mean=mean,
        conf_lower=mean - interval,
        conf_upper=mean + interval,
        q1=percentile(25.0, arr),
        median=percentile(50.0, arr),
        q3=percentile(75.0, arr),
        whisker_low=float(np.min(inliers)),
        whisker_high=float(np.max(inliers)),
    )


def draw_box(
    ctx: DrawingContext,
    stats: BoxStats,
    map_y: Callable[[Any], Any],
    x0: float,
    x1: float,
    radius: float,
) -> None:
    """Draw a box between device x positions `x0` and `x1`; `map_y` takes data y to device y.

    The box spans the quartiles, the solid line marks the mean, the dashed line the
    median, and the grey bar the 95% confidence interval of the mean. Whiskers reach
    the extreme inliers; values beyond the 1.5 IQR fences are drawn as rings.
    """
    center = (x0 + x1) / 2.0
    conf_half = (x1 - x0) / 16.0
    if stats.outliers.size:
        ctx.draw_glyphs(np.full(stats.outliers.shape, center), map_y(stats.outliers), "ring", radius, BLACK)
    c_top, c_bottom = map_y(stats.conf_upper), map_y(stats.conf_lower)
    ctx.fill_rectangle(
        Rectangle(x_min=center - conf_half, x_max=center + conf_half, y_min=c_top, y_max=c_bottom),
        CONFIDENCE_FILL,
    )
    q3, q1 = map_y(stats.q3), map_y(stats.q1)
    ctx.draw_rectangle(Rectangle(x_min=x0, x_max=x1, y_min=q3, y_max=q1), BOX_LINE_STYLE)
    mean_y = map_y(stats.mean)
    ctx.draw_line([Point(x0, mean_y), Point(x1, mean_y)], BOX_LINE_STYLE)
    median_y = map_y(stats.median)
    ctx.draw_line([Point(x0, median_y), Point(x1, median_y)], MEDIAN_LINE_STYLE)
    cap = (x1 - x0) / 4.0
    for end, start in ((map_y(stats.whisker_high), q3), (map_y(stats.whisker_low), q1)):
        ctx.draw_line([Point(center, start), Point(center, end)], BOX_LINE_STYLE)
        ctx.draw_line([Point(center - cap, end), Point(center + cap, end)], BOX_LINE_STYLE)


def draw_box_legend(ctx: DrawingContext, x: float, y: float) -> None:
    half = LEGEND_BOX_PX / 2.0
    ctx.draw_rectangle(Rectangle(x_min=x - half, x_max=x + half, y_min=y - half, y_max=y + half), BOX_LINE_STYLE)
    ctx.draw_line([Point(x - half, y), Point(x + half, y)], BOX_LINE_STYLE)


class BoxPlotDataset(Dataset):
    """Box and whiskers summary of one sample, centred on `x` and `width` data units wide."""

    def __init__(
        self,
        values: Any,
        *,
        x: float = 0.0,
        width: float = 0.5,
        radius: float = DEFAULT_OUTLIER_RADIUS_PX,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if width <= 0:
            raise PlotDataError("box width must be > 0")
        self.stats = box_statistics(values)
        self.x = float(x)
        self.width = float(width)
        self.radius = float(radius)

    def bounds(self) -> Rectangle:
        half = self.width / 2.0
        return Rectangle(x_min=self.x - half, x_max=self.x + half, y_min=self.stats.y_min, y_max=self.stats.y_max)

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        outliers = self.stats.outliers
        if outliers.size == 0 or not src.x_min <= self.x <= src.x_max:
            return ZERO_RESIDUAL
        ys = outliers[(outliers >= src.y_min) & (outliers <= src.y_max)]
        if ys.size == 0:
            return ZERO_RESIDUAL
        px, py = build_transform(src, dst).map_xy(np.full(ys.shape, self.x), ys)
        return overflow(px, py, self.radius, dst)

    def representative_value(self, src: Rectangle) -> float | None:
        if not src.x_min <= self.x <= src.x_max:
            return None
        return self.stats.mean

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        tr = build_transform(src, dst)
        x0 = tr.map_x(self.x - self.width / 2.0)
        x1 = tr.map_x(self.x + self.width / 2.0)
        draw_box(ctx, self.stats, tr.map_y, x0, x1, self.radius)

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        return (LEGEND_BOX_PX, LEGEND_BOX_PX)

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        draw_box_legend(ctx, x, y)


def boxplot_datasets(
    named_values: Sequence[tuple[str | None, Any]],
    *,
    width: float = 0.5,
    radius: float = DEFAULT_OUTLIER_RADIUS_PX,
) -> list[BoxPlotDataset]:
    """One box per sample, placed at x = 0, 1, 2, ..."""
    return [
        BoxPlotDataset(values, x=float(i), width=width, radius=radius, name=name)
        for i, (name, values) in enumerate(named_values)
    ]
