from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from statplot.adapters.normalize import normalize_points
from statplot.datasets.base import LEGEND_LINE_LENGTH_PX, Dataset, average_slope, inside_mask, mean_y_within
from statplot.datasets.points import DEFAULT_POINT_RADIUS_PX
from statplot.errors import PlotDataError
from statplot.geometry import ZERO_RESIDUAL, Point, Rectangle, Residual, overflow
from statplot.metrics import DrawingContext, TextMetrics
from statplot.statistics import mean_and_interval
from statplot.styles import BLACK, RGBA, Glyph, LineStyle, TextStyle, cycle_color, cycle_dashes, cycle_glyph
from statplot.transform import build_transform


ERRBAR_LABEL_STYLE = TextStyle(size_px=10.0)
MEAN_LINE_STYLE = LineStyle(color=BLACK, width=1.0)


class ScatterErrbarDataset(Dataset):
    """One glyph per group at the group's mean point, with 95% confidence bars on both axes.

    Groups are `(label, points)` pairs; a non-None label is written beside the glyph.
    """

    def __init__(
        self,
        groups: Sequence[tuple[str | None, Any]],
        *,
        glyph: Glyph = "circle",
        color: RGBA = BLACK,
        radius: float = DEFAULT_POINT_RADIUS_PX,
        line_width: float = 1.0,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if not groups:
            raise PlotDataError("error bar dataset needs at least one group")
        labels: list[str | None] = []
        stats: list[tuple[float, float, float, float]] = []
        for label, points in groups:
            xs, ys = normalize_points(points)
            finite = np.isfinite(xs) & np.isfinite(ys)
            if not np.any(finite):
                raise PlotDataError(f"error bar group {label!r} has no finite points")
            xs, ys = xs[finite], ys[finite]
            mx, ix = mean_and_interval(xs)
            my, iy = mean_and_interval(ys)
            labels.append(label)
            stats.append((mx, ix, my, iy))
        arr = np.asarray(stats, dtype=np.float64)
        arr.setflags(write=False)
        self.labels = tuple(labels)
        self.mean_x, self.interval_x, self.mean_y, self.interval_y = arr.T
        self.glyph = glyph
        self.color = color
        self.radius = float(radius)
        self.bar_style = LineStyle(color=color, width=line_width)

    def bounds(self) -> Rectangle:
        return Rectangle(
            x_min=float(np.min(self.mean_x - self.interval_x)),
            x_max=float(np.max(self.mean_x + self.interval_x)),
            y_min=float(np.min(self.mean_y - self.interval_y)),
            y_max=float(np.max(self.mean_y + self.interval_y)),
        )

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        mask = inside_mask(self.mean_x, self.mean_y, src)
        if not np.any(mask):
            return ZERO_RESIDUAL
        tr = build_transform(src, dst)
        px, py = tr.map_xy(self.mean_x[mask], self.mean_y[mask])
        # Bar caps are as wide as the glyph, so the glyph radius covers both.
        out = overflow(px, py, self.radius, dst)
        hx, hy = tr.map_xy(self.mean_x[mask] + self.interval_x[mask], self.mean_y[mask] + self.interval_y[mask])
        lx, ly = tr.map_xy(self.mean_x[mask] - self.interval_x[mask], self.mean_y[mask] - self.interval_y[mask])
        half = self.bar_style.width / 2.0
        return out.max(overflow(np.concatenate([hx, lx]), np.concatenate([py, py]), half, dst)).max(
            overflow(np.concatenate([px, px]), np.concatenate([hy, ly]), half, dst)
        )

    def representative_value(self, src: Rectangle) -> float | None:
        return mean_y_within(self.mean_x, self.mean_y, src)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        tr = build_transform(src, dst)
        for i in np.flatnonzero(inside_mask(self.mean_x, self.mean_y, src)).tolist():
            center = tr(Point(float(self.mean_x[i]), float(self.mean_y[i])))
            lo = tr(Point(float(self.mean_x[i] - self.interval_x[i]), float(self.mean_y[i] - self.interval_y[i])))
            hi = tr(Point(float(self.mean_x[i] + self.interval_x[i]), float(self.mean_y[i] + self.interval_y[i])))
            self._draw_bar(ctx, Point(center.x, lo.y), Point(center.x, hi.y), vertical=True)
            self._draw_bar(ctx, Point(lo.x, center.y), Point(hi.x, center.y), vertical=False)
            ctx.draw_glyph(center.x, center.y, self.glyph, self.radius, self.color)
            label = self.labels[i]
            if label:
                w, _ = ctx.measure_text(label, ERRBAR_LABEL_STYLE)
                ctx.draw_text(center.x + self.radius + 2.0 + w / 2.0, center.y, label, ERRBAR_LABEL_STYLE)

    def _draw_bar(self, ctx: DrawingContext, a: Point, b: Point, *, vertical: bool) -> None:
        ctx.draw_line([a, b], self.bar_style)
        r = self.radius
        for end in (a, b):
            if vertical:
                ctx.draw_line([Point(end.x - r, end.y), Point(end.x + r, end.y)], self.bar_style)
            else:
                ctx.draw_line([Point(end.x, end.y - r), Point(end.x, end.y + r)], self.bar_style)

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        side = 2.0 * self.radius + 1.0
        return (side, side)

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        ctx.draw_glyph(x, y, self.glyph, self.radius, self.color)


def scatter_errbar_datasets(
    sets: Sequence[tuple[str, Sequence[tuple[str | None, Any]]]],
    *,
    uses_color: bool = False,
) -> list[ScatterErrbarDataset]:
    return [
        ScatterErrbarDataset(groups, glyph=cycle_glyph(i), color=cycle_color(i, uses_color), name=name)
        for i, (name, groups) in enumerate(sets)
    ]


class LineErrbarDataset(Dataset):
    """Mean of several lines over their common x domain, with 95% confidence bars.

    Every line is linearly interpolated at each x value any line has inside the
    domain they all cover. Bars are drawn at every `count`th of those positions
    starting from `number`, so that lines built together can stagger their bars.
    """

    def __init__(
        self,
        lines: Sequence[Any],
        *,
        number: int = 0,
        count: int = 1,
        style: LineStyle = MEAN_LINE_STYLE,
        cap_px: float = DEFAULT_POINT_RADIUS_PX,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        if not lines:
            raise PlotDataError("line error bar dataset needs at least one line")
        if count < 1 or not 0 <= number < count:
            raise PlotDataError(f"error bar stagger needs 0 <= number < count, got {number}/{count}")
        curves: list[tuple[np.ndarray, np.ndarray]] = []
        for points in lines:
            xs, ys = normalize_points(points)
            finite = np.isfinite(xs) & np.isfinite(ys)
            if not np.any(finite):
                raise PlotDataError("every line of an error bar dataset needs a finite point")
            order = np.argsort(xs[finite], kind="stable")
            curves.append((xs[finite][order], ys[finite][order]))

        lo = max(float(cx[0]) for cx, _ in curves)
        hi = min(float(cx[-1]) for cx, _ in curves)
        if lo > hi:
            raise PlotDataError(f"lines share no common x domain (max start {lo} > min end {hi})")
        domain = np.unique(np.concatenate([cx[(cx >= lo) & (cx <= hi)] for cx, _ in curves]))
        samples = np.stack([np.interp(domain, cx, cy) for cx, cy in curves])
        stats = np.asarray([mean_and_interval(samples[:, j]) for j in range(domain.size)], dtype=np.float64)

        self.xs = domain
        self.means = stats[:, 0].copy()
        self.intervals = stats[:, 1].copy()
        for arr in (self.xs, self.means, self.intervals):
            arr.setflags(write=False)
        self.number = int(number)
        self.count = int(count)
        self.style = style
        self.bar_style = LineStyle(color=style.color, width=style.width)
        self.cap_px = float(cap_px)

    def bar_indices(self) -> np.ndarray:
        return np.arange(self.number, self.xs.size, self.count)

    def bounds(self) -> Rectangle:
        idx = self.bar_indices()
        lows = np.concatenate([self.means, self.means[idx] - self.intervals[idx]])
        highs = np.concatenate([self.means, self.means[idx] + self.intervals[idx]])
        return Rectangle(
            x_min=float(self.xs[0]),
            x_max=float(self.xs[-1]),
            y_min=float(np.min(lows)),
            y_max=float(np.max(highs)),
        )

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        tr = build_transform(src, dst)
        half = self.style.width / 2.0
        mask = inside_mask(self.xs, self.means, src)
        out = ZERO_RESIDUAL
        if np.any(mask):
            px, py = tr.map_xy(self.xs[mask], self.means[mask])
            out = overflow(px, py, half, dst)
        idx = self._visible_bars(src)
        if idx.size:
            px = np.tile(tr.map_x(self.xs[idx]), 2)
            py = tr.map_y(np.concatenate([self.means[idx] + self.intervals[idx], self.means[idx] - self.intervals[idx]]))
            out = out.max(overflow(px, py, self.cap_px, dst, extent_y=half))
        return out

    def representative_value(self, src: Rectangle) -> float | None:
        return mean_y_within(self.xs, self.means, src)

    def avg_slope(self, src: Rectangle) -> float | None:
        return average_slope(self.xs, self.means, src)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        tr = build_transform(src, dst)
        px, py = tr.map_xy(self.xs, self.means)
        ctx.draw_polyline(px, py, self.style, clip=dst)
        for i in self._visible_bars(src).tolist():
            x = tr.map_x(float(self.xs[i]))
            top = tr.map_y(float(self.means[i] + self.intervals[i]))
            bottom = tr.map_y(float(self.means[i] - self.intervals[i]))
            ctx.draw_line([Point(x, top), Point(x, bottom)], self.bar_style)
            for end in (top, bottom):
                ctx.draw_line([Point(x - self.cap_px, end), Point(x + self.cap_px, end)], self.bar_style)

    def _visible_bars(self, src: Rectangle) -> np.ndarray:
        idx = self.bar_indices()
        return idx[inside_mask(self.xs[idx], self.means[idx], src)]

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        return (LEGEND_LINE_LENGTH_PX, max(1.0, self.style.width))

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        half = LEGEND_LINE_LENGTH_PX / 2.0
        ctx.draw_polyline(np.asarray([x - half, x + half]), np.asarray([y, y]), self.style)


def line_errbar_datasets(
    named_lines: Sequence[tuple[str | None, Sequence[Any]]],
    *,
    uses_color: bool = False,
) -> list[LineErrbarDataset]:
    """One mean line per entry; error bars are staggered so neighbouring lines do not overlap."""
    count = len(named_lines)
    return [
        LineErrbarDataset(
            lines,
            number=i,
            count=count,
            style=LineStyle(color=cycle_color(i, uses_color), dashes=cycle_dashes(i)),
            name=name,
        )
        for i, (name, lines) in enumerate(named_lines)
    ]
