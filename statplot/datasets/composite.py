from __future__ import annotations

from typing import Any, Sequence

from statplot.datasets.base import Dataset
from statplot.datasets.lines import DEFAULT_LINE_STYLE, LineDataset
from statplot.datasets.points import DEFAULT_POINT_RADIUS_PX, ScatterDataset
from statplot.errors import PlotDataError
from statplot.geometry import ZERO_RESIDUAL, Rectangle, Residual, union_all
from statplot.metrics import DrawingContext, TextMetrics
from statplot.styles import BLACK, RGBA, Glyph, LineStyle, cycle_color, cycle_dashes, cycle_glyph


class CompositeDataset(Dataset):
    """Several datasets drawn as one: bounds are unioned, residuals maxed, draws run in order."""

    def __init__(self, children: Sequence[Dataset], *, name: str | None = None) -> None:
        super().__init__(name)
        if not children:
            raise PlotDataError("composite dataset needs at least one child")
        self.children = tuple(children)

    def bounds(self) -> Rectangle:
        return union_all([child.bounds() for child in self.children])

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        out = ZERO_RESIDUAL
        for child in self.children:
            out = out.max(child.residual(src, dst, metrics))
        return out

    def representative_value(self, src: Rectangle) -> float | None:
        for child in self.children:
            value = child.representative_value(src)
            if value is not None:
                return value
        return None

    def avg_slope(self, src: Rectangle) -> float | None:
        slopes = [s for s in (child.avg_slope(src) for child in self.children) if s is not None]
        if not slopes:
            return None
        return sum(slopes) / len(slopes)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        for child in self.children:
            child.draw(ctx, src, dst)

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        sizes = [child.legend_dimensions(metrics) for child in self.children]
        return (max(w for w, _ in sizes), max(h for _, h in sizes))

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        for child in self.children:
            child.draw_legend(ctx, x, y)


def line_points_dataset(
    points: Any,
    *,
    glyph: Glyph = "circle",
    color: RGBA = BLACK,
    radius: float = DEFAULT_POINT_RADIUS_PX,
    style: LineStyle = DEFAULT_LINE_STYLE,
    name: str | None = None,
) -> CompositeDataset:
    """A line with a glyph on every vertex."""
    return CompositeDataset(
        [
            LineDataset(points, style=style),
            ScatterDataset(points, glyph=glyph, color=color, radius=radius),
        ],
        name=name,
    )


def line_points_datasets(
    lines: Sequence[tuple[str | None, Any]],
    *,
    uses_color: bool = False,
    radius: float = DEFAULT_POINT_RADIUS_PX,
    width: float = 1.0,
) -> list[CompositeDataset]:
    out: list[CompositeDataset] = []
    for i, (name, points) in enumerate(lines):
        color = cycle_color(i, uses_color)
        out.append(
            line_points_dataset(
                points,
                glyph=cycle_glyph(i),
                color=color,
                radius=radius,
                style=LineStyle(color=color, width=width, dashes=cycle_dashes(i)),
                name=name,
            )
        )
    return out
