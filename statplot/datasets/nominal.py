from __future__ import annotations

from abc import ABC, abstractmethod
import math
from typing import Any, Sequence

import numpy as np

from statplot.datasets.bars import DEFAULT_BAR_FILL, DEFAULT_BAR_OUTLINE
from statplot.datasets.boxplot import DEFAULT_OUTLIER_RADIUS_PX, box_statistics, draw_box
from statplot.errors import PlotDataError
from statplot.geometry import ZERO_RESIDUAL, Point, Range, Rectangle, Residual, clip_rectangle, overflow
from statplot.metrics import DrawingContext, TextMetrics
from statplot.styles import BLACK, FillStyle, LineStyle, TextStyle, cycle_color
from statplot.text import draw_fixed_width_text, fixed_width_text_height
from statplot.transform import Transform, build_transform


BETWEEN_PADDING_PX = 5.0
GROUP_PADDING_PX = 10.0
OVERLINE_PADDING_PX = 4.0
OVERLINE_STYLE = LineStyle(color=BLACK, width=1.0)


def y_transform(src: Range, dst: Rectangle) -> Transform:
    """Transform whose y part maps `src` onto `dst`; x is left in device pixels."""
    return build_transform(Rectangle(x_min=dst.x_min, x_max=dst.x_max, y_min=src.min, y_max=src.max), dst)


class NominalDataset(ABC):
    """Something drawn in its own slot along a categorical x axis.

    The slot is `width` device pixels wide with its left edge at device `x`. The
    dataset's name is written under the axis, wrapped to the slot width.
    """

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def n_items(self) -> int:
        """Number of slot widths this dataset takes up."""
        return 1

    @abstractmethod
    def value_range(self) -> Range:
        raise NotImplementedError

    def x_label_height(self, metrics: TextMetrics, style: TextStyle, width: float) -> float:
        return fixed_width_text_height(metrics, self.name, style, width)

    def draw_x_label(self, ctx: DrawingContext, x: float, y: float, style: TextStyle, width: float) -> None:
        draw_fixed_width_text(ctx, x + width / 2.0, y, self.name, style, width)

    def residual(
        self,
        src: Range,
        dst: Rectangle,
        x: float,
        width: float,
        metrics: TextMetrics | None = None,
    ) -> Residual:
        return ZERO_RESIDUAL

    @abstractmethod
    def draw(self, ctx: DrawingContext, src: Range, dst: Rectangle, x: float, width: float) -> None:
        raise NotImplementedError


class DatasetGroup(NominalDataset):
    """Several nominal datasets under one overline, with the group name written below theirs."""

    def __init__(self, name: str, datasets: Sequence[NominalDataset]) -> None:
        super().__init__(name)
        if not datasets:
            raise PlotDataError("dataset group needs at least one dataset")
        self.datasets = tuple(datasets)

    @property
    def n_items(self) -> int:
        return sum(ds.n_items for ds in self.datasets)

    def value_range(self) -> Range:
        out = self.datasets[0].value_range()
        for ds in self.datasets[1:]:
            out = out.union(ds.value_range())
        return out

    def slots(self, x: float, width: float) -> list[tuple[float, float]]:
        """(left, width) of each member inside a slot starting at `x`."""
        n = len(self.datasets)
        if n == 1:
            return [(x, width)]
        member = (width - (n - 1) * BETWEEN_PADDING_PX - 2.0 * GROUP_PADDING_PX) / n
        return [(x + GROUP_PADDING_PX + i * (member + BETWEEN_PADDING_PX), member) for i in range(n)]

    def _members_label_height(self, metrics: TextMetrics, style: TextStyle, width: float) -> float:
        return max(ds.x_label_height(metrics, style, w) for ds, (_, w) in zip(self.datasets, self.slots(0.0, width)))

    def x_label_height(self, metrics: TextMetrics, style: TextStyle, width: float) -> float:
        members = self._members_label_height(metrics, style, width)
        name = fixed_width_text_height(metrics, self.name, style, width)
        return OVERLINE_STYLE.width / 2.0 + OVERLINE_PADDING_PX + members + OVERLINE_PADDING_PX + name

    def draw_x_label(self, ctx: DrawingContext, x: float, y: float, style: TextStyle, width: float) -> None:
        line_y = y + OVERLINE_STYLE.width / 2.0
        ctx.draw_line([Point(x + GROUP_PADDING_PX, line_y), Point(x + width - GROUP_PADDING_PX, line_y)], OVERLINE_STYLE)
        top = line_y + OVERLINE_PADDING_PX
        for ds, (sx, sw) in zip(self.datasets, self.slots(x, width)):
            ds.draw_x_label(ctx, sx, top, style, sw)
        name_y = top + self._members_label_height(ctx, style, width) + OVERLINE_PADDING_PX
        draw_fixed_width_text(ctx, x + width / 2.0, name_y, self.name, style, width)

    def residual(
        self,
        src: Range,
        dst: Rectangle,
        x: float,
        width: float,
        metrics: TextMetrics | None = None,
    ) -> Residual:
        out = ZERO_RESIDUAL
        for ds, (sx, sw) in zip(self.datasets, self.slots(x, width)):
            out = out.max(ds.residual(src, dst, sx, sw, metrics))
        return out

    def draw(self, ctx: DrawingContext, src: Range, dst: Rectangle, x: float, width: float) -> None:
        for ds, (sx, sw) in zip(self.datasets, self.slots(x, width)):
            ds.draw(ctx, src, dst, sx, sw)


class NominalBarDataset(NominalDataset):
    """One bar filling its slot from zero to `value`."""

    def __init__(
        self,
        name: str,
        value: float,
        *,
        fill: FillStyle = DEFAULT_BAR_FILL,
        outline: LineStyle = DEFAULT_BAR_OUTLINE,
    ) -> None:
        super().__init__(name)
        value = float(value)
        if not math.isfinite(value):
            raise PlotDataError(f"bar {name!r} value must be finite, got {value!r}")
        self.value = value
        self.fill = fill
        self.outline = outline

    def value_range(self) -> Range:
        return Range(min=min(0.0, self.value), max=max(0.0, self.value))

    def draw(self, ctx: DrawingContext, src: Range, dst: Rectangle, x: float, width: float) -> None:
        tr = y_transform(src, dst)
        y0, y1 = tr.map_y(0.0), tr.map_y(self.value)
        rect = clip_rectangle(Rectangle(x_min=x, x_max=x + width, y_min=min(y0, y1), y_max=max(y0, y1)), dst)
        if rect is None:
            return
        ctx.fill_rectangle(rect, self.fill)
        ctx.draw_rectangle(rect, self.outline)


class NominalBoxPlotDataset(NominalDataset):
    """Box plot of one sample drawn across the middle of its slot."""

    def __init__(self, name: str, values: Any, *, radius: float = DEFAULT_OUTLIER_RADIUS_PX) -> None:
        super().__init__(name)
        self.stats = box_statistics(values)
        self.radius = float(radius)

    def value_range(self) -> Range:
        return Range(min=self.stats.y_min, max=self.stats.y_max)

    def _box_edges(self, x: float, width: float) -> tuple[float, float]:
        center = x + width / 2.0
        return center - width / 4.0, center + width / 4.0

    def residual(
        self,
        src: Range,
        dst: Rectangle,
        x: float,
        width: float,
        metrics: TextMetrics | None = None,
    ) -> Residual:
        outliers = self.stats.outliers
        ys = outliers[(outliers >= src.min) & (outliers <= src.max)]
        if ys.size == 0:
            return ZERO_RESIDUAL
        py = y_transform(src, dst).map_y(ys)
        return overflow(np.full(ys.shape, x + width / 2.0), py, self.radius, dst)

    def draw(self, ctx: DrawingContext, src: Range, dst: Rectangle, x: float, width: float) -> None:
        x0, x1 = self._box_edges(x, width)
        draw_box(ctx, self.stats, y_transform(src, dst).map_y, x0, x1, self.radius)


def nominal_bar_datasets(
    named_values: Sequence[tuple[str, float]],
    *,
    group_name: str = "",
    uses_color: bool = False,
) -> DatasetGroup:
    """Bars side by side under one group."""
    bars: list[NominalDataset] = []
    for i, (name, value) in enumerate(named_values):
        fill = FillStyle(color=cycle_color(i, True)) if uses_color else DEFAULT_BAR_FILL
        bars.append(NominalBarDataset(name, value, fill=fill))
    return DatasetGroup(group_name, bars)


def nominal_boxplot_datasets(
    named_values: Sequence[tuple[str, Any]],
    *,
    group_name: str = "",
    radius: float = DEFAULT_OUTLIER_RADIUS_PX,
) -> DatasetGroup:
    """Box plots side by side under one group."""
    return DatasetGroup(group_name, [NominalBoxPlotDataset(name, values, radius=radius) for name, values in named_values])
