from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from pathlib import Path
from typing import Any, Callable, Sequence

import numpy as np
from PIL import Image

from statplot.adapters import normalize_xy
from statplot.axis import draw_nominal_x_axis, draw_title, draw_x_axis, draw_y_axis
from statplot.config import DEFAULT_CONFIG, LayoutConfig
from statplot.datasets import (
    BarDataset,
    Dataset,
    DensityDataset,
    FunctionDataset,
    HistogramDataset,
    LineDataset,
    ScatterDataset,
    line_points_dataset,
)
from statplot.datasets.nominal import NominalDataset, nominal_bar_datasets, nominal_boxplot_datasets
from statplot.errors import PlotDataError
from statplot.layout import Layout, NominalLayout, compute_destination, compute_nominal_destination, source_rectangle
from statplot.legend import LegendLocation, LegendPolicy, draw_legend, place_legend, sort_entries
from statplot.metrics import DrawingContext, TextMetrics
from statplot.raster import RasterContext
from statplot.styles import (
    BLACK,
    DEFAULT_AXIS_STYLE,
    DEFAULT_LABEL_STYLE,
    DEFAULT_LEGEND_STYLE,
    DEFAULT_TICK_STYLE,
    GRAY,
    RGBA,
    WHITE,
    FillStyle,
    Glyph,
    LineStyle,
    TextStyle,
)


LOGGER = logging.getLogger(__name__)


class _RasterOutput:
    """`render` and `save` for any plot that can `draw` itself onto a `RasterContext`."""

    background: RGBA

    def draw(self, ctx: DrawingContext) -> Any:
        raise NotImplementedError

    def render(self, width: int, height: int) -> np.ndarray:
        """(height, width, 4) uint8 RGBA image of the plot."""
        if width <= 0 or height <= 0:
            raise PlotDataError(f"canvas size must be > 0, got {width}x{height}")
        ctx = RasterContext(width, height, background=self.background)
        layout = self.draw(ctx)
        LOGGER.debug("rendered %dx%d plot, dst=%s", width, height, layout.dst)
        return ctx.canvas

    def save(self, path: str | Path, width: int, height: int) -> Path:
        out = Path(path)
        Image.fromarray(self.render(width, height)).save(out)
        return out


@dataclass
class Plot(_RasterOutput):
    """Numeric x by numeric y plot.

    Nothing computed while drawing is kept on the plot: every `layout`, `render` or
    `save` call runs the whole pipeline again for the requested canvas size.
    """

    datasets: list[Dataset] = field(default_factory=list)
    title: str | None = None
    x_label: str | None = None
    y_label: str | None = None
    x_min: float | None = None
    x_max: float | None = None
    y_min: float | None = None
    y_max: float | None = None
    legend: LegendPolicy | None = LegendLocation.UPPER_RIGHT
    sort_legend: bool = True
    tick_style: TextStyle = DEFAULT_TICK_STYLE
    label_style: TextStyle = DEFAULT_LABEL_STYLE
    legend_style: TextStyle = DEFAULT_LEGEND_STYLE
    axis_style: LineStyle = DEFAULT_AXIS_STYLE
    background: RGBA = WHITE
    config: LayoutConfig = DEFAULT_CONFIG

    def add(self, *datasets: Dataset) -> "Plot":
        for ds in datasets:
            if not isinstance(ds, Dataset):
                raise PlotDataError(f"expected a Dataset, got {type(ds).__name__}")
            self.datasets.append(ds)
        return self

    def scatter(
        self,
        y: Any = None,
        *,
        x: Any = None,
        data: Any = None,
        label: str | None = None,
        glyph: Glyph = "circle",
        color: RGBA = BLACK,
        radius: float = 3.0,
    ) -> "Plot":
        xs, ys = normalize_xy(y=y, x=x, data=data)
        return self.add(ScatterDataset(np.column_stack([xs, ys]), glyph=glyph, color=color, radius=radius, name=label))

    def line(
        self,
        y: Any = None,
        *,
        x: Any = None,
        data: Any = None,
        label: str | None = None,
        color: RGBA = BLACK,
        width: float = 1.0,
        dashes: tuple[float, ...] = (),
        markers: bool = False,
    ) -> "Plot":
        xs, ys = normalize_xy(y=y, x=x, data=data)
        points = np.column_stack([xs, ys])
        style = LineStyle(color=color, width=width, dashes=dashes)
        if markers:
            return self.add(line_points_dataset(points, color=color, style=style, name=label))
        return self.add(LineDataset(points, style=style, name=label))

    def bar(
        self,
        y: Any = None,
        *,
        x: Any = None,
        data: Any = None,
        label: str | None = None,
        color: RGBA = GRAY,
        width: float = 0.8,
    ) -> "Plot":
        xs, ys = normalize_xy(y=y, x=x, data=data)
        return self.add(BarDataset(xs, ys, width=width, fill=FillStyle(color=color), name=label))

    def histogram(
        self,
        values: Any,
        *,
        label: str | None = None,
        bin_width: float | None = None,
        normalize: bool = False,
        color: RGBA = GRAY,
    ) -> "Plot":
        return self.add(
            HistogramDataset(values, bin_width=bin_width, normalize=normalize, fill=FillStyle(color=color), name=label)
        )

    def function(
        self,
        func: Callable[[float], float],
        *,
        label: str | None = None,
        samples: int = 200,
        color: RGBA = BLACK,
        width: float = 1.0,
    ) -> "Plot":
        return self.add(FunctionDataset(func, samples=samples, style=LineStyle(color=color, width=width), name=label))

    def density(
        self,
        values: Any,
        *,
        label: str | None = None,
        bandwidth: float | None = None,
        color: RGBA = BLACK,
        width: float = 1.0,
    ) -> "Plot":
        return self.add(DensityDataset(values, bandwidth=bandwidth, style=LineStyle(color=color, width=width), name=label))

    def suggest_aspect(self) -> float:
        """Mean `avg_slope` of the datasets, measured against the plot's source rectangle.

        Datasets without a slope are skipped; 1.0 is returned when none has one.
        """
        src = source_rectangle(
            self.datasets,
            x_min=self.x_min,
            x_max=self.x_max,
            y_min=self.y_min,
            y_max=self.y_max,
            config=self.config,
        )
        slopes = [s for s in (ds.avg_slope(src) for ds in self.datasets) if s is not None]
        if not slopes:
            return 1.0
        return sum(slopes) / len(slopes)

    def use_suggested_aspect(self, width: int, height: int) -> tuple[int, int]:
        """Shrink one side of a `width` x `height` canvas so the average slope is drawn at 45 degrees.

        Shallow data narrows the canvas and steep data shortens it.
        """
        ratio = self.suggest_aspect()
        LOGGER.debug("suggested aspect ratio %r for %dx%d", ratio, width, height)
        if ratio <= 0 or not math.isfinite(ratio):
            return (width, height)
        if ratio <= 1.0:
            return (max(1, int(width * ratio)), height)
        return (width, max(1, int(height / ratio)))

    def layout(self, width: float, height: float, metrics: TextMetrics | None = None) -> Layout:
        """Geometry for a `width` x `height` canvas, measured with the raster backend unless `metrics` is given."""
        if metrics is None:
            metrics = _measuring_context()
        return compute_destination(self, width, height, metrics, self.config)

    def draw(self, ctx: DrawingContext) -> Layout:
        """Run the full pipeline against `ctx` and return the layout it used."""
        width, height = ctx.size
        layout = compute_destination(self, width, height, ctx, self.config)
        draw_title(ctx, layout, self.title, self.label_style)
        draw_x_axis(
            ctx,
            layout,
            label=self.x_label,
            tick_style=self.tick_style,
            label_style=self.label_style,
            line_style=self.axis_style,
            config=self.config,
        )
        draw_y_axis(
            ctx,
            layout,
            label=self.y_label,
            tick_style=self.tick_style,
            label_style=self.label_style,
            line_style=self.axis_style,
            config=self.config,
        )
        for ds in self.datasets:
            ds.draw(ctx, layout.src, layout.dst)
        if self.legend is not None:
            entries = sort_entries(self.datasets, layout.src) if self.sort_legend else list(self.datasets)
            geometry = place_legend(entries, layout.dst, self.legend, ctx, self.legend_style, self.config)
            draw_legend(ctx, geometry, self.legend_style)
        return layout


@dataclass
class NominalPlot(_RasterOutput):
    """Numeric y values over a categorical x axis.

    Each dataset gets a slot along the x axis sized by its `n_items`, and its name
    is written under the slot. There is no legend.
    """

    datasets: list[NominalDataset] = field(default_factory=list)
    title: str | None = None
    x_label: str | None = None
    y_label: str | None = None
    y_min: float | None = None
    y_max: float | None = None
    tick_style: TextStyle = DEFAULT_TICK_STYLE
    label_style: TextStyle = DEFAULT_LABEL_STYLE
    axis_style: LineStyle = DEFAULT_AXIS_STYLE
    background: RGBA = WHITE
    config: LayoutConfig = DEFAULT_CONFIG

    def add(self, *datasets: NominalDataset) -> "NominalPlot":
        for ds in datasets:
            if not isinstance(ds, NominalDataset):
                raise PlotDataError(f"expected a NominalDataset, got {type(ds).__name__}")
            self.datasets.append(ds)
        return self

    def bars(
        self,
        named_values: Sequence[tuple[str, float]],
        *,
        group: str = "",
        uses_color: bool = False,
    ) -> "NominalPlot":
        return self.add(nominal_bar_datasets(named_values, group_name=group, uses_color=uses_color))

    def boxes(self, named_values: Sequence[tuple[str, Any]], *, group: str = "") -> "NominalPlot":
        return self.add(nominal_boxplot_datasets(named_values, group_name=group))

    def layout(self, width: float, height: float, metrics: TextMetrics | None = None) -> NominalLayout:
        if metrics is None:
            metrics = _measuring_context()
        return compute_nominal_destination(self, width, height, metrics, self.config)

    def draw(self, ctx: DrawingContext) -> NominalLayout:
        width, height = ctx.size
        layout = compute_nominal_destination(self, width, height, ctx, self.config)
        draw_title(ctx, layout, self.title, self.label_style)
        draw_nominal_x_axis(
            ctx,
            layout,
            self.datasets,
            label=self.x_label,
            tick_style=self.tick_style,
            label_style=self.label_style,
            line_style=self.axis_style,
            config=self.config,
        )
        draw_y_axis(
            ctx,
            layout,
            label=self.y_label,
            tick_style=self.tick_style,
            label_style=self.label_style,
            line_style=self.axis_style,
            config=self.config,
        )
        for ds, (x, w) in zip(self.datasets, layout.slots):
            ds.draw(ctx, layout.y_src, layout.dst, x, w)
        return layout


def _measuring_context() -> TextMetrics:
    # Text metrics do not depend on canvas size.
    return RasterContext(1, 1)
