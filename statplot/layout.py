from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Sequence

from statplot.config import DEFAULT_CONFIG, LayoutConfig
from statplot.datasets.nominal import BETWEEN_PADDING_PX
from statplot.errors import PlotDataError
from statplot.geometry import (
    ZERO_RESIDUAL,
    Range,
    Rectangle,
    Residual,
    range_padding,
    shrink,
    union_all,
)
from statplot.metrics import MemoizedMetrics, TextMetrics, tallest, widest
from statplot.ticks import TickSet, recommended_ticks, tick_locations

if TYPE_CHECKING:
    from statplot.datasets.base import Dataset
    from statplot.datasets.nominal import NominalDataset
    from statplot.plot import NominalPlot, Plot


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Layout:
    """Everything one draw pass needs: the two rectangles, the ticks, and the bands reserved around `dst`."""

    src: Rectangle
    dst: Rectangle
    xticks: TickSet
    yticks: TickSet
    title_band: float
    x_band: float
    y_band: float
    right_band: float
    residual: Residual


def data_bounds(datasets: Sequence["Dataset"]) -> Rectangle:
    """Union of every dataset's bounds; `EMPTY_RECTANGLE` when there is nothing to union."""
    return union_all([ds.bounds() for ds in datasets])


def source_rectangle(
    datasets: Sequence["Dataset"],
    *,
    x_min: float | None = None,
    x_max: float | None = None,
    y_min: float | None = None,
    y_max: float | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Rectangle:
    """Padded data rectangle, with each explicit override replacing its own bound."""
    raw = data_bounds(datasets)
    x = _resolve_axis("x", raw.x_range, x_min, x_max, config)
    y = _resolve_axis("y", raw.y_range, y_min, y_max, config)
    LOGGER.debug("data dimensions: raw=%s src x=[%r, %r] y=[%r, %r]", raw, x.min, x.max, y.min, y.max)
    return Rectangle.from_ranges(x, y)


def _resolve_axis(
    axis: str,
    raw: Range,
    lo_override: float | None,
    hi_override: float | None,
    config: LayoutConfig,
) -> Range:
    for bound in (lo_override, hi_override):
        if bound is not None and not math.isfinite(bound):
            raise PlotDataError(f"{axis} axis override must be finite, got {bound!r}")
    if lo_override is not None and hi_override is not None and lo_override > hi_override:
        raise PlotDataError(f"{axis} axis overrides are inverted: [{lo_override}, {hi_override}]")

    lo: float | None = None
    hi: float | None = None
    if not raw.is_empty and math.isfinite(raw.min) and math.isfinite(raw.max):
        pad = range_padding(raw, config.padding_ratio)
        lo = raw.min - pad
        hi = raw.max + pad
    if lo_override is not None:
        lo = float(lo_override)
    if hi_override is not None:
        hi = float(hi_override)

    if lo is None and hi is None:
        LOGGER.debug("%s axis has no finite bounds, using [0, 1]", axis)
        return Range(min=0.0, max=1.0)
    if lo is None:
        assert hi is not None
        return Range(min=hi - 1.0, max=hi)
    if hi is None:
        return Range(min=lo, max=lo + 1.0)
    if lo > hi:
        raise PlotDataError(f"{axis} axis override leaves an inverted range: [{lo}, {hi}]")
    if lo == hi:
        half = max(1.0, abs(lo) * config.degenerate_span_ratio)
        LOGGER.debug("%s axis is degenerate at %r, widening by %r", axis, lo, half)
        return Range(min=lo - half, max=hi + half)
    return Range(min=lo, max=hi)


def compute_destination(
    plot: "Plot",
    device_width: float,
    device_height: float,
    metrics: TextMetrics,
    config: LayoutConfig | None = None,
) -> Layout:
    """Fit the plot's data into a `device_width` x `device_height` canvas.

    Space is reserved for the title, the x axis band at the bottom and the y axis band
    at the left. Datasets are then asked once how far they would spill past the
    remaining rectangle and it is shrunk by the largest spill in each direction.
    Ticks are generated exactly once here and returned for the draw pass.
    """
    if not (math.isfinite(device_width) and math.isfinite(device_height)):
        raise PlotDataError("device dimensions must be finite")
    if device_width <= 0 or device_height <= 0:
        raise PlotDataError(f"device dimensions must be > 0, got {device_width}x{device_height}")
    config = config or plot.config
    m = MemoizedMetrics(metrics)

    src = source_rectangle(
        plot.datasets,
        x_min=plot.x_min,
        x_max=plot.x_max,
        y_min=plot.y_min,
        y_max=plot.y_max,
        config=config,
    )
    xticks = _axis_ticks(src.x_range, device_width, config)
    yticks = _axis_ticks(src.y_range, device_height, config)
    LOGGER.debug("tick steps: x=%r y=%r", xticks.step, yticks.step)

    x_labels = xticks.labels()
    y_labels = yticks.labels()
    text_pad = config.text_padding_px
    axis_pad = config.axis_padding_px
    tick_len = config.tick_length_px

    title_band = text_pad
    if plot.title:
        title_band += m.line_height(plot.label_style)

    x_band = axis_pad + tick_len + text_pad + tallest(m, x_labels, plot.tick_style)
    if plot.x_label:
        x_band += text_pad + m.line_height(plot.label_style)

    y_band = axis_pad + widest(m, y_labels, plot.tick_style) + text_pad + tick_len
    if plot.y_label:
        y_band += m.line_height(plot.label_style) + text_pad

    right_band = max(axis_pad, widest(m, x_labels, plot.tick_style) / 2.0)

    provisional = Rectangle(
        x_min=y_band,
        x_max=device_width - right_band,
        y_min=title_band,
        y_max=device_height - x_band,
    )
    if provisional.width <= 0 or provisional.height <= 0:
        raise PlotDataError(
            f"canvas {device_width}x{device_height} leaves no room for the plot area after axis labels"
        )

    residual = ZERO_RESIDUAL
    for ds in plot.datasets:
        residual = residual.max(ds.residual(src, provisional, m))
    dst = shrink(provisional, residual)
    if dst.width <= 0 or dst.height <= 0:
        raise PlotDataError(f"canvas {device_width}x{device_height} collapses after residual {residual}")
    LOGGER.debug("destination: %s residual=%s", dst, residual)

    return Layout(
        src=src,
        dst=dst,
        xticks=xticks,
        yticks=yticks,
        title_band=title_band,
        x_band=x_band,
        y_band=y_band,
        right_band=right_band,
        residual=residual,
    )


def _axis_ticks(r: Range, pixel_length: float, config: LayoutConfig) -> TickSet:
    count = recommended_ticks(
        pixel_length,
        label_extent_px=config.tick_label_extent_px,
        spacing_px=config.tick_spacing_px,
    )
    return tick_locations(r, count, minor=config.minor_ticks).within(r)



@dataclass(frozen=True)
class NominalLayout:
    """Geometry of a plot with a categorical x axis.

    `slots` holds the device (left, width) of each top-level dataset in plot order.
    """

    y_src: Range
    dst: Rectangle
    yticks: TickSet
    slots: tuple[tuple[float, float], ...]
    title_band: float
    x_band: float
    y_band: float
    right_band: float
    residual: Residual

    @property
    def src(self) -> Rectangle:
        """Source rectangle for the shared y-axis drawing; its x range is the device span of `dst`."""
        return Rectangle.from_ranges(self.dst.x_range, self.y_src)


def nominal_slots(
    datasets: Sequence["NominalDataset"],
    x_min: float,
    width: float,
) -> tuple[tuple[float, float], ...]:
    """Split `width` pixels among datasets in proportion to their `n_items`, leaving a gap between neighbours."""
    total = sum(ds.n_items for ds in datasets)
    if total == 0:
        return ()
    unit = (width - BETWEEN_PADDING_PX * (len(datasets) - 1)) / total
    slots: list[tuple[float, float]] = []
    x = x_min
    for ds in datasets:
        w = unit * ds.n_items
        slots.append((x, w))
        x += w + BETWEEN_PADDING_PX
    return tuple(slots)


def compute_nominal_destination(
    plot: "NominalPlot",
    device_width: float,
    device_height: float,
    metrics: TextMetrics,
    config: LayoutConfig | None = None,
) -> NominalLayout:
    """Fit a categorical plot into a `device_width` x `device_height` canvas.

    The y axis is laid out as for numeric plots. The x band is tall enough for the
    tallest wrapped category name, and the residual pass only moves the top and
    bottom edges since each dataset draws inside its own slot.
    """
    if not (math.isfinite(device_width) and math.isfinite(device_height)):
        raise PlotDataError("device dimensions must be finite")
    if device_width <= 0 or device_height <= 0:
        raise PlotDataError(f"device dimensions must be > 0, got {device_width}x{device_height}")
    config = config or plot.config
    m = MemoizedMetrics(metrics)

    raw = Range(min=math.inf, max=-math.inf)
    for ds in plot.datasets:
        raw = raw.union(ds.value_range())
    y_src = _resolve_axis("y", raw, plot.y_min, plot.y_max, config)
    yticks = _axis_ticks(y_src, device_height, config)

    text_pad = config.text_padding_px
    axis_pad = config.axis_padding_px
    tick_len = config.tick_length_px

    title_band = text_pad
    if plot.title:
        title_band += m.line_height(plot.label_style)
    y_band = axis_pad + widest(m, yticks.labels(), plot.tick_style) + text_pad + tick_len
    if plot.y_label:
        y_band += m.line_height(plot.label_style) + text_pad
    right_band = axis_pad

    slots = nominal_slots(plot.datasets, y_band, device_width - y_band - right_band)
    if any(w <= 0 for _, w in slots):
        raise PlotDataError(f"canvas width {device_width} leaves no room for {len(slots)} categories")
    names = max(
        (ds.x_label_height(m, plot.tick_style, w) for ds, (_, w) in zip(plot.datasets, slots)),
        default=0.0,
    )
    x_band = axis_pad + text_pad + names
    if plot.x_label:
        x_band += text_pad + m.line_height(plot.label_style)

    provisional = Rectangle(
        x_min=y_band,
        x_max=device_width - right_band,
        y_min=title_band,
        y_max=device_height - x_band,
    )
    if provisional.width <= 0 or provisional.height <= 0:
        raise PlotDataError(
            f"canvas {device_width}x{device_height} leaves no room for the plot area after axis labels"
        )

    spill = ZERO_RESIDUAL
    for ds, (x, w) in zip(plot.datasets, slots):
        spill = spill.max(ds.residual(y_src, provisional, x, w, m))
    residual = Residual(top=spill.top, bottom=spill.bottom)
    dst = shrink(provisional, residual)
    if dst.height <= 0:
        raise PlotDataError(f"canvas {device_width}x{device_height} collapses after residual {residual}")
    LOGGER.debug("nominal destination: %s residual=%s slots=%d", dst, residual, len(slots))

    return NominalLayout(
        y_src=y_src,
        dst=dst,
        yticks=yticks,
        slots=slots,
        title_band=title_band,
        x_band=x_band,
        y_band=y_band,
        right_band=right_band,
        residual=residual,
    )
