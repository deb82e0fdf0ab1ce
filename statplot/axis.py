from __future__ import annotations

from typing import Sequence

from statplot.config import DEFAULT_CONFIG, LayoutConfig
from statplot.datasets.nominal import NominalDataset
from statplot.geometry import Point
from statplot.layout import Layout, NominalLayout
from statplot.metrics import DrawingContext, widest
from statplot.styles import DEFAULT_AXIS_STYLE, DEFAULT_LABEL_STYLE, DEFAULT_TICK_STYLE, LineStyle, TextStyle
from statplot.transform import build_transform


def draw_title(
    ctx: DrawingContext,
    layout: Layout | NominalLayout,
    title: str | None,
    style: TextStyle = DEFAULT_LABEL_STYLE,
) -> None:
    if not title:
        return
    ctx.draw_text((layout.dst.x_min + layout.dst.x_max) / 2.0, layout.title_band / 2.0, title, style)


def draw_x_axis(
    ctx: DrawingContext,
    layout: Layout,
    *,
    label: str | None = None,
    tick_style: TextStyle = DEFAULT_TICK_STYLE,
    label_style: TextStyle = DEFAULT_LABEL_STYLE,
    line_style: LineStyle = DEFAULT_AXIS_STYLE,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> None:
    """Axis rule below the plot area with tick marks, tick labels and the axis title."""
    dst = layout.dst
    tr = build_transform(layout.src, dst)
    axis_y = dst.y_max + config.axis_padding_px
    ctx.draw_line([Point(dst.x_min, axis_y), Point(dst.x_max, axis_y)], line_style)

    label_top = axis_y + config.tick_length_px + config.text_padding_px
    tallest_label = 0.0
    for tick in layout.xticks.ticks:
        x = tr.map_x(tick.value)
        length = config.tick_length_px if tick.is_major else config.minor_tick_length_px
        ctx.draw_line([Point(x, axis_y), Point(x, axis_y + length)], line_style)
        if tick.label is None:
            continue
        _, h = ctx.measure_text(tick.label, tick_style)
        tallest_label = max(tallest_label, h)
        ctx.draw_text(x, label_top + h / 2.0, tick.label, tick_style)

    if label:
        lh = ctx.line_height(label_style)
        y = label_top + tallest_label + config.text_padding_px + lh / 2.0
        ctx.draw_text((dst.x_min + dst.x_max) / 2.0, y, label, label_style)


def draw_y_axis(
    ctx: DrawingContext,
    layout: Layout | NominalLayout,
    *,
    label: str | None = None,
    tick_style: TextStyle = DEFAULT_TICK_STYLE,
    label_style: TextStyle = DEFAULT_LABEL_STYLE,
    line_style: LineStyle = DEFAULT_AXIS_STYLE,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> None:
    """Axis rule left of the plot area; labels are right-aligned against the tick marks."""
    dst = layout.dst
    tr = build_transform(layout.src, dst)
    axis_x = dst.x_min - config.axis_padding_px
    ctx.draw_line([Point(axis_x, dst.y_min), Point(axis_x, dst.y_max)], line_style)

    label_right = axis_x - config.tick_length_px - config.text_padding_px
    for tick in layout.yticks.ticks:
        y = tr.map_y(tick.value)
        length = config.tick_length_px if tick.is_major else config.minor_tick_length_px
        ctx.draw_line([Point(axis_x - length, y), Point(axis_x, y)], line_style)
        if tick.label is None:
            continue
        w, _ = ctx.measure_text(tick.label, tick_style)
        ctx.draw_text(label_right - w / 2.0, y, tick.label, tick_style)

    if label:
        lh = ctx.line_height(label_style)
        x = label_right - widest(ctx, layout.yticks.labels(), tick_style) - config.text_padding_px - lh / 2.0
        ctx.draw_text(x, (dst.y_min + dst.y_max) / 2.0, label, label_style, angle=90)


def draw_nominal_x_axis(
    ctx: DrawingContext,
    layout: NominalLayout,
    datasets: Sequence[NominalDataset],
    *,
    label: str | None = None,
    tick_style: TextStyle = DEFAULT_TICK_STYLE,
    label_style: TextStyle = DEFAULT_LABEL_STYLE,
    line_style: LineStyle = DEFAULT_AXIS_STYLE,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> None:
    """Axis rule below the plot area with each dataset's name wrapped under its slot."""
    dst = layout.dst
    axis_y = dst.y_max + config.axis_padding_px
    ctx.draw_line([Point(dst.x_min, axis_y), Point(dst.x_max, axis_y)], line_style)

    names_top = axis_y + config.text_padding_px
    tallest_names = 0.0
    for ds, (x, width) in zip(datasets, layout.slots):
        ds.draw_x_label(ctx, x, names_top, tick_style, width)
        tallest_names = max(tallest_names, ds.x_label_height(ctx, tick_style, width))

    if label:
        lh = ctx.line_height(label_style)
        y = names_top + tallest_names + config.text_padding_px + lh / 2.0
        ctx.draw_text((dst.x_min + dst.x_max) / 2.0, y, label, label_style)
