from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Sequence, Union

from statplot.config import DEFAULT_CONFIG, LayoutConfig
from statplot.datasets.base import Dataset
from statplot.geometry import Rectangle
from statplot.metrics import DrawingContext, MemoizedMetrics, TextMetrics
from statplot.styles import DEFAULT_LEGEND_STYLE, TextStyle


LOGGER = logging.getLogger(__name__)


class LegendLocation(Enum):
    UPPER_LEFT = "upper-left"
    LOWER_LEFT = "lower-left"
    UPPER_RIGHT = "upper-right"
    LOWER_RIGHT = "lower-right"

    @property
    def is_left(self) -> bool:
        return self in (LegendLocation.UPPER_LEFT, LegendLocation.LOWER_LEFT)

    @property
    def is_upper(self) -> bool:
        return self in (LegendLocation.UPPER_LEFT, LegendLocation.UPPER_RIGHT)


class IconSide(Enum):
    """Which side of its text a legend icon is drawn on."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class LegendAt:
    """Explicit placement: (x, y) is the top-left corner of the legend box in device pixels."""

    x: float
    y: float
    icon_side: IconSide = IconSide.BEFORE


LegendPolicy = Union[LegendLocation, LegendAt]


@dataclass(frozen=True)
class LegendSize:
    width: float
    height: float
    row_height: float
    text_width: float
    icon_width: float


@dataclass(frozen=True)
class LegendGeometry:
    box: Rectangle
    icon_side: IconSide
    size: LegendSize
    entries: tuple[Dataset, ...]


def legend_entries(datasets: Sequence[Dataset]) -> tuple[Dataset, ...]:
    """Datasets that get a legend row; unnamed ones are skipped."""
    return tuple(ds for ds in datasets if ds.name is not None)


def legend_dimensions(
    datasets: Sequence[Dataset],
    metrics: TextMetrics,
    style: TextStyle = DEFAULT_LEGEND_STYLE,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> LegendSize:
    """Size of the legend box for the named datasets.

    Every row gets the same height: the larger of the legend text line height and the
    tallest icon, so rows line up whatever the icon shapes are.
    """
    entries = legend_entries(datasets)
    if not entries:
        return LegendSize(width=0.0, height=0.0, row_height=0.0, text_width=0.0, icon_width=0.0)
    text_width = 0.0
    icon_width = 0.0
    icon_height = 0.0
    for ds in entries:
        assert ds.name is not None
        text_width = max(text_width, metrics.measure_text(ds.name, style)[0])
        iw, ih = ds.legend_dimensions(metrics)
        icon_width = max(icon_width, iw)
        icon_height = max(icon_height, ih)
    row_height = max(metrics.line_height(style), icon_height)
    return LegendSize(
        width=text_width + icon_width + config.legend_padding_px,
        height=row_height * len(entries),
        row_height=row_height,
        text_width=text_width,
        icon_width=icon_width,
    )


def place_legend(
    datasets: Sequence[Dataset],
    dst: Rectangle,
    policy: LegendPolicy,
    metrics: TextMetrics,
    style: TextStyle = DEFAULT_LEGEND_STYLE,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> LegendGeometry:
    """Position the legend box for `datasets` against `dst`.

    Corner policies put the icon on the side nearer the middle of the plot: after the
    text in the left corners, before it in the right corners.
    """
    size = legend_dimensions(datasets, MemoizedMetrics(metrics), style, config)
    inset = config.legend_inset_px
    if isinstance(policy, LegendAt):
        x0, y0, side = policy.x, policy.y, policy.icon_side
    else:
        side = IconSide.AFTER if policy.is_left else IconSide.BEFORE
        x0 = dst.x_min + inset if policy.is_left else dst.x_max - inset - size.width
        y0 = dst.y_min + inset if policy.is_upper else dst.y_max - inset - size.height
    box = Rectangle(x_min=x0, x_max=x0 + size.width, y_min=y0, y_max=y0 + size.height)
    LOGGER.debug("legend %s at %s, icon %s", policy, box, side.value)
    return LegendGeometry(box=box, icon_side=side, size=size, entries=legend_entries(datasets))


def sort_entries(datasets: Sequence[Dataset], src: Rectangle, *, descending: bool = True) -> list[Dataset]:
    """Order datasets by their representative value over `src`.

    Ties keep insertion order; datasets without a value follow, in their original order.
    """
    valued: list[tuple[float, Dataset]] = []
    rest: list[Dataset] = []
    for ds in datasets:
        value = ds.representative_value(src)
        if value is None:
            rest.append(ds)
        else:
            valued.append((value, ds))
    ordered = sorted(valued, key=lambda item: item[0], reverse=descending)
    return [ds for _, ds in ordered] + rest


def draw_legend(ctx: DrawingContext, geometry: LegendGeometry, style: TextStyle = DEFAULT_LEGEND_STYLE) -> None:
    size = geometry.size
    box = geometry.box
    pad = size.width - size.text_width - size.icon_width
    for i, ds in enumerate(geometry.entries):
        assert ds.name is not None
        cy = box.y_min + (i + 0.5) * size.row_height
        tw, _ = ctx.measure_text(ds.name, style)
        if geometry.icon_side is IconSide.BEFORE:
            icon_x = box.x_min + size.icon_width / 2.0
            text_x = box.x_min + size.icon_width + pad + tw / 2.0
        else:
            icon_x = box.x_max - size.icon_width / 2.0
            text_x = box.x_min + size.text_width - tw / 2.0
        ds.draw_legend(ctx, icon_x, cy)
        ctx.draw_text(text_x, cy, ds.name, style)
