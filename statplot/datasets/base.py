from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from statplot.geometry import ZERO_RESIDUAL, Rectangle, Residual
from statplot.metrics import DrawingContext, TextMetrics


LEGEND_LINE_LENGTH_PX = 24.0


class Dataset(ABC):
    """Something that can be drawn on numeric x and y axes.

    Datasets never change after construction. A dataset without a name is left out
    of the legend.
    """

    def __init__(self, name: str | None = None) -> None:
        self._name = name

    @property
    def name(self) -> str | None:
        return self._name

    @abstractmethod
    def bounds(self) -> Rectangle:
        """Data-space bounding box; `EMPTY_RECTANGLE` when the dataset adds no extent."""
        raise NotImplementedError

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        """How far drawing with this `src`/`dst` pair would spill past each edge of `dst`.

        `metrics` is only needed by datasets that draw text beside their data.
        """
        return ZERO_RESIDUAL

    def representative_value(self, src: Rectangle) -> float | None:
        """Value used to order legend entries, or None when the dataset takes no part."""
        return None

    def avg_slope(self, src: Rectangle) -> float | None:
        """Mean steepness of the data with both axes scaled to `src`; None when it has no slope."""
        return None

    @abstractmethod
    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        raise NotImplementedError

    def legend_dimensions(self, metrics: TextMetrics) -> tuple[float, float]:
        """Size of the legend icon in device pixels."""
        return (0.0, 0.0)

    def draw_legend(self, ctx: DrawingContext, x: float, y: float) -> None:
        """Draw the legend icon centred on (x, y)."""
        return


def inside_mask(xs: np.ndarray, ys: np.ndarray, src: Rectangle) -> np.ndarray:
    return (
        np.isfinite(xs)
        & np.isfinite(ys)
        & (xs >= src.x_min)
        & (xs <= src.x_max)
        & (ys >= src.y_min)
        & (ys <= src.y_max)
    )


def mean_y_within(xs: np.ndarray, ys: np.ndarray, src: Rectangle) -> float | None:
    mask = inside_mask(xs, ys, src)
    if not np.any(mask):
        return None
    return float(np.mean(ys[mask]))


def average_slope(xs: np.ndarray, ys: np.ndarray, src: Rectangle) -> float | None:
    """Mean absolute slope between x-neighbouring finite points, in units of `src` spans.

    A result of 1 means the data climbs at 45 degrees when `src` fills a square.
    """
    mask = np.isfinite(xs) & np.isfinite(ys)
    if np.count_nonzero(mask) < 2 or src.width <= 0 or src.height <= 0:
        return None
    order = np.argsort(xs[mask], kind="stable")
    dx = np.diff(xs[mask][order]) / src.width
    dy = np.diff(ys[mask][order]) / src.height
    keep = dx > 0
    if not np.any(keep):
        return None
    return float(np.mean(np.abs(dy[keep] / dx[keep])))
