from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from statplot.adapters.normalize import normalize_points
from statplot.datasets.base import Dataset, inside_mask
from statplot.errors import PlotDataError
from statplot.geometry import ZERO_RESIDUAL, Rectangle, Residual, bounds_of, overflow
from statplot.metrics import DrawingContext, TextMetrics
from statplot.styles import TextStyle
from statplot.transform import build_transform


DEFAULT_POINT_LABEL_STYLE = TextStyle(size_px=10.0)


class LabelDataset(Dataset):
    """Text written at data points.

    Each label is centred on its point shifted by (`x_offset`, `y_offset`) device
    pixels, with y growing downward as on the canvas. Labels count toward the
    residual so they are not cut off at the edge of the plot area.
    """

    def __init__(
        self,
        points: Any,
        labels: Sequence[str],
        *,
        style: TextStyle = DEFAULT_POINT_LABEL_STYLE,
        x_offset: float = 0.0,
        y_offset: float = 0.0,
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        self.xs, self.ys = normalize_points(points)
        if len(labels) != self.xs.size:
            raise PlotDataError(f"points and labels length mismatch: {self.xs.size} != {len(labels)}")
        self.labels = tuple(str(label) for label in labels)
        self.style = style
        self.x_offset = float(x_offset)
        self.y_offset = float(y_offset)

    def bounds(self) -> Rectangle:
        return bounds_of(self.xs, self.ys)

    def _placed(self, src: Rectangle, dst: Rectangle) -> tuple[list[str], np.ndarray, np.ndarray]:
        mask = inside_mask(self.xs, self.ys, src)
        px, py = build_transform(src, dst).map_xy(self.xs[mask], self.ys[mask])
        texts = [self.labels[i] for i in np.flatnonzero(mask).tolist()]
        return texts, px + self.x_offset, py + self.y_offset

    def residual(self, src: Rectangle, dst: Rectangle, metrics: TextMetrics | None = None) -> Residual:
        """Overflow of each label's text box; without `metrics` only the anchors are checked."""
        texts, px, py = self._placed(src, dst)
        if not texts:
            return ZERO_RESIDUAL
        if metrics is None:
            return overflow(px, py, 0.0, dst)
        sizes = np.asarray([metrics.measure_text(t, self.style) for t in texts], dtype=np.float64)
        return overflow(px, py, sizes[:, 0] / 2.0, dst, extent_y=sizes[:, 1] / 2.0)

    def draw(self, ctx: DrawingContext, src: Rectangle, dst: Rectangle) -> None:
        texts, px, py = self._placed(src, dst)
        for text, x, y in zip(texts, px.tolist(), py.tolist()):
            ctx.draw_text(x, y, text, self.style)


def label_dataset(
    labelled_points: Sequence[tuple[str, Any]],
    *,
    style: TextStyle = DEFAULT_POINT_LABEL_STYLE,
    x_offset: float = 0.0,
    y_offset: float = 0.0,
) -> LabelDataset:
    """Labels from `(text, (x, y))` pairs."""
    texts = [text for text, _ in labelled_points]
    points = [point for _, point in labelled_points]
    return LabelDataset(points, texts, style=style, x_offset=x_offset, y_offset=y_offset)
