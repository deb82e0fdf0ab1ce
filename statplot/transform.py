from __future__ import annotations

from dataclasses import dataclass
from typing import overload

import numpy as np

from statplot.geometry import Point, Rectangle


@dataclass(frozen=True)
class Transform:
    """Affine data-to-device map: `x' = sx * x + tx`, `y' = sy * y + ty`.

    `sy` is negative so that data y grows upward while device y grows downward.
    """

    sx: float
    tx: float
    sy: float
    ty: float

    def __call__(self, point: Point) -> Point:
        return Point(x=self.sx * point.x + self.tx, y=self.sy * point.y + self.ty)

    @overload
    def map_x(self, x: float) -> float: ...

    @overload
    def map_x(self, x: np.ndarray) -> np.ndarray: ...

    def map_x(self, x):
        return x * self.sx + self.tx

    @overload
    def map_y(self, y: float) -> float: ...

    @overload
    def map_y(self, y: np.ndarray) -> np.ndarray: ...

    def map_y(self, y):
        return y * self.sy + self.ty

    def map_xy(self, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return self.map_x(np.asarray(x, dtype=np.float64)), self.map_y(np.asarray(y, dtype=np.float64))

    def scale_x(self, dx: float) -> float:
        """Device length of a data-space x distance."""
        return abs(dx * self.sx)

    def scale_y(self, dy: float) -> float:
        return abs(dy * self.sy)


def build_transform(src: Rectangle, dst: Rectangle) -> Transform:
    if src.width != 0:
        sx = dst.width / src.width
    else:
        sx = 1.0
    tx = dst.x_min - src.x_min * sx

    if src.height != 0:
        sy = -(dst.height / src.height)
    else:
        sy = -1.0
    ty = dst.y_max - src.y_min * sy
    return Transform(sx=sx, tx=tx, sy=sy, ty=ty)


def transform(src: Rectangle, dst: Rectangle) -> Transform:
    """Map `src` onto `dst`: `src.x_min -> dst.x_min`, `src.y_min -> dst.y_max`."""
    return build_transform(src, dst)

