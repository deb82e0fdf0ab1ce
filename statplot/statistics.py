from __future__ import annotations

import math
from typing import Callable

import numpy as np

from statplot.errors import PlotDataError


CONFIDENCE_Z = 1.96


def mean(values: np.ndarray) -> float:
    arr = _nonempty(values, "mean")
    return float(np.mean(arr))


def mean_and_stdev(values: np.ndarray) -> tuple[float, float]:
    """Mean and population standard deviation."""
    arr = _nonempty(values, "mean_and_stdev")
    return float(np.mean(arr)), float(np.std(arr))


def mean_and_interval(values: np.ndarray) -> tuple[float, float]:
    """Mean and the half-width of its 95% confidence interval."""
    arr = _nonempty(values, "mean_and_interval")
    mu, sigma = mean_and_stdev(arr)
    return mu, CONFIDENCE_Z * sigma / math.sqrt(arr.size)


def percentile(p: float, values: np.ndarray) -> float:
    """The `p`th percentile by ranking, interpolating between neighbours (NIST method)."""
    if not 0.0 <= p <= 100.0:
        raise PlotDataError(f"percentile must be in [0, 100], got {p}")
    ranked = np.sort(_nonempty(values, "percentile"))
    num = ranked.size
    n = p * (num - 1) / 100.0 + 1.0
    if n <= 1.0:
        return float(ranked[0])
    if n >= num:
        return float(ranked[-1])
    k = int(n)
    d = n - k
    return float(ranked[k - 1] + d * (ranked[k] - ranked[k - 1]))


def separate_outliers(values: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Split values into (outliers, inliers) using 1.5 IQR fences around the quartiles."""
    arr = _nonempty(values, "separate_outliers")
    q1 = percentile(25.0, arr)
    q3 = percentile(75.0, arr)
    fence = 1.5 * (q3 - q1)
    inside = (arr >= q1 - fence) & (arr <= q3 + fence)
    return arr[~inside], arr[inside]


def gaussian_kernel(u: np.ndarray | float) -> np.ndarray | float:
    return np.exp(-(np.asarray(u) ** 2) / 2.0) / math.sqrt(2.0 * math.pi)


def kernel_density_estimator(
    kernel: Callable[[np.ndarray], np.ndarray],
    bandwidth: float,
    data: np.ndarray,
) -> Callable[[float], float]:
    if bandwidth <= 0:
        raise PlotDataError("bandwidth must be > 0")
    arr = _nonempty(data, "kernel_density_estimator")

    def _density(x: float) -> float:
        return float(np.sum(kernel((x - arr) / bandwidth)) / bandwidth / arr.size)

    return _density


def _nonempty(values: np.ndarray, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64).ravel()
    if arr.size == 0:
        raise PlotDataError(f"{what} requires at least one value")
    return arr
