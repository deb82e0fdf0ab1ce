from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from statplot.errors import PlotDataError
from statplot.geometry import Point


try:
    import pandas as pd
except ImportError:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except ImportError:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def normalize_values(values: Any, *, label: str = "values") -> np.ndarray:
    """Coerce 1-D input (list, ndarray, pandas Series, torch tensor) to a read-only float64 array."""
    arr = _coerce_1d_numeric(values, label=label)
    if arr.size == 0:
        raise PlotDataError(f"{label} is empty")
    return _frozen(arr)


def normalize_xy(y: Any = None, *, x: Any = None, data: Any = None) -> tuple[np.ndarray, np.ndarray]:
    """Resolve separate x/y inputs, or DataFrame column names with `data=`, to equal-length arrays.

    Missing `x` defaults to the sample index.
    """
    y_values = _resolve_input(y=y, key="y", data=data)
    if y_values is None:
        raise PlotDataError("y input is required")
    y_arr = _coerce_1d_numeric(y_values, label="y")
    if y_arr.size == 0:
        raise PlotDataError("empty series")

    if x is None:
        x_arr = np.arange(y_arr.size, dtype=np.float64)
    else:
        x_values = _resolve_input(y=x, key="x", data=data)
        x_arr = _coerce_1d_numeric(x_values, label="x")

    if x_arr.shape != y_arr.shape:
        raise PlotDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")
    return _frozen(x_arr), _frozen(y_arr)


def normalize_points(points: Any, *, columns: int = 2, label: str = "points") -> tuple[np.ndarray, ...]:
    """Split an (N, columns) point collection into `columns` read-only float64 arrays."""
    if torch is not None and isinstance(points, torch.Tensor):
        arr = points.detach().cpu().to(torch.float64).numpy()
    elif pd is not None and isinstance(points, pd.DataFrame):
        numeric = [c for c in points.columns if _is_numeric_dtype(points[c])]
        if len(numeric) != columns:
            raise PlotDataError(f"{label} DataFrame must contain exactly {columns} numeric columns")
        arr = points[numeric].to_numpy(dtype=np.float64)
    elif isinstance(points, np.ndarray):
        arr = points
    elif isinstance(points, Sequence) and not isinstance(points, (str, bytes, bytearray)):
        rows = [(p.x, p.y) if isinstance(p, Point) else p for p in points]
        arr = np.asarray(rows, dtype=object) if rows else np.empty((0, columns))
    else:
        raise PlotDataError(f"unsupported {label} input type: {type(points)!r}")

    if arr.ndim != 2 or arr.shape[1] != columns:
        raise PlotDataError(f"{label} must have shape (N, {columns}), got {arr.shape}")
    if arr.shape[0] == 0:
        raise PlotDataError(f"{label} is empty")
    return tuple(_frozen(_coerce_ndarray(arr[:, i], label=label)) for i in range(columns))


def _resolve_input(y: Any, key: str, data: Any) -> Any:
    if data is not None:
        if pd is None:
            raise PlotDataError("pandas is required when using `data=`")
        if not isinstance(data, pd.DataFrame):
            raise PlotDataError("`data` must be a pandas DataFrame")
        if isinstance(y, str):
            if y not in data.columns:
                raise PlotDataError(f"column not found: {y}")
            return data[y]
        if y is None:
            if key == "y":
                numeric_cols = [c for c in data.columns if _is_numeric_dtype(data[c])]
                if len(numeric_cols) != 1:
                    raise PlotDataError("when y is omitted, data must have exactly one numeric column")
                return data[numeric_cols[0]]
            return None
        return y

    if pd is not None and isinstance(y, pd.DataFrame):
        numeric_cols = [c for c in y.columns if _is_numeric_dtype(y[c])]
        if len(numeric_cols) != 1:
            raise PlotDataError("1-D DataFrame input must contain exactly one numeric column")
        return y[numeric_cols[0]]

    return y


def _is_numeric_dtype(series: Any) -> bool:
    if pd is None:
        return False
    return bool(pd.api.types.is_numeric_dtype(series))


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return tensor.cpu().to(torch.float64).numpy()

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(value, dtype=object).reshape(-1), label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=True)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, dtype=np.float64, copy=True)
    arr.setflags(write=False)
    return arr
