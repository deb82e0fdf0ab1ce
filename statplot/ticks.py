from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math
from typing import Sequence

import numpy as np

from statplot.config import DEFAULT_TICK_LABEL_EXTENT_PX, DEFAULT_TICK_SPACING_PX
from statplot.errors import PlotDataError, TickGenerationError
from statplot.geometry import Range


NICE_FRACTIONS = (Decimal("1"), Decimal("2"), Decimal("2.5"), Decimal("5"), Decimal("10"))
_STEP_TOLERANCE = 1e-12
_INDEX_TOLERANCE = 1e-9
_SCI_UPPER = 1e6
_SCI_STEP_LOWER = 1e-4


@dataclass(frozen=True)
class Tick:
    value: float
    label: str | None = None

    @property
    def is_major(self) -> bool:
        return self.label is not None


@dataclass(frozen=True)
class TickSet:
    ticks: tuple[Tick, ...]
    step: float

    @property
    def major(self) -> tuple[Tick, ...]:
        return tuple(t for t in self.ticks if t.is_major)

    @property
    def minor(self) -> tuple[Tick, ...]:
        return tuple(t for t in self.ticks if not t.is_major)

    def values(self) -> np.ndarray:
        return np.asarray([t.value for t in self.ticks], dtype=np.float64)

    def labels(self) -> list[str]:
        return [t.label for t in self.ticks if t.label is not None]

    def within(self, r: Range) -> "TickSet":
        """Ticks that fall inside `r`, with a tolerance of a millionth of a step."""
        eps = max(1e-12, abs(self.step) * 1e-6)
        kept = tuple(t for t in self.ticks if r.min - eps <= t.value <= r.max + eps)
        return TickSet(ticks=kept, step=self.step)


def recommended_ticks(
    pixel_length: float,
    *,
    label_extent_px: float = DEFAULT_TICK_LABEL_EXTENT_PX,
    spacing_px: float = DEFAULT_TICK_SPACING_PX,
) -> int:
    """Suggested number of tick intervals for an axis `pixel_length` device pixels long."""
    per_tick = label_extent_px + spacing_px
    if per_tick <= 0:
        raise PlotDataError("label_extent_px + spacing_px must be > 0")
    if not math.isfinite(pixel_length) or pixel_length <= 0:
        return 1
    return max(1, int(math.floor(pixel_length / per_tick)))


def nice_step(raw_step: float) -> Decimal:
    """Smallest value of `{1, 2, 2.5, 5, 10} x 10^k` that is >= `raw_step`."""
    if not math.isfinite(raw_step) or raw_step <= 0:
        raise TickGenerationError(f"tick step must be finite and > 0, got {raw_step!r}")
    exp = int(math.floor(math.log10(raw_step)))
    threshold = raw_step * (1.0 - _STEP_TOLERANCE)
    for frac in NICE_FRACTIONS:
        candidate = frac.scaleb(exp)
        if float(candidate) >= threshold:
            return candidate
    return NICE_FRACTIONS[-1].scaleb(exp + 1)


def tick_locations(r: Range, suggested_count: int, *, minor: bool = True) -> TickSet:
    """Readable tick positions covering `r`.

    Major ticks start at the smallest multiple of the nice step that is >= `r.min` and
    continue up to and including the first multiple that reaches `r.max`. When `minor`
    is set, an unlabeled tick is placed halfway between each pair of majors.
    """
    if not (math.isfinite(r.min) and math.isfinite(r.max)):
        raise PlotDataError(f"tick range must be finite, got [{r.min}, {r.max}]")
    if r.min > r.max:
        raise PlotDataError(f"tick range is inverted: [{r.min}, {r.max}]")
    if r.min == r.max:
        return TickSet(ticks=(Tick(value=r.min, label=format_tick(r.min)),), step=0.0)

    span = r.max - r.min
    if not math.isfinite(span):
        raise PlotDataError("tick range span overflows")
    count = max(1, int(suggested_count))
    # A step finer than the float spacing at this magnitude cannot separate ticks.
    resolution = float(np.spacing(max(abs(r.min), abs(r.max))))
    step_d = nice_step(max(span / count, resolution))
    step = float(step_d)
    if step <= 0 or not math.isfinite(step):
        raise TickGenerationError(f"nice step underflowed for span {span!r}")

    first = math.ceil(r.min / step - _INDEX_TOLERANCE)
    last = math.ceil(r.max / step - _INDEX_TOLERANCE)
    n_major = last - first + 1
    cap = int(span / step) + 2
    if n_major < 1 or n_major > cap:
        raise TickGenerationError(f"tick stepping produced {n_major} ticks (cap {cap}) for step {step!r}")

    major_values: list[float] = []
    mids: list[float] = []
    for i in range(first, last + 1):
        value = _snap(float(Decimal(i) * step_d), step)
        # Rounding to the nearest float can still land two multiples on one value.
        if major_values and value <= major_values[-1]:
            continue
        major_values.append(value)
        mids.append(_snap(float(Decimal(2 * i + 1) * step_d / 2), step))

    labels = format_ticks(major_values, step=step)
    ticks: list[Tick] = []
    for k, (value, label) in enumerate(zip(major_values, labels)):
        ticks.append(Tick(value=value, label=label))
        if minor and k < len(major_values) - 1 and value < mids[k] < major_values[k + 1]:
            ticks.append(Tick(value=mids[k], label=None))
    return TickSet(ticks=tuple(ticks), step=step)


def format_tick(value: float, *, step: float | None = None) -> str:
    if not math.isfinite(value):
        return str(value)
    if step is not None and math.isfinite(step) and step > 0 and abs(value) <= step * _INDEX_TOLERANCE:
        value = 0.0
    abs_v = abs(value)
    if abs_v != 0 and (abs_v >= _SCI_UPPER or (step is not None and 0 < step < _SCI_STEP_LOWER)):
        return _format_scientific(value, _scientific_precision([value], step))

    decimals = _decimals_from_step(step) if step is not None and step > 0 else 6
    d = Decimal(repr(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Trim trailing zeros only after the decimal point so 30, 40 stay intact.
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks(values: Sequence[float], *, step: float | None = None) -> list[str]:
    """Labels for adjacent tick values using the fewest digits that tell them apart."""
    if not values:
        return []
    if step is None and len(values) > 1:
        step = abs(values[1] - values[0])
    if step is not None and step > 0:
        big = max(abs(v) for v in values)
        if big >= _SCI_UPPER or step < _SCI_STEP_LOWER:
            precision = _scientific_precision(values, step)
            return [
                "0" if abs(v) <= step * _INDEX_TOLERANCE else _format_scientific(v, precision)
                for v in values
            ]
    return [format_tick(float(v), step=step) for v in values]


def _snap(value: float, step: float) -> float:
    # Decimal arithmetic can still leave -0.0 behind.
    if abs(value) <= step * _INDEX_TOLERANCE:
        return 0.0
    return value


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not math.isfinite(step):
        return 6
    d = Decimal(repr(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)


def _scientific_precision(values: Sequence[float], step: float | None) -> int:
    tolerance = abs(step) * 1e-6 if step else 0.0
    # 16 digits after the point is enough to round-trip any float64.
    for precision in range(0, 17):
        if all(abs(float(_format_scientific(v, precision)) - v) <= tolerance for v in values):
            return precision
    return 16


def _format_scientific(value: float, precision: int) -> str:
    return f"{value:.{precision}e}"
