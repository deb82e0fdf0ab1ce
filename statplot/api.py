from __future__ import annotations

from typing import Sequence

from statplot.config import DEFAULT_CONFIG, LayoutConfig
from statplot.datasets import Dataset, NominalDataset
from statplot.legend import LegendLocation, LegendPolicy
from statplot.plot import NominalPlot, Plot


def plot(
    datasets: Sequence[Dataset] = (),
    *,
    title: str | None = None,
    x_label: str | None = None,
    y_label: str | None = None,
    x_min: float | None = None,
    x_max: float | None = None,
    y_min: float | None = None,
    y_max: float | None = None,
    legend: LegendPolicy | None = LegendLocation.UPPER_RIGHT,
    sort_legend: bool = True,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Plot:
    if x_min is not None and x_max is not None and x_min > x_max:
        raise ValueError("x_min must be <= x_max")
    if y_min is not None and y_max is not None and y_min > y_max:
        raise ValueError("y_min must be <= y_max")
    return Plot(
        datasets=list(datasets),
        title=title,
        x_label=x_label,
        y_label=y_label,
        x_min=x_min,
        x_max=x_max,
        y_min=y_min,
        y_max=y_max,
        legend=legend,
        sort_legend=sort_legend,
        config=config,
    )


def nominal_plot(
    datasets: Sequence[NominalDataset] = (),
    *,
    title: str | None = None,
    x_label: str | None = None,
    y_label: str | None = None,
    y_min: float | None = None,
    y_max: float | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> NominalPlot:
    if y_min is not None and y_max is not None and y_min > y_max:
        raise ValueError("y_min must be <= y_max")
    return NominalPlot(
        datasets=list(datasets),
        title=title,
        x_label=x_label,
        y_label=y_label,
        y_min=y_min,
        y_max=y_max,
        config=config,
    )
