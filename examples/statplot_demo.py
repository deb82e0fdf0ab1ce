from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from statplot import LegendLocation, nominal_plot, plot
from statplot.datasets import boxplot_datasets, countmap_dataset, density_datasets, histogram_datasets, scatter_datasets
from statplot.styles import BLACK, WHITE


def _growth_plot():
    x = np.linspace(0.0, 10.0, 41)
    fig = plot(title="Growth", x_label="time", y_label="size")
    fig.line(x**2, x=x, label="quadratic", markers=True)
    fig.line(10.0 * x, x=x, label="linear", dashes=(6.0, 3.0))
    fig.function(lambda t: 50.0 + 20.0 * np.sin(t), label="seasonal")
    return fig


def _distribution_plot(rng: np.random.Generator):
    groups = [("control", rng.normal(10.0, 2.0, 200)), ("treated", rng.normal(13.0, 2.5, 200))]
    fig = plot(title="Distributions", x_label="value", legend=LegendLocation.UPPER_LEFT)
    fig.add(*histogram_datasets(groups, uses_color=True, normalize=True))
    fig.add(*density_datasets([(f"{name} kde", values) for name, values in groups], uses_color=True))
    return fig


def _box_plot(rng: np.random.Generator):
    groups = [(f"batch {i}", np.append(rng.normal(5.0 + i, 1.0, 60), 12.0 + i)) for i in range(3)]
    return plot(boxplot_datasets(groups), title="Batches", y_label="yield", legend=LegendLocation.LOWER_RIGHT)


def _category_plot(rng: np.random.Generator):
    fig = nominal_plot(title="Yield by site", y_label="yield")
    fig.boxes([(f"site {c}", rng.normal(5.0 + i, 1.0, 40)) for i, c in enumerate("ABC")], group="spring trial")
    fig.bars([("north field", 6.5), ("south field", 4.0)], group="historical mean")
    return fig


def _cluster_plot(rng: np.random.Generator):
    clusters = [(name, rng.normal(center, 0.6, size=(80, 2))) for name, center in (("a", 0.0), ("b", 3.0))]
    fig = plot(scatter_datasets(clusters, uses_color=True), title="Clusters")
    fig.add(countmap_dataset(np.concatenate([pts for _, pts in clusters]), 0.5, (WHITE, BLACK)))
    return fig


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    out_dir = Path(__file__).resolve().parent / "out"
    out_dir.mkdir(parents=True, exist_ok=True)

    rng = np.random.default_rng(2024)
    figures = {
        "growth": _growth_plot(),
        "distributions": _distribution_plot(rng),
        "batches": _box_plot(rng),
        "categories": _category_plot(rng),
        "clusters": _cluster_plot(rng),
    }
    for name, fig in figures.items():
        path = fig.save(out_dir / f"{name}.png", 640, 480)
        print(f"wrote {path}")


if __name__ == "__main__":
    main()
