from .bars import BarDataset, HistogramDataset, histogram_datasets
from .base import Dataset
from .boxplot import BoxPlotDataset, boxplot_datasets
from .composite import CompositeDataset, line_points_dataset, line_points_datasets
from .errbar import LineErrbarDataset, ScatterErrbarDataset, line_errbar_datasets, scatter_errbar_datasets
from .heatmap import HeatmapDataset, countmap_dataset, gradient_color, valuemap_dataset
from .labels import LabelDataset, label_dataset
from .lines import (
    CdfDataset,
    DensityDataset,
    FunctionDataset,
    LineDataset,
    cdf_datasets,
    density_datasets,
    line_datasets,
)
from .nominal import (
    DatasetGroup,
    NominalBarDataset,
    NominalBoxPlotDataset,
    NominalDataset,
    nominal_bar_datasets,
    nominal_boxplot_datasets,
)
from .points import BubbleDataset, ScatterDataset, bubble_datasets, scatter_datasets

__all__ = [
    "BarDataset",
    "BoxPlotDataset",
    "BubbleDataset",
    "CdfDataset",
    "CompositeDataset",
    "Dataset",
    "DatasetGroup",
    "DensityDataset",
    "FunctionDataset",
    "HeatmapDataset",
    "HistogramDataset",
    "LabelDataset",
    "LineDataset",
    "LineErrbarDataset",
    "NominalBarDataset",
    "NominalBoxPlotDataset",
    "NominalDataset",
    "ScatterDataset",
    "ScatterErrbarDataset",
    "boxplot_datasets",
    "bubble_datasets",
    "cdf_datasets",
    "countmap_dataset",
    "density_datasets",
    "gradient_color",
    "histogram_datasets",
    "label_dataset",
    "line_datasets",
    "line_errbar_datasets",
    "line_points_dataset",
    "line_points_datasets",
    "nominal_bar_datasets",
    "nominal_boxplot_datasets",
    "scatter_datasets",
    "scatter_errbar_datasets",
    "valuemap_dataset",
]
