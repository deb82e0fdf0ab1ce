from statplot.api import nominal_plot, plot
from statplot.config import DEFAULT_CONFIG, LayoutConfig
from statplot.errors import PlotDataError, TickGenerationError
from statplot.geometry import EMPTY_RECTANGLE, Point, Range, Rectangle, Residual
from statplot.layout import Layout, NominalLayout, compute_destination, compute_nominal_destination
from statplot.legend import IconSide, LegendAt, LegendLocation, draw_legend, place_legend, sort_entries
from statplot.plot import NominalPlot, Plot
from statplot.ticks import Tick, TickSet, recommended_ticks, tick_locations
from statplot.transform import Transform, transform

__all__ = [
    "DEFAULT_CONFIG",
    "EMPTY_RECTANGLE",
    "IconSide",
    "Layout",
    "LayoutConfig",
    "LegendAt",
    "LegendLocation",
    "NominalLayout",
    "NominalPlot",
    "Plot",
    "PlotDataError",
    "Point",
    "Range",
    "Rectangle",
    "Residual",
    "Tick",
    "TickGenerationError",
    "TickSet",
    "Transform",
    "compute_destination",
    "compute_nominal_destination",
    "draw_legend",
    "nominal_plot",
    "place_legend",
    "plot",
    "recommended_ticks",
    "sort_entries",
    "tick_locations",
    "transform",
]
