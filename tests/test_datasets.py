from __future__ import annotations

import unittest

import numpy as np

from statplot.datasets import (
    BarDataset,
    BoxPlotDataset,
    BubbleDataset,
    CdfDataset,
    CompositeDataset,
    DensityDataset,
    FunctionDataset,
    HistogramDataset,
    LabelDataset,
    LineDataset,
    LineErrbarDataset,
    ScatterDataset,
    ScatterErrbarDataset,
    countmap_dataset,
    gradient_color,
    label_dataset,
    line_errbar_datasets,
    line_points_dataset,
    scatter_datasets,
    valuemap_dataset,
)
from statplot.datasets.lines import silverman_bandwidth
from statplot.errors import PlotDataError
from statplot.geometry import EMPTY_RECTANGLE, ZERO_RESIDUAL, Rectangle, clip_rectangle, overflow
from statplot.styles import BLACK, COLOR_CYCLE, WHITE, LineStyle, TextStyle


SRC = Rectangle(x_min=0.0, x_max=1.0, y_min=0.0, y_max=1.0)
DST = Rectangle(x_min=0.0, x_max=100.0, y_min=0.0, y_max=100.0)


class FixedWidthMetrics:
    """Every character is half the font size wide; a line is exactly the font size tall."""

    def measure_text(self, text: str, style: TextStyle) -> tuple[float, float]:
        return (0.5 * style.size_px * len(text), style.size_px)

    def line_height(self, style: TextStyle) -> float:
        return style.size_px


class ResidualTests(unittest.TestCase):
    def test_scatter_residual_grows_with_radius(self) -> None:
        previous = ZERO_RESIDUAL
        for radius in (0.0, 1.0, 2.5, 4.0, 10.0):
            res = ScatterDataset([(0.0, 0.0), (1.0, 1.0)], radius=radius).residual(SRC, DST)
            self.assertGreaterEqual(res.left, previous.left)
            self.assertGreaterEqual(res.right, previous.right)
            self.assertGreaterEqual(res.top, previous.top)
            self.assertGreaterEqual(res.bottom, previous.bottom)
            previous = res
        self.assertEqual(previous.left, 10.0)
        self.assertEqual(previous.top, 10.0)

    def test_line_residual_grows_with_width(self) -> None:
        narrow = LineDataset([(0.0, 0.5), (1.0, 0.5)], style=LineStyle(width=1.0)).residual(SRC, DST)
        wide = LineDataset([(0.0, 0.5), (1.0, 0.5)], style=LineStyle(width=6.0)).residual(SRC, DST)
        self.assertEqual(narrow.left, 0.5)
        self.assertEqual(wide.left, 3.0)
        self.assertEqual(wide.top, 0.0)

    def test_points_outside_src_do_not_count(self) -> None:
        res = ScatterDataset([(5.0, 5.0)], radius=50.0).residual(SRC, DST)
        self.assertEqual(res, ZERO_RESIDUAL)

    def test_interior_points_have_no_residual(self) -> None:
        res = ScatterDataset([(0.5, 0.5)], radius=3.0).residual(SRC, DST)
        self.assertEqual(res, ZERO_RESIDUAL)

    def test_bars_never_overflow(self) -> None:
        bars = BarDataset([0.0, 1.0], [1.0, 0.5])
        self.assertEqual(bars.residual(SRC, DST), ZERO_RESIDUAL)

    def test_bubble_residual_uses_per_point_radius(self) -> None:
        bubbles = BubbleDataset([(0.0, 0.5, 1.0), (1.0, 0.5, 3.0)], min_radius=2.0, max_radius=8.0)
        res = bubbles.residual(SRC, DST)
        self.assertEqual(res.left, 2.0)
        self.assertEqual(res.right, 8.0)


class BoundsTests(unittest.TestCase):
    def test_scatter_bounds_ignore_non_finite_points(self) -> None:
        ds = ScatterDataset([(0.0, 1.0), (float("nan"), 5.0), (2.0, 3.0)])
        self.assertEqual(ds.bounds(), Rectangle(0.0, 2.0, 1.0, 3.0))

    def test_function_has_no_bounds(self) -> None:
        self.assertEqual(FunctionDataset(np.sin).bounds(), EMPTY_RECTANGLE)

    def test_bars_include_zero_and_bar_width(self) -> None:
        bars = BarDataset([1.0, 2.0], [3.0, 5.0], width=0.5)
        self.assertEqual(bars.bounds(), Rectangle(0.75, 2.25, 0.0, 5.0))

    def test_cdf_reaches_one(self) -> None:
        cdf = CdfDataset([3.0, 1.0, 2.0, 4.0])
        self.assertEqual(cdf.bounds(), Rectangle(1.0, 4.0, 0.25, 1.0))

    def test_histogram_counts_every_value(self) -> None:
        hist = HistogramDataset([0.0, 0.5, 1.0, 1.5, 2.0, 2.0], bin_width=1.0)
        self.assertEqual(float(hist.counts.sum()), 6.0)
        self.assertEqual(hist.edges[0], 0.0)
        self.assertEqual(hist.bounds().y_min, 0.0)

    def test_errbar_bounds_cover_intervals(self) -> None:
        ds = ScatterErrbarDataset([("g", [(1.0, 1.0), (3.0, 3.0)])])
        b = ds.bounds()
        self.assertLess(b.x_min, 2.0)
        self.assertGreater(b.x_max, 2.0)
        self.assertAlmostEqual((b.x_min + b.x_max) / 2.0, 2.0)

    def test_bars_without_finite_values_have_empty_bounds(self) -> None:
        bars = BarDataset([float("nan"), 1.0], [1.0, float("inf")])
        self.assertEqual(bars.bounds(), EMPTY_RECTANGLE)
        self.assertIsNone(bars.representative_value(SRC))

    def test_errbar_groups_drop_non_finite_points(self) -> None:
        ds = ScatterErrbarDataset([("g", [(1.0, 1.0), (float("nan"), 7.0), (3.0, 3.0)])])
        b = ds.bounds()
        self.assertTrue(all(np.isfinite([b.x_min, b.x_max, b.y_min, b.y_max])))
        self.assertAlmostEqual(float(ds.mean_y[0]), 2.0)
        with self.assertRaises(PlotDataError):
            ScatterErrbarDataset([("empty", [(float("nan"), 1.0)])])

    def test_box_plot_statistics(self) -> None:
        box = BoxPlotDataset([1.0, 2.0, 3.0, 4.0, 5.0, 100.0], x=2.0, width=0.5)
        self.assertEqual(box.stats.outliers.tolist(), [100.0])
        self.assertEqual(box.stats.whisker_high, 5.0)
        self.assertEqual(box.stats.median, 3.5)
        self.assertEqual(box.bounds().y_max, 100.0)
        self.assertEqual((box.bounds().x_min, box.bounds().x_max), (1.75, 2.25))

    def test_inputs_are_copied_read_only(self) -> None:
        points = np.asarray([[0.0, 1.0], [2.0, 3.0]])
        ds = ScatterDataset(points)
        points[0, 0] = 99.0
        self.assertEqual(ds.xs[0], 0.0)
        with self.assertRaises(ValueError):
            ds.xs[0] = 1.0

    def test_empty_input_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            ScatterDataset([])
        with self.assertRaises(PlotDataError):
            HistogramDataset([float("nan")])


class CompositeTests(unittest.TestCase):
    def test_composite_unions_bounds_and_maxes_residuals(self) -> None:
        line = LineDataset([(0.0, 0.0), (1.0, 0.5)], style=LineStyle(width=2.0))
        points = ScatterDataset([(0.5, 1.0)], radius=4.0)
        both = CompositeDataset([line, points], name="both")
        self.assertEqual(both.bounds(), Rectangle(0.0, 1.0, 0.0, 1.0))
        res = both.residual(SRC, DST)
        self.assertEqual(res.left, 1.0)
        self.assertEqual(res.top, 4.0)
        self.assertEqual(both.name, "both")

    def test_line_points_dataset_shares_points(self) -> None:
        ds = line_points_dataset([(0.0, 0.0), (1.0, 1.0)], radius=5.0, name="lp")
        self.assertEqual(len(ds.children), 2)
        self.assertEqual(ds.residual(SRC, DST).right, 5.0)
        self.assertEqual(ds.legend_dimensions(None), (24.0, 11.0))

    def test_composite_needs_children(self) -> None:
        with self.assertRaises(PlotDataError):
            CompositeDataset([])


class FactoryTests(unittest.TestCase):
    def test_scatter_factory_cycles_glyphs_and_colors(self) -> None:
        sets = scatter_datasets([("a", [(0.0, 0.0)]), ("b", [(1.0, 1.0)])], uses_color=True)
        self.assertEqual([ds.name for ds in sets], ["a", "b"])
        self.assertNotEqual(sets[0].glyph, sets[1].glyph)
        self.assertEqual(sets[1].color, COLOR_CYCLE[1])

    def test_scatter_factory_is_black_without_color(self) -> None:
        sets = scatter_datasets([("a", [(0.0, 0.0)]), ("b", [(1.0, 1.0)])])
        self.assertTrue(all(ds.color == BLACK for ds in sets))


class HeatmapTests(unittest.TestCase):
    def test_countmap_bins_points(self) -> None:
        ds = countmap_dataset([(0.1, 0.1), (0.2, 0.3), (1.5, 0.2), (1.6, 1.7)], bin_size=1.0)
        self.assertEqual(ds.values.tolist(), [[2.0, 1.0], [0.0, 1.0]])
        self.assertEqual(ds.bounds(), Rectangle(0.0, 2.0, 0.0, 2.0))

    def test_valuemap_averages_and_leaves_empty_bins_blank(self) -> None:
        ds = valuemap_dataset([(0.1, 0.1, 2.0), (0.4, 0.6, 4.0), (1.5, 1.5, 9.0)], bin_size=1.0)
        self.assertEqual(ds.values[0, 0], 3.0)
        self.assertEqual(ds.values[1, 1], 9.0)
        self.assertTrue(np.isnan(ds.values[0, 1]))

    def test_gradient_interpolates_stops(self) -> None:
        self.assertEqual(gradient_color((WHITE, BLACK), 0.0), WHITE)
        self.assertEqual(gradient_color((WHITE, BLACK), 1.0), BLACK)
        self.assertEqual(gradient_color((WHITE, BLACK), 0.5), (128, 128, 128, 255))
        self.assertEqual(gradient_color((WHITE, BLACK), 7.0), BLACK)


class LabelTests(unittest.TestCase):
    def test_label_text_counts_toward_residual(self) -> None:
        labels = LabelDataset([(1.0, 1.0)], ["hello"])
        res = labels.residual(SRC, DST, FixedWidthMetrics())
        self.assertEqual(res.right, 12.5)
        self.assertEqual(res.top, 5.0)
        self.assertEqual(res.left, 0.0)
        self.assertEqual(labels.residual(SRC, DST), ZERO_RESIDUAL)

    def test_offsets_move_labels_in_device_pixels(self) -> None:
        labels = LabelDataset([(1.0, 1.0)], ["hello"], x_offset=-20.0, y_offset=10.0)
        self.assertEqual(labels.residual(SRC, DST, FixedWidthMetrics()), ZERO_RESIDUAL)

    def test_labels_outside_src_are_ignored(self) -> None:
        labels = label_dataset([("far", (5.0, 5.0)), ("near", (0.5, 0.5))])
        self.assertEqual(labels.labels, ("far", "near"))
        self.assertEqual(labels.bounds(), Rectangle(0.5, 5.0, 0.5, 5.0))
        self.assertEqual(labels.residual(SRC, DST, FixedWidthMetrics()), ZERO_RESIDUAL)

    def test_label_count_must_match_points(self) -> None:
        with self.assertRaises(PlotDataError):
            LabelDataset([(0.0, 0.0), (1.0, 1.0)], ["only one"])


class LineErrbarTests(unittest.TestCase):
    def test_mean_and_interval_over_common_domain(self) -> None:
        ds = LineErrbarDataset([[(0.0, 1.0), (1.0, 2.0), (2.0, 3.0)], [(0.0, 3.0), (1.0, 4.0), (2.0, 5.0), (3.0, 9.0)]])
        self.assertEqual(ds.xs.tolist(), [0.0, 1.0, 2.0])
        self.assertEqual(ds.means.tolist(), [2.0, 3.0, 4.0])
        for interval in ds.intervals.tolist():
            self.assertAlmostEqual(interval, 1.96 / np.sqrt(2.0))
        b = ds.bounds()
        self.assertEqual((b.x_min, b.x_max), (0.0, 2.0))
        self.assertAlmostEqual(b.y_min, 2.0 - 1.96 / np.sqrt(2.0))
        self.assertAlmostEqual(b.y_max, 4.0 + 1.96 / np.sqrt(2.0))

    def test_lines_are_interpolated_at_every_x(self) -> None:
        ds = LineErrbarDataset([[(0.0, 0.0), (2.0, 2.0)], [(1.0, 10.0), (3.0, 10.0)]])
        self.assertEqual(ds.xs.tolist(), [1.0, 2.0])
        self.assertEqual(ds.means.tolist(), [5.5, 6.0])

    def test_factory_staggers_bars(self) -> None:
        line = [(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)]
        first, second = line_errbar_datasets([("a", [line, line]), ("b", [line, line])], uses_color=True)
        self.assertEqual(first.bar_indices().tolist(), [0, 2])
        self.assertEqual(second.bar_indices().tolist(), [1])
        self.assertEqual(second.style.color, COLOR_CYCLE[1])
        self.assertEqual(second.name, "b")

    def test_bar_caps_count_toward_residual(self) -> None:
        ds = LineErrbarDataset([[(0.0, 0.5), (1.0, 0.5)]], cap_px=4.0)
        res = ds.residual(SRC, DST)
        self.assertEqual(res.left, 4.0)
        self.assertEqual(res.right, 4.0)

    def test_invalid_input_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            LineErrbarDataset([])
        with self.assertRaises(PlotDataError):
            LineErrbarDataset([[(0.0, 0.0), (1.0, 1.0)], [(2.0, 0.0), (3.0, 1.0)]])
        with self.assertRaises(PlotDataError):
            LineErrbarDataset([[(0.0, 0.0), (1.0, 1.0)]], number=2, count=2)
        with self.assertRaises(PlotDataError):
            LineErrbarDataset([[(float("nan"), 0.0)]])


class DensityTests(unittest.TestCase):
    def test_single_value_is_a_standard_normal_curve(self) -> None:
        ds = DensityDataset([0.0], bandwidth=1.0)
        self.assertEqual(ds.bandwidth, 1.0)
        self.assertEqual((ds.bounds().x_min, ds.bounds().x_max), (-3.0, 3.0))
        peak = float(np.max(ds.ys))
        self.assertLess(peak, 1.0 / np.sqrt(2.0 * np.pi))
        self.assertGreater(peak, 0.39)

    def test_density_integrates_to_about_one(self) -> None:
        ds = DensityDataset([0.0, 1.0, 2.0, 3.0, 4.0], samples=400)
        area = float(np.sum(np.diff(ds.xs) * (ds.ys[1:] + ds.ys[:-1]) / 2.0))
        self.assertAlmostEqual(area, 1.0, places=2)

    def test_silverman_bandwidth(self) -> None:
        values = np.asarray([0.0, 1.0, 2.0, 3.0, 4.0])
        self.assertAlmostEqual(silverman_bandwidth(values), 1.06 * np.sqrt(2.0) * 5.0 ** -0.2)
        self.assertEqual(DensityDataset(values).bandwidth, silverman_bandwidth(values))
        self.assertEqual(DensityDataset([2.0, 2.0, 2.0]).bandwidth, 1.0)

    def test_invalid_input_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            DensityDataset([float("nan")])
        with self.assertRaises(PlotDataError):
            DensityDataset([1.0], samples=1)
        with self.assertRaises(PlotDataError):
            DensityDataset([1.0], bandwidth=0.0)


class SlopeTests(unittest.TestCase):
    def test_slope_is_measured_in_src_spans(self) -> None:
        line = LineDataset([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)])
        self.assertEqual(line.avg_slope(Rectangle(0.0, 2.0, 0.0, 2.0)), 1.0)
        self.assertEqual(line.avg_slope(Rectangle(0.0, 2.0, 0.0, 4.0)), 0.5)

    def test_falling_data_has_a_positive_slope(self) -> None:
        points = ScatterDataset([(2.0, 0.0), (0.0, 2.0), (1.0, 1.0)])
        self.assertEqual(points.avg_slope(Rectangle(0.0, 2.0, 0.0, 2.0)), 1.0)

    def test_no_slope_without_two_distinct_x(self) -> None:
        self.assertIsNone(LineDataset([(1.0, 0.0), (1.0, 5.0)]).avg_slope(SRC))
        self.assertIsNone(ScatterDataset([(0.5, 0.5)]).avg_slope(SRC))
        self.assertIsNone(BarDataset([0.0, 1.0], [1.0, 2.0]).avg_slope(SRC))

    def test_composite_averages_children(self) -> None:
        both = CompositeDataset([LineDataset([(0.0, 0.0), (1.0, 1.0)]), LineDataset([(0.0, 0.0), (1.0, 0.5)])])
        self.assertEqual(both.avg_slope(SRC), 0.75)


class GeometryHelperTests(unittest.TestCase):
    def test_overflow_takes_a_separate_half_height(self) -> None:
        res = overflow(np.asarray([50.0]), np.asarray([2.0]), 10.0, DST, extent_y=4.0)
        self.assertEqual(res.top, 2.0)
        self.assertEqual(res.left, 0.0)
        self.assertEqual(res.bottom, 0.0)

    def test_clip_rectangle(self) -> None:
        self.assertEqual(clip_rectangle(Rectangle(-10.0, 50.0, 20.0, 200.0), DST), Rectangle(0.0, 50.0, 20.0, 100.0))
        self.assertIsNone(clip_rectangle(Rectangle(150.0, 200.0, 0.0, 10.0), DST))


if __name__ == "__main__":
    unittest.main()
