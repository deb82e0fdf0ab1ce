from __future__ import annotations

import unittest

import numpy as np

from statplot import NominalPlot, nominal_plot
from statplot.datasets import (
    DatasetGroup,
    NominalBarDataset,
    NominalBoxPlotDataset,
    ScatterDataset,
    nominal_bar_datasets,
    nominal_boxplot_datasets,
)
from statplot.errors import PlotDataError
from statplot.geometry import ZERO_RESIDUAL, Range, Rectangle
from statplot.layout import compute_nominal_destination, nominal_slots
from statplot.raster import RasterContext
from statplot.styles import TextStyle
from statplot.text import fixed_width_text_height, wrap_text


STYLE = TextStyle(size_px=12.0)


class FixedWidthMetrics:
    """Every character is half the font size wide; a line is exactly the font size tall."""

    def measure_text(self, text: str, style: TextStyle) -> tuple[float, float]:
        return (0.5 * style.size_px * len(text), style.size_px)

    def line_height(self, style: TextStyle) -> float:
        return style.size_px


class WrapTextTests(unittest.TestCase):
    def test_words_are_packed_greedily(self) -> None:
        lines = wrap_text(FixedWidthMetrics(), "alpha beta gamma", STYLE, 66.0)
        self.assertEqual(lines, ["alpha beta", "gamma"])

    def test_overlong_words_are_hyphenated(self) -> None:
        lines = wrap_text(FixedWidthMetrics(), "abcdefghij", STYLE, 30.0)
        self.assertEqual(lines, ["abcd-", "efgh-", "ij"])

    def test_narrow_width_still_makes_progress(self) -> None:
        lines = wrap_text(FixedWidthMetrics(), "abc", STYLE, 1.0)
        self.assertEqual(lines, ["a-", "b-", "c"])

    def test_height_counts_wrapped_lines(self) -> None:
        metrics = FixedWidthMetrics()
        self.assertEqual(fixed_width_text_height(metrics, "alpha beta gamma", STYLE, 66.0), 24.0)
        self.assertEqual(fixed_width_text_height(metrics, "alpha beta gamma", STYLE, 1000.0), 12.0)
        self.assertEqual(fixed_width_text_height(metrics, "   ", STYLE, 66.0), 0.0)


class NominalDatasetTests(unittest.TestCase):
    def test_bar_range_includes_zero(self) -> None:
        self.assertEqual(NominalBarDataset("up", 3.0).value_range(), Range(0.0, 3.0))
        self.assertEqual(NominalBarDataset("down", -2.0).value_range(), Range(-2.0, 0.0))
        with self.assertRaises(PlotDataError):
            NominalBarDataset("bad", float("nan"))

    def test_group_unions_ranges_and_counts_items(self) -> None:
        group = nominal_bar_datasets([("a", 3.0), ("b", -2.0), ("c", 1.0)], group_name="grp")
        self.assertIsInstance(group, DatasetGroup)
        self.assertEqual(group.n_items, 3)
        self.assertEqual(group.value_range(), Range(-2.0, 3.0))

    def test_group_slots_leave_group_and_between_padding(self) -> None:
        group = nominal_bar_datasets([("a", 1.0), ("b", 2.0), ("c", 3.0)])
        slots = group.slots(100.0, 100.0)
        member = 70.0 / 3.0
        self.assertEqual(len(slots), 3)
        self.assertAlmostEqual(slots[0][0], 110.0)
        self.assertAlmostEqual(slots[1][0], 110.0 + member + 5.0)
        for _, w in slots:
            self.assertAlmostEqual(w, member)
        self.assertEqual(nominal_bar_datasets([("solo", 1.0)]).slots(7.0, 50.0), [(7.0, 50.0)])

    def test_group_label_height_stacks_overline_names_and_group_name(self) -> None:
        group = nominal_bar_datasets([("a", 1.0), ("b", 2.0), ("c", 3.0)], group_name="grp")
        self.assertEqual(group.x_label_height(FixedWidthMetrics(), STYLE, 100.0), 0.5 + 4.0 + 12.0 + 4.0 + 12.0)

    def test_empty_group_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            DatasetGroup("none", [])

    def test_box_outliers_spill_per_slot(self) -> None:
        box = NominalBoxPlotDataset("b", [1.0, 2.0, 3.0, 4.0, 5.0, 100.0], radius=6.0)
        dst = Rectangle(0.0, 200.0, 0.0, 100.0)
        res = box.residual(Range(0.0, 100.0), dst, 50.0, 40.0)
        self.assertEqual(res.top, 6.0)
        self.assertEqual(res.left, 0.0)
        self.assertEqual(box.residual(Range(0.0, 50.0), dst, 50.0, 40.0), ZERO_RESIDUAL)

    def test_box_factory_builds_a_group(self) -> None:
        group = nominal_boxplot_datasets([("x", [1.0, 2.0, 3.0]), ("y", [2.0, 3.0, 4.0])], group_name="g")
        self.assertEqual(group.name, "g")
        self.assertEqual([ds.name for ds in group.datasets], ["x", "y"])
        self.assertEqual(group.value_range().min, 1.0)


class NominalLayoutTests(unittest.TestCase):
    def test_slots_are_proportional_to_items(self) -> None:
        wide = nominal_bar_datasets([("a", 1.0), ("b", 1.0), ("c", 1.0)])
        narrow = NominalBarDataset("d", 1.0)
        slots = nominal_slots([wide, narrow], 10.0, 405.0)
        self.assertEqual(slots, ((10.0, 300.0), (315.0, 100.0)))
        self.assertEqual(nominal_slots([], 10.0, 405.0), ())

    def test_x_band_fits_tallest_category_label(self) -> None:
        fig = NominalPlot(datasets=[nominal_bar_datasets([("a", 1.0), ("b", 2.0), ("c", 3.0)], group_name="grp")])
        layout = compute_nominal_destination(fig, 400, 300, FixedWidthMetrics())
        self.assertEqual(layout.x_band, 5.0 + 4.0 + 32.5)
        self.assertEqual(layout.dst.y_max, 300 - layout.x_band)
        self.assertEqual(layout.residual, ZERO_RESIDUAL)
        self.assertEqual(layout.src.y_range, layout.y_src)

    def test_long_names_wrap_into_a_taller_band(self) -> None:
        short = NominalPlot(datasets=[NominalBarDataset("a", 1.0) for _ in range(4)])
        long = NominalPlot(datasets=[NominalBarDataset("a rather long category name", 1.0) for _ in range(4)])
        short_layout = compute_nominal_destination(short, 300, 300, FixedWidthMetrics())
        long_layout = compute_nominal_destination(long, 300, 300, FixedWidthMetrics())
        self.assertGreater(long_layout.x_band, short_layout.x_band)
        self.assertLess(long_layout.dst.height, short_layout.dst.height)

    def test_y_axis_includes_zero_for_bars(self) -> None:
        fig = NominalPlot(datasets=[NominalBarDataset("a", 10.0), NominalBarDataset("b", 20.0)])
        layout = compute_nominal_destination(fig, 300, 300, FixedWidthMetrics())
        self.assertLess(layout.y_src.min, 0.0)
        self.assertGreater(layout.y_src.max, 20.0)
        self.assertEqual(len(layout.slots), 2)

    def test_outliers_shrink_only_top_and_bottom(self) -> None:
        fig = NominalPlot(datasets=[NominalBoxPlotDataset("b", [1.0, 2.0, 3.0, 4.0, 5.0, 100.0], radius=20.0)])
        layout = compute_nominal_destination(fig, 300, 300, FixedWidthMetrics())
        self.assertGreater(layout.residual.top, 0.0)
        self.assertEqual(layout.residual.left, 0.0)
        self.assertEqual(layout.dst.y_min, layout.title_band + layout.residual.top)
        self.assertEqual(layout.dst.x_min, layout.y_band)

    def test_canvas_too_narrow_for_categories_is_rejected(self) -> None:
        fig = NominalPlot(datasets=[NominalBarDataset(str(i), 1.0) for i in range(20)])
        with self.assertRaises(PlotDataError):
            compute_nominal_destination(fig, 100, 300, FixedWidthMetrics())
        with self.assertRaises(PlotDataError):
            compute_nominal_destination(fig, 0, 300, FixedWidthMetrics())

    def test_empty_nominal_plot_still_lays_out(self) -> None:
        layout = compute_nominal_destination(NominalPlot(), 200, 200, FixedWidthMetrics())
        self.assertEqual(layout.y_src, Range(0.0, 1.0))
        self.assertEqual(layout.slots, ())


class NominalRenderTests(unittest.TestCase):
    def _sample(self) -> NominalPlot:
        fig = nominal_plot(title="Sites", x_label="site", y_label="yield")
        fig.boxes([("north", [1.0, 2.0, 3.0, 9.0]), ("south", [2.0, 3.0, 4.0])], group="trial")
        fig.bars([("mean", 3.0)])
        return fig

    def test_render_draws_category_labels_below_plot(self) -> None:
        fig = self._sample()
        img = fig.render(240, 180)
        self.assertEqual(img.shape, (180, 240, 4))
        layout = fig.layout(240, 180)
        below = img[int(layout.dst.y_max) + 6 :, int(layout.dst.x_min) :, 0]
        self.assertTrue(np.any(below < 128))

    def test_layout_matches_draw(self) -> None:
        fig = self._sample()
        self.assertEqual(fig.draw(RasterContext(300, 200)), fig.layout(300, 200))

    def test_only_nominal_datasets_are_accepted(self) -> None:
        with self.assertRaises(PlotDataError):
            NominalPlot().add(ScatterDataset([(0.0, 0.0)]))
        with self.assertRaises(ValueError):
            nominal_plot(y_min=2.0, y_max=1.0)


if __name__ == "__main__":
    unittest.main()
