from __future__ import annotations

import logging
import unittest

from statplot.config import LayoutConfig
from statplot.datasets import BarDataset, FunctionDataset, LabelDataset, LineDataset, ScatterDataset
from statplot.errors import PlotDataError
from statplot.geometry import EMPTY_RECTANGLE, ZERO_RESIDUAL, Rectangle
from statplot.layout import compute_destination, data_bounds, source_rectangle
from statplot.plot import Plot
from statplot.styles import TextStyle


class FixedWidthMetrics:
    """Every character is half the font size wide; a line is exactly the font size tall."""

    def __init__(self) -> None:
        self.calls = 0

    def measure_text(self, text: str, style: TextStyle) -> tuple[float, float]:
        self.calls += 1
        return (0.5 * style.size_px * len(text), style.size_px)

    def line_height(self, style: TextStyle) -> float:
        self.calls += 1
        return style.size_px


def _diagonal() -> LineDataset:
    return LineDataset([(0.0, 0.0), (10.0, 100.0)], name="diagonal")


class SourceRectangleTests(unittest.TestCase):
    def test_no_datasets_gives_empty_sentinel_bounds(self) -> None:
        self.assertEqual(data_bounds([]), EMPTY_RECTANGLE)
        self.assertTrue(EMPTY_RECTANGLE.union(Rectangle(1.0, 2.0, 3.0, 4.0)) == Rectangle(1.0, 2.0, 3.0, 4.0))

    def test_empty_plot_uses_unit_square(self) -> None:
        self.assertEqual(source_rectangle([]), Rectangle(0.0, 1.0, 0.0, 1.0))

    def test_padding_is_one_percent_per_axis(self) -> None:
        src = source_rectangle([_diagonal()])
        self.assertAlmostEqual(src.x_min, -0.1)
        self.assertAlmostEqual(src.x_max, 10.1)
        self.assertAlmostEqual(src.y_min, -1.0)
        self.assertAlmostEqual(src.y_max, 101.0)

    def test_overrides_win_per_bound(self) -> None:
        src = source_rectangle([_diagonal()], y_min=0.0, x_max=20.0)
        self.assertEqual(src.y_min, 0.0)
        self.assertAlmostEqual(src.y_max, 101.0)
        self.assertAlmostEqual(src.x_min, -0.1)
        self.assertEqual(src.x_max, 20.0)

    def test_inverted_overrides_are_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            source_rectangle([_diagonal()], x_min=5.0, x_max=1.0)
        with self.assertRaises(PlotDataError):
            source_rectangle([_diagonal()], y_min=500.0)

    def test_degenerate_axis_gets_a_default_span(self) -> None:
        src = source_rectangle([ScatterDataset([(5.0, 200.0)])])
        self.assertEqual((src.x_min, src.x_max), (4.0, 6.0))
        self.assertEqual((src.y_min, src.y_max), (190.0, 210.0))

    def test_single_override_on_empty_axis(self) -> None:
        src = source_rectangle([FunctionDataset(lambda x: x)], x_min=3.0)
        self.assertEqual((src.x_min, src.x_max), (3.0, 4.0))
        self.assertEqual((src.y_min, src.y_max), (0.0, 1.0))


class ComputeDestinationTests(unittest.TestCase):
    def test_end_to_end_hundred_by_ten_on_400_square(self) -> None:
        plot = Plot(datasets=[_diagonal()])
        layout = compute_destination(plot, 400, 400, FixedWidthMetrics())
        self.assertIn(layout.yticks.step, {10.0, 20.0, 25.0, 50.0})
        self.assertEqual(layout.residual, ZERO_RESIDUAL)
        self.assertEqual(layout.dst.height, 400 - layout.title_band - layout.x_band)
        # text padding on top; axis pad + tick + text pad + 12px labels at the bottom
        self.assertEqual(layout.title_band, 4.0)
        self.assertEqual(layout.x_band, 26.0)
        self.assertEqual(layout.dst.height, 370.0)

    def test_title_and_axis_labels_reserve_space(self) -> None:
        bare = compute_destination(Plot(datasets=[_diagonal()]), 400, 300, FixedWidthMetrics())
        labelled = compute_destination(
            Plot(datasets=[_diagonal()], title="Growth", x_label="time", y_label="size"),
            400,
            300,
            FixedWidthMetrics(),
        )
        self.assertEqual(labelled.title_band - bare.title_band, 16.0)
        self.assertEqual(labelled.x_band - bare.x_band, 4.0 + 16.0)
        self.assertEqual(labelled.y_band - bare.y_band, 16.0 + 4.0)
        self.assertEqual(labelled.dst.y_min, labelled.title_band)

    def test_y_band_fits_widest_tick_label(self) -> None:
        layout = compute_destination(Plot(datasets=[_diagonal()]), 400, 400, FixedWidthMetrics())
        widest = max(6.0 * len(label) for label in layout.yticks.labels())
        self.assertEqual(layout.y_band, 5.0 + widest + 4.0 + 5.0)
        self.assertEqual(layout.dst.x_min, layout.y_band)

    def test_layout_is_idempotent(self) -> None:
        plot = Plot(datasets=[_diagonal(), ScatterDataset([(2.0, 3.0), (9.0, 99.0)], radius=6.0)], title="t")
        first = compute_destination(plot, 640, 480, FixedWidthMetrics())
        second = compute_destination(plot, 640, 480, FixedWidthMetrics())
        self.assertEqual(first, second)

    def test_ticks_are_generated_once_and_lie_inside_src(self) -> None:
        layout = compute_destination(Plot(datasets=[_diagonal()]), 400, 400, FixedWidthMetrics())
        for tick in layout.yticks.ticks:
            self.assertTrue(layout.src.y_min <= tick.value <= layout.src.y_max)
        for tick in layout.xticks.ticks:
            self.assertTrue(layout.src.x_min <= tick.value <= layout.src.x_max)

    def test_residual_shrinks_destination(self) -> None:
        plot = Plot(datasets=[ScatterDataset([(0.0, 0.0), (1.0, 1.0)], radius=20.0)])
        layout = compute_destination(plot, 400, 400, FixedWidthMetrics())
        self.assertGreater(layout.residual.left, 0.0)
        self.assertGreater(layout.residual.bottom, 0.0)
        self.assertEqual(layout.dst.x_min, layout.y_band + layout.residual.left)
        self.assertEqual(layout.dst.y_max, 400 - layout.x_band - layout.residual.bottom)

    def test_empty_plot_still_lays_out(self) -> None:
        layout = compute_destination(Plot(), 200, 200, FixedWidthMetrics())
        self.assertEqual(layout.src, Rectangle(0.0, 1.0, 0.0, 1.0))
        self.assertGreater(layout.dst.width, 0.0)
        self.assertGreater(layout.dst.height, 0.0)

    def test_bars_with_no_finite_values_do_not_break_layout(self) -> None:
        plot = Plot(datasets=[BarDataset([float("nan")], [1.0]), ScatterDataset([(1.0, 2.0), (3.0, 4.0)])])
        layout = compute_destination(plot, 300, 300, FixedWidthMetrics())
        self.assertAlmostEqual(layout.src.x_min, 0.98)
        self.assertAlmostEqual(layout.src.x_max, 3.02)
        self.assertGreater(layout.dst.width, 0.0)

    def test_non_positive_device_size_is_rejected(self) -> None:
        metrics = FixedWidthMetrics()
        for w, h in [(0, 100), (100, 0), (-5, 100)]:
            with self.assertRaises(PlotDataError):
                compute_destination(Plot(datasets=[_diagonal()]), w, h, metrics)
        self.assertEqual(metrics.calls, 0)

    def test_canvas_too_small_for_labels_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            compute_destination(Plot(datasets=[_diagonal()], title="t", x_label="x"), 40, 40, FixedWidthMetrics())

    def test_config_controls_padding(self) -> None:
        plot = Plot(datasets=[_diagonal()], config=LayoutConfig(padding_ratio=0.0, minor_ticks=False))
        layout = compute_destination(plot, 400, 400, FixedWidthMetrics())
        self.assertEqual(layout.src, Rectangle(0.0, 10.0, 0.0, 100.0))
        self.assertEqual(layout.yticks.minor, ())

    def test_layout_logs_at_debug(self) -> None:
        with self.assertLogs("statplot.layout", level=logging.DEBUG) as captured:
            compute_destination(Plot(datasets=[_diagonal()]), 400, 400, FixedWidthMetrics())
        self.assertTrue(any("destination" in line for line in captured.output))

    def test_point_labels_reserve_room_for_their_text(self) -> None:
        labels = LabelDataset([(0.0, 0.0), (10.0, 10.0)], ["lower left", "upper right"])
        layout = compute_destination(Plot(datasets=[labels]), 400, 400, FixedWidthMetrics())
        self.assertGreater(layout.residual.left, 20.0)
        self.assertGreater(layout.residual.right, 20.0)
        self.assertEqual(layout.dst.x_min, layout.y_band + layout.residual.left)


class AspectTests(unittest.TestCase):
    def test_shallow_data_narrows_the_canvas(self) -> None:
        plot = Plot(datasets=[LineDataset([(0.0, 0.0), (4.0, 1.0)])], x_min=0.0, x_max=4.0, y_min=0.0, y_max=2.0)
        self.assertEqual(plot.suggest_aspect(), 0.5)
        self.assertEqual(plot.use_suggested_aspect(400, 300), (200, 300))

    def test_steep_data_shortens_the_canvas(self) -> None:
        plot = Plot(datasets=[LineDataset([(0.0, 0.0), (1.0, 4.0)])], x_min=0.0, x_max=4.0, y_min=0.0, y_max=4.0)
        self.assertEqual(plot.suggest_aspect(), 4.0)
        self.assertEqual(plot.use_suggested_aspect(400, 300), (400, 75))

    def test_datasets_without_slope_leave_the_size_alone(self) -> None:
        self.assertEqual(Plot().suggest_aspect(), 1.0)
        self.assertEqual(Plot().use_suggested_aspect(400, 300), (400, 300))
        flat = Plot(datasets=[LineDataset([(0.0, 1.0), (1.0, 1.0)]), BarDataset([0.0], [1.0])])
        self.assertEqual(flat.suggest_aspect(), 0.0)
        self.assertEqual(flat.use_suggested_aspect(400, 300), (400, 300))


if __name__ == "__main__":
    unittest.main()
