from __future__ import annotations

import math
import unittest

import numpy as np

from luvatrix_charts import DEFAULT_PALETTE, BandScale, ColorScale, LinearScale, ScaleConfig, build_scale, generate_ticks, value
from luvatrix_charts.scales import EmptyScale, SymbolScale, format_tick, format_ticks_for_axis, nice_domain, unique


class BandScaleTests(unittest.TestCase):
    def test_band_positions_are_ordered_and_inside_range(self) -> None:
        scale = BandScale(categories=("A", "B", "C"), size=300.0)
        self.assertAlmostEqual(scale.step, 100.0)
        self.assertAlmostEqual(scale.bandwidth(), 80.0)
        self.assertLess(scale("A"), scale("B"))
        self.assertLess(scale("B"), scale("C"))
        for cat in ("A", "B", "C"):
            self.assertGreaterEqual(scale(cat), 0.0)
            self.assertLessEqual(scale(cat) + scale.bandwidth(), 300.0)

    def test_unknown_category_maps_to_nan(self) -> None:
        scale = BandScale(categories=("A",), size=100.0)
        self.assertTrue(math.isnan(scale("Z")))

    def test_invert_returns_category_under_pixel(self) -> None:
        scale = BandScale(categories=("A", "B", "C"), size=300.0)
        self.assertEqual(scale.invert(150.0), "B")
        self.assertIsNone(scale.invert(301.0))

    def test_nominal_values_build_band_scale_in_first_seen_order(self) -> None:
        scale = build_scale([value("m", "Feb"), value("m", "Jan"), value("m", "Feb")], 200.0)
        self.assertIsInstance(scale, BandScale)
        self.assertEqual(scale.domain(), ["Feb", "Jan"])
        self.assertEqual(scale.ticks(), ["Feb", "Jan"])


class LinearScaleTests(unittest.TestCase):
    def test_round_trip(self) -> None:
        for vertical in (False, True):
            scale = LinearScale(vmin=-3.0, vmax=17.0, size=250.0, vertical=vertical)
            for v in np.linspace(-3.0, 17.0, 41):
                self.assertLess(abs(scale.invert(scale(float(v))) - float(v)), 1e-9)

    def test_vertical_scale_grows_upwards(self) -> None:
        scale = LinearScale(vmin=0.0, vmax=10.0, size=100.0, vertical=True)
        self.assertEqual(scale(0.0), 100.0)
        self.assertEqual(scale(10.0), 0.0)

    def test_quantitative_domain_includes_zero(self) -> None:
        scale = build_scale([value("v", 10), value("v", 20)], 100.0)
        self.assertIsInstance(scale, LinearScale)
        self.assertEqual(scale.domain(), (0.0, 20.0))

    def test_degenerate_domain_widens_by_one(self) -> None:
        scale = build_scale([value("v", 5)], 100.0, config=ScaleConfig(domain=(5, 5)))
        self.assertIsInstance(scale, LinearScale)
        self.assertEqual(scale.domain(), (4.0, 6.0))

    def test_empty_axis_maps_everything_to_zero(self) -> None:
        scale = build_scale([], 100.0)
        self.assertIsInstance(scale, EmptyScale)
        self.assertEqual(scale("anything"), 0.0)
        self.assertEqual(scale.ticks(), [])

    def test_explicit_domain_overrides_data(self) -> None:
        scale = build_scale([value("v", 3)], 100.0, config=ScaleConfig(domain=(0, 50)))
        self.assertEqual(scale.domain(), (0.0, 50.0))

    def test_nice_domain_rounds_outwards(self) -> None:
        scale = build_scale([value("v", 97)], 100.0, config=ScaleConfig(nice=True))
        self.assertEqual(scale.domain(), (0.0, 100.0))
        self.assertEqual(nice_domain(3.0, 97.0), (0.0, 100.0))

    def test_unknown_scale_type_is_logged_and_inferred(self) -> None:
        with self.assertLogs("luvatrix_charts.scales", level="WARNING"):
            scale = build_scale([value("v", 1)], 100.0, config=ScaleConfig(type="log"))
        self.assertIsInstance(scale, LinearScale)


class TickTests(unittest.TestCase):
    def test_generated_ticks_are_nice(self) -> None:
        ticks = generate_ticks(0, 97, 5)
        self.assertGreaterEqual(ticks.size, 2)
        step = float(ticks[1] - ticks[0])
        mantissa = step / 10 ** math.floor(math.log10(step))
        self.assertIn(round(mantissa, 9), (1.0, 2.0, 5.0))
        for tick in ticks.tolist():
            self.assertAlmostEqual(tick / step, round(tick / step))
            self.assertGreaterEqual(tick, 0.0)
            self.assertLessEqual(tick, 97.0)

    def test_ticks_cover_round_interval(self) -> None:
        self.assertEqual(generate_ticks(0, 20, 5).tolist(), [0.0, 5.0, 10.0, 15.0, 20.0])

    def test_tick_count_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            generate_ticks(0, 1, 0)

    def test_tick_formatting_uses_consistent_decimals_from_step(self) -> None:
        labels = format_ticks_for_axis(np.asarray([1.5, 2.0, 2.5, 3.0]))
        self.assertEqual(labels, ["1.5", "2", "2.5", "3"])

    def test_tick_formatting_snaps_near_zero(self) -> None:
        labels = format_ticks_for_axis(np.asarray([-1.0, -4.4409e-16, 1.0]))
        self.assertEqual(labels[1], "0")

    def test_large_values_use_exponent_format(self) -> None:
        self.assertEqual(format_tick(1.5e9), "1.5000e+09")
        self.assertEqual(format_tick(20.0), "20")


class ColorScaleTests(unittest.TestCase):
    def test_palette_assigned_in_discovery_order(self) -> None:
        scale = ColorScale.discover(["b", "a", "b"])
        self.assertEqual(scale.domain, ("b", "a"))
        self.assertEqual(scale("b"), DEFAULT_PALETTE[0])
        self.assertEqual(scale("a"), DEFAULT_PALETTE[1])
        self.assertIsNone(scale("zzz"))

    def test_palette_wraps(self) -> None:
        scale = ColorScale.discover([f"c{i}" for i in range(11)])
        self.assertEqual(scale("c10"), DEFAULT_PALETTE[0])

    def test_preferred_domain_and_mapping(self) -> None:
        scale = ColorScale.discover(["x", "y"], preferred=["y"], mapping=[("x", "#123456")])
        self.assertEqual(scale.domain, ("y", "x"))
        self.assertEqual(scale("y"), DEFAULT_PALETTE[0])
        self.assertEqual(scale("x"), "#123456")

    def test_symbol_scale_cycles_symbols(self) -> None:
        scale = SymbolScale(domain=("a", "b"))
        self.assertEqual(scale("a"), "circle")
        self.assertEqual(scale("b"), "square")
        self.assertIsNone(scale("c"))

    def test_unique_tolerates_unhashable_items(self) -> None:
        self.assertEqual(unique([[1], [1], 2]), ([1], 2))


if __name__ == "__main__":
    unittest.main()
