from __future__ import annotations

import math
import unittest

from luvatrix_charts import area_commands, interpolate, path_data
from luvatrix_charts.interpolation import (
    ArcTo,
    ClosePath,
    CubicTo,
    HorizontalTo,
    LineTo,
    MoveTo,
    VerticalTo,
    flatten,
    normalize_method,
)


class InterpolationTests(unittest.TestCase):
    def test_catmull_rom_with_two_points_matches_linear(self) -> None:
        pts = [(0.0, 0.0), (10.0, 5.0)]
        self.assertEqual(interpolate(pts, "catmullRom"), interpolate(pts, "linear"))

    def test_catmull_rom_emits_one_cubic_per_segment(self) -> None:
        cmds = interpolate([(0, 0), (10, 10), (20, 0), (30, 10)], "catmullRom")
        self.assertIsInstance(cmds[0], MoveTo)
        self.assertEqual(sum(isinstance(c, CubicTo) for c in cmds), 3)
        self.assertEqual((cmds[-1].x, cmds[-1].y), (30.0, 10.0))

    def test_step_variants(self) -> None:
        pts = [(0.0, 0.0), (10.0, 10.0)]
        self.assertEqual(
            interpolate(pts, "step"),
            [MoveTo(0.0, 0.0), HorizontalTo(5.0), VerticalTo(10.0), HorizontalTo(10.0)],
        )
        self.assertEqual(interpolate(pts, "stepStart"), [MoveTo(0.0, 0.0), VerticalTo(10.0), HorizontalTo(10.0)])
        self.assertEqual(interpolate(pts, "stepEnd"), [MoveTo(0.0, 0.0), HorizontalTo(10.0), VerticalTo(10.0)])

    def test_unknown_method_falls_back_to_linear(self) -> None:
        pts = [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)]
        with self.assertLogs("luvatrix_charts.interpolation", level="WARNING"):
            cmds = interpolate(pts, "bezierish")
        self.assertEqual(cmds, [MoveTo(0.0, 0.0), LineTo(1.0, 1.0), LineTo(2.0, 0.0)])
        self.assertEqual(normalize_method("catmull_rom"), "catmullRom")

    def test_empty_and_singleton_inputs(self) -> None:
        self.assertEqual(interpolate([], "monotone"), [])
        self.assertEqual(interpolate([(3.0, 4.0)], "catmullRom"), [MoveTo(3.0, 4.0)])

    def test_monotone_does_not_overshoot(self) -> None:
        pts = [(0.0, 0.0), (1.0, 1.0), (2.0, 1.1), (3.0, 5.0), (4.0, 5.0)]
        (sampled, closed), = flatten(interpolate(pts, "monotone"), segments=32)
        self.assertFalse(closed)
        ys = [y for _, y in sampled]
        for a, b in zip(ys, ys[1:]):
            self.assertLessEqual(a, b + 1e-9)
        self.assertLessEqual(max(ys), 5.0 + 1e-9)

    def test_area_closes_to_baseline(self) -> None:
        cmds = area_commands([(0.0, 10.0), (10.0, 5.0)], "linear", 20.0)
        self.assertEqual(cmds[-3:], [LineTo(10.0, 20.0), LineTo(0.0, 20.0), ClosePath()])

    def test_area_with_per_point_baseline_traces_back(self) -> None:
        cmds = area_commands([(0.0, 10.0), (10.0, 5.0)], "linear", [15.0, 12.0])
        self.assertEqual(cmds[-3:], [LineTo(10.0, 12.0), LineTo(0.0, 15.0), ClosePath()])
        with self.assertRaises(ValueError):
            area_commands([(0.0, 1.0)], "linear", [1.0, 2.0])

    def test_path_data_serialization(self) -> None:
        d = path_data([MoveTo(0.0, 0.0), LineTo(10.0, 5.5), HorizontalTo(12.25), ClosePath()])
        self.assertEqual(d, "M 0 0 L 10 5.5 H 12.25 Z")

    def test_flattened_arc_stays_on_circle(self) -> None:
        (points, _), = flatten([MoveTo(0.0, 0.0), ArcTo(10.0, 10.0, 20.0, 0.0, large_arc=False, sweep=True)])
        for x, y in points:
            self.assertAlmostEqual(math.hypot(x - 10.0, y), 10.0, places=6)
        self.assertEqual(points[-1], (20.0, 0.0))


if __name__ == "__main__":
    unittest.main()
