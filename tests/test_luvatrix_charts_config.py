from __future__ import annotations

import unittest

from luvatrix_charts import AxisConfig, ChartDataError, ChartStyle, LegendConfig, validate_chart_style
from luvatrix_charts.config import resolve_axis_config, resolve_legend_config, resolve_scale_config, ScaleConfig
from luvatrix_charts.style import DEFAULT_STYLE, coerce_color, parse_rgba


class _CssColor:
    def css(self) -> str:
        return "#336699"


class _ToolkitColor:
    def __init__(self, r: int, g: int, b: int, a: float = 1.0) -> None:
        self._text = f"rgba({r}, {g}, {b}, {a})"

    def css(self) -> str:
        return self._text

    def rgba(self) -> str:
        return self._text


class _RgbaOnlyColor:
    def rgba(self) -> str:
        return "rgba(10, 20, 30, 0.5)"


class StyleTests(unittest.TestCase):
    def test_default_tokens(self) -> None:
        self.assertEqual(DEFAULT_STYLE.mark_color, "#007AFF")
        self.assertEqual(DEFAULT_STYLE.font_size_px, 12.0)

    def test_overrides_are_validated(self) -> None:
        style = validate_chart_style({"axis_color": "black", "font_size_px": 14})
        self.assertIsInstance(style, ChartStyle)
        self.assertEqual(style.axis_color, "black")
        self.assertEqual(style.font_size_px, 14.0)
        with self.assertRaises(ValueError):
            validate_chart_style({"unknown_token": 1})
        with self.assertRaises(ValueError):
            validate_chart_style({"grid_color": "nope"})
        with self.assertRaises(ValueError):
            validate_chart_style({"font_size_px": 0})

    def test_colour_inputs(self) -> None:
        self.assertEqual(coerce_color((255, 0, 0)), "#FF0000")
        self.assertEqual(coerce_color((255, 0, 0, 255)), "#FF0000")
        self.assertEqual(coerce_color(_CssColor()), "#336699")
        self.assertEqual(coerce_color((10, 20, 30, 128)), "#0A141E80")
        with self.assertRaises(ChartDataError):
            coerce_color("definitely-not-a-colour")
        with self.assertRaises(ChartDataError):
            coerce_color(12)

    def test_toolkit_colour_strings_use_unit_alpha(self) -> None:
        self.assertEqual(coerce_color(_ToolkitColor(0, 122, 255)), "#007AFF")
        self.assertEqual(coerce_color(_ToolkitColor(0, 122, 255, 0.5)), "#007AFF80")
        self.assertEqual(coerce_color(_RgbaOnlyColor()), "#0A141E80")
        self.assertEqual(coerce_color("rgb(100%, 0%, 0%)"), "#FF0000")
        self.assertEqual(coerce_color("RGBA(10, 20, 30, 0)"), "#0A141E00")
        self.assertEqual(parse_rgba(coerce_color(_ToolkitColor(0, 122, 255))), (0, 122, 255, 255))
        self.assertEqual(parse_rgba(coerce_color(_ToolkitColor(0, 122, 255, 0.5))), (0, 122, 255, 128))
        with self.assertRaises(ChartDataError):
            coerce_color("rgba(10, 20, blue, 0.5)")

    def test_parse_rgba_applies_opacity(self) -> None:
        self.assertEqual(parse_rgba("#FF0000"), (255, 0, 0, 255))
        self.assertEqual(parse_rgba("#FF0000", 0.5), (255, 0, 0, 128))


class ConfigTests(unittest.TestCase):
    def test_axis_config_resolution(self) -> None:
        base = AxisConfig()
        self.assertFalse(resolve_axis_config(base, "hidden").visible)
        self.assertTrue(resolve_axis_config(AxisConfig(visible=False), "visible").visible)
        self.assertFalse(resolve_axis_config(base, {"visibility": "hidden"}).visible)
        self.assertEqual(resolve_axis_config(base, {"tick_values": [1, 2]}).tick_values, (1, 2))
        self.assertEqual(resolve_axis_config(base, lambda: {"label": "Sales"}).label, "Sales")
        self.assertIs(resolve_axis_config(base, None), base)
        with self.assertRaises(ChartDataError):
            resolve_axis_config(base, 3)
        with self.assertRaises(ChartDataError):
            AxisConfig(tick_count=0)

    def test_scale_config_resolution(self) -> None:
        cfg = resolve_scale_config(ScaleConfig(), domain=[0, 10], type="linear", nice=True)
        self.assertEqual(cfg, ScaleConfig(domain=(0, 10), type="linear", nice=True))
        with self.assertRaises(ChartDataError):
            resolve_scale_config(ScaleConfig(), domain=[])

    def test_legend_visibility(self) -> None:
        auto = LegendConfig()
        self.assertFalse(auto.is_visible(1))
        self.assertTrue(auto.is_visible(2))
        self.assertTrue(LegendConfig(visibility="visible").is_visible(0))
        self.assertFalse(LegendConfig(visibility="hidden").is_visible(5))
        self.assertEqual(resolve_legend_config(auto, True).visibility, "visible")
        self.assertEqual(resolve_legend_config(auto, {"position": "top"}).position, "top")


if __name__ == "__main__":
    unittest.main()
