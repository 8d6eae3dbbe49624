from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
import xml.etree.ElementTree as ET

import numpy as np
from PIL import Image

from luvatrix_charts import BarMark, Chart, LineMark, SectorMark, value
from luvatrix_charts.raster import draw_polyline, draw_text, fill_circle, fill_polygon, new_canvas, rasterize
from luvatrix_charts.render import to_svg
from luvatrix_charts.scene import GroupNode, RectNode, Scene, TextNode

SVG = "{http://www.w3.org/2000/svg}"


class _ToolkitColor:
    def __init__(self, r: int, g: int, b: int, a: float = 1.0) -> None:
        self._text = f"rgba({r}, {g}, {b}, {a})"

    def css(self) -> str:
        return self._text

    def rgba(self) -> str:
        return self._text


def _sales_chart(color=None) -> Chart:
    data = [{"month": "Jan", "sales": 10}, {"month": "Feb", "sales": 20}]
    return Chart(
        data,
        lambda d: BarMark(x=value("Month", d["month"]), y=value("Sales", d["sales"])).foreground_style(color),
    )


class SvgBackendTests(unittest.TestCase):
    def test_document_root_and_marks(self) -> None:
        root = ET.fromstring(_sales_chart().to_svg())
        self.assertEqual(root.tag, f"{SVG}svg")
        self.assertEqual(root.attrib["width"], "400")
        self.assertEqual(root.attrib["viewBox"], "0 0 400 300")
        self.assertEqual(len(root.findall(f".//{SVG}rect")), 2)
        plot = root.find(f".//{SVG}g[@class='plot']")
        assert plot is not None
        self.assertEqual(plot.attrib["transform"], "translate(50,20)")

    def test_line_paths_have_no_fill(self) -> None:
        c = Chart([0, 1, 2], lambda v: LineMark(x=value("x", v), y=value("y", v)).line_style(dash=[4, 2]))
        root = ET.fromstring(c.to_svg())
        (path,) = root.findall(f".//{SVG}path")
        self.assertTrue(path.attrib["d"].startswith("M "))
        self.assertEqual(path.attrib["fill"], "none")
        self.assertEqual(path.attrib["stroke-dasharray"], "4 2")
        self.assertEqual(path.attrib["stroke-linecap"], "round")

    def test_text_is_escaped(self) -> None:
        scene = Scene(width=10, height=10, root=GroupNode(children=(TextNode(x=1, y=2, content="<A&B>", color="#000"),)))
        root = ET.fromstring(to_svg(scene))
        (text,) = root.findall(f".//{SVG}text")
        self.assertEqual(text.text, "<A&B>")
        self.assertEqual(text.attrib["text-anchor"], "middle")

    def test_translucent_fill_sets_opacity(self) -> None:
        scene = Scene(width=10, height=10, root=GroupNode(children=(RectNode(0, 0, 5, 5, "#FF0000", opacity=0.25),)))
        (rect,) = ET.fromstring(to_svg(scene)).findall(f".//{SVG}rect")
        self.assertEqual(rect.attrib["fill-opacity"], "0.25")

    def test_toolkit_colour_alpha_becomes_fill_opacity(self) -> None:
        root = ET.fromstring(_sales_chart(_ToolkitColor(0, 122, 255, 0.5)).to_svg())
        rects = root.findall(f".//{SVG}rect")
        self.assertEqual(len(rects), 2)
        for rect in rects:
            self.assertEqual(rect.attrib["fill"], "#007AFF")
            self.assertEqual(rect.attrib["fill-opacity"], "0.5")

        opaque = ET.fromstring(_sales_chart(_ToolkitColor(0, 122, 255)).to_svg())
        for rect in opaque.findall(f".//{SVG}rect"):
            self.assertEqual(rect.attrib["fill"], "#007AFF")
            self.assertNotIn("fill-opacity", rect.attrib)

    def test_pie_serializes_arcs(self) -> None:
        c = Chart([1, 3], lambda v: SectorMark(angle=value("v", v)))
        paths = ET.fromstring(c.to_svg()).findall(f".//{SVG}path")
        self.assertEqual(len(paths), 2)
        self.assertIn(" A ", f" {paths[0].attrib['d']} ")


class RasterBackendTests(unittest.TestCase):
    def test_rgba_shape_and_determinism(self) -> None:
        c = _sales_chart()
        first = c.to_rgba()
        second = c.to_rgba()
        self.assertEqual(first.shape, (300, 400, 4))
        self.assertEqual(first.dtype, np.uint8)
        self.assertTrue(np.array_equal(first, second))

    def test_bar_pixels_use_mark_colour(self) -> None:
        img = _sales_chart().to_rgba()
        self.assertEqual(tuple(int(v) for v in img[190, 297]), (0, 122, 255, 255))
        self.assertEqual(int(img[0, 0, 3]), 0)

    def test_toolkit_colour_alpha_reaches_pixels(self) -> None:
        opaque = _sales_chart(_ToolkitColor(0, 122, 255)).to_rgba()
        self.assertEqual(tuple(int(v) for v in opaque[190, 297]), (0, 122, 255, 255))
        translucent = _sales_chart(_ToolkitColor(0, 122, 255, 0.5)).to_rgba()
        self.assertEqual(tuple(int(v) for v in translucent[190, 297]), (0, 122, 255, 128))

    def test_save_png(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = _sales_chart().save_png(Path(tmp) / "nested" / "sales.png")
            self.assertTrue(out.exists())
            with Image.open(out) as image:
                self.assertEqual(image.size, (400, 300))
                self.assertEqual(image.mode, "RGBA")

    def test_scale_factor(self) -> None:
        img = rasterize(_sales_chart().render(), scale=2.0)
        self.assertEqual(img.shape, (600, 800, 4))
        with self.assertRaises(ValueError):
            rasterize(_sales_chart().render(), scale=0)


class RasterPrimitiveTests(unittest.TestCase):
    def test_polygon_fill_covers_interior(self) -> None:
        canvas = new_canvas(20, 20)
        fill_polygon(canvas, [[(2.0, 2.0), (12.0, 2.0), (12.0, 12.0), (2.0, 12.0)]], (255, 0, 0, 255))
        self.assertEqual(int(np.count_nonzero(canvas[:, :, 3])), 100)

    def test_polygon_fill_is_even_odd(self) -> None:
        canvas = new_canvas(20, 20)
        outer = [(0.0, 0.0), (20.0, 0.0), (20.0, 20.0), (0.0, 20.0)]
        hole = [(5.0, 5.0), (15.0, 5.0), (15.0, 15.0), (5.0, 15.0)]
        fill_polygon(canvas, [outer, hole], (0, 0, 255, 255))
        self.assertEqual(int(canvas[10, 10, 3]), 0)
        self.assertEqual(int(canvas[2, 2, 3]), 255)

    def test_circle_area(self) -> None:
        canvas = new_canvas(40, 40)
        fill_circle(canvas, 20.0, 20.0, 10.0, (0, 255, 0, 255))
        area = int(np.count_nonzero(canvas[:, :, 3]))
        self.assertLess(abs(area - np.pi * 100.0), 20.0)

    def test_translucent_stroke_blends(self) -> None:
        canvas = new_canvas(10, 10, (255, 255, 255, 255))
        draw_polyline(canvas, [(0.0, 5.0), (9.0, 5.0)], (0, 0, 0, 128))
        row = canvas[5, :, 0]
        self.assertTrue(np.all((row > 100) & (row < 160)))

    def test_text_renderer_uses_antialias_coverage(self) -> None:
        canvas = new_canvas(220, 80)
        draw_text(canvas, 10, 40, "Static Chart", (255, 255, 255, 255), font_size_px=24.0)
        self.assertTrue(np.any(canvas[:, :, 3] > 0))
        self.assertEqual(int(canvas[0, 0, 3]), 0)


if __name__ == "__main__":
    unittest.main()
