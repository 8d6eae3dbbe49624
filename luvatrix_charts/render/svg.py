from __future__ import annotations

from pathlib import Path
import xml.etree.ElementTree as ET

from luvatrix_charts.scene import (
    CircleNode,
    GroupNode,
    LineNode,
    PathNode,
    PolygonNode,
    RectNode,
    Scene,
    SceneNode,
    TextNode,
)

SVG_NS = "http://www.w3.org/2000/svg"

_ANCHORS = {"start": "start", "middle": "middle", "end": "end", "leading": "start", "trailing": "end"}


def to_svg(scene: Scene) -> str:
    """Serialize a scene to a standalone SVG document string."""

    return ET.tostring(to_element(scene), encoding="unicode")


def write_svg(scene: Scene, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(to_svg(scene), encoding="utf-8")
    return out


def to_element(scene: Scene) -> ET.Element:
    root = ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "width": _num(scene.width),
            "height": _num(scene.height),
            "viewBox": f"0 0 {_num(scene.width)} {_num(scene.height)}",
        },
    )
    _append(root, scene.root)
    return root


def _append(parent: ET.Element, node: SceneNode) -> None:
    if isinstance(node, GroupNode):
        attrs: dict[str, str] = {}
        if node.role:
            attrs["class"] = node.role
        tx, ty = node.translate
        if tx or ty:
            attrs["transform"] = f"translate({_num(tx)},{_num(ty)})"
        group = ET.SubElement(parent, "g", attrs)
        for child in sorted(node.children, key=lambda c: c.z_index if isinstance(c, GroupNode) else 0):
            _append(group, child)
        return
    if isinstance(node, RectNode):
        attrs = {
            "x": _num(node.x),
            "y": _num(node.y),
            "width": _num(node.width),
            "height": _num(node.height),
            "fill": node.fill,
        }
        if node.rx:
            attrs["rx"] = _num(node.rx)
        if node.stroke is not None and node.stroke_width > 0:
            attrs["stroke"] = node.stroke
            attrs["stroke-width"] = _num(node.stroke_width)
        _paint(attrs, "fill", "fill-opacity", node.opacity)
        _paint(attrs, "stroke", "stroke-opacity", 1.0)
        ET.SubElement(parent, "rect", attrs)
    elif isinstance(node, LineNode):
        attrs = {
            "x1": _num(node.x1),
            "y1": _num(node.y1),
            "x2": _num(node.x2),
            "y2": _num(node.y2),
            "stroke": node.stroke,
            "stroke-width": _num(node.stroke_width),
        }
        if node.dash:
            attrs["stroke-dasharray"] = " ".join(_num(d) for d in node.dash)
        _paint(attrs, "stroke", "stroke-opacity", node.opacity)
        ET.SubElement(parent, "line", attrs)
    elif isinstance(node, PathNode):
        attrs = {"d": node.d, "fill": node.fill or "none"}
        if node.stroke is not None:
            attrs["stroke"] = node.stroke
            attrs["stroke-width"] = _num(node.stroke_width)
        if node.dash:
            attrs["stroke-dasharray"] = " ".join(_num(d) for d in node.dash)
        if node.line_cap:
            attrs["stroke-linecap"] = node.line_cap
        if node.line_join:
            attrs["stroke-linejoin"] = node.line_join
        _paint(attrs, "fill", "fill-opacity", 1.0)
        _paint(attrs, "stroke", "stroke-opacity", 1.0)
        _opacity(attrs, "opacity", node.opacity)
        ET.SubElement(parent, "path", attrs)
    elif isinstance(node, CircleNode):
        attrs = {"cx": _num(node.cx), "cy": _num(node.cy), "r": _num(node.r), "fill": node.fill}
        _paint(attrs, "fill", "fill-opacity", node.opacity)
        ET.SubElement(parent, "circle", attrs)
    elif isinstance(node, PolygonNode):
        attrs = {"points": " ".join(f"{_num(x)},{_num(y)}" for x, y in node.points), "fill": node.fill}
        _paint(attrs, "fill", "fill-opacity", node.opacity)
        ET.SubElement(parent, "polygon", attrs)
    elif isinstance(node, TextNode):
        attrs = {
            "x": _num(node.x),
            "y": _num(node.y),
            "fill": node.color,
            "font-size": _num(node.size),
            "font-family": node.font_family,
            "text-anchor": _ANCHORS.get(node.anchor, "middle"),
        }
        if node.rotate:
            attrs["transform"] = f"rotate({node.rotate} {_num(node.x)} {_num(node.y)})"
        _paint(attrs, "fill", "fill-opacity", 1.0)
        text = ET.SubElement(parent, "text", attrs)
        text.text = node.content


def _paint(attrs: dict[str, str], name: str, opacity_name: str, opacity: float) -> None:
    color = attrs.get(name)
    if color is not None and len(color) == 9 and color.startswith("#"):
        attrs[name] = color[:7]
        opacity *= int(color[7:], 16) / 255.0
    _opacity(attrs, opacity_name, opacity)


def _opacity(attrs: dict[str, str], name: str, opacity: float) -> None:
    if opacity < 1.0:
        attrs[name] = _num(max(0.0, opacity))


def _num(v: float) -> str:
    out = f"{float(v):.2f}".rstrip("0").rstrip(".")
    return "0" if out in ("-0", "") else out
