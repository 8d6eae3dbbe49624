from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from luvatrix_charts.interpolation import flatten
from luvatrix_charts.raster.canvas import fill_circle, fill_polygon, fill_rect, new_canvas
from luvatrix_charts.raster.draw_lines import draw_polyline
from luvatrix_charts.raster.draw_text import draw_text
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
from luvatrix_charts.style import RGBA, parse_rgba


LOGGER = logging.getLogger(__name__)


def rasterize(scene: Scene, *, scale: float = 1.0, background: RGBA = (255, 255, 255, 0)) -> np.ndarray:
    """Paint a scene into an `(H, W, 4)` uint8 RGBA array.

    Nodes are painted in scene order; groups are translated and their
    children painted by ascending `z_index`.
    """

    if scale <= 0:
        raise ValueError("scale must be > 0")
    width = max(1, int(round(scene.width * scale)))
    height = max(1, int(round(scene.height * scale)))
    canvas = new_canvas(width, height, background)
    for node, (ox, oy) in scene.walk():
        if isinstance(node, GroupNode):
            continue
        _paint(canvas, node, ox, oy, scale)
    return canvas


def save_png(scene: Scene, path: str | Path, *, scale: float = 1.0) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(rasterize(scene, scale=scale), mode="RGBA").save(out, format="PNG")
    LOGGER.debug("wrote %dx%d chart to %s", scene.width, scene.height, out)
    return out


def _paint(canvas: np.ndarray, node: SceneNode, ox: float, oy: float, s: float) -> None:
    if isinstance(node, RectNode):
        fill_rect(
            canvas,
            (node.x + ox) * s,
            (node.y + oy) * s,
            node.width * s,
            node.height * s,
            parse_rgba(node.fill, node.opacity),
        )
        if node.stroke is not None and node.stroke_width > 0:
            x0, y0 = (node.x + ox) * s, (node.y + oy) * s
            x1, y1 = x0 + node.width * s, y0 + node.height * s
            draw_polyline(
                canvas,
                [(x0, y0), (x1, y0), (x1, y1), (x0, y1)],
                parse_rgba(node.stroke, node.opacity),
                node.stroke_width * s,
                closed=True,
            )
    elif isinstance(node, LineNode):
        draw_polyline(
            canvas,
            [((node.x1 + ox) * s, (node.y1 + oy) * s), ((node.x2 + ox) * s, (node.y2 + oy) * s)],
            parse_rgba(node.stroke, node.opacity),
            node.stroke_width * s,
            dash=[d * s for d in node.dash] if node.dash else None,
        )
    elif isinstance(node, PathNode):
        subpaths = [
            ([((x + ox) * s, (y + oy) * s) for x, y in pts], closed) for pts, closed in flatten(node.commands)
        ]
        if node.fill is not None:
            fill_polygon(canvas, [pts for pts, _ in subpaths], parse_rgba(node.fill, node.opacity))
        if node.stroke is not None and node.stroke_width > 0:
            color = parse_rgba(node.stroke, node.opacity)
            for pts, closed in subpaths:
                draw_polyline(
                    canvas,
                    pts,
                    color,
                    node.stroke_width * s,
                    closed=closed,
                    dash=[d * s for d in node.dash] if node.dash else None,
                )
    elif isinstance(node, CircleNode):
        fill_circle(canvas, (node.cx + ox) * s, (node.cy + oy) * s, node.r * s, parse_rgba(node.fill, node.opacity))
    elif isinstance(node, PolygonNode):
        fill_polygon(
            canvas, [[((x + ox) * s, (y + oy) * s) for x, y in node.points]], parse_rgba(node.fill, node.opacity)
        )
    elif isinstance(node, TextNode):
        draw_text(
            canvas,
            (node.x + ox) * s,
            (node.y + oy) * s,
            node.content,
            parse_rgba(node.color),
            anchor=node.anchor,
            font_family=node.font_family,
            font_size_px=node.size * s,
            rotate_deg=node.rotate,
        )
