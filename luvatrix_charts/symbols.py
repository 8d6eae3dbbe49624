from __future__ import annotations

import logging
import math

from luvatrix_charts.interpolation import ClosePath, LineTo, MoveTo
from luvatrix_charts.scene import CircleNode, PathNode, PolygonNode, RectNode, SceneNode


LOGGER = logging.getLogger(__name__)

SYMBOL_NAMES = ("circle", "square", "triangle", "diamond", "cross", "plus", "star")

# unknown names already warned about; repeats log at debug
_REPORTED_UNKNOWN: set[str] = set()


def symbol_radius(area: float) -> float:
    """Radius of a symbol whose nominal area is `area` square points."""

    return math.sqrt(max(0.0, float(area)) / math.pi)


def normalize_symbol(name: str | None) -> str:
    if name is None:
        return "circle"
    if name not in SYMBOL_NAMES:
        if name in _REPORTED_UNKNOWN:
            LOGGER.debug("unknown symbol %r; falling back to circle", name)
        else:
            _REPORTED_UNKNOWN.add(name)
            LOGGER.warning("unknown symbol %r; falling back to circle", name)
        return "circle"
    return name


def symbol_node(name: str | None, cx: float, cy: float, r: float, fill: str, opacity: float = 1.0) -> SceneNode:
    shape = normalize_symbol(name)
    if shape == "square":
        return RectNode(x=cx - r, y=cy - r, width=r * 2.0, height=r * 2.0, fill=fill, opacity=opacity)
    if shape == "triangle":
        points = ((cx, cy - r * 1.2), (cx - r, cy + r * 0.7), (cx + r, cy + r * 0.7))
        return PolygonNode(points=points, fill=fill, opacity=opacity)
    if shape == "diamond":
        points = ((cx, cy - r * 1.2), (cx + r, cy), (cx, cy + r * 1.2), (cx - r, cy))
        return PolygonNode(points=points, fill=fill, opacity=opacity)
    if shape == "cross":
        return PathNode(commands=_bar_cross(cx, cy, r, r * 0.4), fill=fill, opacity=opacity)
    if shape == "plus":
        return PathNode(commands=_bar_cross(cx, cy, r, r * 0.3), fill=fill, opacity=opacity)
    if shape == "star":
        points = []
        for i in range(10):
            angle = math.radians(i * 36 - 90)
            rad = r * 1.2 if i % 2 == 0 else r * 0.5
            points.append((cx + rad * math.cos(angle), cy + rad * math.sin(angle)))
        return PolygonNode(points=tuple(points), fill=fill, opacity=opacity)
    return CircleNode(cx=cx, cy=cy, r=r, fill=fill, opacity=opacity)


def _bar_cross(cx: float, cy: float, r: float, w: float):
    # Twelve-corner outline of two crossing bars of half-width `w`.
    outline = (
        (cx - w, cy - r),
        (cx + w, cy - r),
        (cx + w, cy - w),
        (cx + r, cy - w),
        (cx + r, cy + w),
        (cx + w, cy + w),
        (cx + w, cy + r),
        (cx - w, cy + r),
        (cx - w, cy + w),
        (cx - r, cy + w),
        (cx - r, cy - w),
        (cx - w, cy - w),
    )
    commands = [MoveTo(*outline[0])]
    commands.extend(LineTo(x, y) for x, y in outline[1:])
    commands.append(ClosePath())
    return tuple(commands)
