from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Sequence, Union

import numpy as np


LOGGER = logging.getLogger(__name__)

Point = tuple[float, float]

INTERPOLATION_METHODS = ("linear", "step", "stepStart", "stepEnd", "catmullRom", "monotone")
_METHOD_ALIASES = {
    "step_start": "stepStart",
    "step_end": "stepEnd",
    "catmull_rom": "catmullRom",
}
_STEP_POSITIONS = {"step": 0.5, "stepStart": 0.0, "stepEnd": 1.0}


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True)
class HorizontalTo:
    x: float


@dataclass(frozen=True)
class VerticalTo:
    y: float


@dataclass(frozen=True)
class CubicTo:
    x1: float
    y1: float
    x2: float
    y2: float
    x: float
    y: float


@dataclass(frozen=True)
class ArcTo:
    rx: float
    ry: float
    x: float
    y: float
    large_arc: bool
    sweep: bool
    rotation: float = 0.0


@dataclass(frozen=True)
class ClosePath:
    pass


PathCommand = Union[MoveTo, LineTo, HorizontalTo, VerticalTo, CubicTo, ArcTo, ClosePath]


def normalize_method(method: str | None) -> str:
    if method is None:
        return "linear"
    name = _METHOD_ALIASES.get(method, method)
    if name not in INTERPOLATION_METHODS:
        LOGGER.warning("unknown interpolation method %r; falling back to linear", method)
        return "linear"
    return name


def interpolate(points: Sequence[Point], method: str | None = "linear", *, tension: float = 0.5) -> list[PathCommand]:
    """Connect an ordered point sequence into path commands."""

    pts = [(float(x), float(y)) for x, y in points]
    if not pts:
        return []
    name = normalize_method(method)
    if name in _STEP_POSITIONS:
        return _step(pts, _STEP_POSITIONS[name])
    if name == "catmullRom":
        return _catmull_rom(pts, tension)
    if name == "monotone":
        return _monotone(pts)
    return _linear(pts)


def area_commands(
    points: Sequence[Point],
    method: str | None = "linear",
    baseline: float | Sequence[float] = 0.0,
    *,
    tension: float = 0.5,
) -> list[PathCommand]:
    """Line commands closed down to the baseline.

    `baseline` is a single pixel row or one value per point (ranged areas);
    a per-point baseline is traced back linearly from the last point.
    """

    commands = interpolate(points, method, tension=tension)
    if not commands:
        return []
    pts = [(float(x), float(y)) for x, y in points]
    if isinstance(baseline, (int, float)):
        bases = [float(baseline)] * len(pts)
    else:
        bases = [float(b) for b in baseline]
        if len(bases) != len(pts):
            raise ValueError("baseline must provide one value per point")
    if all(b == bases[0] for b in bases):
        commands.append(LineTo(pts[-1][0], bases[-1]))
        commands.append(LineTo(pts[0][0], bases[0]))
    else:
        for (x, _), b in zip(reversed(pts), reversed(bases), strict=False):
            commands.append(LineTo(x, b))
    commands.append(ClosePath())
    return commands


def path_data(commands: Sequence[PathCommand]) -> str:
    """Serialize commands to SVG path syntax."""

    parts: list[str] = []
    for cmd in commands:
        if isinstance(cmd, MoveTo):
            parts.append(f"M {_num(cmd.x)} {_num(cmd.y)}")
        elif isinstance(cmd, LineTo):
            parts.append(f"L {_num(cmd.x)} {_num(cmd.y)}")
        elif isinstance(cmd, HorizontalTo):
            parts.append(f"H {_num(cmd.x)}")
        elif isinstance(cmd, VerticalTo):
            parts.append(f"V {_num(cmd.y)}")
        elif isinstance(cmd, CubicTo):
            parts.append(
                f"C {_num(cmd.x1)} {_num(cmd.y1)}, {_num(cmd.x2)} {_num(cmd.y2)}, {_num(cmd.x)} {_num(cmd.y)}"
            )
        elif isinstance(cmd, ArcTo):
            parts.append(
                f"A {_num(cmd.rx)} {_num(cmd.ry)} {_num(cmd.rotation)} "
                f"{int(cmd.large_arc)} {int(cmd.sweep)} {_num(cmd.x)} {_num(cmd.y)}"
            )
        elif isinstance(cmd, ClosePath):
            parts.append("Z")
    return " ".join(parts)


def flatten(commands: Sequence[PathCommand], *, segments: int = 16) -> list[tuple[list[Point], bool]]:
    """Approximate a path by polylines: one `(points, closed)` per subpath."""

    subpaths: list[tuple[list[Point], bool]] = []
    current: list[Point] = []
    start: Point = (0.0, 0.0)
    pen: Point = (0.0, 0.0)

    def finish(closed: bool) -> None:
        nonlocal current
        if current:
            subpaths.append((current, closed))
        current = []

    for cmd in commands:
        if isinstance(cmd, MoveTo):
            finish(False)
            pen = (cmd.x, cmd.y)
            start = pen
            current = [pen]
            continue
        if not current:
            current = [pen]
        if isinstance(cmd, LineTo):
            pen = (cmd.x, cmd.y)
            current.append(pen)
        elif isinstance(cmd, HorizontalTo):
            pen = (cmd.x, pen[1])
            current.append(pen)
        elif isinstance(cmd, VerticalTo):
            pen = (pen[0], cmd.y)
            current.append(pen)
        elif isinstance(cmd, CubicTo):
            current.extend(_sample_cubic(pen, cmd, segments))
            pen = (cmd.x, cmd.y)
        elif isinstance(cmd, ArcTo):
            current.extend(_sample_arc(pen, cmd, segments))
            pen = (cmd.x, cmd.y)
        elif isinstance(cmd, ClosePath):
            finish(True)
            pen = start
    finish(False)
    return subpaths


def _linear(pts: list[Point]) -> list[PathCommand]:
    out: list[PathCommand] = [MoveTo(*pts[0])]
    out.extend(LineTo(x, y) for x, y in pts[1:])
    return out


def _step(pts: list[Point], position: float) -> list[PathCommand]:
    if len(pts) < 2:
        return _linear(pts)
    out: list[PathCommand] = [MoveTo(*pts[0])]
    for prev, curr in zip(pts[:-1], pts[1:], strict=False):
        if position == 0.0:
            out.extend((VerticalTo(curr[1]), HorizontalTo(curr[0])))
        elif position == 1.0:
            out.extend((HorizontalTo(curr[0]), VerticalTo(curr[1])))
        else:
            mid_x = prev[0] + (curr[0] - prev[0]) * position
            out.extend((HorizontalTo(mid_x), VerticalTo(curr[1]), HorizontalTo(curr[0])))
    return out


def _catmull_rom(pts: list[Point], tension: float) -> list[PathCommand]:
    if len(pts) <= 2:
        return _linear(pts)
    last = len(pts) - 1
    out: list[PathCommand] = [MoveTo(*pts[0])]
    for i in range(last):
        p0 = pts[max(0, i - 1)]
        p1 = pts[i]
        p2 = pts[i + 1]
        p3 = pts[min(last, i + 2)]
        out.append(
            CubicTo(
                p1[0] + (p2[0] - p0[0]) / 6.0 * tension,
                p1[1] + (p2[1] - p0[1]) / 6.0 * tension,
                p2[0] - (p3[0] - p1[0]) / 6.0 * tension,
                p2[1] - (p3[1] - p1[1]) / 6.0 * tension,
                p2[0],
                p2[1],
            )
        )
    return out


def _monotone(pts: list[Point]) -> list[PathCommand]:
    if len(pts) < 2:
        return _linear(pts)
    xs = np.asarray([p[0] for p in pts], dtype=np.float64)
    ys = np.asarray([p[1] for p in pts], dtype=np.float64)
    tangents = monotone_tangents(xs, ys)
    out: list[PathCommand] = [MoveTo(*pts[0])]
    for i in range(len(pts) - 1):
        dx = xs[i + 1] - xs[i]
        out.append(
            CubicTo(
                float(xs[i] + dx / 3.0),
                float(ys[i] + tangents[i] * dx / 3.0),
                float(xs[i + 1] - dx / 3.0),
                float(ys[i + 1] - tangents[i + 1] * dx / 3.0),
                float(xs[i + 1]),
                float(ys[i + 1]),
            )
        )
    return out


def monotone_tangents(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Finite-difference tangents limited so each segment stays monotone.

    Endpoints take the adjacent secant slope, interior points the mean of the
    two adjacent slopes. Tangents are then zeroed at local extrema and scaled
    down where they would overshoot (Fritsch-Carlson).
    """

    dx = np.diff(xs)
    dx = np.where(dx == 0.0, 1.0, dx)
    slopes = np.diff(ys) / dx
    tangents = np.empty(xs.size, dtype=np.float64)
    tangents[0] = slopes[0]
    tangents[-1] = slopes[-1]
    if xs.size > 2:
        tangents[1:-1] = (slopes[:-1] + slopes[1:]) * 0.5
        flat = (slopes[:-1] * slopes[1:]) <= 0.0
        tangents[1:-1][flat] = 0.0

    for i, slope in enumerate(slopes.tolist()):
        if slope == 0.0:
            tangents[i] = 0.0
            tangents[i + 1] = 0.0
            continue
        alpha = tangents[i] / slope
        beta = tangents[i + 1] / slope
        norm = alpha * alpha + beta * beta
        if norm > 9.0:
            tau = 3.0 / math.sqrt(norm)
            tangents[i] = tau * alpha * slope
            tangents[i + 1] = tau * beta * slope
    return tangents


def _sample_cubic(p0: Point, cmd: CubicTo, segments: int) -> list[Point]:
    t = np.linspace(0.0, 1.0, max(2, segments) + 1)[1:]
    mt = 1.0 - t
    x = mt**3 * p0[0] + 3 * mt**2 * t * cmd.x1 + 3 * mt * t**2 * cmd.x2 + t**3 * cmd.x
    y = mt**3 * p0[1] + 3 * mt**2 * t * cmd.y1 + 3 * mt * t**2 * cmd.y2 + t**3 * cmd.y
    return list(zip(x.tolist(), y.tolist(), strict=False))


def _sample_arc(p0: Point, cmd: ArcTo, segments: int) -> list[Point]:
    # Circular arcs only; the chart never emits rotated ellipses.
    x1, y1 = p0
    x2, y2 = cmd.x, cmd.y
    r = abs(cmd.rx)
    if r == 0.0 or (x1 == x2 and y1 == y2):
        return [(x2, y2)]
    hx = (x1 - x2) * 0.5
    hy = (y1 - y2) * 0.5
    half_sq = hx * hx + hy * hy
    r = max(r, math.sqrt(half_sq))
    factor = math.sqrt(max(0.0, (r * r - half_sq) / half_sq))
    if cmd.large_arc == cmd.sweep:
        factor = -factor
    cxp = factor * hy
    cyp = -factor * hx
    cx = cxp + (x1 + x2) * 0.5
    cy = cyp + (y1 + y2) * 0.5
    theta1 = math.atan2((hy - cyp) / r, (hx - cxp) / r)
    theta2 = math.atan2((-hy - cyp) / r, (-hx - cxp) / r)
    delta = theta2 - theta1
    if cmd.sweep and delta < 0:
        delta += 2.0 * math.pi
    elif not cmd.sweep and delta > 0:
        delta -= 2.0 * math.pi
    steps = max(2, int(math.ceil(segments * abs(delta) / (math.pi * 0.5))))
    angles = theta1 + delta * np.linspace(0.0, 1.0, steps + 1)[1:]
    xs = cx + r * np.cos(angles)
    ys = cy + r * np.sin(angles)
    out = list(zip(xs.tolist(), ys.tolist(), strict=False))
    out[-1] = (x2, y2)
    return out


def _num(v: float) -> str:
    if not math.isfinite(v):
        return "0"
    text = f"{v:.4f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
