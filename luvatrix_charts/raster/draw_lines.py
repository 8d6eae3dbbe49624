from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from luvatrix_charts.raster.canvas import draw_pixel
from luvatrix_charts.style import RGBA


def draw_polyline(
    dst: np.ndarray,
    points: Sequence[tuple[float, float]],
    color: RGBA,
    width: float = 1.0,
    *,
    closed: bool = False,
    dash: Sequence[float] | None = None,
) -> None:
    pts = list(points)
    if closed and len(pts) > 2:
        pts.append(pts[0])
    if len(pts) < 2:
        return
    brush = max(1, int(round(width)))
    segments = list(zip(pts, pts[1:]))
    if dash:
        segments = _dash_segments(segments, dash)
    # Each pixel is painted once so translucent strokes do not darken at joints.
    mask = np.zeros(dst.shape[:2], dtype=bool)
    for (x0, y0), (x1, y1) in segments:
        _mark_segment(mask, int(round(x0)), int(round(y0)), int(round(x1)), int(round(y1)), brush)
    ys, xs = np.nonzero(mask)
    for x, y in zip(xs.tolist(), ys.tolist()):
        draw_pixel(dst, x, y, color)


def _mark_segment(mask: np.ndarray, x0: int, y0: int, x1: int, y1: int, width: int) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _mark_square_brush(mask, x0, y0, width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _mark_square_brush(mask: np.ndarray, x: int, y: int, width: int) -> None:
    lo = (width - 1) // 2
    hi = width // 2
    ya = max(0, y - lo)
    yb = min(mask.shape[0], y + hi + 1)
    xa = max(0, x - lo)
    xb = min(mask.shape[1], x + hi + 1)
    if ya < yb and xa < xb:
        mask[ya:yb, xa:xb] = True


def _dash_segments(segments, dash: Sequence[float]):
    pattern = [max(0.0, float(d)) for d in dash]
    if not pattern or sum(pattern) <= 0:
        return segments
    if len(pattern) % 2:
        pattern = pattern * 2
    out = []
    idx = 0
    remaining = pattern[0]
    drawing = True
    for (x0, y0), (x1, y1) in segments:
        length = math.hypot(x1 - x0, y1 - y0)
        pos = 0.0
        while pos < length:
            step = min(remaining, length - pos)
            if drawing and step > 0:
                t0 = pos / length
                t1 = (pos + step) / length
                out.append(
                    ((x0 + (x1 - x0) * t0, y0 + (y1 - y0) * t0), (x0 + (x1 - x0) * t1, y0 + (y1 - y0) * t1))
                )
            pos += step
            remaining -= step
            if remaining <= 1e-9:
                idx = (idx + 1) % len(pattern)
                remaining = pattern[idx]
                drawing = not drawing
    return out
