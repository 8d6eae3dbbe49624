from __future__ import annotations

from typing import Sequence

import numpy as np

from luvatrix_charts.style import RGBA


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 0)) -> np.ndarray:
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def blend_span(dst: np.ndarray, y: int, x0: int, x1: int, color: RGBA) -> None:
    """Source-over blend `color` into row `y`, columns `[x0, x1]` inclusive."""

    if color[3] <= 0 or y < 0 or y >= dst.shape[0]:
        return
    xa = max(0, min(x0, x1))
    xb = min(dst.shape[1] - 1, max(x0, x1))
    if xa > xb:
        return
    _blend(dst[y : y + 1, xa : xb + 1], color)


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0] or x < 0 or x >= dst.shape[1]:
        return
    _blend(dst[y : y + 1, x : x + 1], color)


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    blend_span(dst, y, x0, x1, color)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    if x < 0 or x >= dst.shape[1]:
        return
    ya = max(0, min(y0, y1))
    yb = min(dst.shape[0] - 1, max(y0, y1))
    if ya > yb:
        return
    _blend(dst[ya : yb + 1, x : x + 1], color)


def fill_rect(dst: np.ndarray, x: float, y: float, width: float, height: float, color: RGBA) -> None:
    xa = max(0, int(round(x)))
    ya = max(0, int(round(y)))
    xb = min(dst.shape[1], int(round(x + width)))
    yb = min(dst.shape[0], int(round(y + height)))
    if xa >= xb or ya >= yb or color[3] <= 0:
        return
    _blend(dst[ya:yb, xa:xb], color)


def fill_polygon(dst: np.ndarray, rings: Sequence[Sequence[tuple[float, float]]], color: RGBA) -> None:
    """Even-odd scanline fill of one or more closed rings, sampled at pixel centers."""

    edges = []
    for ring in rings:
        pts = list(ring)
        if len(pts) < 3:
            continue
        for (x0, y0), (x1, y1) in zip(pts, pts[1:] + pts[:1]):
            if y0 != y1:
                edges.append((x0, y0, x1, y1))
    if not edges or color[3] <= 0:
        return
    min_y = max(0, int(np.floor(min(min(e[1], e[3]) for e in edges))))
    max_y = min(dst.shape[0] - 1, int(np.ceil(max(max(e[1], e[3]) for e in edges))))
    for y in range(min_y, max_y + 1):
        sy = y + 0.5
        xs: list[float] = []
        for x0, y0, x1, y1 in edges:
            if min(y0, y1) <= sy < max(y0, y1):
                xs.append(x0 + (sy - y0) * (x1 - x0) / (y1 - y0))
        xs.sort()
        for xa, xb in zip(xs[0::2], xs[1::2]):
            left = int(np.ceil(xa - 0.5))
            right = int(np.floor(xb - 0.5))
            if right >= left:
                blend_span(dst, y, left, right, color)


def fill_circle(dst: np.ndarray, cx: float, cy: float, r: float, color: RGBA) -> None:
    if r <= 0 or color[3] <= 0:
        return
    ya = max(0, int(np.floor(cy - r)))
    yb = min(dst.shape[0] - 1, int(np.ceil(cy + r)))
    for y in range(ya, yb + 1):
        dy = y + 0.5 - cy
        if abs(dy) > r:
            continue
        half = float(np.sqrt(r * r - dy * dy))
        left = int(np.ceil(cx - half - 0.5))
        right = int(np.floor(cx + half - 0.5))
        if right >= left:
            blend_span(dst, y, left, right, color)


def _blend(view: np.ndarray, color: RGBA) -> None:
    src_a = color[3] / 255.0
    dst_a = view[:, :, 3:4].astype(np.float32) / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)
    src_rgb = np.asarray(color[:3], dtype=np.float32)
    num = src_rgb * src_a + view[:, :, :3].astype(np.float32) * dst_a * (1.0 - src_a)
    safe = np.where(out_a > 1e-6, out_a, 1.0)
    view[:, :, :3] = np.clip(num / safe + 0.5, 0, 255).astype(np.uint8)
    view[:, :, 3:4] = np.clip(out_a * 255.0 + 0.5, 0, 255).astype(np.uint8)
