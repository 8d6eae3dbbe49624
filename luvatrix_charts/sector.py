from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Literal, Sequence

import numpy as np

from luvatrix_charts.interpolation import ArcTo, ClosePath, LineTo, MoveTo, PathCommand


LOGGER = logging.getLogger(__name__)

TAU = 2.0 * math.pi


@dataclass(frozen=True)
class MarkDimension:
    """Radius relative to the available pie radius."""

    mode: Literal["ratio", "fixed", "inset"]
    amount: float

    @classmethod
    def ratio(cls, amount: float) -> "MarkDimension":
        return cls(mode="ratio", amount=float(amount))

    @classmethod
    def fixed(cls, amount: float) -> "MarkDimension":
        return cls(mode="fixed", amount=float(amount))

    @classmethod
    def inset(cls, amount: float) -> "MarkDimension":
        return cls(mode="inset", amount=float(amount))

    def resolve(self, available: float) -> float:
        if self.mode == "ratio":
            return max(0.0, available * self.amount)
        if self.mode == "fixed":
            return max(0.0, self.amount)
        return max(0.0, available - self.amount)


def resolve_radius(dimension: MarkDimension | float | None, available: float, default: float) -> float:
    if dimension is None:
        return default
    if isinstance(dimension, MarkDimension):
        return dimension.resolve(available)
    return max(0.0, float(dimension))


def allocate_angles(values: Sequence[float]) -> list[tuple[float, float]]:
    """Sequential `(start, end)` spans, in radians from 0, one per value.

    Non-finite and negative values take no angle. When nothing is left to
    allocate the result is empty and no slice is drawn.
    """

    vals = np.asarray(list(values), dtype=np.float64)
    if vals.size == 0:
        return []
    vals[~np.isfinite(vals) | (vals < 0)] = 0.0
    total = float(vals.sum())
    if total <= 0.0:
        LOGGER.debug("sector angles sum to zero; no slices allocated")
        return []
    spans = vals / total * TAU
    ends = np.cumsum(spans)
    ends[-1] = TAU
    starts = np.concatenate(([0.0], ends[:-1]))
    return [(float(s), float(e)) for s, e in zip(starts.tolist(), ends.tolist(), strict=False)]


def apply_angular_inset(start: float, end: float, inset_degrees: float) -> tuple[float, float]:
    half = math.radians(max(0.0, float(inset_degrees))) * 0.5
    s = start + half
    e = end - half
    if e < s:
        mid = (start + end) * 0.5
        return (mid, mid)
    return (s, e)


def polar_to_cartesian(cx: float, cy: float, radius: float, angle: float) -> tuple[float, float]:
    """Angle 0 points up and angles grow clockwise on screen."""

    return (cx + radius * math.cos(angle - math.pi / 2.0), cy + radius * math.sin(angle - math.pi / 2.0))


def sector_commands(
    cx: float,
    cy: float,
    inner: float,
    outer: float,
    start: float,
    end: float,
) -> list[PathCommand]:
    span = end - start
    if span <= 0.0 or outer <= 0.0:
        return []
    inner = min(max(0.0, inner), outer)
    if span >= TAU - 1e-9:
        return _full_ring(cx, cy, inner, outer, start)

    large = span > math.pi
    so = polar_to_cartesian(cx, cy, outer, start)
    eo = polar_to_cartesian(cx, cy, outer, end)
    if inner == 0.0:
        return [
            MoveTo(cx, cy),
            LineTo(*so),
            ArcTo(outer, outer, eo[0], eo[1], large_arc=large, sweep=True),
            ClosePath(),
        ]
    si = polar_to_cartesian(cx, cy, inner, start)
    ei = polar_to_cartesian(cx, cy, inner, end)
    return [
        MoveTo(*so),
        ArcTo(outer, outer, eo[0], eo[1], large_arc=large, sweep=True),
        LineTo(*ei),
        ArcTo(inner, inner, si[0], si[1], large_arc=large, sweep=False),
        ClosePath(),
    ]


def _full_ring(cx: float, cy: float, inner: float, outer: float, start: float) -> list[PathCommand]:
    # A single arc cannot end where it starts, so the circle is drawn as two halves.
    mid = start + math.pi
    so = polar_to_cartesian(cx, cy, outer, start)
    mo = polar_to_cartesian(cx, cy, outer, mid)
    out: list[PathCommand] = [
        MoveTo(*so),
        ArcTo(outer, outer, mo[0], mo[1], large_arc=False, sweep=True),
        ArcTo(outer, outer, so[0], so[1], large_arc=False, sweep=True),
        ClosePath(),
    ]
    if inner > 0.0:
        si = polar_to_cartesian(cx, cy, inner, start)
        mi = polar_to_cartesian(cx, cy, inner, mid)
        out.extend(
            [
                MoveTo(*si),
                ArcTo(inner, inner, mi[0], mi[1], large_arc=False, sweep=False),
                ArcTo(inner, inner, si[0], si[1], large_arc=False, sweep=False),
                ClosePath(),
            ]
        )
    return out
