from __future__ import annotations

import math
from typing import Any, ClassVar

from luvatrix_charts.marks.base import Mark, PolarContext
from luvatrix_charts.plottable import PlottableValue
from luvatrix_charts.scene import PathNode
from luvatrix_charts.sector import (
    MarkDimension,
    apply_angular_inset,
    polar_to_cartesian,
    resolve_radius,
    sector_commands,
)


class SectorMark(Mark):
    """One slice of a pie or donut chart.

    The chart allocates the slice's start and end angle from the share of
    `angle` in the total; radii are resolved against the available radius.
    """

    kind: ClassVar[str] = "sector"

    def __init__(
        self,
        *,
        angle: PlottableValue | None = None,
        inner_radius: MarkDimension | float | None = None,
        outer_radius: MarkDimension | float | None = None,
        angular_inset: float = 0.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.angle = angle
        self.inner_radius = inner_radius if inner_radius is not None else MarkDimension.ratio(0.0)
        self.outer_radius = outer_radius if outer_radius is not None else MarkDimension.ratio(1.0)
        self.angular_inset = max(0.0, float(angular_inset))

    def angle_value(self) -> float:
        if self.angle is None or self.angle.type == "nominal":
            return 0.0
        return self.angle.numeric_value

    def radii(self, available: float) -> tuple[float, float]:
        inner = resolve_radius(self.inner_radius, available, 0.0)
        outer = resolve_radius(self.outer_radius, available, available)
        return (inner, outer)

    def centroid(self, context: PolarContext) -> tuple[float, float]:
        inner, outer = self.radii(context.radius)
        mid = (context.start_angle + context.end_angle) * 0.5
        return polar_to_cartesian(context.center_x, context.center_y, (inner + outer) * 0.5, mid)

    def render(self, context: PolarContext) -> PathNode | None:
        if self.angle is None:
            return None
        inner, outer = self.radii(context.radius)
        start, end = apply_angular_inset(context.start_angle, context.end_angle, self.angular_inset)
        if not all(math.isfinite(v) for v in (inner, outer, start, end)):
            return None
        commands = sector_commands(context.center_x, context.center_y, inner, outer, start, end)
        if not commands:
            return None
        color = self.resolve_color(context.color_scale, context.style.mark_color)
        rounded = self._corner_radius > 0
        return PathNode(
            commands=tuple(commands),
            fill=color,
            stroke=color if rounded else None,
            stroke_width=1.0,
            opacity=self._opacity,
            line_join="round" if rounded else None,
        )
