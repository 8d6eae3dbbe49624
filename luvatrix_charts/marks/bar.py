from __future__ import annotations

from typing import ClassVar

from luvatrix_charts.marks.base import Mark, RenderContext, baseline, finite, resolve_extent, value_span
from luvatrix_charts.plottable import PlottableValue
from luvatrix_charts.scales import Scale
from luvatrix_charts.scene import RectNode
from luvatrix_charts.sector import MarkDimension


class BarMark(Mark):
    """A bar: a band (or unit width) on one axis, an interval on the other.

    Vertical when the y value is continuous or a `y_start`/`y_end` range is
    set, horizontal when the x value is continuous against a categorical y,
    and a full cell when both values are categorical.
    """

    kind: ClassVar[str] = "bar"

    def orientation(self) -> str | None:
        has_x_range = self.x_start is not None and self.x_end is not None
        has_y_range = self.y_start is not None and self.y_end is not None
        if self.x is not None and (has_y_range or (self.y is not None and self.y.is_continuous)):
            return "vertical"
        if self.y is not None and (has_x_range or (self.x is not None and self.x.is_continuous)):
            return "horizontal"
        if self.x is not None and self.y is not None:
            return "cell"
        return None

    def render(self, context: RenderContext) -> RectNode | None:
        orientation = self.orientation()
        if orientation is None:
            return None
        if orientation == "vertical":
            assert self.x is not None
            left, width = _cross_extent(context.x_scale, self.x, self.width, context.unit_width)
            top, height = _value_extent(
                context.y_scale, self.y, self.y_start, self.y_end, zero_at=baseline(context.y_scale, context.height)
            )
        elif orientation == "horizontal":
            assert self.y is not None
            top, height = _cross_extent(context.y_scale, self.y, self.height, context.unit_height)
            left, width = _value_extent(
                context.x_scale, self.x, self.x_start, self.x_end, zero_at=baseline(context.x_scale, 0.0)
            )
        else:
            assert self.x is not None and self.y is not None
            left, width = _cross_extent(context.x_scale, self.x, self.width, context.unit_width)
            top, height = _cross_extent(context.y_scale, self.y, self.height, context.unit_height)

        if not finite(left, top, width, height):
            return None
        return RectNode(
            x=left,
            y=top,
            width=max(0.0, width),
            height=max(0.0, height),
            fill=self.resolve_color(context.color_scale, context.style.mark_color),
            opacity=self._opacity,
            rx=self._corner_radius if self._corner_radius > 0 else None,
        )


def _cross_extent(scale: Scale, pv: PlottableValue, size: float | MarkDimension | None, unit: float) -> tuple[float, float]:
    """Position and thickness of a bar across its category axis."""

    if pv.type == "nominal":
        band = scale.bandwidth()
        start = scale.position(pv)
        if size is None:
            return (start, band)
        thickness = resolve_extent(size, band)
        return (start + (band - thickness) * 0.5, thickness)
    thickness = resolve_extent(size, unit)
    return (scale.center(pv) - thickness * 0.5, thickness)


def _value_extent(
    scale: Scale,
    pv: PlottableValue | None,
    start: PlottableValue | None,
    end: PlottableValue | None,
    *,
    zero_at: float,
) -> tuple[float, float]:
    """Pixel interval from the zero line to the value, or between a range."""

    if start is not None and end is not None:
        lo, hi = value_span(scale, start, end)
        return (lo, hi - lo)
    if pv is None:
        return (float("nan"), float("nan"))
    pos = scale.position(pv)
    return (min(pos, zero_at), abs(pos - zero_at))
