from __future__ import annotations

from typing import ClassVar

from luvatrix_charts.marks.base import Mark, RenderContext, finite, resolve_extent, value_span
from luvatrix_charts.plottable import PlottableValue
from luvatrix_charts.scales import Scale
from luvatrix_charts.scene import RectNode
from luvatrix_charts.sector import MarkDimension


DEFAULT_EXTENT_PX = 10.0


class RectangleMark(Mark):
    kind: ClassVar[str] = "rectangle"
    default_opacity: ClassVar[float] = 0.3

    def render(self, context: RenderContext) -> RectNode | None:
        left, width = _axis_extent(context.x_scale, self.x, self.x_start, self.x_end, self.width, context.width)
        top, height = _axis_extent(context.y_scale, self.y, self.y_start, self.y_end, self.height, context.height)
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


def _axis_extent(
    scale: Scale,
    pv: PlottableValue | None,
    start: PlottableValue | None,
    end: PlottableValue | None,
    size: float | MarkDimension | None,
    full: float,
) -> tuple[float, float]:
    # Resolved independently per axis: range, then single value, then full plot.
    if start is not None and end is not None:
        lo, hi = value_span(scale, start, end)
        return (lo, hi - lo)
    if pv is not None:
        if pv.type == "nominal":
            band = scale.bandwidth()
            thickness = band if size is None else resolve_extent(size, band)
            return (scale.position(pv) + (band - thickness) * 0.5, thickness)
        thickness = resolve_extent(size, DEFAULT_EXTENT_PX)
        return (scale.center(pv) - thickness * 0.5, thickness)
    return (0.0, full)
