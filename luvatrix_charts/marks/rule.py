from __future__ import annotations

from typing import ClassVar

from luvatrix_charts.marks.base import LineStyle, Mark, RenderContext, finite, value_span
from luvatrix_charts.scene import LineNode


class RuleMark(Mark):
    """A reference line.

    `x` alone spans the full plot height, `y` alone the full width; a
    `x_start`/`x_end` pair with `y` (or `y_start`/`y_end` with `x`) draws a
    bounded segment. Any other combination draws nothing.
    """

    kind: ClassVar[str] = "rule"
    default_line_style: ClassVar[LineStyle] = LineStyle(line_width=1.0, line_cap="butt", line_join="miter")

    def endpoints(self, context: RenderContext) -> tuple[float, float, float, float] | None:
        xs, ys = context.x_scale, context.y_scale
        if self.x is not None and self.y is None and not self._has_y_range():
            px = xs.center(self.x)
            return (px, 0.0, px, context.height)
        if self.y is not None and self.x is None and not self._has_x_range():
            py = ys.center(self.y)
            return (0.0, py, context.width, py)
        if self._has_x_range() and self.y is not None:
            assert self.x_start is not None and self.x_end is not None
            x1, x2 = value_span(xs, self.x_start, self.x_end)
            py = ys.center(self.y)
            return (x1, py, x2, py)
        if self._has_y_range() and self.x is not None:
            assert self.y_start is not None and self.y_end is not None
            y1, y2 = value_span(ys, self.y_start, self.y_end)
            px = xs.center(self.x)
            return (px, y1, px, y2)
        return None

    def render(self, context: RenderContext) -> LineNode | None:
        ends = self.endpoints(context)
        if ends is None or not finite(*ends):
            return None
        x1, y1, x2, y2 = ends
        return LineNode(
            x1=x1,
            y1=y1,
            x2=x2,
            y2=y2,
            stroke=self.resolve_color(context.color_scale, context.style.rule_color),
            stroke_width=self._line_style.line_width or 1.0,
            dash=self._line_style.dash,
            opacity=self._opacity,
        )

    def _has_x_range(self) -> bool:
        return self.x_start is not None and self.x_end is not None

    def _has_y_range(self) -> bool:
        return self.y_start is not None and self.y_end is not None
