from __future__ import annotations

from typing import ClassVar

from luvatrix_charts.marks.base import Mark, RenderContext, finite
from luvatrix_charts.scene import SceneNode
from luvatrix_charts.symbols import symbol_node, symbol_radius


class PointMark(Mark):
    kind: ClassVar[str] = "point"

    def render(self, context: RenderContext) -> SceneNode | None:
        if self.x is None or self.y is None:
            return None
        px = context.x_scale.center(self.x)
        py = context.y_scale.center(self.y)
        if not finite(px, py):
            return None
        shape = self._symbol
        if self.symbol_field is not None and context.symbol_scale is not None:
            shape = context.symbol_scale(self.symbol_field.raw_value) or shape
        return symbol_node(
            shape,
            px,
            py,
            symbol_radius(self._symbol_size),
            self.resolve_color(context.color_scale, context.style.mark_color),
            opacity=self._opacity,
        )
