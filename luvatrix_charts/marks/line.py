from __future__ import annotations

from typing import ClassVar

from luvatrix_charts.marks.base import LineStyle, Mark, PointDatum, RenderContext, baseline, finite


class LineMark(Mark):
    """One vertex of a series line.

    Line marks carry no geometry of their own: the chart groups them by
    series and draws one interpolated path per group.
    """

    kind: ClassVar[str] = "line"
    default_line_style: ClassVar[LineStyle] = LineStyle(line_width=2.0, line_cap="round", line_join="round")

    def point_data(self, context: RenderContext) -> PointDatum | None:
        if self.x is None or self.y is None:
            return None
        px = context.x_scale.center(self.x)
        py = context.y_scale.center(self.y)
        if not finite(px, py):
            return None
        return PointDatum(x=px, y=py, baseline=None, series=self.series_key(), mark=self)


class AreaMark(Mark):
    """One vertex of a filled series, closed down to its baseline.

    The baseline is `y_start` when given, otherwise the zero line. A mark with
    only `y_start`/`y_end` describes a band between the two values.
    """

    kind: ClassVar[str] = "area"
    default_opacity: ClassVar[float] = 0.3

    def point_data(self, context: RenderContext) -> PointDatum | None:
        if self.x is None:
            return None
        top = self.y if self.y is not None else self.y_end
        if top is None:
            return None
        px = context.x_scale.center(self.x)
        py = context.y_scale.center(top)
        if self.y_start is not None:
            base = context.y_scale.center(self.y_start)
        else:
            base = baseline(context.y_scale, context.height)
        if not finite(px, py, base):
            return None
        return PointDatum(x=px, y=py, baseline=base, series=self.series_key(), mark=self)
