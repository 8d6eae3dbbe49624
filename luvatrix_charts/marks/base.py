from __future__ import annotations

import copy
from dataclasses import dataclass, replace
import math
from typing import Any, Callable, ClassVar

from luvatrix_charts.errors import ChartDataError
from luvatrix_charts.plottable import PlottableValue
from luvatrix_charts.scales import ColorScale, LinearScale, Scale, SymbolScale
from luvatrix_charts.scene import SceneNode, TextNode
from luvatrix_charts.sector import MarkDimension
from luvatrix_charts.style import DEFAULT_STYLE, ChartStyle, coerce_color


STACKING_MODES = ("standard", "normalized", "center", "unstacked")
ANNOTATION_POSITIONS = ("top", "bottom", "leading", "trailing", "overlay")


@dataclass(frozen=True)
class LineStyle:
    line_width: float = 2.0
    dash: tuple[float, ...] | None = None
    line_cap: str = "round"
    line_join: str = "round"


@dataclass(frozen=True)
class Annotation:
    position: str
    content: str | Callable[["Mark"], str]

    def text(self, mark: "Mark") -> str:
        if callable(self.content):
            return str(self.content(mark))
        return str(self.content)


@dataclass(frozen=True)
class RenderContext:
    """Everything a Cartesian mark needs to resolve its geometry."""

    x_scale: Scale
    y_scale: Scale
    width: float
    height: float
    color_scale: ColorScale | None = None
    symbol_scale: SymbolScale | None = None
    style: ChartStyle = DEFAULT_STYLE
    unit_width: float = 10.0
    unit_height: float = 10.0


@dataclass(frozen=True)
class PolarContext:
    center_x: float
    center_y: float
    radius: float
    start_angle: float
    end_angle: float
    color_scale: ColorScale | None = None
    style: ChartStyle = DEFAULT_STYLE


@dataclass(frozen=True)
class PointDatum:
    """Resolved pixel position of one Line/Area mark, before series grouping."""

    x: float
    y: float
    baseline: float | None
    series: Any
    mark: "Mark"


class Mark:
    """Base for every chart mark.

    Marks are mutable builders: each style method updates the mark in place
    and returns it so calls can be chained. A chart never mutates the marks it
    renders; derived variants are produced with `clone`.
    """

    kind: ClassVar[str] = "mark"
    default_opacity: ClassVar[float] = 1.0
    default_line_style: ClassVar[LineStyle] = LineStyle()

    def __init__(
        self,
        *,
        x: PlottableValue | None = None,
        y: PlottableValue | None = None,
        x_start: PlottableValue | None = None,
        x_end: PlottableValue | None = None,
        y_start: PlottableValue | None = None,
        y_end: PlottableValue | None = None,
        series: PlottableValue | None = None,
        width: float | MarkDimension | None = None,
        height: float | MarkDimension | None = None,
        stacking: str = "standard",
    ) -> None:
        self.x = x
        self.y = y
        self.x_start = x_start
        self.x_end = x_end
        self.y_start = y_start
        self.y_end = y_end
        self.series = series
        self.width = width
        self.height = height

        self.foreground_color: str | None = None
        self.foreground_field: PlottableValue | None = None
        self._opacity = self.default_opacity
        self._corner_radius = 0.0
        self._annotation: Annotation | None = None
        self._symbol: str = "circle"
        self.symbol_field: PlottableValue | None = None
        self._symbol_size = 64.0
        self._line_style = self.default_line_style
        self._interpolation = "linear"
        self._stacking = _check_stacking(stacking)

    def __repr__(self) -> str:
        slots = ", ".join(
            f"{name}={getattr(self, name).raw_value!r}"
            for name in ("x", "y", "x_start", "x_end", "y_start", "y_end")
            if getattr(self, name) is not None
        )
        return f"{type(self).__name__}({slots})"

    def foreground_style(self, style: Any = None, *, by: PlottableValue | None = None) -> "Mark":
        if by is not None:
            self.foreground_field = by
        elif isinstance(style, PlottableValue):
            self.foreground_field = style
        elif style is not None:
            self.foreground_color = coerce_color(style)
        return self

    def opacity(self, amount: float) -> "Mark":
        amount = float(amount)
        if amount < 0.0 or amount > 1.0:
            raise ChartDataError("opacity must be in [0, 1]")
        self._opacity = amount
        return self

    def corner_radius(self, radius: float) -> "Mark":
        self._corner_radius = max(0.0, float(radius))
        return self

    def annotation(self, position: Any = "top", content: Any = None) -> "Mark":
        if content is None and position not in ANNOTATION_POSITIONS:
            position, content = "top", position
        if position not in ANNOTATION_POSITIONS:
            raise ChartDataError(f"unsupported annotation position: {position!r}")
        self._annotation = None if content is None else Annotation(position=position, content=content)
        return self

    def symbol(self, name: str | None = None, *, by: PlottableValue | None = None) -> "Mark":
        if by is not None:
            self.symbol_field = by
        elif name is not None:
            self._symbol = str(name)
        return self

    def symbol_size(self, area: float) -> "Mark":
        self._symbol_size = max(0.0, float(area))
        return self

    def line_style(
        self,
        style: LineStyle | None = None,
        *,
        line_width: float | None = None,
        dash: Any = None,
        line_cap: str | None = None,
        line_join: str | None = None,
    ) -> "Mark":
        merged = style if style is not None else self._line_style
        if line_width is not None:
            merged = replace(merged, line_width=max(0.0, float(line_width)))
        if dash is not None:
            merged = replace(merged, dash=tuple(float(d) for d in dash) or None)
        if line_cap is not None:
            merged = replace(merged, line_cap=line_cap)
        if line_join is not None:
            merged = replace(merged, line_join=line_join)
        self._line_style = merged
        return self

    def interpolation_method(self, method: str) -> "Mark":
        self._interpolation = str(method)
        return self

    def stacking(self, mode: str) -> "Mark":
        self._stacking = _check_stacking(mode)
        return self

    def clone(self, **overrides: Any) -> "Mark":
        cloned = copy.copy(self)
        for name, item in overrides.items():
            if not hasattr(cloned, name):
                raise AttributeError(f"{type(self).__name__} has no slot {name!r}")
            setattr(cloned, name, item)
        return cloned

    @property
    def stacking_mode(self) -> str:
        return self._stacking

    @property
    def interpolation(self) -> str:
        return self._interpolation

    @property
    def style_line(self) -> LineStyle:
        return self._line_style

    @property
    def style_opacity(self) -> float:
        return self._opacity

    def x_values(self) -> list[PlottableValue]:
        return [v for v in (self.x, self.x_start, self.x_end) if v is not None]

    def y_values(self) -> list[PlottableValue]:
        return [v for v in (self.y, self.y_start, self.y_end) if v is not None]

    def series_key(self) -> Any:
        if self.series is not None:
            return self.series.raw_value
        if self.foreground_field is not None:
            return self.foreground_field.raw_value
        return "default"

    def resolve_color(self, color_scale: ColorScale | None, default: str) -> str:
        if self.foreground_field is not None and color_scale is not None:
            mapped = color_scale(self.foreground_field.raw_value)
            if mapped is not None:
                return mapped
        return self.foreground_color or default

    def render(self, context: Any) -> SceneNode | None:
        return None

    def annotation_node(
        self,
        bounds: tuple[float, float, float, float] | None,
        style: ChartStyle = DEFAULT_STYLE,
    ) -> TextNode | None:
        if self._annotation is None or bounds is None:
            return None
        x0, y0, x1, y1 = bounds
        cx = (x0 + x1) * 0.5
        cy = (y0 + y1) * 0.5
        size = style.font_size_px
        gap = 4.0
        position = self._annotation.position
        if position == "top":
            x, y, anchor = cx, y0 - gap, "middle"
        elif position == "bottom":
            x, y, anchor = cx, y1 + gap + size, "middle"
        elif position == "leading":
            x, y, anchor = x0 - gap, cy + size / 3.0, "end"
        elif position == "trailing":
            x, y, anchor = x1 + gap, cy + size / 3.0, "start"
        else:
            x, y, anchor = cx, cy + size / 3.0, "middle"
        return TextNode(
            x=x,
            y=y,
            content=self._annotation.text(self),
            color=style.label_color,
            anchor=anchor,
            size=size,
            font_family=style.font_family,
        )


def value_span(scale: Scale, start: PlottableValue, end: PlottableValue) -> tuple[float, float]:
    """Pixel interval covered from `start` to `end`, inclusive of an end band."""

    a = scale.position(start)
    b = scale.position(end)
    if end.type == "nominal":
        b += scale.bandwidth()
    return (min(a, b), max(a, b))


def baseline(scale: Scale, extent: float) -> float:
    """Pixel of the zero line, clamped into the scale's domain."""

    if isinstance(scale, LinearScale):
        return scale(scale.clamp(0.0))
    return extent


def resolve_extent(dimension: float | MarkDimension | None, available: float) -> float:
    if dimension is None:
        return available
    if isinstance(dimension, MarkDimension):
        return dimension.resolve(available)
    return max(0.0, float(dimension))


def finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def _check_stacking(mode: str) -> str:
    if mode not in STACKING_MODES:
        raise ChartDataError(f"unsupported stacking mode: {mode!r}")
    return mode
