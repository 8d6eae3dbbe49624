from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import inspect
import logging
import math
from pathlib import Path
from typing import Any, Callable, Sequence

import numpy as np

from luvatrix_charts.adapters import normalize_records
from luvatrix_charts.config import (
    AxisConfig,
    LegendConfig,
    PlotInsets,
    ScaleConfig,
    resolve_axis_config,
    resolve_legend_config,
    resolve_scale_config,
)
from luvatrix_charts.errors import ChartDataError
from luvatrix_charts.interpolation import area_commands, interpolate
from luvatrix_charts.marks import Mark, PointDatum, PolarContext, RenderContext
from luvatrix_charts.plottable import PlottableValue, value
from luvatrix_charts.scales import (
    BandScale,
    ColorScale,
    LinearScale,
    Scale,
    SymbolScale,
    build_scale,
    format_tick,
    index_of,
    unique,
)
from luvatrix_charts.scene import GroupNode, LineNode, PathNode, RectNode, Scene, SceneNode, TextNode, node_bounds
from luvatrix_charts.sector import TAU, allocate_angles
from luvatrix_charts.style import DEFAULT_PALETTE, DEFAULT_STYLE, ChartStyle, coerce_color, validate_chart_style
from luvatrix_charts.view import View


LOGGER = logging.getLogger(__name__)

DEFAULT_WIDTH = 400.0
DEFAULT_HEIGHT = 300.0
PIE_MARGIN_PX = 20.0
LEGEND_BAND_PX = 24.0
LEGEND_ITEM_GAP_PX = 16.0
LEGEND_SWATCH_GAP_PX = 6.0
UNIT_FILL_RATIO = 0.8

# Back to front, independent of declaration order.
RENDER_ORDER = ("rectangle", "area", "bar", "rule", "line", "point")


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str


@dataclass(frozen=True)
class CartesianLayout:
    plot_x0: float
    plot_y0: float
    plot_w: float
    plot_h: float
    x_scale: Scale
    y_scale: Scale
    color_scale: ColorScale
    symbol_scale: SymbolScale
    legend_visible: bool
    unit_width: float
    unit_height: float
    marks: tuple[Mark, ...] = ()


@dataclass(frozen=True)
class PolarLayout:
    center_x: float
    center_y: float
    radius: float
    spans: tuple[tuple[float, float], ...]
    color_scale: ColorScale
    legend_visible: bool


class Chart(View):
    """Declarative chart container.

    Built from either `(data, builder)`, a mark or list of marks, or a
    zero-argument builder returning marks. Every `render()` rebuilds the marks
    and derives scales, series and layout from scratch; only the
    configuration set through the `chart_*` modifiers persists between
    renders.
    """

    def __init__(
        self,
        data_or_content: Any = None,
        builder: Callable[..., Any] | None = None,
        *,
        palette: Sequence[Any] = DEFAULT_PALETTE,
        style: ChartStyle | Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self._data: list[Any] = []
        self._builder: Callable[..., Any] | None = None
        self._builder_takes_index = False
        self._content: Any = None

        if builder is not None:
            if not callable(builder):
                raise ChartDataError("mark builder must be callable")
            self._data = normalize_records(data_or_content)
            self._builder = builder
            self._builder_takes_index = _accepts_index(builder)
        elif data_or_content is None or callable(data_or_content) or isinstance(data_or_content, Mark):
            self._content = data_or_content
        elif isinstance(data_or_content, Iterable) and not isinstance(data_or_content, (str, bytes, Mapping)):
            items = list(data_or_content)
            if not all(isinstance(item, Mark) for item in _flatten(items)):
                raise ChartDataError("chart data requires a mark builder")
            self._content = items
        else:
            raise ChartDataError(f"unsupported chart content: {type(data_or_content)!r}")

        self._x_axis = AxisConfig()
        self._y_axis = AxisConfig()
        self._x_scale_config = ScaleConfig()
        self._y_scale_config = ScaleConfig()
        self._legend = LegendConfig()
        self._insets = PlotInsets()
        self._chart_background: str | None = None
        self._plot_background: str | None = None
        self._palette: tuple[str, ...] = tuple(coerce_color(c) for c in palette) or DEFAULT_PALETTE
        self._color_domain: tuple[Any, ...] = ()
        self._color_mapping: tuple[tuple[Any, str], ...] = ()
        self._symbol_domain: tuple[Any, ...] = ()
        if isinstance(style, ChartStyle):
            self._style = style
        else:
            self._style = validate_chart_style(style) if style else DEFAULT_STYLE

    # -- configuration -----------------------------------------------------

    def chart_x_axis(self, config: Any) -> "Chart":
        self._x_axis = resolve_axis_config(self._x_axis, config)
        return self

    def chart_y_axis(self, config: Any) -> "Chart":
        self._y_axis = resolve_axis_config(self._y_axis, config)
        return self

    def chart_x_scale(
        self,
        config: ScaleConfig | Mapping[str, Any] | None = None,
        *,
        domain: Any = None,
        type: str | None = None,
        nice: bool | None = None,
    ) -> "Chart":
        self._x_scale_config = _merge_scale(self._x_scale_config, config, domain=domain, type=type, nice=nice)
        return self

    def chart_y_scale(
        self,
        config: ScaleConfig | Mapping[str, Any] | None = None,
        *,
        domain: Any = None,
        type: str | None = None,
        nice: bool | None = None,
    ) -> "Chart":
        self._y_scale_config = _merge_scale(self._y_scale_config, config, domain=domain, type=type, nice=nice)
        return self

    def chart_legend(self, config: Any = None, *, position: str | None = None) -> "Chart":
        self._legend = resolve_legend_config(self._legend, config, position=position)
        return self

    def chart_background(self, color: Any) -> "Chart":
        self._chart_background = coerce_color(color)
        return self

    def chart_plot_style(
        self,
        background: Any = None,
        *,
        top: float | None = None,
        leading: float | None = None,
        bottom: float | None = None,
        trailing: float | None = None,
    ) -> "Chart":
        if background is not None:
            self._plot_background = coerce_color(background)
        edges = {"top": top, "leading": leading, "bottom": bottom, "trailing": trailing}
        current = {
            "top": self._insets.top,
            "leading": self._insets.leading,
            "bottom": self._insets.bottom,
            "trailing": self._insets.trailing,
        }
        for name, amount in edges.items():
            if amount is None:
                continue
            if amount < 0:
                raise ChartDataError(f"plot inset `{name}` must be >= 0")
            current[name] = float(amount)
        self._insets = PlotInsets(**current)
        return self

    def chart_foreground_style_scale(
        self,
        mapping: Mapping[Any, Any] | None = None,
        *,
        domain: Sequence[Any] | None = None,
        palette: Sequence[Any] | None = None,
    ) -> "Chart":
        """Pin the color scale: explicit value->color pairs, a domain order, or a palette."""

        if mapping is not None:
            self._color_mapping = tuple((key, coerce_color(color)) for key, color in mapping.items())
            self._color_domain = tuple(mapping.keys())
        if domain is not None:
            self._color_domain = unique(domain)
        if palette is not None:
            colors = tuple(coerce_color(c) for c in palette)
            if not colors:
                raise ChartDataError("palette must not be empty")
            self._palette = colors
        return self

    def chart_symbol_scale(self, domain: Sequence[Any]) -> "Chart":
        self._symbol_domain = unique(domain)
        return self

    def chart_style(self, **overrides: Any) -> "Chart":
        self._style = validate_chart_style(overrides)
        return self

    def frame_size(self) -> tuple[float, float]:
        width = self._frame_width if self._frame_width is not None else DEFAULT_WIDTH
        height = self._frame_height if self._frame_height is not None else DEFAULT_HEIGHT
        return (width, height)

    # -- building ----------------------------------------------------------

    def build_marks(self) -> list[Mark]:
        marks: list[Mark] = []
        if self._builder is not None:
            for idx, item in enumerate(self._data):
                result = self._builder(item, idx) if self._builder_takes_index else self._builder(item)
                _collect(result, marks)
        elif self._content is not None:
            content = self._content() if callable(self._content) else self._content
            _collect(content, marks)
        return marks

    def is_polar(self, marks: Sequence[Mark]) -> bool:
        return any(m.kind == "sector" for m in marks)

    # -- rendering ---------------------------------------------------------

    def render(self) -> Scene:
        marks = self.build_marks()
        width, height = self.frame_size()
        if self.is_polar(marks):
            root = self._render_polar(marks, width, height)
        else:
            root = self._render_cartesian(marks, width, height)
        return self._apply_modifiers(Scene(width=width, height=height, root=root))

    def to_svg(self) -> str:
        from luvatrix_charts.render.svg import to_svg

        return to_svg(self.render())

    def to_rgba(self) -> np.ndarray:
        from luvatrix_charts.raster import rasterize

        return rasterize(self.render())

    def save_png(self, path: str | Path) -> Path:
        from luvatrix_charts.raster import save_png

        return save_png(self.render(), path)

    def cartesian_layout(self, marks: Sequence[Mark]) -> CartesianLayout:
        width, height = self.frame_size()
        marks = stack_bars(marks)
        color_scale = self._color_scale(marks)
        legend_visible = self._legend.is_visible(len(color_scale.domain))
        top, leading, bottom, trailing = self._reserve_legend(
            (self._insets.top, self._insets.leading, self._insets.bottom, self._insets.trailing),
            color_scale,
            legend_visible,
        )
        plot_w = max(1.0, width - leading - trailing)
        plot_h = max(1.0, height - top - bottom)

        x_values = [v for m in marks for v in m.x_values()]
        y_values = [v for m in marks for v in m.y_values()]
        x_scale = build_scale(
            x_values, plot_w, config=self._x_scale_config, tick_count=self._x_axis.tick_count
        )
        y_scale = build_scale(
            y_values, plot_h, vertical=True, config=self._y_scale_config, tick_count=self._y_axis.tick_count
        )
        symbol_values = [m.symbol_field.raw_value for m in marks if m.symbol_field is not None]
        symbol_scale = SymbolScale(domain=unique(list(self._symbol_domain) + symbol_values))
        return CartesianLayout(
            plot_x0=leading,
            plot_y0=top,
            plot_w=plot_w,
            plot_h=plot_h,
            x_scale=x_scale,
            y_scale=y_scale,
            color_scale=color_scale,
            symbol_scale=symbol_scale,
            legend_visible=legend_visible,
            unit_width=_unit_extent(x_values, plot_w),
            unit_height=_unit_extent(y_values, plot_h),
            marks=tuple(marks),
        )

    def polar_layout(self, marks: Sequence[Mark]) -> PolarLayout:
        width, height = self.frame_size()
        sectors = [m for m in marks if m.kind == "sector"]
        color_scale = self._color_scale(sectors)
        legend_visible = self._legend.is_visible(len(color_scale.domain))
        top, leading, bottom, trailing = self._reserve_legend((0.0, 0.0, 0.0, 0.0), color_scale, legend_visible)
        avail_w = max(0.0, width - leading - trailing)
        avail_h = max(0.0, height - top - bottom)
        spans = allocate_angles([m.angle_value() for m in sectors])  # type: ignore[attr-defined]
        if sectors and not spans:
            LOGGER.debug("pie chart with zero total angle; no sectors rendered")
        return PolarLayout(
            center_x=leading + avail_w / 2.0,
            center_y=top + avail_h / 2.0,
            radius=max(0.0, min(avail_w, avail_h) / 2.0 - PIE_MARGIN_PX),
            spans=tuple(spans),
            color_scale=color_scale,
            legend_visible=legend_visible,
        )

    def _render_cartesian(self, marks: list[Mark], width: float, height: float) -> GroupNode:
        layout = self.cartesian_layout(marks)
        context = RenderContext(
            x_scale=layout.x_scale,
            y_scale=layout.y_scale,
            width=layout.plot_w,
            height=layout.plot_h,
            color_scale=layout.color_scale,
            symbol_scale=layout.symbol_scale,
            style=self._style,
            unit_width=layout.unit_width,
            unit_height=layout.unit_height,
        )
        plot_children: list[SceneNode] = []
        if self._plot_background is not None:
            plot_children.append(
                RectNode(x=0.0, y=0.0, width=layout.plot_w, height=layout.plot_h, fill=self._plot_background)
            )
        plot_children.extend(self._grid_lines(layout))

        by_kind: dict[str, list[Mark]] = {kind: [] for kind in RENDER_ORDER}
        for mark in layout.marks:
            bucket = by_kind.get(mark.kind)
            if bucket is None:
                LOGGER.debug("mark kind %r has no Cartesian geometry; skipped", mark.kind)
                continue
            bucket.append(mark)

        annotations: list[SceneNode] = []
        for kind in RENDER_ORDER:
            if kind in ("line", "area"):
                nodes = self._render_series(by_kind[kind], context, annotations, filled=(kind == "area"))
            else:
                nodes = self._render_each(by_kind[kind], context, annotations)
            plot_children.append(GroupNode(children=tuple(nodes), role=f"{kind}-marks"))
        if annotations:
            plot_children.append(GroupNode(children=tuple(annotations), role="annotations"))

        children: list[SceneNode] = []
        if self._chart_background is not None:
            children.append(RectNode(x=0.0, y=0.0, width=width, height=height, fill=self._chart_background))
        children.append(
            GroupNode(children=tuple(plot_children), translate=(layout.plot_x0, layout.plot_y0), role="plot")
        )
        if self._x_axis.visible:
            children.append(self._x_axis_group(layout))
        if self._y_axis.visible:
            children.append(self._y_axis_group(layout))
        if layout.legend_visible:
            children.append(self._legend_group(layout.color_scale, width, height))
        return GroupNode(children=tuple(children), role="chart")

    def _render_each(self, marks: list[Mark], context: RenderContext, annotations: list[SceneNode]) -> list[SceneNode]:
        nodes: list[SceneNode] = []
        for mark in marks:
            node = mark.render(context)
            if node is None:
                LOGGER.debug("%r produced no geometry; skipped", mark)
                continue
            nodes.append(node)
            note = mark.annotation_node(node_bounds(node), self._style)
            if note is not None:
                annotations.append(note)
        return nodes

    def _render_series(
        self,
        marks: list[Mark],
        context: RenderContext,
        annotations: list[SceneNode],
        *,
        filled: bool,
    ) -> list[SceneNode]:
        keys: list[Any] = []
        groups: list[list[PointDatum]] = []
        for mark in marks:
            datum = mark.point_data(context)  # type: ignore[attr-defined]
            if datum is None:
                LOGGER.debug("%r produced no point; skipped", mark)
                continue
            idx = index_of(keys, datum.series)
            if idx < 0:
                keys.append(datum.series)
                groups.append([])
                idx = len(keys) - 1
            groups[idx].append(datum)
            note = mark.annotation_node((datum.x, datum.y, datum.x, datum.y), self._style)
            if note is not None:
                annotations.append(note)

        nodes: list[SceneNode] = []
        for points in groups:
            points = sorted(points, key=lambda p: p.x)
            lead = points[0].mark
            xy = [(p.x, p.y) for p in points]
            color = lead.resolve_color(context.color_scale, self._style.mark_color)
            line = lead.style_line
            if filled:
                bases = [p.baseline if p.baseline is not None else context.height for p in points]
                commands = area_commands(xy, lead.interpolation, bases)
                if not commands:
                    continue
                nodes.append(PathNode(commands=tuple(commands), fill=color, opacity=lead.style_opacity))
                continue
            commands = interpolate(xy, lead.interpolation)
            if not commands:
                continue
            nodes.append(
                PathNode(
                    commands=tuple(commands),
                    fill=None,
                    stroke=color,
                    stroke_width=line.line_width,
                    opacity=lead.style_opacity,
                    dash=line.dash,
                    line_cap=line.line_cap,
                    line_join=line.line_join,
                )
            )
        return nodes

    def _render_polar(self, marks: list[Mark], width: float, height: float) -> GroupNode:
        sectors = [m for m in marks if m.kind == "sector"]
        if len(sectors) != len(marks):
            LOGGER.debug("polar chart ignores %d non-sector marks", len(marks) - len(sectors))
        layout = self.polar_layout(marks)
        slices: list[SceneNode] = []
        annotations: list[SceneNode] = []
        for mark, (start, end) in zip(sectors, layout.spans, strict=False):
            context = PolarContext(
                center_x=layout.center_x,
                center_y=layout.center_y,
                radius=layout.radius,
                start_angle=start,
                end_angle=end,
                color_scale=layout.color_scale,
                style=self._style,
            )
            node = mark.render(context)
            if node is None:
                continue
            slices.append(node)
            cx, cy = mark.centroid(context)  # type: ignore[attr-defined]
            note = mark.annotation_node((cx, cy, cx, cy), self._style)
            if note is not None:
                annotations.append(note)

        children: list[SceneNode] = []
        if self._chart_background is not None:
            children.append(RectNode(x=0.0, y=0.0, width=width, height=height, fill=self._chart_background))
        children.append(GroupNode(children=tuple(slices), role="sector-marks"))
        if annotations:
            children.append(GroupNode(children=tuple(annotations), role="annotations"))
        if layout.legend_visible:
            children.append(self._legend_group(layout.color_scale, width, height))
        return GroupNode(children=tuple(children), role="chart")

    # -- axes, grid, legend -------------------------------------------------

    def _grid_lines(self, layout: CartesianLayout) -> list[SceneNode]:
        lines: list[SceneNode] = []
        color = self._style.grid_color
        if self._y_axis.grid_lines and isinstance(layout.y_scale, LinearScale):
            for tick, _ in self._axis_ticks(layout.y_scale, self._y_axis):
                py = _tick_position(layout.y_scale, tick)
                lines.append(LineNode(x1=0.0, y1=py, x2=layout.plot_w, y2=py, stroke=color))
        if self._x_axis.grid_lines and isinstance(layout.x_scale, LinearScale):
            for tick, _ in self._axis_ticks(layout.x_scale, self._x_axis):
                px = _tick_position(layout.x_scale, tick)
                lines.append(LineNode(x1=px, y1=0.0, x2=px, y2=layout.plot_h, stroke=color))
        return [GroupNode(children=tuple(lines), role="grid", z_index=-1)] if lines else []

    def _axis_ticks(self, scale: Scale, axis: AxisConfig) -> list[tuple[Any, str]]:
        """Visible `(tick, label)` pairs for one axis."""

        if axis.tick_values is not None:
            ticks = list(axis.tick_values)
            labels = [_tick_label(scale, t) for t in ticks]
        else:
            ticks = scale.ticks(axis.tick_count)
            labels = scale.tick_labels(ticks)
        if axis.format_label is not None:
            labels = [str(axis.format_label(t)) for t in ticks]
        out: list[tuple[Any, str]] = []
        eps = 1e-6 * max(1.0, scale.size)
        for tick, label in zip(ticks, labels, strict=False):
            pos = _tick_position(scale, tick)
            if not math.isfinite(pos) or pos < -eps or pos > scale.size + eps:
                continue
            out.append((tick, label))
        return out

    def _x_axis_group(self, layout: CartesianLayout) -> GroupNode:
        style = self._style
        y = layout.plot_y0 + layout.plot_h
        x0 = layout.plot_x0
        nodes: list[SceneNode] = [LineNode(x1=x0, y1=y, x2=x0 + layout.plot_w, y2=y, stroke=style.axis_color)]
        for tick, label in self._axis_ticks(layout.x_scale, self._x_axis):
            px = x0 + _tick_position(layout.x_scale, tick)
            nodes.append(LineNode(x1=px, y1=y, x2=px, y2=y + style.tick_length_px, stroke=style.axis_color))
            nodes.append(
                TextNode(
                    x=px,
                    y=y + style.tick_length_px + style.font_size_px + 2.0,
                    content=label,
                    color=style.label_color,
                    anchor="middle",
                    size=style.font_size_px,
                    font_family=style.font_family,
                )
            )
        if self._x_axis.label:
            nodes.append(
                TextNode(
                    x=x0 + layout.plot_w / 2.0,
                    y=y + style.tick_length_px + style.font_size_px * 2.0 + 8.0,
                    content=self._x_axis.label,
                    color=style.label_color,
                    anchor="middle",
                    size=style.font_size_px,
                    font_family=style.font_family,
                )
            )
        return GroupNode(children=tuple(nodes), role="x-axis")

    def _y_axis_group(self, layout: CartesianLayout) -> GroupNode:
        style = self._style
        x = layout.plot_x0
        y0 = layout.plot_y0
        nodes: list[SceneNode] = [LineNode(x1=x, y1=y0, x2=x, y2=y0 + layout.plot_h, stroke=style.axis_color)]
        for tick, label in self._axis_ticks(layout.y_scale, self._y_axis):
            py = y0 + _tick_position(layout.y_scale, tick)
            nodes.append(LineNode(x1=x - style.tick_length_px, y1=py, x2=x, y2=py, stroke=style.axis_color))
            nodes.append(
                TextNode(
                    x=x - style.tick_length_px - 4.0,
                    y=py + style.font_size_px / 3.0,
                    content=label,
                    color=style.label_color,
                    anchor="end",
                    size=style.font_size_px,
                    font_family=style.font_family,
                )
            )
        if self._y_axis.label:
            nodes.append(
                TextNode(
                    x=style.font_size_px,
                    y=y0 + layout.plot_h / 2.0,
                    content=self._y_axis.label,
                    color=style.label_color,
                    anchor="middle",
                    size=style.font_size_px,
                    font_family=style.font_family,
                    rotate=-90,
                )
            )
        return GroupNode(children=tuple(nodes), role="y-axis")

    def legend_entries(self, color_scale: ColorScale) -> list[LegendEntry]:
        entries = []
        for item in color_scale.domain:
            color = color_scale(item) or self._style.mark_color
            entries.append(LegendEntry(label=_display(item), color=color))
        return entries

    def _legend_group(self, color_scale: ColorScale, width: float, height: float) -> GroupNode:
        style = self._style
        entries = self.legend_entries(color_scale)
        swatch = style.legend_swatch_px
        widths = [swatch + LEGEND_SWATCH_GAP_PX + _text_width(e.label, style.font_size_px) for e in entries]
        nodes: list[SceneNode] = []
        position = self._legend.position
        if position in ("top", "bottom"):
            total = sum(widths) + LEGEND_ITEM_GAP_PX * max(0, len(entries) - 1)
            x = max(0.0, (width - total) / 2.0)
            yc = LEGEND_BAND_PX / 2.0 if position == "top" else height - LEGEND_BAND_PX / 2.0
            for entry, item_w in zip(entries, widths, strict=False):
                nodes.extend(_legend_item(entry, x, yc, style))
                x += item_w + LEGEND_ITEM_GAP_PX
        else:
            column_w = max(widths, default=0.0)
            x = 8.0 if position == "leading" else max(0.0, width - column_w - 8.0)
            yc = self._insets.top + swatch / 2.0
            for entry in entries:
                nodes.extend(_legend_item(entry, x, yc, style))
                yc += swatch + LEGEND_SWATCH_GAP_PX
        return GroupNode(children=tuple(nodes), role="legend", z_index=1)

    def _reserve_legend(
        self,
        insets: tuple[float, float, float, float],
        color_scale: ColorScale,
        legend_visible: bool,
    ) -> tuple[float, float, float, float]:
        top, leading, bottom, trailing = insets
        if not legend_visible:
            return insets
        position = self._legend.position
        if position == "top":
            return (top + LEGEND_BAND_PX, leading, bottom, trailing)
        if position == "bottom":
            return (top, leading, bottom + LEGEND_BAND_PX, trailing)
        size = self._style.font_size_px
        column_w = max(
            (_text_width(e.label, size) for e in self.legend_entries(color_scale)),
            default=0.0,
        )
        band = column_w + self._style.legend_swatch_px + LEGEND_SWATCH_GAP_PX + 16.0
        if position == "leading":
            return (top, leading + band, bottom, trailing)
        return (top, leading, bottom, trailing + band)

    def _color_scale(self, marks: Sequence[Mark]) -> ColorScale:
        observed = [m.foreground_field.raw_value for m in marks if m.foreground_field is not None]
        return ColorScale.discover(
            observed,
            palette=self._palette,
            preferred=self._color_domain,
            mapping=self._color_mapping,
        )

    # -- hit testing -------------------------------------------------------

    def value_at(self, px: float, py: float) -> tuple[Any, Any] | None:
        """Data values under a chart-space pixel.

        Cartesian charts return `(x, y)` from the inverted scales; pie charts
        return `(category, angle value)` of the slice under the pixel.
        """

        top, leading, _, _ = self._outer_padding
        px -= leading
        py -= top
        marks = self.build_marks()
        if self.is_polar(marks):
            return self._sector_at(marks, px, py)
        layout = self.cartesian_layout(marks)
        lx = px - layout.plot_x0
        ly = py - layout.plot_y0
        if lx < 0 or ly < 0 or lx > layout.plot_w or ly > layout.plot_h:
            return None
        return (layout.x_scale.invert(lx), layout.y_scale.invert(ly))

    def tap(self, px: float, py: float) -> list[Any]:
        hit = self.value_at(px, py)
        if hit is None:
            return []
        return self.dispatch("tap", *hit)

    def _sector_at(self, marks: Sequence[Mark], px: float, py: float) -> tuple[Any, Any] | None:
        layout = self.polar_layout(marks)
        dx = px - layout.center_x
        dy = py - layout.center_y
        dist = math.hypot(dx, dy)
        angle = math.atan2(dy, dx) + math.pi / 2.0
        if angle < 0:
            angle += TAU
        sectors = [m for m in marks if m.kind == "sector"]
        for mark, (start, end) in zip(sectors, layout.spans, strict=False):
            inner, outer = mark.radii(layout.radius)  # type: ignore[attr-defined]
            if start <= angle < end and inner <= dist <= outer:
                category = mark.foreground_field.raw_value if mark.foreground_field is not None else None
                return (category, mark.angle.raw_value)  # type: ignore[attr-defined]
        return None


def stack_bars(marks: Sequence[Mark]) -> list[Mark]:
    """Stack bars that share a category, returning ranged clones.

    Only bars with a categorical band axis and a single continuous value are
    stacked, and only when more than one bar lands in the same category. The
    stacking mode of the first bar in a category applies to the whole stack.
    """

    out = list(marks)
    groups: dict[str, tuple[list[Any], list[list[int]]]] = {"vertical": ([], []), "horizontal": ([], [])}
    for idx, mark in enumerate(out):
        if mark.kind != "bar" or mark.stacking_mode == "unstacked":
            continue
        orientation = _stackable_orientation(mark)
        if orientation is None:
            continue
        category = (mark.x if orientation == "vertical" else mark.y).raw_value  # type: ignore[union-attr]
        keys, members = groups[orientation]
        pos = index_of(keys, category)
        if pos < 0:
            keys.append(category)
            members.append([])
            pos = len(keys) - 1
        members[pos].append(idx)

    for orientation, (_, members) in groups.items():
        for indices in members:
            if len(indices) < 2:
                continue
            for idx, (lo, hi) in zip(indices, _stack_offsets([out[i] for i in indices], orientation), strict=False):
                mark = out[idx]
                measured = mark.y if orientation == "vertical" else mark.x
                assert measured is not None
                start = value(measured.label, lo)
                end = value(measured.label, hi)
                if orientation == "vertical":
                    out[idx] = mark.clone(y=None, y_start=start, y_end=end)
                else:
                    out[idx] = mark.clone(x=None, x_start=start, x_end=end)
    return out


def _stackable_orientation(mark: Mark) -> str | None:
    if mark.x is not None and mark.y is not None:
        if mark.x.type == "nominal" and mark.y.is_continuous and mark.y_start is None and mark.y_end is None:
            return "vertical"
        if mark.y.type == "nominal" and mark.x.is_continuous and mark.x_start is None and mark.x_end is None:
            return "horizontal"
    return None


def _stack_offsets(marks: Sequence[Mark], orientation: str) -> list[tuple[float, float]]:
    vals = []
    for mark in marks:
        measured = mark.y if orientation == "vertical" else mark.x
        v = measured.numeric_value if measured is not None else 0.0
        vals.append(v if math.isfinite(v) else 0.0)
    mode = marks[0].stacking_mode
    if mode == "normalized":
        total = sum(abs(v) for v in vals)
        scale = 1.0 / total if total > 0 else 0.0
        vals = [abs(v) * scale for v in vals]
    elif mode == "center":
        total = sum(abs(v) for v in vals)
        acc = -total / 2.0
        spans = []
        for v in vals:
            spans.append((acc, acc + abs(v)))
            acc += abs(v)
        return spans

    spans = []
    pos_acc = 0.0
    neg_acc = 0.0
    for v in vals:
        if v >= 0:
            spans.append((pos_acc, pos_acc + v))
            pos_acc += v
        else:
            spans.append((neg_acc + v, neg_acc))
            neg_acc += v
    return spans


def _collect(result: Any, out: list[Mark]) -> None:
    if result is None:
        return
    if isinstance(result, Mark):
        out.append(result)
        return
    if isinstance(result, Iterable) and not isinstance(result, (str, bytes, Mapping)):
        for item in result:
            _collect(item, out)
        return
    LOGGER.debug("builder returned a non-mark value %r; ignored", result)


def _flatten(items: Iterable[Any]) -> list[Any]:
    out: list[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            out.extend(_flatten(item))
        else:
            out.append(item)
    return out


def _accepts_index(builder: Callable[..., Any]) -> bool:
    try:
        params = inspect.signature(builder).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = 0
    for param in params:
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


def _merge_scale(
    current: ScaleConfig,
    config: ScaleConfig | Mapping[str, Any] | None,
    *,
    domain: Any,
    type: str | None,
    nice: bool | None,
) -> ScaleConfig:
    if isinstance(config, ScaleConfig):
        current = resolve_scale_config(ScaleConfig(), domain=config.domain, type=config.type, nice=config.nice)
    elif isinstance(config, Mapping):
        unknown = set(config) - {"domain", "type", "nice"}
        if unknown:
            raise ChartDataError(f"unknown ScaleConfig keys: {', '.join(sorted(unknown))}")
        current = resolve_scale_config(
            current, domain=config.get("domain"), type=config.get("type"), nice=config.get("nice")
        )
    elif config is not None:
        raise ChartDataError(f"unsupported scale configuration: {config!r}")
    return resolve_scale_config(current, domain=domain, type=type, nice=nice)


def _unit_extent(values: Sequence[PlottableValue], size: float) -> float:
    """Thickness given to a bar or rectangle placed on a continuous axis."""

    distinct = unique(v.numeric_value for v in values if v.is_continuous)
    return size / max(1, len(distinct)) * UNIT_FILL_RATIO


def _tick_position(scale: Scale, tick: Any) -> float:
    if isinstance(scale, BandScale):
        return scale(tick) + scale.bandwidth() / 2.0
    if isinstance(scale, LinearScale):
        pv = value("", tick)
        if pv.type == "nominal":
            return float("nan")
        return scale(pv.numeric_value)
    return float("nan")


def _tick_label(scale: Scale, tick: Any) -> str:
    pv = value("", tick)
    if pv.type == "temporal":
        return pv.display_value
    if pv.type == "quantitative" and isinstance(scale, LinearScale):
        if scale.temporal:
            return scale.tick_labels([pv.numeric_value])[0]
        return format_tick(pv.numeric_value)
    return str(tick)


def _display(item: Any) -> str:
    pv = value("", item)
    return pv.display_value


def _text_width(text: str, size: float) -> float:
    return len(text) * size * 0.6


def _legend_item(entry: LegendEntry, x: float, yc: float, style: ChartStyle) -> list[SceneNode]:
    swatch = style.legend_swatch_px
    return [
        RectNode(x=x, y=yc - swatch / 2.0, width=swatch, height=swatch, fill=entry.color, rx=2.0),
        TextNode(
            x=x + swatch + LEGEND_SWATCH_GAP_PX,
            y=yc + style.font_size_px / 3.0,
            content=entry.label,
            color=style.label_color,
            anchor="start",
            size=style.font_size_px,
            font_family=style.font_family,
        ),
    ]
