from luvatrix_charts.api import chart
from luvatrix_charts.chart import Chart, LegendEntry, stack_bars
from luvatrix_charts.config import AxisConfig, LegendConfig, PlotInsets, ScaleConfig
from luvatrix_charts.errors import ChartDataError
from luvatrix_charts.interpolation import area_commands, interpolate, path_data
from luvatrix_charts.marks import (
    Annotation,
    AreaMark,
    BarMark,
    LineMark,
    LineStyle,
    Mark,
    PointMark,
    RectangleMark,
    RuleMark,
    SectorMark,
)
from luvatrix_charts.plottable import PlottableValue, value
from luvatrix_charts.scales import BandScale, ColorScale, LinearScale, build_scale, format_tick, generate_ticks
from luvatrix_charts.scene import Scene
from luvatrix_charts.sector import MarkDimension, allocate_angles
from luvatrix_charts.style import DEFAULT_PALETTE, ChartStyle, validate_chart_style
from luvatrix_charts.view import View

__all__ = [
    "Annotation",
    "AreaMark",
    "AxisConfig",
    "BandScale",
    "BarMark",
    "Chart",
    "ChartDataError",
    "ChartStyle",
    "ColorScale",
    "DEFAULT_PALETTE",
    "LegendConfig",
    "LegendEntry",
    "LineMark",
    "LineStyle",
    "LinearScale",
    "Mark",
    "MarkDimension",
    "PlotInsets",
    "PlottableValue",
    "PointMark",
    "RectangleMark",
    "RuleMark",
    "ScaleConfig",
    "Scene",
    "SectorMark",
    "View",
    "allocate_angles",
    "area_commands",
    "build_scale",
    "chart",
    "format_tick",
    "generate_ticks",
    "interpolate",
    "path_data",
    "stack_bars",
    "validate_chart_style",
    "value",
]
