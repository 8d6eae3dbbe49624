from .bar import BarMark
from .base import Annotation, LineStyle, Mark, PointDatum, PolarContext, RenderContext
from .line import AreaMark, LineMark
from .point import PointMark
from .rectangle import RectangleMark
from .rule import RuleMark
from .sector import SectorMark

__all__ = [
    "Annotation",
    "AreaMark",
    "BarMark",
    "LineMark",
    "LineStyle",
    "Mark",
    "PointDatum",
    "PointMark",
    "PolarContext",
    "RectangleMark",
    "RenderContext",
    "RuleMark",
    "SectorMark",
]
