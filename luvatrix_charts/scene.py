from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, Union

from luvatrix_charts.interpolation import PathCommand, flatten, path_data


@dataclass(frozen=True)
class RectNode:
    x: float
    y: float
    width: float
    height: float
    fill: str
    opacity: float = 1.0
    rx: float | None = None
    stroke: str | None = None
    stroke_width: float = 0.0
    kind: ClassVar[str] = "rect"


@dataclass(frozen=True)
class LineNode:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float = 1.0
    dash: tuple[float, ...] | None = None
    opacity: float = 1.0
    kind: ClassVar[str] = "line"


@dataclass(frozen=True)
class PathNode:
    commands: tuple[PathCommand, ...]
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    dash: tuple[float, ...] | None = None
    line_cap: str | None = None
    line_join: str | None = None
    kind: ClassVar[str] = "path"

    @property
    def d(self) -> str:
        return path_data(self.commands)


@dataclass(frozen=True)
class CircleNode:
    cx: float
    cy: float
    r: float
    fill: str
    opacity: float = 1.0
    kind: ClassVar[str] = "circle"


@dataclass(frozen=True)
class PolygonNode:
    points: tuple[tuple[float, float], ...]
    fill: str
    opacity: float = 1.0
    kind: ClassVar[str] = "polygon"


@dataclass(frozen=True)
class TextNode:
    x: float
    y: float
    content: str
    color: str
    anchor: str = "middle"
    size: float = 12.0
    font_family: str = "System"
    rotate: int = 0
    kind: ClassVar[str] = "text"


@dataclass(frozen=True)
class GroupNode:
    children: tuple["SceneNode", ...] = ()
    translate: tuple[float, float] = (0.0, 0.0)
    z_index: int = 0
    role: str = ""
    kind: ClassVar[str] = "group"


SceneNode = Union[RectNode, LineNode, PathNode, CircleNode, PolygonNode, TextNode, GroupNode]


@dataclass(frozen=True)
class Scene:
    """Backend-independent output of one chart render pass."""

    width: float
    height: float
    root: GroupNode = field(default_factory=GroupNode)

    def walk(self) -> Iterator[tuple[SceneNode, tuple[float, float]]]:
        """Yield every node with its accumulated translation, depth first."""

        yield from _walk(self.root, (0.0, 0.0))

    def find(self, kind: str) -> list[SceneNode]:
        return [node for node, _ in self.walk() if node.kind == kind]

    def group(self, role: str) -> GroupNode | None:
        for node, _ in self.walk():
            if isinstance(node, GroupNode) and node.role == role:
                return node
        return None

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())


def _walk(node: SceneNode, offset: tuple[float, float]) -> Iterator[tuple[SceneNode, tuple[float, float]]]:
    yield node, offset
    if isinstance(node, GroupNode):
        inner = (offset[0] + node.translate[0], offset[1] + node.translate[1])
        for child in sorted(node.children, key=lambda c: c.z_index if isinstance(c, GroupNode) else 0):
            yield from _walk(child, inner)


def node_bounds(node: SceneNode) -> tuple[float, float, float, float] | None:
    """Axis-aligned `(x0, y0, x1, y1)` bounds in the node's own coordinates."""

    if isinstance(node, RectNode):
        return (node.x, node.y, node.x + node.width, node.y + node.height)
    if isinstance(node, LineNode):
        return (min(node.x1, node.x2), min(node.y1, node.y2), max(node.x1, node.x2), max(node.y1, node.y2))
    if isinstance(node, CircleNode):
        return (node.cx - node.r, node.cy - node.r, node.cx + node.r, node.cy + node.r)
    if isinstance(node, PolygonNode):
        return _points_bounds(node.points)
    if isinstance(node, PathNode):
        points = [p for pts, _ in flatten(node.commands) for p in pts]
        return _points_bounds(points)
    if isinstance(node, TextNode):
        return (node.x, node.y, node.x, node.y)
    boxes = []
    for child in node.children:
        box = node_bounds(child)
        if box is not None:
            boxes.append(box)
    if not boxes:
        return None
    tx, ty = node.translate
    return (
        min(b[0] for b in boxes) + tx,
        min(b[1] for b in boxes) + ty,
        max(b[2] for b in boxes) + tx,
        max(b[3] for b in boxes) + ty,
    )


def _points_bounds(points) -> tuple[float, float, float, float] | None:
    pts = list(points)
    if not pts:
        return None
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    return (min(xs), min(ys), max(xs), max(ys))
