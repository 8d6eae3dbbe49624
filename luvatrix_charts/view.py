from __future__ import annotations

from typing import Any, Callable

from luvatrix_charts.errors import ChartDataError
from luvatrix_charts.scene import GroupNode, RectNode, Scene
from luvatrix_charts.style import coerce_color


class View:
    """Declarative view base: chainable modifiers and a `render()` contract.

    Subclasses produce a `Scene` from `render()` and pass it through
    `_apply_modifiers` so outer padding and background are handled once.
    """

    def __init__(self) -> None:
        self._frame_width: float | None = None
        self._frame_height: float | None = None
        self._outer_padding: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
        self._view_background: str | None = None
        self._handlers: dict[str, list[Callable[..., Any]]] = {}

    def frame(self, width: float | None = None, height: float | None = None) -> "View":
        if width is not None:
            if width <= 0:
                raise ChartDataError("frame width must be > 0")
            self._frame_width = float(width)
        if height is not None:
            if height <= 0:
                raise ChartDataError("frame height must be > 0")
            self._frame_height = float(height)
        return self

    def padding(
        self,
        amount: float | None = None,
        *,
        top: float | None = None,
        leading: float | None = None,
        bottom: float | None = None,
        trailing: float | None = None,
    ) -> "View":
        base = 16.0 if amount is None and all(v is None for v in (top, leading, bottom, trailing)) else amount
        current = list(self._outer_padding)
        if base is not None:
            current = [float(base)] * 4
        for idx, edge in enumerate((top, leading, bottom, trailing)):
            if edge is not None:
                current[idx] = float(edge)
        if any(v < 0 for v in current):
            raise ChartDataError("padding must be >= 0")
        self._outer_padding = (current[0], current[1], current[2], current[3])
        return self

    def background(self, color: Any) -> "View":
        self._view_background = coerce_color(color)
        return self

    def on(self, event: str, handler: Callable[..., Any]) -> "View":
        if not callable(handler):
            raise ChartDataError(f"handler for {event!r} must be callable")
        self._handlers.setdefault(event, []).append(handler)
        return self

    def on_tap(self, handler: Callable[..., Any]) -> "View":
        return self.on("tap", handler)

    def dispatch(self, event: str, *args: Any) -> list[Any]:
        return [handler(*args) for handler in self._handlers.get(event, [])]

    def render(self) -> Scene:
        raise NotImplementedError

    def _apply_modifiers(self, scene: Scene) -> Scene:
        top, leading, bottom, trailing = self._outer_padding
        if self._view_background is None and not any((top, leading, bottom, trailing)):
            return scene
        width = scene.width + leading + trailing
        height = scene.height + top + bottom
        children: list[Any] = []
        if self._view_background is not None:
            children.append(RectNode(x=0.0, y=0.0, width=width, height=height, fill=self._view_background))
        children.append(GroupNode(children=(scene.root,), translate=(leading, top), role="content"))
        return Scene(width=width, height=height, root=GroupNode(children=tuple(children), role="view"))
