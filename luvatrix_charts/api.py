from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from luvatrix_charts.chart import DEFAULT_HEIGHT, DEFAULT_WIDTH, Chart
from luvatrix_charts.errors import ChartDataError
from luvatrix_charts.style import DEFAULT_PALETTE, ChartStyle

DEFAULT_ASPECT_RATIO = DEFAULT_WIDTH / DEFAULT_HEIGHT


def chart(
    data_or_content: Any = None,
    builder: Callable[..., Any] | None = None,
    *,
    width: float | None = None,
    height: float | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    palette: Sequence[Any] = DEFAULT_PALETTE,
    style: ChartStyle | Mapping[str, Any] | None = None,
) -> Chart:
    """Build a `Chart`, deriving a missing frame side from `aspect_ratio`."""

    if aspect_ratio <= 0:
        raise ChartDataError("aspect_ratio must be > 0")
    if width is None and height is not None:
        if height <= 0:
            raise ChartDataError("height must be > 0")
        width = height * aspect_ratio
    elif width is not None and height is None:
        if width <= 0:
            raise ChartDataError("width must be > 0")
        height = width / aspect_ratio
    out = Chart(data_or_content, builder, palette=palette, style=style)
    if width is not None or height is not None:
        out.frame(width=width, height=height)
    return out
