from __future__ import annotations

from dataclasses import asdict, dataclass
import re
from typing import Any, Mapping

from PIL import ImageColor

from luvatrix_charts.errors import ChartDataError


RGBA = tuple[int, int, int, int]

_FUNCTIONAL_RE = re.compile(
    r"^rgba?\(\s*([^,()]+?)\s*,\s*([^,()]+?)\s*,\s*([^,()]+?)\s*(?:,\s*([^,()]+?)\s*)?\)$",
    re.IGNORECASE,
)

DEFAULT_PALETTE: tuple[str, ...] = (
    "#007AFF",
    "#34C759",
    "#FF9500",
    "#FF2D55",
    "#AF52DE",
    "#5856D6",
    "#FF3B30",
    "#FFCC00",
    "#00C7BE",
    "#8E8E93",
)

_COLOR_TOKENS = (
    "mark_color",
    "rule_color",
    "axis_color",
    "grid_color",
    "label_color",
)


@dataclass(frozen=True)
class ChartStyle:
    """Style tokens shared by every chart unless overridden per chart."""

    mark_color: str = "#007AFF"
    rule_color: str = "#999999"
    axis_color: str = "#E0E0E0"
    grid_color: str = "#F0F0F0"
    label_color: str = "#666666"
    font_family: str = "System"
    font_size_px: float = 12.0
    tick_length_px: float = 6.0
    legend_swatch_px: float = 12.0


DEFAULT_STYLE = ChartStyle()


def validate_chart_style(overrides: Mapping[str, Any] | None = None) -> ChartStyle:
    raw: dict[str, Any] = asdict(DEFAULT_STYLE)
    if overrides:
        for key, item in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown chart style token: {key}")
            raw[key] = item

    for key in _COLOR_TOKENS:
        try:
            raw[key] = coerce_color(raw[key])
        except ChartDataError as exc:
            raise ValueError(f"Token `{key}` must be a color: {exc}") from exc

    if not isinstance(raw["font_family"], str) or not raw["font_family"].strip():
        raise ValueError("Token `font_family` must be a non-empty string")
    for key in ("font_size_px", "tick_length_px", "legend_swatch_px"):
        if not isinstance(raw[key], (int, float)) or float(raw[key]) <= 0:
            raise ValueError(f"Token `{key}` must be a positive number")

    return ChartStyle(
        mark_color=raw["mark_color"],
        rule_color=raw["rule_color"],
        axis_color=raw["axis_color"],
        grid_color=raw["grid_color"],
        label_color=raw["label_color"],
        font_family=str(raw["font_family"]),
        font_size_px=float(raw["font_size_px"]),
        tick_length_px=float(raw["tick_length_px"]),
        legend_swatch_px=float(raw["legend_swatch_px"]),
    )


def coerce_color(color: Any) -> str:
    """Normalise a color input to a CSS string usable by every backend.

    Accepts CSS strings, RGB/RGBA integer tuples and color objects exposing
    `css()` or `rgba()`. Functional `rgb()`/`rgba()` strings carry alpha in
    [0, 1] and are rewritten to hex so Pillow reads the alpha correctly.
    """

    if isinstance(color, tuple):
        return _tuple_to_hex(color)
    if hasattr(color, "css") and callable(color.css):
        color = color.css()
    elif hasattr(color, "rgba") and callable(color.rgba):
        color = color.rgba()
        if isinstance(color, (tuple, list)):
            return _tuple_to_hex(tuple(color))
    if not isinstance(color, str) or not color.strip():
        raise ChartDataError(f"unsupported color input: {color!r}")
    text = color.strip()
    match = _FUNCTIONAL_RE.match(text)
    if match is not None:
        return _functional_to_hex(text, match)
    try:
        ImageColor.getrgb(text)
    except ValueError as exc:
        raise ChartDataError(f"unrecognized color: {text!r}") from exc
    return text


def parse_rgba(color: str, opacity: float = 1.0) -> RGBA:
    r, g, b, a = ImageColor.getcolor(color, "RGBA")
    out_a = int(round(max(0.0, min(1.0, opacity)) * a))
    return (int(r), int(g), int(b), out_a)


def _functional_to_hex(text: str, match: re.Match[str]) -> str:
    try:
        channels = [_css_channel(match.group(i), 255.0) for i in (1, 2, 3)]
        alpha = match.group(4)
        if alpha is not None:
            channels.append(_css_channel(alpha, 1.0) * 255.0)
        return _tuple_to_hex(tuple(channels))
    except ValueError as exc:
        raise ChartDataError(f"unrecognized color: {text!r}") from exc


def _css_channel(token: str, full_scale: float) -> float:
    token = token.strip()
    if token.endswith("%"):
        return float(token[:-1]) / 100.0 * full_scale
    return float(token)


def _tuple_to_hex(color: tuple[Any, ...]) -> str:
    if len(color) not in (3, 4):
        raise ChartDataError(f"color tuple must have 3 or 4 channels: {color!r}")
    channels = [int(max(0, min(255, round(float(c))))) for c in color]
    if len(channels) == 4 and channels[3] == 255:
        channels = channels[:3]
    return "#" + "".join(f"{c:02X}" for c in channels)
