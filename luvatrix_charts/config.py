from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Mapping

from luvatrix_charts.errors import ChartDataError


SCALE_TYPES = ("linear", "band", "time")
LEGEND_VISIBILITIES = ("automatic", "visible", "hidden")
LEGEND_POSITIONS = ("bottom", "top", "leading", "trailing")


@dataclass(frozen=True)
class AxisConfig:
    visible: bool = True
    label: str | None = None
    grid_lines: bool = True
    tick_count: int = 5
    tick_values: tuple[Any, ...] | None = None
    format_label: Callable[[Any], str] | None = None

    def __post_init__(self) -> None:
        if self.tick_count <= 0:
            raise ChartDataError("tick_count must be > 0")


@dataclass(frozen=True)
class ScaleConfig:
    domain: tuple[Any, ...] | None = None
    type: str | None = None
    nice: bool = False


@dataclass(frozen=True)
class LegendConfig:
    visibility: str = "automatic"
    position: str = "bottom"

    def is_visible(self, domain_size: int) -> bool:
        if self.visibility == "visible":
            return True
        if self.visibility == "hidden":
            return False
        return domain_size > 1


@dataclass(frozen=True)
class PlotInsets:
    top: float = 20.0
    trailing: float = 20.0
    bottom: float = 40.0
    leading: float = 50.0


def resolve_axis_config(current: AxisConfig, config: Any) -> AxisConfig:
    """Merge an axis modifier argument into the current axis configuration.

    `config` may be `"hidden"`, `"visible"`, an `AxisConfig`, a mapping of
    `AxisConfig` fields, or a zero-argument callable returning one of those.
    """

    if callable(config) and not isinstance(config, AxisConfig):
        config = config()
    if config is None:
        return current
    if isinstance(config, AxisConfig):
        return config
    if config == "hidden":
        return replace(current, visible=False)
    if config == "visible":
        return replace(current, visible=True)
    if isinstance(config, Mapping):
        updates = dict(config)
        if updates.pop("visibility", None) == "hidden":
            updates["visible"] = False
        if updates.pop("hidden", False):
            updates["visible"] = False
        if "tick_values" in updates and updates["tick_values"] is not None:
            updates["tick_values"] = tuple(updates["tick_values"])
        _reject_unknown_keys(AxisConfig, updates)
        return replace(current, **updates)
    raise ChartDataError(f"unsupported axis configuration: {config!r}")


def resolve_scale_config(
    current: ScaleConfig,
    *,
    domain: Any = None,
    type: str | None = None,
    nice: bool | None = None,
) -> ScaleConfig:
    if type is not None and type not in SCALE_TYPES:
        raise ChartDataError(f"unsupported scale type: {type}")
    out = current
    if domain is not None:
        items = tuple(domain)
        if not items:
            raise ChartDataError("scale domain must not be empty")
        out = replace(out, domain=items)
    if type is not None:
        out = replace(out, type=type)
    if nice is not None:
        out = replace(out, nice=bool(nice))
    return out


def resolve_legend_config(current: LegendConfig, config: Any = None, *, position: str | None = None) -> LegendConfig:
    out = current
    if isinstance(config, Mapping):
        position = config.get("position", position)
        config = config.get("visibility")
    if config is True:
        config = "visible"
    elif config is False:
        config = "hidden"
    if config is not None:
        if config not in LEGEND_VISIBILITIES:
            raise ChartDataError(f"unsupported legend visibility: {config!r}")
        out = replace(out, visibility=config)
    if position is not None:
        if position not in LEGEND_POSITIONS:
            raise ChartDataError(f"unsupported legend position: {position!r}")
        out = replace(out, position=position)
    return out


def _reject_unknown_keys(cls: type, updates: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(updates) - known)
    if unknown:
        raise ChartDataError(f"unknown {cls.__name__} keys: {', '.join(unknown)}")
