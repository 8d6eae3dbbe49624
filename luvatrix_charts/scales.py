from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
import logging
from typing import Any, ClassVar, Iterable, Sequence, Union

import numpy as np

from luvatrix_charts.config import SCALE_TYPES, ScaleConfig
from luvatrix_charts.plottable import PlottableValue, format_temporal, value
from luvatrix_charts.style import DEFAULT_PALETTE
from luvatrix_charts.symbols import SYMBOL_NAMES


LOGGER = logging.getLogger(__name__)

BAND_PADDING_RATIO = 0.1


@dataclass(frozen=True)
class BandScale:
    """Categorical position mapping; each category owns one step of the range."""

    categories: tuple[Any, ...]
    size: float
    vertical: bool = False
    padding_ratio: float = BAND_PADDING_RATIO
    kind: ClassVar[str] = "band"

    @property
    def step(self) -> float:
        return self.size / len(self.categories)

    @property
    def inset(self) -> float:
        return self.step * self.padding_ratio

    def __call__(self, raw: Any) -> float:
        idx = index_of(self.categories, raw)
        if idx < 0:
            return float("nan")
        return idx * self.step + self.inset

    def position(self, pv: PlottableValue) -> float:
        return self(pv.raw_value)

    def center(self, pv: PlottableValue) -> float:
        return self.position(pv) + self.bandwidth() * 0.5

    def bandwidth(self) -> float:
        return self.step - 2.0 * self.inset

    def invert(self, pixel: float) -> Any:
        if not np.isfinite(pixel) or pixel < 0 or pixel >= self.size:
            return None
        return self.categories[min(len(self.categories) - 1, int(pixel // self.step))]

    def domain(self) -> list[Any]:
        return list(self.categories)

    def range(self) -> tuple[float, float]:
        return (0.0, self.size)

    def ticks(self, count: int = 5) -> list[Any]:
        return list(self.categories)

    def tick_labels(self, ticks: Sequence[Any]) -> list[str]:
        return [str(t) for t in ticks]


@dataclass(frozen=True)
class LinearScale:
    """Continuous position mapping; the vertical axis grows upwards."""

    vmin: float
    vmax: float
    size: float
    vertical: bool = False
    temporal: bool = False
    kind: ClassVar[str] = "linear"

    def __call__(self, v: float) -> float:
        norm = (float(v) - self.vmin) / (self.vmax - self.vmin)
        if self.vertical:
            return self.size - self.size * norm
        return self.size * norm

    def position(self, pv: PlottableValue) -> float:
        return self(pv.numeric_value)

    def center(self, pv: PlottableValue) -> float:
        return self.position(pv)

    def bandwidth(self) -> float:
        return 0.0

    def invert(self, pixel: float) -> float:
        norm = (self.size - pixel) / self.size if self.vertical else pixel / self.size
        return self.vmin + norm * (self.vmax - self.vmin)

    def domain(self) -> tuple[float, float]:
        return (self.vmin, self.vmax)

    def range(self) -> tuple[float, float]:
        return (self.size, 0.0) if self.vertical else (0.0, self.size)

    def clamp(self, v: float) -> float:
        lo, hi = min(self.vmin, self.vmax), max(self.vmin, self.vmax)
        return float(min(hi, max(lo, v)))

    def ticks(self, count: int = 5) -> list[float]:
        return generate_ticks(self.vmin, self.vmax, count).tolist()

    def tick_labels(self, ticks: Sequence[Any]) -> list[str]:
        if self.temporal:
            return [format_temporal(float(t)) for t in ticks]
        return format_ticks_for_axis(np.asarray(ticks, dtype=np.float64))


@dataclass(frozen=True)
class EmptyScale:
    """Scale for an axis with no plotted values: everything maps to 0."""

    size: float
    vertical: bool = False
    kind: ClassVar[str] = "empty"

    def __call__(self, raw: Any) -> float:
        return 0.0

    def position(self, pv: PlottableValue) -> float:
        return 0.0

    def center(self, pv: PlottableValue) -> float:
        return 0.0

    def bandwidth(self) -> float:
        return 0.0

    def invert(self, pixel: float) -> Any:
        return None

    def domain(self) -> list[Any]:
        return []

    def range(self) -> tuple[float, float]:
        return (0.0, self.size)

    def ticks(self, count: int = 5) -> list[Any]:
        return []

    def tick_labels(self, ticks: Sequence[Any]) -> list[str]:
        return []


Scale = Union[BandScale, LinearScale, EmptyScale]


def build_scale(
    values: Sequence[PlottableValue],
    size: float,
    *,
    vertical: bool = False,
    config: ScaleConfig | None = None,
    tick_count: int = 5,
) -> Scale:
    """Build the position scale for one axis.

    The first plotted value decides between a band and a linear scale unless
    the configuration names a type. Never raises: degenerate domains are
    widened by one unit on each side and an axis without values maps
    everything to 0.
    """

    config = config or ScaleConfig()
    kind = config.type
    if kind is not None and kind not in SCALE_TYPES:
        LOGGER.warning("unknown scale type %r; inferring from data", kind)
        kind = None
    if kind is None:
        if values:
            kind = "band" if values[0].type == "nominal" else "linear"
        elif config.domain is not None:
            kind = "linear" if all(_is_number(d) for d in config.domain) else "band"
        else:
            return EmptyScale(size=size, vertical=vertical)

    if kind == "band":
        categories = tuple(config.domain) if config.domain is not None else unique(v.raw_value for v in values)
        if not categories:
            return EmptyScale(size=size, vertical=vertical)
        return BandScale(categories=categories, size=size, vertical=vertical)

    temporal = kind == "time" or bool(values and values[0].type == "temporal")
    if config.domain is not None and len(config.domain) >= 2:
        vmin = _domain_number(config.domain[0])
        vmax = _domain_number(config.domain[-1])
    else:
        nums = np.asarray([v.numeric_value for v in values], dtype=np.float64)
        nums = nums[np.isfinite(nums)]
        if nums.size == 0:
            return EmptyScale(size=size, vertical=vertical)
        vmin = float(np.min(nums))
        vmax = float(np.max(nums))
        if not temporal:
            vmin = min(0.0, vmin)
    if not (np.isfinite(vmin) and np.isfinite(vmax)):
        return EmptyScale(size=size, vertical=vertical)
    if config.nice and vmin != vmax:
        vmin, vmax = nice_domain(vmin, vmax, tick_count)
    if vmin == vmax:
        vmin -= 1.0
        vmax += 1.0
    return LinearScale(vmin=vmin, vmax=vmax, size=size, vertical=vertical, temporal=temporal)


@dataclass(frozen=True)
class ColorScale:
    """Maps a color-by-field value to a palette color.

    Indices follow discovery order within one render; an explicit mapping
    pins colors for chosen values regardless of that order.
    """

    domain: tuple[Any, ...] = ()
    palette: tuple[str, ...] = DEFAULT_PALETTE
    mapping: tuple[tuple[Any, str], ...] = field(default=())

    def __call__(self, raw: Any) -> str | None:
        for key, color in self.mapping:
            if key == raw:
                return color
        idx = index_of(self.domain, raw)
        if idx < 0 or not self.palette:
            return None
        return self.palette[idx % len(self.palette)]

    @classmethod
    def discover(
        cls,
        values: Iterable[Any],
        *,
        palette: Sequence[str] = DEFAULT_PALETTE,
        preferred: Sequence[Any] = (),
        mapping: Sequence[tuple[Any, str]] = (),
    ) -> "ColorScale":
        domain = unique(list(preferred) + [v for v in values if v is not None])
        return cls(domain=domain, palette=tuple(palette), mapping=tuple(mapping))


@dataclass(frozen=True)
class SymbolScale:
    domain: tuple[Any, ...] = ()
    symbols: tuple[str, ...] = SYMBOL_NAMES

    def __call__(self, raw: Any) -> str | None:
        idx = index_of(self.domain, raw)
        if idx < 0:
            return None
        return self.symbols[idx % len(self.symbols)]


def generate_ticks(vmin: float, vmax: float, count: int = 5) -> np.ndarray:
    """Nice tick values inside `[vmin, vmax]`.

    The ideal step `(vmax - vmin) / (count - 1)` is rounded up to 1, 2, 5 or
    10 times a power of ten and every multiple of it inside the interval is
    returned.
    """

    if count <= 0:
        raise ValueError("count must be > 0")
    lo, hi = float(min(vmin, vmax)), float(max(vmin, vmax))
    if not (np.isfinite(lo) and np.isfinite(hi)):
        return np.asarray([], dtype=np.float64)
    if lo == hi:
        return np.asarray([lo], dtype=np.float64)
    step = _nice_number((hi - lo) / max(count - 1, 1), round_result=False)
    eps = 1e-9
    first = int(np.ceil(lo / step - eps))
    last = int(np.floor(hi / step + eps))
    ticks = np.arange(first, last + 1, dtype=np.float64) * step
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def nice_domain(vmin: float, vmax: float, count: int = 5) -> tuple[float, float]:
    lo, hi = float(min(vmin, vmax)), float(max(vmin, vmax))
    if lo == hi:
        return (lo, hi)
    step = _nice_number((hi - lo) / max(count - 1, 1), round_result=False)
    out_lo = float(np.floor(lo / step) * step)
    out_hi = float(np.ceil(hi / step) * step)
    if vmin > vmax:
        return (out_hi, out_lo)
    return (out_lo, out_hi)


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e9 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def unique(items: Iterable[Any]) -> tuple[Any, ...]:
    """Deduplicate preserving first occurrence; tolerates unhashable items."""

    seen: set[Any] = set()
    out: list[Any] = []
    for item in items:
        try:
            if item in seen:
                continue
            seen.add(item)
        except TypeError:
            if item in out:
                continue
        out.append(item)
    return tuple(out)


def index_of(items: Sequence[Any], item: Any) -> int:
    for idx, candidate in enumerate(items):
        if candidate is item or candidate == item:
            return idx
    return -1


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)


def _is_number(item: Any) -> bool:
    return value("", item).type != "nominal"


def _domain_number(item: Any) -> float:
    pv = value("", item)
    if pv.type == "nominal":
        try:
            return float(item)
        except (TypeError, ValueError):
            return float("nan")
    return pv.numeric_value
