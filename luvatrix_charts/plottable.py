from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
import numbers
from typing import Any, Literal

import numpy as np


ValueType = Literal["temporal", "quantitative", "nominal"]


@dataclass(frozen=True)
class PlottableValue:
    """A labelled datum bound to one mark slot.

    The type is inferred once from the raw value and decides how every scale
    and mark treats the datum: nominal values are positioned by category
    index, quantitative and temporal values through their numeric form.
    """

    label: str
    raw_value: Any
    type: ValueType

    @property
    def numeric_value(self) -> float:
        if self.type == "quantitative":
            return float(self.raw_value)
        if self.type == "temporal":
            return _temporal_seconds(self.raw_value)
        return 0.0

    @property
    def display_value(self) -> str:
        if self.type == "temporal":
            return format_temporal(self.numeric_value)
        return str(self.raw_value)

    @property
    def is_continuous(self) -> bool:
        return self.type != "nominal"


def value(label: str, raw: Any) -> PlottableValue:
    return PlottableValue(label=str(label), raw_value=raw, type=infer_type(raw))


def infer_type(raw: Any) -> ValueType:
    if isinstance(raw, (bool, np.bool_)):
        return "nominal"
    if isinstance(raw, (date, np.datetime64)):
        return "temporal"
    if isinstance(raw, (numbers.Real, Decimal)):
        return "quantitative"
    return "nominal"


def format_temporal(seconds: float) -> str:
    if not np.isfinite(seconds):
        return str(seconds)
    stamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
    if stamp.time() == time(0, 0):
        return stamp.strftime("%Y-%m-%d")
    return stamp.strftime("%Y-%m-%d %H:%M")


def _temporal_seconds(raw: Any) -> float:
    if isinstance(raw, np.datetime64):
        if np.isnat(raw):
            return float("nan")
        return float((raw - np.datetime64(0, "s")) / np.timedelta64(1, "s"))
    if isinstance(raw, datetime):
        if raw.tzinfo is None:
            raw = raw.replace(tzinfo=timezone.utc)
        return raw.timestamp()
    # Plain dates are read as midnight UTC.
    return datetime(raw.year, raw.month, raw.day, tzinfo=timezone.utc).timestamp()
