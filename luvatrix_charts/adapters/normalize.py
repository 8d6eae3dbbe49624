from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np

from luvatrix_charts.errors import ChartDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


def normalize_records(data: Any) -> list[Any]:
    """Turn a chart data source into the list of items handed to the builder.

    Accepts sequences and iterables of items, mappings of equal-length
    columns, numpy arrays (structured arrays yield one dict per row) and
    pandas DataFrames/Series.
    """

    if data is None:
        return []
    if pd is not None and isinstance(data, pd.DataFrame):
        return data.to_dict("records")
    if pd is not None and isinstance(data, pd.Series):
        return data.tolist()
    if isinstance(data, np.ndarray):
        return _ndarray_records(data)
    if isinstance(data, Mapping):
        return _column_records(data)
    if isinstance(data, (str, bytes, bytearray)):
        raise ChartDataError(f"unsupported chart data type: {type(data)!r}")
    if isinstance(data, Iterable):
        return list(data)
    raise ChartDataError(f"unsupported chart data type: {type(data)!r}")


def _ndarray_records(arr: np.ndarray) -> list[Any]:
    if arr.dtype.names:
        names = arr.dtype.names
        return [{name: row[name].item() for name in names} for row in arr.reshape(-1)]
    if arr.ndim != 1:
        raise ChartDataError("array data must be 1-D or structured")
    return arr.tolist()


def _column_records(columns: Mapping[str, Any]) -> list[dict[str, Any]]:
    materialized = {str(key): _column_values(key, col) for key, col in columns.items()}
    lengths = {len(col) for col in materialized.values()}
    if len(lengths) > 1:
        raise ChartDataError(f"column lengths differ: {sorted(lengths)}")
    count = lengths.pop() if lengths else 0
    return [{key: col[i] for key, col in materialized.items()} for i in range(count)]


def _column_values(key: Any, column: Any) -> list[Any]:
    if pd is not None and isinstance(column, pd.Series):
        return column.tolist()
    if isinstance(column, np.ndarray):
        if column.ndim != 1:
            raise ChartDataError(f"column {key!r} must be 1-D")
        return column.tolist()
    if isinstance(column, (str, bytes, bytearray)) or not isinstance(column, Iterable):
        raise ChartDataError(f"column {key!r} must be a sequence")
    return list(column)
