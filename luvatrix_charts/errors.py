from __future__ import annotations


class ChartDataError(ValueError):
    """Raised when chart data or configuration cannot be interpreted."""
