"""Price history range catalog and chart series transform."""

from .ranges import TIME_RANGES, DEFAULT_RANGE, MS_PER_DAY, get_time_range, compute_window
from .series import to_chart_series, label_format

__all__ = [
    "TIME_RANGES",
    "DEFAULT_RANGE",
    "MS_PER_DAY",
    "get_time_range",
    "compute_window",
    "to_chart_series",
    "label_format",
]
