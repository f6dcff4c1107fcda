"""Core module for the potential tracker."""

from .models import (
    AssetSnapshot, RankedAsset, FilterParams, TimeRangeSpec,
    HistoryPoint, ChartSeries, parse_number
)
from .enums import RangeToken, TrackState
from .errors import TrackerError, NetworkError, SnapshotValidationError

__all__ = [
    "AssetSnapshot",
    "RankedAsset",
    "FilterParams",
    "TimeRangeSpec",
    "HistoryPoint",
    "ChartSeries",
    "parse_number",
    "RangeToken",
    "TrackState",
    "TrackerError",
    "NetworkError",
    "SnapshotValidationError",
]
