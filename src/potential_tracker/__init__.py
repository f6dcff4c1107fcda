"""
Crypto Potential Tracker

Ranks crypto assets by a heuristic potential score computed from live market
snapshots, and serves chart-ready price history for a selected asset.
"""

__version__ = "0.1.0"
__author__ = "Potential Tracker Team"

from .core.models import AssetSnapshot, RankedAsset, FilterParams, HistoryPoint, ChartSeries
from .core.enums import RangeToken, TrackState
from .core.errors import NetworkError
from .scanner.market_scanner import PotentialScanner
from .scheduler.refresh import RefreshScheduler

__all__ = [
    "AssetSnapshot",
    "RankedAsset",
    "FilterParams",
    "HistoryPoint",
    "ChartSeries",
    "RangeToken",
    "TrackState",
    "NetworkError",
    "PotentialScanner",
    "RefreshScheduler",
]
