"""Market data module."""

from .connector import MarketDataConnector, CoinCapConnector
from .fetchers import SnapshotFetcher, HistoryFetcher

__all__ = [
    "MarketDataConnector",
    "CoinCapConnector",
    "SnapshotFetcher",
    "HistoryFetcher",
]
