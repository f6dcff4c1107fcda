"""Snapshot and history fetchers built on a market data connector."""

import logging
import time
from typing import Callable, List, Optional

from pydantic import ValidationError

from ..core.models import AssetSnapshot, HistoryPoint, TimeRangeSpec
from ..history.ranges import compute_window
from .connector import MarketDataConnector

logger = logging.getLogger(__name__)


class SnapshotFetcher:
    """Retrieves the full current list of asset snapshots."""

    def __init__(self, connector: MarketDataConnector):
        self.connector = connector

    async def fetch(self) -> List[AssetSnapshot]:
        """Fetch all snapshots. NetworkError propagates; there is no retry."""
        records = await self.connector.get_assets()
        snapshots: List[AssetSnapshot] = []
        for record in records:
            try:
                snapshots.append(AssetSnapshot.model_validate(record))
            except ValidationError as e:
                logger.debug(f"Skipping malformed asset record: {e.errors()[:1]}")
        logger.debug(f"Parsed {len(snapshots)} snapshots from {len(records)} records")
        return snapshots


class HistoryFetcher:
    """Retrieves a time-bounded, interval-sampled price history for one asset."""

    def __init__(
        self,
        connector: MarketDataConnector,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize history fetcher.

        Args:
            connector: Data connector used for the request
            clock: Returns the current time in epoch seconds (``time.time``
                   by default); injectable for deterministic windows.
        """
        self.connector = connector
        self._clock = clock or time.time

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def fetch(self, asset_id: str, spec: TimeRangeSpec) -> List[HistoryPoint]:
        """Fetch the history window for *spec*, ordered by timestamp."""
        start, end = compute_window(spec, self.now_ms())
        records = await self.connector.get_asset_history(asset_id, spec.interval, start, end)

        points: List[HistoryPoint] = []
        for record in records:
            try:
                points.append(HistoryPoint.model_validate(record))
            except ValidationError as e:
                logger.debug(f"Skipping malformed history record for {asset_id}: {e.errors()[:1]}")

        points.sort(key=lambda p: p.time)
        logger.debug(f"Fetched {len(points)} history points for {asset_id} ({spec.token.value})")
        return points
