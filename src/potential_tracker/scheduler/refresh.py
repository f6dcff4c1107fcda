"""Refresh scheduler coordinating the snapshot and history fetch tracks."""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from ..core.enums import RangeToken, TrackState
from ..core.errors import NetworkError
from ..core.models import AssetSnapshot, ChartSeries, RankedAsset
from ..data.fetchers import HistoryFetcher, SnapshotFetcher
from ..history.ranges import DEFAULT_RANGE, get_time_range
from ..history.series import to_chart_series
from ..scanner.market_scanner import PotentialScanner

logger = logging.getLogger(__name__)

SNAPSHOT_ERROR_MESSAGE = "Failed to fetch market data, please retry later"
HISTORY_ERROR_MESSAGE = "Failed to load price history"

SNAPSHOT_TRACK = "snapshot"
HISTORY_TRACK = "history"


class RefreshScheduler:
    """Owns the shared tracker state and serializes every update to it.

    Snapshot track: a periodic timer and manual refreshes share one
    in-flight fetch; a trigger that arrives while a fetch is running joins
    it instead of starting another.

    History track: every change of (asset, range) bumps a generation
    counter. A fetch commits its series only if its generation is still
    the latest when it completes, so a superseded fetch never overwrites
    the series of a later selection.
    """

    def __init__(
        self,
        snapshot_fetcher: SnapshotFetcher,
        scanner: PotentialScanner,
        history_fetcher: HistoryFetcher,
        refresh_interval: float = 60.0,
        default_range: Union[RangeToken, str] = DEFAULT_RANGE,
    ):
        self.snapshot_fetcher = snapshot_fetcher
        self.scanner = scanner
        self.history_fetcher = history_fetcher
        self.refresh_interval = refresh_interval

        # Snapshot track
        self.snapshot_state = TrackState.IDLE
        self.snapshots: List[AssetSnapshot] = []
        self.ranked: List[RankedAsset] = []
        self.no_matches = False
        self.snapshot_error: Optional[str] = None

        # History track
        self.history_state = TrackState.NO_SELECTION
        self.selected_asset: Optional[str] = None
        self.selected_range = RangeToken(default_range)
        self.chart_series: Optional[ChartSeries] = None
        self.history_error: Optional[str] = None
        self._history_generation = 0

        self._snapshot_task: Optional[asyncio.Task] = None
        self._timer_task: Optional[asyncio.Task] = None
        self._running = False
        self._listeners: List[Callable[[str], None]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Start the periodic refresh timer. The first refresh runs immediately."""
        if self._running:
            return
        self._running = True
        self._timer_task = asyncio.create_task(self._refresh_loop())
        logger.info(f"Refresh scheduler started (interval={self.refresh_interval}s)")

    async def stop(self):
        """Tear down the timer and cancel any in-flight snapshot fetch."""
        self._running = False
        for task in (self._timer_task, self._snapshot_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._timer_task = None
        if self.snapshot_state == TrackState.FETCHING:
            self.snapshot_state = TrackState.IDLE
        logger.info("Refresh scheduler stopped")

    async def _refresh_loop(self):
        while self._running:
            try:
                await self.refresh()
            except Exception as e:
                logger.error(f"Error in refresh loop: {e}")
            await asyncio.sleep(self.refresh_interval)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, callback: Callable[[str], None]):
        """Register *callback*, called with the track name after each commit."""
        self._listeners.append(callback)

    def _notify(self, track: str):
        for callback in self._listeners:
            try:
                callback(track)
            except Exception as e:
                logger.error(f"Listener failed on {track} update: {e}")

    # ------------------------------------------------------------------
    # Snapshot track
    # ------------------------------------------------------------------

    async def refresh(self) -> List[RankedAsset]:
        """Refresh the ranked list, joining a fetch already in flight."""
        task = self._snapshot_task
        if task is None or task.done():
            task = asyncio.create_task(self._run_snapshot_cycle())
            self._snapshot_task = task
        else:
            logger.debug("Snapshot fetch already in flight, joining it")
        await asyncio.shield(task)
        return self.ranked

    async def _run_snapshot_cycle(self):
        self.snapshot_state = TrackState.FETCHING
        try:
            snapshots = await self.snapshot_fetcher.fetch()
            ranked = self.scanner.rank(snapshots)
        except NetworkError as e:
            logger.error(f"Snapshot refresh failed: {e}")
            self._fail_snapshot_track()
            return
        except Exception as e:
            logger.error(f"Error during snapshot refresh: {e!r}")
            self._fail_snapshot_track()
            return

        self.snapshots = snapshots
        self.ranked = ranked
        self.no_matches = not ranked
        self.snapshot_error = None
        self.snapshot_state = TrackState.READY
        self._notify(SNAPSHOT_TRACK)

    def _fail_snapshot_track(self):
        # Keep the previous ranked list on screen
        self.snapshot_state = TrackState.FAILED
        self.snapshot_error = SNAPSHOT_ERROR_MESSAGE
        self._notify(SNAPSHOT_TRACK)

    # ------------------------------------------------------------------
    # History track
    # ------------------------------------------------------------------

    async def select(
        self,
        asset_id: str,
        range_token: Optional[Union[RangeToken, str]] = None,
    ) -> Optional[ChartSeries]:
        """Select an asset (and optionally a range) and load its history.

        Returns the committed series, or None if the fetch failed or was
        superseded by a later selection.
        """
        if range_token is not None:
            self.selected_range = RangeToken(range_token)
        self.selected_asset = asset_id
        return await self._load_history()

    async def select_asset(self, asset_id: str) -> Optional[ChartSeries]:
        return await self.select(asset_id)

    async def change_range(self, range_token: Union[RangeToken, str]) -> Optional[ChartSeries]:
        self.selected_range = RangeToken(range_token)
        if self.selected_asset is None:
            return None
        return await self._load_history()

    def clear_selection(self):
        """Drop the selection; any in-flight history fetch becomes stale."""
        self._history_generation += 1
        self.selected_asset = None
        self.chart_series = None
        self.history_error = None
        self.history_state = TrackState.NO_SELECTION
        self._notify(HISTORY_TRACK)

    async def _load_history(self) -> Optional[ChartSeries]:
        asset_id = self.selected_asset
        token = self.selected_range
        spec = get_time_range(token)

        self._history_generation += 1
        generation = self._history_generation

        series = self.chart_series
        if series is not None and (series.asset_id, series.range_token) != (asset_id, token):
            self.chart_series = None
        self.history_state = TrackState.FETCHING

        try:
            points = await self.history_fetcher.fetch(asset_id, spec)
            if generation == self._history_generation:
                series = to_chart_series(points, token, asset_id)
        except Exception as e:
            if generation != self._history_generation:
                logger.debug(f"Ignoring failure of superseded history fetch for {asset_id} ({token.value})")
                return None
            if isinstance(e, NetworkError):
                logger.error(f"History fetch failed for {asset_id} ({token.value}): {e}")
            else:
                logger.error(f"Error building history for {asset_id} ({token.value}): {e!r}")
            self.history_state = TrackState.FAILED
            self.history_error = HISTORY_ERROR_MESSAGE
            self._notify(HISTORY_TRACK)
            return None

        if generation != self._history_generation:
            logger.debug(f"Discarding stale history for {asset_id} ({token.value})")
            return None

        self.chart_series = series
        self.history_error = None
        self.history_state = TrackState.READY
        self._notify(HISTORY_TRACK)
        return self.chart_series

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def last_error(self) -> Optional[str]:
        return self.history_error or self.snapshot_error

    def get_status(self) -> Dict[str, Any]:
        """Get scheduler status for the presentation layer."""
        return {
            'running': self._running,
            'snapshot_state': self.snapshot_state.value,
            'ranked_count': len(self.ranked),
            'no_matches': self.no_matches,
            'history_state': self.history_state.value,
            'selected_asset': self.selected_asset,
            'selected_range': self.selected_range.value,
            'chart_points': len(self.chart_series) if self.chart_series is not None else None,
            'last_error': self.last_error,
        }
