"""Main potential tracker application."""

import asyncio
import logging
import os
import signal
import sys
from typing import Dict, Optional

from dotenv import load_dotenv

load_dotenv()

from .core.enums import TrackState
from .core.models import FilterParams
from .data.connector import CoinCapConnector
from .data.fetchers import HistoryFetcher, SnapshotFetcher
from .scanner.market_scanner import PotentialScanner
from .scheduler.refresh import HISTORY_TRACK, SNAPSHOT_TRACK, RefreshScheduler

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO):
    """Configure root logging for the application."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('potential_tracker.log'),
            logging.StreamHandler(sys.stdout)
        ]
    )


class PotentialTracker:
    """Composes the data pipeline and reports ranked assets as they refresh."""

    def __init__(self, config: Optional[Dict] = None):
        """Initialize the tracker."""
        defaults = self._default_config()
        if config:
            for key, val in config.items():
                if isinstance(val, dict) and key in defaults and isinstance(defaults[key], dict):
                    defaults[key].update(val)
                else:
                    defaults[key] = val
        self.config = defaults
        self._stopped = asyncio.Event()
        self._stop_task: Optional[asyncio.Task] = None

        self._init_components()
        logger.info("Potential tracker initialized")

    def _default_config(self) -> Dict:
        """Default configuration."""
        return {
            'api': {
                'base_url': 'https://api.coincap.io/v2',
                'api_key': os.getenv('COINCAP_API_KEY'),
                'timeout': 30,
            },
            'filters': {
                'min_volume': 1_000_000,
                'min_market_cap': 1_000_000,
                'max_market_cap': 5_000_000_000,
                'max_results': 100,
            },
            'refresh': {
                'interval_seconds': 60,
                'default_range': '7D',
            },
            'display': {
                'top_n': 10,
                'watch_asset': None,
            },
        }

    def _init_components(self):
        """Initialize all pipeline components."""
        try:
            self.connector = CoinCapConnector(self.config['api'])
            self.scanner = PotentialScanner(FilterParams(**self.config['filters']))

            refresh_cfg = self.config['refresh']
            self.scheduler = RefreshScheduler(
                SnapshotFetcher(self.connector),
                self.scanner,
                HistoryFetcher(self.connector),
                refresh_interval=refresh_cfg['interval_seconds'],
                default_range=refresh_cfg['default_range'],
            )
            self.scheduler.add_listener(self._on_update)

        except Exception as e:
            logger.error(f"Error initializing components: {e}")
            raise

    async def start(self):
        """Start refreshing and run until stopped."""
        logger.info("Starting potential tracker...")
        await self.scheduler.start()

        watch_asset = self.config['display'].get('watch_asset')
        if watch_asset:
            await self.scheduler.select_asset(watch_asset)

        await self._stopped.wait()

    async def stop(self):
        """Stop the scheduler and close the HTTP session."""
        logger.info("Stopping potential tracker...")
        await self.scheduler.stop()
        await self.connector.close()
        self._stopped.set()
        logger.info("Potential tracker stopped")

    def install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, lambda s=sig: self._signal_handler(s))
            except NotImplementedError:
                # Windows event loops have no signal handler support
                pass

    def _signal_handler(self, signum):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        if self._stop_task is None or self._stop_task.done():
            self._stop_task = asyncio.create_task(self.stop())

    def _on_update(self, track: str):
        if track == SNAPSHOT_TRACK:
            self._report_ranked()
        elif track == HISTORY_TRACK:
            self._report_history()

    def _report_ranked(self):
        scheduler = self.scheduler
        if scheduler.snapshot_state == TrackState.FAILED:
            logger.warning(f"{scheduler.snapshot_error} (showing {len(scheduler.ranked)} cached assets)")
            return
        if scheduler.no_matches:
            logger.warning("No assets matched the filter criteria")
            return

        top_n = self.config['display'].get('top_n', 10)
        for position, asset in enumerate(scheduler.ranked[:top_n], start=1):
            logger.info(
                f"#{position:<3} {asset.symbol:<8} {asset.name:<24} "
                f"score={asset.potential_score:>3}/100 "
                f"price={asset.price or 0:.4f} change={asset.change_percent or 0:+.2f}%"
            )

    def _report_history(self):
        scheduler = self.scheduler
        series = scheduler.chart_series
        if scheduler.history_state == TrackState.FAILED:
            logger.warning(f"{scheduler.history_error} for {scheduler.selected_asset}")
        elif series is not None and len(series):
            logger.info(
                f"{series.asset_id} {series.range_token.value}: {len(series)} points "
                f"from {series.labels[0]} ({series.values[0]:.4f}) "
                f"to {series.labels[-1]} ({series.values[-1]:.4f})"
            )
        elif series is not None:
            logger.info(f"{series.asset_id} {series.range_token.value}: no history available")

    def get_status(self) -> Dict:
        """Get tracker status."""
        return self.scheduler.get_status()


def _config_from_env() -> Dict:
    """Build config dict from environment variables."""
    config: Dict = {}

    # API
    base_url = os.getenv('COINCAP_BASE_URL', '').strip()
    timeout = os.getenv('COINCAP_TIMEOUT_SECONDS', '').strip()
    if base_url or timeout:
        config['api'] = {}
        if base_url:
            config['api']['base_url'] = base_url
        if timeout:
            config['api']['timeout'] = float(timeout)

    # Filters
    min_volume = os.getenv('MIN_VOLUME_USD', '').strip()
    min_cap = os.getenv('MIN_MARKET_CAP_USD', '').strip()
    max_cap = os.getenv('MAX_MARKET_CAP_USD', '').strip()
    max_results = os.getenv('MAX_RESULTS', '').strip()
    if any([min_volume, min_cap, max_cap, max_results]):
        config['filters'] = {}
        if min_volume:
            config['filters']['min_volume'] = float(min_volume)
        if min_cap:
            config['filters']['min_market_cap'] = float(min_cap)
        if max_cap:
            config['filters']['max_market_cap'] = float(max_cap)
        if max_results:
            config['filters']['max_results'] = int(max_results)

    # Refresh
    interval = os.getenv('REFRESH_INTERVAL_SECONDS', '').strip()
    default_range = os.getenv('DEFAULT_RANGE', '').strip()
    if interval or default_range:
        config['refresh'] = {}
        if interval:
            config['refresh']['interval_seconds'] = float(interval)
        if default_range:
            config['refresh']['default_range'] = default_range.upper()

    # Display
    watch_asset = os.getenv('WATCH_ASSET', '').strip()
    top_n = os.getenv('DISPLAY_TOP_N', '').strip()
    if watch_asset or top_n:
        config['display'] = {}
        if watch_asset:
            config['display']['watch_asset'] = watch_asset
        if top_n:
            config['display']['top_n'] = int(top_n)

    return config


async def main():
    """Main entry point."""
    setup_logging()
    config = _config_from_env()

    tracker = PotentialTracker(config if config else None)
    tracker.install_signal_handlers()

    try:
        await tracker.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise
    finally:
        await tracker.stop()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
