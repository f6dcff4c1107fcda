"""Pytest configuration and fixtures."""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from potential_tracker.core.errors import NetworkError
from potential_tracker.core.models import AssetSnapshot, FilterParams, HistoryPoint


def _make_asset_record(
    asset_id: str = "bitcoin",
    symbol: Optional[str] = None,
    market_cap: Optional[str] = "2000000000",
    volume: Optional[str] = "1000000000",
    change: Optional[str] = "10",
    supply: Optional[str] = "500000",
    max_supply: Optional[str] = "1000000",
    price: Optional[str] = "1.5",
) -> Dict:
    """Build a raw asset record shaped like the CoinCap /assets response."""
    return {
        "id": asset_id,
        "rank": "1",
        "symbol": symbol or asset_id[:3].upper(),
        "name": asset_id.title(),
        "supply": supply,
        "maxSupply": max_supply,
        "marketCapUsd": market_cap,
        "volumeUsd24Hr": volume,
        "priceUsd": price,
        "changePercent24Hr": change,
        "vwap24Hr": price,
    }


def _make_snapshot(asset_id: str = "bitcoin", **kwargs) -> AssetSnapshot:
    return AssetSnapshot.model_validate(_make_asset_record(asset_id, **kwargs))


def _make_history_records(count: int, start_ms: int = 1_700_000_000_000, step_ms: int = 3_600_000) -> List[Dict]:
    return [
        {"priceUsd": str(100.0 + i), "time": start_ms + i * step_ms, "date": "2023-11-14T22:13:20.000Z"}
        for i in range(count)
    ]


def _make_history_points(count: int, **kwargs) -> List[HistoryPoint]:
    return [HistoryPoint.model_validate(r) for r in _make_history_records(count, **kwargs)]


class MockConnector:
    """In-memory connector returning canned records."""

    def __init__(self, assets: Optional[List[Dict]] = None, history: Optional[List[Dict]] = None):
        self.assets = assets or []
        self.history = history or []
        self.fail = False
        self.history_calls: List[Tuple[str, str, int, int]] = []
        self.closed = False

    async def get_assets(self):
        if self.fail:
            raise NetworkError("endpoint unreachable")
        return self.assets

    async def get_asset_history(self, asset_id, interval, start, end):
        self.history_calls.append((asset_id, interval, start, end))
        if self.fail:
            raise NetworkError("endpoint unreachable")
        return self.history

    async def close(self):
        self.closed = True


class ControlledSnapshotFetcher:
    """Snapshot fetcher whose calls block until the test resolves them."""

    def __init__(self):
        self.calls = 0
        self.pending: List[asyncio.Future] = []

    async def fetch(self):
        self.calls += 1
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


class ControlledHistoryFetcher:
    """History fetcher whose calls block until resolved per (asset, range) key."""

    def __init__(self):
        self.pending: Dict[Tuple[str, str], asyncio.Future] = {}
        self.requests: List[Tuple[str, str]] = []

    async def fetch(self, asset_id, spec):
        key = (asset_id, spec.token.value)
        self.requests.append(key)
        future = asyncio.get_running_loop().create_future()
        self.pending[key] = future
        return await future

    def resolve(self, asset_id, token, points):
        self.pending[(asset_id, token)].set_result(points)

    def fail(self, asset_id, token):
        self.pending[(asset_id, token)].set_exception(NetworkError("timeout"))


@pytest.fixture
def filter_params():
    return FilterParams(
        min_volume=1_000_000,
        min_market_cap=1_000_000,
        max_market_cap=5_000_000_000,
        max_results=100,
    )


@pytest.fixture
def make_asset_record():
    """Factory for raw /assets records."""
    return _make_asset_record


@pytest.fixture
def make_snapshot():
    """Factory for parsed snapshots."""
    return _make_snapshot


@pytest.fixture
def make_history_records():
    return _make_history_records


@pytest.fixture
def make_history_points():
    return _make_history_points


@pytest.fixture
def mock_connector():
    return MockConnector()


@pytest.fixture
def snapshot_fetcher():
    return ControlledSnapshotFetcher()


@pytest.fixture
def history_fetcher():
    return ControlledHistoryFetcher()
