"""Unit tests for the CoinCap connector and the snapshot/history fetchers."""

import asyncio

import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from potential_tracker.core.errors import NetworkError
from potential_tracker.core.models import AssetSnapshot
from potential_tracker.data.connector import CoinCapConnector
from potential_tracker.data.fetchers import SnapshotFetcher, HistoryFetcher
from potential_tracker.history.ranges import get_time_range


def _mock_response(status=200, body=None, text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value=text)
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=response)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


def _connector_with_session(session):
    connector = CoinCapConnector({'base_url': 'https://example.test/v2/'})
    session.closed = False
    connector._session = session
    return connector


class TestCoinCapConnector:
    """Tests for HTTP response handling."""

    @pytest.mark.asyncio
    async def test_get_assets_success(self, make_asset_record):
        session = MagicMock()
        session.get = MagicMock(return_value=_mock_response(body={"data": [make_asset_record()]}))
        connector = _connector_with_session(session)

        assets = await connector.get_assets()

        assert assets[0]["id"] == "bitcoin"
        session.get.assert_called_once_with("https://example.test/v2/assets", params=None)

    @pytest.mark.asyncio
    async def test_get_asset_history_params(self, make_history_records):
        session = MagicMock()
        session.get = MagicMock(return_value=_mock_response(body={"data": make_history_records(3)}))
        connector = _connector_with_session(session)

        history = await connector.get_asset_history("ethereum", "h1", 1000, 2000)

        assert len(history) == 3
        session.get.assert_called_once_with(
            "https://example.test/v2/assets/ethereum/history",
            params={'interval': 'h1', 'start': '1000', 'end': '2000'},
        )

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self):
        session = MagicMock()
        session.get = MagicMock(return_value=_mock_response(status=503, text="unavailable"))
        connector = _connector_with_session(session)

        with pytest.raises(NetworkError) as exc_info:
            await connector.get_assets()
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_connection_error_raises_network_error(self):
        session = MagicMock()
        session.get = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        connector = _connector_with_session(session)

        with pytest.raises(NetworkError):
            await connector.get_assets()

    @pytest.mark.asyncio
    async def test_timeout_raises_network_error(self):
        session = MagicMock()
        session.get = MagicMock(side_effect=asyncio.TimeoutError())
        connector = _connector_with_session(session)

        with pytest.raises(NetworkError):
            await connector.get_asset_history("bitcoin", "m5", 0, 1)

    @pytest.mark.asyncio
    async def test_malformed_body_raises_network_error(self):
        session = MagicMock()
        session.get = MagicMock(return_value=_mock_response(body={"error": "nope"}))
        connector = _connector_with_session(session)

        with pytest.raises(NetworkError, match="Malformed"):
            await connector.get_assets()

    @pytest.mark.asyncio
    async def test_close(self):
        session = MagicMock()
        session.close = AsyncMock()
        connector = _connector_with_session(session)

        await connector.close()

        session.close.assert_awaited_once()


class TestSnapshotFetcher:
    @pytest.mark.asyncio
    async def test_parses_records(self, mock_connector, make_asset_record):
        mock_connector.assets = [make_asset_record("bitcoin"), make_asset_record("ethereum")]
        snapshots = await SnapshotFetcher(mock_connector).fetch()
        assert [s.id for s in snapshots] == ["bitcoin", "ethereum"]
        assert all(isinstance(s, AssetSnapshot) for s in snapshots)
        assert snapshots[0].market_cap == 2_000_000_000

    @pytest.mark.asyncio
    async def test_null_max_supply_and_numeric_fields(self, mock_connector, make_asset_record):
        record = make_asset_record("dogecoin", max_supply=None)
        record["volumeUsd24Hr"] = 12345678.5
        mock_connector.assets = [record]
        snapshot = (await SnapshotFetcher(mock_connector).fetch())[0]
        assert snapshot.maximum_supply is None
        assert snapshot.volume == 12345678.5

    @pytest.mark.asyncio
    async def test_skips_records_without_id(self, mock_connector, make_asset_record):
        broken = make_asset_record()
        del broken["id"]
        mock_connector.assets = [broken, make_asset_record("solana")]
        snapshots = await SnapshotFetcher(mock_connector).fetch()
        assert [s.id for s in snapshots] == ["solana"]

    @pytest.mark.asyncio
    async def test_network_error_propagates(self, mock_connector):
        mock_connector.fail = True
        with pytest.raises(NetworkError):
            await SnapshotFetcher(mock_connector).fetch()


class TestHistoryFetcher:
    @pytest.mark.asyncio
    async def test_requests_window_for_range(self, mock_connector, make_history_records):
        mock_connector.history = make_history_records(4)
        fetcher = HistoryFetcher(mock_connector, clock=lambda: 1_700_000_000.0)

        points = await fetcher.fetch("bitcoin", get_time_range("ALL"))

        assert len(points) == 4
        now = 1_700_000_000_000
        assert mock_connector.history_calls == [("bitcoin", "d1", now - 2000 * 86_400_000, now)]

    @pytest.mark.asyncio
    async def test_points_ordered_by_time(self, mock_connector, make_history_records):
        mock_connector.history = list(reversed(make_history_records(3)))
        fetcher = HistoryFetcher(mock_connector, clock=lambda: 0.0)
        points = await fetcher.fetch("bitcoin", get_time_range("7D"))
        times = [p.time for p in points]
        assert times == sorted(times)

    @pytest.mark.asyncio
    async def test_network_error_propagates(self, mock_connector):
        mock_connector.fail = True
        with pytest.raises(NetworkError):
            await HistoryFetcher(mock_connector).fetch("bitcoin", get_time_range("24H"))
