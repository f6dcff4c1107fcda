"""Market data connector interface and implementations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import asyncio
import logging

import aiohttp

from ..core.errors import NetworkError

logger = logging.getLogger(__name__)


class MarketDataConnector(ABC):
    """Abstract base class for market data connectors."""

    @abstractmethod
    async def get_assets(self) -> List[Dict]:
        """Get the raw snapshot records for all tracked assets."""
        pass

    @abstractmethod
    async def get_asset_history(
        self,
        asset_id: str,
        interval: str,
        start: int,
        end: int
    ) -> List[Dict]:
        """Get raw price history records for one asset."""
        pass

    @abstractmethod
    async def close(self):
        """Close connection."""
        pass


class CoinCapConnector(MarketDataConnector):
    """CoinCap REST API connector."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize CoinCap connector."""
        self.config = config or {}
        self.base_url = self.config.get('base_url', 'https://api.coincap.io/v2').rstrip('/')
        self.api_key = self.config.get('api_key') or ''
        self.timeout = self.config.get('timeout', 30)
        self._session: Optional[aiohttp.ClientSession] = None
        logger.info(f"Initialized CoinCap connector for {self.base_url}")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            headers = {"Accept": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """GET *path* and return the ``data`` array of the JSON body."""
        url = f"{self.base_url}{path}"
        try:
            session = await self._get_session()
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise NetworkError(
                        f"CoinCap API error {response.status} for {path}: {error_text[:200]}",
                        status=response.status,
                    )
                body = await response.json()
        except NetworkError as e:
            logger.error(str(e))
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Error requesting {path}: {e!r}")
            raise NetworkError(f"Request to {path} failed: {e!r}") from e

        data = body.get('data') if isinstance(body, dict) else None
        if not isinstance(data, list):
            logger.error(f"Malformed response for {path}: missing 'data' array")
            raise NetworkError(f"Malformed response for {path}")
        return data

    async def get_assets(self) -> List[Dict]:
        """Get all asset snapshots."""
        assets = await self._get_data('/assets')
        logger.debug(f"Fetched {len(assets)} asset records")
        return assets

    async def get_asset_history(
        self,
        asset_id: str,
        interval: str,
        start: int,
        end: int
    ) -> List[Dict]:
        """Get price history for *asset_id* sampled at *interval* in [start, end]."""
        history = await self._get_data(
            f'/assets/{asset_id}/history',
            params={'interval': interval, 'start': str(start), 'end': str(end)},
        )
        logger.debug(f"Fetched {len(history)} history records for {asset_id} ({interval})")
        return history

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.info("Closed CoinCap connection")
