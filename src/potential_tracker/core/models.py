"""Core data models for the potential tracker."""

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import RangeToken


def parse_number(raw: Optional[str]) -> Optional[float]:
    """Parse decimal text into a finite float, or None if it does not parse."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _as_text(value: Any) -> Any:
    # The API sends decimal text, but tolerate bare JSON numbers.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return repr(value)
    return value


class AssetSnapshot(BaseModel):
    """One asset's market data at a point in time, as returned by the API."""

    id: str = Field(description="Stable asset identifier")
    rank: Optional[str] = Field(default=None, description="Rank by market cap")
    symbol: str = Field(default="", description="Ticker symbol")
    name: str = Field(default="", description="Display name")

    # Raw decimal text, parsed on demand
    supply: Optional[str] = Field(default=None, description="Circulating supply")
    max_supply: Optional[str] = Field(default=None, alias="maxSupply", description="Maximum supply")
    market_cap_usd: Optional[str] = Field(default=None, alias="marketCapUsd", description="Market cap in USD")
    volume_usd_24hr: Optional[str] = Field(default=None, alias="volumeUsd24Hr", description="24h volume in USD")
    price_usd: Optional[str] = Field(default=None, alias="priceUsd", description="Price in USD")
    change_percent_24hr: Optional[str] = Field(
        default=None, alias="changePercent24Hr", description="24h price change %"
    )
    vwap_24hr: Optional[str] = Field(default=None, alias="vwap24Hr", description="24h VWAP")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator(
        "rank", "supply", "max_supply", "market_cap_usd", "volume_usd_24hr",
        "price_usd", "change_percent_24hr", "vwap_24hr",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @property
    def market_cap(self) -> Optional[float]:
        return parse_number(self.market_cap_usd)

    @property
    def volume(self) -> Optional[float]:
        return parse_number(self.volume_usd_24hr)

    @property
    def change_percent(self) -> Optional[float]:
        return parse_number(self.change_percent_24hr)

    @property
    def circulating_supply(self) -> Optional[float]:
        return parse_number(self.supply)

    @property
    def maximum_supply(self) -> Optional[float]:
        return parse_number(self.max_supply)

    @property
    def price(self) -> Optional[float]:
        return parse_number(self.price_usd)


class RankedAsset(AssetSnapshot):
    """Snapshot with its potential score attached."""

    potential_score: int = Field(ge=0, le=100, description="Heuristic potential score (0-100)")

    @classmethod
    def from_snapshot(cls, snapshot: AssetSnapshot, score: int) -> "RankedAsset":
        return cls(**snapshot.model_dump(), potential_score=score)


class FilterParams(BaseModel):
    """Thresholds applied before ranking."""

    min_volume: float = Field(default=1_000_000, ge=0, description="Minimum 24h volume in USD")
    min_market_cap: float = Field(default=1_000_000, ge=0, description="Minimum market cap in USD")
    max_market_cap: float = Field(default=5_000_000_000, ge=0, description="Maximum market cap in USD")
    max_results: int = Field(default=100, ge=1, description="Maximum ranked list length")

    @model_validator(mode="after")
    def validate_market_cap_band(self):
        if self.min_market_cap > self.max_market_cap:
            raise ValueError("min_market_cap must not exceed max_market_cap")
        return self


class TimeRangeSpec(BaseModel):
    """Sampling interval and lookback window for a range token."""

    token: RangeToken = Field(description="Range token")
    interval: str = Field(description="Sampling interval passed to the history endpoint")
    lookback_days: int = Field(gt=0, description="Lookback window in days")

    model_config = ConfigDict(frozen=True)


class HistoryPoint(BaseModel):
    """One historical price sample."""

    price_usd: Optional[str] = Field(default=None, alias="priceUsd", description="Price in USD")
    time: int = Field(description="Epoch milliseconds")
    date: Optional[str] = Field(default=None, description="ISO date marker")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("price_usd", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @property
    def price(self) -> float:
        value = parse_number(self.price_usd)
        return value if value is not None else float("nan")


@dataclass
class ChartSeries:
    """Chart-ready (label, value) pairs for one (asset, range) selection."""
    asset_id: str
    range_token: RangeToken
    points: List[Tuple[str, float]] = field(default_factory=list)

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self.points]

    @property
    def values(self) -> List[float]:
        return [value for _, value in self.points]

    def __len__(self) -> int:
        return len(self.points)
