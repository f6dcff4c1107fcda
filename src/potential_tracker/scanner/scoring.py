"""Heuristic potential score for a single asset snapshot.

The score is the sum of four capped sub-scores, rounded half-up:

    capitalization  0-30  smaller caps inside the 1M-5B band score higher
    volume          0-25  turnover relative to market cap
    supply          0-20  headroom between circulating and max supply
    trend           0-25  positive 24h price change only

Scoring never raises: any parse failure on a required field or arithmetic
error collapses the whole score to 0.
"""

import logging
import math
from typing import Optional

from ..core.models import AssetSnapshot

logger = logging.getLogger(__name__)

MARKET_CAP_FLOOR = 1_000_000
MARKET_CAP_CEILING = 5_000_000_000

MARKET_CAP_POINTS = 30.0
VOLUME_POINTS = 25.0
SUPPLY_POINTS = 20.0
TREND_POINTS = 25.0

MAX_SCORE = 100


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def market_cap_score(market_cap: float) -> float:
    """Log-linear decay from 30 at the floor to 0 at the ceiling."""
    if not MARKET_CAP_FLOOR <= market_cap <= MARKET_CAP_CEILING:
        return 0.0
    span = math.log(MARKET_CAP_CEILING) - math.log(MARKET_CAP_FLOOR)
    position = (math.log(market_cap) - math.log(MARKET_CAP_FLOOR)) / span
    return _clamp(MARKET_CAP_POINTS * (1 - position), 0.0, MARKET_CAP_POINTS)


def volume_score(volume: float, market_cap: float) -> float:
    if volume <= 0:
        return 0.0
    return _clamp(volume / market_cap * 100, 0.0, VOLUME_POINTS)


def supply_score(supply: Optional[float], max_supply: Optional[float]) -> float:
    # Uncapped assets have no max supply and get no scarcity credit
    if supply is None or max_supply is None or max_supply <= 0:
        return 0.0
    return _clamp(SUPPLY_POINTS * (1 - supply / max_supply), 0.0, SUPPLY_POINTS)


def trend_score(change_percent: float) -> float:
    return _clamp(change_percent, 0.0, TREND_POINTS)


def calculate_potential_score(snapshot: AssetSnapshot) -> int:
    """Compute the 0-100 potential score for *snapshot*."""
    market_cap = snapshot.market_cap
    volume = snapshot.volume
    change_percent = snapshot.change_percent
    if market_cap is None or volume is None or change_percent is None:
        logger.debug(f"Cannot score {snapshot.id}: missing market cap, volume or change")
        return 0

    try:
        total = (
            market_cap_score(market_cap)
            + volume_score(volume, market_cap)
            + supply_score(snapshot.circulating_supply, snapshot.maximum_supply)
            + trend_score(change_percent)
        )
    except (ArithmeticError, ValueError) as e:
        logger.debug(f"Scoring failed for {snapshot.id}: {e}")
        return 0

    if not math.isfinite(total):
        return 0
    return int(_clamp(math.floor(total + 0.5), 0, MAX_SCORE))
