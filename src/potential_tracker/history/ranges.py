"""Time range catalog for asset price history."""

from typing import Dict, Tuple, Union

from ..core.enums import RangeToken
from ..core.models import TimeRangeSpec

MS_PER_DAY = 24 * 60 * 60 * 1000

DEFAULT_RANGE = RangeToken.D7

TIME_RANGES: Dict[RangeToken, TimeRangeSpec] = {
    RangeToken.H24: TimeRangeSpec(token=RangeToken.H24, interval="m5", lookback_days=1),
    RangeToken.D7: TimeRangeSpec(token=RangeToken.D7, interval="h1", lookback_days=7),
    RangeToken.D30: TimeRangeSpec(token=RangeToken.D30, interval="h2", lookback_days=30),
    RangeToken.ALL: TimeRangeSpec(token=RangeToken.ALL, interval="d1", lookback_days=2000),
}


def get_time_range(token: Union[RangeToken, str]) -> TimeRangeSpec:
    """Look up the sampling interval and lookback window for a range token.

    Raises ValueError for an unknown token; callers are expected to pass
    only catalog tokens.
    """
    return TIME_RANGES[RangeToken(token)]


def compute_window(spec: TimeRangeSpec, now_ms: int) -> Tuple[int, int]:
    """Return the (start, end) epoch-millisecond window ending at *now_ms*."""
    return now_ms - spec.lookback_days * MS_PER_DAY, now_ms
