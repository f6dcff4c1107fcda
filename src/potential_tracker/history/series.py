"""Conversion of raw history points into chart-ready series."""

import logging
from typing import Sequence, Union

import pandas as pd

from ..core.enums import RangeToken
from ..core.models import ChartSeries, HistoryPoint

logger = logging.getLogger(__name__)

# Hour of day is only meaningful for the intraday range
LABEL_FORMATS = {
    RangeToken.H24: "%b %d %H:%M",
}
DEFAULT_LABEL_FORMAT = "%b %d"


def label_format(token: Union[RangeToken, str]) -> str:
    """Return the strftime pattern used for labels of *token*."""
    return LABEL_FORMATS.get(RangeToken(token), DEFAULT_LABEL_FORMAT)


def to_chart_series(
    points: Sequence[HistoryPoint],
    token: Union[RangeToken, str],
    asset_id: str = "",
) -> ChartSeries:
    """Map history points 1:1 onto (label, price) pairs, preserving order.

    Labels are rendered in UTC. Unparseable prices become NaN so that the
    series length always matches the number of points.
    """
    token = RangeToken(token)
    if not points:
        return ChartSeries(asset_id=asset_id, range_token=token)

    df = pd.DataFrame({
        'time': [p.time for p in points],
        'price': [p.price for p in points],
    })
    df['label'] = pd.to_datetime(df['time'], unit='ms', utc=True).dt.strftime(label_format(token))

    series = ChartSeries(
        asset_id=asset_id,
        range_token=token,
        points=list(zip(df['label'].tolist(), df['price'].astype(float).tolist())),
    )
    logger.debug(f"Built {len(series)} chart points for {asset_id or '?'} ({token.value})")
    return series
