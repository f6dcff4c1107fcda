"""Potential scanner: validates, filters, scores and ranks asset snapshots."""

import logging
from typing import Callable, Iterable, List, Optional

from ..core.errors import SnapshotValidationError
from ..core.models import AssetSnapshot, FilterParams, RankedAsset
from .scoring import calculate_potential_score

logger = logging.getLogger(__name__)


class PotentialScanner:
    """
    Filters snapshots by volume and market cap thresholds, scores the
    survivors, and returns them sorted by descending potential score,
    truncated to ``max_results``.
    """

    def __init__(
        self,
        params: Optional[FilterParams] = None,
        scorer: Callable[[AssetSnapshot], int] = calculate_potential_score,
    ):
        self.params = params or FilterParams()
        self.scorer = scorer
        self._last_ranked: List[RankedAsset] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def rank(self, snapshots: Iterable[AssetSnapshot]) -> List[RankedAsset]:
        """
        Full pipeline run.

        An empty result means no asset matched the thresholds; it is not
        an error.
        """
        snapshots = list(snapshots)
        survivors = self._filter_snapshots(snapshots)

        ranked = [self._score(s) for s in survivors]

        # sorted() is stable with reverse=True, so ties keep input order
        ranked = sorted(ranked, key=lambda a: a.potential_score, reverse=True)
        ranked = ranked[:self.params.max_results]

        if ranked:
            logger.info(f"Ranked {len(ranked)} of {len(snapshots)} assets")
        else:
            logger.warning(f"No assets matched the filter criteria ({len(snapshots)} scanned)")

        self._last_ranked = ranked
        return ranked

    def get_top_candidates(self, n: Optional[int] = None) -> List[RankedAsset]:
        """Return top *n* assets from the last run."""
        if n is None:
            n = self.params.max_results
        return self._last_ranked[:n]

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def _filter_snapshots(self, snapshots: List[AssetSnapshot]) -> List[AssetSnapshot]:
        """Keep snapshots with valid numeric fields that pass the thresholds."""
        result: List[AssetSnapshot] = []
        for snapshot in snapshots:
            try:
                self._validate(snapshot)
            except SnapshotValidationError as e:
                logger.debug(f"Filtered out {snapshot.symbol or snapshot.id}: {e}")
                continue
            if not self._passes_thresholds(snapshot):
                logger.debug(
                    f"Filtered out {snapshot.symbol or snapshot.id}: "
                    f"volume={snapshot.volume}, market_cap={snapshot.market_cap}, "
                    f"change={snapshot.change_percent}"
                )
                continue
            result.append(snapshot)
        return result

    @staticmethod
    def _validate(snapshot: AssetSnapshot) -> None:
        """Raise SnapshotValidationError if a required field is not a finite number."""
        if snapshot.volume is None:
            raise SnapshotValidationError(snapshot.id, "volumeUsd24Hr", snapshot.volume_usd_24hr)
        if snapshot.market_cap is None:
            raise SnapshotValidationError(snapshot.id, "marketCapUsd", snapshot.market_cap_usd)
        if snapshot.change_percent is None:
            raise SnapshotValidationError(snapshot.id, "changePercent24Hr", snapshot.change_percent_24hr)

    def _passes_thresholds(self, snapshot: AssetSnapshot) -> bool:
        params = self.params
        if snapshot.volume < params.min_volume:
            return False
        return params.min_market_cap <= snapshot.market_cap <= params.max_market_cap

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _score(self, snapshot: AssetSnapshot) -> RankedAsset:
        return RankedAsset.from_snapshot(snapshot, self.scorer(snapshot))
