"""Error taxonomy for the potential tracker."""

from typing import Optional


class TrackerError(Exception):
    """Base class for tracker errors."""


class NetworkError(TrackerError):
    """Market-data endpoint unreachable, timed out or returned a bad status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class SnapshotValidationError(TrackerError):
    """A snapshot's numeric field did not parse to a finite number."""

    def __init__(self, asset_id: str, field: str, raw: Optional[str] = None):
        super().__init__(f"Invalid {field} for {asset_id}: {raw!r}")
        self.asset_id = asset_id
        self.field = field
        self.raw = raw
