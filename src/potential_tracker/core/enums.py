"""Core enumerations for the potential tracker."""

from enum import Enum


class RangeToken(str, Enum):
    """History time ranges selectable for an asset chart."""
    H24 = "24H"
    D7 = "7D"
    D30 = "30D"
    ALL = "ALL"


class TrackState(str, Enum):
    """Lifecycle states of an asynchronous fetch track."""
    IDLE = "idle"
    NO_SELECTION = "no_selection"
    FETCHING = "fetching"
    READY = "ready"
    FAILED = "failed"
