"""Periodic refresh and selection-driven fetch orchestration."""

from .refresh import RefreshScheduler, SNAPSHOT_ERROR_MESSAGE, HISTORY_ERROR_MESSAGE

__all__ = ["RefreshScheduler", "SNAPSHOT_ERROR_MESSAGE", "HISTORY_ERROR_MESSAGE"]
