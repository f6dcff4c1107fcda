"""Potential scanner for filtering, scoring and ranking assets."""

from .market_scanner import PotentialScanner
from .scoring import calculate_potential_score

__all__ = ["PotentialScanner", "calculate_potential_score"]
