"""Caller-requested filtering and sorting."""

from govcon_finder.filtering.engine import FilterEngine, FilterResult

__all__ = ["FilterEngine", "FilterResult"]
