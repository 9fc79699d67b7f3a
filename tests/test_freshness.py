"""Tests for the cache freshness gate."""

import asyncio
import math
from datetime import timedelta
from unittest.mock import MagicMock

from govcon_finder.freshness import FreshnessGate
from govcon_finder.store import OpportunityCache
from tests.conftest import FIXED_NOW


class TestFreshnessGate:
    """Tests for FreshnessGate."""

    def test_just_inside_window_is_fresh(self, cache: OpportunityCache) -> None:
        result = FreshnessGate(cache).evaluate(FIXED_NOW - timedelta(hours=5, minutes=59), FIXED_NOW)
        assert result.fresh is True
        assert 5.9 < result.age_hours < 6

    def test_just_outside_window_is_stale(self, cache: OpportunityCache) -> None:
        result = FreshnessGate(cache).evaluate(FIXED_NOW - timedelta(hours=6, minutes=1), FIXED_NOW)
        assert result.fresh is False

    def test_exactly_max_age_is_stale(self, cache: OpportunityCache) -> None:
        assert FreshnessGate(cache).evaluate(FIXED_NOW - timedelta(hours=6), FIXED_NOW).fresh is False

    def test_no_sync_is_infinitely_old(self, cache: OpportunityCache) -> None:
        result = asyncio.run(FreshnessGate(cache).check(FIXED_NOW))
        assert result.fresh is False
        assert math.isinf(result.age_hours)

    def test_check_reads_newest_sync(self, cache: OpportunityCache) -> None:
        cache.record_sync(FIXED_NOW - timedelta(hours=2), 4, ["541512"])
        result = asyncio.run(FreshnessGate(cache, max_age_hours=3).check(FIXED_NOW))
        assert result.fresh is True
        assert result.age_hours == 2

    def test_read_failure_treated_as_stale(self) -> None:
        broken = MagicMock(spec=OpportunityCache)
        broken.last_sync.side_effect = RuntimeError("database is locked")
        result = asyncio.run(FreshnessGate(broken).check(FIXED_NOW))
        assert result.fresh is False
