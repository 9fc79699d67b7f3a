"""Cache freshness gate: serve from the cache or fetch live."""

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime

from govcon_finder.store.sqlite_store import OpportunityCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Freshness:
    """Age of the newest sync and whether it is inside the freshness window."""

    age_hours: float
    fresh: bool


class FreshnessGate:
    """Compares the newest sync-log timestamp against a max age in hours."""

    def __init__(self, cache: OpportunityCache, max_age_hours: float = 6.0):
        self._cache = cache
        self.max_age_hours = max_age_hours

    def evaluate(self, last_synced_at: datetime | None, now: datetime) -> Freshness:
        """No sync on record counts as infinitely old."""
        if last_synced_at is None:
            return Freshness(age_hours=math.inf, fresh=False)
        age_hours = (now - last_synced_at).total_seconds() / 3600
        return Freshness(age_hours=age_hours, fresh=age_hours < self.max_age_hours)

    async def check(self, now: datetime) -> Freshness:
        """Read the sync log; a failed read is treated as stale."""
        try:
            entry = await asyncio.to_thread(self._cache.last_sync)
        except Exception as e:
            logger.warning("Sync log read failed, treating cache as stale: %s", e)
            entry = None
        return self.evaluate(entry.synced_at if entry else None, now)
