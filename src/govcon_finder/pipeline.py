"""Discovery orchestration: resolve codes -> cache or live fetch -> filter -> persist."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Optional

from govcon_finder.codes import ClassificationCodeResolver, CodeStrategy, ResolvedCodes
from govcon_finder.config import DiscoveryConfig
from govcon_finder.connectors.base import BaseConnector
from govcon_finder.connectors.samgov import SamGovConnector
from govcon_finder.dedup import dedupe_and_normalize
from govcon_finder.errors import ConfigurationError
from govcon_finder.fetching import BatchFetcher
from govcon_finder.filtering import FilterEngine
from govcon_finder.freshness import FreshnessGate
from govcon_finder.models.query import AppliedFilters, DiscoveryResult, OpportunityQuery
from govcon_finder.store import ContractorStore, OpportunityCache

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
ConnectorFactory = Callable[[DiscoveryConfig], BaseConnector]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_connector_factory(config: DiscoveryConfig) -> BaseConnector:
    return SamGovConnector(
        config.api_key or "",
        base_url=config.base_url,
        timeout=config.request_timeout_seconds,
    )


class DiscoveryService:
    """
    Serves one discovery request end to end.

    The cache is read when the newest sync is younger than the freshness
    window (unless the caller forces a refresh); otherwise the upstream API
    is queried, results are normalized, deduplicated, filtered, sorted, and
    written back. Store and upstream failures degrade the answer instead of
    failing the request; only a missing API key is raised.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        *,
        cache: Optional[OpportunityCache] = None,
        contractor_codes: Optional[CodeStrategy] = None,
        connector_factory: ConnectorFactory = default_connector_factory,
        clock: Clock = utc_now,
    ):
        self.config = config
        self.cache = cache or OpportunityCache(config.db_path)
        if contractor_codes is None:
            contractor_codes = ContractorStore(config.db_path).distinct_codes
        self.resolver = ClassificationCodeResolver(contractor_codes)
        self.gate = FreshnessGate(self.cache, config.freshness_hours)
        self._connector_factory = connector_factory
        self._clock = clock

    async def discover(self, query: OpportunityQuery) -> DiscoveryResult:
        if not self.config.api_key:
            raise ConfigurationError(
                "SAM.gov API key not configured. Set SAMGOVAPIKEY in the environment."
            )

        requested_at = self._clock()
        resolved = await asyncio.to_thread(self.resolver.resolve, query.include_all)
        logger.info(
            "Searching %s",
            "without NAICS filter (wildcard)" if resolved.wildcard else f"{len(resolved.codes)} NAICS codes",
        )

        if not query.force_refresh:
            served = await self._serve_from_cache(query, resolved, requested_at)
            if served is not None:
                return served

        return await self._fetch_live(query, resolved, requested_at)

    async def _serve_from_cache(
        self,
        query: OpportunityQuery,
        resolved: ResolvedCodes,
        now: datetime,
    ) -> Optional[DiscoveryResult]:
        freshness = await self.gate.check(now)
        if not freshness.fresh:
            logger.info("Cache stale (%.1fh), fetching from SAM.gov", freshness.age_hours)
            return None

        try:
            rows = await asyncio.to_thread(self.cache.read_live, now, self.config.cache_read_limit)
        except Exception as e:
            logger.error("Cache read error, falling back to SAM.gov: %s", e)
            return None

        opportunities = FilterEngine(query).apply(rows)
        logger.info("Served %d from cache (%.1fh old)", len(opportunities), freshness.age_hours)
        return DiscoveryResult(
            opportunities=opportunities,
            total=len(opportunities),
            total_found=len(rows),
            code_count=len(resolved.codes),
            filters=AppliedFilters.from_query(query),
            cached=True,
            cache_age_hours=round(freshness.age_hours, 1),
            timestamp=self._clock().isoformat(),
            wildcard_mode=resolved.wildcard,
        )

    async def _fetch_live(
        self,
        query: OpportunityQuery,
        resolved: ResolvedCodes,
        requested_at: datetime,
    ) -> DiscoveryResult:
        connector = self._connector_factory(self.config)
        try:
            fetcher = BatchFetcher.from_config(connector, self.config)
            raw_listings = await fetcher.fetch(resolved.codes, wildcard=resolved.wildcard, now=requested_at)
            logger.info("Fetched %d raw listings", len(raw_listings))

            known_codes = None
            if resolved.wildcard:
                known_codes = await asyncio.to_thread(self.resolver.known_codes)

            processed_at = self._clock()
            opportunities = dedupe_and_normalize(
                raw_listings,
                connector,
                now=processed_at,
                known_codes=known_codes,
            )
        finally:
            await connector.aclose()

        results = FilterEngine(query).apply(opportunities)

        try:
            await asyncio.to_thread(self.cache.write_cycle, opportunities, resolved.codes, processed_at)
        except Exception as e:
            logger.error("Cache write error: %s", e)

        logger.info("Returning %d live opportunities (from %d total)", len(results), len(opportunities))
        return DiscoveryResult(
            opportunities=results,
            total=len(results),
            total_found=len(opportunities),
            code_count=len(resolved.codes),
            filters=AppliedFilters.from_query(query),
            cached=False,
            timestamp=processed_at.isoformat(),
            wildcard_mode=resolved.wildcard,
        )
