"""Concurrent, rate-limited, deadline-bounded fetching of raw listings."""

import asyncio
import logging
from collections.abc import Coroutine, Iterator, Sequence
from datetime import datetime, timedelta
from typing import Any, Optional, TypeVar

from govcon_finder.config import DiscoveryConfig
from govcon_finder.connectors.base import BaseConnector, PostedWindow
from govcon_finder.models.raw import RawListing

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Consecutive slices of at most `size` items."""
    if size < 1:
        raise ValueError("size must be >= 1")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


class CancellationToken:
    """
    One cancellation signal shared by every call of a fetch cycle.
    cancel() is idempotent; calls guarded by run() see cancellation as
    a None result rather than an exception.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._timer: Optional[asyncio.TimerHandle] = None
        self.reason: Optional[str] = None

    @classmethod
    def with_deadline(cls, seconds: float) -> "CancellationToken":
        """Token that cancels itself `seconds` from now. Needs a running loop."""
        token = cls()
        loop = asyncio.get_running_loop()
        token._timer = loop.call_later(seconds, token.cancel, f"deadline of {seconds:g}s reached")
        return token

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        logger.warning("Fetch cancelled: %s", reason)
        self._event.set()

    def dispose(self) -> None:
        """Stop the deadline timer. Safe to call more than once."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def run(self, coro: Coroutine[Any, Any, T]) -> Optional[T]:
        """Await `coro` unless the token fires first; returns None if cancelled."""
        if self.cancelled:
            coro.close()
            return None
        task = asyncio.ensure_future(coro)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
        if task.cancelled():
            return None
        if not task.done():
            await asyncio.gather(task, return_exceptions=True)
            return None
        return task.result()


class BatchFetcher:
    """
    Fans out one upstream query per classification code.

    Codes are split into outer batches, each outer batch into inner batches
    whose calls run concurrently. Inner batches run one after another with a
    short delay. A single deadline covers the whole fetch; when it fires,
    outstanding calls are cancelled and whatever was collected is returned.
    """

    def __init__(
        self,
        connector: BaseConnector,
        *,
        outer_batch_size: int = 20,
        inner_batch_size: int = 5,
        batch_delay_seconds: float = 0.1,
        deadline_seconds: float = 20.0,
        page_size: int = 50,
        wildcard_page_size: int = 200,
        lookback_days: int = 120,
    ):
        self._connector = connector
        self.outer_batch_size = outer_batch_size
        self.inner_batch_size = inner_batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self.deadline_seconds = deadline_seconds
        self.page_size = page_size
        self.wildcard_page_size = wildcard_page_size
        self.lookback_days = lookback_days

    @classmethod
    def from_config(cls, connector: BaseConnector, config: DiscoveryConfig) -> "BatchFetcher":
        return cls(
            connector,
            outer_batch_size=config.outer_batch_size,
            inner_batch_size=config.inner_batch_size,
            batch_delay_seconds=config.batch_delay_seconds,
            deadline_seconds=config.fetch_deadline_seconds,
            page_size=config.page_size,
            wildcard_page_size=config.wildcard_page_size,
            lookback_days=config.lookback_days,
        )

    def posted_window(self, now: datetime) -> PostedWindow:
        return PostedWindow(posted_from=now - timedelta(days=self.lookback_days), posted_to=now)

    async def fetch(self, codes: Sequence[str], *, wildcard: bool, now: datetime) -> list[RawListing]:
        """
        Fetch raw listings for one cycle. Never raises for upstream failures.
        Output is concatenated across codes/batches with no dedup.
        """
        window = self.posted_window(now)
        token = CancellationToken.with_deadline(self.deadline_seconds)
        try:
            if wildcard:
                return await self._fetch_wildcard(window, token)
            return await self._fetch_targeted(list(codes), window, token)
        finally:
            token.dispose()

    async def _fetch_wildcard(self, window: PostedWindow, token: CancellationToken) -> list[RawListing]:
        page = await token.run(
            self._connector.search(None, window, limit=self.wildcard_page_size)
        )
        if page is None:
            logger.warning("Wildcard search cancelled before completion")
            return []
        logger.info("Wildcard search returned %d listings", len(page))
        return page

    async def _fetch_code(self, code: str, window: PostedWindow, token: CancellationToken) -> list[RawListing]:
        page = await token.run(self._connector.search(code, window, limit=self.page_size))
        if page is None:
            logger.debug("Call for NAICS %s cancelled", code)
            return []
        return page

    async def _fetch_targeted(
        self,
        codes: list[str],
        window: PostedWindow,
        token: CancellationToken,
    ) -> list[RawListing]:
        collected: list[RawListing] = []
        outer_batches = list(chunked(codes, self.outer_batch_size))

        for outer_index, outer in enumerate(outer_batches, start=1):
            before = len(collected)
            inner_batches = list(chunked(outer, self.inner_batch_size))
            for inner_index, inner in enumerate(inner_batches):
                if token.cancelled:
                    break
                pages = await asyncio.gather(*(self._fetch_code(code, window, token) for code in inner))
                for page in pages:
                    collected.extend(page)
                if inner_index + 1 < len(inner_batches):
                    await token.run(asyncio.sleep(self.batch_delay_seconds))

            logger.info(
                "Batch %d/%d: got %d listings",
                outer_index,
                len(outer_batches),
                len(collected) - before,
            )
            if token.cancelled:
                logger.warning(
                    "Skipping %d remaining batch(es); using %d listings collected so far",
                    len(outer_batches) - outer_index,
                    len(collected),
                )
                break

        return collected
