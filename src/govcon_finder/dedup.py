"""Deduplication, expiry filtering, and normalization of one fetch cycle."""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from govcon_finder.codes import matches_known_code
from govcon_finder.connectors.base import BaseConnector
from govcon_finder.connectors.samgov.parsers import extract_code, parse_datetime, raw_deadline
from govcon_finder.models.opportunity import Opportunity
from govcon_finder.models.raw import RawListing

logger = logging.getLogger(__name__)


class Deduplicator:
    """
    Owns the seen-id set of a single fetch cycle. First eligible occurrence
    of a notice id wins; later copies are dropped. Create one per cycle.
    """

    def __init__(self, now: datetime, known_codes: Optional[Iterable[str]] = None):
        self.now = now
        self._known_codes = list(known_codes) if known_codes is not None else None
        self._seen: set[str] = set()
        self.dropped_duplicate = 0
        self.dropped_expired = 0
        self.dropped_code = 0

    def eligible_deadline(self, raw: RawListing) -> Optional[datetime]:
        """
        Deadline if the listing should be kept, else None. Missing id,
        already-seen id, missing/past deadline, and (wildcard only) an
        unknown code all disqualify.
        """
        notice_id = raw.notice_id
        if not notice_id:
            return None
        if notice_id in self._seen:
            self.dropped_duplicate += 1
            return None

        deadline = parse_datetime(raw_deadline(raw.data))
        if deadline is None or deadline <= self.now:
            self.dropped_expired += 1
            return None

        if self._known_codes is not None:
            if not matches_known_code(extract_code(raw.data), self._known_codes):
                self.dropped_code += 1
                return None

        self._seen.add(notice_id)
        return deadline

    def run(self, raw_listings: Iterable[RawListing], connector: BaseConnector) -> list[Opportunity]:
        """Normalize every eligible listing, preserving first-seen order."""
        opportunities: list[Opportunity] = []
        for raw in raw_listings:
            deadline = self.eligible_deadline(raw)
            if deadline is None:
                continue
            opportunities.append(connector.normalize(raw, deadline))
        logger.info(
            "Kept %d listings (dropped %d duplicate, %d expired, %d off-code)",
            len(opportunities),
            self.dropped_duplicate,
            self.dropped_expired,
            self.dropped_code,
        )
        return opportunities


def dedupe_and_normalize(
    raw_listings: Iterable[RawListing],
    connector: BaseConnector,
    *,
    now: datetime,
    known_codes: Optional[Iterable[str]] = None,
) -> list[Opportunity]:
    """
    One-shot helper: fresh Deduplicator for this cycle.
    Pass known_codes only in wildcard mode.
    """
    return Deduplicator(now, known_codes).run(raw_listings, connector)
