"""SAM.gov connector using the public Opportunities API (v2).

The search endpoint accepts one NAICS code per request, so callers fan out
one request per code (see govcon_finder.fetching). Every failure mode of a
single request (non-2xx, network error, timeout, bad JSON) is logged and
turned into an empty page; it never propagates to the batch.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx

from govcon_finder.connectors.base import BaseConnector, PostedWindow
from govcon_finder.models.opportunity import Opportunity
from govcon_finder.models.raw import RawListing

from .constants import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    DESCRIPTION,
    POSTED_DATE,
    RESULTS_KEY,
    SET_ASIDE_DESCRIPTION,
    SOLICITATION_NUMBER,
    TITLE,
    TYPE,
)
from .parsers import (
    build_url,
    clean_description,
    derive_agency,
    extract_amount,
    extract_code,
    format_date,
    format_sam_date,
    format_value,
    map_set_aside,
    map_type,
    parse_numeric_value,
    raw_deadline,
)

logger = logging.getLogger(__name__)


class SamGovConnector(BaseConnector):
    """
    Async connector for SAM.gov contract opportunity notices.
    Owns an httpx.AsyncClient unless one is injected.
    """

    source_id = "samgov"

    DEFAULT_URL = "https://api.sam.gov/opportunities/v2/search"
    DEFAULT_HEADERS = {
        "User-Agent": "govcon-finder/0.1 (federal opportunity discovery)",
        "Accept": "application/json",
    }

    def __init__(
        self,
        api_key: str,
        *,
        base_url: Optional[str] = None,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._url = base_url or self.DEFAULT_URL
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=self.DEFAULT_HEADERS,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SamGovConnector":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _build_params(self, code: Optional[str], window: PostedWindow, limit: int) -> dict[str, str]:
        params = {
            "api_key": self._api_key,
            "limit": str(limit),
            "offset": "0",
            "postedFrom": format_sam_date(window.posted_from),
            "postedTo": format_sam_date(window.posted_to),
        }
        if code:
            params["naicsCode"] = code
        return params

    async def search(
        self,
        code: Optional[str],
        window: PostedWindow,
        *,
        limit: int,
    ) -> list[RawListing]:
        """GET one page of listings. Returns [] on any upstream failure."""
        label = code or "*"
        try:
            response = await self._client.get(self._url, params=self._build_params(code, window, limit))
        except httpx.HTTPError as e:
            logger.warning("SAM request failed for NAICS %s: %s", label, e)
            return []

        if response.status_code != 200:
            logger.warning(
                "SAM %s for NAICS %s: %s",
                response.status_code,
                label,
                response.text[:200] if response.text else "no body",
            )
            return []

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning("SAM returned non-JSON for NAICS %s: %s", label, e)
            return []

        items = payload.get(RESULTS_KEY) if isinstance(payload, dict) else None
        if not isinstance(items, list):
            return []
        return [RawListing(data=item) for item in items if isinstance(item, dict)]

    def normalize(self, raw: RawListing, deadline: datetime) -> Opportunity:
        """Convert a SAM.gov listing to an Opportunity."""
        d = raw.data
        notice_id = raw.notice_id or ""
        amount = extract_amount(d)

        return Opportunity(
            id=notice_id,
            title=str(d.get(TITLE) or "").strip() or DEFAULT_TITLE,
            agency=derive_agency(d),
            classification_code=extract_code(d),
            posted_date=format_date(d.get(POSTED_DATE)),
            response_deadline=format_date(raw_deadline(d)),
            deadline_timestamp=int(deadline.timestamp() * 1000),
            display_value=format_value(amount),
            numeric_value=parse_numeric_value(amount),
            type=map_type(d.get(TYPE)),
            set_aside=map_set_aside(d.get(SET_ASIDE_DESCRIPTION)),
            description=clean_description(d.get(DESCRIPTION) or DEFAULT_DESCRIPTION),
            solicitation_number=str(d.get(SOLICITATION_NUMBER) or "").strip() or notice_id,
            url=build_url(d, notice_id),
        )
