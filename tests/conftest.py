"""Pytest fixtures for govcon-finder tests."""

import asyncio
import json
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import httpx
import pytest

from govcon_finder.config import DiscoveryConfig
from govcon_finder.connectors.samgov import SamGovConnector
from govcon_finder.store import ContractorStore, OpportunityCache

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_listing(notice_id: str = "N1", **overrides) -> dict:
    """SAM.gov search result item with a future deadline relative to FIXED_NOW."""
    data = {
        "noticeId": notice_id,
        "title": "Cloud migration support services",
        "solicitationNumber": "W15P7T-26-R-0001",
        "fullParentPathName": "DEPT OF DEFENSE::DEPT OF THE ARMY::W6QK ACC-APG",
        "postedDate": "2026-02-10",
        "type": "o",
        "responseDeadLine": "2026-04-15T17:00:00-04:00",
        "archiveDate": "2026-05-15",
        "naicsCode": "541512",
        "typeOfSetAsideDescription": "Total Small Business Set-Aside (FAR 19.5)",
        "description": "<p>Provide   cloud\n migration</p> services.",
        "uiLink": f"https://sam.gov/opp/{notice_id}/view",
        "award": {"amount": 2500000},
    }
    data.update(overrides)
    return data


class SamApiStub:
    """
    Stand-in for the SAM.gov search endpoint. Pages are keyed by NAICS code
    ("*" for requests without a code). Records every request it sees.
    """

    def __init__(
        self,
        pages: Optional[dict[str, list[dict]]] = None,
        *,
        status: Optional[dict[str, int]] = None,
        delay: float = 0.0,
        slow_codes: Optional[set[str]] = None,
    ):
        self.pages = pages or {}
        self.status = status or {}
        self.delay = delay
        self.slow_codes = slow_codes
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        code = request.url.params.get("naicsCode", "*")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay and (self.slow_codes is None or code in self.slow_codes):
                await asyncio.sleep(self.delay)
            status = self.status.get(code, 200)
            if status != 200:
                return httpx.Response(status, text="rate limited")
            body = {"totalRecords": len(self.pages.get(code, [])), "opportunitiesData": self.pages.get(code, [])}
            return httpx.Response(200, content=json.dumps(body), headers={"content-type": "application/json"})
        finally:
            self.in_flight -= 1

    @property
    def codes_requested(self) -> list[str]:
        return [r.url.params.get("naicsCode", "*") for r in self.requests]

    def connector(self) -> SamGovConnector:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return SamGovConnector("test-key", client=client)

    def connector_factory(self) -> Callable[[DiscoveryConfig], SamGovConnector]:
        return lambda config: self.connector()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def sample_listing() -> dict:
    return make_listing()


@pytest.fixture
def temp_db(tmp_path: Path) -> Path:
    """Temporary database path for isolated tests."""
    return tmp_path / "govcon_finder.db"


@pytest.fixture
def cache(temp_db: Path) -> OpportunityCache:
    return OpportunityCache(temp_db)


@pytest.fixture
def contractors(temp_db: Path) -> ContractorStore:
    return ContractorStore(temp_db)


@pytest.fixture
def config(temp_db: Path) -> DiscoveryConfig:
    """Config with an API key and no inter-batch delay."""
    return DiscoveryConfig(api_key="test-key", db_path=temp_db, batch_delay_seconds=0.0)
