"""Canonical opportunity record and sync bookkeeping."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Opportunity(BaseModel):
    """Normalized listing served to callers and persisted in the cache."""

    id: str = Field(..., description="Upstream notice id; upsert key")
    title: str = "Untitled Opportunity"
    agency: str = "Federal Agency"
    classification_code: str = ""

    posted_date: str = Field("", description="YYYY-MM-DD, or the raw value if unparseable")
    response_deadline: str = Field("", description="YYYY-MM-DD, or the raw value if unparseable")
    deadline_timestamp: int = Field(..., description="Epoch milliseconds; always in the future when created")

    display_value: str = "TBD"
    numeric_value: float = 0.0

    type: str = "Solicitation"
    set_aside: Optional[str] = None
    description: str = ""
    solicitation_number: str = ""
    url: str = ""


class SyncLogEntry(BaseModel):
    """One completed live-fetch write cycle."""

    synced_at: datetime
    count: int
    codes: list[str] = Field(default_factory=list)
