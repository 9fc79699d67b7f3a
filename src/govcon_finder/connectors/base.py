"""Abstract base class for listing-source connectors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from govcon_finder.models.opportunity import Opportunity
from govcon_finder.models.raw import RawListing


@dataclass(frozen=True)
class PostedWindow:
    """Posted-date range for one fetch cycle, computed once from the cycle's clock."""

    posted_from: datetime
    posted_to: datetime


class BaseConnector(ABC):
    """
    Standard interface for upstream listing sources.
    Connectors must search (one code, or no code filter) and normalize.
    """

    source_id: str = ""

    @abstractmethod
    async def search(
        self,
        code: Optional[str],
        window: PostedWindow,
        *,
        limit: int,
    ) -> list[RawListing]:
        """
        Fetch one page of listings for a code (None = no code filter).
        Must not raise for upstream failures; return [] instead.
        """

    @abstractmethod
    def normalize(self, raw: RawListing, deadline: datetime) -> Opportunity:
        """
        Convert a raw listing whose deadline has already been validated.
        """

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
