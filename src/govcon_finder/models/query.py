"""Request and response shapes for a discovery run."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from govcon_finder.models.opportunity import Opportunity

SortField = Literal["deadline", "value", "postedDate"]
SortOrder = Literal["asc", "desc"]


class OpportunityQuery(BaseModel):
    """Caller-supplied filters, sort, and mode flags."""

    sort_by: SortField = "deadline"
    sort_order: SortOrder = "asc"
    set_aside: Optional[str] = None
    min_value: Optional[float] = None
    search: str = ""
    force_refresh: bool = False
    include_all: bool = False


class AppliedFilters(BaseModel):
    """Echo of the filters that shaped a response."""

    set_aside: Optional[str] = None
    min_value: Optional[float] = None
    sort_by: SortField = "deadline"
    sort_order: SortOrder = "asc"
    search: str = ""

    @classmethod
    def from_query(cls, query: OpportunityQuery) -> "AppliedFilters":
        return cls(
            set_aside=query.set_aside,
            min_value=query.min_value,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            search=query.search,
        )


class DiscoveryResult(BaseModel):
    """Response for one discovery request, served from cache or live."""

    opportunities: list[Opportunity] = Field(default_factory=list)
    total: int = 0
    total_found: int = 0
    code_count: int = 0
    filters: AppliedFilters = Field(default_factory=AppliedFilters)
    cached: bool = False
    cache_age_hours: Optional[float] = None
    timestamp: str = ""
    wildcard_mode: bool = False
