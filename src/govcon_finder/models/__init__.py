"""Data models for raw listings, normalized opportunities, and queries."""

from govcon_finder.models.opportunity import Opportunity, SyncLogEntry
from govcon_finder.models.query import AppliedFilters, DiscoveryResult, OpportunityQuery
from govcon_finder.models.raw import RawListing

__all__ = [
    "AppliedFilters",
    "DiscoveryResult",
    "Opportunity",
    "OpportunityQuery",
    "RawListing",
    "SyncLogEntry",
]
