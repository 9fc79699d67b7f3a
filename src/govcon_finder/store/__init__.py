"""Local storage for cached opportunities, sync history, and contractors."""

from govcon_finder.store.contractor_store import Contractor, ContractorStore
from govcon_finder.store.sqlite_store import OpportunityCache

__all__ = [
    "Contractor",
    "ContractorStore",
    "OpportunityCache",
]
