"""SAM.gov Opportunities API connector."""

from govcon_finder.connectors.samgov.connector import SamGovConnector

__all__ = ["SamGovConnector"]
