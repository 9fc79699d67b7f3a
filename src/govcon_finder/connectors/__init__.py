"""Upstream listing connectors."""

from govcon_finder.connectors.base import BaseConnector, PostedWindow
from govcon_finder.connectors.samgov import SamGovConnector

__all__ = ["BaseConnector", "PostedWindow", "SamGovConnector"]
