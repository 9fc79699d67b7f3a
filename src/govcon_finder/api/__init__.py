"""HTTP API."""

from govcon_finder.api.app import create_app

__all__ = ["create_app"]
