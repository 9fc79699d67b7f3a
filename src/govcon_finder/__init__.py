"""Federal contracting opportunity discovery and caching."""

__version__ = "0.1.0"
