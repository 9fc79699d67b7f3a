"""Exceptions surfaced to callers of the discovery pipeline."""


class DiscoveryError(Exception):
    """Base class for errors that abort a discovery request."""


class ConfigurationError(DiscoveryError):
    """Required configuration (e.g. the SAM.gov API key) is missing."""
