"""Runtime configuration for discovery, fetching, and caching."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

API_KEY_ENV_VARS = ("SAMGOVAPIKEY", "SAM_GOV_API_KEY", "SAM_API_KEY")


def api_key_from_env() -> Optional[str]:
    """First non-empty SAM.gov key from the supported env var names."""
    for name in API_KEY_ENV_VARS:
        value = (os.environ.get(name) or "").strip()
        if value:
            return value
    return None


class DiscoveryConfig(BaseModel):
    """Tunables for one deployment. Defaults match SAM.gov's public rate limits."""

    api_key: Optional[str] = Field(default=None, description="SAM.gov API key")
    base_url: str = "https://api.sam.gov/opportunities/v2/search"
    db_path: Path = Path("govcon_finder.db")
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required by the HTTP endpoint; open when unset",
    )

    freshness_hours: float = 6.0
    lookback_days: int = 120
    outer_batch_size: int = 20
    inner_batch_size: int = 5
    batch_delay_seconds: float = 0.1
    fetch_deadline_seconds: float = 20.0
    request_timeout_seconds: float = 15.0
    page_size: int = 50
    wildcard_page_size: int = 200
    cache_read_limit: int = 500

    @classmethod
    def from_env(cls) -> "DiscoveryConfig":
        """Build config from environment variables, defaults elsewhere."""
        data: dict = {"api_key": api_key_from_env()}
        db_path = os.environ.get("GOVCON_FINDER_DB")
        if db_path:
            data["db_path"] = db_path
        token = os.environ.get("GOVCON_FINDER_API_TOKEN")
        if token:
            data["api_token"] = token
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DiscoveryConfig":
        """Load config from YAML. Supports nested (samgov/fetch/cache) or flat structure."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        flat: dict = {}
        for section in ("samgov", "fetch", "cache", "api"):
            nested = data.get(section) or {}
            flat.update(nested)
        flat.update({k: v for k, v in data.items() if not isinstance(v, dict)})
        if not flat.get("api_key"):
            flat["api_key"] = api_key_from_env()
        return cls.model_validate(flat)
