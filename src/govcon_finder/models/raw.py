"""Raw upstream listing before normalization."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawListing(BaseModel):
    """
    Untrusted record as returned by the listings API.
    Every field of interest is optional; normalization decides what to keep.
    """

    model_config = ConfigDict(extra="allow")

    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def notice_id(self) -> Optional[str]:
        value = self.data.get("noticeId")
        if value is None:
            return None
        return str(value).strip() or None
