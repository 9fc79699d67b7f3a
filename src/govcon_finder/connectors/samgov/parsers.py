"""Parsing utilities that turn SAM.gov listing fields into display values."""

import math
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from .constants import (
    AGENCY_PATH_DELIMITERS,
    ARCHIVE_DATE,
    AWARD,
    AWARD_AMOUNT,
    DEFAULT_AGENCY,
    DEFAULT_TYPE,
    DESCRIPTION_MAX_CHARS,
    ESTIMATED_TOTAL_VALUE,
    FULL_PARENT_PATH,
    NAICS_CODE,
    NOTICE_TYPES,
    ORGANIZATION_NAME,
    RESPONSE_DEADLINE,
    SET_ASIDE_KEYWORDS,
    UI_LINK,
    VIEW_URL_TEMPLATE,
)

DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d %H:%M:%S", "%Y/%m/%d", "%Y%m%d")
HTML_TAG = re.compile(r"<[^>]+>")
WHITESPACE = re.compile(r"\s+")


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an upstream date/time to an aware UTC datetime.
    Naive values (including bare dates) are taken as UTC.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def raw_deadline(data: dict) -> Optional[str]:
    """Response deadline, falling back to the archive date."""
    return data.get(RESPONSE_DEADLINE) or data.get(ARCHIVE_DATE) or None


def format_date(value: Any) -> str:
    """YYYY-MM-DD for parseable dates; unparseable input passes through unchanged."""
    if value is None or value == "":
        return ""
    parsed = parse_datetime(value)
    if parsed is None:
        return str(value)
    return parsed.date().isoformat()


def extract_amount(data: dict) -> Any:
    """Award amount if present, else estimated total value, else None."""
    award = data.get(AWARD)
    amount = award.get(AWARD_AMOUNT) if isinstance(award, dict) else None
    return amount or data.get(ESTIMATED_TOTAL_VALUE) or None


def parse_numeric_value(amount: Any) -> float:
    """Finite float for sorting/filtering; 0.0 when missing, unparseable, NaN or infinite."""
    if amount is None or isinstance(amount, bool):
        return 0.0
    try:
        value = float(str(amount).replace(",", "").replace("$", "").strip())
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def _round(value: Decimal, places: str) -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_value(amount: Any) -> str:
    """
    Human display value: "$2.5M" at or above one million, "$750K" at or
    above one thousand, plain currency below that, "TBD" when unknown.
    """
    if not amount:
        return "TBD"
    try:
        value = Decimal(str(amount).replace(",", "").replace("$", "").strip())
    except InvalidOperation:
        return "TBD"
    if not value.is_finite():
        return "TBD"
    if value >= 1_000_000:
        return f"${_round(value / 1_000_000, '0.1')}M"
    if value >= 1_000:
        return f"${_round(value / 1_000, '1')}K"
    if value == value.to_integral_value():
        return f"${int(value):,}"
    return f"${_round(value, '0.01'):,}"


def map_type(code: Optional[str]) -> str:
    """Single-letter notice type -> label. Unknown codes pass through verbatim."""
    if not code:
        return DEFAULT_TYPE
    return NOTICE_TYPES.get(str(code).lower(), str(code))


def map_set_aside(description: Optional[str]) -> Optional[str]:
    """Set-aside category from free text; None when nothing matches."""
    if not description:
        return None
    text = str(description)
    for keyword, category in SET_ASIDE_KEYWORDS:
        if keyword in text:
            return category
    return None


def derive_agency(data: dict) -> str:
    """Last segment of the parent org path, else organization name, else placeholder."""
    path = str(data.get(FULL_PARENT_PATH) or "").strip()
    if path:
        for delimiter in AGENCY_PATH_DELIMITERS:
            if delimiter in path:
                segments = [s.strip() for s in path.split(delimiter) if s.strip()]
                if segments:
                    return segments[-1]
        return path
    org = str(data.get(ORGANIZATION_NAME) or "").strip()
    return org or DEFAULT_AGENCY


def clean_description(text: Optional[str]) -> str:
    """Strip HTML tags, collapse whitespace, truncate."""
    if not text:
        return ""
    stripped = HTML_TAG.sub("", str(text))
    return WHITESPACE.sub(" ", stripped).strip()[:DESCRIPTION_MAX_CHARS]


def extract_code(data: dict) -> str:
    """
    NAICS code as a string. Search results carry a plain string; some
    payloads nest it as {"naicsCodes": [{"code": ...}]} or {"code": ...}.
    """
    value = data.get(NAICS_CODE)
    if isinstance(value, dict):
        nested = value.get("naicsCodes") or []
        if nested and isinstance(nested[0], dict) and nested[0].get("code"):
            return str(nested[0]["code"]).strip()
        return str(value.get("code") or "").strip()
    if value is None:
        return ""
    return str(value).strip()


def build_url(data: dict, notice_id: str) -> str:
    """Upstream UI link, else a synthesized view link."""
    link = str(data.get(UI_LINK) or "").strip()
    return link or VIEW_URL_TEMPLATE.format(notice_id=notice_id)


def format_sam_date(moment: datetime) -> str:
    """MM/DD/YYYY as required by the postedFrom/postedTo parameters."""
    return moment.strftime("%m/%d/%Y")
