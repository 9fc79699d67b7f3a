"""SAM.gov Opportunities API v2 field names and lookup tables."""

# Identifiers
NOTICE_ID = "noticeId"
SOLICITATION_NUMBER = "solicitationNumber"

# Content
TITLE = "title"
DESCRIPTION = "description"
UI_LINK = "uiLink"

# Parties
FULL_PARENT_PATH = "fullParentPathName"
ORGANIZATION_NAME = "organizationName"

# Dates
POSTED_DATE = "postedDate"
RESPONSE_DEADLINE = "responseDeadLine"
ARCHIVE_DATE = "archiveDate"

# Classification
NAICS_CODE = "naicsCode"
TYPE = "type"
SET_ASIDE_DESCRIPTION = "typeOfSetAsideDescription"

# Value
AWARD = "award"
AWARD_AMOUNT = "amount"
ESTIMATED_TOTAL_VALUE = "estimatedTotalValue"

# Response envelope
RESULTS_KEY = "opportunitiesData"

VIEW_URL_TEMPLATE = "https://sam.gov/opp/{notice_id}/view"
DEFAULT_DESCRIPTION = "See SAM.gov for full details."
DEFAULT_TITLE = "Untitled Opportunity"
DEFAULT_AGENCY = "Federal Agency"
DEFAULT_TYPE = "Solicitation"
DESCRIPTION_MAX_CHARS = 500

# Parent path delimiters, tried in order
AGENCY_PATH_DELIMITERS = ("::", "|")

NOTICE_TYPES: dict[str, str] = {
    "o": "Solicitation",
    "p": "Pre-Solicitation",
    "r": "Sources Sought",
    "a": "Award Notice",
    "u": "Justification",
    "s": "Special Notice",
    "k": "Combined Synopsis",
    "i": "Intent to Bundle",
}

# Set-aside keyword -> category (first match wins; order matters)
SET_ASIDE_KEYWORDS: list[tuple[str, str]] = [
    ("SDVOSB", "SDVOSB"),
    ("Service-Disabled", "SDVOSB"),
    ("WOSB", "WOSB"),
    ("Women", "WOSB"),
    ("HUBZone", "HUBZone"),
    ("8(a)", "8(a)"),
    ("Small Business", "Small Business"),
]
