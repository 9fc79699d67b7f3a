"""Filter rules: each returns (passed, explanation)."""

from typing import Optional

from govcon_finder.models.opportunity import Opportunity
from govcon_finder.models.query import OpportunityQuery

ALL_SET_ASIDES = "all"


def _normalize_for_match(text: Optional[str]) -> str:
    """Lowercase; empty string if None."""
    return (text or "").lower()


def apply_set_aside_rule(opp: Opportunity, query: OpportunityQuery) -> tuple[bool, str]:
    """Exact set-aside category match. Unset or "all" passes everything."""
    wanted = query.set_aside
    if not wanted or wanted == ALL_SET_ASIDES:
        return True, "Set-aside filter not set"
    if opp.set_aside == wanted:
        return True, f"Matches set-aside: {wanted}"
    return False, f"Excluded: set-aside {opp.set_aside or 'none'} is not {wanted}"


def apply_min_value_rule(opp: Opportunity, query: OpportunityQuery) -> tuple[bool, str]:
    """numeric_value >= min_value. Unknown values count as 0."""
    if query.min_value is None:
        return True, "Minimum value filter not set"
    if opp.numeric_value >= query.min_value:
        return True, f"Value {opp.numeric_value:g} meets minimum {query.min_value:g}"
    return False, f"Excluded: value {opp.numeric_value:g} below minimum {query.min_value:g}"


def apply_search_rule(opp: Opportunity, query: OpportunityQuery) -> tuple[bool, str]:
    """Case-insensitive substring match on title, agency, or classification code."""
    term = _normalize_for_match(query.search)
    if not term:
        return True, "Search filter not set"
    for field_name, value in (
        ("title", opp.title),
        ("agency", opp.agency),
        ("code", opp.classification_code),
    ):
        if term in _normalize_for_match(value):
            return True, f"Search '{query.search}' matches {field_name}"
    return False, f"Excluded: search '{query.search}' not found"
