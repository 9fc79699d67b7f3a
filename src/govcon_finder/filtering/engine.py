"""Filter-and-sort engine applied to normalized opportunities."""

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from govcon_finder.models.opportunity import Opportunity
from govcon_finder.models.query import OpportunityQuery

from .rules import apply_min_value_rule, apply_search_rule, apply_set_aside_rule


class FilterResult(BaseModel):
    """Result of filtering an opportunity against a query."""

    passed: bool = Field(..., description="All filters passed")
    explanations: list[str] = Field(default_factory=list)
    opportunity: Opportunity
    excluded_by_rule: Optional[str] = Field(
        default=None,
        description="First rule that excluded (set_aside|min_value|search)",
    )


RuleFn = Callable[[Opportunity, OpportunityQuery], tuple[bool, str]]


def posted_timestamp(opp: Opportunity) -> float:
    """Epoch ms of the posted date; 0 when missing or unparseable."""
    if not opp.posted_date:
        return 0.0
    try:
        posted = datetime.fromisoformat(opp.posted_date)
    except ValueError:
        return 0.0
    if posted.tzinfo is None:
        posted = posted.replace(tzinfo=timezone.utc)
    return posted.timestamp() * 1000


SORT_KEYS: dict[str, Callable[[Opportunity], float]] = {
    "deadline": lambda o: float(o.deadline_timestamp),
    "value": lambda o: o.numeric_value,
    "postedDate": posted_timestamp,
}


class FilterEngine:
    """
    Applies caller filters, then a stable sort. Filters run in a fixed
    order; the first failing rule is recorded on the result.
    """

    def __init__(self, query: OpportunityQuery):
        self.query = query
        self._rules: list[tuple[str, RuleFn]] = [
            ("set_aside", apply_set_aside_rule),
            ("min_value", apply_min_value_rule),
            ("search", apply_search_rule),
        ]

    def filter(self, opp: Opportunity) -> FilterResult:
        """Apply all rules and return FilterResult with explanation trail."""
        explanations: list[str] = []
        excluded_by: Optional[str] = None

        for rule_id, rule_fn in self._rules:
            passed, explanation = rule_fn(opp, self.query)
            explanations.append(explanation)
            if not passed and excluded_by is None:
                excluded_by = rule_id

        return FilterResult(
            passed=excluded_by is None,
            explanations=explanations,
            opportunity=opp,
            excluded_by_rule=excluded_by,
        )

    def filter_many(self, opportunities: Iterable[Opportunity]) -> list[FilterResult]:
        return [self.filter(opp) for opp in opportunities]

    def filter_passed(self, opportunities: Iterable[Opportunity]) -> list[Opportunity]:
        return [r.opportunity for r in self.filter_many(opportunities) if r.passed]

    def sort(self, opportunities: Iterable[Opportunity]) -> list[Opportunity]:
        """Stable sort; equal keys keep input order in both directions."""
        key = SORT_KEYS.get(self.query.sort_by, SORT_KEYS["deadline"])
        return sorted(opportunities, key=key, reverse=self.query.sort_order == "desc")

    def apply(self, opportunities: Iterable[Opportunity]) -> list[Opportunity]:
        """Filter, then sort."""
        return self.sort(self.filter_passed(opportunities))
