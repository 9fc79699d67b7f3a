"""Tests for individual filter rules."""

from govcon_finder.filtering.rules import (
    apply_min_value_rule,
    apply_search_rule,
    apply_set_aside_rule,
)
from govcon_finder.models.opportunity import Opportunity
from govcon_finder.models.query import OpportunityQuery


def _opp(**kwargs) -> Opportunity:
    defaults = {
        "id": "N1",
        "title": "Cloud migration support",
        "agency": "DEPT OF THE ARMY",
        "classification_code": "541512",
        "deadline_timestamp": 1_800_000_000_000,
        "numeric_value": 2_500_000.0,
        "set_aside": "Small Business",
    }
    defaults.update(kwargs)
    return Opportunity(**defaults)


class TestSetAsideRule:
    """Tests for apply_set_aside_rule."""

    def test_unset_passes(self) -> None:
        passed, _ = apply_set_aside_rule(_opp(set_aside=None), OpportunityQuery())
        assert passed is True

    def test_all_passes_everything(self) -> None:
        passed, _ = apply_set_aside_rule(_opp(set_aside=None), OpportunityQuery(set_aside="all"))
        assert passed is True

    def test_exact_match(self) -> None:
        passed, explanation = apply_set_aside_rule(_opp(), OpportunityQuery(set_aside="Small Business"))
        assert passed is True
        assert "Small Business" in explanation

    def test_mismatch_excluded(self) -> None:
        passed, explanation = apply_set_aside_rule(_opp(set_aside="8(a)"), OpportunityQuery(set_aside="WOSB"))
        assert passed is False
        assert "Excluded" in explanation

    def test_missing_set_aside_excluded(self) -> None:
        passed, _ = apply_set_aside_rule(_opp(set_aside=None), OpportunityQuery(set_aside="HUBZone"))
        assert passed is False


class TestMinValueRule:
    """Tests for apply_min_value_rule."""

    def test_unset_passes(self) -> None:
        assert apply_min_value_rule(_opp(numeric_value=0), OpportunityQuery())[0] is True

    def test_at_threshold_passes(self) -> None:
        assert apply_min_value_rule(_opp(numeric_value=1000), OpportunityQuery(min_value=1000))[0] is True

    def test_below_threshold_excluded(self) -> None:
        assert apply_min_value_rule(_opp(numeric_value=999.99), OpportunityQuery(min_value=1000))[0] is False

    def test_unknown_value_counts_as_zero(self) -> None:
        """TBD listings fall out once any positive minimum is set."""
        opp = _opp(numeric_value=0.0, display_value="TBD")
        assert apply_min_value_rule(opp, OpportunityQuery(min_value=1))[0] is False


class TestSearchRule:
    """Tests for apply_search_rule."""

    def test_empty_search_passes(self) -> None:
        assert apply_search_rule(_opp(), OpportunityQuery(search=""))[0] is True

    def test_title_match_case_insensitive(self) -> None:
        passed, explanation = apply_search_rule(_opp(), OpportunityQuery(search="CLOUD"))
        assert passed is True
        assert "title" in explanation

    def test_agency_match(self) -> None:
        passed, explanation = apply_search_rule(_opp(), OpportunityQuery(search="army"))
        assert passed is True
        assert "agency" in explanation

    def test_code_match(self) -> None:
        passed, explanation = apply_search_rule(_opp(), OpportunityQuery(search="5415"))
        assert passed is True
        assert "code" in explanation

    def test_description_not_searched(self) -> None:
        opp = _opp(description="janitorial services")
        assert apply_search_rule(opp, OpportunityQuery(search="janitorial"))[0] is False
