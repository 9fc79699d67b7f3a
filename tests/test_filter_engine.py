"""Tests for FilterEngine filtering and sorting."""

from govcon_finder.filtering import FilterEngine
from govcon_finder.models.opportunity import Opportunity
from govcon_finder.models.query import OpportunityQuery


def _opp(opp_id: str, **kwargs) -> Opportunity:
    defaults = {
        "id": opp_id,
        "title": f"Opportunity {opp_id}",
        "deadline_timestamp": 1_800_000_000_000,
    }
    defaults.update(kwargs)
    return Opportunity(**defaults)


class TestFilterEngine:
    """Tests for FilterEngine.filter."""

    def test_passes_with_no_filters(self) -> None:
        result = FilterEngine(OpportunityQuery()).filter(_opp("A"))
        assert result.passed is True
        assert result.excluded_by_rule is None
        assert len(result.explanations) == 3

    def test_records_first_failing_rule(self) -> None:
        query = OpportunityQuery(set_aside="WOSB", min_value=1_000_000, search="nothing")
        result = FilterEngine(query).filter(_opp("A", numeric_value=10.0))
        assert result.passed is False
        assert result.excluded_by_rule == "set_aside"

    def test_filters_combine(self) -> None:
        opps = [
            _opp("A", set_aside="WOSB", numeric_value=5_000_000, title="Cloud hosting"),
            _opp("B", set_aside="WOSB", numeric_value=10_000, title="Cloud hosting"),
            _opp("C", set_aside="8(a)", numeric_value=5_000_000, title="Cloud hosting"),
            _opp("D", set_aside="WOSB", numeric_value=5_000_000, title="Paving"),
        ]
        query = OpportunityQuery(set_aside="WOSB", min_value=1_000_000, search="cloud")
        assert [o.id for o in FilterEngine(query).filter_passed(opps)] == ["A"]


class TestSorting:
    """Tests for FilterEngine.sort."""

    def test_deadline_ascending_default(self) -> None:
        opps = [_opp("late", deadline_timestamp=3), _opp("soon", deadline_timestamp=1), _opp("mid", deadline_timestamp=2)]
        assert [o.id for o in FilterEngine(OpportunityQuery()).sort(opps)] == ["soon", "mid", "late"]

    def test_value_descending(self) -> None:
        opps = [_opp("small", numeric_value=10), _opp("big", numeric_value=1e6), _opp("tbd", numeric_value=0)]
        query = OpportunityQuery(sort_by="value", sort_order="desc")
        assert [o.id for o in FilterEngine(query).sort(opps)] == ["big", "small", "tbd"]

    def test_posted_date_sort_unparseable_sorts_first(self) -> None:
        opps = [
            _opp("feb", posted_date="2026-02-10"),
            _opp("blank", posted_date=""),
            _opp("jan", posted_date="2026-01-05"),
        ]
        query = OpportunityQuery(sort_by="postedDate")
        assert [o.id for o in FilterEngine(query).sort(opps)] == ["blank", "jan", "feb"]

    def test_sort_is_stable_for_ties(self) -> None:
        """Equal keys keep input order in both directions."""
        opps = [_opp("first", numeric_value=5), _opp("second", numeric_value=5), _opp("other", numeric_value=1)]
        asc = FilterEngine(OpportunityQuery(sort_by="value")).sort(opps)
        desc = FilterEngine(OpportunityQuery(sort_by="value", sort_order="desc")).sort(opps)
        assert [o.id for o in asc] == ["other", "first", "second"]
        assert [o.id for o in desc] == ["first", "second", "other"]

    def test_desc_reverses_asc_for_distinct_keys(self) -> None:
        opps = [_opp(str(i), deadline_timestamp=ts) for i, ts in enumerate([5, 2, 9, 1])]
        asc = FilterEngine(OpportunityQuery()).sort(opps)
        desc = FilterEngine(OpportunityQuery(sort_order="desc")).sort(opps)
        assert [o.id for o in desc] == [o.id for o in reversed(asc)]

    def test_apply_filters_then_sorts(self) -> None:
        opps = [
            _opp("B", numeric_value=2_000, deadline_timestamp=2),
            _opp("X", numeric_value=10, deadline_timestamp=0),
            _opp("A", numeric_value=3_000, deadline_timestamp=1),
        ]
        result = FilterEngine(OpportunityQuery(min_value=1_000)).apply(opps)
        assert [o.id for o in result] == ["A", "B"]
