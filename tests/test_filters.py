"""Tests for the dispatch row filters."""

from datetime import date, datetime

import pytest

from o2d.dispatch_dashboard.constants import ALL_ITEMS, ALL_PARTIES, ALL_SALESPERSONS, ALL_STATES
from o2d.dispatch_dashboard.filters import (
    FilterSelection,
    apply_filters,
    describe_active_filters,
    has_active_filters,
    normalize_selection,
)


@pytest.fixture
def frame(make_frame):
    return make_frame([
        {"partyName": "Acme Steel", "itemName": "TMT Bar", "salesPerson": "Kiran", "stateName": "Chhattisgarh",
         "outdate": "2024-05-01T10:00:00", "gateOutTime": "2024-05-01T11:00:00"},
        {"partyName": " Acme Steel ", "itemName": "Wire Rod", "salesPerson": "Kiran", "stateName": "Odisha",
         "outdate": "2024-05-02T09:00:00"},
        {"partyName": "Bharat Infra", "itemName": "TMT Bar", "salesPerson": "Meena", "stateName": "Odisha",
         "indate": "2024-05-03T08:00:00"},
        {"partyName": "Bharat Infra", "itemName": "Angle", "state": "Odisha"},
        {"itemName": "TMT Bar", "outdate": "2024-05-03T18:00:00"},
    ])


class TestSelection:

    def test_default_is_inactive(self):
        assert not has_active_filters(FilterSelection())

    @pytest.mark.parametrize("changes", [
        {"party": "Acme Steel"},
        {"item": "TMT Bar"},
        {"sales_person": "Kiran"},
        {"state": "Odisha"},
        {"from_date": date(2024, 5, 1)},
        {"to_date": date(2024, 5, 1)},
    ])
    def test_any_single_predicate_is_active(self, changes):
        assert has_active_filters(FilterSelection().with_values(**changes))

    def test_cleared_resets_everything(self):
        selection = FilterSelection(party="Acme Steel", from_date=date(2024, 5, 1))
        assert not has_active_filters(selection.cleared())

    def test_normalize_selection_blank_values_become_sentinels(self):
        selection = normalize_selection({"party": "  ", "item": None, "from_date": ""})
        assert selection.party == ALL_PARTIES
        assert selection.item == ALL_ITEMS
        assert selection.sales_person == ALL_SALESPERSONS
        assert selection.state == ALL_STATES
        assert selection.from_date is None

    def test_normalize_selection_parses_dates(self):
        selection = normalize_selection({
            "party": " Acme Steel ",
            "from_date": "2024-05-02",
            "to_date": datetime(2024, 5, 3, 17, 45),
        })
        assert selection.party == "Acme Steel"
        assert selection.from_date == date(2024, 5, 2)
        assert selection.to_date == date(2024, 5, 3)

    def test_normalize_selection_drops_unparseable_date(self):
        assert normalize_selection({"to_date": "someday"}).to_date is None

    def test_describe_lists_only_non_default_in_report_order(self):
        selection = FilterSelection(
            party="Acme Steel",
            sales_person="Kiran",
            state="Odisha",
            to_date=date(2024, 5, 9),
        )
        assert describe_active_filters(selection) == [
            ("Party", "Acme Steel"),
            ("State", "Odisha"),
            ("Sales", "Kiran"),
            ("To", "09/05/2024"),
        ]

    def test_describe_default_is_empty(self):
        assert describe_active_filters(FilterSelection()) == []


class TestApplyFilters:

    def test_no_active_filter_returns_all_rows(self, frame):
        assert apply_filters(frame, FilterSelection()) is frame

    def test_party_match_uses_trimmed_value(self, frame):
        result = apply_filters(frame, FilterSelection(party="Acme Steel"))
        assert len(result) == 2

    def test_missing_field_fails_the_predicate(self, frame):
        result = apply_filters(frame, FilterSelection(sales_person="Meena"))
        assert result["party_name"].tolist() == ["Bharat Infra"]

    def test_state_alias_is_recognised(self, frame):
        result = apply_filters(frame, FilterSelection(state="Odisha"))
        assert len(result) == 3

    def test_predicates_are_combined(self, frame):
        result = apply_filters(frame, FilterSelection(item="TMT Bar", state="Odisha"))
        assert result["party_name"].tolist() == ["Bharat Infra"]

    def test_date_range_inclusive_on_calendar_days(self, frame):
        selection = FilterSelection(from_date=date(2024, 5, 2), to_date=date(2024, 5, 3))
        result = apply_filters(frame, selection)
        # out-date 05-02, in-date 05-03 and out-date 05-03 18:00
        assert len(result) == 3

    def test_rows_without_a_date_excluded_when_bounded(self, frame):
        result = apply_filters(frame, FilterSelection(to_date=date(2024, 12, 31)))
        assert "Angle" not in result["item_name"].tolist()
        assert len(result) == 4

    def test_out_date_wins_over_in_date(self, make_frame):
        df = make_frame([{"partyName": "A", "indate": "2024-05-01T08:00:00", "outdate": "2024-05-04T08:00:00"}])
        assert apply_filters(df, FilterSelection(from_date=date(2024, 5, 4))).shape[0] == 1
        assert apply_filters(df, FilterSelection(to_date=date(2024, 5, 1))).shape[0] == 0

    def test_gate_out_time_is_last_resort(self, make_frame):
        df = make_frame([{"partyName": "A", "gateOutTime": "2024-05-06T23:30:00"}])
        assert apply_filters(df, FilterSelection(from_date=date(2024, 5, 6), to_date=date(2024, 5, 6))).shape[0] == 1

    def test_timezone_aware_value_uses_local_day(self, make_frame):
        records = [{"partyName": "A", "outdate": "2024-04-30T20:00:00Z"}]
        selection = FilterSelection(from_date=date(2024, 5, 1), to_date=date(2024, 5, 1))

        local = make_frame(records, tz="Asia/Kolkata")
        assert len(apply_filters(local, selection)) == 1

        utc = make_frame(records)
        assert len(apply_filters(utc, selection)) == 0

    def test_empty_frame_stays_empty(self, make_frame):
        df = make_frame([])
        assert apply_filters(df, FilterSelection(party="A")).empty
