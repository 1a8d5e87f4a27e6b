"""Tests for row normalization and snapshot parsing."""

from datetime import datetime

import pandas as pd

from o2d.dispatch_dashboard.models import (
    RESOLVED_DAY_COLUMN,
    DashboardSnapshot,
    DispatchRow,
    filter_options,
    normalize_row,
    normalize_rows,
    parse_timestamp,
)

FETCHED_AT = datetime(2024, 5, 1, 9, 0)


class TestNormalizeRow:

    def test_camel_case_fields(self):
        row = normalize_row({"partyName": " Acme ", "itemName": "TMT Bar", "gateOutTime": "2024-05-01T11:00:00"})
        assert row.party_name == "Acme"
        assert row.item_name == "TMT Bar"
        assert row.gate_out_time == "2024-05-01T11:00:00"

    def test_aliases_and_missing_fields(self):
        row = normalize_row({"party_name": "Acme", "state": "Odisha", "invoice_no": 1042})
        assert row.party_name == "Acme"
        assert row.state_name == "Odisha"
        assert row.invoice_no == "1042"
        assert row.sales_person == ""

    def test_first_non_empty_alias_wins(self):
        assert normalize_row({"stateName": "", "state": "Odisha"}).state_name == "Odisha"

    def test_resolved_date_source_priority(self):
        assert DispatchRow(indate="a", outdate="b", gate_out_time="c").resolved_date_source() == "b"
        assert DispatchRow(indate="a", gate_out_time="c").resolved_date_source() == "a"
        assert DispatchRow(gate_out_time="c").resolved_date_source() == "c"
        assert DispatchRow().resolved_date_source() == ""

    def test_non_object_records_skipped(self):
        rows = normalize_rows([{"partyName": "A"}, "junk", None, 3])
        assert len(rows) == 1

    def test_non_list_rows_gives_empty(self):
        assert normalize_rows({"partyName": "A"}) == ()


class TestParseTimestamp:

    def test_unparseable_is_none(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    def test_aware_value_converted_then_made_naive(self):
        ts = parse_timestamp("2024-04-30T20:00:00Z", "Asia/Kolkata")
        assert ts == pd.Timestamp("2024-05-01 01:30:00")
        assert ts.tzinfo is None


class TestSnapshot:

    def test_from_payload(self):
        data = {
            "summary": {"totalGateIn": 3},
            "filters": {"parties": ["Acme"], "items": [], "salesPersons": ["Kiran", ""], "states": None},
            "rows": [
                {"partyName": "Acme", "itemName": "TMT Bar", "outdate": "2024-05-01T10:00:00"},
                {"partyName": "Bharat", "itemName": "Angle"},
            ],
            "lastUpdated": "2024-05-01T08:55:00",
        }
        snapshot = DashboardSnapshot.from_payload(data, fetched_at=FETCHED_AT)

        assert snapshot.row_count == 2
        assert snapshot.summary.total_gate_in == 3
        assert snapshot.summary.total_gate_out is None
        assert snapshot.filter_vocabulary.sales_persons == ("Kiran",)
        assert snapshot.last_updated == datetime(2024, 5, 1, 8, 55)
        assert snapshot.frame[RESOLVED_DAY_COLUMN].notna().tolist() == [True, False]

    def test_last_updated_defaults_to_fetch_time(self):
        snapshot = DashboardSnapshot.from_payload({}, fetched_at=FETCHED_AT)
        assert snapshot.last_updated == FETCHED_AT
        assert snapshot.row_count == 0
        assert snapshot.frame.empty

    def test_direct_construction_builds_frame(self):
        snapshot = DashboardSnapshot(
            summary=None,
            filter_vocabulary=None,
            rows=(DispatchRow(party_name="A"),),
            fetched_at=FETCHED_AT,
        )
        assert snapshot.frame["party_name"].tolist() == ["A"]


class TestFilterOptions:

    def test_server_lists_preferred_rows_as_fallback(self):
        data = {
            "filters": {"parties": ["Server Party"]},
            "rows": [
                {"partyName": "Row Party", "itemName": "Wire Rod", "stateName": "Odisha"},
                {"partyName": "Row Party", "itemName": "Angle", "stateName": ""},
            ],
        }
        options = filter_options(DashboardSnapshot.from_payload(data, fetched_at=FETCHED_AT))
        assert options["parties"] == ["Server Party"]
        assert options["items"] == ["Angle", "Wire Rod"]
        assert options["states"] == ["Odisha"]
        assert options["sales_persons"] == []

    def test_no_snapshot(self):
        assert filter_options(None)["parties"] == []
