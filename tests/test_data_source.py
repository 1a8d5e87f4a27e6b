"""Tests for DashboardDataSource fetch lifecycle."""

from unittest.mock import patch

import pytest

from o2d.dispatch_dashboard.models import DashboardSnapshot
from o2d.dispatch_dashboard.queries import DashboardDataSource
from o2d.errors import TransportError


def _payload(*parties, total=None):
    data = {"rows": [{"partyName": p} for p in parties], "summary": {}}
    if total is not None:
        data["summary"]["totalGateIn"] = total
    return {"success": True, "data": data}


@pytest.fixture
def source(mock_client, clock):
    return DashboardDataSource(mock_client, clock=clock, refresh_interval=300, tz="Asia/Kolkata")


class TestInitialLoad:

    def test_success_replaces_snapshot(self, source, mock_client):
        mock_client.get_json.return_value = _payload("A", "B")

        assert source.ensure_loaded()

        mock_client.get_json.assert_called_once_with("/dashboard/summary")
        assert source.snapshot.row_count == 2
        assert not source.in_flight
        assert not source.is_loading
        assert source.blocking_error is None

    def test_ensure_loaded_is_a_no_op_once_loaded(self, source, mock_client):
        mock_client.get_json.return_value = _payload("A")
        source.ensure_loaded()
        source.ensure_loaded()
        assert mock_client.get_json.call_count == 1

    def test_failure_without_snapshot_is_blocking(self, source, mock_client):
        mock_client.get_json.side_effect = TransportError("Network error: refused")

        assert not source.ensure_loaded()

        assert source.snapshot is None
        assert source.blocking_error == "Network error: refused"
        assert source.banner_error is None

    def test_unsuccessful_envelope_is_an_error(self, source, mock_client):
        mock_client.get_json.return_value = {"success": False, "error": "db down"}
        source.refresh()
        assert "db down" in source.blocking_error

    def test_missing_data_is_an_error(self, source, mock_client):
        mock_client.get_json.return_value = {"success": True}
        source.refresh()
        assert source.blocking_error is not None

    def test_out_of_range_summary_value_is_ignored(self, source, mock_client):
        payload = _payload("A")
        payload["data"]["summary"]["totalGateIn"] = float("inf")
        mock_client.get_json.return_value = payload

        assert source.refresh()

        assert source.snapshot.summary.total_gate_in is None
        assert source.error is None

    def test_unparseable_data_is_a_malformed_response(self, source, mock_client):
        mock_client.get_json.return_value = _payload("A")

        with patch.object(DashboardSnapshot, "from_payload", side_effect=ValueError("bad date")):
            assert not source.refresh()

        assert source.snapshot is None
        assert source.blocking_error == "Invalid dashboard data: bad date"
        assert not source.in_flight


class TestRefresh:

    def test_failure_keeps_previous_snapshot_with_banner(self, source, mock_client):
        mock_client.get_json.return_value = _payload("A")
        source.refresh()
        previous = source.snapshot

        mock_client.get_json.side_effect = TransportError("HTTP error 502", status_code=502)
        assert not source.refresh()

        assert source.snapshot is previous
        assert source.banner_error == "HTTP error 502"
        assert source.blocking_error is None

    def test_success_clears_the_error(self, source, mock_client):
        mock_client.get_json.side_effect = TransportError("timeout")
        source.refresh()

        mock_client.get_json.side_effect = None
        mock_client.get_json.return_value = _payload("A")
        source.refresh()

        assert source.error is None
        assert source.snapshot.row_count == 1

    def test_tick_waits_for_the_interval(self, source, mock_client, clock):
        mock_client.get_json.return_value = _payload("A")
        assert source.tick()

        clock.advance(seconds=299)
        assert not source.tick()

        clock.advance(seconds=1)
        assert source.tick()
        assert mock_client.get_json.call_count == 2


class TestInFlightAndSequencing:

    def test_second_fetch_is_coalesced_while_in_flight(self, source):
        first = source.begin_fetch()
        assert first is not None
        assert source.begin_fetch() is None
        assert source.is_loading

    def test_in_flight_refresh_does_not_call_backend(self, source, mock_client):
        source.begin_fetch()
        assert not source.refresh()
        mock_client.get_json.assert_not_called()

    def test_stale_fetch_is_abandoned(self, source, clock):
        first = source.begin_fetch()
        clock.advance(seconds=31)
        second = source.begin_fetch()
        assert second is not None
        assert second.sequence > first.sequence

    def test_out_of_order_response_discarded(self, source, clock):
        old = source.begin_fetch()
        clock.advance(seconds=31)
        new = source.begin_fetch()

        assert source.complete_fetch(new, _payload("New"))
        assert not source.complete_fetch(old, _payload("Old", "Old"))

        assert source.snapshot.rows[0].party_name == "New"
        assert not source.in_flight

    def test_late_failure_does_not_raise_banner(self, source, clock):
        old = source.begin_fetch()
        clock.advance(seconds=31)
        new = source.begin_fetch()
        source.complete_fetch(new, _payload("New"))

        assert not source.fail_fetch(old, TransportError("late timeout"))
        assert source.error is None

    def test_abandoned_response_discarded_while_newer_is_open(self, source, clock):
        old = source.begin_fetch()
        clock.advance(seconds=31)
        new = source.begin_fetch()

        assert not source.complete_fetch(old, _payload("Old"))

        assert source.snapshot is None
        assert source.in_flight
        assert source.complete_fetch(new, _payload("New"))
        assert source.snapshot.rows[0].party_name == "New"

    def test_abandoned_response_discarded_after_newer_failed(self, source, clock):
        old = source.begin_fetch()
        clock.advance(seconds=31)
        new = source.begin_fetch()
        source.fail_fetch(new, TransportError("HTTP error 502", status_code=502))

        assert not source.complete_fetch(old, _payload("Old"))

        assert source.snapshot is None
        assert source.blocking_error == "HTTP error 502"

    def test_refreshing_state_with_snapshot(self, source):
        ticket = source.begin_fetch()
        source.complete_fetch(ticket, _payload("A"))
        source.begin_fetch()
        assert source.is_refreshing
        assert not source.is_loading

    def test_stale_after_defaults_to_twice_the_timeout(self, mock_client):
        source = DashboardDataSource(mock_client)
        assert source.stale_after.total_seconds() == 30
