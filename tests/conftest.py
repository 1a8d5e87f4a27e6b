"""Shared fixtures for the O2D test suite."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from o2d.api_client import ApiClient
from o2d.capabilities import DEFAULT_CATALOG
from o2d.dispatch_dashboard.models import normalize_rows, rows_to_frame
from o2d.session import Identity


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=datetime(2024, 5, 1, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def catalog():
    return DEFAULT_CATALOG


@pytest.fixture
def storage():
    return {}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_identity():
    def _make(**overrides):
        payload = {"id": 7, "username": "ravi", "role": "user", "access": "dashboard"}
        payload.update(overrides)
        return Identity.from_payload(payload)
    return _make


@pytest.fixture
def make_frame():
    def _make(records, tz=None):
        return rows_to_frame(normalize_rows(records), tz)
    return _make


@pytest.fixture
def mock_client():
    """ApiClient whose HTTP calls are replaced by MagicMocks."""
    client = ApiClient("http://backend.test", timeout=15, http=MagicMock())
    client.get_json = MagicMock()
    client.post_json = MagicMock()
    return client
