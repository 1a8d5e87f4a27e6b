"""Tests for SessionStore persist / restore / clear."""

import json
from datetime import datetime

import pytest

from o2d.access import resolve_access
from o2d.capabilities import Capability
from o2d.session import STORAGE_KEYS, Identity, SessionStore


class TestIdentity:

    def test_extra_fields_survive_round_trip(self):
        payload = {"id": 1, "username": "meena", "access": "orders", "department": "Stores"}
        identity = Identity.from_payload(payload)
        assert identity.extra == {"department": "Stores"}
        assert identity.to_payload()["department"] == "Stores"

    def test_missing_username_rejected(self):
        with pytest.raises(ValueError):
            Identity.from_payload({"id": 1})


class TestSessionStore:

    def test_persist_then_restore(self, storage, catalog, make_identity):
        store = SessionStore(storage, catalog)
        identity = make_identity(access="Dashboard, Orders")
        access = resolve_access(identity.access, catalog)
        login_time = datetime(2024, 5, 1, 8, 30)

        store.persist(identity, access, "tok-123", login_time)
        restored = store.restore()

        assert restored is not None
        assert restored.identity == identity
        assert restored.access == {"dashboard", "orders"}
        assert restored.token == "tok-123"
        assert restored.login_time == login_time

    def test_entries_are_json_strings(self, storage, catalog, make_identity):
        store = SessionStore(storage, catalog)
        identity = make_identity()
        store.persist(identity, resolve_access("dashboard", catalog), "t")
        assert json.loads(storage[STORAGE_KEYS["access"]]) == ["dashboard"]
        assert json.loads(storage[STORAGE_KEYS["user"]])["username"] == "ravi"

    def test_empty_storage_restores_none(self, storage, catalog):
        assert SessionStore(storage, catalog).restore() is None

    def test_corrupt_identity_restores_none(self, storage, catalog):
        storage[STORAGE_KEYS["user"]] = "{not json"
        storage[STORAGE_KEYS["access"]] = '["dashboard"]'
        assert SessionStore(storage, catalog).restore() is None

    def test_identity_without_username_restores_none(self, storage, catalog):
        storage[STORAGE_KEYS["user"]] = json.dumps({"id": 3})
        storage[STORAGE_KEYS["access"]] = '["dashboard"]'
        assert SessionStore(storage, catalog).restore() is None

    def test_corrupt_access_restores_none(self, storage, catalog, make_identity):
        storage[STORAGE_KEYS["user"]] = json.dumps(make_identity().to_payload())
        storage[STORAGE_KEYS["access"]] = json.dumps({"dashboard": True})
        assert SessionStore(storage, catalog).restore() is None

    def test_missing_access_restores_none(self, storage, catalog, make_identity):
        storage[STORAGE_KEYS["user"]] = json.dumps(make_identity().to_payload())
        assert SessionStore(storage, catalog).restore() is None

    def test_corrupt_token_is_treated_as_absent(self, storage, catalog, make_identity):
        store = SessionStore(storage, catalog)
        store.persist(make_identity(), resolve_access("dashboard", catalog), "tok")
        storage[STORAGE_KEYS["token"]] = "}{"
        restored = store.restore()
        assert restored is not None
        assert restored.token is None

    def test_all_sentinel_re_expanded_against_current_catalog(self, storage, catalog, make_identity):
        identity = make_identity(access="ALL")
        SessionStore(storage, catalog).persist(identity, resolve_access("ALL", catalog), "tok")

        extended = catalog.with_capability(Capability("audit", "Audit"), version="2")
        restored = SessionStore(storage, extended).restore()

        assert "audit" in restored.access
        assert "audit" in json.loads(storage[STORAGE_KEYS["access"]])

    def test_clear_removes_every_entry(self, storage, catalog, make_identity):
        store = SessionStore(storage, catalog)
        store.persist(make_identity(), resolve_access("dashboard", catalog), "tok", datetime(2024, 1, 1))
        storage["unrelated"] = "keep"

        store.clear()

        assert all(key not in storage for key in STORAGE_KEYS.values())
        assert storage["unrelated"] == "keep"
        assert store.restore() is None

    def test_clear_on_empty_storage_is_harmless(self, storage, catalog):
        SessionStore(storage, catalog).clear()
        assert storage == {}
