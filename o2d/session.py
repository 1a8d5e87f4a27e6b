# o2d/session.py
"""
Tab-scoped session cache.

Holds the authenticated identity, its AccessSet and the API token in a
string-keyed storage mapping (st.session_state in the app, a dict in tests).
Entries are JSON strings and are read independently: a missing or corrupt
entry is treated as absent and never breaks startup.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, MutableMapping, Optional

from .access import AccessSet, is_all_sentinel, resolve_access
from .capabilities import CapabilityCatalog
from .errors import CorruptPersistedStateError

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    'token': 'o2d_token',
    'user': 'o2d_user',
    'access': 'o2d_access',
    'login_time': 'o2d_login_time',
}

IDENTITY_FIELDS = (
    'id', 'username', 'role', 'access',
    'supervisor_name', 'item_name', 'quality_controller', 'loading_incharge',
    'created_at', 'updated_at',
)


@dataclass(frozen=True)
class Identity:
    """
    User record issued by the backend at login.

    Attributes not modelled explicitly are kept in `extra` so a
    persist/restore cycle returns exactly what the backend sent.
    """
    id: Any
    username: str
    role: Optional[str] = None
    access: Optional[str] = None
    supervisor_name: Optional[str] = None
    item_name: Optional[str] = None
    quality_controller: Optional[str] = None
    loading_incharge: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Identity":
        """
        Build an Identity from the backend's user object.

        Raises:
            ValueError: if the payload is not a mapping or lacks id/username
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"User payload must be an object, got {type(payload).__name__}")
        if payload.get('id') is None or not payload.get('username'):
            raise ValueError("User payload is missing 'id' or 'username'")

        known = {key: payload.get(key) for key in IDENTITY_FIELDS}
        known['username'] = str(known['username'])
        extra = {key: value for key, value in payload.items() if key not in IDENTITY_FIELDS}
        return cls(extra=extra, **known)

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.extra)
        for key in IDENTITY_FIELDS:
            payload[key] = getattr(self, key)
        return payload

    @property
    def display_name(self) -> str:
        return self.username or "User"


@dataclass(frozen=True)
class RestoredSession:
    identity: Identity
    access: AccessSet
    token: Optional[str] = None
    login_time: Optional[datetime] = None


class SessionStore:
    """
    Persist / restore / clear the authenticated session.

    Usage:
        store = SessionStore(st.session_state, DEFAULT_CATALOG)
        store.persist(identity, access, token)

        restored = store.restore()   # RestoredSession or None
        store.clear()
    """

    def __init__(self, storage: MutableMapping[str, Any], catalog: CapabilityCatalog):
        self.storage = storage
        self.catalog = catalog

    # =========================================================================
    # WRITE
    # =========================================================================

    def persist(
        self,
        identity: Identity,
        access: AccessSet,
        token: Optional[str],
        login_time: Optional[datetime] = None
    ):
        """Store every session entry, replacing whatever was there."""
        self.storage[STORAGE_KEYS['user']] = json.dumps(identity.to_payload(), default=str)
        self.storage[STORAGE_KEYS['access']] = json.dumps(access.to_list())

        if token:
            self.storage[STORAGE_KEYS['token']] = json.dumps(token)
        else:
            self._remove(STORAGE_KEYS['token'])

        if login_time is not None:
            self.storage[STORAGE_KEYS['login_time']] = json.dumps(login_time.isoformat())

        logger.debug(f"Session persisted for user {identity.username} ({len(access)} capabilities)")

    def clear(self):
        """Remove all session entries. Missing keys are ignored."""
        for key in STORAGE_KEYS.values():
            self._remove(key)

    def _remove(self, key: str):
        try:
            del self.storage[key]
        except KeyError:
            pass

    # =========================================================================
    # READ
    # =========================================================================

    def restore(self) -> Optional[RestoredSession]:
        """
        Rebuild the session from storage.

        Returns None when there is no usable session. Never raises.
        An identity holding the "all" sentinel gets its AccessSet re-expanded
        against the current catalog, and the expansion is written back.
        """
        try:
            identity = self._read_identity()
        except CorruptPersistedStateError as e:
            logger.debug(f"Discarding stored identity: {e}")
            return None

        if identity is None:
            return None

        if is_all_sentinel(identity.access):
            access = resolve_access(identity.access, self.catalog)
            self.storage[STORAGE_KEYS['access']] = json.dumps(access.to_list())
        else:
            try:
                access = self._read_access()
            except CorruptPersistedStateError as e:
                logger.debug(f"Discarding stored access list: {e}")
                return None

        if not access:
            return None

        return RestoredSession(
            identity=identity,
            access=access,
            token=self._read_token(),
            login_time=self._read_login_time(),
        )

    def _read_json(self, key: str) -> Any:
        raw = self.storage.get(key)
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise CorruptPersistedStateError(f"Entry '{key}' is not a string")
        try:
            return json.loads(raw)
        except ValueError as e:
            raise CorruptPersistedStateError(f"Entry '{key}' is not valid JSON: {e}") from e

    def _read_identity(self) -> Optional[Identity]:
        payload = self._read_json(STORAGE_KEYS['user'])
        if payload is None:
            return None
        try:
            return Identity.from_payload(payload)
        except ValueError as e:
            raise CorruptPersistedStateError(str(e)) from e

    def _read_access(self) -> AccessSet:
        values = self._read_json(STORAGE_KEYS['access'])
        if values is None:
            return AccessSet()
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise CorruptPersistedStateError("Access entry is not a list of strings")
        return AccessSet(v.strip().lower() for v in values if v.strip())

    def _read_token(self) -> Optional[str]:
        try:
            token = self._read_json(STORAGE_KEYS['token'])
        except CorruptPersistedStateError:
            return None
        return token if isinstance(token, str) and token else None

    def _read_login_time(self) -> Optional[datetime]:
        try:
            value = self._read_json(STORAGE_KEYS['login_time'])
            return datetime.fromisoformat(value) if isinstance(value, str) else None
        except (CorruptPersistedStateError, ValueError):
            return None


__all__ = [
    'Identity',
    'RestoredSession',
    'SessionStore',
    'STORAGE_KEYS',
]
