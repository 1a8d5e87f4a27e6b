# o2d/access.py
"""
Capability-based Access Control

Turns the raw access field issued by the backend into an AccessSet:
- "all" (any casing/whitespace): every capability of the catalog, evaluated
  at read time so catalog additions are granted without re-login
- otherwise: comma-separated capability ids, trimmed and lower-cased

Also decides whether a user is treated as an administrator.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Tuple

from .capabilities import ALL_ACCESS_SENTINEL, CapabilityCatalog

if TYPE_CHECKING:
    from .session import Identity

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class AccessSet:
    """
    Set of capability ids a user may navigate to.

    Usage:
        access = resolve_access(user.access, catalog)

        "payment" in access     # membership
        access.ids              # catalog order for "all", input order otherwise
        access.to_list()        # serializable form
    """

    def __init__(
        self,
        tokens: Iterable[str] = (),
        catalog: Optional[CapabilityCatalog] = None,
        grants_all: bool = False
    ):
        if grants_all and catalog is None:
            raise ValueError("An 'all' access set needs the catalog it expands to")
        self._tokens: Tuple[str, ...] = tuple(dict.fromkeys(tokens))
        self._catalog = catalog
        self.grants_all = grants_all

    @property
    def ids(self) -> Tuple[str, ...]:
        """Granted ids. For 'all' this reads the catalog every time."""
        if self.grants_all:
            return self._catalog.ids
        return self._tokens

    def to_list(self) -> List[str]:
        return list(self.ids)

    def __contains__(self, capability_id: object) -> bool:
        return capability_id in self.ids

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self.ids)

    def __bool__(self) -> bool:
        return len(self.ids) > 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AccessSet):
            return frozenset(self.ids) == frozenset(other.ids)
        if isinstance(other, (set, frozenset)):
            return frozenset(self.ids) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self.ids))

    def __repr__(self) -> str:
        if self.grants_all:
            return f"AccessSet(all, size={len(self)})"
        return f"AccessSet({list(self._tokens)})"


def is_all_sentinel(raw_field: Optional[str]) -> bool:
    """True when the raw access field is the 'all' sentinel."""
    if raw_field is None:
        return False
    return str(raw_field).strip().lower() == ALL_ACCESS_SENTINEL


def resolve_access(raw_field: Optional[str], catalog: CapabilityCatalog) -> AccessSet:
    """
    Resolve a raw access field into an AccessSet.

    Args:
        raw_field: Access string from the user record (e.g. "Dashboard, Orders" or "ALL")
        catalog: Capability catalog the "all" sentinel expands to

    Returns:
        AccessSet
    """
    if raw_field is None:
        return AccessSet()

    if is_all_sentinel(raw_field):
        return AccessSet(catalog=catalog, grants_all=True)

    normalized = str(raw_field).strip().lower()
    tokens = [token.strip() for token in normalized.split(",")]
    return AccessSet(token for token in tokens if token)


def is_admin(
    identity: Optional["Identity"],
    access_set: AccessSet,
    catalog: CapabilityCatalog
) -> bool:
    """
    Decide whether a user bypasses per-view access checks.

    True if any of:
    - role is "admin" (case-insensitive)
    - the access set carries the "admin" token
    - the access set equals the full catalog
    - the access set has as many ids as the catalog (tolerates catalog drift)
    """
    role = (identity.role or "") if identity is not None else ""
    if role.strip().lower() == ADMIN_ROLE:
        return True

    if ADMIN_ROLE in access_set:
        return True

    if access_set.grants_all or frozenset(access_set.ids) == frozenset(catalog.ids):
        return True

    return len(access_set) == len(catalog)


def can_access(
    view_id: Optional[str],
    identity: Optional["Identity"],
    access_set: AccessSet,
    catalog: CapabilityCatalog
) -> bool:
    """Admin bypass or membership in the access set."""
    if not view_id:
        return False
    return is_admin(identity, access_set, catalog) or view_id in access_set


__all__ = [
    'AccessSet',
    'ADMIN_ROLE',
    'is_all_sentinel',
    'resolve_access',
    'is_admin',
    'can_access',
]
