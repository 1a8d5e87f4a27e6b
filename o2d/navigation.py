# o2d/navigation.py
"""
Access-gated View Router

Decides which screen is displayed from the user's AccessSet:
- restores the last viewed screen when it is still permitted
- otherwise lands on the dashboard, or the first permitted screen in
  catalog order (never the registration screen)
- explicit navigation to an unpermitted screen is a DENIED state, not an error

The last requested view id is kept in a string-keyed store (st.query_params in
the app) so it survives a page reload.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, MutableMapping, Optional

from .access import AccessSet, can_access, is_admin
from .capabilities import DASHBOARD_VIEW, REGISTRATION_VIEW, Capability, CapabilityCatalog
from .session import Identity, SessionStore

logger = logging.getLogger(__name__)

ACTIVE_VIEW_KEY = "o2d_active_view"


class RouterState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    RESOLVING = "resolving"
    ACTIVE = "active"
    DENIED = "denied"


class ScreenKind(str, Enum):
    LOGIN = "login"
    LOADING = "loading"
    ACTIVE = "active"
    DENIED = "denied"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class NavigationState:
    active_view: Optional[str]
    last_persisted_view: Optional[str]


@dataclass(frozen=True)
class ScreenResolution:
    """What the shell should draw for the current router state."""
    kind: ScreenKind
    view_id: Optional[str] = None
    render: Optional[Callable[..., Any]] = None
    label: str = ""


class ViewRegistry:
    """Maps view ids to render callables."""

    def __init__(self):
        self._views: Dict[str, Callable[..., Any]] = {}

    def register(self, view_id: str, render: Callable[..., Any]):
        self._views[view_id] = render

    def get(self, view_id: Optional[str]) -> Optional[Callable[..., Any]]:
        return self._views.get(view_id) if view_id else None

    def __contains__(self, view_id: object) -> bool:
        return view_id in self._views


class ViewRouter:
    """
    State machine: UNAUTHENTICATED -> RESOLVING -> ACTIVE(view) | DENIED(view).

    Usage:
        router = ViewRouter(catalog, st.query_params, registry, session_store)
        router.authenticate(session.identity, session.access)

        router.select_view("payment")
        screen = router.current_screen()
    """

    def __init__(
        self,
        catalog: CapabilityCatalog,
        view_store: MutableMapping[str, Any],
        registry: Optional[ViewRegistry] = None,
        session_store: Optional[SessionStore] = None
    ):
        self.catalog = catalog
        self.view_store = view_store
        self.registry = registry or ViewRegistry()
        self.session_store = session_store

        self.state = RouterState.UNAUTHENTICATED
        self.active_view: Optional[str] = None
        self.identity: Optional[Identity] = None
        self.access = AccessSet()

    # =========================================================================
    # PERSISTED VIEW
    # =========================================================================

    def _saved_view(self) -> Optional[str]:
        value = self.view_store.get(ACTIVE_VIEW_KEY)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    def _persist_view(self, view_id: str):
        self.view_store[ACTIVE_VIEW_KEY] = view_id

    def _forget_view(self):
        try:
            del self.view_store[ACTIVE_VIEW_KEY]
        except KeyError:
            pass

    @property
    def navigation_state(self) -> NavigationState:
        return NavigationState(active_view=self.active_view, last_persisted_view=self._saved_view())

    # =========================================================================
    # ACCESS
    # =========================================================================

    def is_admin(self) -> bool:
        return is_admin(self.identity, self.access, self.catalog)

    def can_access(self, view_id: Optional[str]) -> bool:
        return can_access(view_id, self.identity, self.access, self.catalog)

    def accessible_items(self) -> List[Capability]:
        """Sidebar entries: everything for admins, else permitted screens, catalog order."""
        if self.state == RouterState.UNAUTHENTICATED:
            return []
        if self.is_admin():
            return list(self.catalog.items)
        return [item for item in self.catalog.items if item.id in self.access]

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def authenticate(self, identity: Identity, access: AccessSet) -> RouterState:
        """Enter RESOLVING with a fresh identity, then try to pick a screen."""
        self.identity = identity
        self.access = access
        self.state = RouterState.RESOLVING
        self.active_view = None
        return self.resolve()

    def resolve(self) -> RouterState:
        """Pick the landing screen. No-op outside RESOLVING."""
        if self.state != RouterState.RESOLVING:
            return self.state

        saved_view = self._saved_view()
        if saved_view and self.can_access(saved_view):
            return self._activate(saved_view, persist=False)

        if self.can_access(DASHBOARD_VIEW):
            return self._activate(DASHBOARD_VIEW)

        first_accessible = next(
            (view_id for view_id in self.catalog.ids
             if view_id != REGISTRATION_VIEW and view_id in self.access),
            None
        )
        if first_accessible:
            return self._activate(first_accessible)

        logger.warning(
            f"No landing screen for user {self.identity.username if self.identity else '?'}: "
            f"access {self.access!r} matches nothing in the catalog"
        )
        return self.state

    def _activate(self, view_id: str, persist: bool = True) -> RouterState:
        self.active_view = view_id
        self.state = RouterState.ACTIVE
        if persist:
            self._persist_view(view_id)
        logger.info(f"Active view: {view_id}")
        return self.state

    def select_view(self, view_id: str) -> RouterState:
        """Explicit navigation. The requested id is persisted even when denied."""
        if self.state == RouterState.UNAUTHENTICATED:
            logger.warning(f"Ignoring navigation to '{view_id}' without a session")
            return self.state

        self.active_view = view_id
        self._persist_view(view_id)

        if self.can_access(view_id):
            self.state = RouterState.ACTIVE
        else:
            self.state = RouterState.DENIED
            logger.warning(f"Access denied to view '{view_id}' for user {self.identity.username}")
        return self.state

    def logout(self) -> RouterState:
        self._forget_view()
        if self.session_store is not None:
            self.session_store.clear()

        self.state = RouterState.UNAUTHENTICATED
        self.active_view = None
        self.identity = None
        self.access = AccessSet()
        return self.state

    # =========================================================================
    # RENDERING
    # =========================================================================

    def current_screen(self) -> ScreenResolution:
        if self.state == RouterState.UNAUTHENTICATED:
            return ScreenResolution(ScreenKind.LOGIN)

        if self.state == RouterState.RESOLVING or not self.active_view:
            return ScreenResolution(ScreenKind.LOADING)

        label = self.catalog.label_for(self.active_view)

        if self.state == RouterState.DENIED:
            return ScreenResolution(ScreenKind.DENIED, self.active_view, label=label)

        render = self.registry.get(self.active_view)
        if render is None:
            return ScreenResolution(ScreenKind.NOT_FOUND, self.active_view, label=label)

        return ScreenResolution(ScreenKind.ACTIVE, self.active_view, render=render, label=label)

    def __repr__(self) -> str:
        return f"ViewRouter(state='{self.state.value}', active_view={self.active_view!r})"


__all__ = [
    'ACTIVE_VIEW_KEY',
    'NavigationState',
    'RouterState',
    'ScreenKind',
    'ScreenResolution',
    'ViewRegistry',
    'ViewRouter',
]
