# o2d/__init__.py
"""
Shared package for the O2D operations app

- capabilities: Screen catalog
- access: AccessSet resolution and admin checks
- session: Identity and session persistence
- auth: Login / logout
- api_client: HTTP client for the backend
- navigation: Access-gated view router
- config: Configuration management (local + Streamlit Cloud)

Usage:
    from o2d import AuthManager, ViewRouter, DEFAULT_CATALOG
"""

from .access import AccessSet, can_access, is_admin, resolve_access
from .api_client import ApiClient, unwrap_envelope
from .auth import AuthManager
from .capabilities import DEFAULT_CATALOG, Capability, CapabilityCatalog
from .errors import (
    AuthenticationError,
    CorruptPersistedStateError,
    MalformedResponseError,
    O2DError,
    TransportError,
)
from .navigation import RouterState, ScreenKind, ViewRegistry, ViewRouter
from .session import Identity, RestoredSession, SessionStore

__all__ = [
    # Access
    'AccessSet',
    'can_access',
    'is_admin',
    'resolve_access',
    'Capability',
    'CapabilityCatalog',
    'DEFAULT_CATALOG',

    # Session / auth
    'AuthManager',
    'Identity',
    'RestoredSession',
    'SessionStore',

    # API
    'ApiClient',
    'unwrap_envelope',

    # Navigation
    'RouterState',
    'ScreenKind',
    'ViewRegistry',
    'ViewRouter',

    # Errors
    'O2DError',
    'TransportError',
    'MalformedResponseError',
    'AuthenticationError',
    'CorruptPersistedStateError',
]

__version__ = '1.0.0'
