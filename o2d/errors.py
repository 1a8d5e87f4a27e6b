# o2d/errors.py
"""
Exception taxonomy for the O2D dashboard.

Access denial has no exception class: navigating to an unpermitted view is a
router state (see o2d.navigation), not an exception.
"""

from typing import Optional


class O2DError(Exception):
    """Base class for all dashboard errors."""
    pass


class TransportError(O2DError):
    """Raised when a request to the backend fails (network or HTTP status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(O2DError):
    """Raised when a response lacks a truthy success flag or a data object."""
    pass


class AuthenticationError(O2DError):
    """Raised when the backend rejects a login attempt."""
    pass


class CorruptPersistedStateError(O2DError):
    """Raised while decoding stored session entries; never escapes SessionStore."""
    pass


__all__ = [
    'O2DError',
    'TransportError',
    'MalformedResponseError',
    'AuthenticationError',
    'CorruptPersistedStateError',
]
