# o2d/auth.py
"""
Authentication Manager

Version: 1.0.0
Features:
- Login / logout against the O2D auth endpoints
- Access resolution from the user's raw access field
- Session persistence through SessionStore (survives Streamlit reruns)
- Session timeout
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from .access import AccessSet, is_admin, resolve_access
from .api_client import ApiClient, unwrap_envelope
from .capabilities import CapabilityCatalog
from .errors import AuthenticationError, MalformedResponseError, O2DError, TransportError
from .session import Identity, RestoredSession, SessionStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
LOGOUT_PATH = "/auth/logout"


class AuthManager:
    """
    Authentication manager for the O2D app.

    Usage:
        auth = AuthManager(SessionStore(st.session_state, catalog), auth_client)

        success, result = auth.authenticate(username, password)
        if success:
            auth.login(result)

        session = auth.check_session()   # RestoredSession or None
        auth.logout()
    """

    def __init__(
        self,
        store: SessionStore,
        client: ApiClient,
        session_timeout_hours: float = 8,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store
        self.client = client
        self.session_timeout = timedelta(hours=session_timeout_hours)
        self.clock = clock

    @property
    def catalog(self) -> CapabilityCatalog:
        return self.store.catalog

    # ==================== AUTHENTICATION ====================

    def authenticate(self, username: str, password: str) -> Tuple[bool, Dict]:
        """
        Authenticate user against the backend.

        Args:
            username: User's username
            password: Plain text password

        Returns:
            Tuple of (success: bool, session info dict or error dict)
        """
        if not username or not password:
            return False, {"error": "Please enter both username and password"}

        try:
            identity, token = self._request_login(username, password)
        except AuthenticationError as e:
            logger.warning(f"Login rejected for user {username}: {e}")
            return False, {"error": str(e)}
        except (TransportError, MalformedResponseError) as e:
            logger.error(f"Authentication error for user {username}: {e}")
            return False, {"error": "Authentication failed. Please try again."}

        access = resolve_access(identity.access, self.catalog)
        if not access:
            logger.warning(f"User {username} has no screens assigned")
            return False, {"error": "No screens are assigned to this account. Please contact administrator."}

        logger.info(f"User {username} authenticated successfully")
        return True, {
            'identity': identity,
            'access': access,
            'token': token,
            'login_time': self.clock(),
        }

    def _request_login(self, username: str, password: str) -> Tuple[Identity, str]:
        try:
            payload = self.client.post_json(LOGIN_PATH, {'username': username, 'password': password})
        except TransportError as e:
            if e.status_code in (400, 401, 403):
                raise AuthenticationError(str(e)) from e
            raise

        if isinstance(payload, dict) and payload.get('success') is False and payload.get('error'):
            raise AuthenticationError(str(payload['error']))

        data = unwrap_envelope(payload, "login response")
        token = data.get('token')
        if not data.get('user') or not token:
            raise MalformedResponseError("Invalid response from server")

        try:
            identity = Identity.from_payload(data['user'])
        except ValueError as e:
            raise MalformedResponseError(f"Invalid user in login response: {e}") from e

        return identity, str(token)

    # ==================== SESSION MANAGEMENT ====================

    def login(self, session_info: Dict) -> AccessSet:
        """Initialize the session after successful authentication."""
        identity: Identity = session_info['identity']
        access: AccessSet = session_info['access']
        token: str = session_info['token']

        self.store.persist(identity, access, token, session_info.get('login_time'))
        self.client.token = token

        logger.info(f"User {identity.username} logged in with {len(access)} capabilities")
        return access

    def check_session(self) -> Optional[RestoredSession]:
        """Return the current session, or None if absent or expired."""
        session = self.store.restore()
        if session is None:
            return None

        if session.login_time is not None:
            elapsed = self.clock() - session.login_time
            if elapsed > self.session_timeout:
                logger.info(f"Session expired for user: {session.identity.username}")
                self.logout()
                return None

        self.client.token = session.token
        return session

    def logout(self):
        """Notify the backend, then always clear the local session."""
        session = self.store.restore()
        username = session.identity.username if session else 'Unknown'

        try:
            self.client.post_json(LOGOUT_PATH)
        except O2DError as e:
            logger.warning(f"Logout request failed, clearing local session anyway: {e}")
        finally:
            self.store.clear()
            self.client.token = None

        logger.info(f"User {username} logged out")

    # ==================== ACCESS CONTROL ====================

    def is_admin(self) -> bool:
        """Check if current user is admin"""
        session = self.store.restore()
        if session is None:
            return False
        return is_admin(session.identity, session.access, self.catalog)

    # ==================== USER INFO HELPERS ====================

    def get_user_display_name(self) -> str:
        """Get user's display name for UI"""
        session = self.store.restore()
        return session.identity.display_name if session else "User"


__all__ = [
    'AuthManager',
    'LOGIN_PATH',
    'LOGOUT_PATH',
]
