# o2d/api_client.py
"""
HTTP client for the O2D backend.

One ApiClient per base URL. The session token is held on the client and sent
as a bearer header on every call; it is set on login and dropped on logout, so
no module-level request defaults are mutated.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .errors import MalformedResponseError, TransportError

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Thin JSON client over requests.

    Usage:
        client = ApiClient(config.get_api_config().base_url, timeout=15)
        client.token = restored.token

        payload = client.get_json("/dashboard/summary")
        data = unwrap_envelope(payload, "dashboard summary")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15,
        http: Optional[requests.Session] = None,
        token: Optional[str] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = http or requests.Session()
        self.token = token

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request('GET', path, params=params)

    def post_json(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self._request('POST', path, json=payload)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = self.url_for(path)
        logger.debug(f"{method} {url}")

        try:
            response = self.http.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
            response.raise_for_status()

        except requests.exceptions.Timeout as e:
            logger.error(f"{method} {url} timed out after {self.timeout}s")
            raise TransportError(f"Request timed out: {url}") from e

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            message = _error_message(e.response) or f"HTTP error {status}"
            logger.error(f"{method} {url} failed: {message}")
            raise TransportError(message, status_code=status) from e

        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"Network error: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response from {url} is not JSON") from e


def _error_message(response: Optional[requests.Response]) -> Optional[str]:
    """Pull the backend's `error` field out of a failed response, if any."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, Mapping) and body.get('error'):
        return str(body['error'])
    return None


def unwrap_envelope(payload: Any, what: str = "response") -> Dict[str, Any]:
    """
    Validate a `{success, data}` envelope and return `data`.

    Raises:
        MalformedResponseError: if success is falsy or data is not an object
    """
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f"Invalid {what}: expected an object")

    if not payload.get('success'):
        reason = payload.get('error') or "success flag missing"
        raise MalformedResponseError(f"Invalid {what}: {reason}")

    data = payload.get('data')
    if not isinstance(data, Mapping):
        raise MalformedResponseError(f"Invalid {what}: data missing")

    return dict(data)


__all__ = [
    'ApiClient',
    'unwrap_envelope',
]
