"""HTTP client for the EventHub API."""

import logging
import os
from typing import Any, Callable, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'http://localhost:5000'
DEFAULT_TIMEOUT = 10
NETWORK_ERROR_MESSAGE = 'Network error. Please check your connection.'


class ApiError(Exception):
    """The server answered with an error status.

    Attributes:
        status_code: HTTP status of the response
        message: Server-provided message; empty when the body had none
        errors: Per-field validation errors ({'field', 'message'} dicts)
    """

    def __init__(self, status_code: int, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message or f'Request failed with status {status_code}')
        self.status_code = status_code
        self.message = message or ''
        self.errors = errors or []

    @property
    def is_validation_error(self) -> bool:
        return bool(self.errors)


class NetworkError(Exception):
    """No response was received from the server."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class EventHubClient:
    """Client for the EventHub HTTP API.

    Every call is a single request. Calls that need authentication take the
    bearer token explicitly; the stores own the session.

    Args:
        base_url: Server root; defaults to EVENTHUB_API_URL or localhost
        timeout: Request timeout in seconds
        session: Object with a ``requests``-style ``request`` method
        on_unauthorized: Called whenever the server answers 401
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[Any] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        base_url = base_url or os.environ.get('EVENTHUB_API_URL', DEFAULT_BASE_URL)
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.on_unauthorized = on_unauthorized

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def get_events(self, filters: Optional[Dict[str, str]] = None, page: int = 1,
                   limit: int = 12, token: Optional[str] = None) -> Dict[str, Any]:
        params = {'page': str(page), 'limit': str(limit), **(filters or {})}
        return self._request('GET', '/api/events', token=token, params=params)

    def get_event(self, event_id: str, token: Optional[str] = None) -> Dict[str, Any]:
        return self._request('GET', f'/api/events/{event_id}', token=token)

    def create_event(self, data: Dict[str, Any], token: str) -> Dict[str, Any]:
        return self._request('POST', '/api/events', token=token, json=data)

    def update_event(self, event_id: str, data: Dict[str, Any], token: str) -> Dict[str, Any]:
        return self._request('PUT', f'/api/events/{event_id}', token=token, json=data)

    def delete_event(self, event_id: str, token: str) -> Dict[str, Any]:
        return self._request('DELETE', f'/api/events/{event_id}', token=token)

    def toggle_save_event(self, event_id: str, token: str) -> Dict[str, Any]:
        return self._request('POST', f'/api/events/{event_id}/save', token=token, json={})

    def get_saved_events(self, token: str) -> Dict[str, Any]:
        return self._request('GET', '/api/events/saved', token=token)

    # ------------------------------------------------------------------
    # Auth and users
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request('POST', '/api/auth/login', json={'email': email, 'password': password})

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self._request('POST', '/api/auth/register',
                             json={'name': name, 'email': email, 'password': password})

    def get_me(self, token: str) -> Dict[str, Any]:
        return self._request('GET', '/api/auth/me', token=token)

    def update_profile(self, token: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('PUT', '/api/auth/profile', token=token, json=data)

    def get_dashboard_stats(self, token: str) -> Dict[str, Any]:
        return self._request('GET', '/api/users/dashboard', token=token)

    def get_my_events(self, token: str, page: int = 1, limit: int = 10,
                      status: Optional[str] = None) -> Dict[str, Any]:
        params = {'page': str(page), 'limit': str(limit)}
        if status:
            params['status'] = status
        return self._request('GET', '/api/users/events', token=token, params=params)

    def delete_account(self, token: str) -> Dict[str, Any]:
        return self._request('DELETE', '/api/users/account', token=token)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, token: Optional[str] = None,
                 json: Optional[Dict[str, Any]] = None,
                 params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Raises:
            NetworkError: If no response was received
            ApiError: If the server answered with a 4xx/5xx status
        """
        headers = {'Content-Type': 'application/json', 'Accept': 'application/json'}
        if token:
            headers['Authorization'] = f'Bearer {token}'

        try:
            response = self.session.request(
                method,
                f'{self.base_url}{path}',
                headers=headers,
                json=json,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} got no response: {e}")
            raise NetworkError() from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code >= 400:
            if response.status_code == 401 and self.on_unauthorized is not None:
                self.on_unauthorized()
            elif response.status_code == 403:
                logger.warning(f"{method} {path}: access forbidden")
            elif response.status_code >= 500:
                logger.error(f"{method} {path}: server error {response.status_code}")
            raise ApiError(
                response.status_code,
                data.get('message') or '',
                data.get('errors'),
            )

        return data
