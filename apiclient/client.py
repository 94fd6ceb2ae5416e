"""
Farm API Client

Thin ``requests`` wrapper around the REST API:
- Attaches the stored bearer token to authenticated calls
- JSON-encodes request bodies
- Turns every failure into a single ApiError carrying a kind and a message

Usage:
    from apiclient import ApiClient, MemoryTokenStore

    client = ApiClient(token_store=MemoryTokenStore())
    messages = client.request('/messages', require_auth=True)
"""

import logging
import os
from enum import Enum
from typing import Any, Optional

import requests

from .token_store import MemoryTokenStore, TokenStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'http://localhost:8000/api'


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = 'missing_credential'
    VALIDATION = 'validation'
    UNAUTHORIZED = 'unauthorized'
    FORBIDDEN = 'forbidden'
    NOT_FOUND = 'not_found'
    SERVER = 'server'
    NETWORK = 'network'


STATUS_KINDS = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
}


class ApiError(Exception):
    """Any failed API call."""

    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    def __repr__(self):
        return f"ApiError({self.kind.name}, {self.message!r}, status_code={self.status_code})"


class ApiClient:
    """
    HTTP client for the farm API.

    Args:
        base_url: API root, defaults to the FARM_API_URL environment variable
        token_store: where the access token lives
        session: a ``requests.Session`` (or compatible) to send through
        timeout: seconds before a call is abandoned
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30
    ):
        self.base_url = (base_url or os.getenv('FARM_API_URL', DEFAULT_BASE_URL)).rstrip('/')
        self.token_store = token_store if token_store is not None else MemoryTokenStore()
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(
        self,
        endpoint: str,
        method: str = 'GET',
        body: Any = None,
        require_auth: bool = False
    ) -> Any:
        """
        Call an endpoint and return its decoded JSON body.

        Args:
            endpoint: path below the base URL, e.g. ``/messages``
            method: HTTP method
            body: JSON-serializable payload, ignored for GET
            require_auth: send the stored bearer token

        Returns:
            Decoded JSON, or None when the response has no body

        Raises:
            ApiError: on a missing token, a non-2xx answer or a transport failure
        """
        method = method.upper()
        headers = {'Content-Type': 'application/json'}

        if require_auth:
            token = self.token_store.get()
            if not token:
                raise ApiError(ErrorKind.MISSING_CREDENTIAL, 'No access token available')
            headers['Authorization'] = f'Bearer {token}'

        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                json=body if method != 'GET' else None,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.warning(f"API timeout: {method} {endpoint}")
            raise ApiError(ErrorKind.NETWORK, 'Request timed out. Please try again.')
        except requests.exceptions.RequestException as e:
            logger.warning(f"API connection error: {method} {endpoint}: {e}")
            raise ApiError(ErrorKind.NETWORK, 'Unable to reach the server. Please try again.')

        if not response.ok:
            message = self._error_message(response)
            logger.warning(
                f"API error {response.status_code} on {method} {endpoint}: {message}"
            )
            raise ApiError(
                STATUS_KINDS.get(response.status_code, ErrorKind.SERVER),
                message,
                status_code=response.status_code
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise ApiError(
                ErrorKind.SERVER,
                f'Invalid JSON in response from {endpoint}',
                status_code=response.status_code
            )

    @staticmethod
    def _error_message(response) -> str:
        """Message from the error body, falling back to the status code."""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            for key in ('error', 'detail'):
                if payload.get(key):
                    return str(payload[key])
        return f'API Error: {response.status_code}'
