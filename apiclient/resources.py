"""
Resource wrappers over ApiClient for the auth and messages endpoints.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from .client import ApiClient, ApiError, ErrorKind


class MessageStatus(str, Enum):
    NEW = 'new'
    READ = 'read'
    REPLIED = 'replied'
    RESOLVED = 'resolved'


class AuthApi:
    """Login, token check and logout."""

    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Exchange credentials for tokens and keep the access token."""
        data = self.client.request(
            '/auth/login/',
            method='POST',
            body={'email': email, 'password': password}
        )
        self.client.token_store.set(data['access'])
        return data

    def verify(self) -> Dict[str, Any]:
        return self.client.request('/auth/verify/', require_auth=True)

    def logout(self) -> None:
        self.client.token_store.clear()


class MessagesApi:
    """Contact messages: public submission and the admin inbox."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_all(self, status: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {}
        if status:
            params['status'] = self._coerce_status(status).value
        if search:
            params['search'] = search

        endpoint = '/messages'
        if params:
            endpoint = f'{endpoint}?{urlencode(params)}'
        return self.client.request(endpoint, require_auth=True)

    def get(self, message_id: str) -> Dict[str, Any]:
        return self.client.request(f'/messages/{message_id}', require_auth=True)

    def stats(self) -> Dict[str, int]:
        return self.client.request('/messages/stats', require_auth=True)

    def send(
        self,
        first_name: str,
        last_name: str,
        email: str,
        subject: str,
        message: str,
        user_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Submit the contact form. Needs no token."""
        return self.client.request(
            '/messages',
            method='POST',
            body={
                'firstName': first_name,
                'lastName': last_name,
                'email': email,
                'subject': subject,
                'message': message,
                'userId': user_id,
            }
        )

    def update_status(self, message_id: str, status) -> Dict[str, Any]:
        status = self._coerce_status(status)
        return self.client.request(
            f'/messages/{message_id}/status',
            method='PUT',
            body={'status': status.value},
            require_auth=True
        )

    def delete(self, message_id: str) -> Dict[str, Any]:
        return self.client.request(
            f'/messages/{message_id}',
            method='DELETE',
            require_auth=True
        )

    @staticmethod
    def _coerce_status(status) -> MessageStatus:
        try:
            return MessageStatus(status)
        except ValueError:
            raise ApiError(ErrorKind.VALIDATION, 'Invalid status')
