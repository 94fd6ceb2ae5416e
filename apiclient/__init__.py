"""
Farm API Client

Python client for the contact inbox API, plus the view-models the contact
page and the admin inbox are driven through.
"""
from .client import ApiClient, ApiError, ErrorKind
from .notifications import Notifier
from .resources import AuthApi, MessagesApi, MessageStatus
from .token_store import FileTokenStore, MemoryTokenStore, TokenStore
from .views import ContactFormView, InboxView

__all__ = [
    'ApiClient', 'ApiError', 'ErrorKind',
    'AuthApi', 'MessagesApi', 'MessageStatus',
    'TokenStore', 'MemoryTokenStore', 'FileTokenStore',
    'Notifier', 'ContactFormView', 'InboxView',
]
