"""
View-models for the contact page and the admin inbox.

Each view holds its own state and talks to the API only through the
MessagesApi it was built with. Local state changes only after the server
has accepted a call; on failure the view raises a notification and keeps
what it had.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .client import ApiError, ErrorKind
from .notifications import Notifier
from .resources import MessagesApi, MessageStatus

logger = logging.getLogger(__name__)

STATUS_FILTER_ALL = 'all'


class ContactFormView:
    """State behind the public contact form."""

    FIELDS = ('firstName', 'lastName', 'email', 'subject', 'message')

    def __init__(
        self,
        messages_api: MessagesApi,
        notifier: Optional[Notifier] = None,
        identity: Optional[Dict[str, Any]] = None
    ):
        self.messages_api = messages_api
        self.notifier = notifier or Notifier()
        self.identity = identity
        self.is_submitting = False
        self.form = self._empty_form()

    def _empty_form(self):
        return dict.fromkeys(self.FIELDS, '')

    def update(self, field: str, value: str) -> None:
        if field not in self.form:
            raise KeyError(f"Unknown contact form field: {field}")
        self.form[field] = value

    def submit(self) -> bool:
        """
        Send the form. Clears it on success and keeps the entered values on
        failure.

        Returns:
            bool: whether the message was accepted
        """
        self.is_submitting = True
        try:
            self.messages_api.send(
                first_name=self.form['firstName'],
                last_name=self.form['lastName'],
                email=self.form['email'],
                subject=self.form['subject'],
                message=self.form['message'],
                user_id=self.identity.get('id') if self.identity else None,
            )
        except ApiError as e:
            logger.warning(f"Error sending message: {e.message}")
            self.notifier.error(
                'Message not sent',
                'Something went wrong while sending your message. Please try again.'
            )
            return False
        finally:
            self.is_submitting = False

        self.notifier.success(
            'Message sent',
            "Thank you for reaching out. We'll get back to you soon."
        )
        self.form = self._empty_form()
        return True


class InboxView:
    """State behind the admin messages page."""

    SEARCH_FIELDS = ('first_name', 'last_name', 'email', 'subject', 'message')

    def __init__(
        self,
        messages_api: MessagesApi,
        notifier: Optional[Notifier] = None,
        on_unauthorized: Optional[Callable[[], None]] = None
    ):
        self.messages_api = messages_api
        self.notifier = notifier or Notifier()
        self.on_unauthorized = on_unauthorized
        self.messages: List[Dict[str, Any]] = []
        self.is_loading = False
        self.search_query = ''
        self.status_filter = STATUS_FILTER_ALL
        self.selected: Optional[Dict[str, Any]] = None

    def _failed(self, error: ApiError, message: str) -> None:
        logger.warning(f"{message}: {error.message}")
        self.notifier.error('Error', message)
        if error.kind == ErrorKind.UNAUTHORIZED and self.on_unauthorized:
            self.on_unauthorized()

    def _find(self, message_id: str) -> Optional[Dict[str, Any]]:
        for message in self.messages:
            if message['id'] == message_id:
                return message
        return None

    def load(self) -> None:
        self.is_loading = True
        try:
            data = self.messages_api.get_all()
        except ApiError as e:
            self._failed(e, 'Failed to load messages')
            self.messages = []
        else:
            self.messages = list(data) if isinstance(data, list) else []
        finally:
            self.is_loading = False

    def visible(self) -> List[Dict[str, Any]]:
        """Messages matching the search box and the status filter."""
        query = self.search_query.lower()
        return [
            message for message in self.messages
            if (self.status_filter == STATUS_FILTER_ALL or message['status'] == self.status_filter)
            and any(query in (message.get(field) or '').lower() for field in self.SEARCH_FIELDS)
        ]

    def stats(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in MessageStatus}
        for message in self.messages:
            if message['status'] in counts:
                counts[message['status']] += 1
        counts['total'] = len(self.messages)
        return counts

    def select(self, message_id: Optional[str]) -> None:
        self.selected = self._find(message_id) if message_id else None

    def change_status(self, message_id: str, status) -> bool:
        try:
            status = MessageStatus(status)
            self.messages_api.update_status(message_id, status)
        except ValueError:
            self.notifier.error('Error', 'Invalid status')
            return False
        except ApiError as e:
            self._failed(e, 'Failed to update status')
            return False

        message = self._find(message_id)
        if message is not None:
            message['status'] = status.value
            if status == MessageStatus.REPLIED:
                message['replied_at'] = datetime.now(timezone.utc).isoformat()
        if self.selected is not None and self.selected['id'] == message_id:
            self.selected = message

        self.notifier.success('Success', f'Message marked as {status.value}')
        return True

    def delete(self, message_id: str, confirm: Optional[Callable[[], bool]] = None) -> bool:
        if confirm is not None and not confirm():
            return False

        try:
            self.messages_api.delete(message_id)
        except ApiError as e:
            self._failed(e, 'Failed to delete message')
            return False

        self.messages = [m for m in self.messages if m['id'] != message_id]
        if self.selected is not None and self.selected['id'] == message_id:
            self.selected = None

        self.notifier.success('Success', 'Message deleted')
        return True
