"""
Tests for the contact form and inbox view-models.
"""
from unittest import mock

import pytest

from apiclient import (
    ApiError, ContactFormView, ErrorKind, InboxView, MessagesApi, Notifier,
)


def make_message(message_id, status='new', **fields):
    message = {
        'id': message_id,
        'user_id': None,
        'first_name': 'Akua',
        'last_name': 'Darko',
        'email': f'{message_id}@example.com',
        'subject': 'General',
        'message': 'Hello',
        'status': status,
        'created_at': '2026-01-10T09:00:00Z',
        'replied_at': None,
    }
    message.update(fields)
    return message


@pytest.fixture
def messages_api():
    return mock.Mock(spec=MessagesApi)


@pytest.fixture
def notifier():
    return mock.Mock(spec=Notifier)


class TestContactFormView:

    def fill(self, view):
        view.update('firstName', 'Yaw')
        view.update('lastName', 'Owusu')
        view.update('email', 'yaw@example.com')
        view.update('subject', 'Feed')
        view.update('message', 'Question about feed')

    def test_submit_sends_identity_and_resets(self, messages_api, notifier):
        view = ContactFormView(messages_api, notifier, identity={'id': 'user-1'})
        self.fill(view)

        assert view.submit() is True

        messages_api.send.assert_called_once_with(
            first_name='Yaw',
            last_name='Owusu',
            email='yaw@example.com',
            subject='Feed',
            message='Question about feed',
            user_id='user-1',
        )
        notifier.success.assert_called_once()
        assert view.form == dict.fromkeys(ContactFormView.FIELDS, '')
        assert view.is_submitting is False

    def test_anonymous_submit_sends_no_user(self, messages_api, notifier):
        view = ContactFormView(messages_api, notifier)
        self.fill(view)

        view.submit()

        assert messages_api.send.call_args.kwargs['user_id'] is None

    def test_failure_keeps_values(self, messages_api, notifier):
        messages_api.send.side_effect = ApiError(ErrorKind.SERVER, 'Failed to send message', 500)
        view = ContactFormView(messages_api, notifier)
        self.fill(view)

        assert view.submit() is False

        notifier.error.assert_called_once()
        notifier.success.assert_not_called()
        assert view.form['firstName'] == 'Yaw'
        assert view.is_submitting is False

    def test_is_submitting_while_in_flight(self, messages_api, notifier):
        view = ContactFormView(messages_api, notifier)
        seen = []
        messages_api.send.side_effect = lambda **kwargs: seen.append(view.is_submitting)

        view.submit()

        assert seen == [True]

    def test_unknown_field(self, messages_api):
        with pytest.raises(KeyError):
            ContactFormView(messages_api).update('phone', '024')


class TestInboxView:

    @pytest.fixture
    def view(self, messages_api, notifier):
        messages_api.get_all.return_value = [
            make_message('a', first_name='Abena', subject='Broiler prices'),
            make_message('b', status='read', first_name='Kwame'),
            make_message('c', status='replied', message='Broiler vaccines'),
        ]
        view = InboxView(messages_api, notifier)
        view.load()
        return view

    def test_load(self, view):
        assert [m['id'] for m in view.messages] == ['a', 'b', 'c']
        assert view.is_loading is False

    def test_load_failure_empties_list(self, view, messages_api, notifier):
        messages_api.get_all.side_effect = ApiError(ErrorKind.SERVER, 'Failed to fetch messages', 500)

        view.load()

        assert view.messages == []
        notifier.error.assert_called_once_with('Error', 'Failed to load messages')

    def test_search_and_filter(self, view):
        view.search_query = 'BROILER'
        assert [m['id'] for m in view.visible()] == ['a', 'c']

        view.status_filter = 'replied'
        assert [m['id'] for m in view.visible()] == ['c']

        view.search_query = ''
        view.status_filter = 'all'
        assert len(view.visible()) == 3

    def test_stats(self, view):
        assert view.stats() == {'total': 3, 'new': 1, 'read': 1, 'replied': 1, 'resolved': 0}

    def test_change_status_after_server_accepts(self, view, messages_api):
        view.select('a')

        assert view.change_status('a', 'replied') is True

        messages_api.update_status.assert_called_once()
        assert view.messages[0]['status'] == 'replied'
        assert view.messages[0]['replied_at'] is not None
        assert view.selected['status'] == 'replied'

    def test_change_status_failure_leaves_state(self, view, messages_api, notifier):
        messages_api.update_status.side_effect = ApiError(ErrorKind.SERVER, 'Failed to update status', 500)

        assert view.change_status('a', 'read') is False

        assert view.messages[0]['status'] == 'new'
        notifier.error.assert_called_once_with('Error', 'Failed to update status')

    def test_invalid_status_never_calls_server(self, view, messages_api):
        assert view.change_status('a', 'archived') is False

        messages_api.update_status.assert_not_called()

    def test_delete_clears_selection(self, view, messages_api):
        view.select('b')

        assert view.delete('b') is True

        messages_api.delete.assert_called_once_with('b')
        assert [m['id'] for m in view.messages] == ['a', 'c']
        assert view.selected is None

    def test_delete_declined(self, view, messages_api):
        assert view.delete('b', confirm=lambda: False) is False

        messages_api.delete.assert_not_called()
        assert len(view.messages) == 3

    def test_unauthorized_calls_handler(self, messages_api, notifier):
        on_unauthorized = mock.Mock()
        messages_api.delete.side_effect = ApiError(ErrorKind.UNAUTHORIZED, 'Unauthorized - Token expired', 401)
        view = InboxView(messages_api, notifier, on_unauthorized=on_unauthorized)

        view.delete('a')

        on_unauthorized.assert_called_once_with()
