"""
Drive the real API client and view-models against the app in-process.
"""
from unittest import mock

import pytest
from rest_framework.test import RequestsClient

from apiclient import (
    ApiClient, ApiError, AuthApi, ContactFormView, ErrorKind, InboxView,
    MemoryTokenStore, MessagesApi, Notifier,
)
from contact.models import ContactMessage, MessageStatus

pytestmark = pytest.mark.django_db


@pytest.fixture
def client():
    return ApiClient('http://testserver/api', MemoryTokenStore(), session=RequestsClient())


@pytest.fixture
def signed_in_admin(client, inbox_admin):
    AuthApi(client).login('admin@farm.test', 'testpass123')
    return client


class TestEndToEnd:

    def test_anonymous_submit_then_admin_triage(self, client, inbox_admin, settings):
        settings.CONTACT_NOTIFY_STAFF = False
        notifier = mock.Mock(spec=Notifier)

        form = ContactFormView(MessagesApi(client), notifier)
        for field, value in {
            'firstName': 'Esi',
            'lastName': 'Adjei',
            'email': 'esi@example.com',
            'subject': 'Egg grading',
            'message': 'How do I grade eggs for export?',
        }.items():
            form.update(field, value)
        assert form.submit() is True

        message = ContactMessage.objects.get()
        assert message.user is None

        AuthApi(client).login('admin@farm.test', 'testpass123')
        inbox = InboxView(MessagesApi(client), notifier)
        inbox.load()
        assert [m['id'] for m in inbox.messages] == [str(message.id)]
        assert inbox.messages[0]['status'] == 'new'

        assert inbox.change_status(str(message.id), 'replied') is True
        message.refresh_from_db()
        assert message.status == MessageStatus.REPLIED
        assert message.replied_at is not None

        assert inbox.delete(str(message.id), confirm=lambda: True) is True
        inbox.load()
        assert inbox.messages == []

    def test_signed_in_submitter_recorded(self, client, farmer, settings):
        settings.CONTACT_NOTIFY_STAFF = False
        identity = AuthApi(client).login('farmer@farm.test', 'testpass123')['user']

        form = ContactFormView(MessagesApi(client), mock.Mock(spec=Notifier), identity=identity)
        form.form.update({
            'firstName': 'Kofi', 'lastName': 'Boateng', 'email': 'farmer@farm.test',
            'subject': 'Subscription', 'message': 'Renewal question',
        })
        form.submit()

        assert ContactMessage.objects.get().user == farmer

    def test_verify(self, signed_in_admin):
        data = AuthApi(signed_in_admin).verify()

        assert data['user']['role'] == 'admin'

    def test_stats_and_get(self, signed_in_admin):
        message = ContactMessage.objects.create(
            first_name='Ama', last_name='Owusu', email='ama@example.com',
            subject='Hi', message='Hello', status=MessageStatus.READ
        )
        api = MessagesApi(signed_in_admin)

        assert api.stats()['read'] == 1
        assert api.get(str(message.id))['email'] == 'ama@example.com'
        assert len(api.get_all(status='read')) == 1
        assert api.get_all(search='nothing-matches') == []

    def test_farmer_is_forbidden(self, client, farmer):
        AuthApi(client).login('farmer@farm.test', 'testpass123')

        with pytest.raises(ApiError) as excinfo:
            MessagesApi(client).get_all()

        assert excinfo.value.kind == ErrorKind.FORBIDDEN
        assert excinfo.value.message == 'Forbidden - Admin access required'

    def test_bad_token_is_unauthorized(self, client):
        client.token_store.set('not-a-token')
        on_unauthorized = mock.Mock()
        inbox = InboxView(MessagesApi(client), mock.Mock(spec=Notifier), on_unauthorized)

        inbox.load()

        on_unauthorized.assert_called_once_with()
        assert inbox.messages == []

    def test_validation_error_message(self, client):
        with pytest.raises(ApiError) as excinfo:
            MessagesApi(client).send('', '', '', '', '')

        assert excinfo.value.kind == ErrorKind.VALIDATION
        assert excinfo.value.message == 'All fields are required'
