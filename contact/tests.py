"""
Tests for the contact form and the admin inbox.
"""
import uuid
from datetime import timedelta
from smtplib import SMTPException
from unittest import mock

import pytest
from django.contrib.admin.sites import AdminSite
from django.db import DatabaseError
from django.test import RequestFactory
from django.utils import timezone
from kombu.exceptions import OperationalError
from rest_framework import status

from contact.admin import ContactMessageAdmin
from contact.models import ContactMessage, MessageStatus
from contact.tasks import send_staff_notification
from contact.views import ContactMessageListCreateView

pytestmark = pytest.mark.django_db

MESSAGES_URL = '/api/messages'


def form_data(**overrides):
    data = {
        'firstName': 'Yaw',
        'lastName': 'Owusu',
        'email': 'yaw@example.com',
        'subject': 'Feed supply',
        'message': 'When will the next batch of layer mash arrive?',
    }
    data.update(overrides)
    return data


@pytest.fixture
def sample_message(db):
    return ContactMessage.objects.create(
        first_name='John',
        last_name='Doe',
        email='john@example.com',
        subject='Vaccination schedule',
        message='This is a question about the poultry vaccination program.'
    )


@pytest.fixture
def inbox(db):
    """Three messages with distinct submission times, oldest first."""
    now = timezone.now()
    messages = []
    for offset, (first, subject, state) in enumerate([
        ('Abena', 'Broiler prices', MessageStatus.NEW),
        ('Kwame', 'Layer feed', MessageStatus.READ),
        ('Efua', 'Broiler vaccines', MessageStatus.RESOLVED),
    ]):
        message = ContactMessage.objects.create(
            first_name=first,
            last_name='Asante',
            email=f'{first.lower()}@example.com',
            subject=subject,
            message=f'Message from {first}',
            status=state
        )
        ContactMessage.objects.filter(pk=message.pk).update(
            created_at=now - timedelta(hours=3 - offset)
        )
        messages.append(message)
    return messages


class TestContactFormSubmission:
    """Test public contact form submission."""

    def test_submit_valid_contact_form(self, api_client):
        response = api_client.post(MESSAGES_URL, form_data())

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        assert response.data['message'] == 'Message sent successfully'

        message = ContactMessage.objects.get(id=response.data['id'])
        assert message.status == MessageStatus.NEW
        assert message.first_name == 'Yaw'
        assert message.user is None
        assert message.replied_at is None

    def test_submit_as_signed_in_user(self, api_client, farmer):
        response = api_client.post(MESSAGES_URL, form_data(userId=str(farmer.id)))

        assert response.status_code == status.HTTP_201_CREATED
        message = ContactMessage.objects.get(id=response.data['id'])
        assert message.user == farmer

    @pytest.mark.parametrize('user_id', [None, ''])
    def test_empty_user_id_is_stored_as_null(self, api_client, user_id):
        response = api_client.post(MESSAGES_URL, form_data(userId=user_id))

        assert response.status_code == status.HTTP_201_CREATED
        assert ContactMessage.objects.get(id=response.data['id']).user_id is None

    def test_unknown_user_id_rejected(self, api_client):
        response = api_client.post(MESSAGES_URL, form_data(userId=str(uuid.uuid4())))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'userId' in response.data['fields']
        assert ContactMessage.objects.count() == 0

    def test_submit_missing_required_fields(self, api_client):
        response = api_client.post(MESSAGES_URL, {'firstName': 'Yaw'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert response.data['error'] == 'All fields are required'
        assert set(response.data['fields']) == {'lastName', 'email', 'subject', 'message'}
        assert ContactMessage.objects.count() == 0

    def test_whitespace_only_field_counts_as_missing(self, api_client):
        response = api_client.post(MESSAGES_URL, form_data(subject='   '))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'All fields are required'
        assert ContactMessage.objects.count() == 0

    def test_submit_invalid_email(self, api_client):
        response = api_client.post(MESSAGES_URL, form_data(email='invalid-email'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Validation failed'
        assert 'email' in response.data['fields']

    def test_authorization_header_is_ignored(self, api_client):
        """A stale or garbage token must not block a public submission."""
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-real-token')

        response = api_client.post(MESSAGES_URL, form_data())

        assert response.status_code == status.HTTP_201_CREATED

    def test_staff_notified_by_email(self, api_client, mailoutbox, settings):
        settings.CONTACT_NOTIFY_STAFF = True
        settings.CONTACT_EMAIL_TO = 'support@farm.test'

        response = api_client.post(MESSAGES_URL, form_data())

        assert response.status_code == status.HTTP_201_CREATED
        assert len(mailoutbox) == 1
        email = mailoutbox[0]
        assert email.to == ['support@farm.test']
        assert email.reply_to == ['yaw@example.com']
        assert 'Feed supply' in email.subject
        assert response.data['id'] in email.body

    def test_no_email_when_notifications_disabled(self, api_client, mailoutbox, settings):
        settings.CONTACT_NOTIFY_STAFF = False

        response = api_client.post(MESSAGES_URL, form_data())

        assert response.status_code == status.HTTP_201_CREATED
        assert mailoutbox == []

    def test_broker_outage_does_not_fail_submission(self, api_client, settings):
        settings.CONTACT_NOTIFY_STAFF = True

        with mock.patch(
            'contact.views.send_staff_notification.delay',
            side_effect=OperationalError('broker unreachable')
        ):
            response = api_client.post(MESSAGES_URL, form_data())

        assert response.status_code == status.HTTP_201_CREATED
        assert ContactMessage.objects.count() == 1

    def test_failing_notification_does_not_fail_submission(self, api_client, settings):
        settings.CONTACT_NOTIFY_STAFF = True

        with mock.patch(
            'contact.views.send_staff_notification.delay',
            side_effect=SMTPException('mail server refused')
        ):
            response = api_client.post(MESSAGES_URL, form_data())

        assert response.status_code == status.HTTP_201_CREATED
        assert ContactMessage.objects.count() == 1

    def test_each_submission_gets_new_id(self, api_client):
        first = api_client.post(MESSAGES_URL, form_data())
        second = api_client.post(MESSAGES_URL, form_data())

        assert first.status_code == second.status_code == status.HTTP_201_CREATED
        assert first.data['id'] != second.data['id']
        assert ContactMessage.objects.count() == 2

    def test_store_failure(self, api_client):
        with mock.patch.object(
            ContactMessage.objects, 'create', side_effect=DatabaseError('connection lost')
        ):
            response = api_client.post(MESSAGES_URL, form_data())

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['error'] == 'Failed to send message'
        assert 'connection lost' not in str(response.data)


class TestContactMessageListView:
    """Test admin contact message list view."""

    def test_unauthenticated_access(self, api_client, sample_message):
        response = api_client.get(MESSAGES_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'not_authenticated'
        assert 'WWW-Authenticate' in response

    def test_farmer_access_denied(self, api_client, farmer, bearer):
        api_client.credentials(HTTP_AUTHORIZATION=bearer(farmer))

        response = api_client.get(MESSAGES_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == {
            'error': 'Forbidden - Admin access required',
            'code': 'permission_denied'
        }

    def test_newest_first_unpaginated(self, admin_api, inbox):
        response = admin_api.get(MESSAGES_URL)

        assert response.status_code == status.HTTP_200_OK
        assert isinstance(response.data, list)
        assert [m['first_name'] for m in response.data] == ['Efua', 'Kwame', 'Abena']

    def test_message_fields(self, admin_api, sample_message):
        response = admin_api.get(MESSAGES_URL)

        record = response.data[0]
        assert set(record) == {
            'id', 'user_id', 'first_name', 'last_name', 'email', 'subject',
            'message', 'status', 'created_at', 'replied_at'
        }
        assert record['id'] == str(sample_message.id)
        assert record['user_id'] is None
        assert record['status'] == 'new'
        assert record['replied_at'] is None

    def test_filter_by_status(self, admin_api, inbox):
        response = admin_api.get(MESSAGES_URL, {'status': 'read'})

        assert response.status_code == status.HTTP_200_OK
        assert [m['first_name'] for m in response.data] == ['Kwame']

    def test_filter_by_unknown_status(self, admin_api, inbox):
        response = admin_api.get(MESSAGES_URL, {'status': 'archived'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_search(self, admin_api, inbox):
        response = admin_api.get(MESSAGES_URL, {'search': 'broiler'})

        assert response.status_code == status.HTTP_200_OK
        assert [m['first_name'] for m in response.data] == ['Efua', 'Abena']

    def test_store_failure(self, admin_api):
        with mock.patch.object(
            ContactMessageListCreateView, 'filter_queryset',
            side_effect=DatabaseError('relation "messages" does not exist')
        ):
            response = admin_api.get(MESSAGES_URL)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Failed to fetch messages', 'code': 'internal_error'}


class TestContactMessageDetailView:
    """Test admin contact message detail view."""

    def test_get_message_details(self, admin_api, sample_message):
        response = admin_api.get(f'{MESSAGES_URL}/{sample_message.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['first_name'] == 'John'
        assert response.data['email'] == 'john@example.com'

    def test_missing_message(self, admin_api):
        response = admin_api.get(f'{MESSAGES_URL}/{uuid.uuid4()}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'not_found'

    def test_malformed_id(self, admin_api):
        response = admin_api.get(f'{MESSAGES_URL}/not-a-uuid')

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestContactMessageStatusUpdate:
    """Test updating message status."""

    def url(self, message_id):
        return f'{MESSAGES_URL}/{message_id}/status'

    def test_update_status(self, admin_api, sample_message):
        response = admin_api.put(self.url(sample_message.id), {'status': 'read'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'message': 'Status updated'}
        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.READ
        assert sample_message.replied_at is None

    def test_replied_stamps_replied_at(self, admin_api, sample_message):
        before = timezone.now()

        admin_api.put(self.url(sample_message.id), {'status': 'replied'})

        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.REPLIED
        assert sample_message.replied_at >= before

    def test_replied_at_survives_later_status(self, admin_api, sample_message):
        admin_api.put(self.url(sample_message.id), {'status': 'replied'})
        sample_message.refresh_from_db()
        replied_at = sample_message.replied_at

        admin_api.put(self.url(sample_message.id), {'status': 'resolved'})

        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.RESOLVED
        assert sample_message.replied_at == replied_at

    def test_invalid_status(self, admin_api, sample_message):
        response = admin_api.put(self.url(sample_message.id), {'status': 'archived'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid status'
        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.NEW

    def test_missing_message_reports_success(self, admin_api):
        response = admin_api.put(self.url(uuid.uuid4()), {'status': 'read'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True

    def test_requires_admin(self, api_client, farmer, bearer, sample_message):
        assert api_client.put(
            self.url(sample_message.id), {'status': 'read'}
        ).status_code == status.HTTP_401_UNAUTHORIZED

        api_client.credentials(HTTP_AUTHORIZATION=bearer(farmer))
        assert api_client.put(
            self.url(sample_message.id), {'status': 'read'}
        ).status_code == status.HTTP_403_FORBIDDEN

        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.NEW

    def test_store_failure(self, admin_api, sample_message):
        with mock.patch.object(
            ContactMessage.objects, 'set_status', side_effect=DatabaseError('deadlock')
        ):
            response = admin_api.put(self.url(sample_message.id), {'status': 'read'})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['error'] == 'Failed to update status'


class TestContactMessageDelete:
    """Test deleting messages."""

    def test_delete_message(self, admin_api, sample_message):
        response = admin_api.delete(f'{MESSAGES_URL}/{sample_message.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'message': 'Message deleted'}
        assert not ContactMessage.objects.filter(id=sample_message.id).exists()

    def test_delete_missing_message_reports_success(self, admin_api, sample_message):
        response = admin_api.delete(f'{MESSAGES_URL}/{uuid.uuid4()}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert ContactMessage.objects.count() == 1

    def test_requires_credentials(self, api_client, sample_message):
        response = api_client.delete(f'{MESSAGES_URL}/{sample_message.id}')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'not_authenticated'
        assert ContactMessage.objects.filter(id=sample_message.id).exists()

    def test_requires_admin(self, api_client, farmer, bearer, sample_message):
        api_client.credentials(HTTP_AUTHORIZATION=bearer(farmer))

        response = api_client.delete(f'{MESSAGES_URL}/{sample_message.id}')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert ContactMessage.objects.filter(id=sample_message.id).exists()

    def test_store_failure(self, admin_api, sample_message):
        with mock.patch.object(
            ContactMessage.objects, 'remove', side_effect=DatabaseError('disk full')
        ):
            response = admin_api.delete(f'{MESSAGES_URL}/{sample_message.id}')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['error'] == 'Failed to delete message'


class TestContactStats:
    """Test inbox summary counts."""

    def test_counts_per_status(self, admin_api, inbox):
        response = admin_api.get(f'{MESSAGES_URL}/stats')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'total': 3, 'new': 1, 'read': 1, 'replied': 0, 'resolved': 1
        }

    def test_empty_inbox(self, admin_api):
        response = admin_api.get(f'{MESSAGES_URL}/stats')

        assert response.data['total'] == 0


class TestContactMessageModel:
    """Test the message queryset helpers."""

    def test_set_status_rejects_unknown_value(self, sample_message):
        with pytest.raises(ValueError):
            ContactMessage.objects.set_status(sample_message.id, 'archived')

    def test_malformed_id_matches_nothing(self, sample_message):
        assert ContactMessage.objects.set_status('nope', 'read') == 0
        assert ContactMessage.objects.remove('nope') == 0

    def test_user_deletion_keeps_message(self, farmer):
        message = ContactMessage.objects.create(
            user=farmer,
            first_name='Kofi',
            last_name='Boateng',
            email='farmer@farm.test',
            subject='Account',
            message='Please close my account.'
        )

        farmer.delete()

        message.refresh_from_db()
        assert message.user is None

    def test_str(self, sample_message):
        assert str(sample_message) == 'John Doe - Vaccination schedule (new)'


class TestContactMessageAdmin:
    """Status changes made through the Django admin."""

    @pytest.fixture
    def model_admin(self):
        return ContactMessageAdmin(ContactMessage, AdminSite())

    @pytest.fixture
    def admin_request(self, inbox_admin):
        inbox_admin.is_staff = True
        inbox_admin.is_superuser = True
        inbox_admin.save()
        request = RequestFactory().post('/admin/contact/contactmessage/')
        request.user = inbox_admin
        return request

    def save_status(self, model_admin, admin_request, message, new_status):
        form_class = model_admin.get_form(admin_request, message, change=True)
        form = form_class(data={'status': new_status}, instance=message)
        assert form.is_valid(), form.errors
        obj = form.save(commit=False)
        model_admin.save_model(admin_request, obj, form, change=True)

    def test_change_form_reply_stamps_replied_at(self, model_admin, admin_request, sample_message):
        self.save_status(model_admin, admin_request, sample_message, 'replied')

        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.REPLIED
        assert sample_message.replied_at is not None

    def test_change_form_keeps_replied_at(self, model_admin, admin_request, sample_message):
        ContactMessage.objects.set_status(sample_message.id, MessageStatus.REPLIED)
        sample_message.refresh_from_db()
        replied_at = sample_message.replied_at

        self.save_status(model_admin, admin_request, sample_message, 'resolved')

        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.RESOLVED
        assert sample_message.replied_at == replied_at

    def test_mark_replied_action(self, model_admin, admin_request, sample_message):
        with mock.patch.object(model_admin, 'message_user'):
            model_admin.mark_replied(
                admin_request, ContactMessage.objects.filter(id=sample_message.id)
            )

        sample_message.refresh_from_db()
        assert sample_message.status == MessageStatus.REPLIED
        assert sample_message.replied_at is not None


class TestStaffNotificationTask:
    """Test the staff notification task directly."""

    def test_missing_message(self, mailoutbox):
        message_id = str(uuid.uuid4())

        result = send_staff_notification.apply(args=[message_id]).get()

        assert result == f'Contact message {message_id} not found'
        assert mailoutbox == []


class TestInboxLifecycle:
    """Anonymous submission through to deletion."""

    def test_submit_reply_delete(self, api_client, inbox_admin, bearer):
        created = api_client.post(MESSAGES_URL, form_data())
        assert created.status_code == status.HTTP_201_CREATED
        message_id = created.data['id']

        api_client.credentials(HTTP_AUTHORIZATION=bearer(inbox_admin))

        listed = api_client.get(MESSAGES_URL)
        assert listed.data[0]['id'] == message_id
        assert listed.data[0]['status'] == 'new'

        api_client.put(f'{MESSAGES_URL}/{message_id}/status', {'status': 'replied'})
        listed = api_client.get(MESSAGES_URL)
        assert listed.data[0]['status'] == 'replied'
        assert listed.data[0]['replied_at'] is not None

        deleted = api_client.delete(f'{MESSAGES_URL}/{message_id}')
        assert deleted.data['success'] is True

        listed = api_client.get(MESSAGES_URL)
        assert message_id not in [m['id'] for m in listed.data]
