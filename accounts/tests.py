"""
Tests for bearer token authentication, login and the create_admin command.
"""
from datetime import timedelta

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from accounts.models import User

pytestmark = pytest.mark.django_db

VERIFY_URL = '/api/auth/verify/'
LOGIN_URL = '/api/auth/login/'
PROTECTED_URL = '/api/messages'


class TestBearerTokenAuthentication:
    """Each way a credential can fail maps to its own 401 code."""

    def test_valid_admin_token(self, api_client, inbox_admin, bearer):
        api_client.credentials(HTTP_AUTHORIZATION=bearer(inbox_admin))

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_200_OK

    def test_missing_header(self, api_client):
        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'not_authenticated'

    def test_non_bearer_scheme(self, api_client, inbox_admin):
        api_client.credentials(HTTP_AUTHORIZATION=f'Basic {AccessToken.for_user(inbox_admin)}')

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'not_authenticated'

    def test_expired_token(self, api_client, inbox_admin):
        token = AccessToken.for_user(inbox_admin)
        token.set_exp(lifetime=-timedelta(minutes=5))
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {
            'error': 'Unauthorized - Token expired',
            'code': 'token_expired'
        }

    def test_tampered_token(self, api_client, inbox_admin):
        header, payload, signature = str(AccessToken.for_user(inbox_admin)).split('.')
        forged = f"{header}.{payload}.{signature[::-1]}"
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {forged}')

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'token_invalid'

    def test_garbage_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer abc.def')

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'token_invalid'

    def test_refresh_token_rejected_as_access(self, api_client, inbox_admin):
        refresh = RefreshToken.for_user(inbox_admin)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh}')

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'token_invalid'

    def test_deleted_user(self, api_client, inbox_admin, bearer):
        api_client.credentials(HTTP_AUTHORIZATION=bearer(inbox_admin))
        inbox_admin.delete()

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'user_not_found'

    def test_inactive_user(self, api_client, inbox_admin, bearer):
        api_client.credentials(HTTP_AUTHORIZATION=bearer(inbox_admin))
        inbox_admin.is_active = False
        inbox_admin.save()

        response = api_client.get(PROTECTED_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'user_inactive'


class TestLogin:
    """Test the login endpoint."""

    def test_login_returns_tokens_and_identity(self, api_client, inbox_admin):
        response = api_client.post(LOGIN_URL, {
            'email': 'admin@farm.test',
            'password': 'testpass123'
        })

        assert response.status_code == status.HTTP_200_OK
        assert {'access', 'refresh', 'user'} <= set(response.data)
        assert response.data['user'] == {
            'id': str(inbox_admin.id),
            'email': 'admin@farm.test',
            'full_name': 'Ama Mensah',
            'role': 'admin'
        }
        inbox_admin.refresh_from_db()
        assert inbox_admin.last_login is not None

    def test_wrong_password(self, api_client, inbox_admin):
        response = api_client.post(LOGIN_URL, {
            'email': 'admin@farm.test',
            'password': 'wrong-password'
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'no_active_account'

    def test_issued_token_is_accepted(self, api_client, inbox_admin):
        access = api_client.post(LOGIN_URL, {
            'email': 'admin@farm.test',
            'password': 'testpass123'
        }).data['access']
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')

        assert api_client.get(PROTECTED_URL).status_code == status.HTTP_200_OK


class TestVerify:
    """Test the token verification endpoint."""

    def test_verify_returns_identity(self, api_client, farmer, bearer):
        api_client.credentials(HTTP_AUTHORIZATION=bearer(farmer))

        response = api_client.get(VERIFY_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['user']['email'] == 'farmer@farm.test'
        assert response.data['user']['role'] == 'farmer'

    def test_verify_without_token(self, api_client):
        response = api_client.get(VERIFY_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestUserModel:

    def test_full_name_falls_back_to_email(self, db):
        user = User.objects.create_user(
            email='nameless@farm.test',
            username='nameless',
            password='testpass123'
        )

        assert user.get_full_name() == 'nameless@farm.test'
        assert user.role == User.UserRole.FARMER
        assert not user.is_admin


class TestCreateAdminCommand:
    """Test the create_admin management command."""

    def test_creates_admin(self):
        call_command('create_admin', email='New.Admin@Farm.test', password='longenough1')

        user = User.objects.get(email='new.admin@farm.test')
        assert user.role == User.UserRole.ADMIN
        assert user.is_staff
        assert user.username == 'new.admin'
        assert user.check_password('longenough1')

    def test_promotes_existing_user(self, farmer):
        call_command('create_admin', email='farmer@farm.test')

        farmer.refresh_from_db()
        assert farmer.is_admin
        assert farmer.check_password('testpass123')

    def test_short_password_rejected(self):
        with pytest.raises(CommandError):
            call_command('create_admin', email='short@farm.test', password='short')

        assert not User.objects.filter(email='short@farm.test').exists()
