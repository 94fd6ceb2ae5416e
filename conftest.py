"""
Shared pytest fixtures.
"""
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def inbox_admin(db):
    return User.objects.create_user(
        email='admin@farm.test',
        username='inbox_admin',
        password='testpass123',
        first_name='Ama',
        last_name='Mensah',
        role=User.UserRole.ADMIN
    )


@pytest.fixture
def farmer(db):
    return User.objects.create_user(
        email='farmer@farm.test',
        username='farmer',
        password='testpass123',
        first_name='Kofi',
        last_name='Boateng',
        role=User.UserRole.FARMER
    )


@pytest.fixture
def bearer():
    """Build an Authorization header value for a user."""
    def _bearer(user):
        return f'Bearer {AccessToken.for_user(user)}'
    return _bearer


@pytest.fixture
def admin_api(api_client, inbox_admin, bearer):
    """API client carrying a real admin access token."""
    api_client.credentials(HTTP_AUTHORIZATION=bearer(inbox_admin))
    return api_client
