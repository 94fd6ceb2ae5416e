"""
Tests for the project API exception handler.
"""
import pytest
from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status

from core.exceptions import api_exception_handler


@pytest.mark.django_db
class TestApiExceptionHandler:

    def test_unexpected_error_hides_details(self):
        response = api_exception_handler(RuntimeError('secret stack detail'), {'view': None})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal server error', 'code': 'internal_error'}

    def test_not_found(self):
        response = api_exception_handler(Http404(), {})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'not_found'

    def test_django_permission_denied(self):
        response = api_exception_handler(PermissionDenied(), {})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'permission_denied'

    def test_validation_error_keeps_fields(self):
        exc = exceptions.ValidationError({'status': ['"archived" is not a valid choice.']})

        response = api_exception_handler(exc, {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert response.data['code'] == 'validation_error'
        assert response.data['fields'] == {'status': ['"archived" is not a valid choice.']}

    def test_custom_code(self):
        exc = exceptions.AuthenticationFailed('Unauthorized - Token expired', code='token_expired')

        response = api_exception_handler(exc, {})

        assert response.data == {'error': 'Unauthorized - Token expired', 'code': 'token_expired'}
