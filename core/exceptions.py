"""
API Exception Handling

Reshapes every error response into the project's error body:

    {"error": "<human readable message>", "code": "<machine code>"}

Validation failures additionally carry ``success: false`` and the per-field
messages under ``fields``. Exceptions DRF does not know about are logged and
answered with a generic 500 so no internal detail reaches the caller.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


def _first_message(detail):
    """Pull a single human-readable message out of a DRF error detail."""
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _first_message(detail['detail'])
        for value in detail.values():
            return _first_message(value)
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def _error_code(exc):
    """Machine code for an API exception, falling back to its default code."""
    codes = exc.get_codes()
    if isinstance(codes, str):
        return codes
    if isinstance(codes, dict) and isinstance(codes.get('code'), str):
        return codes['code']
    return exc.default_code


def api_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER`` producing ``{"error", "code"}`` bodies."""
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception(
            f"Unhandled error in {view.__class__.__name__ if view else 'API'}: {exc}"
        )
        set_rollback()
        return Response(
            {'error': 'Internal server error', 'code': 'internal_error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            'success': False,
            'error': 'Validation failed',
            'code': 'validation_error',
            'fields': exc.detail,
        }
        return response

    response.data = {
        'error': _first_message(exc.detail),
        'code': _error_code(exc),
    }
    return response
