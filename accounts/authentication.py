"""
Bearer Token Authentication

Verifies ``Authorization: Bearer <token>`` credentials and resolves them to a
stored user. Each way a credential can fail maps to its own 401 code:

- token_invalid: bad signature, malformed token or wrong token type
- token_expired: signature verifies but the ``exp`` claim has passed
- user_not_found: the token is valid but its user no longer exists
- user_inactive: the user has been deactivated

A missing header is not an error here; the request stays anonymous and the
permission layer answers 401 ``not_authenticated``.
"""
import logging
import time

import jwt
from django.core.exceptions import ValidationError
from rest_framework import exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


class TokenInvalid(exceptions.AuthenticationFailed):
    default_detail = 'Unauthorized - Invalid token'
    default_code = 'token_invalid'


class TokenExpired(exceptions.AuthenticationFailed):
    default_detail = 'Unauthorized - Token expired'
    default_code = 'token_expired'


class UserNotFound(exceptions.AuthenticationFailed):
    default_detail = 'Unauthorized - User not found'
    default_code = 'user_not_found'


class UserInactive(exceptions.AuthenticationFailed):
    default_detail = 'Unauthorized - User is inactive'
    default_code = 'user_inactive'


class BearerTokenAuthentication(JWTAuthentication):
    """
    JWT authentication that tells expired tokens apart from invalid ones and
    treats a token for a deleted account as unauthenticated.
    """

    def get_validated_token(self, raw_token):
        try:
            return AccessToken(raw_token)
        except TokenError:
            raise self.classify_token_error(raw_token)

    def classify_token_error(self, raw_token):
        """Decide whether a rejected token is expired or simply invalid."""
        key = api_settings.VERIFYING_KEY or api_settings.SIGNING_KEY
        try:
            payload = jwt.decode(
                raw_token,
                key,
                algorithms=[api_settings.ALGORITHM],
                options={'verify_exp': False, 'verify_aud': False},
            )
        except jwt.InvalidTokenError:
            return TokenInvalid()

        exp = payload.get('exp')
        if exp is not None and exp <= time.time():
            return TokenExpired()
        return TokenInvalid()

    def get_user(self, validated_token):
        try:
            user_id = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError:
            raise TokenInvalid()

        try:
            user = self.user_model.objects.get(**{api_settings.USER_ID_FIELD: user_id})
        except (self.user_model.DoesNotExist, ValidationError, ValueError):
            logger.info(f"Rejected token for missing user {user_id}")
            raise UserNotFound()

        if not user.is_active:
            raise UserInactive()

        return user
