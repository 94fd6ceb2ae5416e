"""
Account Permissions

Role checks applied after authentication has attached a user.
"""
from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Permission for admin users only.

    Anonymous requests fail authentication (401); authenticated users without
    the admin role are forbidden (403).
    """

    message = 'Forbidden - Admin access required'
    code = 'permission_denied'

    def has_permission(self, request, view):
        """Check if user is authenticated and holds the admin role."""
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.role == 'admin'
        )
