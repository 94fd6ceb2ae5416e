from django.contrib.auth.models import AbstractUser
from django.db import models
import uuid


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.
    Farmers use the dashboard; admins triage the contact inbox.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        FARMER = 'farmer', 'Farmer'
        ADMIN = 'admin', 'Administrator'

    email = models.EmailField(
        unique=True,
        help_text="Login email address"
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.FARMER,
        db_index=True,
        help_text="User's role in the system"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return f"{self.get_full_name()} ({self.get_role_display()})"

    def get_full_name(self):
        """Return the user's full name or email if name is not set."""
        full_name = super().get_full_name()
        return full_name if full_name else self.email

    @property
    def is_admin(self):
        return self.role == self.UserRole.ADMIN

    @property
    def identity(self):
        """The identity attached to authenticated requests."""
        return {
            'id': str(self.id),
            'email': self.email,
            'full_name': self.get_full_name(),
            'role': self.role,
        }
