from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for user details.
    """
    full_name = serializers.CharField(source='get_full_name', read_only=True)
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'first_name', 'last_name',
            'full_name', 'role', 'role_display', 'is_active', 'date_joined'
        )
        read_only_fields = fields


class LoginSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer that also returns the user's identity.
    """
    def validate(self, attrs):
        data = super().validate(attrs)

        data['user'] = self.user.identity

        self.user.last_login = timezone.now()
        self.user.save(update_fields=['last_login'])

        return data
