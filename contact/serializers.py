"""
Contact Management Serializers

Serializers for contact form submissions and admin inbox management.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers
from .models import ContactMessage, MessageStatus

User = get_user_model()


class ContactFormSubmitSerializer(serializers.Serializer):
    """
    Public contact form submission serializer.

    Accepts the camelCase field names the contact page posts and maps them
    onto the model's columns.
    """

    firstName = serializers.CharField(source='first_name', max_length=255)
    lastName = serializers.CharField(source='last_name', max_length=255)
    email = serializers.EmailField(max_length=255)
    subject = serializers.CharField(max_length=255)
    message = serializers.CharField()

    userId = serializers.PrimaryKeyRelatedField(
        source='user',
        queryset=User.objects.all(),
        pk_field=serializers.UUIDField(),
        required=False,
        allow_null=True,
        help_text="Id of the signed-in submitter, if any"
    )

    def create(self, validated_data):
        return ContactMessage.objects.create(**validated_data)


class ContactMessageSerializer(serializers.ModelSerializer):
    """
    Serializer for contact messages in the admin inbox.
    """

    user_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = ContactMessage
        fields = [
            'id', 'user_id', 'first_name', 'last_name', 'email', 'subject',
            'message', 'status', 'created_at', 'replied_at'
        ]
        read_only_fields = fields


class ContactStatusUpdateSerializer(serializers.Serializer):
    """
    Serializer for a status change.
    """

    status = serializers.ChoiceField(choices=MessageStatus.choices)


class ContactStatsSerializer(serializers.Serializer):
    """
    Serializer for inbox summary counts.
    """

    total = serializers.IntegerField()
    new = serializers.IntegerField()
    read = serializers.IntegerField()
    replied = serializers.IntegerField()
    resolved = serializers.IntegerField()
