"""
Contact Management Views

API endpoints for contact form submission and the admin inbox.
"""
import logging

from django.conf import settings
from django.db import DatabaseError
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from kombu.exceptions import OperationalError
from rest_framework import filters, generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdmin
from .models import ContactMessage
from .serializers import (
    ContactFormSubmitSerializer,
    ContactMessageSerializer,
    ContactStatusUpdateSerializer,
    ContactStatsSerializer,
)
from .tasks import send_staff_notification

logger = logging.getLogger(__name__)

MISSING_FIELD_CODES = {'required', 'blank', 'null'}


def _is_missing_field_error(errors):
    """True when validation failed only because fields were absent or empty."""
    return all(
        getattr(error, 'code', None) in MISSING_FIELD_CODES
        for field_errors in errors.values()
        for error in field_errors
    )


class ContactMessageListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/messages  - list every message, newest first (admin only)
    POST /api/messages  - submit the contact form (public)

    Query Parameters (GET):
    - status: Filter by status (new, read, replied, resolved)
    - search: Search in name, email, subject or message
    """

    queryset = ContactMessage.objects.all()
    serializer_class = ContactMessageSerializer
    pagination_class = None
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['status']
    search_fields = ['first_name', 'last_name', 'email', 'subject', 'message']

    def get_permissions(self):
        if self.request.method == 'POST':
            return [AllowAny()]
        return [IsAdmin()]

    def get_authenticators(self):
        # Submissions are public; a stale token must not block them
        if self.request.method == 'POST':
            return []
        return super().get_authenticators()

    def get_queryset(self):
        return super().get_queryset().order_by('-created_at')

    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except DatabaseError:
            logger.exception("Error fetching messages")
            return Response(
                {'error': 'Failed to fetch messages', 'code': 'internal_error'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

    def create(self, request, *args, **kwargs):
        serializer = ContactFormSubmitSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(
                {
                    'success': False,
                    'error': (
                        'All fields are required'
                        if _is_missing_field_error(serializer.errors)
                        else 'Validation failed'
                    ),
                    'code': 'validation_error',
                    'fields': serializer.errors
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            contact_message = serializer.save()
        except DatabaseError:
            logger.exception("Error sending message")
            return Response(
                {'error': 'Failed to send message', 'code': 'internal_error'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        logger.info(
            f"Contact message {contact_message.id} received from {contact_message.email}"
        )

        if settings.CONTACT_NOTIFY_STAFF:
            try:
                send_staff_notification.delay(str(contact_message.id))
            except OperationalError as e:
                logger.warning(f"Could not queue staff notification for {contact_message.id}: {e}")
            except Exception:
                # Eager mode runs the task inline; the message is already stored
                logger.warning(
                    f"Staff notification for {contact_message.id} failed",
                    exc_info=True
                )

        return Response(
            {
                'success': True,
                'message': 'Message sent successfully',
                'id': str(contact_message.id)
            },
            status=status.HTTP_201_CREATED
        )


class ContactMessageDetailView(APIView):
    """
    GET    /api/messages/:id  - single message details (admin only)
    DELETE /api/messages/:id  - hard delete (admin only)

    Delete does not check the message exists; deleting an unknown id
    reports success.
    """

    permission_classes = [IsAdmin]

    def get(self, request, id):
        message = get_object_or_404(ContactMessage.objects.by_id(id))
        return Response(ContactMessageSerializer(message).data)

    def delete(self, request, id):
        try:
            deleted = ContactMessage.objects.remove(id)
        except DatabaseError:
            logger.exception(f"Error deleting message {id}")
            return Response(
                {'error': 'Failed to delete message', 'code': 'internal_error'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        logger.info(f"Message {id} deleted by {request.user.email} (rows: {deleted})")

        return Response({'success': True, 'message': 'Message deleted'})


class ContactMessageStatusView(APIView):
    """
    PUT /api/messages/:id/status  - change triage status (admin only)

    Body: {"status": "new" | "read" | "replied" | "resolved"}
    """

    permission_classes = [IsAdmin]

    def put(self, request, id):
        serializer = ContactStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    'success': False,
                    'error': 'Invalid status',
                    'code': 'validation_error',
                    'fields': serializer.errors
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        new_status = serializer.validated_data['status']

        try:
            updated = ContactMessage.objects.set_status(id, new_status)
        except DatabaseError:
            logger.exception(f"Error updating message status for {id}")
            return Response(
                {'error': 'Failed to update status', 'code': 'internal_error'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        logger.info(
            f"Message {id} marked {new_status} by {request.user.email} (rows: {updated})"
        )

        return Response({'success': True, 'message': 'Status updated'})


class ContactStatsView(APIView):
    """
    GET /api/messages/stats  - message counts per status (admin only)
    """

    permission_classes = [IsAdmin]

    def get(self, request):
        stats = ContactMessage.objects.status_counts()
        return Response(ContactStatsSerializer(stats).data)
