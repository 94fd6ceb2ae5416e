"""
Contact Management Models

Database schema for contact form submissions.
"""
import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone


class MessageStatus(models.TextChoices):
    """Triage states of an inquiry. Any state may follow any other."""

    NEW = 'new', 'New'
    READ = 'read', 'Read'
    REPLIED = 'replied', 'Replied'
    RESOLVED = 'resolved', 'Resolved'


class ContactMessageQuerySet(models.QuerySet):
    """Single-statement writes used by the admin inbox."""

    def by_id(self, message_id):
        """Match one message by id; a malformed id matches nothing."""
        try:
            pk = uuid.UUID(str(message_id))
        except ValueError:
            return self.none()
        return self.filter(pk=pk)

    def set_status(self, message_id, status):
        """
        Write a new status without checking the message exists.

        Marking a message replied also stamps replied_at. The stamp is
        never cleared by later status changes.

        Returns:
            int: number of rows updated (0 or 1)
        """
        if status not in MessageStatus.values:
            raise ValueError(f"Invalid status: {status!r}")

        fields = {'status': status}
        if status == MessageStatus.REPLIED:
            fields['replied_at'] = timezone.now()

        return self.by_id(message_id).update(**fields)

    def remove(self, message_id):
        """Hard delete by id. Returns the number of rows removed."""
        deleted, _ = self.by_id(message_id).delete()
        return deleted

    def status_counts(self):
        """Number of messages per status, plus the overall total."""
        counts = dict(
            self.order_by()
            .values_list('status')
            .annotate(count=models.Count('id'))
        )
        stats = {value: counts.get(value, 0) for value in MessageStatus.values}
        stats['total'] = sum(stats.values())
        return stats


class ContactMessage(models.Model):
    """
    Contact form submissions from the public contact page.

    Submitter fields are immutable once stored; only the status moves.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contact_messages',
        help_text="Signed-in submitter, if any"
    )

    # Contact Information
    first_name = models.CharField(max_length=255)
    last_name = models.CharField(max_length=255)
    email = models.EmailField(
        max_length=255,
        help_text="Email address for follow-up"
    )

    # Message Details
    subject = models.CharField(max_length=255)
    message = models.TextField()

    status = models.CharField(
        max_length=20,
        choices=MessageStatus.choices,
        default=MessageStatus.NEW,
        help_text="Current triage status of the message"
    )

    # Timestamps
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When the message was submitted"
    )

    replied_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the message was last marked replied"
    )

    objects = ContactMessageQuerySet.as_manager()

    class Meta:
        db_table = 'messages'
        ordering = ['-created_at']
        verbose_name = 'Contact Message'
        verbose_name_plural = 'Contact Messages'
        indexes = [
            models.Index(fields=['status', 'created_at'], name='messages_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} - {self.subject} ({self.status})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
