"""
Contact Management Email Tasks

Celery tasks for sending contact-related emails.
"""
import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage
from .models import ContactMessage

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def send_staff_notification(self, message_id):
    """
    Send notification email to staff about new contact submission.

    Args:
        message_id: UUID of the ContactMessage
    """
    try:
        message = ContactMessage.objects.get(id=message_id)

        subject = f"New Contact Form Submission - {message.subject}"

        admin_url = getattr(settings, 'ADMIN_URL', 'http://localhost:5173/dashboard/messages')

        text_content = f"""New contact form submission received:

From: {message.full_name} ({message.email})
Subject: {message.subject}
Received: {message.created_at.strftime('%Y-%m-%d %H:%M:%S')}
Submitted by: {'registered user ' + str(message.user_id) if message.user_id else 'guest'}

Message:
{message.message}

---

View and respond: {admin_url}/{message.id}
"""

        email = EmailMessage(
            subject=subject,
            body=text_content,
            from_email=getattr(settings, 'CONTACT_EMAIL_FROM', settings.DEFAULT_FROM_EMAIL),
            to=[getattr(settings, 'CONTACT_EMAIL_TO', 'support@farmerassistant.com')],
            reply_to=[message.email]
        )
        email.send(fail_silently=False)

        logger.info(f"Staff notification sent for message {message.id}")
        return f"Staff notification sent for {message.id}"

    except ContactMessage.DoesNotExist:
        return f"Contact message {message_id} not found"

    except Exception as exc:
        # Retry on failure
        logger.warning(f"Staff notification for {message_id} failed: {exc}")
        raise self.retry(exc=exc, countdown=60)
