"""
Contact Management Email Tasks

Celery tasks for sending contact-related emails.
"""
import logging

from celery import shared_task
from django.conf import settings
from django.template.loader import render_to_string

from core.exceptions import NotificationFailure
from core.notifier import get_notifier, send_email
from .models import ContactMessage

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def send_submission_acknowledgement(self, message_id):
    """
    Send an acknowledgement email to the contact form submitter.

    Args:
        message_id: UUID of the ContactMessage
    """
    try:
        message = ContactMessage.objects.get(id=message_id)
    except ContactMessage.DoesNotExist:
        return f"Contact message {message_id} not found"

    site_name = getattr(settings, 'SITE_NAME', 'Lifewood')
    html_content = render_to_string('contact/emails/acknowledgement.html', {
        'name': message.name,
        'subject': message.subject,
        'ticket_id': message.ticket_id,
        'site_name': site_name,
    })

    try:
        send_email(
            get_notifier(),
            message.email,
            message.name,
            f"We've received your message - {site_name}",
            html_content,
        )
    except NotificationFailure as exc:
        logger.warning(f"Acknowledgement for {message.ticket_id} failed, retrying: {exc}")
        raise self.retry(exc=exc, countdown=60)

    return f"Acknowledgement sent to {message.email}"
