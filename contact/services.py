"""
Contact Message Workflow

Status changes for contact messages:
- New / Replied / Ignored -> Replied: admin reply. Appends to the reply
  history, stamps replied_at, then emails the original sender.
- New / Replied -> Ignored and Ignored -> New: manual toggle, no email.

Reply history rows are never removed by a status change.

Assumes a single administrator acting on one message at a time.
"""
import logging

from django.conf import settings
from django.db import DatabaseError, transaction
from django.template.loader import render_to_string
from django.utils import timezone

from core.exceptions import PersistenceFailure, StatusTransitionError
from core.notifier import send_email
from core.records import CONTACT, field_value
from core.workflow import StatusWorkflow

from .models import ContactMessage, ContactMessageReply

logger = logging.getLogger(__name__)

NEW = ContactMessage.Status.NEW.value
REPLIED = ContactMessage.Status.REPLIED.value
IGNORED = ContactMessage.Status.IGNORED.value


def default_reply_subject(record):
    return f"RE: {field_value(record, 'subject', '')}"


class ContactWorkflow(StatusWorkflow):
    """State machine and side effects for contact messages."""

    kind = CONTACT
    transitions = {
        NEW: [REPLIED, IGNORED],
        REPLIED: [REPLIED, IGNORED],
        IGNORED: [NEW, REPLIED],
    }

    def persist(self, record, new_status, fields=None, **context):
        if new_status != REPLIED:
            return super().persist(record, new_status, fields, **context)

        now = timezone.now()
        try:
            with transaction.atomic():
                reply = ContactMessageReply.objects.create(
                    message_id=record.pk,
                    subject=context.get('subject') or default_reply_subject(record),
                    reply_message=context['reply_message'],
                    sent_by=context.get('sent_by'),
                    timestamp=now,
                )
                super().persist(record, new_status, {'replied_at': now, **(fields or {})})
        except DatabaseError as e:
            logger.error(f"Recording reply to contact {record.pk} failed: {e}")
            raise PersistenceFailure(str(e)) from e

        record.replied_at = now
        return reply

    def notify(self, record, new_status, persisted=None, **context):
        if new_status != REPLIED or persisted is None:
            return False, None

        html_body = render_to_string('contact/emails/reply.html', {
            'name': record.name,
            'reply_message': persisted.reply_message,
            'original_subject': record.subject,
            'original_message': record.message,
            'ticket_id': record.ticket_id,
            'site_name': getattr(settings, 'SITE_NAME', 'Lifewood'),
        })
        send_email(self.notifier, record.email, record.name, persisted.subject, html_body)

        ContactMessageReply.objects.filter(pk=persisted.pk).update(email_sent_at=timezone.now())
        logger.info(f"Reply {persisted.pk} emailed to {record.email}")
        return True, None

    def reply(self, record_id, reply_message, subject=None, sent_by=None):
        """
        Reply to a contact message.

        Raises:
            ValueError: empty reply text
        """
        reply_message = (reply_message or '').strip()
        if not reply_message:
            raise ValueError("Reply message cannot be empty.")
        return self.transition(
            record_id, REPLIED,
            reply_message=reply_message, subject=subject, sent_by=sent_by,
        )

    def set_status(self, record_id, new_status):
        """Manual Ignore / Unignore toggle. Replied is only reached by replying."""
        if new_status == REPLIED:
            raise StatusTransitionError("A contact message becomes Replied only by sending a reply.")
        return self.transition(record_id, new_status)

    def ignore(self, record_id):
        return self.set_status(record_id, IGNORED)

    def unignore(self, record_id):
        return self.set_status(record_id, NEW)

    def actions_for(self, record):
        """Names of the row actions available for one message."""
        targets = self.allowed_targets(record)
        actions = []
        if REPLIED in targets:
            actions.append('reply')
        if IGNORED in targets:
            actions.append('ignore')
        if NEW in targets:
            actions.append('unignore')
        actions.append('delete')
        return actions

    def action_registry(self, sent_by=None):
        def reply(record_id, reply_message=None, subject=None, **payload):
            return self.reply(record_id, reply_message, subject=subject, sent_by=sent_by)

        return {
            'reply': reply,
            'ignore': lambda record_id, **payload: self.ignore(record_id),
            'unignore': lambda record_id, **payload: self.unignore(record_id),
            'delete': lambda record_id, **payload: self.delete(record_id),
        }
