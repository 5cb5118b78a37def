"""
Contact Management Models

Database schema for contact form submissions and admin replies.
"""
import uuid
from django.conf import settings
from django.db import models
from django.core.validators import EmailValidator
from django.utils import timezone


class ContactMessage(models.Model):
    """
    Contact form submissions from the public site.

    Status workflow: New -> Replied (on reply), New/Replied <-> Ignored.
    """

    class Status(models.TextChoices):
        NEW = 'New', 'New'
        REPLIED = 'Replied', 'Replied'
        IGNORED = 'Ignored', 'Ignored'

    CATEGORY_CHOICES = [
        ('General Inquiry', 'General Inquiry'),
        ('Partnership', 'Partnership'),
        ('Careers', 'Careers'),
        ('Support', 'Support'),
        ('Feedback', 'Feedback'),
        ('Needs Attention', 'Needs Attention'),
        ('Other', 'Other'),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    # Contact Information
    name = models.CharField(
        max_length=100,
        help_text="Name of the person contacting us"
    )

    email = models.EmailField(
        max_length=255,
        validators=[EmailValidator()],
        help_text="Email address for follow-up"
    )

    # Message Details
    subject = models.CharField(
        max_length=200,
        blank=True,
        default='',
        help_text="Subject line entered by the sender"
    )

    category = models.CharField(
        max_length=50,
        blank=True,
        default='',
        db_index=True,
        help_text="Category of the inquiry"
    )

    message = models.TextField(
        help_text="The actual message content"
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.NEW,
        db_index=True,
        help_text="Current status of the message"
    )

    # Security and Tracking
    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        help_text="IP address of the submitter (for spam prevention)"
    )

    user_agent = models.TextField(
        blank=True,
        default='',
        help_text="Browser user agent (for spam prevention)"
    )

    # Timestamps
    timestamp = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the message was submitted"
    )

    replied_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the latest reply was sent"
    )

    class Meta:
        db_table = 'contact_messages'
        ordering = ['-timestamp']
        verbose_name = 'Contact Message'
        verbose_name_plural = 'Contact Messages'
        indexes = [
            models.Index(fields=['status', 'timestamp'], name='contact_status_ts_idx'),
            models.Index(fields=['category', 'status'], name='contact_category_status_idx'),
        ]

    def __str__(self):
        return f"{self.name} - {self.subject or self.category} ({self.status})"

    @property
    def ticket_id(self):
        """Generate a readable ticket ID."""
        return f"CNT-{str(self.id)[:8].upper()}"

    @property
    def reply_history(self):
        """Replies as an ordered list of {message, timestamp}, oldest first."""
        return [
            {'message': reply.reply_message, 'timestamp': reply.timestamp}
            for reply in self.replies.all()
        ]


class ContactMessageReply(models.Model):
    """
    Replies to contact messages from the administrator.

    Maintains the reply history of a contact message. Rows are never
    removed by a status change.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    message = models.ForeignKey(
        ContactMessage,
        on_delete=models.CASCADE,
        related_name='replies',
        help_text="The contact message being replied to"
    )

    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contact_replies',
        help_text="Administrator who sent the reply"
    )

    subject = models.CharField(
        max_length=255,
        blank=True,
        default='',
        help_text="Subject line of the reply email"
    )

    reply_message = models.TextField(
        help_text="The reply message content"
    )

    email_sent_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the email was accepted by the relay"
    )

    timestamp = models.DateTimeField(
        default=timezone.now,
        help_text="When the reply was created"
    )

    class Meta:
        db_table = 'contact_message_replies'
        ordering = ['timestamp']
        verbose_name = 'Contact Message Reply'
        verbose_name_plural = 'Contact Message Replies'
        indexes = [
            models.Index(fields=['message', 'timestamp'], name='contact_reply_msg_ts_idx'),
        ]

    def __str__(self):
        return f"Reply to {self.message.ticket_id}"

