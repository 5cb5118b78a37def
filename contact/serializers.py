"""
Contact Management Serializers

Serializers for contact form submissions and admin management.
"""
from rest_framework import serializers
from django.core.validators import EmailValidator
from django.utils.html import strip_tags
from .models import ContactMessage, ContactMessageReply


class ContactFormSubmitSerializer(serializers.Serializer):
    """
    Public contact form submission serializer.

    Validates and sanitizes user input from the contact form.
    """

    name = serializers.CharField(
        max_length=100,
        required=True,
        help_text="Name of the person contacting us"
    )

    email = serializers.EmailField(
        max_length=255,
        required=True,
        validators=[EmailValidator()],
        help_text="Valid email address for follow-up"
    )

    subject = serializers.CharField(
        max_length=200,
        required=False,
        allow_blank=True,
        default='',
        help_text="Subject line"
    )

    category = serializers.ChoiceField(
        choices=ContactMessage.CATEGORY_CHOICES,
        required=True,
        help_text="Category of the inquiry"
    )

    message = serializers.CharField(
        max_length=5000,
        required=True,
        help_text="Message content"
    )

    # Honeypot field for spam prevention (should be empty)
    website = serializers.CharField(
        required=False,
        allow_blank=True,
        write_only=True,
        help_text="Honeypot field - should be empty"
    )

    def validate_name(self, value):
        """Sanitize name field."""
        value = strip_tags(value).strip()
        if not value:
            raise serializers.ValidationError("This field may not be blank.")
        return value

    def validate_subject(self, value):
        return strip_tags(value).strip()

    def validate_message(self, value):
        """Sanitize message field."""
        value = strip_tags(value).strip()
        if not value:
            raise serializers.ValidationError("This field may not be blank.")
        return value

    def validate_website(self, value):
        """Honeypot validation - should be empty."""
        if value:
            raise serializers.ValidationError("Spam detected")
        return value

    def validate_email(self, value):
        return value.lower()


class ContactMessageReplySerializer(serializers.ModelSerializer):
    """
    Serializer for one reply history entry.
    """

    sent_by_name = serializers.SerializerMethodField()

    class Meta:
        model = ContactMessageReply
        fields = [
            'id', 'subject', 'reply_message', 'sent_by_name',
            'email_sent_at', 'timestamp'
        ]
        read_only_fields = fields

    def get_sent_by_name(self, obj):
        if obj.sent_by:
            return obj.sent_by.get_full_name() or obj.sent_by.email
        return 'System'


class ContactMessageListSerializer(serializers.ModelSerializer):
    """
    Serializer for listing contact messages in admin.

    Each row carries the actions available for it (see ContactWorkflow).
    """

    ticket_id = serializers.ReadOnlyField()

    reply_count = serializers.SerializerMethodField()

    actions = serializers.SerializerMethodField()

    class Meta:
        model = ContactMessage
        fields = [
            'id', 'ticket_id', 'name', 'email', 'subject', 'category',
            'message', 'status', 'reply_count', 'timestamp', 'replied_at',
            'actions'
        ]
        read_only_fields = fields

    def get_reply_count(self, obj):
        """Get number of replies."""
        return obj.replies.count()

    def get_actions(self, obj):
        workflow = self.context.get('workflow')
        return workflow.actions_for(obj) if workflow else []


class ContactMessageDetailSerializer(ContactMessageListSerializer):
    """
    Detailed serializer for viewing a single contact message.

    Reply history is listed newest first.
    """

    replies = serializers.SerializerMethodField()

    default_reply_subject = serializers.SerializerMethodField()

    class Meta(ContactMessageListSerializer.Meta):
        fields = ContactMessageListSerializer.Meta.fields + [
            'ip_address', 'user_agent', 'replies', 'default_reply_subject'
        ]
        read_only_fields = fields

    def get_replies(self, obj):
        """Get all replies to this message."""
        replies = obj.replies.select_related('sent_by').order_by('-timestamp')
        return ContactMessageReplySerializer(replies, many=True).data

    def get_default_reply_subject(self, obj):
        return f"RE: {obj.subject}"


class ContactReplyCreateSerializer(serializers.Serializer):
    """
    Serializer for creating a new reply to a contact message.
    """

    subject = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        help_text="Reply subject (defaults to 'RE: <original subject>')"
    )

    message = serializers.CharField(
        required=True,
        help_text="Reply message content"
    )

    def validate_message(self, value):
        """Sanitize message but allow some formatting."""
        # Keep basic formatting but strip dangerous HTML
        return value.strip()


class ContactStatusSerializer(serializers.Serializer):
    """Manual Ignore / Unignore toggle."""

    status = serializers.ChoiceField(
        choices=[ContactMessage.Status.NEW, ContactMessage.Status.IGNORED]
    )


class ContactActionSerializer(serializers.Serializer):
    """
    A (record id, action) pair sent back from a list row.

    `message` and `subject` are only read by the reply action.
    """

    id = serializers.UUIDField()
    action = serializers.CharField(max_length=32)
    message = serializers.CharField(required=False, allow_blank=True)
    subject = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        if attrs['action'] == 'reply' and not (attrs.get('message') or '').strip():
            raise serializers.ValidationError({'message': 'This field is required for a reply.'})
        return attrs
