"""
Contact Management Django Admin Configuration

Status and the reply history inline are read-only here; replies are only sent
from the API. Ignore / Unignore run through ContactWorkflow as admin actions.
"""
from django.contrib import admin, messages

from core.exceptions import PersistenceFailure, StatusTransitionError
from .models import ContactMessage, ContactMessageReply
from .services import ContactWorkflow


class ContactMessageReplyInline(admin.TabularInline):
    model = ContactMessageReply
    extra = 0
    fields = ['timestamp', 'subject', 'reply_message', 'sent_by', 'email_sent_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    """Admin interface for contact messages."""

    list_display = [
        'ticket_id', 'name', 'email', 'subject', 'category', 'status',
        'timestamp', 'reply_count'
    ]

    list_filter = [
        'status', 'category', 'timestamp'
    ]

    search_fields = [
        'name', 'email', 'subject', 'message'
    ]

    readonly_fields = [
        'id', 'ticket_id', 'status', 'ip_address', 'user_agent',
        'timestamp', 'replied_at'
    ]

    actions = ['ignore_messages', 'unignore_messages']

    fieldsets = (
        ('Contact Information', {
            'fields': ('ticket_id', 'name', 'email', 'subject', 'category', 'message')
        }),
        ('Status', {
            'fields': ('status', 'replied_at')
        }),
        ('Security & Tracking', {
            'fields': ('ip_address', 'user_agent'),
            'classes': ('collapse',)
        }),
        ('Metadata', {
            'fields': ('id', 'timestamp'),
            'classes': ('collapse',)
        }),
    )

    inlines = [ContactMessageReplyInline]

    def reply_count(self, obj):
        """Number of replies."""
        return obj.replies.count()
    reply_count.short_description = 'Replies'

    def _toggle(self, request, queryset, action):
        workflow = ContactWorkflow()
        count = 0
        for message in queryset:
            try:
                getattr(workflow, action)(message.pk)
            except (PersistenceFailure, StatusTransitionError) as exc:
                self.message_user(request, f'{message.ticket_id}: {exc}', messages.ERROR)
                continue
            count += 1
        return count

    def ignore_messages(self, request, queryset):
        count = self._toggle(request, queryset.exclude(status=ContactMessage.Status.IGNORED), 'ignore')
        self.message_user(request, f'{count} message(s) ignored.')
    ignore_messages.short_description = 'Ignore selected messages'

    def unignore_messages(self, request, queryset):
        count = self._toggle(request, queryset.filter(status=ContactMessage.Status.IGNORED), 'unignore')
        self.message_user(request, f'{count} message(s) restored to New.')
    unignore_messages.short_description = 'Unignore selected messages'

