"""
Contact Management Views

API endpoints for contact form submission and admin management.
"""
import logging

from django.db import transaction
from kombu.exceptions import OperationalError
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from accounts.permissions import IsSiteAdministrator
from core.actions import dispatch
from core.exceptions import PersistenceFailure
from core.filtering import FilterPredicates, run_filter
from core.records import CONTACT, RecordStore
from core.responses import (
    HANDLED_ERRORS,
    domain_error_response,
    error_response,
    transition_response,
)
from .serializers import (
    ContactFormSubmitSerializer,
    ContactMessageListSerializer,
    ContactMessageDetailSerializer,
    ContactReplyCreateSerializer,
    ContactStatusSerializer,
    ContactActionSerializer,
)
from .services import ContactWorkflow
from .rate_limiting import rate_limit_contact_form, get_client_ip
from .tasks import send_submission_acknowledgement

logger = logging.getLogger(__name__)


def queue_acknowledgement(message_id):
    """Queue the acknowledgement email; a stored message stays stored if the broker is down."""
    try:
        send_submission_acknowledgement.delay(message_id)
    except OperationalError as exc:
        logger.error(f"Could not queue acknowledgement for contact message {message_id}: {exc}")


class ContactFormSubmitView(APIView):
    """
    Public endpoint for contact form submissions.

    POST /api/contact/submit

    No authentication required. Rate limited to prevent spam.
    """

    permission_classes = [AllowAny]

    @rate_limit_contact_form()
    def post(self, request):
        """Submit a contact form."""
        serializer = ContactFormSubmitSerializer(data=request.data)

        if not serializer.is_valid():
            return Response(
                {
                    'success': False,
                    'error': 'Please fill in all required fields.',
                    'code': 'VALIDATION_ERROR',
                    'fields': serializer.errors
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        data = serializer.validated_data
        try:
            contact_message = RecordStore().create(
                CONTACT.collection,
                name=data['name'],
                email=data['email'],
                subject=data.get('subject', ''),
                category=data['category'],
                message=data['message'],
                ip_address=get_client_ip(request),
                user_agent=request.META.get('HTTP_USER_AGENT', '')[:500]
            )
        except PersistenceFailure:
            return error_response(
                'Failed to send message. Please try again later.',
                'PERSISTENCE_FAILURE',
                status.HTTP_503_SERVICE_UNAVAILABLE
            )

        # Send acknowledgement asynchronously once the row is committed
        message_id = str(contact_message.id)
        transaction.on_commit(lambda: queue_acknowledgement(message_id))

        return Response(
            {
                'success': True,
                'message': 'Your message has been sent successfully!',
                'ticket_id': contact_message.ticket_id
            },
            status=status.HTTP_201_CREATED
        )


class ContactAdminView(APIView):
    """Base for the admin contact pages."""

    permission_classes = [IsSiteAdministrator]
    guard_page = 'contacts'

    def get_workflow(self):
        return ContactWorkflow()


class ContactMessageListView(ContactAdminView):
    """
    List contact messages.

    GET /api/admin/contacts/

    Query Parameters:
    - status: All (default), New, Replied, Ignored
    - category: All (default) or an exact category
    - search: Case-insensitive substring of name, email, subject or message
    - show_ignored: Show only ignored messages (when status is All)
    """

    def get(self, request):
        workflow = self.get_workflow()
        predicates = FilterPredicates.from_query_params(request.query_params)

        try:
            messages = run_filter(workflow.store, CONTACT, predicates)
        except PersistenceFailure:
            return error_response(
                'Error loading messages. Please try again.',
                'PERSISTENCE_FAILURE',
                status.HTTP_503_SERVICE_UNAVAILABLE
            )

        serializer = ContactMessageListSerializer(
            messages, many=True, context={'workflow': workflow}
        )
        return Response({
            'success': True,
            'count': len(messages),
            'filters': {
                'status': predicates.status,
                'category': predicates.category,
                'search': predicates.search_term,
                'show_ignored': predicates.include_ignored,
            },
            'results': serializer.data,
        })


class ContactMessageDetailView(ContactAdminView):
    """
    Get or delete a single contact message.

    GET /api/admin/contacts/:id/
    DELETE /api/admin/contacts/:id/
    """

    def get(self, request, id):
        workflow = self.get_workflow()
        try:
            message = workflow.get(id)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        serializer = ContactMessageDetailSerializer(message, context={'workflow': workflow})
        return Response({'success': True, 'data': serializer.data})

    def delete(self, request, id):
        try:
            self.get_workflow().delete(id)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        return Response({'success': True, 'message': 'Message deleted successfully!'})


class ContactMessageReplyView(ContactAdminView):
    """
    Send reply to a contact message.

    POST /api/admin/contacts/:id/reply/
    """

    def post(self, request, id):
        """Record the reply, then email it."""
        serializer = ContactReplyCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    'success': False,
                    'error': 'Validation failed',
                    'code': 'VALIDATION_ERROR',
                    'fields': serializer.errors
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            outcome = self.get_workflow().reply(
                id,
                serializer.validated_data['message'],
                subject=serializer.validated_data.get('subject'),
                sent_by=request.user,
            )
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        return transition_response(outcome, 'Reply sent and message status updated!')


class ContactMessageStatusView(ContactAdminView):
    """
    Ignore or unignore a contact message.

    POST /api/admin/contacts/:id/status/
    """

    def post(self, request, id):
        serializer = ContactStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    'success': False,
                    'error': 'Validation failed',
                    'code': 'VALIDATION_ERROR',
                    'fields': serializer.errors
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        new_status = serializer.validated_data['status']
        try:
            outcome = self.get_workflow().set_status(id, new_status)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        return transition_response(outcome, f"Message status updated to '{new_status}'!")


class ContactActionDispatchView(ContactAdminView):
    """
    Run one row action.

    POST /api/admin/contacts/actions/
    Body: {id, action, message?, subject?}
    """

    def post(self, request):
        serializer = ContactActionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    'success': False,
                    'error': 'Validation failed',
                    'code': 'VALIDATION_ERROR',
                    'fields': serializer.errors
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        data = serializer.validated_data
        workflow = self.get_workflow()
        payload = {}
        if data['action'] == 'reply':
            payload = {'reply_message': data['message'], 'subject': data.get('subject')}

        try:
            outcome = dispatch(
                workflow.action_registry(sent_by=request.user),
                data['id'],
                data['action'],
                **payload
            )
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        if outcome is None:
            return Response({'success': True, 'action': data['action'], 'id': str(data['id'])})
        return transition_response(outcome, f"Action '{data['action']}' applied.")
