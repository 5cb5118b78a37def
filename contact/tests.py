"""
Tests for the contact form and the admin contact list page.
"""
import pytest
from datetime import timedelta
from django.urls import reverse
from django.utils import timezone
from kombu.exceptions import OperationalError
from rest_framework import status
from unittest.mock import patch

from contact.models import ContactMessage, ContactMessageReply
from contact.services import ContactWorkflow
from contact.tasks import send_submission_acknowledgement
from core.exceptions import NotificationFailure, PersistenceFailure, StatusTransitionError

pytestmark = pytest.mark.django_db


def make_message(minutes_ago=0, **fields):
    defaults = {
        'name': 'John Doe',
        'email': 'john@example.com',
        'subject': 'Partnership',
        'category': 'Business',
        'message': 'We would like to discuss a data annotation project.',
        'ip_address': '192.168.1.1',
        'timestamp': timezone.now() - timedelta(minutes=minutes_ago),
    }
    defaults.update(fields)
    return ContactMessage.objects.create(**defaults)


@pytest.fixture
def sample_contact_message(db):
    return make_message()


@pytest.fixture
def inbox(db):
    """Three active messages and one ignored, newest first: new, replied, support, ignored."""
    return {
        'new': make_message(minutes_ago=1, name='Eve', email='eve@example.com'),
        'replied': make_message(minutes_ago=2, name='Carol', subject='Careers', status='Replied'),
        'support': make_message(minutes_ago=3, name='Bob', category='Support', subject='Login help',
                                message='I cannot sign in.'),
        'ignored': make_message(minutes_ago=4, name='Spammer', category='Other', status='Ignored'),
    }


class TestContactFormSubmission:
    """Test public contact form submission."""

    def test_submit_valid_contact_form(self, api_client):
        data = {
            'name': 'Test User',
            'email': 'Test@Example.com',
            'subject': 'Hello',
            'category': 'Support',
            'message': 'I need help with my account.'
        }

        response = api_client.post('/api/contact/submit', data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        assert response.data['ticket_id'].startswith('CNT-')

        message = ContactMessage.objects.get()
        assert message.status == 'New'
        assert message.email == 'test@example.com'
        assert message.reply_history == []

    def test_submission_queues_acknowledgement(self, api_client, django_capture_on_commit_callbacks):
        data = {'name': 'Ann', 'email': 'ann@example.com', 'category': 'Support', 'message': 'Hi there'}

        with patch('contact.views.send_submission_acknowledgement.delay') as mock_delay:
            with django_capture_on_commit_callbacks(execute=True):
                api_client.post('/api/contact/submit', data)

        mock_delay.assert_called_once_with(str(ContactMessage.objects.get().id))

    def test_broker_outage_keeps_the_submission(self, api_client, django_capture_on_commit_callbacks):
        data = {'name': 'Ann', 'email': 'ann@example.com', 'category': 'Support', 'message': 'Hi there'}

        with patch('contact.views.send_submission_acknowledgement.delay',
                   side_effect=OperationalError('broker unreachable')):
            with django_capture_on_commit_callbacks(execute=True):
                response = api_client.post('/api/contact/submit', data)

        assert response.status_code == status.HTTP_201_CREATED
        assert ContactMessage.objects.count() == 1

    def test_unknown_category_is_rejected(self, api_client):
        data = {'name': 'Ann', 'email': 'ann@example.com', 'category': 'Lottery', 'message': 'Hi'}

        response = api_client.post('/api/contact/submit', data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'category' in response.data['fields']

    def test_submit_missing_required_fields(self, api_client):
        response = api_client.post('/api/contact/submit', {'name': 'Test User'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert response.data['code'] == 'VALIDATION_ERROR'
        assert 'category' in response.data['fields']

    def test_submit_invalid_email(self, api_client):
        data = {'name': 'Test User', 'email': 'invalid-email', 'category': 'Support', 'message': 'Test'}

        response = api_client.post('/api/contact/submit', data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_honeypot_spam_detection(self, api_client):
        data = {
            'name': 'Spammer',
            'email': 'spam@example.com',
            'category': 'Other',
            'message': 'This is spam',
            'website': 'http://spam.com'  # Honeypot field should be empty
        }

        response = api_client.post('/api/contact/submit', data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert ContactMessage.objects.count() == 0

    def test_store_failure(self, api_client):
        data = {'name': 'Ann', 'email': 'ann@example.com', 'category': 'Support', 'message': 'Hi'}

        with patch('contact.views.RecordStore.create', side_effect=PersistenceFailure('down')):
            response = api_client.post('/api/contact/submit', data)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['code'] == 'PERSISTENCE_FAILURE'


class TestRateLimiting:
    """Test rate limiting for contact form."""

    def test_rate_limit_per_hour(self, api_client, settings):
        settings.CONTACT_FORM_RATE_LIMIT_PER_HOUR = 3
        data = {'name': 'Test User', 'email': 'test@example.com', 'category': 'Support'}

        for i in range(3):
            data['message'] = f'Test message number {i}'
            response = api_client.post('/api/contact/submit', data)
            assert response.status_code == status.HTTP_201_CREATED

        data['message'] = 'One too many'
        response = api_client.post('/api/contact/submit', data)
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.data['code'] == 'RATE_LIMITED'
        assert response['Retry-After'] == str(response.data['retry_after'])

    def test_email_limit_ignores_case(self, api_client, settings):
        settings.CONTACT_FORM_RATE_LIMIT_PER_DAY = 1
        codes = []
        for email in ['Eve@Example.com', 'eve@example.com', ' EVE@example.com ']:
            response = api_client.post('/api/contact/submit', {
                'name': 'Eve', 'email': email, 'category': 'Support', 'message': 'Hello again'
            })
            codes.append(response.status_code)

        assert codes == [201, 429, 429]
        assert ContactMessage.objects.count() == 1

    def test_failed_submissions_are_not_counted(self, api_client, settings):
        settings.CONTACT_FORM_RATE_LIMIT_PER_HOUR = 1
        api_client.post('/api/contact/submit', {'name': 'Ann'})

        response = api_client.post('/api/contact/submit', {
            'name': 'Ann', 'email': 'ann@example.com', 'category': 'Support', 'message': 'Hi'
        })

        assert response.status_code == status.HTTP_201_CREATED

    def test_missing_client_address(self, api_client):
        response = api_client.post('/api/contact/submit', {
            'name': 'Ann', 'email': 'ann@example.com', 'category': 'Support', 'message': 'Hi'
        }, REMOTE_ADDR='')

        assert response.status_code == status.HTTP_201_CREATED
        assert ContactMessage.objects.get().ip_address is None


class TestAcknowledgementTask:

    def test_sends_acknowledgement(self, sample_contact_message, outbox):
        send_submission_acknowledgement(str(sample_contact_message.id))

        assert len(outbox) == 1
        params = outbox[0]['params']
        assert params['to_email'] == 'john@example.com'
        assert sample_contact_message.ticket_id in params['html_message']

    def test_missing_message(self, db, outbox):
        result = send_submission_acknowledgement('00000000-0000-0000-0000-000000000000')
        assert 'not found' in result
        assert outbox == []

    def test_relay_failure_is_raised_for_retry(self, sample_contact_message, failing_notifier):
        with pytest.raises(NotificationFailure):
            send_submission_acknowledgement(str(sample_contact_message.id))


class TestContactMessageListView:
    """Test admin contact message list view."""

    def test_unauthorized_access(self, api_client):
        response = api_client.get('/api/admin/contacts/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_non_admin_access_denied(self, user_client):
        response = user_client.get('/api/admin/contacts/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_default_view_hides_ignored(self, admin_client, inbox):
        response = admin_client.get('/api/admin/contacts/')

        assert response.status_code == status.HTTP_200_OK
        names = [row['name'] for row in response.data['results']]
        assert names == ['Eve', 'Carol', 'Bob']
        assert response.data['count'] == 3

    def test_show_ignored(self, admin_client, inbox):
        response = admin_client.get('/api/admin/contacts/?show_ignored=true')

        assert [row['name'] for row in response.data['results']] == ['Spammer']

    def test_filter_by_status(self, admin_client, inbox):
        response = admin_client.get('/api/admin/contacts/?status=Replied')
        assert [row['name'] for row in response.data['results']] == ['Carol']

    def test_filter_by_category(self, admin_client, inbox):
        response = admin_client.get('/api/admin/contacts/?category=Support')
        assert [row['name'] for row in response.data['results']] == ['Bob']

    def test_search_functionality(self, admin_client, inbox):
        response = admin_client.get('/api/admin/contacts/?search=SIGN IN')
        assert [row['name'] for row in response.data['results']] == ['Bob']

    def test_rows_carry_actions(self, admin_client, inbox):
        response = admin_client.get('/api/admin/contacts/?status=All&show_ignored=1')
        assert response.data['results'][0]['actions'] == ['reply', 'unignore', 'delete']

        response = admin_client.get('/api/admin/contacts/')
        assert response.data['results'][0]['actions'] == ['reply', 'ignore', 'delete']

    def test_store_failure(self, admin_client):
        with patch('core.records.RecordStore.query', side_effect=PersistenceFailure('down')):
            response = admin_client.get('/api/admin/contacts/')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['error'] == 'Error loading messages. Please try again.'


class TestContactMessageDetailView:

    def test_get_message_details(self, admin_client, sample_contact_message):
        response = admin_client.get(f'/api/admin/contacts/{sample_contact_message.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['name'] == 'John Doe'
        assert response.data['data']['default_reply_subject'] == 'RE: Partnership'

    def test_unknown_message(self, admin_client):
        response = admin_client.get('/api/admin/contacts/00000000-0000-0000-0000-000000000000/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'NOT_FOUND'

    def test_delete(self, admin_client, sample_contact_message):
        response = admin_client.delete(f'/api/admin/contacts/{sample_contact_message.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert not ContactMessage.objects.filter(id=sample_contact_message.id).exists()


class TestContactMessageReply:

    def test_reply_records_history_and_emails_sender(self, admin_client, admin_user,
                                                     sample_contact_message, outbox):
        response = admin_client.post(
            f'/api/admin/contacts/{sample_contact_message.id}/reply/',
            {'message': 'Thank you for reaching out.'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'Replied'
        assert response.data['notified'] is True
        assert 'email_error' not in response.data

        sample_contact_message.refresh_from_db()
        assert sample_contact_message.status == 'Replied'
        assert sample_contact_message.replied_at is not None

        reply = ContactMessageReply.objects.get()
        assert reply.subject == 'RE: Partnership'
        assert reply.sent_by == admin_user
        assert reply.email_sent_at is not None

        assert len(outbox) == 1
        assert outbox[0]['params']['to_email'] == 'john@example.com'
        assert outbox[0]['params']['subject'] == 'RE: Partnership'
        assert 'Thank you for reaching out.' in outbox[0]['params']['html_message']

    def test_custom_subject(self, admin_client, sample_contact_message, outbox):
        admin_client.post(
            f'/api/admin/contacts/{sample_contact_message.id}/reply/',
            {'message': 'Details attached.', 'subject': 'Your project quote'},
            format='json'
        )
        assert outbox[0]['params']['subject'] == 'Your project quote'

    def test_second_reply_appends_history(self, admin_client, sample_contact_message):
        url = f'/api/admin/contacts/{sample_contact_message.id}/reply/'
        admin_client.post(url, {'message': 'First'}, format='json')
        admin_client.post(url, {'message': 'Second'}, format='json')

        history = sample_contact_message.reply_history
        assert [entry['message'] for entry in history] == ['First', 'Second']

        detail = admin_client.get(f'/api/admin/contacts/{sample_contact_message.id}/')
        assert [r['reply_message'] for r in detail.data['data']['replies']] == ['Second', 'First']

    def test_empty_reply_is_rejected(self, admin_client, sample_contact_message):
        response = admin_client.post(
            f'/api/admin/contacts/{sample_contact_message.id}/reply/', {'message': ''}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert ContactMessageReply.objects.count() == 0

    def test_relay_failure_keeps_reply(self, admin_client, sample_contact_message, failing_notifier):
        response = admin_client.post(
            f'/api/admin/contacts/{sample_contact_message.id}/reply/',
            {'message': 'Thanks!'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['notified'] is False
        assert 'The template ID is invalid' in response.data['email_error']

        sample_contact_message.refresh_from_db()
        assert sample_contact_message.status == 'Replied'
        reply = ContactMessageReply.objects.get()
        assert reply.email_sent_at is None

    def test_store_failure_sends_nothing(self, admin_client, sample_contact_message, outbox):
        with patch('core.records.RecordStore.update', side_effect=PersistenceFailure('write rejected')):
            response = admin_client.post(
                f'/api/admin/contacts/{sample_contact_message.id}/reply/',
                {'message': 'Thanks!'},
                format='json'
            )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert outbox == []
        assert ContactMessageReply.objects.count() == 0
        sample_contact_message.refresh_from_db()
        assert sample_contact_message.status == 'New'


class TestContactMessageStatus:

    def test_ignore_and_unignore(self, admin_client, sample_contact_message, outbox):
        url = f'/api/admin/contacts/{sample_contact_message.id}/status/'

        response = admin_client.post(url, {'status': 'Ignored'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        sample_contact_message.refresh_from_db()
        assert sample_contact_message.status == 'Ignored'

        response = admin_client.post(url, {'status': 'New'}, format='json')
        sample_contact_message.refresh_from_db()
        assert sample_contact_message.status == 'New'
        assert outbox == []

    def test_unignore_of_active_message_is_rejected(self, admin_client, sample_contact_message):
        response = admin_client.post(
            f'/api/admin/contacts/{sample_contact_message.id}/status/', {'status': 'New'}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'INVALID_TRANSITION'

    def test_replied_cannot_be_set_directly(self, sample_contact_message):
        with pytest.raises(StatusTransitionError):
            ContactWorkflow().set_status(sample_contact_message.id, 'Replied')

    def test_ignoring_keeps_reply_history(self, admin_client, sample_contact_message):
        admin_client.post(
            f'/api/admin/contacts/{sample_contact_message.id}/reply/', {'message': 'Hi'}, format='json'
        )
        admin_client.post(
            f'/api/admin/contacts/{sample_contact_message.id}/status/', {'status': 'Ignored'}, format='json'
        )

        assert len(sample_contact_message.reply_history) == 1


class TestContactActionDispatch:

    def test_reply_action(self, admin_client, sample_contact_message, outbox):
        response = admin_client.post('/api/admin/contacts/actions/', {
            'id': str(sample_contact_message.id), 'action': 'reply', 'message': 'On it.'
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'Replied'
        assert len(outbox) == 1

    def test_reply_action_requires_message(self, admin_client, sample_contact_message):
        response = admin_client.post('/api/admin/contacts/actions/', {
            'id': str(sample_contact_message.id), 'action': 'reply'
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_delete_action(self, admin_client, sample_contact_message):
        response = admin_client.post('/api/admin/contacts/actions/', {
            'id': str(sample_contact_message.id), 'action': 'delete'
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert ContactMessage.objects.count() == 0

    def test_unknown_action(self, admin_client, sample_contact_message):
        response = admin_client.post('/api/admin/contacts/actions/', {
            'id': str(sample_contact_message.id), 'action': 'archive'
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'UNKNOWN_ACTION'


class TestContactModels:

    def test_ticket_id_generation(self, sample_contact_message):
        assert sample_contact_message.ticket_id.startswith('CNT-')
        assert len(sample_contact_message.ticket_id) == 12


class TestContactDjangoAdmin:

    def test_status_is_not_editable_on_the_change_form(self, django_admin_client, sample_contact_message):
        url = reverse('admin:contact_contactmessage_change', args=[sample_contact_message.pk])

        response = django_admin_client.post(url, {
            'name': 'John Doe',
            'email': 'john@example.com',
            'subject': 'Partnership',
            'category': 'Business',
            'message': 'Edited in the admin',
            'status': 'Replied',
            'replies-TOTAL_FORMS': '0',
            'replies-INITIAL_FORMS': '0',
        })

        assert response.status_code == 302
        sample_contact_message.refresh_from_db()
        assert sample_contact_message.message == 'Edited in the admin'
        assert sample_contact_message.status == 'New'
        assert sample_contact_message.replies.count() == 0

    def test_reply_history_has_no_delete_view(self, django_admin_client, sample_contact_message):
        reply = ContactMessageReply.objects.create(
            message=sample_contact_message, subject='RE: Partnership', reply_message='Thanks!'
        )

        response = django_admin_client.post(f'/admin/contact/contactmessagereply/{reply.pk}/delete/',
                                            {'post': 'yes'})

        assert response.status_code == 404
        assert ContactMessageReply.objects.count() == 1

    def test_ignore_action_runs_the_workflow(self, django_admin_client, inbox):
        response = django_admin_client.post(reverse('admin:contact_contactmessage_changelist'), {
            'action': 'ignore_messages',
            '_selected_action': [str(inbox['new'].pk), str(inbox['ignored'].pk)],
        })

        assert response.status_code == 302
        inbox['new'].refresh_from_db()
        inbox['ignored'].refresh_from_db()
        assert inbox['new'].status == 'Ignored'
        assert inbox['ignored'].status == 'Ignored'

    def test_unignore_action(self, django_admin_client, inbox):
        django_admin_client.post(reverse('admin:contact_contactmessage_changelist'), {
            'action': 'unignore_messages',
            '_selected_action': [str(inbox['ignored'].pk)],
        })

        inbox['ignored'].refresh_from_db()
        assert inbox['ignored'].status == 'New'
