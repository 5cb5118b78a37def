"""
Tests for the EmailJS notifier.
"""
import pytest
import requests
from unittest.mock import Mock, patch

from core import notifier as notifier_module
from core.exceptions import NotificationFailure
from core.notifier import ConsoleNotifier, EmailRelayNotifier, get_notifier, send_email


@pytest.fixture
def emailjs_settings(settings):
    settings.EMAILJS_API_URL = 'https://api.emailjs.com/api/v1.0/email/send'
    settings.EMAILJS_SERVICE_ID = 'service_test'
    settings.EMAILJS_TEMPLATE_ID = 'template_test'
    settings.EMAILJS_PUBLIC_KEY = 'public_test'
    settings.EMAILJS_PRIVATE_KEY = ''
    settings.NOTIFIER_FROM_NAME = 'Lifewood Admin'
    settings.NOTIFIER_REPLY_TO = 'info@lifewood.com'
    return settings


class TestEmailRelayNotifier:

    @patch('core.notifier.requests.post')
    def test_send_posts_template_params(self, mock_post, emailjs_settings):
        mock_post.return_value = Mock(status_code=200, text='OK')

        result = EmailRelayNotifier().send(None, None, {'to_email': 'jane@example.com', 'subject': 'Hi'})

        assert result['success'] is True
        assert result['to_email'] == 'jane@example.com'
        payload = mock_post.call_args.kwargs['json']
        assert payload == {
            'service_id': 'service_test',
            'template_id': 'template_test',
            'user_id': 'public_test',
            'template_params': {'to_email': 'jane@example.com', 'subject': 'Hi'},
        }

    @patch('core.notifier.requests.post')
    def test_private_key_is_sent_as_access_token(self, mock_post, emailjs_settings):
        emailjs_settings.EMAILJS_PRIVATE_KEY = 'secret'
        mock_post.return_value = Mock(status_code=200, text='OK')

        EmailRelayNotifier().send('service_other', 'template_other', {'to_email': 'a@example.com'})

        payload = mock_post.call_args.kwargs['json']
        assert payload['accessToken'] == 'secret'
        assert payload['service_id'] == 'service_other'
        assert payload['template_id'] == 'template_other'

    @patch('core.notifier.requests.post')
    def test_rejected_send_raises_with_status_and_text(self, mock_post, emailjs_settings):
        mock_post.return_value = Mock(status_code=400, text='The template ID is invalid')

        with pytest.raises(NotificationFailure) as excinfo:
            EmailRelayNotifier().send(None, None, {'to_email': 'jane@example.com'})

        assert excinfo.value.status_code == 400
        assert excinfo.value.text == 'The template ID is invalid'

    @patch('core.notifier.requests.post')
    def test_network_error(self, mock_post, emailjs_settings):
        mock_post.side_effect = requests.exceptions.ConnectionError('connection refused')

        with pytest.raises(NotificationFailure) as excinfo:
            EmailRelayNotifier().send(None, None, {'to_email': 'jane@example.com'})

        assert excinfo.value.status_code == 0

    @patch('core.notifier.requests.post')
    def test_timeout(self, mock_post, emailjs_settings):
        mock_post.side_effect = requests.exceptions.Timeout()

        with pytest.raises(NotificationFailure) as excinfo:
            EmailRelayNotifier().send(None, None, {'to_email': 'jane@example.com'})

        assert excinfo.value.text == 'Request timeout'


class TestSendEmail:

    def test_builds_relay_params(self, emailjs_settings):
        console = ConsoleNotifier()
        send_email(console, 'jane@example.com', 'Jane', 'RE: Hello', '<p>Thanks</p>')

        sent = console.outbox[0]
        assert sent['service_id'] == 'service_test'
        assert sent['template_id'] == 'template_test'
        assert sent['params'] == {
            'to_name': 'Jane',
            'to_email': 'jane@example.com',
            'subject': 'RE: Hello',
            'html_message': '<p>Thanks</p>',
            'from_name': 'Lifewood Admin',
            'reply_to': 'info@lifewood.com',
        }


class TestGetNotifier:

    def test_backend_from_settings(self, settings, monkeypatch):
        monkeypatch.setattr(notifier_module, '_notifier', None)
        settings.NOTIFIER_BACKEND = 'emailjs'
        assert isinstance(get_notifier(), EmailRelayNotifier)
        assert get_notifier() is get_notifier()

    def test_unknown_backend(self, settings, monkeypatch):
        monkeypatch.setattr(notifier_module, '_notifier', None)
        settings.NOTIFIER_BACKEND = 'carrier-pigeon'
        with pytest.raises(ValueError):
            get_notifier()
