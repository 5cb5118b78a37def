"""
Transactional Email Relay (EmailJS)

Sends admin-triggered emails (contact replies, applicant decisions,
submission acknowledgements) through the EmailJS REST API.

API Documentation:
https://www.emailjs.com/docs/rest-api/send/
"""
import logging
from typing import Dict, Optional

import requests
from django.conf import settings
from django.utils import timezone

from .exceptions import NotificationFailure

logger = logging.getLogger(__name__)


class EmailRelayNotifier:
    """
    Notifier backed by the EmailJS REST API.

    One call per send; a non-200 response or a network error raises
    NotificationFailure with the relay's status code and text.
    """

    def __init__(self):
        """Initialize the relay client with credentials from settings."""
        self.api_url = getattr(settings, 'EMAILJS_API_URL', 'https://api.emailjs.com/api/v1.0/email/send')
        self.service_id = getattr(settings, 'EMAILJS_SERVICE_ID', '')
        self.default_template_id = getattr(settings, 'EMAILJS_TEMPLATE_ID', '')
        self.public_key = getattr(settings, 'EMAILJS_PUBLIC_KEY', '')
        self.private_key = getattr(settings, 'EMAILJS_PRIVATE_KEY', '')
        self.timeout = getattr(settings, 'EMAILJS_TIMEOUT', 10)

        if not self.service_id or not self.public_key:
            logger.warning("EmailJS credentials not configured. Sends will be rejected.")

    def send(self, service_id: Optional[str], template_id: Optional[str], params: Dict) -> Dict:
        """
        Send one templated email.

        Args:
            service_id: EmailJS service id (defaults to EMAILJS_SERVICE_ID)
            template_id: EmailJS template id (defaults to EMAILJS_TEMPLATE_ID)
            params: Template parameters (to_email, to_name, subject, html_message, ...)

        Returns:
            dict: status, recipient and timestamp of the accepted send

        Raises:
            NotificationFailure: relay rejected the send or was unreachable
        """
        payload = {
            'service_id': service_id or self.service_id,
            'template_id': template_id or self.default_template_id,
            'user_id': self.public_key,
            'template_params': params,
        }
        if self.private_key:
            payload['accessToken'] = self.private_key

        recipient = params.get('to_email')

        try:
            response = requests.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.error(f"Timeout sending email to {recipient}")
            raise NotificationFailure(0, 'Request timeout')
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error sending email to {recipient}: {str(e)}")
            raise NotificationFailure(0, f'Network error: {str(e)}')

        if response.status_code != 200:
            logger.error(
                f"Failed to send email to {recipient}. "
                f"Status: {response.status_code}, Error: {response.text}"
            )
            raise NotificationFailure(response.status_code, response.text)

        logger.info(f"Email sent successfully to {recipient}")
        return {
            'success': True,
            'status': response.text,
            'to_email': recipient,
            'timestamp': timezone.now().isoformat(),
        }


class ConsoleNotifier:
    """Notifier for development/testing: logs the send and keeps an outbox."""

    def __init__(self):
        self.outbox = []

    def send(self, service_id: Optional[str], template_id: Optional[str], params: Dict) -> Dict:
        self.outbox.append({
            'service_id': service_id,
            'template_id': template_id,
            'params': dict(params),
        })
        logger.info(
            f"\n{'='*60}\n"
            f"SIMULATED EMAIL\n"
            f"To: {params.get('to_name', '')} <{params.get('to_email')}>\n"
            f"Subject: {params.get('subject', '')}\n"
            f"{'='*60}\n"
        )
        return {
            'success': True,
            'status': 'simulated',
            'to_email': params.get('to_email'),
            'timestamp': timezone.now().isoformat(),
            'simulated': True,
        }


NOTIFIER_BACKENDS = {
    'console': ConsoleNotifier,
    'emailjs': EmailRelayNotifier,
}

# Singleton instance
_notifier = None


def get_notifier():
    """Get or create the configured notifier (NOTIFIER_BACKEND setting)."""
    global _notifier
    if _notifier is None:
        backend = getattr(settings, 'NOTIFIER_BACKEND', 'console')
        try:
            _notifier = NOTIFIER_BACKENDS[backend]()
        except KeyError:
            raise ValueError(f"Unknown NOTIFIER_BACKEND: {backend}")
    return _notifier


def send_email(notifier, to_email, to_name, subject, html_body, template_id=None):
    """
    Send an HTML email through a notifier.

    The relay template renders `html_message` as the message body.
    """
    params = {
        'to_name': to_name,
        'to_email': to_email,
        'subject': subject,
        'html_message': html_body,
        'from_name': getattr(settings, 'NOTIFIER_FROM_NAME', 'Site Admin'),
        'reply_to': getattr(settings, 'NOTIFIER_REPLY_TO', ''),
    }
    return notifier.send(
        getattr(settings, 'EMAILJS_SERVICE_ID', None),
        template_id or getattr(settings, 'EMAILJS_TEMPLATE_ID', None),
        params,
    )
