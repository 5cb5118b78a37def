"""
Contact form submission limits.

Successful submissions are counted in the cache, per client IP for an hour
and per sender email for a day. Emails are compared case-insensitively, the
same way the form stores them.
"""
import logging
from functools import wraps

from django.conf import settings
from django.core.cache import cache
from rest_framework import status

from core.responses import error_response

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = 'unknown'


def get_client_ip(request):
    """Client IP from X-Forwarded-For or REMOTE_ADDR; None when neither is set."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    ip = forwarded.split(',')[0].strip() if forwarded else request.META.get('REMOTE_ADDR')
    return ip or None


def normalize_email(value):
    if not isinstance(value, str):
        return ''
    return value.strip().lower()


class SubmissionLimiter:
    """Fixed-window counters for contact submissions, kept in the cache."""

    IP_WINDOW_SECONDS = 60 * 60
    EMAIL_WINDOW_SECONDS = 24 * 60 * 60

    def __init__(self, per_hour=None, per_day=None):
        self.per_hour = per_hour or getattr(settings, 'CONTACT_FORM_RATE_LIMIT_PER_HOUR', 5)
        self.per_day = per_day or getattr(settings, 'CONTACT_FORM_RATE_LIMIT_PER_DAY', 20)

    def _cache_key(self, kind, identifier):
        return f"contact_submissions:{kind}:{identifier}"

    def submissions(self, kind, identifier):
        return cache.get(self._cache_key(kind, identifier), 0)

    def ip_blocked(self, ip):
        return self.submissions('ip', ip or UNKNOWN_CLIENT) >= self.per_hour

    def email_blocked(self, email):
        return bool(email) and self.submissions('email', email) >= self.per_day

    def _increment(self, kind, identifier, timeout):
        key = self._cache_key(kind, identifier)
        if cache.add(key, 1, timeout):
            return 1
        try:
            return cache.incr(key)
        except ValueError:
            # Expired between add and incr
            cache.set(key, 1, timeout)
            return 1

    def record(self, ip, email):
        self._increment('ip', ip or UNKNOWN_CLIENT, self.IP_WINDOW_SECONDS)
        if email:
            self._increment('email', email, self.EMAIL_WINDOW_SECONDS)


def rate_limit_contact_form(max_per_hour=None, max_per_day_email=None):
    """
    Decorator for the contact submit view.

    Blocked callers get 429 RATE_LIMITED with Retry-After; only 201 responses
    are counted.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapped_view(self, request, *args, **kwargs):
            limiter = SubmissionLimiter(max_per_hour, max_per_day_email)
            ip = get_client_ip(request)
            email = normalize_email(request.data.get('email'))

            if limiter.ip_blocked(ip):
                logger.warning(f"Contact form rate limit hit for IP {ip or UNKNOWN_CLIENT}")
                return _limited('Too many submissions. Please try again later.',
                                limiter.IP_WINDOW_SECONDS)

            if limiter.email_blocked(email):
                logger.warning(f"Contact form rate limit hit for {email}")
                return _limited('Too many submissions from this email. Please try again tomorrow.',
                                limiter.EMAIL_WINDOW_SECONDS)

            response = view_func(self, request, *args, **kwargs)

            if response.status_code == status.HTTP_201_CREATED:
                limiter.record(ip, email)

            return response

        return wrapped_view
    return decorator


def _limited(message, retry_after):
    response = error_response(message, 'RATE_LIMITED', status.HTTP_429_TOO_MANY_REQUESTS,
                              retry_after=retry_after)
    response['Retry-After'] = str(retry_after)
    return response
