"""
Sign-in Service

Email + password sign-in for the admin login form. Every failure is raised
as AuthenticationFailure with one of the fixed failure codes, so the form can
always show the message and let the user retry.
"""
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import DatabaseError

from core.exceptions import AuthenticationFailure

logger = logging.getLogger(__name__)

User = get_user_model()


class LoginService:
    """
    Authenticates the login form and rate limits failed attempts per email.

    Failed attempts are counted in the cache for a sliding window; a
    successful sign-in resets the counter.
    """

    def __init__(self):
        self.max_attempts = getattr(settings, 'LOGIN_RATE_LIMIT_ATTEMPTS', 5)
        self.window_seconds = getattr(settings, 'LOGIN_RATE_LIMIT_WINDOW_MINUTES', 15) * 60

    def _cache_key(self, identifier):
        return f"login_attempts:{identifier.lower()}"

    def failed_attempts(self, identifier):
        return cache.get(self._cache_key(identifier), 0)

    def is_rate_limited(self, identifier):
        return self.failed_attempts(identifier) >= self.max_attempts

    def record_failure(self, identifier):
        key = self._cache_key(identifier)
        attempts = cache.get(key, 0) + 1
        cache.set(key, attempts, self.window_seconds)
        logger.warning(f"Failed login attempt {attempts} for {identifier}")
        return attempts

    def reset(self, identifier):
        cache.delete(self._cache_key(identifier))

    def authenticate(self, request, email, password):
        """
        Check the credentials.

        Args:
            request: The HttpRequest of the login call
            email: Email address typed into the form
            password: Password typed into the form

        Returns:
            User: the authenticated user

        Raises:
            AuthenticationFailure: invalid-email, user-disabled,
                invalid-credentials, too-many-requests,
                network-request-failed
        """
        email = (email or '').strip()
        try:
            validate_email(email)
        except ValidationError:
            raise AuthenticationFailure('invalid-email')

        if self.is_rate_limited(email):
            logger.warning(f"Login rate limit reached for {email}")
            raise AuthenticationFailure('too-many-requests')

        try:
            user = User.objects.filter(email__iexact=email).first()
        except DatabaseError as e:
            logger.error(f"User lookup failed during login: {e}")
            raise AuthenticationFailure('network-request-failed')

        if user is None:
            self.record_failure(email)
            raise AuthenticationFailure('invalid-credentials')

        if not user.is_active:
            if user.check_password(password):
                logger.warning(f"Disabled account {email} tried to sign in")
                raise AuthenticationFailure('user-disabled')
            self.record_failure(email)
            raise AuthenticationFailure('invalid-credentials')

        authenticated = authenticate(request, username=user.get_username(), password=password)
        if authenticated is None:
            self.record_failure(email)
            raise AuthenticationFailure('invalid-credentials')

        self.reset(email)
        logger.info(f"User {authenticated.email} signed in")
        return authenticated
