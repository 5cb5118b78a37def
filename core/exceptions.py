"""
Domain Exceptions

Failure types shared by the record store, the status workflows, the
notifier and the session guard. Views catch these at the handler boundary
and turn them into JSON error responses.
"""
from rest_framework import exceptions, status


class PersistenceFailure(Exception):
    """Raised when a record store call is rejected. Nothing was applied."""
    pass


class RecordNotFound(PersistenceFailure):
    """Raised when a record id does not resolve in its collection."""

    def __init__(self, collection, record_id):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record {record_id} in collection '{collection}'")


class NotificationFailure(Exception):
    """
    Raised when the email relay rejects a send.

    Carries the relay's status code (0 when the request never got a
    response) and its descriptive text.
    """

    def __init__(self, status_code, text):
        self.status_code = status_code
        self.text = text
        super().__init__(f"Notification failed ({status_code}): {text}")


class StatusTransitionError(Exception):
    """Raised when an invalid status transition is attempted."""
    pass


class UnknownAction(Exception):
    """Raised when a dispatched action is not registered for the entity kind."""

    def __init__(self, action, available):
        self.action = action
        self.available = list(available)
        super().__init__(
            f"Unknown action '{action}'. Available actions: {self.available}"
        )


class MalformedLocalState(Exception):
    """Raised when the stored trust snapshot cannot be parsed."""
    pass


class AuthenticationFailure(Exception):
    """
    Sign-in failure with a fixed, user-facing message per failure code.
    """

    MESSAGES = {
        'invalid-email': 'Invalid email address format.',
        'user-disabled': 'This user account has been disabled.',
        'invalid-credentials': 'Invalid username or password.',
        'too-many-requests': 'Too many failed login attempts. Please try again later.',
        'network-request-failed': 'Network error. Please check your internet connection.',
        'unexpected': 'An unexpected error occurred. Please try again.',
    }

    STATUS_CODES = {
        'invalid-email': status.HTTP_400_BAD_REQUEST,
        'user-disabled': status.HTTP_403_FORBIDDEN,
        'invalid-credentials': status.HTTP_401_UNAUTHORIZED,
        'too-many-requests': status.HTTP_429_TOO_MANY_REQUESTS,
        'network-request-failed': status.HTTP_503_SERVICE_UNAVAILABLE,
        'unexpected': status.HTTP_500_INTERNAL_SERVER_ERROR,
    }

    def __init__(self, code):
        if code not in self.MESSAGES:
            code = 'unexpected'
        self.code = code
        super().__init__(self.MESSAGES[code])

    @property
    def message(self):
        return self.MESSAGES[self.code]

    @property
    def status_code(self):
        return self.STATUS_CODES[self.code]


class AuthorizationDenied(exceptions.APIException):
    """
    Wrong or absent identity on a protected page.

    Always carries the redirect target so clients never render partial
    content.
    """

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access Denied: You must be logged in as an administrator.'
    default_code = 'AUTHORIZATION_DENIED'

    def __init__(self, message=None, redirect_to='/', reason='denied', status_code=None):
        if status_code is not None:
            self.status_code = status_code
        self.redirect_to = redirect_to
        self.reason = reason
        super().__init__(detail={
            'error': message or self.default_detail,
            'code': self.default_code,
            'reason': reason,
            'redirect': redirect_to,
        })
