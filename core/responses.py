"""
JSON error bodies for the admin API.

Views catch domain exceptions at the handler boundary and answer with
{'success': False, 'error': ..., 'code': ...}.
"""
import logging

from rest_framework import status
from rest_framework.response import Response

from .exceptions import (
    PersistenceFailure,
    RecordNotFound,
    StatusTransitionError,
    UnknownAction,
)

logger = logging.getLogger(__name__)

# Checked in order: RecordNotFound before its PersistenceFailure base
DOMAIN_ERRORS = (
    (RecordNotFound, status.HTTP_404_NOT_FOUND, 'NOT_FOUND'),
    (PersistenceFailure, status.HTTP_503_SERVICE_UNAVAILABLE, 'PERSISTENCE_FAILURE'),
    (StatusTransitionError, status.HTTP_409_CONFLICT, 'INVALID_TRANSITION'),
    (UnknownAction, status.HTTP_400_BAD_REQUEST, 'UNKNOWN_ACTION'),
    (ValueError, status.HTTP_400_BAD_REQUEST, 'VALIDATION_ERROR'),
)

HANDLED_ERRORS = tuple(exc_type for exc_type, _, _ in DOMAIN_ERRORS)


def error_response(error, code, http_status, **extra):
    body = {'success': False, 'error': error, 'code': code}
    body.update(extra)
    return Response(body, status=http_status)


def domain_error_response(exc):
    """Turn a handled domain exception into its JSON error response."""
    for exc_type, http_status, code in DOMAIN_ERRORS:
        if isinstance(exc, exc_type):
            if http_status >= 500:
                logger.error(f"{code}: {exc}")
            return error_response(str(exc), code, http_status)
    raise exc


def transition_response(outcome, message):
    """
    Response for a committed status change.

    A failed notification does not make the request fail; it is reported
    next to the committed status.
    """
    data = {'success': True, 'message': message}
    data.update(outcome.as_dict())
    if outcome.notification_failed:
        data['email_error'] = (
            f"Status updated, but the email could not be sent: {outcome.notification_error.text}"
        )
    return Response(data, status=status.HTTP_200_OK)
