"""
Identity-changed events.

Sign-in writes a fresh trust snapshot into the session; sign-out clears it.
"""
import logging

from django.contrib.auth.signals import user_logged_in, user_logged_out
from django.dispatch import receiver

from .guard import SessionContext

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def write_trust_snapshot(sender, request, user, **kwargs):
    snapshot = SessionContext(request.session).sync(user)
    logger.info(f"Trust snapshot written for {user.email} (role {snapshot['role']})")


@receiver(user_logged_out)
def clear_trust_snapshot(sender, request, user, **kwargs):
    SessionContext(request.session).clear()
