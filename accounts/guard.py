"""
Session Guard

Gates the admin pages behind the single administrator account.

An identity is authorized iff it is present (not anonymous, active) and its
email equals ADMIN_EMAIL exactly. Protected pages are checked in two steps:

1. The trust snapshot stored in the session (uid, email, role). Absent,
   unparseable, role != 'admin' or another email -> denied immediately.
2. The authoritative identity on the request. No identity or the wrong
   email -> denied and the snapshot is cleared. On a match the snapshot is
   refreshed.

The snapshot is only a hint for the first step, never proof of identity.
Writers overwrite it wholesale (last write wins).
"""
import json
import logging

from django.conf import settings

from core.exceptions import MalformedLocalState

logger = logging.getLogger(__name__)

SNAPSHOT_SESSION_KEY = 'user'

ROLE_ADMIN = 'admin'
ROLE_USER = 'user'

PROTECTED_PAGES = ('dashboard', 'job-applicants', 'manage-jobs', 'contacts')


def admin_email():
    return getattr(settings, 'ADMIN_EMAIL', '')


def public_entry_url():
    return getattr(settings, 'PUBLIC_ENTRY_URL', '/')


def is_protected(page):
    return page in PROTECTED_PAGES


def identity_email(identity):
    if identity is None:
        return None
    if isinstance(identity, dict):
        return identity.get('email')
    if not getattr(identity, 'is_authenticated', False):
        return None
    if not getattr(identity, 'is_active', True):
        return None
    return getattr(identity, 'email', None)


def is_authorized(identity):
    """True iff the identity is present and its email is the administrator's."""
    email = identity_email(identity)
    expected = admin_email()
    return bool(email) and bool(expected) and email == expected


def snapshot_for(user):
    """Trust snapshot of a signed-in user."""
    return {
        'uid': str(user.pk),
        'email': user.email,
        'role': ROLE_ADMIN if is_authorized(user) else ROLE_USER,
    }


class SessionContext:
    """
    Holds the trust snapshot for one browser session.

    Passed explicitly to the guard and to the login/logout handlers.
    """

    def __init__(self, session):
        self.session = session

    def read(self):
        """
        Return the stored snapshot, or None when there is none.

        Raises:
            MalformedLocalState: the stored value is not a snapshot
        """
        raw = self.session.get(SNAPSHOT_SESSION_KEY)
        if raw is None:
            return None
        try:
            snapshot = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedLocalState(f"Unparseable trust snapshot: {e}")
        if not isinstance(snapshot, dict) or not {'uid', 'email', 'role'} <= set(snapshot):
            raise MalformedLocalState("Trust snapshot is missing fields")
        return snapshot

    def write(self, snapshot):
        self.session[SNAPSHOT_SESSION_KEY] = json.dumps(snapshot)

    def clear(self):
        self.session.pop(SNAPSHOT_SESSION_KEY, None)

    def sync(self, user):
        """Refresh the snapshot from `user`, or clear it when nobody is signed in."""
        if user is not None and getattr(user, 'is_authenticated', False):
            snapshot = snapshot_for(user)
            self.write(snapshot)
            return snapshot
        self.clear()
        return None


class GuardDecision:
    """Outcome of a guard check."""

    def __init__(self, granted, reason, redirect_to=None, status_code=200):
        self.granted = granted
        self.reason = reason
        self.redirect_to = redirect_to
        self.status_code = status_code

    def __repr__(self):
        return f"<GuardDecision granted={self.granted} reason={self.reason}>"

    def __bool__(self):
        return self.granted

    @classmethod
    def grant(cls, reason='granted'):
        return cls(True, reason)

    @classmethod
    def deny(cls, reason, status_code=403):
        return cls(False, reason, redirect_to=public_entry_url(), status_code=status_code)

    def as_dict(self):
        data = {'granted': self.granted, 'reason': self.reason}
        if not self.granted:
            data['redirect'] = self.redirect_to
        return data


class SessionGuard:
    """Two-step authorization check for a named page."""

    def __init__(self, context):
        self.context = context

    def check_snapshot(self):
        """Step one: the stored snapshot alone."""
        try:
            snapshot = self.context.read()
        except MalformedLocalState as e:
            logger.warning(f"Clearing malformed trust snapshot: {e}")
            self.context.clear()
            return GuardDecision.deny('malformed-snapshot', status_code=401)

        if snapshot is None:
            return GuardDecision.deny('no-snapshot', status_code=401)
        if snapshot.get('role') != ROLE_ADMIN or snapshot.get('email') != admin_email():
            return GuardDecision.deny('not-admin')
        return GuardDecision.grant()

    def verify(self, user):
        """Step two: the authoritative identity. Clears the snapshot on mismatch."""
        if user is None or not getattr(user, 'is_authenticated', False):
            self.context.clear()
            return GuardDecision.deny('unauthenticated', status_code=401)
        if not is_authorized(user):
            self.context.clear()
            return GuardDecision.deny('not-admin')

        self.context.write(snapshot_for(user))
        return GuardDecision.grant()

    def check(self, page, user):
        if not is_protected(page):
            return GuardDecision.grant('public')

        decision = self.check_snapshot()
        if not decision:
            logger.info(f"Guard denied '{page}' at snapshot check: {decision.reason}")
            return decision

        decision = self.verify(user)
        if not decision:
            logger.warning(f"Guard denied '{page}' for {identity_email(user)}: {decision.reason}")
        return decision
