"""
Status Workflow

Shared state-machine plumbing for admin status changes. Entity-specific
workflows (contact messages, job applicants) declare their transition table
and side effects on top of `StatusWorkflow`.

Every transition runs in two phases:
1. Persist the status change. If the record store rejects it, nothing else
   happens and the failure propagates.
2. Run the transition's notification, if any. A notification failure is
   recorded on the outcome; the committed status change is never rolled back.

Precondition: a single administrator issues one action at a time. Two
concurrent transitions on the same record are not serialised here.
"""
import logging

from .exceptions import NotificationFailure, StatusTransitionError
from .records import RecordStore, field_value

logger = logging.getLogger(__name__)


def validate_status_transition(current_status, new_status, transitions, resource_type='record'):
    """
    Validate that a status transition is allowed.

    Args:
        current_status: Current status of the record
        new_status: Proposed new status
        transitions: Dict mapping status to list of valid next statuses
        resource_type: Name of the record kind for error messages

    Returns:
        True if transition is valid

    Raises:
        StatusTransitionError if transition is invalid

    A status only moves to itself when the table lists it explicitly.
    """
    valid_transitions = transitions.get(current_status, [])

    if new_status not in valid_transitions:
        raise StatusTransitionError(
            f"Invalid {resource_type} status transition: {current_status} -> {new_status}. "
            f"Valid transitions: {valid_transitions}"
        )

    return True


class TransitionOutcome:
    """Result of a committed status change and its side effect."""

    def __init__(self, record_id, previous_status, status, notified=False,
                 notification_error=None, warning=None):
        self.record_id = record_id
        self.previous_status = previous_status
        self.status = status
        self.notified = notified
        self.notification_error = notification_error
        self.warning = warning

    def __repr__(self):
        return (
            f"<TransitionOutcome {self.record_id}: {self.previous_status} -> {self.status}"
            f" notified={self.notified}>"
        )

    @property
    def notification_failed(self):
        return self.notification_error is not None

    def as_dict(self):
        data = {
            'id': str(self.record_id),
            'previous_status': self.previous_status,
            'status': self.status,
            'notified': self.notified,
        }
        if self.notification_error is not None:
            data['notification_error'] = {
                'status_code': self.notification_error.status_code,
                'text': self.notification_error.text,
            }
        if self.warning:
            data['warning'] = self.warning
        return data


class StatusWorkflow:
    """
    Base class for an entity kind's status workflow.

    Subclasses set `kind` and `transitions`, and override `notify` for
    transitions with a side effect.
    """

    kind = None
    transitions = {}

    def __init__(self, store=None, notifier=None):
        self.store = store or RecordStore()
        self._notifier = notifier

    @property
    def notifier(self):
        if self._notifier is None:
            from .notifier import get_notifier
            self._notifier = get_notifier()
        return self._notifier

    def get(self, record_id):
        return self.store.get(self.kind.collection, record_id)

    def current_status(self, record):
        return field_value(record, 'status', self.kind.default_status)

    def allowed_targets(self, record):
        return list(self.transitions.get(self.current_status(record), []))

    def validate(self, record, new_status):
        return validate_status_transition(
            self.current_status(record), new_status, self.transitions, self.kind.name
        )

    def persist(self, record, new_status, fields=None, **context):
        """
        Phase one: write the status change. Raises PersistenceFailure.

        Whatever this returns is handed to `notify` as `persisted`.
        """
        self.store.update(self.kind.collection, record.pk, status=new_status, **(fields or {}))
        return None

    def notify(self, record, new_status, persisted=None, **context):
        """
        Phase two side effect. Returns (notified, warning).

        Raises NotificationFailure when the relay rejects the send.
        """
        return False, None

    def transition(self, record_id, new_status, fields=None, **context):
        """
        Move one record to `new_status` and run its side effect.

        Raises:
            RecordNotFound / PersistenceFailure: nothing was applied
            StatusTransitionError: the transition is not allowed
        """
        record = self.get(record_id)
        previous_status = self.current_status(record)
        self.validate(record, new_status)

        persisted = self.persist(record, new_status, fields, **context)
        record.status = new_status
        logger.info(f"{self.kind.name} {record.pk}: {previous_status} -> {new_status}")

        outcome = TransitionOutcome(record.pk, previous_status, new_status)
        try:
            outcome.notified, outcome.warning = self.notify(record, new_status, persisted=persisted, **context)
        except NotificationFailure as e:
            logger.error(
                f"Status of {self.kind.name} {record.pk} committed as {new_status} "
                f"but notification failed: {e}"
            )
            outcome.notification_error = e
        return outcome

    def delete(self, record_id):
        """Irreversibly remove one record. Raises RecordNotFound / PersistenceFailure."""
        self.store.delete(self.kind.collection, record_id)
        logger.info(f"{self.kind.name} {record_id} deleted")
