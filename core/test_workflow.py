"""
Tests for the shared status workflow, row action dispatch and attachment removal.
"""
import pytest
from unittest.mock import Mock

from core.actions import dispatch
from core.attachments import delete_attachment
from core.exceptions import (
    NotificationFailure,
    PersistenceFailure,
    StatusTransitionError,
    UnknownAction,
)
from core.records import APPLICANT, RecordStore
from core.workflow import StatusWorkflow, TransitionOutcome, validate_status_transition


class Record:

    def __init__(self, pk, status):
        self.pk = pk
        self.status = status


class NotifyingWorkflow(StatusWorkflow):
    kind = APPLICANT
    transitions = {
        'Pending': ['Accepted', 'Rejected'],
        'Accepted': [],
        'Rejected': [],
    }

    def notify(self, record, new_status, persisted=None, **context):
        self.notifier.send(None, None, {'to_email': 'x@example.com', 'status': new_status})
        return True, None


@pytest.fixture
def store():
    store = Mock(spec=RecordStore)
    store.get.return_value = Record('r1', 'Pending')
    return store


class TestValidateStatusTransition:

    def test_allowed(self):
        assert validate_status_transition('Pending', 'Accepted', NotifyingWorkflow.transitions)

    def test_terminal_state(self):
        with pytest.raises(StatusTransitionError):
            validate_status_transition('Accepted', 'Rejected', NotifyingWorkflow.transitions)

    def test_unknown_current_status(self):
        with pytest.raises(StatusTransitionError):
            validate_status_transition('Archived', 'Accepted', NotifyingWorkflow.transitions)


class TestTransition:

    def test_persists_then_notifies(self, store):
        notifier = Mock()
        outcome = NotifyingWorkflow(store=store, notifier=notifier).transition('r1', 'Accepted')

        store.update.assert_called_once_with('jobApplicants', 'r1', status='Accepted')
        notifier.send.assert_called_once()
        assert isinstance(outcome, TransitionOutcome)
        assert outcome.previous_status == 'Pending'
        assert outcome.status == 'Accepted'
        assert outcome.notified is True
        assert outcome.notification_failed is False

    def test_persistence_failure_sends_nothing(self, store):
        store.update.side_effect = PersistenceFailure('write rejected')
        notifier = Mock()

        with pytest.raises(PersistenceFailure):
            NotifyingWorkflow(store=store, notifier=notifier).transition('r1', 'Rejected')
        notifier.send.assert_not_called()

    def test_notification_failure_keeps_committed_status(self, store):
        notifier = Mock()
        notifier.send.side_effect = NotificationFailure(502, 'Relay unavailable')

        outcome = NotifyingWorkflow(store=store, notifier=notifier).transition('r1', 'Rejected')

        store.update.assert_called_once_with('jobApplicants', 'r1', status='Rejected')
        assert outcome.status == 'Rejected'
        assert outcome.notified is False
        assert outcome.notification_failed is True
        assert outcome.as_dict()['notification_error'] == {
            'status_code': 502, 'text': 'Relay unavailable'
        }

    def test_invalid_transition_writes_nothing(self, store):
        store.get.return_value = Record('r1', 'Accepted')
        with pytest.raises(StatusTransitionError):
            NotifyingWorkflow(store=store, notifier=Mock()).transition('r1', 'Rejected')
        store.update.assert_not_called()

    def test_allowed_targets_of_decided_record(self, store):
        workflow = NotifyingWorkflow(store=store, notifier=Mock())
        assert workflow.allowed_targets(Record('r2', 'Rejected')) == []
        assert workflow.allowed_targets(Record('r3', 'Pending')) == ['Accepted', 'Rejected']

    def test_missing_status_uses_kind_default(self, store):
        workflow = NotifyingWorkflow(store=store, notifier=Mock())
        assert workflow.current_status({'id': 'r4'}) == 'Pending'


class TestDispatch:

    def test_routes_to_handler(self):
        handler = Mock(return_value='done')
        assert dispatch({'accept': handler}, 'r1', 'accept', note='x') == 'done'
        handler.assert_called_once_with('r1', note='x')

    def test_unknown_action(self):
        with pytest.raises(UnknownAction) as excinfo:
            dispatch({'accept': Mock(), 'delete': Mock()}, 'r1', 'archive')
        assert excinfo.value.available == ['accept', 'delete']


class TestDeleteAttachment:

    def test_removes_existing_file(self):
        storage = Mock()
        storage.exists.return_value = True
        assert delete_attachment('resumes/cv.pdf', storage=storage) is True
        storage.delete.assert_called_once_with('resumes/cv.pdf')

    def test_missing_file(self):
        storage = Mock()
        storage.exists.return_value = False
        assert delete_attachment('resumes/cv.pdf', storage=storage) is False
        storage.delete.assert_not_called()

    def test_storage_error_is_reported_not_raised(self):
        storage = Mock()
        storage.exists.return_value = True
        storage.delete.side_effect = OSError('permission denied')
        assert delete_attachment('resumes/cv.pdf', storage=storage) is False

    def test_no_path(self):
        assert delete_attachment('') is False
