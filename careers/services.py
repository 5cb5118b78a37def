"""
Careers Services

- ApplicantWorkflow: Pending -> Accepted | Rejected, one decision email per
  transition. Decided applicants have no further transitions.
- JobListingService: publish and remove job listings.
- submit_application: public application intake.

Assumes a single administrator acting on one applicant at a time.
"""
import logging

from django.conf import settings
from django.template.loader import render_to_string

from core.attachments import delete_attachment
from core.notifier import send_email
from core.records import APPLICANT, JOB, RecordStore, field_value
from core.workflow import StatusWorkflow

from .models import JobApplicant

logger = logging.getLogger(__name__)

PENDING = JobApplicant.Status.PENDING.value
ACCEPTED = JobApplicant.Status.ACCEPTED.value
REJECTED = JobApplicant.Status.REJECTED.value

DEFAULT_JOB_TITLE = 'your applied position'

DECISION_EMAILS = {
    ACCEPTED: (
        'careers/emails/accepted.html',
        'Congratulations! Your Application for {job_title} at {site_name}',
    ),
    REJECTED: (
        'careers/emails/rejected.html',
        'Update on Your Application for {job_title} at {site_name}',
    ),
}


def decision_email(status, full_name, job_title):
    """
    Subject and HTML body of the decision email for a target status.

    Depends only on its arguments. Returns None for statuses that send no email.
    """
    if status not in DECISION_EMAILS:
        return None

    template_name, subject_format = DECISION_EMAILS[status]
    job_title = job_title or DEFAULT_JOB_TITLE
    site_name = getattr(settings, 'SITE_NAME', 'Lifewood')
    subject = subject_format.format(job_title=job_title, site_name=site_name)
    html_body = render_to_string(template_name, {
        'name': full_name,
        'job_title': job_title,
        'site_name': site_name,
    })
    return subject, html_body


def department_options(applicants):
    """Sorted distinct departments for the department filter."""
    departments = {
        field_value(applicant, 'department_applied')
        for applicant in applicants
    }
    return sorted(department for department in departments if department)


class ApplicantWorkflow(StatusWorkflow):
    """State machine and decision emails for job applicants."""

    kind = APPLICANT
    transitions = {
        PENDING: [ACCEPTED, REJECTED],
        ACCEPTED: [],
        REJECTED: [],
    }

    def notify(self, record, new_status, persisted=None, **context):
        email = (field_value(record, 'email', '') or '').strip()
        if not email:
            logger.warning(f"Applicant {record.pk} has no email address; decision email skipped")
            return False, 'Email not sent: Applicant email missing. Status updated.'

        message = decision_email(new_status, record.full_name, record.job_title_applied)
        if message is None:
            return False, None

        subject, html_body = message
        send_email(self.notifier, email, record.full_name, subject, html_body)
        logger.info(f"Decision email ({new_status}) sent to {email}")
        return True, None

    def accept(self, record_id):
        return self.transition(record_id, ACCEPTED)

    def reject(self, record_id):
        return self.transition(record_id, REJECTED)

    def delete(self, record_id):
        """
        Delete the applicant, then try to remove the uploaded resume.

        Returns:
            bool: True if a resume file was removed
        """
        record = self.get(record_id)
        resume_name = record.resume.name if record.resume else ''

        super().delete(record_id)

        if not resume_name:
            return False
        return delete_attachment(resume_name)

    def actions_for(self, record):
        """Names of the row actions available for one applicant."""
        targets = self.allowed_targets(record)
        actions = []
        if ACCEPTED in targets:
            actions.append('accept')
        if REJECTED in targets:
            actions.append('reject')
        actions.append('delete')
        return actions

    def action_registry(self):
        return {
            'accept': lambda record_id, **payload: self.accept(record_id),
            'reject': lambda record_id, **payload: self.reject(record_id),
            'delete': lambda record_id, **payload: self.delete(record_id),
        }


class JobListingService:
    """Publish, list and remove job listings."""

    REQUIRED_FIELDS = ('title', 'location', 'department', 'description')

    def __init__(self, store=None):
        self.store = store or RecordStore()

    def list(self):
        return self.store.query(JOB.collection, order_by='timestamp', direction='desc')

    def create(self, title, location, department, description):
        """
        Raises:
            ValueError: a field is blank
        """
        fields = {
            'title': (title or '').strip(),
            'location': (location or '').strip(),
            'department': (department or '').strip(),
            'description': (description or '').strip(),
        }
        missing = [name for name in self.REQUIRED_FIELDS if not fields[name]]
        if missing:
            raise ValueError(f"Please fill in all job fields. Missing: {', '.join(missing)}")

        listing = self.store.create(JOB.collection, **fields)
        logger.info(f"Job listing {listing.pk} published: {listing.title}")
        return listing

    def delete(self, listing_id):
        self.store.delete(JOB.collection, listing_id)
        logger.info(f"Job listing {listing_id} deleted")


def submit_application(store=None, job=None, resume=None, **fields):
    """
    Store a public job application as Pending.

    When `job` names a listing, its title and department are copied onto the
    application unless the applicant supplied a title.

    Raises:
        RecordNotFound: `job` does not exist
        PersistenceFailure: the application could not be stored
    """
    store = store or RecordStore()

    if job:
        listing = store.get(JOB.collection, job)
        fields['job'] = listing
        fields['job_title_applied'] = fields.get('job_title_applied') or listing.title
        fields['department_applied'] = listing.department

    if resume is not None:
        fields['resume'] = resume

    applicant = store.create(APPLICANT.collection, status=PENDING, **fields)
    logger.info(f"Application {applicant.pk} received for {applicant.job_title_applied or 'N/A'}")
    return applicant
