"""
Tests for job listings, job applications and the applicants page.
"""
import pytest
from datetime import timedelta
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from unittest.mock import patch

from careers.models import JobApplicant, JobListing
from careers.services import ApplicantWorkflow, decision_email, department_options
from core.exceptions import PersistenceFailure

pytestmark = pytest.mark.django_db


def make_applicant(minutes_ago=0, **fields):
    defaults = {
        'first_name': 'Ana',
        'last_name': 'Cruz',
        'email': 'ana@example.com',
        'job_title_applied': 'Data Annotator',
        'department_applied': 'AI Data',
        'timestamp': timezone.now() - timedelta(minutes=minutes_ago),
    }
    defaults.update(fields)
    return JobApplicant.objects.create(**defaults)


@pytest.fixture
def job_listing(db):
    return JobListing.objects.create(
        title='Data Annotator',
        location='Cebu',
        department='AI Data',
        description='Label images and text for machine learning projects.'
    )


@pytest.fixture
def applicant(db):
    return make_applicant()


@pytest.fixture
def applicants(db):
    return [
        make_applicant(minutes_ago=1),
        make_applicant(minutes_ago=2, first_name='Ben', last_name='Reyes', email='ben@example.com',
                       job_title_applied='Recruiter', department_applied='HR', status='Accepted'),
        make_applicant(minutes_ago=3, first_name='Cid', last_name='Tan', email='cid@example.com',
                       job_title_applied='Engineer', department_applied='ai data', status='Rejected'),
    ]


class TestDecisionEmail:

    def test_accepted(self):
        subject, body = decision_email('Accepted', 'Ana Cruz', 'Data Annotator')
        assert subject == 'Congratulations! Your Application for Data Annotator at Lifewood'
        assert 'Ana Cruz' in body
        assert 'successful' in body

    def test_rejected(self):
        subject, body = decision_email('Rejected', 'Ana Cruz', 'Data Annotator')
        assert subject == 'Update on Your Application for Data Annotator at Lifewood'
        assert 'Data Annotator' in body

    def test_default_job_title(self):
        subject, _ = decision_email('Accepted', 'Ana Cruz', '')
        assert 'your applied position' in subject

    def test_same_input_same_email(self):
        assert decision_email('Rejected', 'Ana', 'Engineer') == decision_email('Rejected', 'Ana', 'Engineer')

    def test_no_email_for_pending(self):
        assert decision_email('Pending', 'Ana', 'Engineer') is None


class TestPublicCareers:

    def test_list_jobs(self, api_client, job_listing):
        response = api_client.get('/api/careers/jobs/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['title'] == 'Data Annotator'

    def test_apply_for_listing(self, api_client, job_listing):
        response = api_client.post('/api/careers/apply/', {
            'first_name': 'Ana',
            'last_name': 'Cruz',
            'email': 'Ana@Example.com',
            'age': 24,
            'degree': 'BS Computer Science',
            'experience': 2,
            'job': str(job_listing.id),
            'available_start': '2024-04-01',
            'available_end': '2024-12-31',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        applicant = JobApplicant.objects.get()
        assert applicant.status == 'Pending'
        assert applicant.email == 'ana@example.com'
        assert applicant.department_applied == 'AI Data'
        assert applicant.job_title_applied == 'Data Annotator'
        assert applicant.job == job_listing

    def test_apply_with_resume(self, api_client):
        resume = SimpleUploadedFile('cv.pdf', b'%PDF-1.4 resume', content_type='application/pdf')

        response = api_client.post('/api/careers/apply/', {
            'first_name': 'Ben',
            'last_name': 'Reyes',
            'email': 'ben@example.com',
            'job_title_applied': 'Recruiter',
            'resume': resume,
        }, format='multipart')

        assert response.status_code == status.HTTP_201_CREATED
        applicant = JobApplicant.objects.get()
        assert applicant.resume.name.startswith('resumes/')

    def test_apply_for_removed_listing(self, api_client):
        response = api_client.post('/api/careers/apply/', {
            'first_name': 'Ana', 'last_name': 'Cruz', 'email': 'ana@example.com',
            'job': '00000000-0000-0000-0000-000000000000',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert JobApplicant.objects.count() == 0

    def test_availability_must_be_ordered(self, api_client):
        response = api_client.post('/api/careers/apply/', {
            'first_name': 'Ana', 'last_name': 'Cruz', 'email': 'ana@example.com',
            'available_start': '2024-05-01', 'available_end': '2024-04-01',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'available_end' in response.data['fields']


class TestJobListingAdmin:

    def test_requires_admin(self, user_client):
        response = user_client.get('/api/admin/jobs/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_listing(self, admin_client):
        response = admin_client.post('/api/admin/jobs/', {
            'title': 'Recruiter',
            'location': 'Manila',
            'department': 'HR',
            'description': 'Hire great people.',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert JobListing.objects.get().title == 'Recruiter'

    def test_all_fields_required(self, admin_client):
        response = admin_client.post('/api/admin/jobs/', {
            'title': 'Recruiter', 'location': 'Manila', 'department': 'HR',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert JobListing.objects.count() == 0

    def test_list_newest_first(self, admin_client):
        JobListing.objects.create(title='Old', location='Cebu', department='HR', description='x',
                                  timestamp=timezone.now() - timedelta(days=2))
        JobListing.objects.create(title='New', location='Cebu', department='HR', description='x')

        response = admin_client.get('/api/admin/jobs/')

        assert [row['title'] for row in response.data['results']] == ['New', 'Old']

    def test_delete_listing(self, admin_client, job_listing):
        response = admin_client.delete(f'/api/admin/jobs/{job_listing.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert JobListing.objects.count() == 0

    def test_delete_unknown_listing(self, admin_client):
        response = admin_client.delete('/api/admin/jobs/00000000-0000-0000-0000-000000000000/')
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestApplicantList:

    def test_lists_all_statuses(self, admin_client, applicants):
        response = admin_client.get('/api/admin/applicants/')

        assert response.status_code == status.HTTP_200_OK
        assert [row['first_name'] for row in response.data['results']] == ['Ana', 'Ben', 'Cid']
        assert response.data['departments'] == ['AI Data', 'HR', 'ai data']

    def test_department_filter_is_case_insensitive(self, admin_client, applicants):
        response = admin_client.get('/api/admin/applicants/?department=AI%20DATA')
        assert [row['first_name'] for row in response.data['results']] == ['Ana', 'Cid']

    def test_status_and_search(self, admin_client, applicants):
        response = admin_client.get('/api/admin/applicants/?status=Pending&search=annotator')
        assert [row['first_name'] for row in response.data['results']] == ['Ana']

    def test_decided_applicants_have_no_decision_actions(self, admin_client, applicants):
        response = admin_client.get('/api/admin/applicants/')
        actions = {row['first_name']: row['actions'] for row in response.data['results']}

        assert actions['Ana'] == ['accept', 'reject', 'delete']
        assert actions['Ben'] == ['delete']
        assert actions['Cid'] == ['delete']

    def test_store_failure(self, admin_client):
        with patch('core.records.RecordStore.query', side_effect=PersistenceFailure('down')):
            response = admin_client.get('/api/admin/applicants/')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


class TestApplicantDecisions:

    def test_accept_sends_one_email(self, admin_client, applicant, outbox):
        response = admin_client.post(f'/api/admin/applicants/{applicant.id}/accept/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'Accepted'
        applicant.refresh_from_db()
        assert applicant.status == 'Accepted'

        assert len(outbox) == 1
        params = outbox[0]['params']
        assert params['to_email'] == 'ana@example.com'
        assert params['to_name'] == 'Ana Cruz'
        assert params['subject'].startswith('Congratulations!')

    def test_reject_sends_one_email(self, admin_client, applicant, outbox):
        response = admin_client.post(f'/api/admin/applicants/{applicant.id}/reject/')

        assert response.data['status'] == 'Rejected'
        assert len(outbox) == 1
        assert outbox[0]['params']['subject'].startswith('Update on Your Application')

    def test_decision_is_final(self, admin_client, applicant, outbox):
        admin_client.post(f'/api/admin/applicants/{applicant.id}/accept/')
        response = admin_client.post(f'/api/admin/applicants/{applicant.id}/reject/')

        assert response.status_code == status.HTTP_409_CONFLICT
        applicant.refresh_from_db()
        assert applicant.status == 'Accepted'
        assert len(outbox) == 1

    def test_missing_email_updates_status_with_warning(self, admin_client, outbox):
        applicant = make_applicant(email='')

        response = admin_client.post(f'/api/admin/applicants/{applicant.id}/accept/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['warning'] == 'Email not sent: Applicant email missing. Status updated.'
        applicant.refresh_from_db()
        assert applicant.status == 'Accepted'
        assert outbox == []

    def test_relay_failure_keeps_decision(self, admin_client, applicant, failing_notifier):
        response = admin_client.post(f'/api/admin/applicants/{applicant.id}/reject/')

        assert response.status_code == status.HTTP_200_OK
        assert 'email_error' in response.data
        applicant.refresh_from_db()
        assert applicant.status == 'Rejected'

    def test_store_failure_sends_nothing(self, admin_client, applicant, outbox):
        with patch('core.records.RecordStore.update', side_effect=PersistenceFailure('write rejected')):
            response = admin_client.post(f'/api/admin/applicants/{applicant.id}/accept/')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert outbox == []
        applicant.refresh_from_db()
        assert applicant.status == 'Pending'

    def test_dispatch_accept(self, admin_client, applicant, outbox):
        response = admin_client.post('/api/admin/applicants/actions/', {
            'id': str(applicant.id), 'action': 'accept'
        }, format='json')

        assert response.data['status'] == 'Accepted'
        assert len(outbox) == 1

    def test_dispatch_unknown_action(self, admin_client, applicant):
        response = admin_client.post('/api/admin/applicants/actions/', {
            'id': str(applicant.id), 'action': 'ignore'
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'UNKNOWN_ACTION'


class TestApplicantDetailAndDelete:

    def test_detail(self, admin_client, applicant):
        response = admin_client.get(f'/api/admin/applicants/{applicant.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['full_name'] == 'Ana Cruz'
        assert response.data['data']['resume_url'] is None

    def test_delete_removes_resume(self, admin_client):
        applicant = make_applicant()
        applicant.resume.save('cv.pdf', SimpleUploadedFile('cv.pdf', b'%PDF-1.4'))
        storage = applicant.resume.storage
        resume_name = applicant.resume.name

        response = admin_client.delete(f'/api/admin/applicants/{applicant.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['resume_removed'] is True
        assert not JobApplicant.objects.filter(id=applicant.id).exists()
        assert not storage.exists(resume_name)

    def test_resume_removal_failure_does_not_block_delete(self, admin_client):
        applicant = make_applicant()
        applicant.resume.save('cv.pdf', SimpleUploadedFile('cv.pdf', b'%PDF-1.4'))

        with patch('careers.services.delete_attachment', return_value=False):
            response = admin_client.delete(f'/api/admin/applicants/{applicant.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['resume_removed'] is False
        assert JobApplicant.objects.count() == 0

    def test_delete_without_resume(self, applicant):
        assert ApplicantWorkflow().delete(applicant.id) is False
        assert JobApplicant.objects.count() == 0


class TestDepartmentOptions:

    def test_sorted_distinct_non_empty(self):
        records = [
            {'department_applied': 'HR'},
            {'department_applied': 'AI Data'},
            {'department_applied': 'HR'},
            {'department_applied': ''},
            {},
        ]
        assert department_options(records) == ['AI Data', 'HR']


class TestApplicantDjangoAdmin:

    def change_form(self, applicant, **overrides):
        data = {
            'first_name': applicant.first_name,
            'last_name': applicant.last_name,
            'email': applicant.email,
            'degree': '',
            'job_title_applied': applicant.job_title_applied,
            'department_applied': applicant.department_applied,
            'resume_link': '',
        }
        data.update(overrides)
        return data

    def test_status_is_not_editable_on_the_change_form(self, django_admin_client):
        applicant = make_applicant(status='Accepted')
        url = reverse('admin:careers_jobapplicant_change', args=[applicant.pk])

        response = django_admin_client.post(url, self.change_form(applicant, status='Pending', degree='BSc'))

        assert response.status_code == 302
        applicant.refresh_from_db()
        assert applicant.status == 'Accepted'
        assert applicant.degree == 'BSc'

    def test_accept_action_runs_the_workflow(self, django_admin_client, outbox):
        pending = make_applicant()
        decided = make_applicant(first_name='Ben', status='Rejected')

        response = django_admin_client.post(reverse('admin:careers_jobapplicant_changelist'), {
            'action': 'accept_applicants',
            '_selected_action': [str(pending.pk), str(decided.pk)],
        })

        assert response.status_code == 302
        pending.refresh_from_db()
        decided.refresh_from_db()
        assert pending.status == 'Accepted'
        assert decided.status == 'Rejected'
        assert len(outbox) == 1
        assert outbox[0]['params']['to_email'] == 'ana@example.com'
