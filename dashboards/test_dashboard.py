"""
Tests for the admin dashboard endpoint and service.
"""
import pytest
from datetime import datetime, timedelta, timezone as dt_timezone
from django.utils import timezone
from rest_framework import status
from unittest.mock import patch

from careers.models import JobApplicant
from contact.models import ContactMessage
from core.exceptions import PersistenceFailure
from dashboards.services import DashboardService

pytestmark = pytest.mark.django_db


def make_applicant(timestamp, status='Pending', **fields):
    return JobApplicant.objects.create(
        first_name=fields.pop('first_name', 'Ana'),
        last_name='Cruz',
        email='ana@example.com',
        job_title_applied='Data Annotator',
        department_applied='AI Data',
        status=status,
        timestamp=timestamp,
        **fields
    )


@pytest.fixture
def activity(db):
    now = timezone.now()
    for days_ago, applicant_status in [(0, 'Pending'), (0, 'Accepted'), (2, 'Pending'),
                                       (3, 'Rejected'), (20, 'Accepted')]:
        make_applicant(now - timedelta(days=days_ago), applicant_status)
    for i in range(7):
        ContactMessage.objects.create(
            name=f'Visitor {i}', email=f'v{i}@example.com', category='Support',
            message='Hello', timestamp=now - timedelta(hours=i)
        )
    return now


class TestDashboardService:

    def test_counts(self, activity):
        counts = DashboardService().get_counts()

        assert counts == {
            'total_applicants': 5,
            'pending_applicants': 2,
            'accepted_applicants': 2,
            'total_contacts': 7,
        }

    def test_charts(self, db):
        now = datetime(2024, 3, 13, 12, 0, tzinfo=dt_timezone.utc)
        make_applicant(datetime(2024, 3, 13, 9, 0, tzinfo=dt_timezone.utc))
        make_applicant(datetime(2024, 3, 11, 9, 0, tzinfo=dt_timezone.utc))
        make_applicant(datetime(2024, 2, 1, 9, 0, tzinfo=dt_timezone.utc))

        charts = DashboardService().get_charts(now)

        assert charts['applications_per_day'] == {
            'labels': ['Mar 7', 'Mar 8', 'Mar 9', 'Mar 10', 'Mar 11', 'Mar 12', 'Mar 13'],
            'data': [0, 0, 0, 0, 1, 0, 1],
        }
        assert charts['applications_per_week'] == {
            'labels': ['Jan 28, 2024', 'Mar 10, 2024'],
            'data': [1, 2],
        }

    def test_window_from_settings(self, db, settings):
        settings.DASHBOARD_WINDOW_DAYS = 3
        charts = DashboardService().get_charts(datetime(2024, 3, 13, tzinfo=dt_timezone.utc))
        assert charts['applications_per_day']['labels'] == ['Mar 11', 'Mar 12', 'Mar 13']

    def test_latest_records_are_limited(self, activity):
        latest = DashboardService().get_latest()

        assert len(latest['latest_applications']) == 5
        assert len(latest['latest_contacts']) == 5
        assert latest['latest_contacts'][0].name == 'Visitor 0'


class TestAdminDashboardView:

    def test_requires_admin(self, api_client):
        response = api_client.get('/api/admin/dashboard/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['redirect'] == '/'

    def test_overview(self, admin_client, activity):
        response = admin_client.get('/api/admin/dashboard/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['total_applicants'] == 5
        assert response.data['total_contacts'] == 7
        assert len(response.data['applications_per_day']['data']) == 7
        assert sum(response.data['applications_per_day']['data']) == 4
        assert len(response.data['latest_applications']) == 5
        assert response.data['latest_contacts'][0]['name'] == 'Visitor 0'

    def test_empty_site(self, admin_client):
        response = admin_client.get('/api/admin/dashboard/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_applicants'] == 0
        assert response.data['applications_per_day']['data'] == [0] * 7
        assert response.data['applications_per_week'] == {'labels': [], 'data': []}

    def test_store_failure(self, admin_client):
        with patch('core.records.RecordStore.count', side_effect=PersistenceFailure('down')):
            response = admin_client.get('/api/admin/dashboard/')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['code'] == 'PERSISTENCE_FAILURE'
