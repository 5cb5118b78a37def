"""
Admin Dashboard Service

Counts, application charts and the latest records for the dashboard page.
"""
import logging

from django.conf import settings
from django.utils import timezone

from core.records import APPLICANT, CONTACT, RecordStore, where
from dashboards.aggregation import (
    bucket_by_day,
    bucket_by_week,
    chart_series,
    day_label,
    week_label,
)

logger = logging.getLogger(__name__)


class DashboardService:
    """Service for admin dashboard data aggregation"""

    def __init__(self, store=None):
        self.store = store or RecordStore()
        self.window_days = getattr(settings, 'DASHBOARD_WINDOW_DAYS', 7)
        self.recent_limit = getattr(settings, 'DASHBOARD_RECENT_LIMIT', 5)

    def get_counts(self):
        """
        Returns:
            dict: total/pending/accepted applicants and total contacts
        """
        return {
            'total_applicants': self.store.count(APPLICANT.collection),
            'pending_applicants': self.store.count(
                APPLICANT.collection, [where('status', '==', 'Pending')]
            ),
            'accepted_applicants': self.store.count(
                APPLICANT.collection, [where('status', '==', 'Accepted')]
            ),
            'total_contacts': self.store.count(CONTACT.collection),
        }

    def get_charts(self, now=None):
        now = now or timezone.now()
        applicants = self.store.query(APPLICANT.collection, order_by='timestamp', direction='asc')

        per_day = bucket_by_day(applicants, now, self.window_days)
        per_week = bucket_by_week(applicants)
        return {
            'applications_per_day': chart_series(per_day, day_label),
            'applications_per_week': chart_series(per_week, week_label),
        }

    def get_latest(self):
        return {
            'latest_applications': self.store.query(
                APPLICANT.collection, order_by='timestamp', direction='desc', limit=self.recent_limit
            ),
            'latest_contacts': self.store.query(
                CONTACT.collection, order_by='timestamp', direction='desc', limit=self.recent_limit
            ),
        }

    def get_overview(self, now=None):
        overview = {}
        overview.update(self.get_counts())
        overview.update(self.get_charts(now))
        overview.update(self.get_latest())
        logger.debug(f"Dashboard overview built: {overview['total_applicants']} applicants")
        return overview
