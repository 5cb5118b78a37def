"""
Dashboard API Views

GET /api/admin/dashboard/ returns everything the dashboard page renders.
"""
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from accounts.permissions import IsSiteAdministrator
from core.exceptions import PersistenceFailure
from core.responses import error_response
from .serializers import DashboardOverviewSerializer
from .services import DashboardService

logger = logging.getLogger(__name__)


class AdminDashboardView(APIView):
    """
    Admin Dashboard API Endpoint

    GET /api/admin/dashboard/

    Returns:
    - Applicant counts (total, pending, accepted) and total contacts
    - Applications per day over the trailing window (labels like 'Mar 10')
    - Applications per week (labels like 'Mar 10, 2024')
    - Latest applications and contacts

    Permission: Site administrator only
    """
    permission_classes = [IsSiteAdministrator]
    guard_page = 'dashboard'

    def get(self, request):
        try:
            overview = DashboardService().get_overview()
        except PersistenceFailure:
            return error_response(
                'Error loading dashboard data.',
                'PERSISTENCE_FAILURE',
                status.HTTP_503_SERVICE_UNAVAILABLE
            )

        data = DashboardOverviewSerializer(overview).data
        return Response({'success': True, **data}, status=status.HTTP_200_OK)
