"""
Careers Views

Public job board and application intake, plus the admin pages for job
listings and applicants.
"""
import logging

from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsSiteAdministrator
from core.actions import dispatch
from core.exceptions import PersistenceFailure, RecordNotFound
from core.filtering import FilterPredicates, filter_records
from core.records import APPLICANT
from core.responses import (
    HANDLED_ERRORS,
    domain_error_response,
    error_response,
    transition_response,
)
from core.workflow import TransitionOutcome
from .serializers import (
    ApplicantActionSerializer,
    JobApplicantDetailSerializer,
    JobApplicantListSerializer,
    JobApplicationSubmitSerializer,
    JobListingCreateSerializer,
    JobListingSerializer,
)
from .services import ApplicantWorkflow, JobListingService, department_options, submit_application

logger = logging.getLogger(__name__)


def validation_error_response(serializer, error='Validation failed'):
    return Response(
        {
            'success': False,
            'error': error,
            'code': 'VALIDATION_ERROR',
            'fields': serializer.errors
        },
        status=status.HTTP_400_BAD_REQUEST
    )


class PublicJobListView(APIView):
    """
    Open positions, newest first.

    GET /api/careers/jobs/
    """

    permission_classes = [AllowAny]

    def get(self, request):
        try:
            listings = JobListingService().list()
        except PersistenceFailure:
            return error_response(
                'Error loading job listings. Please try again later.',
                'PERSISTENCE_FAILURE',
                status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response({
            'success': True,
            'count': len(listings),
            'results': JobListingSerializer(listings, many=True).data,
        })


class JobApplicationSubmitView(APIView):
    """
    Submit a job application.

    POST /api/careers/apply/

    Accepts multipart form data so a resume file can be attached.
    """

    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request):
        serializer = JobApplicationSubmitSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer, 'Please fill in all required fields.')

        try:
            applicant = submit_application(**serializer.validated_data)
        except RecordNotFound:
            return error_response(
                'The selected job listing no longer exists.',
                'NOT_FOUND',
                status.HTTP_404_NOT_FOUND
            )
        except PersistenceFailure:
            return error_response(
                'Error submitting application. Please try again.',
                'PERSISTENCE_FAILURE',
                status.HTTP_503_SERVICE_UNAVAILABLE
            )

        return Response(
            {
                'success': True,
                'message': 'Application submitted successfully!',
                'id': str(applicant.id)
            },
            status=status.HTTP_201_CREATED
        )


class JobListingAdminView(APIView):
    """
    Manage job listings.

    GET /api/admin/jobs/
    POST /api/admin/jobs/
    """

    permission_classes = [IsSiteAdministrator]
    guard_page = 'manage-jobs'

    def get(self, request):
        try:
            listings = JobListingService().list()
        except HANDLED_ERRORS as e:
            return domain_error_response(e)
        return Response({
            'success': True,
            'count': len(listings),
            'results': JobListingSerializer(listings, many=True).data,
        })

    def post(self, request):
        serializer = JobListingCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer, 'Please fill in all job fields.')

        try:
            listing = JobListingService().create(**serializer.validated_data)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        return Response(
            {
                'success': True,
                'message': 'Job listing added successfully!',
                'data': JobListingSerializer(listing).data
            },
            status=status.HTTP_201_CREATED
        )


class JobListingAdminDetailView(APIView):
    """
    DELETE /api/admin/jobs/:id/
    """

    permission_classes = [IsSiteAdministrator]
    guard_page = 'manage-jobs'

    def delete(self, request, id):
        try:
            JobListingService().delete(id)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)
        return Response({'success': True, 'message': 'Job listing deleted successfully!'})


class ApplicantAdminView(APIView):
    """Base for the admin applicants page."""

    permission_classes = [IsSiteAdministrator]
    guard_page = 'job-applicants'

    def get_workflow(self):
        return ApplicantWorkflow()


class ApplicantListView(ApplicantAdminView):
    """
    List applicants.

    GET /api/admin/applicants/

    Query Parameters:
    - status: All (default), Pending, Accepted, Rejected
    - department: All (default) or a department (case-insensitive)
    - search: Case-insensitive substring of first name, last name, email or job title

    The response also lists every department present, for the filter menu.
    """

    def get(self, request):
        workflow = self.get_workflow()
        predicates = FilterPredicates.from_query_params(
            request.query_params, category_param='department'
        )

        try:
            applicants = workflow.store.query(APPLICANT.collection, order_by='timestamp', direction='desc')
        except PersistenceFailure:
            return error_response(
                'Error loading applicants.',
                'PERSISTENCE_FAILURE',
                status.HTTP_503_SERVICE_UNAVAILABLE
            )

        visible = filter_records(applicants, APPLICANT, predicates)
        serializer = JobApplicantListSerializer(visible, many=True, context={'workflow': workflow})
        return Response({
            'success': True,
            'count': len(visible),
            'departments': department_options(applicants),
            'filters': {
                'status': predicates.status,
                'department': predicates.category,
                'search': predicates.search_term,
            },
            'results': serializer.data,
        })


class ApplicantDetailView(ApplicantAdminView):
    """
    GET /api/admin/applicants/:id/
    DELETE /api/admin/applicants/:id/
    """

    def get(self, request, id):
        workflow = self.get_workflow()
        try:
            applicant = workflow.get(id)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        serializer = JobApplicantDetailSerializer(
            applicant, context={'workflow': workflow, 'request': request}
        )
        return Response({'success': True, 'data': serializer.data})

    def delete(self, request, id):
        try:
            resume_removed = self.get_workflow().delete(id)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        return Response({
            'success': True,
            'message': 'Applicant deleted successfully!',
            'resume_removed': resume_removed,
        })


class ApplicantDecisionView(ApplicantAdminView):
    """
    POST /api/admin/applicants/:id/accept/
    POST /api/admin/applicants/:id/reject/
    """

    decision = None

    def post(self, request, id):
        workflow = self.get_workflow()
        try:
            if self.decision == 'accept':
                outcome = workflow.accept(id)
            else:
                outcome = workflow.reject(id)
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        return transition_response(outcome, f"Applicant status updated to {outcome.status}!")


class ApplicantActionDispatchView(ApplicantAdminView):
    """
    Run one row action.

    POST /api/admin/applicants/actions/
    Body: {id, action}
    """

    def post(self, request):
        serializer = ApplicantActionSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)

        data = serializer.validated_data
        workflow = self.get_workflow()
        try:
            outcome = dispatch(workflow.action_registry(), data['id'], data['action'])
        except HANDLED_ERRORS as e:
            return domain_error_response(e)

        if isinstance(outcome, TransitionOutcome):
            return transition_response(outcome, f"Applicant status updated to {outcome.status}!")
        return Response({
            'success': True,
            'action': data['action'],
            'id': str(data['id']),
            'resume_removed': bool(outcome),
        })
