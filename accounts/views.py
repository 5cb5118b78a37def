import logging

from django.contrib.auth import login, logout
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from core.exceptions import AuthenticationFailure
from .guard import SessionContext, SessionGuard, is_authorized, public_entry_url
from .serializers import LoginSerializer, UserSerializer
from .services import LoginService

logger = logging.getLogger(__name__)


class LoginView(APIView):
    """
    API endpoint for the admin login form.

    POST /api/auth/login/
    Body: {email, password}

    On success returns JWT tokens, the user, and the trust snapshot written
    into the session.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            failure = AuthenticationFailure('invalid-email')
            return Response(
                {
                    'success': False,
                    'error': failure.message,
                    'code': failure.code,
                    'fields': serializer.errors
                },
                status=failure.status_code
            )

        try:
            user = LoginService().authenticate(
                request._request,
                serializer.validated_data['email'],
                serializer.validated_data['password'],
            )
        except AuthenticationFailure as e:
            return Response(
                {'success': False, 'error': e.message, 'code': e.code},
                status=e.status_code
            )

        # Fires user_logged_in, which writes the trust snapshot
        login(request._request, user)
        snapshot = SessionContext(request.session).read()

        refresh = RefreshToken.for_user(user)
        return Response({
            'success': True,
            'message': 'Login successful',
            'user': UserSerializer(user).data,
            'snapshot': snapshot,
            'redirect': 'dashboard' if is_authorized(user) else public_entry_url(),
            'tokens': {
                'refresh': str(refresh),
                'access': str(refresh.access_token),
            }
        }, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    API endpoint for user logout.

    Blacklists the refresh token when one is supplied, clears the trust
    snapshot and ends the session.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        refresh_token = request.data.get('refresh_token')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                return Response(
                    {'success': False, 'error': str(e), 'code': 'INVALID_TOKEN'},
                    status=status.HTTP_400_BAD_REQUEST
                )

        SessionContext(request.session).clear()
        logout(request._request)

        return Response({
            'success': True,
            'message': 'Logout successful',
            'redirect': public_entry_url(),
        }, status=status.HTTP_200_OK)


class SessionStateView(APIView):
    """
    Public page bootstrap.

    GET /api/auth/session/

    Re-syncs the trust snapshot with the current identity (or clears it) and
    reports it.
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        user = request.user
        snapshot = SessionContext(request.session).sync(user)
        return Response({
            'authenticated': bool(user and user.is_authenticated),
            'is_admin': is_authorized(user),
            'snapshot': snapshot,
        })


class GuardCheckView(APIView):
    """
    Explicit guard check for a named page.

    GET /api/admin/guard/<page>/
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request, page):
        decision = SessionGuard(SessionContext(request.session)).check(page, request.user)
        if decision:
            return Response({'success': True, 'page': page, **decision.as_dict()})

        return Response(
            {
                'success': False,
                'error': 'Access Denied: You must be logged in as an administrator.',
                'code': 'AUTHORIZATION_DENIED',
                'page': page,
                **decision.as_dict()
            },
            status=decision.status_code
        )
