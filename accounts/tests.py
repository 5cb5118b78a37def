"""
Tests for admin sign-in, the trust snapshot and the page guard.
"""
import json

import pytest
from django.contrib.auth import get_user_model
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APIClient
from unittest.mock import patch

from accounts.guard import (
    SNAPSHOT_SESSION_KEY,
    SessionContext,
    SessionGuard,
    is_authorized,
    snapshot_for,
)
from core.exceptions import AuthenticationFailure, MalformedLocalState

User = get_user_model()

pytestmark = pytest.mark.django_db

LOGIN_URL = '/api/auth/login/'


class FakeUser:

    def __init__(self, email, is_authenticated=True, is_active=True, pk=1):
        self.email = email
        self.is_authenticated = is_authenticated
        self.is_active = is_active
        self.pk = pk


class TestIsAuthorized:

    def test_admin_email(self):
        assert is_authorized(FakeUser('admin@lifewood.com')) is True

    def test_other_email(self):
        assert is_authorized(FakeUser('visitor@example.com')) is False

    def test_comparison_is_exact(self):
        assert is_authorized(FakeUser('Admin@Lifewood.com')) is False

    def test_absent_identity(self):
        assert is_authorized(None) is False
        assert is_authorized(FakeUser('admin@lifewood.com', is_authenticated=False)) is False

    def test_inactive_identity(self):
        assert is_authorized(FakeUser('admin@lifewood.com', is_active=False)) is False


class TestSessionContext:

    def test_read_empty(self):
        assert SessionContext({}).read() is None

    def test_write_then_read(self):
        session = {}
        context = SessionContext(session)
        context.write({'uid': '1', 'email': 'admin@lifewood.com', 'role': 'admin'})
        assert json.loads(session[SNAPSHOT_SESSION_KEY])['role'] == 'admin'
        assert context.read()['email'] == 'admin@lifewood.com'

    def test_last_write_wins(self):
        context = SessionContext({})
        context.write({'uid': '1', 'email': 'admin@lifewood.com', 'role': 'admin'})
        context.write({'uid': '2', 'email': 'visitor@example.com', 'role': 'user'})
        assert context.read() == {'uid': '2', 'email': 'visitor@example.com', 'role': 'user'}

    def test_unparseable_snapshot(self):
        with pytest.raises(MalformedLocalState):
            SessionContext({SNAPSHOT_SESSION_KEY: '{not json'}).read()

    def test_snapshot_missing_fields(self):
        with pytest.raises(MalformedLocalState):
            SessionContext({SNAPSHOT_SESSION_KEY: json.dumps({'role': 'admin'})}).read()

    def test_sync_clears_for_anonymous(self):
        session = {SNAPSHOT_SESSION_KEY: json.dumps({'uid': '1', 'email': 'a', 'role': 'admin'})}
        assert SessionContext(session).sync(FakeUser('', is_authenticated=False)) is None
        assert SNAPSHOT_SESSION_KEY not in session


class TestSessionGuard:

    def admin_snapshot(self):
        return snapshot_for(FakeUser('admin@lifewood.com'))

    def test_public_page_is_always_granted(self):
        decision = SessionGuard(SessionContext({})).check('careers', None)
        assert decision.granted is True

    def test_no_snapshot_is_denied_before_identity_check(self):
        decision = SessionGuard(SessionContext({})).check('dashboard', FakeUser('admin@lifewood.com'))
        assert decision.granted is False
        assert decision.reason == 'no-snapshot'
        assert decision.status_code == 401
        assert decision.redirect_to == '/'

    def test_non_admin_snapshot_is_denied(self):
        context = SessionContext({})
        context.write(snapshot_for(FakeUser('visitor@example.com')))
        decision = SessionGuard(context).check('contacts', FakeUser('admin@lifewood.com'))
        assert decision.reason == 'not-admin'
        assert decision.status_code == 403

    def test_malformed_snapshot_is_cleared_and_denied(self):
        session = {SNAPSHOT_SESSION_KEY: 'garbage'}
        decision = SessionGuard(SessionContext(session)).check('dashboard', FakeUser('admin@lifewood.com'))
        assert decision.granted is False
        assert decision.reason == 'malformed-snapshot'
        assert SNAPSHOT_SESSION_KEY not in session

    def test_snapshot_alone_is_not_proof(self):
        session = {}
        context = SessionContext(session)
        context.write(self.admin_snapshot())

        decision = SessionGuard(context).check('manage-jobs', FakeUser('x', is_authenticated=False))

        assert decision.granted is False
        assert decision.reason == 'unauthenticated'
        assert SNAPSHOT_SESSION_KEY not in session

    def test_wrong_identity_clears_snapshot(self):
        session = {}
        context = SessionContext(session)
        context.write(self.admin_snapshot())

        decision = SessionGuard(context).check('job-applicants', FakeUser('visitor@example.com'))

        assert decision.granted is False
        assert SNAPSHOT_SESSION_KEY not in session

    def test_admin_is_granted_and_snapshot_refreshed(self):
        context = SessionContext({})
        context.write(self.admin_snapshot())
        decision = SessionGuard(context).check('dashboard', FakeUser('admin@lifewood.com', pk=7))
        assert decision.granted is True
        assert context.read()['uid'] == '7'


class TestLoginView:

    def test_admin_login(self, api_client, admin_user):
        response = api_client.post(
            LOGIN_URL, {'email': 'admin@lifewood.com', 'password': 'testpass123'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['snapshot'] == {
            'uid': str(admin_user.pk), 'email': 'admin@lifewood.com', 'role': 'admin'
        }
        assert response.data['redirect'] == 'dashboard'
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']

    def test_login_is_case_insensitive_on_lookup(self, api_client, admin_user):
        response = api_client.post(
            LOGIN_URL, {'email': 'ADMIN@lifewood.com', 'password': 'testpass123'}, format='json'
        )
        assert response.status_code == status.HTTP_200_OK

    def test_non_admin_login_gets_user_role(self, api_client, regular_user):
        response = api_client.post(
            LOGIN_URL, {'email': 'visitor@example.com', 'password': 'testpass123'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['snapshot']['role'] == 'user'
        assert response.data['redirect'] == '/'

    def test_invalid_email_format(self, api_client):
        response = api_client.post(LOGIN_URL, {'email': 'not-an-email', 'password': 'x'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid-email'
        assert response.data['error'] == 'Invalid email address format.'

    def test_wrong_password(self, api_client, admin_user):
        response = api_client.post(
            LOGIN_URL, {'email': 'admin@lifewood.com', 'password': 'wrong'}, format='json'
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'invalid-credentials'
        assert response.data['error'] == 'Invalid username or password.'

    def test_unknown_account(self, api_client):
        response = api_client.post(
            LOGIN_URL, {'email': 'nobody@example.com', 'password': 'x'}, format='json'
        )
        assert response.data['code'] == 'invalid-credentials'

    def test_disabled_account(self, api_client, admin_user):
        admin_user.is_active = False
        admin_user.save()

        response = api_client.post(
            LOGIN_URL, {'email': 'admin@lifewood.com', 'password': 'testpass123'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'user-disabled'

    def test_too_many_attempts(self, api_client, admin_user, settings):
        settings.LOGIN_RATE_LIMIT_ATTEMPTS = 3
        for _ in range(3):
            api_client.post(LOGIN_URL, {'email': 'admin@lifewood.com', 'password': 'wrong'}, format='json')

        # Correct password is refused while locked
        response = api_client.post(
            LOGIN_URL, {'email': 'admin@lifewood.com', 'password': 'testpass123'}, format='json'
        )

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.data['code'] == 'too-many-requests'

    def test_back_end_unreachable(self, api_client):
        with patch('accounts.services.User.objects.filter', side_effect=DatabaseError('down')):
            response = api_client.post(
                LOGIN_URL, {'email': 'admin@lifewood.com', 'password': 'x'}, format='json'
            )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['code'] == 'network-request-failed'


class TestAuthenticationFailure:

    def test_unknown_code_is_unexpected(self):
        failure = AuthenticationFailure('quota-exceeded')
        assert failure.code == 'unexpected'
        assert failure.message == 'An unexpected error occurred. Please try again.'
        assert failure.status_code == 500


class TestSessionEndpoints:

    def test_session_bootstrap_for_admin(self, admin_client):
        response = admin_client.get('/api/auth/session/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['authenticated'] is True
        assert response.data['is_admin'] is True
        assert response.data['snapshot']['role'] == 'admin'

    def test_session_bootstrap_anonymous(self, api_client):
        response = api_client.get('/api/auth/session/')

        assert response.data['authenticated'] is False
        assert response.data['snapshot'] is None

    def test_guard_check_granted(self, admin_client):
        response = admin_client.get('/api/admin/guard/dashboard/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['granted'] is True

    def test_guard_check_denied_carries_redirect(self, user_client):
        response = user_client.get('/api/admin/guard/dashboard/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'AUTHORIZATION_DENIED'
        assert response.data['redirect'] == '/'

    def test_logout_clears_snapshot(self, admin_client):
        response = admin_client.post('/api/auth/logout/', {}, format='json')
        assert response.status_code == status.HTTP_200_OK

        response = admin_client.get('/api/admin/guard/dashboard/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['reason'] == 'no-snapshot'

    def test_logout_with_invalid_refresh_token(self, admin_client):
        response = admin_client.post('/api/auth/logout/', {'refresh_token': 'bogus'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'INVALID_TOKEN'


class TestProtectedPages:

    def test_anonymous_is_denied_with_redirect(self, api_client):
        response = api_client.get('/api/admin/contacts/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'AUTHORIZATION_DENIED'
        assert response.data['redirect'] == '/'
        assert 'results' not in response.data

    def test_non_admin_is_denied(self, user_client):
        response = user_client.get('/api/admin/dashboard/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_jwt_client_must_bootstrap_session(self, api_client, admin_user):
        login = api_client.post(
            LOGIN_URL, {'email': 'admin@lifewood.com', 'password': 'testpass123'}, format='json'
        )
        token = login.data['tokens']['access']

        # Fresh client: bearer token but no session snapshot yet
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        assert client.get('/api/admin/dashboard/').status_code == status.HTTP_401_UNAUTHORIZED

        client.get('/api/auth/session/')
        assert client.get('/api/admin/dashboard/').status_code == status.HTTP_200_OK
