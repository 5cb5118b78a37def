"""
Shared pytest fixtures.
"""
import pytest
from unittest.mock import Mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from core import notifier as notifier_module
from core.exceptions import NotificationFailure
from core.notifier import ConsoleNotifier

User = get_user_model()

ADMIN_EMAIL = 'admin@lifewood.com'
ADMIN_PASSWORD = 'testpass123'


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear cache before and after each test to prevent pollution."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def site_settings(settings, tmp_path):
    settings.ADMIN_EMAIL = ADMIN_EMAIL
    settings.PUBLIC_ENTRY_URL = '/'
    settings.SITE_NAME = 'Lifewood'
    settings.NOTIFIER_BACKEND = 'console'
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    return settings


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Console notifier installed as the process-wide notifier; returns its outbox."""
    console = ConsoleNotifier()
    monkeypatch.setattr(notifier_module, '_notifier', console)
    return console.outbox


@pytest.fixture
def failing_notifier(monkeypatch):
    """Notifier whose every send is rejected by the relay."""
    failing = Mock()
    failing.send.side_effect = NotificationFailure(400, 'The template ID is invalid')
    monkeypatch.setattr(notifier_module, '_notifier', failing)
    return failing


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin',
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        first_name='Site',
        last_name='Admin',
        is_staff=True
    )


@pytest.fixture
def regular_user(db):
    return User.objects.create_user(
        username='visitor',
        email='visitor@example.com',
        password=ADMIN_PASSWORD,
        first_name='Visitor',
        last_name='Example'
    )


def sign_in(client, email, password=ADMIN_PASSWORD):
    response = client.post('/api/auth/login/', {'email': email, 'password': password}, format='json')
    assert response.status_code == 200, response.data
    return response


@pytest.fixture
def admin_client(api_client, admin_user):
    """API client signed in as the site administrator (session + snapshot)."""
    sign_in(api_client, ADMIN_EMAIL)
    return api_client


@pytest.fixture
def user_client(api_client, regular_user):
    """API client signed in as an account that is not the administrator."""
    sign_in(api_client, regular_user.email)
    return api_client


@pytest.fixture
def django_admin_client(client, db):
    """Django test client signed in to the Django admin as a superuser."""
    superuser = User.objects.create_superuser('root', 'root@example.com', ADMIN_PASSWORD)
    client.force_login(superuser)
    return client
