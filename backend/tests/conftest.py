"""
Pytest fixtures for Stockbook backend tests.

Each test gets a fresh application on the in-memory storage backend, so
collections start from seed data: admin/password (SUPERADMIN) and the three
seeded products (ids "1", "2", "3").
"""

import pytest

from stockbook import create_app
from stockbook.extensions import store
from stockbook.models import UserRole
from stockbook.seeds import DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD
from stockbook.services import auth_service, session_service


TEST_PASSWORD = "secret-pass"


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'STORAGE_BACKEND': 'memory',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
        'GEMINI_API_KEY': None,
    })

    with app.app_context():
        yield app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def admin(app):
    """The seeded SUPERADMIN account."""
    return auth_service.get_user_by_username(DEFAULT_ADMIN_USERNAME)


@pytest.fixture(scope='function')
def make_user(app):
    """Factory: register a user with the given role and optional flag overrides."""
    def _make(username, role=UserRole.MEMBER, is_active=True, **flags):
        permissions = None
        if flags:
            permissions = auth_service.default_permissions_for(role)
            for key, value in flags.items():
                setattr(permissions, key, value)
        user = auth_service.register_user(username, TEST_PASSWORD, role, permissions)
        if not is_active:
            user.is_active = False
            store.users.update(user)
        return user
    return _make


@pytest.fixture(scope='function')
def login_as(client):
    """Sign a user in through the API; returns the response."""
    def _login(username, password=TEST_PASSWORD):
        return client.post("/api/auth/login", json={"username": username, "password": password})
    return _login


@pytest.fixture(scope='function')
def admin_client(client, login_as):
    resp = login_as(DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD)
    assert resp.status_code == 200
    return client


@pytest.fixture(scope='function')
def signed_in_admin(app, admin):
    """Service-level sign-in of the seeded admin (no HTTP round trip)."""
    session_service.start_session(admin)
    return admin

@pytest.fixture(scope='function')
def user_password():
    """Password given to every make_user account."""
    return TEST_PASSWORD
