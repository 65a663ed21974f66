"""Common fixtures for integration tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tokenauth.api.dependencies import get_auth_service, get_current_user
from tokenauth.config import get_settings
from tokenauth.core.auth.services import AuthenticationService
from tokenauth.main import create_app


@pytest.fixture
def app():
    """Create an application without running startup."""
    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Test client that never touches the database; services are mocked."""
    return TestClient(app)


@pytest.fixture
def mock_auth_service():
    """Create a mock authentication service."""
    return AsyncMock(spec=AuthenticationService)


@pytest.fixture
def override_auth_dependency(app, mock_auth_service):
    """Override authentication service dependency."""
    app.dependency_overrides[get_auth_service] = lambda: mock_auth_service
    return mock_auth_service


@pytest.fixture
def authenticated_client(app, client, mock_user):
    """Client whose bearer token always resolves to mock_user."""
    app.dependency_overrides[get_current_user] = lambda: mock_user
    return client


@pytest.fixture
def live_database(tmp_path, monkeypatch):
    """Point the application at a fresh SQLite file."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'live.db'}")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def live_client(live_database):
    """
    Client running the full application against a fresh SQLite file.

    Startup creates the tables; shutdown disposes the engine.
    """
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def live_error_client(live_database):
    """Like live_client, but unhandled errors come back as 500 responses."""
    with TestClient(create_app(), raise_server_exceptions=False) as test_client:
        yield test_client
