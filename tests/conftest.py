"""Process-wide test configuration.

Environment defaults must be in place before any module calls get_settings().
"""

import os
import tempfile

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-do-not-use-in-production")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="tokenauth-logs-"))
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="tokenauth-db-"), "test.db"),
)

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402

from tokenauth.core.auth.entities import User  # noqa: E402
from tokenauth.core.domain.enums import UserRole  # noqa: E402

NOW = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def now():
    """Fixed reference time (naive UTC)."""
    return NOW


@pytest.fixture
def mock_user():
    """Create a regular user entity."""
    return User(
        id=1,
        email="alice@example.com",
        hashed_password="$2b$10$hashed_password_example",
        role=UserRole.USER,
        created_at=NOW,
    )


@pytest.fixture
def mock_admin_user():
    """Create an admin user entity."""
    return User(
        id=2,
        email="admin@example.com",
        hashed_password="$2b$10$hashed_password_admin",
        role=UserRole.ADMIN,
        created_at=NOW,
    )
