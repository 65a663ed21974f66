"""Integration tests for authentication API with a mocked service."""

from tokenauth.config import Settings, get_settings
from tokenauth.core.auth.entities import AuthResult, TokenPair
from tokenauth.core.auth.exceptions import (
    EmailAlreadyRegisteredException,
    ExpiredOrRevokedRefreshTokenException,
    InvalidCredentialsException,
    InvalidRefreshTokenException,
    MissingCredentialException,
)
from tokenauth.core.domain.enums import UserRole
from tokenauth.infrastructure.cache.rate_limiter import RateLimiter


def _result(user, refresh_token="refresh-1"):
    return AuthResult(
        user=user,
        tokens=TokenPair(access_token="access-token", refresh_token=refresh_token),
    )


class TestRegisterAPI:
    """Test POST /auth/register."""

    def test_register_success(self, client, override_auth_dependency, mock_user):
        override_auth_dependency.register.return_value = _result(mock_user)

        response = client.post(
            "/auth/register",
            json={"email": "alice@example.com", "password": "secret1"},
            headers={"User-Agent": "pytest-agent"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["accessToken"] == "access-token"
        assert data["user"] == {
            "id": 1,
            "email": "alice@example.com",
            "role": "USER",
            "createdAt": "2025-01-01T12:00:00Z",
        }
        assert "refresh" not in response.text
        assert response.cookies.get("refresh_token") == "refresh-1"

        override_auth_dependency.register.assert_awaited_once_with(
            email="alice@example.com",
            password="secret1",
            role=UserRole.USER,
            user_agent="pytest-agent",
        )

    def test_register_sets_hardened_cookie(self, client, override_auth_dependency, mock_user):
        override_auth_dependency.register.return_value = _result(mock_user)

        response = client.post(
            "/auth/register",
            json={"email": "alice@example.com", "password": "secret1"},
        )

        cookie = response.headers["set-cookie"].lower()
        assert "httponly" in cookie
        assert "max-age=604800" in cookie
        assert "path=/" in cookie
        assert "samesite=lax" in cookie
        assert "secure" not in cookie

    def test_register_admin_role(self, client, override_auth_dependency, mock_admin_user):
        override_auth_dependency.register.return_value = _result(mock_admin_user)

        response = client.post(
            "/auth/register",
            json={"email": "admin@example.com", "password": "secret1", "role": "ADMIN"},
        )

        assert response.status_code == 201
        assert response.json()["user"]["role"] == "ADMIN"
        assert override_auth_dependency.register.call_args.kwargs["role"] == UserRole.ADMIN

    def test_register_duplicate_email(self, client, override_auth_dependency):
        override_auth_dependency.register.side_effect = EmailAlreadyRegisteredException(
            "alice@example.com"
        )

        response = client.post(
            "/auth/register",
            json={"email": "alice@example.com", "password": "secret1"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == {
            "code": "EMAIL_ALREADY_REGISTERED",
            "message": "Email already registered",
        }
        assert "set-cookie" not in response.headers

    def test_register_invalid_email(self, client, override_auth_dependency):
        response = client.post(
            "/auth/register",
            json={"email": "invalid-email", "password": "secret1"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        override_auth_dependency.register.assert_not_awaited()

    def test_register_short_password(self, client, override_auth_dependency):
        response = client.post(
            "/auth/register",
            json={"email": "alice@example.com", "password": "12345"},
        )

        assert response.status_code == 422
        override_auth_dependency.register.assert_not_awaited()

    def test_register_password_over_72_bytes(self, client, override_auth_dependency):
        # 37 characters, 74 bytes once UTF-8 encoded
        response = client.post(
            "/auth/register",
            json={"email": "alice@example.com", "password": "\u00e9" * 37},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        override_auth_dependency.register.assert_not_awaited()

    def test_register_password_of_exactly_72_bytes(self, client, override_auth_dependency, mock_user):
        override_auth_dependency.register.return_value = _result(mock_user)

        response = client.post(
            "/auth/register",
            json={"email": "alice@example.com", "password": "a" * 72},
        )

        assert response.status_code == 201
        override_auth_dependency.register.assert_awaited_once()

    def test_register_unknown_role(self, client, override_auth_dependency):
        response = client.post(
            "/auth/register",
            json={"email": "alice@example.com", "password": "secret1", "role": "ROOT"},
        )

        assert response.status_code == 422


class TestLoginAPI:
    """Test POST /auth/login."""

    def test_login_success(self, client, override_auth_dependency, mock_user):
        override_auth_dependency.login.return_value = _result(mock_user)

        response = client.post(
            "/auth/login",
            json={"email": "alice@example.com", "password": "secret1"},
        )

        assert response.status_code == 200
        assert response.json()["accessToken"] == "access-token"
        assert response.cookies.get("refresh_token") == "refresh-1"

    def test_login_invalid_credentials(self, client, override_auth_dependency):
        override_auth_dependency.login.side_effect = InvalidCredentialsException()

        response = client.post(
            "/auth/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": {"code": "INVALID_CREDENTIALS", "message": "Invalid credentials"}
        }
        assert "set-cookie" not in response.headers

    def test_login_password_over_72_bytes(self, client, override_auth_dependency):
        response = client.post(
            "/auth/login",
            json={"email": "alice@example.com", "password": "a" * 73},
        )

        assert response.status_code == 422
        override_auth_dependency.login.assert_not_awaited()

    def test_login_rate_limited(self, app, client, override_auth_dependency, mock_user):
        override_auth_dependency.login.return_value = _result(mock_user)
        app.dependency_overrides[get_settings] = lambda: Settings(
            rate_limit_enabled=True, auth_rate_limit=2, auth_rate_window_seconds=60
        )
        app.state.rate_limiter = RateLimiter()

        statuses = [
            client.post(
                "/auth/login",
                json={"email": "alice@example.com", "password": "secret1"},
            ).status_code
            for _ in range(3)
        ]

        assert statuses == [200, 200, 429]
        assert override_auth_dependency.login.await_count == 2


class TestRefreshAPI:
    """Test POST /auth/refresh."""

    def test_refresh_rotates_cookie(self, client, override_auth_dependency):
        override_auth_dependency.refresh.return_value = TokenPair(
            access_token="new-access", refresh_token="refresh-2"
        )
        client.cookies.set("refresh_token", "refresh-1")

        response = client.post("/auth/refresh")

        assert response.status_code == 200
        assert response.json() == {"accessToken": "new-access"}
        assert response.cookies.get("refresh_token") == "refresh-2"
        override_auth_dependency.refresh.assert_awaited_once_with("refresh-1")

    def test_refresh_without_cookie(self, client, override_auth_dependency):
        override_auth_dependency.refresh.side_effect = MissingCredentialException()

        response = client.post("/auth/refresh")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "MISSING_CREDENTIAL"
        override_auth_dependency.refresh.assert_awaited_once_with(None)

    def test_refresh_invalid_token(self, client, override_auth_dependency):
        override_auth_dependency.refresh.side_effect = InvalidRefreshTokenException()
        client.cookies.set("refresh_token", "stale")

        response = client.post("/auth/refresh")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid refresh token"

    def test_refresh_revoked_token_reveals_nothing(self, client, override_auth_dependency):
        override_auth_dependency.refresh.side_effect = ExpiredOrRevokedRefreshTokenException("revoked")
        client.cookies.set("refresh_token", "revoked-token")

        response = client.post("/auth/refresh")

        assert response.status_code == 401
        assert response.json() == {
            "error": {"code": "INVALID_REFRESH_TOKEN", "message": "Invalid refresh token"}
        }


class TestLogoutAPI:
    """Test POST /auth/logout and /auth/logout-all."""

    def test_logout_clears_cookie(self, client, override_auth_dependency):
        override_auth_dependency.logout.return_value = True
        client.cookies.set("refresh_token", "refresh-1")

        response = client.post("/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert "max-age=0" in response.headers["set-cookie"].lower()
        override_auth_dependency.logout.assert_awaited_once_with("refresh-1")

    def test_logout_unknown_token_still_succeeds(self, client, override_auth_dependency):
        override_auth_dependency.logout.return_value = False
        client.cookies.set("refresh_token", "unknown")

        response = client.post("/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_logout_without_cookie(self, client, override_auth_dependency):
        override_auth_dependency.logout.side_effect = MissingCredentialException()

        response = client.post("/auth/logout")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "MISSING_CREDENTIAL"

    def test_logout_all(self, authenticated_client, override_auth_dependency, mock_user):
        override_auth_dependency.revoke_user_sessions.return_value = 3

        response = authenticated_client.post("/auth/logout-all")

        assert response.status_code == 200
        assert response.json() == {"success": True, "revoked": 3}
        override_auth_dependency.revoke_user_sessions.assert_awaited_once_with(mock_user.id)


class TestMeAPI:
    """Test GET /auth/me."""

    def test_me(self, authenticated_client, mock_user):
        response = authenticated_client.get("/auth/me")

        assert response.status_code == 200
        assert response.json()["user"]["email"] == mock_user.email
        assert "hashedPassword" not in response.json()["user"]

    def test_me_without_token(self, client, override_auth_dependency):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"
        assert response.headers["www-authenticate"] == "Bearer"
        override_auth_dependency.get_current_user.assert_not_awaited()


class TestSecurityHeaders:
    """Responses carry hardening headers."""

    def test_security_headers(self, client, override_auth_dependency):
        override_auth_dependency.logout.return_value = True
        client.cookies.set("refresh_token", "refresh-1")

        response = client.post("/auth/logout")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["cache-control"] == "no-store"
