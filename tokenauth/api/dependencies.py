"""FastAPI dependency injection setup."""

from functools import lru_cache
from typing import AsyncGenerator, Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tokenauth.config import Settings, get_settings
from tokenauth.core.auth.entities import User
from tokenauth.core.auth.exceptions import InvalidTokenException
from tokenauth.core.auth.services import AuthenticationService, PasswordService, TokenService
from tokenauth.infrastructure.cache.rate_limiter import RateLimiter
from tokenauth.infrastructure.database.repositories.session_repository import SqlSessionRepository
from tokenauth.infrastructure.database.repositories.user_repository import SqlUserRepository
from tokenauth.infrastructure.database.session import get_session

security = HTTPBearer(auto_error=False)

_rate_limiter: Optional[RateLimiter] = None


async def get_database_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide database session for dependency injection.

    Consumers declare it with ``scope="function"`` so the commit runs before
    the response is sent and a failed commit surfaces as an error.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_session():
        yield session


@lru_cache
def get_password_service() -> PasswordService:
    """Process-wide password hasher."""
    return PasswordService()


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token issuer bound to the configured signing secret."""
    return TokenService()


async def get_auth_service(
        session: AsyncSession = Depends(get_database_session, scope="function"),
        settings: Settings = Depends(get_settings),
) -> AuthenticationService:
    """
    Provide authentication service for dependency injection.

    Built per request: the repositories share the request's database session.

    Args:
        session: Database session
        settings: Application settings

    Returns:
        AuthenticationService: Authentication service instance
    """
    return AuthenticationService(
        SqlUserRepository(session),
        SqlSessionRepository(session),
        get_password_service(),
        get_token_service(),
        refresh_token_expire_days=settings.refresh_token_expire_days,
        require_token_on_logout=settings.logout_requires_token,
    )


def get_rate_limiter(request: Request) -> RateLimiter:
    """
    Return the limiter created at startup, or an in-process one.

    Returns:
        RateLimiter: Shared rate limiter
    """
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is not None:
        return limiter

    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def client_ip(request: Request) -> str:
    """Best-effort client address used as the rate-limit identity."""
    return request.client.host if request.client else "unknown"


def rate_limit(scope: str) -> Callable:
    """
    Build a dependency limiting requests per client IP for one endpoint.

    Args:
        scope: Endpoint name used in the counter key

    Returns:
        Dependency raising 429 once the window is exhausted
    """

    async def dependency(
            request: Request,
            settings: Settings = Depends(get_settings),
            limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        if not settings.rate_limit_enabled:
            return

        allowed = await limiter.allow(
            f"auth:{scope}:{client_ip(request)}",
            limit=settings.auth_rate_limit,
            window_seconds=settings.auth_rate_window_seconds,
        )
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests, try again later",
                headers={"Retry-After": str(settings.auth_rate_window_seconds)},
            )

    return dependency


def get_refresh_cookie(
        request: Request,
        settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Read the refresh token cookie, if the client sent one."""
    return request.cookies.get(settings.refresh_cookie_name) or None


async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        auth_service: AuthenticationService = Depends(get_auth_service),
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP bearer token credentials
        auth_service: Authentication service

    Returns:
        User: Current authenticated user

    Raises:
        InvalidTokenException: If the header is missing, the token is
            invalid, or the user no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise InvalidTokenException("missing bearer token")

    return await auth_service.get_current_user(credentials.credentials)
