"""Authentication API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from tokenauth.api.dependencies import (
    get_auth_service,
    get_current_user,
    get_refresh_cookie,
    rate_limit,
)
from tokenauth.config import Settings, get_settings
from tokenauth.core.auth.entities import User
from tokenauth.core.auth.services import AuthenticationService
from .schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    LogoutAllResponse,
    LogoutResponse,
    MeResponse,
    RefreshResponse,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger("tokenauth.api")

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the refresh token as an HttpOnly cookie on the whole site."""
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=settings.refresh_token_max_age,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    """Expire the refresh cookie with the same attributes it was set with."""
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def _user_agent(request: Request) -> Optional[str]:
    agent = request.headers.get("user-agent")
    return agent[:512] if agent else None


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create an account, open its first session and return an access token.",
    responses={
        201: {"description": "User created; refresh token set as cookie"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"model": ErrorResponse, "description": "Invalid input data"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
    dependencies=[Depends(rate_limit("register"))],
)
async def register(
    payload: RegisterRequest,
    request: Request,
    response: Response,
    auth_service: AuthenticationService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """
    Register a new user account.

    Email addresses are unique. The response body carries the access token;
    the refresh token is only ever sent as an HttpOnly cookie.
    """
    result = await auth_service.register(
        email=payload.email,
        password=payload.password,
        role=payload.role,
        user_agent=_user_agent(request),
    )
    set_refresh_cookie(response, result.refresh_token, settings)
    return AuthResponse.from_result(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="User login",
    description="Authenticate by email and password and open a new session.",
    responses={
        200: {"description": "Login successful; refresh token set as cookie"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
    dependencies=[Depends(rate_limit("login"))],
)
async def login(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthenticationService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """
    Authenticate user credentials.

    Unknown emails and wrong passwords get the same response.
    """
    result = await auth_service.login(
        email=credentials.email,
        password=credentials.password,
        user_agent=_user_agent(request),
    )
    set_refresh_cookie(response, result.refresh_token, settings)
    return AuthResponse.from_result(result)


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    summary="Refresh access token",
    description="Exchange the refresh cookie for a new access token and rotate the cookie.",
    responses={
        200: {"description": "Token refreshed; cookie replaced"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, expired or revoked refresh token"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
    dependencies=[Depends(rate_limit("refresh"))],
)
async def refresh(
    response: Response,
    refresh_token: Optional[str] = Depends(get_refresh_cookie),
    auth_service: AuthenticationService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> RefreshResponse:
    """
    Refresh the access token.

    The presented refresh token is single use: a second request with the
    same cookie is rejected.
    """
    token_pair = await auth_service.refresh(refresh_token)
    set_refresh_cookie(response, token_pair.refresh_token, settings)
    return RefreshResponse(access_token=token_pair.access_token)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="User logout",
    description="Revoke the session behind the refresh cookie and clear the cookie.",
    responses={
        200: {"description": "Logged out"},
        401: {"model": ErrorResponse, "description": "No refresh token provided"},
    },
)
async def logout(
    response: Response,
    refresh_token: Optional[str] = Depends(get_refresh_cookie),
    auth_service: AuthenticationService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> LogoutResponse:
    """
    Log out of the current device.

    Logging out twice, or with a token that no longer matches a session,
    still succeeds.
    """
    await auth_service.logout(refresh_token)
    clear_refresh_cookie(response, settings)
    return LogoutResponse(success=True)


@router.post(
    "/logout-all",
    response_model=LogoutAllResponse,
    summary="Log out everywhere",
    description="Revoke every active session of the authenticated user.",
    responses={
        200: {"description": "All sessions revoked"},
        401: {"model": ErrorResponse, "description": "Invalid access token"},
    },
)
async def logout_all(
    response: Response,
    current_user: User = Depends(get_current_user),
    auth_service: AuthenticationService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> LogoutAllResponse:
    """Revoke all sessions of the current user."""
    revoked = await auth_service.revoke_user_sessions(current_user.id)
    clear_refresh_cookie(response, settings)
    return LogoutAllResponse(success=True, revoked=revoked)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current user",
    description="Return the user the bearer access token belongs to.",
    responses={
        200: {"description": "Current user"},
        401: {"model": ErrorResponse, "description": "Invalid access token"},
    },
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> MeResponse:
    """Get current user information."""
    return MeResponse(user=UserResponse.from_entity(current_user))
