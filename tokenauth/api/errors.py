"""HTTP rendering of authentication failures."""

from typing import Dict, Optional

from fastapi import status
from fastapi.responses import JSONResponse

from tokenauth.core.auth.exceptions import AuthenticationException
from tokenauth.core.domain.enums import AuthErrorKind

AUTH_ERROR_STATUS: Dict[AuthErrorKind, int] = {
    AuthErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.EMAIL_ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    AuthErrorKind.INVALID_REFRESH_TOKEN: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.MISSING_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
}


def error_body(code: str, message: str) -> dict:
    """Build the error envelope shared by every failure response."""
    return {"error": {"code": code, "message": message}}


def auth_error_response(
    exc: AuthenticationException, headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """
    Render an authentication failure.

    Only the kind and the public message leave the process; ``exc.details``
    is for logs.
    """
    if exc.kind == AuthErrorKind.INVALID_TOKEN:
        headers = {**(headers or {}), "WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=AUTH_ERROR_STATUS.get(exc.kind, status.HTTP_401_UNAUTHORIZED),
        content=error_body(exc.kind.value, exc.message),
        headers=headers,
    )
