"""Authentication exceptions.

Every failure carries an ``AuthErrorKind`` so callers outside FastAPI can
branch on the kind without importing any HTTP machinery.
"""

from typing import Optional

from tokenauth.core.domain.enums import AuthErrorKind
from tokenauth.core.exceptions import DomainException


class AuthenticationException(DomainException):
    """Base exception for authentication errors."""

    kind: AuthErrorKind = AuthErrorKind.INVALID_TOKEN

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message, details)


class InvalidCredentialsException(AuthenticationException):
    """Raised when login credentials are invalid.

    Unknown email and wrong password produce the same message.
    """

    kind = AuthErrorKind.INVALID_CREDENTIALS

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class EmailAlreadyRegisteredException(AuthenticationException):
    """Raised when registering an email that already has an account."""

    kind = AuthErrorKind.EMAIL_ALREADY_REGISTERED

    def __init__(self, email: str) -> None:
        super().__init__("Email already registered", f"email={email}")
        self.email = email


class InvalidRefreshTokenException(AuthenticationException):
    """Raised when a refresh token cannot be used."""

    kind = AuthErrorKind.INVALID_REFRESH_TOKEN

    def __init__(
        self, details: str = "not found", message: str = "Invalid refresh token"
    ) -> None:
        super().__init__(message, details)


class ExpiredOrRevokedRefreshTokenException(InvalidRefreshTokenException):
    """Raised when a refresh token matches a revoked or expired session."""

    def __init__(self, details: str = "expired or revoked") -> None:
        super().__init__(details)


class MissingCredentialException(InvalidRefreshTokenException):
    """Raised when no refresh token was presented."""

    kind = AuthErrorKind.MISSING_CREDENTIAL

    def __init__(self) -> None:
        super().__init__("no cookie", "No refresh token provided")


class InvalidTokenException(AuthenticationException):
    """Raised when an access token fails verification for any reason."""

    kind = AuthErrorKind.INVALID_TOKEN

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__("Invalid token", details)
