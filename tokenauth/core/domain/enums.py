"""Domain enums for the authentication service."""

from enum import Enum


class UserRole(str, Enum):
    """Role claim carried by every user and access token."""

    ADMIN = "ADMIN"
    USER = "USER"


class SessionStatus(str, Enum):
    """Refresh session lifecycle status."""

    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"


class AuthErrorKind(str, Enum):
    """Tag attached to every authentication failure."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
