"""Authentication API schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from tokenauth.core.auth.entities import AuthResult, User
from tokenauth.core.domain.enums import UserRole

# bcrypt ignores everything past this many bytes of input
PASSWORD_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class _CamelModel(BaseModel):
    """Response base rendering snake_case fields as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(BaseModel):
    """User registration request schema."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["test@example.com"]
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=PASSWORD_MAX_BYTES,
        description="Password (6 characters to 72 bytes)",
        examples=["strongPassword123"]
    )
    role: UserRole = Field(
        default=UserRole.USER,
        description="Account role",
        examples=["USER"]
    )

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        """Reject passwords bcrypt would silently truncate."""
        return _check_password_bytes(v)


class LoginRequest(BaseModel):
    """User login request schema."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["test@example.com"]
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=PASSWORD_MAX_BYTES,
        description="Password",
        examples=["strongPassword123"]
    )

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        """Reject passwords bcrypt would silently truncate."""
        return _check_password_bytes(v)


class UserResponse(_CamelModel):
    """Public view of a user; never includes the hash or any refresh token."""

    id: int = Field(..., description="User unique identifier", examples=[1])
    email: str = Field(..., description="User email address", examples=["user@example.com"])
    role: UserRole = Field(..., description="Account role", examples=["USER"])
    created_at: datetime = Field(
        ...,
        description="Account creation timestamp (ISO-8601, UTC)",
        examples=["2025-09-05T12:34:56.789000Z"]
    )

    @field_serializer("created_at")
    def _iso_utc(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            created_at=user.created_at or datetime.now(timezone.utc),
        )


class AuthResponse(_CamelModel):
    """Login/registration response; the refresh token travels as a cookie."""

    user: UserResponse
    access_token: str = Field(
        ...,
        description="JWT access token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            user=UserResponse.from_entity(result.user),
            access_token=result.access_token,
        )


class RefreshResponse(_CamelModel):
    """Token refresh response schema."""

    access_token: str = Field(..., description="New JWT access token")


class MeResponse(_CamelModel):
    """Current user response schema."""

    user: UserResponse


class LogoutResponse(BaseModel):
    """Logout response schema."""

    success: bool = Field(default=True, examples=[True])


class LogoutAllResponse(BaseModel):
    """Logout-everywhere response schema."""

    success: bool = Field(default=True, examples=[True])
    revoked: int = Field(..., description="Number of sessions revoked", examples=[3])


class ErrorDetail(BaseModel):
    """Error payload."""

    code: str = Field(..., examples=["INVALID_CREDENTIALS"])
    message: str = Field(..., examples=["Invalid credentials"])


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: ErrorDetail
