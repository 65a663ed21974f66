"""Authentication domain entities."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from tokenauth.core.domain.enums import SessionStatus, UserRole
from tokenauth.utils.clock import utcnow


@dataclass(frozen=True)
class User:
    """
    User entity for authentication.

    Attributes:
        id: Unique user identifier
        email: Unique, case-sensitive email address
        hashed_password: Bcrypt password hash
        role: Role claim embedded in access tokens
        created_at: Account creation timestamp
    """

    id: int
    email: str
    hashed_password: str
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate user data after initialization."""
        if not self.email:
            raise ValueError("Email cannot be empty")
        if not self.hashed_password:
            raise ValueError("Hashed password cannot be empty")
        if "@" not in self.email:
            raise ValueError("Invalid email format")


@dataclass(frozen=True)
class Session:
    """
    Persisted refresh session, one per login or registration.

    The token value changes on every rotation; the row itself represents
    the whole refresh chain of one device.

    Attributes:
        id: Unique session identifier
        user_id: Owning user
        token: Current opaque refresh token
        expires_at: Expiry timestamp (naive UTC)
        status: ACTIVE until revoked
        user_agent: User-Agent of the client that opened the session
        created_at: Session creation timestamp
    """

    id: Optional[int]
    user_id: int
    token: str
    expires_at: datetime
    status: SessionStatus = SessionStatus.ACTIVE
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate session data."""
        if not self.token:
            raise ValueError("Token cannot be empty")
        if self.user_id <= 0:
            raise ValueError("User ID must be positive")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the session is expired; expiry at exactly now counts."""
        return self.expires_at <= (now or utcnow())

    def is_revoked(self) -> bool:
        """Check if the session has been revoked."""
        return self.status == SessionStatus.REVOKED

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        """Check if the session can still be exchanged for new tokens."""
        return not self.is_revoked() and not self.is_expired(now)


@dataclass(frozen=True)
class TokenPair:
    """
    Access and refresh token pair.

    Attributes:
        access_token: Signed JWT access token
        refresh_token: Opaque refresh token
        expires_in: Access token lifetime in seconds
    """

    access_token: str
    refresh_token: str
    expires_in: int = 900

    def __post_init__(self) -> None:
        """Validate token pair data."""
        if not self.access_token:
            raise ValueError("Access token cannot be empty")
        if not self.refresh_token:
            raise ValueError("Refresh token cannot be empty")


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful login or registration."""

    user: User
    tokens: TokenPair

    @property
    def access_token(self) -> str:
        return self.tokens.access_token

    @property
    def refresh_token(self) -> str:
        return self.tokens.refresh_token


@dataclass(frozen=True)
class TokenPayload:
    """
    Verified access token claims.

    Attributes:
        sub: Subject (user ID as string)
        role: Role claim
        exp: Expiration timestamp
        iat: Issued at timestamp
        token_type: Type of token
    """

    sub: str
    role: UserRole
    exp: int
    iat: int
    token_type: str = "access"

    def __post_init__(self) -> None:
        """Validate token payload data."""
        if not self.sub:
            raise ValueError("Subject cannot be empty")
        if self.exp <= self.iat:
            raise ValueError("Expiration must be after issued time")
