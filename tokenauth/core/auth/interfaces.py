"""Authentication service interfaces."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from tokenauth.core.domain.enums import SessionStatus, UserRole
from .entities import Session, TokenPayload, User


class PasswordServiceInterface(ABC):
    """Interface for password hashing and verification."""

    @abstractmethod
    async def hash_password(self, password: str) -> str:
        """
        Hash a password securely.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        pass

    @abstractmethod
    async def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify password against hash.

        Args:
            password: Plain text password
            hashed_password: Stored password hash

        Returns:
            True if password matches, False otherwise
        """
        pass

    @abstractmethod
    async def dummy_verify(self, password: str) -> None:
        """
        Spend the cost of one verification without a stored hash.

        Keeps "unknown email" as slow as "wrong password".

        Args:
            password: Plain text password supplied by the caller
        """
        pass


class TokenServiceInterface(ABC):
    """Interface for access and refresh token issuance."""

    @abstractmethod
    def issue_access_token(self, user_id: int, role: UserRole) -> str:
        """
        Create a signed access token.

        Args:
            user_id: Subject of the token
            role: Role claim

        Returns:
            Signed JWT string
        """
        pass

    @abstractmethod
    def generate_refresh_token(self) -> str:
        """
        Generate an opaque, high-entropy refresh token.

        Returns:
            Hex-encoded random token
        """
        pass

    @abstractmethod
    def verify_access_token(self, token: str) -> TokenPayload:
        """
        Verify signature and expiry of an access token.

        Args:
            token: JWT string

        Returns:
            Verified claims

        Raises:
            InvalidTokenException: If the token is malformed, forged or expired
        """
        pass

    @property
    @abstractmethod
    def access_token_lifetime(self) -> int:
        """Access token lifetime in seconds."""
        pass


class UserRepositoryInterface(ABC):
    """Interface for user data access operations."""

    @abstractmethod
    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User identifier

        Returns:
            User entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email.

        Args:
            email: Email address (exact match)

        Returns:
            User entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """
        Create new user.

        Args:
            user: User entity to create

        Returns:
            Created user entity with ID

        Raises:
            EmailAlreadyRegisteredException: If the email is already taken
        """
        pass


class SessionRepositoryInterface(ABC):
    """Interface for refresh session data access operations.

    Every mutation is a single conditional statement so that concurrent
    callers presenting the same token cannot both succeed.
    """

    @abstractmethod
    async def create_session(self, session: Session) -> Session:
        """
        Persist a new session.

        Args:
            session: Session entity

        Returns:
            Saved session with ID
        """
        pass

    @abstractmethod
    async def get_session_by_token(self, token: str) -> Optional[Session]:
        """
        Get session by exact token match.

        Args:
            token: Refresh token string

        Returns:
            Session entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_session_token(
        self, current_token: str, new_token: str, now: datetime
    ) -> bool:
        """
        Replace the token of an active, unexpired session.

        Args:
            current_token: Token presented by the client
            new_token: Replacement token
            now: Reference time for the expiry check

        Returns:
            True if exactly one session was rotated, False otherwise
        """
        pass

    @abstractmethod
    async def set_session_status(self, token: str, status: SessionStatus) -> bool:
        """
        Move an active session to ``status``.

        Args:
            token: Refresh token string
            status: Target status

        Returns:
            True if a session changed state, False if none matched
        """
        pass

    @abstractmethod
    async def revoke_user_sessions(self, user_id: int) -> int:
        """
        Revoke all active sessions of a user.

        Args:
            user_id: User identifier

        Returns:
            Number of sessions revoked
        """
        pass

    @abstractmethod
    async def delete_expired_sessions(self, now: datetime) -> int:
        """
        Remove sessions that expired at or before ``now``.

        Returns:
            Number of sessions removed
        """
        pass
