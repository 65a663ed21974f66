"""Authentication service implementations."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from tokenauth.config import get_settings
from tokenauth.core.domain.enums import SessionStatus, UserRole
from tokenauth.core.exceptions import ConfigurationException
from tokenauth.utils.async_helpers import run_in_executor
from tokenauth.utils.clock import utcnow
from .entities import AuthResult, Session, TokenPair, TokenPayload, User
from .exceptions import (
    EmailAlreadyRegisteredException,
    ExpiredOrRevokedRefreshTokenException,
    InvalidCredentialsException,
    InvalidRefreshTokenException,
    InvalidTokenException,
    MissingCredentialException,
)
from .interfaces import (
    PasswordServiceInterface,
    SessionRepositoryInterface,
    TokenServiceInterface,
    UserRepositoryInterface,
)

logger = logging.getLogger("tokenauth.auth")

REFRESH_TOKEN_BYTES = 40


class PasswordService(PasswordServiceInterface):
    """
    BCrypt-based password hashing service.

    Hashing and verification run in the default executor so a slow bcrypt
    round does not block other requests on the event loop.
    """

    def __init__(self, rounds: Optional[int] = None) -> None:
        """
        Initialize password context with bcrypt.

        Args:
            rounds: Bcrypt cost factor (defaults to settings)
        """
        if rounds is None:
            rounds = get_settings().bcrypt_rounds
        self._pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )
        self._dummy_hash: Optional[str] = None

    async def hash_password(self, password: str) -> str:
        """
        Hash a password securely using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        return await run_in_executor(self._pwd_context.hash, password)

    async def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify password against bcrypt hash.

        Args:
            password: Plain text password
            hashed_password: Stored password hash

        Returns:
            True if password matches, False otherwise
        """
        return await run_in_executor(
            self._pwd_context.verify, password, hashed_password
        )

    async def dummy_verify(self, password: str) -> None:
        """Run one verification against a throwaway hash."""
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash_password(secrets.token_hex(16))
        await self.verify_password(password, self._dummy_hash)


class TokenService(TokenServiceInterface):
    """
    Issues HS256 access tokens and opaque refresh tokens.

    The signing secret is process-wide; a missing secret is a startup error,
    never a per-request one.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ) -> None:
        """
        Initialize token service.

        Args:
            secret_key: JWT signing secret (defaults to settings)
            algorithm: JWT algorithm (defaults to settings)
            access_token_expire_minutes: Access token lifetime (defaults to settings)

        Raises:
            ConfigurationException: If no signing secret is available
        """
        if secret_key is None or algorithm is None or access_token_expire_minutes is None:
            settings = get_settings()
            secret_key = secret_key if secret_key is not None else settings.jwt_secret_key
            algorithm = algorithm or settings.jwt_algorithm
            if access_token_expire_minutes is None:
                access_token_expire_minutes = settings.access_token_expire_minutes

        if not secret_key:
            raise ConfigurationException("JWT_SECRET_KEY", "signing secret is missing")

        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes

    @property
    def access_token_lifetime(self) -> int:
        return self._access_token_expire_minutes * 60

    def issue_access_token(self, user_id: int, role: UserRole) -> str:
        """
        Create JWT access token.

        Args:
            user_id: Subject of the token
            role: Role claim

        Returns:
            JWT access token string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + timedelta(minutes=self._access_token_expire_minutes),
            "type": "access",
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def generate_refresh_token(self) -> str:
        """Return 40 random bytes as hex."""
        return secrets.token_hex(REFRESH_TOKEN_BYTES)

    def verify_access_token(self, token: str) -> TokenPayload:
        """
        Decode and validate JWT access token.

        Args:
            token: JWT token string

        Returns:
            Token payload data

        Raises:
            InvalidTokenException: On any verification failure
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            raise InvalidTokenException(f"decode error: {e}")

        if payload.get("type") != "access":
            raise InvalidTokenException("not an access token")

        try:
            return TokenPayload(
                sub=payload["sub"],
                role=UserRole(payload["role"]),
                exp=int(payload["exp"]),
                iat=int(payload["iat"]),
                token_type=payload["type"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenException(f"bad claims: {e}")


class AuthenticationService:
    """
    Owns the register/login/refresh/logout protocol.

    Holds no state between requests: repositories are request-scoped and
    every session mutation is delegated to a conditional update in storage.
    """

    def __init__(
        self,
        user_repository: UserRepositoryInterface,
        session_repository: SessionRepositoryInterface,
        password_service: PasswordServiceInterface,
        token_service: TokenServiceInterface,
        refresh_token_expire_days: int = 7,
        require_token_on_logout: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """
        Initialize authentication service.

        Args:
            user_repository: User data access interface
            session_repository: Session data access interface
            password_service: Password hashing service
            token_service: Token issuer
            refresh_token_expire_days: Refresh session lifetime
            require_token_on_logout: Reject logout calls without a token
            clock: Source of "now" (naive UTC)
        """
        self._user_repository = user_repository
        self._session_repository = session_repository
        self._password_service = password_service
        self._token_service = token_service
        self._refresh_ttl = timedelta(days=refresh_token_expire_days)
        self._require_token_on_logout = require_token_on_logout
        self._clock = clock

    async def register(
        self,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
        user_agent: Optional[str] = None,
    ) -> AuthResult:
        """
        Register a new account and open its first session.

        Args:
            email: Unique email address
            password: Plain text password
            role: Role claim for the account
            user_agent: Client User-Agent, stored on the session

        Returns:
            Created user with a fresh token pair

        Raises:
            EmailAlreadyRegisteredException: If the email is taken
        """
        if await self._user_repository.get_user_by_email(email):
            logger.info("Registration rejected: email already registered")
            raise EmailAlreadyRegisteredException(email)

        hashed_password = await self._password_service.hash_password(password)
        user = await self._user_repository.create_user(
            User(id=0, email=email, hashed_password=hashed_password, role=role)
        )

        tokens = await self._open_session(user, user_agent)
        logger.info("User registered", extra={"user_id": user.id, "role": user.role.value})
        return AuthResult(user=user, tokens=tokens)

    async def login(
        self, email: str, password: str, user_agent: Optional[str] = None
    ) -> AuthResult:
        """
        Authenticate by email and password and open a new session.

        Args:
            email: Email address
            password: Plain text password
            user_agent: Client User-Agent, stored on the session

        Returns:
            Authenticated user with a fresh token pair

        Raises:
            InvalidCredentialsException: If the email is unknown or the
                password does not match
        """
        user = await self._user_repository.get_user_by_email(email)

        if user is None:
            await self._password_service.dummy_verify(password)
            logger.info("Login failed")
            raise InvalidCredentialsException()

        if not await self._password_service.verify_password(password, user.hashed_password):
            logger.info("Login failed", extra={"user_id": user.id})
            raise InvalidCredentialsException()

        tokens = await self._open_session(user, user_agent)
        logger.info("Login succeeded", extra={"user_id": user.id})
        return AuthResult(user=user, tokens=tokens)

    async def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        """
        Exchange a refresh token for a new access token and rotate it.

        The presented token stops matching any session once this returns.

        Args:
            refresh_token: Token from the refresh cookie

        Returns:
            New access token and the replacement refresh token

        Raises:
            MissingCredentialException: If no token was presented
            ExpiredOrRevokedRefreshTokenException: If the session is revoked
                or expired
            InvalidRefreshTokenException: If no session matches, including
                when a concurrent refresh rotated it first
        """
        if not refresh_token:
            raise MissingCredentialException()

        now = self._clock()
        session = await self._session_repository.get_session_by_token(refresh_token)
        if session is None:
            logger.warning("Refresh rejected: unknown token")
            raise InvalidRefreshTokenException()

        if not session.is_usable(now):
            reason = "revoked" if session.is_revoked() else "expired"
            logger.warning(
                "Refresh rejected: session %s", reason, extra={"session_id": session.id}
            )
            raise ExpiredOrRevokedRefreshTokenException(reason)

        user = await self._user_repository.get_user_by_id(session.user_id)
        if user is None:
            raise InvalidRefreshTokenException("session owner missing")

        new_refresh_token = self._token_service.generate_refresh_token()
        rotated = await self._session_repository.update_session_token(
            refresh_token, new_refresh_token, now
        )
        if not rotated:
            logger.warning(
                "Refresh rejected: token rotated concurrently",
                extra={"session_id": session.id},
            )
            raise InvalidRefreshTokenException("already rotated")

        logger.info("Refresh token rotated", extra={"session_id": session.id})
        return self._token_pair(user, new_refresh_token)

    async def logout(self, refresh_token: Optional[str]) -> bool:
        """
        Revoke the session behind a refresh token.

        Repeating the call, or presenting an unknown token, is a no-op.

        Args:
            refresh_token: Token from the refresh cookie

        Returns:
            True if a session was revoked by this call

        Raises:
            MissingCredentialException: If no token was presented and the
                service requires one
        """
        if not refresh_token:
            if self._require_token_on_logout:
                raise MissingCredentialException()
            return False

        revoked = await self._session_repository.set_session_status(
            refresh_token, SessionStatus.REVOKED
        )
        if revoked:
            logger.info("Session revoked")
        return revoked

    async def get_current_user(self, access_token: str) -> User:
        """
        Resolve the user behind an access token.

        Args:
            access_token: Bearer JWT

        Returns:
            Current user entity

        Raises:
            InvalidTokenException: For any failure, including unknown subject
        """
        payload = self._token_service.verify_access_token(access_token)

        try:
            user_id = int(payload.sub)
        except ValueError:
            raise InvalidTokenException("non-numeric subject")

        user = await self._user_repository.get_user_by_id(user_id)
        if user is None:
            raise InvalidTokenException("unknown subject")
        return user

    async def revoke_user_sessions(self, user_id: int) -> int:
        """
        Revoke every active session of a user.

        Args:
            user_id: User identifier

        Returns:
            Number of sessions revoked
        """
        count = await self._session_repository.revoke_user_sessions(user_id)
        logger.info("Revoked all sessions", extra={"user_id": user_id, "count": count})
        return count

    async def cleanup_expired_sessions(self) -> int:
        """Delete sessions that are past their expiry."""
        return await self._session_repository.delete_expired_sessions(self._clock())

    async def _open_session(self, user: User, user_agent: Optional[str]) -> TokenPair:
        refresh_token = self._token_service.generate_refresh_token()
        await self._session_repository.create_session(
            Session(
                id=None,
                user_id=user.id,
                token=refresh_token,
                expires_at=self._clock() + self._refresh_ttl,
                status=SessionStatus.ACTIVE,
                user_agent=user_agent,
            )
        )
        return self._token_pair(user, refresh_token)

    def _token_pair(self, user: User, refresh_token: str) -> TokenPair:
        return TokenPair(
            access_token=self._token_service.issue_access_token(user.id, user.role),
            refresh_token=refresh_token,
            expires_in=self._token_service.access_token_lifetime,
        )
