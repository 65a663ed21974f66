"""Authentication database models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tokenauth.core.domain.enums import SessionStatus, UserRole
from tokenauth.utils.clock import utcnow
from .connection import Base


class UserModel(Base):
    """
    Database model for user accounts.

    Email is unique at the storage level; that constraint is the final word
    on duplicate registrations.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Unique user identifier"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        doc="User email address"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Bcrypt hashed password"
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=UserRole.USER,
        doc="Role claim"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="Account creation timestamp (UTC)"
    )

    def __repr__(self) -> str:
        """String representation of user model."""
        return f"<UserModel(id={self.id}, email='{self.email}', role={self.role.value})>"


class SessionModel(Base):
    """
    Database model for refresh sessions.

    One row per login/registration; the token column is rewritten on every
    rotation and the status column moves ACTIVE -> REVOKED once.
    """

    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Unique session identifier"
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="ID of user this session belongs to"
    )

    token: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
        doc="Current refresh token"
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        doc="Session expiration timestamp (UTC)"
    )

    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, name="session_status", native_enum=False, length=16),
        nullable=False,
        default=SessionStatus.ACTIVE,
        doc="ACTIVE or REVOKED"
    )

    user_agent: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        doc="User-Agent of the client that opened the session"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        doc="Session creation timestamp (UTC)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        doc="Last rotation or revocation timestamp (UTC)"
    )

    def __repr__(self) -> str:
        """String representation of session model."""
        return f"<SessionModel(id={self.id}, user_id={self.user_id}, status={self.status.value})>"
