"""Refresh session repository implementation."""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tokenauth.core.auth.entities import Session
from tokenauth.core.auth.interfaces import SessionRepositoryInterface
from tokenauth.core.domain.enums import SessionStatus
from tokenauth.infrastructure.database.models import SessionModel
from tokenauth.utils.clock import utcnow


class SqlSessionRepository(SessionRepositoryInterface):
    """
    SQLAlchemy implementation of the session store.

    Rotation and revocation are single ``UPDATE ... WHERE`` statements whose
    affected row count decides the outcome, so two requests racing on the same
    token cannot both win, even across server instances.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize session repository.

        Args:
            session: Database session
        """
        self._session = session

    async def create_session(self, session: Session) -> Session:
        session_model = SessionModel(
            user_id=session.user_id,
            token=session.token,
            expires_at=session.expires_at,
            status=session.status,
            user_agent=session.user_agent,
        )

        self._session.add(session_model)
        await self._session.flush()
        return self._model_to_entity(session_model)

    async def get_session_by_token(self, token: str) -> Optional[Session]:
        result = await self._session.execute(
            select(SessionModel).where(SessionModel.token == token)
        )
        session_model = result.scalar_one_or_none()

        if session_model:
            return self._model_to_entity(session_model)
        return None

    async def update_session_token(
        self, current_token: str, new_token: str, now: datetime
    ) -> bool:
        """
        Rotate the token of an active, unexpired session.

        Args:
            current_token: Token presented by the client
            new_token: Replacement token
            now: Reference time; sessions expiring at or before it are skipped

        Returns:
            True if exactly one row was rotated
        """
        result = await self._session.execute(
            update(SessionModel)
            .where(
                and_(
                    SessionModel.token == current_token,
                    SessionModel.status == SessionStatus.ACTIVE,
                    SessionModel.expires_at > now,
                )
            )
            .values(token=new_token, updated_at=utcnow())
        )
        return result.rowcount == 1

    async def set_session_status(self, token: str, status: SessionStatus) -> bool:
        """
        Move an active session to ``status``.

        Only ACTIVE rows match, so a revoked session is never touched twice.

        Returns:
            True if a row changed state
        """
        result = await self._session.execute(
            update(SessionModel)
            .where(
                and_(
                    SessionModel.token == token,
                    SessionModel.status == SessionStatus.ACTIVE,
                )
            )
            .values(status=status, updated_at=utcnow())
        )
        return result.rowcount > 0

    async def revoke_user_sessions(self, user_id: int) -> int:
        result = await self._session.execute(
            update(SessionModel)
            .where(
                and_(
                    SessionModel.user_id == user_id,
                    SessionModel.status == SessionStatus.ACTIVE,
                )
            )
            .values(status=SessionStatus.REVOKED, updated_at=utcnow())
        )
        return result.rowcount

    async def delete_expired_sessions(self, now: datetime) -> int:
        result = await self._session.execute(
            delete(SessionModel).where(SessionModel.expires_at <= now)
        )
        return result.rowcount

    def _model_to_entity(self, model: SessionModel) -> Session:
        """
        Convert database model to domain entity.

        Args:
            model: Session database model

        Returns:
            Session domain entity
        """
        return Session(
            id=model.id,
            user_id=model.user_id,
            token=model.token,
            expires_at=model.expires_at,
            status=model.status,
            user_agent=model.user_agent,
            created_at=model.created_at,
        )
