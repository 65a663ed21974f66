"""User repository implementation."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tokenauth.core.auth.entities import User
from tokenauth.core.auth.exceptions import EmailAlreadyRegisteredException
from tokenauth.core.auth.interfaces import UserRepositoryInterface
from tokenauth.infrastructure.database.models import UserModel


class SqlUserRepository(UserRepositoryInterface):
    """SQLAlchemy implementation of user repository."""

    def __init__(self, session: AsyncSession):
        """
        Initialize user repository.

        Args:
            session: Database session
        """
        self._session = session

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        result = await self._session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        user_model = result.scalar_one_or_none()

        if user_model:
            return self._model_to_entity(user_model)
        return None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        user_model = result.scalar_one_or_none()

        if user_model:
            return self._model_to_entity(user_model)
        return None

    async def create_user(self, user: User) -> User:
        """
        Create new user.

        Args:
            user: User entity to create

        Returns:
            Created user entity with ID

        Raises:
            EmailAlreadyRegisteredException: If the unique constraint on
                email rejects the insert
        """
        user_model = UserModel(
            email=user.email,
            hashed_password=user.hashed_password,
            role=user.role,
        )

        try:
            self._session.add(user_model)
            await self._session.flush()
        except IntegrityError:
            await self._session.rollback()
            raise EmailAlreadyRegisteredException(user.email)

        await self._session.refresh(user_model)
        return self._model_to_entity(user_model)

    def _model_to_entity(self, model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            hashed_password=model.hashed_password,
            role=model.role,
            created_at=model.created_at,
        )
