"""Database initialization utilities."""

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from alembic import command
from alembic.config import Config

from tokenauth.core.auth.entities import User
from tokenauth.core.auth.services import PasswordService
from tokenauth.core.domain.enums import UserRole
from tokenauth.infrastructure.database.repositories.user_repository import SqlUserRepository
from tokenauth.infrastructure.database.session import get_session_maker

logger = logging.getLogger("tokenauth.db")

DEFAULT_SEED_USERS: List[Tuple[str, str, UserRole]] = [
    ("admin@example.com", "admin123", UserRole.ADMIN),
    ("user@example.com", "user123", UserRole.USER),
]


def get_alembic_config() -> Config:
    """Get Alembic configuration from the project root."""
    project_root = Path(__file__).resolve().parents[3]
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    return alembic_cfg


def run_alembic_migrations() -> None:
    """Run all pending Alembic migrations."""
    command.upgrade(get_alembic_config(), "head")


async def seed_users(
    users: Iterable[Tuple[str, str, UserRole]] = DEFAULT_SEED_USERS,
) -> List[str]:
    """
    Create accounts that do not exist yet.

    Args:
        users: (email, password, role) triples

    Returns:
        Emails of the accounts that were created
    """
    password_service = PasswordService()
    created: List[str] = []

    async with get_session_maker()() as session:
        repo = SqlUserRepository(session)
        for email, password, role in users:
            if await repo.get_user_by_email(email):
                logger.info("Seed user already present: %s", email)
                continue
            hashed = await password_service.hash_password(password)
            await repo.create_user(
                User(id=0, email=email, hashed_password=hashed, role=role)
            )
            created.append(email)
        await session.commit()

    logger.info("Seeded %d users", len(created))
    return created
