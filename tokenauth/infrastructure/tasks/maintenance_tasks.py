"""Celery tasks for session maintenance."""

import logging
from typing import Dict

from tokenauth.infrastructure.tasks.celery_app import celery_app
from tokenauth.utils.async_helpers import run_async
from tokenauth.utils.clock import utcnow

logger = logging.getLogger("tokenauth.tasks")


@celery_app.task
def cleanup_expired_sessions() -> Dict:
    """
    Delete refresh sessions whose expiry has passed.

    Returns:
        Cleanup result with count of removed sessions
    """
    sessions_removed = run_async(purge_expired_sessions())
    logger.info("Expired sessions removed", extra={"count": sessions_removed})
    return {
        "status": "COMPLETED",
        "sessions_removed": sessions_removed,
        "completed_at": utcnow().isoformat(),
    }


async def purge_expired_sessions() -> int:
    """Delete expired sessions in their own transaction."""
    from tokenauth.infrastructure.database.repositories.session_repository import (
        SqlSessionRepository,
    )
    from tokenauth.infrastructure.database.session import (
        close_db_connections,
        get_session_maker,
    )

    try:
        async with get_session_maker()() as session:
            removed = await SqlSessionRepository(session).delete_expired_sessions(utcnow())
            await session.commit()
            return removed
    finally:
        await close_db_connections()
