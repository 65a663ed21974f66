"""Celery application configuration for background maintenance."""

from celery import Celery
from celery.signals import setup_logging

from tokenauth.config import get_settings

settings = get_settings()

celery_app = Celery(
    "tokenauth",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["tokenauth.infrastructure.tasks.maintenance_tasks"],
)

celery_app.conf.update(
    task_routes={
        "tokenauth.infrastructure.tasks.maintenance_tasks.*": {"queue": "maintenance"},
    },

    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    worker_prefetch_multiplier=1,
    task_acks_late=True,

    result_expires=3600,

    beat_schedule={
        "cleanup-expired-sessions": {
            "task": "tokenauth.infrastructure.tasks.maintenance_tasks.cleanup_expired_sessions",
            "schedule": 3600.0,  # hourly
        },
    },
)


@setup_logging.connect
def config_loggers(*args, **kwargs):
    """Configure Celery logging."""
    from logging.config import dictConfig
    from tokenauth.utils.logging import get_logging_config

    dictConfig(get_logging_config())
