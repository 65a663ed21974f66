"""Logging configuration utilities."""

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict

from tokenauth.config import get_settings


def get_logging_config() -> Dict[str, Any]:
    """
    Get logging configuration dictionary.

    Returns:
        Logging configuration for dictConfig
    """
    settings = get_settings()
    formatter = "json" if settings.log_format == "json" else "standard"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "filename": str(Path(settings.log_dir) / "tokenauth.log"),
                "maxBytes": 10485760,
                "backupCount": 10,
            },
        },
        "loggers": {
            "tokenauth": {
                "level": settings.log_level,
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
            "celery": {
                "level": settings.log_level,
                "handlers": ["console", "file"],
                "propagate": False,
            },
        },
        "root": {
            "level": settings.log_level,
            "handlers": ["console"],
        },
    }


def setup_logging() -> None:
    """Create the log directory and apply the logging configuration."""
    Path(get_settings().log_dir).mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(get_logging_config())
    logging.getLogger("tokenauth").info("Logging configured successfully")
