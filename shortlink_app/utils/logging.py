"""Application-wide logging initialization

Call `initialize_logging()` once at startup (main.py, cleanup script)
before any other logging is done.

Logging format:
    2026-01-01 12:00:00,000 - shortlink_app.services.url_service - INFO - message
"""

import logging
import logging.config

from shortlink_app.config import settings


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def initialize_logging(level: str = None) -> None:
    log_level = (level or settings.log_level).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": LOG_FORMAT,
                }
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {
                "level": log_level,
                "handlers": ["stdout"],
            },
        }
    )
