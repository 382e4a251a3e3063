"""
Logging setup for the application process.
"""
from __future__ import annotations

import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    level = logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Engine echo is noisy; raise it only in debug mode.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )
