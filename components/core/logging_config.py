"""Logging setup for the API process and the maintenance scripts."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from components.core import config

APP_LOGGERS = ("components", "restapi", "scripts")

THIRD_PARTY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "aiosqlite",
    "uvicorn.access",
    "httpx",
    "httpcore",
    "google",
    "firebase_admin",
)


def setup_logging(
    log_level: Optional[str] = None,
    third_party_log_level: str = "WARNING",
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure the application loggers.

    Module loggers are created with ``logging.getLogger(__name__)``, so the
    top-level package loggers carry the handlers.

    Args:
        log_level: Level for application logs (default: LOG_LEVEL setting)
        third_party_log_level: Level for library loggers
        log_file: Optional rotating log file (default: LOG_FILE setting)
        max_file_size: Size in bytes before the file is rotated
        backup_count: Number of rotated files to keep

    Returns:
        The ``components`` logger
    """
    settings = config.get_settings()
    log_level = log_level or settings.LOG_LEVEL
    log_file = log_file or settings.LOG_FILE

    app_level = getattr(logging, log_level.upper(), logging.INFO)
    third_party_level = getattr(logging, third_party_log_level.upper(), logging.WARNING)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for name in APP_LOGGERS:
        app_logger = logging.getLogger(name)
        app_logger.setLevel(app_level)
        app_logger.handlers.clear()
        for handler in handlers:
            app_logger.addHandler(handler)
        app_logger.propagate = False

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return logging.getLogger(APP_LOGGERS[0])
