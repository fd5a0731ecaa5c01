"""
Logging configuration
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional
from core.config import settings

IMPORT_ERRORS_LOGGER = "import_errors"


class ErrorContextFormatter(logging.Formatter):
    """Append the ``error_context`` passed via ``extra`` as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = getattr(record, "error_context", None)
        if context is not None:
            message += " | " + json.dumps(context, default=str, ensure_ascii=False)
        return message


def get_import_error_logger() -> logging.Logger:
    """Dedicated channel for rejected products and failed batches"""
    return logging.getLogger(IMPORT_ERRORS_LOGGER)


def setup_logging(error_log_path: Optional[str] = None):
    """Configure application logging"""

    # Get log level from settings
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Set SQLAlchemy logging to WARNING to reduce noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    # Import errors go to their own file only
    path = Path(error_log_path or settings.IMPORT_ERROR_LOG_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)

    error_handler = logging.FileHandler(path, encoding="utf-8")
    error_handler.setFormatter(
        ErrorContextFormatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    error_logger = get_import_error_logger()
    error_logger.handlers.clear()
    error_logger.addHandler(error_handler)
    error_logger.setLevel(logging.INFO)
    error_logger.propagate = False

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL} level (import errors -> {path})")
