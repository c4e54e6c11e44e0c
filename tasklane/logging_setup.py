"""Console, rotating-file and audit logging."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from .config import IS_PROD, LOG_DIR, LOG_LEVEL


def setup_logging(app_instance, log_dir=LOG_DIR):
    """Configure structured logging for both console and rotating files.

    Returns the audit logger, which records authentication events only.
    """
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Rotating file handler (10 MB per file, keep 5 backups)
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "app.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    audit_handler = RotatingFileHandler(
        os.path.join(log_dir, "audit.log"),
        maxBytes=5 * 1024 * 1024,
        backupCount=10,
        encoding="utf-8",
    )
    audit_handler.setFormatter(formatter)
    audit_handler.setLevel(logging.INFO)

    # Flask's own logger plus the package loggers (tasklane.tasks, ...)
    for logger in (app_instance.logger, logging.getLogger("tasklane")):
        logger.handlers.clear()
        logger.addHandler(file_handler)
        logger.addHandler(console_handler)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

    audit = logging.getLogger("audit")
    audit.handlers.clear()
    audit.addHandler(audit_handler)
    audit.addHandler(console_handler)
    audit.setLevel(logging.INFO)
    audit.propagate = False

    if IS_PROD:
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    return audit
