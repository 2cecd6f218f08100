"""Logging setup for the lrpc command line."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

logger = logging.getLogger(__name__)

LOGGER_NAME = "lrpc"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int = logging.INFO,
    log_dir: Path | None = None,
) -> Path | None:
    """Configure the lrpc logger namespace.

    Console output goes to stderr. When log_dir is given, the same records
    are also written to `{log_dir}/server.log` with automatic rotation
    (max 5MB per file, 3 backup files).

    Calling this again replaces the handlers from the previous call.

    Args:
        level: Logging level for all handlers.
        log_dir: Directory for server.log. Created if it doesn't exist.

    Returns:
        Path to the server.log file, or None when logging to console only.
    """
    lrpc_logger = logging.getLogger(LOGGER_NAME)
    lrpc_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates on reconfigure
    for handler in list(lrpc_logger.handlers):
        lrpc_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    lrpc_logger.addHandler(console_handler)

    log_file: Path | None = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "server.log"
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        lrpc_logger.addHandler(file_handler)

    # Don't propagate to root logger
    lrpc_logger.propagate = False

    if log_file is not None:
        logger.info("Logging to %s", log_file)
    return log_file
