"""
Logging setup utility

Common logging configuration for the web process and the CLI helpers.
- Console: INFO level
- File: INFO level (TimedRotatingFileHandler, daily)

Usage:
    from core.logging import setup_logging
    setup_logging("web")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # keep at most 7 days of files

# Loggers that produce too much output (level lowered)
NOISY_LOGGERS = [
    "aiosqlite",      # executing/completed per query
    "httpcore",
    "httpx",
    "asyncio",
    "uvicorn.access",
]


def get_log_dir(process_name: str) -> Path:
    """Log directory for a process

    Args:
        process_name: process name ("web" or anything else)

    Returns:
        log directory Path
    """
    if process_name == "web":
        return Paths.WEB_LOGS_DIR
    return Paths.LOGS_DIR


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Initialize logging

    Writes the file log into the process log directory,
    rolling over daily at midnight.

    Args:
        process_name: process name ("web" etc.)
        console_level: console log level (default: INFO)
        file_level: file log level (default: INFO)
        log_dir: override the log directory (tests)

    Returns:
        configured root Logger
    """
    if log_dir is None:
        log_dir = get_log_dir(process_name)

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{process_name}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers do the filtering

    # Drop existing handlers (avoid duplicates)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # 1. Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # 2. File handler (daily)
    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"  # backup name: web.log.2026-02-21
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # 3. Quiet noisy loggers
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized: {process_name}")
    root_logger.info(f"  - console: {logging.getLevelName(console_level)}")
    root_logger.info(f"  - file: {log_file} ({logging.getLevelName(file_level)}, daily rotation)")
    root_logger.info(f"  - retention: {LOG_FILE_BACKUP_COUNT} days")

    return root_logger


def get_log_file_path(process_name: str) -> Path:
    """Log file path for a process

    Args:
        process_name: process name

    Returns:
        log file Path
    """
    return get_log_dir(process_name) / f"{process_name}.log"
