"""
Centralized Logging Configuration for the web search pipeline.

All Python logging goes to the console and to a rotating file:

    logs/web_search/system.log

Usage in any module:
    from libs.core.logging_config import setup_logging

    # Call once at startup (CLI, host application)
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("My message")
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# =============================================================================
# Configuration
# =============================================================================

LOG_DIR = Path("logs/web_search")
SYSTEM_LOG_FILE = LOG_DIR / "system.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB per file
BACKUP_COUNT = 5

DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)-20s | %(message)s"
CONSOLE_DATE_FORMAT = "%H:%M:%S"

# =============================================================================
# Global State
# =============================================================================

_logging_configured = False


def setup_logging(
    level: Optional[str] = None,
    log_to_console: bool = True,
    log_to_file: bool = True,
    service_name: str = "web_search",
) -> None:
    """
    Configure logging for the process.

    Safe to call more than once; only the first call has an effect.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO.
        log_to_console: Whether to log to stderr (default True)
        log_to_file: Whether to log to system.log (default True)
        service_name: Logger name used for the startup marker
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            SYSTEM_LOG_FILE,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root_logger.addHandler(file_handler)

    # stdout carries the report in CLI mode, so logs go to stderr
    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, CONSOLE_DATE_FORMAT))
        root_logger.addHandler(console_handler)

    # Playwright's driver and asyncio are chatty at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("playwright").setLevel(logging.WARNING)

    _logging_configured = True

    logger = logging.getLogger(service_name)
    logger.info(f"Logging initialized for {service_name} (level={level.upper()})")


# =============================================================================
# Convenience Functions
# =============================================================================


def log_request_start(logger: logging.Logger, trace_id: str, query: str, mode: str = "web_search"):
    """Log the start of a request with standard format."""
    logger.info(f"[{trace_id}] REQUEST START | mode={mode} | query={query[:100]}")


def log_request_end(logger: logging.Logger, trace_id: str, success: bool, elapsed_ms: float):
    """Log the end of a request with standard format."""
    status = "SUCCESS" if success else "FAILED"
    logger.info(f"[{trace_id}] REQUEST END | {status} | elapsed={elapsed_ms:.0f}ms")
