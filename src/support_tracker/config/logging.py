"""Structured logging configuration using structlog."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.types import Processor


def setup_logging(
    level: str = "INFO",
    format_type: str = "structured",
    file_enabled: bool = False,
    file_path: str = "data/support_tracker.log",
    max_file_size: str = "10MB",
    backup_count: int = 5,
) -> None:
    """
    Set up application logging with structlog.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('structured' for JSON or 'plain' for console)
        file_enabled: Whether to also write to a rotating log file
        file_path: Path to log file
        max_file_size: Maximum size of log file before rotation (e.g. '10MB')
        backup_count: Number of rotated files to keep
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "structured":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if file_enabled:
        _setup_file_logging(file_path, max_file_size, backup_count, log_level)


def _setup_file_logging(
    file_path: str,
    max_file_size: str,
    backup_count: int,
    log_level: int,
) -> None:
    """Attach a rotating file handler to the root logger."""
    log_file = Path(file_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=parse_file_size(max_file_size),
        backupCount=backup_count,
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter("%(message)s"))

    logging.getLogger().addHandler(file_handler)


def parse_file_size(size_str: str) -> int:
    """Parse a size string such as '512KB' or '10MB' into bytes."""
    size_str = size_str.strip().upper()

    if size_str.endswith("KB"):
        return int(size_str[:-2]) * 1024
    elif size_str.endswith("MB"):
        return int(size_str[:-2]) * 1024 * 1024
    elif size_str.endswith("GB"):
        return int(size_str[:-2]) * 1024 * 1024 * 1024
    else:
        # Assume bytes
        return int(size_str)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually the calling module's __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_error(error: Exception, **context: Any) -> None:
    """Log an error with its type and message as structured fields."""
    logger = get_logger("error")
    logger.error(
        "Error occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        exc_info=True,
        **context,
    )
