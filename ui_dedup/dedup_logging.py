"""Centralized logging configuration for the deduplication analyzer.

Provides:
- Console logging on stderr with an optional rotating log file
- Structured JSON logging support
- Per-stage category loggers (analyzer, similarity, clustering, ...)
- Debug context manager
"""

import json
import logging
import logging.handlers
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

ROOT_LOGGER_NAME = "ui_dedup"


class LogCategory(Enum):
    """Log categories for the analysis pipeline stages."""

    ANALYZER = "analyzer"
    SIMILARITY = "similarity"
    CLUSTERING = "clustering"
    REPORT = "report"
    CLI = "cli"
    PERFORMANCE = "performance"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Produces one JSON object per record with consistent fields and
    the pipeline's extra context (timings, counts) when present.
    """

    EXTRA_FIELDS = ("duration_ms", "operation", "component_count", "group_count")

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string representation of the log entry.
        """
        log_entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    level: str = "INFO",
    quiet: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
    log_format: str = "text",
    rotation_count: int = 3,
    max_bytes: int = 10485760,
) -> "logging.Logger":
    """Setup logging for the ``ui_dedup`` logger tree.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR).
        quiet: Suppress console output below ERROR.
        verbose: Enable debug-level console output.
        log_file: Optional log file path. No file is written when omitted.
        log_format: File output format ("text" or "json").
        rotation_count: Number of rotated backup files.
        max_bytes: Max file size before rotation (default 10MB).

    Returns:
        Configured package logger.
    """
    import logging.config

    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"
    else:
        effective_level = level.upper()

    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {"format": "%(levelname)s | %(message)s"},
            "json": {
                "()": JSONFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": effective_level,
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            ROOT_LOGGER_NAME: {
                "handlers": ["console"],
                "level": "DEBUG",
                "propagate": False,
            }
        },
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json" if log_format == "json" else "detailed",
            "level": "DEBUG",
            "filename": str(log_file),
            "maxBytes": max_bytes,
            "backupCount": rotation_count,
        }
        config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_logger() -> "logging.Logger":
    """Get the package logger."""
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_category_logger(category: LogCategory) -> "logging.Logger":
    """Get a logger for a pipeline stage.

    Args:
        category: The log category.

    Returns:
        Child logger of the package logger.

    Example:
        >>> logger = get_category_logger(LogCategory.CLUSTERING)
        >>> logger.debug("Merged 3 groups")
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{category.value}")


@contextmanager
def debug_context(
    logger: "logging.Logger | None" = None,
) -> Generator["logging.Logger", None, None]:
    """Temporarily enable debug-level logging.

    Args:
        logger: Optional logger to modify. Defaults to the package logger.

    Yields:
        The logger instance with DEBUG level enabled.
    """
    target_logger = logger or get_logger()
    original_level = target_logger.level
    original_handler_levels = []
    try:
        target_logger.setLevel(logging.DEBUG)
        for handler in target_logger.handlers:
            original_handler_levels.append(handler.level)
            handler.setLevel(logging.DEBUG)
        yield target_logger
    finally:
        target_logger.setLevel(original_level)
        for handler, level in zip(
            target_logger.handlers, original_handler_levels, strict=False
        ):
            handler.setLevel(level)
