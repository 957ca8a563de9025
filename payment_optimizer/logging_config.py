"""Structured logging for Payment Optimizer."""

import logging
import sys

import structlog

DEFAULT_LEVEL = "WARNING"
KNOWN_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _configure_structlog(json_format: bool) -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def setup_logging(level: str = DEFAULT_LEVEL, json_format: bool = False) -> None:
    """
    Configure structlog on top of stdlib logging.

    Logs go to stderr so stdout stays reserved for the allocation result.
    An unknown level falls back to WARNING instead of failing the run.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines instead of the human console renderer
    """
    _configure_structlog(json_format)

    level_name = (level or "").strip().upper()
    unknown = level_name not in KNOWN_LEVELS
    if unknown:
        level_name = DEFAULT_LEVEL

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    if unknown:
        get_logger(__name__).warning(
            "logging.unknown_level", requested=level, using=DEFAULT_LEVEL
        )


def configure_default_logging() -> None:
    """
    Route structlog through stdlib logging unless the caller configured it.

    No handlers are installed: library callers see nothing on stdout, and
    stdlib's last-resort handler prints warnings and errors to stderr.
    """
    if not structlog.is_configured():
        _configure_structlog(json_format=False)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# Initialize logging on import
configure_default_logging()
