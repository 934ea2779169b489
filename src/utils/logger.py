"""
Structured logging configuration using structlog.

Provides JSON-formatted logging with context processors for
timestamps and log levels, plus a helper for catalog read metrics.
"""
import logging
import os
import sys
from typing import Any

import structlog


def setup_logging(level: str = "INFO") -> None:
    """
    Configure structured logging with structlog.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Sets up:
        - JSON output format for production
        - Console output with colors for development
        - Context processors for timestamps and metadata
        - Integration with standard library logging
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Determine if we're in development mode
    is_dev = os.getenv("ENVIRONMENT", "production") == "development"

    # Configure structlog processors
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if is_dev:
        # Development: Human-readable console output with colors
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        # Production: JSON output
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("cache_hit", key="package:42")
    """
    return structlog.get_logger(name)


def log_catalog_read(
    operation: str,
    duration_ms: float,
    cached: bool,
    error: str | None = None,
    **extra: Any,
) -> None:
    """
    Log one catalog read in structured format.

    Args:
        operation: Service operation name (e.g. "get_package_basic")
        duration_ms: Read time in milliseconds
        cached: Whether the result was served from cache
        error: Error message if the read failed
        **extra: Additional context to log

    Example:
        >>> log_catalog_read(
        ...     operation="get_all_packages",
        ...     duration_ms=312.4,
        ...     cached=False,
        ...     key="packages:list:limit=12",
        ... )
    """
    logger = get_logger("catalog_read")

    log_data = {
        "operation": operation,
        "duration_ms": round(duration_ms, 2),
        "cached": cached,
        "error": error,
        **extra,
    }

    if error:
        logger.error("catalog_read_failed", **log_data)
    else:
        logger.info("catalog_read_success", **log_data)
