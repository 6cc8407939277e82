"""Structured logging setup for regschema.

Log output goes to stderr; stdout stays free for the exported
document.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    *,
    log_level: str = "WARNING",
    json_format: bool = False,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for regschema.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Raises:
        ValueError: If ``log_level`` is not a known level name.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=True)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        msg = f"unknown log level: {log_level}"
        raise ValueError(msg)

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

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

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )


def get_logger(name: str) -> Any:
    """Get a structlog logger backed by the stdlib logger ``name``.

    Events go through whatever processors structlog is configured with and
    end up in stdlib logging. Until ``configure_logging`` (or the host
    application) sets logging up, only warnings and errors are emitted, by
    stdlib's last-resort handler on stderr. Nothing is ever printed to
    stdout, where exported documents may be written.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("schema_exported", type_count=3)
    """
    return structlog.wrap_logger(logging.getLogger(name))
