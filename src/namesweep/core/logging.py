"""
Structured logging for namesweep.

All diagnostics (progress, per-candidate failures, shutdown notices) go
through structlog and are written to **stderr**. The primary output stream
only ever receives result records, so the two never interleave.

Architecture:
    ::

        configure_logging(level="INFO", json_format=False)
            │
            ↓
        structlog processor chain:
          1. filter_by_level
          2. add_log_level / add_logger_name
          3. TimeStamper (UTC, ISO-8601)
          4. merge_contextvars   (run_id etc. via LogContext)
          5. format_exc_info
          6. ConsoleRenderer or JSONRenderer
            │
            ↓
        stdlib logging → StreamHandler(sys.stderr)

Examples:
    >>> from namesweep.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> logger.info("sweep.start", threads=80)

    >>> with LogContext(run_id="abc123"):
    ...     logger.warning("lookup.failed", candidate="Foo")
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from namesweep.core.errors import InvalidConfigError

# Track if logging has been configured
_configured = False


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Should be called once at startup (the CLI does this). Subsequent calls
    are no-ops unless ``force=True``.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON lines, False for coloured console output
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise InvalidConfigError("log_level", level, f"Unknown log level: {level!r}")

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )
    logging.getLogger("namesweep").setLevel(log_level)
    # httpx logs every request at INFO; keep that behind DEBUG
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(run_id="abc123"):
            logger.info("sweep.start")
        # run_id no longer attached here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())

    async def __aenter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    async def __aexit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "is_configured",
    "get_logger",
    "bind_context",
    "unbind_context",
    "LogContext",
]
