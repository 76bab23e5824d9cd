"""Centralized logging infrastructure for Focus Tower.

This module provides the core logging utilities that can be used by all
layers. It implements LoggerProtocol from protocols.

Usage:
    from shared.logging import configure_logging, create_logger

    # At process startup (once)
    configure_logging(level="INFO", json_output=True)

    # Create logger for injection
    logger = create_logger("focusd", timeslice_ms=100)
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from protocols import LoggerProtocol

# Module state
_CONFIGURED = False


class Logger:
    """LoggerProtocol implementation backed by structlog.

    This is the primary logger implementation used by the daemon and
    the control tool.
    """

    def __init__(
        self,
        base_logger: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize logger.

        Args:
            base_logger: Underlying structlog logger (created if None)
            context: Bound context fields
        """
        self._logger = base_logger or structlog.get_logger()
        self._context = context or {}

        if self._context:
            self._logger = self._logger.bind(**self._context)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._logger.debug(msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self._logger.info(msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._logger.warning(msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log error message."""
        self._logger.error(msg, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._logger.exception(msg, **kwargs)

    def bind(self, **kwargs: Any) -> "Logger":
        """Create child logger with additional context."""
        new_context = {**self._context, **kwargs}
        return Logger(
            base_logger=structlog.get_logger(),
            context=new_context,
        )

    @property
    def context(self) -> Dict[str, Any]:
        """Context fields bound to this logger."""
        return dict(self._context)


def configure_logging(
    level: str = "INFO",
    *,
    json_output: bool = True,
    component_levels: Optional[Dict[str, str]] = None,
) -> None:
    """Configure logging for the daemon or the control tool.

    This should be called ONCE at process startup. Later calls are
    ignored.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, output JSON; if False, console format
        component_levels: Override levels for specific stdlib loggers
    """
    global _CONFIGURED

    if _CONFIGURED:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    # Log lines go to stderr so focusctl output on stdout stays clean
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stderr,
    )

    for component, comp_level in (component_levels or {}).items():
        logging.getLogger(component).setLevel(
            getattr(logging, comp_level.upper(), log_level)
        )

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def create_logger(
    component: str,
    **context: Any,
) -> LoggerProtocol:
    """Create a logger for dependency injection.

    Args:
        component: Component name (e.g., "focusd", "focusctl")
        **context: Additional context to bind

    Returns:
        LoggerProtocol implementation
    """
    return Logger(context={"component": component, **context})


__all__ = [
    # Configuration
    "configure_logging",
    # Logger creation
    "create_logger",
    # Types
    "Logger",
]
