"""Shared utilities for Focus Tower.

This package provides common utilities that can be used by all layers
without creating circular dependencies. It sits at L0 alongside protocols.

Exports:
- Logging: configure_logging, create_logger, Logger
"""

from shared.logging import (
    Logger,
    configure_logging,
    create_logger,
)

__all__ = [
    "Logger",
    "configure_logging",
    "create_logger",
]
