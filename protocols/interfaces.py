"""Protocol definitions shared across layers.

Components never import a concrete logger. They receive an object
satisfying LoggerProtocol and bind their own component context on it.
"""

from typing import Any, Protocol, runtime_checkable


# =============================================================================
# LOGGING
# =============================================================================

@runtime_checkable
class LoggerProtocol(Protocol):
    """Structured logging interface."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def exception(self, message: str, **kwargs: Any) -> None: ...
    def bind(self, **kwargs: Any) -> "LoggerProtocol": ...


__all__ = [
    "LoggerProtocol",
]
