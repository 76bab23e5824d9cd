"""Focus Tower Protocols Package - Type contracts shared by all layers.

This package sits at L0 and defines the interfaces other layers are
written against. It has no runtime dependencies of its own.

Package Structure:
    - interfaces.py: LoggerProtocol

Usage:
    from protocols import LoggerProtocol
"""

from protocols.interfaces import LoggerProtocol

__all__ = [
    "LoggerProtocol",
]
