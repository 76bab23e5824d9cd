"""Focus Tower exceptions.

Startup problems (ConfigurationError, CgroupUnavailableError) propagate
and stop the daemon. Per-round problems (TicketTableError,
PartitionWriteError) are caught by the scheduling loop and logged.
"""

from typing import Optional


class FocusTowerError(Exception):
    """Base exception for Focus Tower errors."""
    pass


class ConfigurationError(FocusTowerError):
    """Invalid configuration, e.g. a non-positive timeslice."""
    pass


class InvalidTicketsError(ConfigurationError):
    """A ticket table mutation was given a non-positive pid or ticket count."""
    pass


class CgroupUnavailableError(FocusTowerError):
    """The host has no usable cgroup v2 hierarchy."""
    pass


class TicketTableError(FocusTowerError):
    """The ticket table could not be read or written."""
    pass


class ProcessTableError(FocusTowerError):
    """The process table could not be scanned."""
    pass


class PartitionWriteError(FocusTowerError):
    """A write to a partition's control file failed."""

    def __init__(
        self,
        partition: str,
        message: str,
        pid: Optional[int] = None,
    ):
        self.partition = partition
        self.pid = pid
        self.message = message
        target = f"pid {pid} -> {partition}" if pid is not None else partition
        super().__init__(f"[{target}] {message}")


__all__ = [
    "FocusTowerError",
    "ConfigurationError",
    "InvalidTicketsError",
    "CgroupUnavailableError",
    "TicketTableError",
    "ProcessTableError",
    "PartitionWriteError",
]
