"""Focus Tower protocols - kernel interface definitions.

These protocols define the seams the scheduling daemon is written against.
The daemon never touches the filesystem directly; it goes through a
ticket store and a partition controller, so either can be replaced by an
in-memory double.

Layering rules:
- focus_tower ONLY imports from protocols and shared
- The daemon depends on these protocols, not on concrete backends
"""

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from focus_tower.types import PartitionName, TicketEntry


# =============================================================================
# TICKET STORE PROTOCOL
# =============================================================================

@runtime_checkable
class TicketStoreProtocol(Protocol):
    """Persisted ticket table.

    The daemon is the sole reader inside the core and never writes.
    """

    def load(self) -> List[TicketEntry]:
        """Read the current table.

        Malformed and non-positive rows are skipped. A table that does not
        exist yet reads as empty.

        Returns:
            Entries in persisted order

        Raises:
            TicketTableError: On unrecoverable I/O failure
        """
        ...


# =============================================================================
# LOTTERY SCHEDULER PROTOCOL
# =============================================================================

@runtime_checkable
class LotterySchedulerProtocol(Protocol):
    """Weighted random winner selection."""

    def pick_winner(self, entries: Sequence[TicketEntry]) -> Optional[int]:
        """Draw one winner proportionally to tickets.

        Args:
            entries: Ticket table in persisted order

        Returns:
            Winning process id, or None if there is nothing to draw from
        """
        ...


# =============================================================================
# PARTITION CONTROLLER PROTOCOL (cgroups)
# =============================================================================

@runtime_checkable
class PartitionControllerProtocol(Protocol):
    """Resource partition controller - cgroup v2 equivalent.

    Manages the two weighted partitions:
    - Create/ensure partitions (init)
    - Set relative weight (cpu.weight)
    - Move a process into a partition (cgroup.procs)
    - Read membership (status, stop-all)
    """

    def ensure_partitions(
        self,
        focus_weight: int,
        background_weight: int,
    ) -> None:
        """Create both partitions if needed and set their weights.

        Raises:
            CgroupUnavailableError: If the backend is not usable
            PartitionWriteError: If a partition cannot be created or weighted
        """
        ...

    def set_weight(self, name: PartitionName, weight: int) -> None:
        """Set a partition's relative CPU weight.

        Raises:
            PartitionWriteError: If the write fails
        """
        ...

    def get_weight(self, name: PartitionName) -> int:
        """Read a partition's relative CPU weight.

        Raises:
            PartitionWriteError: If the weight cannot be read
        """
        ...

    def move_into(self, name: PartitionName, pid: int) -> None:
        """Move a process into a partition.

        Raises:
            PartitionWriteError: If the write fails, e.g. the process exited
        """
        ...

    def move_to_root(self, pid: int) -> None:
        """Move a process back to the root group, out of both partitions.

        Raises:
            PartitionWriteError: If the write fails
        """
        ...

    def members(self, name: PartitionName) -> List[int]:
        """List the process ids currently in a partition.

        Raises:
            PartitionWriteError: If membership cannot be read
        """
        ...


__all__ = [
    "TicketStoreProtocol",
    "LotterySchedulerProtocol",
    "PartitionControllerProtocol",
]
