"""Focus Tower - user-level lottery scheduling over cgroup v2.

This package periodically re-partitions managed processes between two
weighted cgroups:
- Ticket table (who is managed, with how many tickets)
- Lottery draw (who gets the focus partition this round)
- Partition control (cpu.weight and cgroup.procs writes)
- Scheduling loop (one draw per timeslice)

Exports:
    SchedulingDaemon: The timeslice loop
    LotteryScheduler: Weighted random winner selection
    TicketStore: File-backed ticket table
    CgroupPartitionController: cgroup v2 backend
    InMemoryPartitionController: Backend that never touches the host
    FocusControl: Single-shot operations behind focusctl
    TicketEntry, PartitionName, DaemonState, RoundResult: Core types
"""

from focus_tower.control import FocusControl
from focus_tower.daemon import SchedulingDaemon
from focus_tower.errors import (
    CgroupUnavailableError,
    ConfigurationError,
    FocusTowerError,
    InvalidTicketsError,
    PartitionWriteError,
    ProcessTableError,
    TicketTableError,
)
from focus_tower.protocols import (
    LotterySchedulerProtocol,
    PartitionControllerProtocol,
    TicketStoreProtocol,
)
from focus_tower.resources import CgroupPartitionController, InMemoryPartitionController
from focus_tower.scheduler import LotteryScheduler
from focus_tower.tickets import TicketStore
from focus_tower.types import (
    DaemonState,
    Partition,
    PartitionName,
    ProcessInfo,
    RoundResult,
    TicketEntry,
)

__version__ = "0.1.0"

__all__ = [
    "CgroupPartitionController",
    "CgroupUnavailableError",
    "ConfigurationError",
    "DaemonState",
    "FocusControl",
    "FocusTowerError",
    "InMemoryPartitionController",
    "InvalidTicketsError",
    "LotteryScheduler",
    "LotterySchedulerProtocol",
    "Partition",
    "PartitionControllerProtocol",
    "PartitionName",
    "PartitionWriteError",
    "ProcessInfo",
    "ProcessTableError",
    "RoundResult",
    "SchedulingDaemon",
    "TicketEntry",
    "TicketStore",
    "TicketStoreProtocol",
    "TicketTableError",
]
