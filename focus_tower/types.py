"""Focus Tower types - scheduling abstractions.

These types mirror lottery-scheduling concepts:
- TicketEntry: one managed process and its lottery weight
- PartitionName: the two cgroup partitions a process can be placed in
- DaemonState: the two states of the scheduling loop
- RoundResult: what a single timeslice did

Layering: This module ONLY imports from the standard library.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set


# cgroup v2 accepts cpu.weight in [1, 10000]; 100 is the kernel default
MIN_CPU_WEIGHT = 1
MAX_CPU_WEIGHT = 10000
NEUTRAL_CPU_WEIGHT = 100

DEFAULT_FOCUS_WEIGHT = 1000
DEFAULT_BACKGROUND_WEIGHT = 10


# =============================================================================
# PARTITIONS
# =============================================================================

class PartitionName(str, Enum):
    """Named resource partitions.

    Values are the cgroup directory names under the cgroup root.
    """
    FOCUS = "focus"
    BACKGROUND = "background"


@dataclass
class Partition:
    """A weighted partition and its current membership."""
    name: PartitionName
    weight: int
    members: Set[int] = field(default_factory=set)


# =============================================================================
# TICKETS
# =============================================================================

@dataclass(frozen=True)
class TicketEntry:
    """One row of the ticket table.

    Invariant: process_id > 0 and tickets > 0. Rows violating it are
    dropped on load and never written.
    """
    process_id: int
    tickets: int

    def is_valid(self) -> bool:
        """Check the positivity invariant."""
        return self.process_id > 0 and self.tickets > 0


# =============================================================================
# DAEMON
# =============================================================================

class DaemonState(str, Enum):
    """Scheduling loop states.

    State transitions (once per timeslice):
        IDLE -> SCHEDULING (table has entries)
        SCHEDULING -> IDLE (table empty or unreadable)
    """
    IDLE = "idle"
    SCHEDULING = "scheduling"


@dataclass
class RoundResult:
    """Outcome of one scheduling round."""
    round_number: int
    state: DaemonState
    winner: Optional[int] = None
    focused: List[int] = field(default_factory=list)
    backgrounded: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    load_failed: bool = False

    @property
    def writes_attempted(self) -> int:
        """Number of partition-membership writes issued this round."""
        return len(self.focused) + len(self.backgrounded) + len(self.failed)


# =============================================================================
# PROCESS TABLE
# =============================================================================

@dataclass(frozen=True)
class ProcessInfo:
    """A live process found in the process table."""
    pid: int
    comm: str
