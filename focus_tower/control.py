"""Focus Control - single-shot operations behind focusctl.

These operations share the ticket table and the partition controller with
the daemon but run once and exit:

- init / relax: set up the partitions, or neutralize their weights
- focus / background / unfocus: move one process by pid
- focus-name / background-name: move processes by command name
- pomodoro: boost processes for a fixed number of minutes
- stop-all: signal every process in the focus partition
- status: show both partitions
- add / add-name / remove / list: edit the ticket table
"""

import os
import signal
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from protocols import LoggerProtocol

from focus_tower.errors import ConfigurationError, InvalidTicketsError, PartitionWriteError
from focus_tower.procs import DEFAULT_PROC_ROOT, find_processes_by_name, process_exists
from focus_tower.protocols import PartitionControllerProtocol
from focus_tower.tickets.store import TicketStore
from focus_tower.types import (
    DEFAULT_BACKGROUND_WEIGHT,
    DEFAULT_FOCUS_WEIGHT,
    NEUTRAL_CPU_WEIGHT,
    PartitionName,
    TicketEntry,
)


@dataclass
class MoveReport:
    """Outcome of a batch of partition moves."""
    partition: str
    moved: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)


@dataclass
class PartitionStatus:
    """Weight and membership of one partition."""
    name: PartitionName
    weight: Optional[int] = None
    members: List[int] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class SignalReport:
    """Outcome of stop_all()."""
    signal_name: str
    signalled: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)


class FocusControl:
    """Operations of the focusctl command.

    Usage:
        control = FocusControl(store, controller, logger)
        control.init()
        control.add(1234, tickets=10)
        control.focus(1234)
    """

    def __init__(
        self,
        store: TicketStore,
        controller: PartitionControllerProtocol,
        logger: LoggerProtocol,
        focus_weight: int = DEFAULT_FOCUS_WEIGHT,
        background_weight: int = DEFAULT_BACKGROUND_WEIGHT,
        proc_root: Union[str, Path] = DEFAULT_PROC_ROOT,
        sleep: Callable[[float], None] = time.sleep,
        kill: Callable[[int, int], None] = os.kill,
    ) -> None:
        """Initialize control operations.

        Args:
            store: Ticket table
            controller: Partition backend
            logger: Logger instance
            focus_weight: Weight init() gives the focus partition
            background_weight: Weight init() gives the background partition
            proc_root: Process table root for name lookups
            sleep: Used by pomodoro() to wait
            kill: Used by stop_all() to signal processes
        """
        self._store = store
        self._controller = controller
        self._logger = logger.bind(component="focus_control")
        self._focus_weight = focus_weight
        self._background_weight = background_weight
        self._proc_root = Path(proc_root)
        self._sleep = sleep
        self._kill = kill

    # =========================================================================
    # Partition setup
    # =========================================================================

    def init(self) -> None:
        """Create both partitions with their weights and the state directory."""
        self._controller.ensure_partitions(self._focus_weight, self._background_weight)
        self._store.ensure_state_dir()

    def relax(self) -> None:
        """Give both partitions the neutral weight."""
        for name in PartitionName:
            self._controller.set_weight(name, NEUTRAL_CPU_WEIGHT)
        self._logger.info("weights_reset", weight=NEUTRAL_CPU_WEIGHT)

    def status(self) -> List[PartitionStatus]:
        """Read weight and membership of both partitions.

        A partition that cannot be read is reported with its error rather
        than failing the whole call.
        """
        statuses = []
        for name in PartitionName:
            status = PartitionStatus(name=name)
            try:
                status.weight = self._controller.get_weight(name)
                status.members = self._controller.members(name)
            except PartitionWriteError as e:
                status.error = str(e)
                self._logger.warning("partition_status_failed", partition=name.value, error=str(e))
            statuses.append(status)
        return statuses

    # =========================================================================
    # Moving processes
    # =========================================================================

    def focus(self, pid: int) -> None:
        """Move a process into the focus partition."""
        self._move(PartitionName.FOCUS, pid)

    def background(self, pid: int) -> None:
        """Move a process into the background partition."""
        self._move(PartitionName.BACKGROUND, pid)

    def unfocus(self, pid: int) -> None:
        """Move a process back to the root group."""
        self._controller.move_to_root(pid)
        self._logger.info("process_unfocused", pid=pid)

    def move_by_name(self, partition: PartitionName, name: str) -> MoveReport:
        """Move every process whose command name contains ``name``."""
        partition = PartitionName(partition)
        report = MoveReport(partition=partition.value)
        for proc in find_processes_by_name(name, self._proc_root):
            try:
                self._move(partition, proc.pid)
            except PartitionWriteError as e:
                report.failed.append(proc.pid)
                self._logger.warning("partition_move_failed", pid=proc.pid, comm=proc.comm, error=str(e))
                continue
            report.moved.append(proc.pid)

        self._logger.info(
            "processes_moved_by_name",
            name=name,
            partition=partition.value,
            moved=len(report.moved),
            failed=len(report.failed),
        )
        return report

    def pomodoro(
        self,
        minutes: int,
        pids: Iterable[int],
        on_started: Optional[Callable[[MoveReport], None]] = None,
    ) -> MoveReport:
        """Boost processes for ``minutes``, then neutralize the weights.

        Blocks for the whole duration. on_started is called with the move
        report once the partitions are set up and the moves are done, right
        before the wait begins.

        Raises:
            ConfigurationError: If minutes <= 0 or no pid is given
        """
        pids = list(pids)
        if minutes <= 0:
            raise ConfigurationError("minutes must be > 0")
        if not pids:
            raise ConfigurationError("at least one pid is required for pomodoro")

        self.init()

        report = MoveReport(partition=PartitionName.FOCUS.value)
        for pid in pids:
            try:
                self.focus(pid)
            except PartitionWriteError as e:
                report.failed.append(pid)
                self._logger.warning("partition_move_failed", pid=pid, error=str(e))
                continue
            report.moved.append(pid)

        self._logger.info("pomodoro_started", minutes=minutes, pids=report.moved)
        if on_started is not None:
            on_started(report)
        self._sleep(minutes * 60)

        self.relax()
        self._logger.info("pomodoro_finished", minutes=minutes)
        return report

    def stop_all(self, force: bool = False) -> SignalReport:
        """Send SIGTERM (or SIGKILL with force) to every focus member."""
        sig = signal.SIGKILL if force else signal.SIGTERM
        report = SignalReport(signal_name=sig.name)

        for pid in self._controller.members(PartitionName.FOCUS):
            if pid <= 0:
                continue
            try:
                self._kill(pid, sig)
            except OSError as e:
                report.failed.append(pid)
                self._logger.warning("signal_failed", pid=pid, signal=sig.name, error=str(e))
                continue
            report.signalled.append(pid)

        self._logger.info(
            "focus_processes_signalled",
            signal=sig.name,
            signalled=len(report.signalled),
            failed=len(report.failed),
        )
        return report

    # =========================================================================
    # Ticket table
    # =========================================================================

    def add(self, pid: int, tickets: int) -> bool:
        """Register a process for lottery scheduling, or update its tickets.

        Returns:
            True if an existing entry was updated
        """
        if tickets > 0 and pid > 0 and not process_exists(pid, self._proc_root):
            self._logger.warning("process_not_running", pid=pid)
        return self._store.upsert(pid, tickets)

    def add_by_name(self, name: str, tickets: int) -> List[int]:
        """Register every process whose command name contains ``name``.

        Returns:
            Pids added or updated
        """
        if tickets <= 0:
            raise InvalidTicketsError("tickets must be > 0")

        added = []
        for proc in find_processes_by_name(name, self._proc_root):
            self._store.upsert(proc.pid, tickets)
            added.append(proc.pid)

        self._logger.info("processes_added_by_name", name=name, tickets=tickets, added=len(added))
        return added

    def remove(self, pid: int) -> bool:
        """Unregister a process. Returns True if it was registered."""
        return self._store.remove(pid)

    def list_entries(self) -> List[TicketEntry]:
        """Current ticket table."""
        return self._store.load()

    def ticket_share(
        self,
        entries: Optional[List[TicketEntry]] = None,
    ) -> Dict[int, float]:
        """Each registered process's probability of winning a round.

        Args:
            entries: Table to compute shares over (loaded if None)
        """
        if entries is None:
            entries = self._store.load()
        total = sum(e.tickets for e in entries)
        if total <= 0:
            return {}
        return {e.process_id: e.tickets / total for e in entries}

    # =========================================================================
    # Internal
    # =========================================================================

    def _move(self, partition: PartitionName, pid: int) -> None:
        self._controller.move_into(partition, pid)
        self._logger.info("process_moved", pid=pid, partition=partition.value)
