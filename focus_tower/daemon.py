"""Scheduling Daemon - the lottery scheduling loop.

Every timeslice the daemon:
1. Reloads the ticket table
2. Draws a winner with the lottery scheduler
3. Moves the winner into the focus partition and every other managed
   process into the background partition
4. Sleeps for the timeslice

It composes:
- TicketStoreProtocol (read-only)
- LotterySchedulerProtocol
- PartitionControllerProtocol

Steady-state failures (unreadable table, a move rejected because the
process exited) are logged and absorbed; the loop keeps running. The
only way out is the stop event.
"""

import threading
from collections import Counter
from typing import Any, Dict, List, Optional

from protocols import LoggerProtocol

from focus_tower.errors import ConfigurationError, PartitionWriteError, TicketTableError
from focus_tower.protocols import (
    LotterySchedulerProtocol,
    PartitionControllerProtocol,
    TicketStoreProtocol,
)
from focus_tower.types import DaemonState, PartitionName, RoundResult, TicketEntry


class SchedulingDaemon:
    """User-level lottery scheduler.

    Usage:
        daemon = SchedulingDaemon(
            store=TicketStore(logger),
            scheduler=LotteryScheduler(),
            controller=CgroupPartitionController(logger),
            timeslice_ms=100,
            logger=logger,
        )

        # Blocks until stop_event is set
        daemon.run(stop_event)

        # Or drive it one round at a time
        result = daemon.run_round()
    """

    def __init__(
        self,
        store: TicketStoreProtocol,
        scheduler: LotterySchedulerProtocol,
        controller: PartitionControllerProtocol,
        timeslice_ms: int,
        logger: LoggerProtocol,
    ) -> None:
        """Initialize the daemon.

        Args:
            store: Ticket table to read each round
            scheduler: Winner selection
            controller: Partition backend to issue moves to
            timeslice_ms: Round length in milliseconds (> 0)
            logger: Logger instance

        Raises:
            ConfigurationError: If timeslice_ms is not a positive integer
        """
        if isinstance(timeslice_ms, bool) or not isinstance(timeslice_ms, int) or timeslice_ms <= 0:
            raise ConfigurationError(f"timeslice_ms must be > 0, got {timeslice_ms!r}")

        self._store = store
        self._scheduler = scheduler
        self._controller = controller
        self._timeslice_ms = timeslice_ms
        self._logger = logger.bind(component="scheduling_daemon")

        self._state = DaemonState.IDLE

        # Counters
        self._rounds = 0
        self._idle_rounds = 0
        self._load_failures = 0
        self._move_failures = 0
        self._wins: Counter = Counter()

        self._lock = threading.RLock()

    @property
    def state(self) -> DaemonState:
        """Current loop state."""
        return self._state

    @property
    def timeslice_ms(self) -> int:
        """Round length in milliseconds."""
        return self._timeslice_ms

    @property
    def timeslice_seconds(self) -> float:
        """Round length in seconds."""
        return self._timeslice_ms / 1000.0

    # =========================================================================
    # Main loop
    # =========================================================================

    def run(
        self,
        stop_event: Optional[threading.Event] = None,
        max_rounds: Optional[int] = None,
    ) -> int:
        """Run rounds until stopped.

        Each round runs to completion, then the loop waits one timeslice on
        stop_event. Setting the event ends the wait early and ends the loop.

        Args:
            stop_event: Cancellation signal (a private one is used if None)
            max_rounds: Stop after this many rounds (None = forever)

        Returns:
            Number of rounds completed
        """
        stop = stop_event if stop_event is not None else threading.Event()
        completed = 0

        self._logger.info(
            "daemon_started",
            timeslice_ms=self._timeslice_ms,
            max_rounds=max_rounds,
        )

        while not stop.is_set():
            if max_rounds is not None and completed >= max_rounds:
                break

            self.run_round()
            completed += 1

            if stop.wait(self.timeslice_seconds):
                break

        self._logger.info("daemon_stopped", completed=completed, **self._counters())
        return completed

    def run_round(self) -> RoundResult:
        """Run one scheduling round (everything except the sleep)."""
        with self._lock:
            self._rounds += 1
            round_number = self._rounds

            try:
                entries = self._store.load()
            except TicketTableError as e:
                self._load_failures += 1
                self._idle_rounds += 1
                self._set_state(DaemonState.IDLE)
                self._logger.error(
                    "ticket_table_load_failed",
                    round=round_number,
                    error=str(e),
                )
                return RoundResult(
                    round_number=round_number,
                    state=DaemonState.IDLE,
                    load_failed=True,
                )

            if not entries:
                self._idle_rounds += 1
                self._set_state(DaemonState.IDLE)
                return RoundResult(round_number=round_number, state=DaemonState.IDLE)

            self._set_state(DaemonState.SCHEDULING)
            result = RoundResult(round_number=round_number, state=DaemonState.SCHEDULING)

            winner = self._scheduler.pick_winner(entries)
            if winner is None:
                return result

            result.winner = winner
            self._wins[winner] += 1
            self._enforce(entries, winner, result)

            self._logger.debug(
                "round_completed",
                round=round_number,
                winner=winner,
                managed=len(entries),
                failed=len(result.failed),
            )
            return result

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Get loop counters and per-process win counts."""
        with self._lock:
            return {
                **self._counters(),
                "state": self._state.value,
                "wins": dict(self._wins),
            }

    def win_share(self, pid: int) -> float:
        """Fraction of scheduling rounds won by a process."""
        with self._lock:
            drawn = sum(self._wins.values())
            if drawn == 0:
                return 0.0
            return self._wins[pid] / drawn

    # =========================================================================
    # Internal
    # =========================================================================

    def _enforce(
        self,
        entries: List[TicketEntry],
        winner: int,
        result: RoundResult,
    ) -> None:
        """Issue partition moves in table order, continuing past failures."""
        for entry in entries:
            pid = entry.process_id
            target = PartitionName.FOCUS if pid == winner else PartitionName.BACKGROUND
            try:
                self._controller.move_into(target, pid)
            except PartitionWriteError as e:
                self._move_failures += 1
                result.failed.append(pid)
                self._logger.warning(
                    "partition_move_failed",
                    round=result.round_number,
                    pid=pid,
                    partition=target.value,
                    error=str(e),
                )
                continue

            if target is PartitionName.FOCUS:
                result.focused.append(pid)
            else:
                result.backgrounded.append(pid)

    def _set_state(self, new_state: DaemonState) -> None:
        if new_state is self._state:
            return
        self._logger.info(
            "daemon_state_changed",
            old_state=self._state.value,
            new_state=new_state.value,
        )
        self._state = new_state

    def _counters(self) -> Dict[str, int]:
        return {
            "rounds": self._rounds,
            "idle_rounds": self._idle_rounds,
            "load_failures": self._load_failures,
            "move_failures": self._move_failures,
        }
