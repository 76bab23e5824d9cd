"""In-memory partition controller.

Implements PartitionControllerProtocol without touching the host. Used by
``focusd --dry-run`` and as a test double for the scheduling loop.

When a set of live pids is given, moving any other pid fails the way the
kernel rejects a write for an exited process.
"""

import threading
from typing import Dict, Iterable, List, Optional, Set, Tuple

from protocols import LoggerProtocol

from focus_tower.errors import PartitionWriteError
from focus_tower.protocols import PartitionControllerProtocol
from focus_tower.resources.cgroups import ROOT_GROUP, validate_weight
from focus_tower.types import NEUTRAL_CPU_WEIGHT, Partition, PartitionName


class InMemoryPartitionController(PartitionControllerProtocol):
    """Partition controller that only records what it was asked to do."""

    def __init__(
        self,
        logger: LoggerProtocol,
        live_pids: Optional[Iterable[int]] = None,
    ) -> None:
        """Initialize controller.

        Args:
            logger: Logger instance
            live_pids: If given, the only pids that can be moved
        """
        self._logger = logger.bind(component="memory_controller")
        self._live_pids: Optional[Set[int]] = (
            set(live_pids) if live_pids is not None else None
        )
        self._partitions: Dict[PartitionName, Partition] = {
            name: Partition(name=name, weight=NEUTRAL_CPU_WEIGHT)
            for name in PartitionName
        }
        self._initialized = False

        # Every successful or failed move, in order: (group, pid, ok)
        self._history: List[Tuple[str, int, bool]] = []

        self._lock = threading.RLock()

    # =========================================================================
    # PartitionControllerProtocol
    # =========================================================================

    def ensure_partitions(
        self,
        focus_weight: int,
        background_weight: int,
    ) -> None:
        with self._lock:
            self.set_weight(PartitionName.FOCUS, focus_weight)
            self.set_weight(PartitionName.BACKGROUND, background_weight)
            self._initialized = True

        self._logger.info(
            "partitions_initialized",
            backend="memory",
            focus_weight=focus_weight,
            background_weight=background_weight,
        )

    def set_weight(self, name: PartitionName, weight: int) -> None:
        validate_weight(weight)
        with self._lock:
            self._partitions[PartitionName(name)].weight = weight

    def move_into(self, name: PartitionName, pid: int) -> None:
        name = PartitionName(name)
        with self._lock:
            if not self._is_live(pid):
                self._history.append((name.value, pid, False))
                raise PartitionWriteError(name.value, "No such process", pid=pid)

            for partition in self._partitions.values():
                partition.members.discard(pid)
            self._partitions[name].members.add(pid)
            self._history.append((name.value, pid, True))

    def move_to_root(self, pid: int) -> None:
        with self._lock:
            if not self._is_live(pid):
                self._history.append((ROOT_GROUP, pid, False))
                raise PartitionWriteError(ROOT_GROUP, "No such process", pid=pid)

            for partition in self._partitions.values():
                partition.members.discard(pid)
            self._history.append((ROOT_GROUP, pid, True))

    def members(self, name: PartitionName) -> List[int]:
        with self._lock:
            return sorted(self._partitions[PartitionName(name)].members)

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def initialized(self) -> bool:
        """Whether ensure_partitions() has run."""
        return self._initialized

    @property
    def history(self) -> List[Tuple[str, int, bool]]:
        """Moves attempted so far as (group, pid, succeeded)."""
        with self._lock:
            return list(self._history)

    def get_weight(self, name: PartitionName) -> int:
        with self._lock:
            return self._partitions[PartitionName(name)].weight

    def set_live_pids(self, pids: Optional[Iterable[int]]) -> None:
        """Replace the set of movable pids (None allows every pid)."""
        with self._lock:
            self._live_pids = set(pids) if pids is not None else None

    def _is_live(self, pid: int) -> bool:
        return self._live_pids is None or pid in self._live_pids
