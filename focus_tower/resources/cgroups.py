"""cgroup v2 partition controller.

Drives the unified cgroup hierarchy through its control files:

    <root>/cgroup.controllers        exists iff cgroup v2 is mounted
    <root>/cgroup.subtree_control    must list "cpu" for cpu.weight to apply
    <root>/<partition>/cpu.weight    relative weight, 1..10000
    <root>/<partition>/cgroup.procs  write a pid to move that process in
    <root>/cgroup.procs              write a pid to move it back to root

Writing a pid that no longer exists fails with ESRCH. That surfaces as
PartitionWriteError; callers decide whether it is fatal.
"""

from pathlib import Path
from typing import List, Optional, Union

from protocols import LoggerProtocol

from focus_tower.errors import (
    CgroupUnavailableError,
    ConfigurationError,
    PartitionWriteError,
)
from focus_tower.protocols import PartitionControllerProtocol
from focus_tower.types import (
    MAX_CPU_WEIGHT,
    MIN_CPU_WEIGHT,
    PartitionName,
)

DEFAULT_CGROUP_ROOT = Path("/sys/fs/cgroup")

CONTROLLERS_FILE = "cgroup.controllers"
SUBTREE_CONTROL_FILE = "cgroup.subtree_control"
PROCS_FILE = "cgroup.procs"
WEIGHT_FILE = "cpu.weight"

ROOT_GROUP = "root"


def validate_weight(weight: int) -> int:
    """Check a weight against the cgroup v2 cpu.weight range."""
    if not MIN_CPU_WEIGHT <= weight <= MAX_CPU_WEIGHT:
        raise ConfigurationError(
            f"cpu.weight must be within [{MIN_CPU_WEIGHT}, {MAX_CPU_WEIGHT}], "
            f"got {weight}"
        )
    return weight


class CgroupPartitionController(PartitionControllerProtocol):
    """Partition controller backed by the cgroup v2 filesystem.

    Usage:
        controller = CgroupPartitionController(logger)
        controller.check_available()
        controller.ensure_partitions(focus_weight=1000, background_weight=10)

        controller.move_into(PartitionName.FOCUS, 1234)
        controller.members(PartitionName.FOCUS)  # [1234, ...]
    """

    def __init__(
        self,
        logger: LoggerProtocol,
        root: Union[str, Path] = DEFAULT_CGROUP_ROOT,
    ) -> None:
        """Initialize controller.

        Args:
            logger: Logger instance
            root: Mount point of the cgroup v2 hierarchy
        """
        self._logger = logger.bind(component="cgroup_controller")
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """cgroup hierarchy root."""
        return self._root

    def partition_path(self, name: PartitionName) -> Path:
        """Directory of a partition's cgroup."""
        return self._root / PartitionName(name).value

    # =========================================================================
    # Hierarchy setup
    # =========================================================================

    def check_available(self) -> None:
        """Verify that cgroup v2 is mounted at the root.

        Raises:
            CgroupUnavailableError: If cgroup.controllers is missing
        """
        if not (self._root / CONTROLLERS_FILE).exists():
            raise CgroupUnavailableError(f"cgroup v2 not found at {self._root}")

    def enable_cpu_controller(self) -> bool:
        """Delegate the cpu controller to child groups if not done yet.

        Best effort: failures are logged, not raised, because the
        partitions still exist without it (weights just have no effect).

        Returns:
            True if "cpu" is enabled after the call
        """
        path = self._root / SUBTREE_CONTROL_FILE
        try:
            enabled = path.read_text().split()
        except OSError as e:
            self._logger.warning("subtree_control_unreadable", path=str(path), error=str(e))
            return False

        if "cpu" in enabled:
            return True

        try:
            with open(path, "w") as f:
                f.write("+cpu\n")
        except OSError as e:
            self._logger.warning("cpu_controller_enable_failed", path=str(path), error=str(e))
            return False

        self._logger.info("cpu_controller_enabled", path=str(path))
        return True

    def ensure_partitions(
        self,
        focus_weight: int,
        background_weight: int,
    ) -> None:
        """Create both partitions and set their weights."""
        validate_weight(focus_weight)
        validate_weight(background_weight)

        self.check_available()
        self.enable_cpu_controller()

        for name in PartitionName:
            path = self.partition_path(name)
            try:
                path.mkdir(mode=0o755, exist_ok=True)
            except OSError as e:
                raise PartitionWriteError(name.value, f"cannot create {path}: {e}") from e

        self.set_weight(PartitionName.FOCUS, focus_weight)
        self.set_weight(PartitionName.BACKGROUND, background_weight)

        self._logger.info(
            "partitions_initialized",
            root=str(self._root),
            focus_weight=focus_weight,
            background_weight=background_weight,
        )

    # =========================================================================
    # Weights
    # =========================================================================

    def set_weight(self, name: PartitionName, weight: int) -> None:
        """Write a partition's cpu.weight."""
        name = PartitionName(name)
        validate_weight(weight)
        self._write(self.partition_path(name) / WEIGHT_FILE, weight, name.value)
        self._logger.debug("weight_set", partition=name.value, weight=weight)

    def get_weight(self, name: PartitionName) -> int:
        """Read a partition's cpu.weight."""
        name = PartitionName(name)
        path = self.partition_path(name) / WEIGHT_FILE
        try:
            return int(path.read_text().strip())
        except (OSError, ValueError) as e:
            raise PartitionWriteError(name.value, f"cannot read {path}: {e}") from e

    # =========================================================================
    # Membership
    # =========================================================================

    def move_into(self, name: PartitionName, pid: int) -> None:
        """Write pid into the partition's cgroup.procs."""
        name = PartitionName(name)
        self._write(self.partition_path(name) / PROCS_FILE, pid, name.value, pid=pid)
        self._logger.debug("process_moved", pid=pid, partition=name.value)

    def move_to_root(self, pid: int) -> None:
        """Write pid into the root cgroup.procs."""
        self._write(self._root / PROCS_FILE, pid, ROOT_GROUP, pid=pid)
        self._logger.debug("process_moved", pid=pid, partition=ROOT_GROUP)

    def members(self, name: PartitionName) -> List[int]:
        """Read the partition's cgroup.procs."""
        name = PartitionName(name)
        path = self.partition_path(name) / PROCS_FILE
        try:
            lines = path.read_text().splitlines()
        except OSError as e:
            raise PartitionWriteError(name.value, f"cannot read {path}: {e}") from e

        stripped = (line.strip() for line in lines)
        return [int(pid) for pid in stripped if pid.isdigit()]

    # =========================================================================
    # Internal
    # =========================================================================

    def _write(
        self,
        path: Path,
        value: int,
        partition: str,
        pid: Optional[int] = None,
    ) -> None:
        # cgroupfs reports most errors at write/close, not at open
        try:
            with open(path, "w") as f:
                f.write(f"{value}\n")
        except OSError as e:
            raise PartitionWriteError(partition, f"write to {path} failed: {e}", pid=pid) from e
