"""Process table lookup by command name.

Scans ``/proc/<pid>/comm`` and returns processes whose command name
contains a substring. Processes that exit mid-scan, or whose comm file
cannot be read, are skipped.
"""

from pathlib import Path
from typing import Iterator, List, Union

from focus_tower.errors import ProcessTableError
from focus_tower.types import ProcessInfo

DEFAULT_PROC_ROOT = Path("/proc")


def iter_processes(proc_root: Union[str, Path] = DEFAULT_PROC_ROOT) -> Iterator[ProcessInfo]:
    """Yield every process visible under proc_root, in pid order.

    Raises:
        ProcessTableError: If proc_root itself cannot be listed
    """
    root = Path(proc_root)
    try:
        pids = sorted(int(p.name) for p in root.iterdir() if p.name.isdigit())
    except OSError as e:
        raise ProcessTableError(f"cannot list {root}: {e}") from e

    for pid in pids:
        try:
            comm = (root / str(pid) / "comm").read_text().rstrip("\n")
        except OSError:
            continue
        yield ProcessInfo(pid=pid, comm=comm)


def find_processes_by_name(
    name: str,
    proc_root: Union[str, Path] = DEFAULT_PROC_ROOT,
) -> List[ProcessInfo]:
    """Find processes whose command name contains ``name``."""
    return [p for p in iter_processes(proc_root) if name in p.comm]


def process_exists(pid: int, proc_root: Union[str, Path] = DEFAULT_PROC_ROOT) -> bool:
    """Check whether a pid currently has a /proc entry."""
    return pid > 0 and (Path(proc_root) / str(pid)).is_dir()
