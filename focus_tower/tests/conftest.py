"""Pytest configuration for focus_tower tests.

This conftest.py provides fixtures for the scheduling core. Tests never
touch the real /sys/fs/cgroup or /proc: fake hierarchies are laid out
under tmp_path instead.

Key Principles:
- The daemon is tested against InMemoryPartitionController
- The cgroup backend is tested against a fake cgroup tree on disk
- Lottery draws use a seeded random.Random so runs are reproducible
"""

import random
import sys
from pathlib import Path
from typing import Dict, Iterable, Tuple

import pytest

# Add the project root to the path for imports
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# =============================================================================
# FILESYSTEM FIXTURES
# =============================================================================

@pytest.fixture
def state_dir(tmp_path):
    """Directory for the ticket table (not created yet)."""
    return tmp_path / "state"


@pytest.fixture
def write_tickets(state_dir):
    """Write raw ticket table content and return the file path."""
    def _write(content: str) -> Path:
        state_dir.mkdir(parents=True, exist_ok=True)
        path = state_dir / "procs.txt"
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def cgroup_root(tmp_path):
    """A fake cgroup v2 root with the cpu controller available."""
    root = tmp_path / "cgroup"
    root.mkdir()
    (root / "cgroup.controllers").write_text("cpuset cpu io memory pids\n")
    (root / "cgroup.subtree_control").write_text("memory pids\n")
    (root / "cgroup.procs").write_text("")
    return root


@pytest.fixture
def proc_root(tmp_path):
    """Factory for a fake /proc with the given pid -> comm entries."""
    root = tmp_path / "proc"
    root.mkdir()

    def _make(processes: Dict[int, str]) -> Path:
        for pid, comm in processes.items():
            (root / str(pid)).mkdir()
            (root / str(pid) / "comm").write_text(f"{comm}\n")
        return root

    return _make


# =============================================================================
# COMPONENT FIXTURES
# =============================================================================

@pytest.fixture
def ticket_store(mock_logger, state_dir):
    """A TicketStore over the temporary state directory."""
    from focus_tower.tickets import TicketStore

    return TicketStore(logger=mock_logger, state_dir=state_dir)


@pytest.fixture
def memory_controller(mock_logger):
    """An InMemoryPartitionController that accepts every pid."""
    from focus_tower.resources import InMemoryPartitionController

    return InMemoryPartitionController(logger=mock_logger)


@pytest.fixture
def cgroup_controller(mock_logger, cgroup_root):
    """A CgroupPartitionController over the fake cgroup tree."""
    from focus_tower.resources import CgroupPartitionController

    return CgroupPartitionController(logger=mock_logger, root=cgroup_root)


@pytest.fixture
def seeded_scheduler():
    """A LotteryScheduler with a fixed seed."""
    from focus_tower.scheduler import LotteryScheduler

    return LotteryScheduler(random.Random(1234))


@pytest.fixture
def entries_factory():
    """Build TicketEntry lists from (pid, tickets) pairs."""
    from focus_tower.types import TicketEntry

    def _create(pairs: Iterable[Tuple[int, int]]):
        return [TicketEntry(process_id=pid, tickets=t) for pid, t in pairs]

    return _create


class StaticTicketStore:
    """Ticket store double returning a fixed table and counting loads."""

    def __init__(self, entries=None, error=None):
        self.entries = list(entries or [])
        self.error = error
        self.load_count = 0

    def load(self):
        self.load_count += 1
        if self.error is not None:
            raise self.error
        return list(self.entries)


@pytest.fixture
def static_store_factory():
    """Factory for StaticTicketStore doubles."""
    return StaticTicketStore
