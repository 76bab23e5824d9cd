"""Unit tests for process table lookup."""

import pytest

from focus_tower.errors import ProcessTableError
from focus_tower.procs import find_processes_by_name, iter_processes, process_exists
from focus_tower.types import ProcessInfo


def test_iter_processes_in_pid_order(proc_root):
    root = proc_root({300: "vim", 12: "bash", 45: "firefox"})

    assert list(iter_processes(root)) == [
        ProcessInfo(12, "bash"),
        ProcessInfo(45, "firefox"),
        ProcessInfo(300, "vim"),
    ]


def test_ignores_non_pid_entries(proc_root):
    root = proc_root({7: "init"})
    (root / "self").mkdir()
    (root / "meminfo").write_text("MemTotal: 1 kB\n")

    assert [p.pid for p in iter_processes(root)] == [7]


def test_skips_unreadable_comm(proc_root):
    root = proc_root({1: "init"})
    # Process exited between listing and reading
    (root / "2").mkdir()

    assert [p.pid for p in iter_processes(root)] == [1]


def test_missing_proc_root_raises(tmp_path):
    with pytest.raises(ProcessTableError):
        list(iter_processes(tmp_path / "nope"))


def test_find_by_substring(proc_root):
    root = proc_root({1: "firefox", 2: "firefox-bin", 3: "chrome", 4: "Web Content"})

    assert [p.pid for p in find_processes_by_name("fox", root)] == [1, 2]
    assert [p.pid for p in find_processes_by_name("Content", root)] == [4]
    assert find_processes_by_name("emacs", root) == []


def test_match_is_case_sensitive(proc_root):
    root = proc_root({1: "Firefox"})
    assert find_processes_by_name("firefox", root) == []


def test_process_exists(proc_root):
    root = proc_root({10: "sleep"})

    assert process_exists(10, root)
    assert not process_exists(11, root)
    assert not process_exists(0, root)
