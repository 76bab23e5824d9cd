"""Unit tests for FocusControl (the focusctl operations).

Uses the in-memory partition controller, a TicketStore under tmp_path,
a fake /proc, and recording doubles for sleep() and kill().
"""

import signal

import pytest

from focus_tower.control import FocusControl
from focus_tower.errors import CgroupUnavailableError, ConfigurationError, InvalidTicketsError
from focus_tower.resources import InMemoryPartitionController
from focus_tower.types import NEUTRAL_CPU_WEIGHT, PartitionName


class Recorder:
    """Callable double that records its arguments."""

    def __init__(self, error=None, fail_for=()):
        self.calls = []
        self.error = error
        self.fail_for = set(fail_for)

    def __call__(self, *args):
        self.calls.append(args)
        if self.error is not None and args[0] in self.fail_for:
            raise self.error


@pytest.fixture
def sleeper():
    return Recorder()


@pytest.fixture
def killer():
    return Recorder(error=ProcessLookupError("No such process"))


@pytest.fixture
def processes(proc_root):
    return proc_root({100: "firefox", 101: "firefox-bin", 200: "make", 300: "cc1"})


@pytest.fixture
def make_control(ticket_store, memory_controller, mock_logger, processes, sleeper, killer):
    def _make(controller=None):
        return FocusControl(
            store=ticket_store,
            controller=controller or memory_controller,
            logger=mock_logger,
            focus_weight=1000,
            background_weight=10,
            proc_root=processes,
            sleep=sleeper,
            kill=killer,
        )

    return _make


@pytest.fixture
def control(make_control):
    return make_control()


class TestSetup:
    """init(), relax(), status()."""

    def test_init(self, control, memory_controller, state_dir):
        control.init()

        assert memory_controller.get_weight(PartitionName.FOCUS) == 1000
        assert memory_controller.get_weight(PartitionName.BACKGROUND) == 10
        assert state_dir.is_dir()

    def test_relax(self, control, memory_controller):
        control.init()
        control.relax()

        assert memory_controller.get_weight(PartitionName.FOCUS) == NEUTRAL_CPU_WEIGHT
        assert memory_controller.get_weight(PartitionName.BACKGROUND) == NEUTRAL_CPU_WEIGHT

    def test_status(self, control):
        control.init()
        control.focus(100)
        control.background(200)
        control.background(300)

        focus, background = control.status()

        assert (focus.name, focus.weight, focus.members) == (PartitionName.FOCUS, 1000, [100])
        assert background.members == [200, 300]
        assert background.error is None

    def test_status_reports_unreadable_partition(
        self, make_control, cgroup_controller, cgroup_root
    ):
        control = make_control(controller=cgroup_controller)

        statuses = control.status()

        assert all(s.error for s in statuses)
        assert all(s.members == [] for s in statuses)


class TestMoves:
    """focus(), background(), unfocus(), move_by_name()."""

    def test_focus_and_background(self, control, memory_controller):
        control.focus(100)
        control.background(100)

        assert memory_controller.members(PartitionName.FOCUS) == []
        assert memory_controller.members(PartitionName.BACKGROUND) == [100]

    def test_unfocus(self, control, memory_controller):
        control.focus(100)
        control.unfocus(100)

        assert memory_controller.history[-1] == ("root", 100, True)
        assert memory_controller.members(PartitionName.FOCUS) == []

    def test_move_by_name(self, control, memory_controller):
        report = control.move_by_name(PartitionName.FOCUS, "firefox")

        assert report.partition == "focus"
        assert report.moved == [100, 101]
        assert memory_controller.members(PartitionName.FOCUS) == [100, 101]

    def test_move_by_name_no_match(self, control, memory_controller):
        report = control.move_by_name(PartitionName.BACKGROUND, "emacs")

        assert report.moved == [] and report.failed == []
        assert memory_controller.history == []

    def test_move_by_name_continues_past_failures(self, make_control, mock_logger):
        controller = InMemoryPartitionController(mock_logger, live_pids={101})
        control = make_control(controller=controller)

        report = control.move_by_name("background", "firefox")

        assert report.failed == [100]
        assert report.moved == [101]


class TestPomodoro:
    """pomodoro()."""

    def test_boosts_waits_then_relaxes(self, control, memory_controller, sleeper):
        report = control.pomodoro(25, [100, 200])

        assert report.moved == [100, 200]
        assert memory_controller.members(PartitionName.FOCUS) == [100, 200]
        assert sleeper.calls == [(1500,)]
        assert memory_controller.get_weight(PartitionName.FOCUS) == NEUTRAL_CPU_WEIGHT
        assert memory_controller.get_weight(PartitionName.BACKGROUND) == NEUTRAL_CPU_WEIGHT

    def test_failed_pid_is_reported(self, make_control, mock_logger, sleeper):
        controller = InMemoryPartitionController(mock_logger, live_pids={200})
        control = make_control(controller=controller)

        report = control.pomodoro(1, [100, 200])

        assert report.failed == [100]
        assert report.moved == [200]
        assert sleeper.calls == [(60,)]

    def test_on_started_runs_after_moves_before_wait(self, control, memory_controller, sleeper):
        seen = []

        def started(report):
            focused = memory_controller.members(PartitionName.FOCUS)
            seen.append((list(report.moved), focused, len(sleeper.calls)))

        control.pomodoro(5, [100], on_started=started)

        assert seen == [([100], [100], 0)]
        assert sleeper.calls == [(300,)]

    def test_on_started_not_called_when_setup_fails(self, make_control, cgroup_controller, sleeper):
        control = make_control(controller=cgroup_controller)
        (cgroup_controller.root / "cgroup.controllers").unlink()
        seen = []

        with pytest.raises(CgroupUnavailableError):
            control.pomodoro(5, [100], on_started=seen.append)

        assert seen == []
        assert sleeper.calls == []

    @pytest.mark.parametrize("minutes, pids", [(0, [1]), (-5, [1]), (5, [])])
    def test_rejects_bad_arguments(self, control, sleeper, minutes, pids):
        with pytest.raises(ConfigurationError):
            control.pomodoro(minutes, pids)
        assert sleeper.calls == []


class TestStopAll:
    """stop_all()."""

    def test_sends_sigterm_to_focus_members(self, control, killer):
        control.focus(100)
        control.focus(200)
        control.background(300)

        report = control.stop_all()

        assert report.signal_name == "SIGTERM"
        assert killer.calls == [(100, signal.SIGTERM), (200, signal.SIGTERM)]
        assert report.signalled == [100, 200]

    def test_force_sends_sigkill(self, control, killer):
        control.focus(100)

        report = control.stop_all(force=True)

        assert report.signal_name == "SIGKILL"
        assert killer.calls == [(100, signal.SIGKILL)]

    def test_signal_failure_is_reported(self, make_control, mock_logger):
        killer = Recorder(error=ProcessLookupError("gone"), fail_for={100})
        control = FocusControl(
            store=None,
            controller=InMemoryPartitionController(mock_logger),
            logger=mock_logger,
            kill=killer,
        )
        control.focus(100)
        control.focus(200)

        report = control.stop_all()

        assert report.failed == [100]
        assert report.signalled == [200]

    def test_empty_focus_partition(self, control, killer):
        report = control.stop_all()
        assert report.signalled == []
        assert killer.calls == []


class TestTicketTable:
    """add(), add_by_name(), remove(), list_entries(), ticket_share()."""

    def test_add_and_update(self, control):
        assert control.add(100, 10) is False
        assert control.add(100, 20) is True
        assert [(e.process_id, e.tickets) for e in control.list_entries()] == [(100, 20)]

    def test_add_warns_for_unknown_process(self, control, mock_logger):
        control.add(999, 5)

        mock_logger.warning.assert_called_with("process_not_running", pid=999)
        assert [e.process_id for e in control.list_entries()] == [999]

    def test_add_rejects_zero_tickets(self, control):
        with pytest.raises(InvalidTicketsError):
            control.add(100, 0)

    def test_add_by_name(self, control):
        added = control.add_by_name("firefox", 7)

        assert added == [100, 101]
        assert [(e.process_id, e.tickets) for e in control.list_entries()] == [
            (100, 7),
            (101, 7),
        ]

    def test_add_by_name_no_match(self, control):
        assert control.add_by_name("emacs", 7) == []
        assert control.list_entries() == []

    def test_add_by_name_rejects_zero_tickets(self, control):
        with pytest.raises(InvalidTicketsError):
            control.add_by_name("firefox", 0)

    def test_remove(self, control):
        control.add(100, 1)

        assert control.remove(100) is True
        assert control.remove(100) is False
        assert control.list_entries() == []

    def test_ticket_share(self, control):
        control.add(100, 10)
        control.add(200, 30)

        assert control.ticket_share() == {100: 0.25, 200: 0.75}

    def test_ticket_share_over_given_entries(self, control):
        control.add(100, 10)
        entries = control.list_entries()
        control.add(200, 30)

        assert control.ticket_share(entries) == {100: 1.0}

    def test_ticket_share_empty(self, control):
        assert control.ticket_share() == {}
