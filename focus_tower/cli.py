"""Command-line entry points.

    focusd <timeslice_ms> [--dry-run] [...]
        Run the lottery scheduling daemon until SIGTERM/SIGINT.

    focusctl <command> [...]
        One-shot control commands sharing the daemon's state.

Both exit with status 1 on configuration or environment errors.
"""

import argparse
import random
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from protocols import LoggerProtocol
from shared.logging import configure_logging, create_logger

from focus_tower.control import FocusControl
from focus_tower.daemon import SchedulingDaemon
from focus_tower.errors import FocusTowerError
from focus_tower.protocols import PartitionControllerProtocol
from focus_tower.resources import CgroupPartitionController, InMemoryPartitionController
from focus_tower.scheduler import LotteryScheduler, time_seeded_random
from focus_tower.settings import FocusSettings
from focus_tower.tickets import TicketStore
from focus_tower.types import NEUTRAL_CPU_WEIGHT, PartitionName


# =============================================================================
# Wiring
# =============================================================================

def _settings_overrides(args: argparse.Namespace) -> dict:
    """Collect settings given on the command line (unset ones are skipped)."""
    overrides = {
        "cgroup_root": getattr(args, "cgroup_root", None),
        "state_dir": getattr(args, "state_dir", None),
        "seed": getattr(args, "seed", None),
        "log_level": getattr(args, "log_level", None),
    }
    if getattr(args, "console_logs", False):
        overrides["json_logs"] = False
    return {k: v for k, v in overrides.items() if v is not None}


def build_store(settings: FocusSettings, logger: LoggerProtocol) -> TicketStore:
    """Ticket store at the configured location."""
    return TicketStore(logger, state_dir=settings.state_dir, filename=settings.tickets_filename)


def build_daemon(
    settings: FocusSettings,
    logger: LoggerProtocol,
    controller: Optional[PartitionControllerProtocol] = None,
) -> SchedulingDaemon:
    """Assemble a daemon from settings.

    Partitions are created and weighted before the daemon is returned, so
    a missing cgroup v2 hierarchy fails here, before the loop starts.

    Args:
        settings: Effective settings
        logger: Logger instance
        controller: Partition backend (cgroup v2 at settings.cgroup_root if None)
    """
    if controller is None:
        controller = CgroupPartitionController(logger, root=settings.cgroup_root)

    controller.ensure_partitions(settings.focus_weight, settings.background_weight)

    rng = random.Random(settings.seed) if settings.seed is not None else time_seeded_random()

    return SchedulingDaemon(
        store=build_store(settings, logger),
        scheduler=LotteryScheduler(rng),
        controller=controller,
        timeslice_ms=settings.timeslice_ms,
        logger=logger,
    )


def install_stop_handlers(stop_event: threading.Event) -> None:
    """Set stop_event on SIGTERM and SIGINT."""
    def _handler(signum, frame):
        stop_event.set()

    signal.signal(signal.SIGTERM, _handler)
    signal.signal(signal.SIGINT, _handler)


# =============================================================================
# focusd
# =============================================================================

def build_daemon_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="focusd",
        description="User-level lottery scheduler over cgroup v2.",
        epilog="Example: sudo focusd 100",
    )
    parser.add_argument("timeslice_ms", help="Round length in milliseconds (> 0)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Draw winners and log them without touching cgroups",
    )
    parser.add_argument("--cgroup-root", type=Path, help="cgroup v2 mount point")
    parser.add_argument("--state-dir", type=Path, help="Directory holding procs.txt")
    parser.add_argument("--seed", type=int, help="Fixed seed for the lottery draw")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument(
        "--console-logs",
        action="store_true",
        help="Human-readable logs instead of JSON",
    )
    return parser


def daemon_main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for focusd."""
    args = build_daemon_parser().parse_args(argv)

    try:
        settings = FocusSettings(timeslice_ms=args.timeslice_ms, **_settings_overrides(args))
    except ValidationError as e:
        configure_logging(args.log_level or "INFO", json_output=not args.console_logs)
        create_logger("focusd").error("invalid_configuration", error=str(e))
        return 1

    configure_logging(settings.log_level, json_output=settings.json_logs)
    logger = create_logger("focusd", dry_run=args.dry_run)
    settings.log_status(logger)

    controller = InMemoryPartitionController(logger) if args.dry_run else None
    try:
        daemon = build_daemon(settings, logger, controller=controller)
    except FocusTowerError as e:
        logger.error("startup_failed", error=str(e))
        return 1

    logger.info("reading_ticket_table", path=str(settings.tickets_path))

    stop_event = threading.Event()
    install_stop_handlers(stop_event)
    daemon.run(stop_event)
    return 0


# =============================================================================
# focusctl
# =============================================================================

def build_ctl_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="focusctl",
        description="Control the focus/background partitions and the lottery ticket table.",
    )
    parser.add_argument("--cgroup-root", type=Path, help="cgroup v2 mount point")
    parser.add_argument("--state-dir", type=Path, help="Directory holding procs.txt")
    parser.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING or ERROR")

    sub = parser.add_subparsers(dest="command", required=True, metavar="command")

    sub.add_parser("init", help="Create the focus and background partitions")

    for name, help_text in (
        ("focus", "Move a process into the focus partition"),
        ("background", "Move a process into the background partition"),
        ("unfocus", "Move a process back to the root group"),
        ("remove", "Remove a process from the lottery"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("pid", type=int)

    for name, help_text in (
        ("focus-name", "Move processes whose name contains SUBSTRING into focus"),
        ("background-name", "Move processes whose name contains SUBSTRING into background"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("substring")

    p = sub.add_parser("pomodoro", help="Boost processes for a number of minutes")
    p.add_argument("minutes", type=int)
    p.add_argument("pids", nargs="+")

    p = sub.add_parser("stop-all", help="Terminate every process in the focus partition")
    p.add_argument("--force", action="store_true", help="Send SIGKILL instead of SIGTERM")

    sub.add_parser("relax", help=f"Reset both partition weights to {NEUTRAL_CPU_WEIGHT}")
    sub.add_parser("status", help="Show partition weights and members")

    p = sub.add_parser("add", help="Register a process for lottery scheduling")
    p.add_argument("pid", type=int)
    p.add_argument("tickets", type=int)

    p = sub.add_parser("add-name", help="Register processes whose name contains SUBSTRING")
    p.add_argument("substring")
    p.add_argument("tickets", type=int)

    sub.add_parser("list", help="Show the lottery ticket table")

    return parser


def _parse_pids(raw: Sequence[str]) -> List[int]:
    pids = []
    for value in raw:
        if not value.isdigit():
            print(f"Invalid pid: {value}", file=sys.stderr)
            continue
        pids.append(int(value))
    return pids


def run_ctl_command(args: argparse.Namespace, control: FocusControl, settings: FocusSettings) -> int:
    """Execute one parsed focusctl command and print its outcome."""
    command = args.command

    if command == "init":
        control.init()
        print(
            f"Initialized focus and background cgroups "
            f"(focus={settings.focus_weight}, background={settings.background_weight})."
        )
    elif command in ("focus", "background"):
        getattr(control, command)(args.pid)
        print(f"Moved pid {args.pid} to {command} group.")
    elif command == "unfocus":
        control.unfocus(args.pid)
        print(f"Moved pid {args.pid} back to root cgroup (unfocused).")
    elif command in ("focus-name", "background-name"):
        partition = PartitionName(command.split("-")[0])
        report = control.move_by_name(partition, args.substring)
        if not report.moved and not report.failed:
            print(f'No processes found with name containing "{args.substring}".')
        else:
            print(
                f'Moved {len(report.moved)} processes matching "{args.substring}" '
                f"to {partition.value} group."
            )
            for pid in report.failed:
                print(f"Failed to move pid {pid} to {partition.value}", file=sys.stderr)
    elif command == "pomodoro":
        def _started(report):
            for pid in report.failed:
                print(f"Failed to move pid {pid} to focus", file=sys.stderr)
            print(f"Pomodoro started for {args.minutes} minute(s). Focus group boosted.")
            print(f"Sleeping for {args.minutes * 60} seconds...", flush=True)

        control.pomodoro(args.minutes, _parse_pids(args.pids), on_started=_started)
        print(f"Pomodoro finished. Reset weights to {NEUTRAL_CPU_WEIGHT}.")
    elif command == "stop-all":
        report = control.stop_all(force=args.force)
        if not report.signalled:
            print("No processes to stop in focus group.")
        else:
            print(
                f"Sent {report.signal_name} to {len(report.signalled)} "
                f"process(es) in focus group."
            )
    elif command == "relax":
        control.relax()
        print(f"Reset cpu.weight of focus and background to {NEUTRAL_CPU_WEIGHT}.")
    elif command == "status":
        for status in control.status():
            print(f"=== {status.name.value.capitalize()} group (weight {status.weight}) ===")
            if status.error:
                print(f"unavailable: {status.error}")
            for pid in status.members:
                print(pid)
            print()
    elif command == "add":
        updated = control.add(args.pid, args.tickets)
        if updated:
            print(f"Updated pid {args.pid} tickets to {args.tickets}.")
        else:
            print(f"Added pid {args.pid} with {args.tickets} tickets.")
    elif command == "add-name":
        added = control.add_by_name(args.substring, args.tickets)
        if not added:
            print(f'No processes found with name containing "{args.substring}".')
        else:
            print(
                f'Added/updated {len(added)} processes matching "{args.substring}" '
                f"with {args.tickets} tickets."
            )
    elif command == "remove":
        control.remove(args.pid)
        print(f"Removed pid {args.pid} from lottery list (if it was present).")
    elif command == "list":
        entries = control.list_entries()
        if not entries:
            print("No processes registered for lottery scheduling.")
        else:
            shares = control.ticket_share(entries)
            print("PID\tTickets\tShare")
            print("----\t-------\t-----")
            for entry in entries:
                print(f"{entry.process_id}\t{entry.tickets}\t{shares[entry.process_id]:.1%}")

    return 0


def ctl_main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for focusctl."""
    args = build_ctl_parser().parse_args(argv)

    configure_logging(args.log_level, json_output=False)
    logger = create_logger("focusctl", command=args.command)

    try:
        settings = FocusSettings(**_settings_overrides(args))
    except ValidationError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 1

    control = FocusControl(
        store=build_store(settings, logger),
        controller=CgroupPartitionController(logger, root=settings.cgroup_root),
        logger=logger,
        focus_weight=settings.focus_weight,
        background_weight=settings.background_weight,
    )

    try:
        return run_ctl_command(args, control, settings)
    except FocusTowerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(ctl_main())
