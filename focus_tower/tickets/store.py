"""Ticket Store - the persisted ticket table.

The table is a plain text file shared between the daemon (reader) and
focusctl invocations (writers), one ``<pid> <tickets>`` pair per line:

    1234 10
    5678 30

There is no locking. A writer may truncate and rewrite the file while the
daemon reads it, so load() parses line by line and discards anything that
does not look like a complete row instead of failing the whole read.

All access to the file goes through this module.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from protocols import LoggerProtocol

from focus_tower.errors import InvalidTicketsError, TicketTableError
from focus_tower.protocols import TicketStoreProtocol
from focus_tower.types import TicketEntry

DEFAULT_STATE_DIR = Path("/var/lib/focusctl")
DEFAULT_TICKETS_FILENAME = "procs.txt"

# Upper bound on managed processes accepted by upsert()
MAX_MANAGED_PROCESSES = 1024

_ROW = re.compile(r"^\s*([+-]?[0-9]+)\s+([+-]?[0-9]+)\s*$")


def parse_ticket_lines(lines: Iterable[str]) -> List[TicketEntry]:
    """Parse ticket table lines into entries.

    Lines with the wrong field count or non-integer fields are skipped.
    Rows with a non-positive pid or ticket count are dropped. A repeated
    pid keeps its first position and takes the last ticket count seen.

    Args:
        lines: Raw lines, with or without trailing newlines

    Returns:
        Valid entries in table order
    """
    rows: Dict[int, int] = {}
    for line in lines:
        match = _ROW.match(line)
        if not match:
            continue
        entry = TicketEntry(
            process_id=int(match.group(1)),
            tickets=int(match.group(2)),
        )
        if not entry.is_valid():
            continue
        rows[entry.process_id] = entry.tickets

    return [TicketEntry(process_id=pid, tickets=t) for pid, t in rows.items()]


def format_ticket_lines(entries: Iterable[TicketEntry]) -> str:
    """Render entries in the on-disk format, skipping invalid ones."""
    return "".join(
        f"{entry.process_id} {entry.tickets}\n"
        for entry in entries
        if entry.is_valid()
    )


class TicketStore(TicketStoreProtocol):
    """File-backed ticket table.

    Usage:
        store = TicketStore(logger, state_dir=Path("/var/lib/focusctl"))

        # Daemon side (read-only)
        entries = store.load()

        # focusctl side
        store.upsert(1234, 10)
        store.remove(1234)
    """

    def __init__(
        self,
        logger: LoggerProtocol,
        state_dir: Path = DEFAULT_STATE_DIR,
        filename: str = DEFAULT_TICKETS_FILENAME,
    ) -> None:
        """Initialize ticket store.

        Args:
            logger: Logger instance
            state_dir: Directory holding the table file
            filename: Table file name inside state_dir
        """
        self._logger = logger.bind(component="ticket_store")
        self._state_dir = Path(state_dir)
        self._path = self._state_dir / filename

    @property
    def path(self) -> Path:
        """Path of the backing file."""
        return self._path

    # =========================================================================
    # Reading
    # =========================================================================

    def load(self) -> List[TicketEntry]:
        """Read the table. See TicketStoreProtocol.load."""
        try:
            # A torn write can split a multibyte sequence; never fail on it
            with open(self._path, "r", encoding="utf-8", errors="replace") as f:
                entries = parse_ticket_lines(f)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise TicketTableError(f"cannot read {self._path}: {e}") from e

        return entries

    def get(self, pid: int) -> Optional[TicketEntry]:
        """Look up a single entry by process id."""
        for entry in self.load():
            if entry.process_id == pid:
                return entry
        return None

    # =========================================================================
    # Writing (focusctl only; the daemon never calls these)
    # =========================================================================

    def ensure_state_dir(self) -> None:
        """Create the state directory if it does not exist yet."""
        try:
            self._state_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise TicketTableError(
                f"cannot create state directory {self._state_dir}: {e}"
            ) from e

    def save(self, entries: Iterable[TicketEntry]) -> None:
        """Overwrite the whole table with the given entries.

        Invalid entries are silently left out.

        Raises:
            TicketTableError: If the file cannot be written
        """
        self.ensure_state_dir()
        try:
            self._path.write_text(format_ticket_lines(entries), encoding="utf-8")
        except OSError as e:
            raise TicketTableError(f"cannot write {self._path}: {e}") from e

    def upsert(self, pid: int, tickets: int) -> bool:
        """Add a process or update its ticket count.

        Args:
            pid: Process id (> 0)
            tickets: Ticket count (> 0)

        Returns:
            True if an existing row was updated, False if a row was added

        Raises:
            InvalidTicketsError: If pid or tickets is not positive
            TicketTableError: On I/O failure or when the table is full
        """
        if tickets <= 0:
            raise InvalidTicketsError("tickets must be > 0")
        if pid <= 0:
            raise InvalidTicketsError("pid must be > 0")

        entries = self.load()
        updated = False
        for i, entry in enumerate(entries):
            if entry.process_id == pid:
                entries[i] = TicketEntry(process_id=pid, tickets=tickets)
                updated = True
                break

        if not updated:
            if len(entries) >= MAX_MANAGED_PROCESSES:
                raise TicketTableError(
                    f"too many managed processes (max {MAX_MANAGED_PROCESSES})"
                )
            entries.append(TicketEntry(process_id=pid, tickets=tickets))

        self.save(entries)

        self._logger.info(
            "tickets_updated" if updated else "tickets_added",
            pid=pid,
            tickets=tickets,
        )
        return updated

    def remove(self, pid: int) -> bool:
        """Remove a process from the table.

        Returns:
            True if a row was removed
        """
        entries = self.load()
        remaining = [e for e in entries if e.process_id != pid]
        removed = len(remaining) != len(entries)

        self.save(remaining)

        self._logger.info("tickets_removed", pid=pid, found=removed)
        return removed
