"""Ticket table persistence.

Exports:
- TicketStore: file-backed ticket table
- parse_ticket_lines / format_ticket_lines: the on-disk format
"""

from focus_tower.tickets.store import (
    DEFAULT_STATE_DIR,
    DEFAULT_TICKETS_FILENAME,
    MAX_MANAGED_PROCESSES,
    TicketStore,
    format_ticket_lines,
    parse_ticket_lines,
)

__all__ = [
    "DEFAULT_STATE_DIR",
    "DEFAULT_TICKETS_FILENAME",
    "MAX_MANAGED_PROCESSES",
    "TicketStore",
    "format_ticket_lines",
    "parse_ticket_lines",
]
