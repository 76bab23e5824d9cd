"""Lottery Scheduler - weighted random winner selection.

Each round draws r uniformly from [1, total] and walks the table in
order, returning the first entry whose running ticket sum reaches r.
An entry holding t of T tickets therefore wins with probability t/T.

The random source is injectable so draws can be reproduced in tests.
Without one, a generator is seeded once from the wall clock.
"""

import random
import time
from typing import Optional, Sequence

from focus_tower.protocols import LotterySchedulerProtocol
from focus_tower.types import TicketEntry


def time_seeded_random() -> random.Random:
    """Create a generator seeded from the current time."""
    return random.Random(time.time_ns())


class LotteryScheduler(LotterySchedulerProtocol):
    """Ticket-proportional winner selection.

    Usage:
        scheduler = LotteryScheduler(random.Random(42))
        winner = scheduler.pick_winner(entries)
        if winner is None:
            # nothing to schedule
            ...
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else time_seeded_random()

    def pick_winner(self, entries: Sequence[TicketEntry]) -> Optional[int]:
        """Draw one winner. See LotterySchedulerProtocol.pick_winner."""
        if not entries:
            return None

        total = sum(e.tickets for e in entries if e.tickets > 0)
        if total <= 0:
            return None

        r = self._rng.randint(1, total)

        acc = 0
        for entry in entries:
            if entry.tickets <= 0:
                continue
            acc += entry.tickets
            if r <= acc:
                return entry.process_id

        # Unreachable with integer sums
        return entries[-1].process_id
