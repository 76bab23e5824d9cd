"""Lottery scheduling - weighted random selection of the focus process."""

from focus_tower.scheduler.lottery import LotteryScheduler, time_seeded_random

__all__ = [
    "LotteryScheduler",
    "time_seeded_random",
]
