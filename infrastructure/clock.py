"""Clock implementations"""
from datetime import datetime

from domain.clock import Clock


class SystemClock(Clock):
    """Wall-clock time, naive local, matching how reservations are entered"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Always returns the same instant; used by tests and previews"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant
