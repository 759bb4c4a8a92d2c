"""Domain Clock Interface"""
from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):
    """Source of the reference "now" used by advance-booking checks"""

    @abstractmethod
    def now(self) -> datetime:
        pass
