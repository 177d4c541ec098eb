"""
Clock capability.

Verification reads the current time through a Clock so tests can pin it.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    @abstractmethod
    def now(self) -> float:
        """Return the current Unix time in seconds."""
        ...


class SystemClock(Clock):
    """Wall clock."""

    def now(self) -> float:
        return time.time()


class FixedClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, timestamp: float):
        self.timestamp = float(timestamp)

    def now(self) -> float:
        return self.timestamp

    def advance(self, seconds: float) -> None:
        self.timestamp += seconds

    def set(self, timestamp: float) -> None:
        self.timestamp = float(timestamp)


def to_datetime(timestamp: float) -> datetime:
    """Convert Unix time to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)
