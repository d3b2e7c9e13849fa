"""Wall-clock abstraction.

All schedule arithmetic is timezone-naive: instants are local wall-clock
``datetime`` objects without ``tzinfo``.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional


class Clock(ABC):
    """Source of the current instant."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    """Clock backed by the local wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock that returns a settable instant, for tests."""

    def __init__(self, instant: Optional[datetime] = None):
        self._instant = instant or datetime(2024, 1, 1, 0, 0)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward by a ``timedelta(**kwargs)`` and return the new instant."""
        self._instant = self._instant + timedelta(**kwargs)
        return self._instant
