"""Clock abstraction for testing.

Sync runs are stamped with start and finish times; injecting the clock keeps
those timestamps deterministic under test.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract clock operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...
