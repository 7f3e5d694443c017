"""Fake clock for testing.

FakeTime returns a fixed instant, advancing by one second per call so that
start and finish timestamps of a run remain ordered.
"""

from datetime import UTC, datetime, timedelta

from gitstack.core.time.abc import Time


class FakeTime(Time):
    """In-memory clock that tracks calls.

    This class has NO public setup methods. All state is provided via constructor.
    """

    def __init__(self, *, start: datetime | None = None) -> None:
        self._current = start if start is not None else datetime(2025, 1, 1, tzinfo=UTC)
        self._now_calls = 0

    @property
    def now_calls(self) -> int:
        """Number of times now() was called (for test assertions)."""
        return self._now_calls

    def now(self) -> datetime:
        value = self._current
        self._current = self._current + timedelta(seconds=1)
        self._now_calls += 1
        return value
