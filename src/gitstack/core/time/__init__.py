from gitstack.core.time.abc import Time
from gitstack.core.time.fake import FakeTime
from gitstack.core.time.real import RealTime

__all__ = ["FakeTime", "RealTime", "Time"]
