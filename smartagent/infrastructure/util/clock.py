from typing import Optional, Protocol
from datetime import datetime, timedelta, timezone


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """Clock that only moves when told to"""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, **delta: float) -> datetime:
        self._now = self._now + timedelta(**delta)
        return self._now
