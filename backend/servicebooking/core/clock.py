"""Injectable time source and UTC normalisation helpers."""

from datetime import datetime, timezone
from typing import Protocol


def to_utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Clock(Protocol):
    """Supplies "now" for past-time and slot-filtering checks."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FixedClock:
    """A clock frozen at a given moment; ``set`` moves it."""

    def __init__(self, moment: datetime):
        self._moment = to_utc_naive(moment)

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: datetime) -> None:
        self._moment = to_utc_naive(moment)
