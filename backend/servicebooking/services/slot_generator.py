# backend/servicebooking/services/slot_generator.py
"""
Slot generation for a single date.

Each open segment is tiled from its start with a fixed stride equal to the
service duration. A slot is emitted only when it ends inside the segment;
leftover time shorter than one duration is dropped. A segment whose end is
earlier than its start runs overnight and ends on the following day.

Everything here is a pure function of its arguments.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator, Sequence

from ..core.exceptions import InvalidArgumentException
from ..schemas.availability import TimeSegment


def _check_duration(duration_minutes: int) -> None:
    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidArgumentException(
            "duration_minutes", "Duration must be a positive number of minutes"
        )


def iter_slot_starts(
    segments: Sequence[TimeSegment],
    duration_minutes: int,
    day: date,
    now: datetime,
) -> Iterator[datetime]:
    """
    Yield absolute slot start datetimes for ``day``, segment by segment.

    Starts strictly before ``now`` are skipped. Output follows segment
    order and is not globally sorted.
    """
    _check_duration(duration_minutes)
    stride = timedelta(minutes=duration_minutes)
    midnight = datetime.combine(day, time.min)

    for segment in segments:
        start_minute, end_minute = segment.minute_bounds()
        cursor = midnight + timedelta(minutes=start_minute)
        segment_end = midnight + timedelta(minutes=end_minute)

        while cursor + stride <= segment_end:
            if cursor >= now:
                yield cursor
            cursor += stride


@dataclass(frozen=True)
class SlotSequence:
    """Lazy, restartable sequence of slot start times for one date."""

    segments: Sequence[TimeSegment]
    duration_minutes: int
    day: date
    now: datetime

    def __post_init__(self) -> None:
        _check_duration(self.duration_minutes)

    def starts(self) -> Iterator[datetime]:
        return iter_slot_starts(self.segments, self.duration_minutes, self.day, self.now)

    def __iter__(self) -> Iterator[time]:
        for start in self.starts():
            yield start.time()


def generate_slots(
    segments: Sequence[TimeSegment],
    duration_minutes: int,
    day: date,
    now: datetime,
) -> SlotSequence:
    """Build the slot sequence; iterating it more than once yields the same times."""
    return SlotSequence(tuple(segments), duration_minutes, day, now)
