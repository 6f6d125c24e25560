# backend/servicebooking/services/conflict_checker.py
"""
Booking conflict detection.

Plain half-open interval math: [s1, e1) and [s2, e2) overlap iff
``s1 < e2 and e1 > s2``, so back-to-back bookings never conflict.

Callers pass only bookings that can block a slot (PENDING or CONFIRMED)
for the relevant service and window; nothing here filters by status.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, NamedTuple, Optional


class BookedInterval(NamedTuple):
    start: datetime
    end: datetime
    booking_id: Optional[str] = None


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and end_a > start_b


def has_conflict(
    candidate_start: datetime,
    candidate_end: datetime,
    active_bookings: Iterable[BookedInterval],
) -> bool:
    """True when the candidate interval overlaps any booked interval."""
    return any(
        overlaps(candidate_start, candidate_end, booked.start, booked.end)
        for booked in active_bookings
    )


def filter_conflicting(
    candidate_slots: Iterable[datetime],
    active_bookings: Iterable[BookedInterval],
    duration_minutes: int,
) -> List[datetime]:
    """Keep the slot starts whose ``duration_minutes`` interval is free."""
    booked = list(active_bookings)
    length = timedelta(minutes=duration_minutes)
    return [slot for slot in candidate_slots if not has_conflict(slot, slot + length, booked)]
