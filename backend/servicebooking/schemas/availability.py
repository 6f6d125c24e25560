# backend/servicebooking/schemas/availability.py
"""
Schedule DTOs: time segments, weekly schedules and date overrides.

Segment lists are validated when written so that the resolver can trust
what storage returns: a segment never has ``start == end``, segments on the
same day never overlap, and only the latest segment of a day may wrap past
midnight (``end < start``).
"""

from datetime import date, time
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator, model_validator

from ._strict_base import StrictModel, StrictRequestModel

MINUTES_PER_DAY = 24 * 60


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


class TimeSegment(StrictRequestModel):
    """Open wall-clock interval [start, end); ``end < start`` spans midnight."""

    start: time
    end: time

    @field_validator("start", "end")
    @classmethod
    def _minute_granularity(cls, value: time) -> time:
        return value.replace(second=0, microsecond=0)

    @model_validator(mode="after")
    def _non_empty(self) -> "TimeSegment":
        if self.start == self.end:
            raise ValueError("Segment start and end must differ")
        return self

    @property
    def wraps_midnight(self) -> bool:
        return self.end < self.start

    def minute_bounds(self) -> tuple[int, int]:
        """Return (start, end) in minutes from midnight, end extended past 1440 when wrapping."""
        start = _minutes(self.start)
        end = _minutes(self.end)
        if end <= start:
            end += MINUTES_PER_DAY
        return start, end


def validate_segment_set(segments: List[TimeSegment]) -> List[TimeSegment]:
    """Sort by start and reject overlaps or a wrapping segment that is not last."""
    ordered = sorted(segments, key=lambda seg: seg.start)
    previous_end: Optional[int] = None
    for index, segment in enumerate(ordered):
        start, end = segment.minute_bounds()
        if segment.wraps_midnight and index != len(ordered) - 1:
            raise ValueError("Only the latest segment of a day may span midnight")
        if previous_end is not None and start < previous_end:
            raise ValueError(
                f"Segment {segment.start.isoformat()}-{segment.end.isoformat()} overlaps the previous one"
            )
        previous_end = end
    return ordered


class DaySchedule(StrictRequestModel):
    """Weekly hours for one weekday (0 = Monday)."""

    day_of_week: int = Field(..., ge=0, le=6)
    is_closed: bool = False
    segments: List[TimeSegment] = Field(default_factory=list, validate_default=True)

    @field_validator("segments")
    @classmethod
    def _check_segments(
        cls, segments: List[TimeSegment], info: ValidationInfo
    ) -> List[TimeSegment]:
        if info.data.get("is_closed"):
            return []
        return validate_segment_set(segments)


class WeeklySchedule(StrictRequestModel):
    """A full week; days missing from ``days`` are treated as closed on update."""

    days: List[DaySchedule] = Field(default_factory=list)

    @field_validator("days")
    @classmethod
    def _unique_days(cls, days: List[DaySchedule]) -> List[DaySchedule]:
        seen = [day.day_of_week for day in days]
        if len(seen) != len(set(seen)):
            raise ValueError("Each day of week may appear only once")
        return sorted(days, key=lambda day: day.day_of_week)

    def day(self, day_of_week: int) -> Optional[DaySchedule]:
        for entry in self.days:
            if entry.day_of_week == day_of_week:
                return entry
        return None


class ScheduleOverrideCreate(StrictRequestModel):
    """Close a date or replace its hours."""

    date: date
    is_day_off: bool = False
    segments: List[TimeSegment] = Field(default_factory=list, validate_default=True)

    @field_validator("segments")
    @classmethod
    def _check_segments(
        cls, segments: List[TimeSegment], info: ValidationInfo
    ) -> List[TimeSegment]:
        if info.data.get("is_day_off"):
            return []
        if not segments:
            raise ValueError("An override that is not a day off needs at least one segment")
        return validate_segment_set(segments)


class ScheduleOverrideRead(StrictModel):
    id: str
    service_id: str
    date: date
    is_day_off: bool
    segments: List[TimeSegment] = Field(default_factory=list)
