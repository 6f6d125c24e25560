"""
Database models for the booking engine.

- Service: a provider's bookable offering with a fixed duration
- OperatingHour / OperatingSegment: recurring weekly hours
- ScheduleOverride / OverrideSegment: date-specific schedule replacements
- Booking: customer reservations
- BackgroundJob: queued notification events
"""

from .booking import Booking, BookingStatus
from .job import BackgroundJob
from .schedule import OperatingHour, OperatingSegment, OverrideSegment, ScheduleOverride
from .service import Service

__all__ = [
    "BackgroundJob",
    "Booking",
    "BookingStatus",
    "OperatingHour",
    "OperatingSegment",
    "OverrideSegment",
    "ScheduleOverride",
    "Service",
]
