"""Domain events queued for background processing."""

from .booking_events import (
    BookingCancelled,
    BookingConfirmed,
    BookingCreated,
    BookingDeclined,
    BookingRescheduled,
)
from .publisher import EventPublisher

__all__ = [
    "BookingCancelled",
    "BookingConfirmed",
    "BookingCreated",
    "BookingDeclined",
    "BookingRescheduled",
    "EventPublisher",
]
