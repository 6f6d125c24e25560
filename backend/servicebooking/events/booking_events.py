"""Booking domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass
class BookingCreated:
    """Fired after a booking is created; the provider must approve it."""

    booking_id: str
    service_id: str
    customer_id: str
    provider_id: str
    booking_start: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingConfirmed:
    """Fired after the provider confirms a booking."""

    booking_id: str
    customer_id: str
    booking_start: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingDeclined:
    """Fired after the provider declines a booking."""

    booking_id: str
    customer_id: str
    booking_start: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingCancelled:
    """Fired after a booking is cancelled."""

    booking_id: str
    cancelled_by: str  # 'customer' or 'provider'
    recipient_id: str
    booking_start: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingRescheduled:
    """Fired after the customer moves a booking to a new time."""

    booking_id: str
    provider_id: str
    old_start: datetime
    new_start: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
