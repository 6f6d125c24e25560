# backend/servicebooking/schemas/booking.py
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..models.booking import BookingStatus
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Request a new appointment on a service."""

    service_id: str = Field(..., min_length=1)
    booking_start: datetime
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class BookingUpdate(StrictRequestModel):
    """
    Customer edit of a booking.

    A different ``booking_start`` is a reschedule and goes through the
    availability check; the same start only touches the notes.
    """

    booking_id: str = Field(..., min_length=1)
    booking_start: datetime
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class BookingRead(StrictModel):
    id: str
    service_id: str
    customer_id: str
    provider_id: str
    booking_start: datetime
    booking_end: datetime
    status: BookingStatus
    notes: Optional[str] = None
    created_at: datetime
