# backend/servicebooking/models/booking.py
"""
Booking model for the booking engine.

A booking reserves one fixed-duration appointment on a service. Only the
start is stored; the end is always ``booking_start + service.duration_minutes``
so a change of the service duration is reflected immediately.

Bookings are never deleted by the engine. Status changes go through the
transition table in ``servicebooking.domain.booking_transitions``.
"""

from datetime import datetime, timedelta
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Initial state, awaiting provider approval
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @classmethod
    def active(cls) -> frozenset["BookingStatus"]:
        """Statuses that still block their time slot."""
        return frozenset({cls.PENDING, cls.CONFIRMED})

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.DECLINED, BookingStatus.CANCELLED, BookingStatus.COMPLETED)


class Booking(Base):
    """Appointment reserved by a customer on a provider's service."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)
    customer_id = Column(String(64), nullable=False, index=True)

    booking_start = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancelled_by_id = Column(String(64), nullable=True)

    service = relationship("Service", back_populates="bookings", lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'DECLINED', 'CANCELLED', 'COMPLETED')",
            name="ck_bookings_status",
        ),
        Index("idx_bookings_service_start_status", "service_id", "booking_start", "status"),
    )

    def __init__(self, **kwargs: Any) -> None:
        """Initialize in PENDING; providers approve explicitly."""
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value
        logger.info(
            "Creating booking for customer %s on service %s", self.customer_id, self.service_id
        )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: customer={self.customer_id}, service={self.service_id}, "
            f"start={self.booking_start}, status={self.status}>"
        )

    @property
    def status_enum(self) -> BookingStatus:
        return BookingStatus(self.status)

    @property
    def provider_id(self) -> Optional[str]:
        return self.service.provider_id if self.service is not None else None

    @property
    def booking_end(self) -> datetime:
        """Computed end; never stored."""
        return self.booking_start + timedelta(minutes=self.service.duration_minutes)

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.customer_id, self.provider_id)

    def apply_status(self, new_status: BookingStatus, now: datetime) -> None:
        """Set the status and stamp the matching audit column."""
        self.status = new_status.value
        self.updated_at = now
        if new_status == BookingStatus.CONFIRMED:
            self.confirmed_at = now
        elif new_status == BookingStatus.COMPLETED:
            self.completed_at = now
        elif new_status == BookingStatus.CANCELLED:
            self.cancelled_at = now
        logger.info("Booking %s moved to %s", self.id, new_status.value)
