# backend/servicebooking/models/service.py
"""
Bookable service model.

A service belongs to exactly one provider and has a fixed appointment
duration. Every booking for a service lasts exactly ``duration_minutes``;
the duration is read at validation time, so changing it affects the
effective end of existing bookings too.
"""

import logging

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class Service(Base):
    """A provider's bookable offering."""

    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    provider_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    operating_hours = relationship(
        "OperatingHour", back_populates="service", cascade="all, delete-orphan"
    )
    schedule_overrides = relationship(
        "ScheduleOverride", back_populates="service", cascade="all, delete-orphan"
    )
    bookings = relationship("Booking", back_populates="service")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="check_service_duration_positive"),
    )

    def is_owned_by(self, user_id: str) -> bool:
        return self.provider_id == user_id

    def __repr__(self) -> str:
        return (
            f"<Service {self.id}: provider={self.provider_id}, "
            f"duration={self.duration_minutes}m, active={self.is_active}>"
        )
