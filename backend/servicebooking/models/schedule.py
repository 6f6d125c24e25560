# backend/servicebooking/models/schedule.py
"""
Schedule models for the booking engine.

Two tiers define when a service is open:

    OperatingHour / OperatingSegment:
        Recurring weekly shifts keyed by (service, day of week). Several
        segments on one day model split shifts.

    ScheduleOverride / OverrideSegment:
        Date-specific replacement of the weekly hours. A day-off override
        closes the date entirely; otherwise its segments replace the weekly
        segments for that date. Overrides are never merged with weekly hours.

Segments are wall-clock [start_time, end_time) intervals without a date.
``day_of_week`` follows ``date.weekday()``: Monday is 0, Sunday is 6.
"""

import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class OperatingHour(Base):
    """Recurring weekly hours for one weekday of a service."""

    __tablename__ = "operating_hours"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    service_id = Column(String(26), ForeignKey("services.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)

    service = relationship("Service", back_populates="operating_hours")
    segments = relationship(
        "OperatingSegment",
        back_populates="operating_hour",
        cascade="all, delete-orphan",
        order_by="OperatingSegment.start_time",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("service_id", "day_of_week", name="unique_service_day_of_week"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="check_day_of_week_range"),
    )

    def __repr__(self) -> str:
        return f"<OperatingHour service={self.service_id} day={self.day_of_week}>"


class OperatingSegment(Base):
    """One open [start_time, end_time) shift within a weekday."""

    __tablename__ = "operating_segments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    operating_hour_id = Column(
        String(26), ForeignKey("operating_hours.id", ondelete="CASCADE"), nullable=False
    )
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    operating_hour = relationship("OperatingHour", back_populates="segments")


class ScheduleOverride(Base):
    """Date-specific schedule that replaces the weekly hours for that date."""

    __tablename__ = "schedule_overrides"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    service_id = Column(String(26), ForeignKey("services.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    is_day_off = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())

    service = relationship("Service", back_populates="schedule_overrides")
    segments = relationship(
        "OverrideSegment",
        back_populates="schedule_override",
        cascade="all, delete-orphan",
        order_by="OverrideSegment.start_time",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("service_id", "date", name="unique_service_override_date"),
        Index("idx_schedule_overrides_service_date", "service_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<ScheduleOverride {self.date} service={self.service_id} "
            f"{'day off' if self.is_day_off else f'{len(self.segments)} segments'}>"
        )


class OverrideSegment(Base):
    """One open [start_time, end_time) shift within an override date."""

    __tablename__ = "override_segments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    schedule_override_id = Column(
        String(26), ForeignKey("schedule_overrides.id", ondelete="CASCADE"), nullable=False
    )
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    schedule_override = relationship("ScheduleOverride", back_populates="segments")
