# backend/servicebooking/repositories/schedule_repository.py
"""
Schedule Repository for the booking engine.

Stores the two schedule tiers: weekly operating hours and date-specific
overrides. Weekly hours are written with full replacement semantics:
every existing weekday entry for the service is deleted and the new set
inserted within the caller's transaction.
"""

from datetime import date, time
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.schedule import OperatingHour, OperatingSegment, OverrideSegment, ScheduleOverride
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

SegmentBounds = Tuple[time, time]


class ScheduleRepository(BaseRepository[OperatingHour]):
    """Data access for weekly hours and schedule overrides."""

    def __init__(self, db: Session):
        super().__init__(db, OperatingHour)
        self.logger = logging.getLogger(__name__)

    # Weekly hours

    def get_operating_hour(self, service_id: str, day_of_week: int) -> Optional[OperatingHour]:
        try:
            return (
                self.db.query(OperatingHour)
                .filter(
                    OperatingHour.service_id == service_id,
                    OperatingHour.day_of_week == day_of_week,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading hours for {service_id} day {day_of_week}: {str(e)}")
            raise RepositoryException(f"Failed to load operating hours: {str(e)}")

    def get_weekly_hours(self, service_id: str) -> List[OperatingHour]:
        try:
            return (
                self.db.query(OperatingHour)
                .filter(OperatingHour.service_id == service_id)
                .order_by(OperatingHour.day_of_week)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading weekly hours for {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to load weekly hours: {str(e)}")

    def replace_weekly_hours(
        self, service_id: str, days: Iterable[Tuple[int, Sequence[SegmentBounds]]]
    ) -> List[OperatingHour]:
        """
        Delete all weekly entries for the service and insert ``days``.

        Days with no segments are skipped; a missing weekday means closed.
        Does NOT commit.
        """
        for existing in self.get_weekly_hours(service_id):
            self.db.delete(existing)
        self.db.flush()

        created: List[OperatingHour] = []
        for day_of_week, segments in days:
            if not segments:
                continue
            hour = OperatingHour(
                service_id=service_id,
                day_of_week=day_of_week,
                segments=[OperatingSegment(start_time=start, end_time=end) for start, end in segments],
            )
            self.db.add(hour)
            created.append(hour)
        self.db.flush()
        self.logger.info(
            "Replaced weekly hours for service %s with %d day(s)", service_id, len(created)
        )
        return created

    # Overrides

    def get_override(self, service_id: str, on_date: date) -> Optional[ScheduleOverride]:
        try:
            return (
                self.db.query(ScheduleOverride)
                .filter(ScheduleOverride.service_id == service_id, ScheduleOverride.date == on_date)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading override for {service_id} on {on_date}: {str(e)}")
            raise RepositoryException(f"Failed to load schedule override: {str(e)}")

    def get_override_by_id(self, override_id: str) -> Optional[ScheduleOverride]:
        try:
            return self.db.query(ScheduleOverride).filter(ScheduleOverride.id == override_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading override {override_id}: {str(e)}")
            raise RepositoryException(f"Failed to load schedule override: {str(e)}")

    def list_overrides(
        self, service_id: str, from_date: Optional[date] = None
    ) -> List[ScheduleOverride]:
        try:
            query = self.db.query(ScheduleOverride).filter(ScheduleOverride.service_id == service_id)
            if from_date is not None:
                query = query.filter(ScheduleOverride.date >= from_date)
            return query.order_by(ScheduleOverride.date).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing overrides for {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to list schedule overrides: {str(e)}")

    def create_override(
        self,
        service_id: str,
        on_date: date,
        is_day_off: bool,
        segments: Sequence[SegmentBounds] = (),
    ) -> ScheduleOverride:
        """Insert an override; does NOT commit."""
        override = ScheduleOverride(
            service_id=service_id,
            date=on_date,
            is_day_off=is_day_off,
            segments=[OverrideSegment(start_time=start, end_time=end) for start, end in segments],
        )
        self.db.add(override)
        self.db.flush()
        return override

    def delete_override(self, override: ScheduleOverride) -> None:
        """Remove an override and its segments; does NOT commit."""
        self.db.delete(override)
        self.db.flush()
