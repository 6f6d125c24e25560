# backend/servicebooking/services/schedule_service.py
"""
Schedule Service for the booking engine.

Provider-facing management of the two schedule tiers:

- weekly hours, replaced as a whole on every update
- date overrides, added and removed one date at a time

Only the service's provider may change its schedule. Segment sets are
validated by the DTOs before anything is written.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    BookingAuthorizationException,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidArgumentException,
)
from ..models.schedule import ScheduleOverride
from ..models.service import Service
from ..repositories import RepositoryFactory
from ..repositories.schedule_repository import ScheduleRepository
from ..repositories.service_repository import ServiceRepository
from ..schemas.availability import (
    DaySchedule,
    ScheduleOverrideCreate,
    ScheduleOverrideRead,
    TimeSegment,
    WeeklySchedule,
)
from .base import BaseService

logger = logging.getLogger(__name__)


def override_to_read(override: ScheduleOverride) -> ScheduleOverrideRead:
    return ScheduleOverrideRead(
        id=override.id,
        service_id=override.service_id,
        date=override.date,
        is_day_off=override.is_day_off,
        segments=[
            TimeSegment(start=segment.start_time, end=segment.end_time)
            for segment in sorted(override.segments, key=lambda seg: seg.start_time)
        ],
    )


class ScheduleService(BaseService):
    """Weekly hours and date overrides for a provider's service."""

    def __init__(
        self,
        db: Session,
        schedule_repository: Optional[ScheduleRepository] = None,
        service_repository: Optional[ServiceRepository] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.schedule_repository = (
            schedule_repository or RepositoryFactory.create_schedule_repository(db)
        )
        self.service_repository = (
            service_repository or RepositoryFactory.create_service_repository(db)
        )

    def _get_service_or_raise(self, service_id: str) -> Service:
        if not service_id:
            raise InvalidArgumentException("service_id")
        service = self.service_repository.get_service(service_id)
        if service is None:
            self.logger.warning("Service with ID %s not found", service_id)
            raise EntityNotFoundException("Service", service_id)
        return service

    def _get_owned_service(self, service_id: str, provider_id: str, action: str) -> Service:
        if not provider_id:
            raise InvalidArgumentException("provider_id")
        service = self._get_service_or_raise(service_id)
        if not service.is_owned_by(provider_id):
            self.logger.warning(
                "User %s tried to %s on service %s owned by %s",
                provider_id,
                action,
                service_id,
                service.provider_id,
            )
            raise BookingAuthorizationException(provider_id, action)
        return service

    @BaseService.measure_operation("get_weekly_schedule")
    def get_weekly_schedule(self, service_id: str) -> WeeklySchedule:
        """Monday to Sunday; days without hours come back closed."""
        self._get_service_or_raise(service_id)
        stored = {
            hour.day_of_week: hour for hour in self.schedule_repository.get_weekly_hours(service_id)
        }

        days: List[DaySchedule] = []
        for day_of_week in range(7):
            hour = stored.get(day_of_week)
            if hour is None or not hour.segments:
                days.append(DaySchedule(day_of_week=day_of_week, is_closed=True))
                continue
            days.append(
                DaySchedule(
                    day_of_week=day_of_week,
                    segments=[
                        TimeSegment(start=segment.start_time, end=segment.end_time)
                        for segment in hour.segments
                    ],
                )
            )
        return WeeklySchedule(days=days)

    @BaseService.measure_operation("update_weekly_schedule")
    def update_weekly_schedule(
        self, service_id: str, schedule: WeeklySchedule, provider_id: str
    ) -> WeeklySchedule:
        """
        Replace every weekly entry of the service with ``schedule``.

        Weekdays absent from ``schedule`` or marked closed end up closed.

        Raises:
            EntityNotFoundException: the service does not exist
            BookingAuthorizationException: ``provider_id`` does not own the service
        """
        self._get_owned_service(service_id, provider_id, "UpdateSchedule")
        self.log_operation("update_weekly_schedule", service_id=service_id)

        days = [
            (day.day_of_week, [(segment.start, segment.end) for segment in day.segments])
            for day in schedule.days
            if not day.is_closed
        ]
        with self.transaction():
            self.schedule_repository.replace_weekly_hours(service_id, days)

        return self.get_weekly_schedule(service_id)

    @BaseService.measure_operation("add_override")
    def add_override(
        self, service_id: str, override: ScheduleOverrideCreate, provider_id: str
    ) -> ScheduleOverrideRead:
        """
        Close a date or replace its hours.

        Raises:
            DuplicateEntityException: an override already exists for that date
        """
        self._get_owned_service(service_id, provider_id, "AddOverride")

        if self.schedule_repository.get_override(service_id, override.date) is not None:
            raise DuplicateEntityException("ScheduleOverride", override.date.isoformat())

        self.log_operation(
            "add_override",
            service_id=service_id,
            date=override.date.isoformat(),
            is_day_off=override.is_day_off,
        )
        with self.transaction():
            created = self.schedule_repository.create_override(
                service_id,
                override.date,
                override.is_day_off,
                [(segment.start, segment.end) for segment in override.segments],
            )
        return override_to_read(created)

    @BaseService.measure_operation("delete_override")
    def delete_override(self, override_id: str, provider_id: str) -> None:
        if not override_id:
            raise InvalidArgumentException("override_id")
        override = self.schedule_repository.get_override_by_id(override_id)
        if override is None:
            raise EntityNotFoundException("ScheduleOverride", override_id)

        self._get_owned_service(override.service_id, provider_id, "DeleteOverride")
        self.log_operation(
            "delete_override", override_id=override_id, service_id=override.service_id
        )
        with self.transaction():
            self.schedule_repository.delete_override(override)

    @BaseService.measure_operation("get_overrides")
    def get_overrides(
        self, service_id: str, from_date: Optional[date] = None
    ) -> List[ScheduleOverrideRead]:
        self._get_service_or_raise(service_id)
        return [
            override_to_read(override)
            for override in self.schedule_repository.list_overrides(service_id, from_date)
        ]
