# backend/servicebooking/services/availability_service.py
"""
Availability Service for the booking engine.

Composes the schedule resolver, the slot generator and the conflict
checker to answer two questions:

- is this exact start time bookable for a service?
- which start times are bookable on a date?

All datetimes are naive UTC. Aware inputs are normalised at this boundary.
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.clock import Clock, to_utc_naive
from ..core.exceptions import EntityNotFoundException, InvalidArgumentException
from ..models.booking import Booking
from ..models.service import Service
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.service_repository import ServiceRepository
from ..schemas.availability import MINUTES_PER_DAY, TimeSegment
from .base import BaseService
from .conflict_checker import BookedInterval, filter_conflicting, has_conflict
from .schedule_resolver import ScheduleResolver
from .slot_generator import iter_slot_starts

logger = logging.getLogger(__name__)


def _fits_in_segment(start: datetime, duration_minutes: int, segment: TimeSegment) -> bool:
    """Whole [start, start + duration) inside one segment, in minutes from midnight."""
    minute = start.hour * 60 + start.minute + start.second / 60
    seg_start, seg_end = segment.minute_bounds()
    return seg_start <= minute and minute + duration_minutes <= seg_end


def booked_intervals(bookings: Sequence[Booking], duration_minutes: int) -> List[BookedInterval]:
    length = timedelta(minutes=duration_minutes)
    return [BookedInterval(b.booking_start, b.booking_start + length, b.id) for b in bookings]


class AvailabilityService(BaseService):
    """
    Service answering availability questions for a single service.

    A service's bookings all share its current duration, so a booking that
    can overlap ``[start, end)`` must itself start in ``[start - duration, end)``.
    """

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        schedule_resolver: Optional[ScheduleResolver] = None,
        booking_repository: Optional[BookingRepository] = None,
        service_repository: Optional[ServiceRepository] = None,
    ):
        super().__init__(db, clock)
        self.logger = logging.getLogger(__name__)
        self.schedule_resolver = schedule_resolver or ScheduleResolver(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
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

    def _active_intervals(
        self,
        service: Service,
        window_start: datetime,
        window_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[BookedInterval]:
        bookings = self.booking_repository.get_active_bookings_in_range(
            service.id, window_start, window_end, exclude_booking_id=exclude_booking_id
        )
        return booked_intervals(bookings, service.duration_minutes)

    @BaseService.measure_operation("is_slot_available")
    def is_slot_available(
        self,
        service_id: str,
        start: datetime,
        duration_minutes: int,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """
        Check whether ``[start, start + duration_minutes)`` can be booked.

        Args:
            service_id: Service to check
            start: Proposed start (naive UTC, or aware and converted)
            duration_minutes: Appointment length
            exclude_booking_id: Booking to ignore, used when rescheduling it

        Returns:
            False for past, closed, out-of-hours or conflicting times

        Raises:
            EntityNotFoundException: the service does not exist
            InvalidArgumentException: missing start or non-positive duration
        """
        if start is None:
            raise InvalidArgumentException("start")
        if duration_minutes is None or duration_minutes <= 0:
            raise InvalidArgumentException(
                "duration_minutes", "Duration must be a positive number of minutes"
            )
        start = to_utc_naive(start)
        self.logger.debug(
            "Checking availability for service %s at %s for %d minutes",
            service_id,
            start,
            duration_minutes,
        )

        service = self._get_service_or_raise(service_id)

        if start < self.clock.now():
            self.logger.info(
                "Slot unavailable for service %s: %s is in the past", service_id, start
            )
            return False

        segments = self.schedule_resolver.resolve_segments(service_id, start.date())
        if not segments:
            self.logger.info(
                "Slot unavailable for service %s: closed on %s", service_id, start.date()
            )
            return False

        if not any(_fits_in_segment(start, duration_minutes, seg) for seg in segments):
            self.logger.info(
                "Slot unavailable for service %s: %s is outside operating hours",
                service_id,
                start,
            )
            return False

        end = start + timedelta(minutes=duration_minutes)
        window_start = start - timedelta(minutes=service.duration_minutes)
        intervals = self._active_intervals(service, window_start, end, exclude_booking_id)
        if has_conflict(start, end, intervals):
            self.logger.info(
                "Slot unavailable for service %s: %s conflicts with an existing booking",
                service_id,
                start,
            )
            return False

        self.logger.info("Slot available for service %s at %s", service_id, start)
        return True

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(self, service_id: str, on_date: date) -> List[time]:
        """
        Bookable start times on ``on_date``, sorted ascending by time of day.

        Raises:
            EntityNotFoundException: the service does not exist
        """
        if on_date is None:
            raise InvalidArgumentException("date")
        if isinstance(on_date, datetime):
            on_date = to_utc_naive(on_date).date()

        service = self._get_service_or_raise(service_id)
        segments = self.schedule_resolver.resolve_segments(service_id, on_date)
        if not segments:
            self.logger.info("No open segments for service %s on %s", service_id, on_date)
            return []

        duration = service.duration_minutes
        midnight = datetime.combine(on_date, time.min)
        # Overnight segments may end up to a day after midnight of the next day.
        window_start = midnight - timedelta(minutes=duration)
        window_end = midnight + timedelta(minutes=2 * MINUTES_PER_DAY)
        intervals = self._active_intervals(service, window_start, window_end)

        candidates = iter_slot_starts(segments, duration, on_date, self.clock.now())
        free = filter_conflicting(candidates, intervals, duration)
        # Starts past midnight belong to the next date, which resolves its own segments.
        return sorted(slot.time() for slot in free if slot.date() == on_date)
