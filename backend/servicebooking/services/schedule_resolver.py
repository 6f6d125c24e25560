# backend/servicebooking/services/schedule_resolver.py
"""
Schedule Resolver for the booking engine.

Answers one question: which time segments are open for a service on a
given calendar date. A date override always wins over the weekly hours,
as a whole: a day-off override closes the date, any other override
replaces the weekly segments for that date. The two tiers are never
merged.
"""

from datetime import date
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..repositories import RepositoryFactory
from ..repositories.schedule_repository import ScheduleRepository
from ..schemas.availability import TimeSegment
from .base import BaseService

logger = logging.getLogger(__name__)


def _to_segments(rows: Iterable) -> List[TimeSegment]:
    return [
        TimeSegment(start=row.start_time, end=row.end_time)
        for row in sorted(rows, key=lambda row: row.start_time)
    ]


class ScheduleResolver(BaseService):
    """Resolves override-vs-weekly precedence into open segments."""

    def __init__(self, db: Session, schedule_repository: Optional[ScheduleRepository] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.schedule_repository = (
            schedule_repository or RepositoryFactory.create_schedule_repository(db)
        )

    def resolve_segments(self, service_id: str, on_date: date) -> List[TimeSegment]:
        """
        Return the open segments for ``service_id`` on ``on_date``.

        Segments come back sorted by start time.
        An empty list means the service is closed that day.
        """
        override = self.schedule_repository.get_override(service_id, on_date)
        if override is not None:
            if override.is_day_off:
                self.logger.debug("Service %s has a day off on %s", service_id, on_date)
                return []
            return _to_segments(override.segments)

        weekly = self.schedule_repository.get_operating_hour(service_id, on_date.weekday())
        if weekly is None:
            return []
        return _to_segments(weekly.segments)
