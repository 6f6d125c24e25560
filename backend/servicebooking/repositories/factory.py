# backend/servicebooking/repositories/factory.py
"""
Repository Factory for the booking engine.

Provides centralized creation of repository instances so services can
fall back to SQLAlchemy-backed stores when no explicit collaborator is
passed in.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .job_repository import JobRepository
    from .schedule_repository import ScheduleRepository
    from .service_repository import ServiceRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_schedule_repository(db: Session) -> "ScheduleRepository":
        from .schedule_repository import ScheduleRepository

        return ScheduleRepository(db)

    @staticmethod
    def create_service_repository(db: Session) -> "ServiceRepository":
        from .service_repository import ServiceRepository

        return ServiceRepository(db)

    @staticmethod
    def create_job_repository(db: Session) -> "JobRepository":
        from .job_repository import JobRepository

        return JobRepository(db)
