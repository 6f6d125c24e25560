"""
Repository layer: the schedule store, booking store and service directory.
"""

from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .job_repository import JobRepository
from .schedule_repository import ScheduleRepository
from .service_repository import ServiceRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "IRepository",
    "JobRepository",
    "RepositoryFactory",
    "ScheduleRepository",
    "ServiceRepository",
]
