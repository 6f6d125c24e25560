"""
Service layer for the booking engine.

``BookingService`` is the entry point for callers; the availability and
schedule services are its collaborators and can be used on their own.
"""

from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .notification_service import (
    BookingNotificationService,
    LoggingRealTimeNotifier,
    RealTimeNotifier,
    RedisRealTimeNotifier,
)
from .schedule_resolver import ScheduleResolver
from .schedule_service import ScheduleService

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingNotificationService",
    "BookingService",
    "LoggingRealTimeNotifier",
    "RealTimeNotifier",
    "RedisRealTimeNotifier",
    "ScheduleResolver",
    "ScheduleService",
]
