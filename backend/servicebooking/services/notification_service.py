# backend/servicebooking/services/notification_service.py
"""
Booking notification dispatch.

Every notification goes out on two independent channels:

- an event row in ``background_jobs`` (picked up by the email worker),
  written in its own transaction after the booking change has committed
- a short real-time push to the counter-party's Redis channel
  ``notifications:user:{user_id}``

Both are best-effort. A failure on either channel is logged and
swallowed so it can never undo or fail the booking transition.
"""

from datetime import datetime
import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol

from redis import Redis
from sqlalchemy.orm import Session

from ..core.booking_lock import get_sync_redis
from ..core.clock import Clock
from ..core.config import settings
from ..events import (
    BookingCancelled,
    BookingConfirmed,
    BookingCreated,
    BookingDeclined,
    BookingRescheduled,
    EventPublisher,
)
from ..events.publisher import Event
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class RealTimeNotifier(Protocol):
    """Best-effort push to a connected user."""

    def push(self, user_id: str, event: Dict[str, Any]) -> None:
        ...


class RedisRealTimeNotifier:
    """Publishes JSON events on a per-user Redis channel."""

    def __init__(self, client: Redis):
        self._redis = client

    @staticmethod
    def channel_for(user_id: str) -> str:
        return f"notifications:user:{user_id}"

    def push(self, user_id: str, event: Dict[str, Any]) -> None:
        channel = self.channel_for(user_id)
        receivers = self._redis.publish(channel, json.dumps(event))
        logger.debug("Published %s to %s (subscribers: %s)", event.get("type"), channel, receivers)


class LoggingRealTimeNotifier:
    """Used when no Redis is configured; the push only shows up in the logs."""

    def push(self, user_id: str, event: Dict[str, Any]) -> None:
        logger.info("Real-time notification for user %s: %s", user_id, event.get("type"))


def build_realtime_notifier() -> RealTimeNotifier:
    client = get_sync_redis()
    if client is None:
        return LoggingRealTimeNotifier()
    return RedisRealTimeNotifier(client)


class BookingNotificationService(BaseService):
    """
    Notifies the counter-party of a booking change.

    Recipients:
        created      -> provider
        confirmed    -> customer
        declined     -> customer
        cancelled    -> customer when the provider cancelled, else provider
        rescheduled  -> provider
    """

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        event_publisher: Optional[EventPublisher] = None,
        realtime_notifier: Optional[RealTimeNotifier] = None,
        enabled: Optional[bool] = None,
    ):
        super().__init__(db, clock)
        self.logger = logging.getLogger(__name__)
        self.event_publisher = event_publisher or EventPublisher(
            RepositoryFactory.create_job_repository(db)
        )
        self.realtime_notifier = realtime_notifier or build_realtime_notifier()
        self.enabled = settings.notifications_enabled if enabled is None else enabled

    def notify_booking_created(self, booking: Booking) -> None:
        self._dispatch(
            BookingCreated(
                booking_id=booking.id,
                service_id=booking.service_id,
                customer_id=booking.customer_id,
                provider_id=booking.provider_id,
                booking_start=booking.booking_start,
            ),
            recipient_id=booking.provider_id,
            push_type="booking_created",
            booking=booking,
        )

    def notify_booking_confirmed(self, booking: Booking) -> None:
        self._dispatch(
            BookingConfirmed(
                booking_id=booking.id,
                customer_id=booking.customer_id,
                booking_start=booking.booking_start,
            ),
            recipient_id=booking.customer_id,
            push_type="booking_confirmed",
            booking=booking,
        )

    def notify_booking_declined(self, booking: Booking) -> None:
        self._dispatch(
            BookingDeclined(
                booking_id=booking.id,
                customer_id=booking.customer_id,
                booking_start=booking.booking_start,
            ),
            recipient_id=booking.customer_id,
            push_type="booking_declined",
            booking=booking,
        )

    def notify_booking_cancelled(self, booking: Booking, cancelled_by_provider: bool) -> None:
        recipient_id = booking.customer_id if cancelled_by_provider else booking.provider_id
        self._dispatch(
            BookingCancelled(
                booking_id=booking.id,
                cancelled_by="provider" if cancelled_by_provider else "customer",
                recipient_id=recipient_id,
                booking_start=booking.booking_start,
            ),
            recipient_id=recipient_id,
            push_type="booking_cancelled",
            booking=booking,
        )

    def notify_booking_rescheduled(self, booking: Booking, old_start: datetime) -> None:
        self._dispatch(
            BookingRescheduled(
                booking_id=booking.id,
                provider_id=booking.provider_id,
                old_start=old_start,
                new_start=booking.booking_start,
            ),
            recipient_id=booking.provider_id,
            push_type="booking_rescheduled",
            booking=booking,
        )

    def _dispatch(
        self, event: Event, recipient_id: str, push_type: str, booking: Booking
    ) -> None:
        if not self.enabled:
            self.logger.debug("Notifications disabled; skipping %s", push_type)
            return

        self._best_effort("queue", push_type, booking.id, lambda: self._queue_event(event))
        self._best_effort(
            "push",
            push_type,
            booking.id,
            lambda: self.realtime_notifier.push(
                recipient_id, self._push_message(push_type, booking)
            ),
        )

    def _queue_event(self, event: Event) -> None:
        with self.transaction():
            self.event_publisher.publish(event)

    def _push_message(self, push_type: str, booking: Booking) -> Dict[str, Any]:
        return {
            "type": push_type,
            "schema_version": SCHEMA_VERSION,
            "timestamp": self.clock.now().isoformat(),
            "payload": {
                "booking_id": booking.id,
                "service_id": booking.service_id,
                "booking_start": booking.booking_start.isoformat(),
                "status": booking.status,
            },
        }

    def _best_effort(
        self, channel: str, push_type: str, booking_id: str, send: Callable[[], None]
    ) -> None:
        try:
            send()
        except Exception as e:
            self.logger.error(
                f"Failed to send {push_type} notification via {channel} "
                f"for booking {booking_id}: {str(e)}"
            )
