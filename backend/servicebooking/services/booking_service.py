# backend/servicebooking/services/booking_service.py
"""
Booking Service for the booking engine.

Owns the booking lifecycle: create, reschedule or edit, confirm, decline,
cancel and complete. Who may do what from which status lives in
``servicebooking.domain.booking_transitions``; this module loads the
booking, applies the transition and persists it.

Serialization:
    Every change to an existing booking runs under the booking mutex
    ``booking:{id}:mutex``. Creates and reschedules additionally hold the
    availability lock of each date their interval can collide on, so the
    availability check and the write are one atomic step. Locks are always
    taken booking first, then availability dates in ascending order.

Notifications are dispatched after the commit and after all locks are
released. Their failures are logged and never reach the caller.
"""

from contextlib import ExitStack, contextmanager
from datetime import datetime, timedelta
import logging
from typing import Any, Callable, Iterator, List, Optional

from sqlalchemy.orm import Session

from ..core.booking_lock import (
    LockNotAcquired,
    availability_lock_key,
    booking_lock,
    booking_lock_key,
)
from ..core.clock import Clock, to_utc_naive
from ..core.config import settings
from ..core.exceptions import (
    BookingAuthorizationException,
    BookingLockedException,
    BookingTimeException,
    EntityNotFoundException,
    InvalidArgumentException,
    ServiceNotActiveException,
    SlotUnavailableException,
)
from ..domain.booking_transitions import BookingAction, authorize_transition
from ..models.booking import Booking, BookingStatus
from ..models.service import Service
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.service_repository import ServiceRepository
from ..schemas.booking import BookingCreate, BookingUpdate
from .availability_service import AvailabilityService
from .base import BaseService
from .notification_service import BookingNotificationService

logger = logging.getLogger(__name__)


def availability_lock_keys(service_id: str, start: datetime, duration_minutes: int) -> List[str]:
    """
    Availability lock keys for every date a booking at ``start`` can collide on.

    Any conflicting booking starts inside ``(start - duration, start + duration)``,
    so two conflicting requests always share at least one key.
    """
    span = timedelta(minutes=duration_minutes)
    day = (start - span).date()
    last = (start + span).date()
    keys = []
    while day <= last:
        keys.append(availability_lock_key(service_id, day))
        day += timedelta(days=1)
    return keys


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Collaborators default to SQLAlchemy-backed implementations bound to
    ``db`` and may be passed in explicitly.
    """

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        notification_service: Optional[BookingNotificationService] = None,
        availability_service: Optional[AvailabilityService] = None,
        repository: Optional[BookingRepository] = None,
        service_repository: Optional[ServiceRepository] = None,
    ):
        super().__init__(db, clock)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.service_repository = (
            service_repository or RepositoryFactory.create_service_repository(db)
        )
        self.availability_service = availability_service or AvailabilityService(
            db, clock=self.clock, booking_repository=self.repository
        )
        self.notification_service = notification_service or BookingNotificationService(
            db, clock=self.clock
        )

    # Validation helpers

    @staticmethod
    def _require_user(user_id: Optional[str], argument: str = "user_id") -> None:
        if user_id is None or not str(user_id).strip():
            raise InvalidArgumentException(argument)

    @staticmethod
    def _validate_notes(notes: Optional[str]) -> None:
        limit = settings.booking_notes_max_length
        if notes is not None and len(notes) > limit:
            raise InvalidArgumentException(
                "notes", f"Notes cannot be longer than {limit} characters"
            )

    def _get_service_or_raise(self, service_id: str) -> Service:
        service = self.service_repository.get_service(service_id)
        if service is None:
            self.logger.warning("Service with ID %s not found", service_id)
            raise EntityNotFoundException("Service", service_id)
        return service

    def _get_booking_for_update_or_raise(self, booking_id: str) -> Booking:
        booking = self.repository.get_booking_for_update(booking_id)
        if booking is None:
            self.logger.warning("Booking with ID %s not found", booking_id)
            raise EntityNotFoundException("Booking", booking_id)
        return booking

    @contextmanager
    def _availability_locks(self, service: Service, start: datetime) -> Iterator[None]:
        with ExitStack() as stack:
            for key in availability_lock_keys(service.id, start, service.duration_minutes):
                stack.enter_context(booking_lock(key))
            yield

    def _notify(
        self, send: Callable[..., None], booking: Booking, *args: Any, **kwargs: Any
    ) -> None:
        try:
            send(booking, *args, **kwargs)
        except Exception as e:
            self.logger.error(f"Failed to send notification for booking {booking.id}: {str(e)}")

    def _ensure_slot_available(
        self, service: Service, start: datetime, exclude_booking_id: Optional[str] = None
    ) -> None:
        if not self.availability_service.is_slot_available(
            service.id, start, service.duration_minutes, exclude_booking_id=exclude_booking_id
        ):
            raise SlotUnavailableException(service.id, start)

    # Create

    @BaseService.measure_operation("create_booking")
    def create_booking(self, booking_data: BookingCreate, customer_id: str) -> Booking:
        """
        Create a PENDING booking for ``customer_id``.

        Raises:
            InvalidArgumentException: blank customer id or notes too long
            EntityNotFoundException: the service does not exist
            BookingAuthorizationException: the provider tried to book their own service
            ServiceNotActiveException: the service is not accepting bookings
            SlotUnavailableException: the time is not bookable, or a concurrent
                request holds the slot
        """
        self._require_user(customer_id, "customer_id")
        self._validate_notes(booking_data.notes)
        start = to_utc_naive(booking_data.booking_start)

        self.log_operation(
            "create_booking",
            customer_id=customer_id,
            service_id=booking_data.service_id,
            booking_start=start.isoformat(),
        )

        service = self._get_service_or_raise(booking_data.service_id)
        if service.is_owned_by(customer_id):
            raise BookingAuthorizationException(customer_id, "Create")
        if not service.is_active:
            raise ServiceNotActiveException(service.id)

        try:
            with self._availability_locks(service, start):
                self._ensure_slot_available(service, start)
                with self.transaction():
                    booking = self.repository.create(
                        service_id=service.id,
                        customer_id=customer_id,
                        booking_start=start,
                        notes=booking_data.notes,
                        status=BookingStatus.PENDING.value,
                        created_at=self.clock.now(),
                    )
        except LockNotAcquired:
            raise SlotUnavailableException(service.id, start)

        self.logger.info("Booking %s created for service %s at %s", booking.id, service.id, start)
        self._notify(self.notification_service.notify_booking_created, booking)
        return booking

    # Update / reschedule

    @BaseService.measure_operation("update_booking")
    def update_booking(self, update_data: BookingUpdate, customer_id: str) -> Booking:
        """
        Apply a customer's edit to their booking.

        A new ``booking_start`` reschedules: the new time must be available
        and the booking returns to PENDING for the provider to re-approve.
        The same start only replaces the notes. Time and notes are applied
        together or not at all.

        Raises:
            EntityNotFoundException: the booking does not exist
            BookingAuthorizationException: ``customer_id`` is not the booking's customer
            InvalidBookingStateException: the booking is no longer open
            SlotUnavailableException: the new time is not bookable
            BookingLockedException: another request holds the booking mutex
        """
        self._require_user(customer_id, "customer_id")
        self._validate_notes(update_data.notes)
        new_start = to_utc_naive(update_data.booking_start)
        booking_id = update_data.booking_id

        self.log_operation(
            "update_booking",
            booking_id=booking_id,
            customer_id=customer_id,
            booking_start=new_start.isoformat(),
        )

        old_start: Optional[datetime] = None
        service_id = ""
        key = booking_lock_key(booking_id)
        try:
            with booking_lock(key):
                booking = self._get_booking_for_update_or_raise(booking_id)
                service_id = booking.service_id

                if booking.booking_start == new_start:
                    authorize_transition(booking, customer_id, BookingAction.UPDATE)
                    with self.transaction():
                        booking.notes = update_data.notes
                        booking.updated_at = self.clock.now()
                else:
                    transition = authorize_transition(
                        booking, customer_id, BookingAction.RESCHEDULE
                    )
                    service = booking.service
                    with self._availability_locks(service, new_start):
                        self._ensure_slot_available(
                            service, new_start, exclude_booking_id=booking.id
                        )
                        old_start = booking.booking_start
                        with self.transaction():
                            booking.booking_start = new_start
                            booking.notes = update_data.notes
                            booking.apply_status(transition.target, self.clock.now())
        except LockNotAcquired as exc:
            # Only contention on the new time's dates means the slot is taken.
            if exc.key == key:
                raise BookingLockedException(key)
            raise SlotUnavailableException(service_id, new_start)

        if old_start is not None:
            self.logger.info(
                "Booking %s rescheduled from %s to %s", booking.id, old_start, new_start
            )
            self._notify(self.notification_service.notify_booking_rescheduled, booking, old_start)
        return booking

    # Provider / customer transitions

    def _transition(
        self,
        booking_id: str,
        user_id: str,
        action: BookingAction,
        before_apply: Optional[Callable[[Booking], None]] = None,
    ) -> Booking:
        if not booking_id:
            raise InvalidArgumentException("booking_id")
        self._require_user(user_id)
        self.log_operation(action.value.lower(), booking_id=booking_id, user_id=user_id)

        key = booking_lock_key(booking_id)
        try:
            with booking_lock(key):
                booking = self._get_booking_for_update_or_raise(booking_id)
                transition = authorize_transition(booking, user_id, action)
                if before_apply is not None:
                    before_apply(booking)

                with self.transaction():
                    now = self.clock.now()
                    booking.apply_status(transition.target, now)
                    if action == BookingAction.CANCEL:
                        booking.cancelled_by_id = user_id
        except LockNotAcquired:
            raise BookingLockedException(key)
        return booking

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, booking_id: str, provider_id: str) -> Booking:
        booking = self._transition(booking_id, provider_id, BookingAction.CONFIRM)
        self._notify(self.notification_service.notify_booking_confirmed, booking)
        return booking

    @BaseService.measure_operation("decline_booking")
    def decline_booking(self, booking_id: str, provider_id: str) -> Booking:
        booking = self._transition(booking_id, provider_id, BookingAction.DECLINE)
        self._notify(self.notification_service.notify_booking_declined, booking)
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, user_id: str) -> Booking:
        """Cancel as either party; the other party is notified."""
        booking = self._transition(booking_id, user_id, BookingAction.CANCEL)
        self._notify(
            self.notification_service.notify_booking_cancelled,
            booking,
            cancelled_by_provider=user_id == booking.provider_id,
        )
        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: str, provider_id: str) -> Booking:
        """
        Mark a confirmed booking as completed once it has started.

        Raises:
            BookingTimeException: the booking starts in the future
        """

        def _not_in_future(booking: Booking) -> None:
            if booking.booking_start > self.clock.now():
                raise BookingTimeException(
                    booking.id,
                    booking.booking_start,
                    "Cannot complete a booking that has not started yet",
                )

        return self._transition(
            booking_id, provider_id, BookingAction.COMPLETE, before_apply=_not_in_future
        )

    # Reads

    @BaseService.measure_operation("get_booking_for_user")
    def get_booking_for_user(self, booking_id: str, user_id: str) -> Optional[Booking]:
        """The booking if ``user_id`` is its customer or the service's provider, else None."""
        booking = self.repository.get_by_id(booking_id)
        if booking is not None and booking.is_party(user_id):
            return booking
        return None

    @BaseService.measure_operation("get_bookings_for_customer")
    def get_bookings_for_customer(self, customer_id: str) -> List[Booking]:
        self._require_user(customer_id, "customer_id")
        return self.repository.get_customer_bookings(customer_id)

    @BaseService.measure_operation("get_bookings_for_provider")
    def get_bookings_for_provider(self, provider_id: str) -> List[Booking]:
        self._require_user(provider_id, "provider_id")
        return self.repository.get_provider_bookings(provider_id)

    @BaseService.measure_operation("get_bookings_between")
    def get_bookings_between(self, provider_id: str, customer_id: str) -> List[Booking]:
        """Shared history of one provider and one customer, newest first."""
        self._require_user(provider_id, "provider_id")
        self._require_user(customer_id, "customer_id")
        return self.repository.get_provider_bookings(provider_id, customer_id=customer_id)

    @BaseService.measure_operation("has_completed_booking")
    def has_completed_booking(self, user_id: str, service_id: str) -> bool:
        self._require_user(user_id)
        if not service_id:
            raise InvalidArgumentException("service_id")
        return self.repository.has_completed_booking(user_id, service_id)
