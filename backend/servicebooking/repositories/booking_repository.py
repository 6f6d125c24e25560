# backend/servicebooking/repositories/booking_repository.py
"""
Booking Repository for the booking engine.

Fetch-by-id (optionally row-locked), active-booking range queries for
availability checks, and the history listings used by customers and
providers. Status filtering for "active" bookings happens here so the
conflict checker can stay pure interval math.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import Booking, BookingStatus
from ..models.service import Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = [status.value for status in BookingStatus.active()]


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Booking.service))

    def get_booking_for_update(self, booking_id: str) -> Optional[Booking]:
        """
        Load a booking for a state change.

        Takes a row lock where the backend supports it so concurrent
        transitions on the same booking serialize at the database too.
        """
        try:
            query = self.db.query(Booking).filter(Booking.id == booking_id)
            if self.supports_row_locks:
                query = query.with_for_update()
            booking = query.first()
            if booking is not None:
                # Refresh so a waiter sees the committed state of the winner.
                self.db.refresh(booking)
            return booking
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booking {booking_id} for update: {str(e)}")
            raise RepositoryException(f"Failed to load booking: {str(e)}")

    def get_active_bookings_in_range(
        self,
        service_id: str,
        window_start: datetime,
        window_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Active (PENDING/CONFIRMED) bookings whose start lies in [window_start, window_end).
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.service_id == service_id,
                Booking.status.in_(ACTIVE_STATUSES),
                Booking.booking_start >= window_start,
                Booking.booking_start < window_end,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return query.order_by(Booking.booking_start).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading active bookings for {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to load active bookings: {str(e)}")

    def get_customer_bookings(self, customer_id: str) -> List[Booking]:
        try:
            return (
                self._apply_eager_loading(self.db.query(Booking))
                .filter(Booking.customer_id == customer_id)
                .order_by(Booking.booking_start.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading bookings for customer {customer_id}: {str(e)}")
            raise RepositoryException(f"Failed to load customer bookings: {str(e)}")

    def get_provider_bookings(
        self, provider_id: str, customer_id: Optional[str] = None
    ) -> List[Booking]:
        try:
            query = (
                self._apply_eager_loading(self.db.query(Booking))
                .join(Service, Booking.service_id == Service.id)
                .filter(Service.provider_id == provider_id)
            )
            if customer_id is not None:
                query = query.filter(Booking.customer_id == customer_id)
            return query.order_by(Booking.booking_start.desc()).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading bookings for provider {provider_id}: {str(e)}")
            raise RepositoryException(f"Failed to load provider bookings: {str(e)}")

    def has_completed_booking(self, customer_id: str, service_id: str) -> bool:
        return self.exists(
            customer_id=customer_id,
            service_id=service_id,
            status=BookingStatus.COMPLETED.value,
        )
