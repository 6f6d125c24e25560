# backend/servicebooking/core/exceptions.py
"""
Domain-specific exceptions for the booking engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Infrastructure failures (SQLAlchemy errors raised while saving) are
never translated into these types.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


# Specific business exceptions


class InvalidArgumentException(ValidationException):
    """Raised when a required input is missing, blank or out of range."""

    def __init__(self, argument: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Argument '{argument}' is required",
            code="INVALID_ARGUMENT",
            details={"argument": argument},
        )
        self.argument = argument


class EntityNotFoundException(NotFoundException):
    """Raised when a service, booking or override does not exist."""

    def __init__(self, entity_name: str, entity_key: Any):
        super().__init__(
            message=f"Entity '{entity_name}' with key '{entity_key}' was not found.",
            code="NOT_FOUND",
            details={"entity": entity_name, "key": str(entity_key)},
        )
        self.entity_name = entity_name
        self.entity_key = entity_key


class BookingAuthorizationException(ForbiddenException):
    """Raised when the acting user may not perform the requested action."""

    def __init__(self, user_id: str, action: str):
        super().__init__(
            message=f"User '{user_id}' is not authorized to perform action '{action}'.",
            code="UNAUTHORIZED_ACTION",
            details={"user_id": user_id, "action": action},
        )
        self.user_id = user_id
        self.action = action


class InvalidBookingStateException(BusinessRuleException):
    """Raised when a transition is not legal from the booking's current status."""

    def __init__(self, booking_id: str, current_state: str, action: str):
        super().__init__(
            message=(
                f"Cannot perform action '{action}' on Booking '{booking_id}' "
                f"because it is in state '{current_state}'."
            ),
            code="INVALID_BOOKING_STATE",
            details={"booking_id": booking_id, "current_state": current_state, "action": action},
        )
        self.booking_id = booking_id
        self.current_state = current_state
        self.action = action


class SlotUnavailableException(ConflictException):
    """Raised when the requested interval fails the availability check."""

    def __init__(self, service_id: str, booking_start: datetime):
        super().__init__(
            message=(
                f"The requested time slot {booking_start.isoformat()} "
                f"is not available for service '{service_id}'."
            ),
            code="SLOT_UNAVAILABLE",
            details={"service_id": service_id, "booking_start": booking_start.isoformat()},
        )
        self.service_id = service_id
        self.booking_start = booking_start


class ServiceNotActiveException(BusinessRuleException):
    """Raised when booking a service that is not accepting bookings."""

    def __init__(self, service_id: str):
        super().__init__(
            message=f"Service '{service_id}' is not active and cannot be booked.",
            code="SERVICE_NOT_ACTIVE",
            details={"service_id": service_id},
        )
        self.service_id = service_id


class BookingTimeException(BusinessRuleException):
    """Raised when an operation is attempted at an invalid time."""

    def __init__(self, booking_id: str, booking_time: datetime, message: str):
        super().__init__(
            message=message,
            code="INVALID_BOOKING_TIME",
            details={"booking_id": booking_id, "booking_time": booking_time.isoformat()},
        )
        self.booking_id = booking_id
        self.booking_time = booking_time


class DuplicateEntityException(ConflictException):
    """Raised when creating an entity would violate a uniqueness rule."""

    def __init__(self, entity_name: str, duplicate_value: Any):
        super().__init__(
            message=f"A {entity_name} with the value '{duplicate_value}' already exists.",
            code="DUPLICATE_ENTITY",
            details={"entity": entity_name, "value": str(duplicate_value)},
        )
        self.entity_name = entity_name
        self.duplicate_value = duplicate_value


class BookingLockedException(ConflictException):
    """Raised when another request holds the booking mutex for too long."""

    def __init__(self, lock_key: str):
        super().__init__(
            message="This booking is being modified by another request. Please retry.",
            code="BOOKING_LOCKED",
            details={"lock": lock_key},
        )
        self.lock_key = lock_key


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues or query failures.
    """
