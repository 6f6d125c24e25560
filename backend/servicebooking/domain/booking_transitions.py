# backend/servicebooking/domain/booking_transitions.py
"""
Booking state machine.

``TRANSITIONS`` is the single source of truth for which booking actions are
legal from which status, who may trigger them, and the resulting status.
``BookingService`` consults it through ``authorize_transition`` and never
repeats these rules inline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from ..core.exceptions import BookingAuthorizationException, InvalidBookingStateException
from ..models.booking import Booking, BookingStatus


class BookingAction(str, Enum):
    RESCHEDULE = "Reschedule"
    UPDATE = "Update"
    CONFIRM = "Confirm"
    DECLINE = "Decline"
    CANCEL = "Cancel"
    COMPLETE = "Complete"


class BookingActor(str, Enum):
    CUSTOMER = "customer"
    PROVIDER = "provider"


@dataclass(frozen=True)
class Transition:
    allowed_from: FrozenSet[BookingStatus]
    actors: FrozenSet[BookingActor]
    # None keeps the current status
    target: Optional[BookingStatus]


_OPEN = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

TRANSITIONS: dict[BookingAction, Transition] = {
    # Reschedule always returns to PENDING so the provider re-approves the new time.
    BookingAction.RESCHEDULE: Transition(
        _OPEN, frozenset({BookingActor.CUSTOMER}), BookingStatus.PENDING
    ),
    BookingAction.UPDATE: Transition(_OPEN, frozenset({BookingActor.CUSTOMER}), None),
    BookingAction.CONFIRM: Transition(
        frozenset({BookingStatus.PENDING}),
        frozenset({BookingActor.PROVIDER}),
        BookingStatus.CONFIRMED,
    ),
    BookingAction.DECLINE: Transition(
        frozenset({BookingStatus.PENDING}),
        frozenset({BookingActor.PROVIDER}),
        BookingStatus.DECLINED,
    ),
    BookingAction.CANCEL: Transition(
        _OPEN,
        frozenset({BookingActor.CUSTOMER, BookingActor.PROVIDER}),
        BookingStatus.CANCELLED,
    ),
    BookingAction.COMPLETE: Transition(
        frozenset({BookingStatus.CONFIRMED}),
        frozenset({BookingActor.PROVIDER}),
        BookingStatus.COMPLETED,
    ),
}


def resolve_actor(booking: Booking, user_id: str) -> Optional[BookingActor]:
    """Return the role ``user_id`` plays on ``booking``, or None for outsiders."""
    if user_id == booking.customer_id:
        return BookingActor.CUSTOMER
    if user_id == booking.provider_id:
        return BookingActor.PROVIDER
    return None


def authorize_transition(booking: Booking, user_id: str, action: BookingAction) -> Transition:
    """
    Check actor and state guards for ``action`` on ``booking``.

    The actor check runs first so outsiders learn nothing about the
    booking's state.

    Raises:
        BookingAuthorizationException: the user may not perform ``action``
        InvalidBookingStateException: ``action`` is illegal from the current status
    """
    transition = TRANSITIONS[action]
    actor = resolve_actor(booking, user_id)
    if actor is None or actor not in transition.actors:
        raise BookingAuthorizationException(user_id, action.value)

    current = booking.status_enum
    if current not in transition.allowed_from:
        raise InvalidBookingStateException(booking.id, current.value, action.value)
    return transition
