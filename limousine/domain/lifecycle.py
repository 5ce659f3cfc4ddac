"""
Booking lifecycle rules.

Every state change a booking can make is described by a ``Transition``:
the action name used in error messages, the single status (or, for
cancellation, the set of statuses) it may start from, the status it
produces and the role allowed to trigger it.  The target is always
derived from the transition, never supplied by the caller.

    pending -> awaiting-acceptance -> assigned -> heading-to-pickup
            -> arrived-at-pickup -> en-route -> completed

``cancelled`` is reachable from pending / awaiting-acceptance and
``rejected-by-admin`` from pending; both are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .entities import Actor
from .enums import BOOKING_TRANSITIONS, BookingStatus, Role
from .errors import ForbiddenError, InvalidStateTransition

_ORDER = list(BookingStatus)


@dataclass(frozen=True)
class Transition:
    action: str
    sources: frozenset[BookingStatus]
    target: BookingStatus
    role: Role


ASSIGN_DRIVER = Transition(
    "assign driver",
    frozenset({BookingStatus.PENDING}),
    BookingStatus.AWAITING_ACCEPTANCE,
    Role.ADMIN,
)
REJECT_BOOKING = Transition(
    "reject booking",
    frozenset({BookingStatus.PENDING}),
    BookingStatus.REJECTED_BY_ADMIN,
    Role.ADMIN,
)
ACCEPT_QUOTE = Transition(
    "accept quote",
    frozenset({BookingStatus.AWAITING_ACCEPTANCE}),
    BookingStatus.ASSIGNED,
    Role.CUSTOMER,
)
CANCEL_BOOKING = Transition(
    "cancel booking",
    frozenset({BookingStatus.PENDING, BookingStatus.AWAITING_ACCEPTANCE}),
    BookingStatus.CANCELLED,
    Role.CUSTOMER,
)
START_HEADING_TO_PICKUP = Transition(
    "start heading to pickup",
    frozenset({BookingStatus.ASSIGNED}),
    BookingStatus.HEADING_TO_PICKUP,
    Role.DRIVER,
)
MARK_ARRIVED_AT_PICKUP = Transition(
    "mark as arrived at pickup",
    frozenset({BookingStatus.HEADING_TO_PICKUP}),
    BookingStatus.ARRIVED_AT_PICKUP,
    Role.DRIVER,
)
START_RIDE = Transition(
    "start the ride",
    frozenset({BookingStatus.ARRIVED_AT_PICKUP}),
    BookingStatus.EN_ROUTE,
    Role.DRIVER,
)
COMPLETE_RIDE = Transition(
    "complete the ride",
    frozenset({BookingStatus.EN_ROUTE}),
    BookingStatus.COMPLETED,
    Role.DRIVER,
)

DRIVER_STEPS = (START_HEADING_TO_PICKUP, MARK_ARRIVED_AT_PICKUP, START_RIDE, COMPLETE_RIDE)


def _quoted(statuses: Iterable[BookingStatus]) -> list[str]:
    return [f"'{s.value}'" for s in sorted(statuses, key=_ORDER.index)]


def describe_rejection(current: BookingStatus, transition: Transition) -> str:
    """Human-readable reason naming the required and the legal next states."""
    required = " or ".join(_quoted(transition.sources))
    allowed = ", ".join(_quoted(BOOKING_TRANSITIONS[current])) or "none"
    return (
        f"Booking must be in {required} status to {transition.action}; "
        f"current status is '{current.value}' (allowed next: {allowed})"
    )


def check_transition(current: Any, transition: Transition) -> BookingStatus:
    """Return the transition's target if legal from *current*, else raise."""
    current = BookingStatus(current)
    if (
        current not in transition.sources
        or transition.target not in BOOKING_TRANSITIONS[current]
    ):
        raise InvalidStateTransition(describe_rejection(current, transition))
    return transition.target


def ensure_customer_owns(booking: Any, actor: Actor) -> None:
    if booking.customer_id != actor.user_id:
        raise ForbiddenError("You can only manage your own bookings")


def ensure_assigned_driver(booking: Any, actor: Actor) -> None:
    if booking.driver_id is None or booking.driver_id != actor.user_id:
        raise ForbiddenError("This booking is not assigned to you")


def ensure_role(actor: Actor, transition: Transition) -> None:
    if actor.role != transition.role:
        raise ForbiddenError(f"Only a {transition.role.value} can {transition.action}")
