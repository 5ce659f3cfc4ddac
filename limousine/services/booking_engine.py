"""
Booking Lifecycle Engine
========================

Owns every state change of a booking.  Each operation is one
read-check-write cycle:

1. Load the booking (``NotFoundError`` if absent).
2. Check ownership (customer / assigned driver) and the exact
   predecessor status.  Nothing is written if a check fails.
3. Write the new status with a compare-and-swap on the predecessor, so
   two racing requests cannot both win.
4. Run side effects: claim / release the driver and notify the other
   party.

Driver availability
-------------------
A driver is claimed (``available -> on_trip``) when the admin assigns
them and released back to ``available`` when the ride completes or the
customer cancels a quote that already holds the driver.  The claim is a
conditional update, so a driver can never be assigned twice.

All writes share the caller's unit of work; if any step raises, the API
session rolls the whole request back.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from limousine.domain import lifecycle
from limousine.domain.entities import Actor, RideRequest
from limousine.domain.enums import (
    ACTIVE_RIDE_STATUSES,
    BookingStatus,
    DriverStatus,
    NotificationType,
)
from limousine.domain.errors import (
    ConflictError,
    InvalidStateTransition,
    NotFoundError,
    ValidationError,
)
from limousine.infrastructure.models import BookingModel
from limousine.infrastructure.repositories import (
    BookingRepository,
    CustomerRepository,
    DriverRepository,
)
from limousine.services.notification_service import NotificationService
from limousine.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

REJECTION_REASON_MAX_LENGTH = 500
PAYMENT_ALREADY_APPLIED = "Payment has already been applied to another booking"

# Customer-facing messages for each driver step
_DRIVER_STEP_MESSAGES = {
    BookingStatus.HEADING_TO_PICKUP: (
        "Driver on the way",
        "Your driver is heading to the pickup location.",
    ),
    BookingStatus.ARRIVED_AT_PICKUP: (
        "Driver arrived",
        "Your driver has arrived at the pickup location.",
    ),
    BookingStatus.EN_ROUTE: (
        "Ride started",
        "Your ride is under way.",
    ),
    BookingStatus.COMPLETED: (
        "Ride completed",
        "You have arrived. Thank you for riding with us.",
    ),
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BookingEngine:
    def __init__(
        self,
        session: AsyncSession,
        payments: Optional[PaymentService] = None,
        notifications: Optional[NotificationService] = None,
    ):
        self.bookings = BookingRepository(session)
        self.customers = CustomerRepository(session)
        self.drivers = DriverRepository(session)
        self.payments = payments
        self.notifications = notifications or NotificationService(session)

    # ── Creation ──────────────────────────────────────────────────────

    async def submit_ride_request(
        self, customer_id: int, request: RideRequest
    ) -> BookingModel:
        customer = await self.customers.get_by_id(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")

        if _as_utc(request.ride_time) <= datetime.now(timezone.utc):
            raise ValidationError("Ride time must be in the future")
        request.validate()

        booking = await self.bookings.create(
            customer_id=customer_id,
            start_location=request.start_location.to_dict(),
            final_location=request.final_location.to_dict(),
            stops=[stop.to_dict() for stop in request.stops],
            number_of_passengers=request.number_of_passengers,
            number_of_luggage=request.number_of_luggage,
            note=request.note,
            contact_info=request.contact_info,
            ride_time=_as_utc(request.ride_time),
            status=BookingStatus.PENDING,
        )
        logger.info("Booking %s submitted by customer %s", booking.id, customer_id)
        return booking

    # ── Admin transitions ─────────────────────────────────────────────

    async def assign_driver_and_set_price(
        self, booking_id: int, driver_id: int, final_price: float
    ) -> BookingModel:
        if final_price is None or final_price <= 0:
            raise ValidationError("Final price must be greater than 0")

        booking = await self._load(booking_id)
        target = lifecycle.check_transition(booking.status, lifecycle.ASSIGN_DRIVER)

        driver = await self.drivers.get_by_id(driver_id)
        if driver is None:
            raise NotFoundError("Driver not found")
        if driver.status != DriverStatus.AVAILABLE:
            raise ValidationError("Driver is not available")
        if not await self.drivers.claim_if_available(driver_id):
            raise ValidationError("Driver is not available")

        await self._write(
            booking,
            lifecycle.ASSIGN_DRIVER,
            target,
            actor="admin",
            driver_id=driver_id,
            final_price=final_price,
        )

        await self.notifications.notify_customer(
            booking.customer_id,
            "Ride quote ready",
            f"Your ride has been quoted at {final_price:.2f}. "
            "Accept the quote to confirm the booking.",
        )
        await self.notifications.notify_driver(
            driver_id,
            "New ride offered",
            f"You have been proposed for booking #{booking.id}.",
            NotificationType.TASK_ASSIGNED,
        )
        return booking

    async def reject_booking(self, booking_id: int, reason: str) -> BookingModel:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Rejection reason is required")
        if len(reason) > REJECTION_REASON_MAX_LENGTH:
            raise ValidationError(
                f"Rejection reason must be at most {REJECTION_REASON_MAX_LENGTH} characters"
            )

        booking = await self._load(booking_id)
        target = lifecycle.check_transition(booking.status, lifecycle.REJECT_BOOKING)
        await self._write(
            booking,
            lifecycle.REJECT_BOOKING,
            target,
            actor="admin",
            rejection_reason=reason,
        )
        await self.notifications.notify_customer(
            booking.customer_id,
            "Booking rejected",
            f"Your booking #{booking.id} was rejected: {reason}",
        )
        return booking

    # ── Customer transitions ──────────────────────────────────────────

    async def accept_ride_quote(
        self, actor: Actor, booking_id: int, payment_intent_id: str
    ) -> BookingModel:
        lifecycle.ensure_role(actor, lifecycle.ACCEPT_QUOTE)
        booking = await self._load(booking_id)
        lifecycle.ensure_customer_owns(booking, actor)
        target = lifecycle.check_transition(booking.status, lifecycle.ACCEPT_QUOTE)

        if not payment_intent_id:
            raise ValidationError("paymentIntentId is required")
        if self.payments is None:
            raise ValidationError("Payments are not configured")
        payment = await self.payments.verify_and_record_payment(
            payment_intent_id, booking.customer_id
        )
        if payment.amount + 1e-9 < (booking.final_price or 0):
            raise ValidationError("Payment amount does not cover the quoted price")
        linked = await self.bookings.find_by_payment(payment.id)
        if linked is not None and linked.id != booking.id:
            raise ValidationError(PAYMENT_ALREADY_APPLIED)

        try:
            await self._write(
                booking,
                lifecycle.ACCEPT_QUOTE,
                target,
                actor=f"customer:{actor.user_id}",
                payment_id=payment.id,
            )
        except ConflictError:
            # Another booking took this payment between the check and the write
            raise ValidationError(PAYMENT_ALREADY_APPLIED) from None
        await self.notifications.notify_driver(
            booking.driver_id,
            "Ride confirmed",
            f"Booking #{booking.id} is confirmed and assigned to you.",
            NotificationType.TASK_ASSIGNED,
        )
        return booking

    async def cancel_booking(self, actor: Actor, booking_id: int) -> BookingModel:
        lifecycle.ensure_role(actor, lifecycle.CANCEL_BOOKING)
        booking = await self._load(booking_id)
        lifecycle.ensure_customer_owns(booking, actor)
        target = lifecycle.check_transition(booking.status, lifecycle.CANCEL_BOOKING)

        await self._write(
            booking,
            lifecycle.CANCEL_BOOKING,
            target,
            actor=f"customer:{actor.user_id}",
        )
        if booking.driver_id is not None:
            await self.drivers.set_status(booking.driver_id, DriverStatus.AVAILABLE)
            await self.notifications.notify_driver(
                booking.driver_id,
                "Booking cancelled",
                f"Booking #{booking.id} was cancelled by the customer.",
            )
        return booking

    # ── Driver transitions ────────────────────────────────────────────

    async def start_heading_to_pickup(self, actor: Actor, booking_id: int) -> BookingModel:
        return await self._advance(actor, booking_id, lifecycle.START_HEADING_TO_PICKUP)

    async def mark_arrived_at_pickup(self, actor: Actor, booking_id: int) -> BookingModel:
        return await self._advance(actor, booking_id, lifecycle.MARK_ARRIVED_AT_PICKUP)

    async def start_ride(self, actor: Actor, booking_id: int) -> BookingModel:
        return await self._advance(actor, booking_id, lifecycle.START_RIDE)

    async def complete_ride(self, actor: Actor, booking_id: int) -> BookingModel:
        booking = await self._advance(actor, booking_id, lifecycle.COMPLETE_RIDE)
        await self.drivers.set_status(booking.driver_id, DriverStatus.AVAILABLE)
        logger.info("Driver %s released after booking %s", booking.driver_id, booking.id)
        return booking

    async def _advance(
        self, actor: Actor, booking_id: int, transition: lifecycle.Transition
    ) -> BookingModel:
        lifecycle.ensure_role(actor, transition)
        booking = await self._load(booking_id)
        lifecycle.ensure_assigned_driver(booking, actor)
        target = lifecycle.check_transition(booking.status, transition)
        await self._write(booking, transition, target, actor=f"driver:{actor.user_id}")

        title, message = _DRIVER_STEP_MESSAGES[target]
        await self.notifications.notify_customer(booking.customer_id, title, message)
        return booking

    # ── Read paths ────────────────────────────────────────────────────

    async def fetch_assigned_rides(self, actor: Actor) -> list[BookingModel]:
        if await self.drivers.get_by_id(actor.user_id) is None:
            raise NotFoundError("Driver not found")
        return await self.bookings.list_for_driver(actor.user_id, ACTIVE_RIDE_STATUSES)

    async def list_bookings(
        self,
        status: Optional[BookingStatus] = None,
        customer_id: Optional[int] = None,
    ) -> list[BookingModel]:
        return await self.bookings.find_all(status=status, customer_id=customer_id)

    async def get_booking(self, booking_id: int) -> BookingModel:
        return await self._load(booking_id)

    # ── Internals ─────────────────────────────────────────────────────

    async def _load(self, booking_id: int) -> BookingModel:
        booking = await self.bookings.get_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    async def _write(
        self,
        booking: BookingModel,
        transition: lifecycle.Transition,
        target: BookingStatus,
        actor: str,
        **values,
    ) -> None:
        current = BookingStatus(booking.status)
        if not await self.bookings.transition(booking, current, target, **values):
            # Lost a race: report against the status that won
            await self.bookings.session.refresh(booking)
            raise InvalidStateTransition(
                lifecycle.describe_rejection(BookingStatus(booking.status), transition)
            )
        logger.info(
            "Booking %s: %s -> %s by %s",
            booking.id,
            current.value,
            target.value,
            actor,
        )
