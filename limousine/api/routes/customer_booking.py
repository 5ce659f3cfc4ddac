"""
Customer booking endpoints
==========================

POST /customer/booking/submitRequest -- request a ride (status ``pending``)
POST /customer/booking/acceptQuote   -- pay and accept the admin's quote
POST /customer/booking/cancel        -- cancel a pending / quoted booking
GET  /customer/booking/byCustomer    -- the caller's own bookings
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_booking_engine, require_customer
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    AcceptQuoteRequest,
    BookingIdRequest,
    BookingResponse,
    Envelope,
    SubmitRideRequest,
)
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.domain.enums import BookingStatus
from limousine.services.booking_engine import BookingEngine

router = APIRouter(prefix="/customer/booking", tags=["customer - booking"])


@router.post(
    "/submitRequest",
    response_model=Envelope[BookingResponse],
    summary="Submit a ride request",
)
@limiter.limit(settings.rate_limit)
async def submit_ride_request(
    request: Request,
    body: SubmitRideRequest,
    actor: Actor = Depends(require_customer),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.submit_ride_request(actor.user_id, body.to_domain())
    return Envelope(data=BookingResponse.model_validate(booking))


@router.post(
    "/acceptQuote",
    response_model=Envelope[BookingResponse],
    summary="Accept the quoted driver and price",
    description=(
        "Verifies the payment intent with the provider, records the payment "
        "and moves the booking from awaiting-acceptance to assigned."
    ),
)
@limiter.limit(settings.rate_limit)
async def accept_quote(
    request: Request,
    body: AcceptQuoteRequest,
    actor: Actor = Depends(require_customer),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.accept_ride_quote(
        actor, body.booking_id, body.payment_intent_id
    )
    return Envelope(data=BookingResponse.model_validate(booking))


@router.post(
    "/cancel",
    response_model=Envelope[BookingResponse],
    summary="Cancel a booking",
    description="Only pending or awaiting-acceptance bookings can be cancelled.",
)
@limiter.limit(settings.rate_limit)
async def cancel_booking(
    request: Request,
    body: BookingIdRequest,
    actor: Actor = Depends(require_customer),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.cancel_booking(actor, body.booking_id)
    return Envelope(data=BookingResponse.model_validate(booking))


@router.get(
    "/byCustomer",
    response_model=Envelope[list[BookingResponse]],
    summary="List the caller's bookings",
)
@limiter.limit(settings.rate_limit)
async def bookings_by_customer(
    request: Request,
    status: Optional[BookingStatus] = None,
    actor: Actor = Depends(require_customer),
    engine: BookingEngine = Depends(get_booking_engine),
):
    bookings = await engine.list_bookings(status=status, customer_id=actor.user_id)
    return Envelope(data=[BookingResponse.model_validate(b) for b in bookings])
