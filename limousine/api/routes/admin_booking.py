"""
Admin booking endpoints
=======================

GET  /admin/booking/getAll                  -- list bookings (optional status)
GET  /admin/booking/getById                 -- one booking
POST /admin/booking/assignDriverAndSetPrice -- quote: pending -> awaiting-acceptance
POST /admin/booking/reject                  -- pending -> rejected-by-admin
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_booking_engine, require_admin
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    AssignDriverRequest,
    BookingResponse,
    Envelope,
    RejectBookingRequest,
)
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.domain.enums import BookingStatus
from limousine.services.booking_engine import BookingEngine

router = APIRouter(prefix="/admin/booking", tags=["admin - booking"])


@router.get(
    "/getAll",
    response_model=Envelope[list[BookingResponse]],
    summary="List bookings",
)
@limiter.limit(settings.rate_limit)
async def get_all(
    request: Request,
    status: Optional[BookingStatus] = None,
    actor: Actor = Depends(require_admin),
    engine: BookingEngine = Depends(get_booking_engine),
):
    bookings = await engine.list_bookings(status=status)
    return Envelope(data=[BookingResponse.model_validate(b) for b in bookings])


@router.get(
    "/getById",
    response_model=Envelope[BookingResponse],
    summary="Get a booking by id",
)
@limiter.limit(settings.rate_limit)
async def get_by_id(
    request: Request,
    id: int,
    actor: Actor = Depends(require_admin),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.get_booking(id)
    return Envelope(data=BookingResponse.model_validate(booking))


@router.post(
    "/assignDriverAndSetPrice",
    response_model=Envelope[BookingResponse],
    summary="Assign a driver and set the final price",
    description=(
        "The driver must be available; they are marked on_trip immediately so "
        "they cannot be offered to another booking."
    ),
)
@limiter.limit(settings.rate_limit)
async def assign_driver_and_set_price(
    request: Request,
    body: AssignDriverRequest,
    actor: Actor = Depends(require_admin),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.assign_driver_and_set_price(
        body.booking_id, body.driver_id, body.final_price
    )
    return Envelope(data=BookingResponse.model_validate(booking))


@router.post(
    "/reject",
    response_model=Envelope[BookingResponse],
    summary="Reject a pending booking",
)
@limiter.limit(settings.rate_limit)
async def reject_booking(
    request: Request,
    body: RejectBookingRequest,
    actor: Actor = Depends(require_admin),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.reject_booking(body.booking_id, body.rejection_reason)
    return Envelope(data=BookingResponse.model_validate(booking))
