"""
Driver booking endpoints
========================

GET|POST /driver/booking/getAssignedRides    -- current workload
POST     /driver/booking/startHeadingToPickup -- assigned -> heading-to-pickup
POST     /driver/booking/markArrivedAtPickup  -- heading-to-pickup -> arrived-at-pickup
POST     /driver/booking/startRide            -- arrived-at-pickup -> en-route
POST     /driver/booking/completeRide         -- en-route -> completed (driver freed)
"""

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_booking_engine, require_driver
from limousine.api.middleware import limiter
from limousine.api.schemas import BookingIdRequest, BookingResponse, Envelope
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.services.booking_engine import BookingEngine

router = APIRouter(prefix="/driver/booking", tags=["driver - booking"])


@router.api_route(
    "/getAssignedRides",
    methods=["GET", "POST"],
    response_model=Envelope[list[BookingResponse]],
    summary="List rides assigned to the caller that are not finished",
)
@limiter.limit(settings.rate_limit)
async def get_assigned_rides(
    request: Request,
    actor: Actor = Depends(require_driver),
    engine: BookingEngine = Depends(get_booking_engine),
):
    rides = await engine.fetch_assigned_rides(actor)
    return Envelope(data=[BookingResponse.model_validate(r) for r in rides])


@router.post(
    "/startHeadingToPickup",
    response_model=Envelope[BookingResponse],
    summary="Start heading to the pickup location",
)
@limiter.limit(settings.rate_limit)
async def start_heading_to_pickup(
    request: Request,
    body: BookingIdRequest,
    actor: Actor = Depends(require_driver),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.start_heading_to_pickup(actor, body.booking_id)
    return Envelope(data=BookingResponse.model_validate(booking))


@router.post(
    "/markArrivedAtPickup",
    response_model=Envelope[BookingResponse],
    summary="Mark arrival at the pickup location",
)
@limiter.limit(settings.rate_limit)
async def mark_arrived_at_pickup(
    request: Request,
    body: BookingIdRequest,
    actor: Actor = Depends(require_driver),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.mark_arrived_at_pickup(actor, body.booking_id)
    return Envelope(data=BookingResponse.model_validate(booking))


@router.post(
    "/startRide",
    response_model=Envelope[BookingResponse],
    summary="Start the ride",
)
@limiter.limit(settings.rate_limit)
async def start_ride(
    request: Request,
    body: BookingIdRequest,
    actor: Actor = Depends(require_driver),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.start_ride(actor, body.booking_id)
    return Envelope(data=BookingResponse.model_validate(booking))


@router.post(
    "/completeRide",
    response_model=Envelope[BookingResponse],
    summary="Complete the ride",
    description="Marks the booking completed and makes the driver available again.",
)
@limiter.limit(settings.rate_limit)
async def complete_ride(
    request: Request,
    body: BookingIdRequest,
    actor: Actor = Depends(require_driver),
    engine: BookingEngine = Depends(get_booking_engine),
):
    booking = await engine.complete_ride(actor, body.booking_id)
    return Envelope(data=BookingResponse.model_validate(booking))
