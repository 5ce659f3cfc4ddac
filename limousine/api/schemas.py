"""Pydantic request / response schemas for the REST API.

Field names are snake_case in Python and camelCase on the wire.
Optional text fields treat an empty string the same as an absent one.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, Field
from pydantic.alias_generators import to_camel

from limousine.domain.entities import Location, RideRequest
from limousine.domain.enums import (
    BookingStatus,
    CustomerStatus,
    DriverStatus,
    NotificationType,
)

T = TypeVar("T")


def _blank_to_none(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, (list, dict)) and not value:
        return None
    return value


OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


class ApiModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


# ── Shared ────────────────────────────────────────────────────────────


class LocationSchema(ApiModel):
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    location_name: str = Field(..., min_length=1)

    def to_domain(self) -> Location:
        return Location(self.longitude, self.latitude, self.location_name)


class VehicleDetails(ApiModel):
    model: str = Field(..., min_length=1)
    license_plate: str = Field(..., min_length=1)


# ── Requests ──────────────────────────────────────────────────────────


class SubmitRideRequest(ApiModel):
    start_location: LocationSchema
    final_location: LocationSchema
    stops: Annotated[
        Optional[list[LocationSchema]], BeforeValidator(_blank_to_none)
    ] = None
    number_of_passengers: int = Field(..., ge=1)
    number_of_luggage: int = Field(..., ge=0)
    note: OptionalText = None
    contact_info: str = Field(..., min_length=1)
    ride_time: datetime

    def to_domain(self) -> RideRequest:
        return RideRequest(
            start_location=self.start_location.to_domain(),
            final_location=self.final_location.to_domain(),
            stops=[stop.to_domain() for stop in self.stops or []],
            number_of_passengers=self.number_of_passengers,
            number_of_luggage=self.number_of_luggage,
            note=self.note,
            contact_info=self.contact_info,
            ride_time=self.ride_time,
        )


class BookingIdRequest(ApiModel):
    booking_id: int


class AssignDriverRequest(ApiModel):
    booking_id: int
    driver_id: int
    final_price: float


class RejectBookingRequest(ApiModel):
    booking_id: int
    rejection_reason: str = Field(..., min_length=1)


class AcceptQuoteRequest(ApiModel):
    booking_id: int
    payment_intent_id: str = Field(..., min_length=1)


class SignupRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=255)
    phone_number: OptionalText = None
    password: str = Field(..., min_length=6)


class LoginRequest(ApiModel):
    email: str
    password: str


class FcmTokenRequest(ApiModel):
    fcm_token: str = Field(..., min_length=1)


class UpdateProfileRequest(ApiModel):
    name: OptionalText = None
    phone_number: OptionalText = None


class AddDriverRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    vehicle_details: VehicleDetails
    status: Optional[DriverStatus] = None


class UpdateDriverRequest(ApiModel):
    record_id: int
    name: OptionalText = None
    email: OptionalText = None
    password: OptionalText = None
    vehicle_details: Optional[VehicleDetails] = None
    status: Optional[DriverStatus] = None


class UpdateCustomerRequest(ApiModel):
    record_id: int
    name: OptionalText = None
    email: OptionalText = None
    phone_number: OptionalText = None
    status: Optional[CustomerStatus] = None


class RecordIdRequest(ApiModel):
    record_id: int


class VerifyOtpRequest(ApiModel):
    otp: str = Field(..., min_length=1)


class CreatePaymentIntentRequest(ApiModel):
    amount: float


class MarkReadRequest(ApiModel):
    notification_id: int


# ── Responses ─────────────────────────────────────────────────────────


class BookingResponse(ApiModel):
    id: int
    customer_id: int
    driver_id: Optional[int] = None
    payment_id: Optional[int] = None
    start_location: LocationSchema
    final_location: LocationSchema
    stops: list[LocationSchema] = []
    number_of_passengers: int
    number_of_luggage: int
    note: Optional[str] = None
    contact_info: str
    ride_time: datetime
    final_price: Optional[float] = None
    status: BookingStatus
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerResponse(ApiModel):
    id: int
    name: str
    email: str
    phone_number: Optional[str] = None
    status: CustomerStatus
    created_at: Optional[datetime] = None


class DriverResponse(ApiModel):
    id: int
    name: str
    email: str
    vehicle_details: VehicleDetails
    status: DriverStatus
    created_at: Optional[datetime] = None


class PaymentResponse(ApiModel):
    id: int
    customer_id: int
    payment_intent_id: str
    amount: float
    currency: str
    payment_method: Optional[str] = None
    stripe_charge_id: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentIntentResponse(ApiModel):
    client_secret: str
    payment_intent_id: str


class NotificationResponse(ApiModel):
    id: int
    user_id: int
    recipient_type: str
    title: str
    message: str
    type: NotificationType
    read: bool
    created_at: Optional[datetime] = None


class TokenResponse(ApiModel):
    token: str


class CustomerLoginResponse(ApiModel):
    token: str
    customer: CustomerResponse


class DriverLoginResponse(ApiModel):
    token: str
    driver: DriverResponse


class Envelope(BaseModel, Generic[T]):
    status: str = "success"
    data: T


class MessageResponse(BaseModel):
    status: str = "success"
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    status: str = "error"
    statusCode: int
    message: str
