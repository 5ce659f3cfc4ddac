"""
Domain value objects shared by the services and the API layer.

* ``Location`` -- a named geo-point (start, final or intermediate stop).
* ``Actor``    -- the authenticated party behind a request.
* ``RideRequest`` -- everything a customer supplies when booking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .enums import Role
from .errors import ValidationError


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    longitude: float
    latitude: float
    location_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "longitude": self.longitude,
            "latitude": self.latitude,
            "locationName": self.location_name,
        }


@dataclass(frozen=True)
class Actor:
    """Resolved identity of a caller: who they are and in which role."""

    user_id: Optional[int]
    role: Role
    user_type: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class RideRequest:
    start_location: Location
    final_location: Location
    number_of_passengers: int
    number_of_luggage: int
    contact_info: str
    ride_time: datetime
    stops: list[Location] = field(default_factory=list)
    note: Optional[str] = None

    def validate(self) -> None:
        if self.number_of_passengers < 1:
            raise ValidationError("numberOfPassengers must be at least 1")
        if self.number_of_luggage < 0:
            raise ValidationError("numberOfLuggage cannot be negative")
        if not self.contact_info:
            raise ValidationError("contactInfo is required")
