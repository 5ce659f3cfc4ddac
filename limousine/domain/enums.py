"""Domain enumerations and state-transition rules."""

import enum


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    AWAITING_ACCEPTANCE = "awaiting-acceptance"
    ASSIGNED = "assigned"
    HEADING_TO_PICKUP = "heading-to-pickup"
    ARRIVED_AT_PICKUP = "arrived-at-pickup"
    EN_ROUTE = "en-route"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED_BY_ADMIN = "rejected-by-admin"


# State machine: maps current status -> set of valid next statuses
BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {
        BookingStatus.AWAITING_ACCEPTANCE,
        BookingStatus.CANCELLED,
        BookingStatus.REJECTED_BY_ADMIN,
    },
    BookingStatus.AWAITING_ACCEPTANCE: {
        BookingStatus.ASSIGNED,
        BookingStatus.CANCELLED,
    },
    BookingStatus.ASSIGNED: {BookingStatus.HEADING_TO_PICKUP},
    BookingStatus.HEADING_TO_PICKUP: {BookingStatus.ARRIVED_AT_PICKUP},
    BookingStatus.ARRIVED_AT_PICKUP: {BookingStatus.EN_ROUTE},
    BookingStatus.EN_ROUTE: {BookingStatus.COMPLETED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
    BookingStatus.REJECTED_BY_ADMIN: set(),
}

# A driver's current workload
ACTIVE_RIDE_STATUSES: frozenset[BookingStatus] = frozenset(
    {
        BookingStatus.ASSIGNED,
        BookingStatus.HEADING_TO_PICKUP,
        BookingStatus.ARRIVED_AT_PICKUP,
        BookingStatus.EN_ROUTE,
    }
)


class DriverStatus(str, enum.Enum):
    AVAILABLE = "available"
    ON_TRIP = "on_trip"
    OFFLINE = "offline"


class CustomerStatus(str, enum.Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"


class NotificationType(str, enum.Enum):
    TASK_ASSIGNED = "task_assigned"
    LOCATION_ERROR = "location_error"
    PAYMENT_PROCESSED = "payment_processed"
    SYSTEM = "system"


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    ADMIN = "admin"
