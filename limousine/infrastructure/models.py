"""
SQLAlchemy ORM models.

Tables
------
* ``customers``     -- riders who request bookings
* ``drivers``       -- chauffeurs with vehicle details and availability
* ``payments``      -- provider-confirmed payments
* ``bookings``      -- ride requests and their lifecycle status
* ``notifications`` -- in-app messages addressed to a customer or driver

Indexes
-------
* **B-Tree** on ``bookings.status``, ``customer_id`` and ``driver_id`` for
  the list / workload queries, on ``drivers.status`` for availability
  and on ``notifications.user_id``.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)

from .database import Base
from limousine.domain.enums import (
    BookingStatus,
    CustomerStatus,
    DriverStatus,
    NotificationType,
)


def _values(enum_cls):
    return [member.value for member in enum_cls]


class CustomerModel(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone_number = Column(String(32), nullable=True)
    password = Column(String(255), nullable=False)
    fcm_token = Column(String(512), nullable=True)
    status = Column(
        Enum(CustomerStatus, name="customer_status", values_callable=_values),
        default=CustomerStatus.UNVERIFIED,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    vehicle_model = Column(String(120), nullable=False)
    license_plate = Column(String(32), nullable=False)
    status = Column(
        Enum(DriverStatus, name="driver_status", values_callable=_values),
        default=DriverStatus.AVAILABLE,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_drivers_status", "status"),)

    @property
    def vehicle_details(self) -> dict:
        return {"model": self.vehicle_model, "licensePlate": self.license_plate}


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    payment_intent_id = Column(String(255), unique=True, nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    payment_method = Column(String(64), nullable=True)
    stripe_charge_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_payments_customer", "customer_id"),)


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)
    # One payment settles at most one booking
    payment_id = Column(Integer, ForeignKey("payments.id"), nullable=True, unique=True)

    # {longitude, latitude, locationName}
    start_location = Column(JSON, nullable=False)
    final_location = Column(JSON, nullable=False)
    stops = Column(JSON, nullable=False, default=list)

    number_of_passengers = Column(Integer, nullable=False, default=1)
    number_of_luggage = Column(Integer, nullable=False, default=0)
    note = Column(Text, nullable=True)
    contact_info = Column(String(255), nullable=False)
    ride_time = Column(DateTime(timezone=True), nullable=False)
    final_price = Column(Float, nullable=True)

    status = Column(
        Enum(BookingStatus, name="booking_status", values_callable=_values),
        default=BookingStatus.PENDING,
        nullable=False,
    )
    rejection_reason = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_bookings_status", "status"),
        Index("idx_bookings_customer", "customer_id"),
        Index("idx_bookings_driver", "driver_id"),
    )


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    recipient_type = Column(String(16), nullable=False)  # customer | driver
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        Enum(NotificationType, name="notification_type", values_callable=_values),
        nullable=False,
    )
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_notifications_user", "recipient_type", "user_id"),
    )
