"""
Customer, driver and admin accounts.

Passwords are hashed on the way in and checked in constant time on
login; successful logins return a signed access token.  The admin has no
password and signs in with a one-time code instead.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from limousine.domain.enums import (
    ACTIVE_RIDE_STATUSES,
    BookingStatus,
    DriverStatus,
    Role,
)
from limousine.domain.errors import NotFoundError, UnauthorizedError, ValidationError
from limousine.infrastructure.models import CustomerModel, DriverModel
from limousine.infrastructure.otp_store import AdminOtpStore
from limousine.infrastructure.push import OtpMailer
from limousine.infrastructure.repositories import (
    BookingRepository,
    CustomerRepository,
    DriverRepository,
    PaymentRepository,
)
from limousine.lib.passwords import hash_password, verify_password
from limousine.lib.tokens import create_access_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

# A driver is claimed from the quote until the ride ends
DRIVER_HOLDING_STATUSES = ACTIVE_RIDE_STATUSES | {BookingStatus.AWAITING_ACCEPTANCE}


class CustomerAccounts:
    def __init__(self, session: AsyncSession):
        self.customers = CustomerRepository(session)
        self.bookings = BookingRepository(session)
        self.payments = PaymentRepository(session)

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        phone_number: Optional[str] = None,
    ) -> CustomerModel:
        if await self.customers.find_one(email=email) is not None:
            raise ValidationError("Email already exists")
        customer = await self.customers.create(
            name=name,
            email=email,
            phone_number=phone_number,
            password=hash_password(password),
        )
        logger.info("Customer %s signed up", customer.id)
        return customer

    async def login(self, email: str, password: str) -> tuple[str, CustomerModel]:
        customer = await self.customers.find_one(email=email)
        if customer is None or not verify_password(password, customer.password):
            raise UnauthorizedError(INVALID_CREDENTIALS)
        token = create_access_token(
            str(customer.id), Role.CUSTOMER, customer.email, customer.name
        )
        return token, customer

    async def set_fcm_token(self, customer_id: int, fcm_token: str) -> CustomerModel:
        return await self.update(customer_id, fcm_token=fcm_token)

    async def update_profile(
        self,
        customer_id: int,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> CustomerModel:
        patch = {
            key: value
            for key, value in (("name", name), ("phone_number", phone_number))
            if value
        }
        if not patch:
            raise ValidationError(
                "At least one field (name or phoneNumber) must be provided"
            )
        return await self.update(customer_id, **patch)

    async def get(self, customer_id: int) -> CustomerModel:
        customer = await self.customers.get_by_id(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        return customer

    async def list_all(self, **filters: Any) -> list[CustomerModel]:
        return await self.customers.find_all(**filters)

    async def update(self, customer_id: int, **patch: Any) -> CustomerModel:
        email = patch.get("email")
        if email:
            other = await self.customers.find_one(email=email)
            if other is not None and other.id != customer_id:
                raise ValidationError("Email already exists")
        if patch.get("password"):
            patch["password"] = hash_password(patch["password"])
        customer = await self.customers.update_by_id(customer_id, **patch)
        if customer is None:
            raise NotFoundError("Customer not found")
        return customer

    async def delete(self, customer_id: int) -> None:
        has_history = await self.bookings.count(
            customer_id=customer_id
        ) or await self.payments.count(customer_id=customer_id)
        if has_history:
            raise ValidationError(
                "Customer has bookings or payments and cannot be deleted"
            )
        if not await self.customers.delete_by_id(customer_id):
            raise NotFoundError("Customer not found")


class DriverAccounts:
    def __init__(self, session: AsyncSession):
        self.drivers = DriverRepository(session)
        self.bookings = BookingRepository(session)

    async def add(
        self,
        name: str,
        email: str,
        password: str,
        vehicle_model: str,
        license_plate: str,
        status: Optional[DriverStatus] = None,
    ) -> DriverModel:
        if await self.drivers.find_one(email=email) is not None:
            raise ValidationError("Email already exists")
        driver = await self.drivers.create(
            name=name,
            email=email,
            password=hash_password(password),
            vehicle_model=vehicle_model,
            license_plate=license_plate,
            status=status or DriverStatus.AVAILABLE,
        )
        logger.info("Driver %s added", driver.id)
        return driver

    async def login(self, email: str, password: str) -> tuple[str, DriverModel]:
        driver = await self.drivers.find_one(email=email)
        if driver is None or not verify_password(password, driver.password):
            raise UnauthorizedError(INVALID_CREDENTIALS)
        token = create_access_token(
            str(driver.id), Role.DRIVER, driver.email, driver.name
        )
        return token, driver

    async def get(self, driver_id: int) -> DriverModel:
        driver = await self.drivers.get_by_id(driver_id)
        if driver is None:
            raise NotFoundError("Driver not found")
        return driver

    async def list_all(self, status: Optional[DriverStatus] = None) -> list[DriverModel]:
        return await self.drivers.find_all(status=status)

    async def update(self, driver_id: int, **patch: Any) -> DriverModel:
        if patch.get("status") is not None and await self.bookings.list_for_driver(
            driver_id, DRIVER_HOLDING_STATUSES
        ):
            raise ValidationError(
                "Driver status cannot be changed while a booking holds the driver"
            )
        email = patch.get("email")
        if email:
            other = await self.drivers.find_one(email=email)
            if other is not None and other.id != driver_id:
                raise ValidationError("Email already exists")
        if patch.get("password"):
            patch["password"] = hash_password(patch["password"])
        driver = await self.drivers.update_by_id(driver_id, **patch)
        if driver is None:
            raise NotFoundError("Driver not found")
        return driver

    async def delete(self, driver_id: int) -> None:
        if await self.bookings.count(driver_id=driver_id):
            raise ValidationError("Driver has bookings and cannot be deleted")
        if not await self.drivers.delete_by_id(driver_id):
            raise NotFoundError("Driver not found")


class AdminAuth:
    def __init__(self, otp_store: AdminOtpStore, mailer: OtpMailer, admin_email: str):
        self.otp_store = otp_store
        self.mailer = mailer
        self.admin_email = admin_email

    async def send_otp(self) -> None:
        code = await self.otp_store.issue()
        await self.mailer.send_otp(self.admin_email, code)

    async def verify_otp(self, code: str) -> str:
        if not code or not await self.otp_store.consume(code):
            raise UnauthorizedError("Invalid OTP")
        logger.info("Admin signed in with OTP")
        return create_access_token("admin", Role.ADMIN, self.admin_email, "Admin")
