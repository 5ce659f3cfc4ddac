"""FastAPI dependency injection helpers.

Shared handles (database, Redis, payment provider, push sender) live on
``app.state``; the helpers below hand them to routes and build the
per-request services on top of the request's session.
"""

from __future__ import annotations

from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.domain.enums import Role
from limousine.domain.errors import ForbiddenError, UnauthorizedError
from limousine.infrastructure.otp_store import AdminOtpStore
from limousine.infrastructure.payments import PaymentProvider
from limousine.infrastructure.push import OtpMailer, PushSender
from limousine.lib.tokens import actor_from_token
from limousine.services.account_service import (
    AdminAuth,
    CustomerAccounts,
    DriverAccounts,
)
from limousine.services.booking_engine import BookingEngine
from limousine.services.notification_service import NotificationService
from limousine.services.payment_service import PaymentService


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an async DB session; commit on success, rollback on error."""
    async with request.app.state.database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_redis(request: Request) -> aioredis.Redis:
    return request.app.state.redis


def get_payment_provider(request: Request) -> PaymentProvider:
    return request.app.state.payment_provider


def get_push_sender(request: Request) -> PushSender:
    return request.app.state.push_sender


def get_otp_mailer(request: Request) -> OtpMailer:
    return request.app.state.otp_mailer


# ── Identity & role gate ──────────────────────────────────────────────

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token is required")
    return actor_from_token(credentials.credentials)


def require_role(*roles: Role):
    allowed = {role.value for role in roles}

    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role.value not in allowed and actor.user_type not in allowed:
            raise ForbiddenError(
                f"Access denied. Required roles: {', '.join(sorted(allowed))}"
            )
        return actor

    return dependency


require_admin = require_role(Role.ADMIN)
require_customer = require_role(Role.CUSTOMER)
require_driver = require_role(Role.DRIVER)
require_user = require_role(Role.CUSTOMER, Role.DRIVER)


# ── Services ──────────────────────────────────────────────────────────


def get_notification_service(
    db: AsyncSession = Depends(get_db),
    push: PushSender = Depends(get_push_sender),
) -> NotificationService:
    return NotificationService(db, push)


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    provider: PaymentProvider = Depends(get_payment_provider),
) -> PaymentService:
    return PaymentService(db, provider, settings.payment_currency)


def get_booking_engine(
    db: AsyncSession = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> BookingEngine:
    return BookingEngine(db, payments=payments, notifications=notifications)


def get_customer_accounts(db: AsyncSession = Depends(get_db)) -> CustomerAccounts:
    return CustomerAccounts(db)


def get_driver_accounts(db: AsyncSession = Depends(get_db)) -> DriverAccounts:
    return DriverAccounts(db)


def get_admin_auth(
    client: aioredis.Redis = Depends(get_redis),
    mailer: OtpMailer = Depends(get_otp_mailer),
) -> AdminAuth:
    return AdminAuth(
        AdminOtpStore(client, settings.otp_ttl_seconds),
        mailer,
        settings.admin_email,
    )
