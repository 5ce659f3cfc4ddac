"""
FastAPI application factory.

* Registers the customer, driver, admin and notification routers.
* Opens the database and Redis handles via lifespan events and closes them
  on shutdown.
* Applies rate-limiting middleware and the error envelope handlers.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from limousine.api.errors import register_error_handlers
from limousine.api.middleware import limiter
from limousine.api.routes import (
    admin_auth,
    admin_booking,
    admin_customers,
    admin_drivers,
    customer_booking,
    customer_payment,
    customer_profile,
    driver_booking,
    driver_profile,
    health,
    notifications,
)
from limousine.config import settings
from limousine.infrastructure.database import Database
from limousine.infrastructure.payments import StripePaymentProvider
from limousine.infrastructure.push import LoggingOtpMailer, LoggingPushSender
from limousine.infrastructure.redis_client import create_redis

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and Redis on startup; release them on shutdown."""
    app.state.database = Database(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )
    app.state.redis = create_redis(settings.redis_url)
    logger.info("Limousine booking API started")
    yield
    await app.state.redis.aclose()
    await app.state.database.dispose()
    logger.info("Limousine booking API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Limousine Booking API",
        description=(
            "Customers request rides, admins quote a driver and price, "
            "customers pay and accept, and drivers advance the ride to "
            "completion."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_error_handlers(app)

    # Outbound collaborators
    app.state.payment_provider = StripePaymentProvider(settings.stripe_secret_key)
    app.state.push_sender = LoggingPushSender()
    app.state.otp_mailer = LoggingOtpMailer(reveal_code=settings.debug)

    # Routers
    for module in (
        admin_auth,
        admin_booking,
        admin_drivers,
        admin_customers,
        customer_profile,
        customer_booking,
        customer_payment,
        driver_profile,
        driver_booking,
        notifications,
        health,
    ):
        app.include_router(module.router)

    return app
