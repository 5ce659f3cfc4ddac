"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The payment provider, push sender and Redis
are replaced by in-process fakes.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from limousine.api.middleware import limiter
from limousine.domain.entities import Actor
from limousine.domain.enums import BookingStatus, DriverStatus, Role
from limousine.infrastructure.database import Database
from limousine.infrastructure.payments import PaymentProviderError, ProviderIntent
from limousine.infrastructure.repositories import (
    BookingRepository,
    CustomerRepository,
    DriverRepository,
)
from limousine.lib.passwords import hash_password
from limousine.lib.tokens import create_access_token

# Request-rate limits are exercised in production only
limiter.enabled = False

TEST_DB_URL = "sqlite+aiosqlite://"
PASSWORD = "secret123"


# ── Fakes ─────────────────────────────────────────────────────────────


class FakePaymentProvider:
    """Keeps intents in memory; tests flip their status via ``succeed``."""

    def __init__(self):
        self.intents: dict[str, ProviderIntent] = {}
        self.created: list[tuple[int, str]] = []
        self.fail_with: Optional[str] = None

    async def create_intent(self, amount: int, currency: str) -> ProviderIntent:
        if self.fail_with:
            raise PaymentProviderError(self.fail_with)
        self.created.append((amount, currency))
        intent = ProviderIntent(
            id=f"pi_{len(self.intents) + 1}",
            status="requires_payment_method",
            amount=amount,
            currency=currency.lower(),
            client_secret=f"pi_{len(self.intents) + 1}_secret",
            payment_method_types=["card"],
        )
        self.intents[intent.id] = intent
        return intent

    async def retrieve_intent(self, intent_id: str) -> ProviderIntent:
        if self.fail_with:
            raise PaymentProviderError(self.fail_with)
        if intent_id not in self.intents:
            raise PaymentProviderError(f"No such payment_intent: '{intent_id}'")
        return self.intents[intent_id]

    def succeed(self, intent_id: str, amount_cents: int, currency: str = "usd"):
        self.intents[intent_id] = ProviderIntent(
            id=intent_id,
            status="succeeded",
            amount=amount_cents,
            currency=currency,
            payment_method_types=["card"],
            latest_charge_id=f"ch_{intent_id}",
        )


class FakeRedis:
    """
    The subset of ``redis.asyncio.Redis`` the OTP store uses.

    Every command yields to the event loop first, like a network round
    trip, so interleavings between concurrent callers are exercised.
    ``eval`` only understands the compare-and-delete script.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        await asyncio.sleep(0)
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        await asyncio.sleep(0)
        self.data[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def delete(self, *keys):
        await asyncio.sleep(0)
        removed = 0
        for key in keys:
            removed += self.data.pop(key, None) is not None
            self.ttls.pop(key, None)
        return removed

    async def eval(self, script, numkeys, *args):
        await asyncio.sleep(0)
        key, expected = args[0], args[numkeys]
        if self.data.get(key) != expected:
            return 0
        del self.data[key]
        self.ttls.pop(key, None)
        return 1


class RecordingPushSender:
    def __init__(self, fail: bool = False):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = fail

    async def send(self, token, title, body, data=None) -> None:
        if self.fail:
            raise RuntimeError("push gateway unreachable")
        self.sent.append((token, title, body))


class RecordingOtpMailer:
    def __init__(self):
        self.codes: list[str] = []

    async def send_otp(self, email: str, code: str) -> None:
        self.codes.append(code)


# ── Database ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory schema per test; one shared connection."""
    db = Database(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
def payment_provider() -> FakePaymentProvider:
    return FakePaymentProvider()


@pytest.fixture
def push_sender() -> RecordingPushSender:
    return RecordingPushSender()


# ── Factories ─────────────────────────────────────────────────────────


def future(hours: int = 24) -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=hours)


def location(name: str, lng: float = 55.27, lat: float = 25.20) -> dict:
    return {"longitude": lng, "latitude": lat, "locationName": name}


@pytest.fixture
def make_customer(db_session: AsyncSession):
    counter = iter(range(1, 1000))

    async def _make(**overrides):
        n = next(counter)
        values = {
            "name": f"Customer {n}",
            "email": f"customer{n}@example.com",
            "password": hash_password(PASSWORD, iterations=1_000),
        }
        values.update(overrides)
        customer = await CustomerRepository(db_session).create(**values)
        await db_session.commit()
        return customer

    return _make


@pytest.fixture
def make_driver(db_session: AsyncSession):
    counter = iter(range(1, 1000))

    async def _make(**overrides):
        n = next(counter)
        values = {
            "name": f"Driver {n}",
            "email": f"driver{n}@example.com",
            "password": hash_password(PASSWORD, iterations=1_000),
            "vehicle_model": "Mercedes S-Class",
            "license_plate": f"LMO-{n:04d}",
            "status": DriverStatus.AVAILABLE,
        }
        values.update(overrides)
        driver = await DriverRepository(db_session).create(**values)
        await db_session.commit()
        return driver

    return _make


@pytest.fixture
def make_booking(db_session: AsyncSession):
    async def _make(customer_id: int, status=BookingStatus.PENDING, **overrides):
        values = {
            "customer_id": customer_id,
            "start_location": location("Airport"),
            "final_location": location("Marina", 55.14, 25.08),
            "stops": [],
            "number_of_passengers": 2,
            "number_of_luggage": 1,
            "contact_info": "+971500000000",
            "ride_time": future(),
            "status": status,
        }
        values.update(overrides)
        booking = await BookingRepository(db_session).create(**values)
        await db_session.commit()
        return booking

    return _make


def customer_actor(customer_id: int) -> Actor:
    return Actor(user_id=customer_id, role=Role.CUSTOMER, user_type="customer")


def driver_actor(driver_id: int) -> Actor:
    return Actor(user_id=driver_id, role=Role.DRIVER, user_type="driver")


ADMIN = Actor(user_id=None, role=Role.ADMIN, user_type="admin")


# ── HTTP client ───────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client(database, payment_provider, push_sender):
    """AsyncClient against the real app with fakes on ``app.state``."""
    from limousine.api.app import create_app

    app = create_app()
    # ASGITransport does not run the lifespan; wire the handles directly
    app.state.database = database
    app.state.redis = FakeRedis()
    app.state.payment_provider = payment_provider
    app.state.push_sender = push_sender
    app.state.otp_mailer = RecordingOtpMailer()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        ac.app = app
        yield ac


def bearer(subject, role: Role) -> dict[str, str]:
    token = create_access_token(str(subject), role)
    return {"Authorization": f"Bearer {token}"}
