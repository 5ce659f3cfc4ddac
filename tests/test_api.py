"""
Integration tests for the REST API endpoints.

Runs the real application against an in-memory SQLite database; the
payment provider, Redis and push sender on ``app.state`` are fakes.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from limousine.domain.enums import Role
from tests.conftest import PASSWORD, bearer, future, location


def ride_body(**overrides) -> dict:
    body = {
        "startLocation": location("DXB Terminal 3", 55.36, 25.25),
        "finalLocation": location("Dubai Marina", 55.14, 25.08),
        "stops": [],
        "numberOfPassengers": 2,
        "numberOfLuggage": 2,
        "note": "",
        "contactInfo": "+971500000001",
        "rideTime": future().isoformat(),
    }
    body.update(overrides)
    return body


ADMIN_HEADERS = bearer("admin", Role.ADMIN)


async def submit(client: AsyncClient, customer_id: int, **overrides) -> dict:
    resp = await client.post(
        "/customer/booking/submitRequest",
        json=ride_body(**overrides),
        headers=bearer(customer_id, Role.CUSTOMER),
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_database_failure_returns_generic_500(client: AsyncClient, monkeypatch):
    async def broken(self, *args, **kwargs):
        raise OperationalError("SELECT bookings", {}, Exception("connection reset"))

    monkeypatch.setattr(AsyncSession, "execute", broken)
    resp = await client.get("/admin/booking/getAll", headers=ADMIN_HEADERS)

    assert resp.status_code == 500
    assert resp.json() == {
        "status": "error",
        "statusCode": 500,
        "message": "Internal server error",
    }
    assert "connection reset" not in resp.text


@pytest.mark.asyncio
async def test_full_booking_lifecycle(
    client: AsyncClient, payment_provider, make_customer, make_driver
):
    customer = await make_customer()
    driver = await make_driver()
    customer_headers = bearer(customer.id, Role.CUSTOMER)
    driver_headers = bearer(driver.id, Role.DRIVER)

    booking = await submit(client, customer.id)
    assert booking["status"] == "pending"
    assert booking["note"] is None
    booking_id = booking["id"]

    resp = await client.post(
        "/admin/booking/assignDriverAndSetPrice",
        json={"bookingId": booking_id, "driverId": driver.id, "finalPrice": 180},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["status"] == "awaiting-acceptance"

    resp = await client.post(
        "/customer/payment/createIntent",
        json={"amount": 180},
        headers=customer_headers,
    )
    intent_id = resp.json()["data"]["paymentIntentId"]
    payment_provider.succeed(intent_id, 18000)

    resp = await client.post(
        "/customer/booking/acceptQuote",
        json={"bookingId": booking_id, "paymentIntentId": intent_id},
        headers=customer_headers,
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["status"] == "assigned"
    assert data["paymentId"] is not None

    for step, expected in (
        ("startHeadingToPickup", "heading-to-pickup"),
        ("markArrivedAtPickup", "arrived-at-pickup"),
        ("startRide", "en-route"),
        ("completeRide", "completed"),
    ):
        resp = await client.post(
            f"/driver/booking/{step}",
            json={"bookingId": booking_id},
            headers=driver_headers,
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["data"]["status"] == expected

    resp = await client.get("/admin/driver/getById", params={"id": driver.id}, headers=ADMIN_HEADERS)
    assert resp.json()["data"]["status"] == "available"

    resp = await client.get("/customer/payment/history", headers=customer_headers)
    assert [p["amount"] for p in resp.json()["data"]] == [180.0]


@pytest.mark.asyncio
async def test_illegal_transition_is_400_with_message(
    client: AsyncClient, make_customer, make_driver
):
    customer = await make_customer()
    driver = await make_driver()
    booking = await submit(client, customer.id)

    resp = await client.post(
        "/driver/booking/startRide",
        json={"bookingId": booking["id"]},
        headers=bearer(driver.id, Role.DRIVER),
    )
    # Not the assigned driver: ownership is checked before the status
    assert resp.status_code == 403

    await client.post(
        "/customer/booking/cancel",
        json={"bookingId": booking["id"]},
        headers=bearer(customer.id, Role.CUSTOMER),
    )
    resp = await client.post(
        "/admin/booking/assignDriverAndSetPrice",
        json={"bookingId": booking["id"], "driverId": driver.id, "finalPrice": 50},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["status"] == "error"
    assert body["statusCode"] == 400
    assert "current status is 'cancelled'" in body["message"]


@pytest.mark.asyncio
async def test_ride_time_in_past(client: AsyncClient, make_customer):
    customer = await make_customer()
    resp = await client.post(
        "/customer/booking/submitRequest",
        json=ride_body(rideTime="2020-01-01T10:00:00Z"),
        headers=bearer(customer.id, Role.CUSTOMER),
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Ride time must be in the future"


@pytest.mark.asyncio
async def test_missing_inputs_are_listed(client: AsyncClient, make_customer):
    customer = await make_customer()
    body = ride_body()
    del body["contactInfo"]
    resp = await client.post(
        "/customer/booking/submitRequest",
        json=body,
        headers=bearer(customer.id, Role.CUSTOMER),
    )
    assert resp.status_code == 400
    assert resp.json()["missedInputs"] == ["contactInfo"]


@pytest.mark.asyncio
async def test_customer_cannot_cancel_another_customers_booking(
    client: AsyncClient, make_customer
):
    owner = await make_customer()
    other = await make_customer()
    booking = await submit(client, owner.id)

    resp = await client.post(
        "/customer/booking/cancel",
        json={"bookingId": booking["id"]},
        headers=bearer(other.id, Role.CUSTOMER),
    )
    assert resp.status_code == 403

    resp = await client.get(
        "/admin/booking/getById", params={"id": booking["id"]}, headers=ADMIN_HEADERS
    )
    assert resp.json()["data"]["status"] == "pending"


@pytest.mark.asyncio
async def test_reject_booking(client: AsyncClient, make_customer):
    customer = await make_customer()
    booking = await submit(client, customer.id)
    resp = await client.post(
        "/admin/booking/reject",
        json={"bookingId": booking["id"], "rejectionReason": "No cars available"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "rejected-by-admin"
    assert data["rejectionReason"] == "No cars available"


@pytest.mark.asyncio
async def test_bookings_by_customer_filters_by_status(client: AsyncClient, make_customer):
    customer = await make_customer()
    headers = bearer(customer.id, Role.CUSTOMER)
    first = await submit(client, customer.id)
    await submit(client, customer.id)
    await client.post(
        "/customer/booking/cancel", json={"bookingId": first["id"]}, headers=headers
    )

    resp = await client.get(
        "/customer/booking/byCustomer", params={"status": "cancelled"}, headers=headers
    )
    assert [b["id"] for b in resp.json()["data"]] == [first["id"]]

    resp = await client.get("/customer/booking/byCustomer", headers=headers)
    assert len(resp.json()["data"]) == 2


# ── Auth & role gate ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    resp = await client.get("/admin/booking/getAll")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Access token is required"


@pytest.mark.asyncio
async def test_wrong_role(client: AsyncClient, make_customer):
    customer = await make_customer()
    resp = await client.get(
        "/admin/booking/getAll", headers=bearer(customer.id, Role.CUSTOMER)
    )
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. Required roles: admin"


@pytest.mark.asyncio
async def test_customer_signup_and_login(client: AsyncClient):
    resp = await client.post(
        "/customer/profile/signup",
        json={
            "name": "Ann",
            "email": "ann@example.com",
            "phoneNumber": "+1555",
            "password": "hunter22",
        },
    )
    assert resp.status_code == 201
    assert "password" not in resp.json()["data"]

    resp = await client.post(
        "/customer/profile/login",
        json={"email": "ann@example.com", "password": "hunter22"},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["customer"]["email"] == "ann@example.com"

    resp = await client.post(
        "/customer/profile/updateProfile",
        json={"name": "Ann B"},
        headers={"Authorization": f"Bearer {data['token']}"},
    )
    assert resp.json()["data"]["name"] == "Ann B"


@pytest.mark.asyncio
async def test_driver_login(client: AsyncClient, make_driver):
    driver = await make_driver()
    resp = await client.post(
        "/driver/profile/login", json={"email": driver.email, "password": PASSWORD}
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["driver"]["vehicleDetails"]["model"] == "Mercedes S-Class"

    resp = await client.post(
        "/driver/profile/login", json={"email": driver.email, "password": "nope"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_otp_flow(client: AsyncClient):
    resp = await client.post("/admin/auth/sendOtp")
    assert resp.status_code == 200
    code = client.app.state.otp_mailer.codes[-1]

    resp = await client.post("/admin/auth/verifyOtp", json={"otp": code})
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]

    resp = await client.get(
        "/admin/booking/getAll", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200

    # Single use
    resp = await client.post("/admin/auth/verifyOtp", json={"otp": code})
    assert resp.status_code == 401


# ── Admin records ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_admin_driver_crud(client: AsyncClient):
    resp = await client.post(
        "/admin/driver/addRecord",
        json={
            "name": "Elena",
            "email": "elena@example.com",
            "password": "hunter22",
            "vehicleDetails": {"model": "BMW 7", "licensePlate": "DXB-7"},
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 201
    driver_id = resp.json()["data"]["id"]

    resp = await client.post(
        "/admin/driver/updateRecord",
        json={"recordId": driver_id, "status": "offline", "name": ""},
        headers=ADMIN_HEADERS,
    )
    data = resp.json()["data"]
    assert data["status"] == "offline"
    assert data["name"] == "Elena"

    resp = await client.get(
        "/admin/driver/getAll", params={"status": "offline"}, headers=ADMIN_HEADERS
    )
    assert [d["id"] for d in resp.json()["data"]] == [driver_id]

    resp = await client.post(
        "/admin/driver/deleteById", json={"recordId": driver_id}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 200

    resp = await client.get(
        "/admin/driver/getById", params={"id": driver_id}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_customer_records(client: AsyncClient, make_customer):
    customer = await make_customer()
    resp = await client.post(
        "/admin/customer/updateRecord",
        json={"recordId": customer.id, "status": "verified"},
        headers=ADMIN_HEADERS,
    )
    assert resp.json()["data"]["status"] == "verified"

    resp = await client.get("/admin/customer/getAll", headers=ADMIN_HEADERS)
    assert [c["id"] for c in resp.json()["data"]] == [customer.id]


# ── Notifications ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_notifications_list_and_mark_read(
    client: AsyncClient, make_customer, make_driver
):
    customer = await make_customer()
    driver = await make_driver()
    booking = await submit(client, customer.id)
    await client.post(
        "/admin/booking/assignDriverAndSetPrice",
        json={"bookingId": booking["id"], "driverId": driver.id, "finalPrice": 75},
        headers=ADMIN_HEADERS,
    )

    headers = bearer(customer.id, Role.CUSTOMER)
    resp = await client.get("/notifications/list", headers=headers)
    notes = resp.json()["data"]
    assert [n["title"] for n in notes] == ["Ride quote ready"]
    assert notes[0]["read"] is False

    resp = await client.post(
        "/notifications/markRead",
        json={"notificationId": notes[0]["id"]},
        headers=headers,
    )
    assert resp.json()["data"]["read"] is True

    # The driver cannot touch the customer's notification
    resp = await client.post(
        "/notifications/markRead",
        json={"notificationId": notes[0]["id"]},
        headers=bearer(driver.id, Role.DRIVER),
    )
    assert resp.status_code == 403
