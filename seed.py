"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 5 sample customers (password ``password123``)
  - 4 sample drivers
  - 6 sample bookings (pending, awaiting-acceptance, assigned, en-route,
    completed and cancelled)
"""

import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from limousine.config import settings
from limousine.domain.enums import BookingStatus, CustomerStatus, DriverStatus
from limousine.infrastructure.database import Database
from limousine.infrastructure.models import CustomerModel
from limousine.infrastructure.repositories import (
    BookingRepository,
    CustomerRepository,
    DriverRepository,
)
from limousine.lib.passwords import hash_password

SAMPLE_PASSWORD = "password123"

AIRPORT = {"longitude": 55.3644, "latitude": 25.2532, "locationName": "DXB Terminal 3"}
MARINA = {"longitude": 55.1403, "latitude": 25.0805, "locationName": "Dubai Marina"}
DOWNTOWN = {"longitude": 55.2744, "latitude": 25.1972, "locationName": "Downtown"}
JUMEIRAH = {"longitude": 55.2406, "latitude": 25.2048, "locationName": "Jumeirah"}

CUSTOMERS = [
    {"name": "Layla Haddad", "email": "layla@example.com", "phone_number": "+971500000001"},
    {"name": "Omar Farouk", "email": "omar@example.com", "phone_number": "+971500000002"},
    {"name": "Sara Novak", "email": "sara@example.com", "phone_number": "+971500000003"},
    {"name": "James Okoro", "email": "james@example.com", "phone_number": None},
    {"name": "Mina Park", "email": "mina@example.com", "phone_number": "+971500000005"},
]

DRIVERS = [
    {"name": "Yusuf Rahman", "email": "yusuf@example.com", "vehicle_model": "Mercedes S-Class", "license_plate": "DXB-1001"},
    {"name": "Elena Petrova", "email": "elena@example.com", "vehicle_model": "BMW 7 Series", "license_plate": "DXB-1002"},
    {"name": "Ravi Menon", "email": "ravi@example.com", "vehicle_model": "Cadillac Escalade", "license_plate": "DXB-1003"},
    {"name": "Tom Berger", "email": "tom@example.com", "vehicle_model": "Lincoln Navigator", "license_plate": "DXB-1004"},
]


async def seed(database: Database):
    async with database.session() as session:
        # Check if already seeded
        existing = await session.scalar(select(func.count()).select_from(CustomerModel))
        if existing:
            print("Database already seeded. Skipping.")
            return

        customers = CustomerRepository(session)
        drivers = DriverRepository(session)
        bookings = BookingRepository(session)
        password = hash_password(SAMPLE_PASSWORD)

        # ── Customers ─────────────────────────────────────────────────
        customer_models = [
            await customers.create(
                password=password, status=CustomerStatus.VERIFIED, **c
            )
            for c in CUSTOMERS
        ]
        print(f"  Created {len(customer_models)} customers")

        # ── Drivers ───────────────────────────────────────────────────
        driver_models = [
            await drivers.create(password=password, **d) for d in DRIVERS
        ]
        print(f"  Created {len(driver_models)} drivers")

        # ── Bookings ──────────────────────────────────────────────────
        now = datetime.now(timezone.utc)
        bookings_data = [
            {
                "customer": 0, "driver": None, "status": BookingStatus.PENDING,
                "route": (AIRPORT, MARINA), "in_hours": 6, "price": None,
            },
            {
                "customer": 1, "driver": 0, "status": BookingStatus.AWAITING_ACCEPTANCE,
                "route": (AIRPORT, DOWNTOWN), "in_hours": 4, "price": 180.0,
            },
            {
                "customer": 2, "driver": 1, "status": BookingStatus.ASSIGNED,
                "route": (DOWNTOWN, AIRPORT), "in_hours": 2, "price": 150.0,
            },
            {
                "customer": 3, "driver": 2, "status": BookingStatus.EN_ROUTE,
                "route": (JUMEIRAH, AIRPORT), "in_hours": 0, "price": 120.0,
            },
            {
                "customer": 0, "driver": 3, "status": BookingStatus.COMPLETED,
                "route": (MARINA, AIRPORT), "in_hours": -24, "price": 210.0,
            },
            {
                "customer": 4, "driver": None, "status": BookingStatus.CANCELLED,
                "route": (AIRPORT, JUMEIRAH), "in_hours": 12, "price": None,
            },
        ]
        for b in bookings_data:
            start, final = b["route"]
            driver = driver_models[b["driver"]] if b["driver"] is not None else None
            await bookings.create(
                customer_id=customer_models[b["customer"]].id,
                driver_id=driver.id if driver else None,
                start_location=start,
                final_location=final,
                stops=[],
                number_of_passengers=2,
                number_of_luggage=2,
                contact_info=CUSTOMERS[b["customer"]]["email"],
                ride_time=now + timedelta(hours=b["in_hours"]),
                final_price=b["price"],
                status=b["status"],
            )
            # Drivers quoted or on an unfinished ride are no longer available
            if driver is not None and b["status"] != BookingStatus.COMPLETED:
                await drivers.set_status(driver.id, DriverStatus.ON_TRIP)
        print(f"  Created {len(bookings_data)} bookings")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    database = Database(settings.database_url)
    try:
        await database.create_all()
        await seed(database)
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
