"""Initial schema: customers, drivers, payments, bookings, notifications.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


BOOKING_STATUSES = (
    "pending",
    "awaiting-acceptance",
    "assigned",
    "heading-to-pickup",
    "arrived-at-pickup",
    "en-route",
    "completed",
    "cancelled",
    "rejected-by-admin",
)


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # ── customers ─────────────────────────────────────────────────────
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("fcm_token", sa.String(512), nullable=True),
        sa.Column(
            "status",
            sa.Enum("unverified", "verified", name="customer_status"),
            server_default="unverified",
            nullable=False,
        ),
        *_timestamps(),
    )

    # ── drivers ───────────────────────────────────────────────────────
    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("vehicle_model", sa.String(120), nullable=False),
        sa.Column("license_plate", sa.String(32), nullable=False),
        sa.Column(
            "status",
            sa.Enum("available", "on_trip", "offline", name="driver_status"),
            server_default="available",
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("idx_drivers_status", "drivers", ["status"])

    # ── payments ──────────────────────────────────────────────────────
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "customer_id", sa.Integer, sa.ForeignKey("customers.id"), nullable=False
        ),
        sa.Column("payment_intent_id", sa.String(255), unique=True, nullable=False),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("payment_method", sa.String(64), nullable=True),
        sa.Column("stripe_charge_id", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_payments_customer", "payments", ["customer_id"])

    # ── bookings ──────────────────────────────────────────────────────
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "customer_id", sa.Integer, sa.ForeignKey("customers.id"), nullable=False
        ),
        sa.Column("driver_id", sa.Integer, sa.ForeignKey("drivers.id"), nullable=True),
        sa.Column(
            "payment_id",
            sa.Integer,
            sa.ForeignKey("payments.id"),
            nullable=True,
            unique=True,
        ),
        sa.Column("start_location", sa.JSON, nullable=False),
        sa.Column("final_location", sa.JSON, nullable=False),
        sa.Column("stops", sa.JSON, nullable=False),
        sa.Column("number_of_passengers", sa.Integer, nullable=False),
        sa.Column("number_of_luggage", sa.Integer, nullable=False),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("contact_info", sa.String(255), nullable=False),
        sa.Column("ride_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("final_price", sa.Float, nullable=True),
        sa.Column(
            "status",
            sa.Enum(*BOOKING_STATUSES, name="booking_status"),
            server_default="pending",
            nullable=False,
        ),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_bookings_status", "bookings", ["status"])
    op.create_index("idx_bookings_customer", "bookings", ["customer_id"])
    op.create_index("idx_bookings_driver", "bookings", ["driver_id"])

    # ── notifications ─────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("recipient_type", sa.String(16), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column(
            "type",
            sa.Enum(
                "task_assigned",
                "location_error",
                "payment_processed",
                "system",
                name="notification_type",
            ),
            nullable=False,
        ),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_notifications_user", "notifications", ["recipient_type", "user_id"]
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("bookings")
    op.drop_table("payments")
    op.drop_table("drivers")
    op.drop_table("customers")
    op.execute("DROP TYPE IF EXISTS notification_type")
    op.execute("DROP TYPE IF EXISTS booking_status")
    op.execute("DROP TYPE IF EXISTS driver_status")
    op.execute("DROP TYPE IF EXISTS customer_status")
