"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Creates the booking tables for GearGrab:
- Bookings with two-stage pricing and status timestamps
- Booking timeline (append-only status history)
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("listing_id", sa.String(128), nullable=False, index=True),
        sa.Column("renter_id", sa.String(128), nullable=False, index=True),
        sa.Column("owner_id", sa.String(128), nullable=False, index=True),
        sa.Column("start_date", sa.Date, nullable=False, index=True),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("daily_rate", sa.Integer, nullable=False),
        sa.Column("rental_days", sa.Integer, nullable=False),
        sa.Column("upfront_fee", sa.Integer, nullable=False),
        sa.Column("rental_fee", sa.Integer, nullable=False),
        sa.Column("security_deposit", sa.Integer, default=0),
        sa.Column("total_price", sa.Integer, nullable=False),
        sa.Column("currency", sa.String(3), default="USD"),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending_owner_approval", index=True),
        sa.Column("upfront_payment_id", sa.String(128)),
        sa.Column("rental_payment_id", sa.String(128)),
        sa.Column("renter_notes", sa.Text),
        sa.Column("renter_message", sa.Text),
        sa.Column("owner_message", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.Column("confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("activated_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("denied_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint(
            "status IN ('pending_owner_approval', 'confirmed', 'active', "
            "'completed', 'cancelled', 'denied')",
            name="ck_bookings_status",
        ),
    )

    op.create_table(
        "booking_timeline_events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column("actor_id", sa.String(128), nullable=False),
        sa.Column("actor_role", sa.String(10), nullable=False),
        sa.Column("from_status", sa.String(32)),
        sa.Column("to_status", sa.String(32), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("booking_id", "sequence", name="uq_booking_timeline_sequence"),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("booking_timeline_events")
    op.drop_table("bookings")
