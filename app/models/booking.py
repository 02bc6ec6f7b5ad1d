"""Booking-related database models."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base
from app.domain.booking_status import BookingStatus, is_refund_eligible, requires_payment


def _status_column_type() -> Enum:
    # Persist the enum's string values, not member names
    return Enum(
        BookingStatus,
        name="booking_status",
        native_enum=False,
        length=32,
        values_callable=lambda enum_cls: [member.value for member in enum_cls],
        validate_strings=True,
    )


class Booking(Base):
    """Rental agreement between a renter and an owner for a listing."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    listing_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    renter_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    # Dates
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Pricing (in cents - smallest currency unit)
    daily_rate: Mapped[int] = mapped_column(Integer, nullable=False)
    rental_days: Mapped[int] = mapped_column(Integer, nullable=False)
    upfront_fee: Mapped[int] = mapped_column(Integer, nullable=False)  # charged at request
    rental_fee: Mapped[int] = mapped_column(Integer, nullable=False)  # charged on confirmation
    security_deposit: Mapped[int] = mapped_column(Integer, default=0)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    # Status
    status: Mapped[BookingStatus] = mapped_column(
        _status_column_type(),
        default=BookingStatus.PENDING_OWNER_APPROVAL,
        nullable=False,
        index=True,
    )

    # Payment references (processor ids)
    upfront_payment_id: Mapped[str | None] = mapped_column(String(128))
    rental_payment_id: Mapped[str | None] = mapped_column(String(128))

    # Notes and last status messages per party
    renter_notes: Mapped[str | None] = mapped_column(Text)
    renter_message: Mapped[str | None] = mapped_column(Text)
    owner_message: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    denied_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    timeline: Mapped[list["BookingTimelineEvent"]] = relationship(
        "BookingTimelineEvent",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingTimelineEvent.sequence",
    )

    @property
    def payment_required(self) -> bool:
        return requires_payment(self.status)

    @property
    def refund_eligible(self) -> bool:
        return is_refund_eligible(self.status)

    def role_of(self, user_id: str) -> str | None:
        """Return "owner", "renter" or None for the given user."""
        if user_id == self.owner_id:
            return "owner"
        if user_id == self.renter_id:
            return "renter"
        return None


class BookingTimelineEvent(Base):
    """Append-only history of accepted status changes."""

    __tablename__ = "booking_timeline_events"
    __table_args__ = (
        UniqueConstraint("booking_id", "sequence", name="uq_booking_timeline_sequence"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based, per booking
    actor_id: Mapped[str] = mapped_column(String(128), nullable=False)
    actor_role: Mapped[str] = mapped_column(String(10), nullable=False)  # owner, renter
    from_status: Mapped[BookingStatus | None] = mapped_column(_status_column_type())
    to_status: Mapped[BookingStatus] = mapped_column(_status_column_type(), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), server_default=func.now()
    )

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="timeline")
