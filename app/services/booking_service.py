"""Booking persistence and lifecycle orchestration."""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    AuthorizationError,
    BookingNotFound,
    InvalidStatusTransition,
    StatusConflict,
    ValidationError,
)
from app.domain.booking_status import BookingStatus, assert_status_transition
from app.models.booking import Booking, BookingTimelineEvent
from app.schemas.booking import BookingCreate

logger = logging.getLogger(__name__)

# Column stamped when a booking enters each status
STATUS_TIMESTAMP_FIELDS: dict[BookingStatus, str] = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.ACTIVE: "activated_at",
    BookingStatus.COMPLETED: "completed_at",
    BookingStatus.CANCELLED: "cancelled_at",
    BookingStatus.DENIED: "denied_at",
}

TIMELINE_TITLES: dict[BookingStatus, str] = {
    BookingStatus.PENDING_OWNER_APPROVAL: "Booking Requested",
    BookingStatus.CONFIRMED: "Booking Confirmed",
    BookingStatus.ACTIVE: "Rental Started",
    BookingStatus.COMPLETED: "Rental Completed",
    BookingStatus.CANCELLED: "Booking Cancelled",
    BookingStatus.DENIED: "Booking Declined",
}


class BookingService:
    """Reads and writes bookings; every status change goes through the state machine."""

    async def get_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        """Load a booking, always re-reading the current row.

        Raises:
            BookingNotFound: If no booking has this id
        """
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise BookingNotFound(str(booking_id))
        return booking

    async def get_booking_for_party(
        self, db: AsyncSession, booking_id: UUID, user_id: str
    ) -> tuple[Booking, str]:
        """Load a booking and the caller's role in it.

        Raises:
            BookingNotFound: If no booking has this id
            AuthorizationError: If the caller is neither owner nor renter
        """
        booking = await self.get_booking(db, booking_id)
        role = booking.role_of(user_id)
        if role is None:
            raise AuthorizationError("Access denied")
        return booking, role

    async def create_booking(
        self, db: AsyncSession, renter_id: str, data: BookingCreate
    ) -> Booking:
        """Create a booking request after the upfront fee has been captured."""
        if data.owner_id == renter_id:
            raise ValidationError("You cannot book your own listing")

        rental_days = data.rental_days
        rental_fee = data.daily_rate * rental_days

        booking = Booking(
            listing_id=data.listing_id,
            renter_id=renter_id,
            owner_id=data.owner_id,
            start_date=data.start_date,
            end_date=data.end_date,
            daily_rate=data.daily_rate,
            rental_days=rental_days,
            upfront_fee=data.upfront_fee,
            rental_fee=rental_fee,
            security_deposit=data.security_deposit,
            total_price=data.upfront_fee + rental_fee + data.security_deposit,
            currency=(data.currency or settings.default_currency).upper(),
            status=BookingStatus.PENDING_OWNER_APPROVAL,
            upfront_payment_id=data.upfront_payment_id,
            renter_notes=data.renter_notes,
        )
        db.add(booking)
        await db.flush()

        db.add(
            BookingTimelineEvent(
                booking_id=booking.id,
                sequence=1,
                actor_id=renter_id,
                actor_role="renter",
                from_status=None,
                to_status=BookingStatus.PENDING_OWNER_APPROVAL,
                title="Booking Request Created",
                message=data.renter_notes,
            )
        )
        await db.commit()
        await db.refresh(booking)

        logger.info(f"Booking {booking.id} requested by renter {renter_id} for listing {data.listing_id}")
        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        user_id: str,
        role: str = "renter",
        status_filter: BookingStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        """Return one page of the user's bookings and the total count."""
        if role == "owner":
            query = select(Booking).where(Booking.owner_id == user_id)
        else:
            query = select(Booking).where(Booking.renter_id == user_id)

        if status_filter:
            query = query.where(Booking.status == status_filter)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        query = query.order_by(Booking.created_at.desc(), Booking.id).offset(offset).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_timeline(self, db: AsyncSession, booking_id: UUID) -> list[BookingTimelineEvent]:
        result = await db.execute(
            select(BookingTimelineEvent)
            .where(BookingTimelineEvent.booking_id == booking_id)
            .order_by(BookingTimelineEvent.sequence)
        )
        return list(result.scalars().all())

    async def _next_sequence(self, db: AsyncSession, booking_id: UUID) -> int:
        result = await db.execute(
            select(func.coalesce(func.max(BookingTimelineEvent.sequence), 0))
            .where(BookingTimelineEvent.booking_id == booking_id)
        )
        return result.scalar_one() + 1

    async def update_booking_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        new_status: BookingStatus,
        actor_id: str,
        message: str | None = None,
        rental_payment_id: str | None = None,
    ) -> Booking:
        """Apply a status change requested by one of the booking's parties.

        The current status is re-read, validated, and then written with a
        conditional update that only matches if the status is still the one
        that was validated. The write and its timeline event commit together.

        Raises:
            BookingNotFound: If no booking has this id
            AuthorizationError: If the caller is not a party or may not request this edge
            InvalidStatusTransition: If the edge is not in the transition table
            ValidationError: If a rental payment reference accompanies anything but confirmation
            StatusConflict: If the status changed after it was read
        """
        booking, role = await self.get_booking_for_party(db, booking_id, actor_id)
        current_status = booking.status

        try:
            assert_status_transition(
                current_status,
                new_status,
                is_owner=role == "owner",
                is_renter=role == "renter",
            )
        except (AuthorizationError, InvalidStatusTransition) as e:
            logger.warning(
                f"Rejected status change on booking {booking_id} by {role} {actor_id}: {e.detail}"
            )
            raise

        if rental_payment_id and new_status != BookingStatus.CONFIRMED:
            raise ValidationError("rental_payment_id is only accepted when confirming a booking")

        now = datetime.now(UTC)
        values: dict[str, Any] = {"status": new_status, "updated_at": now}
        timestamp_field = STATUS_TIMESTAMP_FIELDS.get(new_status)
        if timestamp_field:
            values[timestamp_field] = now
        if message:
            values[f"{role}_message"] = message
        if rental_payment_id:
            values["rental_payment_id"] = rental_payment_id

        result = await db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == current_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            logger.warning(
                f"Status conflict on booking {booking_id}: expected {current_status.value}, "
                f"requested {new_status.value} by {role} {actor_id}"
            )
            raise StatusConflict()

        db.add(
            BookingTimelineEvent(
                booking_id=booking_id,
                sequence=await self._next_sequence(db, booking_id),
                actor_id=actor_id,
                actor_role=role,
                from_status=current_status,
                to_status=new_status,
                title=TIMELINE_TITLES[new_status],
                message=message,
            )
        )
        await db.commit()
        await db.refresh(booking)

        logger.info(
            f"Booking {booking_id} moved {current_status.value} → {new_status.value} "
            f"by {role} {actor_id}"
        )
        return booking


booking_service = BookingService()
