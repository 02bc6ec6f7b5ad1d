"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.core.middleware import booking_update_limiter
from app.domain.booking_status import (
    BOOKING_STATUS_CONFIG,
    BookingStatus,
    get_status_display,
    get_status_message,
)
from app.models.booking import Booking
from app.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatusInfoResponse,
    BookingStatusUpdate,
    BookingStatusUpdateResponse,
    BookingTimelineEventResponse,
)
from app.services.booking_service import booking_service

router = APIRouter()

_STATUS_ORDER = list(BookingStatus)


@router.get("/statuses", response_model=list[BookingStatusInfoResponse])
async def list_booking_statuses() -> list[BookingStatusInfoResponse]:
    """Describe every booking status, its copy and allowed next statuses."""
    return [
        BookingStatusInfoResponse(
            status=info.status,
            description=info.description,
            renter_message=info.renter_message,
            owner_message=info.owner_message,
            allowed_transitions=sorted(info.allowed_transitions, key=_STATUS_ORDER.index),
            payment_required=info.payment_required,
            refund_eligible=info.refund_eligible,
            is_terminal=info.is_terminal,
        )
        for info in BOOKING_STATUS_CONFIG.values()
    ]


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Submit a booking request (renter). Starts in pending_owner_approval."""
    return await booking_service.create_booking(db, user_id, booking_data)


@router.get("/", response_model=BookingListResponse)
async def get_my_bookings(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    role: str = Query(default="renter", pattern="^(renter|owner)$"),
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> BookingListResponse:
    """Get bookings for the current user."""
    bookings, total = await booking_service.list_bookings(
        db,
        user_id,
        role=role,
        status_filter=status_filter,
        page=page,
        page_size=page_size,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingDetailResponse:
    """Get a booking by ID (owner or renter)."""
    booking, role = await booking_service.get_booking_for_party(db, booking_id, user_id)
    return BookingDetailResponse(
        booking=BookingResponse.model_validate(booking),
        user_role=role,
        status_display=get_status_display(booking.status),
        status_message=get_status_message(booking.status, is_owner=role == "owner"),
    )


@router.patch(
    "/{booking_id}",
    response_model=BookingStatusUpdateResponse,
    dependencies=[Depends(booking_update_limiter)],
)
async def update_booking_status(
    booking_id: UUID,
    request: BookingStatusUpdate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingStatusUpdateResponse:
    """Move a booking to a new status (owner or renter, per transition rights)."""
    booking = await booking_service.update_booking_status(
        db,
        booking_id,
        request.status,
        actor_id=user_id,
        message=request.message,
        rental_payment_id=request.rental_payment_id,
    )
    return BookingStatusUpdateResponse(
        message="Booking status updated successfully",
        booking=BookingResponse.model_validate(booking),
    )


@router.get("/{booking_id}/timeline", response_model=list[BookingTimelineEventResponse])
async def get_booking_timeline(
    booking_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[BookingTimelineEventResponse]:
    """Status history of a booking, oldest first."""
    await booking_service.get_booking_for_party(db, booking_id, user_id)
    events = await booking_service.get_timeline(db, booking_id)
    return [BookingTimelineEventResponse.model_validate(e) for e in events]
