"""Pydantic schemas for API validation."""

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

__all__ = [
    "BookingCreate",
    "BookingDetailResponse",
    "BookingListResponse",
    "BookingResponse",
    "BookingStatusInfoResponse",
    "BookingStatusUpdate",
    "BookingStatusUpdateResponse",
    "BookingTimelineEventResponse",
]
