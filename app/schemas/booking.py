"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.booking_status import BookingStatus


class BookingCreate(BaseModel):
    """Schema for a renter submitting a booking request."""

    listing_id: str = Field(..., min_length=1, max_length=128)
    owner_id: str = Field(..., min_length=1, max_length=128)
    start_date: date
    end_date: date
    daily_rate: int = Field(..., ge=0)
    upfront_fee: int = Field(..., ge=0)
    security_deposit: int = Field(default=0, ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)
    upfront_payment_id: str | None = Field(None, max_length=128)
    renter_notes: str | None = Field(None, max_length=1000)

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: date, info) -> date:
        start_date = info.data.get("start_date")
        if start_date and v < start_date:
            raise ValueError("end_date must not be before start_date")
        return v

    @property
    def rental_days(self) -> int:
        """Number of rental days, counting both ends."""
        return (self.end_date - self.start_date).days + 1


class BookingStatusUpdate(BaseModel):
    """Schema for a party requesting a status change."""

    status: BookingStatus
    message: str | None = Field(None, max_length=1000)
    rental_payment_id: str | None = Field(None, max_length=128)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    listing_id: str
    renter_id: str
    owner_id: str

    # Dates
    start_date: date
    end_date: date

    # Pricing
    daily_rate: int
    rental_days: int
    upfront_fee: int
    rental_fee: int
    security_deposit: int
    total_price: int
    currency: str

    # Status
    status: BookingStatus
    payment_required: bool
    refund_eligible: bool

    # Payment references
    upfront_payment_id: str | None
    rental_payment_id: str | None

    # Messages
    renter_notes: str | None
    renter_message: str | None
    owner_message: str | None

    # Timestamps
    created_at: datetime
    updated_at: datetime
    confirmed_at: datetime | None
    activated_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    denied_at: datetime | None


class BookingDetailResponse(BaseModel):
    """Booking as seen by one of its parties."""

    booking: BookingResponse
    user_role: str
    status_display: str
    status_message: str


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingStatusUpdateResponse(BaseModel):
    """Confirmation returned after an accepted status change."""

    success: bool = True
    message: str
    booking: BookingResponse


class BookingTimelineEventResponse(BaseModel):
    """Schema for one status-history entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    sequence: int
    actor_id: str
    actor_role: str
    from_status: BookingStatus | None
    to_status: BookingStatus
    title: str
    message: str | None
    created_at: datetime


class BookingStatusInfoResponse(BaseModel):
    """Schema for the per-status metadata table."""

    model_config = ConfigDict(from_attributes=True)

    status: BookingStatus
    description: str
    renter_message: str
    owner_message: str
    allowed_transitions: list[BookingStatus]
    payment_required: bool
    refund_eligible: bool
    is_terminal: bool
