"""Database models."""

from app.models.booking import Booking, BookingTimelineEvent

__all__ = [
    "Booking",
    "BookingTimelineEvent",
]
