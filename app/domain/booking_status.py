"""Booking status state machine for the two-stage payment flow.

States:
- pending_owner_approval: Request submitted, upfront fee already captured
- confirmed: Owner approved, rental fee charged
- active: Rental in progress
- completed: Rental finished (terminal)
- cancelled: Cancelled with refunds per policy (terminal)
- denied: Owner declined the request (terminal)
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from app.core.exceptions import AuthorizationError, InvalidStatusTransition


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    PENDING_OWNER_APPROVAL = "pending_owner_approval"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DENIED = "denied"


@dataclass(frozen=True)
class StatusInfo:
    """Fixed metadata attached to a booking status."""

    status: BookingStatus
    description: str
    renter_message: str
    owner_message: str
    allowed_transitions: frozenset[BookingStatus]
    payment_required: bool
    refund_eligible: bool

    @property
    def is_terminal(self) -> bool:
        return not self.allowed_transitions


BOOKING_STATUS_CONFIG: Mapping[BookingStatus, StatusInfo] = MappingProxyType({
    BookingStatus.PENDING_OWNER_APPROVAL: StatusInfo(
        status=BookingStatus.PENDING_OWNER_APPROVAL,
        description="Waiting for owner approval",
        renter_message=(
            "Your booking request has been submitted and is waiting for the owner to approve it."
        ),
        owner_message="You have a new booking request that needs your approval.",
        allowed_transitions=frozenset({BookingStatus.CONFIRMED, BookingStatus.DENIED}),
        payment_required=False,  # upfront fee captured at creation
        refund_eligible=True,
    ),
    BookingStatus.CONFIRMED: StatusInfo(
        status=BookingStatus.CONFIRMED,
        description="Booking confirmed by owner",
        renter_message=(
            "Great! Your booking has been confirmed by the owner. The rental fee has been charged."
        ),
        owner_message=(
            "You have confirmed this booking. The rental fee has been charged to the renter."
        ),
        allowed_transitions=frozenset({BookingStatus.ACTIVE, BookingStatus.CANCELLED}),
        payment_required=True,
        refund_eligible=True,
    ),
    BookingStatus.ACTIVE: StatusInfo(
        status=BookingStatus.ACTIVE,
        description="Booking is currently active",
        renter_message="Your rental is currently active. Enjoy your adventure!",
        owner_message="This rental is currently active.",
        allowed_transitions=frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
        payment_required=False,
        refund_eligible=False,
    ),
    BookingStatus.COMPLETED: StatusInfo(
        status=BookingStatus.COMPLETED,
        description="Booking completed successfully",
        renter_message="Your rental has been completed. Thank you for using GearGrab!",
        owner_message="This rental has been completed successfully.",
        allowed_transitions=frozenset(),
        payment_required=False,
        refund_eligible=False,
    ),
    BookingStatus.CANCELLED: StatusInfo(
        status=BookingStatus.CANCELLED,
        description="Booking was cancelled",
        renter_message=(
            "This booking has been cancelled. "
            "Refunds will be processed according to the cancellation policy."
        ),
        owner_message="This booking has been cancelled.",
        allowed_transitions=frozenset(),
        payment_required=False,
        refund_eligible=True,
    ),
    BookingStatus.DENIED: StatusInfo(
        status=BookingStatus.DENIED,
        description="Booking request was denied by owner",
        renter_message=(
            "Unfortunately, the owner has declined your booking request. "
            "Your payment has been refunded."
        ),
        owner_message="You have declined this booking request.",
        allowed_transitions=frozenset(),
        payment_required=False,
        refund_eligible=True,
    ),
})


_NO_RIGHTS: Mapping[str, frozenset[BookingStatus]] = MappingProxyType(
    {"owner": frozenset(), "renter": frozenset()}
)

# Subset of the edges above that each party may request
ROLE_TRANSITIONS: Mapping[BookingStatus, Mapping[str, frozenset[BookingStatus]]] = MappingProxyType({
    BookingStatus.PENDING_OWNER_APPROVAL: MappingProxyType({
        "owner": frozenset({BookingStatus.CONFIRMED, BookingStatus.DENIED}),
        "renter": frozenset({BookingStatus.CANCELLED}),
    }),
    BookingStatus.CONFIRMED: MappingProxyType({
        "owner": frozenset({BookingStatus.ACTIVE, BookingStatus.CANCELLED}),
        "renter": frozenset({BookingStatus.CANCELLED}),
    }),
    BookingStatus.ACTIVE: MappingProxyType({
        "owner": frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
        "renter": frozenset(),
    }),
    BookingStatus.COMPLETED: _NO_RIGHTS,
    BookingStatus.CANCELLED: _NO_RIGHTS,
    BookingStatus.DENIED: _NO_RIGHTS,
})

TERMINAL_STATUSES = frozenset(s for s, info in BOOKING_STATUS_CONFIG.items() if info.is_terminal)

_missing = set(BookingStatus) - set(BOOKING_STATUS_CONFIG)
if _missing or set(BookingStatus) - set(ROLE_TRANSITIONS):
    raise RuntimeError(f"Booking status tables are not exhaustive: {sorted(_missing)}")
del _missing


def get_status_info(status: BookingStatus) -> StatusInfo:
    """Return the metadata record for a status.

    Raises:
        TypeError: If ``status`` is not a BookingStatus member
    """
    if not isinstance(status, BookingStatus):
        raise TypeError(f"Expected BookingStatus, got {status!r}")
    return BOOKING_STATUS_CONFIG[status]


def is_valid_status_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """Check whether ``current -> target`` is an edge of the transition table."""
    return target in get_status_info(current).allowed_transitions


def get_status_display(status: BookingStatus) -> str:
    return get_status_info(status).description


def get_status_message(status: BookingStatus, is_owner: bool = False) -> str:
    """Return the owner- or renter-facing message for a status."""
    info = get_status_info(status)
    return info.owner_message if is_owner else info.renter_message


def requires_payment(status: BookingStatus) -> bool:
    return get_status_info(status).payment_required


def is_refund_eligible(status: BookingStatus) -> bool:
    return get_status_info(status).refund_eligible


def can_request_transition(
    current: BookingStatus,
    target: BookingStatus,
    is_owner: bool,
    is_renter: bool,
) -> bool:
    """Check a transition against both the edge table and the caller's role."""
    if not is_valid_status_transition(current, target):
        return False
    allowed: set[BookingStatus] = set()
    if is_owner:
        allowed |= ROLE_TRANSITIONS[current]["owner"]
    if is_renter:
        allowed |= ROLE_TRANSITIONS[current]["renter"]
    return target in allowed


def assert_status_transition(
    current: BookingStatus,
    target: BookingStatus,
    is_owner: bool,
    is_renter: bool,
) -> None:
    """Validate a transition requested by a party to the booking.

    Raises:
        InvalidStatusTransition: If the edge is not in the transition table
        AuthorizationError: If the edge exists but the caller's role may not request it
    """
    if not is_valid_status_transition(current, target):
        raise InvalidStatusTransition(current.value, target.value)
    if not can_request_transition(current, target, is_owner, is_renter):
        role = "owner" if is_owner else "renter" if is_renter else "caller"
        raise AuthorizationError(
            f"The {role} is not allowed to move a booking from {current.value} to {target.value}"
        )
