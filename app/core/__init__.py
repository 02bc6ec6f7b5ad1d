"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BookingNotFound,
    InvalidStatusTransition,
    NotFoundError,
    RateLimitExceeded,
    StatusConflict,
    ValidationError,
)
from app.core.security import create_access_token, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "BookingNotFound",
    "InvalidStatusTransition",
    "NotFoundError",
    "RateLimitExceeded",
    "StatusConflict",
    "ValidationError",
    "create_access_token",
    "verify_token",
]
