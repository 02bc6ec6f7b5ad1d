"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
        code: str | None = None,
    ) -> None:
        if code:
            self.code = code
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    code = "VALIDATION_ERROR"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BookingNotFound(NotFoundError):
    """Booking does not exist."""

    code = "BOOKING_NOT_FOUND"

    def __init__(self, booking_id: str | None = None) -> None:
        super().__init__("Booking", booking_id)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    code = "ACCESS_DENIED"

    def __init__(self, detail: str = "Access denied") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InvalidStatusTransition(AppException):
    """Requested status is not reachable from the current status."""

    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status transition: {current} → {target}",
        )


class StatusConflict(AppException):
    """Booking status changed between read and conditional write."""

    code = "STATUS_CONFLICT"

    def __init__(
        self,
        detail: str = "Booking status changed while processing the request. Reload and try again.",
    ) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    code = "RATE_LIMITED"

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
