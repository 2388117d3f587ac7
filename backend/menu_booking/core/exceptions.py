# backend/menu_booking/core/exceptions.py
"""
Domain-specific exceptions for the menu booking engine.

These exceptions carry business-focused messages and structured details
so the API layer can translate them without inspecting service internals.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying message, code and details."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class ServiceUnavailableException(ServiceException):
    """
    Raised for transient failures the caller may safely retry.

    Maps to HTTP 503 with a Retry-After header so clients back off instead of
    treating the failure as a permanent rejection.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        retry_after_seconds: int = 2,
    ) -> None:
        merged = {"retryable": True, **(details or {})}
        super().__init__(message=message, code=code, details=merged)
        self.retry_after_seconds = retry_after_seconds

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"Retry-After": str(self.retry_after_seconds)}
        return exc


# Specific business exceptions


class NotBookableException(ValidationException):
    """Raised when the referenced item does not accept reservations."""

    def __init__(self, item_id: str, message: Optional[str] = None):
        super().__init__(
            message=message or "Item is not bookable",
            code="ITEM_NOT_BOOKABLE",
            details={"item_id": item_id},
        )


class InvalidTimeRangeException(ValidationException):
    """Raised when a time range does not satisfy start < end."""

    def __init__(self, start_time: str, end_time: str):
        super().__init__(
            message=f"End time must be after start time (got {start_time}-{end_time})",
            code="INVALID_TIME_RANGE",
            details={"start_time": start_time, "end_time": end_time},
        )


class OutsideAvailabilityException(ValidationException):
    """Raised when a requested interval is not covered by a single active rule."""

    def __init__(self, item_id: str, day_of_week: str, start_time: str, end_time: str):
        super().__init__(
            message=(
                f"Item not available on {day_of_week} from {start_time} to {end_time}. "
                "Check availability rules."
            ),
            code="OUTSIDE_AVAILABILITY",
            details={
                "item_id": item_id,
                "day_of_week": day_of_week,
                "start_time": start_time,
                "end_time": end_time,
            },
        )


class SlotConflictException(ConflictException):
    """Raised when a booking overlaps an existing confirmed booking."""

    def __init__(
        self,
        conflicting_start: str,
        conflicting_end: str,
        *,
        conflicting_booking_id: Optional[str] = None,
    ):
        details: Dict[str, Any] = {
            "conflicting_start_time": conflicting_start,
            "conflicting_end_time": conflicting_end,
        }
        if conflicting_booking_id:
            details["conflicting_booking_id"] = conflicting_booking_id
        super().__init__(
            message=(
                "Time slot already booked. "
                f"Conflicting booking: {conflicting_start}-{conflicting_end}"
            ),
            code="SLOT_CONFLICT",
            details=details,
        )


class AlreadyCancelledException(ConflictException):
    """Raised when cancelling a booking that is already cancelled."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Booking is already cancelled",
            code="ALREADY_CANCELLED",
            details={"booking_id": booking_id},
        )


class BookingLockTimeoutException(ServiceUnavailableException):
    """Raised when the per-slot booking lock could not be acquired in time."""

    def __init__(self, lock_key: str, waited_seconds: float, retry_after_seconds: int = 2):
        super().__init__(
            message="Booking system is busy for this item and date. Please retry.",
            code="BOOKING_LOCK_TIMEOUT",
            details={"lock_key": lock_key, "waited_seconds": round(waited_seconds, 3)},
            retry_after_seconds=retry_after_seconds,
        )


class BookingLockUnavailableException(ServiceUnavailableException):
    """Raised when the shared lock backend cannot be reached at all."""

    def __init__(self, lock_key: str, backend: str, retry_after_seconds: int = 2):
        super().__init__(
            message="Booking lock service is unavailable. Please retry.",
            code="BOOKING_LOCK_UNAVAILABLE",
            details={"lock_key": lock_key, "backend": backend},
            retry_after_seconds=retry_after_seconds,
        )


class TransientBookingException(ServiceUnavailableException):
    """Raised when storage fails during the atomic booking phase."""

    def __init__(self, message: Optional[str] = None, retry_after_seconds: int = 2):
        super().__init__(
            message=message or "Booking could not be completed. Please retry.",
            code="BOOKING_TRANSIENT_FAILURE",
            retry_after_seconds=retry_after_seconds,
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """
