# backend/seatbook/core/exceptions.py
"""
Domain-specific exceptions for the seat reservation engine.

Every rejection carries a stable code and a details payload so the API layer
can translate it into a response without inspecting the message text.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base of every rejection the engine reports to callers."""

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
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when request input is malformed."""

    status_code = HTTP_422_UNPROCESSABLE


class NotFoundException(DomainException):
    """Seat or reservation does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Request collides with committed state (bookings, blackouts, same-day rule)."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Request is well formed but not allowed by a reservation rule."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when the caller is not allowed to perform an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Engine-side failure; not the caller's fault."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class InvalidIntervalException(ValidationException):
    """Raised when an interval is empty, inverted, or spans more than one local day."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_INTERVAL", details=details)


class PastStartException(InvalidIntervalException):
    """Raised when an interval starts before the current instant."""

    def __init__(self, start: str, now: str):
        super().__init__(
            "Reservations cannot start in the past",
            details={"start": start, "now": now},
        )
        self.code = "PAST_START"


class BookingConflictException(ConflictException):
    """Raised when a booking overlaps another booking on the same seat."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing reservation",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class BlackoutConflictException(ConflictException):
    """Raised when an interval overlaps a closed-hours window."""

    def __init__(self, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="The requested time falls inside closed hours",
            code="BLACKOUT_CONFLICT",
            details=details or {},
        )


class SameDayBookingException(ConflictException):
    """Raised when a user already holds an unfinished reservation on the target day."""

    def __init__(self, user_name: str, day: str):
        super().__init__(
            message=f"{user_name} already has an unfinished reservation on {day}",
            code="SAME_DAY_BOOKING",
            details={"user_name": user_name, "day": day},
        )


class RejectedException(BusinessRuleException):
    """Raised when a seat cannot be reserved at all (unknown or disabled)."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="RESERVATION_REJECTED", details=details)


class UserBannedException(ForbiddenException):
    """Raised when a banned user attempts to authenticate."""

    def __init__(self, user_name: str, until: Optional[str] = None):
        super().__init__(
            message=f"{user_name} is currently banned",
            code="USER_BANNED",
            details={"user_name": user_name, "until": until},
        )


class StoreUnavailableException(ServiceException):
    """Raised when the backing store fails for reasons other than a conflict."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Reservation store is unavailable", *, operation: str = ""):
        super().__init__(
            message=message,
            code="STORE_UNAVAILABLE",
            details={"operation": operation} if operation else {},
        )


class RepositoryException(Exception):
    """
    Data access failure inside a repository.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations that are not conflicts.
    """
