"""Domain exceptions map onto the caller-visible status categories."""

from fastapi import status
import pytest

from seatbook.core.exceptions import (
    BlackoutConflictException,
    BookingConflictException,
    ConflictException,
    DomainException,
    ForbiddenException,
    InvalidIntervalException,
    NotFoundException,
    PastStartException,
    RejectedException,
    SameDayBookingException,
    StoreUnavailableException,
    UserBannedException,
)


@pytest.mark.parametrize(
    "exc,expected_status",
    [
        (InvalidIntervalException("bad"), 422),
        (PastStartException("2024-01-01T00:00:00", "2024-01-02T00:00:00"), 422),
        (BookingConflictException(), status.HTTP_409_CONFLICT),
        (BlackoutConflictException(), status.HTTP_409_CONFLICT),
        (SameDayBookingException("alice", "2024-06-03"), status.HTTP_409_CONFLICT),
        (RejectedException("seat disabled"), 422),
        (NotFoundException("missing"), status.HTTP_404_NOT_FOUND),
        (UserBannedException("mallory"), status.HTTP_403_FORBIDDEN),
        (StoreUnavailableException(operation="create_reservation"), 503),
    ],
)
def test_http_status_mapping(exc: DomainException, expected_status: int):
    http_exc = exc.to_http_exception()
    assert http_exc.status_code == expected_status
    assert http_exc.detail["code"] == exc.code
    assert http_exc.detail["message"] == exc.message


def test_conflict_family():
    for exc in (
        BookingConflictException(),
        BlackoutConflictException(),
        SameDayBookingException("alice", "2024-06-03"),
    ):
        assert isinstance(exc, ConflictException)


def test_banned_is_forbidden_with_details():
    exc = UserBannedException("mallory", until="2024-06-04T00:00:00+00:00")
    assert isinstance(exc, ForbiddenException)
    assert exc.details == {"user_name": "mallory", "until": "2024-06-04T00:00:00+00:00"}


def test_booking_conflict_default_message_and_code():
    exc = BookingConflictException(details={"seat_id": 5})
    assert exc.code == "BOOKING_CONFLICT"
    assert "conflicts" in exc.message
    assert exc.details == {"seat_id": 5}


def test_store_unavailable_records_operation():
    exc = StoreUnavailableException(operation="cancel_reservation")
    assert exc.details == {"operation": "cancel_reservation"}
    assert exc.code == "STORE_UNAVAILABLE"
