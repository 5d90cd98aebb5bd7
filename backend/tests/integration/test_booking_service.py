"""
Integration tests for BookingService against a real (SQLite) store.

Times are built relative to the injected clock so every case is deterministic.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query

from seatbook.core.exceptions import (
    BlackoutConflictException,
    BookingConflictException,
    InvalidIntervalException,
    NotFoundException,
    PastStartException,
    RejectedException,
    SameDayBookingException,
    StoreUnavailableException,
)
from seatbook.models.reservation import Reservation
from seatbook.schemas.interval import TimeInterval
from seatbook.services.blackout_service import BlackoutService
from seatbook.services.booking_service import BookingService
from seatbook.services.seat_service import SeatService


def hours(clock, start: float, end: float) -> TimeInterval:
    return TimeInterval(
        start=clock.current + timedelta(hours=start), end=clock.current + timedelta(hours=end)
    )


@pytest.fixture
def booking_service(db, clock, seats):
    return BookingService(db, clock=clock)


class TestCreate:
    def test_create_on_free_seat_succeeds(self, booking_service, clock, db):
        reservation = booking_service.create("alice", 5, hours(clock, 1, 2))

        assert reservation.id
        assert reservation.seat_id == 5
        assert reservation.interval == hours(clock, 1, 2)
        assert db.query(Reservation).count() == 1

    def test_overlap_on_same_seat_conflicts(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))

        with pytest.raises(BookingConflictException) as exc_info:
            booking_service.create("bob", 5, hours(clock, 1.5, 2.5))
        assert exc_info.value.details["seat_id"] == 5

    def test_touching_reservations_do_not_conflict(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        booking_service.create("bob", 5, hours(clock, 2, 3))

    def test_same_interval_on_other_seat_is_fine(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        booking_service.create("bob", 7, hours(clock, 1, 2))

    def test_disabled_seat_is_rejected(self, booking_service, clock, db):
        SeatService(db).set_availability(6, False)

        with pytest.raises(RejectedException):
            booking_service.create("alice", 6, hours(clock, 1, 2))

    def test_unknown_seat_is_rejected(self, booking_service, clock):
        with pytest.raises(RejectedException) as exc_info:
            booking_service.create("alice", 999, hours(clock, 1, 2))
        assert exc_info.value.details == {"seat_id": 999}

    def test_blackout_overlap_conflicts(self, booking_service, clock, db):
        BlackoutService(db).add_window(hours(clock, 1.5, 3))

        with pytest.raises(BlackoutConflictException):
            booking_service.create("alice", 5, hours(clock, 1, 2))

    def test_start_at_now_is_accepted(self, booking_service, clock):
        interval = TimeInterval(start=clock.current, end=clock.current + timedelta(hours=1))
        booking_service.create("alice", 5, interval)

    def test_start_just_before_now_is_rejected(self, booking_service, clock, db):
        interval = TimeInterval(
            start=clock.current - timedelta(microseconds=1),
            end=clock.current + timedelta(hours=1),
        )
        with pytest.raises(PastStartException):
            booking_service.create("alice", 5, interval)
        assert db.query(Reservation).count() == 0

    def test_multi_day_interval_is_rejected(self, booking_service, clock):
        with pytest.raises(InvalidIntervalException):
            booking_service.create("alice", 5, hours(clock, 1, 20))

    def test_failed_create_leaves_store_unchanged(self, booking_service, clock, db):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        with pytest.raises(BookingConflictException):
            booking_service.create("bob", 5, hours(clock, 1, 2))
        assert [r.user_name for r in db.query(Reservation).all()] == ["alice"]


class TestSameDayRule:
    def test_second_booking_same_day_is_refused(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))

        with pytest.raises(SameDayBookingException):
            booking_service.create("alice", 7, hours(clock, 3, 4))

    def test_allowed_once_earlier_booking_has_ended(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        clock.advance(hours=2, minutes=1)

        booking_service.create("alice", 7, hours(clock, 1, 2))

    def test_other_day_is_unaffected(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        booking_service.create("alice", 5, hours(clock, 24, 25))


class TestModify:
    def test_modify_moves_reservation_in_place(self, booking_service, clock, db):
        created = booking_service.create("alice", 5, hours(clock, 1, 2))

        moved = booking_service.modify("alice", hours(clock, 1, 2), hours(clock, 3, 4))

        assert moved.id == created.id
        assert moved.seat_id == 5
        assert moved.interval == hours(clock, 3, 4)
        assert db.query(Reservation).count() == 1

    def test_booking_on_other_seat_never_blocks_modify(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        booking_service.create("bob", 7, hours(clock, 3.5, 4.5))

        moved = booking_service.modify("alice", hours(clock, 1, 2), hours(clock, 3, 4))
        assert moved.interval == hours(clock, 3, 4)

    def test_overlap_on_own_seat_conflicts(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        booking_service.create("bob", 5, hours(clock, 3.5, 4.5))

        with pytest.raises(BookingConflictException):
            booking_service.modify("alice", hours(clock, 1, 2), hours(clock, 3, 4))

    def test_overlapping_own_current_slot_is_allowed(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))

        moved = booking_service.modify("alice", hours(clock, 1, 2), hours(clock, 1.5, 2.5))
        assert moved.interval == hours(clock, 1.5, 2.5)

    def test_missing_reservation_is_not_found(self, booking_service, clock):
        with pytest.raises(NotFoundException):
            booking_service.modify("alice", hours(clock, 1, 2), hours(clock, 3, 4))

    def test_new_interval_is_validated(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))

        with pytest.raises(PastStartException):
            booking_service.modify("alice", hours(clock, 1, 2), hours(clock, -1, 0.5))


class TestCancelAndList:
    def test_cancel_frees_the_slot(self, booking_service, clock, db):
        booking_service.create("alice", 5, hours(clock, 1, 2))

        booking_service.cancel("alice", hours(clock, 1, 2))

        assert db.query(Reservation).count() == 0
        booking_service.create("bob", 5, hours(clock, 1, 2))

    def test_cancelled_reservation_leaves_active_list(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        booking_service.create("alice", 6, hours(clock, 24, 25))

        booking_service.cancel("alice", hours(clock, 1, 2))

        active = booking_service.list_active("alice")
        assert hours(clock, 1, 2) not in [r.interval for r in active]
        assert [r.interval for r in active] == [hours(clock, 24, 25)]

    def test_cancel_unknown_is_not_found(self, booking_service, clock):
        with pytest.raises(NotFoundException):
            booking_service.cancel("alice", hours(clock, 1, 2))

    def test_cancel_is_keyed_by_user(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        with pytest.raises(NotFoundException):
            booking_service.cancel("bob", hours(clock, 1, 2))

    def test_list_active_round_trip(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 24, 25))
        booking_service.create("alice", 5, hours(clock, 1, 2))

        active = booking_service.list_active("alice")

        assert [r.interval for r in active] == [hours(clock, 1, 2), hours(clock, 24, 25)]
        assert all(r.seat_id == 5 for r in active)

    def test_list_active_drops_finished(self, booking_service, clock):
        booking_service.create("alice", 5, hours(clock, 1, 2))
        clock.advance(hours=3)

        assert booking_service.list_active("alice") == []

    def test_list_active_from_interval_start_contains_it(self, booking_service, clock):
        booked = hours(clock, 1, 2)
        booking_service.create("alice", 5, booked)

        active = booking_service.list_active("alice", booked.start)

        assert [(r.seat_id, r.interval) for r in active] == [(5, booked)]

    def test_list_active_accepts_naive_local_from_time(self, booking_service, clock):
        booked = hours(clock, 1, 2)
        booking_service.create("alice", 5, booked)

        naive_end = (clock.current + timedelta(hours=2)).replace(tzinfo=None)
        assert booking_service.list_active("alice", naive_end) == []


class TestStoreRaces:
    def test_deadlock_inside_a_repository_query_is_a_conflict(self, booking_service, clock):
        deadlock = OperationalError("SELECT 1", {}, Exception("deadlock detected"))

        with patch.object(Query, "scalar", side_effect=deadlock):
            with pytest.raises(BookingConflictException):
                booking_service.create("alice", 5, hours(clock, 1, 2))

    def test_other_store_failure_stays_unavailable(self, booking_service, clock):
        broken = OperationalError("SELECT 1", {}, Exception("disk I/O error"))

        with patch.object(Query, "scalar", side_effect=broken):
            with pytest.raises(StoreUnavailableException):
                booking_service.create("alice", 5, hours(clock, 1, 2))
