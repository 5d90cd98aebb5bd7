# backend/seatbook/services/availability_service.py
"""
Availability Service.

Read-only projection of seat status. Precedence, highest first:

1. the seat's `available` flag is false, or a blackout window applies -> UNAVAILABLE
2. a committed reservation on the seat applies -> BORROWED
3. otherwise -> AVAILABLE

Point queries use `start <= at < end`; range queries use half-open overlap.
"""

from datetime import date, datetime
import logging
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..core import interval_rules
from ..core.exceptions import InvalidIntervalException, NotFoundException
from ..models.seat import Seat
from ..repositories import RepositoryFactory
from ..schemas.interval import TimeInterval, to_utc
from ..schemas.seat import SeatStatus, SeatStatusRow
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


def resolve_status(available: bool, blacked_out: bool, booked: bool) -> SeatStatus:
    if not available or blacked_out:
        return SeatStatus.UNAVAILABLE
    if booked:
        return SeatStatus.BORROWED
    return SeatStatus.AVAILABLE


class AvailabilityService(BaseService):
    """Computes seat status at an instant or over an interval."""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.seat_repository = RepositoryFactory.create_seat_repository(db)
        self.reservation_repository = RepositoryFactory.create_reservation_repository(db)
        self.blackout_repository = RepositoryFactory.create_blackout_repository(db)

    def _require_seat(self, seat_id: int) -> Seat:
        seat = self.read("get_seat", lambda: self.seat_repository.get_by_id(seat_id))
        if seat is None:
            raise NotFoundException(f"Seat {seat_id} not found", code="SEAT_NOT_FOUND")
        return seat

    @staticmethod
    def _require_ordered(interval: TimeInterval) -> None:
        if interval.end <= interval.start:
            raise InvalidIntervalException(
                "Interval end must be after its start",
                details={"start": interval.start.isoformat(), "end": interval.end.isoformat()},
            )

    @BaseService.measure_operation("seat_status_at")
    def status_of(self, seat_id: int, at: datetime) -> SeatStatus:
        at = to_utc(at)
        seat = self._require_seat(seat_id)
        blacked_out = self.read("blackout_covers", lambda: self.blackout_repository.covers(at))
        booked = self.read(
            "seat_booked_at", lambda: self.reservation_repository.is_booked_at(seat_id, at)
        )
        return resolve_status(seat.available, blacked_out, booked)

    @BaseService.measure_operation("seat_status_range")
    def status_of_range(self, seat_id: int, interval: TimeInterval) -> SeatStatus:
        self._require_ordered(interval)
        seat = self._require_seat(seat_id)
        blacked_out = self.read(
            "blackout_overlap",
            lambda: self.blackout_repository.has_overlap(interval.start, interval.end),
        )
        booked = self.read(
            "seat_overlap",
            lambda: self.reservation_repository.has_overlap_on_seat(
                seat_id, interval.start, interval.end
            ),
        )
        return resolve_status(seat.available, blacked_out, booked)

    @BaseService.measure_operation("all_seat_statuses_at")
    def all_statuses(self, at: datetime) -> List[SeatStatusRow]:
        at = to_utc(at)
        blacked_out = self.read("blackout_covers", lambda: self.blackout_repository.covers(at))
        booked = self.read("seats_booked_at", lambda: self.reservation_repository.seat_ids_at(at))
        return self._table(blacked_out, booked)

    @BaseService.measure_operation("all_seat_statuses_range")
    def all_statuses_range(self, interval: TimeInterval) -> List[SeatStatusRow]:
        self._require_ordered(interval)
        blacked_out = self.read(
            "blackout_overlap",
            lambda: self.blackout_repository.has_overlap(interval.start, interval.end),
        )
        booked = self.read(
            "seats_overlapping",
            lambda: self.reservation_repository.seat_ids_overlapping(interval.start, interval.end),
        )
        return self._table(blacked_out, booked)

    def _table(self, blacked_out: bool, booked: Set[int]) -> List[SeatStatusRow]:
        seats = self.read("list_seats", self.seat_repository.list_all)
        return [
            SeatStatusRow(
                seat_id=seat.id,
                status=resolve_status(seat.available, blacked_out, seat.id in booked),
            )
            for seat in seats
        ]

    @BaseService.measure_operation("seat_reservations_for_day")
    def seat_reservations(self, seat_id: int, day: date) -> List[TimeInterval]:
        """Booked ranges on one seat during a local calendar day, ordered by start."""
        self._require_seat(seat_id)
        bounds = interval_rules.day_bounds(day)
        rows = self.read(
            "seat_reservations",
            lambda: self.reservation_repository.find_overlapping_on_seat(
                seat_id, bounds.start, bounds.end
            ),
        )
        return [row.interval for row in rows]
