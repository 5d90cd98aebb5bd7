# backend/seatbook/services/conflict_checker.py
"""
Conflict Checker Service.

Decides whether a candidate interval is admissible for a seat. Admissible means:

- the interval is well formed, lies in the future and fits in one local day
- the seat exists and its availability flag is set
- no other reservation on the same seat overlaps it
- no blackout window overlaps it

The checks are queries only. BookingService calls them inside the same
transaction and under the same locks as the write that depends on them.
"""

from datetime import date, datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core import interval_rules
from ..core.exceptions import (
    BlackoutConflictException,
    BookingConflictException,
    RejectedException,
)
from ..models.seat import Seat
from ..repositories import RepositoryFactory
from ..schemas.interval import TimeInterval, to_utc
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.reservation_repository = RepositoryFactory.create_reservation_repository(db)
        self.blackout_repository = RepositoryFactory.create_blackout_repository(db)

    def conflicts_with_bookings(
        self,
        seat_id: int,
        interval: TimeInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True iff another reservation on `seat_id` overlaps `interval`."""
        return self.reservation_repository.has_overlap_on_seat(
            seat_id, interval.start, interval.end, exclude_id=exclude_booking_id
        )

    def conflicts_with_blackout(self, interval: TimeInterval) -> bool:
        return self.blackout_repository.has_overlap(interval.start, interval.end)

    def has_unfinished_same_day(
        self,
        user_name: str,
        day: date,
        now: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True iff the user holds a reservation starting on local `day` still running at `now`."""
        bounds = interval_rules.day_bounds(day)
        return self.reservation_repository.has_unfinished_between(
            user_name, bounds.start, bounds.end, to_utc(now), exclude_id=exclude_booking_id
        )

    @BaseService.measure_operation("check_admissible")
    def check_admissible(
        self,
        seat: Optional[Seat],
        interval: TimeInterval,
        now: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Run every admissibility check in order and raise on the first failure.

        Raises:
            InvalidIntervalException: malformed, past or multi-day interval
            RejectedException: seat unknown or disabled
            BookingConflictException: overlaps a reservation on the same seat
            BlackoutConflictException: overlaps closed hours
        """
        interval_rules.validate(interval, now)
        interval_rules.validate_single_day(interval)

        if seat is None:
            raise RejectedException("Seat does not exist")
        if not seat.available:
            raise RejectedException(
                f"Seat {seat.id} is not available for reservation",
                details={"seat_id": seat.id},
            )

        details = {
            "seat_id": seat.id,
            "start": interval.start.isoformat(),
            "end": interval.end.isoformat(),
        }
        if self.conflicts_with_bookings(seat.id, interval, exclude_booking_id):
            raise BookingConflictException(details=details)
        if self.conflicts_with_blackout(interval):
            raise BlackoutConflictException(details=details)
