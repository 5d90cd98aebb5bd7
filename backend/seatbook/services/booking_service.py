# backend/seatbook/services/booking_service.py
"""
Booking Service.

Owns the reservation lifecycle: create, modify, cancel and list.

Every write runs check-then-commit while holding an exclusive lock on the
seat and on the user (see core.seat_lock), inside one database transaction
that also row-locks the seat. A concurrent writer on the same seat therefore
either waits or is rejected with a conflict; it can never commit an overlap.
On PostgreSQL the exclusion constraint on `reservations` is the last line:
its IntegrityError is reported as a conflict too.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..core import interval_rules
from ..core.exceptions import (
    BookingConflictException,
    NotFoundException,
    RejectedException,
    SameDayBookingException,
    StoreUnavailableException,
)
from ..core.seat_lock import reservation_locks, seat_key, user_key
from ..models.reservation import NO_OVERLAP_CONSTRAINT, Reservation
from ..repositories import RepositoryFactory
from ..schemas.interval import TimeInterval, to_utc
from .base import BaseService, Clock
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)

SEAT_CONFLICT_MESSAGE = "Seat already has a reservation that overlaps this time"
GENERIC_CONFLICT_MESSAGE = "This time slot conflicts with an existing reservation"


class BookingService(BaseService):
    """
    Service layer for reservation operations.

    Reservations are addressed by `(user_name, interval)`; callers never see
    or supply the internal id.
    """

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        conflict_checker: Optional[ConflictChecker] = None,
    ):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_reservation_repository(db)
        self.seat_repository = RepositoryFactory.create_seat_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db, clock=self.clock)

    @staticmethod
    def _is_deadlock_error(exc: Optional[BaseException]) -> bool:
        """True if a deadlock OperationalError is anywhere in the cause chain."""
        seen = set()
        while exc is not None and id(exc) not in seen:
            seen.add(id(exc))
            if isinstance(exc, OperationalError):
                orig = getattr(exc, "orig", None)
                pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
                if pgcode == "40P01" or "deadlock detected" in str(exc).lower():
                    return True
            exc = exc.__cause__ or exc.__context__
        return False

    @staticmethod
    def _resolve_integrity_conflict_message(integrity_error: IntegrityError) -> str:
        """Pick the conflict message from the violated constraint, if recognisable."""
        orig = getattr(integrity_error, "orig", None)
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", "") if diag is not None else ""
        if constraint_name == NO_OVERLAP_CONSTRAINT or NO_OVERLAP_CONSTRAINT in str(orig):
            return SEAT_CONFLICT_MESSAGE
        return GENERIC_CONFLICT_MESSAGE

    @staticmethod
    def _conflict_details(user_name: str, seat_id: int, interval: TimeInterval) -> dict:
        return {
            "user_name": user_name,
            "seat_id": seat_id,
            "start": interval.start.isoformat(),
            "end": interval.end.isoformat(),
        }

    def _ensure_same_day_free(
        self,
        user_name: str,
        interval: TimeInterval,
        now: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        day = interval_rules.local_date(interval.start)
        if self.conflict_checker.has_unfinished_same_day(
            user_name, day, now, exclude_booking_id=exclude_booking_id
        ):
            raise SameDayBookingException(user_name, day.isoformat())

    def _run_write(self, operation: str, details: dict, write):
        """Run `write` in a transaction, mapping store-level races onto conflicts."""
        try:
            with self.transaction(operation):
                return write()
        except IntegrityError as e:
            self.logger.warning(
                "Reservation write rejected by constraint",
                extra={"operation": operation, **details},
            )
            raise BookingConflictException(
                self._resolve_integrity_conflict_message(e), details=details
            ) from e
        except StoreUnavailableException as e:
            if self._is_deadlock_error(e):
                raise BookingConflictException(GENERIC_CONFLICT_MESSAGE, details=details) from e
            raise

    @BaseService.measure_operation("create_reservation")
    def create(self, user_name: str, seat_id: int, interval: TimeInterval) -> Reservation:
        """
        Reserve `seat_id` for `interval`.

        Raises:
            InvalidIntervalException: before any store access
            RejectedException: unknown or disabled seat
            BookingConflictException / BlackoutConflictException: overlap
            SameDayBookingException: user already has an unfinished reservation that day
            StoreUnavailableException: store failure
        """
        now = self.now()
        interval_rules.validate(interval, now)
        interval_rules.validate_single_day(interval)

        self.log_operation(
            "create_reservation",
            user_name=user_name,
            seat_id=seat_id,
            start=interval.start.isoformat(),
            end=interval.end.isoformat(),
        )
        details = self._conflict_details(user_name, seat_id, interval)

        def write() -> Reservation:
            seat = self.seat_repository.get_for_update(seat_id)
            if seat is None:
                raise RejectedException(
                    f"Seat {seat_id} does not exist", details={"seat_id": seat_id}
                )
            self.conflict_checker.check_admissible(seat, interval, now)
            self._ensure_same_day_free(user_name, interval, now)
            return self.repository.create(
                user_name=user_name,
                seat_id=seat_id,
                start_time=interval.start,
                end_time=interval.end,
            )

        with reservation_locks([seat_key(seat_id), user_key(user_name)]):
            reservation = self._run_write("create_reservation", details, write)

        self.logger.info(
            f"Reservation {reservation.id} created for {user_name} on seat {seat_id}",
            extra={"reservation_id": reservation.id},
        )
        return reservation

    @BaseService.measure_operation("modify_reservation")
    def modify(
        self, user_name: str, current: TimeInterval, new: TimeInterval
    ) -> Reservation:
        """
        Move the reservation identified by `(user_name, current)` to `new`.

        Conflict search is limited to the reservation's own seat and skips the
        reservation itself. The row keeps its id and seat.
        """
        now = self.now()
        interval_rules.validate(new, now)
        interval_rules.validate_single_day(new)

        existing = self.read(
            "find_reservation",
            lambda: self.repository.find_by_key(user_name, current.start, current.end),
        )
        if existing is None:
            raise NotFoundException(
                "Reservation not found",
                code="RESERVATION_NOT_FOUND",
                details={"user_name": user_name, "start": current.start.isoformat()},
            )
        seat_id = existing.seat_id
        # End the lookup's read transaction before taking locks
        self.db.rollback()

        self.log_operation(
            "modify_reservation",
            user_name=user_name,
            seat_id=seat_id,
            start=new.start.isoformat(),
            end=new.end.isoformat(),
        )
        details = self._conflict_details(user_name, seat_id, new)

        def write() -> Reservation:
            row = self.repository.find_by_key(
                user_name, current.start, current.end, for_update=True
            )
            if row is None:
                raise NotFoundException(
                    "Reservation not found",
                    code="RESERVATION_NOT_FOUND",
                    details={"user_name": user_name, "start": current.start.isoformat()},
                )
            seat = self.seat_repository.get_for_update(row.seat_id)
            self.conflict_checker.check_admissible(seat, new, now, exclude_booking_id=row.id)
            self._ensure_same_day_free(user_name, new, now, exclude_booking_id=row.id)
            return self.repository.update(row, start_time=new.start, end_time=new.end)

        with reservation_locks([seat_key(seat_id), user_key(user_name)]):
            return self._run_write("modify_reservation", details, write)

    @BaseService.measure_operation("cancel_reservation")
    def cancel(self, user_name: str, interval: TimeInterval) -> None:
        self.log_operation(
            "cancel_reservation",
            user_name=user_name,
            start=interval.start.isoformat(),
            end=interval.end.isoformat(),
        )

        def delete() -> None:
            row = self.repository.find_by_key(
                user_name, interval.start, interval.end, for_update=True
            )
            if row is None:
                raise NotFoundException(
                    "Reservation not found",
                    code="RESERVATION_NOT_FOUND",
                    details={"user_name": user_name, "start": interval.start.isoformat()},
                )
            self.repository.delete(row)

        with reservation_locks([user_key(user_name)]):
            with self.transaction("cancel_reservation"):
                delete()

    @BaseService.measure_operation("list_active_reservations")
    def list_active(
        self, user_name: str, from_time: Optional[datetime] = None
    ) -> List[Reservation]:
        """The user's reservations ending after `from_time` (default now), earliest first."""
        since = to_utc(from_time) if from_time is not None else self.now()
        return self.read(
            "list_active_reservations", lambda: self.repository.list_active(user_name, since)
        )
