# backend/seatbook/repositories/reservation_repository.py
"""
Reservation Repository.

All overlap queries use the half-open test `start < other_end AND end > other_start`
and are scoped to one seat unless the method says otherwise.
"""

from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..models.reservation import Reservation
from .base_repository import BaseRepository


class ReservationRepository(BaseRepository[Reservation]):
    def __init__(self, db: Session):
        super().__init__(db, Reservation)

    def _overlapping(self, start: datetime, end: datetime):
        return self._build_query().filter(
            Reservation.start_time < end,
            Reservation.end_time > start,
        )

    def has_overlap_on_seat(
        self,
        seat_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None,
    ) -> bool:
        query = self._overlapping(start, end).filter(Reservation.seat_id == seat_id)
        if exclude_id is not None:
            query = query.filter(Reservation.id != exclude_id)
        return self._execute_exists(query)

    def is_booked_at(self, seat_id: int, at: datetime) -> bool:
        query = self._build_query().filter(
            Reservation.seat_id == seat_id,
            Reservation.start_time <= at,
            Reservation.end_time > at,
        )
        return self._execute_exists(query)

    def find_overlapping_on_seat(
        self, seat_id: int, start: datetime, end: datetime
    ) -> List[Reservation]:
        query = (
            self._overlapping(start, end)
            .filter(Reservation.seat_id == seat_id)
            .order_by(Reservation.start_time)
        )
        return self._execute_query(query)

    def seat_ids_overlapping(self, start: datetime, end: datetime) -> Set[int]:
        rows = self._execute_query(self._overlapping(start, end))
        return {row.seat_id for row in rows}

    def seat_ids_at(self, at: datetime) -> Set[int]:
        query = self._build_query().filter(
            Reservation.start_time <= at,
            Reservation.end_time > at,
        )
        return {row.seat_id for row in self._execute_query(query)}

    def find_by_key(
        self, user_name: str, start: datetime, end: datetime, *, for_update: bool = False
    ) -> Optional[Reservation]:
        query = self._build_query().filter(
            Reservation.user_name == user_name,
            Reservation.start_time == start,
            Reservation.end_time == end,
        )
        if for_update:
            query = query.with_for_update()
        return self._execute_first(query)

    def has_unfinished_between(
        self,
        user_name: str,
        day_start: datetime,
        day_end: datetime,
        now: datetime,
        exclude_id: Optional[str] = None,
    ) -> bool:
        """Any booking of the user starting in `[day_start, day_end)` and ending after `now`."""
        query = self._build_query().filter(
            Reservation.user_name == user_name,
            Reservation.start_time >= day_start,
            Reservation.start_time < day_end,
            Reservation.end_time > now,
        )
        if exclude_id is not None:
            query = query.filter(Reservation.id != exclude_id)
        return self._execute_exists(query)

    def list_active(self, user_name: str, from_time: datetime) -> List[Reservation]:
        query = (
            self._build_query()
            .filter(Reservation.user_name == user_name, Reservation.end_time > from_time)
            .order_by(Reservation.start_time)
        )
        return self._execute_query(query)
