# backend/seatbook/repositories/seat_repository.py
"""
Seat Repository.

Seat ids are dense integers `1..N`, so provisioning only needs the current
row count to know which ids are missing.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.seat import Seat
from .base_repository import BaseRepository


class SeatRepository(BaseRepository[Seat]):
    def __init__(self, db: Session):
        super().__init__(db, Seat)

    def get_for_update(self, seat_id: int) -> Optional[Seat]:
        """Load a seat row with a row lock (ignored by SQLite) and fresh column values."""
        query = (
            self._build_query()
            .filter(Seat.id == seat_id)
            .with_for_update()
            .populate_existing()
        )
        return self._execute_first(query)

    def list_all(self) -> List[Seat]:
        return self._execute_query(self._build_query().order_by(Seat.id))

    def add_range(self, first_id: int, last_id: int) -> int:
        """Insert available seats with ids `first_id..last_id` inclusive."""
        if last_id < first_id:
            return 0
        with self._guard("provision"):
            self.db.add_all(Seat(id=i, available=True) for i in range(first_id, last_id + 1))
            self.db.flush()
        return last_id - first_id + 1
