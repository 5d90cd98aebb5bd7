# backend/seatbook/repositories/blackout_repository.py
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from ..models.blackout import BlackoutWindow
from .base_repository import BaseRepository


class BlackoutRepository(BaseRepository[BlackoutWindow]):
    """Data access for global closed-hours windows."""

    def __init__(self, db: Session):
        super().__init__(db, BlackoutWindow)

    def has_overlap(self, start: datetime, end: datetime) -> bool:
        query = self._build_query().filter(
            BlackoutWindow.start_time < end,
            BlackoutWindow.end_time > start,
        )
        return self._execute_exists(query)

    def covers(self, at: datetime) -> bool:
        query = self._build_query().filter(
            BlackoutWindow.start_time <= at,
            BlackoutWindow.end_time > at,
        )
        return self._execute_exists(query)

    def find_overlapping(self, start: datetime, end: datetime) -> List[BlackoutWindow]:
        query = (
            self._build_query()
            .filter(BlackoutWindow.start_time < end, BlackoutWindow.end_time > start)
            .order_by(BlackoutWindow.start_time)
        )
        return self._execute_query(query)
