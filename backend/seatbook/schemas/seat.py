# backend/seatbook/schemas/seat.py
from datetime import datetime
from enum import Enum
from typing import List

from .base import StandardizedModel


class SeatStatus(str, Enum):
    """Status of a seat at an instant or over an interval."""

    AVAILABLE = "available"
    BORROWED = "borrowed"
    UNAVAILABLE = "unavailable"


class SeatStatusRow(StandardizedModel):
    seat_id: int
    status: SeatStatus


class SeatStatusTable(StandardizedModel):
    """Bulk status response: one row per seat, ordered by seat id."""

    start: datetime
    end: datetime | None = None
    seats: List[SeatStatusRow]

