# backend/seatbook/schemas/__init__.py
"""
Pydantic schemas for the seat reservation engine.
"""

from .interval import TimeInterval
from .reservation import SeatDayReservations
from .seat import SeatStatus, SeatStatusRow, SeatStatusTable

__all__ = [
    "SeatDayReservations",
    "SeatStatus",
    "SeatStatusRow",
    "SeatStatusTable",
    "TimeInterval",
]
