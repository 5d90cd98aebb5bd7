from datetime import date
from typing import List

from .base import StandardizedModel
from .interval import TimeInterval


class SeatDayReservations(StandardizedModel):
    """Booked ranges on one seat for one local calendar day."""

    seat_id: int
    day: date
    reservations: List[TimeInterval]
