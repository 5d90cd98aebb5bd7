"""
Database models for the seat reservation engine.

Importing this package registers every table on `Base.metadata`.
"""

from .ban import Ban
from .blackout import BlackoutWindow
from .reservation import Reservation
from .seat import Seat

__all__ = [
    "Ban",
    "BlackoutWindow",
    "Reservation",
    "Seat",
]
