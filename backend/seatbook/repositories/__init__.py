"""
Repository layer for data access, separating business logic from queries.

Usage:
    from seatbook.repositories import RepositoryFactory

    repository = RepositoryFactory.create_reservation_repository(db)
    active = repository.list_active("alice", now)
"""

from .ban_repository import BanRepository
from .base_repository import BaseRepository
from .blackout_repository import BlackoutRepository
from .factory import RepositoryFactory
from .reservation_repository import ReservationRepository
from .seat_repository import SeatRepository

__all__ = [
    "BanRepository",
    "BaseRepository",
    "BlackoutRepository",
    "RepositoryFactory",
    "ReservationRepository",
    "SeatRepository",
]
