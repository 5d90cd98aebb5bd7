# backend/seatbook/repositories/factory.py
"""
Repository Factory.

Provides centralized creation of repository instances so services never
construct repositories directly.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .ban_repository import BanRepository
    from .blackout_repository import BlackoutRepository
    from .reservation_repository import ReservationRepository
    from .seat_repository import SeatRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_seat_repository(db: Session) -> "SeatRepository":
        from .seat_repository import SeatRepository

        return SeatRepository(db)

    @staticmethod
    def create_reservation_repository(db: Session) -> "ReservationRepository":
        from .reservation_repository import ReservationRepository

        return ReservationRepository(db)

    @staticmethod
    def create_blackout_repository(db: Session) -> "BlackoutRepository":
        from .blackout_repository import BlackoutRepository

        return BlackoutRepository(db)

    @staticmethod
    def create_ban_repository(db: Session) -> "BanRepository":
        from .ban_repository import BanRepository

        return BanRepository(db)
