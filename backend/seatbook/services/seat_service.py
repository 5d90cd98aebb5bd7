# backend/seatbook/services/seat_service.py
"""Seat provisioning and the administrative availability toggle."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ServiceException
from ..core.seat_lock import reservation_locks, seat_key
from ..models.seat import Seat
from ..repositories import RepositoryFactory
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


class SeatService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_seat_repository(db)

    @BaseService.measure_operation("provision_seats")
    def provision(self, number_of_seats: Optional[int] = None) -> int:
        """
        Ensure seats `1..N` exist. Returns how many were inserted.

        Raises:
            ServiceException: the table already holds more than N seats
        """
        target = number_of_seats if number_of_seats is not None else settings.number_of_seats
        with self.transaction("provision_seats"):
            existing = self.repository.count()
            if existing > target:
                raise ServiceException(
                    f"Seat table holds {existing} seats, more than the configured {target}",
                    code="SEAT_POOL_OVERFLOW",
                    details={"existing": existing, "configured": target},
                )
            inserted = self.repository.add_range(existing + 1, target)
        if inserted:
            self.logger.info(f"Provisioned {inserted} seats (pool size {target})")
        return inserted

    def list_seats(self) -> List[Seat]:
        return self.read("list_seats", self.repository.list_all)

    @BaseService.measure_operation("set_seat_availability")
    def set_availability(self, seat_id: int, available: bool) -> Seat:
        """
        Toggle a seat's availability flag.

        Takes the seat's reservation lock so an in-flight create on this seat
        either commits before the toggle or re-reads the new flag.
        """
        self.log_operation("set_seat_availability", seat_id=seat_id, available=available)
        with reservation_locks([seat_key(seat_id)]):
            with self.transaction("set_seat_availability"):
                seat = self.repository.get_for_update(seat_id)
                if seat is None:
                    raise NotFoundException(f"Seat {seat_id} not found", code="SEAT_NOT_FOUND")
                self.repository.update(seat, available=available)
        return seat
