# backend/seatbook/models/seat.py
"""
Seat model.

Seats are created once at provisioning time with sequential integer ids and
are never deleted; only the availability flag changes afterwards.
"""

from sqlalchemy import Boolean, Column, Integer, Text, true

from ..database import Base


class Seat(Base):
    """A bookable seat. `available=False` overrides bookings and blackouts."""

    __tablename__ = "seats"

    id = Column(Integer, primary_key=True, autoincrement=False)
    available = Column(Boolean, nullable=False, default=True, server_default=true())
    other_info = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Seat {self.id} available={self.available}>"
