# backend/seatbook/models/reservation.py
"""
Reservation model.

A reservation holds one seat for a half-open `[start_time, end_time)` range.
Its identity for modify/cancel is `(user_name, start_time, end_time)`; the
ULID primary key is internal.

On PostgreSQL an exclusion constraint backs the per-seat no-overlap rule, so a
writer that bypasses the service lock still fails with an IntegrityError.
"""

from sqlalchemy import DDL, CheckConstraint, Column, ForeignKey, Index, Integer, String, event
import ulid

from ..core.constants import MAX_USER_NAME_LENGTH
from ..database import Base
from ..schemas.interval import TimeInterval
from .types import UTCDateTime, utcnow

NO_OVERLAP_CONSTRAINT = "reservations_no_overlap_per_seat"


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_name = Column(String(MAX_USER_NAME_LENGTH), nullable=False)
    seat_id = Column(Integer, ForeignKey("seats.id"), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_reservation_time_order"),
        Index("idx_reservations_seat_window", "seat_id", "start_time", "end_time"),
        Index("idx_reservations_user_end", "user_name", "end_time"),
    )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time, end=self.end_time)

    def __repr__(self) -> str:
        return (
            f"<Reservation {self.user_name} seat={self.seat_id} "
            f"{self.start_time}-{self.end_time}>"
        )


event.listen(
    Reservation.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        f"""
        ALTER TABLE reservations
          ADD CONSTRAINT {NO_OVERLAP_CONSTRAINT}
          EXCLUDE USING gist (
            seat_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
          )
        """
    ).execute_if(dialect="postgresql"),
)
