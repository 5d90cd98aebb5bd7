# backend/seatbook/models/blackout.py
"""Global closed-hours windows that block every seat."""

from sqlalchemy import CheckConstraint, Column, Index, String, UniqueConstraint
import ulid

from ..core.constants import BLACKOUT_REASON_SCHEDULED, MAX_REASON_LENGTH
from ..database import Base
from ..schemas.interval import TimeInterval
from .types import UTCDateTime, utcnow


class BlackoutWindow(Base):
    __tablename__ = "blackout_windows"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    reason = Column(String(MAX_REASON_LENGTH), nullable=False, default=BLACKOUT_REASON_SCHEDULED)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_blackout_time_order"),
        UniqueConstraint("start_time", "end_time", name="unique_blackout_window"),
        Index("idx_blackout_windows_range", "start_time", "end_time"),
    )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time, end=self.end_time)

    def __repr__(self) -> str:
        return f"<BlackoutWindow {self.start_time}-{self.end_time} ({self.reason})>"
