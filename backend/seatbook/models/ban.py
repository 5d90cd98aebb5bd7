# backend/seatbook/models/ban.py
"""
Ban model.

`user_name` is unique, so each user has at most one ban row and replacing a
ban is a single upsert rather than delete-then-insert.
"""

from sqlalchemy import CheckConstraint, Column, String
import ulid

from ..core.constants import MAX_USER_NAME_LENGTH
from ..database import Base
from .types import UTCDateTime, utcnow


class Ban(Base):
    __tablename__ = "bans"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_name = Column(String(MAX_USER_NAME_LENGTH), nullable=False, unique=True)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (CheckConstraint("start_time < end_time", name="check_ban_time_order"),)

    def __repr__(self) -> str:
        return f"<Ban {self.user_name} {self.start_time}-{self.end_time}>"
