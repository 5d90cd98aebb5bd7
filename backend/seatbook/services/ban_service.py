# backend/seatbook/services/ban_service.py
"""
Ban Service.

Consulted at authentication time: a user inside an active ban window is
refused before any session or token is issued.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import InvalidIntervalException, UserBannedException
from ..repositories import RepositoryFactory
from ..schemas.interval import to_utc
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


class BanService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_ban_repository(db)

    def is_banned(self, user_name: str, at: Optional[datetime] = None) -> bool:
        """True iff a ban for `user_name` has `start <= at < end`."""
        when = to_utc(at) if at is not None else self.now()
        ban = self.read("find_active_ban", lambda: self.repository.find_active(user_name, when))
        return ban is not None

    def ensure_not_banned(self, user_name: str, at: Optional[datetime] = None) -> None:
        when = to_utc(at) if at is not None else self.now()
        ban = self.read("find_active_ban", lambda: self.repository.find_active(user_name, when))
        if ban is not None:
            self.logger.warning(
                "Banned user refused", extra={"user_name": user_name, "ban_end": str(ban.end_time)}
            )
            raise UserBannedException(user_name, until=ban.end_time.isoformat())

    @BaseService.measure_operation("ban_user")
    def ban(self, user_name: str, start: datetime, end: datetime) -> None:
        """Set the user's ban window, replacing any previous one atomically."""
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidIntervalException(
                "Ban end must be after its start",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        self.log_operation(
            "ban_user", user_name=user_name, start=start.isoformat(), end=end.isoformat()
        )
        with self.transaction("ban_user"):
            self.repository.upsert(user_name, start, end)

    @BaseService.measure_operation("unban_user")
    def unban(self, user_name: str) -> bool:
        self.log_operation("unban_user", user_name=user_name)
        with self.transaction("unban_user"):
            return self.repository.delete_for_user(user_name)
