# backend/seatbook/repositories/ban_repository.py
"""
Ban Repository.

Replacing a ban is one `INSERT ... ON CONFLICT (user_name) DO UPDATE` so a
concurrent reader never observes the user without a ban row.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session
import ulid

from ..models.ban import Ban
from .base_repository import BaseRepository

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class BanRepository(BaseRepository[Ban]):
    def __init__(self, db: Session):
        super().__init__(db, Ban)

    def find_active(self, user_name: str, at: datetime) -> Optional[Ban]:
        query = self._build_query().filter(
            Ban.user_name == user_name,
            Ban.start_time <= at,
            Ban.end_time > at,
        )
        return self._execute_first(query)

    def upsert(self, user_name: str, start: datetime, end: datetime) -> None:
        """Insert or replace the single ban row for `user_name`."""
        insert_fn = _UPSERT_INSERTS.get(self.dialect_name)
        if insert_fn is None:
            self._merge_in_place(user_name, start, end)
            return
        stmt = insert_fn(Ban).values(
            id=str(ulid.ULID()),
            user_name=user_name,
            start_time=start,
            end_time=end,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Ban.user_name],
            set_={"start_time": stmt.excluded.start_time, "end_time": stmt.excluded.end_time},
        )
        with self._guard("upsert"):
            self.db.execute(stmt)
        # Drop stale identity-map copies so later reads see the new window
        self.db.expire_all()

    def _merge_in_place(self, user_name: str, start: datetime, end: datetime) -> None:
        existing = self._execute_first(
            self._build_query().filter(Ban.user_name == user_name).with_for_update()
        )
        if existing is None:
            self.create(user_name=user_name, start_time=start, end_time=end)
        else:
            self.update(existing, start_time=start, end_time=end)

    def delete_for_user(self, user_name: str) -> bool:
        with self._guard("delete"):
            deleted = self._build_query().filter(Ban.user_name == user_name).delete(
                synchronize_session=False
            )
        return deleted > 0
