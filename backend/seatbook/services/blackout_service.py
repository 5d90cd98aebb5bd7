# backend/seatbook/services/blackout_service.py
"""
Blackout Service.

Single writer path for the global closed-hours table, used by the daily
scheduler and by administrators adding an immediate window.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import BLACKOUT_REASON_ADMIN, BLACKOUT_REASON_SCHEDULED
from ..core.exceptions import ConflictException, InvalidIntervalException
from ..models.blackout import BlackoutWindow
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..schemas.interval import TimeInterval
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


class BlackoutService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.repository = RepositoryFactory.create_blackout_repository(db)

    def list_windows(self, interval: TimeInterval) -> List[BlackoutWindow]:
        return self.read(
            "list_blackout_windows",
            lambda: self.repository.find_overlapping(interval.start, interval.end),
        )

    @BaseService.measure_operation("add_blackout_window")
    def add_window(self, interval: TimeInterval) -> BlackoutWindow:
        """Insert an administrator blackout that takes effect immediately."""
        if interval.end <= interval.start:
            raise InvalidIntervalException(
                "Blackout end must be after its start",
                details={"start": interval.start.isoformat(), "end": interval.end.isoformat()},
            )
        self.log_operation(
            "add_blackout_window",
            start=interval.start.isoformat(),
            end=interval.end.isoformat(),
        )
        try:
            with self.transaction("add_blackout_window"):
                window = self.repository.create(
                    start_time=interval.start,
                    end_time=interval.end,
                    reason=BLACKOUT_REASON_ADMIN,
                )
        except IntegrityError as e:
            raise ConflictException(
                "An identical blackout window already exists",
                code="BLACKOUT_EXISTS",
                details={"start": interval.start.isoformat(), "end": interval.end.isoformat()},
            ) from e
        prometheus_metrics.record_blackout_insert(BLACKOUT_REASON_ADMIN)
        return window

    @BaseService.measure_operation("fill_blackout_windows")
    def fill_windows(
        self, windows: Iterable[TimeInterval], reason: str = BLACKOUT_REASON_SCHEDULED
    ) -> int:
        """
        Insert each window unless an existing blackout already overlaps it.

        Each window commits on its own, so a window lost to a concurrent
        writer does not undo the others. Returns the number inserted.
        """
        inserted = 0
        for window in windows:
            if self._insert_if_free(window, reason):
                inserted += 1
        prometheus_metrics.record_blackout_insert(reason, inserted)
        return inserted

    def _insert_if_free(self, window: TimeInterval, reason: str) -> bool:
        try:
            with self.transaction("fill_blackout_windows"):
                if self.repository.has_overlap(window.start, window.end):
                    return False
                self.repository.create(
                    start_time=window.start, end_time=window.end, reason=reason
                )
        except IntegrityError:
            self.logger.warning(
                "Concurrent blackout insert detected, skipping",
                extra={"window": str(window)},
            )
            return False
        return True
