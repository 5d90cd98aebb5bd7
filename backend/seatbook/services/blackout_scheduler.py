# backend/seatbook/services/blackout_scheduler.py
"""
Blackout Scheduler.

Once per local day, writes the closed-hours windows for the date a fixed
horizon ahead of today:

- weekdays: [00:00, 08:00) and [22:00, 24:00)
- weekends: [00:00, 09:00) and [17:00, 24:00)

Every run is idempotent: a window is inserted only when no existing blackout
overlaps it. The in-process loop (`run_forever`) and the Celery beat task both
call `run_once`; a failed run is logged and the next tick fills the gap.
"""

from datetime import date, datetime, timedelta
import logging
import threading
from typing import Callable, List, Optional

import pytz
from sqlalchemy.orm import Session

from ..core import interval_rules
from ..core.config import settings
from ..core.constants import (
    BLACKOUT_REASON_SCHEDULED,
    WEEKDAY_CLOSED_HOURS,
    WEEKEND_CLOSED_HOURS,
)
from ..database import SessionLocal
from ..schemas.interval import TimeInterval
from .base import Clock, utc_now
from .blackout_service import BlackoutService

logger = logging.getLogger(__name__)


class BlackoutScheduler:
    """Computes and writes the recurring closed-hours calendar."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        *,
        clock: Optional[Clock] = None,
        horizon_days: Optional[int] = None,
        tz: Optional[pytz.BaseTzInfo] = None,
    ):
        self.session_factory = session_factory
        self.clock: Clock = clock or utc_now
        self.horizon_days = (
            horizon_days if horizon_days is not None else settings.blackout_horizon_days
        )
        self.tz = tz or settings.local_timezone

    def today(self) -> date:
        return interval_rules.local_date(self.clock(), self.tz)

    def closed_windows_for(self, day: date) -> List[TimeInterval]:
        hours = WEEKEND_CLOSED_HOURS if day.weekday() >= 5 else WEEKDAY_CLOSED_HOURS
        next_midnight = interval_rules.local_midnight(day + timedelta(days=1), self.tz)
        windows = []
        for start, end in hours:
            window_start = self.tz.localize(datetime.combine(day, start))
            window_end = (
                self.tz.localize(datetime.combine(day, end)) if end is not None else next_midnight
            )
            windows.append(TimeInterval(start=window_start, end=window_end))
        return windows

    def run_for_date(self, day: date) -> int:
        """Write `day`'s closed windows. Raises on store failure."""
        with self.session_factory() as db:
            inserted = BlackoutService(db, clock=self.clock).fill_windows(
                self.closed_windows_for(day), reason=BLACKOUT_REASON_SCHEDULED
            )
        logger.info(
            f"Blackout schedule for {day.isoformat()}: {inserted} window(s) inserted",
            extra={"day": day.isoformat(), "inserted": inserted},
        )
        return inserted

    def run_once(self, today: Optional[date] = None) -> int:
        """
        One scheduler tick: fill the date `horizon_days` after today.

        Failures are logged and swallowed so the loop survives; returns 0 then.
        """
        target = (today or self.today()) + timedelta(days=self.horizon_days)
        try:
            return self.run_for_date(target)
        except Exception:
            logger.exception(f"Blackout schedule failed for {target.isoformat()}")
            return 0

    def backfill(self, today: Optional[date] = None) -> int:
        """Fill every date from today through the horizon. Used on start-up."""
        start = today or self.today()
        total = 0
        for offset in range(self.horizon_days + 1):
            day = start + timedelta(days=offset)
            try:
                total += self.run_for_date(day)
            except Exception:
                logger.exception(f"Blackout backfill failed for {day.isoformat()}")
        return total

    def next_midnight(self, now: Optional[datetime] = None) -> datetime:
        """Next local midnight strictly after `now`."""
        current = now or self.clock()
        return interval_rules.local_midnight(
            interval_rules.local_date(current, self.tz) + timedelta(days=1), self.tz
        )

    def seconds_until_next_run(self, now: Optional[datetime] = None) -> float:
        current = now or self.clock()
        return max((self.next_midnight(current) - current).total_seconds(), 0.0)

    def run_forever(self, stop_event: threading.Event) -> None:
        """
        Start-up backfill, then one tick per local midnight until `stop_event` is set.

        Shutdown only interrupts the wait between ticks, never a write.
        """
        logger.info(
            "Blackout scheduler started",
            extra={"horizon_days": self.horizon_days, "timezone": str(self.tz)},
        )
        self.backfill()
        while not stop_event.is_set():
            if stop_event.wait(self.seconds_until_next_run()):
                break
            self.run_once()
        logger.info("Blackout scheduler stopped")
