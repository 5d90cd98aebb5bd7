# backend/seatbook/tasks/blackout_tasks.py
"""Celery entry points for the closed-hours calendar."""

from datetime import date
import logging
from typing import Any, Callable, Optional, TypeVar, cast

from celery import shared_task

from seatbook.services.blackout_scheduler import BlackoutScheduler

logger = logging.getLogger(__name__)

_TaskFunc = TypeVar("_TaskFunc", bound=Callable[..., Any])


def _typed_shared_task(*args: Any, **kwargs: Any) -> Callable[[_TaskFunc], _TaskFunc]:
    """Typed wrapper for Celery's shared_task decorator."""
    return cast(Callable[[_TaskFunc], _TaskFunc], shared_task(*args, **kwargs))


@_typed_shared_task(name="seatbook.tasks.blackout_tasks.schedule_closed_hours")
def schedule_closed_hours(today: Optional[str] = None) -> int:
    """Daily tick. `today` (ISO date) overrides the local date, for manual reruns."""
    scheduler = BlackoutScheduler()
    return scheduler.run_once(date.fromisoformat(today) if today else None)


@_typed_shared_task(name="seatbook.tasks.blackout_tasks.backfill_closed_hours")
def backfill_closed_hours() -> int:
    inserted = BlackoutScheduler().backfill()
    logger.info(f"Closed-hours backfill inserted {inserted} window(s)")
    return inserted
