# backend/seatbook/tasks/beat_schedule.py
"""
Celery Beat schedule configuration.

Crontab times are local to `settings.timezone` (see celery_app).
"""

from typing import Any, Dict

from celery.schedules import crontab

from seatbook.core.constants import BLACKOUT_JOB_ID

CELERYBEAT_SCHEDULE: Dict[str, Dict[str, Any]] = {
    # Closed hours for today + horizon, written at local midnight
    BLACKOUT_JOB_ID: {
        "task": "seatbook.tasks.blackout_tasks.schedule_closed_hours",
        "schedule": crontab(hour=0, minute=0),
        "options": {"expires": 3600},
    },
}


def get_beat_schedule() -> Dict[str, Dict[str, Any]]:
    return dict(CELERYBEAT_SCHEDULE)
