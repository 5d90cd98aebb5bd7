"""Celery wiring for the daily closed-hours job."""

from datetime import date
from unittest.mock import patch

from celery.schedules import crontab

from seatbook.core.constants import BLACKOUT_JOB_ID
from seatbook.tasks.beat_schedule import get_beat_schedule
from seatbook.tasks.blackout_tasks import backfill_closed_hours, schedule_closed_hours


def test_beat_runs_daily_at_local_midnight():
    entry = get_beat_schedule()[BLACKOUT_JOB_ID]

    assert entry["task"] == "seatbook.tasks.blackout_tasks.schedule_closed_hours"
    assert entry["schedule"] == crontab(hour=0, minute=0)


def test_celery_app_uses_calendar_timezone():
    from seatbook.tasks.celery_app import celery_app

    assert celery_app.conf.timezone == "Asia/Taipei"
    assert BLACKOUT_JOB_ID in celery_app.conf.beat_schedule


def test_schedule_task_accepts_iso_date_override():
    with patch("seatbook.tasks.blackout_tasks.BlackoutScheduler") as scheduler_cls:
        scheduler_cls.return_value.run_once.return_value = 2

        assert schedule_closed_hours("2024-06-05") == 2

    scheduler_cls.return_value.run_once.assert_called_once_with(date(2024, 6, 5))


def test_schedule_task_defaults_to_local_today():
    with patch("seatbook.tasks.blackout_tasks.BlackoutScheduler") as scheduler_cls:
        scheduler_cls.return_value.run_once.return_value = 0
        schedule_closed_hours()

    scheduler_cls.return_value.run_once.assert_called_once_with(None)


def test_backfill_task():
    with patch("seatbook.tasks.blackout_tasks.BlackoutScheduler") as scheduler_cls:
        scheduler_cls.return_value.backfill.return_value = 8

        assert backfill_closed_hours() == 8
