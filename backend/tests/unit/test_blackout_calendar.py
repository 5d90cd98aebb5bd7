"""Pure calendar computations of the blackout scheduler (no database)."""

from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

import pytz

from seatbook.services.blackout_scheduler import BlackoutScheduler

TZ = pytz.timezone("Asia/Taipei")


def make_scheduler(now: datetime) -> BlackoutScheduler:
    return BlackoutScheduler(MagicMock(), clock=lambda: now, horizon_days=3, tz=TZ)


class TestClosedWindows:
    def test_weekday_windows(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 12)))
        monday = date(2024, 6, 3)
        windows = scheduler.closed_windows_for(monday)
        assert [(w.start, w.end) for w in windows] == [
            (TZ.localize(datetime(2024, 6, 3, 0)), TZ.localize(datetime(2024, 6, 3, 8))),
            (TZ.localize(datetime(2024, 6, 3, 22)), TZ.localize(datetime(2024, 6, 4, 0))),
        ]

    def test_saturday_windows(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 12)))
        saturday = date(2024, 6, 8)
        windows = scheduler.closed_windows_for(saturday)
        assert [(w.start, w.end) for w in windows] == [
            (TZ.localize(datetime(2024, 6, 8, 0)), TZ.localize(datetime(2024, 6, 8, 9))),
            (TZ.localize(datetime(2024, 6, 8, 17)), TZ.localize(datetime(2024, 6, 9, 0))),
        ]

    def test_sunday_is_weekend(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 12)))
        windows = scheduler.closed_windows_for(date(2024, 6, 9))
        assert windows[0].end == TZ.localize(datetime(2024, 6, 9, 9))


class TestTiming:
    def test_next_midnight_is_strictly_after_now(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 12)))
        assert scheduler.next_midnight(TZ.localize(datetime(2024, 6, 3, 12))) == TZ.localize(
            datetime(2024, 6, 4)
        )
        midnight = TZ.localize(datetime(2024, 6, 4))
        assert scheduler.next_midnight(midnight) == TZ.localize(datetime(2024, 6, 5))

    def test_seconds_until_next_run(self):
        now = TZ.localize(datetime(2024, 6, 3, 23, 30))
        scheduler = make_scheduler(now)
        assert scheduler.seconds_until_next_run() == 30 * 60

    def test_today_is_local(self):
        # 16:30 UTC is already the next day in Taipei
        now = TZ.localize(datetime(2024, 6, 4, 0, 30))
        scheduler = make_scheduler(now.astimezone(pytz.utc))
        assert scheduler.today() == date(2024, 6, 4)


class TestTickErrorHandling:
    def test_run_once_targets_horizon_date(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 0, 0)))
        scheduler.run_for_date = MagicMock(return_value=2)
        assert scheduler.run_once() == 2
        scheduler.run_for_date.assert_called_once_with(date(2024, 6, 6))

    def test_run_once_swallows_failures(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 0, 0)))
        scheduler.run_for_date = MagicMock(side_effect=RuntimeError("db down"))
        assert scheduler.run_once() == 0

    def test_backfill_covers_today_through_horizon(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 0, 0)))
        scheduler.run_for_date = MagicMock(return_value=1)
        assert scheduler.backfill() == 4
        called = [c.args[0] for c in scheduler.run_for_date.call_args_list]
        assert called == [date(2024, 6, 3) + timedelta(days=i) for i in range(4)]

    def test_run_forever_exits_when_stopped(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 0, 0)))
        scheduler.backfill = MagicMock(return_value=0)
        scheduler.run_once = MagicMock(return_value=0)
        stop_event = MagicMock()
        stop_event.is_set.return_value = False
        stop_event.wait.return_value = True
        scheduler.run_forever(stop_event)
        scheduler.backfill.assert_called_once()
        scheduler.run_once.assert_not_called()

    def test_run_forever_ticks_after_wait_elapses(self):
        scheduler = make_scheduler(TZ.localize(datetime(2024, 6, 3, 0, 0)))
        scheduler.backfill = MagicMock(return_value=0)
        scheduler.run_once = MagicMock(return_value=2)
        stop_event = MagicMock()
        stop_event.is_set.side_effect = [False, False, True]
        stop_event.wait.return_value = False
        scheduler.run_forever(stop_event)
        assert scheduler.run_once.call_count == 2
