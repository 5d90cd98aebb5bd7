# backend/seatbook/core/interval_rules.py
"""
Pure predicates over half-open `[start, end)` intervals.

Nothing in this module touches the database or the clock; callers pass `now`
and the local timezone explicitly so every rule can be exercised directly.
"""

from datetime import date, datetime, timedelta
from typing import Optional

import pytz

from ..schemas.interval import TimeInterval, to_utc
from .config import settings
from .exceptions import InvalidIntervalException, PastStartException


def _tz(tz: Optional[pytz.BaseTzInfo]) -> pytz.BaseTzInfo:
    return tz if tz is not None else settings.local_timezone


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """True iff the intervals share at least one instant. Touching is not overlap."""
    return max(a.start, b.start) < min(a.end, b.end)


def contains(interval: TimeInterval, at: datetime) -> bool:
    """Point-in-interval test: `start <= at < end`."""
    at = to_utc(at)
    return interval.start <= at < interval.end


def local_date(at: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> date:
    """Calendar date of an instant in the given (or configured) timezone."""
    return to_utc(at).astimezone(_tz(tz)).date()


def local_midnight(day: date, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Start of `day` in local time, as an aware datetime."""
    return _tz(tz).localize(datetime.combine(day, datetime.min.time()))


def day_bounds(day: date, tz: Optional[pytz.BaseTzInfo] = None) -> TimeInterval:
    """The whole local day as an interval: `[midnight, next midnight)`."""
    return TimeInterval(
        start=local_midnight(day, tz),
        end=local_midnight(day + timedelta(days=1), tz),
    )


def same_day(a: TimeInterval, b: TimeInterval, tz: Optional[pytz.BaseTzInfo] = None) -> bool:
    return local_date(a.start, tz) == local_date(b.start, tz)


def is_future(interval: TimeInterval, now: datetime) -> bool:
    return interval.start >= to_utc(now)


def validate(interval: TimeInterval, now: datetime) -> None:
    """
    Reject malformed intervals before any store access.

    Raises:
        InvalidIntervalException: end is not after start
        PastStartException: start lies before `now`
    """
    if interval.end <= interval.start:
        raise InvalidIntervalException(
            "Interval end must be after its start",
            details={"start": interval.start.isoformat(), "end": interval.end.isoformat()},
        )
    if not is_future(interval, now):
        raise PastStartException(interval.start.isoformat(), to_utc(now).isoformat())


def validate_single_day(interval: TimeInterval, tz: Optional[pytz.BaseTzInfo] = None) -> None:
    """
    Reject intervals spanning more than one local calendar day.

    An end exactly at the following local midnight still belongs to the start's day.
    """
    day = local_date(interval.start, tz)
    if interval.end > day_bounds(day, tz).end:
        raise InvalidIntervalException(
            "Reservations must start and end on the same day",
            details={"start": interval.start.isoformat(), "end": interval.end.isoformat()},
        )
