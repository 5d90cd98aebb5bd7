# backend/seatbook/schemas/interval.py
"""
Half-open time interval value object.

Naive datetimes are interpreted as wall-clock time in the configured local
timezone; every stored value is a tz-aware UTC datetime so comparisons are
total across the codebase.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator

from ..core.config import settings


def to_utc(value: datetime) -> datetime:
    """Normalise a datetime to tz-aware UTC, localising naive values first."""
    if value.tzinfo is None:
        value = settings.local_timezone.localize(value)
    return value.astimezone(timezone.utc)


class TimeInterval(BaseModel):
    """A `[start, end)` range. Ordering is checked by interval_rules.validate."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalise_to_utc(cls, v: datetime) -> datetime:
        return to_utc(v)

    @property
    def duration_seconds(self) -> float:
        return (self.end - self.start).total_seconds()

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"
