"""Application-wide constants for the seat reservation engine."""

from __future__ import annotations

from datetime import time

BRAND_NAME = "Seatbook"

# Size of the seat pool provisioned at start-up
DEFAULT_NUMBER_OF_SEATS = 217

DEFAULT_TIMEZONE = "Asia/Taipei"

# Closed hours are written this many days ahead of today
DEFAULT_BLACKOUT_HORIZON_DAYS = 3

# Closed hours as (start, end) local wall-clock times; None end means next midnight
WEEKDAY_CLOSED_HOURS: tuple[tuple[time, time | None], ...] = (
    (time(0, 0), time(8, 0)),
    (time(22, 0), None),
)
WEEKEND_CLOSED_HOURS: tuple[tuple[time, time | None], ...] = (
    (time(0, 0), time(9, 0)),
    (time(17, 0), None),
)

BLACKOUT_REASON_SCHEDULED = "scheduled"
BLACKOUT_REASON_ADMIN = "admin"

# Scheduler job id (must match the beat schedule entry)
BLACKOUT_JOB_ID = "schedule-closed-hours"

MAX_USER_NAME_LENGTH = 64
MAX_REASON_LENGTH = 255
