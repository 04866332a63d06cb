"""Override window helpers for Honeywell Evohome integration.

Converts the two ways a user can bound a temporary override into the
absolute ``until`` timestamp sent to the API:
- a clock time of day ("HH:MM")
- a duration in (fractional) hours from now
"""

from __future__ import annotations

import math
import re
from datetime import datetime, time, timedelta

from homeassistant.util import dt as dt_util

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


def parse_time_of_day(value: str | time) -> time:
    """Parse a "HH:MM" string (seconds are ignored).

    Raises:
        ValueError: If the value is not a valid time of day.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time of day: {value!r}")
    return time(hours, minutes)


def time_to_timestamp(value: str | time, now: datetime | None = None) -> datetime:
    """Return the next occurrence of a clock time.

    The result is today at that time in the local time zone, or tomorrow
    when that moment is not in the future anymore.

    Args:
        value: Time of day, "HH:MM" or ``datetime.time``
        now: Reference instant, defaults to the current local time

    Returns:
        Aware datetime of the next occurrence.

    Example:
        >>> time_to_timestamp("14:30", now=datetime(2024, 5, 1, 9, 0, tzinfo=UTC))
        datetime.datetime(2024, 5, 1, 14, 30, tzinfo=UTC)
    """
    now = now or dt_util.now()
    target_time = parse_time_of_day(value)
    target = now.replace(hour=target_time.hour, minute=target_time.minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return target


def hours_to_timestamp(value: float, now: datetime | None = None) -> datetime:
    """Return the instant a number of hours from now.

    The fractional part is rounded to whole minutes, so 1.5 is 1h30m.

    Args:
        value: Duration in hours, must be positive
        now: Reference instant, defaults to the current local time

    Raises:
        ValueError: If the duration is not positive.
    """
    if value <= 0:
        raise ValueError(f"Override duration must be positive, got {value}")
    now = now or dt_util.now()
    hours = math.floor(value)
    minutes = round((value - hours) * 60)
    return now + timedelta(hours=hours, minutes=minutes)


def override_until(
    time_of_day: str | time | None = None,
    hours: float | None = None,
    now: datetime | None = None,
) -> datetime | None:
    """Resolve the optional override window of a write.

    Hours take precedence over a time of day; with neither the write is
    permanent and None is returned.
    """
    if hours:
        return hours_to_timestamp(hours, now)
    if time_of_day:
        return time_to_timestamp(time_of_day, now)
    return None
