"""
Datetime utilities.

Provides timezone-aware datetime functions and the points accounting window.
"""

import calendar
from datetime import UTC, date, datetime, time, timedelta, tzinfo


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def accounting_window(
    now: datetime, tz: tzinfo
) -> tuple[datetime, datetime]:
    """
    Get the points accounting window containing ``now``.

    The window is the calendar day in ``tz``: from local midnight to the
    next local midnight. Both bounds are returned in UTC.

    Args:
        now: Reference moment
        tz: Timezone whose midnight starts a new window

    Returns:
        Tuple of (window_start, window_end), end exclusive
    """
    local_day = ensure_aware(now).astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def window_date(now: datetime, tz: tzinfo) -> date:
    """Local calendar date identifying the window containing ``now``."""
    return ensure_aware(now).astimezone(tz).date()


def add_months(value: datetime, months: int) -> datetime:
    """
    Add calendar months, clamping the day to the target month's length.

    Args:
        value: Start datetime
        months: Number of months (may be negative)

    Returns:
        Shifted datetime
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
