"""Calendar helpers for the user statistics."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_name(month: int) -> str:
    """Full English month name for a 1-based month number."""
    return calendar.month_name[month]


def shift_months(moment: datetime, months: int) -> datetime:
    """Move a datetime by whole calendar months.

    The day is clamped to the length of the target month, so
    March 31 minus one month is the last day of February.
    """
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def month_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """First and last calendar day (at midnight) of the month containing moment."""
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    first = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return first, first.replace(day=last_day)


def format_date(value: datetime | str) -> str:
    """Human-readable date for table cells, e.g. ``Jan 01, 2024``.

    Accepts a datetime or an ISO-8601 string (a trailing ``Z`` is allowed).
    Aware values are shown in UTC.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%b %d, %Y")
