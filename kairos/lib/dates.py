"""
Calendar-day arithmetic for Kairos.

All helpers work in local calendar terms: a datetime's own year/month/day
decide which day it belongs to, and time-of-day never leaks into day counts.
Every function returns a new value and never mutates its argument.

Usage:
    from kairos.lib.dates import add_days, diff_in_calendar_days

    due = add_days(created_at, 7)
    days_left = diff_in_calendar_days(due, now)
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

_END_OF_DAY = time(23, 59, 59, 999000)


def start_of_day(d: datetime) -> datetime:
    """Return 00:00:00.000 on the calendar date of ``d``."""
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(d: datetime) -> datetime:
    """Return 23:59:59.999 on the calendar date of ``d``."""
    return d.replace(
        hour=_END_OF_DAY.hour,
        minute=_END_OF_DAY.minute,
        second=_END_OF_DAY.second,
        microsecond=_END_OF_DAY.microsecond,
    )


def add_days(d: datetime, days: int) -> datetime:
    """
    Return ``d`` moved by ``days`` calendar days (negative moves back).

    Wall-clock time-of-day is preserved.
    """
    return d + timedelta(days=days)


def _calendar_date(d: date | datetime) -> date:
    if isinstance(d, datetime):
        return d.date()
    return d


def diff_in_calendar_days(
    target: date | datetime,
    base: date | datetime | None = None,
) -> int:
    """
    Number of calendar days from ``base``'s date to ``target``'s date.

    Only the year/month/day components are compared, so 23:59 yesterday and
    00:01 today are one day apart while 00:01 and 23:59 on the same day are
    zero days apart.

    Args:
        target: The instant being measured.
        base: Reference instant; defaults to now (in ``target``'s timezone
            when ``target`` is aware).

    Returns:
        Positive when ``target`` is after ``base``, negative when before.
    """
    if base is None:
        tz = target.tzinfo if isinstance(target, datetime) else None
        base = datetime.now(tz)
    return (_calendar_date(target) - _calendar_date(base)).days


__all__ = [
    "start_of_day",
    "end_of_day",
    "add_days",
    "diff_in_calendar_days",
]
