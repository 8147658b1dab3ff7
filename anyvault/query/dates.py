"""
Relative date windows for quick-option filters.

The target query language has no notion of "today" or "last month", so
quick options are expanded into explicit UTC windows at compile time. This is
the only time-dependent part of view compilation.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Any, Tuple

from ..coerce import as_int
from ..errors import UnparseableValue
from ..values import parse_timestamp


ONE_SECOND = timedelta(seconds=1)

Window = Tuple[datetime, datetime]


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    return start_of_day(moment) + timedelta(days=1) - ONE_SECOND


def start_of_week(moment: datetime) -> datetime:
    return start_of_day(moment) - timedelta(days=moment.weekday())


def end_of_week(moment: datetime) -> datetime:
    return start_of_week(moment) + timedelta(days=7) - ONE_SECOND


def start_of_month(moment: datetime) -> datetime:
    return start_of_day(moment).replace(day=1)


def end_of_month(moment: datetime) -> datetime:
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    return start_of_day(moment).replace(day=last_day) + timedelta(days=1) - ONE_SECOND


def start_of_year(moment: datetime) -> datetime:
    return start_of_day(moment).replace(month=1, day=1)


def end_of_year(moment: datetime) -> datetime:
    return start_of_year(moment).replace(year=moment.year + 1) - ONE_SECOND


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def _day(moment: datetime) -> Window:
    return start_of_day(moment), end_of_day(moment)


def _week(moment: datetime) -> Window:
    return start_of_week(moment), end_of_week(moment)


def _month(moment: datetime) -> Window:
    return start_of_month(moment), end_of_month(moment)


def _year(moment: datetime) -> Window:
    return start_of_year(moment), end_of_year(moment)


def date_window(quick_option: str, value: Any, now: datetime) -> Window:
    """
    Compute the inclusive window `[start, end]` for a quick option.

    `end` is one second before the exclusive upper bound. Without a known quick
    option the window is the day of `value`, or today when `value` is not a
    timestamp.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    day = timedelta(days=1)

    # "NumberOfDaysAgo:3" carries its day count inline.
    option, _, inline_count = (quick_option or "").partition(":")
    if inline_count.strip():
        quick_option, value = option, inline_count.strip()

    if quick_option == "Yesterday":
        return _day(now - day)
    if quick_option == "Today":
        return _day(now)
    if quick_option == "Tomorrow":
        return _day(now + day)
    if quick_option == "LastWeek":
        return _week(now - 7 * day)
    if quick_option == "CurrentWeek":
        return _week(now)
    if quick_option == "NextWeek":
        return _week(now + 7 * day)
    if quick_option == "LastMonth":
        return _month(add_months(now, -1))
    if quick_option == "CurrentMonth":
        return _month(now)
    if quick_option == "NextMonth":
        return _month(add_months(now, 1))
    if quick_option == "LastYear":
        return _year(start_of_year(now).replace(year=now.year - 1))
    if quick_option == "CurrentYear":
        return _year(now)
    if quick_option == "NextYear":
        return _year(start_of_year(now).replace(year=now.year + 1))
    if quick_option == "NumberOfDaysAgo":
        return _day(now - as_int(value) * day)
    if quick_option == "NumberOfDaysNow":
        return _day(now + as_int(value) * day)

    try:
        return _day(parse_timestamp(value))
    except UnparseableValue:
        return _day(now)
