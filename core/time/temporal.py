"""
Yardbook Core Time — Business Day Helpers
===========================================
Pure functions. All take explicit datetime arguments — no hidden clock.

Business days are Monday to Friday. There is no holiday calendar.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_business_day(value: DateLike) -> bool:
    return _as_date(value).weekday() < 5


def business_days_between(start: DateLike, end: DateLike) -> int:
    """
    Count business days d with start < d <= end (calendar dates).

    Negative when end precedes start. Monday to the following Monday is 5.
    """
    start_day = _as_date(start)
    end_day = _as_date(end)
    if end_day < start_day:
        return -business_days_between(end_day, start_day)

    total_days = (end_day - start_day).days
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * 5
    cursor = start_day + timedelta(days=full_weeks * 7)
    for _ in range(remainder):
        cursor += timedelta(days=1)
        if cursor.weekday() < 5:
            count += 1
    return count
