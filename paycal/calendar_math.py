"""Gregorian calendar helpers and month grid generation.

Months are zero-based (0 = January) and weekday indexes are Sunday-based
(0 = Sunday) throughout this package, matching what calendar UIs consume.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List

from paycal.errors import CalculationError
from paycal.settings import get_default_week_start

DAYS_PER_WEEK = 7
MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


@dataclass(frozen=True)
class CalendarDay:
    day: int
    date: date
    is_current_month: bool
    is_other_month: bool


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month0: int) -> int:
    if month0 == 1 and is_leap_year(year):
        return 29
    return MONTH_LENGTHS[month0]


def to_sunday_index(value: date) -> int:
    # date.weekday() is Monday-based
    return (value.weekday() + 1) % DAYS_PER_WEEK


def first_weekday(year: int, month0: int) -> int:
    return to_sunday_index(date(year, month0 + 1, 1))


def leading_blanks(first_weekday: int, week_start: int) -> int:
    return (first_weekday - week_start + DAYS_PER_WEEK) % DAYS_PER_WEEK


def generate_month_grid(
    year: int, month0: int, week_start: int | None = None
) -> List[CalendarDay]:
    """Build the cells for one month view, padded with neighbouring days to whole weeks."""
    if week_start is None:
        week_start = get_default_week_start()

    prev_year, prev_month0 = _shift_month(year, month0, -1)
    next_year, next_month0 = _shift_month(year, month0, 1)
    blanks = leading_blanks(first_weekday(year, month0), week_start)
    days_in_prev_month = days_in_month(prev_year, prev_month0)

    grid: List[CalendarDay] = []
    for i in range(blanks):
        day = days_in_prev_month - blanks + i + 1
        grid.append(
            CalendarDay(
                day=day,
                date=date(prev_year, prev_month0 + 1, day),
                is_current_month=False,
                is_other_month=True,
            )
        )
    for day in range(1, days_in_month(year, month0) + 1):
        grid.append(
            CalendarDay(
                day=day,
                date=date(year, month0 + 1, day),
                is_current_month=True,
                is_other_month=False,
            )
        )
    trailing = (DAYS_PER_WEEK - len(grid) % DAYS_PER_WEEK) % DAYS_PER_WEEK
    for day in range(1, trailing + 1):
        grid.append(
            CalendarDay(
                day=day,
                date=date(next_year, next_month0 + 1, day),
                is_current_month=False,
                is_other_month=True,
            )
        )
    return grid


def add_months(value: date, months: int, anchor_day: int | None = None) -> date:
    """Shift by calendar months, clamping the day to the target month's last day."""
    if anchor_day is None:
        anchor_day = value.day
    year, month0 = _shift_month(value.year, value.month - 1, months)
    day = min(anchor_day, days_in_month(year, month0))
    return date(year, month0 + 1, day)


def coerce_date(value: date | datetime | str) -> date:
    """Return the wall-clock calendar date of a date, datetime or ISO-8601 string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return coerce_datetime(value).date()
    raise CalculationError(f"Unsupported date value: {value!r}")


def coerce_datetime(value: date | datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise CalculationError(f"Invalid date string: {value!r}") from exc
        return parsed.replace(tzinfo=None)
    raise CalculationError(f"Unsupported date value: {value!r}")


def _shift_month(year: int, month0: int, offset: int) -> tuple[int, int]:
    total = year * 12 + month0 + offset
    return total // 12, total % 12
