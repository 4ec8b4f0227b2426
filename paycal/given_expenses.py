"""Recurring "given" expenses: fixed outlays that repeat on a weekday or a day of the month."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List

from paycal.calendar_math import DAYS_PER_WEEK, coerce_date, to_sunday_index
from paycal.errors import PaycalError, ValidationError
from paycal.schedule_engine import (
    Cadence,
    PaySchedule,
    next_occurrence,
    occurrences_in_range,
    ordinal_suffix,
)
from paycal.weekday_resolver import DateResult

DAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


class GivenExpenseFrequency(str, Enum):
    EVERY_WEEK = "every_week"
    EVERY_OTHER_WEEK = "every_other_week"
    ONCE_A_MONTH = "once_a_month"


FREQUENCY_TO_CADENCE = {
    GivenExpenseFrequency.EVERY_WEEK: Cadence.WEEKLY,
    GivenExpenseFrequency.EVERY_OTHER_WEEK: Cadence.EVERY_2_WEEKS,
    GivenExpenseFrequency.ONCE_A_MONTH: Cadence.MONTHLY,
}


@dataclass(frozen=True)
class GivenExpenseSchedule:
    frequency: GivenExpenseFrequency | str
    start_date: date | datetime | str
    # Sunday-based; defaults to the start date's weekday.
    day_of_week: int | None = None


def next_given_expense_date(
    schedule: GivenExpenseSchedule, from_date: date | datetime | str | None = None
) -> DateResult:
    try:
        pay_schedule = to_pay_schedule(schedule)
    except PaycalError as exc:
        return DateResult(date=None, is_valid=False, error=str(exc))
    return next_occurrence(pay_schedule, after=from_date or date.today())


def given_expense_dates_in_range(
    schedule: GivenExpenseSchedule,
    start: date | datetime | str,
    end: date | datetime | str,
) -> List[date]:
    try:
        pay_schedule = to_pay_schedule(schedule)
    except PaycalError:
        return []
    return occurrences_in_range(pay_schedule, start, end)


def given_expense_date_for_period(
    schedule: GivenExpenseSchedule,
    period_start: date | datetime | str,
    period_end: date | datetime | str,
) -> date | None:
    dates = given_expense_dates_in_range(schedule, period_start, period_end)
    return dates[0] if dates else None


def describe_given_expense(schedule: GivenExpenseSchedule) -> str:
    try:
        frequency = GivenExpenseFrequency(schedule.frequency)
        start = coerce_date(schedule.start_date)
        day_of_week = _day_of_week(schedule, start)
    except (ValueError, PaycalError):
        return ""

    if frequency == GivenExpenseFrequency.ONCE_A_MONTH:
        return f"{start.day}{ordinal_suffix(start.day)} of the month"
    day_name = DAY_ABBREVIATIONS[day_of_week]
    if frequency == GivenExpenseFrequency.EVERY_WEEK:
        return f"every {day_name}"
    return f"every other {day_name}"


def to_pay_schedule(schedule: GivenExpenseSchedule) -> PaySchedule:
    """Express a given-expense schedule as an anchored pay schedule.

    Weekly frequencies anchor on the first matching weekday on or after the
    start date; monthly ones anchor on the start date itself.
    """
    try:
        frequency = GivenExpenseFrequency(schedule.frequency)
    except ValueError as exc:
        raise ValidationError(f"Unsupported frequency: {schedule.frequency}") from exc
    start = coerce_date(schedule.start_date)
    cadence = FREQUENCY_TO_CADENCE[frequency]
    if cadence == Cadence.MONTHLY:
        return PaySchedule(anchor_date=start, cadence=cadence)

    offset = (_day_of_week(schedule, start) - to_sunday_index(start)) % DAYS_PER_WEEK
    return PaySchedule(anchor_date=start + timedelta(days=offset), cadence=cadence)


def _day_of_week(schedule: GivenExpenseSchedule, start: date) -> int:
    if schedule.day_of_week is None:
        return to_sunday_index(start)
    if not 0 <= schedule.day_of_week < DAYS_PER_WEEK:
        raise ValidationError(f"Invalid day of week: {schedule.day_of_week}")
    return schedule.day_of_week
