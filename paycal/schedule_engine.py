from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import List, Sequence, Tuple

from paycal.calendar_math import add_months, coerce_date, days_in_month
from paycal.errors import CalculationError, PaycalError, ValidationError
from paycal.weekday_resolver import DateResult

logger = logging.getLogger(__name__)

WEEKLY_DAYS = 7
BIWEEKLY_DAYS = 14
MAX_OCCURRENCE_STEPS = 500
MAX_MONTH_SCAN = 24
MAX_TWICE_MONTHLY_DAYS = 2
MAX_CUSTOM_DAYS = 10
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class Cadence(str, Enum):
    WEEKLY = "weekly"
    EVERY_2_WEEKS = "every_2_weeks"
    MONTHLY = "monthly"
    TWICE_MONTHLY = "twice_monthly"
    CUSTOM = "custom"


CADENCE_ALIASES = {
    "weekly": Cadence.WEEKLY,
    "every2weeks": Cadence.EVERY_2_WEEKS,
    "biweekly": Cadence.EVERY_2_WEEKS,
    "byweekly": Cadence.EVERY_2_WEEKS,
    "monthly": Cadence.MONTHLY,
    "twicemonthly": Cadence.TWICE_MONTHLY,
    "semimonthly": Cadence.TWICE_MONTHLY,
    "custom": Cadence.CUSTOM,
}
INTERVAL_DAYS = {
    Cadence.WEEKLY: WEEKLY_DAYS,
    Cadence.EVERY_2_WEEKS: BIWEEKLY_DAYS,
}
DAY_LIMITS = {
    Cadence.TWICE_MONTHLY: MAX_TWICE_MONTHLY_DAYS,
    Cadence.CUSTOM: MAX_CUSTOM_DAYS,
}


@dataclass(frozen=True)
class PaySchedule:
    anchor_date: date | datetime | str
    cadence: Cadence | str = Cadence.EVERY_2_WEEKS
    days_of_month: Tuple[int, ...] = ()


def parse_cadence(value: Cadence | str) -> Cadence:
    if isinstance(value, Cadence):
        return value
    normalized = _normalize_cadence(str(value))
    try:
        return CADENCE_ALIASES[normalized]
    except KeyError as exc:
        raise ValidationError(f"Unsupported cadence: {value}") from exc


def next_occurrence(
    schedule: PaySchedule, after: date | datetime | str | None = None
) -> DateResult:
    """Return the earliest occurrence strictly after ``after``.

    Without ``after`` the result is the first occurrence following the anchor.
    The anchor itself counts as an occurrence; nothing before it is produced.
    """
    try:
        return DateResult(date=_next_date(schedule, after), is_valid=True)
    except (PaycalError, ValueError, OverflowError) as exc:
        return DateResult(date=None, is_valid=False, error=str(exc))


def occurrences_in_range(
    schedule: PaySchedule,
    start: date | datetime | str,
    end: date | datetime | str,
) -> List[date]:
    try:
        range_start = coerce_date(start)
        range_end = coerce_date(end)
    except CalculationError as exc:
        logger.warning("Invalid occurrence range: %s", exc)
        return []
    if range_start > range_end:
        return []

    occurrences: List[date] = []
    cursor = range_start - timedelta(days=1)
    for _ in range(MAX_OCCURRENCE_STEPS):
        result = next_occurrence(schedule, after=cursor)
        if not result.is_valid or result.date > range_end:
            break
        occurrences.append(result.date)
        cursor = result.date
    else:
        logger.warning(
            "Stopped enumerating %s schedule after %d occurrences",
            schedule.cadence,
            MAX_OCCURRENCE_STEPS,
        )
    return occurrences


def pay_dates_for_month(schedule: PaySchedule, year: int, month0: int) -> List[date]:
    first = date(year, month0 + 1, 1)
    last = date(year, month0 + 1, days_in_month(year, month0))
    return occurrences_in_range(schedule, first, last)


def income_in_range(
    schedule: PaySchedule,
    amount: Decimal | int | float | str,
    start: date | datetime | str,
    end: date | datetime | str,
) -> Decimal:
    """Total expected pay for the occurrences falling inside ``[start, end]``."""
    payments = len(occurrences_in_range(schedule, start, end))
    return _coerce_amount(amount) * payments


def describe_schedule(schedule: PaySchedule) -> str:
    try:
        cadence = parse_cadence(schedule.cadence)
        anchor = coerce_date(schedule.anchor_date)
    except PaycalError:
        return "Unknown schedule"

    last_paid = f"{MONTH_ABBREVIATIONS[anchor.month - 1]} {anchor.day}"
    if cadence == Cadence.WEEKLY:
        return f"Weekly (last paid {last_paid})"
    if cadence == Cadence.EVERY_2_WEEKS:
        return f"Every 2 weeks (last paid {last_paid})"
    if cadence == Cadence.MONTHLY:
        return f"Monthly on the {anchor.day}{ordinal_suffix(anchor.day)}"

    days = [f"{day}{ordinal_suffix(day)}" for day in schedule.days_of_month]
    if cadence == Cadence.TWICE_MONTHLY:
        return f"Twice monthly ({' & '.join(days)})" if days else "Twice monthly"
    return f"Custom ({', '.join(days)})" if days else "Custom schedule"


def ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _next_date(schedule: PaySchedule, after: date | datetime | str | None) -> date:
    cadence = parse_cadence(schedule.cadence)
    anchor = coerce_date(schedule.anchor_date)
    after_date = anchor if after is None else coerce_date(after)
    minimum = max(after_date + timedelta(days=1), anchor)

    if cadence in INTERVAL_DAYS:
        return _first_occurrence_on_or_after(anchor, minimum, INTERVAL_DAYS[cadence])
    if cadence == Cadence.MONTHLY:
        return _first_monthly_on_or_after(anchor, minimum)
    days = _valid_days(schedule.days_of_month, DAY_LIMITS[cadence])
    return _first_day_of_month_on_or_after(days, minimum)


def _first_occurrence_on_or_after(
    start_date: date, minimum_date: date, interval_days: int
) -> date:
    if start_date >= minimum_date:
        return start_date
    days_between = (minimum_date - start_date).days
    intervals = (days_between + interval_days - 1) // interval_days
    return start_date + timedelta(days=interval_days * intervals)


def _first_monthly_on_or_after(start_date: date, minimum_date: date) -> date:
    if start_date >= minimum_date:
        return start_date
    months_between = (minimum_date.year - start_date.year) * 12 + (
        minimum_date.month - start_date.month
    )
    candidate = add_months(start_date, months_between, start_date.day)
    if candidate < minimum_date:
        candidate = add_months(start_date, months_between + 1, start_date.day)
    return candidate


def _first_day_of_month_on_or_after(days: Sequence[int], minimum_date: date) -> date:
    month_start = minimum_date.replace(day=1)
    for offset in range(MAX_MONTH_SCAN):
        month = add_months(month_start, offset)
        last_day = days_in_month(month.year, month.month - 1)
        for day in sorted({min(day, last_day) for day in days}):
            candidate = month.replace(day=day)
            if candidate >= minimum_date:
                return candidate
    raise CalculationError("No pay day found for day-of-month schedule")


def _valid_days(days: Sequence[int], limit: int) -> List[int]:
    valid = sorted({day for day in days if isinstance(day, int) and 1 <= day <= 31})
    if not valid:
        raise CalculationError("Schedule has no valid days of month")
    return valid[:limit]


def _normalize_cadence(value: str) -> str:
    return "".join(ch for ch in value.strip().lower() if ch.isalnum())


def _coerce_amount(amount: Decimal | int | float | str) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
