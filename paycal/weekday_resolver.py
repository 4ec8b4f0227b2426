from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from paycal.calendar_math import (
    DAYS_PER_WEEK,
    coerce_date,
    coerce_datetime,
    first_weekday,
    to_sunday_index,
)
from paycal.errors import CalculationError, ValidationError

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100
MAX_WEEK_OF_MONTH = 5
WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)
WEEKDAY_INDEX = {name: index for index, name in enumerate(WEEKDAY_NAMES)}


@dataclass(frozen=True)
class DateResult:
    date: date | None
    is_valid: bool
    error: str | None = None


def resolve_week_and_day(
    year: int, month0: int, week_number: int, weekday_name: str
) -> DateResult:
    """Return the date of the Nth given weekday in a month.

    A week number past the last occurrence (a 5th Friday in a month with only
    four) resolves to the last occurrence of that weekday and is still valid.
    """
    try:
        target = _resolve(year, month0, week_number, weekday_name)
    except ValidationError as exc:
        return DateResult(date=None, is_valid=False, error=str(exc))
    return DateResult(date=target, is_valid=True)


def _resolve(year: int, month0: int, week_number: int, weekday_name: str) -> date:
    if not isinstance(year, int) or not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Invalid year: {year}")
    if not isinstance(month0, int) or not 0 <= month0 <= 11:
        raise ValidationError(f"Invalid month: {month0}")
    if not isinstance(week_number, int) or not 1 <= week_number <= MAX_WEEK_OF_MONTH:
        raise ValidationError(f"Invalid week number: {week_number}")
    target_index = WEEKDAY_INDEX.get(str(weekday_name).strip().lower())
    if target_index is None:
        raise ValidationError(f"Invalid weekday: {weekday_name}")

    first_day = date(year, month0 + 1, 1)
    offset = (target_index - to_sunday_index(first_day)) % DAYS_PER_WEEK
    offset += (week_number - 1) * DAYS_PER_WEEK
    candidate = first_day + timedelta(days=offset)
    if candidate.month != first_day.month:
        candidate -= timedelta(days=DAYS_PER_WEEK)
    return candidate


def week_of_month(value: date | datetime | str) -> int:
    try:
        day = coerce_date(value)
    except CalculationError:
        logger.warning("Could not determine week of month for %r", value)
        return 1
    week = math.ceil((day.day + first_weekday(day.year, day.month - 1)) / DAYS_PER_WEEK)
    return max(1, min(week, MAX_WEEK_OF_MONTH))


def weekday_name(value: date | datetime | str) -> str:
    try:
        day = coerce_date(value)
    except CalculationError:
        logger.warning("Could not determine weekday for %r", value)
        return "sunday"
    return WEEKDAY_NAMES[to_sunday_index(day)]


def resolve_income_date(
    week_number: int,
    weekday_name: str,
    reference_date: date | datetime | str | None = None,
) -> str:
    """Resolve a week/weekday pair in the reference month to an ISO timestamp."""
    now = datetime.now()
    if reference_date is None:
        reference = now
    else:
        try:
            reference = coerce_datetime(reference_date)
        except CalculationError:
            logger.warning("Invalid reference date %r, using current time", reference_date)
            return now.isoformat()

    result = resolve_week_and_day(
        reference.year, reference.month - 1, week_number, weekday_name
    )
    if not result.is_valid:
        logger.warning("Could not resolve income date: %s", result.error)
        return now.isoformat()
    return datetime.combine(result.date, datetime.min.time()).isoformat()


def format_week_and_day(week_number: int, weekday_name: str) -> str:
    return f"Week {week_number} {weekday_name.strip().capitalize()}"
