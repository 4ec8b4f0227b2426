"""Pay period resolution.

Income dates (real and projected) partition time into consecutive pay periods.
Each call recomputes the periods from scratch against a single ``today`` that
is fixed at entry and threaded through every repair pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from paycal.calendar_math import add_months, coerce_datetime
from paycal.errors import AggregateError
from paycal.income_projection import TimelineIncome, build_timeline
from paycal.records import TransactionRecord, parse_transactions
from paycal.schedule_engine import next_occurrence

logger = logging.getLogger(__name__)

NO_INCOME_ERROR = "No income transactions found"
FAR_FUTURE = datetime(2099, 12, 31, 23, 59, 59, 999000)
BACKDATE_DAYS = 30
LEAD_IN_HORIZON_MONTHS = 12
# A period shorter than this is treated as a projection artifact.
MIN_PERIOD_DAYS = 2
# ...when it starts within this many days of the previous period's end.
MAX_GAP_GLUE_DAYS = 1.5
SECONDS_PER_DAY = 24 * 60 * 60
END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class PayPeriod:
    start_date: datetime
    end_date: datetime
    is_active: bool = False
    display_text: str = ""

    def contains(self, moment: datetime) -> bool:
        return self.start_date <= moment <= self.end_date

    @property
    def duration_days(self) -> float:
        return (self.end_date - self.start_date).total_seconds() / SECONDS_PER_DAY


@dataclass(frozen=True)
class PeriodResolution:
    periods: List[PayPeriod] = field(default_factory=list)
    error: Optional[str] = None


def resolve_periods(
    transactions: Iterable[TransactionRecord | Mapping[str, Any]],
    today: date | datetime | str | None = None,
) -> PeriodResolution:
    try:
        now = _start_of_day(datetime.now() if today is None else coerce_datetime(today))
        return _resolve(transactions, now)
    except Exception as exc:
        error = AggregateError(f"Failed to calculate pay periods: {exc}")
        logger.exception(str(error))
        return PeriodResolution(periods=[], error=str(error))


def get_current_period(
    transactions: Iterable[TransactionRecord | Mapping[str, Any]],
    today: date | datetime | str | None = None,
) -> PayPeriod | None:
    resolution = resolve_periods(transactions, today)
    if resolution.error == NO_INCOME_ERROR:
        logger.debug("No pay period: %s", resolution.error)
        return None
    if resolution.error:
        logger.error("Could not determine current pay period: %s", resolution.error)
        return None
    return next((period for period in resolution.periods if period.is_active), None)


def merge_short_active_period(periods: Sequence[PayPeriod]) -> List[PayPeriod]:
    """Fold a too-short active period into the period right before it."""
    merged = list(periods)
    index = next((i for i, period in enumerate(merged) if period.is_active), None)
    if index is None or index == 0:
        return merged

    current = merged[index]
    previous = merged[index - 1]
    gap_days = (current.start_date - previous.end_date).total_seconds() / SECONDS_PER_DAY
    if current.duration_days < MIN_PERIOD_DAYS and gap_days < MAX_GAP_GLUE_DAYS:
        merged[index - 1] = _period(previous.start_date, current.end_date, is_active=True)
        del merged[index]
    return merged


def ensure_active_period(
    periods: Sequence[PayPeriod],
    timeline: Sequence[TimelineIncome],
    today: datetime,
) -> List[PayPeriod]:
    """Prepend a lead-in period when nothing is active and the first pay day is upcoming."""
    result = list(periods)
    if any(period.is_active for period in result) or not timeline:
        return result

    earliest = timeline[0]
    horizon = add_months(today.date(), LEAD_IN_HORIZON_MONTHS)
    if today.date() < earliest.date <= horizon and earliest.is_recurring:
        lead_in = _period(
            today - timedelta(days=BACKDATE_DAYS),
            _end_of_day(earliest.date - timedelta(days=1)),
            is_active=True,
        )
        result.insert(0, lead_in)
    return result


def format_period_text(start: datetime, end: datetime) -> str:
    if end >= FAR_FUTURE:
        return _short_date(start)
    return f"{_short_date(start)} – {_short_date(end)}"


def _resolve(
    transactions: Iterable[TransactionRecord | Mapping[str, Any]], today: datetime
) -> PeriodResolution:
    incomes = sorted(
        (record for record in parse_transactions(transactions) if record.is_income),
        key=lambda record: record.date,
    )
    if not incomes:
        return PeriodResolution(periods=[], error=NO_INCOME_ERROR)

    timeline = build_timeline(incomes, today.date())
    periods = _build_periods(timeline, today)
    periods = _backdate_first_period(periods, timeline, today)
    periods = [
        replace(period, is_active=period.contains(today)) for period in periods
    ]
    periods = merge_short_active_period(periods)
    periods = ensure_active_period(periods, timeline, today)
    return PeriodResolution(periods=periods)


def _build_periods(timeline: Sequence[TimelineIncome], today: datetime) -> List[PayPeriod]:
    periods: List[PayPeriod] = []
    for index, entry in enumerate(timeline):
        start = datetime.combine(entry.date, time.min)
        if index + 1 < len(timeline):
            end = _end_of_day(timeline[index + 1].date - timedelta(days=1))
        else:
            end = _final_period_end(entry, start, today)
        periods.append(_period(start, end))
    return periods


def _final_period_end(entry: TimelineIncome, start: datetime, today: datetime) -> datetime:
    if today < start:
        return FAR_FUTURE

    schedule = entry.schedule
    if schedule is not None:
        result = next_occurrence(schedule, after=entry.date)
        if result.is_valid:
            return _end_of_day(result.date - timedelta(days=1))
        logger.warning("Falling back to a one month period for %s: %s", entry.record.id, result.error)
    return datetime.combine(add_months(entry.date, 1), time.min)


def _backdate_first_period(
    periods: List[PayPeriod], timeline: Sequence[TimelineIncome], today: datetime
) -> List[PayPeriod]:
    if not periods or periods[0].start_date <= today or not timeline[0].is_recurring:
        return periods
    first = periods[0]
    backdated = _period(today - timedelta(days=BACKDATE_DAYS), first.end_date)
    return [backdated] + periods[1:]


def _period(start: datetime, end: datetime, is_active: bool = False) -> PayPeriod:
    return PayPeriod(
        start_date=start,
        end_date=end,
        is_active=is_active,
        display_text=format_period_text(start, end),
    )


def _start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


def _short_date(moment: datetime) -> str:
    return f"{moment.month}/{moment.day}"
