from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import AbstractSet, Iterable, List, Union

from paycal.calendar_math import add_months
from paycal.errors import PaycalError
from paycal.records import TransactionRecord
from paycal.schedule_engine import PaySchedule, next_occurrence, occurrences_in_range

logger = logging.getLogger(__name__)

MAX_PROJECTED_OCCURRENCES = 6
PROJECTION_MONTHS = 6


@dataclass(frozen=True)
class RealIncome:
    record: TransactionRecord

    @property
    def date(self) -> date:
        return self.record.date.date()

    @property
    def is_recurring(self) -> bool:
        return self.record.is_recurring

    @property
    def schedule(self) -> PaySchedule | None:
        return self.record.to_schedule()


@dataclass(frozen=True)
class ProjectedIncome:
    """A future pay date derived from a recurring record; never persisted."""

    record: TransactionRecord
    source_id: str

    @property
    def date(self) -> date:
        return self.record.date.date()

    @property
    def is_recurring(self) -> bool:
        return True

    @property
    def schedule(self) -> PaySchedule | None:
        return self.record.to_schedule()


TimelineIncome = Union[RealIncome, ProjectedIncome]


def project_income(
    record: TransactionRecord,
    today: date,
    existing_dates: AbstractSet[date] = frozenset(),
) -> List[ProjectedIncome]:
    """Project pay dates after ``record`` up to the first one past ``today``.

    Only the last few occurrences are kept so a stale record does not flood
    the timeline, and dates already covered by a real income are skipped.
    """
    schedule = record.to_schedule()
    if schedule is None:
        return []
    probe = next_occurrence(schedule)
    if not probe.is_valid:
        logger.warning("Cannot project income %s: %s", record.id, probe.error)
        return []

    record_date = record.date.date()
    range_start = max(record_date + timedelta(days=1), add_months(today, -PROJECTION_MONTHS))
    range_end = add_months(today, PROJECTION_MONTHS)

    kept: List[date] = []
    for occurrence in occurrences_in_range(schedule, range_start, range_end):
        if occurrence not in existing_dates:
            kept.append(occurrence)
        if occurrence > today:
            break

    return [
        ProjectedIncome(
            record=record.model_copy(
                update={"date": datetime.combine(occurrence, datetime.min.time())}
            ),
            source_id=record.id,
        )
        for occurrence in kept[-MAX_PROJECTED_OCCURRENCES:]
    ]


def build_timeline(
    income_records: Iterable[TransactionRecord], today: date
) -> List[TimelineIncome]:
    """Merge real and projected incomes into one ascending list, one entry per day."""
    real = [RealIncome(record) for record in sorted(income_records, key=lambda r: r.date)]
    existing_dates = {entry.date for entry in real}

    entries: List[TimelineIncome] = list(real)
    for entry in real:
        try:
            entries.extend(project_income(entry.record, today, existing_dates))
        except (PaycalError, ValueError, OverflowError) as exc:
            logger.warning("Skipping projection for income %s: %s", entry.record.id, exc)

    entries.sort(key=lambda entry: (entry.date, isinstance(entry, ProjectedIncome)))
    timeline: List[TimelineIncome] = []
    for entry in entries:
        if timeline and timeline[-1].date == entry.date:
            continue
        timeline.append(entry)
    return timeline
