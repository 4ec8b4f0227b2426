from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable, List, Mapping, Optional, TypeVar

from paycal.calendar_math import coerce_date
from paycal.errors import CalculationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
DateKey = Callable[[Any], Any]

WINDOW_PAST_DAYS = 7
WINDOW_FUTURE_DAYS = 30
UNDATED = float("inf")


def sort_by_proximity(
    items: Iterable[T],
    today: date | datetime | str | None = None,
    key: Optional[DateKey] = None,
) -> List[T]:
    """Order items by absolute day distance from today; undated items go last."""
    reference = _reference_day(today)
    get_date = key or item_date

    def distance(item: T) -> float:
        day = _safe_date(get_date(item))
        if day is None:
            return UNDATED
        return abs((day - reference).days)

    return sorted(items, key=distance)


def sort_by_proximity_future_priority(
    items: Iterable[T],
    today: date | datetime | str | None = None,
    key: Optional[DateKey] = None,
) -> List[T]:
    """Upcoming items (today included) first, nearest first; then past items, most recent first."""
    reference = _reference_day(today)
    get_date = key or item_date

    def rank(item: T) -> tuple[int, float]:
        day = _safe_date(get_date(item))
        if day is None:
            return 2, UNDATED
        if day >= reference:
            return 0, (day - reference).days
        return 1, (reference - day).days

    return sorted(items, key=rank)


def smart_window(
    items: Iterable[T],
    today: date | datetime | str | None = None,
    key: Optional[DateKey] = None,
) -> List[T]:
    reference = _reference_day(today)
    get_date = key or item_date
    window_start = reference - timedelta(days=WINDOW_PAST_DAYS)
    window_end = reference + timedelta(days=WINDOW_FUTURE_DAYS)

    dated = []
    for item in items:
        day = _safe_date(get_date(item))
        if day is not None and window_start <= day <= window_end:
            dated.append((day, item))

    def rank(entry: tuple[date, T]) -> tuple[int, int]:
        day = entry[0]
        if day == reference:
            return 0, 0
        if day > reference:
            return 1, (day - reference).days
        return 2, (reference - day).days

    return [item for _, item in sorted(dated, key=rank)]


def item_date(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("date")
    return getattr(item, "date", None)


def _reference_day(today: date | datetime | str | None) -> date:
    if today is None:
        return date.today()
    try:
        return coerce_date(today)
    except CalculationError:
        logger.warning("Invalid reference date %r, using today", today)
        return date.today()


def _safe_date(value: Any) -> date | None:
    if value is None:
        return None
    try:
        return coerce_date(value)
    except CalculationError:
        return None
