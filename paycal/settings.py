from __future__ import annotations

import os

DEFAULT_WEEK_START = 0


def normalize_week_start(value: int | str) -> int:
    try:
        normalized = int(str(value).strip())
    except ValueError as exc:
        raise ValueError("Week start must be an integer between 0 and 6.") from exc
    if not 0 <= normalized <= 6:
        raise ValueError("Week start must be an integer between 0 and 6.")
    return normalized


def get_default_week_start() -> int:
    raw = os.getenv("PAYCAL_WEEK_START", str(DEFAULT_WEEK_START))
    try:
        return normalize_week_start(raw)
    except ValueError:
        return DEFAULT_WEEK_START
