"""Helpers for converting between UTC dates and integer day keys.

A day key encodes a calendar date as ``year * 10000 + month * 100 + day``
so that integer order matches calendar order.
"""

from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def date_to_day_key(value: Union[date, datetime]) -> int:
    """Return the day key of ``value``.

    Aware datetimes are converted to UTC first; naive datetimes are assumed to
    already be in UTC.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return value.year * 10_000 + value.month * 100 + value.day


def day_key_to_date(day_key: int) -> date:
    """Decode ``day_key`` back into a :class:`datetime.date`.

    Raises
    ------
    ValueError
        If ``day_key`` is not a valid ``YYYYMMDD`` integer.
    """

    if isinstance(day_key, bool) or not isinstance(day_key, int):
        raise ValueError(f"day key must be an int, got {day_key!r}")
    if day_key <= 0:
        raise ValueError(f"day key must be positive, got {day_key}")
    year, rest = divmod(day_key, 10_000)
    month, day = divmod(rest, 100)
    return date(year, month, day)


def today_day_key(now: Optional[datetime] = None) -> int:
    return date_to_day_key(now if now is not None else utc_now())


def shift_day_key(day_key: int, delta_days: int) -> int:
    """Move ``day_key`` by ``delta_days`` calendar days (negative goes back)."""
    return date_to_day_key(day_key_to_date(day_key) + timedelta(days=delta_days))


def format_day_key(day_key: int) -> str:
    return day_key_to_date(day_key).isoformat()


def is_utc_same_day(a: datetime, b: datetime) -> bool:
    return date_to_day_key(a) == date_to_day_key(b)


__all__ = [
    "utc_now",
    "now_ms",
    "date_to_day_key",
    "day_key_to_date",
    "today_day_key",
    "shift_day_key",
    "format_day_key",
    "is_utc_same_day",
]
