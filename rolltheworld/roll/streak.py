"""Consecutive-day streaks computed from a participant's draw history."""

from __future__ import annotations

from typing import Iterable, Protocol

from ..daykey import shift_day_key


class _HasDay(Protocol):
    day: int


def compute_streak(history: Iterable[_HasDay], today: int) -> int:
    """Count the run of consecutive days ending today or yesterday.

    ``history`` must be ordered by day, most recent first. The newest entry
    anchors the run when it is ``today`` or the day before (a participant
    who has not rolled yet today keeps yesterday's streak). Each following
    entry must be exactly one day earlier than the previous one; the first
    gap ends the streak.
    """

    streak = 0
    expected = None
    for entry in history:
        if expected is None:
            if entry.day == today:
                expected = today
            elif entry.day == shift_day_key(today, -1):
                expected = entry.day
            else:
                return 0
        if entry.day != expected:
            break
        streak += 1
        expected = shift_day_key(expected, -1)
    return streak


def compute_legacy_streak(history: Iterable[_HasDay], today: int) -> int:
    """Streak rule of the first mobile release, kept for comparison.

    When an entry matches the day before the expected one, it is counted and
    the cursor is moved back twice, once onto the entry and once past it.
    Any single missing day is therefore forgiven, as often as it occurs,
    whereas :func:`compute_streak` stops at the first gap.
    """

    expected = today
    streak = 0
    for entry in history:
        if entry.day == expected:
            streak += 1
            expected = shift_day_key(expected, -1)
        elif entry.day == shift_day_key(expected, -1):
            expected = shift_day_key(expected, -1)
            streak += 1
            expected = shift_day_key(expected, -1)
        else:
            break
    return streak


__all__ = ["compute_streak", "compute_legacy_streak"]
