"""Leaderboard views over one day's draws."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select

from ..db.store import DrawStore
from ..errors import NotFoundError
from ..models import Draw

DEFAULT_TOP_LIMIT = 100
DEFAULT_RADIUS = 10

# Value descending; ties resolved by identity so positions are reproducible.
LEADERBOARD_ORDER = (Draw.value.desc(), Draw.participant_id.asc())


@dataclass(frozen=True)
class LeaderboardEntry:
    """A row of a leaderboard.

    ``rank`` is the 1-based position in the value-descending ordering, with
    ties broken by identity. Unlike :class:`~rolltheworld.roll.ranking.RankSummary`
    it never repeats or skips.
    """

    identity: str
    value: int
    rank: int


class LeaderboardService:
    """Serves the "top" and "around me" leaderboard views."""

    def __init__(self, store: DrawStore) -> None:
        self._store = store

    def top(self, day_key: int, limit: int = DEFAULT_TOP_LIMIT) -> list[LeaderboardEntry]:
        """Return the ``limit`` highest draws of ``day_key``."""

        if limit < 0:
            raise ValueError("limit must be non-negative")
        if limit == 0:
            return []

        self._store.ensure_schema()
        stmt = (
            select(Draw.participant_id, Draw.value)
            .where(Draw.day_key == day_key)
            .order_by(*LEADERBOARD_ORDER)
            .limit(limit)
        )
        with self._store.begin() as session:
            rows = session.execute(stmt).all()
        return [
            LeaderboardEntry(identity=row.participant_id, value=int(row.value), rank=index + 1)
            for index, row in enumerate(rows)
        ]

    def around(
        self,
        day_key: int,
        participant_id: str,
        radius: int = DEFAULT_RADIUS,
    ) -> list[LeaderboardEntry]:
        """Return the window of ``2 * radius + 1`` positions centred on a participant.

        The window is cut short at either end of the ordering instead of
        failing, so a participant ranked first gets at most ``radius + 1``
        entries.

        Raises
        ------
        NotFoundError
            If ``participant_id`` has no draw on ``day_key``.
        ValueError
            If ``radius`` is negative.
        """

        if radius < 0:
            raise ValueError("radius must be non-negative")

        self._store.ensure_schema()
        ordered = (
            select(
                Draw.participant_id,
                Draw.value,
                func.row_number().over(order_by=LEADERBOARD_ORDER).label("position"),
            )
            .where(Draw.day_key == day_key)
            .cte("ordered")
        )
        centre = (
            select(ordered.c.position)
            .where(ordered.c.participant_id == participant_id)
            .scalar_subquery()
        )
        stmt = (
            select(ordered.c.participant_id, ordered.c.value, ordered.c.position)
            .where(ordered.c.position.between(centre - radius, centre + radius))
            .order_by(ordered.c.position)
        )
        with self._store.begin() as session:
            rows = session.execute(stmt).all()

        # The centre row always falls inside its own window, so an empty
        # result means there was nothing to centre on.
        if not rows:
            raise NotFoundError(f"No draw on {day_key} to centre the leaderboard on")
        return [
            LeaderboardEntry(identity=row.participant_id, value=int(row.value), rank=int(row.position))
            for row in rows
        ]


__all__ = ["LeaderboardEntry", "LeaderboardService", "DEFAULT_TOP_LIMIT", "DEFAULT_RADIUS"]
