"""Competition ranking of a draw among all draws of the same day."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import aliased

from ..db.store import DrawStore
from ..errors import NotFoundError
from ..models import Draw


@dataclass(frozen=True)
class RankSummary:
    """Rank of one value on one day.

    Attributes
    ----------
    rank : int
        ``1 +`` the number of draws that day with a strictly greater value.
        Equal values share a rank and the following rank is skipped.
    total : int
        Number of draws that day.
    """

    rank: int
    total: int


@dataclass(frozen=True)
class RankedDraw:
    """A participant's stored value together with its rank summary."""

    value: int
    rank: int
    total: int

    @property
    def summary(self) -> RankSummary:
        return RankSummary(rank=self.rank, total=self.total)


def ranked_draw_statement(participant_id: str, day_key: int):
    """Select ``(value, rank, total)`` for one draw in a single statement.

    Rank and total are correlated subqueries of the same SELECT so that both
    come from one snapshot of the day's draws.
    """

    subject = aliased(Draw, name="subject")
    higher = aliased(Draw, name="higher")
    same_day = aliased(Draw, name="same_day")
    greater_count = (
        select(func.count())
        .select_from(higher)
        .where(higher.day_key == subject.day_key, higher.value > subject.value)
        .correlate(subject)
        .scalar_subquery()
    )
    total_count = (
        select(func.count())
        .select_from(same_day)
        .where(same_day.day_key == subject.day_key)
        .correlate(subject)
        .scalar_subquery()
    )
    return (
        select(
            subject.value,
            (greater_count + 1).label("rank"),
            total_count.label("total"),
        )
        .where(subject.participant_id == participant_id, subject.day_key == day_key)
        .limit(1)
    )


class RankCalculator:
    """Computes competition ranks against the authoritative store."""

    def __init__(self, store: DrawStore) -> None:
        self._store = store

    def lookup(self, day_key: int, participant_id: str) -> Optional[RankedDraw]:
        """Return the stored draw of ``participant_id`` on ``day_key`` with its rank.

        Returns ``None`` when the participant has not drawn that day.
        """

        self._store.ensure_schema()
        with self._store.begin() as session:
            row = session.execute(ranked_draw_statement(participant_id, day_key)).one_or_none()
        if row is None:
            return None
        return RankedDraw(value=int(row.value), rank=int(row.rank), total=int(row.total))

    def rank(self, day_key: int, participant_id: str) -> RankSummary:
        """Return the rank summary of ``participant_id`` on ``day_key``.

        Raises
        ------
        NotFoundError
            If the participant has no draw on ``day_key``.
        """

        ranked = self.lookup(day_key, participant_id)
        if ranked is None:
            raise NotFoundError(f"No draw on {day_key} for this participant")
        return ranked.summary

    def rank_for_value(self, day_key: int, value: int) -> RankSummary:
        """Rank a hypothetical ``value`` against the draws of ``day_key``."""

        self._store.ensure_schema()
        stmt = select(
            func.coalesce(func.sum(case((Draw.value > value, 1), else_=0)), 0),
            func.count(),
        ).where(Draw.day_key == day_key)
        with self._store.begin() as session:
            greater, total = session.execute(stmt).one()
        return RankSummary(rank=int(greater) + 1, total=int(total))


__all__ = ["RankCalculator", "RankSummary", "RankedDraw", "ranked_draw_statement"]
