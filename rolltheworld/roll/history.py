"""Per-participant draw history with rank and total for each day."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import aliased

from ..cache import LocalCache
from ..db.store import DrawStore
from ..errors import ConnectivityError
from ..models import Draw
from .streak import compute_streak

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 30


@dataclass(frozen=True)
class HistoryEntry:
    day: int
    value: int
    rank: int
    total: int


class HistoryService:
    """Reads a participant's recent draws, falling back to the cache offline."""

    def __init__(self, store: DrawStore, *, cache: Optional[LocalCache] = None) -> None:
        self._store = store
        self._cache = cache

    def fetch_history(
        self,
        participant_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> list[HistoryEntry]:
        """Return up to ``limit`` draws of ``participant_id``, newest day first.

        Each entry carries the competition rank and total of its own day as
        they stand now. If the store is unreachable, the last history cached
        for this participant is returned instead (empty if there is none).
        """

        if limit < 0:
            raise ValueError("limit must be non-negative")
        try:
            entries = self._query(participant_id, limit)
        except ConnectivityError as e:
            logger.warning(f"Store unreachable, serving cached history: {e}")
            cached = self._cache.get_cached_history(participant_id) if self._cache else None
            return (cached or [])[:limit]

        if self._cache is not None:
            self._cache.cache_history(participant_id, entries)
        return entries

    def current_streak(self, participant_id: str, limit: int = DEFAULT_HISTORY_LIMIT) -> int:
        history = self.fetch_history(participant_id, limit=limit)
        return compute_streak(history, self._store.today())

    def _query(self, participant_id: str, limit: int) -> list[HistoryEntry]:
        if limit == 0:
            return []
        self._store.ensure_schema()
        mine = aliased(Draw, name="mine")
        higher = aliased(Draw, name="higher")
        same_day = aliased(Draw, name="same_day")
        rank = (
            select(func.count())
            .select_from(higher)
            .where(higher.day_key == mine.day_key, higher.value > mine.value)
            .correlate(mine)
            .scalar_subquery()
        ) + 1
        total = (
            select(func.count())
            .select_from(same_day)
            .where(same_day.day_key == mine.day_key)
            .correlate(mine)
            .scalar_subquery()
        )
        stmt = (
            select(mine.day_key, mine.value, rank.label("rank"), total.label("total"))
            .where(mine.participant_id == participant_id)
            .order_by(mine.day_key.desc())
            .limit(limit)
        )
        with self._store.begin() as session:
            rows = session.execute(stmt).all()
        return [
            HistoryEntry(
                day=int(row.day_key),
                value=int(row.value),
                rank=int(row.rank),
                total=int(row.total),
            )
            for row in rows
        ]


__all__ = ["HistoryEntry", "HistoryService", "DEFAULT_HISTORY_LIMIT"]
