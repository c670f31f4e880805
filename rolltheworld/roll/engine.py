"""Draw engine: one random draw per participant per day."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from ..cache import CachedDraw, LocalCache
from ..daykey import now_ms
from ..db.store import DrawStore, upsert_population
from ..db.utils import insert_ignore
from ..errors import ConnectivityError, IntegrityError
from ..models import Draw, Participant
from .ranking import RankCalculator, RankedDraw

logger = logging.getLogger(__name__)

Sampler = Callable[[int], int]


def uniform_sampler(population: int) -> int:
    """Draw uniformly from ``[1, population]``."""
    return secrets.randbelow(population) + 1


@dataclass(frozen=True)
class RollResult:
    """Outcome of a daily roll, as returned to callers.

    Attributes
    ----------
    day : int
        Day key the draw belongs to.
    value : int
        The participant's value for ``day``.
    rank : Optional[int]
        Competition rank at the time of reading. ``None`` only for cached
        results that were stored without a rank.
    total : Optional[int]
        Number of draws on ``day`` at the time of reading.
    from_cache : bool
        ``True`` when served from the local cache during an outage.
    """

    day: int
    value: int
    rank: Optional[int]
    total: Optional[int]
    from_cache: bool = False

    def to_cached(self) -> CachedDraw:
        return CachedDraw(day=self.day, value=self.value, rank=self.rank, total=self.total)

    @classmethod
    def from_cached(cls, cached: CachedDraw) -> "RollResult":
        return cls(
            day=cached.day,
            value=cached.value,
            rank=cached.rank,
            total=cached.total,
            from_cache=True,
        )


class DrawEngine:
    """Engine that inserts daily draws exactly once and reports their rank.

    Parameters
    ----------
    store : DrawStore
        Authoritative store. Its clock decides what "today" is.
    cache : Optional[LocalCache], default: None
        Local cache refreshed after every successful roll or lookup.
    sampler : Optional[Sampler], default: None
        Returns a value in ``[1, population]``. Defaults to a uniform draw
        from :mod:`secrets`.
    ranking : Optional[RankCalculator], default: None
        Rank calculator used for the read-back step.
    """

    def __init__(
        self,
        store: DrawStore,
        *,
        cache: Optional[LocalCache] = None,
        sampler: Optional[Sampler] = None,
        ranking: Optional[RankCalculator] = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._sampler = sampler or uniform_sampler
        self._ranking = ranking or RankCalculator(store)

    def perform_daily_roll(self, participant_id: str) -> RollResult:
        """Draw today's value for ``participant_id``, or return the existing one.

        The first successful call of the day inserts a draw; every later call
        is a no-op write that reads the stored draw back with its current
        rank and total.

        Parameters
        ----------
        participant_id : str
            Opaque identity of the caller.

        Returns
        -------
        RollResult
            Today's value, rank and total.

        Raises
        ------
        ConnectivityError
            If the store cannot be reached. The cache is never consulted.
        IntegrityError
            If the store reports a state the insert contradicts.
        ConfigurationError
            If the store endpoint or credential is missing.
        """

        if not participant_id:
            raise ValueError("participant_id must not be empty")

        self._store.ensure_schema()
        day = self._store.today()
        population = self._store.population_for(day)
        candidate = self._sampler(population)
        if not 1 <= candidate <= population:
            raise ValueError(f"sampled value {candidate} outside [1, {population}]")

        created = self.try_create_draw(participant_id, day, candidate, population)
        ranked = self.read_back(participant_id, day)
        if ranked is None:
            raise IntegrityError(
                "Draw insert succeeded but no draw was found on read-back"
                if created
                else "Draw reported as existing but no draw was found on read-back"
            )
        if created and ranked.value != candidate:
            raise IntegrityError(
                f"Stored value {ranked.value} differs from inserted value {candidate}"
            )

        result = RollResult(day=day, value=ranked.value, rank=ranked.rank, total=ranked.total)
        if created:
            logger.info(
                f"New draw for {participant_id[:8]} on {day}: rank {result.rank}/{result.total}"
            )
        else:
            logger.debug(f"Draw for {participant_id[:8]} on {day} already existed")
        self._remember(result)
        return result

    def try_create_draw(
        self,
        participant_id: str,
        day_key: int,
        value: int,
        population: int,
    ) -> bool:
        """Insert the draw unless one exists for ``(participant_id, day_key)``.

        The population bound and the participant row are upserted in the same
        transaction. Returns ``True`` only if this call created the draw;
        ``False`` means a draw was already stored and ``value`` was discarded.
        """

        created_at = now_ms()
        with self._store.begin() as session:
            dialect = session.get_bind().dialect.name
            upsert_population(session, day_key, population)
            session.execute(
                insert_ignore(
                    dialect,
                    Participant.__table__,
                    {"participant_id": participant_id, "created_at": created_at},
                )
            )
            result = session.execute(
                insert_ignore(
                    dialect,
                    Draw.__table__,
                    {
                        "participant_id": participant_id,
                        "day_key": day_key,
                        "value": value,
                        "created_at": created_at,
                    },
                )
            )
            return result.rowcount == 1

    def read_back(self, participant_id: str, day_key: int) -> Optional[RankedDraw]:
        """Authoritative read of the stored draw with its rank and total."""
        return self._ranking.lookup(day_key, participant_id)

    def get_current_roll(self, participant_id: str) -> Optional[RollResult]:
        """Return today's draw for ``participant_id`` without rolling.

        The store is asked first; on success the cache is refreshed. When the
        store is unreachable the cached draw is returned only if it belongs
        to today. ``None`` means no draw today (or none known offline).
        """

        day = self._store.today()
        try:
            ranked = self._ranking.lookup(day, participant_id)
        except ConnectivityError as e:
            logger.warning(f"Store unreachable, falling back to cached draw: {e}")
            cached = self._cache.get_cached_roll() if self._cache is not None else None
            if cached is not None and cached.day == day:
                return RollResult.from_cached(cached)
            return None

        if ranked is None:
            return None
        result = RollResult(day=day, value=ranked.value, rank=ranked.rank, total=ranked.total)
        self._remember(result)
        return result

    def _remember(self, result: RollResult) -> None:
        if self._cache is not None:
            self._cache.cache_last_roll(result.to_cached())


__all__ = ["DrawEngine", "RollResult", "Sampler", "uniform_sampler"]
