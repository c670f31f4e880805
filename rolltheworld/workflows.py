from dataclasses import dataclass, field
from typing import Optional

from .cache import LocalCache
from .config import Settings
from .db.store import DrawStore
from .identity import IdentityProvider
from .kv import KeyValueStore, SqlKeyValueStore
from .roll.engine import DrawEngine, RollResult, Sampler
from .roll.history import DEFAULT_HISTORY_LIMIT, HistoryEntry, HistoryService
from .roll.leaderboard import (
    DEFAULT_RADIUS,
    DEFAULT_TOP_LIMIT,
    LeaderboardEntry,
    LeaderboardService,
)
from .roll.ranking import RankCalculator
from .roll.streak import compute_streak


@dataclass
class RollClient:
    """Everything a single device needs to roll and browse leaderboards.

    Each method resolves the device identity and works on the store's
    current day. Errors propagate as described in :mod:`rolltheworld.errors`.
    """

    store: DrawStore
    cache: LocalCache
    identity_provider: IdentityProvider
    sampler: Optional[Sampler] = None
    ranking: RankCalculator = field(init=False)
    engine: DrawEngine = field(init=False)
    leaderboard: LeaderboardService = field(init=False)
    history_service: HistoryService = field(init=False)

    def __post_init__(self) -> None:
        self.ranking = RankCalculator(self.store)
        self.engine = DrawEngine(
            self.store, cache=self.cache, sampler=self.sampler, ranking=self.ranking
        )
        self.leaderboard = LeaderboardService(self.store)
        self.history_service = HistoryService(self.store, cache=self.cache)

    @property
    def identity(self) -> str:
        return self.identity_provider.resolve_identity()

    def roll(self) -> RollResult:
        return self.engine.perform_daily_roll(self.identity)

    def current_roll(self) -> Optional[RollResult]:
        return self.engine.get_current_roll(self.identity)

    def leaderboard_top(self, limit: int = DEFAULT_TOP_LIMIT) -> list[LeaderboardEntry]:
        return self.leaderboard.top(self.store.today(), limit)

    def leaderboard_around(self, radius: int = DEFAULT_RADIUS) -> list[LeaderboardEntry]:
        return self.leaderboard.around(self.store.today(), self.identity, radius)

    def history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]:
        return self.history_service.fetch_history(self.identity, limit)

    def streak(self, limit: int = DEFAULT_HISTORY_LIMIT) -> int:
        return compute_streak(self.history(limit), self.store.today())

    def reset_local_cache(self) -> None:
        """Forget the cached draw and history. The identity is kept."""
        self.cache.clear()


def open_client(
    settings: Optional[Settings] = None,
    *,
    kv: Optional[KeyValueStore] = None,
    store: Optional[DrawStore] = None,
) -> RollClient:
    """Build a :class:`RollClient` from ``settings`` (default: the environment).

    Nothing touches the draw store here; a missing endpoint is reported by
    the first call that needs it.
    """

    settings = settings or Settings.from_env()
    kv = kv or SqlKeyValueStore(settings.local_cache_url)
    return RollClient(
        store=store or DrawStore(settings),
        cache=LocalCache(kv),
        identity_provider=IdentityProvider(kv),
    )
