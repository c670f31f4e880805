"""Daily draw engine, ranking, leaderboards, history and streaks."""

from .engine import DrawEngine, RollResult, uniform_sampler
from .history import HistoryEntry, HistoryService
from .leaderboard import LeaderboardEntry, LeaderboardService
from .ranking import RankCalculator, RankedDraw, RankSummary
from .streak import compute_legacy_streak, compute_streak

__all__ = [
    "DrawEngine",
    "RollResult",
    "uniform_sampler",
    "HistoryEntry",
    "HistoryService",
    "LeaderboardEntry",
    "LeaderboardService",
    "RankCalculator",
    "RankedDraw",
    "RankSummary",
    "compute_streak",
    "compute_legacy_streak",
]
