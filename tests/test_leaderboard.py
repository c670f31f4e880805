from __future__ import annotations

import unittest

from rolltheworld.db.engine import make_engine
from rolltheworld.db.store import DrawStore
from rolltheworld.errors import NotFoundError
from rolltheworld.models import Draw, Participant
from rolltheworld.roll import LeaderboardEntry, LeaderboardService

DAY = 20240601


class LeaderboardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        self.store = DrawStore(engine=self.engine, population=lambda day: 1000, clock=lambda: DAY)
        self.store.ensure_schema()
        self.leaderboard = LeaderboardService(self.store)

    def tearDown(self) -> None:
        self.engine.dispose()

    def _seed(self, day: int, values: dict[str, int]) -> None:
        with self.store.begin() as session:
            for pid, value in values.items():
                if Participant.get(session, pid) is None:
                    session.add(Participant(pid, created_at=1))
                    session.flush()
                session.add(Draw(pid, day, value, created_at=1))

    def _seed_ladder(self, count: int) -> None:
        # p00 has the highest value, p<count-1> the lowest.
        self._seed(DAY, {f"p{i:02d}": 1000 - i for i in range(count)})

    def test_top_orders_by_value_with_dense_ranks(self) -> None:
        self._seed(DAY, {"a": 5, "b": 90, "c": 40, "d": 40, "e": 7})

        top = self.leaderboard.top(DAY)

        self.assertEqual([e.value for e in top], [90, 40, 40, 7, 5])
        self.assertEqual([e.rank for e in top], [1, 2, 3, 4, 5])

    def test_ties_are_broken_by_identity(self) -> None:
        self._seed(DAY, {"zed": 40, "amy": 40, "kim": 40})

        top = self.leaderboard.top(DAY)

        self.assertEqual(
            top,
            [
                LeaderboardEntry("amy", 40, 1),
                LeaderboardEntry("kim", 40, 2),
                LeaderboardEntry("zed", 40, 3),
            ],
        )

    def test_top_limit(self) -> None:
        self._seed_ladder(15)
        self.assertEqual([e.rank for e in self.leaderboard.top(DAY, 4)], [1, 2, 3, 4])
        self.assertEqual(self.leaderboard.top(DAY, 0), [])
        self.assertEqual(len(self.leaderboard.top(DAY, 100)), 15)
        with self.assertRaises(ValueError):
            self.leaderboard.top(DAY, -1)

    def test_top_of_empty_day(self) -> None:
        self.assertEqual(self.leaderboard.top(DAY), [])

    def test_top_only_covers_requested_day(self) -> None:
        self._seed(DAY, {"a": 1})
        self._seed(DAY + 1, {"a": 2, "b": 3})
        self.assertEqual(self.leaderboard.top(DAY), [LeaderboardEntry("a", 1, 1)])

    def test_around_middle(self) -> None:
        self._seed_ladder(30)

        window = self.leaderboard.around(DAY, "p15", radius=3)

        self.assertEqual([e.rank for e in window], list(range(13, 20)))
        self.assertEqual([e.identity for e in window], [f"p{i:02d}" for i in range(12, 19)])

    def test_around_clamps_at_both_ends(self) -> None:
        self._seed_ladder(30)

        head = self.leaderboard.around(DAY, "p01", radius=10)
        tail = self.leaderboard.around(DAY, "p28", radius=10)

        self.assertEqual([e.rank for e in head], list(range(1, 13)))
        self.assertEqual([e.rank for e in tail], list(range(19, 31)))

    def test_around_is_contiguous_slice_of_full_ordering(self) -> None:
        self._seed(DAY, {f"p{i:02d}": (i * 37) % 11 + 1 for i in range(25)})
        full = self.leaderboard.top(DAY, 25)

        for entry in full:
            window = self.leaderboard.around(DAY, entry.identity, radius=4)
            self.assertLessEqual(len(window), 9)
            self.assertIn(entry, window)
            start = window[0].rank - 1
            self.assertEqual(window, full[start : start + len(window)])

    def test_around_radius_zero(self) -> None:
        self._seed_ladder(5)
        self.assertEqual(self.leaderboard.around(DAY, "p02", radius=0), [LeaderboardEntry("p02", 998, 3)])

    def test_around_without_draw(self) -> None:
        self._seed_ladder(5)
        with self.assertRaises(NotFoundError):
            self.leaderboard.around(DAY, "nobody")
        with self.assertRaises(NotFoundError):
            self.leaderboard.around(DAY + 1, "p00")

    def test_negative_radius(self) -> None:
        with self.assertRaises(ValueError):
            self.leaderboard.around(DAY, "p00", radius=-1)


if __name__ == "__main__":
    unittest.main()
