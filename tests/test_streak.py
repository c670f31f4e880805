import unittest

from rolltheworld.roll import HistoryEntry, compute_legacy_streak, compute_streak

TODAY = 20240610


def history(*days):
    return [HistoryEntry(day=day, value=1, rank=1, total=1) for day in days]


class StreakTests(unittest.TestCase):
    def test_empty_history(self):
        self.assertEqual(compute_streak([], TODAY), 0)

    def test_run_ending_today(self):
        self.assertEqual(compute_streak(history(20240610, 20240609, 20240608), TODAY), 3)

    def test_run_ending_yesterday_is_kept(self):
        self.assertEqual(compute_streak(history(20240609, 20240608), TODAY), 2)

    def test_last_draw_older_than_yesterday(self):
        self.assertEqual(compute_streak(history(20240608, 20240607), TODAY), 0)

    def test_gap_ends_streak(self):
        self.assertEqual(compute_streak(history(20240610, 20240609, 20240607, 20240606), TODAY), 2)

    def test_run_across_month_boundary(self):
        days = history(20240602, 20240601, 20240531, 20240530)
        self.assertEqual(compute_streak(days, 20240602), 4)

    def test_single_draw_today(self):
        self.assertEqual(compute_streak(history(TODAY), TODAY), 1)


class LegacyStreakDiscrepancyTests(unittest.TestCase):
    """The first release moved its cursor twice after matching the day before."""

    def test_both_rules_agree_on_unbroken_run_ending_today(self):
        days = history(20240610, 20240609, 20240608)
        self.assertEqual(compute_legacy_streak(days, TODAY), compute_streak(days, TODAY))

    def test_both_rules_agree_on_unbroken_run_ending_yesterday(self):
        days = history(20240609, 20240608, 20240607)
        self.assertEqual(compute_streak(days, TODAY), 3)
        self.assertEqual(compute_legacy_streak(days, TODAY), 3)

    def test_legacy_rule_forgives_every_single_day_gap(self):
        days = history(20240610, 20240608, 20240606, 20240604)
        self.assertEqual(compute_streak(days, TODAY), 1)
        self.assertEqual(compute_legacy_streak(days, TODAY), 4)

    def test_legacy_rule_tolerates_single_gaps(self):
        days = history(20240610, 20240608, 20240605)
        self.assertEqual(compute_streak(days, TODAY), 1)
        self.assertEqual(compute_legacy_streak(days, TODAY), 2)


if __name__ == "__main__":
    unittest.main()
