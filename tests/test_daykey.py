import unittest
from datetime import date, datetime, timedelta, timezone

from rolltheworld.daykey import (
    date_to_day_key,
    day_key_to_date,
    format_day_key,
    is_utc_same_day,
    shift_day_key,
    today_day_key,
)


class DayKeyConversionTests(unittest.TestCase):
    def test_date_round_trip(self):
        self.assertEqual(date_to_day_key(date(2024, 6, 1)), 20240601)
        self.assertEqual(day_key_to_date(20240601), date(2024, 6, 1))

    def test_aware_datetime_is_converted_to_utc(self):
        tokyo = timezone(timedelta(hours=9))
        # 2024-06-01 08:00 in Tokyo is still May 31st in UTC.
        self.assertEqual(date_to_day_key(datetime(2024, 6, 1, 8, 0, tzinfo=tokyo)), 20240531)

    def test_naive_datetime_is_taken_as_utc(self):
        self.assertEqual(date_to_day_key(datetime(2024, 6, 1, 23, 59)), 20240601)

    def test_today_uses_given_now(self):
        now = datetime(2025, 1, 2, 3, 4, tzinfo=timezone.utc)
        self.assertEqual(today_day_key(now), 20250102)

    def test_order_matches_calendar(self):
        self.assertLess(20231231, 20240101)
        self.assertLess(date_to_day_key(date(2024, 1, 31)), date_to_day_key(date(2024, 2, 1)))


class DayKeyArithmeticTests(unittest.TestCase):
    def test_shift_across_month_and_year(self):
        self.assertEqual(shift_day_key(20240301, -1), 20240229)
        self.assertEqual(shift_day_key(20230301, -1), 20230228)
        self.assertEqual(shift_day_key(20231231, 1), 20240101)
        self.assertEqual(shift_day_key(20240101, -2), 20231230)

    def test_shift_by_zero_is_identity(self):
        self.assertEqual(shift_day_key(20240615, 0), 20240615)

    def test_format(self):
        self.assertEqual(format_day_key(20240601), "2024-06-01")

    def test_invalid_day_key_raises(self):
        with self.assertRaises(ValueError):
            day_key_to_date(20241301)
        with self.assertRaises(ValueError):
            day_key_to_date(20240230)
        with self.assertRaises(ValueError):
            day_key_to_date(0)
        with self.assertRaises(ValueError):
            day_key_to_date("20240601")  # type: ignore[arg-type]

    def test_is_utc_same_day(self):
        a = datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)
        b = datetime(2024, 6, 1, 23, 59, tzinfo=timezone.utc)
        c = datetime(2024, 6, 2, 0, 0, tzinfo=timezone.utc)
        self.assertTrue(is_utc_same_day(a, b))
        self.assertFalse(is_utc_same_day(b, c))


if __name__ == "__main__":
    unittest.main()
