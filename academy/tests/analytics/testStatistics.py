from datetime import date

from django.test import SimpleTestCase

from academy.analytics.services import (
    calculate_current_streak,
    calculate_median,
    rows_to_csv,
    safe_percentage,
    score_distribution,
)


class StreakTests(SimpleTestCase):
    today = date(2024, 3, 10)

    def test_consecutive_days(self):
        days = [date(2024, 3, 8), date(2024, 3, 9), date(2024, 3, 10)]
        self.assertEqual(calculate_current_streak(days, self.today), 3)

    def test_gap_ends_streak(self):
        days = [date(2024, 3, 7), date(2024, 3, 9), date(2024, 3, 10)]
        self.assertEqual(calculate_current_streak(days, self.today), 2)

    def test_no_activity_today(self):
        days = [date(2024, 3, 8), date(2024, 3, 9)]
        self.assertEqual(calculate_current_streak(days, self.today), 0)

    def test_across_month_boundary(self):
        days = [date(2024, 2, 29), date(2024, 3, 1)]
        self.assertEqual(calculate_current_streak(days, date(2024, 3, 1)), 2)


class MedianTests(SimpleTestCase):
    def test_empty(self):
        self.assertEqual(calculate_median([]), 0)

    def test_odd(self):
        self.assertEqual(calculate_median([9, 1, 5]), 5)

    def test_even(self):
        self.assertEqual(calculate_median([10, 40, 20, 30]), 25)


class ScoreDistributionTests(SimpleTestCase):
    def counts(self, values):
        return {row["range"]: row["count"] for row in score_distribution(values)}

    def test_bins_in_order(self):
        ranges = [row["range"] for row in score_distribution([])]
        self.assertEqual(ranges, ["0-20", "21-40", "41-60", "61-80", "81-100"])

    def test_bin_edges(self):
        counts = self.counts([0, 20, 21, 60, 80, 81, 100])
        self.assertEqual(
            counts, {"0-20": 2, "21-40": 1, "41-60": 1, "61-80": 1, "81-100": 2}
        )

    def test_fraction_goes_to_upper_bin(self):
        self.assertEqual(self.counts([20.5])["21-40"], 1)

    def test_above_hundred(self):
        self.assertEqual(self.counts([120])["81-100"], 1)


class HelperTests(SimpleTestCase):
    def test_safe_percentage(self):
        self.assertEqual(safe_percentage(1, 4), 25.0)
        self.assertEqual(safe_percentage(3, 0), 0.0)

    def test_rows_to_csv(self):
        rows = [
            {"id": 1, "email": "a@academy.test", "department": None},
            {"id": 2, "email": "b@academy.test", "department": "CS"},
        ]
        self.assertEqual(
            rows_to_csv(rows),
            "id,email,department\n1,a@academy.test,\n2,b@academy.test,CS\n",
        )

    def test_rows_to_csv_quotes_commas(self):
        self.assertEqual(rows_to_csv([{"groups": "A, B"}]), 'groups\n"A, B"\n')

    def test_rows_to_csv_empty(self):
        self.assertEqual(rows_to_csv([]), "")
