import unittest
import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from event_calendar.booking.intervals import Interval
from event_calendar.booking.occupancy import DayDensity, classify, occupancy_ratio


class OccupancyRatioTest(unittest.TestCase):
    def test_empty_day(self):
        self.assertEqual(occupancy_ratio([]), 0)

    def test_full_day(self):
        self.assertEqual(occupancy_ratio([Interval(0, 1440)]), 1)

    def test_partial_day(self):
        self.assertAlmostEqual(occupancy_ratio([Interval(600, 720), Interval(780, 840)]), 180 / 1440)

    def test_ratio_is_zero_only_without_intervals(self):
        self.assertGreater(occupancy_ratio([Interval(600, 601)]), 0)


class ClassifyTest(unittest.TestCase):
    def test_tiers(self):
        self.assertEqual(classify(0), DayDensity.FREE)
        self.assertEqual(classify(0.1), DayDensity.LOW)
        self.assertEqual(classify(0.3), DayDensity.MEDIUM)
        self.assertEqual(classify(0.59), DayDensity.MEDIUM)
        self.assertEqual(classify(0.6), DayDensity.HIGH)
        self.assertEqual(classify(1), DayDensity.HIGH)

    def test_blocked_overrides_ratio(self):
        self.assertEqual(classify(0, blocked=True), DayDensity.BLOCKED)
        self.assertEqual(classify(0.9, blocked=True), DayDensity.BLOCKED)

    def test_colors(self):
        self.assertEqual(DayDensity.FREE.colors, DayDensity.LOW.colors)
        self.assertEqual(DayDensity.MEDIUM.background, 'rgba(245, 158, 11, 0.3)')
        self.assertEqual(DayDensity.HIGH.border, 'rgba(239, 68, 68, 0.7)')
        self.assertEqual(DayDensity.BLOCKED.colors, {"bg": "", "border": ""})

    def test_free_and_low_are_distinct_members(self):
        self.assertIsNot(DayDensity.FREE, DayDensity.LOW)
        self.assertEqual(len(DayDensity), 5)


if __name__ == '__main__':
    unittest.main()
