import unittest
import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from event_calendar.booking.intervals import Interval, merge, merged_intervals, parse_occupancy, parse_time


class ParseTimeTest(unittest.TestCase):
    def test_parse_time(self):
        self.assertEqual(parse_time("00:00"), 0)
        self.assertEqual(parse_time("09:00"), 540)
        self.assertEqual(parse_time("9:30"), 570)
        self.assertEqual(parse_time("23:59"), 1439)


class ParseOccupancyTest(unittest.TestCase):
    def test_single_range(self):
        self.assertEqual(parse_occupancy(["09:00 a 11:00"]), [Interval(540, 660)])

    def test_descriptor_with_event_type(self):
        self.assertEqual(parse_occupancy(["10:00 a 12:00 (boda)"]), [Interval(600, 720)])

    def test_end_before_start_runs_to_end_of_day(self):
        self.assertEqual(parse_occupancy(["22:00 a 06:00"]), [Interval(1320, 1440)])

    def test_descriptor_without_two_times_is_skipped(self):
        self.assertEqual(parse_occupancy(["todo el día (boda)", "desde las 18:00 (cumple)"]), [])

    def test_only_first_two_times_count(self):
        self.assertEqual(parse_occupancy(["10:00 a 12:00 y 15:00 a 16:00"]), [Interval(600, 720)])

    def test_zero_length_range_is_skipped(self):
        self.assertEqual(parse_occupancy(["10:00 a 10:00"]), [])

    def test_start_past_midnight_is_skipped(self):
        self.assertEqual(parse_occupancy(["25:00 a 26:00"]), [])

    def test_end_past_midnight_is_clamped(self):
        self.assertEqual(parse_occupancy(["20:00 a 25:00"]), [Interval(1200, 1440)])

    def test_keeps_descriptor_order(self):
        self.assertEqual(parse_occupancy(["13:00 a 14:00", "10:00 a 12:00"]),
                         [Interval(780, 840), Interval(600, 720)])


class MergeTest(unittest.TestCase):
    def assert_strictly_separated(self, merged):
        for current, following in zip(merged, merged[1:]):
            self.assertLess(current.end, following.start)

    def test_empty(self):
        self.assertEqual(merge([]), [])

    def test_singleton_returns_itself(self):
        self.assertEqual(merge([Interval(540, 660)]), [Interval(540, 660)])

    def test_overlapping_intervals_merge(self):
        merged = merge([Interval(600, 720), Interval(660, 780)])
        self.assertEqual(merged, [Interval(600, 780)])

    def test_touching_intervals_merge(self):
        merged = merge([Interval(600, 720), Interval(720, 840)])
        self.assertEqual(merged, [Interval(600, 840)])

    def test_contained_interval_is_absorbed(self):
        merged = merge([Interval(600, 900), Interval(660, 720)])
        self.assertEqual(merged, [Interval(600, 900)])

    def test_unsorted_input_is_sorted(self):
        merged = merge([Interval(900, 960), Interval(60, 120), Interval(600, 700), Interval(650, 800)])
        self.assertEqual(merged, [Interval(60, 120), Interval(600, 800), Interval(900, 960)])
        self.assert_strictly_separated(merged)

    def test_merge_is_idempotent(self):
        merged = merge([Interval(0, 30), Interval(20, 90), Interval(100, 200), Interval(200, 210), Interval(500, 510)])
        self.assertEqual(merge(merged), merged)
        self.assert_strictly_separated(merged)

    def test_input_is_not_mutated(self):
        intervals = [Interval(660, 780), Interval(600, 720)]
        merge(intervals)
        self.assertEqual(intervals, [Interval(660, 780), Interval(600, 720)])

    def test_merged_intervals_from_descriptors(self):
        descriptors = ["10:00 a 12:00 (boda)", "13:00 a 14:00 (cumple)", "11:00 a 12:30 (xv)"]
        self.assertEqual(merged_intervals(descriptors), [Interval(600, 750), Interval(780, 840)])


if __name__ == '__main__':
    unittest.main()
