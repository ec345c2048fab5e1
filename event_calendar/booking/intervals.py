# Minute-of-day time period class used for the implementation of the booking calendar
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List

logger = logging.getLogger(__name__)

DAY_MINUTES = 1440

# Bookings are free text ("09:00 a 11:00", "9:30 - 13:00 (boda)"), only the first two times count
TIME_TOKEN = re.compile(r"(\d{1,2}:\d{2})")


"""
Defined as a pair of minute offsets from midnight, [start, end).
"""
@dataclass(frozen=True)
class Interval:
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


def parse_time(time: str) -> int:
    """
    Converts an "HH:MM" token into minutes since midnight.
    No seconds, and 24:00 is never expected as input.
    """
    hours, minutes = time.split(':')
    return int(hours) * 60 + int(minutes)


def parse_occupancy(descriptors: Iterable[str]) -> List[Interval]:
    """
    Builds raw intervals from occupancy descriptors such as "10:00 a 12:00 (boda)".

    Descriptors with fewer than two time tokens are skipped.
    An end before the start means the event runs to the end of the day, so end is clamped to 1440.

    Returns: list of Interval in descriptor order, NOT merged.
    """
    intervals = []
    for descriptor in descriptors:
        times = TIME_TOKEN.findall(descriptor)
        if len(times) < 2:
            logger.debug("Skipping occupancy without a time range: %s", descriptor)
            continue
        start = parse_time(times[0])
        end = parse_time(times[1])
        if start >= DAY_MINUTES:
            logger.debug("Skipping occupancy starting past midnight: %s", descriptor)
            continue
        if end < start or end > DAY_MINUTES:
            end = DAY_MINUTES
        # Zero-length bookings occupy nothing and would split a free gap in two
        if end == start:
            continue
        intervals.append(Interval(start, end))
    return intervals


def merge(intervals: Iterable[Interval]) -> List[Interval]:
    """
    Reduces intervals to the minimal sorted, non-overlapping cover.
    Touching intervals (end == next start) are merged too, so for the result merged[i].end < merged[i+1].start.
    """
    ordered = sorted(intervals, key=lambda interval: interval.start)
    if not ordered:
        return []

    merged = []
    current = ordered[0]
    for following in ordered[1:]:
        if following.start <= current.end:
            current = Interval(current.start, max(current.end, following.end))
        else:
            merged.append(current)
            current = following
    merged.append(current)
    return merged


def merged_intervals(descriptors: Iterable[str]) -> List[Interval]:
    return merge(parse_occupancy(descriptors))
