# Bookable slot generation for a selected day
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .intervals import DAY_MINUTES, Interval, merged_intervals

# Every event is booked in 2 hour blocks
SLOT_DURATION = 120


@dataclass(frozen=True)
class Slot:
    start: int
    end: int

    @property
    def label(self) -> str:
        return f"{minutes_to_time(self.start)} a {minutes_to_time(self.end)}"

    def to_dict(self):
        return {"start": self.start, "end": self.end, "label": self.label}


def minutes_to_time(minutes: int) -> str:
    """
    Renders minutes since midnight as 24-hour "HH:MM".
    Exactly 1440 renders as 23:59 so it is not read as 00:00 of the next day.
    Anything past that wraps with no day marker.
    """
    hours, mins = divmod(minutes, 60)
    if hours == 24 and mins == 0:
        return '23:59'
    if hours >= 24:
        hours -= 24
    return f"{hours:02d}:{mins:02d}"


def free_gaps(merged: Sequence[Interval]) -> List[Interval]:
    """
    Complement of already merged occupied intervals within [0, 1440).
    """
    gaps = []
    cursor = 0
    for interval in merged:
        if interval.start > cursor:
            gaps.append(Interval(cursor, interval.start))
        cursor = max(cursor, interval.end)
    if cursor < DAY_MINUTES:
        gaps.append(Interval(cursor, DAY_MINUTES))
    return gaps


def split_into_slots(gap: Interval, duration: int = SLOT_DURATION) -> List[Slot]:
    """
    Helper function that splits a free gap into consecutive fixed-length slots.
    Starts at the gap start and drops a trailing remainder shorter than *duration*.
    """
    slots = []
    current_start = gap.start
    while current_start + duration <= gap.end:
        slots.append(Slot(current_start, current_start + duration))
        current_start += duration
    return slots


def available_slots(descriptors: Iterable[str], duration: int = SLOT_DURATION) -> List[Slot]:
    """
    Bookable slots left on a day once its occupancy is subtracted.

    Input: the day's occupancy descriptors, e.g. ["10:00 a 12:00 (boda)"].

    Returns: list of Slot in chronological order, empty when nothing of at least *duration* is free.
    """
    gaps = free_gaps(merged_intervals(descriptors))
    slots = []
    for gap in gaps:
        if gap.duration < duration:
            continue
        slots.extend(split_into_slots(gap, duration))
    return slots
