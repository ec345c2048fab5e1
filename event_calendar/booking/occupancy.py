# Day occupancy ratio and the density tier used to colour calendar days
from enum import Enum
from typing import Sequence

from .intervals import DAY_MINUTES, Interval

GREEN = ('rgba(16, 185, 129, 0.2)', 'rgba(16, 185, 129, 0.5)')
AMBER = ('rgba(245, 158, 11, 0.3)', 'rgba(245, 158, 11, 0.6)')
RED = ('rgba(239, 68, 68, 0.4)', 'rgba(239, 68, 68, 0.7)')

# Exclusive upper bounds
LOW_LIMIT = 0.3
MEDIUM_LIMIT = 0.6


class DayDensity(Enum):
    """
    Coarse occupancy tier for a day.
    BLOCKED has no colours so the grid renders it apart from every other tier.
    """
    FREE = 'free'
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    BLOCKED = 'blocked'

    @property
    def background(self) -> str:
        return DENSITY_COLORS[self][0]

    @property
    def border(self) -> str:
        return DENSITY_COLORS[self][1]

    @property
    def colors(self):
        return {"bg": self.background, "border": self.border}


# (background, border) pairs consumed by the grid
DENSITY_COLORS = {
    DayDensity.FREE: GREEN,
    DayDensity.LOW: GREEN,
    DayDensity.MEDIUM: AMBER,
    DayDensity.HIGH: RED,
    DayDensity.BLOCKED: ('', ''),
}


def occupancy_ratio(merged: Sequence[Interval]) -> float:
    """
    Share of the day covered by already merged intervals, in [0, 1].
    """
    occupied_minutes = sum(interval.end - interval.start for interval in merged)
    return occupied_minutes / DAY_MINUTES


def classify(ratio: float, blocked: bool = False) -> DayDensity:
    """
    Maps an occupancy ratio to a density tier. An administratively blocked day is always BLOCKED.
    """
    if blocked:
        return DayDensity.BLOCKED
    if ratio <= 0:
        return DayDensity.FREE
    if ratio < LOW_LIMIT:
        return DayDensity.LOW
    if ratio < MEDIUM_LIMIT:
        return DayDensity.MEDIUM
    return DayDensity.HIGH
