# Availability engine: month/day filtering of stored bookings and the per-day view state for the grid
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from . import calendar as booking_calendar
from .database import Booking, BookingStore
from .intervals import merged_intervals
from .occupancy import DayDensity, classify, occupancy_ratio
from .slots import Slot, available_slots

logger = logging.getLogger(__name__)

# Sparse day -> ["<time> (<type>)", ...] mapping, only days with at least one booking are present
DayOccupancy = Dict[int, List[str]]


def parse_booking_date(value: str):
    """
    Splits a "DD/MM/YYYY" booking date into (day, 0-indexed month, year).
    Returns None when the value does not have exactly three numeric parts.
    """
    parts = value.split('/')
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(part) for part in parts)
    except ValueError:
        return None
    return day, month - 1, year


def format_selected_date(year: int, month: int, day: int) -> str:
    """Fixed DD/MM/YYYY format for a 0-indexed month, independent of locale."""
    return f"{day:02d}/{month + 1:02d}/{year}"


@dataclass(frozen=True)
class DayView:
    day: int
    date_label: str
    ratio: float
    density: DayDensity
    occupancy: List[str] = field(default_factory=list)
    is_unavailable: bool = False
    is_partially_available: bool = False
    is_today: bool = False

    def to_dict(self):
        return {
            "day": self.day,
            "date": self.date_label,
            "ratio": self.ratio,
            "density": self.density.value,
            "colors": self.density.colors,
            "occupancy": list(self.occupancy),
            "unavailable": self.is_unavailable,
            "partially_available": self.is_partially_available,
            "today": self.is_today,
        }


@dataclass(frozen=True)
class MonthView:
    month: booking_calendar.CalendarMonth
    days: List[DayView]

    @property
    def unavailable_days(self) -> List[int]:
        return [view.day for view in self.days if view.is_unavailable]

    @property
    def partially_available_days(self) -> List[int]:
        return [view.day for view in self.days if view.is_partially_available]

    def to_dict(self):
        data = self.month.to_dict()
        data["days"] = [view.to_dict() for view in self.days]
        data["unavailable_days"] = self.unavailable_days
        data["partially_available_days"] = self.partially_available_days
        return data


class AvailabilityService:
    """
    Recomputes everything from a fresh read of the store on each call, nothing is cached.

    blackout_dates are days blocked by the administrator independent of bookings.
    """

    def __init__(self, store: BookingStore, blackout_dates: Iterable[date] = ()):
        self.store = store
        self.blackout_dates = frozenset(blackout_dates)

    def get_bookings(self) -> List[Booking]:
        return self.store.list()

    def add_booking(self, booking: Booking) -> None:
        self.store.append(booking)

    def unavailable_days(self, month: int, year: int) -> List[int]:
        return sorted(blocked.day for blocked in self.blackout_dates
                      if blocked.month - 1 == month and blocked.year == year)

    def partial_occupancy(self, month: int, year: int) -> DayOccupancy:
        occupancy = {}
        for booking in self.get_bookings():
            parsed = parse_booking_date(booking.date)
            if parsed is None:
                logger.debug("Skipping booking with malformed date: %s", booking.date)
                continue
            booking_day, booking_month, booking_year = parsed
            if booking_month == month and booking_year == year:
                occupancy.setdefault(booking_day, []).append(f"{booking.time} ({booking.type})")
        return occupancy

    def partially_available_days(self, month: int, year: int) -> List[int]:
        return sorted(self.partial_occupancy(month, year))

    def day_ratio(self, year: int, month: int, day: int) -> float:
        descriptors = self.partial_occupancy(month, year).get(day, [])
        return occupancy_ratio(merged_intervals(descriptors))

    def day_density(self, year: int, month: int, day: int) -> DayDensity:
        blocked = day in self.unavailable_days(month, year)
        return classify(self.day_ratio(year, month, day), blocked=blocked)

    def available_slots(self, year: int, month: int, day: int) -> Optional[List[Slot]]:
        """
        Slots still bookable on a day.

        Returns: None for a blackout day since it cannot be selected, otherwise a list that may be empty.
        """
        if day in self.unavailable_days(month, year):
            return None
        descriptors = self.partial_occupancy(month, year).get(day, [])
        return available_slots(descriptors)

    def month_view(self, calendar_month: booking_calendar.CalendarMonth, today: date = None) -> MonthView:
        """
        Assembles the per-day state the grid renders for one displayed month.
        Reads the store once for the whole month.
        """
        today = today or date.today()
        year, month = calendar_month.year, calendar_month.month
        unavailable = set(self.unavailable_days(month, year))
        occupancy = self.partial_occupancy(month, year)

        days = []
        for day in calendar_month.days:
            descriptors = occupancy.get(day, [])
            ratio = occupancy_ratio(merged_intervals(descriptors))
            days.append(DayView(
                day=day,
                date_label=format_selected_date(year, month, day),
                ratio=ratio,
                density=classify(ratio, blocked=day in unavailable),
                occupancy=descriptors,
                is_unavailable=day in unavailable,
                is_partially_available=day in occupancy,
                is_today=calendar_month.contains(today) and today.day == day,
            ))
        return MonthView(calendar_month, days)
