"""
Calendar grid for the event booking widget

Problem:

Given a (year, month), the widget needs to lay out the month as a grid starting on Sunday,
and move to the previous / next month without carrying stale derived state.

Input: year and 0-indexed month (0 = January)
Output: CalendarMonth with the leading blank cells and the number of days

Navigation never mutates a CalendarMonth, previous() and next() build a new one.
"""
import calendar
from dataclasses import dataclass
from datetime import date

MONTH_NAMES = ('enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio', 'julio',
               'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre')


@dataclass(frozen=True)
class CalendarMonth:
    year: int
    month: int
    leading_blank_count: int
    day_count: int

    @property
    def days(self):
        return list(range(1, self.day_count + 1))

    @property
    def title(self) -> str:
        return f"{MONTH_NAMES[self.month]} de {self.year}"

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month - 1 == self.month

    def previous(self) -> 'CalendarMonth':
        if self.month == 0:
            return build(self.year - 1, 11)
        return build(self.year, self.month - 1)

    def next(self) -> 'CalendarMonth':
        if self.month == 11:
            return build(self.year + 1, 0)
        return build(self.year, self.month + 1)

    def to_dict(self):
        return {
            "year": self.year,
            "month": self.month,
            "title": self.title,
            "leading_blank_count": self.leading_blank_count,
            "day_count": self.day_count,
        }


def build(year: int, month: int) -> CalendarMonth:
    """
    Derives the grid layout for a month.

    Input: year and 0-indexed month.

    Returns: CalendarMonth. leading_blank_count is the weekday of the 1st with Sunday as 0.
    Raises ValueError for a month outside 0..11.
    """
    if not 0 <= month <= 11:
        raise ValueError(f"month must be between 0 and 11, got {month}")
    # calendar.monthrange counts weekdays from Monday = 0
    first_weekday, day_count = calendar.monthrange(year, month + 1)
    leading_blank_count = (first_weekday + 1) % 7
    return CalendarMonth(year, month, leading_blank_count, day_count)


def current(today: date = None) -> CalendarMonth:
    today = today or date.today()
    return build(today.year, today.month - 1)
