"""
Calendar helpers with an injectable "today".

Weeks are ISO weeks: Monday through Sunday.
"""

from datetime import date, timedelta
from typing import Callable, List, Optional


def start_of_iso_week(day: date) -> date:
    return day - timedelta(days=day.weekday())


def end_of_iso_week(day: date) -> date:
    return start_of_iso_week(day) + timedelta(days=6)


def is_same_iso_week(a: date, b: date) -> bool:
    return a.isocalendar()[:2] == b.isocalendar()[:2]


def week_days(day: date) -> List[date]:
    """The seven dates of the ISO week containing day"""
    monday = start_of_iso_week(day)
    return [monday + timedelta(days=i) for i in range(7)]


class Calendar:
    """Source of the current date; tests pass a fixed date"""

    def __init__(self, today: Optional[Callable[[], date]] = None, fixed: Optional[date] = None):
        if fixed is not None:
            self._today = lambda: fixed
        else:
            self._today = today or date.today

    def today(self) -> date:
        return self._today()

    def start_of_week(self, day: Optional[date] = None) -> date:
        return start_of_iso_week(day or self.today())

    def end_of_week(self, day: Optional[date] = None) -> date:
        return end_of_iso_week(day or self.today())

    def in_current_week(self, day: date) -> bool:
        return is_same_iso_week(day, self.today())
