"""
Hours Aggregator for the Shift Grid

Weekly worked and remaining hours per employee. Everything is recomputed
from the shift list and the current selection on each call, so repeated
rounding never accumulates.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .calendar_utils import is_same_iso_week, week_days
from .intervals import merge
from .models import Employee, Shift
from .selection import SelectionModel
from .time_grid import TimeSlotGrid, span_minutes

logger = logging.getLogger(__name__)

DEFAULT_MAX_WEEKLY_HOURS = 40
DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass(frozen=True)
class WeeklyHours:
    max_weekly_hours: float
    worked_hours: float
    remaining_hours: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "maxWeeklyHours": self.max_weekly_hours,
            "workedHours": self.worked_hours,
            "remainingHours": self.remaining_hours
        }


def shift_hours(shift: Shift) -> float:
    return span_minutes(shift.start_time, shift.end_time) / 60


def pending_hours(selected_slots: Iterable[str], grid: TimeSlotGrid) -> float:
    """Hours the current selection would add once committed"""
    intervals = merge(selected_slots, grid.slots, grid.quantum_minutes)
    return sum(interval.duration_minutes for interval in intervals) / 60


def selection_hours(employee_id: int, selection: SelectionModel, reference_date: date) -> float:
    """
    Hours the employee's selected runs would add to the ISO week of
    reference_date. Runs dated in another week add nothing.
    """
    grid = selection.grid
    minutes = 0
    for interval in merge(selection.selected(employee_id), grid.slots, grid.quantum_minutes):
        run_date = selection.date + timedelta(days=interval.day_offset)
        if is_same_iso_week(run_date, reference_date):
            minutes += interval.duration_minutes
    return minutes / 60


def weekly_hours(employee: Employee, reference_date: date, committed_shifts: Iterable[Shift],
                 pending_selection: Union[SelectionModel, Iterable[str], None] = None,
                 grid: Optional[TimeSlotGrid] = None) -> WeeklyHours:
    """
    Worked and remaining hours of one employee for the ISO week of reference_date.

    pending_selection may be a SelectionModel (its grid is used) or the bare
    slot labels of this employee, in which case grid is required.
    """
    max_hours = employee.max_hours_per_week or DEFAULT_MAX_WEEKLY_HOURS

    worked_minutes = 0
    for shift in committed_shifts:
        if shift.employee_id == employee.id and is_same_iso_week(shift.date, reference_date):
            worked_minutes += span_minutes(shift.start_time, shift.end_time)
    worked = worked_minutes / 60

    if isinstance(pending_selection, SelectionModel):
        worked += selection_hours(employee.id, pending_selection, reference_date)
    elif pending_selection:
        if grid is None:
            raise ValueError("A grid is required to merge bare slot labels")
        worked += pending_hours(pending_selection, grid)

    return WeeklyHours(
        max_weekly_hours=max_hours,
        worked_hours=round(worked, 2),
        remaining_hours=round(max(0, max_hours - worked), 2)
    )


class HoursAggregator:
    """Read-side weekly hour views over a roster"""

    def __init__(self, employees: Sequence[Employee]):
        self.employees = list(employees)
        self._by_id = {emp.id: emp for emp in self.employees}

    def employee(self, employee_id: int) -> Employee:
        try:
            return self._by_id[employee_id]
        except KeyError:
            raise KeyError(f"Unknown employee {employee_id}") from None

    def weekly_hours(self, employee_id: int, reference_date: date, committed_shifts: Iterable[Shift],
                     pending_selection: Union[SelectionModel, Iterable[str], None] = None,
                     grid: Optional[TimeSlotGrid] = None) -> WeeklyHours:
        return weekly_hours(self.employee(employee_id), reference_date, committed_shifts,
                            pending_selection, grid)

    def all_weekly_hours(self, reference_date: date, committed_shifts: Sequence[Shift],
                         pending_selection: Optional[SelectionModel] = None) -> Dict[int, WeeklyHours]:
        return {
            emp.id: weekly_hours(emp, reference_date, committed_shifts, pending_selection)
            for emp in self.employees
        }

    def weekly_hours_table(self, reference_date: date, committed_shifts: Sequence[Shift]) -> pd.DataFrame:
        """
        Hours per employee for each day of the ISO week, plus totals.

        Only committed shifts are counted; a shift belongs to the day it
        starts on.
        """
        days = week_days(reference_date)
        rows: List[Dict] = []
        for emp in self.employees:
            row = {"Employee": emp.name}
            for name, day in zip(DAY_NAMES, days):
                minutes = sum(
                    span_minutes(s.start_time, s.end_time)
                    for s in committed_shifts
                    if s.employee_id == emp.id and s.date == day
                )
                row[name] = round(minutes / 60, 2)
            row["Total"] = round(sum(row[name] for name in DAY_NAMES), 2)
            max_hours = emp.max_hours_per_week or DEFAULT_MAX_WEEKLY_HOURS
            row["Max"] = max_hours
            row["Remaining"] = round(max(0, max_hours - row["Total"]), 2)
            rows.append(row)

        logger.debug(f"Built weekly hours table for week of {days[0].isoformat()} "
                     f"with {len(rows)} employees")
        return pd.DataFrame(rows, columns=["Employee"] + DAY_NAMES + ["Total", "Max", "Remaining"])
