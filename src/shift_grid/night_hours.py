"""
Night Hours Calculator for the Shift Grid

Overlap of each shift with the fixed night window [22:00, 06:00). A shift's
date carries two windows: the early-morning tail of the previous night
(00:00-06:00) and the night starting at 22:00.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from .models import Shift
from .time_grid import MINUTES_PER_DAY, span_minutes, time_to_minutes

logger = logging.getLogger(__name__)

NIGHT_START_MINUTES = 22 * 60
NIGHT_END_MINUTES = 6 * 60
FULL_NIGHT_HOURS = 8.0

# Windows in minutes relative to midnight at the start of the shift's date
_NIGHT_WINDOWS = (
    (NIGHT_START_MINUTES - MINUTES_PER_DAY, NIGHT_END_MINUTES),
    (NIGHT_START_MINUTES, MINUTES_PER_DAY + NIGHT_END_MINUTES),
)


class NightCase(Enum):
    INSIDE = "a"            # fully inside the window
    ENDS_INSIDE = "b"       # starts before 22:00, ends inside
    STARTS_INSIDE = "c"     # starts inside, ends after 06:00
    FULL_NIGHT = "d"        # runs past midnight and past 06:00


@dataclass(frozen=True)
class NightShiftDetail:
    shift_id: int
    employee_id: int
    date: date
    start_time: str
    end_time: str
    hours: float
    case: NightCase
    cases: Tuple[NightCase, ...]


@dataclass(frozen=True)
class NightHoursReport:
    total_hours: float
    per_shift_detail: Tuple[NightShiftDetail, ...]

    def to_frame(self) -> pd.DataFrame:
        """Detail rows as a DataFrame, one row per shift with night hours"""
        columns = ["shift_id", "employee_id", "date", "start_time", "end_time", "hours", "case"]
        rows = [
            {
                "shift_id": d.shift_id,
                "employee_id": d.employee_id,
                "date": d.date,
                "start_time": d.start_time,
                "end_time": d.end_time,
                "hours": d.hours,
                "case": d.case.value
            }
            for d in self.per_shift_detail
        ]
        return pd.DataFrame(rows, columns=columns)


def _classify(start: int, end: int, window: Tuple[int, int]) -> NightCase:
    window_start, window_end = window
    if start >= window_start and end <= window_end:
        return NightCase.INSIDE
    if start < window_start:
        return NightCase.ENDS_INSIDE
    return NightCase.STARTS_INSIDE


def shift_night_overlap(shift: Shift) -> Optional[Tuple[float, Tuple[NightCase, ...]]]:
    """
    Night hours of a single shift and the case of each window it touches.

    A shift crossing midnight and ending after 06:00 is credited a full
    night of 8 hours. Returns None when the shift has no night overlap.
    """
    length = span_minutes(shift.start_time, shift.end_time)
    if length == 0:
        return None

    if shift.crosses_midnight and time_to_minutes(shift.end_time) > NIGHT_END_MINUTES:
        return FULL_NIGHT_HOURS, (NightCase.FULL_NIGHT,)

    start = time_to_minutes(shift.start_time)
    end = start + length
    minutes = 0
    cases = []
    for window in _NIGHT_WINDOWS:
        overlap = min(end, window[1]) - max(start, window[0])
        if overlap > 0:
            minutes += overlap
            cases.append(_classify(start, end, window))

    if minutes == 0:
        return None
    return minutes / 60, tuple(cases)


def night_hours(employee_id: Optional[int], period_start: date, period_end: date,
                shifts: Iterable[Shift]) -> NightHoursReport:
    """
    Night hours of one employee (or everyone, with None) for shifts dated
    within [period_start, period_end].
    """
    details: List[NightShiftDetail] = []
    for shift in sorted(shifts, key=lambda s: (s.date, s.start_time, s.id)):
        if employee_id is not None and shift.employee_id != employee_id:
            continue
        if not period_start <= shift.date <= period_end:
            continue
        overlap = shift_night_overlap(shift)
        if overlap is None:
            continue
        hours, cases = overlap
        details.append(NightShiftDetail(
            shift_id=shift.id,
            employee_id=shift.employee_id,
            date=shift.date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            hours=round(hours, 2),
            case=cases[0],
            cases=cases
        ))

    total = round(sum(d.hours for d in details), 2)
    logger.debug(f"Night hours for employee {employee_id} between {period_start} and {period_end}: "
                 f"{total}h over {len(details)} shifts")
    return NightHoursReport(total_hours=total, per_shift_detail=tuple(details))


class NightHoursCalculator:
    """Night hour reports over a fixed shift list"""

    def __init__(self, shifts: Iterable[Shift] = ()):
        self.shifts = list(shifts)

    def night_hours(self, employee_id: Optional[int], period_start: date, period_end: date,
                    shifts: Optional[Iterable[Shift]] = None) -> NightHoursReport:
        return night_hours(employee_id, period_start, period_end,
                           self.shifts if shifts is None else shifts)
