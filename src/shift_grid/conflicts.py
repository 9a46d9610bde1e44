"""
Conflict Detector for the Shift Grid

Validates proposed or relocated intervals against an employee's committed
shifts. Ranges are placed on an absolute minute axis (date ordinal times
minutes per day) so shifts crossing midnight compare correctly with the
following day.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from .intervals import Interval
from .models import Shift, ShiftRequest
from .time_grid import MINUTES_PER_DAY, span_minutes, time_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictResult:
    """Outcome of a conflict check"""
    ok: bool
    with_shift_id: Optional[int] = None

    @property
    def conflict(self) -> bool:
        return not self.ok


@dataclass(frozen=True)
class SkippedInterval:
    """An interval left out of a commit batch because it overlaps a shift"""
    employee_id: int
    interval: Interval
    with_shift_id: int


def absolute_range(day: date, start_time: str, end_time: str,
                   duration_minutes: Optional[int] = None) -> Tuple[int, int]:
    start = day.toordinal() * MINUTES_PER_DAY + time_to_minutes(start_time)
    if duration_minutes is None:
        duration_minutes = span_minutes(start_time, end_time)
    return start, start + duration_minutes


def shift_range(shift: Shift) -> Tuple[int, int]:
    return absolute_range(shift.date, shift.start_time, shift.end_time)


def relative_range(shift: Shift, day: date) -> Tuple[int, int]:
    """Shift range in minutes from midnight of day; may be negative or past 1440"""
    start, end = shift_range(shift)
    base = day.toordinal() * MINUTES_PER_DAY
    return start - base, end - base


def covers(shift: Shift, day: date, offset: int) -> bool:
    """Whether the shift is on duty at offset minutes after midnight of day"""
    start, end = relative_range(shift, day)
    return start <= offset < end


def ranges_overlap(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    """Half-open overlap; empty ranges never overlap anything"""
    if a[0] >= a[1] or b[0] >= b[1]:
        return False
    return a[0] < b[1] and b[0] < a[1]


def check(employee_id: int, shift_date: date, candidate, existing_shifts: Iterable[Shift],
          exclude_shift_id: Optional[int] = None) -> ConflictResult:
    """
    Check a candidate interval for one employee on one date.

    The candidate needs start_time and end_time; when it also carries
    duration_minutes (an Interval does) that length is used instead of the
    label difference.
    """
    candidate_range = absolute_range(
        shift_date, candidate.start_time, candidate.end_time,
        getattr(candidate, "duration_minutes", None)
    )
    for shift in existing_shifts:
        if shift.employee_id != employee_id:
            continue
        if exclude_shift_id is not None and shift.id == exclude_shift_id:
            continue
        if ranges_overlap(candidate_range, shift_range(shift)):
            return ConflictResult(ok=False, with_shift_id=shift.id)
    return ConflictResult(ok=True)


class ConflictDetector:
    """Checks candidates and splits commit batches into accepted and skipped"""

    def check(self, employee_id: int, shift_date: date, candidate,
              existing_shifts: Iterable[Shift], exclude_shift_id: Optional[int] = None) -> ConflictResult:
        return check(employee_id, shift_date, candidate, existing_shifts, exclude_shift_id)

    def partition(self, shift_date: date, candidates: Sequence[Tuple[int, Interval]],
                  existing_shifts: Sequence[Shift]) -> Tuple[List[ShiftRequest], List[SkippedInterval]]:
        """
        Keep every non-overlapping interval and skip the rest.

        A conflict drops only the offending interval; the remainder of the
        batch still commits. An interval starting past midnight of a window
        that runs into the next day is requested on that next day.
        """
        accepted = []
        skipped = []
        for employee_id, interval in candidates:
            run_date = shift_date + timedelta(days=interval.day_offset)
            result = self.check(employee_id, run_date, interval, existing_shifts)
            if result.ok:
                accepted.append(ShiftRequest(
                    employee_id=employee_id,
                    date=run_date,
                    start_time=interval.start_time,
                    end_time=interval.end_time
                ))
            else:
                logger.warning(
                    f"Skipping {interval.start_time}-{interval.end_time} for employee {employee_id}: "
                    f"overlaps shift {result.with_shift_id}"
                )
                skipped.append(SkippedInterval(employee_id, interval, result.with_shift_id))
        return accepted, skipped
