"""
Persistence collaborator interface and an in-memory implementation.

The grid core never writes shifts itself: it sends requests and waits for the
completion callback. InMemoryShiftStore backs the desktop window and tests;
it is not durable storage.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from .conflicts import check
from .models import Employee, PersistenceError, Shift, ShiftRequest

logger = logging.getLogger(__name__)

DoneCallback = Callable[[Optional[Exception]], None]


class ShiftPersistence(ABC):
    """Requests the grid sends to whatever stores shifts"""

    @abstractmethod
    def commit_selections(self, requests: List[ShiftRequest], done: DoneCallback):
        """Create one shift per request; one call per save action"""

    @abstractmethod
    def delete_shift(self, shift_id: int, done: DoneCallback):
        """Remove a shift"""

    @abstractmethod
    def move_shift(self, shift_id: int, target_employee_id: int,
                   new_start_time: str, new_end_time: str, done: DoneCallback,
                   new_date: Optional[date] = None):
        """Relocate a shift to another employee, time or day"""


class InMemoryShiftStore(ShiftPersistence):
    """Keeps shifts in a dict and answers callbacks synchronously"""

    def __init__(self, employees: Iterable[Employee] = (), shifts: Iterable[Shift] = ()):
        self.employees: List[Employee] = list(employees)
        self._shifts: Dict[int, Shift] = {s.id: s for s in shifts}
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]):
        """Call listener after every successful change"""
        self._listeners.append(listener)

    def _changed(self):
        for listener in self._listeners:
            listener()

    def _next_id(self) -> int:
        return max(self._shifts, default=0) + 1

    @property
    def shifts(self) -> List[Shift]:
        return sorted(self._shifts.values(), key=lambda s: (s.date, s.employee_id, s.start_time))

    def shifts_on(self, day: date) -> List[Shift]:
        return [s for s in self.shifts if s.date == day]

    def get_shift(self, shift_id: int) -> Optional[Shift]:
        return self._shifts.get(shift_id)

    def commit_selections(self, requests: List[ShiftRequest], done: DoneCallback):
        """All requests are stored, or none when one of them overlaps"""
        try:
            staged: List[Shift] = []
            next_id = self._next_id()
            for request in requests:
                existing = list(self._shifts.values()) + staged
                result = check(request.employee_id, request.date, request, existing)
                if not result.ok:
                    raise PersistenceError(
                        f"Shift {request.start_time}-{request.end_time} for employee "
                        f"{request.employee_id} overlaps shift {result.with_shift_id}"
                    )
                staged.append(Shift(
                    id=next_id,
                    employee_id=request.employee_id,
                    date=request.date,
                    start_time=request.start_time,
                    end_time=request.end_time
                ))
                next_id += 1
        except PersistenceError as e:
            logger.error(f"Rejected commit of {len(requests)} shifts: {e}")
            done(e)
            return

        for shift in staged:
            self._shifts[shift.id] = shift
        logger.info(f"Stored {len(staged)} new shifts")
        done(None)
        self._changed()

    def delete_shift(self, shift_id: int, done: DoneCallback):
        if shift_id not in self._shifts:
            error = PersistenceError(f"Shift {shift_id} does not exist")
            logger.error(str(error))
            done(error)
            return
        del self._shifts[shift_id]
        logger.info(f"Deleted shift {shift_id}")
        done(None)
        self._changed()

    def move_shift(self, shift_id: int, target_employee_id: int,
                   new_start_time: str, new_end_time: str, done: DoneCallback,
                   new_date: Optional[date] = None):
        shift = self._shifts.get(shift_id)
        if shift is None:
            error = PersistenceError(f"Shift {shift_id} does not exist")
            logger.error(str(error))
            done(error)
            return

        moved = replace(shift, employee_id=target_employee_id, date=new_date or shift.date,
                        start_time=new_start_time, end_time=new_end_time)
        result = check(target_employee_id, moved.date, moved, self._shifts.values(),
                       exclude_shift_id=shift_id)
        if not result.ok:
            error = PersistenceError(f"Moving shift {shift_id} overlaps shift {result.with_shift_id}")
            logger.error(str(error))
            done(error)
            return

        self._shifts[shift_id] = moved
        logger.info(f"Moved shift {shift_id} to employee {target_employee_id} "
                    f"on {moved.date.isoformat()} at {new_start_time}-{new_end_time}")
        done(None)
        self._changed()
