"""
Schedule Grid Controller

The single adapter between a rendering layer and the grid core. It turns
press/move/release events on cells into selection and drag updates, builds
commit batches, forwards requests to the persistence collaborator and
exposes the read-side views (weekly hours, night hours, coverage).
"""

import logging
import time
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .calendar_utils import Calendar
from .config import GridConfig
from .conflicts import ConflictDetector, SkippedInterval
from .coverage import SlotCost, coverage_costs, sales_figures
from .drag import DragMoveResolver
from .hours import HoursAggregator, WeeklyHours
from .intervals import Interval, IntervalMerger
from .models import DailySales, Employee, MoveRequest, Shift, ShiftRequest
from .night_hours import NightHoursReport, night_hours
from .selection import SelectionModel
from .store import ShiftPersistence
from .throttle import Throttle
from .time_grid import TimeSlotGrid

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def log_notification(level: str, message: str):
    """Default notifier: write the message to the log"""
    logger.log(logging.getLevelName(level.upper()), message)


@dataclass(frozen=True)
class CommitBatch:
    """What a save action sent, and what it left out"""
    requests: Tuple[ShiftRequest, ...]
    skipped: Tuple[SkippedInterval, ...]


class ScheduleGridController:
    """Interaction state for one displayed date"""

    def __init__(self, persistence: ShiftPersistence, employees: Sequence[Employee],
                 shifts: Iterable[Shift] = (), shift_date: Optional[date] = None,
                 config: Optional[GridConfig] = None, calendar: Optional[Calendar] = None,
                 notify: Optional[Notifier] = None, clock: Callable[[], float] = time.monotonic,
                 daily_sales: Optional[Mapping[date, DailySales]] = None):
        self.persistence = persistence
        # Own copy: set_hour_range edits the window in place
        self.config = replace(config) if config is not None else GridConfig()
        self.daily_sales: Dict[date, DailySales] = dict(daily_sales or {})
        self.calendar = calendar or Calendar()
        self.notify = notify or log_notification
        self.employees: List[Employee] = list(employees)
        self.shifts: Tuple[Shift, ...] = tuple(shifts)
        self.date = shift_date or self.calendar.today()
        self.detector = ConflictDetector()
        self.throttle = Throttle(self.config.throttle_ms, clock)
        self.commit_in_flight = False
        self.last_batch: Optional[CommitBatch] = None
        self.drop_preview: Optional[bool] = None
        self._listeners: List[Callable[[], None]] = []
        self._rebuild(self.config.build_grid())

    # --- state -----------------------------------------------------------

    def subscribe(self, listener: Callable[[], None]):
        """Call listener whenever the grid needs redrawing"""
        self._listeners.append(listener)

    def _changed(self):
        for listener in self._listeners:
            listener()

    def _rebuild(self, grid: TimeSlotGrid):
        """Fresh selection and drag state for the current window"""
        self.grid = grid
        self.merger = IntervalMerger(grid)
        self.selection = SelectionModel(grid, self.date, self.shifts)
        self.drag = DragMoveResolver(grid, self.date, self.detector)
        self.throttle.reset()
        self._gesture: Optional[Tuple[int, str]] = None
        self.drop_preview = None

    def set_date(self, day: date):
        if day == self.date:
            return
        logger.info(f"Showing {day.isoformat()}")
        self.date = day
        self._rebuild(self.grid)
        self._changed()

    def next_day(self):
        self.set_date(self.date + timedelta(days=1))

    def previous_day(self):
        self.set_date(self.date - timedelta(days=1))

    def today(self):
        self.set_date(self.calendar.today())

    def set_hour_range(self, start_hour: int, end_hour: int):
        """Change the display window; raises InvalidGridError for a bad window"""
        grid = TimeSlotGrid(start_hour, end_hour, self.grid.quantum_minutes)
        if grid == self.grid:
            return
        self.config.start_hour = start_hour
        self.config.end_hour = end_hour
        logger.info(f"Display window set to [{start_hour}, {end_hour})")
        self._rebuild(grid)
        self._changed()

    def set_shifts(self, shifts: Iterable[Shift]):
        """Replace the committed shifts after the collaborator confirms a change"""
        self.shifts = tuple(shifts)
        self.selection = self.selection.with_shifts(self.shifts)
        self._changed()

    def set_employees(self, employees: Sequence[Employee]):
        self.employees = list(employees)
        self._changed()

    def employee(self, employee_id: int) -> Optional[Employee]:
        return next((e for e in self.employees if e.id == employee_id), None)

    @property
    def day_shifts(self) -> List[Shift]:
        return [s for s in self.shifts if s.date == self.date]

    @property
    def visible_shifts(self) -> Tuple[Shift, ...]:
        """Shifts that can reach a cell of the window, including neighbouring days"""
        return self.selection.shifts

    # --- pointer / touch ---------------------------------------------------

    def press(self, employee_id: int, slot: str):
        """Pointer down on a cell: grab a shift or start a selection"""
        if self.drag.is_dragging:
            self.drag.cancel()
        self.throttle.reset()

        shift = self.selection.shift_at(employee_id, slot)
        if shift is not None:
            self.drag.grab(shift)
            self._gesture = None
            self._changed()
            return

        self._gesture = (employee_id, slot)
        self.selection = self.selection.toggle(employee_id, slot)
        self._changed()

    def move(self, employee_id: Optional[int], slot: Optional[str]):
        """Pointer moved over a cell; sampled through the throttle"""
        if self.drag.is_dragging:
            ran, _ = self.throttle.call(self._hover, employee_id, slot)
        elif self._gesture is not None:
            ran, _ = self.throttle.call(self._extend, employee_id, slot)
        else:
            return
        if ran:
            self._changed()

    def _hover(self, employee_id: Optional[int], slot: Optional[str]):
        self.drop_preview = self.drag.hover(employee_id, slot, self.shifts)

    def _extend(self, employee_id: Optional[int], slot: Optional[str]):
        anchor_employee, anchor_slot = self._gesture
        # A range selection stays on the row it started on
        if employee_id != anchor_employee or slot is None or not self.grid.contains(slot):
            return
        self.selection = self.selection.select_range(anchor_employee, anchor_slot, slot)

    def release(self, employee_id: Optional[int] = None, slot: Optional[str] = None) -> Optional[MoveRequest]:
        """
        Pointer up. Releasing outside the grid (no cell) discards every
        uncommitted selection and the drag in progress.
        """
        outside = employee_id is None or slot is None or not self.grid.contains(slot)

        if self.drag.is_dragging:
            self.throttle.reset()
            self.drop_preview = None
            request = self.drag.drop(employee_id, slot, self.shifts)
            if outside:
                self.selection = self.selection.clear()
            if request is not None:
                self._send_move(request)
            self._changed()
            return request

        if self._gesture is None:
            return None

        if outside:
            self.cancel()
            return None

        self.throttle.flush()
        anchor_employee, anchor_slot = self._gesture
        if employee_id == anchor_employee and slot != anchor_slot:
            self.selection = self.selection.select_range(anchor_employee, anchor_slot, slot)
        self._gesture = None
        self.throttle.reset()
        self._changed()
        return None

    def cancel(self):
        """Discard all uncommitted selection and drag state"""
        self.drag.cancel()
        self.selection = self.selection.clear()
        self._gesture = None
        self.drop_preview = None
        self.throttle.reset()
        logger.debug("Discarded uncommitted selection and drag state")
        self._changed()

    def toggle(self, employee_id: int, slot: str):
        """Single tap without drag"""
        self.selection = self.selection.toggle(employee_id, slot)
        self._changed()

    # --- commits -----------------------------------------------------------

    def pending_intervals(self, employee_id: int) -> List[Interval]:
        """Live preview of what saving would create for this employee"""
        return self.merger.merge_selection(self.selection, employee_id)

    def build_batch(self) -> CommitBatch:
        candidates = [
            (employee_id, interval)
            for employee_id in self.selection.employee_ids
            for interval in self.pending_intervals(employee_id)
        ]
        accepted, skipped = self.detector.partition(self.date, candidates, self.shifts)
        return CommitBatch(tuple(accepted), tuple(skipped))

    def save(self) -> Optional[CommitBatch]:
        """
        Send every non-conflicting selected interval in one commit call.

        The selection is cleared only when the collaborator reports success.
        """
        if self.commit_in_flight:
            self.notify("warning", "A save is already in progress")
            return None
        if not self.selection.has_selections:
            return None

        batch = self.build_batch()
        self.last_batch = batch
        if batch.skipped:
            logger.warning(f"{len(batch.skipped)} selected intervals overlap existing shifts "
                           f"and were left out")
        if not batch.requests:
            self.notify("warning", "Nothing to save: every selected interval overlaps a shift")
            return batch

        # A run ending on the last column reuses that column's label as its end
        zero_length = [r for r in batch.requests if r.start_time == r.end_time]
        if zero_length:
            labels = ", ".join(f"{r.start_time}-{r.end_time}" for r in zero_length)
            self.notify("warning", f"Saving {labels} as zero-length: the window ends at its last column")

        self.commit_in_flight = True
        logger.info(f"Committing {len(batch.requests)} shifts for {self.date.isoformat()}")
        self.persistence.commit_selections(
            list(batch.requests), lambda error: self._commit_done(batch, error))
        return batch

    def _commit_done(self, batch: CommitBatch, error: Optional[Exception]):
        self.commit_in_flight = False
        if error is not None:
            self.notify("error", f"Could not save shifts: {error}")
            self._changed()
            return
        self.selection = self.selection.clear()
        self.notify("info", f"Saved {len(batch.requests)} shifts")
        self._changed()

    def delete_shift(self, shift_id: int):
        def done(error: Optional[Exception]):
            if error is not None:
                self.notify("error", f"Could not delete shift: {error}")
            else:
                self.notify("info", "Shift deleted")

        self.persistence.delete_shift(shift_id, done)

    def _send_move(self, request: MoveRequest):
        def done(error: Optional[Exception]):
            if error is not None:
                self.notify("error", f"Could not move shift: {error}")
            else:
                self.notify("info", f"Shift moved to {request.new_start_time} - {request.new_end_time}")

        self.persistence.move_shift(request.shift_id, request.target_employee_id,
                                    request.new_start_time, request.new_end_time, done,
                                    new_date=request.new_date)

    # --- read side -----------------------------------------------------------

    def weekly_hours(self, employee_id: int) -> WeeklyHours:
        aggregator = HoursAggregator(self.employees)
        return aggregator.weekly_hours(employee_id, self.date, self.shifts, self.selection)

    def all_weekly_hours(self) -> Dict[int, WeeklyHours]:
        return HoursAggregator(self.employees).all_weekly_hours(self.date, self.shifts, self.selection)

    def weekly_hours_table(self) -> pd.DataFrame:
        return HoursAggregator(self.employees).weekly_hours_table(self.date, self.shifts)

    def night_hours(self, employee_id: Optional[int] = None, period_start: Optional[date] = None,
                    period_end: Optional[date] = None) -> NightHoursReport:
        """Night hours over a period, defaulting to the displayed ISO week"""
        period_start = period_start or self.calendar.start_of_week(self.date)
        period_end = period_end or self.calendar.end_of_week(self.date)
        return night_hours(employee_id, period_start, period_end, self.shifts)

    def set_daily_sales(self, figures: DailySales):
        self.daily_sales[figures.date] = figures
        self._changed()

    def coverage(self) -> List[SlotCost]:
        """Cost row for the displayed date, using that date's sales figures"""
        hourly_cost, sales = sales_figures(self.date, self.daily_sales,
                                           self.config.hourly_employee_cost,
                                           self.config.estimated_daily_sales)
        return coverage_costs(self.grid, self.date, self.shifts, hourly_cost, sales)
