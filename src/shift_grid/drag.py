"""
Drag Move Resolver for the Shift Grid

State machine for relocating an existing shift:

    IDLE -> DRAGGING -> DROPPED | CANCELLED

An invalid drop is a silent no-op: the resolver ends CANCELLED and emits
nothing.
"""

import logging
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional, Tuple

from .conflicts import ConflictDetector
from .intervals import Interval
from .models import DragStateError, MoveRequest, Shift
from .time_grid import TimeSlotGrid, span_minutes

logger = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    CANCELLED = "cancelled"


class CancelReason:
    """Why a drop did not produce a move request"""
    OUTSIDE_GRID = "Released outside the grid"
    UNCHANGED = "Dropped on its own position"
    ZERO_DURATION = "No room left on the grid for the shift"
    OCCUPIED = "Target overlaps another shift"
    EXPLICIT = "Drag cancelled"


class DragMoveResolver:
    """Tracks one drag gesture at a time"""

    def __init__(self, grid: TimeSlotGrid, shift_date: date,
                 detector: Optional[ConflictDetector] = None):
        self.grid = grid
        self.date = shift_date
        self.detector = detector or ConflictDetector()
        self._reset()
        self.state = DragState.IDLE

    def _reset(self):
        self.shift: Optional[Shift] = None
        self.source_employee_id: Optional[int] = None
        self.original_start_time: Optional[str] = None
        self.original_end_time: Optional[str] = None
        self.duration_quanta = 0
        self.move_request: Optional[MoveRequest] = None
        self.cancel_reason: Optional[str] = None

    @property
    def is_dragging(self) -> bool:
        return self.state == DragState.DRAGGING

    def grab(self, shift: Shift):
        """Start dragging a committed shift"""
        if self.state == DragState.DRAGGING:
            raise DragStateError(f"Already dragging shift {self.shift.id}")
        self._reset()
        self.shift = shift
        self.source_employee_id = shift.employee_id
        self.original_start_time = shift.start_time
        self.original_end_time = shift.end_time
        self.duration_quanta = round(
            span_minutes(shift.start_time, shift.end_time) / self.grid.quantum_minutes
        )
        self.state = DragState.DRAGGING
        logger.debug(f"Grabbed shift {shift.id} ({shift.start_time}-{shift.end_time}, "
                     f"{self.duration_quanta} slots)")

    def target_range(self, target_slot: str) -> Optional[Tuple[str, str, int]]:
        """
        Start label, end label and slot count of the shift placed at target_slot.

        The end is clamped to the last grid slot; None when nothing of the
        shift would fit.
        """
        start_index = self.grid.index_of(target_slot)
        end_index = min(start_index + self.duration_quanta, len(self.grid) - 1)
        if end_index <= start_index:
            return None
        return target_slot, self.grid.slots[end_index], end_index - start_index

    def evaluate(self, target_employee_id: Optional[int], target_slot: Optional[str],
                 existing_shifts: Iterable[Shift]) -> Tuple[Optional[MoveRequest], Optional[str]]:
        """
        Resolve a drop target without changing state.

        Returns the move request, or None plus the reason the drop would be
        ignored.
        """
        if self.state != DragState.DRAGGING:
            raise DragStateError(f"No drag in progress (state is {self.state.value})")
        if target_employee_id is None or target_slot is None or not self.grid.contains(target_slot):
            return None, CancelReason.OUTSIDE_GRID

        # Columns past midnight of a window like [21, 30) are on the next day
        target_date = self.date + timedelta(days=self.grid.day_offset(target_slot))
        if (target_employee_id == self.source_employee_id and target_date == self.shift.date
                and target_slot == self.original_start_time):
            return None, CancelReason.UNCHANGED

        placed = self.target_range(target_slot)
        if placed is None:
            return None, CancelReason.ZERO_DURATION
        new_start, new_end, slot_count = placed

        candidate = Interval(new_start, new_end, slot_count, self.grid.quantum_minutes)
        result = self.detector.check(
            target_employee_id, target_date, candidate, existing_shifts,
            exclude_shift_id=self.shift.id
        )
        if not result.ok:
            return None, CancelReason.OCCUPIED

        return MoveRequest(
            shift_id=self.shift.id,
            target_employee_id=target_employee_id,
            new_start_time=new_start,
            new_end_time=new_end,
            new_date=target_date
        ), None

    def hover(self, target_employee_id: Optional[int], target_slot: Optional[str],
              existing_shifts: Iterable[Shift]) -> bool:
        """Whether releasing here would move the shift"""
        request, _ = self.evaluate(target_employee_id, target_slot, existing_shifts)
        return request is not None

    def drop(self, target_employee_id: Optional[int], target_slot: Optional[str],
             existing_shifts: Iterable[Shift]) -> Optional[MoveRequest]:
        """Release the shift; returns the move request or None for a no-op"""
        request, reason = self.evaluate(target_employee_id, target_slot, existing_shifts)
        if request is None:
            self.cancel(reason)
            return None
        self.move_request = request
        self.state = DragState.DROPPED
        logger.info(f"Shift {request.shift_id} dropped on employee {request.target_employee_id} "
                    f"at {request.new_start_time}-{request.new_end_time}")
        return request

    def cancel(self, reason: str = CancelReason.EXPLICIT):
        if self.state != DragState.DRAGGING:
            return
        self.cancel_reason = reason
        self.state = DragState.CANCELLED
        logger.debug(f"Drag of shift {self.shift.id} cancelled: {reason}")

