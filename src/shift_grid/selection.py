"""
Selection Model for the Shift Grid

Per-employee sets of touched but uncommitted slots. Every mutation returns a
new SelectionModel; existing snapshots are never modified.
"""

import logging
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .conflicts import covers
from .models import Shift
from .time_grid import TimeSlotGrid

logger = logging.getLogger(__name__)


class SelectionModel:
    """Immutable snapshot of the selection for one grid and date"""

    def __init__(self, grid: TimeSlotGrid, shift_date: date,
                 shifts: Iterable[Shift] = (),
                 selections: Optional[Mapping[int, Iterable[str]]] = None):
        self.grid = grid
        self.date = shift_date
        # A window spans at most 24h from before midnight, so only shifts dated
        # the day before, the day itself or the day after can reach a cell
        self.shifts: Tuple[Shift, ...] = tuple(
            s for s in shifts if abs((s.date - shift_date).days) <= 1
        )
        self._selections: Dict[int, FrozenSet[str]] = {}
        for employee_id, slots in (selections or {}).items():
            kept = set()
            for slot in slots:
                self.grid.index_of(slot)
                if not self.is_covered(employee_id, slot):
                    kept.add(slot)
            if kept:
                self._selections[employee_id] = frozenset(kept)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SelectionModel):
            return NotImplemented
        return (self.grid == other.grid and self.date == other.date
                and self.shifts == other.shifts and self._selections == other._selections)

    def __hash__(self) -> int:
        return hash((self.grid, self.date, self.shifts, frozenset(self._selections.items())))

    def __repr__(self) -> str:
        counts = {emp: len(slots) for emp, slots in self._selections.items()}
        return f"SelectionModel(date={self.date.isoformat()}, selections={counts})"

    def _with_selections(self, selections: Dict[int, FrozenSet[str]]) -> 'SelectionModel':
        return SelectionModel(self.grid, self.date, self.shifts, selections)

    def shift_at(self, employee_id: int, slot: str) -> Optional[Shift]:
        """The committed shift covering this cell, if any"""
        offset = self.grid.offset_of(slot)
        for shift in self.shifts:
            if shift.employee_id == employee_id and covers(shift, self.date, offset):
                return shift
        return None

    def covered_columns(self, shift: Shift) -> List[int]:
        """Grid columns the shift occupies, in order"""
        return [
            i for i, slot in enumerate(self.grid.slots)
            if covers(shift, self.date, self.grid.offset_of(slot))
        ]

    def is_covered(self, employee_id: int, slot: str) -> bool:
        return self.shift_at(employee_id, slot) is not None

    def selected(self, employee_id: int) -> FrozenSet[str]:
        return self._selections.get(employee_id, frozenset())

    def ordered_selection(self, employee_id: int) -> List[str]:
        return sorted(self.selected(employee_id), key=self.grid.index_of)

    def is_selected(self, employee_id: int, slot: str) -> bool:
        return slot in self.selected(employee_id)

    @property
    def employee_ids(self) -> List[int]:
        return sorted(self._selections)

    @property
    def has_selections(self) -> bool:
        return bool(self._selections)

    def toggle(self, employee_id: int, slot: str) -> 'SelectionModel':
        """Flip one cell. Cells under a committed shift are left alone."""
        self.grid.index_of(slot)
        if self.is_covered(employee_id, slot):
            logger.debug(f"Ignoring toggle of covered cell {slot} for employee {employee_id}")
            return self

        current = self.selected(employee_id)
        updated = current - {slot} if slot in current else current | {slot}

        selections = dict(self._selections)
        if updated:
            selections[employee_id] = updated
        else:
            selections.pop(employee_id, None)
        return self._with_selections(selections)

    def select_range(self, employee_id: int, anchor_slot: str, current_slot: str) -> 'SelectionModel':
        """
        Replace the employee's selection with every free cell between the
        anchor and the current cell, inclusive, in either direction.
        """
        anchor_index = self.grid.index_of(anchor_slot)
        current_index = self.grid.index_of(current_slot)
        lo, hi = min(anchor_index, current_index), max(anchor_index, current_index)

        cells = frozenset(
            slot for slot in self.grid.slots[lo:hi + 1]
            if not self.is_covered(employee_id, slot)
        )

        selections = dict(self._selections)
        if cells:
            selections[employee_id] = cells
        else:
            selections.pop(employee_id, None)
        return self._with_selections(selections)

    def clear(self, employee_id: Optional[int] = None) -> 'SelectionModel':
        if employee_id is None:
            return self._with_selections({})
        selections = dict(self._selections)
        selections.pop(employee_id, None)
        return self._with_selections(selections)

    def with_shifts(self, shifts: Iterable[Shift]) -> 'SelectionModel':
        """Same selection against a refreshed shift list; newly covered cells drop out"""
        return SelectionModel(self.grid, self.date, shifts, self._selections)

    def to_dict(self) -> Dict[str, List[str]]:
        return {str(emp): self.ordered_selection(emp) for emp in self.employee_ids}
