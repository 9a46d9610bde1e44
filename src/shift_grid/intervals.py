"""
Interval Merger for the Shift Grid

Turns a set of selected slots into the minimal list of contiguous intervals.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .models import InvalidTimeSlotError
from .time_grid import DEFAULT_QUANTUM_MINUTES, MINUTES_PER_DAY, span_minutes, time_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    """
    A contiguous run of slots.

    end_time is the label of the slot following the run. A run that reaches
    the final grid column has no such slot and ends on its own last label,
    so duration comes from slot_count rather than from the labels.

    day_offset is 1 when the run starts past the 24h boundary of a window
    that extends into the next day.
    """
    start_time: str
    end_time: str
    slot_count: int
    quantum_minutes: int
    day_offset: int = 0

    @property
    def duration_minutes(self) -> int:
        return self.slot_count * self.quantum_minutes

    @property
    def hours(self) -> float:
        return self.duration_minutes / 60


def merge(selected_slots: Iterable[str], slot_sequence: Sequence[str],
          quantum_minutes: Optional[int] = None) -> List[Interval]:
    """
    Merge selected slots into ordered intervals along slot_sequence.

    The quantum is read off the sequence when not given. Pure: the same
    input always yields an equal list.
    """
    if quantum_minutes is None:
        quantum_minutes = _sequence_quantum(slot_sequence)
    positions = {slot: i for i, slot in enumerate(slot_sequence)}
    indices = []
    for slot in set(selected_slots):
        if slot not in positions:
            raise InvalidTimeSlotError(f"Selected slot {slot!r} is not on the grid")
        indices.append(positions[slot])
    if not indices:
        return []
    indices.sort()

    intervals = []
    run_start = prev = indices[0]
    for index in indices[1:]:
        if index - prev == 1:
            prev = index
            continue
        intervals.append(_close_run(run_start, prev, slot_sequence, quantum_minutes))
        run_start = prev = index
    intervals.append(_close_run(run_start, prev, slot_sequence, quantum_minutes))
    return intervals


def _sequence_quantum(slot_sequence: Sequence[str]) -> int:
    if len(slot_sequence) < 2:
        return DEFAULT_QUANTUM_MINUTES
    return span_minutes(slot_sequence[0], slot_sequence[1])


def _close_run(first: int, last: int, slot_sequence: Sequence[str], quantum_minutes: int) -> Interval:
    if last + 1 < len(slot_sequence):
        end_time = slot_sequence[last + 1]
    else:
        end_time = slot_sequence[last]
    # The sequence starts before midnight, so position gives the absolute offset
    offset = time_to_minutes(slot_sequence[0]) + first * quantum_minutes
    return Interval(
        start_time=slot_sequence[first],
        end_time=end_time,
        slot_count=last - first + 1,
        quantum_minutes=quantum_minutes,
        day_offset=offset // MINUTES_PER_DAY
    )


class IntervalMerger:
    """Merger bound to one grid"""

    def __init__(self, grid):
        self.grid = grid

    def merge(self, selected_slots: Iterable[str]) -> List[Interval]:
        return merge(selected_slots, self.grid.slots, self.grid.quantum_minutes)

    def merge_selection(self, selection, employee_id: int) -> List[Interval]:
        return self.merge(selection.selected(employee_id))
