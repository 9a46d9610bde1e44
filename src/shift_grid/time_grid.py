"""
Time Slot Grid for the Shift Grid

Generates the ordered, discrete time axis of a display window and holds the
time-label arithmetic shared by selection, conflict detection and aggregation.
"""

import re
import logging
from typing import Dict, List, Optional, Tuple, Iterator

from .models import InvalidTimeSlotError, InvalidGridError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
DEFAULT_QUANTUM_MINUTES = 15

_TIME_LABEL = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def time_to_minutes(label: str) -> int:
    """Convert an "HH:MM" label to minutes since midnight"""
    if not isinstance(label, str):
        raise InvalidTimeSlotError(f"Time label must be a string, got {label!r}")
    match = _TIME_LABEL.match(label)
    if not match:
        raise InvalidTimeSlotError(f"Malformed time label: {label!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """Format minutes as an "HH:MM" label, wrapping past midnight"""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def generate_slots(start_hour: int, end_hour: int,
                   quantum_minutes: int = DEFAULT_QUANTUM_MINUTES) -> List[str]:
    """
    Generate the slot labels of the window [start_hour, end_hour).

    Hours of 24 and above are shown modulo 24, so [21, 30) ends at "05:45".
    """
    _validate_window(start_hour, end_hour, quantum_minutes)
    count = (end_hour - start_hour) * 60 // quantum_minutes
    first = start_hour * 60
    return [minutes_to_time(first + i * quantum_minutes) for i in range(count)]


def _validate_window(start_hour: int, end_hour: int, quantum_minutes: int):
    if not all(isinstance(v, int) and not isinstance(v, bool)
               for v in (start_hour, end_hour, quantum_minutes)):
        raise InvalidGridError("Grid hours and quantum must be integers")
    if not 0 <= start_hour < 24:
        raise InvalidGridError(f"start_hour must be within 0..23, got {start_hour}")
    span = end_hour - start_hour
    # More than 24 hours would repeat labels
    if not 0 < span <= 24:
        raise InvalidGridError(
            f"Window [{start_hour}, {end_hour}) must span between 1 and 24 hours")
    if quantum_minutes <= 0 or 60 % quantum_minutes:
        raise InvalidGridError(f"Quantum of {quantum_minutes} minutes does not divide an hour")


def is_time_between(slot: str, start: str, end: str) -> bool:
    """
    Check whether slot falls in the half-open range [start, end).

    When end is earlier than start the range crosses midnight. Equal bounds
    describe an empty range.
    """
    t = time_to_minutes(slot)
    s = time_to_minutes(start)
    e = time_to_minutes(end)
    if s < e:
        return s <= t < e
    if e < s:
        return t >= s or t < e
    return False


def span_minutes(start: str, end: str) -> int:
    """Length of [start, end) in minutes, adding a day when it crosses midnight"""
    diff = time_to_minutes(end) - time_to_minutes(start)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def hours_between(start: str, end: str) -> float:
    return span_minutes(start, end) / 60


def format_hours(hours: float) -> str:
    """Render 7.5 as "7h 30m" and 8 as "8h" """
    total = int(round(hours * 60))
    h, m = divmod(total, 60)
    if m == 0:
        return f"{h}h"
    return f"{h}h {m:02d}m"


class TimeSlotGrid:
    """Ordered slot axis for one display window"""

    def __init__(self, start_hour: int = 9, end_hour: int = 23,
                 quantum_minutes: int = DEFAULT_QUANTUM_MINUTES):
        self.start_hour = start_hour
        self.end_hour = end_hour
        self.quantum_minutes = quantum_minutes
        self.slots: Tuple[str, ...] = tuple(generate_slots(start_hour, end_hour, quantum_minutes))
        self._index: Dict[str, int] = {slot: i for i, slot in enumerate(self.slots)}
        logger.debug(f"Grid [{start_hour}, {end_hour}) with {len(self.slots)} slots "
                     f"of {quantum_minutes} minutes")

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[str]:
        return iter(self.slots)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimeSlotGrid):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (f"TimeSlotGrid(start_hour={self.start_hour}, end_hour={self.end_hour}, "
                f"quantum_minutes={self.quantum_minutes})")

    def _key(self) -> Tuple[int, int, int]:
        return (self.start_hour, self.end_hour, self.quantum_minutes)

    def contains(self, slot: str) -> bool:
        return slot in self._index

    def index_of(self, slot: str) -> int:
        """Position of a slot on the axis; labels off the grid are rejected"""
        try:
            return self._index[slot]
        except (KeyError, TypeError):
            raise InvalidTimeSlotError(f"{slot!r} is not a slot of {self!r}") from None

    def offset_of(self, slot: str) -> int:
        """
        Minutes from midnight of the displayed date to the start of slot.

        Columns past the 24h boundary of a window like [21, 30) belong to the
        next day, so their offset is 1440 or more.
        """
        return self.start_hour * 60 + self.index_of(slot) * self.quantum_minutes

    def day_offset(self, slot: str) -> int:
        """0 for slots on the displayed date, 1 for slots on the next day"""
        return self.offset_of(slot) // MINUTES_PER_DAY

    def slot_at(self, index: int) -> str:
        if not 0 <= index < len(self.slots):
            raise InvalidTimeSlotError(f"Slot index {index} outside grid of {len(self.slots)} slots")
        return self.slots[index]

    def slot_after(self, slot: str) -> Optional[str]:
        """The next slot, or None for the final column"""
        index = self.index_of(slot) + 1
        return self.slots[index] if index < len(self.slots) else None

    @property
    def first_slot(self) -> str:
        return self.slots[0]

    @property
    def last_slot(self) -> str:
        return self.slots[-1]

    def slots_between(self, start: str, end: str) -> List[str]:
        """Grid slots covered by [start, end), in grid order"""
        return [slot for slot in self.slots if is_time_between(slot, start, end)]
