import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_grid.models import InvalidGridError, InvalidTimeSlotError
from shift_grid.time_grid import (
    MINUTES_PER_DAY,
    TimeSlotGrid,
    format_hours,
    generate_slots,
    hours_between,
    is_time_between,
    span_minutes,
    time_to_minutes,
)


@pytest.mark.parametrize(
    "start_hour, end_hour, quantum",
    [(9, 18, 15), (9, 23, 15), (0, 24, 15), (9, 23, 30), (21, 30, 15), (21, 30, 60), (6, 7, 5)],
)
def test_generate_slots_length_and_order(start_hour, end_hour, quantum):
    """Every window yields (end-start)*60/q distinct labels in time order."""
    slots = generate_slots(start_hour, end_hour, quantum)

    assert len(slots) == (end_hour - start_hour) * 60 // quantum
    assert len(set(slots)) == len(slots)
    for i, slot in enumerate(slots):
        expected = (start_hour * 60 + i * quantum) % (24 * 60)
        assert time_to_minutes(slot) == expected


def test_window_past_midnight_wraps_labels():
    slots = generate_slots(21, 30)
    assert slots[0] == "21:00"
    assert slots[12] == "00:00"
    assert slots[-1] == "05:45"


@pytest.mark.parametrize(
    "start_hour, end_hour, quantum",
    [(10, 10, 15), (12, 9, 15), (5, 30, 15), (24, 30, 15), (9, 18, 7), (9, 18, 0)],
)
def test_invalid_windows_are_rejected(start_hour, end_hour, quantum):
    with pytest.raises(InvalidGridError):
        generate_slots(start_hour, end_hour, quantum)


@pytest.mark.parametrize(
    "slot, start, end, expected",
    [
        ("09:00", "09:00", "10:00", True),
        ("09:45", "09:00", "10:00", True),
        ("10:00", "09:00", "10:00", False),
        ("08:45", "09:00", "10:00", False),
        ("23:30", "22:00", "02:00", True),
        ("01:45", "22:00", "02:00", True),
        ("02:00", "22:00", "02:00", False),
        ("12:00", "22:00", "02:00", False),
        ("09:00", "09:00", "09:00", False),
    ],
)
def test_is_time_between(slot, start, end, expected):
    assert is_time_between(slot, start, end) is expected


@pytest.mark.parametrize("label", ["9:00", "24:00", "12:60", "ab:cd", "", None])
def test_malformed_labels_raise(label):
    with pytest.raises(InvalidTimeSlotError):
        time_to_minutes(label)


def test_grid_rejects_labels_off_the_grid():
    grid = TimeSlotGrid(9, 18)
    assert grid.index_of("09:00") == 0
    assert grid.index_of("17:45") == len(grid) - 1
    with pytest.raises(InvalidTimeSlotError):
        grid.index_of("08:45")
    with pytest.raises(InvalidTimeSlotError):
        grid.index_of("09:10")


def test_grid_navigation():
    grid = TimeSlotGrid(9, 18)
    assert grid.first_slot == "09:00"
    assert grid.last_slot == "17:45"
    assert grid.slot_after("09:00") == "09:15"
    assert grid.slot_after("17:45") is None
    assert grid.slots_between("10:00", "11:00") == ["10:00", "10:15", "10:30", "10:45"]
    assert grid == TimeSlotGrid(9, 18, 15)
    assert grid != TimeSlotGrid(9, 19, 15)


def test_durations_cross_midnight():
    assert span_minutes("22:00", "06:00") == 480
    assert span_minutes("09:00", "09:00") == 0
    assert hours_between("09:00", "11:30") == 2.5


def test_format_hours():
    assert format_hours(7.5) == "7h 30m"
    assert format_hours(8) == "8h"
    assert format_hours(0.25) == "0h 15m"


def test_offsets_count_from_midnight_of_the_displayed_day():
    grid = TimeSlotGrid(21, 30)
    assert grid.offset_of("21:00") == 21 * 60
    assert grid.offset_of("23:45") == MINUTES_PER_DAY - 15
    assert grid.offset_of("00:00") == MINUTES_PER_DAY
    assert grid.offset_of("05:45") == MINUTES_PER_DAY + 5 * 60 + 45
    assert [grid.day_offset(s) for s in ("23:45", "00:00", "05:45")] == [0, 1, 1]
    assert TimeSlotGrid(0, 24).day_offset("23:45") == 0
