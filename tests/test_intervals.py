import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_grid.intervals import Interval, IntervalMerger, merge
from shift_grid.models import InvalidTimeSlotError
from shift_grid.time_grid import TimeSlotGrid, generate_slots


@pytest.fixture
def slots():
    return generate_slots(9, 18)


def test_contiguous_slots_merge_into_one_interval(slots):
    result = merge({"09:00", "09:15", "09:30"}, slots)
    assert result == [Interval("09:00", "09:45", 3, 15)]
    assert result[0].duration_minutes == 45


def test_gap_splits_intervals(slots):
    result = merge({"09:00", "10:00"}, slots)
    assert [(i.start_time, i.end_time) for i in result] == [("09:00", "09:15"), ("10:00", "10:15")]


def test_empty_selection(slots):
    assert merge(set(), slots) == []


def test_single_slot_is_one_quantum(slots):
    (interval,) = merge({"13:30"}, slots)
    assert interval.start_time == "13:30"
    assert interval.end_time == "13:45"
    assert interval.duration_minutes == 15


def test_run_reaching_last_column_ends_on_its_own_label(slots):
    """
    Why this is important: the grid has no column after the last slot, so a
    run touching the end reuses the last label. The duration must still
    count every selected slot.
    """
    (interval,) = merge({"17:30", "17:45"}, slots)
    assert interval.start_time == "17:30"
    assert interval.end_time == "17:45"
    assert interval.slot_count == 2
    assert interval.hours == 0.5


def test_merge_is_pure(slots):
    selected = frozenset({"09:00", "09:15", "11:00", "12:30", "12:45"})
    first = merge(selected, slots)
    second = merge(selected, slots)
    assert first == second
    assert len(first) == 3


def test_unordered_input_comes_out_in_grid_order(slots):
    result = merge(["12:00", "09:00", "11:45", "09:15"], slots)
    assert [i.start_time for i in result] == ["09:00", "11:45"]
    assert result[1].end_time == "12:15"


def test_off_grid_slot_raises(slots):
    with pytest.raises(InvalidTimeSlotError):
        merge({"08:00"}, slots)


def test_quantum_is_read_off_the_sequence():
    half_hours = generate_slots(9, 12, 30)
    (interval,) = merge({"09:00", "09:30"}, half_hours)
    assert interval.end_time == "10:00"
    assert interval.duration_minutes == 60


def test_runs_across_midnight_stay_contiguous():
    grid = TimeSlotGrid(21, 30)
    (interval,) = IntervalMerger(grid).merge({"23:30", "23:45", "00:00"})
    assert interval == Interval("23:30", "00:15", 3, 15)


def test_run_starting_after_midnight_is_on_the_next_day():
    grid = TimeSlotGrid(21, 30)
    merger = IntervalMerger(grid)
    before, after = merger.merge({"23:00", "23:15", "01:00"})
    assert before.day_offset == 0
    assert (after.start_time, after.end_time, after.day_offset) == ("01:00", "01:15", 1)
    (straddling,) = merger.merge({"23:45", "00:00"})
    assert straddling.day_offset == 0
