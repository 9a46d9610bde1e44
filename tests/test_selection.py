import pytest
import sys
from pathlib import Path
from datetime import date

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_grid.models import InvalidTimeSlotError, Shift
from shift_grid.selection import SelectionModel
from shift_grid.time_grid import TimeSlotGrid

DAY = date(2025, 3, 10)


@pytest.fixture
def grid():
    return TimeSlotGrid(9, 18)


@pytest.fixture
def selection(grid):
    """Alice (1) already works 10:00-11:00 on the displayed day."""
    shifts = [
        Shift(id=1, employee_id=1, date=DAY, start_time="10:00", end_time="11:00"),
        Shift(id=2, employee_id=1, date=date(2025, 3, 11), start_time="09:00", end_time="12:00"),
    ]
    return SelectionModel(grid, DAY, shifts)


def test_toggle_adds_and_removes(selection):
    once = selection.toggle(2, "09:00")
    assert once.selected(2) == {"09:00"}

    twice = once.toggle(2, "09:00")
    assert twice.selected(2) == frozenset()
    assert not twice.has_selections


def test_mutations_never_modify_the_snapshot(selection):
    """
    Why this is important: the rendering layer compares snapshots to decide
    what to redraw. Mutating an old snapshot in place would hide changes.
    """
    updated = selection.toggle(2, "09:00").select_range(1, "12:00", "13:00")
    assert not selection.has_selections
    assert updated.selected(2) == {"09:00"}
    assert updated != selection


def test_toggle_on_covered_cell_is_dropped(selection):
    result = selection.toggle(1, "10:15")
    assert result == selection
    assert not result.is_selected(1, "10:15")


def test_shift_on_another_date_does_not_cover(selection):
    assert selection.toggle(1, "09:00").selected(1) == {"09:00"}


def test_select_range_skips_covered_cells(selection):
    result = selection.select_range(1, "09:30", "11:30")
    assert result.ordered_selection(1) == ["09:30", "09:45", "11:00", "11:15", "11:30"]


def test_select_range_works_backwards(selection):
    forwards = selection.select_range(2, "09:00", "10:00")
    backwards = selection.select_range(2, "10:00", "09:00")
    assert forwards == backwards
    assert len(forwards.selected(2)) == 5


def test_select_range_is_idempotent(selection):
    first = selection.select_range(2, "13:00", "14:45")
    second = first.select_range(2, "13:00", "14:45")
    assert first == second


def test_select_range_replaces_previous_cells(selection):
    result = selection.toggle(2, "15:00").select_range(2, "09:00", "09:15")
    assert result.selected(2) == {"09:00", "09:15"}


def test_select_range_entirely_covered_leaves_nothing(selection):
    result = selection.toggle(1, "09:00").select_range(1, "10:00", "10:45")
    assert result.selected(1) == frozenset()
    assert 1 not in result.employee_ids


def test_clear_one_or_all(selection):
    both = selection.toggle(1, "09:00").toggle(2, "09:00")
    assert both.employee_ids == [1, 2]
    assert both.clear(1).employee_ids == [2]
    assert not both.clear().has_selections


def test_unknown_slot_is_rejected(selection):
    with pytest.raises(InvalidTimeSlotError):
        selection.toggle(2, "08:00")
    with pytest.raises(InvalidTimeSlotError):
        selection.select_range(2, "09:00", "19:00")


def test_with_shifts_drops_newly_covered_cells(selection):
    picked = selection.select_range(2, "09:00", "09:45")
    new_shift = Shift(id=3, employee_id=2, date=DAY, start_time="09:30", end_time="10:00")
    refreshed = picked.with_shifts(list(selection.shifts) + [new_shift])
    assert refreshed.ordered_selection(2) == ["09:00", "09:15"]


def test_equal_snapshots_hash_alike(grid):
    a = SelectionModel(grid, DAY, selections={1: ["09:00", "09:15"]})
    b = SelectionModel(grid, DAY).select_range(1, "09:00", "09:15")
    assert a == b
    assert hash(a) == hash(b)


class TestWindowPastMidnight:
    """Columns from 00:00 on in a 21:00-06:00 window show the following day."""

    NEXT_DAY = date(2025, 3, 11)

    @pytest.fixture
    def night(self):
        return TimeSlotGrid(21, 30)

    def test_next_day_shift_covers_its_cells(self, night):
        shift = Shift(id=3, employee_id=1, date=self.NEXT_DAY, start_time="00:30", end_time="02:00")
        selection = SelectionModel(night, DAY, [shift])
        assert selection.shift_at(1, "01:00") == shift
        assert selection.toggle(1, "01:00") == selection
        assert selection.select_range(1, "00:00", "02:15").ordered_selection(1) == [
            "00:00", "00:15", "02:00", "02:15"
        ]

    def test_same_clock_time_on_the_displayed_day_does_not_cover(self, night):
        morning = Shift(id=4, employee_id=1, date=DAY, start_time="00:00", end_time="01:00")
        selection = SelectionModel(night, DAY, [morning])
        assert not selection.is_covered(1, "00:30")
        assert selection.toggle(1, "00:30").selected(1) == {"00:30"}

    def test_covered_columns_follow_the_shift_across_midnight(self, night):
        late = Shift(id=5, employee_id=1, date=DAY, start_time="23:00", end_time="01:00")
        selection = SelectionModel(night, DAY, [late])
        assert selection.covered_columns(late) == list(range(8, 16))

    def test_previous_night_covers_the_morning(self):
        overnight = Shift(id=6, employee_id=1, date=date(2025, 3, 9), start_time="22:00", end_time="09:30")
        selection = SelectionModel(TimeSlotGrid(9, 18), DAY, [overnight])
        assert selection.covered_columns(overnight) == [0, 1]
        assert selection.is_covered(1, "09:15")
        assert not selection.is_covered(1, "09:30")

    def test_shifts_two_days_away_are_ignored(self, night):
        far = Shift(id=7, employee_id=1, date=date(2025, 3, 12), start_time="01:00", end_time="02:00")
        assert SelectionModel(night, DAY, [far]).shifts == ()
