import pytest
import sys
import json
from pathlib import Path
from datetime import date

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_grid.calendar_utils import Calendar, end_of_iso_week, is_same_iso_week, start_of_iso_week
from shift_grid.config import GridConfig, load_config, load_daily_sales, load_seed, save_config
from shift_grid.coverage import coverage_costs, coverage_frame, sales_figures, staff_per_slot
from shift_grid.geometry import GridMetrics, cell_at, shift_rect
from shift_grid.models import ConfigError, DailySales, Employee, Shift
from shift_grid.throttle import Throttle
from shift_grid.time_grid import TimeSlotGrid

DAY = date(2025, 3, 10)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestCalendar:
    def test_iso_week_bounds(self):
        wednesday = date(2025, 3, 12)
        assert start_of_iso_week(wednesday) == DAY
        assert end_of_iso_week(wednesday) == date(2025, 3, 16)

    def test_week_crossing_year_end(self):
        assert is_same_iso_week(date(2024, 12, 30), date(2025, 1, 5))
        assert not is_same_iso_week(date(2025, 1, 5), date(2025, 1, 6))

    def test_fixed_today(self):
        calendar = Calendar(fixed=date(2025, 3, 14))
        assert calendar.today() == date(2025, 3, 14)
        assert calendar.start_of_week() == DAY
        assert calendar.in_current_week(DAY)
        assert not calendar.in_current_week(date(2025, 3, 17))


class TestGeometry:
    @pytest.fixture
    def metrics(self):
        return GridMetrics(rows=2, columns=10, cell_size=30, header_rows=3, label_width=150)

    def test_cell_hit_testing(self, metrics):
        assert cell_at(150, 90, metrics) == (0, 0)
        assert cell_at(150 + 30 * 9 + 29, 90 + 59, metrics) == (1, 9)
        assert cell_at(149, 90, metrics) is None
        assert cell_at(150, 89, metrics) is None
        assert cell_at(150 + 30 * 10, 90, metrics) is None
        assert cell_at(150, 90 + 60, metrics) is None

    def test_zoom_limits(self, metrics):
        assert metrics.zoom_in().cell_size == 35
        assert metrics.zoom_out().cell_size == 25
        big = GridMetrics(rows=1, columns=1, cell_size=50)
        small = GridMetrics(rows=1, columns=1, cell_size=20)
        assert big.zoom_in().cell_size == 50
        assert small.zoom_out().cell_size == 20

    def test_shift_rect_is_at_least_one_cell(self, metrics):
        assert shift_rect(1, 2, 5, metrics) == (210, 120, 300, 150)
        assert shift_rect(0, 9, 9, metrics) == (420, 90, 450, 120)


class TestThrottle:
    def test_skips_calls_inside_interval(self):
        clock = FakeClock()
        throttle = Throttle(50, clock)
        calls = []

        assert throttle.call(calls.append, 1) == (True, None)
        clock.now = 0.02
        assert throttle.call(calls.append, 2) == (False, None)
        clock.now = 0.03
        throttle.call(calls.append, 3)
        assert calls == [1]

        clock.now = 0.06
        assert throttle.call(calls.append, 4)[0]
        assert calls == [1, 4]

    def test_flush_replays_latest_skipped_call(self):
        clock = FakeClock()
        throttle = Throttle(50, clock)
        calls = []
        throttle.call(calls.append, 1)
        throttle.call(calls.append, 2)
        throttle.call(calls.append, 3)

        assert throttle.flush() == (True, None)
        assert calls == [1, 3]
        assert throttle.flush() == (False, None)

    def test_reset_allows_immediate_call(self):
        clock = FakeClock()
        throttle = Throttle(50, clock)
        throttle.call(lambda: None)
        assert not throttle.ready()
        throttle.reset()
        assert throttle.ready()


class TestCoverage:
    @pytest.fixture
    def grid(self):
        return TimeSlotGrid(9, 18)

    @pytest.fixture
    def shifts(self):
        return [
            Shift(id=1, employee_id=1, date=DAY, start_time="09:00", end_time="11:00"),
            Shift(id=2, employee_id=2, date=DAY, start_time="10:00", end_time="12:00"),
            Shift(id=3, employee_id=3, date=date(2025, 3, 11), start_time="09:00", end_time="17:00"),
        ]

    def test_staff_per_slot(self, grid, shifts):
        staff = staff_per_slot(grid, DAY, shifts)
        assert staff["09:00"] == 1
        assert staff["10:00"] == 2
        assert staff["11:45"] == 1
        assert staff["12:00"] == 0

    def test_cost_bands(self, grid, shifts):
        # 36 slots share 3600 of sales, so each slot carries 100
        costs = {c.slot: c for c in coverage_costs(grid, DAY, shifts, 100, 3600)}
        assert costs["09:00"].cost == 25
        assert costs["09:00"].cost_percentage == 25.0
        assert costs["09:00"].band == "warning"
        assert costs["10:00"].band == "over"
        assert costs["12:00"].band is None

        cheap = {c.slot: c for c in coverage_costs(grid, DAY, shifts, 20, 3600)}
        assert cheap["10:00"].cost == 10
        assert cheap["10:00"].band == "good"

    def test_costs_need_both_inputs(self, grid, shifts):
        assert coverage_costs(grid, DAY, shifts, 0, 3600) == []
        assert coverage_costs(grid, DAY, shifts, 20, 0) == []
        assert coverage_frame([]).empty

    def test_night_window_counts_next_day_shifts(self):
        night = TimeSlotGrid(21, 30)
        shifts = [
            Shift(id=1, employee_id=1, date=DAY, start_time="23:00", end_time="01:00"),
            Shift(id=2, employee_id=2, date=date(2025, 3, 11), start_time="00:30", end_time="02:00"),
            Shift(id=3, employee_id=3, date=DAY, start_time="00:30", end_time="02:00"),
        ]
        staff = staff_per_slot(night, DAY, shifts)
        assert (staff["23:00"], staff["00:30"], staff["01:00"], staff["02:00"]) == (1, 2, 1, 0)

    def test_sales_figures_fall_back_to_defaults(self):
        figures = {
            DAY: DailySales(date=DAY, estimated_sales=900, hourly_employee_cost=30),
            date(2025, 3, 11): DailySales(date=date(2025, 3, 11), estimated_sales=1200),
        }
        assert sales_figures(DAY, figures, 20, 3600) == (30, 900)
        assert sales_figures(date(2025, 3, 11), figures, 20, 3600) == (20, 1200)
        assert sales_figures(date(2025, 3, 12), figures, 20, 3600) == (20, 3600)


class TestConfig:
    def test_defaults(self):
        config = GridConfig()
        assert (config.start_hour, config.end_hour, config.quantum_minutes) == (9, 23, 15)
        assert len(config.build_grid()) == 56

    def test_from_dict_accepts_camel_case(self):
        config = GridConfig.from_dict({"startHour": 6, "endHour": 30, "cellSize": 40, "color": "red"})
        assert config.start_hour == 6
        assert config.end_hour == 30
        assert config.cell_size == 40
        assert config.to_dict()["startHour"] == 6

    @pytest.mark.parametrize("settings", [
        {"startHour": 10, "endHour": 9},
        {"quantumMinutes": 7},
        {"cellSize": 55},
        {"throttleMs": -1},
        {"hourlyEmployeeCost": -5},
    ])
    def test_invalid_settings(self, settings):
        with pytest.raises(ConfigError):
            GridConfig.from_dict(settings)

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.json") == GridConfig()
        assert load_seed(tmp_path / "missing.json") == ([], [])

    def test_corrupted_file(self, tmp_path):
        path = tmp_path / "grid.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_seed_and_save_round_trip(self, tmp_path):
        path = tmp_path / "grid.json"
        path.write_text(json.dumps({
            "settings": {"startHour": 8},
            "employees": [{"id": 1, "name": "Alice", "maxHoursPerWeek": 30}],
            "shifts": [{"id": 4, "employeeId": 1, "date": "2025-03-10",
                        "startTime": "08:00", "endTime": "12:00"}],
        }), encoding="utf-8")

        employees, shifts = load_seed(path)
        assert employees == [Employee(id=1, name="Alice", max_hours_per_week=30)]
        assert shifts[0].date == DAY

        config = load_config(path)
        config.cell_size = 45
        save_config(config, path)
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["settings"]["cellSize"] == 45
        assert saved["settings"]["startHour"] == 8
        assert len(saved["employees"]) == 1

    def test_invalid_seed(self, tmp_path):
        path = tmp_path / "grid.json"
        path.write_text(json.dumps({"shifts": [{"id": 1}]}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_seed(path)

    def test_daily_sales_section(self, tmp_path):
        path = tmp_path / "grid.json"
        path.write_text(json.dumps({
            "settings": {"estimatedDailySales": 3600},
            "dailySales": [
                {"date": "2025-03-10", "estimatedSales": 900, "hourlyEmployeeCost": 30},
                {"date": "2025-03-11", "estimatedSales": 1200},
            ],
        }), encoding="utf-8")

        figures = load_daily_sales(path)
        assert figures[DAY] == DailySales(date=DAY, estimated_sales=900, hourly_employee_cost=30)
        assert figures[date(2025, 3, 11)].hourly_employee_cost is None
        assert figures[DAY].to_dict()["estimatedSales"] == 900
        assert load_daily_sales(tmp_path / "missing.json") == {}

    @pytest.mark.parametrize("entry", [
        {"estimatedSales": 900},
        {"date": "2025-03-10"},
        {"date": "2025-03-10", "estimatedSales": "lots"},
        {"date": "2025-03-10", "estimatedSales": -1},
        {"date": "2025-03-10", "estimatedSales": 900, "hourlyEmployeeCost": -3},
    ])
    def test_invalid_daily_sales(self, tmp_path, entry):
        path = tmp_path / "grid.json"
        path.write_text(json.dumps({"dailySales": [entry]}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_daily_sales(path)
