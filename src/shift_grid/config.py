"""
Configuration for the Shift Grid

Display window, quantum, zoom and default cost settings, read from the
"settings" section of a JSON file and merged over defaults. The same file may
carry seed "employees" and "shifts" for the in-memory store and per-date
"dailySales" figures.
"""

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union
from datetime import date

from .geometry import MAX_CELL_SIZE, MIN_CELL_SIZE
from .models import ConfigError, DailySales, Employee, InvalidGridError, Shift
from .time_grid import TimeSlotGrid

logger = logging.getLogger(__name__)

_CAMEL_KEYS = {
    "start_hour": "startHour",
    "end_hour": "endHour",
    "quantum_minutes": "quantumMinutes",
    "cell_size": "cellSize",
    "throttle_ms": "throttleMs",
    "default_max_hours": "defaultMaxHours",
    "hourly_employee_cost": "hourlyEmployeeCost",
    "estimated_daily_sales": "estimatedDailySales",
}


@dataclass
class GridConfig:
    """Display configuration for the schedule grid"""
    start_hour: int = 9
    end_hour: int = 23
    quantum_minutes: int = 15
    cell_size: int = 30
    throttle_ms: int = 50
    default_max_hours: float = 40
    hourly_employee_cost: float = 0.0
    estimated_daily_sales: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {_CAMEL_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GridConfig':
        known = {f.name for f in fields(cls)}
        values = {}
        for name in known:
            camel = _CAMEL_KEYS[name]
            if camel in data:
                values[name] = data[camel]
            elif name in data:
                values[name] = data[name]
        unknown = set(data) - known - set(_CAMEL_KEYS.values())
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        config = cls(**values)
        config.validate()
        return config

    def validate(self):
        """Raise ConfigError when the settings cannot drive a grid"""
        try:
            self.build_grid()
        except InvalidGridError as e:
            raise ConfigError(f"Invalid display window: {e}") from e
        if not MIN_CELL_SIZE <= self.cell_size <= MAX_CELL_SIZE:
            raise ConfigError(f"cellSize must be between {MIN_CELL_SIZE} and {MAX_CELL_SIZE}")
        if self.throttle_ms < 0:
            raise ConfigError("throttleMs cannot be negative")
        if self.default_max_hours <= 0:
            raise ConfigError("defaultMaxHours must be positive")
        if self.hourly_employee_cost < 0 or self.estimated_daily_sales < 0:
            raise ConfigError("Cost settings cannot be negative")

    def build_grid(self) -> TimeSlotGrid:
        return TimeSlotGrid(self.start_hour, self.end_hour, self.quantum_minutes)


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration file {path} is corrupted: {e}") from e
    except IOError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a JSON object")
    return data


def load_config(path: Union[str, Path]) -> GridConfig:
    """Load settings, falling back to defaults when the file does not exist"""
    path = Path(path)
    if not path.exists():
        logger.info(f"No configuration file at {path}, using defaults")
        return GridConfig()
    data = _read_json(path)
    config = GridConfig.from_dict(data.get("settings", {}))
    logger.info(f"Loaded grid settings from {path}")
    return config


def load_seed(path: Union[str, Path]) -> Tuple[List[Employee], List[Shift]]:
    """Seed employees and shifts from the configuration file, if present"""
    path = Path(path)
    if not path.exists():
        return [], []
    data = _read_json(path)
    try:
        employees = [Employee.from_dict(item) for item in data.get("employees", [])]
        shifts = [Shift.from_dict(item) for item in data.get("shifts", [])]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid seed data in {path}: {e}") from e
    logger.info(f"Seeded {len(employees)} employees and {len(shifts)} shifts from {path}")
    return employees, shifts


def load_daily_sales(path: Union[str, Path]) -> Dict[date, DailySales]:
    """
    Per-date sales figures from the "dailySales" section, keyed by date.

    Dates without an entry fall back to the global cost settings.
    """
    path = Path(path)
    if not path.exists():
        return {}
    data = _read_json(path)
    try:
        entries = [DailySales.from_dict(item) for item in data.get("dailySales", [])]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid daily sales in {path}: {e}") from e
    for entry in entries:
        if entry.estimated_sales < 0 or (entry.hourly_employee_cost or 0) < 0:
            raise ConfigError(f"Daily sales for {entry.date.isoformat()} cannot be negative")
    logger.info(f"Loaded sales figures for {len(entries)} days from {path}")
    return {entry.date: entry for entry in entries}


def save_config(config: GridConfig, path: Union[str, Path]):
    """Write settings back, keeping any other sections of the file"""
    path = Path(path)
    data = _read_json(path) if path.exists() else {}
    data["settings"] = config.to_dict()
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
