"""
Data Model for the Shift Grid

Exception hierarchy plus the employee, shift and request records the grid
core exchanges with the persistence collaborator.
"""

from datetime import date
from typing import Dict, Any, Optional
from dataclasses import dataclass


class ShiftGridError(Exception):
    """Base exception for shift grid operations"""
    pass


class InvalidTimeSlotError(ShiftGridError):
    """Raised when a time label is malformed or not part of the grid"""
    pass


class InvalidGridError(ShiftGridError):
    """Raised when a display window cannot be turned into a grid"""
    pass


class DragStateError(ShiftGridError):
    """Raised when a drag transition is requested from the wrong state"""
    pass


class PersistenceError(ShiftGridError):
    """Raised by the persistence collaborator when a request is rejected"""
    pass


class ConfigError(ShiftGridError):
    """Raised when the grid configuration is invalid"""
    pass


def _parse_date(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass(frozen=True)
class Employee:
    """Employee as seen by the grid: identity and weekly hour cap"""
    id: int
    name: str
    max_hours_per_week: float = 40
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "maxHoursPerWeek": self.max_hours_per_week,
            "isActive": self.is_active
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        # A missing or zero cap falls back to the 40h default
        return cls(
            id=data["id"],
            name=data["name"],
            max_hours_per_week=data.get("maxHoursPerWeek") or 40,
            is_active=data.get("isActive", True)
        )


@dataclass(frozen=True)
class Shift:
    """A committed shift. end_time < start_time means it ends the next day."""
    id: int
    employee_id: int
    date: date
    start_time: str
    end_time: str
    notes: Optional[str] = None

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "date": self.date.isoformat(),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "notes": self.notes
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Shift':
        return cls(
            id=data["id"],
            employee_id=data["employeeId"],
            date=_parse_date(data["date"]),
            start_time=data["startTime"],
            end_time=data["endTime"],
            notes=data.get("notes")
        )


@dataclass(frozen=True)
class ShiftRequest:
    """Request to create one shift from a committed selection"""
    employee_id: int
    date: date
    start_time: str
    end_time: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "date": self.date.isoformat(),
            "startTime": self.start_time,
            "endTime": self.end_time
        }


@dataclass(frozen=True)
class MoveRequest:
    """
    Request to relocate an existing shift.

    new_date is the day the moved shift starts on; None keeps its date.
    """
    shift_id: int
    target_employee_id: int
    new_start_time: str
    new_end_time: str
    new_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shiftId": self.shift_id,
            "targetEmployeeId": self.target_employee_id,
            "newStartTime": self.new_start_time,
            "newEndTime": self.new_end_time,
            "newDate": self.new_date.isoformat() if self.new_date else None
        }


@dataclass(frozen=True)
class DailySales:
    """Estimated sales for one date, optionally with that day's hourly staff cost"""
    date: date
    estimated_sales: float
    hourly_employee_cost: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "estimatedSales": self.estimated_sales,
            "hourlyEmployeeCost": self.hourly_employee_cost
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DailySales':
        return cls(
            date=_parse_date(data["date"]),
            estimated_sales=float(data["estimatedSales"]),
            hourly_employee_cost=(None if data.get("hourlyEmployeeCost") is None
                                  else float(data["hourlyEmployeeCost"]))
        )
