"""
Staff coverage and labour cost per slot for one day.

Cost of a slot is staff on duty times the hourly cost for one quantum; it is
compared with an even share of the estimated daily sales.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .conflicts import covers
from .models import DailySales, Shift
from .time_grid import TimeSlotGrid

logger = logging.getLogger(__name__)

GOOD_COST_PERCENTAGE = 20
WARNING_COST_PERCENTAGE = 30


@dataclass(frozen=True)
class SlotCost:
    slot: str
    staff: int
    cost: float
    cost_percentage: float
    band: Optional[str]  # "good", "warning", "over", or None when nobody works


def staff_per_slot(grid: TimeSlotGrid, shift_date: date, shifts: Iterable[Shift]) -> Dict[str, int]:
    nearby = [s for s in shifts if abs((s.date - shift_date).days) <= 1]
    return {
        slot: sum(1 for s in nearby if covers(s, shift_date, grid.offset_of(slot)))
        for slot in grid.slots
    }


def sales_figures(day: date, daily_sales: Mapping[date, DailySales],
                  default_hourly_cost: float, default_sales: float) -> Tuple[float, float]:
    """
    Hourly staff cost and estimated sales for day.

    A date with its own entry uses its sales, and its cost when one is set;
    anything missing falls back to the defaults.
    """
    entry = daily_sales.get(day)
    if entry is None:
        return default_hourly_cost, default_sales
    cost = entry.hourly_employee_cost if entry.hourly_employee_cost is not None else default_hourly_cost
    return cost, entry.estimated_sales


def _band(percentage: float) -> str:
    if percentage <= GOOD_COST_PERCENTAGE:
        return "good"
    if percentage <= WARNING_COST_PERCENTAGE:
        return "warning"
    return "over"


def coverage_costs(grid: TimeSlotGrid, shift_date: date, shifts: Iterable[Shift],
                   hourly_employee_cost: float, estimated_daily_sales: float) -> List[SlotCost]:
    """
    Per-slot cost row. Empty unless both the hourly cost and the estimated
    sales are positive.
    """
    if hourly_employee_cost <= 0 or estimated_daily_sales <= 0:
        return []

    staff = staff_per_slot(grid, shift_date, shifts)
    sales_per_slot = estimated_daily_sales / len(grid)
    quantum_hours = grid.quantum_minutes / 60

    row = []
    for slot in grid.slots:
        count = staff[slot]
        cost = count * hourly_employee_cost * quantum_hours
        percentage = cost / sales_per_slot * 100 if sales_per_slot > 0 else 0.0
        row.append(SlotCost(
            slot=slot,
            staff=count,
            cost=round(cost, 2),
            cost_percentage=round(percentage, 1),
            band=_band(percentage) if count > 0 else None
        ))
    return row


def coverage_frame(costs: List[SlotCost]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"slot": c.slot, "staff": c.staff, "cost": c.cost,
          "cost_percentage": c.cost_percentage, "band": c.band} for c in costs],
        columns=["slot", "staff", "cost", "cost_percentage", "band"]
    )
