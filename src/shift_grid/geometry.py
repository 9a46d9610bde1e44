"""
Grid geometry: pixel coordinates to cells and back.

The grid is drawn as a fixed-width employee label column followed by one
column per slot, under a fixed number of header rows, with one row per
employee.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

MIN_CELL_SIZE = 20
MAX_CELL_SIZE = 50
CELL_SIZE_STEP = 5
DEFAULT_CELL_SIZE = 30


@dataclass(frozen=True)
class GridMetrics:
    rows: int
    columns: int
    cell_size: int = DEFAULT_CELL_SIZE
    header_rows: int = 3
    label_width: int = 150

    @property
    def origin_x(self) -> int:
        return self.label_width

    @property
    def origin_y(self) -> int:
        return self.header_rows * self.cell_size

    @property
    def width(self) -> int:
        return self.origin_x + self.columns * self.cell_size

    @property
    def height(self) -> int:
        return self.origin_y + self.rows * self.cell_size

    def zoom_in(self) -> 'GridMetrics':
        return replace(self, cell_size=min(self.cell_size + CELL_SIZE_STEP, MAX_CELL_SIZE))

    def zoom_out(self) -> 'GridMetrics':
        return replace(self, cell_size=max(self.cell_size - CELL_SIZE_STEP, MIN_CELL_SIZE))


def cell_at(x: float, y: float, metrics: GridMetrics) -> Optional[Tuple[int, int]]:
    """(row, column) of the slot cell under a point, or None outside the slot area"""
    if x < metrics.origin_x or y < metrics.origin_y:
        return None
    column = int((x - metrics.origin_x) // metrics.cell_size)
    row = int((y - metrics.origin_y) // metrics.cell_size)
    if row >= metrics.rows or column >= metrics.columns:
        return None
    return row, column


def cell_origin(row: int, column: int, metrics: GridMetrics) -> Tuple[int, int]:
    """Top-left pixel of a slot cell"""
    return (metrics.origin_x + column * metrics.cell_size,
            metrics.origin_y + row * metrics.cell_size)


def shift_rect(row: int, start_column: int, end_column: int,
               metrics: GridMetrics) -> Tuple[int, int, int, int]:
    """
    (x0, y0, x1, y1) of a shift block spanning [start_column, end_column).

    A block never renders narrower than one cell.
    """
    x0, y0 = cell_origin(row, start_column, metrics)
    span = max(end_column - start_column, 1)
    return x0, y0, x0 + span * metrics.cell_size, y0 + metrics.cell_size
