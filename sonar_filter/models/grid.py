"""
Square grid world.

Cells are addressed by (row, col) with row 0 at the top. The target and the
observer move one cell per tick in the four cardinal directions.
"""

from dataclasses import dataclass
from typing import List

import numpy as np


@dataclass(frozen=True)
class GridCell:
    """Immutable (row, col) coordinate on the board."""
    row: int
    col: int

    def __str__(self) -> str:
        return f"({self.row},{self.col})"


def grid_cells(size: int) -> List[GridCell]:
    """All cells of a `size` x `size` board in row-major order."""
    return [GridCell(r, c) for r in range(size) for c in range(size)]


def in_bounds(cell: GridCell, size: int) -> bool:
    return 0 <= cell.row < size and 0 <= cell.col < size


def legal_neighbors(cell: GridCell, size: int) -> List[GridCell]:
    """
    Cells reachable from `cell` in one step, in UP, DOWN, LEFT, RIGHT order.

    Corner cells have 2 neighbours, edge cells 3, interior cells 4.
    """
    neighbors = []
    if cell.row > 0:
        neighbors.append(GridCell(cell.row - 1, cell.col))
    if cell.row < size - 1:
        neighbors.append(GridCell(cell.row + 1, cell.col))
    if cell.col > 0:
        neighbors.append(GridCell(cell.row, cell.col - 1))
    if cell.col < size - 1:
        neighbors.append(GridCell(cell.row, cell.col + 1))
    return neighbors


def manhattan_distance(p1: GridCell, p2: GridCell) -> int:
    """|delta row| + |delta col|."""
    return abs(p1.row - p2.row) + abs(p1.col - p2.col)


def distance_grid(origin: GridCell, size: int) -> np.ndarray:
    """
    Manhattan distance from `origin` to every cell.

    Returns:
        d: [size, size] integer array, d[r, c] = manhattan(origin, (r, c))
    """
    rows = np.abs(np.arange(size) - origin.row)
    cols = np.abs(np.arange(size) - origin.col)
    return rows[:, np.newaxis] + cols[np.newaxis, :]
