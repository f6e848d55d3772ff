"""
Agents that move on the board: target movement policies and the pursuer's
step rule.
"""

from typing import Optional

from numpy.random import Generator, default_rng

from ..filters.base import GridFilter
from ..models.grid import GridCell, in_bounds, legal_neighbors, manhattan_distance


class StationaryTarget:
    """Target that starts on a (random) cell and never moves."""

    def __init__(
        self,
        size: int,
        start: Optional[GridCell] = None,
        rng: Optional[Generator] = None,
    ):
        self.size = size
        self.rng = rng if rng is not None else default_rng()
        if start is None:
            start = GridCell(int(self.rng.integers(size)), int(self.rng.integers(size)))
        if not in_bounds(start, size):
            raise ValueError(f"Start cell {start} is off a {size}x{size} board")
        self.location = start

    def move(self) -> GridCell:
        """Advance one tick and return the new location."""
        return self.location


class RandomTarget(StationaryTarget):
    """Moves to a uniformly chosen legal neighbour, or stays, each tick."""

    def move(self) -> GridCell:
        options = legal_neighbors(self.location, self.size)
        options.append(self.location)
        self.location = options[self.rng.integers(len(options))]
        return self.location


class EastboundTarget(StationaryTarget):
    """Travels east until it reaches the right wall."""

    def move(self) -> GridCell:
        if self.location.col < self.size - 1:
            self.location = GridCell(self.location.row, self.location.col + 1)
        return self.location


TARGETS = {
    "stationary": StationaryTarget,
    "random": RandomTarget,
    "east": EastboundTarget,
}


def make_target(kind: str, size: int, **kwargs) -> StationaryTarget:
    """Build a target policy by name ("stationary", "random" or "east")."""
    if kind not in TARGETS:
        raise ValueError(f"Unknown target kind: {kind}")
    return TARGETS[kind](size, **kwargs)


def pursuit_step(
    observer: GridCell,
    belief_filter: GridFilter,
    rng: Generator,
) -> GridCell:
    """
    One step of the pursuer toward the most likely target cell.

    Picks the legal neighbour closest (Manhattan) to the belief's most
    likely cell. Equally close neighbours replace the current choice with
    probability 1/2 each, scanning in UP, DOWN, LEFT, RIGHT order.

    Returns:
        The pursuer's next cell (always a neighbour; the pursuer never waits)
    """
    goal = belief_filter.most_likely_cell()
    neighbors = legal_neighbors(observer, belief_filter.size)
    if not neighbors:
        return observer

    best = neighbors[0]
    best_d = manhattan_distance(best, goal)
    for cell in neighbors[1:]:
        d = manhattan_distance(cell, goal)
        if d < best_d or (d == best_d and rng.random() < 0.5):
            best, best_d = cell, d
    return best
