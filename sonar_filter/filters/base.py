"""
Filter base class and result container.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..models.grid import GridCell, grid_cells
from ..models.sonar import SensorModel
from ..utils.distribution import WeightedDistribution
from ..utils.metrics import belief_entropy, expected_distance, localization_errors

_logger = logging.getLogger(__name__)


@dataclass
class FilterResult:
    """
    Container for the output of a batch filtering run.

    Attributes:
        estimates: [T, 2] Most likely (row, col) after each update
        entropy: [T] Belief entropy (nats) after each update
        beliefs: [T, size, size] Belief heat maps (optional)
    """
    estimates: np.ndarray
    entropy: np.ndarray
    beliefs: Optional[np.ndarray] = None

    @property
    def T(self) -> int:
        """Number of updates."""
        return self.estimates.shape[0]

    def estimate_cells(self) -> List[GridCell]:
        return [GridCell(int(r), int(c)) for r, c in self.estimates]

    def errors(self, true_positions: Sequence[GridCell]) -> np.ndarray:
        """
        Manhattan distance between estimate and true target at each step.

        Args:
            true_positions: [T] True target cells

        Returns:
            errors: [T] integer errors
        """
        return localization_errors(self.estimate_cells(), true_positions)

    def mean_error(self, true_positions: Sequence[GridCell]) -> float:
        """Average Manhattan error over all steps."""
        return float(np.mean(self.errors(true_positions)))

    def hit_rate(self, true_positions: Sequence[GridCell]) -> float:
        """Fraction of steps where the estimate is exactly the target cell."""
        return float(np.mean(self.errors(true_positions) == 0))

    def expected_errors(self, true_positions: Sequence[GridCell]) -> np.ndarray:
        """
        Posterior expected Manhattan distance to the true target at each step.

        Requires a run with return_beliefs=True.

        Returns:
            errors: [T] float errors
        """
        if self.beliefs is None:
            raise ValueError("Expected errors need beliefs; run filter() with return_beliefs=True")
        return np.array([expected_distance(b, t) for b, t in zip(self.beliefs, true_positions)])


class GridFilter(ABC):
    """
    Belief over the target's cell on a square board.

    Subclasses own a WeightedDistribution keyed by GridCell and mutate it
    only inside update() / reset(). Consumers read it through the accessors
    below or take a copy via `belief`.
    """

    def __init__(self, sensor: SensorModel):
        self.sensor = sensor
        self.size = sensor.size
        self.cells = grid_cells(self.size)
        self._belief: WeightedDistribution[GridCell] = self.uniform_prior()

    def uniform_prior(self) -> WeightedDistribution:
        """Uniform distribution over every cell, in row-major order."""
        prior = WeightedDistribution()
        for cell in self.cells:
            prior.set(cell, 1.0)
        prior.normalize()
        return prior

    def reset(self) -> None:
        """Return to the uniform prior."""
        self._belief = self.uniform_prior()

    @abstractmethod
    def update(self, noisy_distance: int, observer: GridCell) -> None:
        """
        Incorporate one sonar reading taken from `observer`.

        Args:
            noisy_distance: Reading in [0, 2*size-2]
            observer: Cell the reading was taken from
        """

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------

    @property
    def belief(self) -> WeightedDistribution:
        """Copy of the current belief."""
        return self._belief.copy()

    def weight(self, cell: GridCell) -> float:
        return self._belief.weight(cell)

    def elements(self) -> List[GridCell]:
        return self._belief.elements()

    @property
    def collapsed(self) -> bool:
        """True when no cell has positive weight."""
        return self._belief.total == 0.0

    def most_likely_cell(self) -> GridCell:
        """
        Highest-probability cell; ties resolve to the first in row-major order.

        Raises:
            EmptyDistributionError: if the belief has collapsed to all zeros.
                Only filter() and run_episode reset a collapsed belief; direct
                callers of update() should check `collapsed` first.
        """
        return self._belief.most_likely()

    def belief_array(self) -> np.ndarray:
        """
        Belief as a heat map.

        Returns:
            b: [size, size] array, b[r, c] = weight of cell (r, c)
        """
        return self._belief.to_array(self.cells).reshape(self.size, self.size)

    # -------------------------------------------------------------------------
    # Batch API
    # -------------------------------------------------------------------------

    def filter(
        self,
        observations: Sequence[int],
        observer_positions: Sequence[GridCell],
        return_beliefs: bool = False,
    ) -> FilterResult:
        """
        Run the filter over a recorded sequence of readings.

        The filter continues from its current belief; call reset() first
        for a fresh run.

        Args:
            observations: [T] Noisy distance readings
            observer_positions: [T] Observer cell for each reading
            return_beliefs: If True, store the belief heat map after each step

        Returns:
            FilterResult
        """
        if len(observations) != len(observer_positions):
            raise ValueError(
                f"Got {len(observations)} observations but "
                f"{len(observer_positions)} observer positions"
            )

        T = len(observations)
        estimates = np.zeros((T, 2), dtype=int)
        entropy = np.zeros(T)
        beliefs = np.zeros((T, self.size, self.size)) if return_beliefs else None

        for t, (z, observer) in enumerate(zip(observations, observer_positions)):
            self.update(int(z), observer)
            if self.collapsed:
                _logger.info("Belief collapsed at step %d; restarting from uniform prior", t)
                self.reset()

            b = self.belief_array()
            best = self.most_likely_cell()
            estimates[t] = (best.row, best.col)
            entropy[t] = belief_entropy(b)
            if return_beliefs:
                beliefs[t] = b

        return FilterResult(estimates=estimates, entropy=entropy, beliefs=beliefs)
