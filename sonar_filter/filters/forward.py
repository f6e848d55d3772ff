"""
Exact belief tracking with the forward algorithm.

    b_t(p) ∝ p(e_t | X_t = p) * sum_q p(X_t = p | X_{t-1} = q) * b_{t-1}(q)

The transition model gives each legal neighbour of q probability 1/(k+1),
where k is the number of legal neighbours of q. The remaining 1/(k+1) is
meant for "stay in place" but is never assigned to q itself, so a
predicted belief sums to less than one before normalization. This differs
from the particle filter's motion model, which treats staying as one of
k+1 equally likely moves; the two filters are expected to disagree slightly.
"""

import logging
import warnings
from typing import Optional

import numpy as np

from .base import GridFilter
from ..models.grid import GridCell, legal_neighbors
from ..models.sonar import SensorModel
from ..utils.distribution import WeightedDistribution

_logger = logging.getLogger(__name__)


def build_transition_matrix(size: int) -> np.ndarray:
    """
    Dense transition matrix over the cells of a board, row-major indexed.

    Returns:
        A: [size*size, size*size] with A[q, p] = p(X_t = p | X_{t-1} = q)
    """
    n = size * size
    A = np.zeros((n, n))
    for q in range(n):
        cell = GridCell(q // size, q % size)
        neighbors = legal_neighbors(cell, size)
        prob = 1.0 / (len(neighbors) + 1)
        for p in neighbors:
            A[q, p.row * size + p.col] = prob
    return A


class ExactFilter(GridFilter):
    """
    Forward-algorithm filter maintaining the exact posterior over cells.

    Cost per update is O(cells^2); intended for small boards and as the
    accuracy baseline for the particle filter.
    """

    def __init__(self, sensor: SensorModel, transition: Optional[np.ndarray] = None):
        """
        Args:
            sensor: Sonar model providing the emission table
            transition: Optional [cells, cells] transition matrix.
                        Defaults to build_transition_matrix(sensor.size).
        """
        super().__init__(sensor)
        n = self.size * self.size
        if transition is None:
            transition = build_transition_matrix(self.size)
        if transition.shape != (n, n):
            raise ValueError(
                f"Transition matrix must be ({n}, {n}), got {transition.shape}"
            )
        self.transition = transition
        _logger.debug("ExactFilter on %dx%d board", self.size, self.size)

    def predict(self) -> np.ndarray:
        """
        Predicted (unnormalized) mass for every cell before the reading.

        Returns:
            predicted: [cells] row-major
        """
        prior = self._belief.to_array(self.cells)
        return prior @ self.transition

    def update(self, noisy_distance: int, observer: GridCell) -> None:
        predicted = self.predict()
        emission = self.sensor.likelihood_grid(noisy_distance, observer).ravel()
        posterior = predicted * emission

        belief = WeightedDistribution()
        for cell, w in zip(self.cells, posterior):
            belief.set(cell, w)
        belief.normalize()

        if belief.total == 0.0:
            warnings.warn(
                f"Reading {noisy_distance} from {observer} has zero likelihood "
                "under the predicted belief; belief is now all zero. "
                "Call reset() to restart from the uniform prior.",
                RuntimeWarning,
            )
        self._belief = belief
