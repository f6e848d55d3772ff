"""
Sonar sensor model.

The sonar reports the Manhattan distance between observer and target with
additive integer noise:

    noisy = clamp(true + v, 0, max_distance - 1),   v in [-max_noise, max_noise]
    p(v) ∝ 2^(max_noise - |v|)

The conditional probability table p(noisy | true) is built once. Noisy
values that would fall outside [0, max_distance) are pooled into the
boundary bins rather than dropped, so every row is a proper distribution.
"""

import logging
from typing import Optional

import numpy as np
from numpy.random import Generator, default_rng

from ..constants import CPT_ROW_TOLERANCE
from ..exceptions import DistanceOutOfRangeError, SensorModelError
from ..utils.distribution import WeightedDistribution
from .grid import GridCell, distance_grid, manhattan_distance

_logger = logging.getLogger(__name__)


def make_noise_prior(max_noise: int) -> WeightedDistribution:
    """
    Geometric noise prior over {-max_noise, ..., max_noise}.

    Returns:
        Normalized distribution keyed by integer noise value
    """
    values = list(range(-max_noise, max_noise + 1))
    weights = [2.0 ** (max_noise - abs(v)) for v in values]
    prior = WeightedDistribution.from_weights(values, weights)
    prior.normalize()
    return prior


def build_cpt(size: int, noise_prior: WeightedDistribution) -> np.ndarray:
    """
    Tabulate p(noisy | true) for a `size` x `size` board.

    Args:
        size: Board dimension
        noise_prior: Normalized distribution over integer noise values

    Returns:
        cpt: [2*size-1, 2*size-1] array indexed [true, noisy]
    """
    max_distance = 2 * size - 1
    cpt = np.zeros((max_distance, max_distance))

    for true_distance in range(max_distance):
        for v, prob in noise_prior.items():
            # Clamp into the boundary bins
            noisy = min(max(true_distance + v, 0), max_distance - 1)
            cpt[true_distance, noisy] += prob

    return cpt


def check_cpt(cpt: np.ndarray, tol: float = CPT_ROW_TOLERANCE) -> None:
    """
    Raises:
        SensorModelError: if any row of the table does not sum to one
    """
    row_sums = cpt.sum(axis=1)
    bad = np.flatnonzero(np.abs(row_sums - 1.0) > tol)
    if bad.size > 0:
        d = int(bad[0])
        raise SensorModelError(
            f"The distribution for true distance {d} sums to {row_sums[d]:.8f}, not 1.0"
        )


class SensorModel:
    """
    Noisy Manhattan-distance sonar on a square board.

    Attributes:
        size: Board dimension
        max_noise: Largest absolute noise added to a reading
        max_distance: Number of distinct distances (2*size - 1)
        noise_prior: Normalized distribution over noise values
        cpt: [max_distance, max_distance] read-only table p(noisy | true)
    """

    def __init__(
        self,
        size: int,
        max_noise: int,
        seed: Optional[int] = None,
        rng: Optional[Generator] = None,
    ):
        """
        Args:
            size: Board dimension (positive)
            max_noise: Bound on the noise magnitude (non-negative)
            seed: Random seed for readings (ignored if rng is provided)
            rng: NumPy random generator for readings
        """
        if int(size) != size or size < 1:
            raise ValueError(f"Board size must be a positive integer, got {size}")
        if int(max_noise) != max_noise or max_noise < 0:
            raise ValueError(f"max_noise must be a non-negative integer, got {max_noise}")

        self.size = int(size)
        self.max_noise = int(max_noise)
        self.max_distance = 2 * self.size - 1
        self.rng = rng if rng is not None else default_rng(seed)

        self.noise_prior = make_noise_prior(self.max_noise)
        cpt = build_cpt(self.size, self.noise_prior)
        check_cpt(cpt)
        cpt.flags.writeable = False
        self.cpt = cpt

        _logger.debug("SensorModel(size=%d, max_noise=%d) built", self.size, self.max_noise)

    def __repr__(self) -> str:
        return f"SensorModel(size={self.size}, max_noise={self.max_noise})"

    # -------------------------------------------------------------------------
    # CPT lookups
    # -------------------------------------------------------------------------

    def check_distance(self, distance: int, what: str = "Distance") -> None:
        """
        Raises:
            DistanceOutOfRangeError: if distance is not in [0, max_distance)
        """
        if distance < 0 or distance >= self.max_distance:
            raise DistanceOutOfRangeError(
                f"{what} {distance} outside [0, {self.max_distance})"
            )

    def emission_row(self, true_distance: int) -> np.ndarray:
        """
        Distribution over noisy readings given the true distance.

        Returns:
            row: [max_distance] read-only probabilities, sums to one

        Raises:
            DistanceOutOfRangeError: if true_distance is not a valid distance
        """
        self.check_distance(true_distance, "True distance")
        return self.cpt[true_distance]

    def emission_probability(self, true_distance: int, noisy_distance: int) -> float:
        """p(noisy_distance | true_distance)."""
        self.check_distance(noisy_distance, "Noisy distance")
        return float(self.emission_row(true_distance)[noisy_distance])

    def likelihood_grid(self, noisy_distance: int, observer: GridCell) -> np.ndarray:
        """
        Likelihood of a reading for every hypothesised target cell.

        Returns:
            L: [size, size] array, L[r, c] = p(noisy | target at (r, c))
        """
        self.check_distance(noisy_distance, "Noisy distance")
        return self.cpt[distance_grid(observer, self.size), noisy_distance]

    # -------------------------------------------------------------------------
    # Readings
    # -------------------------------------------------------------------------

    @staticmethod
    def manhattan_distance(p1: GridCell, p2: GridCell) -> int:
        return manhattan_distance(p1, p2)

    def sample_noise(self) -> int:
        """Draw one noise value from the prior."""
        return self.noise_prior.sample(self.rng)

    def noisy_distance(self, p1: GridCell, p2: GridCell) -> int:
        """
        Noisy reading of the distance between two cells.

        Readings are clamped to [0, max_distance), the same pooling the CPT
        applies, so every reading is a valid column of the table.
        This differs from the bare max(0, true + v) reading, which clamps only
        the lower end.
        """
        noisy = manhattan_distance(p1, p2) + self.sample_noise()
        return min(max(0, noisy), self.max_distance - 1)
