"""
Particle filter over grid cells.

Each update runs three phases:

1. Elapse: every particle moves to a uniformly chosen cell among its legal
   neighbours and itself.
2. Weight: each particle adds its emission probability to a distribution
   keyed by cell; the normalized result is the exposed belief.
3. Resample: a new population of the same size is drawn from that belief.
"""

import logging
import warnings
from typing import List, Literal, Optional, Tuple

import numpy as np
from numpy.random import Generator, default_rng

from .base import GridFilter
from ..constants import DEFAULT_N_PARTICLES
from ..models.grid import GridCell, legal_neighbors, manhattan_distance
from ..models.sonar import SensorModel
from ..utils.resampling import (
    effective_sample_size,
    multinomial_resample,
    systematic_resample,
)

_logger = logging.getLogger(__name__)


class ParticleFilter(GridFilter):
    """
    Sampling approximation of the belief with a fixed population of cells.

    Particles are bare cells; weights live in the shared belief
    distribution, so particles on the same cell pool their weight.
    """

    def __init__(
        self,
        sensor: SensorModel,
        n_particles: int = DEFAULT_N_PARTICLES,
        resample_method: Literal["multinomial", "systematic"] = "multinomial",
        reset_weights: bool = True,
        seed: Optional[int] = None,
        rng: Optional[Generator] = None,
    ):
        """
        Args:
            sensor: Sonar model providing the emission table
            n_particles: Number of particles (positive)
            resample_method: "multinomial" (i.i.d. draws) or "systematic"
            reset_weights: Zero the belief before each weight phase. If False,
                           weights compound onto the previous normalized belief.
            seed: Random seed (ignored if rng is provided)
            rng: NumPy random generator
        """
        if int(n_particles) != n_particles or n_particles < 1:
            raise ValueError(f"n_particles must be a positive integer, got {n_particles}")
        if resample_method not in ("multinomial", "systematic"):
            raise ValueError(f"Unknown resample method: {resample_method}")

        super().__init__(sensor)
        self.n_particles = int(n_particles)
        self.resample_method = resample_method
        self.reset_weights = reset_weights
        self.rng = rng if rng is not None else default_rng(seed)

        self.last_weights = np.zeros(self.n_particles)
        self._particles = self._sample_prior()
        _logger.debug(
            "ParticleFilter with %d particles (%s resampling) on %dx%d board",
            self.n_particles, self.resample_method, self.size, self.size,
        )

    def _sample_prior(self) -> List[GridCell]:
        return multinomial_resample(self._belief, self.n_particles, self.rng)

    def reset(self) -> None:
        """Return to the uniform prior and redraw the population from it."""
        super().reset()
        self._particles = self._sample_prior()
        self.last_weights = np.zeros(self.n_particles)

    @property
    def particles(self) -> Tuple[GridCell, ...]:
        """Snapshot of the current population."""
        return tuple(self._particles)

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def elapse(self, particles: List[GridCell]) -> List[GridCell]:
        """
        Move each particle one tick forward.

        Returns:
            New list; staying put is one of the equally likely options.
        """
        moved = []
        for p in particles:
            options = legal_neighbors(p, self.size)
            options.append(p)
            moved.append(options[self.rng.integers(len(options))])
        return moved

    def weigh(
        self,
        particles: List[GridCell],
        noisy_distance: int,
        observer: GridCell,
    ) -> np.ndarray:
        """
        Accumulate emission probabilities into the belief and normalize.

        Returns:
            weights: [N] per-particle emission probabilities
        """
        if self.reset_weights:
            # clear() first so the running total starts at exactly zero
            self._belief.clear()
            for cell in self.cells:
                self._belief.set(cell, 0.0)

        weights = np.zeros(len(particles))
        for i, p in enumerate(particles):
            d = manhattan_distance(observer, p)
            weights[i] = self.sensor.emission_row(d)[noisy_distance]
            self._belief.increment(p, weights[i])

        self._belief.normalize()
        return weights

    def resample(self) -> List[GridCell]:
        """Draw a fresh, unweighted population from the current belief."""
        if self.resample_method == "systematic":
            return systematic_resample(self._belief, self.n_particles, self.rng)
        return multinomial_resample(self._belief, self.n_particles, self.rng)

    def update(self, noisy_distance: int, observer: GridCell) -> None:
        self.sensor.check_distance(noisy_distance, "Noisy distance")

        particles = self.elapse(self._particles)
        self.last_weights = self.weigh(particles, noisy_distance, observer)

        if self._belief.total == 0.0:
            warnings.warn(
                f"Every particle has zero likelihood for reading {noisy_distance} "
                f"from {observer}; reinitializing from the uniform prior.",
                RuntimeWarning,
            )
            self.reset()
            return

        self._particles = self.resample()

    def effective_sample_size(self) -> float:
        """ESS of the per-particle weights from the last weight phase."""
        return effective_sample_size(self.last_weights)
