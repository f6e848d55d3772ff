"""
Resampling schemes for particle populations over grid cells.
"""

import numpy as np
from numpy.random import Generator
from typing import List

from .distribution import WeightedDistribution


def multinomial_resample(
    distribution: WeightedDistribution,
    n: int,
    rng: Generator,
) -> List:
    """
    Multinomial resampling.

    n i.i.d. draws with replacement, each made by the distribution's own
    cumulative walk.

    Args:
        distribution: Distribution to draw from (normalized on first draw)
        n: Number of draws
        rng: NumPy random generator

    Returns:
        samples: [n] drawn elements
    """
    return [distribution.sample(rng) for _ in range(n)]


def systematic_resample(
    distribution: WeightedDistribution,
    n: int,
    rng: Generator,
) -> List:
    """
    Systematic resampling.

    A single random offset in [0, 1/n) followed by n evenly spaced
    positions; lower variance than multinomial draws.

    Args:
        distribution: Distribution with positive total weight
        n: Number of draws
        rng: NumPy random generator

    Returns:
        samples: [n] drawn elements, grouped in canonical order
    """
    elements = distribution.elements()
    weights = distribution.to_array()
    weights = weights / weights.sum()

    cdf = np.cumsum(weights)
    cdf[-1] = 1.0  # Guard against round-off in the last bin

    u = rng.uniform(0.0, 1.0 / n) + np.arange(n) / n
    indices = np.searchsorted(cdf, u, side='left')
    indices = np.minimum(indices, len(elements) - 1)

    return [elements[i] for i in indices]


def effective_sample_size(weights: np.ndarray) -> float:
    """
    ESS = 1 / sum(w_i^2) of the normalized weights.

    Args:
        weights: [N] Non-negative, not necessarily normalized, per-particle weights

    Returns:
        ESS in [1, N], or 0.0 if every weight is zero
    """
    weights = np.asarray(weights, dtype=float)
    total = weights.sum()
    if total == 0.0:
        return 0.0
    w = weights / total
    return float(1.0 / np.sum(w ** 2))
