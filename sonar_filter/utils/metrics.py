"""
Evaluation metrics for grid beliefs.
"""

import numpy as np
from scipy.stats import entropy
from typing import Sequence

from ..models.grid import GridCell, distance_grid, manhattan_distance


def belief_entropy(belief: np.ndarray) -> float:
    """
    Shannon entropy (nats) of a belief heat map.

    An all-zero belief has no defined entropy and returns NaN.

    Args:
        belief: [size, size] or flat array of non-negative weights
    """
    p = np.asarray(belief, dtype=float).ravel()
    if p.sum() == 0.0:
        return np.nan
    return float(entropy(p))


def total_variation(p: np.ndarray, q: np.ndarray) -> float:
    """
    Total variation distance 0.5 * sum |p - q| between two beliefs.

    Used to judge the particle approximation against the exact belief.
    """
    p = np.asarray(p, dtype=float).ravel()
    q = np.asarray(q, dtype=float).ravel()
    return float(0.5 * np.sum(np.abs(p - q)))


def localization_errors(
    estimates: Sequence[GridCell],
    true_positions: Sequence[GridCell],
) -> np.ndarray:
    """
    Manhattan distance between estimated and true cells at each step.

    Returns:
        errors: [T] integer errors
    """
    return np.array([manhattan_distance(e, t) for e, t in zip(estimates, true_positions)])


def expected_distance(belief: np.ndarray, target: GridCell) -> float:
    """
    Posterior expected Manhattan distance to `target`.

    Args:
        belief: [size, size] normalized belief
        target: True target cell
    """
    belief = np.asarray(belief, dtype=float)
    d = distance_grid(target, belief.shape[0])
    return float(np.sum(belief * d))
