"""
Filtering algorithms.
"""

from typing import Literal

from .base import FilterResult, GridFilter
from .forward import ExactFilter, build_transition_matrix
from .particle import ParticleFilter
from ..models.sonar import SensorModel


def make_filter(
    kind: Literal["exact", "particle"],
    sensor: SensorModel,
    **kwargs,
) -> GridFilter:
    """
    Build a filter by name.

    Args:
        kind: "exact" (forward algorithm) or "particle"
        sensor: Sonar model shared with the observation source
        **kwargs: Passed to the filter constructor

    Returns:
        GridFilter instance
    """
    if kind == "exact":
        return ExactFilter(sensor, **kwargs)
    elif kind == "particle":
        return ParticleFilter(sensor, **kwargs)
    else:
        raise ValueError(f"Unknown filter kind: {kind}")


__all__ = [
    "FilterResult",
    "GridFilter",
    "ExactFilter",
    "ParticleFilter",
    "build_transition_matrix",
    "make_filter",
]
