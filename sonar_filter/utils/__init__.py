"""
Utility functions.
"""

from .distribution import WeightedDistribution

from .resampling import (
    multinomial_resample,
    systematic_resample,
    effective_sample_size,
)

from .metrics import (
    belief_entropy,
    total_variation,
    localization_errors,
    expected_distance,
)

__all__ = [
    "WeightedDistribution",
    "multinomial_resample",
    "systematic_resample",
    "effective_sample_size",
    "belief_entropy",
    "total_variation",
    "localization_errors",
    "expected_distance",
]
