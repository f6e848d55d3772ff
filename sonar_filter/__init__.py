"""
Sonar Filtering Library.

A NumPy-based library for tracking a target on a square grid from noisy
Manhattan-distance sonar readings with:
- Exact forward-algorithm (HMM) filtering
- Particle filtering (elapse / weight / resample)
- Target motion policies and pursuit simulation
"""

from . import utils
from . import models
from . import filters
from . import simulation

from .exceptions import (
    SonarFilterError,
    UnknownElementError,
    EmptyDistributionError,
    InvalidArgumentError,
    DistanceOutOfRangeError,
    SensorModelError,
)
from .models import GridCell, SensorModel
from .filters import ExactFilter, ParticleFilter, make_filter
from .utils import WeightedDistribution

__version__ = "0.1.0"
