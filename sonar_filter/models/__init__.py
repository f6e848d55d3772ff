"""
Grid world and sensor model definitions.
"""

from .grid import (
    GridCell,
    grid_cells,
    in_bounds,
    legal_neighbors,
    manhattan_distance,
    distance_grid,
)
from .sonar import SensorModel, make_noise_prior, build_cpt, check_cpt

__all__ = [
    "GridCell",
    "grid_cells",
    "in_bounds",
    "legal_neighbors",
    "manhattan_distance",
    "distance_grid",
    "SensorModel",
    "make_noise_prior",
    "build_cpt",
    "check_cpt",
]
