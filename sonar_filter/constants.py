"""Library-wide defaults and numerical tolerances."""

from typing import Final

# --- Board / sensor defaults ---
DEFAULT_BOARD_SIZE: Final[int] = 10
DEFAULT_MAX_NOISE: Final[int] = 2

# --- Particle filter ---
DEFAULT_N_PARTICLES: Final[int] = 200

# --- Tolerances ---
NORMALIZE_TOLERANCE: Final[float] = 1e-9
CPT_ROW_TOLERANCE: Final[float] = 1e-6

__all__ = [
    "DEFAULT_BOARD_SIZE",
    "DEFAULT_MAX_NOISE",
    "DEFAULT_N_PARTICLES",
    "NORMALIZE_TOLERANCE",
    "CPT_ROW_TOLERANCE",
]
