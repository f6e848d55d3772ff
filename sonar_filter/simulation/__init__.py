"""
Target motion, pursuit, and trajectory simulation.
"""

from .agents import (
    StationaryTarget,
    RandomTarget,
    EastboundTarget,
    make_target,
    pursuit_step,
)
from .trajectory import Trajectory, Episode, simulate, run_episode

__all__ = [
    "StationaryTarget",
    "RandomTarget",
    "EastboundTarget",
    "make_target",
    "pursuit_step",
    "Trajectory",
    "Episode",
    "simulate",
    "run_episode",
]
