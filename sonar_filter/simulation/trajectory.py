"""
Trajectory simulation and storage.

A tick is: the target moves, the sonar reads the noisy distance from the
observer, the filter updates, and (in pursuit episodes) the observer steps
toward the most likely cell.
"""

import logging

import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from numpy.random import Generator, default_rng

from ..filters.base import GridFilter
from ..models.grid import GridCell
from ..models.sonar import SensorModel
from .agents import StationaryTarget, pursuit_step

_logger = logging.getLogger(__name__)


def _cells_to_array(cells: List[GridCell]) -> np.ndarray:
    return np.array([(c.row, c.col) for c in cells], dtype=int).reshape(-1, 2)


def _array_to_cells(a: np.ndarray) -> List[GridCell]:
    return [GridCell(int(r), int(c)) for r, c in a]


@dataclass
class Trajectory:
    """
    Container for a simulated or recorded run.

    Attributes:
        target_positions: [T] True target cells after each move
        observer_positions: [T] Observer cells the readings were taken from
        observations: [T] Noisy distance readings
        metadata: Optional dictionary for additional info
    """
    target_positions: List[GridCell]
    observer_positions: List[GridCell]
    observations: np.ndarray
    metadata: Optional[Dict[str, Any]] = None

    @property
    def T(self) -> int:
        """Number of ticks."""
        return len(self.observations)

    def subset(self, start: int, end: int) -> "Trajectory":
        """
        Extract ticks [start, end).
        """
        return Trajectory(
            target_positions=self.target_positions[start:end],
            observer_positions=self.observer_positions[start:end],
            observations=self.observations[start:end].copy(),
            metadata=self.metadata,
        )

    def save(self, path: str):
        """Save trajectory to .npz file."""
        np.savez(
            path,
            target_positions=_cells_to_array(self.target_positions),
            observer_positions=_cells_to_array(self.observer_positions),
            observations=self.observations,
            metadata=self.metadata,
        )

    @classmethod
    def load(cls, path: str) -> "Trajectory":
        """Load trajectory from .npz file."""
        data = np.load(path, allow_pickle=True)
        metadata = data['metadata'].item() if 'metadata' in data else None
        return cls(
            target_positions=_array_to_cells(data['target_positions']),
            observer_positions=_array_to_cells(data['observer_positions']),
            observations=data['observations'],
            metadata=metadata,
        )


@dataclass
class Episode(Trajectory):
    """
    Pursuit run where the observer chases the filter's estimate.

    Attributes:
        estimates: [T] Most likely cell after each update
        captured_at: Tick index at which the observer reached the target, or None
    """
    estimates: List[GridCell] = field(default_factory=list)
    captured_at: Optional[int] = None

    @property
    def captured(self) -> bool:
        return self.captured_at is not None

    def save(self, path: str):
        """Save episode, including estimates and capture tick, to .npz file."""
        np.savez(
            path,
            target_positions=_cells_to_array(self.target_positions),
            observer_positions=_cells_to_array(self.observer_positions),
            observations=self.observations,
            metadata=self.metadata,
            estimates=_cells_to_array(self.estimates),
            captured_at=-1 if self.captured_at is None else self.captured_at,
        )

    @classmethod
    def load(cls, path: str) -> "Episode":
        """Load episode from .npz file written by Episode.save."""
        data = np.load(path, allow_pickle=True)
        if 'estimates' not in data or 'captured_at' not in data:
            raise ValueError(f"{path} holds a plain trajectory, not an episode")
        captured_at = int(data['captured_at'])
        return cls(
            target_positions=_array_to_cells(data['target_positions']),
            observer_positions=_array_to_cells(data['observer_positions']),
            observations=data['observations'],
            metadata=data['metadata'].item() if 'metadata' in data else None,
            estimates=_array_to_cells(data['estimates']),
            captured_at=None if captured_at < 0 else captured_at,
        )


def simulate(
    target: StationaryTarget,
    sensor: SensorModel,
    T: int,
    observer: GridCell = GridCell(0, 0),
    metadata: Optional[Dict[str, Any]] = None,
) -> Trajectory:
    """
    Simulate readings of a moving target from a fixed observer.

    Args:
        target: Target policy (its rng drives the motion)
        sensor: Sonar model (its rng drives the noise)
        T: Number of ticks
        observer: Fixed observer cell
        metadata: Optional metadata to attach

    Returns:
        Trajectory object
    """
    targets, observations = [], np.zeros(T, dtype=int)
    for t in range(T):
        location = target.move()
        targets.append(location)
        observations[t] = sensor.noisy_distance(location, observer)

    return Trajectory(
        target_positions=targets,
        observer_positions=[observer] * T,
        observations=observations,
        metadata=metadata,
    )


def run_episode(
    belief_filter: GridFilter,
    target: StationaryTarget,
    sensor: SensorModel,
    max_steps: int = 100,
    start: GridCell = GridCell(0, 0),
    seed: Optional[int] = None,
    rng: Optional[Generator] = None,
) -> Episode:
    """
    Play one pursuit episode until capture or `max_steps` ticks.

    Args:
        belief_filter: Filter used by the pursuer (updated in place)
        target: Target policy
        sensor: Sonar model producing the readings
        max_steps: Tick limit
        start: Pursuer's starting cell
        seed: Random seed for pursuit tie-breaks (ignored if rng is provided)
        rng: NumPy random generator for pursuit tie-breaks

    Returns:
        Episode object
    """
    if rng is None:
        rng = default_rng(seed)

    observer = start
    targets, observers, readings, estimates = [], [], [], []
    captured_at = None

    for t in range(max_steps):
        location = target.move()
        z = sensor.noisy_distance(location, observer)
        belief_filter.update(z, observer)
        if belief_filter.collapsed:
            _logger.info("Belief collapsed at tick %d; restarting from uniform prior", t)
            belief_filter.reset()

        targets.append(location)
        observers.append(observer)
        readings.append(z)
        estimates.append(belief_filter.most_likely_cell())

        observer = pursuit_step(observer, belief_filter, rng)
        if observer == target.location:
            captured_at = t
            break

    return Episode(
        target_positions=targets,
        observer_positions=observers,
        observations=np.array(readings, dtype=int),
        estimates=estimates,
        captured_at=captured_at,
    )
