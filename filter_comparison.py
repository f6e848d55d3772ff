"""
Filter Comparison Experiments: Exact forward algorithm vs particle filter

Experiments:
1. Fixed observer, random target - localisation error and distance of the
   particle belief from the exact belief (total variation)
2. Pursuit episodes - how quickly each filter lets the pursuer catch the target

The exact filter drops the "stay" transition mass while the particle filter
treats staying as an ordinary move, so the two beliefs never coincide even
with many particles.
"""

import argparse
import time
import numpy as np
from numpy.random import default_rng
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from sonar_filter.constants import DEFAULT_BOARD_SIZE, DEFAULT_MAX_NOISE, DEFAULT_N_PARTICLES
from sonar_filter.filters import make_filter
from sonar_filter.models import GridCell, SensorModel
from sonar_filter.simulation import make_target, simulate, run_episode
from sonar_filter.utils import total_variation


# =============================================================================
# Result Data Structures
# =============================================================================

@dataclass
class TrackingResult:
    """Result from a single filter run on one trajectory."""
    mean_error: float
    hit_rate: float
    runtime: float
    expected_error: float = 0.0
    tv_to_exact: Optional[float] = None


@dataclass
class ExperimentResult:
    """Aggregated results across trajectories."""
    filter_name: str
    error_mean: float
    error_std: float
    hit_rate_mean: float
    runtime_mean: float
    expected_error_mean: float = 0.0
    tv_mean: Optional[float] = None
    per_trajectory: List[TrackingResult] = field(default_factory=list)


FILTER_CONFIGS = [
    ("Exact", "exact", {}),
    ("PF-multinomial", "particle", {"resample_method": "multinomial"}),
    ("PF-systematic", "particle", {"resample_method": "systematic"}),
]


# =============================================================================
# Experiment 1: Fixed observer
# =============================================================================

def run_tracking_experiment(
    size: int = DEFAULT_BOARD_SIZE,
    max_noise: int = DEFAULT_MAX_NOISE,
    n_particles: int = DEFAULT_N_PARTICLES,
    T: int = 30,
    n_trajectories: int = 10,
    target_kind: str = "random",
    seed: int = 42,
    verbose: bool = True,
) -> Dict[str, ExperimentResult]:
    """
    Track a moving target from the top-left corner with every filter.

    Returns:
        Dict mapping filter name to ExperimentResult
    """
    results = {name: [] for name, _, _ in FILTER_CONFIGS}
    curves = {name: np.zeros(T) for name, _, _ in FILTER_CONFIGS}

    for traj_idx in range(n_trajectories):
        traj_seed = seed + traj_idx * 1000
        sensor = SensorModel(size, max_noise, seed=traj_seed)
        target = make_target(target_kind, size, rng=default_rng(traj_seed + 1))
        trajectory = simulate(target, sensor, T, observer=GridCell(0, 0))

        if verbose:
            print(f"  Trajectory {traj_idx + 1}/{n_trajectories}", end="")

        exact_beliefs = None
        for name, kind, kwargs in FILTER_CONFIGS:
            if kind == "particle":
                kwargs = dict(kwargs, n_particles=n_particles, seed=traj_seed + 2)
            filt = make_filter(kind, sensor, **kwargs)

            t0 = time.time()
            result = filt.filter(
                trajectory.observations,
                trajectory.observer_positions,
                return_beliefs=True,
            )
            runtime = time.time() - t0

            if kind == "exact":
                exact_beliefs = result.beliefs
                tv = None
            else:
                tv = float(np.mean([
                    total_variation(b, e) for b, e in zip(result.beliefs, exact_beliefs)
                ]))

            curves[name] += result.errors(trajectory.target_positions) / n_trajectories
            results[name].append(TrackingResult(
                mean_error=result.mean_error(trajectory.target_positions),
                hit_rate=result.hit_rate(trajectory.target_positions),
                runtime=runtime,
                expected_error=float(np.mean(result.expected_errors(trajectory.target_positions))),
                tv_to_exact=tv,
            ))

        if verbose:
            print(" - Done")

    aggregated = aggregate(results)
    print_results(aggregated, f"Tracking: {size}x{size} board, {target_kind} target")
    plot_error_curves(curves, f"tracking_errors_{target_kind}.png")
    return aggregated


def aggregate(results: Dict[str, List[TrackingResult]]) -> Dict[str, ExperimentResult]:
    aggregated = {}
    for name, runs in results.items():
        errors = [r.mean_error for r in runs]
        tvs = [r.tv_to_exact for r in runs if r.tv_to_exact is not None]
        aggregated[name] = ExperimentResult(
            filter_name=name,
            error_mean=float(np.mean(errors)),
            error_std=float(np.std(errors)),
            hit_rate_mean=float(np.mean([r.hit_rate for r in runs])),
            runtime_mean=float(np.mean([r.runtime for r in runs])),
            expected_error_mean=float(np.mean([r.expected_error for r in runs])),
            tv_mean=float(np.mean(tvs)) if tvs else None,
            per_trajectory=runs,
        )
    return aggregated


def print_results(results: Dict[str, ExperimentResult], title: str):
    print("\n" + "-" * 70)
    print(title)
    print("-" * 70)
    print(f"{'Filter':<18}{'Error':>14}{'E[error]':>10}{'Hit rate':>10}{'Time (s)':>10}{'TV vs exact':>14}")
    for name, r in results.items():
        tv = f"{r.tv_mean:.3f}" if r.tv_mean is not None else "-"
        print(f"{name:<18}{r.error_mean:>8.2f} ± {r.error_std:<4.2f}"
              f"{r.expected_error_mean:>10.2f}"
              f"{r.hit_rate_mean:>10.2f}{r.runtime_mean:>10.3f}{tv:>14}")


def plot_error_curves(curves: Dict[str, np.ndarray], path: str):
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        print("\nmatplotlib not available — skipping plots.")
        return

    fig, ax = plt.subplots(figsize=(7, 4))
    for name, curve in curves.items():
        ax.plot(np.arange(1, len(curve) + 1), curve, "-o", markersize=3, label=name)
    ax.set_xlabel("tick")
    ax.set_ylabel("mean Manhattan error")
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Plot saved to {path}")


# =============================================================================
# Experiment 2: Pursuit
# =============================================================================

def run_pursuit_experiment(
    size: int = DEFAULT_BOARD_SIZE,
    max_noise: int = DEFAULT_MAX_NOISE,
    n_particles: int = DEFAULT_N_PARTICLES,
    max_steps: int = 100,
    n_episodes: int = 10,
    target_kind: str = "random",
    seed: int = 42,
) -> Dict[str, List[Optional[int]]]:
    """
    Let the pursuer chase the target using each filter's estimate.

    Returns:
        Dict mapping filter name to capture ticks (None when not caught)
    """
    captures = {name: [] for name, _, _ in FILTER_CONFIGS}

    for ep in range(n_episodes):
        ep_seed = seed + ep * 1000
        for name, kind, kwargs in FILTER_CONFIGS:
            sensor = SensorModel(size, max_noise, seed=ep_seed)
            target = make_target(target_kind, size, rng=default_rng(ep_seed + 1))
            if kind == "particle":
                kwargs = dict(kwargs, n_particles=n_particles, seed=ep_seed + 2)
            filt = make_filter(kind, sensor, **kwargs)

            episode = run_episode(filt, target, sensor, max_steps=max_steps, seed=ep_seed + 3)
            captures[name].append(episode.captured_at)

    print("\n" + "-" * 70)
    print(f"Pursuit: {n_episodes} episodes, {target_kind} target, limit {max_steps} ticks")
    print("-" * 70)
    for name, ticks in captures.items():
        caught = [t + 1 for t in ticks if t is not None]
        mean_ticks = f"{np.mean(caught):.1f}" if caught else "-"
        print(f"{name:<18} caught {len(caught)}/{n_episodes}, mean ticks to capture {mean_ticks}")

    return captures


# =============================================================================
# Entry point
# =============================================================================

if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Exact vs particle filter on the sonar grid"
    )
    parser.add_argument("--size", type=int, default=DEFAULT_BOARD_SIZE, help="Board size")
    parser.add_argument("--max_noise", type=int, default=DEFAULT_MAX_NOISE, help="Sonar noise bound")
    parser.add_argument("--n_particles", type=int, default=DEFAULT_N_PARTICLES, help="Particles")
    parser.add_argument("--T", type=int, default=30, help="Ticks per trajectory")
    parser.add_argument("--n_runs", type=int, default=10, help="Trajectories / episodes")
    parser.add_argument("--target", choices=["stationary", "random", "east"],
                        default="random", help="Target policy")
    parser.add_argument("--seed", type=int, default=42, help="Base seed")
    parser.add_argument("--no_pursuit", action="store_true", help="Skip pursuit episodes")

    args = parser.parse_args()

    run_tracking_experiment(
        size=args.size,
        max_noise=args.max_noise,
        n_particles=args.n_particles,
        T=args.T,
        n_trajectories=args.n_runs,
        target_kind=args.target,
        seed=args.seed,
    )
    if not args.no_pursuit:
        run_pursuit_experiment(
            size=args.size,
            max_noise=args.max_noise,
            n_particles=args.n_particles,
            n_episodes=args.n_runs,
            target_kind=args.target,
            seed=args.seed,
        )
