"""
Basic test script for sonar_filter library.

Run: python test_basic.py
"""

import numpy as np
from numpy.random import default_rng

from sonar_filter.models import GridCell, SensorModel, grid_cells
from sonar_filter.simulation import RandomTarget, simulate, run_episode
from sonar_filter.filters import ExactFilter, ParticleFilter
from sonar_filter.utils import total_variation


def test_sensor_model_size_3():
    """Manhattan distances and emission rows on a 3x3 board."""
    print("=" * 60)
    print("Testing Sensor Model (size=3, max_noise=2)")
    print("=" * 60)

    sensor = SensorModel(size=3, max_noise=2)
    print(f"Sensor: {sensor}")

    cells = grid_cells(3)
    for p1 in cells:
        for p2 in cells:
            expected = abs(p1.row - p2.row) + abs(p1.col - p2.col)
            assert sensor.manhattan_distance(p1, p2) == expected, \
                f"Wrong distance between {p1} and {p2}"

    for d in range(5):
        row = sensor.emission_row(d)
        print(f"p(noisy | true={d}) = {np.round(row, 3)}")
        assert np.isclose(row.sum(), 1.0), f"Row {d} does not sum to 1"

    print("\n✓ Sensor model working correctly!")
    return True


def test_filters_track_random_target():
    """Exact and particle filters on the same random-walk target."""
    print("\n" + "=" * 60)
    print("Testing Exact vs Particle Filter")
    print("=" * 60)

    size = 6
    sensor = SensorModel(size=size, max_noise=2, seed=42)
    target = RandomTarget(size, rng=default_rng(42))
    trajectory = simulate(target, sensor, T=30, observer=GridCell(0, 0))
    print(f"Simulated {trajectory.T} ticks, observations: {trajectory.observations}")

    exact = ExactFilter(sensor)
    pf = ParticleFilter(sensor, n_particles=2000, seed=123)

    result_exact = exact.filter(trajectory.observations, trajectory.observer_positions,
                                return_beliefs=True)
    result_pf = pf.filter(trajectory.observations, trajectory.observer_positions,
                          return_beliefs=True)

    print("\n" + "-" * 40)
    print("Results:")
    print("-" * 40)
    print(f"Exact - Mean error: {result_exact.mean_error(trajectory.target_positions):.2f}, "
          f"Final entropy: {result_exact.entropy[-1]:.2f}")
    print(f"PF    - Mean error: {result_pf.mean_error(trajectory.target_positions):.2f}, "
          f"Final entropy: {result_pf.entropy[-1]:.2f}, ESS: {pf.effective_sample_size():.1f}")

    tv = np.array([total_variation(a, b) for a, b in zip(result_exact.beliefs, result_pf.beliefs)])
    print(f"Total variation PF vs exact: mean {tv.mean():.3f}, max {tv.max():.3f}")

    # The motion models differ ("stay" handling), so only a loose bound applies
    for name, result in [("Exact", result_exact), ("PF", result_pf)]:
        assert np.allclose(result.beliefs.sum(axis=(1, 2)), 1.0), f"{name} belief not normalized"
    assert np.all(tv <= 1.0)

    print("\n✓ Both filters working!")
    return True


def test_pursuit_episode():
    """Pursuer chasing a stationary target with noiseless sonar."""
    print("\n" + "=" * 60)
    print("Testing Pursuit Episode")
    print("=" * 60)

    from sonar_filter.simulation import StationaryTarget

    sensor = SensorModel(size=5, max_noise=0, seed=0)
    target = StationaryTarget(5, start=GridCell(4, 4))
    pf = ParticleFilter(sensor, n_particles=500, seed=0)
    episode = run_episode(pf, target, sensor, max_steps=50, seed=0)

    print(f"Captured: {episode.captured} after {len(episode.observations)} ticks")
    assert episode.captured, "Pursuer should catch a stationary target with exact readings"

    print("\n✓ Pursuit working!")
    return True


def main():
    """Run all tests."""
    print("\n" + "#" * 60)
    print("# Sonar Filter Library Tests")
    print("#" * 60)

    tests = [
        test_sensor_model_size_3,
        test_filters_track_random_target,
        test_pursuit_episode,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            if test():
                passed += 1
        except Exception as e:
            print(f"\n✗ {test.__name__} FAILED: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print("\n" + "#" * 60)
    print(f"# Results: {passed} passed, {failed} failed")
    print("#" * 60)

    return failed == 0


if __name__ == "__main__":
    success = main()
    exit(0 if success else 1)
