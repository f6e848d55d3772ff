"""
Tests for WeightedDistribution: bookkeeping, normalization and sampling.

Run: pytest test_distribution.py -v
"""

import pytest
import numpy as np
from numpy.random import default_rng

from sonar_filter.exceptions import (
    EmptyDistributionError,
    InvalidArgumentError,
    UnknownElementError,
)
from sonar_filter.models.grid import GridCell
from sonar_filter.utils.distribution import WeightedDistribution


# ============================================================================
# Helpers
# ============================================================================

class FixedDraw:
    """Stand-in generator whose random() always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def assert_sums_to_one(dist: WeightedDistribution, name: str, atol: float = 1e-9):
    total = sum(dist.weight(e) for e in dist.elements())
    if abs(total - 1.0) > atol:
        pytest.fail(f"{name}: weights sum to {total:.12f}, expected 1.0 ± {atol:.0e}")


@pytest.fixture
def abc():
    dist = WeightedDistribution()
    dist.set("a", 1.0)
    dist.set("b", 2.0)
    dist.set("c", 1.0)
    return dist


# ============================================================================
# Bookkeeping
# ============================================================================

class TestBookkeeping:

    def test_set_replaces_previous_weight(self):
        dist = WeightedDistribution()
        dist.set("a", 2.0)
        dist.set("a", 5.0)
        assert dist.weight("a") == 5.0
        assert dist.total == pytest.approx(5.0)
        assert len(dist) == 1

    def test_increment_existing(self, abc):
        abc.increment("b", 0.5)
        assert abc.weight("b") == pytest.approx(2.5)
        assert abc.total == pytest.approx(4.5)

    def test_increment_unknown_raises(self, abc):
        with pytest.raises(UnknownElementError):
            abc.increment("z", 1.0)
        assert "z" not in abc

    def test_unknown_element_is_key_error(self, abc):
        with pytest.raises(KeyError):
            abc.increment("z", 1.0)

    def test_weight_of_absent_is_zero(self, abc):
        assert abc.weight("missing") == 0.0
        assert not abc.contains("missing")
        assert abc.contains("a")

    def test_elements_keep_insertion_order(self):
        dist = WeightedDistribution()
        for key in ["z", "y", "x"]:
            dist.set(key, 1.0)
        dist.set("y", 3.0)
        assert dist.elements() == ["z", "y", "x"]
        assert list(dist) == ["z", "y", "x"]

    def test_clear(self, abc):
        abc.clear()
        assert len(abc) == 0
        assert abc.total == 0.0

    def test_copy_is_independent(self, abc):
        snapshot = abc.copy()
        abc.set("a", 10.0)
        assert snapshot.weight("a") == 1.0
        assert snapshot.total == pytest.approx(4.0)

    def test_grid_cells_as_keys(self):
        dist = WeightedDistribution()
        dist.set(GridCell(1, 2), 0.5)
        dist.increment(GridCell(1, 2), 0.25)
        assert dist.weight(GridCell(1, 2)) == pytest.approx(0.75)

    def test_to_array(self, abc):
        np.testing.assert_allclose(abc.to_array(), [1.0, 2.0, 1.0])
        np.testing.assert_allclose(abc.to_array(["c", "missing", "b"]), [1.0, 0.0, 2.0])

    def test_most_likely_ties_go_to_first(self):
        dist = WeightedDistribution.from_weights(["a", "b", "c"], [1.0, 3.0, 3.0])
        assert dist.most_likely() == "b"

    def test_most_likely_of_zero_distribution_raises(self):
        dist = WeightedDistribution.from_weights(["a", "b"], [0.0, 0.0])
        with pytest.raises(EmptyDistributionError):
            dist.most_likely()


# ============================================================================
# Bulk constructors
# ============================================================================

class TestConstructors:

    def test_from_elements_tallies_duplicates(self):
        dist = WeightedDistribution.from_elements(["a", "b", "a", "a"])
        assert dist.elements() == ["a", "b"]
        assert dist.weight("a") == 3.0
        assert dist.weight("b") == 1.0
        assert dist.total == 4.0

    def test_from_weights(self):
        dist = WeightedDistribution.from_weights(["a", "b", "a"], [0.5, 1.0, 0.25])
        assert dist.weight("a") == pytest.approx(0.75)
        assert dist.weight("b") == pytest.approx(1.0)
        assert dist.total == pytest.approx(1.75)

    def test_from_weights_length_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            WeightedDistribution.from_weights(["a", "b"], [1.0])

    def test_length_mismatch_is_value_error(self):
        with pytest.raises(ValueError):
            WeightedDistribution.from_weights(["a"], [1.0, 2.0])


# ============================================================================
# Normalization
# ============================================================================

class TestNormalize:

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_positive_weights_sum_to_one(self, seed):
        rng = default_rng(seed)
        weights = rng.uniform(0.0, 10.0, size=50)
        dist = WeightedDistribution.from_weights(list(range(50)), weights)
        dist.normalize()
        assert_sums_to_one(dist, f"seed={seed}")
        assert dist.total == 1.0
        np.testing.assert_allclose(dist.to_array(), weights / weights.sum())

    def test_zero_distribution_unchanged(self):
        dist = WeightedDistribution.from_weights(["a", "b", "c"], [0.0, 0.0, 0.0])
        dist.normalize()
        assert dist.total == 0.0
        assert [dist.weight(e) for e in dist.elements()] == [0.0, 0.0, 0.0]

    def test_empty_distribution_unchanged(self):
        dist = WeightedDistribution()
        dist.normalize()
        assert len(dist) == 0


# ============================================================================
# Sampling
# ============================================================================

class TestSample:

    def test_empty_raises(self):
        with pytest.raises(EmptyDistributionError):
            WeightedDistribution().sample(default_rng(0))

    def test_all_zero_raises(self):
        dist = WeightedDistribution.from_weights(["a", "b"], [0.0, 0.0])
        with pytest.raises(EmptyDistributionError):
            dist.sample(default_rng(0))

    def test_sample_normalizes(self, abc):
        abc.sample(default_rng(0))
        assert abc.total == 1.0
        assert abc.weight("b") == pytest.approx(0.5)

    @pytest.mark.parametrize("r", [0.0, 1e-12, 0.5, 0.999999999])
    def test_single_nonzero_element_always_drawn(self, r):
        dist = WeightedDistribution.from_weights(["a", "b", "c"], [0.0, 3.0, 0.0])
        assert dist.sample(FixedDraw(r)) == "b"

    def test_single_nonzero_element_seeded(self):
        dist = WeightedDistribution.from_weights(["a", "b", "c"], [0.0, 0.0, 7.0])
        rng = default_rng(123)
        assert all(dist.sample(rng) == "c" for _ in range(500))

    def test_cumulative_walk_in_canonical_order(self):
        # cumulative: a=0.25, b=0.75, c=1.0
        dist = WeightedDistribution.from_weights(["a", "b", "c"], [1.0, 2.0, 1.0])
        assert dist.sample(FixedDraw(0.1)) == "a"
        assert dist.sample(FixedDraw(0.25)) == "a"
        assert dist.sample(FixedDraw(0.3)) == "b"
        assert dist.sample(FixedDraw(0.75)) == "b"
        assert dist.sample(FixedDraw(0.8)) == "c"

    def test_frequencies_match_weights(self):
        dist = WeightedDistribution.from_weights(["a", "b"], [1.0, 3.0])
        rng = default_rng(7)
        draws = [dist.sample(rng) for _ in range(20000)]
        freq_b = draws.count("b") / len(draws)
        assert abs(freq_b - 0.75) < 0.02

    def test_seeded_draws_reproducible(self, abc):
        other = abc.copy()
        rng1, rng2 = default_rng(99), default_rng(99)
        assert [abc.sample(rng1) for _ in range(50)] == [other.sample(rng2) for _ in range(50)]
