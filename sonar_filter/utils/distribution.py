"""
Weighted distribution over discrete outcomes.

Maps hashable elements to non-negative weights and keeps a running sum so
that normalization and sampling do not need a full pass to find the total.
Insertion order is the canonical iteration order; sampling walks elements
in that order, which makes draws reproducible under a seeded generator.
"""

from typing import Dict, Generic, Hashable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
from numpy.random import Generator, default_rng

from ..constants import NORMALIZE_TOLERANCE
from ..exceptions import EmptyDistributionError, InvalidArgumentError, UnknownElementError

T = TypeVar("T", bound=Hashable)


class WeightedDistribution(Generic[T]):
    """
    Insertion-ordered mapping from elements to weights.

    The weights may be tallies, likelihood weights or probabilities depending
    on the caller. Weights are expected to be non-negative; negative values
    are not rejected but break the sampling and normalization guarantees.
    """

    def __init__(self):
        self._weights: Dict[T, float] = {}
        self._total = 0.0

    # -------------------------------------------------------------------------
    # Bulk constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_elements(cls, elements: Iterable[T]) -> "WeightedDistribution[T]":
        """
        Tally a sequence of elements, each occurrence contributing weight 1.

        Args:
            elements: Elements, possibly with duplicates

        Returns:
            Distribution of counts (not normalized)
        """
        dist = cls()
        for element in elements:
            if element in dist:
                dist.increment(element, 1.0)
            else:
                dist.set(element, 1.0)
        return dist

    @classmethod
    def from_weights(
        cls,
        elements: Sequence[T],
        weights: Sequence[float],
    ) -> "WeightedDistribution[T]":
        """
        Build from parallel element / weight sequences.

        Repeated elements accumulate their weights.

        Raises:
            InvalidArgumentError: if the sequences differ in length
        """
        if len(elements) != len(weights):
            raise InvalidArgumentError(
                f"Got {len(elements)} elements but {len(weights)} weights"
            )
        dist = cls()
        for element, w in zip(elements, weights):
            if element in dist:
                dist.increment(element, float(w))
            else:
                dist.set(element, float(w))
        return dist

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def set(self, element: T, weight: float) -> None:
        """Add `element` with `weight`, replacing any previous weight."""
        previous = self._weights.get(element)
        if previous is not None:
            self._total -= previous
        self._weights[element] = float(weight)
        self._total += float(weight)

    def increment(self, element: T, delta: float) -> None:
        """
        Add `delta` to the weight of an element already in the distribution.

        Raises:
            UnknownElementError: if the element has not been added
        """
        if element not in self._weights:
            raise UnknownElementError(element)
        self._weights[element] += delta
        self._total += delta

    def clear(self) -> None:
        """Remove every element."""
        self._weights.clear()
        self._total = 0.0

    def normalize(self) -> None:
        """
        Rescale weights so they sum to one.

        A distribution whose total is exactly zero is left unchanged.
        """
        if self._total == 0.0:
            return
        total = self._total
        for element in self._weights:
            self._weights[element] /= total
        self._total = 1.0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def contains(self, element: T) -> bool:
        return element in self._weights

    def __contains__(self, element: object) -> bool:
        return element in self._weights

    def __len__(self) -> int:
        return len(self._weights)

    def __iter__(self) -> Iterator[T]:
        return iter(self._weights)

    def weight(self, element: T) -> float:
        """Weight of `element`, or 0.0 if it is not present."""
        return self._weights.get(element, 0.0)

    def elements(self) -> List[T]:
        """Elements in canonical (insertion) order."""
        return list(self._weights)

    def items(self) -> List[Tuple[T, float]]:
        return list(self._weights.items())

    @property
    def total(self) -> float:
        """Cached sum of all weights."""
        return self._total

    def copy(self) -> "WeightedDistribution[T]":
        dist = type(self)()
        dist._weights = dict(self._weights)
        dist._total = self._total
        return dist

    def to_array(self, order: Optional[Sequence[T]] = None) -> np.ndarray:
        """
        Weights as a float array.

        Args:
            order: Elements to read, in output order. Defaults to the
                   canonical order. Absent elements read as 0.0.
        """
        if order is None:
            return np.fromiter(self._weights.values(), dtype=float, count=len(self._weights))
        return np.array([self._weights.get(e, 0.0) for e in order], dtype=float)

    def most_likely(self) -> T:
        """
        Element with the largest weight; ties go to the earliest element.

        Raises:
            EmptyDistributionError: if no element has positive weight
        """
        best = None
        best_weight = 0.0
        for element, w in self._weights.items():
            if w > best_weight:
                best = element
                best_weight = w
        if best is None:
            raise EmptyDistributionError("No element has positive weight")
        return best

    # -------------------------------------------------------------------------
    # Sampling
    # -------------------------------------------------------------------------

    def sample(self, rng: Optional[Generator] = None) -> T:
        """
        Draw one element with probability proportional to its weight.

        Normalizes first if the weights do not already sum to one. Draws
        r ~ U[0, 1) and returns the first element (in canonical order)
        whose cumulative weight reaches r. Zero-weight elements are never
        returned.

        Args:
            rng: NumPy random generator (a fresh unseeded one if None)

        Raises:
            EmptyDistributionError: if the total weight is zero
        """
        if abs(self._total - 1.0) > NORMALIZE_TOLERANCE:
            self.normalize()
        if self._total == 0.0:
            raise EmptyDistributionError("All elements have weight 0; unable to sample")
        if rng is None:
            rng = default_rng()

        r = rng.random()
        cumulative = 0.0
        last_positive = None
        for element, w in self._weights.items():
            if w <= 0.0:
                continue
            cumulative += w
            last_positive = element
            if r <= cumulative:
                return element
        # Rounding left the cumulative sum just below r
        return last_positive

    def __repr__(self) -> str:
        lines = [f"Total sum: {self._total}"]
        lines.extend(f"{element}: {w}" for element, w in self._weights.items())
        return "\n".join(lines)
