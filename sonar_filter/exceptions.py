"""
Exception types raised by the sonar filtering library.

All of them signal caller or configuration mistakes; none are transient.
"""


class SonarFilterError(Exception):
    """Base class for library errors."""


class UnknownElementError(SonarFilterError, KeyError):
    """An element was incremented before being added to a distribution."""


class EmptyDistributionError(SonarFilterError, ValueError):
    """A distribution with zero total weight was sampled or queried."""


class InvalidArgumentError(SonarFilterError, ValueError):
    """Bulk construction received element and weight sequences of different length."""


class DistanceOutOfRangeError(SonarFilterError, IndexError):
    """A distance lies outside the rows or columns of the sensor CPT."""


class SensorModelError(SonarFilterError, RuntimeError):
    """The sensor CPT is malformed (a row does not sum to one)."""
