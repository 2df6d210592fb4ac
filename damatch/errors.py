"""Errors raised on invalid matching inputs."""

__all__ = ["MatchingError", "InvalidPreferenceOrder", "InvalidCapacity",
           "ShapeMismatch", "InvalidBound"]


class MatchingError(ValueError):
  """Base class for input errors detected before running the algorithm."""


class InvalidPreferenceOrder(MatchingError):
  """A preference column is not a permutation of 0, 1, ..., k."""


class InvalidCapacity(MatchingError):
  """A capacity vector has the wrong shape or a non-positive entry."""


class ShapeMismatch(MatchingError):
  """Preference matrices are inconsistent with the number of agents."""


class InvalidBound(MatchingError):
  """Upper bound of a random integer draw is out of range."""
