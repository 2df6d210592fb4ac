"""Random Instance Generators"""

import numbers

import numba as nb
import numpy as np

import damatch.instance
from damatch.errors import InvalidBound

__all__ = ["random_prefs", "gen_random_instance"]

_MAX_BOUND = 2 ** 52


@nb.njit
def _mask(n):
  """Smallest 2**b - 1 that is >= n - 1."""
  mask = 0
  while mask < n - 1:
    mask = (mask << 1) | 1
  return mask


@nb.njit
def _rand_lt(rng, n):
  mask = _mask(n)
  while True:
    # rng.random() is a multiple of 2**-53, the product is exact.
    x = int(rng.random() * 4503599627370496.0) & mask
    if x < n:
      return x


@nb.njit
def _randperm(rng, a):
  n = a.shape[0]
  for i in range(n):
    a[i] = i
  for i in range(n - 1, 0, -1):
    j = _rand_lt(rng, i + 1)
    a[i], a[j] = a[j], a[i]


@nb.njit
def _randperm2d(rng, a):
  for i in range(a.shape[1]):
    _randperm(rng, a[:, i])


def rand_lt(rng, n):
  """Return a uniformly random integer in [0, n), for 1 <= n <= 2**52.

  Draws 52 random bits, masks them with the smallest 2**b - 1 >= n - 1 and
  tries again until the result is below n, so the expected number of draws
  is less than 2.

  Args:
    rng: a `numpy.random.Generator`.
    n: exclusive upper bound, an integer.
  """
  if not isinstance(n, (numbers.Integral, np.integer)):
    raise InvalidBound("Bound must be an integer, got {0!r}.".format(n))
  if not 1 <= n <= _MAX_BOUND:
    raise InvalidBound(
        "Bound must be in [1, 2**52], got {0}.".format(n))
  return int(_rand_lt(rng, int(n)))


def randperm(rng, a):
  """Fill the 1-D array `a` with a random permutation of 0, ..., len(a)-1.

  Fisher-Yates shuffle from the last position to the first.
  """
  _randperm(rng, a)
  return a


def randperm2d(rng, a):
  """Fill each column of the (k, num) array `a` with a random permutation.

  Columns are drawn independently, from the first to the last.
  """
  _randperm2d(rng, a)
  return a


def _random_pref_matrix(rng, k, num, allow_unmatched):
  prefs = np.empty((k + 1, num), dtype=np.int64)
  if allow_unmatched:
    randperm2d(rng, prefs)
  else:
    randperm2d(rng, prefs[:k, :])
    prefs[:k, :] += 1
    prefs[k, :] = 0
  return prefs


def _random_caps(rng, num, max_cap):
  max_cap = max(max_cap, 1)
  return np.array([rand_lt(rng, max_cap) + 1 for _ in range(num)],
                  dtype=np.int64)


def random_prefs(m, n, return_caps=False, allow_unmatched=True, rng=None):
  """Generate random preference orders for two groups.

  Say m males and n females. Each male has a preference order over females
  1, ..., n and "unmatched", which is represented by 0, while each female has
  a preference order over males 1, ..., m and "unmatched".

  With `return_caps` set, the two groups should be read as students and
  colleges, and each college also gets a capacity.

  Unlike the `random_prefs(rng, m, n[, caps])` form with the generator first,
  the generator is the keyword argument `rng` here, so that it can be left
  out.

  Example:
    >>> m_prefs, f_prefs = random_prefs(4, 3, rng=0)
    >>> m_prefs.shape, f_prefs.shape
    ((4, 4), (5, 3))

  Args:
    m: int
      Number of males (students).
    n: int
      Number of females (colleges).
    return_caps: bool, optional
      If True, capacities of females (colleges) are also returned, each drawn
      uniformly from 1, ..., m. Default is False.
    allow_unmatched: bool, optional
      If False, 0 is always placed in the last row, i.e. "unmatched" is the
      least preferred option of every individual. Default is True.
    rng: None, int or `numpy.random.Generator`, optional
      Source of randomness, passed through `numpy.random.default_rng`.

  Returns:
    m_prefs: (n+1, m) array, each column a random permutation of 0, ..., n.
    f_prefs: (m+1, n) array, each column a random permutation of 0, ..., m.
    caps: length n array of capacities, only if `return_caps` is True.
  """
  rng = np.random.default_rng(rng)
  m_prefs = _random_pref_matrix(rng, n, m, allow_unmatched)
  f_prefs = _random_pref_matrix(rng, m, n, allow_unmatched)
  if return_caps:
    return m_prefs, f_prefs, _random_caps(rng, n, m)
  return m_prefs, f_prefs


def gen_random_instance(num_prop, num_resp, prop_caps=False, resp_caps=False,
                        allow_unmatched=True, rng=None):
  """Generate a uniform random instance.

  Every proposer's and responder's preference order is chosen uniformly at
  random.

  Args:
    num_prop: int
      Number of proposers.
    num_resp: int
      Number of responders.
    prop_caps: bool, optional
      If True, each proposer gets a capacity drawn uniformly from
      1, ..., num_resp. Otherwise all proposer capacities are 1. Default False.
    resp_caps: bool, optional
      Same for responders, drawn from 1, ..., num_prop. Default False.
    allow_unmatched: bool, optional
      If False (default True), being unmatched is everyone's last choice.
    rng: None, int or `numpy.random.Generator`, optional
      Source of randomness.

  Returns:
    A `MatchingInstance` object.
  """
  rng = np.random.default_rng(rng)
  prop_prefs, resp_prefs = random_prefs(
      num_prop, num_resp, allow_unmatched=allow_unmatched, rng=rng)
  return damatch.instance.MatchingInstance(
      prop_prefs=prop_prefs,
      resp_prefs=resp_prefs,
      prop_caps=_random_caps(rng, num_prop, num_resp) if prop_caps else None,
      resp_caps=_random_caps(rng, num_resp, num_prop) if resp_caps else None
  )
