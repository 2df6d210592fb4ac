"""Deferred acceptance util functions."""

import numpy as np

import damatch.core
from damatch.errors import InvalidCapacity, InvalidPreferenceOrder, \
    ShapeMismatch


def check_prefs(prefs, name="prefs"):
  """Check that every column of `prefs` is a permutation of 0, ..., k.

  Args:
    prefs: array-like of shape (k+1, num).
    name: name of the argument used in error messages.

  Returns:
    `prefs` as a numpy array.

  Raises:
    ShapeMismatch if `prefs` is not a 2-D array with at least one row.
    InvalidPreferenceOrder if `prefs` is not an integer array or if one of
      its columns is not a permutation.
  """
  prefs = np.asarray(prefs)
  if prefs.ndim != 2 or prefs.shape[0] == 0:
    raise ShapeMismatch(
        "{0} must be a 2-D array with at least one row, got shape {1}.".format(
            name, prefs.shape))
  if prefs.size == 0:
    return prefs.astype(np.int64)
  if not np.issubdtype(prefs.dtype, np.integer):
    raise InvalidPreferenceOrder(
        "{0} must be an integer array, got {1}.".format(name, prefs.dtype))
  expected = np.arange(prefs.shape[0])[:, np.newaxis]
  bad_cols = np.nonzero(~np.all(np.sort(prefs, axis=0) == expected, axis=0))[0]
  if bad_cols.size > 0:
    raise InvalidPreferenceOrder(
        "Column {0} of {1} is not a permutation of 0, ..., {2}.".format(
            bad_cols[0], name, prefs.shape[0] - 1))
  return prefs


def check_shapes(prop_prefs, resp_prefs, names=("prop_prefs", "resp_prefs")):
  """Check that proposer and responder preference matrices fit together.

  Returns:
    num_prop, num_resp
  """
  num_resp, num_prop = prop_prefs.shape[0] - 1, prop_prefs.shape[1]
  if resp_prefs.shape != (num_prop + 1, num_resp):
    raise ShapeMismatch(
        "{0} of shape {1} requires {2} of shape {3}, got {4}.".format(
            names[0], prop_prefs.shape, names[1], (num_prop + 1, num_resp),
            resp_prefs.shape))
  return num_prop, num_resp


def check_caps(caps, num_agent, name="caps"):
  """Check a capacity vector.

  Returns:
    `caps` as a numpy array.

  Raises:
    InvalidCapacity if `caps` is not a 1-D integer array of length
      `num_agent` with positive entries.
  """
  caps = np.asarray(caps)
  if caps.ndim != 1 or len(caps) != num_agent:
    raise InvalidCapacity(
        "{0} must be a vector of length {1}, got shape {2}.".format(
            name, num_agent, caps.shape))
  if num_agent == 0:
    return caps.astype(np.int64)
  if not np.issubdtype(caps.dtype, np.integer):
    raise InvalidCapacity(
        "{0} must be an integer array, got {1}.".format(name, caps.dtype))
  if np.any(caps <= 0):
    raise InvalidCapacity(
        "{0}[{1}] is not positive.".format(name, np.argmin(caps)))
  return caps


def sparse_to_dense(matches, indptr):
  """Convert a sparse match structure with buckets of size <= 1 to a vector.

  Returns:
    A vector of length `len(indptr) - 1` whose i-th entry is the partner of
    agent i, or 0 if it is unmatched.
  """
  counts = np.diff(indptr)
  if np.any(counts > 1):
    raise ValueError("Some agent has more than one partner.")
  dense = np.zeros(len(counts), dtype=np.int64)
  dense[counts == 1] = matches[indptr[:-1][counts == 1]]
  return dense


def dense_to_sparse(matches):
  """Convert a vector of partners (0 for unmatched) to (matches, indptr)."""
  matches = np.asarray(matches, dtype=np.int64)
  matched = matches > 0
  indptr = np.concatenate(([0], np.cumsum(matched))).astype(np.int64)
  return matches[matched], indptr


def _thresholds(ranks, caps, matches, indptr):
  """Rank a new partner has to beat for the agent to want it.

  An agent with a free slot compares with the sentinel, a full agent with its
  worst current partner.
  """
  thresh = ranks[0, :].copy()
  for i in range(len(caps)):
    partners = matches[indptr[i]:indptr[i+1]]
    if len(partners) >= caps[i]:
      thresh[i] = np.max(ranks[partners, i])
  return thresh


def check_stable(prop_prefs, resp_prefs, prop_caps, resp_caps,
                 prop_matches, prop_indptr, resp_matches, resp_indptr):
  """Check if a matching is (pairwise) stable.

  A matching is stable if every matched pair is mutually acceptable and there
  is no blocking pair, i.e. no unmatched proposer-responder pair where each
  side either has a free slot and finds the other acceptable, or prefers the
  other to its worst current partner.

  Returns:
    True if the matching is stable.
  """
  prop_ranks = damatch.core.rank_table(prop_prefs)
  resp_ranks = damatch.core.rank_table(resp_prefs)
  num_prop, num_resp = len(prop_caps), len(resp_caps)

  for i in range(num_prop):
    partners = prop_matches[prop_indptr[i]:prop_indptr[i+1]]
    if np.any(prop_ranks[partners, i] > prop_ranks[0, i]):
      return False
  for j in range(num_resp):
    partners = resp_matches[resp_indptr[j]:resp_indptr[j+1]]
    if np.any(resp_ranks[partners, j] > resp_ranks[0, j]):
      return False

  prop_thresh = _thresholds(prop_ranks, prop_caps, prop_matches, prop_indptr)
  resp_thresh = _thresholds(resp_ranks, resp_caps, resp_matches, resp_indptr)
  for i in range(num_prop):
    partners = set(prop_matches[prop_indptr[i]:prop_indptr[i+1]].tolist())
    for j in range(1, num_resp + 1):
      if j in partners:
        continue
      if (prop_ranks[j, i] < prop_thresh[i] and
          resp_ranks[i + 1, j - 1] < resp_thresh[j - 1]):
        return False
  return True


def check_consistent(prop_caps, resp_caps, prop_matches, prop_indptr,
                     resp_matches, resp_indptr):
  """Check that both sides of a matching agree and respect capacities.

  Returns:
    True if every pair appears exactly once in each side's view and no agent
    holds more partners than its capacity.
  """
  prop_counts, resp_counts = np.diff(prop_indptr), np.diff(resp_indptr)
  if np.any(prop_counts > prop_caps) or np.any(resp_counts > resp_caps):
    return False
  prop_pairs = [(i + 1, j) for i in range(len(prop_caps))
                for j in prop_matches[prop_indptr[i]:prop_indptr[i+1]].tolist()]
  resp_pairs = [(i, j + 1) for j in range(len(resp_caps))
                for i in resp_matches[resp_indptr[j]:resp_indptr[j+1]].tolist()]
  if len(set(prop_pairs)) != len(prop_pairs):
    return False
  return sorted(prop_pairs) == sorted(resp_pairs)


def matched_ranks(prefs, matches):
  """Ranks (0 = best) of the dense partners `matches` in `prefs`.

  Unmatched agents get the rank of the sentinel.
  """
  ranks = damatch.core.rank_table(prefs)
  matches = np.asarray(matches, dtype=np.int64)
  return ranks[matches, np.arange(len(matches))]
