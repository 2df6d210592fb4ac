"""Deferred acceptance library for python3.

Create and solve one-to-one, many-to-one and many-to-many matching problems
with the deferred acceptance algorithm.
"""

import numpy as np
from scipy import sparse as sp

import damatch.core
from damatch import utils

__all__ = [
    "S_PROPOSING", "C_PROPOSING", "deferred_acceptance",
    "MatchingInstance", "MatchingSolution", "solve"
]

S_PROPOSING = "students"
C_PROPOSING = "colleges"


def _sanity_check(prop_prefs, resp_prefs, prop_caps, resp_caps,
                  names=("prop_prefs", "resp_prefs", "prop_caps", "resp_caps")):
  """Sanity check for inputs of the deferred acceptance algorithm.

  Args:
    names: argument names used in error messages.

  Returns:
    Validated int64 arrays; missing capacities are replaced by ones.
  """
  prop_prefs = utils.check_prefs(prop_prefs, names[0])
  resp_prefs = utils.check_prefs(resp_prefs, names[1])
  num_prop, num_resp = utils.check_shapes(prop_prefs, resp_prefs, names[:2])
  if prop_caps is None:
    prop_caps = np.ones(num_prop, dtype=np.int64)
  if resp_caps is None:
    resp_caps = np.ones(num_resp, dtype=np.int64)
  prop_caps = utils.check_caps(prop_caps, num_prop, names[2])
  resp_caps = utils.check_caps(resp_caps, num_resp, names[3])
  return (prop_prefs.astype(np.int64), resp_prefs.astype(np.int64),
          prop_caps.astype(np.int64), resp_caps.astype(np.int64))


def deferred_acceptance(prop_prefs, resp_prefs, *caps, proposal=None,
                        verbose=False):
  """Compute a stable matching by the deferred acceptance algorithm.

  The kind of problem is selected by the number of capacity vectors:

    deferred_acceptance(prop_prefs, resp_prefs)
      One-to-one (marriage) problem. Returns `(prop_matches, resp_matches)`
      where `prop_matches[i]` is the responder matched with proposer i + 1
      and `resp_matches[j]` the proposer matched with responder j + 1, 0
      meaning unmatched.

    deferred_acceptance(s_prefs, c_prefs, caps[, proposal=S_PROPOSING])
      Many-to-one (college admission) problem. Returns
      `(s_matches, c_matches, indptr)` where `s_matches[i]` is the college
      matched with student i + 1 (0 if none), and the students admitted by
      college j + 1 are `c_matches[indptr[j]:indptr[j+1]]`. With
      `proposal=C_PROPOSING` the colleges propose.

    deferred_acceptance(prop_prefs, resp_prefs, prop_caps, resp_caps)
      Many-to-many problem. Returns
      `(prop_matches, resp_matches, prop_indptr, resp_indptr)`, both sides
      sparse as above.

  Sparse buckets are sorted in increasing order.

  Args:
    prop_prefs: (n+1, m) integer array containing the preference orders of
      the m proposers (students) as columns. `prop_prefs[r, i]` is the r-th
      preferred responder of proposer i + 1, where responder 0 represents
      being unmatched.
    resp_prefs: (m+1, n) integer array containing the preference orders of
      the n responders (colleges) as columns, where proposer 0 represents a
      vacancy.
    caps: zero, one (responder capacities) or two (proposer and responder
      capacities) integer vectors.
    proposal: S_PROPOSING or C_PROPOSING, optional
      Which side proposes in the many-to-one problem. Default S_PROPOSING.
    verbose: bool, optional
      If set to True, progress information will be printed.

  Raises:
    InvalidPreferenceOrder, InvalidCapacity, ShapeMismatch on invalid input.
  """
  if len(caps) > 2:
    raise TypeError(
        "Expected at most two capacity vectors, got {0}.".format(len(caps)))
  if proposal is not None and len(caps) != 1:
    raise TypeError("proposal only applies to many-to-one problems.")

  if len(caps) == 0:
    ins = MatchingInstance(prop_prefs, resp_prefs)
    sol = solve(ins, verbose=verbose)
    return sol.dense_prop_matches(), sol.dense_resp_matches()

  if len(caps) == 2:
    ins = MatchingInstance(prop_prefs, resp_prefs,
                           prop_caps=caps[0], resp_caps=caps[1])
    sol = solve(ins, verbose=verbose)
    return (sol.prop_matches, sol.resp_matches,
            sol.prop_indptr, sol.resp_indptr)

  proposal = S_PROPOSING if proposal is None else proposal
  if proposal not in (S_PROPOSING, C_PROPOSING):
    raise ValueError("Unknown proposal {0!r}, use S_PROPOSING or "
                     "C_PROPOSING.".format(proposal))
  s_prefs, c_prefs, s_caps, c_caps = _sanity_check(
      prop_prefs, resp_prefs, None, caps[0],
      names=("s_prefs", "c_prefs", "s_caps", "caps"))
  if proposal == S_PROPOSING:
    ins = MatchingInstance(s_prefs, c_prefs, s_caps, c_caps)
    sol = solve(ins, verbose=verbose)
    return sol.dense_prop_matches(), sol.resp_matches, sol.resp_indptr
  else:
    ins = MatchingInstance(c_prefs, s_prefs, c_caps, s_caps)
    sol = solve(ins, verbose=verbose)
    return sol.dense_resp_matches(), sol.prop_matches, sol.prop_indptr


class MatchingInstance():
  """Two-sided matching problem instance.

  Attributes:
    num_prop: Number of proposers.
    num_resp: Number of responders.
    prop_prefs: (num_resp+1, num_prop) array of proposer preference orders.
      `prop_prefs[r, i]` is the r-th preferred responder of proposer i + 1.
      Responders listed after 0 are worse than being unmatched.
    resp_prefs: (num_prop+1, num_resp) array of responder preference orders.
    prop_caps: Capacities of proposers.
    resp_caps: Capacities of responders.
    prop_ranks, resp_ranks: Rank tables of the two sides, see
      `damatch.core.rank_table`.
  """
  def __init__(self, prop_prefs, resp_prefs, prop_caps=None, resp_caps=None):
    """
    Args:
      prop_prefs: (n+1, m) integer array, each column a permutation of
        0, ..., n.
      resp_prefs: (m+1, n) integer array, each column a permutation of
        0, ..., m.
      prop_caps: length m vector of positive integers. Default all ones.
      resp_caps: length n vector of positive integers. Default all ones.
    """
    (self.prop_prefs, self.resp_prefs,
     self.prop_caps, self.resp_caps) = _sanity_check(
        prop_prefs, resp_prefs, prop_caps, resp_caps)
    self.num_prop = self.prop_prefs.shape[1]
    self.num_resp = self.resp_prefs.shape[1]
    self.prop_ranks = damatch.core.rank_table(self.prop_prefs)
    self.resp_ranks = damatch.core.rank_table(self.resp_prefs)

  def __repr__(self):
    s = "<MatchingInstance ({k}) with {m} proposers and {n} responders>".format(
        k=self.kind, m=self.num_prop, n=self.num_resp)
    return s

  @property
  def kind(self):
    """One of "one-to-one", "many-to-one" and "many-to-many"."""
    prop_many, resp_many = np.any(self.prop_caps > 1), np.any(self.resp_caps > 1)
    if prop_many and resp_many:
      return "many-to-many"
    if prop_many or resp_many:
      return "many-to-one"
    return "one-to-one"

  def swapped(self):
    """Returns the same instance with responders as proposers."""
    return MatchingInstance(
        prop_prefs=self.resp_prefs, resp_prefs=self.prop_prefs,
        prop_caps=self.resp_caps, resp_caps=self.prop_caps)

  def rank_by_proposer(self, i, j):
    """Obtains the ranking of responder j by proposer i.

    The most prefered responder is of rank 1, the second is 2, and so on...
    Use j = 0 for the rank of being unmatched.
    """
    return int(self.prop_ranks[j, i - 1]) + 1

  def rank_by_responder(self, j, i):
    """Obtains the ranking of proposer i by responder j.

    The most prefered proposer is of rank 1. Use i = 0 for the rank of a
    vacant seat.
    """
    return int(self.resp_ranks[i, j - 1]) + 1


class MatchingSolution():
  """Solution of a matching instance.

  An integral matching stored from both sides in compressed sparse row form.

  One can directly access this object to obtain the solution:
  e.g. for a `MatchingSolution` sol,
    `sol[(i, j)]` is True if proposer i is matched with responder j.
    `sol["p3"]` or `sol.prop_partners(3)` is the array of responders matched
      with proposer 3.
    `sol["r2"]` or `sol.resp_partners(2)` is the array of proposers matched
      with responder 2.

  Attributes:
    prop_matches, prop_indptr: responders matched with proposer i are
      `prop_matches[prop_indptr[i-1]:prop_indptr[i]]`, in increasing order.
    resp_matches, resp_indptr: same for responders.
    num_proposals: number of proposals made by the algorithm.
  """
  def __init__(self, ins, prop_matches, resp_matches, prop_indptr,
               resp_indptr, num_proposals=-1):
    self.prop_matches = prop_matches
    self.resp_matches = resp_matches
    self.prop_indptr = prop_indptr
    self.resp_indptr = resp_indptr
    self.num_proposals = num_proposals
    self._ins = ins

  def __repr__(self):
    return ("<MatchingSolution of {m} proposers, {n} responders "
            "with {k} matched pairs>").format(
                m=self._ins.num_prop, n=self._ins.num_resp,
                k=len(self.prop_matches))

  def __getitem__(self, s):
    """Get matched partners.

    Args:
      s: either a tuple (i, j) of a proposer and a responder, or a string
         indicating a proposer (e.g. "p10") or a responder (e.g. "r2").

    Returns:
      a bool if `s` is a pair, an array of partners if `s` is a string.
    """
    if isinstance(s, tuple):
      i, j = s
      return bool(np.any(self.prop_partners(i) == j))
    elif isinstance(s, str):
      if s.startswith("p"):
        return self.prop_partners(int(s[1:]))
      elif s.startswith("r"):
        return self.resp_partners(int(s[1:]))
      else:
        raise TypeError("Unrecognized index.")
    raise TypeError("Unrecognized index.")

  def prop_partners(self, i):
    return self.prop_matches[self.prop_indptr[i-1]:self.prop_indptr[i]]

  p = prop_partners

  def resp_partners(self, j):
    return self.resp_matches[self.resp_indptr[j-1]:self.resp_indptr[j]]

  r = resp_partners

  def dense_prop_matches(self):
    """Vector of the partner of every proposer, 0 if unmatched.

    Raises:
      ValueError if some proposer has more than one partner.
    """
    return utils.sparse_to_dense(self.prop_matches, self.prop_indptr)

  def dense_resp_matches(self):
    """Vector of the partner of every responder, 0 if unmatched."""
    return utils.sparse_to_dense(self.resp_matches, self.resp_indptr)

  def to_csr(self):
    """Obtains the matching as a (num_prop, num_resp) 0/1 sparse matrix."""
    data = np.ones(len(self.prop_matches), dtype=np.int8)
    return sp.csr_matrix(
        (data, self.prop_matches - 1, self.prop_indptr),
        shape=(self._ins.num_prop, self._ins.num_resp))

  def is_stable(self):
    ins = self._ins
    return utils.check_stable(
        ins.prop_prefs, ins.resp_prefs, ins.prop_caps, ins.resp_caps,
        self.prop_matches, self.prop_indptr,
        self.resp_matches, self.resp_indptr)


def solve(ins, verbose=False):
  """Solve a matching instance with the proposer-proposing DA algorithm.

  To let responders propose, solve `ins.swapped()` instead.

  Args:
    ins: a `MatchingInstance` object.
    verbose: bool, optional
      If set to True, extra information will be printed when running the
      algorithm. Default is False.

  Returns:
    sol: a `MatchingSolution` object.
  """
  (prop_matches, resp_matches, prop_indptr, resp_indptr,
   num_proposals) = damatch.core.da_solve(
      prop_prefs=ins.prop_prefs,
      resp_prefs=ins.resp_prefs,
      prop_caps=ins.prop_caps,
      resp_caps=ins.resp_caps,
      verbose=verbose
  )
  sol = MatchingSolution(
      ins, prop_matches=prop_matches, resp_matches=resp_matches,
      prop_indptr=prop_indptr, resp_indptr=resp_indptr,
      num_proposals=num_proposals)
  if verbose:
    print("Solution is a {0} matching.".format(ins.kind))
  return sol
