"""Deferred acceptance implementation"""

import numba as nb
import numpy as np
import time

__all__ = ["rank_table", "encode_sparse", "da_solve"]


@nb.njit('void(int64[:,:], int64[:,:])')
def _fill_ranks(prefs, ranks):
  """Invert every column of `prefs` into the same column of `ranks`."""
  k, num_agent = prefs.shape
  for i in range(num_agent):
    for r in range(k):
      ranks[prefs[r, i], i] = r


def rank_table(prefs):
  """Build the rank table of a preference matrix.

  Args:
    prefs: (k+1, num) integer array, each column a permutation of 0, ..., k
       listing partners from the most to the least preferred.

  Returns:
    ranks: (k+1, num) int64 array where `ranks[x, i]` is the position of
       partner `x` in column i, so `ranks[x, i] < ranks[y, i]` iff agent i
       prefers x to y. Partners ranked after `ranks[0, i]` are unacceptable.
  """
  prefs = np.ascontiguousarray(prefs, dtype=np.int64)
  ranks = np.empty_like(prefs)
  _fill_ranks(prefs, ranks)
  return ranks


@nb.njit
def _heap_push(heap, start, size, value):
  """Push `value` onto the max-heap stored in heap[start:start+size]."""
  pos = size
  while pos > 0:
    parent = (pos - 1) // 2
    if heap[start + parent] >= value:
      break
    heap[start + pos] = heap[start + parent]
    pos = parent
  heap[start + pos] = value


@nb.njit
def _heap_replace_top(heap, start, size, value):
  """Replace the maximum of a non-empty heap by `value`, return the old one."""
  top = heap[start]
  pos = 0
  while True:
    child = 2 * pos + 1
    if child >= size:
      break
    if child + 1 < size and heap[start + child + 1] > heap[start + child]:
      child += 1
    if heap[start + child] <= value:
      break
    heap[start + pos] = heap[start + child]
    pos = child
  heap[start + pos] = value
  return top


@nb.njit
def _deferred_acceptance(prop_prefs, resp_prefs, resp_ranks,
                         prop_caps, resp_caps):
  """Proposal loop of the deferred acceptance algorithm.

  Responder j keeps the ranks of the proposers it tentatively holds in a
  max-heap `heap[heap_ptr[j]:heap_ptr[j] + heap_size[j]]`, so that its worst
  held proposer `resp_prefs[heap[heap_ptr[j]], j]` is at the top.

  Proposers wait in a FIFO queue, initially in increasing order. A popped
  proposer proposes down its list until it holds `prop_caps[p]` partners or
  reaches the sentinel, after which it is exhausted for good. Evicted
  proposers re-enter the queue unless they are already queued or exhausted.
  """
  num_prop = prop_prefs.shape[1]
  num_resp = resp_prefs.shape[1]

  # A responder never holds more than num_prop proposers.
  heap_ptr = np.zeros(num_resp + 1, dtype=np.int64)
  for j in range(num_resp):
    heap_ptr[j + 1] = heap_ptr[j] + min(resp_caps[j], num_prop)
  heap = np.empty(heap_ptr[num_resp], dtype=np.int64)
  heap_size = np.zeros(num_resp, dtype=np.int64)

  cursor = np.zeros(num_prop, dtype=np.int64)
  num_held = np.zeros(num_prop, dtype=np.int64)
  exhausted = np.zeros(num_prop, dtype=np.bool_)
  in_queue = np.ones(num_prop, dtype=np.bool_)
  queue = np.arange(num_prop)
  head, queue_len = 0, num_prop

  num_proposals = 0
  while queue_len > 0:
    p = queue[head]
    head = (head + 1) % num_prop
    queue_len -= 1
    in_queue[p] = False

    while num_held[p] < prop_caps[p] and not exhausted[p]:
      j = prop_prefs[cursor[p], p]
      cursor[p] += 1
      num_proposals += 1
      if j == 0:
        exhausted[p] = True
        break
      j -= 1
      r = resp_ranks[p + 1, j]
      if r > resp_ranks[0, j]:  # p is worse than a vacant seat
        continue
      start, size = heap_ptr[j], heap_size[j]
      if size < resp_caps[j]:
        _heap_push(heap, start, size, r)
        heap_size[j] += 1
        num_held[p] += 1
      elif r < heap[start]:
        worst = _heap_replace_top(heap, start, size, r)
        num_held[p] += 1
        q = resp_prefs[worst, j] - 1
        num_held[q] -= 1
        if not in_queue[q] and not exhausted[q]:
          queue[(head + queue_len) % num_prop] = q
          queue_len += 1
          in_queue[q] = True

  return heap, heap_ptr, heap_size, num_proposals


@nb.njit
def _held_pairs(heap, heap_ptr, heap_size, resp_prefs):
  """List (proposer index, responder label) of all held proposals.

  Pairs are ordered by responder.
  """
  total = 0
  for j in range(heap_size.shape[0]):
    total += heap_size[j]
  prop_idx = np.empty(total, dtype=np.int64)
  resp_label = np.empty(total, dtype=np.int64)
  k = 0
  for j in range(heap_size.shape[0]):
    for t in range(heap_size[j]):
      prop_idx[k] = resp_prefs[heap[heap_ptr[j] + t], j] - 1
      resp_label[k] = j + 1
      k += 1
  return prop_idx, resp_label


@nb.njit
def _encode_sparse(owners, partners, num_owner):
  indptr = np.zeros(num_owner + 1, dtype=np.int64)
  for k in range(owners.shape[0]):
    indptr[owners[k] + 1] += 1
  for i in range(num_owner):
    indptr[i + 1] += indptr[i]
  values = np.empty(owners.shape[0], dtype=np.int64)
  # indptr[o] is used as the write cursor of bucket o ...
  for k in range(owners.shape[0]):
    o = owners[k]
    values[indptr[o]] = partners[k]
    indptr[o] += 1
  # ... and ends up at the start of bucket o + 1, so shift it back.
  for i in range(num_owner, 0, -1):
    indptr[i] = indptr[i - 1]
  indptr[0] = 0
  return values, indptr


def encode_sparse(owners, partners, num_owner):
  """Group partners by owner into a compressed sparse row structure.

  Runs a counting pass and a filling pass in O(len(owners) + num_owner).
  The fill is stable: partners of the same owner keep their input order.

  Args:
    owners: 1-D array of owner indices in [0, num_owner).
    partners: 1-D array of the same length, `partners[k]` is a partner of
       `owners[k]`.
    num_owner: number of owners, including those without partners.

  Returns:
    values: 1-D int64 array of length len(owners).
    indptr: 1-D int64 array of length num_owner + 1, the partners of owner i
       are `values[indptr[i]:indptr[i+1]]`.
  """
  owners = np.ascontiguousarray(owners, dtype=np.int64)
  partners = np.ascontiguousarray(partners, dtype=np.int64)
  if owners.shape != partners.shape:
    raise ValueError("owners and partners must have the same length.")
  return _encode_sparse(owners, partners, num_owner)


def da_solve(prop_prefs, resp_prefs, prop_caps, resp_caps, verbose=False):
  """Deferred acceptance algorithm with capacities on both sides.

  Computes the proposer-optimal stable matching. Inputs are assumed valid,
  see `damatch.instance` for the checked entry points.

  Args:
    prop_prefs: (n+1, m) integer array of proposer preference orders.
    resp_prefs: (m+1, n) integer array of responder preference orders.
    prop_caps: length m integer array of proposer capacities.
    resp_caps: length n integer array of responder capacities.
    verbose: bool, optional
      If set to True, the number of proposals and running time are printed.

  Returns:
    prop_matches, prop_indptr: responders (labels 1..n) matched with
       proposer i are `prop_matches[prop_indptr[i]:prop_indptr[i+1]]`,
       in increasing order.
    resp_matches, resp_indptr: same for responders, proposer labels 1..m.
    num_proposals: number of proposals made, including proposals to the
       sentinel.
  """
  prop_prefs = np.ascontiguousarray(prop_prefs, dtype=np.int64)
  resp_prefs = np.ascontiguousarray(resp_prefs, dtype=np.int64)
  prop_caps = np.ascontiguousarray(prop_caps, dtype=np.int64)
  resp_caps = np.ascontiguousarray(resp_caps, dtype=np.int64)
  num_prop, num_resp = prop_prefs.shape[1], resp_prefs.shape[1]

  start_time = time.time()
  resp_ranks = rank_table(resp_prefs)
  heap, heap_ptr, heap_size, num_proposals = _deferred_acceptance(
      prop_prefs, resp_prefs, resp_ranks, prop_caps, resp_caps)
  prop_idx, resp_label = _held_pairs(heap, heap_ptr, heap_size, resp_prefs)
  # Pairs come ordered by responder, so proposer buckets are sorted.
  prop_matches, prop_indptr = _encode_sparse(prop_idx, resp_label, num_prop)
  # Walking proposer buckets in order sorts the responder buckets in turn.
  prop_label = np.repeat(np.arange(1, num_prop + 1, dtype=np.int64),
                         np.diff(prop_indptr))
  resp_matches, resp_indptr = _encode_sparse(
      prop_matches - 1, prop_label, num_resp)
  end_time = time.time()

  if verbose:
    print("Made {0} proposals in {1:.3f}s.".format(
        num_proposals, end_time - start_time))
    print("Matched {0} pairs.".format(len(prop_matches)))
  return prop_matches, resp_matches, prop_indptr, resp_indptr, num_proposals
