"""Unit tests for damatch.core"""

import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np
import unittest

from damatch import core


class TestRankTable(unittest.TestCase):
  def test_inverse_permutation(self):
    prefs = np.array([[2, 0],
                      [0, 1],
                      [1, 2]])
    ranks = core.rank_table(prefs)
    np.testing.assert_array_equal(ranks, [[1, 0],
                                          [2, 1],
                                          [0, 2]])
    for i in range(prefs.shape[1]):
      np.testing.assert_array_equal(ranks[prefs[:, i], i], np.arange(3))

  def test_no_agents(self):
    ranks = core.rank_table(np.zeros((4, 0), dtype=np.int64))
    self.assertEqual(ranks.shape, (4, 0))


class TestHeap(unittest.TestCase):
  def test_push_and_replace_top(self):
    heap = np.zeros(10, dtype=np.int64)
    start, size = 3, 0
    for v in [4, 9, 1, 7, 3]:
      core._heap_push(heap, start, size, v)
      size += 1
      self.assertEqual(heap[start], max(heap[start:start + size]))
    self.assertEqual(sorted(heap[start:start + size]), [1, 3, 4, 7, 9])
    # Nothing outside the heap is touched
    np.testing.assert_array_equal(heap[:3], 0)
    np.testing.assert_array_equal(heap[start + size:], 0)

    top = core._heap_replace_top(heap, start, size, 2)
    self.assertEqual(top, 9)
    self.assertEqual(heap[start], 7)
    self.assertEqual(sorted(heap[start:start + size]), [1, 2, 3, 4, 7])
    top = core._heap_replace_top(heap, start, size, 5)
    self.assertEqual(top, 7)
    self.assertEqual(heap[start], 5)


class TestEncodeSparse(unittest.TestCase):
  def test_counting_and_filling(self):
    values, indptr = core.encode_sparse(
        owners=[2, 0, 2, 0], partners=[5, 6, 7, 8], num_owner=4)
    np.testing.assert_array_equal(values, [6, 8, 5, 7])
    np.testing.assert_array_equal(indptr, [0, 2, 2, 4, 4])

  def test_empty(self):
    values, indptr = core.encode_sparse(
        owners=np.zeros(0, dtype=np.int64),
        partners=np.zeros(0, dtype=np.int64), num_owner=3)
    self.assertEqual(len(values), 0)
    np.testing.assert_array_equal(indptr, [0, 0, 0, 0])

  def test_length_mismatch(self):
    with self.assertRaises(ValueError):
      core.encode_sparse(owners=[0, 1], partners=[1], num_owner=2)


class TestDASolve(unittest.TestCase):
  def run_da(self, prop_prefs, resp_prefs, prop_caps=None, resp_caps=None):
    prop_prefs, resp_prefs = np.array(prop_prefs), np.array(resp_prefs)
    if prop_caps is None:
      prop_caps = np.ones(prop_prefs.shape[1], dtype=np.int64)
    if resp_caps is None:
      resp_caps = np.ones(resp_prefs.shape[1], dtype=np.int64)
    return core.da_solve(prop_prefs, resp_prefs, prop_caps, resp_caps)

  def test_single_proposer(self):
    # proposer: r1 > r2 > unmatched, both responders accept the proposer
    pm, rm, pi, ri, num_proposals = self.run_da(
        [[1], [2], [0]], [[1, 1], [0, 0]])
    np.testing.assert_array_equal(pm, [1])
    np.testing.assert_array_equal(pi, [0, 1])
    np.testing.assert_array_equal(rm, [1])
    np.testing.assert_array_equal(ri, [0, 1, 1])
    self.assertEqual(num_proposals, 1)

  def test_eviction(self):
    # both proposers want r1, who prefers proposer 2
    pm, rm, pi, ri, num_proposals = self.run_da(
        [[1, 1], [0, 0]], [[2], [1], [0]])
    np.testing.assert_array_equal(pm, [1])
    np.testing.assert_array_equal(pi, [0, 0, 1])
    np.testing.assert_array_equal(rm, [2])
    np.testing.assert_array_equal(ri, [0, 1])
    # p1 -> r1, p2 -> r1 (evicts p1), p1 -> unmatched
    self.assertEqual(num_proposals, 3)

  def test_unacceptable(self):
    # r1 would rather keep its seat vacant
    pm, rm, pi, ri, _ = self.run_da([[1], [0]], [[0], [1]])
    self.assertEqual(len(pm), 0)
    np.testing.assert_array_equal(pi, [0, 0])
    np.testing.assert_array_equal(ri, [0, 0])

  def test_many_to_many_full(self):
    prefs = [[2, 1], [1, 2], [0, 0]]
    pm, rm, pi, ri, _ = self.run_da(prefs, prefs, [2, 2], [2, 2])
    np.testing.assert_array_equal(pm, [1, 2, 1, 2])
    np.testing.assert_array_equal(pi, [0, 2, 4])
    np.testing.assert_array_equal(rm, [1, 2, 1, 2])
    np.testing.assert_array_equal(ri, [0, 2, 4])

  def test_capacity_displacement(self):
    # r1 has 2 seats and ranks p3 > p2 > p1, everyone applies to r1 first
    prop_prefs = [[1, 1, 1], [0, 0, 0]]
    resp_prefs = [[3], [2], [1], [0]]
    pm, rm, pi, ri, _ = self.run_da(prop_prefs, resp_prefs, resp_caps=[2])
    np.testing.assert_array_equal(pi, [0, 0, 1, 2])
    np.testing.assert_array_equal(rm, [2, 3])
    np.testing.assert_array_equal(ri, [0, 2])

  def test_exhausted_proposer_keeps_earlier_partners(self):
    # p1 (capacity 2) accepts r1 only; r1 has to keep p1
    prop_prefs = [[1, 2], [0, 1], [2, 0]]
    resp_prefs = [[1, 2], [2, 1], [0, 0]]
    pm, rm, pi, ri, _ = self.run_da(prop_prefs, resp_prefs, [2, 2], [2, 2])
    np.testing.assert_array_equal(pm, [1, 1, 2])
    np.testing.assert_array_equal(pi, [0, 1, 3])
    np.testing.assert_array_equal(rm, [1, 2, 2])
    np.testing.assert_array_equal(ri, [0, 2, 3])


if __name__ == '__main__':
  unittest.main()
