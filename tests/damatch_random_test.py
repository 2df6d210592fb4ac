"""Unit tests for damatch.random"""

import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import itertools
import numpy as np
from scipy import stats
import unittest

import damatch
from damatch import random as darandom
from damatch import utils


def _perm_counts(columns, values):
  """Count how often each permutation of `values` appears among `columns`."""
  index = {p: k for k, p in enumerate(itertools.permutations(values))}
  counts = np.zeros(len(index), dtype=np.int64)
  for col in columns:
    counts[index[tuple(col)]] += 1
  return counts


class TestRandLt(unittest.TestCase):
  def test_range(self):
    rng = np.random.default_rng(0)
    for n in [1, 2, 3, 7, 8, 1000, 2 ** 52]:
      draws = [darandom.rand_lt(rng, n) for _ in range(200)]
      self.assertTrue(all(0 <= x < n for x in draws))
    self.assertEqual(darandom.rand_lt(rng, 1), 0)

  def test_invalid_bound(self):
    rng = np.random.default_rng(0)
    for n in [0, -1, 2 ** 52 + 1]:
      with self.assertRaises(damatch.InvalidBound):
        darandom.rand_lt(rng, n)
    with self.assertRaises(ValueError):
      darandom.rand_lt(rng, 0)
    # non-integer bounds are refused, not truncated
    for n in [2.5, 3.0, "3", None]:
      with self.assertRaises(damatch.InvalidBound):
        darandom.rand_lt(rng, n)
    self.assertIn(darandom.rand_lt(rng, np.int64(3)), [0, 1, 2])

  def test_uniform(self):
    rng = np.random.default_rng(12345)
    n = 5  # mask is 7, so 3 out of 8 draws get rejected
    counts = np.bincount(
        [darandom.rand_lt(rng, n) for _ in range(10000)], minlength=n)
    self.assertEqual(len(counts), n)
    self.assertGreater(stats.chisquare(counts).pvalue, 1e-3)

  def test_deterministic(self):
    a = [darandom.rand_lt(np.random.default_rng(7), 100) for _ in range(5)]
    rng1, rng2 = np.random.default_rng(7), np.random.default_rng(7)
    self.assertListEqual([darandom.rand_lt(rng1, 100) for _ in range(50)],
                         [darandom.rand_lt(rng2, 100) for _ in range(50)])
    self.assertEqual(len(set(a)), 1)


class TestRandPerm(unittest.TestCase):
  def test_is_permutation(self):
    rng = np.random.default_rng(0)
    for n in [0, 1, 2, 10, 100]:
      a = darandom.randperm(rng, np.empty(n, dtype=np.int64))
      np.testing.assert_array_equal(np.sort(a), np.arange(n))

  def test_uniform(self):
    rng = np.random.default_rng(2024)
    a = np.empty(3, dtype=np.int64)
    samples = [tuple(darandom.randperm(rng, a)) for _ in range(6000)]
    counts = _perm_counts(samples, range(3))
    self.assertTrue(np.all(counts > 0))
    self.assertGreater(stats.chisquare(counts).pvalue, 1e-3)

  def test_2d_columns(self):
    rng = np.random.default_rng(1)
    a = darandom.randperm2d(rng, np.empty((6, 50), dtype=np.int64))
    np.testing.assert_array_equal(
        np.sort(a, axis=0), np.tile(np.arange(6)[:, np.newaxis], (1, 50)))
    # 50 columns of 720 permutations, independent columns are not all equal
    self.assertGreater(len({tuple(col) for col in a.T}), 1)

  def test_2d_uniform(self):
    rng = np.random.default_rng(99)
    a = darandom.randperm2d(rng, np.empty((3, 6000), dtype=np.int64))
    counts = _perm_counts(a.T, range(3))
    self.assertGreater(stats.chisquare(counts).pvalue, 1e-3)


class TestRandomPrefs(unittest.TestCase):
  def test_shapes(self):
    m_prefs, f_prefs = damatch.random_prefs(4, 3, rng=0)
    self.assertEqual(m_prefs.shape, (4, 4))
    self.assertEqual(f_prefs.shape, (5, 3))
    utils.check_prefs(m_prefs)
    utils.check_prefs(f_prefs)

  def test_caps(self):
    s_prefs, c_prefs, caps = damatch.random_prefs(
        4, 30, return_caps=True, rng=3)
    self.assertEqual(caps.shape, (30,))
    self.assertTrue(np.all((caps >= 1) & (caps <= 4)))
    utils.check_caps(caps, 30)

  def test_caps_no_students(self):
    _, _, caps = damatch.random_prefs(0, 3, return_caps=True, rng=3)
    np.testing.assert_array_equal(caps, [1, 1, 1])

  def test_unmatched_last(self):
    m_prefs, f_prefs = damatch.random_prefs(
        10, 8, allow_unmatched=False, rng=5)
    np.testing.assert_array_equal(m_prefs[-1, :], 0)
    np.testing.assert_array_equal(f_prefs[-1, :], 0)
    utils.check_prefs(m_prefs)
    utils.check_prefs(f_prefs)

  def test_unmatched_last_uniform(self):
    m_prefs, _ = damatch.random_prefs(
        6000, 3, allow_unmatched=False, rng=11)
    counts = _perm_counts(m_prefs[:3, :].T, range(1, 4))
    self.assertGreater(stats.chisquare(counts).pvalue, 1e-3)

  def test_unmatched_anywhere(self):
    m_prefs, _ = damatch.random_prefs(2000, 3, rng=11)
    zero_rows = np.nonzero(m_prefs == 0)[0]
    self.assertEqual(set(zero_rows.tolist()), {0, 1, 2, 3})

  def test_deterministic(self):
    a = damatch.random_prefs(5, 4, return_caps=True, rng=42)
    b = damatch.random_prefs(5, 4, return_caps=True,
                             rng=np.random.default_rng(42))
    for x, y in zip(a, b):
      np.testing.assert_array_equal(x, y)
    c = damatch.random_prefs(5, 4, return_caps=True, rng=43)
    self.assertFalse(all(np.array_equal(x, y) for x, y in zip(a, c)))

  def test_large_market(self):
    m_prefs, f_prefs = damatch.random_prefs(1000, 1000, rng=0)
    self.assertEqual(m_prefs.shape, (1001, 1000))
    np.testing.assert_array_equal(np.sort(f_prefs[:, -1]), np.arange(1001))

  def test_gen_random_instance(self):
    S = damatch.gen_random_instance(5, 4, rng=0)
    self.assertEqual(S.kind, "one-to-one")
    S = damatch.gen_random_instance(5, 4, resp_caps=True, rng=0)
    self.assertEqual((S.num_prop, S.num_resp), (5, 4))
    self.assertTrue(np.all(S.resp_caps <= 5))
    S = damatch.gen_random_instance(
        5, 4, prop_caps=True, resp_caps=True, allow_unmatched=False, rng=0)
    self.assertTrue(np.all(S.prop_caps <= 4))
    np.testing.assert_array_equal(S.prop_prefs[-1, :], 0)


if __name__ == '__main__':
  unittest.main()
