"""
damatch
=============================================
Stable matching by the deferred acceptance (Gale-Shapley) algorithm.

Example:

Suppose that we would like to match 3 students (s1, s2, s3) to 2 colleges
(c1, c2). Agents are numbered from 1; the number 0 stands for "unmatched" in
a student's list and for "vacant seat" in a college's list.

Preference orders are given as columns of an integer matrix, from the most
preferred to the least preferred, with 0 somewhere in the column. Anything
listed after 0 is unacceptable. Say s1 ranks c1 > c2 > unmatched, s2 ranks
c1 > unmatched > c2 (she would rather stay home than go to c2), and s3 ranks
c2 > c1 > unmatched:
---------------------------------------------
  >>> import numpy as np
  >>> s_prefs = np.array([[1, 1, 2],
  ...                     [2, 0, 1],
  ...                     [0, 2, 0]])
---------------------------------------------
Colleges rank students the same way. Both colleges prefer s3 > s1 > s2, and
c2 finds s2 unacceptable:
---------------------------------------------
  >>> c_prefs = np.array([[3, 3],
  ...                     [1, 1],
  ...                     [2, 0],
  ...                     [0, 2]])
---------------------------------------------
Each college has a capacity:
---------------------------------------------
  >>> caps = [1, 2]
---------------------------------------------
Run the student-proposing deferred acceptance algorithm:
---------------------------------------------
  >>> import damatch
  >>> s_matches, c_matches, indptr = damatch.deferred_acceptance(
  ...     s_prefs, c_prefs, caps)
  >>> s_matches
  array([1, 0, 2])
---------------------------------------------
The students admitted by college j are c_matches[indptr[j-1]:indptr[j]].
Passing `proposal=damatch.C_PROPOSING` lets colleges propose instead.
Without capacities, `deferred_acceptance(prop_prefs, resp_prefs)` solves a
one-to-one problem; with two capacity vectors it solves a many-to-many one.

The same problems can be handled as objects:
----------------------------------------------
  >>> S = damatch.MatchingInstance(s_prefs, c_prefs, resp_caps=caps)
  >>> sol = damatch.solve(S)
  >>> sol.is_stable()
  True
----------------------------------------------
Random preferences for tests and benchmarks come from `damatch.random_prefs`
and `damatch.gen_random_instance`. Both take an explicit `rng`.
"""

__author__ = "Dengwang Tang"

from damatch.errors import *
from damatch.instance import *
from damatch.io import *
from damatch.random import *
