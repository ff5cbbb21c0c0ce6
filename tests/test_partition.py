# -*- coding: utf-8 -*-
"""
访问模式划分测试：完整性、互不相交、负载分布、自定义划分校验
"""

import unittest
import sys
from pathlib import Path

import numpy as np

# ----------------------------- 路径适配 -----------------------------
try:
    _ROOT = Path(__file__).resolve().parents[1]
except NameError:
    _ROOT = Path.cwd()

if str(_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(_ROOT / "src"))

from hogwild_ising.core.partition import AccessPattern, make_access_pattern


class TestAccessPattern(unittest.TestCase):

    def test_ten_vertices_three_workers(self):
        ap = make_access_pattern(10, 3)
        self.assertEqual(ap.n_workers, 3)
        self.assertEqual(ap.loads(), [3, 3, 4])
        self.assertEqual(ap.worker_ranges(), [(0, 3), (3, 6), (6, 10)])
        self.assertEqual(ap.batches_per_worker, 1)

    def test_completeness_grid(self):
        for n in (0, 1, 2, 7, 10, 64, 1001):
            for w in (1, 2, 3, 4, 8, 13):
                ap = make_access_pattern(n, w)
                self.assertEqual(ap.n_workers, w)
                allv = np.concatenate(ap.batches)
                # 每个顶点恰好一次
                np.testing.assert_array_equal(np.sort(allv), np.arange(n))
                self.assertEqual(allv.size, n)
                loads = ap.loads()
                self.assertTrue(all(l == n // w for l in loads[:-1]))
                self.assertEqual(loads[-1], n - (w - 1) * (n // w))

    def test_more_workers_than_vertices(self):
        ap = make_access_pattern(3, 5)
        self.assertEqual(ap.loads(), [0, 0, 0, 0, 3])

    def test_invalid_worker_count(self):
        with self.assertRaises(ValueError):
            make_access_pattern(10, 0)
        with self.assertRaises(ValueError):
            make_access_pattern(10, -2)

    def test_batches_are_read_only(self):
        ap = make_access_pattern(10, 2)
        with self.assertRaises(ValueError):
            ap.batches[0][0] = 5

    def test_custom_batches(self):
        ap = AccessPattern.from_batches(6, [[5, 0, 3], [1, 4, 2]])
        self.assertEqual(ap.loads(), [3, 3])
        with self.assertRaises(ValueError):
            ap.worker_ranges()
        with self.assertRaises(ValueError):
            AccessPattern.from_batches(6, [[0, 1, 2], [2, 3, 4, 5]])   # overlap
        with self.assertRaises(ValueError):
            AccessPattern.from_batches(6, [[0, 1, 2], [3, 4]])         # omission
        with self.assertRaises(ValueError):
            AccessPattern.from_batches(6, [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
