# -*- coding: utf-8 -*-
"""
转移核单元测试

覆盖范围：
- p(+1) 的数值稳定 logistic 形式：零场 0.5、单调性、对称性、大场不溢出
- 孤立顶点的经验频率 → 0.5（≥ 10,000 次抽样）
- gibbs_update 的阈值语义（u ≤ p ⇒ +1）与只改写目标顶点
- gibbs_sweep 的翻转计数
- 初始状态与不变量检查
"""

import math
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

from hogwild_ising.core.graph import IsingGraph, build_lattice_graph
from hogwild_ising.core.kernel import (
    conditional_prob_plus,
    gibbs_sweep,
    gibbs_update,
    local_field,
)
from hogwild_ising.core.rng import make_generator
from hogwild_ising.core.state import check_state, init_state, read_only_view


class TestConditionalProbability(unittest.TestCase):

    def test_zero_field_is_half(self):
        self.assertEqual(conditional_prob_plus(0, 0.2), 0.5)
        self.assertEqual(conditional_prob_plus(3, 0.0), 0.5)

    def test_matches_exponential_form(self):
        for beta in (0.05, 0.2, 0.44, 1.0):
            for s in range(-4, 5):
                a = math.exp(beta * s)
                b = math.exp(-beta * s)
                self.assertAlmostEqual(conditional_prob_plus(s, beta), a / (a + b), places=12)

    def test_strictly_increasing_in_field(self):
        for beta in (0.1, 0.2, 1.0):
            ps = [conditional_prob_plus(s, beta) for s in range(-6, 7)]
            for lo, hi in zip(ps, ps[1:]):
                self.assertLess(lo, hi)

    def test_symmetry(self):
        for s in range(-5, 6):
            self.assertAlmostEqual(conditional_prob_plus(s, 0.3) + conditional_prob_plus(-s, 0.3), 1.0, places=12)

    def test_large_field_does_not_overflow(self):
        self.assertEqual(conditional_prob_plus(1e6, 1.0), 1.0)
        self.assertEqual(conditional_prob_plus(-1e6, 1.0), 0.0)
        self.assertTrue(math.isfinite(conditional_prob_plus(-400, 2.0)))


class TestGibbsUpdate(unittest.TestCase):

    def setUp(self):
        # 路径 0 - 1 - 2
        self.g = IsingGraph.from_adjacency([[1], [0, 2], [1]])

    def test_threshold_semantics(self):
        p = conditional_prob_plus(2, 0.2)   # ≈ 0.68997
        state = np.array([1, -1, 1], dtype=np.int8)
        self.assertEqual(gibbs_update(self.g, state, 1, 0.2, u=p - 1e-3), 1)
        self.assertEqual(state.tolist(), [1, 1, 1])
        self.assertEqual(gibbs_update(self.g, state, 1, 0.2, u=p + 1e-3), -1)
        self.assertEqual(state.tolist(), [1, -1, 1])

    def test_draw_equal_to_probability_gives_plus(self):
        g = IsingGraph.from_adjacency([[]], max_degree=3)
        state = np.array([-1], dtype=np.int8)
        self.assertEqual(gibbs_update(g, state, 0, 0.2, u=0.5), 1)

    def test_local_field(self):
        state = np.array([1, -1, 1], dtype=np.int8)
        self.assertEqual(local_field(self.g, state, 1), 2)
        self.assertEqual(local_field(self.g, state, 0), -1)
        # 自身取值不影响局部场
        state[1] = 1
        self.assertEqual(local_field(self.g, state, 0), 1)
        self.assertEqual(local_field(self.g, state, 1), 2)

    def test_requires_randomness(self):
        state = np.array([1, -1, 1], dtype=np.int8)
        with self.assertRaises(ValueError):
            gibbs_update(self.g, state, 0, 0.2)

    def test_vertex_out_of_range(self):
        state = np.array([1, -1, 1], dtype=np.int8)
        for v in (-1, 3, 100):
            with self.assertRaises(ValueError):
                local_field(self.g, state, v)
            with self.assertRaises(ValueError):
                gibbs_update(self.g, state, v, 0.2, u=0.1)
        with self.assertRaises(ValueError):
            gibbs_sweep(self.g, state, np.array([0, 3]), 0.2, make_generator(0))
        self.assertEqual(state.tolist(), [1, -1, 1])
        new = gibbs_update(self.g, state, 0, 0.2, rng=make_generator(1))
        self.assertIn(new, (1, -1))

    def test_isolated_vertices_are_fair_coins(self):
        n = 20000
        g = IsingGraph.from_adjacency([[] for _ in range(n)], max_degree=3)
        state = -np.ones(n, dtype=np.int8)
        gibbs_sweep(g, state, np.arange(n), 0.7, make_generator(2025))
        frac = float(np.mean(state == 1))
        self.assertAlmostEqual(frac, 0.5, delta=0.02)

    def test_strong_coupling_follows_neighbors(self):
        g = build_lattice_graph(100)
        state = np.ones(100, dtype=np.int8)
        gibbs_sweep(g, state, np.arange(100), 5.0, make_generator(3))
        # β=5 时 p(+1) ≥ logistic(20)，几乎必然保持全 +1
        self.assertTrue(np.all(state == 1))

    def test_sweep_flip_count(self):
        g = build_lattice_graph(64)
        state = init_state(64, make_generator(4))
        before = state.copy()
        flips = gibbs_sweep(g, state, np.arange(64), 0.1, make_generator(5))
        # 单 worker 顺序更新：每个顶点只被改写一次
        self.assertEqual(flips, int(np.sum(before != state)))
        check_state(state, 64)

    def test_empty_batch(self):
        state = np.array([1, -1, 1], dtype=np.int8)
        self.assertEqual(gibbs_sweep(self.g, state, np.empty(0, dtype=np.int64), 0.2, make_generator(0)), 0)


class TestState(unittest.TestCase):

    def test_init_state_domain(self):
        s = init_state(5000, make_generator(11))
        self.assertEqual(s.dtype, np.int8)
        self.assertEqual(s.shape, (5000,))
        self.assertTrue(np.all((s == 1) | (s == -1)))
        self.assertAlmostEqual(float(np.mean(s == 1)), 0.5, delta=0.05)
        with self.assertRaises(ValueError):
            init_state(0, make_generator(0))

    def test_check_state_fails_loudly(self):
        check_state(np.array([1, -1], dtype=np.int8), 2)
        with self.assertRaises(AssertionError):
            check_state(np.array([1, 0, -1], dtype=np.int8))
        with self.assertRaises(AssertionError):
            check_state(np.array([1, -1], dtype=np.int8), 3)
        with self.assertRaises(AssertionError):
            check_state(np.ones((2, 2), dtype=np.int8))

    def test_read_only_view(self):
        s = init_state(10, make_generator(0))
        v = read_only_view(s)
        self.assertTrue(np.shares_memory(s, v))
        with self.assertRaises(ValueError):
            v[0] = 1
        s[0] = -s[0]
        self.assertEqual(v[0], s[0])


if __name__ == "__main__":
    unittest.main(verbosity=2)
