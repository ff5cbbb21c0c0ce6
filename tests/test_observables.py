# -*- coding: utf-8 -*-
"""
观测量测试：能量（含重复边）与磁化
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

from hogwild_ising.core.graph import IsingGraph, build_lattice_graph
from hogwild_ising.core.observables import calculate_observables, energy_total, magnetization


class TestObservables(unittest.TestCase):

    def test_ferromagnetic_ground_state(self):
        g = build_lattice_graph(4)          # 2x2，4 条边
        obs = calculate_observables(g, np.ones(4, dtype=np.int8))
        self.assertEqual(obs["E_total"], -4.0)
        self.assertEqual(obs["E_per_spin"], -1.0)
        self.assertEqual(obs["M_total"], 4)
        self.assertEqual(obs["m"], 1.0)
        self.assertEqual(obs["abs_m"], 1.0)

    def test_checkerboard_state(self):
        g = build_lattice_graph(4)
        s = np.array([1, -1, -1, 1], dtype=np.int8)
        self.assertEqual(energy_total(g, s), 4.0)
        self.assertEqual(magnetization(s), 0.0)

    def test_duplicate_edges_count_by_multiplicity(self):
        g = IsingGraph.from_adjacency([[1, 1], [0, 0]])
        self.assertEqual(energy_total(g, np.ones(2, dtype=np.int8)), -2.0)

    def test_no_int8_overflow(self):
        g = build_lattice_graph(100 * 100)
        s = -np.ones(10000, dtype=np.int8)
        self.assertEqual(energy_total(g, s), -float(g.n_edges))
        self.assertEqual(calculate_observables(g, s)["M_total"], -10000)

    def test_length_mismatch(self):
        g = build_lattice_graph(4)
        with self.assertRaises(ValueError):
            energy_total(g, np.ones(3, dtype=np.int8))
        with self.assertRaises(ValueError):
            magnetization(np.empty(0, dtype=np.int8))


if __name__ == "__main__":
    unittest.main(verbosity=2)
