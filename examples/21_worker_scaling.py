# examples/worker_scaling.py
"""
Worker 数扩展性：固定图与 β，比较 W = 1, 2, 4, 8 的吞吐（rounds/s）与最终 |m|。

W=1 为精确的顺序扫描 Gibbs；W>1 为 Hogwild 近似（无锁共享状态）。
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for p in (ROOT, ROOT / "src"):
    s = str(p)
    if s not in sys.path:
        sys.path.insert(0, s)

from hogwild_ising.core.graph import build_lattice_graph
from hogwild_ising.core.rng import spawn_seeds
from hogwild_ising.simulation.hogwild import HogwildSampler


def main():
    L = 256
    beta = 0.40
    n_rounds = 200
    graph = build_lattice_graph(L * L)
    seeds = spawn_seeds(2024, 4)

    print(f"{'W':>3} | {'rounds/s':>10} | {'|m|':>8} | {'E/N':>8}")
    for W, seed in zip((1, 2, 4, 8), seeds):
        with HogwildSampler(graph, beta, n_workers=W, seed=seed) as sampler:
            res = sampler.run(n_rounds, record_observables=True)
        summ = res.summary()
        print(f"{W:>3} | {summ['rounds_per_s']:>10.2f} | {abs(summ['final_m']):>8.4f} | "
              f"{summ['final_E_per_spin']:>8.4f}")


if __name__ == "__main__":
    main()
