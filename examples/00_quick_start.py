# examples/quick_start.py
"""
Quick start: 最简单的 Hogwild 采样示例

- N=1000, Δ=3 的随机稀疏图，β=0.2
- 4 个 worker，100 轮
- 不依赖 Config 系统，直接用裸参数
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for p in (ROOT, ROOT / "src"):
    s = str(p)
    if s not in sys.path:
        sys.path.insert(0, s)

from hogwild_ising.core.graph import build_random_graph, graph_statistics
from hogwild_ising.core.rng import make_generator
from hogwild_ising.simulation.hogwild import HogwildSampler


def main():
    graph = build_random_graph(1000, 3, make_generator(1))
    stats = graph_statistics(graph)
    print("Graph statistics:")
    print(f"  Min Degree: {stats['min_degree']}")
    print(f"  Max Degree: {stats['max_degree']}")
    print(f"  Avg Degree: {stats['avg_degree']:.4f}")

    with HogwildSampler(graph, beta=0.2, n_workers=4, seed=42) as sampler:
        result = sampler.run(100, record_observables=True)

    print("\nRun summary:")
    for k, v in result.summary().items():
        print(f"  {k}: {v}")
    print("\nFirst 64 spins:", "".join("1" if x > 0 else "0" for x in result.final_state[:64]))


if __name__ == "__main__":
    main()
