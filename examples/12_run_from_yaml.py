# examples/run_from_yaml.py
"""
从 YAML 读取配置并运行（等价于 `python -m hogwild_ising --config examples/configs/lattice.yaml`）
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for p in (ROOT, ROOT / "src"):
    s = str(p)
    if s not in sys.path:
        sys.path.insert(0, s)

from hogwild_ising.simulation.runner import run_from_config
from hogwild_ising.utils.config import load_config, validate_config
from hogwild_ising.utils.logger import setup_logger


def main():
    # 1. 读取 YAML 配置并做一致性检查
    cfg = load_config(str(Path(__file__).parent / "configs" / "lattice.yaml"))
    ok, warnings = validate_config(cfg)
    if not ok:
        for w in warnings:
            print("[config warning]", w)

    # 2. 日志
    setup_logger("hogwild_ising", level=cfg.logging.level, use_color=cfg.logging.use_color)

    # 3. 构图 + 采样
    graph, result = run_from_config(cfg)

    # 4. 以网格形式查看最终构型（lattice 模式）
    side = int(round(graph.n_vertices ** 0.5))
    grid = result.final_state.reshape(side, side)
    for row in grid[: min(side, 16)]:
        print("".join("#" if x > 0 else "." for x in row[:64]))
    print("m trace (last 5):", result.magnetization[-5:])


if __name__ == "__main__":
    main()
