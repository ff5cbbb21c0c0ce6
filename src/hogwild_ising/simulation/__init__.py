# -*- coding: utf-8 -*-
"""
模拟层
======

- hogwild: HogwildSampler 驱动器（常驻线程池，按轮 fork-join）
- runner: 命令行入口（配置 → 构图 → 采样 → 摘要）

示例
----
>>> from hogwild_ising.simulation.hogwild import HogwildSampler
>>> with HogwildSampler(graph, beta=0.2, n_workers=4, seed=42) as sampler:
...     result = sampler.run(100)
"""


# hogwild_ising/simulation/__init__.py
from importlib import import_module
from typing import TYPE_CHECKING

__all__ = ["hogwild", "runner"]

_lazy = {
    "hogwild": ".hogwild",
    "runner": ".runner",
}

def __getattr__(name: str):
    if name in _lazy:
        mod = import_module(_lazy[name], __name__)
        globals()[name] = mod
        return mod
    raise AttributeError(f"{__name__} has no attribute {name!r}")

def __dir__():
    return sorted(list(__all__))

if TYPE_CHECKING:
    from . import hogwild, runner
