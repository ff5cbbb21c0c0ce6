# -*- coding: utf-8 -*-
"""
核心算法模块
============

Hogwild Gibbs 采样的核心组件：图构造、状态初始化、访问模式划分、转移核与观测量。

子模块
------
- graph: 稀疏图构造（random / lattice）与度统计
- state: 自旋状态初始化与不变量检查
- partition: 顶点到 worker 的静态划分
- kernel: Gibbs 条件分布转移核（numba nogil 内核）
- observables: 能量 / 磁化
- rng: 种子与 Generator 派生

示例
----
>>> from hogwild_ising.core import graph, kernel, rng
>>> g = graph.build_lattice_graph(100)
>>> kernel.conditional_prob_plus(0, beta=0.2)
0.5
"""


# hogwild_ising/core/__init__.py
from importlib import import_module
from typing import TYPE_CHECKING

__all__ = ["graph", "state", "partition", "kernel", "observables", "rng"]

_lazy = {
    "graph": ".graph",
    "state": ".state",
    "partition": ".partition",
    "kernel": ".kernel",
    "observables": ".observables",
    "rng": ".rng",
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
    from . import graph, state, partition, kernel, observables, rng
