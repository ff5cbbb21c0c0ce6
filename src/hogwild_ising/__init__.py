# -*- coding: utf-8 -*-
"""
Hogwild Gibbs Sampling for Synthetic Ising Models
=================================================

在稀疏随机图（或二维方格）上的 Ising 模型做近似（Hogwild 式）并行 Gibbs 采样。

主要功能
--------
- 最大度约束下的随机稀疏图 / Δ=4 方格构造
- 零外场 Ising 的单顶点 Gibbs 转移核（数值稳定 logistic）
- 顶点静态划分 + 常驻线程池的无锁并行调度（numba nogil 内核）
- 预设 / YAML / 环境变量 / CLI 分层配置与日志

快速开始
--------
>>> from hogwild_ising.core.graph import build_random_graph
>>> from hogwild_ising.core.rng import make_generator
>>> from hogwild_ising.simulation.hogwild import HogwildSampler
>>> g = build_random_graph(1000, 3, make_generator(1))
>>> with HogwildSampler(g, beta=0.2, n_workers=4, seed=42) as s:
...     result = s.run(100)

模块组织
--------
- core: 图、状态、划分、转移核、观测量
- simulation: 采样驱动器与命令行入口
- utils: 日志与配置工具
"""

# hogwild_ising/__init__.py
from importlib import import_module
from typing import TYPE_CHECKING

try:
    from importlib.metadata import PackageNotFoundError, version as _pkg_version
    __version__ = _pkg_version("hogwild-ising")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = ["core", "simulation", "utils", "__version__"]

_lazy_subpackages = {
    "core": ".core",
    "simulation": ".simulation",
    "utils": ".utils",
}

def __getattr__(name: str):
    if name in _lazy_subpackages:
        mod = import_module(_lazy_subpackages[name], __name__)
        globals()[name] = mod  # cache
        return mod
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

def __dir__():
    return sorted(list(__all__))

if TYPE_CHECKING:  # for IDE/static type checkers only
    from . import core, simulation, utils
