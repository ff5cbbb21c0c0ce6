# -*- coding: utf-8 -*-
"""
    图上 Ising 构型的观测量

只读计算，输入为状态快照（可以是只读视图）。累积量统一用 int64 防止 int8 溢出，
结果以 Python float / int 返回。

返回字段（calculate_observables）：
    E_total     : float，总能量 E = -Σ_{edges} s_u s_v（重复边按重数计）
    E_per_spin  : float，E_total / N
    M_total     : int，总磁化
    m           : float，平均磁化 M/N
    abs_m       : float，|m|
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from .graph import IsingGraph

__all__ = ["magnetization", "energy_total", "calculate_observables"]


def magnetization(state: Any) -> float:
    a = np.asarray(state)
    if a.size == 0:
        raise ValueError("state must be non-empty")
    return float(np.sum(a, dtype=np.int64)) / float(a.size)


def energy_total(graph: IsingGraph, state: Any) -> float:
    a = np.asarray(state, dtype=np.int64)
    if a.size != graph.n_vertices:
        raise ValueError(f"state length {a.size} != n_vertices {graph.n_vertices}")
    src = np.repeat(np.arange(graph.n_vertices), graph.degrees())
    # 每条无向边在 CSR 中出现两次
    return -0.5 * float(np.sum(a[src] * a[graph.indices], dtype=np.int64))


def calculate_observables(graph: IsingGraph, state: Any) -> Dict[str, float]:
    a = np.asarray(state)
    n = float(a.size)
    e = energy_total(graph, a)
    m_tot = int(np.sum(a, dtype=np.int64))
    return {
        "E_total": e,
        "E_per_spin": e / n,
        "M_total": m_tot,
        "m": m_tot / n,
        "abs_m": abs(m_tot) / n,
    }
