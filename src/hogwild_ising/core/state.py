# -*- coding: utf-8 -*-
"""
自旋状态初始化与不变量检查

状态是长度为 N 的 int8 数组，取值 ∈ {+1, -1}。它是采样期间唯一的可变共享对象：
所有 worker 通过引用共享同一块内存，按 Hogwild 方式无锁读写。
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

__all__ = ["SPIN_DTYPE", "init_state", "check_state", "read_only_view"]

SPIN_DTYPE = np.int8


def init_state(n_vertices: int, rng: np.random.Generator) -> np.ndarray:
    """每个分量独立等概率取 +1 / -1。"""
    n = int(n_vertices)
    if n < 1:
        raise ValueError(f"n_vertices must be positive, got {n_vertices}")
    bits = rng.integers(0, 2, size=n, dtype=np.uint8)
    return np.ascontiguousarray(bits.astype(SPIN_DTYPE) * 2 - 1, dtype=SPIN_DTYPE)


def check_state(state: Any, n_vertices: Optional[int] = None) -> None:
    """
    状态不变量：一维、长度为 N、取值只有 ±1。

    违例意味着共享状态已被破坏（正确的初始化与内核下不可能发生），
    因此以 AssertionError 直接失败，而不是尝试修复。
    """
    a = np.asarray(state)
    if a.ndim != 1:
        raise AssertionError(f"state must be 1D, got shape {a.shape}")
    if n_vertices is not None and a.size != int(n_vertices):
        raise AssertionError(f"state length {a.size} != n_vertices {n_vertices}")
    bad = np.flatnonzero((a != 1) & (a != -1))
    if bad.size:
        v = int(bad[0])
        raise AssertionError(f"invalid spin value {a[v]!r} at vertex {v} ({bad.size} invalid entries)")


def read_only_view(state: np.ndarray) -> np.ndarray:
    """返回不可写视图，供展示/观测等只读协作方使用（不拷贝）。"""
    view = state.view()
    view.flags.writeable = False
    return view
