# -*- coding: utf-8 -*-
"""
随机数流工具

所有随机性都来自显式种子：图构造、初始状态以及每个 worker 各自持有一条独立的
``numpy.random.Generator`` 流。worker 之间从不共享 Generator（Generator 本身不是线程安全的）。
"""

from __future__ import annotations

from typing import List

import numpy as np
from numpy.random import Generator, Philox, SeedSequence

__all__ = ["make_generator", "spawn_seeds", "fresh_seed"]


def _seed32(seed: int) -> int:
    """将任意整数截断为 32-bit 无符号整数。None 直接拒绝。"""
    if seed is None:
        raise ValueError("seed must be an integer (not None)")
    try:
        s = int(seed)
    except (TypeError, ValueError):
        raise ValueError(f"seed must be convertible to int, got {seed!r}")
    return s & 0xFFFFFFFF


def make_generator(seed: int) -> Generator:
    """由整数种子构造 Philox 后端的 Generator。"""
    return Generator(Philox(_seed32(seed)))


def spawn_seeds(master_seed: int, n: int) -> List[int]:
    """
    用 SeedSequence.spawn 从主种子派生 n 个 32-bit 子种子。
    同一 master_seed 永远得到同一组子种子。
    """
    if master_seed is None:
        raise ValueError("master_seed must be provided")
    if int(n) < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    children = SeedSequence(int(master_seed)).spawn(int(n))
    return [int(ch.generate_state(1)[0]) & 0xFFFFFFFF for ch in children]


def fresh_seed() -> int:
    """从系统熵取一个 32-bit 种子（未配置 seed 时使用，调用方应记录到日志）。"""
    return int(SeedSequence().entropy) & 0xFFFFFFFF
