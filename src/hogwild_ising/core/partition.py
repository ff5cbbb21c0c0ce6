# -*- coding: utf-8 -*-
"""
Hogwild 访问模式（顶点 → worker 的静态划分）

将 [0, N) 划分为 W 个互不相交的批次，每个 worker 恰好一个批次：
前 W-1 个 worker 各得 floor(N/W) 个连续下标，最后一个 worker 得到剩余部分。
连续区间只是为了缓存局部性；驱动器接受任何互不相交且覆盖完整的划分。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

__all__ = ["AccessPattern", "make_access_pattern"]


@dataclass(frozen=True)
class AccessPattern:
    n_vertices: int
    batches: Tuple[np.ndarray, ...]
    batches_per_worker: int = 1

    @property
    def n_workers(self) -> int:
        return len(self.batches)

    def loads(self) -> List[int]:
        return [int(b.size) for b in self.batches]

    def worker_ranges(self) -> List[Tuple[int, int]]:
        """每个批次的 [start, stop)；仅对连续划分有意义。"""
        out = []
        for b in self.batches:
            if b.size == 0:
                out.append((0, 0))
            elif not np.array_equal(b, np.arange(b[0], b[-1] + 1)):
                raise ValueError("batch is not a contiguous range")
            else:
                out.append((int(b[0]), int(b[-1]) + 1))
        return out

    @classmethod
    def from_batches(cls, n_vertices: int, batches: Sequence[Sequence[int]]) -> "AccessPattern":
        """自定义划分；校验互不相交且完整覆盖 [0, N)。"""
        n = int(n_vertices)
        if len(batches) == 0:
            raise ValueError("at least one batch is required")
        arrs = []
        for b in batches:
            a = np.array(b, dtype=np.int64).reshape(-1)
            a.flags.writeable = False
            arrs.append(a)
        allv = np.concatenate(arrs) if arrs else np.empty(0, dtype=np.int64)
        if allv.size != n or not np.array_equal(np.sort(allv), np.arange(n)):
            raise ValueError(f"batches must cover [0, {n}) exactly once")
        return cls(n_vertices=n, batches=tuple(arrs))


def make_access_pattern(n_vertices: int, n_workers: int) -> AccessPattern:
    n = int(n_vertices)
    w = int(n_workers)
    if n < 0:
        raise ValueError(f"n_vertices must be non-negative, got {n_vertices}")
    if w <= 0:
        raise ValueError(f"n_workers must be positive, got {n_workers}")
    chunk = n // w
    bounds = [k * chunk for k in range(w)] + [n]
    batches = []
    for k in range(w):
        b = np.arange(bounds[k], bounds[k + 1], dtype=np.int64)
        b.flags.writeable = False
        batches.append(b)
    return AccessPattern(n_vertices=n, batches=tuple(batches))
