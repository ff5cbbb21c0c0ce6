# -*- coding: utf-8 -*-
"""
    稀疏 Ising 图构造（最大度约束）

本模块负责生成 Gibbs 采样使用的稀疏无向图。顶点编号为连续区间 [0, N)，
因此图以稠密的“邻接表数组”（CSR：``indptr`` + ``indices``）存储，而不是字典。

支持模式：
    - ``random``: 随机插边。反复抽取两个随机顶点，若插入后两端度数均不超过 Δ 则插入（双向记录），
      否则重抽；连续失败次数达到上限即提前返回已构造的部分图（best effort，不保证正则）。
    - ``lattice``: Δ=4 的二维开边界方格。N 必须为完全平方数，每个顶点只连右邻与下邻，
      每条边只添加一次、双向记录；内部顶点度为 4，边界顶点度 < 4。

注意：
    - 随机模式默认**不去重**：同一对顶点之间可能出现多条边（占用度预算但不增加新结构）。
      这是可接受的近似，可通过 ``allow_duplicate_edges=False`` 关闭。
    - 构造完成后图不可变（底层数组设为只读），采样期间可被所有 worker 无锁共享。
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from numba import njit

logger = logging.getLogger(__name__)

__all__ = [
    "IsingGraph",
    "build_random_graph",
    "build_lattice_graph",
    "build_graph",
    "graph_statistics",
    "validate_graph",
    "normalize_graph_mode",
    "GRAPH_MODES",
]

GRAPH_MODES = ("random", "lattice")
LATTICE_DEGREE = 4
_DEFAULT_CHUNK = 4096


def normalize_graph_mode(name: str) -> str:
    if name is None:
        raise ValueError("graph mode must be provided")
    s = str(name).strip().lower().replace("-", "_").replace(" ", "_")
    if s in ("random", "rand", "random_edges", "random_graph"):
        return "random"
    if s in ("lattice", "grid", "square", "square_lattice", "2d_lattice"):
        return "lattice"
    return s


# -----------------------------------------------------------------------------
# 图对象
# -----------------------------------------------------------------------------
class IsingGraph:
    """
    只读的 CSR 邻接结构。

    ``neighbors(v)`` 返回顶点 v 的邻居（按插入顺序），是 ``indices`` 的切片视图。
    """

    def __init__(self, indptr: Any, indices: Any, max_degree: int, mode: str = "custom"):
        indptr = np.array(indptr, dtype=np.int64)
        indices = np.array(indices, dtype=np.int64)
        if indptr.ndim != 1 or indptr.size < 2:
            raise ValueError("indptr must be 1D with at least 2 entries (N >= 1)")
        if indices.ndim != 1:
            raise ValueError("indices must be 1D")
        if indptr[0] != 0 or indptr[-1] != indices.size:
            raise ValueError("indptr must start at 0 and end at len(indices)")
        if np.any(np.diff(indptr) < 0):
            raise ValueError("indptr must be non-decreasing")
        indptr.flags.writeable = False
        indices.flags.writeable = False
        self.indptr = indptr
        self.indices = indices
        self.max_degree = int(max_degree)
        self.mode = str(mode)

    @classmethod
    def from_adjacency(cls, adjacency: Sequence[Sequence[int]], max_degree: Optional[int] = None,
                       mode: str = "custom") -> "IsingGraph":
        """由显式邻接表构造并校验不变量（对称、度约束、无自环）。"""
        lists = [list(map(int, nb)) for nb in adjacency]
        degrees = np.array([len(nb) for nb in lists], dtype=np.int64)
        indptr = np.concatenate(([0], np.cumsum(degrees)))
        indices = np.array([u for nb in lists for u in nb], dtype=np.int64)
        if max_degree is None:
            max_degree = int(degrees.max()) if degrees.size else 0
        g = cls(indptr, indices, max_degree, mode=mode)
        validate_graph(g)
        return g

    @classmethod
    def _from_padded(cls, nbr: np.ndarray, degree: np.ndarray, max_degree: int, mode: str) -> "IsingGraph":
        # nbr: (N, Δ) 以 -1 填充；按行展开保持每个顶点的插入顺序
        mask = np.arange(nbr.shape[1])[None, :] < degree[:, None]
        indptr = np.concatenate(([0], np.cumsum(degree)))
        return cls(indptr, nbr[mask], max_degree, mode=mode)

    @property
    def n_vertices(self) -> int:
        return int(self.indptr.size - 1)

    @property
    def n_edges(self) -> int:
        """无向边数（重复边按重数计）。"""
        return int(self.indices.size // 2)

    def __len__(self) -> int:
        return self.n_vertices

    def neighbors(self, v: int) -> np.ndarray:
        return self.indices[self.indptr[v]:self.indptr[v + 1]]

    def degree(self, v: int) -> int:
        return int(self.indptr[v + 1] - self.indptr[v])

    def degrees(self) -> np.ndarray:
        return np.diff(self.indptr)

    def adjacency_list(self) -> List[List[int]]:
        return [self.neighbors(v).tolist() for v in range(self.n_vertices)]

    def __repr__(self) -> str:
        return (f"IsingGraph(mode={self.mode!r}, n_vertices={self.n_vertices}, "
                f"n_edges={self.n_edges}, max_degree={self.max_degree})")


# -----------------------------------------------------------------------------
# 校验与统计
# -----------------------------------------------------------------------------
def validate_graph(graph: IsingGraph) -> None:
    """检查图不变量，发现违例时抛出 ValueError（只报告第一类违例）。"""
    n = graph.n_vertices
    deg = graph.degrees()
    idx = graph.indices
    if idx.size and (idx.min() < 0 or idx.max() >= n):
        raise ValueError(f"neighbor ids must lie in [0, {n})")
    over = np.flatnonzero(deg > graph.max_degree)
    if over.size:
        v = int(over[0])
        raise ValueError(f"vertex {v} has degree {int(deg[v])} > max_degree {graph.max_degree}")
    src = np.repeat(np.arange(n, dtype=np.int64), deg)
    loops = np.flatnonzero(src == idx)
    if loops.size:
        raise ValueError(f"self-loop at vertex {int(src[loops[0]])}")
    # 对称性（含重数）：(v,u) 的多重集合必须等于 (u,v) 的多重集合
    fwd = np.sort(src * n + idx)
    rev = np.sort(idx * n + src)
    if not np.array_equal(fwd, rev):
        bad = np.flatnonzero(fwd != rev)[0]
        v, u = divmod(int(fwd[bad]), n)
        raise ValueError(f"asymmetric adjacency: {u} in neighbors({v}) but not vice versa")


def graph_statistics(graph: IsingGraph) -> Dict[str, Any]:
    """度数摘要：min/max/avg degree、边数、孤立顶点数。"""
    deg = graph.degrees()
    return {
        "n_vertices": graph.n_vertices,
        "n_edges": graph.n_edges,
        "max_degree_bound": graph.max_degree,
        "min_degree": int(deg.min()),
        "max_degree": int(deg.max()),
        "avg_degree": float(deg.mean()),
        "n_isolated": int(np.count_nonzero(deg == 0)),
    }


# -----------------------------------------------------------------------------
# JIT 内核：随机插边（消费预抽取的候选顶点对）
# -----------------------------------------------------------------------------
@njit(cache=True)
def _insert_random_edges_jit(
    cand: np.ndarray,
    nbr: np.ndarray,
    degree: np.ndarray,
    max_degree: int,
    allow_duplicates: bool,
    n_edges: int,
    n_fail: int,
    max_edges: int,
    max_tries: int,
) -> Tuple[int, int, int]:
    """
    依次尝试 cand 中的候选对。返回 (n_edges, n_fail, status)：
      status = 0  候选用尽，需要下一批
      status = 1  连续失败次数达到 max_tries
      status = 2  已插入 max_edges 条边
    """
    status = 0
    for k in range(cand.shape[0]):
        a = cand[k, 0]
        b = cand[k, 1]
        ok = a != b and degree[a] < max_degree and degree[b] < max_degree
        if ok and not allow_duplicates:
            for t in range(degree[a]):
                if nbr[a, t] == b:
                    ok = False
                    break
        if ok:
            nbr[a, degree[a]] = b
            degree[a] += 1
            nbr[b, degree[b]] = a
            degree[b] += 1
            n_edges += 1
            n_fail = 0
            if n_edges >= max_edges:
                status = 2
                break
        else:
            n_fail += 1
            if n_fail >= max_tries:
                status = 1
                break
    return n_edges, n_fail, status


def _check_int(name: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if int(value) < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return int(value)


def build_random_graph(
    n_vertices: int,
    max_degree: int,
    rng: np.random.Generator,
    max_edges: Optional[int] = None,
    max_insertion_tries: Optional[int] = None,
    allow_duplicate_edges: bool = True,
    chunk_size: int = _DEFAULT_CHUNK,
) -> IsingGraph:
    """
    随机插边构造。默认 ``max_edges = max_insertion_tries = N*N``。

    连续失败 ``max_insertion_tries`` 次后返回当前部分图；调用方必须容忍最坏情况下度数低于 Δ 的图。
    """
    n = _check_int("n_vertices", n_vertices, 1)
    delta = _check_int("max_degree", max_degree, 0)
    max_edges = n * n if max_edges is None else _check_int("max_edges", max_edges, 0)
    max_tries = n * n if max_insertion_tries is None else _check_int("max_insertion_tries", max_insertion_tries, 1)
    chunk = _check_int("chunk_size", chunk_size, 1)

    nbr = np.full((n, delta), -1, dtype=np.int64)
    degree = np.zeros(n, dtype=np.int64)
    n_edges, n_fail, status = 0, 0, 0

    # n < 2 或 Δ = 0 时不存在合法边，无需抽样
    if n >= 2 and delta > 0 and max_edges > 0:
        while status == 0:
            cand = rng.integers(0, n, size=(chunk, 2), dtype=np.int64)
            n_edges, n_fail, status = _insert_random_edges_jit(
                cand, nbr, degree, delta, bool(allow_duplicate_edges),
                n_edges, n_fail, max_edges, max_tries,
            )

    graph = IsingGraph._from_padded(nbr, degree, delta, mode="random")
    if status == 1:
        logger.info(
            "edge insertion stopped after %d consecutive rejections; kept %d edges (min/max degree %d/%d)",
            n_fail, n_edges, int(degree.min()), int(degree.max()),
        )
    else:
        logger.debug("random graph built: %d edges", n_edges)
    return graph


def build_lattice_graph(n_vertices: int, max_degree: int = LATTICE_DEGREE) -> IsingGraph:
    """
    二维开边界方格：顶点 v = r*side + c 连接右邻 (v+1) 与下邻 (v+side)。
    Δ ≠ 4 或 N 不是完全平方数时立即抛 ValueError。
    """
    n = _check_int("n_vertices", n_vertices, 1)
    if int(max_degree) != LATTICE_DEGREE:
        raise ValueError(f"lattice mode requires max_degree={LATTICE_DEGREE}, got {max_degree}")
    side = math.isqrt(n)
    if side * side != n:
        raise ValueError(f"lattice mode requires a perfect-square vertex count, got {n}")

    nbr = np.full((n, LATTICE_DEGREE), -1, dtype=np.int64)
    degree = np.zeros(n, dtype=np.int64)

    def _add(a: int, b: int) -> None:
        nbr[a, degree[a]] = b
        degree[a] += 1
        nbr[b, degree[b]] = a
        degree[b] += 1

    for r in range(side):
        for c in range(side):
            v = r * side + c
            if c + 1 < side:
                _add(v, v + 1)
            if r + 1 < side:
                _add(v, v + side)
    return IsingGraph._from_padded(nbr, degree, LATTICE_DEGREE, mode="lattice")


def build_graph(
    mode: str,
    n_vertices: int,
    max_degree: int,
    rng: Optional[np.random.Generator] = None,
    **random_kwargs: Any,
) -> IsingGraph:
    """按模式名分派到 build_random_graph / build_lattice_graph（lattice 模式忽略随机插边参数）。"""
    m = normalize_graph_mode(mode)
    if m == "lattice":
        graph = build_lattice_graph(n_vertices, max_degree)
    elif m == "random":
        if rng is None:
            raise ValueError("random graph mode requires an explicit rng (numpy Generator)")
        graph = build_random_graph(n_vertices, max_degree, rng, **random_kwargs)
    else:
        raise ValueError(f"Unknown graph mode: {mode!r}. Use one of {GRAPH_MODES} (synonyms accepted).")
    stats = graph_statistics(graph)
    logger.info(
        "graph[%s]: N=%d, edges=%d, degree min/max/avg = %d/%d/%.3f",
        graph.mode, stats["n_vertices"], stats["n_edges"],
        stats["min_degree"], stats["max_degree"], stats["avg_degree"],
    )
    return graph
