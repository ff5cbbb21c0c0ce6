# -*- coding: utf-8 -*-
"""
    Hogwild 并行 Gibbs 采样驱动器

固定轮数的外层循环；每一轮把 W 个 worker 同时派发到一个常驻线程池上，
每个 worker 按访问模式给定的顺序依次对自己批次内的顶点应用转移核，
所有 worker 完成（join）后该轮才算结束。

并发语义（有意放宽）：
    - 状态数组通过引用被所有 worker 共享，**没有锁、没有原子操作、没有屏障**；
      worker 计算邻居和时可能读到其他 worker 本轮已写或未写的值。
      这是 Hogwild 用统计精确性换吞吐的近似，不能通过加锁“修复”，否则采样语义改变。
    - 单个 worker 内部的顶点严格顺序更新。
    - 图与访问模式只读，可无同步共享；每个 worker 持有独立的 Generator。
    - 无取消 / 超时 / 收敛判定；run(n) 恰好执行 n 轮。

W = 1 时即为精确的顺序扫描 Gibbs 采样。
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import numpy as np

from ..core.graph import IsingGraph
from ..core.kernel import gibbs_sweep, warm_up
from ..core.observables import energy_total, magnetization
from ..core.partition import AccessPattern, make_access_pattern
from ..core.rng import make_generator, spawn_seeds
from ..core.state import SPIN_DTYPE, init_state, read_only_view
from ..core.state import check_state as _check_state
from ..utils.logger import ProgressLogger

logger = logging.getLogger(__name__)

__all__ = ["HogwildSampler", "SamplingResult"]

RoundCallback = Callable[[int, np.ndarray], None]


@dataclass
class SamplingResult:
    n_iterations: int
    final_state: np.ndarray
    flips: np.ndarray                      # 每轮翻转数
    elapsed: float
    worker_seeds: List[int] = field(default_factory=list)
    magnetization: Optional[np.ndarray] = None
    energy: Optional[np.ndarray] = None

    def summary(self) -> Dict[str, Any]:
        n = int(self.final_state.size)
        out: Dict[str, Any] = {
            "n_iterations": int(self.n_iterations),
            "n_vertices": n,
            "elapsed_s": float(self.elapsed),
            "rounds_per_s": float(self.n_iterations / self.elapsed) if self.elapsed > 0 else float("inf"),
            "mean_flip_rate": float(self.flips.mean() / n) if self.flips.size else 0.0,
            "final_m": magnetization(self.final_state),
        }
        if self.energy is not None and self.energy.size:
            out["final_E_per_spin"] = float(self.energy[-1] / n)
        return out


class HogwildSampler:
    """
    Hogwild Gibbs 采样器。

    随机性：要么给出主种子 ``seed``（派生初始状态流与每个 worker 的流），
    要么同时给出 ``state`` 与 ``worker_seeds``。
    """

    def __init__(
        self,
        graph: IsingGraph,
        beta: float,
        n_workers: int = 1,
        seed: Optional[int] = None,
        worker_seeds: Optional[Sequence[int]] = None,
        state: Optional[Any] = None,
        access_pattern: Optional[AccessPattern] = None,
        check_state: bool = True,
    ) -> None:
        self.graph = graph
        self.beta = float(beta)
        self.n_vertices = graph.n_vertices
        self.n_workers = int(n_workers)
        if self.n_workers <= 0:
            raise ValueError(f"n_workers must be positive, got {n_workers}")
        self.check_state = bool(check_state)

        # 种子：children[0] 用于初始状态，其余按 worker 顺序分配
        init_seed: Optional[int] = None
        if seed is not None:
            children = spawn_seeds(int(seed), self.n_workers + 1)
            init_seed = children[0]
            if worker_seeds is None:
                worker_seeds = children[1:]
        if worker_seeds is None:
            raise ValueError("This sampler requires an explicit seed or worker_seeds (one integer per worker).")
        seeds_list = [int(s) for s in worker_seeds]
        if len(seeds_list) != self.n_workers:
            raise ValueError(f"worker_seeds length ({len(seeds_list)}) must equal n_workers ({self.n_workers}).")
        self.worker_seeds = seeds_list
        self._rngs = [make_generator(s) for s in seeds_list]

        # 共享状态：调用方的数组按引用共享，不做任何类型转换或拷贝
        if state is None:
            if init_seed is None:
                raise ValueError("state must be given when no master seed is provided")
            self._state = init_state(self.n_vertices, make_generator(init_seed))
        else:
            # 先按原始值校验，避免 int8 截断把非法值“洗”成 ±1
            _check_state(state, self.n_vertices)
            if not isinstance(state, np.ndarray) or state.dtype != SPIN_DTYPE:
                raise ValueError(f"state must be a numpy int8 array, got {getattr(state, 'dtype', type(state))}")
            if not (state.flags.c_contiguous and state.flags.writeable):
                raise ValueError("state must be C-contiguous and writeable to be shared by reference")
            self._state = state

        if access_pattern is None:
            access_pattern = make_access_pattern(self.n_vertices, self.n_workers)
        if access_pattern.n_vertices != self.n_vertices:
            raise ValueError("access_pattern.n_vertices does not match graph")
        if access_pattern.n_workers != self.n_workers:
            raise ValueError(f"access_pattern has {access_pattern.n_workers} batches, expected {self.n_workers}")
        self.access_pattern = access_pattern

        self.iteration = 0
        self.total_flips = 0
        self._executor: Optional[ThreadPoolExecutor] = None

        warm_up(self.graph, self._state, self.beta)
        logger.debug("HogwildSampler: N=%d, W=%d, beta=%.4f, loads=%s",
                     self.n_vertices, self.n_workers, self.beta, self.access_pattern.loads())

    # -------------------------
    # 状态访问（只读）
    # -------------------------
    @property
    def state(self) -> np.ndarray:
        return read_only_view(self._state)

    def snapshot(self) -> np.ndarray:
        return self._state.copy()

    # -------------------------
    # 线程池（每个采样器常驻一个，按轮派发）
    # -------------------------
    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.n_workers,
                                                thread_name_prefix="hogwild-worker")
        return self._executor

    def _run_worker(self, k: int) -> int:
        return gibbs_sweep(self.graph, self._state, self.access_pattern.batches[k], self.beta, self._rngs[k])

    def step(self) -> int:
        """执行一轮：派发全部 worker 并等待全部完成。返回本轮翻转数。"""
        pool = self._pool()
        futures = [pool.submit(self._run_worker, k) for k in range(self.n_workers)]
        # join：先等全部结束，再取结果（worker 异常在此抛出）
        wait(futures)
        flips = sum(f.result() for f in futures)
        self.iteration += 1
        self.total_flips += flips
        if self.check_state:
            _check_state(self._state, self.n_vertices)
        return flips

    def run(
        self,
        n_iterations: int,
        callback: Optional[RoundCallback] = None,
        record_observables: bool = False,
        progress_every: Optional[int] = None,
    ) -> SamplingResult:
        """
        恰好执行 n_iterations 轮。callback(iteration, state_view) 在每轮 join 之后调用。
        record_observables=True 时记录每轮的 m 与 E。
        """
        n = int(n_iterations)
        if n < 0:
            raise ValueError(f"n_iterations must be non-negative, got {n_iterations}")
        flips = np.zeros(n, dtype=np.int64)
        mags = np.zeros(n, dtype=np.float64) if record_observables else None
        energies = np.zeros(n, dtype=np.float64) if record_observables else None
        progress = ProgressLogger(n, desc="hogwild rounds", logger=logger,
                                  log_every_n=progress_every) if progress_every else None

        t0 = time.perf_counter()
        for i in range(n):
            flips[i] = self.step()
            if record_observables:
                mags[i] = magnetization(self._state)
                energies[i] = energy_total(self.graph, self._state)
            if callback is not None:
                callback(self.iteration, self.state)
            if progress is not None:
                progress.update()
        elapsed = time.perf_counter() - t0
        if progress is not None:
            progress.finish()

        _check_state(self._state, self.n_vertices)
        return SamplingResult(
            n_iterations=n,
            final_state=self.snapshot(),
            flips=flips,
            elapsed=elapsed,
            worker_seeds=list(self.worker_seeds),
            magnetization=mags,
            energy=energies,
        )

    def iter_samples(self, n_iterations: int) -> Iterator[np.ndarray]:
        """每轮结束后产出一份状态拷贝（样本）。"""
        for _ in range(int(n_iterations)):
            self.step()
            yield self.snapshot()

    # -------------------------
    # 资源释放
    # -------------------------
    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "HogwildSampler":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
