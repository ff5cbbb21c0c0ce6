# -*- coding: utf-8 -*-
"""
命令行入口：配置 → 图 → Hogwild 采样 → 摘要

    python -m hogwild_ising --preset quick --set sampler.n_workers=8
    hogwild-ising --config configs/lattice.yaml

配置错误（例如 lattice 模式下 Δ≠4 或 N 不是完全平方数）属于致命错误：记录日志后以退出码 2 终止。
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import yaml

from ..core.graph import IsingGraph, build_graph, graph_statistics
from ..core.observables import calculate_observables
from ..core.rng import fresh_seed, make_generator, spawn_seeds
from ..utils.config import Config, from_args
from ..utils.logger import PerformanceMonitor, setup_logger
from .hogwild import HogwildSampler, SamplingResult

logger = logging.getLogger(__name__)

__all__ = ["run_from_config", "main"]

EXIT_CONFIG_ERROR = 2


def run_from_config(cfg: Config) -> Tuple[IsingGraph, SamplingResult]:
    """按配置构图并运行采样，返回 (graph, result)。"""
    s = cfg.sampler
    master_seed = s.seed
    if master_seed is None:
        master_seed = fresh_seed()
        logger.info("no seed configured; using fresh seed %d", master_seed)
    graph_seed, sampler_seed = spawn_seeds(master_seed, 2)

    perf = PerformanceMonitor(logger)
    perf.start_timer("build_graph")
    graph = build_graph(
        s.graph_mode, s.n_vertices, s.max_degree,
        rng=make_generator(graph_seed),
        max_edges=s.max_edges,
        max_insertion_tries=s.max_insertion_tries,
        allow_duplicate_edges=s.allow_duplicate_edges,
    )
    perf.stop_timer("build_graph", log=cfg.verbose)

    perf.start_timer("sampling")
    with HogwildSampler(graph, s.beta, n_workers=s.n_workers, seed=sampler_seed,
                        check_state=s.check_state) as sampler:
        result = sampler.run(
            s.n_iterations,
            record_observables=s.record_observables,
            progress_every=cfg.logging.progress_every or None,
        )
        perf.count("vertex_updates", s.n_iterations * s.n_vertices)
        perf.count("spin_flips", sampler.total_flips)
    perf.stop_timer("sampling", log=cfg.verbose)

    if cfg.verbose:
        perf.summary()
    return graph, result


def main(argv: Optional[List[str]] = None) -> int:
    try:
        cfg = from_args(argv)
    except (ValueError, OSError, yaml.YAMLError) as e:
        setup_logger("hogwild_ising").error("configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    try:
        setup_logger("hogwild_ising", level=cfg.logging.level,
                     log_file=cfg.logging.log_file, use_color=cfg.logging.use_color,
                     max_bytes=cfg.logging.max_bytes, backup_count=cfg.logging.backup_count)
    except OSError as e:
        setup_logger("hogwild_ising").error("cannot open log file: %s", e)
        return EXIT_CONFIG_ERROR
    logger.info("config: %s", cfg.to_dict()["sampler"])

    try:
        graph, result = run_from_config(cfg)
    except ValueError as e:
        logger.error("configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    stats = graph_statistics(graph)
    logger.info("graph statistics: min degree %d | max degree %d | avg degree %.4f",
                stats["min_degree"], stats["max_degree"], stats["avg_degree"])
    obs = calculate_observables(graph, result.final_state)
    logger.info("final: m=%.4f | |m|=%.4f | E/N=%.4f", obs["m"], obs["abs_m"], obs["E_per_spin"])
    for k, v in result.summary().items():
        logger.info("  %s: %s", k, v)
    return 0
