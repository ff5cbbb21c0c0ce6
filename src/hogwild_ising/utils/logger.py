# -*- coding: utf-8 -*-
"""
日志记录器

实现功能：
    - setup_logger: 控制台（仅真实终端时彩色）+ 可选文件输出（可按大小轮转）
    - ProgressLogger: 每 n 轮输出采样进度（rounds/s 与 ETA）
    - PerformanceMonitor: 命名计时器与计数器，运行结束时输出摘要

库内模块统一使用 ``logging.getLogger(__name__)``，只有入口脚本调用 setup_logger。
"""

from __future__ import annotations

import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional, Union

__all__ = ['setup_logger', 'get_logger', 'ProgressLogger', 'PerformanceMonitor']

_DATEFMT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """只在 format 期间临时给 levelname 加颜色码，返回前恢复。"""
    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        orig = record.levelname
        try:
            color = self.COLORS.get(orig)
            if color:
                record.levelname = f"{color}{orig}{self.RESET}"
            return super().format(record)
        finally:
            record.levelname = orig


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _make_console_handler(level: int, use_color: bool) -> logging.Handler:
    if use_color:
        formatter: logging.Formatter = ColoredFormatter('%(asctime)s | %(levelname)s | %(message)s', datefmt=_DATEFMT)
    else:
        formatter = logging.Formatter('%(asctime)s | %(levelname)-8s | %(message)s', datefmt=_DATEFMT)
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    return ch


def _make_file_handler(log_path: Path, max_bytes: int, backup_count: int) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    if max_bytes > 0:
        fh: logging.Handler = RotatingFileHandler(
            str(log_path),
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding='utf-8',
        )
    else:
        fh = logging.FileHandler(str(log_path), mode='a', encoding='utf-8')
    fh.setLevel(logging.DEBUG)  # 文件保留细节；发不发由 logger.level 决定
    fh.setFormatter(logging.Formatter('%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s',
                                      datefmt=_DATEFMT))
    return fh


def setup_logger(
    name: str = 'hogwild_ising',
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    use_color: bool = True,
    max_bytes: int = 0,
    backup_count: int = 5,
) -> logging.Logger:
    """
    配置并返回 logger。重复调用会替换同名 logger 的 handlers（避免重复输出）。
    max_bytes > 0 时文件按大小轮转，保留 backup_count 个旧文件。
    """
    lvl = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(lvl)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False

    use_color = bool(use_color and hasattr(sys.stdout, "isatty") and sys.stdout.isatty())
    logger.addHandler(_make_console_handler(lvl, use_color))
    if log_file:
        logger.addHandler(_make_file_handler(Path(log_file), max_bytes, backup_count))
    return logger


def get_logger(name: str = 'hogwild_ising') -> logging.Logger:
    """获取 logger（未 setup 时不会自动添加 handlers）。"""
    return logging.getLogger(name)


class ProgressLogger:
    """每 log_every_n 步（以及最后一步）打印进度。"""

    def __init__(self, total: int, desc: str = "Progress",
                 logger: Optional[logging.Logger] = None,
                 log_every_n: int = 10):
        self.total = int(total)
        self.desc = desc
        self.logger = logger or get_logger()
        self.log_every_n = max(1, int(log_every_n))
        self.current = 0
        self.start_time = time.time()

    def update(self, n: int = 1):
        self.current = min(self.total, self.current + int(n))
        now = time.time()
        if (self.current % self.log_every_n == 0) or (self.current >= self.total):
            elapsed = max(1e-9, now - self.start_time)
            speed = self.current / elapsed
            eta = max(0, self.total - self.current) / max(speed, 1e-9)
            self.logger.info("%s: %d/%d (%.1f%%) | %.2f it/s | ETA: %.1fs",
                             self.desc, self.current, self.total,
                             100.0 * self.current / max(1, self.total), speed, eta)

    def finish(self):
        elapsed = max(1e-9, time.time() - self.start_time)
        self.logger.info("%s 完成: %d | 耗时 %.2fs | %.2f it/s",
                         self.desc, self.total, elapsed, self.total / elapsed)


class PerformanceMonitor:
    """轻量计时器 / 计数器。"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger()
        self.timers: Dict[str, float] = {}
        self.elapsed: Dict[str, float] = {}
        self.counters: Dict[str, int] = {}

    def start_timer(self, name: str):
        self.timers[name] = time.perf_counter()

    def stop_timer(self, name: str, log: bool = True) -> Optional[float]:
        if name not in self.timers:
            self.logger.warning("计时器 '%s' 未启动", name)
            return None
        dt = time.perf_counter() - self.timers.pop(name)
        self.elapsed[name] = self.elapsed.get(name, 0.0) + dt
        if log:
            self.logger.info("%s: %.4fs", name, dt)
        return dt

    def count(self, name: str, value: int = 1):
        self.counters[name] = self.counters.get(name, 0) + int(value)

    def summary(self):
        self.logger.info("性能统计:")
        for k, v in self.elapsed.items():
            self.logger.info("  [timer] %s: %.4fs", k, v)
        for k, v in self.counters.items():
            self.logger.info("  [count] %s: %d", k, v)
