# -*- coding: utf-8 -*-
"""
统一配置管理（预设、分层覆盖、构造期硬约束）

实现功能：
    - 图模式名归一化（"grid" → "lattice"，"rand" → "random"）
    - 硬性约束（构造时即抛 ValueError，属于致命的配置错误）：
         N、W、Δ、迭代数为合法整数
         lattice 模式 ⇒ Δ = 4 且 N 为完全平方数
    - validate_config() 返回非致命 warnings 列表（例如 W > N 时部分 worker 空转）
    - ENV/CLI/YAML 合并，优先级：默认/预设 < 文件 < 环境变量 < CLI --set

配置在一次采样运行期间固定不变，显式传给图构造、状态初始化、划分与驱动器。
"""

from __future__ import annotations

import ast
import copy
import json
import math
import os
import sys
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..core.graph import GRAPH_MODES, LATTICE_DEGREE, normalize_graph_mode

__all__ = [
    'Config', 'SamplerConfig', 'LoggingConfig',
    'load_config', 'save_config', 'get_preset_config',
    'load_from_env', 'merge_configs', 'validate_config', 'from_args',
]

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _deep_merge(d1: Dict[str, Any], d2: Dict[str, Any]) -> Dict[str, Any]:
    """将 d2 深度合并到 d1（原地修改 d1 并返回它）。"""
    for k, v in (d2 or {}).items():
        if k in d1 and isinstance(d1[k], dict) and isinstance(v, dict):
            _deep_merge(d1[k], v)
        else:
            d1[k] = v
    return d1


def _set_by_path(d: Dict[str, Any], path: List[str], value: Any):
    cur = d
    for key in path[:-1]:
        if key not in cur or not isinstance(cur[key], dict):
            cur[key] = {}
        cur = cur[key]
    cur[path[-1]] = value


def _parse_value(s: str):
    """字符串 → Python 值（literal_eval 优先，兼容 true/false/none）。"""
    if s is None:
        return None
    try:
        return ast.literal_eval(s)
    except (ValueError, SyntaxError):
        sl = s.strip().lower()
        if sl == 'true':
            return True
        if sl == 'false':
            return False
        if sl in ('none', 'null'):
            return None
        return s.strip()


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


# -----------------------------------------------------------------------------
# Dataclasses
# -----------------------------------------------------------------------------
@dataclass
class SamplerConfig:
    # 模型
    n_vertices: int = 1000
    max_degree: int = 3
    beta: float = 0.2               # 逆温度
    graph_mode: str = 'random'      # 'random' | 'lattice'（同义词会归一化）

    # 调度
    n_workers: int = 4
    n_iterations: int = 100

    # 随机插边预算（None ⇒ N*N）
    max_edges: Optional[int] = None
    max_insertion_tries: Optional[int] = None
    allow_duplicate_edges: bool = True

    # 运行期
    seed: Optional[int] = None
    check_state: bool = True
    record_observables: bool = True

    def __post_init__(self):
        for name in ('n_vertices', 'n_workers'):
            v = getattr(self, name)
            if not (_is_int(v) and v > 0):
                raise ValueError(f"{name} must be a positive integer, got {v!r}")
        for name in ('max_degree', 'n_iterations'):
            v = getattr(self, name)
            if not (_is_int(v) and v >= 0):
                raise ValueError(f"{name} must be a non-negative integer, got {v!r}")
        for name in ('max_edges', 'max_insertion_tries'):
            v = getattr(self, name)
            if v is not None and not (_is_int(v) and v > 0):
                raise ValueError(f"{name} must be a positive integer or None, got {v!r}")
        try:
            self.beta = float(self.beta)
        except (TypeError, ValueError):
            raise ValueError(f"beta must be numeric, got {self.beta!r}")
        if not math.isfinite(self.beta):
            raise ValueError(f"beta must be finite, got {self.beta}")
        if self.seed is not None and not _is_int(self.seed):
            raise ValueError(f"seed must be an integer or None, got {self.seed!r}")

        self.graph_mode = normalize_graph_mode(self.graph_mode)
        if self.graph_mode not in GRAPH_MODES:
            raise ValueError(f"Unknown graph_mode: {self.graph_mode!r}. "
                             f"Use one of {GRAPH_MODES} (synonyms accepted).")

        # lattice 模式的结构性约束：配置本身无效，立即失败
        if self.graph_mode == 'lattice':
            if self.max_degree != LATTICE_DEGREE:
                raise ValueError(f"graph_mode='lattice' requires max_degree={LATTICE_DEGREE}, "
                                 f"got {self.max_degree}")
            side = math.isqrt(self.n_vertices)
            if side * side != self.n_vertices:
                raise ValueError(f"graph_mode='lattice' requires a perfect-square n_vertices, "
                                 f"got {self.n_vertices}")


@dataclass
class LoggingConfig:
    level: str = 'INFO'
    log_file: Optional[str] = None
    use_color: bool = True
    progress_every: int = 10        # 0 关闭进度输出
    max_bytes: int = 0              # >0 时日志文件按大小轮转
    backup_count: int = 5

    def __post_init__(self):
        self.level = str(self.level).strip().upper()
        if self.level not in _LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {_LOG_LEVELS}, got {self.level!r}")
        if not (_is_int(self.progress_every) and self.progress_every >= 0):
            raise ValueError("logging.progress_every must be a non-negative integer")
        for name in ('max_bytes', 'backup_count'):
            v = getattr(self, name)
            if not (_is_int(v) and v >= 0):
                raise ValueError(f"logging.{name} must be a non-negative integer, got {v!r}")


@dataclass
class Config:
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    project_name: str = 'hogwild_ising'
    verbose: bool = True
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sampler': asdict(self.sampler),
            'logging': asdict(self.logging),
            'project_name': self.project_name,
            'verbose': self.verbose,
            'version': self.version,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Config':
        d = d or {}
        try:
            sampler = SamplerConfig(**(d.get('sampler', {}) or {}))
            log_cfg = LoggingConfig(**(d.get('logging', {}) or {}))
        except TypeError as e:
            raise ValueError(f"Invalid config keys: {e}") from e
        return cls(
            sampler=sampler,
            logging=log_cfg,
            project_name=d.get('project_name', 'hogwild_ising'),
            verbose=bool(d.get('verbose', True)),
            version=int(d.get('version', 1)),
        )

    def add_path_root(self, root) -> 'Config':
        """将相对日志路径绑定到项目根（返回新 Config）。"""
        if root is None or self.logging.log_file is None:
            return self
        root_p = Path(os.path.expandvars(os.path.expanduser(str(root)))).resolve()
        p = Path(os.path.expandvars(os.path.expanduser(str(self.logging.log_file))))
        bound = p.resolve() if p.is_absolute() else (root_p / p).resolve()
        return replace(self, logging=replace(self.logging, log_file=str(bound)))


# -----------------------------------------------------------------------------
# I/O
# -----------------------------------------------------------------------------
def _read_config_file(filepath: str) -> Dict[str, Any]:
    p = Path(filepath)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")
    suf = p.suffix.lower()
    if suf not in ('.yaml', '.yml', '.json'):
        raise ValueError(f"Unsupported config file extension: {suf}")
    with open(p, 'r', encoding='utf-8') as f:
        data = (json.load(f) if suf == '.json' else yaml.safe_load(f)) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping at top level: {filepath}")
    return data


def load_config(filepath: str) -> Config:
    """从 YAML 或 JSON 文件加载配置。"""
    return Config.from_dict(_read_config_file(filepath))


def save_config(config: Config, filepath: str, format: Optional[str] = None) -> Path:
    """保存为 YAML 或 JSON，默认按后缀判断（未知后缀按 YAML）。"""
    p = Path(filepath)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    fmt = format or ('json' if p.suffix.lower() == '.json' else 'yaml')
    with open(p, 'w', encoding='utf-8') as f:
        if fmt == 'yaml':
            yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        elif fmt == 'json':
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            raise ValueError(f"Unsupported format: {fmt}")
    return p


# -----------------------------------------------------------------------------
# Presets
# -----------------------------------------------------------------------------
def get_preset_config(name: str) -> Config:
    """返回内置预设的副本。"""
    presets: Dict[str, Config] = {
        'quick': Config(
            sampler=SamplerConfig(n_vertices=100, max_degree=3, beta=0.2,
                                  n_workers=2, n_iterations=20, seed=0),
        ),
        # 与最初的实验常量一致：N=1000, Δ=3, β=0.2
        'original': Config(
            sampler=SamplerConfig(n_vertices=1000, max_degree=3, beta=0.2,
                                  n_workers=4, n_iterations=100),
        ),
        'lattice': Config(
            sampler=SamplerConfig(n_vertices=64 * 64, max_degree=4, beta=0.44,
                                  graph_mode='lattice', n_workers=4, n_iterations=500),
        ),
    }
    if name not in presets:
        raise ValueError(f"Unknown preset: {name}. Available: {list(presets.keys())}")
    return copy.deepcopy(presets[name])


# -----------------------------------------------------------------------------
# Environment variables (nested via sep, e.g., HOGWILD__sampler__beta=0.3)
# -----------------------------------------------------------------------------
def load_from_env(prefix: str = 'HOGWILD', sep: str = '__') -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    pfx = prefix + sep
    for k, v in os.environ.items():
        if not k.startswith(pfx):
            continue
        parts = [p for p in k[len(pfx):].split(sep) if p]
        if parts:
            _set_by_path(out, parts, _parse_value(v))
    return out


# -----------------------------------------------------------------------------
# Merge & validate
# -----------------------------------------------------------------------------
def merge_configs(base: Config, override: Dict[str, Any]) -> Config:
    base_dict = base.to_dict()
    _deep_merge(base_dict, override or {})
    return Config.from_dict(base_dict)


def validate_config(cfg: Config) -> Tuple[bool, List[str]]:
    """非致命一致性检查（硬约束已在 __post_init__ 完成）。"""
    issues: List[str] = []
    s = cfg.sampler
    if s.n_workers > s.n_vertices:
        issues.append(f"n_workers ({s.n_workers}) > n_vertices ({s.n_vertices}): "
                      f"前 {s.n_workers - 1} 个 worker 将分到空批次")
    cpus = os.cpu_count() or 1
    if s.n_workers > cpus:
        issues.append(f"n_workers ({s.n_workers}) exceeds available CPUs ({cpus})")
    if s.beta < 0:
        issues.append(f"beta={s.beta} < 0: 反铁磁耦合，邻居一致性会被惩罚")
    if s.graph_mode == 'random' and s.max_degree == 0:
        issues.append("max_degree=0: 图没有边，采样退化为独立抛硬币")
    if s.graph_mode == 'lattice' and (s.max_edges is not None or s.max_insertion_tries is not None
                                      or not s.allow_duplicate_edges):
        issues.append("random-mode edge options are ignored in lattice mode")
    if s.n_iterations == 0:
        issues.append("n_iterations=0: 不会执行任何采样轮")
    return len(issues) == 0, issues


# -----------------------------------------------------------------------------
# CLI helpers
# -----------------------------------------------------------------------------
def _parse_cli_overrides(kv_list: List[str]) -> Dict[str, Any]:
    """--set sampler.beta=0.3 → {'sampler': {'beta': 0.3}}"""
    out: Dict[str, Any] = {}
    for kv in (kv_list or []):
        if '=' not in kv:
            raise ValueError(f"--set expects key=value pairs, got: {kv}")
        key, val = kv.split('=', 1)
        path = [p.strip() for p in key.split('.') if p.strip()]
        if path:
            _set_by_path(out, path, _parse_value(val))
    return out


def from_args(args: Optional[List[str]] = None, env_prefix: str = 'HOGWILD') -> Config:
    """
    从命令行加载并合并配置（优先级从低到高）:
      默认/预设 <- 文件 (--config) <- 环境变量 (--env-prefix) <- CLI --set
    支持参数:
      --preset NAME
      --config FILE
      --env-prefix PREFIX
      --set k=v   (可重复)
      --root PATH (绑定日志路径到 PATH)
    """
    import argparse
    ap = argparse.ArgumentParser(description="Hogwild Gibbs sampling on a synthetic Ising model")
    ap.add_argument('--preset', type=str, choices=['quick', 'original', 'lattice'], help='preset name')
    ap.add_argument('--config', type=str, help='config file (yaml|json)')
    ap.add_argument('--env-prefix', type=str, default=env_prefix, help=f'environment variable prefix (default {env_prefix})')
    ap.add_argument('--set', dest='sets', action='append', default=[], help='override key=value (dot notation, can repeat)')
    ap.add_argument('--root', type=str, default=None, help='project root to bind the log file path')
    ns = ap.parse_args(args=args)

    cfg = get_preset_config(ns.preset) if ns.preset else Config()
    if ns.config:
        # 只合并文件里出现的键，未出现的键保留预设值
        cfg = merge_configs(cfg, _read_config_file(ns.config))
    env_over = load_from_env(prefix=ns.env_prefix)
    if env_over:
        cfg = merge_configs(cfg, env_over)
    cli_over = _parse_cli_overrides(ns.sets)
    if cli_over:
        cfg = merge_configs(cfg, cli_over)
    if ns.root:
        cfg = cfg.add_path_root(ns.root)

    ok, issues = validate_config(cfg)
    if not ok:
        print("⚠ Config validation warnings:", file=sys.stderr)
        for it in issues:
            print("  -", it, file=sys.stderr)
    return cfg
