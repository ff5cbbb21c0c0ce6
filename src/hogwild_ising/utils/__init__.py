# -*- coding: utf-8 -*-
"""
工具层
======

- logger: 日志工具
- config: 运行配置

示例
----
>>> from hogwild_ising.utils.logger import setup_logger
>>> from hogwild_ising.utils.config import get_preset_config
>>> logger = setup_logger('my_run', level='INFO')
>>> cfg = get_preset_config('quick')
"""


# hogwild_ising/utils/__init__.py
from importlib import import_module
from typing import TYPE_CHECKING

__all__ = ["logger", "config"]

_lazy = {
    "logger": ".logger",
    "config": ".config",
}

def __getattr__(name: str):
    if name in _lazy:
        mod = import_module(_lazy[name], __name__)
        globals()[name] = mod
        return mod
    raise AttributeError(f"{__name__} has no attribute {name!r}")

def __dir__():
    return sorted(list(__all__))

if TYPE_CHECKING:
    from . import logger, config
