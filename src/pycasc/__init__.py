#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pycasc - 只读归档存储的 Python 接口

通过 Storage / File / Finder 三种资源访问内容寻址的游戏资源容器，
保证子资源不会在所属存储关闭后被读取。
"""

__version__ = "0.1.0"

# 异常类
from .exceptions import (
    CascError,
    InvalidHandleError,
    EngineError,
    InvalidOptionError,
)

# 返回值
from .result import ErrorResult, is_error

# 配置与日志
from .config import CascConfig, get_default_config
from .log import configure_logging, get_logger

# 引擎
from .engine import (
    ArchiveEngine,
    DirectoryEngine,
    MemoryEngine,
    get_engine,
)

# 资源对象
from .registry import Registry
from .storage import Storage
from .file import File, LinesIterator
from .finder import Finder


def open(path, kind="local", *, engine=None, config=None):
    """
    打开存储

    成功返回 Storage，失败返回 ErrorResult (None, message, code)。
    详见 Storage.open()。
    """
    return Storage.open(path, kind, engine=engine, config=config)


__all__ = [
    # 版本
    "__version__",
    # 入口
    "open",
    # 异常
    "CascError",
    "InvalidHandleError",
    "EngineError",
    "InvalidOptionError",
    # 返回值
    "ErrorResult",
    "is_error",
    # 配置与日志
    "CascConfig",
    "get_default_config",
    "configure_logging",
    "get_logger",
    # 引擎
    "ArchiveEngine",
    "DirectoryEngine",
    "MemoryEngine",
    "get_engine",
    # 资源对象
    "Registry",
    "Storage",
    "File",
    "LinesIterator",
    "Finder",
]
