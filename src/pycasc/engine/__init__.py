#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pycasc 归档引擎

提供引擎抽象接口和内置实现。
"""

from .base import (
    ArchiveEngine,
    STORAGE_LOCAL,
    STORAGE_ONLINE,
    SEEK_SET,
    SEEK_CUR,
    SEEK_END,
)
from .directory import DirectoryEngine
from .memory import MemoryEngine

# 引擎名 -> 引擎类
ENGINE_REGISTRY = {
    'directory': DirectoryEngine,
}


def get_engine(name: str) -> ArchiveEngine:
    """
    根据名称创建引擎实例

    Raises:
        KeyError: 未知的引擎名
    """
    return ENGINE_REGISTRY[name]()


__all__ = [
    "ArchiveEngine",
    "DirectoryEngine",
    "MemoryEngine",
    "ENGINE_REGISTRY",
    "get_engine",
    "STORAGE_LOCAL",
    "STORAGE_ONLINE",
    "SEEK_SET",
    "SEEK_CUR",
    "SEEK_END",
]
