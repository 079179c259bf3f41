#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pytest 全局配置

提供共享 fixtures: 内存引擎归档、目录归档和已打开的 Storage。
"""

from typing import Dict

import pytest

import pycasc
from pycasc import CascConfig, MemoryEngine


# ==================== 测试数据 ====================

SAMPLE_ENTRIES: Dict[str, bytes] = {
    "a.txt": b"ab\ncd",
    "b.dat": bytes(range(256)),
    "ab.txt": b"first line\nsecond line\n",
    "Data/config.json": b'{"name": "test", "value": 123}',
    "Data/empty.bin": b"",
}


# ==================== 基础 Fixtures ====================

@pytest.fixture
def sample_entries() -> Dict[str, bytes]:
    """条目名 -> 内容 (枚举顺序即插入顺序)"""
    return dict(SAMPLE_ENTRIES)


@pytest.fixture
def engine(sample_entries) -> MemoryEngine:
    """注册了 "game" 归档的内存引擎"""
    return MemoryEngine({"game": sample_entries})


@pytest.fixture
def small_config() -> CascConfig:
    """小缓冲区配置，用于覆盖分块读取路径"""
    return CascConfig(buffer_size=4)


@pytest.fixture
def storage(engine):
    """
    已打开的内存存储

    测试结束后若仍未关闭则自动关闭。
    """
    opened = pycasc.open("game", engine=engine)
    assert isinstance(opened, pycasc.Storage)
    yield opened
    if not opened.closed:
        opened.close()


@pytest.fixture
def open_entry(storage):
    """打开条目的快捷函数"""
    def _open(name: str) -> pycasc.File:
        f = storage.open_file(name)
        assert isinstance(f, pycasc.File), f
        return f
    return _open


@pytest.fixture
def make_storage():
    """
    用任意内容创建存储的工厂

    Returns:
        (entries, config=None, read_limit=None) -> (Storage, MemoryEngine)
    """
    created = []

    def _make(entries: Dict[str, bytes], config: CascConfig = None,
              read_limit: int = None):
        eng = MemoryEngine({"custom": entries}, read_limit=read_limit)
        opened = pycasc.open("custom", engine=eng, config=config)
        assert isinstance(opened, pycasc.Storage)
        created.append(opened)
        return opened, eng

    yield _make

    for opened in created:
        if not opened.closed:
            opened.close()


@pytest.fixture
def directory_tree(tmp_path, sample_entries):
    """
    在磁盘上创建与 sample_entries 相同的目录树

    Returns:
        根目录路径
    """
    root = tmp_path / "storage"
    for name, content in sample_entries.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root
