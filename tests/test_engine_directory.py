#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
DirectoryEngine 测试
"""

import errno

import pytest

import pycasc
from pycasc import DirectoryEngine, EngineError, ErrorResult
from pycasc.engine import STORAGE_LOCAL, STORAGE_ONLINE, SEEK_SET


class _FailingClose:
    """关闭时报错的文件对象包装"""

    def __init__(self, fp):
        self._fp = fp

    @property
    def closed(self):
        return self._fp.closed

    def close(self):
        self._fp.close()
        raise OSError(errno.EIO, "Input/output error")


@pytest.fixture
def directory_storage(directory_tree):
    storage = pycasc.open(str(directory_tree), engine=DirectoryEngine())
    assert isinstance(storage, pycasc.Storage)
    yield storage
    if not storage.closed:
        storage.close()


class TestDirectoryEngineOpen:
    """打开存储"""

    def test_online_not_supported(self, directory_tree):
        result = pycasc.open(str(directory_tree), "online", engine=DirectoryEngine())

        assert isinstance(result, ErrorResult)
        assert result.code == errno.EPROTONOSUPPORT

    def test_missing_directory(self, tmp_path):
        result = pycasc.open(str(tmp_path / "missing"), engine=DirectoryEngine())
        assert result.code == errno.ENOENT

    def test_file_is_not_a_storage(self, directory_tree):
        result = pycasc.open(str(directory_tree / "a.txt"), engine=DirectoryEngine())
        assert result.code == errno.ENOTDIR

    def test_closed_storage_handle(self, directory_tree):
        engine = DirectoryEngine()
        handle = engine.open_storage(str(directory_tree), STORAGE_LOCAL)
        engine.close_storage(handle)

        with pytest.raises(EngineError) as exc_info:
            engine.open_file(handle, "a.txt")
        assert exc_info.value.code == errno.EBADF


class TestDirectoryEngineFiles:
    """打开与读取条目"""

    def test_nested_entry(self, directory_storage, sample_entries):
        f = directory_storage.open_file("Data/config.json")
        assert f.read("a") == (sample_entries["Data/config.json"],)

    def test_backslash_names(self, directory_storage):
        f = directory_storage.open_file("Data\\config.json")
        assert isinstance(f, pycasc.File)

    @pytest.mark.parametrize("name", ["../outside.txt", "Data/../../outside.txt", "", "/"])
    def test_names_cannot_escape_root(self, directory_storage, directory_tree, name):
        (directory_tree.parent / "outside.txt").write_bytes(b"secret")

        result = directory_storage.open_file(name)
        assert isinstance(result, ErrorResult)
        assert result.code == errno.ENOENT

    def test_directory_entry(self, directory_storage):
        result = directory_storage.open_file("Data")
        assert result.code == errno.EISDIR

    def test_missing_entry(self, directory_storage):
        assert directory_storage.open_file("nope.txt").code == errno.ENOENT

    def test_seek_limits(self, directory_storage):
        f = directory_storage.open_file("b.dat")

        assert f.seek("end") == 256
        assert f.seek("set", 128) == 128
        assert f.seek("end", 1).code == errno.EINVAL
        assert f.seek() == 128

    def test_engine_level_seek(self, directory_tree):
        engine = DirectoryEngine()
        storage = engine.open_storage(str(directory_tree), STORAGE_LOCAL)
        handle = engine.open_file(storage, "a.txt")

        assert engine.set_file_pointer(handle, 3, SEEK_SET) == 3
        assert engine.read_file(handle, 10) == b"cd"
        assert engine.close_file(handle) is True
        with pytest.raises(EngineError):
            engine.read_file(handle, 1)

    def test_close_error_is_converted(self, directory_tree):
        engine = DirectoryEngine()
        storage = engine.open_storage(str(directory_tree), STORAGE_LOCAL)
        handle = engine.open_file(storage, "a.txt")
        handle.fp = _FailingClose(handle.fp)

        with pytest.raises(EngineError) as exc_info:
            engine.close_file(handle)
        assert exc_info.value.code == errno.EIO

    def test_close_error_does_not_stop_cascade(self, directory_storage):
        """单个条目关闭失败时，其余子对象和存储仍被关闭"""
        failing = directory_storage.open_file("a.txt")
        failing.handle.fp = _FailingClose(failing.handle.fp)
        other = directory_storage.open_file("b.dat")
        finder = directory_storage.enumerate()
        next(finder)

        assert directory_storage.close() is True
        assert directory_storage.closed
        assert failing.closed
        assert other.closed
        assert finder.closed


class TestDirectoryEngineFind:
    """枚举"""

    def test_sorted_walk(self, directory_storage):
        assert list(directory_storage.enumerate()) == [
            "a.txt", "ab.txt", "b.dat", "Data/config.json", "Data/empty.bin",
        ]

    def test_empty_directory(self, tmp_path):
        storage = pycasc.open(str(tmp_path), engine=DirectoryEngine())
        assert list(storage.enumerate()) == []
        storage.close()

    def test_find_close_invalidates(self, directory_tree):
        engine = DirectoryEngine()
        storage = engine.open_storage(str(directory_tree), STORAGE_LOCAL)
        handle, _ = engine.find_first_file(storage)
        engine.find_close(handle)

        with pytest.raises(EngineError):
            engine.find_next_file(handle)
