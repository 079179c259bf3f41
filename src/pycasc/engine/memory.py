#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
内存归档引擎

归档以 ``{条目名: 数据}`` 字典的形式注册在某个路径下。
支持按操作注入错误码、限制单次读取长度，便于测试各种失败路径。
"""

import errno
import fnmatch
import itertools
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..exceptions import EngineError
from ..utils import normalize_name
from .base import (
    ArchiveEngine, STORAGE_LOCAL, STORAGE_ONLINE, SEEK_SET, SEEK_CUR, SEEK_END
)

# 可注入错误的操作名
OPERATIONS = (
    "open_storage",
    "close_storage",
    "open_file",
    "close_file",
    "read_file",
    "set_file_pointer",
    "get_file_size",
    "find_first_file",
    "find_next_file",
    "find_close",
)


@dataclass
class _Fault:
    code: int
    after: int = 0


@dataclass
class _OpenFile:
    data: bytes
    position: int = 0


@dataclass
class _OpenFind:
    names: List[str]
    index: int = 0


@dataclass
class _OpenStorage:
    path: str
    entries: Dict[str, bytes] = field(default_factory=dict)


class MemoryEngine(ArchiveEngine):
    """
    内存归档引擎

    Example:
        >>> engine = MemoryEngine({"game": {"a.txt": b"hello"}})
        >>> storage = pycasc.open("game", engine=engine)
    """

    def __init__(
        self,
        archives: Optional[Dict[str, Dict[str, bytes]]] = None,
        read_limit: Optional[int] = None
    ):
        """
        初始化引擎

        Args:
            archives: 路径 -> 条目字典，条目顺序即枚举顺序
            read_limit: 单次 read_file 最多返回的字节数 (模拟部分读取)
        """
        self._archives: Dict[str, Dict[str, bytes]] = {}
        for path, entries in (archives or {}).items():
            self.add_archive(path, entries)

        self.read_limit = read_limit
        self.calls: Counter = Counter()

        self._faults: Dict[str, _Fault] = {}
        self._ids = itertools.count(1)
        self._storages: Dict[int, _OpenStorage] = {}
        self._files: Dict[int, _OpenFile] = {}
        self._finds: Dict[int, _OpenFind] = {}

    # ==================== 测试辅助 ====================

    def add_archive(self, path: str, entries: Dict[str, bytes]) -> None:
        """注册 (或替换) 一个归档"""
        self._archives[path] = {
            normalize_name(name): bytes(data) for name, data in entries.items()
        }

    def inject_fault(self, operation: str, code: int = errno.EIO,
                     after: int = 0) -> None:
        """
        让指定操作失败

        Args:
            operation: 操作名 (见 OPERATIONS)
            code: 抛出的 errno
            after: 先放行的成功调用次数
        """
        if operation not in OPERATIONS:
            raise ValueError(f"未知的操作: {operation}")
        self._faults[operation] = _Fault(code, after)

    def clear_faults(self, operation: Optional[str] = None) -> None:
        if operation is None:
            self._faults.clear()
        else:
            self._faults.pop(operation, None)

    def live_handles(self) -> Dict[str, int]:
        """当前未释放的句柄数量"""
        return {
            "storages": len(self._storages),
            "files": len(self._files),
            "finds": len(self._finds),
        }

    def _enter(self, operation: str) -> None:
        self.calls[operation] += 1
        fault = self._faults.get(operation)
        if fault is None:
            return
        if fault.after > 0:
            fault.after -= 1
            return
        raise EngineError(fault.code)

    @staticmethod
    def _lookup(table: Dict[int, object], handle: int):
        try:
            return table[handle]
        except (KeyError, TypeError):
            raise EngineError(errno.EBADF) from None

    # ==================== Storage ====================

    def open_storage(self, path: str, kind: int) -> int:
        self._enter("open_storage")
        if kind not in (STORAGE_LOCAL, STORAGE_ONLINE):
            raise EngineError(errno.EINVAL)
        if path not in self._archives:
            raise EngineError(errno.ENOENT)
        handle = next(self._ids)
        self._storages[handle] = _OpenStorage(path, self._archives[path])
        return handle

    def close_storage(self, handle: int) -> bool:
        self._enter("close_storage")
        self._lookup(self._storages, handle)
        del self._storages[handle]
        return True

    # ==================== File ====================

    def open_file(self, storage: int, name: str) -> int:
        self._enter("open_file")
        opened = self._lookup(self._storages, storage)
        key = normalize_name(name)
        if key not in opened.entries:
            raise EngineError(errno.ENOENT)
        handle = next(self._ids)
        self._files[handle] = _OpenFile(opened.entries[key])
        return handle

    def close_file(self, handle: int) -> bool:
        self._enter("close_file")
        self._lookup(self._files, handle)
        del self._files[handle]
        return True

    def read_file(self, handle: int, size: int) -> bytes:
        self._enter("read_file")
        opened = self._lookup(self._files, handle)
        if size < 0:
            raise EngineError(errno.EINVAL)
        if self.read_limit is not None:
            size = min(size, self.read_limit)
        chunk = opened.data[opened.position:opened.position + size]
        opened.position += len(chunk)
        return chunk

    def set_file_pointer(self, handle: int, offset: int, whence: int) -> int:
        self._enter("set_file_pointer")
        opened = self._lookup(self._files, handle)
        if whence == SEEK_SET:
            base = 0
        elif whence == SEEK_CUR:
            base = opened.position
        elif whence == SEEK_END:
            base = len(opened.data)
        else:
            raise EngineError(errno.EINVAL)
        position = base + offset
        if position < 0 or position > len(opened.data):
            raise EngineError(errno.EINVAL)
        opened.position = position
        return position

    def get_file_size(self, handle: int) -> int:
        self._enter("get_file_size")
        return len(self._lookup(self._files, handle).data)

    # ==================== Find ====================

    def find_first_file(self, storage: int,
                        mask: str = "*") -> Optional[Tuple[int, str]]:
        self._enter("find_first_file")
        opened = self._lookup(self._storages, storage)
        names = [n for n in opened.entries if fnmatch.fnmatchcase(n, mask)]
        if not names:
            return None
        handle = next(self._ids)
        self._finds[handle] = _OpenFind(names, 1)
        return handle, names[0]

    def find_next_file(self, handle: int) -> Optional[str]:
        self._enter("find_next_file")
        opened = self._lookup(self._finds, handle)
        if opened.index >= len(opened.names):
            return None
        name = opened.names[opened.index]
        opened.index += 1
        return name

    def find_close(self, handle: int) -> bool:
        self._enter("find_close")
        self._lookup(self._finds, handle)
        del self._finds[handle]
        return True
