#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
目录归档引擎

把磁盘上的一个目录树当作本地存储: 条目名为相对根目录、
以 ``/`` 分隔的路径。仅支持 local 类型的存储。
"""

import errno
import fnmatch
import os
from typing import BinaryIO, Iterator, Optional, Tuple

from ..exceptions import EngineError
from ..utils import normalize_name
from .base import ArchiveEngine, STORAGE_LOCAL, SEEK_SET, SEEK_CUR, SEEK_END


class _DirectoryStorage:
    __slots__ = ("root", "closed")

    def __init__(self, root: str):
        self.root = root
        self.closed = False


class _DirectoryFile:
    __slots__ = ("fp", "size")

    def __init__(self, fp: BinaryIO, size: int):
        self.fp = fp
        self.size = size


class _DirectoryFind:
    __slots__ = ("names",)

    def __init__(self, names: Iterator[str]):
        self.names = names


class DirectoryEngine(ArchiveEngine):
    """
    目录归档引擎

    所有 OSError 都会转换为 EngineError，保留 errno。
    """

    def _storage(self, handle) -> _DirectoryStorage:
        if not isinstance(handle, _DirectoryStorage) or handle.closed:
            raise EngineError(errno.EBADF)
        return handle

    @staticmethod
    def _file(handle) -> _DirectoryFile:
        if not isinstance(handle, _DirectoryFile) or handle.fp.closed:
            raise EngineError(errno.EBADF)
        return handle

    @staticmethod
    def _find(handle) -> _DirectoryFind:
        if not isinstance(handle, _DirectoryFind) or handle.names is None:
            raise EngineError(errno.EBADF)
        return handle

    # ==================== Storage ====================

    def open_storage(self, path: str, kind: int) -> _DirectoryStorage:
        if kind != STORAGE_LOCAL:
            raise EngineError(errno.EPROTONOSUPPORT)
        root = os.path.realpath(path)
        if not os.path.exists(root):
            raise EngineError(errno.ENOENT)
        if not os.path.isdir(root):
            raise EngineError(errno.ENOTDIR)
        return _DirectoryStorage(root)

    def close_storage(self, handle) -> bool:
        self._storage(handle).closed = True
        return True

    # ==================== File ====================

    def _resolve(self, storage: _DirectoryStorage, name: str) -> str:
        """条目名 -> 磁盘路径，拒绝逃出根目录的名称"""
        relative = normalize_name(name)
        if not relative:
            raise EngineError(errno.ENOENT)
        path = os.path.realpath(os.path.join(storage.root, *relative.split("/")))
        if os.path.commonpath([storage.root, path]) != storage.root:
            raise EngineError(errno.ENOENT)
        return path

    def open_file(self, storage, name: str) -> _DirectoryFile:
        path = self._resolve(self._storage(storage), name)
        if os.path.isdir(path):
            raise EngineError(errno.EISDIR)
        try:
            fp = open(path, 'rb')
        except OSError as e:
            raise EngineError.from_os_error(e) from e
        try:
            size = os.fstat(fp.fileno()).st_size
        except OSError as e:
            fp.close()
            raise EngineError.from_os_error(e) from e
        return _DirectoryFile(fp, size)

    def close_file(self, handle) -> bool:
        opened = self._file(handle)
        try:
            opened.fp.close()
        except OSError as e:
            raise EngineError.from_os_error(e) from e
        return True

    def read_file(self, handle, size: int) -> bytes:
        opened = self._file(handle)
        if size < 0:
            raise EngineError(errno.EINVAL)
        try:
            return opened.fp.read(size)
        except OSError as e:
            raise EngineError.from_os_error(e) from e

    def set_file_pointer(self, handle, offset: int, whence: int) -> int:
        opened = self._file(handle)
        try:
            if whence == SEEK_SET:
                base = 0
            elif whence == SEEK_CUR:
                base = opened.fp.tell()
            elif whence == SEEK_END:
                base = opened.size
            else:
                raise EngineError(errno.EINVAL)
            position = base + offset
            if position < 0 or position > opened.size:
                raise EngineError(errno.EINVAL)
            return opened.fp.seek(position, os.SEEK_SET)
        except OSError as e:
            raise EngineError.from_os_error(e) from e

    def get_file_size(self, handle) -> int:
        return self._file(handle).size

    # ==================== Find ====================

    @staticmethod
    def _walk(root: str) -> Iterator[str]:
        """按目录、文件名排序遍历，产出相对路径"""
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            relative_dir = os.path.relpath(dirpath, root)
            for filename in sorted(filenames):
                if relative_dir == os.curdir:
                    yield filename
                else:
                    yield normalize_name(os.path.join(relative_dir, filename))

    def find_first_file(self, storage, mask: str = "*") -> Optional[Tuple[_DirectoryFind, str]]:
        opened = self._storage(storage)
        names = (n for n in self._walk(opened.root) if fnmatch.fnmatchcase(n, mask))
        first = next(names, None)
        if first is None:
            return None
        return _DirectoryFind(names), first

    def find_next_file(self, handle) -> Optional[str]:
        return next(self._find(handle).names, None)

    def find_close(self, handle) -> bool:
        self._find(handle).names = None
        return True
