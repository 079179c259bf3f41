#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
归档引擎基类定义

pycasc 本身不解析任何归档格式，所有读取都委托给 ArchiveEngine。
引擎的每个操作都是阻塞调用，失败时抛出 EngineError。
"""

import os
from abc import ABC, abstractmethod
from typing import Hashable, Optional, Tuple

# 存储类型
STORAGE_LOCAL = 0
STORAGE_ONLINE = 1

# 文件指针基准 (与 os.SEEK_* 一致)
SEEK_SET = os.SEEK_SET
SEEK_CUR = os.SEEK_CUR
SEEK_END = os.SEEK_END


class ArchiveEngine(ABC):
    """
    归档引擎

    句柄均为不透明的可哈希对象，由引擎自行定义。
    所有方法在失败时抛出 EngineError (错误码为 errno)。
    """

    @property
    def name(self) -> str:
        """引擎名称 (用于日志)"""
        return type(self).__name__

    # ==================== Storage ====================

    @abstractmethod
    def open_storage(self, path: str, kind: int) -> Hashable:
        """
        打开存储

        Args:
            path: 存储路径
            kind: STORAGE_LOCAL 或 STORAGE_ONLINE

        Returns:
            存储句柄
        """
        pass

    @abstractmethod
    def close_storage(self, handle: Hashable) -> bool:
        """关闭存储，返回是否成功"""
        pass

    # ==================== File ====================

    @abstractmethod
    def open_file(self, storage: Hashable, name: str) -> Hashable:
        """
        打开存储中的条目

        Args:
            storage: 存储句柄
            name: 条目名

        Returns:
            文件句柄
        """
        pass

    @abstractmethod
    def close_file(self, handle: Hashable) -> bool:
        """关闭文件，返回是否成功"""
        pass

    @abstractmethod
    def read_file(self, handle: Hashable, size: int) -> bytes:
        """
        从当前位置读取最多 size 字节

        Returns:
            读到的数据，空字节串表示已到文件末尾
        """
        pass

    @abstractmethod
    def set_file_pointer(self, handle: Hashable, offset: int, whence: int) -> int:
        """
        移动文件指针

        Args:
            handle: 文件句柄
            offset: 偏移量
            whence: SEEK_SET / SEEK_CUR / SEEK_END

        Returns:
            新的绝对位置
        """
        pass

    @abstractmethod
    def get_file_size(self, handle: Hashable) -> int:
        """获取条目大小"""
        pass

    # ==================== Find ====================

    @abstractmethod
    def find_first_file(self, storage: Hashable,
                        mask: str = "*") -> Optional[Tuple[Hashable, str]]:
        """
        开始枚举条目名

        Returns:
            (查找句柄, 第一个条目名)，存储中没有匹配条目时返回 None
        """
        pass

    @abstractmethod
    def find_next_file(self, handle: Hashable) -> Optional[str]:
        """返回下一个条目名，枚举结束时返回 None"""
        pass

    @abstractmethod
    def find_close(self, handle: Hashable) -> bool:
        """释放查找句柄，返回是否成功"""
        pass
