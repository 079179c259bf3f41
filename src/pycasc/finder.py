#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Finder 条目名枚举器

惰性、有状态的枚举游标，状态机:

    未绑定 --首次迭代成功--> 已绑定 --枚举结束/出错/关闭--> 已关闭

查找句柄在第一次迭代时才创建并登记到注册表；
枚举结束后自动关闭，之后的迭代不会重新打开。
"""

import weakref
from typing import Hashable, Optional, Union

from .exceptions import CascError, EngineError, InvalidHandleError
from .log import get_logger
from .result import ErrorResult
from .utils import compile_matcher

logger = get_logger(__name__)


class Finder:
    """
    条目名迭代器

    由 Storage.enumerate() 创建。枚举正常结束时停止迭代；
    引擎出错或所属存储已关闭时抛出异常。
    """

    def __init__(self, storage, pattern: Optional[str] = None, plain: bool = False):
        self._match = compile_matcher(pattern, plain)
        self._pattern = pattern
        self._plain = bool(plain)
        self._handle: Optional[Hashable] = None
        self._closed = False
        self._exhausted = False
        self._storage = weakref.ref(storage)
        self._registry = storage.registry
        self._engine = storage.engine

    # ==================== 属性 ====================

    @property
    def handle(self) -> Optional[Hashable]:
        """查找句柄，未绑定或关闭后为 None"""
        return self._handle

    @property
    def bound(self) -> bool:
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pattern(self) -> Optional[str]:
        return self._pattern

    @property
    def plain(self) -> bool:
        return self._plain

    # ==================== 迭代 ====================

    def __iter__(self) -> "Finder":
        return self

    def __next__(self) -> str:
        if self._closed:
            # 被级联关闭的 Finder 需要让调用方看到无效句柄
            if not self._exhausted and not self._storage_open():
                raise InvalidHandleError()
            raise StopIteration

        try:
            name = self._advance()
        except CascError:
            self._finish()
            raise

        if name is None:
            self._finish()
            raise StopIteration

        return name

    def _storage_open(self) -> bool:
        storage = self._storage()
        return storage is not None and storage.handle is not None

    def _advance(self) -> Optional[str]:
        """
        推进游标直到找到匹配的条目名

        Returns:
            匹配的条目名，枚举结束返回 None
        """
        while True:
            if self._handle is None:
                storage = self._storage()
                if storage is None or storage.handle is None:
                    raise InvalidHandleError()
                found = self._engine.find_first_file(storage.handle, "*")
                if found is None:
                    return None
                self._handle, name = found
                self._registry.insert(self._handle, self)
            else:
                name = self._engine.find_next_file(self._handle)
                if name is None:
                    return None

            if self._match is None or self._match(name):
                return name

    def _finish(self) -> None:
        """枚举结束 (正常或出错) 后关闭自身"""
        self._exhausted = True
        result = self.close()
        if isinstance(result, ErrorResult):
            logger.warning("关闭 %s 失败: %s", self, result.message)

    # ==================== 生命周期 ====================

    def close(self) -> Union[bool, ErrorResult]:
        """
        关闭枚举器

        未绑定的枚举器直接进入关闭状态，不调用引擎。

        Returns:
            成功返回 True；已关闭或引擎失败返回 ErrorResult
        """
        if self._closed:
            return ErrorResult.invalid_handle()

        self._closed = True
        handle, self._handle = self._handle, None
        if handle is None:
            return True

        self._registry.remove(handle)
        try:
            return self._engine.find_close(handle)
        except EngineError as e:
            return ErrorResult.from_error(e)

    def __del__(self) -> None:
        if getattr(self, "_closed", True) is False:
            self.close()

    def __str__(self) -> str:
        text = f"Casc Finder (0x{id(self):x})"
        return text if not self._closed else text + " (Closed)"

    __repr__ = __str__
