#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
子对象注册表

每个打开的 Storage 持有一个 Registry，记录由它创建、仍然存活的
File / Finder (句柄 -> 对象)。注册表只持有弱引用: 宿主不再引用的
子对象可以被正常回收，而 Storage 关闭时仍能找到并强制关闭存活的子对象。
"""

import weakref
from typing import Hashable, List, Optional

from .exceptions import CascError
from .log import get_logger

logger = get_logger(__name__)


class Registry:
    """
    弱引用子对象注册表

    insert / remove 均为幂等操作。close 之后注册表被丢弃:
    remove 变为空操作，insert 视为编程错误。
    """

    def __init__(self, owner: object):
        """
        Args:
            owner: 所属的 Storage (仅用于日志)
        """
        self._owner = weakref.ref(owner)
        self._entries: Optional[weakref.WeakValueDictionary] = weakref.WeakValueDictionary()

    @property
    def closed(self) -> bool:
        return self._entries is None

    def insert(self, handle: Hashable, obj: object) -> None:
        """登记子对象，重复登记同一句柄为空操作"""
        if self._entries is None:
            raise RuntimeError("Registry 已关闭，无法登记新的子对象")
        self._entries[handle] = obj

    def remove(self, handle: Hashable) -> None:
        """移除子对象，不存在或注册表已关闭时为空操作"""
        if self._entries is None:
            return
        self._entries.pop(handle, None)

    def children(self) -> List[object]:
        """当前存活的子对象快照"""
        if self._entries is None:
            return []
        return list(self._entries.values())

    def close(self) -> int:
        """
        关闭所有存活的子对象并丢弃注册表

        逐个调用子对象的 close()，单个失败不影响其余子对象。

        Returns:
            尝试关闭的子对象数量
        """
        if self._entries is None:
            return 0

        children = self.children()
        for child in children:
            try:
                result = child.close()
            except CascError as e:
                logger.warning("级联关闭 %s 失败: %s", child, e)
                continue
            if not result:
                logger.debug("级联关闭 %s 返回 %r", child, result)

        self._entries = None
        logger.debug("%s: 级联关闭了 %d 个子对象", self._owner(), len(children))
        return len(children)

    def __len__(self) -> int:
        return 0 if self._entries is None else len(self._entries)

    def __contains__(self, handle: Hashable) -> bool:
        return self._entries is not None and handle in self._entries
