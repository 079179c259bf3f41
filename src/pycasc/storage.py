#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Storage 根资源

Storage 持有存储句柄和一个 Registry，负责创建 File / Finder。
关闭 (显式调用或被回收) 时先级联关闭所有存活的子对象，再释放存储句柄。
"""

from typing import Hashable, Optional, Union

from .config import CascConfig, get_default_config
from .engine import ArchiveEngine, get_engine
from .exceptions import EngineError, InvalidHandleError, InvalidOptionError
from .file import File
from .finder import Finder
from .log import get_logger
from .registry import Registry
from .result import ErrorResult
from .utils import check_option

logger = get_logger(__name__)

# 下标即引擎的存储类型 (STORAGE_LOCAL, STORAGE_ONLINE)
KINDS = ("local", "online")

# "b" 仅为兼容保留，没有实际作用
MODES = ("r", "rb")


class Storage:
    """
    只读归档存储

    通过 Storage.open() 或 pycasc.open() 创建:

        >>> storage = pycasc.open("/games/wow", "local")
        >>> with storage.open_file("DBFilesClient/Map.db2") as f:
        ...     header = f.read(4)
        >>> for name in storage.enumerate(r"\\.db2$"):
        ...     print(name)
        >>> storage.close()
    """

    def __init__(
        self,
        handle: Hashable,
        engine: ArchiveEngine,
        config: Optional[CascConfig] = None,
        path: Optional[str] = None
    ):
        self._handle = handle
        self._engine = engine
        self._config = config or get_default_config()
        self._path = path
        self._registry = Registry(self)

    @classmethod
    def open(
        cls,
        path: str,
        kind: str = "local",
        *,
        engine: Optional[ArchiveEngine] = None,
        config: Optional[CascConfig] = None
    ) -> Union["Storage", ErrorResult]:
        """
        打开存储

        Args:
            path: 存储路径
            kind: "local" 或 "online"
            engine: 归档引擎，默认按配置创建
            config: 配置，默认从环境变量读取

        Returns:
            成功返回 Storage，引擎失败返回 ErrorResult

        Raises:
            InvalidOptionError: path 或 kind 非法
        """
        if not isinstance(path, str):
            raise InvalidOptionError(
                "无效的 path", expected="str", actual=type(path).__name__
            )
        storage_kind = check_option(kind, "local", KINDS, "kind")
        config = config or get_default_config()
        engine = engine or get_engine(config.default_engine)

        try:
            handle = engine.open_storage(path, storage_kind)
        except EngineError as e:
            logger.debug("打开存储 %s 失败: %s", path, e)
            return ErrorResult.from_error(e)

        storage = cls(handle, engine, config, path)
        logger.debug("打开存储 %s (%s, %s)", path, kind or "local", engine.name)
        return storage

    # ==================== 属性 ====================

    @property
    def handle(self) -> Optional[Hashable]:
        """存储句柄，关闭后为 None"""
        return self._handle

    @property
    def closed(self) -> bool:
        return self._handle is None

    @property
    def engine(self) -> ArchiveEngine:
        return self._engine

    @property
    def config(self) -> CascConfig:
        return self._config

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def path(self) -> Optional[str]:
        return self._path

    # ==================== 子对象 ====================

    def enumerate(self, pattern: Optional[str] = None, plain: bool = False) -> Finder:
        """
        枚举条目名

        返回一个迭代器，每次迭代返回下一个匹配 pattern 的条目名。
        pattern 为正则表达式 (re.search 语义)；plain 为 True 时按子串查找。
        pattern 为空时返回所有条目。

        与其它接口不同，出错时直接抛出异常而不是返回 ErrorResult。

        Raises:
            InvalidHandleError: 存储已关闭
            InvalidOptionError: pattern 非法
        """
        if self._handle is None:
            raise InvalidHandleError()
        return Finder(self, pattern, plain)

    def open_file(self, name: str, mode: str = "r") -> Union[File, ErrorResult]:
        """
        打开存储中的条目

        Args:
            name: 条目名
            mode: "r" (默认) 或 "rb"，二者等价

        Returns:
            成功返回 File，存储已关闭或引擎失败返回 ErrorResult

        Raises:
            InvalidOptionError: name 或 mode 非法
        """
        if self._handle is None:
            return ErrorResult.invalid_handle()

        if not isinstance(name, str):
            raise InvalidOptionError(
                "无效的 name", expected="str", actual=type(name).__name__
            )
        check_option(mode, "r", MODES, "mode")

        return File.open(self, name)

    # ==================== 生命周期 ====================

    def close(self) -> Union[bool, ErrorResult]:
        """
        关闭存储及其所有存活的 File / Finder

        Returns:
            成功返回 True；已关闭或引擎失败返回 ErrorResult
        """
        if self._handle is None:
            return ErrorResult.invalid_handle()

        self._registry.close()

        handle, self._handle = self._handle, None
        try:
            status = self._engine.close_storage(handle)
        except EngineError as e:
            logger.warning("关闭存储 %s 失败: %s", self._path, e)
            return ErrorResult.from_error(e)

        logger.debug("关闭存储 %s", self._path)
        return status

    def __enter__(self) -> "Storage":
        return self

    def __exit__(self, *args) -> None:
        if self._handle is not None:
            self.close()

    def __del__(self) -> None:
        if getattr(self, "_handle", None) is not None:
            self.close()

    def __str__(self) -> str:
        text = f"Casc Storage (0x{id(self):x})"
        return text if self._handle is not None else text + " (Closed)"

    __repr__ = __str__
