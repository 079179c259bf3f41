#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
File 流对象

在随机访问的引擎原语 (read_file / set_file_pointer) 之上实现
多格式读取、按行切分和行迭代协议，接口与 Python / Lua 的文件对象保持一致。
条目只读: write 恒失败，setvbuf / flush 仅为兼容保留。
"""

import weakref
from typing import Hashable, List, Optional, Sequence, Tuple, Union

from .engine import SEEK_SET, SEEK_CUR, SEEK_END
from .exceptions import EngineError, InvalidHandleError, InvalidOptionError
from .log import get_logger
from .result import ErrorResult
from .utils import check_integer, check_option

logger = get_logger(__name__)

WHENCES = ("set", "cur", "end")
_SEEK_MODES = (SEEK_SET, SEEK_CUR, SEEK_END)

# 解析后的读取格式
_READ_COUNT = "n"
_READ_LINE = "l"
_READ_LINE_KEEP = "L"
_READ_ALL = "a"

_Format = Tuple[str, int]

ReadResult = Tuple[Optional[bytes], ...]


def parse_formats(formats: Sequence[object]) -> List[_Format]:
    """
    解析 read() 的格式参数

    字符串格式可带 ``*`` 前缀 (如 ``"*a"``)，只看去掉前缀后的首字符。
    没有格式时默认读取一行。

    Raises:
        InvalidOptionError: 格式非法或字节数为负
    """
    if not formats:
        return [(_READ_LINE, 0)]

    parsed = []
    for position, fmt in enumerate(formats, 1):
        if isinstance(fmt, int) and not isinstance(fmt, bool):
            if fmt < 0:
                raise InvalidOptionError(
                    f"格式 #{position} 无效", expected=">= 0", actual=str(fmt)
                )
            parsed.append((_READ_COUNT, fmt))
            continue

        if isinstance(fmt, str):
            kind = fmt[1:2] if fmt.startswith("*") else fmt[:1]
            if kind in (_READ_LINE, _READ_LINE_KEEP, _READ_ALL):
                parsed.append((kind, 0))
                continue

        raise InvalidOptionError(
            f"格式 #{position} 无效",
            expected="'a' | 'l' | 'L' | int",
            actual=repr(fmt)
        )
    return parsed


class File:
    """
    归档条目的只读流

    由 Storage.open_file() 创建。所有直接调用的方法在失败时返回
    ErrorResult；lines() 返回的迭代器在出错时抛出异常。
    """

    def __init__(self, storage, handle: Hashable, name: str = None):
        self._handle = handle
        self._name = name
        self._storage = weakref.ref(storage)
        self._registry = storage.registry
        self._engine = storage.engine
        self._buffer_size = storage.config.buffer_size
        self._lines_max_formats = storage.config.lines_max_formats

    @classmethod
    def open(cls, storage, name: str) -> Union["File", ErrorResult]:
        """通过引擎打开条目并登记到 storage 的注册表"""
        try:
            handle = storage.engine.open_file(storage.handle, name)
        except EngineError as e:
            logger.debug("打开条目 %s 失败: %s", name, e)
            return ErrorResult.from_error(e)

        file = cls(storage, handle, name)
        storage.registry.insert(handle, file)
        logger.debug("打开条目 %s", name)
        return file

    # ==================== 属性 ====================

    @property
    def handle(self) -> Optional[Hashable]:
        return self._handle

    @property
    def closed(self) -> bool:
        return self._handle is None

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def storage(self):
        """所属的 Storage，关闭或被回收后为 None"""
        return self._storage() if self._storage is not None else None

    # ==================== 定位 ====================

    def seek(self, whence: str = "cur", offset: int = 0) -> Union[int, ErrorResult]:
        """
        设置并返回文件位置

        位置为 offset 加上 whence 指定的基准:
        - "set": 文件开头
        - "cur": 当前位置 (默认)
        - "end": 条目末尾 (即条目大小)

        因此 seek() 返回当前位置且不移动，seek("end") 返回条目大小。

        Returns:
            从文件开头算起的最终位置；失败返回 ErrorResult
        """
        mode = _SEEK_MODES[check_option(whence, "cur", WHENCES, "whence")]
        offset = check_integer(offset, "offset")

        if self._handle is None:
            return ErrorResult.invalid_handle()

        try:
            return self._engine.set_file_pointer(self._handle, offset, mode)
        except EngineError as e:
            return ErrorResult.from_error(e)

    # ==================== 读取 ====================

    def read(self, *formats) -> Union[ReadResult, ErrorResult]:
        """
        按给定格式读取

        每个格式对应一个结果 (bytes)，无法读取时结果为 None，
        且不再处理后续格式。没有格式时默认读取一行。

        格式:
        - "a": 读取剩余全部内容，文件末尾返回 b""
        - "l": 读取下一行 (不含换行符)，文件末尾返回 None
        - "L": 读取下一行 (保留换行符)，文件末尾返回 None
        - int: 最多读取 n 字节，文件末尾返回 None；
          n 为 0 时不读取，未到末尾返回 b""

        Returns:
            结果元组；文件已关闭或引擎出错时返回 ErrorResult
            (即使之前的格式已经读到数据)

        Raises:
            InvalidOptionError: 格式非法
        """
        parsed = parse_formats(formats)

        if self._handle is None:
            return ErrorResult.invalid_handle()

        results = []
        try:
            size = self._engine.get_file_size(self._handle)
            for kind, count in parsed:
                value, more = self._read_format(kind, count, size)
                results.append(value)
                if not more:
                    break
        except EngineError as e:
            return ErrorResult.from_error(e)

        return tuple(results)

    def _read_format(self, kind: str, count: int,
                     size: int) -> Tuple[Optional[bytes], bool]:
        """
        读取单个格式

        Returns:
            (结果, 是否继续处理后续格式)
        """
        if kind == _READ_ALL:
            data = self._read_bytes(size)
            return data, True

        if kind == _READ_COUNT:
            if count == 0:
                position = self._engine.set_file_pointer(self._handle, 0, SEEK_CUR)
                if position >= size:
                    return None, False
                return b"", True

            data = self._read_bytes(count)
            if data:
                return data, True
            return None, False

        return self._read_line(chop=(kind == _READ_LINE))

    def _read_bytes(self, count: int) -> bytes:
        """分块读取最多 count 字节，遇到文件末尾时提前返回"""
        chunks = []
        remaining = count

        while remaining > 0:
            chunk = self._engine.read_file(
                self._handle, min(remaining, self._buffer_size)
            )
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)

        return b"".join(chunks)

    def _read_line(self, chop: bool) -> Tuple[Optional[bytes], bool]:
        """
        读取一行

        按块读取直到遇到换行符，多读的部分通过 seek 退回。
        """
        chunks = []

        while True:
            chunk = self._engine.read_file(self._handle, self._buffer_size)
            if not chunk:
                break

            index = chunk.find(b"\n")
            if index < 0:
                chunks.append(chunk)
                continue

            overshoot = len(chunk) - index - 1
            if overshoot:
                self._engine.set_file_pointer(self._handle, -overshoot, SEEK_CUR)
            chunks.append(chunk[:index] if chop else chunk[:index + 1])
            return b"".join(chunks), True

        # 文件末尾: 最后一行可能没有换行符
        line = b"".join(chunks)
        if line:
            return line, True
        return None, False

    def lines(self, *formats) -> "LinesIterator":
        """
        返回按格式逐次读取的迭代器

        每次迭代调用一次 read(*formats)，没有格式时默认 "l"。
        到达文件末尾时迭代结束；出错时抛出异常而不是返回 ErrorResult。

        Raises:
            InvalidHandleError: 文件已关闭
            InvalidOptionError: 格式非法或数量超过上限
        """
        if self._handle is None:
            raise InvalidHandleError()

        if len(formats) > self._lines_max_formats:
            raise InvalidOptionError(
                "格式参数过多",
                expected=f"<= {self._lines_max_formats}",
                actual=str(len(formats))
            )
        parse_formats(formats)

        return LinesIterator(self, formats)

    def __iter__(self) -> "LinesIterator":
        return self.lines()

    # ==================== 兼容接口 ====================

    def write(self, *args) -> ErrorResult:
        """条目不可写，恒返回 ErrorResult"""
        return ErrorResult.invalid_handle()

    def setvbuf(self, *args) -> Union[bool, ErrorResult]:
        """缓冲模式不可修改；文件打开时返回 True"""
        if self._handle is None:
            return ErrorResult.invalid_handle()
        return True

    def flush(self) -> Union[bool, ErrorResult]:
        """没有可刷新的数据；文件打开时返回 True"""
        if self._handle is None:
            return ErrorResult.invalid_handle()
        return True

    # ==================== 生命周期 ====================

    def close(self) -> Union[bool, ErrorResult]:
        """
        关闭文件

        文件在被回收或所属 Storage 关闭时也会自动关闭。

        Returns:
            成功返回 True；已关闭或引擎失败返回 ErrorResult
        """
        if self._handle is None:
            return ErrorResult.invalid_handle()

        self._registry.remove(self._handle)
        handle, self._handle = self._handle, None
        self._storage = None

        try:
            status = self._engine.close_file(handle)
        except EngineError as e:
            return ErrorResult.from_error(e)

        logger.debug("关闭条目 %s", self._name)
        return status

    def __enter__(self) -> "File":
        return self

    def __exit__(self, *args) -> None:
        if self._handle is not None:
            self.close()

    def __del__(self) -> None:
        if getattr(self, "_handle", None) is not None:
            self.close()

    def __str__(self) -> str:
        text = f"Casc File (0x{id(self):x})"
        return text if self._handle is not None else text + " (Closed)"

    __repr__ = __str__


class LinesIterator:
    """
    File.lines() 返回的迭代器

    持有文件和格式参数，每次 __next__ 执行一次 read()。
    只有一个格式时返回该结果本身，否则返回结果元组。
    """

    def __init__(self, file: File, formats: Sequence[object]):
        self._file = file
        self._formats = tuple(formats)
        self._single = len(self._formats) <= 1

    @property
    def formats(self) -> Tuple[object, ...]:
        return self._formats

    def __iter__(self) -> "LinesIterator":
        return self

    def __next__(self):
        result = self._file.read(*self._formats)

        if isinstance(result, ErrorResult):
            result.raise_error()

        if not result or result[0] is None:
            raise StopIteration

        return result[0] if self._single else result
