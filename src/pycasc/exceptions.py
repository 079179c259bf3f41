#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pycasc 异常定义

所有异常均继承自 CascError，便于统一捕获。
直接调用的接口会把 InvalidHandleError / EngineError 转换为 ErrorResult，
迭代接口 (File.lines, Storage.enumerate) 则直接抛出。
"""

import errno
import os
from typing import Optional


class CascError(Exception):
    """
    pycasc 基础异常

    Attributes:
        message: 错误描述
        code: 错误码 (引擎原生 errno)
    """
    def __init__(self, message: str, code: int = 0):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidHandleError(CascError):
    """
    无效句柄异常

    对已关闭的 Storage / File / Finder 进行操作时抛出。
    总是在调用引擎之前于本地检测，不会重试。
    """
    CODE = errno.EBADF

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or os.strerror(self.CODE), self.CODE)


class EngineError(CascError):
    """
    归档引擎异常

    由 ArchiveEngine 实现抛出，错误码和描述直接来自引擎。
    """
    def __init__(self, code: int, message: Optional[str] = None):
        super().__init__(message or os.strerror(code), code)

    @classmethod
    def from_os_error(cls, exc: OSError) -> "EngineError":
        """由 OSError 构造，保留 errno 和系统描述"""
        code = exc.errno if exc.errno is not None else errno.EIO
        return cls(code, exc.strerror or os.strerror(code))


class InvalidOptionError(CascError, ValueError):
    """
    参数错误异常

    调用方传入了非法的模式、格式或选项。属于编程错误，
    总是直接抛出，不会转换为 ErrorResult。
    """
    def __init__(self, message: str, expected: str = None, actual: str = None):
        self.expected = expected
        self.actual = actual
        if expected and actual:
            message = f"{message}: 期望 {expected}, 实际 {actual}"
        super().__init__(message, errno.EINVAL)
