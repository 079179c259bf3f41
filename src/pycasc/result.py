#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
统一的失败返回值

直接调用的接口在失败时返回 ErrorResult 而不是抛出异常，
调用方可以像宿主的 ``nil, message, code`` 三元组一样解包:

    >>> result = storage.open_file("missing.txt")
    >>> if not result:
    ...     _, message, code = result
"""

from typing import NamedTuple, Optional

from .exceptions import CascError, EngineError, InvalidHandleError


class ErrorResult(NamedTuple):
    """
    失败三元组 (value, message, code)

    value 恒为 None。实例的布尔值为 False，便于 ``if not result`` 判断。
    """
    value: Optional[object]
    message: str
    code: int

    def __bool__(self) -> bool:
        return False

    @classmethod
    def from_error(cls, exc: CascError) -> "ErrorResult":
        return cls(None, exc.message, exc.code)

    @classmethod
    def invalid_handle(cls) -> "ErrorResult":
        return cls.from_error(InvalidHandleError())

    def to_exception(self) -> CascError:
        """还原为对应的异常 (用于迭代场景)"""
        if self.code == InvalidHandleError.CODE:
            return InvalidHandleError(self.message)
        return EngineError(self.code, self.message)

    def raise_error(self) -> None:
        raise self.to_exception()


def is_error(value: object) -> bool:
    """判断返回值是否为 ErrorResult"""
    return isinstance(value, ErrorResult)
