#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pycasc 工具函数

提供选项校验、条目名规范化和名称匹配等通用功能。
"""

import re
from typing import Callable, Optional, Sequence

from .exceptions import InvalidOptionError


def check_option(value: Optional[str], default: str,
                 options: Sequence[str], name: str = "option") -> int:
    """
    校验字符串选项并返回其下标

    Args:
        value: 调用方传入的值，None 表示使用默认值
        default: 默认值
        options: 合法取值列表
        name: 参数名 (用于错误描述)

    Returns:
        value 在 options 中的下标

    Raises:
        InvalidOptionError: 取值不在 options 中

    Examples:
        >>> check_option(None, "cur", ("set", "cur", "end"))
        1
        >>> check_option("end", "cur", ("set", "cur", "end"))
        2
    """
    if value is None:
        value = default
    if not isinstance(value, str) or value not in options:
        raise InvalidOptionError(
            f"无效的 {name}",
            expected=" | ".join(repr(o) for o in options),
            actual=repr(value)
        )
    return options.index(value)


def check_integer(value: object, name: str = "integer") -> int:
    """校验整数参数 (拒绝 bool)"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidOptionError(
            f"无效的 {name}", expected="int", actual=type(value).__name__
        )
    return value


def normalize_name(name: str) -> str:
    """
    条目名规范化

    1. 反斜杠统一为正斜杠
    2. 合并连续斜杠
    3. 移除首尾斜杠

    Examples:
        >>> normalize_name("Data\\\\Models\\\\hero.m2")
        'Data/Models/hero.m2'
        >>> normalize_name("/Data//Models/")
        'Data/Models'
    """
    name = name.replace("\\", "/")

    while "//" in name:
        name = name.replace("//", "/")

    return name.strip("/")


def compile_matcher(pattern: Optional[str],
                    plain: bool = False) -> Optional[Callable[[str], bool]]:
    """
    构建条目名匹配函数

    Args:
        pattern: 匹配表达式 (正则，使用 re.search 语义)，None 表示不过滤
        plain: 为 True 时关闭正则语法，按子串查找

    Returns:
        匹配函数，pattern 为 None 时返回 None

    Raises:
        InvalidOptionError: pattern 不是字符串或正则无法编译
    """
    if pattern is None:
        return None

    if not isinstance(pattern, str):
        raise InvalidOptionError(
            "无效的 pattern", expected="str", actual=type(pattern).__name__
        )

    if plain:
        return lambda name: pattern in name

    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise InvalidOptionError(f"无效的 pattern {pattern!r}: {e}") from e

    return lambda name: regex.search(name) is not None
