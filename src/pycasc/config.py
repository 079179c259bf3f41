#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
运行配置

配置来源优先级:
1. 显式传入的 CascConfig
2. 环境变量 (PYCASC_BUFFER_SIZE 等)
3. 内置默认值
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional

from .exceptions import InvalidOptionError
from .log import get_logger

logger = get_logger(__name__)

DEFAULT_BUFFER_SIZE = 8192

# lines() 可携带的格式参数上限
DEFAULT_LINES_MAX_FORMATS = 250

# MemoryEngine 需要预先注册归档，只能以实例形式传入 open()
ENGINE_NAMES = ("directory",)


@dataclass(frozen=True)
class CascConfig:
    """
    pycasc 配置

    Attributes:
        buffer_size: 单次调用引擎读取的最大字节数
        lines_max_formats: lines() 接受的格式参数上限
        default_engine: open() 未指定引擎时使用的引擎名
    """
    buffer_size: int = DEFAULT_BUFFER_SIZE
    lines_max_formats: int = DEFAULT_LINES_MAX_FORMATS
    default_engine: str = "directory"

    # 配置项到环境变量名的映射
    ENV_VAR_MAP = {
        'buffer_size': 'PYCASC_BUFFER_SIZE',
        'lines_max_formats': 'PYCASC_LINES_MAX_FORMATS',
        'default_engine': 'PYCASC_ENGINE',
    }

    def __post_init__(self):
        if self.buffer_size < 1:
            raise InvalidOptionError(
                "buffer_size 无效", expected=">= 1", actual=str(self.buffer_size)
            )
        if self.lines_max_formats < 1:
            raise InvalidOptionError(
                "lines_max_formats 无效",
                expected=">= 1",
                actual=str(self.lines_max_formats)
            )
        if self.default_engine not in ENGINE_NAMES:
            raise InvalidOptionError(
                "default_engine 无效",
                expected=" | ".join(ENGINE_NAMES),
                actual=self.default_engine
            )

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "CascConfig":
        """
        从环境变量构建配置

        无效的值会被忽略并记录警告，对应项保持默认值。
        """
        environ = os.environ if environ is None else environ
        values = {}

        for field_name in ('buffer_size', 'lines_max_formats'):
            env_var = cls.ENV_VAR_MAP[field_name]
            raw = environ.get(env_var)
            if raw is None:
                continue
            try:
                value = int(raw)
            except ValueError:
                value = 0
            if value < 1:
                logger.warning("忽略无效的环境变量 %s=%r", env_var, raw)
                continue
            values[field_name] = value

        env_var = cls.ENV_VAR_MAP['default_engine']
        engine = environ.get(env_var)
        if engine is not None:
            engine = engine.strip().lower()
            if engine in ENGINE_NAMES:
                values['default_engine'] = engine
            else:
                logger.warning("忽略无效的环境变量 %s=%r", env_var, engine)

        return cls(**values)


_default_config: Optional[CascConfig] = None


def get_default_config() -> CascConfig:
    """获取 (并缓存) 默认配置"""
    global _default_config
    if _default_config is None:
        _default_config = CascConfig.from_env()
    return _default_config


def reset_default_config() -> None:
    """清空缓存的默认配置 (环境变量变化后使用)"""
    global _default_config
    _default_config = None
