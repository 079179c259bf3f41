#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
日志工具

基于标准库 logging，所有模块的 logger 都挂在 ``pycasc`` 命名空间下。
库本身只添加 NullHandler，是否输出由应用决定。
"""

import logging
import sys
from typing import Optional

_LOGGER_NAME = "pycasc"

logging.getLogger(_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取 pycasc 命名空间下的 logger

    Args:
        name: 模块名 (通常传 __name__)，为空时返回包级 logger
    """
    if not name or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    if not name.startswith(_LOGGER_NAME + "."):
        name = f"{_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(verbosity: int = 0, stream=None) -> logging.Handler:
    """
    为应用配置包级 logger

    Args:
        verbosity: 0 = WARNING, 1 = INFO, >=2 = DEBUG
        stream: 输出流，默认 stderr

    Returns:
        新添加的 handler
    """
    logger = get_logger()
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logger.setLevel(level)

    for h in list(logger.handlers):
        if not isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    return handler
