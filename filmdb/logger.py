"""
日志模块 (Logging Module)
========================

所有 filmdb 日志器都挂在 "filmdb" 根日志器下，由它统一输出到 stdout；
命令行通过 set_level 调整整体或单个模块的级别。
"""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = logging.INFO

ROOT_LOGGER_NAME = "filmdb"
CONSOLE_HANDLER_NAME = "filmdb-console"


def _ensure_console_handler() -> logging.Logger:
    """给 filmdb 根日志器挂上唯一的 stdout 处理器（重复调用不会重复添加）。"""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if any(h.get_name() == CONSOLE_HANDLER_NAME for h in root.handlers):
        return root

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(DEFAULT_LEVEL)
    root.propagate = False
    return root


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    获取模块日志器，通常传入 __name__；level 仅在需要单独覆盖时指定。
    """
    _ensure_console_handler()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: Union[int, str], logger_name: Optional[str] = None) -> None:
    """设置 filmdb 根日志器（或 logger_name 指定的日志器）的级别，接受 "DEBUG" 这类名称。"""
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
    logging.getLogger(logger_name or ROOT_LOGGER_NAME).setLevel(level)
