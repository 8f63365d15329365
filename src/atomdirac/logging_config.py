"""日志配置
==========

为 ``atomdirac`` 包提供统一的日志入口。各模块通过 :func:`get_logger` 获取记录器：

    from .logging_config import get_logger
    logger = get_logger(__name__)

    logger.debug("迭代 %d, E = %.10e", it, E)

日志级别
--------
- DEBUG: 迭代细节（网格大小、试探能量、节点数、能量修正、网格内边界被截断）
- INFO: 态求解的开始/完成
- WARNING: 非致命问题（搜索中意外得到其他量子数的态）
- ERROR: 导致当前态求解失败的问题

可通过环境变量控制级别::

    export ATOMDIRAC_LOG_LEVEL=DEBUG

或在代码中调用 :func:`set_log_level`。需要落盘时调用 :func:`enable_file_logging`。

注意：仅配置包级记录器 ``atomdirac``，不修改根记录器，以免干扰宿主程序。
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import Optional

__all__ = [
    "get_logger",
    "set_log_level",
    "enable_file_logging",
    "disable_file_logging",
    "enable_debug_mode",
]

PACKAGE_LOGGER = "atomdirac"

_DEFAULT_FORMAT = "%(asctime)s | %(name)-22s | %(levelname)-8s | %(message)s"
_DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_LEVEL = logging.WARNING

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_loggers: dict[str, logging.Logger] = {}
_handlers_configured = False
_file_handler: Optional[logging.FileHandler] = None


def _configure_package_handler() -> None:
    """首次调用 :func:`get_logger` 时为包记录器安装控制台处理器。"""
    global _handlers_configured

    if _handlers_configured:
        return

    env_level = os.environ.get("ATOMDIRAC_LOG_LEVEL", "").upper()
    level = _LEVEL_MAP.get(env_level, _DEFAULT_LEVEL)

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(level)

    if not pkg_logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATE_FORMAT))
        pkg_logger.addHandler(console_handler)

    _handlers_configured = True


def get_logger(name: str) -> logging.Logger:
    """获取指定模块名的记录器（带缓存）。

    Parameters
    ----------
    name : str
        模块名，通常传入 ``__name__``。

    Returns
    -------
    logging.Logger
        已配置的记录器；其名称位于 ``atomdirac`` 之下，因而继承包级处理器。
    """
    if name not in _loggers:
        _configure_package_handler()
        _loggers[name] = logging.getLogger(name)
    return _loggers[name]


def set_log_level(level: int) -> None:
    """设置包内所有记录器及其处理器的级别。"""
    _configure_package_handler()
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(level)
    for handler in pkg_logger.handlers:
        if handler is not _file_handler:
            handler.setLevel(level)


def enable_file_logging(filename: Optional[str] = None, level: int = logging.DEBUG) -> str:
    """在控制台之外同时输出日志到文件。

    Parameters
    ----------
    filename : str, optional
        日志文件路径；缺省时生成带时间戳的文件名。
    level : int
        文件处理器级别，默认 DEBUG。

    Returns
    -------
    str
        实际写入的日志文件路径。
    """
    global _file_handler

    _configure_package_handler()
    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"atomdirac_{timestamp}.log"

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _file_handler is not None:
        pkg_logger.removeHandler(_file_handler)
        _file_handler.close()

    _file_handler = logging.FileHandler(filename, encoding="utf-8")
    _file_handler.setLevel(level)
    _file_handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATE_FORMAT))
    pkg_logger.addHandler(_file_handler)

    if pkg_logger.level > level:
        pkg_logger.setLevel(level)

    return filename


def disable_file_logging() -> None:
    """关闭先前开启的文件日志。"""
    global _file_handler

    if _file_handler is not None:
        logging.getLogger(PACKAGE_LOGGER).removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None


def enable_debug_mode() -> None:
    """快捷方式：控制台输出全部调试信息。"""
    set_log_level(logging.DEBUG)
