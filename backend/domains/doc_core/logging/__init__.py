"""
结构化日志模块

基于 structlog 提供统一的日志配置。
"""

from .config import (
    LogConfig,
    LogFormat,
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "LogConfig",
    "LogFormat",
    "bind_request_context",
    "clear_request_context",
]
