"""fur 日志配置

提供统一的日志配置和格式化功能，支持普通文本和结构化 JSON 两种输出格式。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于脚本化消费安装日志

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "INFO",
            "logger": "fur.services.store.package_store",
            "message": "log message",
            "package": "foo",       (仅在带 extra={"package": ...} 时)
            "event": "cloning",     (仅在带 extra={"event": ...} 时)
            "exception": "traceback..." (仅在有异常时)
        }
    """

    # 通过 logger.log(..., extra={...}) 附加的安装上下文字段
    CONTEXT_FIELDS = ("package", "event")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self.CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value:
                log_entry[key] = value
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式，否则使用人类可读格式

    说明:
        - 输出到 stderr，stdout 留给安装脚本的实时输出
        - 自动清理已有 handlers，避免重复输出
    """
    root = logging.getLogger()

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    handler = logging.StreamHandler(sys.stderr)

    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        fmt = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(handler)


def reset_logging() -> None:
    """重置根日志器配置（常用于测试）"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
