"""领域协议定义

集中定义各层之间的接口契约（Protocol），
安装编排器依赖抽象而非具体实现，测试时可直接注入假对象。
"""

from __future__ import annotations

import logging
from typing import Protocol

from fur.core.models import EventKind, InstallEvent, PackageMetadata

logger = logging.getLogger(__name__)


# =========================================================================
# 包仓库协议
# =========================================================================

class RegistryProvider(Protocol):
    """包仓库客户端协议"""

    def fetch_package_metadata(
        self, name: str, version: str | None = None,
    ) -> PackageMetadata | None:
        """查询包元信息，不存在返回 None，网络异常抛 RegistryError"""
        ...

    def report_download(self, name: str) -> bool:
        """上报一次下载，失败返回 False，永不抛异常"""
        ...


# =========================================================================
# 进度事件协议
# =========================================================================

class EventSink(Protocol):
    """安装进度事件接收者"""

    def emit(self, event: InstallEvent) -> None:
        ...


class LoggingEventSink:
    """默认实现: 把进度事件写入日志"""

    _LEVELS = {
        EventKind.WARNING: logging.WARNING,
        EventKind.FAILED: logging.ERROR,
    }

    def emit(self, event: InstallEvent) -> None:
        level = self._LEVELS.get(event.kind, logging.INFO)
        logger.log(
            level, "[%s] %s %s", event.kind.value, event.package, event.message,
            extra={"package": event.package, "event": event.kind.value},
        )
