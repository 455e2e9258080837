"""服务容器 — 统一依赖注入

CLI 通过 get_container() 获取 registry / store / installer，而非直接构造。

依赖关系图（→ 表示依赖）:
  installer → registry, store
  store     → git, dispatcher

用法:
    container = ServiceContainer()
    result = container.installer().install("foo@1.2.0")

    # 显式注入配置
    cfg = Config.from_file("my_config.yml")
    container = ServiceContainer(config=cfg)
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fur.core.config import Config
    from fur.core.protocols import EventSink
    from fur.services.installer.orchestrator import Installer
    from fur.services.registry.client import RegistryClient
    from fur.services.store.package_store import PackageStore

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from fur.core.config import get_config
            config = get_config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> RegistryClient:
        if "registry" not in self._instances:
            from fur.services.registry.client import RegistryClient
            self._instances["registry"] = RegistryClient(
                self._config.registry_url, timeout=self._config.timeout,
            )
        return self._instances["registry"]  # type: ignore[return-value]

    @property
    def store(self) -> PackageStore:
        if "store" not in self._instances:
            from fur.services.store.package_store import PackageStore
            self._instances["store"] = PackageStore(self._config.packages_path)
        return self._instances["store"]  # type: ignore[return-value]

    def installer(self, sink: EventSink | None = None) -> Installer:
        """构造安装编排器；installer 与 store 共用同一个 sink，进度事件走同一出口"""
        from fur.services.installer.orchestrator import Installer
        if sink is None:
            from fur.core.protocols import LoggingEventSink
            sink = LoggingEventSink()
        self.store.sink = sink
        return Installer(self.registry, self.store, sink=sink)


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
