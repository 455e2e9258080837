"""安装编排器

单个包的安装流程:
  1. 解析 name[@version]
  2. 向包仓库查询元信息（不存在 / 网络异常 → 该分支失败，不抛异常）
  3. 依次递归安装全部依赖（先依赖后自身，串行）
  4. PackageStore clone / update 并执行安装脚本（异常向上传播）
  5. 上报下载（失败只记日志）

递归时携带正在安装的包名链，遇到环立即抛 DependencyCycleError。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fur.core.protocols import EventSink, RegistryProvider
    from fur.services.store.package_store import PackageStore

from fur.core.exceptions import DependencyCycleError, RegistryError
from fur.core.models import EventKind, InstallEvent, InstallResult, PackageSpec

logger = logging.getLogger(__name__)


class Installer:
    """递归安装编排器"""

    def __init__(
        self,
        registry: RegistryProvider,
        store: PackageStore,
        sink: EventSink | None = None,
    ) -> None:
        if sink is None:
            from fur.core.protocols import LoggingEventSink
            sink = LoggingEventSink()
        self.registry = registry
        self.store = store
        self.sink = sink

    def install(self, spec: str | PackageSpec) -> InstallResult:
        """安装一个包及其全部传递依赖

        查不到包或仓库不可达时返回 success=False 的结果；
        git clone / 安装脚本失败以及循环依赖以异常形式抛出。
        """
        return self._install(spec, [])

    def _install(self, spec: str | PackageSpec, chain: list[str]) -> InstallResult:
        pkg = spec if isinstance(spec, PackageSpec) else PackageSpec.parse(spec)
        if pkg.name in chain:
            raise DependencyCycleError([*chain, pkg.name])

        self._emit(EventKind.START, pkg.name, str(pkg))
        try:
            metadata = self.registry.fetch_package_metadata(pkg.name, pkg.version)
        except RegistryError as e:
            msg = f"{e}（请确认包仓库可访问）"
            self._emit(EventKind.FAILED, pkg.name, msg)
            return InstallResult(pkg.name, pkg.version or "", False, msg, [pkg.name])

        if metadata is None:
            msg = f"包 '{pkg}' 不存在"
            self._emit(EventKind.FAILED, pkg.name, msg)
            return InstallResult(pkg.name, pkg.version or "", False, msg, [pkg.name])

        failed: list[str] = []
        for dep in metadata.dependencies:
            self._emit(EventKind.DEPENDENCY, pkg.name, dep)
            sub = self._install(dep, [*chain, pkg.name])
            failed.extend(sub.failed)

        self.store.materialize_and_install(metadata)
        self._report_download(metadata.name)

        if failed:
            msg = f"已安装 {metadata.name} v{metadata.version}，但以下依赖失败: {', '.join(failed)}"
            self._emit(EventKind.WARNING, metadata.name, msg)
            return InstallResult(metadata.name, metadata.version, False, msg, failed)

        msg = f"已安装 {metadata.name} v{metadata.version}"
        self._emit(EventKind.SUCCESS, metadata.name, msg)
        return InstallResult(metadata.name, metadata.version, True, msg)

    def _report_download(self, name: str) -> None:
        """上报下载，任何失败都不影响已完成的安装"""
        try:
            ok = self.registry.report_download(name)
        except Exception as e:  # noqa: BLE001
            logger.warning("下载上报异常，忽略: %s (%s)", name, e)
            return
        if not ok:
            logger.debug("下载上报失败，忽略: %s", name)

    def _emit(self, kind: EventKind, package: str, message: str = "") -> None:
        self.sink.emit(InstallEvent(kind=kind, package=package, message=message))
