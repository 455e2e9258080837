"""本地包存储

目录布局:
    <packages_dir>/<name>/              git 工作区
    <packages_dir>/<name>/.git          存在即视为已安装，走更新路径
    <packages_dir>/<name>/furconfig.json  最近一次安装时的包元信息快照

更新路径:  fetch --all --tags → checkout <ver> → checkout origin/<ver> → 原地不动
新装路径:  clone → checkout <ver>（失败只告警）
两条路径之后都会执行安装脚本并写入 furconfig.json。不做失败回滚。
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fur.core.protocols import EventSink
    from fur.services.installer.dispatcher import ScriptDispatcher

from fur.core.exceptions import ValidationError
from fur.core.models import (
    LATEST,
    EventKind,
    InstallEvent,
    MaterializeResult,
    PackageMetadata,
)
from fur.services.store.git import GitClient
from fur.utils.file_io import load_json, save_json

logger = logging.getLogger(__name__)

METADATA_FILE = "furconfig.json"
VCS_MARKER = ".git"


class PackageStore:
    """本地包目录管理: clone / update / 安装脚本 / 元信息落盘"""

    def __init__(
        self,
        packages_dir: str | Path,
        git: GitClient | None = None,
        dispatcher: ScriptDispatcher | None = None,
        sink: EventSink | None = None,
    ) -> None:
        if dispatcher is None:
            from fur.services.installer.dispatcher import ScriptDispatcher
            dispatcher = ScriptDispatcher()
        if sink is None:
            from fur.core.protocols import LoggingEventSink
            sink = LoggingEventSink()
        self.root = Path(packages_dir).expanduser()
        self.root.mkdir(parents=True, exist_ok=True)
        self.git = git or GitClient()
        self.dispatcher = dispatcher
        self.sink = sink

    # ------------------------------------------------------------------
    # 路径
    # ------------------------------------------------------------------

    def package_dir(self, name: str) -> Path:
        path = (self.root / name).resolve()
        if path.parent != self.root.resolve():
            raise ValidationError(f"非法包名: {name}")
        return path

    def is_installed(self, name: str) -> bool:
        return (self.package_dir(name) / VCS_MARKER).exists()

    # ------------------------------------------------------------------
    # 安装
    # ------------------------------------------------------------------

    def materialize_and_install(self, metadata: PackageMetadata) -> MaterializeResult:
        """clone 或更新包目录，执行安装脚本，写入 furconfig.json

        clone 失败、安装脚本非零退出时抛 ExecutionError。
        """
        target = self.package_dir(metadata.name)
        result = MaterializeResult(name=metadata.name, path=str(target))

        if (target / VCS_MARKER).exists():
            result.action = "updated"
            self._update(target, metadata)
        else:
            result.action = "cloned"
            self._clone(target, metadata)

        installer = self._installer_path(target, metadata)
        if installer is not None:
            self._emit(EventKind.INSTALLER, metadata.name, metadata.installer or "")
            result.installer_ran = self.dispatcher.run(installer, cwd=str(target))
            result.installer_supported = result.installer_ran
            if not result.installer_ran:
                self._emit(
                    EventKind.WARNING, metadata.name,
                    f"不支持的安装脚本类型: {metadata.installer}，包可能未完整安装",
                )

        save_json(target / METADATA_FILE, metadata.to_dict())
        logger.info("元信息已写入: %s", target / METADATA_FILE)
        return result

    def _update(self, target: Path, metadata: PackageMetadata) -> None:
        self._emit(EventKind.UPDATING, metadata.name, str(target))
        if not self.git.fetch_all(target).success:
            self._emit(EventKind.WARNING, metadata.name, "git fetch 失败，使用本地已有的 refs")

        version = metadata.version
        if version and version != LATEST:
            if self.git.checkout(target, version).success:
                logger.info("已切换到 %s: %s", version, metadata.name)
            elif self.git.checkout(target, f"origin/{version}").success:
                logger.info("已切换到 origin/%s: %s", version, metadata.name)
            else:
                self._emit(
                    EventKind.WARNING, metadata.name,
                    f"版本 {version} 不存在，保持当前检出",
                )

        # tag 检出后处于 detached HEAD，pull 失败属预期
        pulled = self.git.pull(target)
        if not pulled.success:
            logger.debug("git pull 跳过 %s (rc=%d)", metadata.name, pulled.returncode)

    def _clone(self, target: Path, metadata: PackageMetadata) -> None:
        if target.exists() and any(target.iterdir()):
            logger.warning("清理无 %s 的残留目录: %s", VCS_MARKER, target)
            shutil.rmtree(target)

        self._emit(EventKind.CLONING, metadata.name, metadata.git_url)
        self.git.clone(metadata.git_url, target)

        version = metadata.version
        if version and version != LATEST and not self.git.checkout(target, version).success:
            self._emit(
                EventKind.WARNING, metadata.name,
                f"版本 {version} 不存在，使用默认分支",
            )

    @staticmethod
    def _installer_path(target: Path, metadata: PackageMetadata) -> Path | None:
        """解析安装脚本路径，不存在或越出包目录时返回 None"""
        if not metadata.installer:
            return None
        path = (target / metadata.installer).resolve()
        if target.resolve() not in path.parents:
            logger.warning("安装脚本路径越出包目录，已忽略: %s", metadata.installer)
            return None
        if not path.is_file():
            logger.warning("安装脚本不存在: %s", path)
            return None
        return path

    # ------------------------------------------------------------------
    # 查询 / 删除
    # ------------------------------------------------------------------

    def read_metadata(self, name: str) -> PackageMetadata | None:
        """读取已安装包的 furconfig.json"""
        data = load_json(self.package_dir(name) / METADATA_FILE)
        return PackageMetadata.from_dict(data) if data else None

    def list_installed(self) -> list[PackageMetadata]:
        """列出所有带 furconfig.json 的已安装包，损坏的快照跳过并告警"""
        result = []
        for d in sorted(self.root.iterdir()):
            if not d.is_dir() or not (d / METADATA_FILE).exists():
                continue
            try:
                meta = self.read_metadata(d.name)
            except (ValueError, ValidationError) as e:
                # ValueError 覆盖 JSONDecodeError / UnicodeDecodeError
                logger.warning("跳过损坏的 %s: %s (%s)", METADATA_FILE, d.name, e)
                continue
            if meta is not None:
                result.append(meta)
        return result

    def remove(self, name: str) -> bool:
        """删除包目录，不存在返回 False"""
        target = self.package_dir(name)
        if not target.exists():
            return False
        shutil.rmtree(target)
        logger.info("已删除: %s", target)
        return True

    def _emit(self, kind: EventKind, package: str, message: str = "") -> None:
        self.sink.emit(InstallEvent(kind=kind, package=package, message=message))
