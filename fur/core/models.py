"""核心数据模型

所有核心数据类集中定义，registry / store / installer 统一从此处导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fur.core.exceptions import ValidationError

LATEST = "latest"


# =========================================================================
# 包规格 / 包元信息
# =========================================================================


@dataclass(frozen=True)
class PackageSpec:
    """用户给出的包规格: name 或 name@version"""

    name: str
    version: str | None = None

    @classmethod
    def parse(cls, text: str) -> PackageSpec:
        """解析 name[@version]

        只识别前两段，a@b@c 解析为 (a, b)。
        """
        parts = text.strip().split("@")
        name = parts[0]
        if not name:
            raise ValidationError(f"包规格缺少包名: '{text}'")
        version = parts[1] if len(parts) > 1 and parts[1] else None
        return cls(name=name, version=version)

    def __str__(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name


@dataclass
class PackageMetadata:
    """包仓库返回的包元信息，同时也是 furconfig.json 的内容

    JSON 字段沿用仓库的 camelCase 命名（issueTracker / git / installer）。
    """

    name: str
    version: str = ""
    description: str = ""
    authors: list[str] = field(default_factory=list)
    homepage: str = ""
    issue_tracker: str = ""
    git_url: str = ""
    installer: str | None = None   # 包内安装脚本的相对路径
    dependencies: list[str] = field(default_factory=list)  # 依赖包规格串

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageMetadata:
        name = data.get("name")
        if not name:
            raise ValidationError(f"包元信息缺少 name 字段: {data}")
        return cls(
            name=str(name),
            version=str(data.get("version") or ""),
            description=data.get("description") or "",
            authors=list(data.get("authors") or []),
            homepage=data.get("homepage") or "",
            issue_tracker=data.get("issueTracker") or "",
            git_url=data.get("git") or "",
            installer=data.get("installer") or None,
            dependencies=list(data.get("dependencies") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "authors": list(self.authors),
            "homepage": self.homepage,
            "issueTracker": self.issue_tracker,
            "git": self.git_url,
            "installer": self.installer,
            "dependencies": list(self.dependencies),
        }


@dataclass
class PackageListing:
    """包列表查询结果"""

    packages: list[str] = field(default_factory=list)
    package_count: int = 0


# =========================================================================
# 安装流程模型
# =========================================================================


class EventKind(str, Enum):
    """安装进度事件类型"""
    START = "start"
    DEPENDENCY = "dependency"
    CLONING = "cloning"
    UPDATING = "updating"
    INSTALLER = "installer"
    SUCCESS = "success"
    WARNING = "warning"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallEvent:
    """安装进度事件，由 Installer / PackageStore 发往 EventSink"""

    kind: EventKind
    package: str
    message: str = ""


@dataclass
class MaterializeResult:
    """包目录落盘结果"""

    name: str
    path: str
    action: str = "cloned"             # cloned | updated
    installer_ran: bool = False
    installer_supported: bool = True   # 配置了脚本但解释器不支持时为 False


@dataclass
class InstallResult:
    """单次 install 调用的结果"""

    name: str
    version: str = ""
    success: bool = True
    message: str = ""
    failed: list[str] = field(default_factory=list)  # 子树中失败的包名
