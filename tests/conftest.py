"""共享 fixture — 假执行器 / 假仓库

FakeExecutor 记录所有命令并按前缀返回预设退出码，无需真实 git。
FakeRegistry 用字典模拟包仓库，同时记录下载上报。
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from fur.core.exceptions import RegistryError
from fur.core.models import InstallEvent, PackageMetadata
from fur.utils.shell import CommandResult


class FakeExecutor:
    """记录调用的命令执行器

    rules: {命令前缀元组: 退出码}，最长前缀优先；未命中返回 0。
    hooks: {命令前缀元组: 回调(cmd, cwd)}，用于模拟 git clone 产生文件。
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.streamed: list[bool] = []
        self.rules: dict[tuple[str, ...], int] = {}
        self.hooks: dict[tuple[str, ...], Callable[[list[str], str | None], None]] = {}

    def fail(self, *prefix: str, rc: int = 1) -> None:
        self.rules[prefix] = rc

    def _match(self, table: dict, cmd: list[str]):
        best = None
        for prefix in table:
            if tuple(cmd[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        return best

    def execute(self, cmd, *, cwd=None, env=None, timeout=None, stream=False) -> CommandResult:
        self.calls.append(list(cmd))
        self.streamed.append(stream)
        hook = self._match(self.hooks, cmd)
        if hook is not None:
            self.hooks[hook](list(cmd), cwd)
        rule = self._match(self.rules, cmd)
        rc = self.rules[rule] if rule is not None else 0
        return CommandResult(rc, "", f"fake error: {' '.join(cmd)}" if rc else "")


class FakeRegistry:
    """字典版包仓库"""

    def __init__(self, packages: dict[str, PackageMetadata] | None = None) -> None:
        self.packages = packages or {}
        self.downloads: list[str] = []
        self.unreachable = False
        self.download_ok = True

    def add(self, name: str, version: str = "1.0.0", deps: list[str] | None = None, **kw) -> PackageMetadata:
        meta = PackageMetadata(
            name=name, version=version, git_url=f"https://git.example.com/{name}.git",
            dependencies=deps or [], **kw,
        )
        self.packages[name] = meta
        return meta

    def fetch_package_metadata(self, name: str, version: str | None = None) -> PackageMetadata | None:
        if self.unreachable:
            raise RegistryError("网络错误: connection refused")
        meta = self.packages.get(name)
        if meta is None or (version and version != meta.version):
            return None
        return meta

    def report_download(self, name: str) -> bool:
        self.downloads.append(name)
        return self.download_ok


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[InstallEvent] = []

    def emit(self, event: InstallEvent) -> None:
        self.events.append(event)

    def kinds(self, package: str | None = None) -> list[str]:
        return [e.kind.value for e in self.events if package is None or e.package == package]


def make_clone_hook(files: dict[str, str] | None = None):
    """模拟 git clone: 创建目标目录、.git 标记和指定文件"""

    def hook(cmd: list[str], cwd: str | None) -> None:
        dest = Path(cmd[-1])
        (dest / ".git").mkdir(parents=True, exist_ok=True)
        for rel, content in (files or {}).items():
            p = dest / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content, encoding="utf-8")

    return hook


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    ex = FakeExecutor()
    ex.hooks[("git", "clone")] = make_clone_hook()
    return ex


@pytest.fixture()
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def clone_hook():
    """make_clone_hook 工厂，用于让 clone 产生安装脚本等文件"""
    return make_clone_hook
