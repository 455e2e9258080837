"""Installer 编排器单元测试 — 依赖顺序、失败传播、循环检测、下载上报"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from fur.core.exceptions import DependencyCycleError, ExecutionError
from fur.core.models import MaterializeResult, PackageSpec
from fur.services.installer.dispatcher import ScriptDispatcher
from fur.services.installer.orchestrator import Installer
from fur.services.store import GitClient, PackageStore


class TraceStore:
    """只记录安装顺序的假 store"""

    def __init__(self, trace: list[str]) -> None:
        self.trace = trace
        self.fail_on: str | None = None

    def materialize_and_install(self, metadata):
        if metadata.name == self.fail_on:
            raise ExecutionError("安装脚本失败 (rc=1): 退出码 1", 1)
        self.trace.append(metadata.name)
        return MaterializeResult(name=metadata.name, path=f"/pkgs/{metadata.name}")


@pytest.fixture()
def trace() -> list[str]:
    return []


@pytest.fixture()
def installer(fake_registry, trace, sink):
    return Installer(fake_registry, TraceStore(trace), sink=sink)


class TestOrdering:
    def test_single_package(self, installer, fake_registry, trace) -> None:
        fake_registry.add("app")
        result = installer.install("app")
        assert result.success
        assert trace == ["app"]
        assert fake_registry.downloads == ["app"]

    def test_dependencies_first_in_order(self, installer, fake_registry, trace) -> None:
        fake_registry.add("app", deps=["d1", "d2"])
        fake_registry.add("d1", deps=["d1a"])
        fake_registry.add("d1a")
        fake_registry.add("d2")
        assert installer.install("app").success
        assert trace == ["d1a", "d1", "d2", "app"]

    def test_versioned_dependency_spec(self, installer, fake_registry, trace) -> None:
        fake_registry.add("app", deps=["lib@2.0"])
        fake_registry.add("lib", version="2.0")
        result = installer.install(PackageSpec("app"))
        assert result.success
        assert trace == ["lib", "app"]

    def test_events(self, installer, fake_registry, sink) -> None:
        fake_registry.add("app", deps=["d1"])
        fake_registry.add("d1")
        installer.install("app")
        assert sink.kinds("app") == ["start", "dependency", "success"]
        assert sink.kinds("d1") == ["start", "success"]


class TestFailures:
    def test_not_found(self, installer, trace, sink) -> None:
        result = installer.install("ghost")
        assert not result.success
        assert result.failed == ["ghost"]
        assert "不存在" in result.message
        assert trace == []
        assert sink.kinds("ghost") == ["start", "failed"]

    def test_pinned_version_not_found(self, installer, fake_registry) -> None:
        fake_registry.add("app", version="1.0")
        assert not installer.install("app@9.9").success

    def test_missing_dependency_fails_only_its_subtree(self, installer, fake_registry, trace) -> None:
        fake_registry.add("app", deps=["d1", "ghost", "d2"])
        fake_registry.add("d1")
        fake_registry.add("d2")
        result = installer.install("app")
        assert trace == ["d1", "d2", "app"]
        assert not result.success
        assert result.failed == ["ghost"]

    def test_registry_unreachable(self, installer, fake_registry) -> None:
        fake_registry.unreachable = True
        result = installer.install("app")
        assert not result.success
        assert "仓库" in result.message

    def test_installer_failure_aborts_enclosing_install(self, fake_registry, trace, sink) -> None:
        store = TraceStore(trace)
        store.fail_on = "d1"
        fake_registry.add("app", deps=["d1", "d2"])
        fake_registry.add("d1")
        fake_registry.add("d2")
        with pytest.raises(ExecutionError):
            Installer(fake_registry, store, sink=sink).install("app")
        assert trace == []
        assert fake_registry.downloads == []

    def test_download_report_failure_ignored(self, installer, fake_registry) -> None:
        fake_registry.add("app")
        fake_registry.download_ok = False
        assert installer.install("app").success

    def test_download_report_exception_ignored(self, installer, fake_registry, trace, monkeypatch) -> None:
        fake_registry.add("app")

        def broken(name):
            raise ConnectionResetError("reset by peer")

        monkeypatch.setattr(fake_registry, "report_download", broken)
        result = installer.install("app")
        assert result.success
        assert trace == ["app"]

    def test_not_found_skips_download_report(self, trace) -> None:
        registry = MagicMock()
        registry.fetch_package_metadata.return_value = None
        Installer(registry, TraceStore(trace)).install("ghost")
        registry.report_download.assert_not_called()


class TestCycles:
    def test_direct_cycle(self, installer, fake_registry) -> None:
        fake_registry.add("a", deps=["b"])
        fake_registry.add("b", deps=["a"])
        with pytest.raises(DependencyCycleError) as exc:
            installer.install("a")
        assert exc.value.chain == ["a", "b", "a"]

    def test_self_dependency(self, installer, fake_registry) -> None:
        fake_registry.add("a", deps=["a@1.0.0"])
        with pytest.raises(DependencyCycleError, match="a -> a"):
            installer.install("a")

    def test_diamond_is_not_a_cycle(self, installer, fake_registry, trace) -> None:
        fake_registry.add("app", deps=["l", "r"])
        fake_registry.add("l", deps=["base"])
        fake_registry.add("r", deps=["base"])
        fake_registry.add("base")
        assert installer.install("app").success
        assert trace == ["base", "l", "base", "r", "app"]


class TestWithRealStore:
    def test_repeat_install_updates(self, tmp_path, fake_registry, fake_executor, sink) -> None:
        store = PackageStore(
            tmp_path / "pkgs",
            git=GitClient(fake_executor),
            dispatcher=ScriptDispatcher(fake_executor, platform="linux"),
            sink=sink,
        )
        fake_registry.add("app", version="v2")
        inst = Installer(fake_registry, store, sink=sink)
        inst.install("app")
        inst.install("app")
        verbs = [c[1] for c in fake_executor.calls if c[0] == "git"]
        assert verbs.count("clone") == 1
        assert "fetch" in verbs
        assert store.read_metadata("app").version == "v2"
        assert sink.kinds("app").count("updating") == 1
