"""CLI — 安装命令"""

from __future__ import annotations

import sys

import click

from fur.cli import _svc, handle_errors
from fur.core.models import EventKind, InstallEvent

_STYLES = {
    EventKind.START: ("安装", "cyan"),
    EventKind.DEPENDENCY: ("依赖", "cyan"),
    EventKind.CLONING: ("克隆", "blue"),
    EventKind.UPDATING: ("更新", "blue"),
    EventKind.INSTALLER: ("脚本", "magenta"),
    EventKind.SUCCESS: ("完成", "green"),
    EventKind.WARNING: ("警告", "yellow"),
    EventKind.FAILED: ("失败", "red"),
}


class ConsoleEventSink:
    """把安装进度输出到终端"""

    def emit(self, event: InstallEvent) -> None:
        label, color = _STYLES[event.kind]
        err = event.kind in (EventKind.WARNING, EventKind.FAILED)
        click.echo(
            f"{click.style(f'[{label}]', fg=color)} {event.package} {event.message}".rstrip(),
            err=err,
        )


def register(group: click.Group) -> None:
    group.add_command(install)


@click.command()
@click.argument("package")
@handle_errors
def install(package: str) -> None:
    """安装包及其依赖，PACKAGE 格式为 name 或 name@version"""
    result = _svc().installer(sink=ConsoleEventSink()).install(package)
    if not result.success:
        sys.exit(1)
