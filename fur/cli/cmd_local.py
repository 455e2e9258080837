"""CLI — 本地已安装包管理"""

from __future__ import annotations

import click

from fur.cli import _svc, handle_errors


def register(group: click.Group) -> None:
    group.add_command(installed)
    group.add_command(remove)


@click.command()
@handle_errors
def installed() -> None:
    """列出本地已安装的包"""
    packages = _svc().store.list_installed()
    if not packages:
        click.echo("本地没有已安装的包。")
        return
    for p in packages:
        click.echo(f"  {p.name:24s} {p.version}")


@click.command()
@click.argument("name")
@click.confirmation_option(prompt="确认删除该包目录?")
@handle_errors
def remove(name: str) -> None:
    """删除本地包目录（不执行卸载脚本）"""
    if _svc().store.remove(name):
        click.echo(f"已删除: {name}")
    else:
        click.echo(f"本地未安装: {name}")
