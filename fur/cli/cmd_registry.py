"""CLI — 包仓库查询命令"""

from __future__ import annotations

import click

from fur.cli import _svc, handle_errors
from fur.core.exceptions import PackageNotFoundError
from fur.core.models import PackageMetadata, PackageSpec


def register(group: click.Group) -> None:
    group.add_command(search)
    group.add_command(list_packages)
    group.add_command(info)


def _echo_metadata(pkg: PackageMetadata) -> None:
    click.echo(f"\n{pkg.name} v{pkg.version}" if pkg.version else f"\n{pkg.name}")
    if pkg.description:
        click.echo(f"   描述: {pkg.description}")
    if pkg.authors:
        click.echo(f"   作者: {', '.join(pkg.authors)}")
    if pkg.dependencies:
        click.echo(f"   依赖: {', '.join(pkg.dependencies)}")
    if pkg.homepage:
        click.echo(f"   主页: {pkg.homepage}")


@click.command()
@click.argument("query")
@handle_errors
def search(query: str) -> None:
    """搜索包"""
    results = _svc().registry.search_packages(query)
    if not results:
        click.echo("没有找到匹配的包。")
        return
    click.echo(f"找到 {len(results)} 个包:")
    for pkg in results:
        _echo_metadata(pkg)


@click.command(name="list")
@click.option("--sort", default=None, help="排序方式（mostDownloads, recentlyUpdated 等）")
@handle_errors
def list_packages(sort: str | None) -> None:
    """列出仓库中的全部包"""
    listing = _svc().registry.list_packages(sort=sort)
    if not listing.packages:
        click.echo("仓库中没有可用的包。")
        return
    click.echo(f"可用的包 (共 {listing.package_count} 个):")
    for name in listing.packages:
        click.echo(f"  - {name}")


@click.command()
@click.argument("package")
@click.option("--version", "version", default=None, help="指定版本")
@handle_errors
def info(package: str, version: str | None) -> None:
    """查看包元信息，PACKAGE 可写作 name@version"""
    spec = PackageSpec.parse(package)
    meta = _svc().registry.fetch_package_metadata(spec.name, version or spec.version)
    if meta is None:
        raise PackageNotFoundError(f"包 '{package}' 不存在")
    click.echo(f"名称: {meta.name}")
    click.echo(f"版本: {meta.version}")
    click.echo(f"作者: {', '.join(meta.authors)}")
    click.echo(f"主页: {meta.homepage}")
    click.echo(f"问题追踪: {meta.issue_tracker}")
    click.echo(f"Git: {meta.git_url}")
    click.echo(f"安装脚本: {meta.installer or ''}")
    click.echo(f"依赖: {', '.join(meta.dependencies)}")
