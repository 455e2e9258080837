"""fur 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import functools
import os
import sys
from collections.abc import Callable
from typing import Any

import click

from fur import __version__
from fur.core.config import init_config
from fur.core.exceptions import FurError
from fur.services.container import get_container
from fur.utils.logger import setup_logging


def _svc() -> Any:
    """获取全局服务容器的快捷方式"""
    return get_container()


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """把 FurError 转成友好提示 + 退出码 1"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except FurError as e:
            click.echo(f"错误: {e}", err=True)
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default="", help="配置文件路径（默认 ~/.fur/config.yml）")
def main(config_path: str) -> None:
    """fur - Finite User Repository 包管理器"""
    setup_logging(
        level=os.getenv("FUR_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("FUR_LOG_JSON", "") == "1",
    )
    try:
        init_config(config_path)
    except FurError as e:
        raise click.ClickException(f"配置加载失败: {e}") from e


# 注册各领域子命令
from fur.cli.cmd_install import register as _reg_install  # noqa: E402
from fur.cli.cmd_registry import register as _reg_registry  # noqa: E402
from fur.cli.cmd_local import register as _reg_local  # noqa: E402

_reg_install(main)
_reg_registry(main)
_reg_local(main)
