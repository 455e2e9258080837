"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。
默认配置文件为 ~/.fur/config.yml，可通过 FUR_CONFIG 环境变量指定。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from fur.core.exceptions import ConfigError
from fur.utils.file_io import load_yaml

logger = logging.getLogger(__name__)

FUR_HOME = Path("~/.fur")
DEFAULT_CONFIG_PATH = str(FUR_HOME / "config.yml")
DEFAULT_REGISTRY = "http://testing.finite.ovh:8080"


@dataclass
class Config:
    """客户端全局配置"""

    # 目录
    packages_dir: str = str(FUR_HOME / "packages")

    # 仓库
    repositories: list[str] = field(default_factory=lambda: [DEFAULT_REGISTRY])
    timeout: int = 30

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @property
    def registry_url(self) -> str:
        """当前使用的包仓库地址（取第一个）"""
        if not self.repositories:
            raise ConfigError("未配置任何包仓库 (repositories 为空)")
        return str(self.repositories[0])

    @property
    def packages_path(self) -> Path:
        return Path(self.packages_dir).expanduser()

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_PATH) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(Path(path).expanduser())
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path}: {e}") from e
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        if "repositories" in matched and not isinstance(matched["repositories"], list):
            raise ConfigError(f"repositories 必须是列表: {path}")
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        from dataclasses import asdict
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    path = path or os.getenv("FUR_CONFIG", DEFAULT_CONFIG_PATH)
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
