"""本地包存储

- git.py: git 命令封装
- package_store.py: clone / update / 安装脚本 / 元信息落盘
"""

from fur.services.store.git import GitClient
from fur.services.store.package_store import METADATA_FILE, PackageStore

__all__ = [
    "GitClient",
    "PackageStore",
    "METADATA_FILE",
]
