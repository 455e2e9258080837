"""文件统一读写工具

集中管理 YAML（配置）与 JSON（furconfig.json 元信息快照）的读写。
统一 encoding="utf-8"、空值保护、目录自动创建、原子写入。
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 配置文件最大大小限制 (1MB)
MAX_CONFIG_SIZE = 1024 * 1024


def atomic_write(path: Path, content: str) -> None:
    """原子写入文件：先写同目录临时文件再 rename，防止中途崩溃导致损坏"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(
        dir=str(path.parent), suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        # 只捕获普通异常，不拦截 KeyboardInterrupt/SystemExit
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    返回:
        dict: 解析后的字典。文件不存在、为空、或内容不是字典时返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        ValueError: 文件过大（超过 MAX_CONFIG_SIZE）
    """
    p = Path(path)
    if not p.exists():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_CONFIG_SIZE:
        raise ValueError(
            f"配置文件过大: {p} ({file_size} 字节), "
            f"超过限制 {MAX_CONFIG_SIZE} 字节"
        )

    try:
        with open(p, encoding="utf-8") as f:
            result = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", path, e)
        raise

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning(
            "%s 内容不是字典类型 (实际类型: %s)，返回空字典",
            path, type(result).__name__,
        )
        return {}
    return result


def load_json(path: str | Path) -> dict[str, Any] | None:
    """读取 JSON 文件，不存在返回 None

    异常:
        json.JSONDecodeError: JSON 格式错误
    """
    p = Path(path)
    if not p.exists():
        return None
    with open(p, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        logger.warning("%s 内容不是 JSON 对象，忽略", path)
        return None
    return data


def save_json(path: str | Path, data: Any) -> None:
    """原子写入缩进 JSON，保留 Unicode 字符"""
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    atomic_write(Path(path), content)
