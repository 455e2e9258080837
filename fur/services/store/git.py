"""Git 命令封装

clone 失败直接抛异常；fetch / checkout / pull 返回 CommandResult，
失败是否致命由 PackageStore 决定。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from fur.core.exceptions import ValidationError
from fur.utils.shell import CommandExecutor, CommandResult, get_executor, run_cmd

logger = logging.getLogger(__name__)

_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./@+\-]+$")


def validate_ref(ref: str) -> str:
    """校验 tag / 分支名，拒绝 shell 元字符和以 - 开头的选项注入"""
    if not _SAFE_REF_RE.match(ref) or ref.startswith("-"):
        raise ValidationError(f"ref 包含非法字符: {ref}")
    return ref


class GitClient:
    """git 命令行封装"""

    def __init__(self, executor: CommandExecutor | None = None) -> None:
        self._executor = executor

    @property
    def executor(self) -> CommandExecutor:
        return self._executor or get_executor()

    def _git(self, repo: Path, *args: str) -> CommandResult:
        r = self.executor.execute(["git", *args], cwd=str(repo))
        if not r.success:
            logger.debug("git %s 失败 (rc=%d): %s", args[0], r.returncode, r.stderr.strip()[:300])
        return r

    def clone(self, url: str, dest: Path) -> None:
        """clone 仓库到 dest，失败抛 ExecutionError"""
        if not url:
            raise ValidationError(f"缺少 git 地址，无法 clone 到 {dest}")
        run_cmd(["git", "clone", url, str(dest)], label="git clone", executor=self.executor)

    def fetch_all(self, repo: Path) -> CommandResult:
        return self._git(repo, "fetch", "--all", "--tags")

    def checkout(self, repo: Path, ref: str) -> CommandResult:
        """切换到 ref；非法 ref 不交给 git，直接返回失败结果"""
        try:
            validate_ref(ref)
        except ValidationError as e:
            logger.warning("%s", e)
            return CommandResult(1, stderr=str(e))
        return self._git(repo, "checkout", ref)

    def pull(self, repo: Path) -> CommandResult:
        return self._git(repo, "pull")
