"""子进程执行工具 — 统一 git / 安装脚本调用

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
stream=True 时 stdout/stderr 由两个线程并发逐行转发，
避免大量输出塞满管道缓冲导致死锁。
"""

from __future__ import annotations

import logging
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import IO, Protocol

from fur.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    非零退出码不抛异常，由调用方根据 CommandResult 决定如何处理。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int | None = None,
        stream: bool = False,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

def _drain(pipe: IO[str], sink_name: str) -> None:
    """逐行读取管道并写入父进程对应的流

    sink 在写入时才解析，确保测试替换的 sys.stdout 也能收到输出。
    """
    with pipe:
        for line in iter(pipe.readline, ""):
            sink = getattr(sys, sink_name)
            sink.write(line)
            sink.flush()


class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int | None = None,
        stream: bool = False,
    ) -> CommandResult:
        try:
            proc = subprocess.Popen(  # noqa: S603
                cmd, cwd=cwd, env=env, encoding="utf-8", errors="replace",
                stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ExecutionError(f"无法启动命令 {cmd[0]}: {e}") from e

        if not stream:
            try:
                stdout, stderr = proc.communicate(timeout=timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.communicate()
                raise ExecutionError(f"命令超时 ({timeout}s): {' '.join(cmd)}") from None
            return CommandResult(proc.returncode, stdout, stderr)

        assert proc.stdout is not None and proc.stderr is not None
        drains = [
            threading.Thread(target=_drain, args=(proc.stdout, "stdout"), daemon=True),
            threading.Thread(target=_drain, args=(proc.stderr, "stderr"), daemon=True),
        ]
        for t in drains:
            t.start()
        # 两个管道都读完后再 wait，子进程才不会阻塞在写满的管道上
        for t in drains:
            t.join()
        return CommandResult(proc.wait(timeout=timeout))


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


# =========================================================================
# 便捷函数
# =========================================================================

def run_cmd(
    cmd: list[str], *, cwd: str | None = None,
    env: dict[str, str] | None = None,
    label: str = "cmd",
    stream: bool = False,
    executor: CommandExecutor | None = None,
) -> CommandResult:
    """执行命令，非零退出抛 ExecutionError

    Args:
        cmd: 命令及参数列表
        cwd: 工作目录
        env: 环境变量（不传则继承当前进程）
        label: 日志标签
        stream: 是否实时转发输出；转发时错误信息只含退出码
        executor: 指定执行器，默认使用全局执行器
    """
    logger.info("  %s: %s (cwd=%s)", label, " ".join(cmd), cwd or ".")
    r = (executor or get_executor()).execute(cmd, cwd=cwd, env=env, stream=stream)
    if not r.success:
        if stream:
            detail = f"退出码 {r.returncode}"
        else:
            detail = r.stderr.strip()[:500] or f"退出码 {r.returncode}"
        raise ExecutionError(f"{label}失败 (rc={r.returncode}): {detail}", r.returncode)
    return r
