"""安装脚本解释器分派

职责:
- 按扩展名选择解释器（.sh / .ps1 / .py / .js / .rb / .cmd / .bat / .exe）
- 无扩展名时读取首行 shebang 判断解释器
- 无 shebang 的非 Windows 脚本: chmod +x 后直接执行

select_interpreter() 是纯函数，不读文件也不改权限，便于单测覆盖整张分派表。
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from fur.core.exceptions import ExecutionError
from fur.utils.shell import CommandExecutor, CommandResult, get_executor, run_cmd

logger = logging.getLogger(__name__)

SHEBANG = "#!"


@dataclass(frozen=True)
class Interpreter:
    """解析出的执行方式: command + arguments"""

    command: str
    arguments: list[str] = field(default_factory=list)
    needs_exec_bit: bool = False   # 直接执行脚本本身前需要 chmod +x

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.arguments]


def is_windows(platform: str = sys.platform) -> bool:
    return platform.startswith(("win", "cygwin", "msys"))


def _python(windows: bool) -> str:
    return "python" if windows else "python3"


def _by_extension(script: str, ext: str, windows: bool) -> Interpreter | None:
    if ext == ".sh":
        return Interpreter("bash", [script])
    if ext == ".ps1":
        shell = "powershell" if windows else "pwsh"
        return Interpreter(shell, ["-ExecutionPolicy", "Bypass", "-File", script])
    if ext == ".py":
        return Interpreter(_python(windows), [script])
    if ext == ".js":
        return Interpreter("node", [script])
    if ext == ".rb":
        return Interpreter("ruby", [script])
    if ext in (".cmd", ".bat"):
        return Interpreter("cmd", ["/c", script]) if windows else None
    if ext == ".exe":
        return Interpreter(script) if windows else None
    return None


def _by_directive(script: str, directive: str, windows: bool) -> Interpreter | None:
    # 子串匹配顺序固定: bash/sh 优先
    if "bash" in directive or "sh" in directive:
        return Interpreter("bash", [script])
    if "python" in directive:
        return Interpreter(_python(windows), [script])
    if "node" in directive:
        return Interpreter("node", [script])
    if "ruby" in directive:
        return Interpreter("ruby", [script])

    tokens = directive.split()
    if tokens:
        program = Path(tokens[0])
        if program.is_absolute() and program.exists():
            return Interpreter(tokens[0], [*tokens[1:], script])
    return None


def select_interpreter(
    script: str | Path,
    *,
    directive: str | None = None,
    platform: str = sys.platform,
) -> Interpreter | None:
    """根据扩展名 / shebang / 平台选择解释器，None 表示不支持

    参数:
        script: 脚本路径
        directive: 无扩展名脚本的 shebang 内容（已去掉 "#!"），无则为 None
        platform: 宿主平台标识，默认取 sys.platform
    """
    path = str(script)
    windows = is_windows(platform)
    ext = Path(path).suffix.lower()

    if ext:
        return _by_extension(path, ext, windows)

    if directive:
        found = _by_directive(path, directive.strip(), windows)
        if found is not None:
            return found

    if windows:
        return None
    return Interpreter(path, needs_exec_bit=True)


def read_shebang(path: str | Path) -> str | None:
    """读取首行 shebang，返回去掉 "#!" 的解释器指令；读取失败视为无 shebang"""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            first = f.readline()
    except OSError as e:
        logger.debug("读取 shebang 失败 %s: %s", path, e)
        return None
    if not first.startswith(SHEBANG):
        return None
    return first[len(SHEBANG):].strip()


class ScriptDispatcher:
    """安装脚本分派执行器"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        platform: str = sys.platform,
    ) -> None:
        self._executor = executor
        self.platform = platform

    @property
    def executor(self) -> CommandExecutor:
        return self._executor or get_executor()

    def resolve(self, script: str | Path) -> Interpreter | None:
        """解析脚本的执行方式，必要时为脚本加上可执行权限"""
        path = Path(script)
        directive = read_shebang(path) if not path.suffix else None
        interp = select_interpreter(path, directive=directive, platform=self.platform)
        if interp is None or not interp.needs_exec_bit:
            return interp

        try:
            r = self.executor.execute(["chmod", "+x", str(path)])
        except ExecutionError as e:
            r = CommandResult(1, stderr=str(e))
        if r.success:
            return interp
        logger.warning("chmod +x 失败，回退到 bash 执行: %s (%s)", path, r.stderr.strip())
        return Interpreter("bash", [str(path)])

    def run(self, script: str | Path, *, cwd: str | None = None) -> bool:
        """执行安装脚本并实时输出，不支持的脚本类型返回 False

        脚本非零退出时抛 ExecutionError。
        """
        interp = self.resolve(script)
        if interp is None:
            logger.warning("不支持的安装脚本类型，已跳过: %s", script)
            return False
        run_cmd(
            interp.argv, cwd=cwd, label="安装脚本",
            stream=True, executor=self.executor,
        )
        return True
