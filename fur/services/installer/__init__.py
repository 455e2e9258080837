"""安装流水线

- dispatcher.py: 安装脚本解释器分派
- orchestrator.py: 递归依赖安装编排
"""

from fur.services.installer.dispatcher import Interpreter, ScriptDispatcher, select_interpreter
from fur.services.installer.orchestrator import Installer

__all__ = [
    "Installer",
    "Interpreter",
    "ScriptDispatcher",
    "select_interpreter",
]
