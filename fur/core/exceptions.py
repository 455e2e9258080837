"""统一异常体系

所有业务异常继承 FurError，CLI 层据此输出友好提示并返回非零退出码。
"""

from __future__ import annotations


class FurError(Exception):
    """fur 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(FurError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(FurError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class RegistryError(FurError):
    """包仓库不可达或返回异常响应"""

    code = "REGISTRY_ERROR"


class PackageNotFoundError(FurError):
    """包或指定版本在仓库中不存在"""

    code = "PACKAGE_NOT_FOUND"


class ExecutionError(FurError):
    """外部命令执行失败（git、安装脚本等）"""

    code = "EXECUTION_ERROR"

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class DependencyCycleError(FurError):
    """依赖图存在环"""

    code = "DEPENDENCY_CYCLE"

    def __init__(self, chain: list[str]) -> None:
        super().__init__(f"检测到循环依赖: {' -> '.join(chain)}")
        self.chain = chain
