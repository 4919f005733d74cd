"""统一异常体系

所有业务异常继承 GrammarSyncError。CLI 层据此区分致命错误
（配置、参数校验）和只影响单个语法仓库的错误。
"""

from __future__ import annotations


class GrammarSyncError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(GrammarSyncError):
    """注册表或配置文件不可读、内容无效"""

    code = "CONFIG_ERROR"


class GrammarNotFoundError(GrammarSyncError):
    """指定的语法仓库未在注册表中登记"""

    code = "GRAMMAR_NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"语法仓库未注册: {name}")
        self.name = name


class ValidationError(GrammarSyncError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ExecutionError(GrammarSyncError):
    """外部命令以非零状态退出"""

    code = "EXECUTION_ERROR"

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
