"""Shell 命令执行工具 — 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，git 和构建工具都经由它调用，
测试时注入假实现即可，无需 patch subprocess。
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Protocol

from grammarsync.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)

# 错误信息里保留的 stderr 长度
STDERR_TAIL = 500


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def stderr_tail(self) -> str:
        return self.stderr.strip()[-STDERR_TAIL:]


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议

    实现需保证线程安全：同一个执行器会被多个拉取线程并发使用。
    超时抛 subprocess.TimeoutExpired，无法启动进程抛 OSError。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        r = subprocess.run(
            cmd, capture_output=True, text=True,
            cwd=cwd, env=env, check=False, timeout=timeout or None,
        )
        return CommandResult(returncode=r.returncode, stdout=r.stdout, stderr=r.stderr)


# =========================================================================
# 便捷函数
# =========================================================================

def run_cmd(
    executor: CommandExecutor,
    cmd: list[str],
    *,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
    timeout: int | None = None,
    label: str = "cmd",
) -> CommandResult:
    """执行命令，非零退出抛 ExecutionError

    Args:
        executor: 命令执行器
        cmd: 参数列表（不经过 shell）
        cwd: 工作目录
        env: 环境变量（不传则继承当前进程）
        timeout: 超时秒数，0 或 None 表示不限
        label: 日志与错误信息中的标签
    """
    logger.debug("  %s: %s (cwd=%s)", label, " ".join(cmd), cwd or ".")
    r = executor.execute(cmd, cwd=cwd, env=env, timeout=timeout)
    if not r.success:
        raise ExecutionError(
            f"{label}失败 (rc={r.returncode}): {r.stderr_tail()}",
            returncode=r.returncode,
        )
    return r
