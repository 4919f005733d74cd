"""Git 命令封装

只提供同步流程需要的能力：clone、解析 revision、分离 HEAD、读取 HEAD。
所有调用经由 CommandExecutor，失败抛 ExecutionError，
超时抛 subprocess.TimeoutExpired，git 不存在抛 OSError。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from grammarsync.utils.shell import CommandExecutor, LocalExecutor, run_cmd

logger = logging.getLogger(__name__)


class GitClient:
    """基于 git 命令行的客户端"""

    def __init__(self, executor: CommandExecutor | None = None, timeout: int = 0) -> None:
        self._executor = executor or LocalExecutor()
        self.timeout = timeout
        # 凭据缺失时直接失败，不在后台线程里等待交互输入
        self._env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

    def _git(self, args: list[str], *, cwd: Path | None = None, label: str) -> str:
        r = run_cmd(
            self._executor, ["git", *args],
            cwd=str(cwd) if cwd else None, env=self._env,
            timeout=self.timeout, label=label,
        )
        return r.stdout.strip()

    def clone(self, url: str, dest: Path) -> None:
        """完整克隆（含全部历史，固定 commit 时需要）"""
        logger.debug("克隆: %s -> %s", url, dest)
        self._git(["clone", "--quiet", "--", url, str(dest)], label="git clone")

    def resolve_revision(self, workspace: Path, revision: str) -> str:
        """把 revision（完整或缩写 sha、tag 等）解析为完整 commit sha"""
        return self._git(
            ["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"],
            cwd=workspace, label=f"解析 revision {revision}",
        )

    def checkout_detached(self, workspace: Path, commit: str) -> None:
        """以分离 HEAD 状态检出指定 commit"""
        self._git(
            ["checkout", "--quiet", "--detach", commit],
            cwd=workspace, label=f"检出 {commit[:12]}",
        )

    def head(self, workspace: Path) -> str:
        return self._git(["rev-parse", "HEAD"], cwd=workspace, label="读取 HEAD")
