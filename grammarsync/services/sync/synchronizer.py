"""语法仓库同步器

单个语法仓库的同步流程：
  清理旧目录 → clone → （可选）固定到指定 commit → 记录 HEAD → 删除 .git

每一步失败都转换为 Failed 结果并跳过后续步骤，不向调用方抛异常。
clone 之后的步骤失败时丢弃整个工作目录，不留下半成品。
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from grammarsync.core.exceptions import ExecutionError, ValidationError
from grammarsync.core.models import Language, SyncOutcome
from grammarsync.services.registry import validate_language
from grammarsync.services.sync.git import GitClient

logger = logging.getLogger(__name__)

GIT_DIR = ".git"

# 单个 git 步骤可能出现的失败
_STEP_ERRORS = (ExecutionError, OSError, subprocess.TimeoutExpired)


def _remove_tree(path: Path) -> None:
    """删除目录（或误放在该位置的文件），路径不存在时不报错"""
    if path.is_symlink() or path.is_file():
        path.unlink()
        return
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass


class RepositorySynchronizer:
    """把一个语法仓库同步为不含版本控制元数据的干净目录"""

    def __init__(self, git: GitClient | None = None) -> None:
        self.git = git or GitClient()

    def synchronize(self, language: Language, workspace: Path) -> SyncOutcome:
        name = language.name

        # 注册表可被手工编辑，执行任何 git 命令之前再校验一次
        try:
            validate_language(language)
        except ValidationError as e:
            return self._fail(language, workspace, str(e), discard=False)

        try:
            _remove_tree(workspace)
        except OSError as e:
            return self._fail(language, workspace, f"清理旧目录失败: {e}", discard=False)

        try:
            workspace.parent.mkdir(parents=True, exist_ok=True)
            self.git.clone(language.git, workspace)
        except _STEP_ERRORS as e:
            return self._fail(language, workspace, f"克隆失败: {e}")

        try:
            if language.hash:
                self._pin(workspace, language.hash)
            commit = self.git.head(workspace)
        except _STEP_ERRORS as e:
            return self._fail(language, workspace, str(e))

        try:
            _remove_tree(workspace / GIT_DIR)
        except OSError as e:
            return self._fail(language, workspace, f"删除 {GIT_DIR} 失败: {e}")

        logger.info("同步完成: %s @ %s -> %s", name, commit[:12], workspace)
        return SyncOutcome.ok(name, workspace, commit=commit)

    def _pin(self, workspace: Path, revision: str) -> None:
        try:
            commit = self.git.resolve_revision(workspace, revision)
        except ExecutionError as e:
            raise ExecutionError(f"无法解析固定的 commit: {revision}", e.returncode) from e
        self.git.checkout_detached(workspace, commit)
        logger.debug("已固定到 %s (%s)", commit, revision)

    @staticmethod
    def _fail(language: Language, workspace: Path, reason: str, *, discard: bool = True) -> SyncOutcome:
        if discard:
            shutil.rmtree(workspace, ignore_errors=True)
        logger.error("同步失败 %s: %s", language.name, reason)
        return SyncOutcome.failed(language.name, workspace, reason)
