"""WebAssembly 构建执行器

在同步好的工作目录中执行 `<tool> build --wasm -o <output>`，
只依据进程退出码判断成败，不检查产物内容。
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path

from grammarsync.core.models import BuildOutcome, Language, Status
from grammarsync.utils.shell import CommandExecutor, LocalExecutor

logger = logging.getLogger(__name__)


class WasmBuilder:
    """调用 tree-sitter CLI 构建 WebAssembly 产物"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        tool: str = "tree-sitter",
        timeout: int = 0,
    ) -> None:
        self._executor = executor or LocalExecutor()
        self.tool = tool
        self.timeout = timeout

    def command(self, output: Path) -> list[str]:
        return [self.tool, "build", "--wasm", "-o", str(output)]

    def build(self, language: Language, workspace: Path, output: Path) -> BuildOutcome:
        name = language.name
        cmd = self.command(output)
        start = time.monotonic()
        logger.info("构建: %s -> %s", name, output)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            r = self._executor.execute(cmd, cwd=str(workspace), timeout=self.timeout)
        except subprocess.TimeoutExpired:
            return self._fail(name, output, f"构建超时（{self.timeout}秒）")
        except OSError as e:
            return self._fail(name, output, f"无法执行 {self.tool}: {e}")

        duration = time.monotonic() - start
        if not r.success:
            reason = f"{self.tool} 退出码: {r.returncode}"
            if r.stderr_tail():
                reason = f"{reason}\n{r.stderr_tail()}"
            return self._fail(name, output, reason, returncode=r.returncode)

        logger.info("构建完成: %s (%.1fs)", name, duration)
        return BuildOutcome(name=name, status=Status.SUCCESS, output=output, returncode=0)

    @staticmethod
    def _fail(name: str, output: Path, reason: str, returncode: int | None = None) -> BuildOutcome:
        logger.error("构建失败 %s: %s", name, reason)
        return BuildOutcome(
            name=name, status=Status.FAILED, output=output,
            reason=reason, returncode=returncode,
        )
