"""测试共享 fixture — 假 git 执行器 + 本地真实 git 仓库"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from grammarsync.core.config import Config
from grammarsync.utils.shell import CommandResult

HEAD_SHA = "a" * 40
PINNED_SHA = "b" * 40

_OK = CommandResult(0, "", "")


class FakeGitExecutor:
    """模拟 git 命令行：clone 会创建带 .git 的目录，rev-parse 按表返回

    fail 映射子命令到返回值或异常，用于模拟各步骤失败。
    """

    def __init__(
        self,
        revisions: dict[str, str] | None = None,
        fail: dict[str, CommandResult | BaseException] | None = None,
    ) -> None:
        self.head = HEAD_SHA
        self.revisions = revisions or {}
        self.fail = fail or {}
        self.calls: list[list[str]] = []

    def execute(self, cmd, *, cwd=None, env=None, timeout=None):  # type: ignore[no-untyped-def]
        self.calls.append(list(cmd))
        sub = cmd[1]
        if sub in self.fail:
            failure = self.fail[sub]
            if isinstance(failure, BaseException):
                raise failure
            return failure
        if sub == "clone":
            dest = Path(cmd[-1])
            (dest / ".git").mkdir(parents=True)
            (dest / "grammar.js").write_text("module.exports = grammar({});\n", encoding="utf-8")
            return _OK
        if sub == "rev-parse":
            if cmd[2] == "HEAD":
                return CommandResult(0, self.head + "\n", "")
            rev = cmd[-1].removesuffix("^{commit}")
            if rev in self.revisions:
                return CommandResult(0, self.revisions[rev] + "\n", "")
            return CommandResult(1, "", "")
        if sub == "checkout":
            self.head = cmd[-1]
        return _OK

    def subcommands(self) -> list[str]:
        return [c[1] for c in self.calls]


@pytest.fixture()
def fake_git() -> FakeGitExecutor:
    return FakeGitExecutor(revisions={"abc123": PINNED_SHA})


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    return Config(
        languages_file=str(tmp_path / "languages.yml"),
        grammars_dir=str(tmp_path / "grammars"),
        wasm_dir=str(tmp_path / "wasm"),
    )


# =========================================================================
# 真实 git 仓库（需要 git 可执行文件）
# =========================================================================

def _git(cwd: Path, *args: str) -> str:
    r = subprocess.run(
        ["git", "-c", "user.name=test", "-c", "user.email=test@example.com",
         "-c", "commit.gpgsign=false", *args],
        cwd=str(cwd), capture_output=True, text=True, check=True,
    )
    return r.stdout.strip()


class LocalGrammarRepo:
    """带两次提交的本地语法仓库，first / second 为对应 commit sha"""

    def __init__(self, path: Path) -> None:
        self.path = path
        path.mkdir(parents=True)
        _git(path, "init", "--quiet")
        (path / "grammar.js").write_text("// v1\n", encoding="utf-8")
        _git(path, "add", "grammar.js")
        _git(path, "commit", "--quiet", "-m", "v1")
        self.first = _git(path, "rev-parse", "HEAD")
        (path / "grammar.js").write_text("// v2\n", encoding="utf-8")
        _git(path, "commit", "--quiet", "-am", "v2")
        self.second = _git(path, "rev-parse", "HEAD")

    @property
    def url(self) -> str:
        return str(self.path)


@pytest.fixture()
def grammar_repo(tmp_path: Path) -> LocalGrammarRepo:
    if shutil.which("git") is None:
        pytest.skip("需要 git 可执行文件")
    return LocalGrammarRepo(tmp_path / "upstream" / "tree-sitter-foo")
