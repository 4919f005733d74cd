"""RepositorySynchronizer 单元测试（假 git 执行器）"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from conftest import HEAD_SHA, PINNED_SHA, FakeGitExecutor

from grammarsync.core.models import Language, Status
from grammarsync.services.sync.git import GitClient
from grammarsync.services.sync.synchronizer import RepositorySynchronizer
from grammarsync.utils.shell import CommandResult

URL = "https://example.test/foo.git"


def _sync(executor: FakeGitExecutor) -> RepositorySynchronizer:
    return RepositorySynchronizer(GitClient(executor))


class TestSynchronize:
    def test_unpinned_success_strips_git(self, fake_git: FakeGitExecutor, tmp_path: Path) -> None:
        ws = tmp_path / "grammars" / "tree-sitter-foo"
        outcome = _sync(fake_git).synchronize(Language("foo", URL), ws)

        assert outcome.status is Status.SUCCESS
        assert outcome.commit == HEAD_SHA
        assert outcome.workspace == ws
        assert (ws / "grammar.js").exists()
        assert not (ws / ".git").exists()
        assert fake_git.subcommands() == ["clone", "rev-parse"]

    def test_clone_gets_url_and_destination(self, fake_git: FakeGitExecutor, tmp_path: Path) -> None:
        ws = tmp_path / "ws"
        _sync(fake_git).synchronize(Language("foo", URL), ws)
        clone = fake_git.calls[0]
        assert clone[:2] == ["git", "clone"]
        assert clone[-2:] == [URL, str(ws)]
        assert "--depth" not in clone

    def test_pinned_checks_out_detached(self, fake_git: FakeGitExecutor, tmp_path: Path) -> None:
        outcome = _sync(fake_git).synchronize(Language("foo", URL, "abc123"), tmp_path / "ws")

        assert outcome.success
        assert outcome.commit == PINNED_SHA
        assert ["git", "checkout", "--quiet", "--detach", PINNED_SHA] in fake_git.calls

    def test_unresolvable_revision_fails_and_discards(self, fake_git: FakeGitExecutor, tmp_path: Path) -> None:
        ws = tmp_path / "ws"
        outcome = _sync(fake_git).synchronize(Language("foo", URL, "deadbeef"), ws)

        assert outcome.status is Status.FAILED
        assert "deadbeef" in outcome.reason
        assert not ws.exists()
        assert "checkout" not in fake_git.subcommands()

    def test_checkout_failure_fails(self, tmp_path: Path) -> None:
        ex = FakeGitExecutor(
            revisions={"abc123": PINNED_SHA},
            fail={"checkout": CommandResult(1, "", "error: unable to checkout")},
        )
        ws = tmp_path / "ws"
        outcome = _sync(ex).synchronize(Language("foo", URL, "abc123"), ws)
        assert not outcome.success
        assert "unable to checkout" in outcome.reason
        assert not ws.exists()

    def test_clone_failure_leaves_no_directory(self, tmp_path: Path) -> None:
        ex = FakeGitExecutor(fail={"clone": CommandResult(128, "", "fatal: repository not found")})
        ws = tmp_path / "ws"
        outcome = _sync(ex).synchronize(Language("foo", URL), ws)

        assert not outcome.success
        assert outcome.reason.startswith("克隆失败")
        assert "repository not found" in outcome.reason
        assert not ws.exists()

    @pytest.mark.parametrize("revision", ["--output=x;$(id)", "--all", "-q"])
    def test_unsafe_revision_rejected_before_git(
        self, fake_git: FakeGitExecutor, tmp_path: Path, revision: str,
    ) -> None:
        ws = tmp_path / "ws"
        ws.mkdir(parents=True)
        (ws / "keep.txt").write_text("old", encoding="utf-8")

        outcome = _sync(fake_git).synchronize(Language("foo", URL, revision), ws)

        assert outcome.status is Status.FAILED
        assert "hash" in outcome.reason
        assert fake_git.calls == []
        assert (ws / "keep.txt").exists()

    @pytest.mark.parametrize("lang", [
        Language("foo", ""),
        Language("foo", "--upload-pack=evil"),
        Language("../escape", URL),
    ])
    def test_invalid_entry_rejected_before_git(
        self, fake_git: FakeGitExecutor, tmp_path: Path, lang: Language,
    ) -> None:
        outcome = _sync(fake_git).synchronize(lang, tmp_path / "ws")
        assert not outcome.success
        assert fake_git.calls == []

    def test_clone_timeout_fails(self, tmp_path: Path) -> None:
        ex = FakeGitExecutor(fail={"clone": subprocess.TimeoutExpired(["git", "clone"], 5)})
        outcome = _sync(ex).synchronize(Language("foo", URL), tmp_path / "ws")
        assert not outcome.success
        assert "timed out" in outcome.reason

    def test_missing_git_binary_fails(self, tmp_path: Path) -> None:
        ex = FakeGitExecutor(fail={"clone": FileNotFoundError("git")})
        outcome = _sync(ex).synchronize(Language("foo", URL), tmp_path / "ws")
        assert not outcome.success

    def test_stale_copy_replaced(self, fake_git: FakeGitExecutor, tmp_path: Path) -> None:
        ws = tmp_path / "ws"
        (ws / "old").mkdir(parents=True)
        (ws / "old" / "stale.txt").write_text("stale", encoding="utf-8")

        assert _sync(fake_git).synchronize(Language("foo", URL), ws).success
        assert not (ws / "old").exists()
        assert (ws / "grammar.js").exists()

    def test_stale_file_at_workspace_path_replaced(self, fake_git: FakeGitExecutor, tmp_path: Path) -> None:
        ws = tmp_path / "ws"
        ws.write_text("not a directory", encoding="utf-8")
        assert _sync(fake_git).synchronize(Language("foo", URL), ws).success
        assert ws.is_dir()

    def test_clear_failure_skips_clone(
        self, fake_git: FakeGitExecutor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ws = tmp_path / "ws"
        ws.mkdir()

        def deny(path, *args, **kwargs):  # type: ignore[no-untyped-def]
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr("grammarsync.services.sync.synchronizer.shutil.rmtree", deny)
        outcome = _sync(fake_git).synchronize(Language("foo", URL), ws)

        assert not outcome.success
        assert outcome.reason.startswith("清理旧目录失败")
        assert fake_git.calls == []

    def test_strip_failure_is_not_success(
        self, fake_git: FakeGitExecutor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        import shutil as real_shutil

        real_rmtree = real_shutil.rmtree

        def rmtree(path, *args, **kwargs):  # type: ignore[no-untyped-def]
            if Path(path).name == ".git":
                raise PermissionError(13, "Permission denied", str(path))
            return real_rmtree(path, *args, **kwargs)

        monkeypatch.setattr("grammarsync.services.sync.synchronizer.shutil.rmtree", rmtree)
        outcome = _sync(fake_git).synchronize(Language("foo", URL), tmp_path / "ws")

        assert outcome.status is Status.FAILED
        assert ".git" in outcome.reason


class TestGitClient:
    def test_disables_terminal_prompt(self, tmp_path: Path) -> None:
        seen: list[dict] = []

        class Capture:
            def execute(self, cmd, *, cwd=None, env=None, timeout=None):  # type: ignore[no-untyped-def]
                seen.append({"env": env, "timeout": timeout})
                return CommandResult(0, "", "")

        GitClient(Capture(), timeout=30).clone(URL, tmp_path / "ws")
        assert seen[0]["env"]["GIT_TERMINAL_PROMPT"] == "0"
        assert seen[0]["timeout"] == 30

    def test_resolve_revision_strips_output(self, fake_git: FakeGitExecutor, tmp_path: Path) -> None:
        assert GitClient(fake_git).resolve_revision(tmp_path, "abc123") == PINNED_SHA
