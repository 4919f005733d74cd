"""核心数据模型

Language 是注册表中的条目；SyncOutcome / BuildOutcome 是单次运行的
临时结果，不做持久化。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class Status(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class Language:
    """一个被跟踪的 tree-sitter 语法仓库"""

    name: str
    git: str
    hash: str | None = None  # 固定的 commit，None 表示默认分支最新提交

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> Language:
        rev = data.get("hash")
        return cls(name=name, git=str(data.get("git") or ""), hash=str(rev) if rev else None)

    def to_dict(self) -> dict[str, str]:
        """序列化为注册表条目；hash 未设置时省略"""
        entry = {"git": self.git}
        if self.hash:
            entry["hash"] = self.hash
        return entry


@dataclass
class SyncOutcome:
    """单个语法仓库的同步结果"""

    name: str
    status: Status
    workspace: Path
    reason: str = ""
    commit: str = ""  # 剥离 .git 之前记录的 HEAD

    @property
    def success(self) -> bool:
        return self.status is Status.SUCCESS

    @classmethod
    def ok(cls, name: str, workspace: Path, commit: str = "") -> SyncOutcome:
        return cls(name=name, status=Status.SUCCESS, workspace=workspace, commit=commit)

    @classmethod
    def failed(cls, name: str, workspace: Path, reason: str) -> SyncOutcome:
        return cls(name=name, status=Status.FAILED, workspace=workspace, reason=reason)


@dataclass
class BuildOutcome:
    """单个语法仓库的构建结果"""

    name: str
    status: Status
    output: Path
    reason: str = ""
    returncode: int | None = None

    @property
    def success(self) -> bool:
        return self.status is Status.SUCCESS


@dataclass
class GrammarResult:
    """一个语法仓库在本次运行中的完整结果"""

    sync: SyncOutcome
    build: BuildOutcome | None = None

    @property
    def name(self) -> str:
        return self.sync.name

    @property
    def success(self) -> bool:
        if not self.sync.success:
            return False
        return self.build is None or self.build.success

    @property
    def reason(self) -> str:
        if not self.sync.success:
            return self.sync.reason
        if self.build is not None and not self.build.success:
            return self.build.reason
        return ""


@dataclass
class FetchReport:
    """一次 fetch / add 调用的汇总"""

    results: list[GrammarResult] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)

    @property
    def failed(self) -> list[GrammarResult]:
        return [r for r in self.results if not r.success]

    @property
    def success(self) -> bool:
        return not self.failed and not self.not_found

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "synced": sum(1 for r in self.results if r.sync.success),
            "built": sum(1 for r in self.results if r.build is not None and r.build.success),
            "failed": len(self.failed),
            "not_found": len(self.not_found),
        }
