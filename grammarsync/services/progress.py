"""进度观察者

编排器在每个阶段的开始、成功、失败时回调观察者，
观察者只负责展示，替换或省略都不影响同步与构建逻辑。
回调来自多个工作线程，实现需保证线程安全。
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

import click

logger = logging.getLogger(__name__)

PHASE_SYNC = "sync"
PHASE_BUILD = "build"

_PHASE_LABELS = {PHASE_SYNC: "同步", PHASE_BUILD: "构建"}


class ProgressObserver(Protocol):
    def started(self, name: str, phase: str) -> None: ...

    def succeeded(self, name: str, phase: str, detail: str = "") -> None: ...

    def failed(self, name: str, phase: str, reason: str) -> None: ...


class NullProgress:
    """不输出任何进度"""

    def started(self, name: str, phase: str) -> None:
        pass

    def succeeded(self, name: str, phase: str, detail: str = "") -> None:
        pass

    def failed(self, name: str, phase: str, reason: str) -> None:
        pass


class LoggingProgress:
    """把进度写入日志（默认）"""

    def started(self, name: str, phase: str) -> None:
        logger.info("开始%s: %s", _PHASE_LABELS.get(phase, phase), name)

    def succeeded(self, name: str, phase: str, detail: str = "") -> None:
        logger.info("%s成功: %s %s", _PHASE_LABELS.get(phase, phase), name, detail)

    def failed(self, name: str, phase: str, reason: str) -> None:
        logger.warning("%s失败: %s: %s", _PHASE_LABELS.get(phase, phase), name, reason)


class EchoProgress:
    """每个事件输出一行状态，失败写到 stderr"""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self._lock = threading.Lock()

    def started(self, name: str, phase: str) -> None:
        if not self.verbose:
            return
        with self._lock:
            click.echo(f"[ .. ] {_PHASE_LABELS.get(phase, phase)} {name}")

    def succeeded(self, name: str, phase: str, detail: str = "") -> None:
        suffix = f"  {detail}" if detail else ""
        with self._lock:
            click.echo(f"[ OK ] {_PHASE_LABELS.get(phase, phase)} {name}{suffix}")

    def failed(self, name: str, phase: str, reason: str) -> None:
        with self._lock:
            click.echo(f"[FAIL] {_PHASE_LABELS.get(phase, phase)} {name}: {reason}", err=True)
